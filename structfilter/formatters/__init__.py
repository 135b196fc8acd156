"""Output formatters for rendered conditions."""

from structfilter.formatters.json import format_as_json

__all__ = ["format_as_json"]
