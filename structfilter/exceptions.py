"""Exceptions raised while building filter conditions.

Every error here is a programmer or schema mistake discovered when a filter is
first applied. None of them are recovered from inside the package.
"""


class FilterError(Exception):
    """Base exception for all structfilter errors."""

    pass


class FilterConfigError(FilterError, ValueError):
    """Raised when a filter annotation or rule is malformed."""

    pass


class DateRangeError(FilterConfigError):
    """Raised when a date_range rule is not bound to exactly two dates."""

    pass


class UnknownOperatorError(FilterConfigError):
    """Raised in strict mode when a rule names an operator that doesn't exist."""

    pass


class FilterTypeError(FilterError, TypeError):
    """Raised when an operator is bound to a value of the wrong type."""

    pass


class QueryBuildError(FilterError):
    """Raised when a query's placeholders and parameters don't line up."""

    pass
