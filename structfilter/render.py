"""Rendering of single rules into WHERE fragments."""

import logging
from typing import Any, Callable

from structfilter.config import get_settings
from structfilter.exceptions import DateRangeError, FilterTypeError, UnknownOperatorError
from structfilter.rules.models import Operator, Rule

logger = logging.getLogger(__name__)

Rendered = tuple[str, list[Any]]


def _render_comparison(rule: Rule, value: Any) -> Rendered:
    """Render a plain binary comparison with the raw value."""
    return f"{rule.column} {Operator(rule.operator).value} ?", [value]


def _render_like(rule: Rule, value: Any) -> Rendered:
    """Render a substring match, wrapping the value in wildcards."""
    if not isinstance(value, str):
        raise FilterTypeError(
            f"'like' on '{rule.column}' requires a string value, got {type(value).__name__}"
        )
    return f"{rule.column} like ?", [f"%{value}%"]


def _render_in(rule: Rule, value: Any) -> Rendered:
    """Render set membership; the executor expands the sequence."""
    return f"{rule.column} in (?)", [value]


def _render_date_range(rule: Rule, value: Any) -> Rendered:
    """Render an inclusive day range from a pair of date strings."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise DateRangeError(
            f"date_range rule '{rule.column}' requires two values, got {value!r}"
        )
    start, end = value
    if not isinstance(start, str) or not isinstance(end, str):
        raise DateRangeError(
            f"date_range rule '{rule.column}' requires date strings, got {value!r}"
        )
    settings = get_settings()
    return (
        f"{rule.column} between ? and ?",
        [start + settings.date_range_start_suffix, end + settings.date_range_end_suffix],
    )


_HANDLERS: dict[Operator, Callable[[Rule, Any], Rendered]] = {
    Operator.EQ: _render_comparison,
    Operator.LIKE: _render_like,
    Operator.RLIKE: _render_comparison,
    Operator.GT: _render_comparison,
    Operator.LT: _render_comparison,
    Operator.GTE: _render_comparison,
    Operator.LTE: _render_comparison,
    Operator.IN: _render_in,
    Operator.DATE_RANGE: _render_date_range,
}


def _handle_unknown_operator(rule: Rule) -> Rendered:
    """Skip or reject a rule whose operator isn't supported."""
    valid_ops = ", ".join(op.value for op in Operator)
    if get_settings().strict_operators:
        raise UnknownOperatorError(
            f"Invalid operator '{rule.operator}' on '{rule.column}'. Valid operators: {valid_ops}"
        )
    logger.warning("Skipping rule '%s': unknown operator '%s'", rule.column, rule.operator)
    return "", []


def render_rule(rule: Rule, value: Any) -> Rendered:
    """Render a rule bound to a value.

    Args:
        rule: The rule to render
        value: The value bound to the rule

    Returns:
        Tuple of (fragment, params). The fragment is empty and params is empty
        when the rule's operator is unknown and strict mode is off.

    Raises:
        FilterTypeError: If 'like' is bound to a non-string value
        DateRangeError: If 'date_range' is not bound to exactly two date strings
        UnknownOperatorError: If the operator is unknown and strict mode is on
    """
    if not rule.is_known_operator:
        return _handle_unknown_operator(rule)
    return _HANDLERS[Operator(rule.operator)](rule, value)
