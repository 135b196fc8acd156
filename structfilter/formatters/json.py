"""JSON formatter for rendered conditions."""

import json
from typing import Any, Optional

from structfilter.rules.models import Condition, Rule


def _rule_to_dict(rule: Rule) -> dict[str, Any]:
    """Convert a Rule to a dictionary."""
    operator = rule.operator if isinstance(rule.operator, str) else rule.operator.value
    return {
        "name": rule.name,
        "operator": operator,
        "table": rule.table,
        "use_zero": rule.use_zero,
    }


def format_as_json(
    condition: Optional[Condition],
    rules: list[Rule],
    *,
    statement: Optional[tuple[str, list[Any]]] = None,
    pretty: bool = True,
) -> str:
    """Format a rendered condition as JSON.

    Args:
        condition: The rendered condition, or None if no rule produced a predicate
        rules: The rules the condition was built from
        statement: Optional (sql, params) of the statement the condition was attached to
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data: dict[str, Any] = {
        "clause": condition.clause if condition else None,
        "params": condition.params if condition else [],
        "rules": [_rule_to_dict(rule) for rule in rules],
    }
    if statement is not None:
        sql, params = statement
        data["sql"] = {"statement": sql, "params": params}

    if pretty:
        return json.dumps(data, indent=2, default=str)
    return json.dumps(data, default=str)
