"""Tag-driven rule extraction.

Annotation format: ``opt:<operator>;table:<name>;use_zero:<bool>``

Any subset of keys in any order. ``useZero`` is accepted as a synonym for
``use_zero``. An empty annotation or ``-`` marks a field that is not filtered.
"""

import logging
from typing import Any, Optional

from structfilter.exceptions import FilterConfigError
from structfilter.fields import describe_fields

from .models import Rule

logger = logging.getLogger(__name__)

EXCLUDE_MARKER = "-"

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str) -> bool:
    """Parse a boolean flag, rejecting anything that isn't clearly true or false."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise FilterConfigError(f"Invalid boolean value '{value}'")


def _parse_pair(pair: str) -> tuple[str, str]:
    """Split a single key:value pair."""
    if ":" not in pair:
        raise FilterConfigError(f"Invalid annotation pair '{pair}': expected 'key:value'")
    key, value = pair.split(":", 1)
    return key.strip(), value.strip()


def parse_annotation(name: str, annotation: str) -> Optional[Rule]:
    """
    Parse a field annotation into a Rule.

    Args:
        name: Serialization name of the field, used as the rule name
        annotation: Raw annotation string

    Returns:
        A Rule, or None if the annotation is empty or the exclusion marker

    Raises:
        FilterConfigError: If a pair or boolean flag is malformed
    """
    annotation = annotation.strip(" ;,")
    if not annotation or annotation == EXCLUDE_MARKER:
        return None

    operator = ""
    table = ""
    use_zero = False
    for pair in annotation.split(";"):
        if not pair.strip():
            continue
        key, value = _parse_pair(pair)
        if key == "opt":
            operator = value
        elif key == "table":
            table = value
        elif key in ("use_zero", "useZero"):
            try:
                use_zero = parse_bool(value)
            except FilterConfigError as e:
                raise FilterConfigError(f"Field '{name}': {e}") from e
        else:
            logger.debug("Ignoring unknown annotation key '%s' on field '%s'", key, name)

    return Rule(name=name, operator=operator, table=table, use_zero=use_zero)


def extract_rules(dest: Any) -> tuple[list[Rule], dict[str, Any]]:
    """Extract rules and their bound values from an annotated filter source.

    Args:
        dest: A pydantic model instance or a dataclass instance

    Returns:
        Tuple of (rules, values) where rules follow field declaration order and
        values maps each rule name to the field's current value. Both are empty
        if dest is not a filter source.

    Raises:
        FilterConfigError: If an annotation is malformed
    """
    rules: list[Rule] = []
    values: dict[str, Any] = {}

    for descriptor in describe_fields(dest):
        rule = parse_annotation(descriptor.serialization_name, descriptor.annotation)
        if rule is None:
            continue
        rules.append(rule)
        values[rule.name] = descriptor.value

    logger.debug("Extracted %d rule(s) from %s", len(rules), type(dest).__name__)
    return rules, values
