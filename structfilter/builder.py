"""Condition assembly and the public filter entry points.

Each ``build_*`` function returns a transform that takes a query and returns
the query with one WHERE condition attached, or the query untouched when no
rule survives. A query is anything with a ``where(clause, *params)`` method
returning a query, such as :class:`structfilter.query.SelectQuery`.
"""

import logging
from typing import Any, Callable, Iterable, Optional, Protocol, TypeVar

from structfilter.fields import field_values, is_filter_source
from structfilter.render import render_rule
from structfilter.rules.models import Condition, Rule
from structfilter.rules.tags import extract_rules

logger = logging.getLogger(__name__)

AND = " AND "
OR = " OR "


class Filterable(Protocol):
    """A query object that accepts a parameterized WHERE condition."""

    def where(self, clause: str, *params: Any) -> Any: ...


Q = TypeVar("Q", bound=Filterable)
Transform = Callable[[Q], Q]


def assemble(
    bound_rules: Iterable[tuple[Rule, Any]], joiner: str = AND
) -> Optional[Condition]:
    """Render bound rules and join the fragments.

    Args:
        bound_rules: Pairs of (rule, value) that survived the skip policy
        joiner: String placed between fragments

    Returns:
        The joined Condition, or None if nothing was rendered
    """
    fragments: list[str] = []
    params: list[Any] = []

    for rule, value in bound_rules:
        fragment, fragment_params = render_rule(rule, value)
        if not fragment:
            continue
        fragments.append(fragment)
        params.extend(fragment_params)

    if not fragments:
        return None
    return Condition(clause=joiner.join(fragments), params=params)


def _active_struct_rules(dest: Any) -> Iterable[tuple[Rule, Any]]:
    """Yield annotated rules whose values are neither zero nor empty."""
    rules, values = extract_rules(dest)
    for rule in rules:
        value = values[rule.name]
        if rule.skips(value):
            logger.debug("Skipping '%s': zero or empty value", rule.name)
            continue
        yield rule, value


def _active_explicit_rules(rules: list[Rule], dest: Any) -> Iterable[tuple[Rule, Any]]:
    """Yield explicit rules matched to fields whose values are not zero."""
    values = field_values(dest)
    for rule in rules:
        if rule.name not in values:
            logger.debug("Skipping '%s': no matching field", rule.name)
            continue
        value = values[rule.name]
        # Empty sequences are still rendered in explicit mode
        if rule.skips(value, empty_sequences=False):
            logger.debug("Skipping '%s': zero value", rule.name)
            continue
        yield rule, value


def filter_condition(dest: Any) -> Optional[Condition]:
    """Build the conjunctive condition described by a model's filter annotations.

    Raises:
        FilterConfigError: If an annotation or a date_range value is malformed
        FilterTypeError: If 'like' is bound to a non-string field
    """
    return assemble(_active_struct_rules(dest), AND)


def search_condition(rules: list[Rule], dest: Any) -> Optional[Condition]:
    """Build the conjunctive condition for explicit rules valued from dest's fields."""
    if not rules or not is_filter_source(dest):
        return None
    return assemble(_active_explicit_rules(rules, dest), AND)


def multi_search_condition(rules: list[Rule], keyword: str) -> Optional[Condition]:
    """Build the disjunctive condition matching keyword against every rule."""
    keyword = keyword.strip()
    if not keyword or not rules:
        return None
    return assemble(((rule, keyword) for rule in rules), OR)


def _apply(query: Q, condition: Optional[Condition]) -> Q:
    """Attach a condition to a query, leaving it untouched when there is none."""
    if condition is None:
        return query
    logger.info("Attaching condition with %d parameter(s): %s", len(condition.params), condition.clause)
    return query.where(condition.clause, *condition.params)


def build_from_struct(dest: Any) -> Transform:
    """Filter by the annotated fields of dest, joined with AND.

    Fields are annotated through pydantic ``json_schema_extra`` or dataclass
    ``metadata`` under the ``filter`` key (see :mod:`structfilter.rules.tags`).
    Fields whose value is zero or an empty sequence are left out unless the
    annotation sets ``use_zero:true``.

    Example:
        >>> class UserFilter(BaseModel):
        ...     name: str = Field("", json_schema_extra={"filter": "opt:rlike"})
        ...     age: int = Field(0, json_schema_extra={"filter": "opt:="})
        >>> query.scopes(build_from_struct(UserFilter(name="John", age=20)))
    """

    def transform(query: Q) -> Q:
        return _apply(query, filter_condition(dest))

    return transform


def build_from_rules(rules: list[Rule], dest: Any) -> Transform:
    """Filter by explicit rules valued from the matching fields of dest, joined with AND.

    Rules whose name matches no field are ignored. Only zero values are skipped;
    empty sequences are rendered.
    """

    def transform(query: Q) -> Q:
        return _apply(query, search_condition(rules, dest))

    return transform


def build_multi_search(rules: list[Rule], keyword: str) -> Transform:
    """Match one keyword against every rule, joined with OR.

    A blank keyword or an empty rule list leaves the query untouched.
    """

    def transform(query: Q) -> Q:
        return _apply(query, multi_search_condition(rules, keyword))

    return transform
