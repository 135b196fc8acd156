"""Declarative WHERE conditions from annotated models and explicit rules."""

from structfilter.builder import (
    build_from_rules,
    build_from_struct,
    build_multi_search,
    filter_condition,
    multi_search_condition,
    search_condition,
)
from structfilter.exceptions import (
    DateRangeError,
    FilterConfigError,
    FilterError,
    FilterTypeError,
    QueryBuildError,
    UnknownOperatorError,
)
from structfilter.query import SelectQuery
from structfilter.rules import Condition, Operator, Rule, RuleParseError

__all__ = [
    "Condition",
    "DateRangeError",
    "FilterConfigError",
    "FilterError",
    "FilterTypeError",
    "Operator",
    "QueryBuildError",
    "Rule",
    "RuleParseError",
    "SelectQuery",
    "UnknownOperatorError",
    "build_from_rules",
    "build_from_struct",
    "build_multi_search",
    "filter_condition",
    "multi_search_condition",
    "search_condition",
]
