"""Rules system for declarative query filters."""

from .models import Condition, Operator, Rule, is_empty_sequence, is_zero
from .parser import RuleParseError, parse_rule, parse_rules, parse_yaml_rules_file
from .tags import extract_rules, parse_annotation

__all__ = [
    "Condition",
    "Operator",
    "Rule",
    "RuleParseError",
    "extract_rules",
    "is_empty_sequence",
    "is_zero",
    "parse_annotation",
    "parse_rule",
    "parse_rules",
    "parse_yaml_rules_file",
]
