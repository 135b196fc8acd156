"""Parser for explicit rule strings and YAML rulesets."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from structfilter.exceptions import FilterConfigError

from .models import Rule
from .tags import parse_bool


class RuleParseError(FilterConfigError):
    """Raised when a rule cannot be parsed."""

    pass


def _parse_use_zero(value: Any) -> bool:
    """Parse a use_zero flag given as a bool or a string."""
    if isinstance(value, bool):
        return value
    try:
        return parse_bool(str(value).strip())
    except FilterConfigError as e:
        raise RuleParseError(str(e)) from e


def _parse_single_parameter(part: str, options: dict[str, Any]) -> None:
    """Parse a single key=value parameter into options."""
    if "=" not in part:
        raise RuleParseError(
            f"Invalid parameter format '{part}': expected 'key=value'"
        )

    key, value = part.split("=", 1)
    key = key.strip()
    value = value.strip()

    if key == "table":
        options["table"] = value
    elif key in ("use_zero", "useZero"):
        options["use_zero"] = _parse_use_zero(value)
    else:
        raise RuleParseError(f"Unknown parameter '{key}'. Valid parameters: table, use_zero")


def _parse_parameters(params_str: str) -> dict[str, Any]:
    """Parse a comma-separated parameter string."""
    options: dict[str, Any] = {}
    for part in params_str.split(","):
        part = part.strip()
        if part:
            _parse_single_parameter(part, options)
    return options


def parse_rule(rule_string: str) -> Rule:
    """
    Parse a rule string into a Rule object.

    Format: <name>[:<operator>[:k=v,...]]

    Examples:
        name:rlike
        age:>=
        name:=:table=users
        deleted:=:use_zero=true

    Args:
        rule_string: The rule string to parse

    Returns:
        A Rule object

    Raises:
        RuleParseError: If the rule string is invalid
    """
    rule_string = rule_string.strip()
    if not rule_string:
        raise RuleParseError("Empty rule string")

    parts = rule_string.split(":", 2)
    name = parts[0].strip()
    if not name:
        raise RuleParseError(f"Missing field name in rule '{rule_string}'")

    operator = parts[1].strip() if len(parts) > 1 else ""
    options = _parse_parameters(parts[2]) if len(parts) > 2 else {}

    return Rule(name=name, operator=operator, **options)


def parse_rules(rules_string: str) -> list[Rule]:
    """
    Parse multiple rules from a semicolon-separated string.

    Args:
        rules_string: Semicolon-separated rule strings

    Returns:
        List of Rule objects

    Raises:
        RuleParseError: If any rule string is invalid
    """
    rules: list[Rule] = []
    for part in rules_string.split(";"):
        part = part.strip()
        if not part:
            continue
        try:
            rules.append(parse_rule(part))
        except RuleParseError as e:
            raise RuleParseError(f"Error parsing rule '{part}': {e}") from e
    return rules


def _validate_yaml_rule_fields(rule_dict: Any) -> None:
    """Validate required fields in a YAML rule."""
    if not isinstance(rule_dict, dict):
        raise RuleParseError(f"Rule must be a mapping, got {type(rule_dict).__name__}")
    if not rule_dict.get("name"):
        raise RuleParseError("Rule missing required 'name' field")


def _parse_yaml_rule(rule_dict: dict[str, Any]) -> Rule:
    """Parse a single rule from a YAML dictionary."""
    _validate_yaml_rule_fields(rule_dict)

    return Rule(
        name=str(rule_dict["name"]),
        operator=str(rule_dict.get("opt", "") or ""),
        table=str(rule_dict.get("table", "") or ""),
        use_zero=_parse_use_zero(rule_dict.get("use_zero", rule_dict.get("useZero", False))),
    )


def _get_extended_rules(
    rulesets: dict[str, Any],
    ruleset: dict[str, Any],
    resolved: set[str],
) -> list[Rule]:
    """Get rules from extended rulesets."""
    if "extends" not in ruleset:
        return []
    extended_name = ruleset["extends"]
    return _resolve_extends(rulesets, extended_name, resolved)


def _parse_ruleset_rules(ruleset: dict[str, Any]) -> list[Rule]:
    """Parse rules from a ruleset."""
    if "rules" not in ruleset:
        return []
    return [_parse_yaml_rule(rule_dict) for rule_dict in ruleset["rules"]]


def _resolve_extends(
    rulesets: dict[str, Any],
    ruleset_name: str,
    resolved: set[str],
) -> list[Rule]:
    """Recursively resolve ruleset inheritance."""
    if ruleset_name in resolved:
        raise RuleParseError(f"Circular dependency detected in ruleset '{ruleset_name}'")

    if ruleset_name not in rulesets:
        raise RuleParseError(f"Ruleset '{ruleset_name}' not found (referenced by 'extends')")

    resolved.add(ruleset_name)
    ruleset = rulesets[ruleset_name] or {}

    # Rules from the extended ruleset come first
    extended_rules = _get_extended_rules(rulesets, ruleset, resolved)
    own_rules = _parse_ruleset_rules(ruleset)

    return extended_rules + own_rules


def _load_yaml_file(file_path: str | Path) -> Any:
    """Load a YAML file."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {file_path}")

    with open(path, "r") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleParseError(f"Invalid YAML: {e}")


def _validate_rulesets_structure(data: Any, ruleset_name: str) -> dict[str, Any]:
    """Validate and extract rulesets from YAML data."""
    if not isinstance(data, dict):
        raise RuleParseError("YAML file must contain a dictionary")

    if "rulesets" not in data:
        raise RuleParseError("YAML file missing 'rulesets' key")

    rulesets = data["rulesets"]
    if not isinstance(rulesets, dict):
        raise RuleParseError("'rulesets' must be a dictionary")

    if ruleset_name not in rulesets:
        available = ", ".join(rulesets.keys())
        raise RuleParseError(
            f"Ruleset '{ruleset_name}' not found. Available rulesets: {available}"
        )

    return rulesets


def parse_yaml_rules_file(file_path: str | Path, ruleset_name: str = "default") -> list[Rule]:
    """
    Parse rules from a YAML file with ruleset support.

    Example file::

        rulesets:
          default:
            rules:
              - name: name
                opt: rlike
          admin:
            extends: default
            rules:
              - name: role
                opt: "="
                table: users

    Args:
        file_path: Path to the YAML rules file
        ruleset_name: Name of the ruleset to load (default: "default")

    Returns:
        List of Rule objects from the specified ruleset

    Raises:
        RuleParseError: If the YAML is invalid or rules are malformed
        FileNotFoundError: If the file doesn't exist
    """
    data = _load_yaml_file(file_path)
    rulesets = _validate_rulesets_structure(data, ruleset_name)

    resolved: set[str] = set()
    return _resolve_extends(rulesets, ruleset_name, resolved)
