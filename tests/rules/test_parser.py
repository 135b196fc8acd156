"""Tests for rule parser."""

import pytest

from structfilter.rules import (
    Operator,
    Rule,
    RuleParseError,
    parse_rule,
    parse_rules,
    parse_yaml_rules_file,
)


class TestParseRule:
    """Tests for parse_rule function."""

    def test_parse_name_and_operator(self):
        assert parse_rule("name:rlike") == Rule(name="name", operator=Operator.RLIKE)

    def test_parse_name_only(self):
        """A bare name compares with equality."""
        assert parse_rule("age") == Rule(name="age")

    def test_parse_with_parameters(self):
        rule = parse_rule("name:like:table=users,use_zero=true")
        assert rule == Rule(name="name", operator=Operator.LIKE, table="users", use_zero=True)

    def test_parse_empty_operator_with_parameters(self):
        rule = parse_rule("name::table=users")
        assert rule.operator is Operator.EQ
        assert rule.column == "users.name"

    def test_parse_rule_with_whitespace(self):
        rule = parse_rule("  age : >= : useZero = 1 ")
        assert rule == Rule(name="age", operator=Operator.GTE, use_zero=True)

    def test_parse_empty_rule(self):
        with pytest.raises(RuleParseError, match="Empty rule string"):
            parse_rule("  ")

    def test_parse_missing_name(self):
        with pytest.raises(RuleParseError, match="Missing field name"):
            parse_rule(":=")

    def test_parse_invalid_parameter_format(self):
        with pytest.raises(RuleParseError, match="Invalid parameter format"):
            parse_rule("name:=:users")

    def test_parse_unknown_parameter(self):
        with pytest.raises(RuleParseError, match="Unknown parameter 'schema'"):
            parse_rule("name:=:schema=public")

    def test_parse_invalid_boolean(self):
        with pytest.raises(RuleParseError, match="Invalid boolean value"):
            parse_rule("name:=:use_zero=sometimes")


class TestParseRules:
    """Tests for parse_rules function (semicolon-separated)."""

    def test_parse_multiple_rules(self):
        rules = parse_rules("name:rlike;age:=")
        assert rules == [
            Rule(name="name", operator=Operator.RLIKE),
            Rule(name="age", operator=Operator.EQ),
        ]

    def test_parse_empty_string(self):
        assert parse_rules("") == []

    def test_error_names_the_failing_rule(self):
        with pytest.raises(RuleParseError, match="Error parsing rule 'age:=:bad'"):
            parse_rules("name:rlike;age:=:bad")


RULES_YAML = """
rulesets:
  default:
    rules:
      - name: name
        opt: rlike
      - name: age
        opt: "="
  admin:
    extends: default
    rules:
      - name: role
        table: users
        use_zero: yes
"""


class TestParseYamlRulesFile:
    """Tests for YAML ruleset loading."""

    def test_load_default_ruleset(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(RULES_YAML)

        assert parse_yaml_rules_file(path) == [
            Rule(name="name", operator=Operator.RLIKE),
            Rule(name="age", operator=Operator.EQ),
        ]

    def test_extends_puts_parent_rules_first(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(RULES_YAML)

        rules = parse_yaml_rules_file(path, "admin")
        assert [rule.name for rule in rules] == ["name", "age", "role"]
        assert rules[2] == Rule(name="role", table="users", use_zero=True)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_yaml_rules_file(tmp_path / "missing.yaml")

    def test_unknown_ruleset(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(RULES_YAML)

        with pytest.raises(RuleParseError, match="Available rulesets: default, admin"):
            parse_yaml_rules_file(path, "guest")

    def test_circular_extends(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "rulesets:\n"
            "  a:\n    extends: b\n"
            "  b:\n    extends: a\n"
        )

        with pytest.raises(RuleParseError, match="Circular dependency"):
            parse_yaml_rules_file(path, "a")

    def test_missing_extended_ruleset(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rulesets:\n  a:\n    extends: nope\n")

        with pytest.raises(RuleParseError, match="Ruleset 'nope' not found"):
            parse_yaml_rules_file(path, "a")

    def test_rule_without_name(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rulesets:\n  default:\n    rules:\n      - opt: like\n")

        with pytest.raises(RuleParseError, match="missing required 'name'"):
            parse_yaml_rules_file(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rulesets: [unclosed\n")

        with pytest.raises(RuleParseError, match="Invalid YAML"):
            parse_yaml_rules_file(path)

    def test_missing_rulesets_key(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules: []\n")

        with pytest.raises(RuleParseError, match="missing 'rulesets' key"):
            parse_yaml_rules_file(path)
