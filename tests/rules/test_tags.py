"""Tests for tag-driven rule extraction."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, Field

from structfilter.exceptions import FilterConfigError
from structfilter.rules import Operator, Rule, extract_rules, parse_annotation


class TestParseAnnotation:
    """Tests for parse_annotation."""

    def test_operator_only(self):
        assert parse_annotation("name", "opt:rlike") == Rule(name="name", operator=Operator.RLIKE)

    def test_all_keys_any_order(self):
        rule = parse_annotation("name", "use_zero:true;table:users;opt:like")
        assert rule == Rule(name="name", operator=Operator.LIKE, table="users", use_zero=True)

    def test_camel_case_use_zero(self):
        rule = parse_annotation("age", "opt:=;useZero:1")
        assert rule is not None
        assert rule.use_zero is True

    def test_surrounding_separators_and_whitespace(self):
        rule = parse_annotation("age", " ;opt : >= ; table : t;, ")
        assert rule == Rule(name="age", operator=Operator.GTE, table="t")

    def test_missing_operator_means_equals(self):
        rule = parse_annotation("age", "table:users")
        assert rule is not None
        assert rule.operator is Operator.EQ

    @pytest.mark.parametrize("annotation", ["", "   ", "-", ";", " - "])
    def test_not_a_rule_source(self, annotation):
        assert parse_annotation("name", annotation) is None

    def test_malformed_boolean_is_fatal(self):
        with pytest.raises(FilterConfigError, match="Invalid boolean value 'yes'"):
            parse_annotation("name", "opt:=;use_zero:yes")

    def test_pair_without_colon_is_fatal(self):
        with pytest.raises(FilterConfigError, match="expected 'key:value'"):
            parse_annotation("name", "opt:=;rlike")

    def test_unknown_key_is_ignored(self):
        assert parse_annotation("name", "opt:=;index:yes") == Rule(name="name")

    def test_unknown_operator_is_kept(self):
        rule = parse_annotation("name", "opt:regexp")
        assert rule is not None
        assert rule.operator == "regexp"


class UserFilter(BaseModel):
    id: int = 0
    name: str = Field("", json_schema_extra={"filter": "opt:rlike"})
    age: int = Field(0, json_schema_extra={"filter": "opt:="})
    role: str = Field("", alias="user_role", json_schema_extra={"filter": "-"})


@dataclass
class OrderFilter:
    status: str = field(default="", metadata={"json": "status,omitempty", "filter": "opt:=;table:orders"})
    total: int = field(default=0, metadata={"filter": "opt:>;use_zero:true"})
    note: str = field(default="", metadata={"json": "note"})


class TestExtractRules:
    """Tests for extract_rules."""

    def test_model_rules_in_declaration_order(self):
        rules, values = extract_rules(UserFilter(name="John", age=20))
        assert rules == [
            Rule(name="name", operator=Operator.RLIKE),
            Rule(name="age", operator=Operator.EQ),
        ]
        assert values == {"name": "John", "age": 20}

    def test_dataclass_rules(self):
        rules, values = extract_rules(OrderFilter(status="paid"))
        assert rules == [
            Rule(name="status", operator=Operator.EQ, table="orders"),
            Rule(name="total", operator=Operator.GT, use_zero=True),
        ]
        assert values == {"status": "paid", "total": 0}

    def test_zero_values_are_still_extracted(self):
        """The skip policy runs later; extraction keeps every annotated field."""
        rules, values = extract_rules(UserFilter())
        assert [rule.name for rule in rules] == ["name", "age"]
        assert values == {"name": "", "age": 0}

    @pytest.mark.parametrize("dest", [None, 42, "name", {"name": "John"}, UserFilter, OrderFilter])
    def test_non_struct_input_yields_nothing(self, dest):
        assert extract_rules(dest) == ([], {})

    def test_malformed_annotation_aborts(self):
        class BadFilter(BaseModel):
            name: str = Field("", json_schema_extra={"filter": "opt:=;use_zero:maybe"})

        with pytest.raises(FilterConfigError, match="Field 'name'"):
            extract_rules(BadFilter())
