"""Tests for formrules.validation.parser: rule specification parsing."""

import pytest

from formrules.validation.parser import RuleToken, is_nullable, parse_rule, parse_rules
from formrules.validation.rules import RequiredRule


class TestParseRule:
    def test_name_only(self) -> None:
        assert parse_rule("required") == RuleToken("required")

    def test_single_parameter(self) -> None:
        assert parse_rule("min:3") == RuleToken("min", ("3",))

    def test_multiple_parameters(self) -> None:
        assert parse_rule("in:a,b,c").parameters == ("a", "b", "c")

    def test_splits_on_first_colon_only(self) -> None:
        token = parse_rule(r"regex:^\d{2}:\d{2}$")
        assert token.name == "regex"
        assert token.parameters == (r"^\d{2}:\d{2}$",)

    def test_commas_are_not_escapable(self) -> None:
        assert parse_rule("regex:/a,b/").parameters == ("/a", "b/")

    def test_str_round_trips_text(self) -> None:
        assert str(parse_rule("between:1,10")) == "between:1,10"
        assert str(parse_rule("required")) == "required"


class TestParseRules:
    def test_pipe_delimited(self) -> None:
        tokens = parse_rules("required|min:3|in:a,b")
        assert [t.name for t in tokens] == ["required", "min", "in"]
        assert tokens[2].parameters == ("a", "b")

    def test_empty_tokens_dropped(self) -> None:
        tokens = parse_rules("required||min:3|")
        assert [t.name for t in tokens] == ["required", "min"]

    def test_nameless_token_kept(self) -> None:
        tokens = parse_rules("required|:5")
        assert [t.name for t in tokens] == ["required", ""]
        assert tokens[1].parameters == ("5",)

    def test_whitespace_around_tokens(self) -> None:
        tokens = parse_rules(" required | max:10 ")
        assert [t.name for t in tokens] == ["required", "max"]
        assert tokens[1].parameters == ("10",)

    def test_empty_string(self) -> None:
        assert parse_rules("") == ()

    def test_none(self) -> None:
        assert parse_rules(None) == ()

    def test_list_of_strings(self) -> None:
        tokens = parse_rules(["required", "between:1,5"])
        assert tokens == (RuleToken("required"), RuleToken("between", ("1", "5")))

    def test_rule_instance(self) -> None:
        rule = RequiredRule()
        (token,) = parse_rules(rule)
        assert token.name == "required"
        assert token.rule is rule

    def test_mixed_list(self) -> None:
        rule = RequiredRule()
        tokens = parse_rules(["nullable", rule, RuleToken("max", ("5",))])
        assert [t.name for t in tokens] == ["nullable", "required", "max"]
        assert tokens[1].rule is rule

    def test_unsupported_item(self) -> None:
        with pytest.raises(TypeError):
            parse_rules(["required", 42])

    def test_unsupported_spec(self) -> None:
        with pytest.raises(TypeError):
            parse_rules(42)

    def test_string_specs_are_cached(self) -> None:
        assert parse_rules("required|email") is parse_rules("required|email")


class TestNullable:
    def test_detects_nullable(self) -> None:
        assert is_nullable(parse_rules("nullable|integer"))

    def test_without_nullable(self) -> None:
        assert not is_nullable(parse_rules("required|integer"))

    def test_rule_instance_named_nullable_is_not_the_gate(self) -> None:
        token = RuleToken("nullable", rule=RequiredRule())
        assert not token.is_nullable
