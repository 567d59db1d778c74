"""Tests for formrules.validation.validator: the validation engine."""

import pytest

from formrules.i18n.translator import CatalogTranslator
from formrules.validation import (
    EvaluationState,
    Rule,
    UnknownRuleError,
    ValidationException,
    Validator,
    validate_or_fail,
)

SIGNUP_RULES = {
    "name": "required|string|max:100",
    "email": "required|email",
}


class CountingRule(Rule):
    name = "counted"

    def __init__(self) -> None:
        self.calls = 0

    def passes(self, field, value, parameters, data) -> bool:
        self.calls += 1
        return value == "ok"


class TestPassesAndFails:
    def test_valid_data(self) -> None:
        validator = Validator({"name": "John", "email": "john@example.com"}, SIGNUP_RULES)
        assert validator.passes()
        assert not validator.fails()
        assert validator.errors().is_empty()

    def test_missing_fields(self) -> None:
        validator = Validator({}, SIGNUP_RULES)
        assert validator.fails()
        errors = validator.errors()
        assert errors.has("name")
        assert errors.has("email")
        assert errors.first("name") == "The name field is required."

    def test_invalid_values(self) -> None:
        validator = Validator({"name": "", "email": "invalid"}, {"name": "required", "email": "email"})
        assert validator.fails()
        assert validator.errors().keys() == ["name", "email"]
        assert validator.passes() is not validator.errors().has_errors()

    def test_all_failures_collected_in_order(self) -> None:
        validator = Validator({}, {"email": "required|email"})
        assert validator.errors().get("email") == [
            "The email field is required.",
            "The email field must be a valid email address.",
        ]

    def test_fields_in_rule_order(self) -> None:
        validator = Validator({}, {"b": "required", "a": "required", "c": "required"})
        assert validator.errors().keys() == ["b", "a", "c"]

    def test_in_message(self) -> None:
        validator = Validator({"status": "unknown"}, {"status": "in:active,inactive"})
        assert validator.errors().first("status") == (
            "The status field must be one of: active, inactive."
        )

    def test_min_message(self) -> None:
        validator = Validator({"name": "ab"}, {"name": "min:3"})
        assert validator.errors().first("name") == "The name field must be at least 3."

    def test_fields_without_rules_ignored(self) -> None:
        assert Validator({"anything": None}, {}).passes()

    def test_none_data(self) -> None:
        assert Validator(None, {"name": "required"}).fails()

    def test_list_spec(self) -> None:
        validator = Validator({"tags": ["a", "b", "c"]}, {"tags": ["array", "max:2"]})
        assert validator.errors().first("tags") == "The tags field must be at most 2."


class TestNullable:
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_value_skips_rules(self, value) -> None:
        assert Validator({"age": value}, {"age": "nullable|integer|min:18"}).passes()

    def test_absent_value_skips_rules(self) -> None:
        assert Validator({}, {"age": "nullable|integer|min:18"}).passes()

    def test_int_alias(self) -> None:
        assert Validator({"age": None}, {"age": "nullable|int|min:18"}).passes()
        assert Validator({"age": "21"}, {"age": "nullable|int"}).passes()

    def test_present_value_checked(self) -> None:
        validator = Validator({"age": 15}, {"age": "nullable|integer|min:18"})
        assert validator.errors().get("age") == ["The age field must be at least 18."]

    def test_position_does_not_matter(self) -> None:
        assert Validator({"age": None}, {"age": "integer|nullable"}).passes()

    def test_zero_is_not_empty(self) -> None:
        assert Validator({"age": 0}, {"age": "nullable|min:18"}).fails()

    def test_without_nullable_empty_values_are_checked(self) -> None:
        assert Validator({"age": None}, {"age": "integer"}).fails()


class TestValidated:
    def test_restricted_to_rule_fields(self) -> None:
        validator = Validator(
            {"name": "John", "email": "john@example.com", "extra": "dropped"},
            SIGNUP_RULES,
        )
        assert validator.validated() == {"name": "John", "email": "john@example.com"}

    def test_absent_fields_not_invented(self) -> None:
        validator = Validator({"name": "x"}, {"name": "required", "nick": "nullable|string"})
        assert validator.validated() == {"name": "x"}

    def test_raises_on_failure(self) -> None:
        validator = Validator({"name": ""}, {"name": "required"})
        with pytest.raises(ValidationException) as exc_info:
            validator.validated()
        assert exc_info.value.errors is validator.errors()
        assert exc_info.value.first("name") == "The name field is required."
        assert "name: The name field is required." in str(exc_info.value)

    def test_validate_or_fail(self) -> None:
        assert validate_or_fail({"name": "John", "x": 1}, {"name": "required"}) == {"name": "John"}
        with pytest.raises(ValidationException):
            validate_or_fail({}, {"name": "required"})


class TestUnknownRules:
    def test_raises(self) -> None:
        validator = Validator({"name": "x"}, {"name": "required|bogus_rule"})
        with pytest.raises(UnknownRuleError) as exc_info:
            validator.fails()
        assert exc_info.value.rule == "bogus_rule"
        assert exc_info.value.field == "name"
        assert "bogus_rule" in str(exc_info.value)

    def test_nameless_rule_raises(self) -> None:
        validator = Validator({"n": 1}, {"n": "required|:5"})
        with pytest.raises(UnknownRuleError) as exc_info:
            validator.passes()
        assert exc_info.value.rule == ""
        assert exc_info.value.field == "n"

    def test_aborts_whole_run(self) -> None:
        validator = Validator({}, {"name": "required", "code": "bogus_rule"})
        with pytest.raises(UnknownRuleError):
            validator.validate()
        assert validator.state is EvaluationState.PENDING
        with pytest.raises(UnknownRuleError):
            validator.errors()

    def test_skipped_by_nullable_gate(self) -> None:
        assert Validator({"code": None}, {"code": "nullable|bogus_rule"}).passes()

    def test_logged(self, log_stream) -> None:
        with pytest.raises(UnknownRuleError):
            Validator({}, {"name": "bogus_rule"}).validate()
        assert "Validation aborted" in log_stream.getvalue()


class TestEvaluationState:
    def test_runs_once(self, registry) -> None:
        rule = CountingRule()
        registry.register("counted", rule)
        validator = Validator({"code": "bad"}, {"code": "counted"}, registry=registry)

        assert validator.state is EvaluationState.PENDING
        assert not validator.has_run
        validator.fails()
        validator.passes()
        validator.errors()
        assert rule.calls == 1
        assert validator.has_run

    def test_validate_reruns(self, registry) -> None:
        rule = CountingRule()
        registry.register("counted", rule)
        validator = Validator({"code": "bad"}, {"code": "counted"}, registry=registry)

        validator.validate()
        validator.validate()
        assert rule.calls == 2
        assert validator.errors().count() == 1

    def test_deterministic(self) -> None:
        data = {"name": "", "email": "nope", "status": "x"}
        rules = {**SIGNUP_RULES, "status": "in:a,b"}
        assert Validator(data, rules).errors() == Validator(data, rules).errors()


class TestCustomization:
    def test_custom_messages(self) -> None:
        validator = Validator(
            {},
            {"name": "required", "email": "required"},
            messages={"name.required": "Tell us your name.", "required": ":attribute is missing."},
        )
        assert validator.errors().first("name") == "Tell us your name."
        assert validator.errors().first("email") == "email is missing."

    def test_attributes(self) -> None:
        validator = Validator({}, {"email": "required"}, attributes={"email": "email address"})
        assert validator.errors().first("email") == "The email address field is required."

    def test_translator(self) -> None:
        translator = CatalogTranslator({
            "The :attribute field is required.": "Le champ :attribute est obligatoire.",
        })
        validator = Validator({}, {"nom": "required"}, translator=translator)
        assert validator.errors().first("nom") == "Le champ nom est obligatoire."


class TestExtensions:
    def test_extend_default_registry(self) -> None:
        Validator.extend(
            "even",
            lambda field, value, params, data: value % 2 == 0,
            message="The :attribute field must be even.",
        )
        validator = Validator({"count": 3}, {"count": "integer|even"})
        assert validator.errors().first("count") == "The count field must be even."

    def test_extension_without_message_uses_fallback(self, registry) -> None:
        registry.register("even", lambda field, value, params, data: value % 2 == 0)
        validator = Validator({"count": 3}, {"count": "even"}, registry=registry)
        assert validator.errors().first("count") == "The count field is invalid."

    def test_configured_fallback(self, registry) -> None:
        registry.register("even", lambda field, value, params, data: False)
        validator = Validator(
            {"count": 3}, {"count": "even"}, registry=registry, fallback_message="Check :attribute."
        )
        assert validator.errors().first("count") == "Check count."

    def test_extension_overrides_builtin(self, registry) -> None:
        registry.register("email", lambda field, value, params, data: True)
        assert Validator({"email": "nope"}, {"email": "email"}, registry=registry).passes()
        assert Validator({"email": "nope"}, {"email": "email"}).fails()

    def test_shadowing_extension_without_message_uses_default(self, registry) -> None:
        registry.register("email", lambda field, value, params, data: False)
        validator = Validator({"email": "a@b.com"}, {"email": "email"}, registry=registry)
        assert validator.errors().first("email") == "The email field must be a valid email address."

    def test_extension_receives_parameters_and_data(self, registry) -> None:
        seen = {}

        def starts_with(field, value, params, data):
            seen.update(field=field, params=tuple(params), data=dict(data))
            return str(value).startswith(params[0])

        registry.register("starts_with", starts_with, "The :attribute must start with :param0.")
        validator = Validator({"code": "xyz"}, {"code": "starts_with:ab"}, registry=registry)
        assert validator.errors().first("code") == "The code must start with ab."
        assert seen == {"field": "code", "params": ("ab",), "data": {"code": "xyz"}}

    def test_inline_rule_instance(self) -> None:
        class Uppercase(Rule):
            template = "The :attribute field must be uppercase."

            def passes(self, field, value, parameters, data) -> bool:
                return isinstance(value, str) and value.isupper()

        validator = Validator({"code": "abc"}, {"code": ["required", Uppercase()]})
        assert validator.errors().get("code") == ["The code field must be uppercase."]

    def test_confirmed(self) -> None:
        rules = {"password": "required|min:8|confirmed"}
        assert Validator(
            {"password": "secret123", "password_confirmation": "secret123"}, rules
        ).passes()
        validator = Validator({"password": "secret123"}, rules)
        assert validator.errors().first("password") == "The password confirmation does not match."


class TestUrls:
    def test_hostless_urls(self) -> None:
        rules = {"contact": "required|url"}
        assert Validator({"contact": "mailto:team@example.com"}, rules).passes()
        assert Validator({"contact": "mailto:"}, rules).errors().first("contact") == (
            "The contact field must be a valid URL."
        )
