"""Tests for formrules.validation.factory: the validator factory."""

from formrules.core.config import Config
from formrules.i18n.translator import CatalogTranslator, GettextTranslator
from formrules.security.sanitizer import get_sanitizer
from formrules.utils.logger import LogLevel, configure_logging, get_logger
from formrules.validation import Validator, ValidatorFactory, default_registry


class TestValidatorFactory:
    def test_make(self) -> None:
        validator = ValidatorFactory().make({"name": ""}, {"name": "required"})
        assert isinstance(validator, Validator)
        assert validator.fails()

    def test_call_aliases_make(self) -> None:
        factory = ValidatorFactory()
        assert factory({"name": "x"}, {"name": "required"}).passes()

    def test_default_registry(self) -> None:
        assert ValidatorFactory().registry is default_registry()

    def test_shared_messages_overridden_per_call(self) -> None:
        factory = ValidatorFactory(messages={"required": "Missing :attribute.", "email": "Bad email."})
        validator = factory.make(
            {"email": "nope"},
            {"name": "required", "email": "email"},
            messages={"email": "Fix :attribute."},
        )
        assert validator.errors().first("name") == "Missing name."
        assert validator.errors().first("email") == "Fix email."

    def test_attributes(self) -> None:
        validator = ValidatorFactory().make({}, {"email": "required"}, attributes={"email": "e-mail"})
        assert validator.errors().first("email") == "The e-mail field is required."

    def test_translator(self) -> None:
        translator = CatalogTranslator({"The :attribute field is required.": ":attribute fehlt."})
        validator = ValidatorFactory(translator=translator).make({}, {"name": "required"})
        assert validator.errors().first("name") == "name fehlt."

    def test_extend_uses_own_registry(self, registry) -> None:
        factory = ValidatorFactory(registry=registry).extend(
            "even", lambda field, value, params, data: value % 2 == 0, "Must be even."
        )
        assert factory.make({"n": 3}, {"n": "even"}).errors().first("n") == "Must be even."
        assert "even" not in default_registry()


class TestFromConfig:
    def test_fallback_message(self, registry) -> None:
        config = Config({"validation": {"fallback_message": "Check :attribute."}}, load_env=False)
        factory = ValidatorFactory.from_config(config, registry=registry)
        factory.extend("never", lambda field, value, params, data: False)
        assert factory.make({"n": 1}, {"n": "never"}).errors().first("n") == "Check n."

    def test_no_locale_no_translator(self) -> None:
        assert ValidatorFactory.from_config(Config(load_env=False)).translator is None

    def test_locale_builds_gettext_translator(self, tmp_path) -> None:
        config = Config(
            {"validation": {"locale": "fr", "locale_dir": str(tmp_path)}},
            load_env=False,
        )
        factory = ValidatorFactory.from_config(config)
        assert isinstance(factory.translator, GettextTranslator)
        assert factory.make({}, {"name": "required"}).errors().first("name") == (
            "The name field is required."
        )

    def test_configures_logging(self) -> None:
        config = Config({"logging": {"level": "ERROR"}}, load_env=False)
        try:
            ValidatorFactory.from_config(config)
            assert get_logger("formrules.validator").level is LogLevel.ERROR
        finally:
            configure_logging(level="warning")

    def test_configures_sanitizer(self) -> None:
        config = Config({"sanitizer": {"max_string_length": 3}}, load_env=False)
        ValidatorFactory.from_config(config)
        assert get_sanitizer().config.max_string_length == 3
