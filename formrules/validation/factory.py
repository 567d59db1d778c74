"""
FormRules Validator Factory
===========================

The composition root's way to make validators.

A factory holds what every validator in an application shares (the
translator, the rule registry, house-style messages), so request code
only passes data and rules:

    factory = ValidatorFactory(translator=translator)
    factory.extend("uppercase", UppercaseRule())

    validator = factory.make(data, {"code": "required|uppercase"})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from formrules.core.config import Config, get_config
from formrules.i18n.translator import GettextTranslator
from formrules.security.sanitizer import configure_sanitizer
from formrules.utils.logger import configure_logging
from formrules.validation.messages import FALLBACK_MESSAGE
from formrules.validation.parser import RuleSpecInput
from formrules.validation.registry import RuleLike, RuleRegistry, default_registry
from formrules.validation.validator import Validator

if TYPE_CHECKING:
    from formrules.i18n.translator import Translator


class ValidatorFactory:
    """
    Creates validators with shared collaborators.

    Args:
        translator: Translator for default messages
        registry: Rule registry (the process-wide one by default)
        messages: Messages applied to every validator; per-call
            messages override them
        fallback_message: Message for rules without a default
    """

    def __init__(
        self,
        translator: Optional["Translator"] = None,
        registry: Optional[RuleRegistry] = None,
        messages: Optional[Mapping[str, str]] = None,
        fallback_message: str = FALLBACK_MESSAGE,
    ) -> None:
        self.translator = translator
        self.registry = registry if registry is not None else default_registry()
        self.messages = dict(messages or {})
        self.fallback_message = fallback_message

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        registry: Optional[RuleRegistry] = None,
    ) -> "ValidatorFactory":
        """
        Build a factory from configuration.

        A gettext translator is set up when "validation.locale" is set.
        Logging and the process-wide sanitizer are configured from the
        "logging.*" and "sanitizer.*" keys.
        """
        config = config or get_config()
        configure_sanitizer(config)
        configure_logging(
            level=config.get_str("logging.level", "WARNING"),
            format=config.get_str("logging.format", "text"),
        )
        translator = None

        locale = config.get("validation.locale")
        if locale:
            translator = GettextTranslator(
                domain=config.get_str("validation.gettext_domain", "formrules"),
                localedir=config.get("validation.locale_dir"),
                languages=[locale],
            )

        return cls(
            translator=translator,
            registry=registry,
            fallback_message=config.get_str("validation.fallback_message", FALLBACK_MESSAGE),
        )

    def make(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, RuleSpecInput],
        messages: Optional[Mapping[str, str]] = None,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> Validator:
        """Create a validator for one set of input."""
        merged_messages = {**self.messages, **(messages or {})}
        return Validator(
            data,
            rules,
            merged_messages,
            attributes,
            translator=self.translator,
            registry=self.registry,
            fallback_message=self.fallback_message,
        )

    __call__ = make

    def extend(
        self,
        name: str,
        rule: RuleLike,
        message: Optional[str] = None,
    ) -> "ValidatorFactory":
        """Register an extension rule on this factory's registry."""
        self.registry.register(name, rule, message)
        return self
