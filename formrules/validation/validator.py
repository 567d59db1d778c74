"""
FormRules Validator
===================

Core validation engine.

Validates a flat mapping of field values against per-field rule
specifications and collects every failure in a MessageBag.

Example:
    validator = Validator(
        {"name": "John", "email": "not-an-email"},
        {"name": "required|string", "email": "required|email"},
    )

    if validator.fails():
        print(validator.errors().first("email"))
        # The email field must be a valid email address.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from formrules.utils.logger import get_logger
from formrules.validation.exceptions import UnknownRuleError, ValidationException
from formrules.validation.messages import FALLBACK_MESSAGE, MessageBag, MessageResolver
from formrules.validation.parser import RuleSpecInput, RuleToken, is_nullable, parse_rules
from formrules.validation.registry import RuleLike, RuleRegistry, default_registry

if TYPE_CHECKING:
    from formrules.i18n.translator import Translator

logger = get_logger("formrules.validator")


class EvaluationState(Enum):
    """Whether the rule sweep has run for a validator."""

    PENDING = "pending"
    EVALUATED = "evaluated"


class Validator:
    """
    Rule-based validator for one set of input data.

    A validator runs its rule sweep once, the first time a result is
    asked for, and keeps the outcome. Calling ``validate()`` directly
    always re-runs the sweep.

    Args:
        data: Field values to validate
        rules: Rule specification per field, e.g.
            ``{"age": "nullable|integer|min:18"}`` or
            ``{"tags": ["array", "max:5"]}``
        messages: Custom messages keyed by "field.rule" or "rule"
        attributes: Display names per field for ``:attribute``
        translator: Translates default messages
        registry: Rule registry (the process-wide one by default)
        fallback_message: Message for rules without a default

    Example:
        validator = Validator(
            {"status": "unknown"},
            {"status": "in:active,inactive"},
        )
        validator.passes()  # False
        validator.errors().first("status")
        # The status field must be one of: active, inactive.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]],
        rules: Mapping[str, RuleSpecInput],
        messages: Optional[Mapping[str, str]] = None,
        attributes: Optional[Mapping[str, str]] = None,
        translator: Optional["Translator"] = None,
        registry: Optional[RuleRegistry] = None,
        fallback_message: str = FALLBACK_MESSAGE,
    ) -> None:
        self.data: Dict[str, Any] = dict(data or {})
        self.rules: Dict[str, Tuple[RuleToken, ...]] = {
            field: parse_rules(spec) for field, spec in rules.items()
        }
        self.registry = registry if registry is not None else default_registry()
        self.resolver = MessageResolver(
            messages=messages,
            attributes=attributes,
            translator=translator,
            fallback=fallback_message,
        )
        self._errors = MessageBag()
        self._state = EvaluationState.PENDING

    @property
    def state(self) -> EvaluationState:
        return self._state

    @property
    def has_run(self) -> bool:
        return self._state is EvaluationState.EVALUATED

    @classmethod
    def extend(
        cls,
        name: str,
        rule: RuleLike,
        message: Optional[str] = None,
    ) -> None:
        """
        Register a custom rule on the process-wide registry.

        Example:
            Validator.extend("even", lambda field, value, params, data: value % 2 == 0,
                             message="The :attribute field must be even.")
        """
        default_registry().register(name, rule, message)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def validate(self) -> bool:
        """
        Run every rule for every field.

        Returns:
            True if no rule failed

        Raises:
            UnknownRuleError: A rule name is neither built in nor
                registered; the run is aborted.
        """
        self._errors = MessageBag()
        self._state = EvaluationState.PENDING

        try:
            for field, tokens in self.rules.items():
                self._validate_field(field, tokens)
        except UnknownRuleError as exc:
            self._errors = MessageBag()
            logger.error("Validation aborted", exception=exc, rule=exc.rule, field=exc.field)
            raise

        self._state = EvaluationState.EVALUATED
        logger.debug(
            "Validation finished",
            fields=len(self.rules),
            errors=self._errors.count(),
        )
        return not self._errors.has_errors()

    def fails(self) -> bool:
        """Check if validation fails (runs the sweep once)."""
        if self._state is EvaluationState.PENDING:
            self.validate()
        return self._errors.has_errors()

    def passes(self) -> bool:
        """Check if validation passes (runs the sweep once)."""
        return not self.fails()

    def errors(self) -> MessageBag:
        """Get validation errors (runs the sweep once)."""
        if self._state is EvaluationState.PENDING:
            self.validate()
        return self._errors

    def validated(self) -> Dict[str, Any]:
        """
        Get the input restricted to fields that have rules.

        Raises:
            ValidationException: If validation fails
        """
        if self.fails():
            raise ValidationException(self._errors)

        return {key: value for key, value in self.data.items() if key in self.rules}

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def _validate_field(self, field: str, tokens: Tuple[RuleToken, ...]) -> None:
        value = self.data.get(field)

        if is_nullable(tokens) and (value is None or value == ""):
            return

        for token in tokens:
            if token.is_nullable:
                continue
            self._validate_rule(field, value, token)

    def _validate_rule(self, field: str, value: Any, token: RuleToken) -> None:
        if token.rule is not None:
            rule, is_extension = token.rule, True
        else:
            resolved = self.registry.resolve(token.name)
            if resolved is None:
                raise UnknownRuleError(token.name, field)
            rule, is_extension = resolved

        if rule.passes(field, value, token.parameters, self.data):
            return

        self._add_error(
            field,
            token,
            rule.message() if is_extension else None,
        )

    def _add_error(
        self,
        field: str,
        token: RuleToken,
        extension_message: Optional[str] = None,
    ) -> None:
        message = self.resolver.resolve(
            field,
            token.name,
            token.parameters,
            extension_message,
        )
        self._errors.add(field, message)

    def __repr__(self) -> str:
        return (
            f"Validator(fields={list(self.rules)!r}, "
            f"state={self._state.value!r})"
        )


def validate_or_fail(
    data: Mapping[str, Any],
    rules: Mapping[str, RuleSpecInput],
    messages: Optional[Mapping[str, str]] = None,
    attributes: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Validate data and raise on failure.

    Returns validated data if successful.

    Example:
        try:
            data = validate_or_fail(
                request.all(),
                {"email": "required|email"},
            )
        except ValidationException as e:
            return {"errors": e.errors.to_dict()}
    """
    return Validator(data, rules, messages, attributes).validated()
