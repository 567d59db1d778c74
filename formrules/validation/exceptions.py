"""
FormRules Exceptions
====================

Two kinds of failure come out of the validation engine:

- Data failures: expected, collected per field in a MessageBag and
  only raised (as ValidationException) when validated data is requested.
- Configuration failures: a rule set that references something the
  engine cannot evaluate. These abort the validation run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from formrules.validation.messages import MessageBag


class FormRulesError(Exception):
    """Base class for all formrules errors."""


class ValidationException(FormRulesError):
    """
    Validation failed exception.

    Raised by ``Validator.validated()`` when the data does not satisfy
    the rules. Carries the full error bag.
    """

    def __init__(
        self,
        errors: "MessageBag",
        message: str = "The given data was invalid.",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def __str__(self) -> str:
        lines = [self.message]
        for field_name, messages in self.errors.all().items():
            for msg in messages:
                lines.append(f"  - {field_name}: {msg}")
        return "\n".join(lines)

    def first(self, field_name: Optional[str] = None) -> Optional[str]:
        """Get first error message, optionally for one field."""
        return self.errors.first(field_name)


class RuleConfigurationError(FormRulesError):
    """A rule set is malformed in a way no input can fix."""


class UnknownRuleError(RuleConfigurationError):
    """A rule specification names a rule that is neither built in nor registered."""

    def __init__(self, rule: str, field: Optional[str] = None) -> None:
        self.rule = rule
        self.field = field
        detail = f"Unknown validation rule: {rule!r}"
        if field is not None:
            detail += f" (field '{field}')"
        super().__init__(detail)


class AuthorizationException(FormRulesError):
    """The form request is not authorized for the current user."""

    def __init__(self, message: str = "This action is unauthorized.") -> None:
        super().__init__(message)
