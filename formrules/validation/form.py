"""
FormRules Form Requests
=======================

Form requests bundle everything about one kind of submission:

- who may send it (``authorize``)
- how raw input is cleaned (``sanitize``)
- what the cleaned input must satisfy (``rules``)
- how failures are worded (``messages``, ``attributes``)

Example:
    class SignupRequest(FormRequest):
        def rules(self):
            return {
                "name": "required|string|max:100",
                "email": "required|email",
                "password": "required|min:8|confirmed",
                "age": "nullable|integer|min:18",
            }

        def sanitize(self):
            return {"name": "text", "email": "email", "age": "int"}

        def attributes(self):
            return {"email": "email address"}

    form = SignupRequest(request)
    if form.fails():
        return {"errors": form.errors().to_dict()}
    user = create_user(**form.validated())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from formrules.core.request import InputSource
from formrules.security.sanitizer import Sanitizer, get_sanitizer
from formrules.utils.logger import get_logger
from formrules.validation.exceptions import AuthorizationException
from formrules.validation.messages import MessageBag
from formrules.validation.parser import RuleSpecInput
from formrules.validation.registry import RuleRegistry
from formrules.validation.validator import Validator

if TYPE_CHECKING:
    from formrules.i18n.translator import Translator

logger = get_logger("formrules.form")


class FormRequest(ABC):
    """
    Base class for validated form submissions.

    Args:
        request: Input source with an ``all()`` method
        translator: Translates default validation messages
        registry: Rule registry (process-wide by default)
        sanitizer: Sanitizer for the ``sanitize()`` transforms
    """

    def __init__(
        self,
        request: InputSource,
        translator: Optional["Translator"] = None,
        registry: Optional[RuleRegistry] = None,
        sanitizer: Optional[Sanitizer] = None,
    ) -> None:
        self.request = request
        self.translator = translator
        self.registry = registry
        self.sanitizer = sanitizer
        self._validator: Optional[Validator] = None
        self._sanitized: Optional[Dict[str, Any]] = None

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def authorize(self) -> bool:
        """Check if the current user may make this request."""
        return True

    @abstractmethod
    def rules(self) -> Mapping[str, RuleSpecInput]:
        """Validation rules per field."""
        ...

    def sanitize(self) -> Mapping[str, str]:
        """Sanitizer transform per field (see formrules.security.sanitizer)."""
        return {}

    def messages(self) -> Mapping[str, str]:
        """Custom messages keyed by "field.rule" or "rule"."""
        return {}

    def attributes(self) -> Mapping[str, str]:
        """Display names per field."""
        return {}

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> bool:
        """Check if the request passes validation."""
        return self.validator().passes()

    def passes(self) -> bool:
        return self.validator().passes()

    def fails(self) -> bool:
        return self.validator().fails()

    def errors(self) -> MessageBag:
        return self.validator().errors()

    def validated(self) -> Dict[str, Any]:
        """
        Get sanitized data for the fields that have rules.

        Raises:
            ValidationException: If validation fails
        """
        return self.validator().validated()

    def validate_resolved(self) -> Dict[str, Any]:
        """
        Authorize, then return validated data.

        Raises:
            AuthorizationException: If ``authorize()`` returns False
            ValidationException: If validation fails
        """
        if not self.authorize():
            logger.info("Form request not authorized", form=type(self).__name__)
            raise AuthorizationException()
        return self.validated()

    def validator(self) -> Validator:
        """Get the validator for this request (created once)."""
        if self._validator is None:
            self._validator = Validator(
                self.data(),
                self.rules(),
                self.messages(),
                self.attributes(),
                translator=self.translator,
                registry=self.registry,
            )
        return self._validator

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def data(self) -> Dict[str, Any]:
        """Get sanitized input (computed once)."""
        if self._sanitized is None:
            sanitizer = self.sanitizer or get_sanitizer()
            self._sanitized = sanitizer.apply_all(self.request.all(), self.sanitize())
        return self._sanitized

    def input(self, key: str, default: Any = None) -> Any:
        """Get one sanitized value."""
        return self.data().get(key, default)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} fields={list(self.rules())!r}>"
