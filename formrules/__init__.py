"""
FormRules
=========

Rule-based validation for form and request input.

Rules are declared per field as pipe-delimited strings
("required|string|max:100"), checked against an input mapping, and
failures are collected as human-readable messages per field.

Features:
- Built-in rules (required, string, integer, email, min, max, in, ...)
- Custom rules via a registry, taking precedence over built-ins
- Per-field and per-rule custom messages with placeholders
- Form requests with authorization and input sanitization
- Translatable default messages

Quick Start:
    from formrules import Validator

    validator = Validator(
        {"name": "John", "email": "john@example.com"},
        {"name": "required|string|max:100", "email": "required|email"},
    )
    if validator.fails():
        print(validator.errors().to_dict())
"""

from __future__ import annotations

__version__ = "1.0.0"

from formrules.validation import (
    FormRequest,
    MessageBag,
    Rule,
    RuleRegistry,
    ValidationException,
    Validator,
    ValidatorFactory,
    UnknownRuleError,
    extend,
    validate_or_fail,
)


def __getattr__(name: str):
    """Lazy loading of optional components."""
    _imports = {
        "Config": "formrules.core.config",
        "Request": "formrules.core.request",
        "Sanitizer": "formrules.security.sanitizer",
        "CatalogTranslator": "formrules.i18n.translator",
        "GettextTranslator": "formrules.i18n.translator",
        "get_logger": "formrules.utils.logger",
        "configure_logging": "formrules.utils.logger",
    }

    if name in _imports:
        import importlib

        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'formrules' has no attribute {name!r}")


__all__ = [
    "__version__",
    "Validator",
    "ValidatorFactory",
    "FormRequest",
    "MessageBag",
    "Rule",
    "RuleRegistry",
    "ValidationException",
    "UnknownRuleError",
    "extend",
    "validate_or_fail",
    "Config",
    "Request",
    "Sanitizer",
    "CatalogTranslator",
    "GettextTranslator",
    "get_logger",
    "configure_logging",
]
