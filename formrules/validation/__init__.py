"""
FormRules Validation
====================

Rule parsing, evaluation and error messages.

Features:
- Pipe-delimited rule strings with parameters ("between:1,10")
- Built-in and extension rules through a rule registry
- Nullable fields
- Custom messages and attribute names
- Form request helpers
"""

from formrules.validation.exceptions import (
    AuthorizationException,
    FormRulesError,
    RuleConfigurationError,
    UnknownRuleError,
    ValidationException,
)
from formrules.validation.parser import (
    RuleToken,
    is_nullable,
    parse_rule,
    parse_rules,
)
from formrules.validation.rules import (
    Rule,
    CallableRule,
    RequiredRule,
    StringRule,
    IntegerRule,
    NumericRule,
    BooleanRule,
    ArrayRule,
    EmailRule,
    UrlRule,
    RegexRule,
    AlphaRule,
    AlphaNumericRule,
    MinRule,
    MaxRule,
    BetweenRule,
    InRule,
    ConfirmedRule,
    builtin_rules,
)
from formrules.validation.registry import RuleRegistry, default_registry, extend
from formrules.validation.messages import (
    DEFAULT_MESSAGES,
    FALLBACK_MESSAGE,
    MessageBag,
    MessageResolver,
)
from formrules.validation.validator import EvaluationState, Validator, validate_or_fail
from formrules.validation.form import FormRequest
from formrules.validation.factory import ValidatorFactory

__all__ = [
    # Exceptions
    "FormRulesError",
    "ValidationException",
    "RuleConfigurationError",
    "UnknownRuleError",
    "AuthorizationException",
    # Parsing
    "RuleToken",
    "parse_rule",
    "parse_rules",
    "is_nullable",
    # Rules
    "Rule",
    "CallableRule",
    "RequiredRule",
    "StringRule",
    "IntegerRule",
    "NumericRule",
    "BooleanRule",
    "ArrayRule",
    "EmailRule",
    "UrlRule",
    "RegexRule",
    "AlphaRule",
    "AlphaNumericRule",
    "MinRule",
    "MaxRule",
    "BetweenRule",
    "InRule",
    "ConfirmedRule",
    "builtin_rules",
    # Registry
    "RuleRegistry",
    "default_registry",
    "extend",
    # Messages
    "MessageBag",
    "MessageResolver",
    "DEFAULT_MESSAGES",
    "FALLBACK_MESSAGE",
    # Validator
    "Validator",
    "EvaluationState",
    "validate_or_fail",
    "FormRequest",
    "ValidatorFactory",
]
