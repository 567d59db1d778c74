"""
FormRules Validation Rules
==========================

Built-in validation rules.

Every rule implements the Rule interface:

    passes(field, value, parameters, data) -> bool
    message() -> str

``parameters`` are the raw strings from the rule specification
("min:3" gives ("3",)); ``data`` is the full input mapping so rules
can look at sibling fields. Messages are templates using
``:attribute``, ``:param0``, ``:param1``, ... and ``:values``.

Custom rules subclass Rule and are registered by name:

    class Uppercase(Rule):
        name = "uppercase"
        template = "The :attribute field must be uppercase."

        def passes(self, field, value, parameters, data):
            return isinstance(value, str) and value.isupper()

    Validator.extend("uppercase", Uppercase())
"""

from __future__ import annotations

import math
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

from formrules.utils.logger import get_logger

logger = get_logger("formrules.rules")

Number = Union[int, float]


def _snake_name(class_name: str) -> str:
    if class_name.endswith("Rule") and class_name != "Rule":
        class_name = class_name[: -len("Rule")]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", class_name).lower()


class Rule(ABC):
    """
    Abstract validation rule.

    Subclasses set ``name`` (the key used in rule strings) and
    ``template`` (the default error message) and implement ``passes``.
    ``name`` defaults to the snake_case class name without a "Rule"
    suffix.
    """

    name: str = ""
    template: Optional[str] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("name"):
            cls.name = _snake_name(cls.__name__)

    @abstractmethod
    def passes(
        self,
        field: str,
        value: Any,
        parameters: Sequence[str],
        data: Mapping[str, Any],
    ) -> bool:
        """
        Check the value.

        Args:
            field: Field name
            value: Field value (None when absent)
            parameters: Rule parameters as strings
            data: Full data being validated

        Returns:
            True if valid, False otherwise
        """
        ...

    def message(self) -> Optional[str]:
        """Get the message template for a failure (None to use the default)."""
        return self.template

    def __call__(
        self,
        field: str,
        value: Any,
        parameters: Sequence[str] = (),
        data: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return self.passes(field, value, parameters, data or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class CallableRule(Rule):
    """Rule wrapper for plain validation functions."""

    def __init__(
        self,
        func: Callable[[str, Any, Sequence[str], Mapping[str, Any]], bool],
        template: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", "callable")
        if template is not None:
            self.template = template

    def passes(self, field, value, parameters, data) -> bool:
        return bool(self.func(field, value, parameters, data))


# =============================================================================
# Value helpers
# =============================================================================

_NUMERIC_STRING = re.compile(
    r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$"
)
_INTEGER_STRING = re.compile(r"^\s*[+-]?(?:0|[1-9]\d*)\s*$")


def is_number(value: Any) -> bool:
    """A real int or float, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_numeric(value: Any) -> bool:
    """A finite number or a string holding a decimal number."""
    if is_number(value):
        return not (isinstance(value, float) and not math.isfinite(value))
    if isinstance(value, str):
        return bool(_NUMERIC_STRING.match(value))
    return False


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, dict))


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that also requires matching types (True is not 1)."""
    return type(left) is type(right) and left == right


def strict_in(value: Any, options: Sequence[Any]) -> bool:
    return any(strict_equals(value, option) for option in options)


def numeric_parameter(parameters: Sequence[str], index: int) -> int:
    """
    Read a numeric rule parameter as an integer.

    Fractions are truncated toward zero ("2.5" reads as 2, "1e3" as
    1000). Missing or malformed parameters read as 0.
    """
    try:
        raw = parameters[index].strip()
    except (IndexError, AttributeError):
        return 0
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        number = float(raw)
    except ValueError:
        return 0
    return int(number) if math.isfinite(number) else 0


def measure(value: Any) -> Optional[Number]:
    """
    Size of a value for min/max/between.

    Strings are measured in codepoints, sequences by element count,
    numbers by value. Anything else has no size.
    """
    if isinstance(value, str):
        return len(value)
    if is_sequence(value):
        return len(value)
    if is_number(value):
        return value
    return None


def to_text(value: Any) -> str:
    """String form of a value for pattern matching."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def _all_categories(value: Any, categories: str) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return all(unicodedata.category(char)[0] in categories for char in value)


# =============================================================================
# Presence & type rules
# =============================================================================

class RequiredRule(Rule):
    """Field must be present and not empty."""

    name = "required"
    template = "The :attribute field is required."

    def passes(self, field, value, parameters, data) -> bool:
        if value is None or value == "":
            return False
        if is_sequence(value) and len(value) == 0:
            return False
        return True


class StringRule(Rule):
    name = "string"
    template = "The :attribute field must be a string."

    def passes(self, field, value, parameters, data) -> bool:
        return isinstance(value, str)


class IntegerRule(Rule):
    """
    Value must be an integer or an integer literal string.

    Booleans are rejected even though bool subclasses int: True is a
    flag, not the literal 1.
    """

    name = "integer"
    template = "The :attribute field must be an integer."

    def passes(self, field, value, parameters, data) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        if isinstance(value, float):
            return math.isfinite(value) and value.is_integer()
        if isinstance(value, str):
            return bool(_INTEGER_STRING.match(value))
        return False


class NumericRule(Rule):
    name = "numeric"
    template = "The :attribute field must be a number."

    def passes(self, field, value, parameters, data) -> bool:
        return is_numeric(value)


class BooleanRule(Rule):
    """Value must be one of the accepted boolean forms, compared strictly."""

    name = "boolean"
    template = "The :attribute field must be true or false."

    ACCEPTED: Tuple[Any, ...] = (True, False, 0, 1, "0", "1", "true", "false")

    def passes(self, field, value, parameters, data) -> bool:
        return strict_in(value, self.ACCEPTED)


class ArrayRule(Rule):
    name = "array"
    template = "The :attribute field must be an array."

    def passes(self, field, value, parameters, data) -> bool:
        return is_sequence(value)


# =============================================================================
# Format rules
# =============================================================================

class EmailRule(Rule):
    """Value must be a syntactically valid email address."""

    name = "email"
    template = "The :attribute field must be a valid email address."

    _local_part = re.compile(
        r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*$"
    )
    _domain_label = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")

    def passes(self, field, value, parameters, data) -> bool:
        if not isinstance(value, str) or len(value) > 254:
            return False
        if value.count("@") != 1:
            return False

        local, domain = value.split("@")
        if not local or len(local) > 64 or not self._local_part.match(local):
            return False

        labels = domain.split(".")
        if len(labels) < 2:
            return False
        if not all(self._domain_label.match(label) for label in labels):
            return False
        return labels[-1].isalpha() and len(labels[-1]) >= 2


class UrlRule(Rule):
    """
    Value must be an absolute URL with a scheme and host.

    mailto:, news: and file: URLs need no host, only something after
    the scheme.
    """

    name = "url"
    template = "The :attribute field must be a valid URL."

    HOSTLESS_SCHEMES = frozenset({"mailto", "news", "file"})

    _scheme = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
    _whitespace = re.compile(r"\s")

    def passes(self, field, value, parameters, data) -> bool:
        if not isinstance(value, str) or self._whitespace.search(value):
            return False
        try:
            parts = urlsplit(value)
            # Accessing port validates it
            parts.port
        except ValueError:
            return False
        if not parts.scheme or not self._scheme.match(parts.scheme):
            return False
        if parts.scheme.lower() in self.HOSTLESS_SCHEMES:
            return bool(value[len(parts.scheme) + 1:].strip("/"))
        if "://" not in value:
            return False
        return bool(parts.hostname)


class RegexRule(Rule):
    """
    Value must fully match a pattern.

    Patterns may be written bare ("[a-z]+") or delimited with flags
    ("/^[a-z]+$/i").
    """

    name = "regex"
    template = "The :attribute field format is invalid."

    _flags = {
        "i": re.IGNORECASE,
        "m": re.MULTILINE,
        "s": re.DOTALL,
        "x": re.VERBOSE,
        "u": 0,
    }
    _delimited = re.compile(r"^([/#~!%@|])(.*)\1([a-zA-Z]*)$", re.DOTALL)

    def __init__(self) -> None:
        self._cache: Dict[str, Optional[re.Pattern]] = {}

    def compile(self, pattern: str) -> Optional[re.Pattern]:
        """Compile a rule pattern, or None if it is invalid."""
        if pattern in self._cache:
            return self._cache[pattern]

        source, flags = pattern, 0
        match = self._delimited.match(pattern)
        if match and all(flag in self._flags for flag in match.group(3)):
            source = match.group(2)
            for flag in match.group(3):
                flags |= self._flags[flag]

        try:
            compiled: Optional[re.Pattern] = re.compile(source, flags)
        except re.error as exc:
            logger.warning("Invalid regex pattern", pattern=pattern, error=str(exc))
            compiled = None

        self._cache[pattern] = compiled
        return compiled

    def passes(self, field, value, parameters, data) -> bool:
        if not parameters:
            return False
        compiled = self.compile(parameters[0])
        if compiled is None:
            return False
        return compiled.fullmatch(to_text(value)) is not None


class AlphaRule(Rule):
    """Value must contain only letters (and combining marks)."""

    name = "alpha"
    template = "The :attribute field must only contain letters."

    def passes(self, field, value, parameters, data) -> bool:
        return _all_categories(value, "LM")


class AlphaNumericRule(Rule):
    """Value must contain only letters, marks and numbers."""

    name = "alpha_num"
    template = "The :attribute field must only contain letters and numbers."

    def passes(self, field, value, parameters, data) -> bool:
        return _all_categories(value, "LMN")


# =============================================================================
# Size rules
# =============================================================================

class MinRule(Rule):
    """Minimum length for strings, count for arrays, value for numbers."""

    name = "min"
    template = "The :attribute field must be at least :param0."

    def passes(self, field, value, parameters, data) -> bool:
        size = measure(value)
        if size is None:
            return False
        return size >= numeric_parameter(parameters, 0)


class MaxRule(Rule):
    """Maximum length for strings, count for arrays, value for numbers."""

    name = "max"
    template = "The :attribute field must be at most :param0."

    def passes(self, field, value, parameters, data) -> bool:
        size = measure(value)
        if size is None:
            return False
        return size <= numeric_parameter(parameters, 0)


class BetweenRule(Rule):
    name = "between"
    template = "The :attribute field must be between :param0 and :param1."

    def passes(self, field, value, parameters, data) -> bool:
        size = measure(value)
        if size is None:
            return False
        low = numeric_parameter(parameters, 0)
        high = numeric_parameter(parameters, 1)
        return low <= size <= high


# =============================================================================
# Comparison rules
# =============================================================================

class InRule(Rule):
    """Value must be one of the listed parameters."""

    name = "in"
    template = "The :attribute field must be one of: :values."

    def passes(self, field, value, parameters, data) -> bool:
        return strict_in(value, parameters)


class ConfirmedRule(Rule):
    """Value must match the ``<field>_confirmation`` field."""

    name = "confirmed"
    template = "The :attribute confirmation does not match."

    def passes(self, field, value, parameters, data) -> bool:
        confirmation = data.get(f"{field}_confirmation")
        if confirmation is None:
            return False
        return strict_equals(value, confirmation)


# =============================================================================
# Built-in table
# =============================================================================

def builtin_rules() -> Dict[str, Rule]:
    """Create the table of built-in rules, keyed by rule name."""
    integer = IntegerRule()
    table: Dict[str, Rule] = {
        rule.name: rule
        for rule in (
            RequiredRule(),
            StringRule(),
            integer,
            NumericRule(),
            BooleanRule(),
            ArrayRule(),
            EmailRule(),
            UrlRule(),
            MinRule(),
            MaxRule(),
            BetweenRule(),
            InRule(),
            RegexRule(),
            AlphaRule(),
            AlphaNumericRule(),
            ConfirmedRule(),
        )
    }
    table["int"] = integer
    return table
