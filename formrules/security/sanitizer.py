"""
FormRules Input Sanitizer
=========================

Named transforms applied to raw input before validation.

Transforms:
    text          single-line plain text (default)
    textarea      multi-line plain text
    richtext      HTML limited to a safe tag set (alias: html)
    email         email address characters only, "" if not an address
    url           http(s)/ftp(s)/mailto URL, "" otherwise
    int           leading integer, 0 if none (alias: integer)
    unsigned-int  absolute value of int (alias: absint)
    float         leading decimal number, 0.0 if none
    bool          True for "1"/"true"/"on"/"yes" (alias: boolean)
    slug          lowercase ASCII words joined by "-"
    key           lowercase [a-z0-9_-] only

None is never transformed. Unknown transform names fall back to text.

Example:
    sanitizer = Sanitizer()
    sanitizer.apply("  Hello <b>World</b>\\n", "text")   # "Hello World"
    sanitizer.apply("42 apples", "int")                  # 42

    sanitize_input(
        {"name": " John ", "age": "30", "bio": None},
        {"name": "text", "age": "int", "bio": "richtext"},
    )
    # {"name": "John", "age": 30, "bio": None}
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Set

import bleach

from formrules.core.config import Config, get_config
from formrules.utils.logger import get_logger

logger = get_logger("formrules.sanitizer")

DEFAULT_TRANSFORM = "text"


@dataclass
class SanitizerConfig:
    """Sanitizer configuration."""

    # Maximum length of text/textarea output
    max_string_length: int = 10000

    # Normalize unicode in text output
    normalize_unicode: bool = True
    unicode_form: str = "NFC"

    # Rich text: allowed HTML
    allowed_tags: FrozenSet[str] = field(default_factory=lambda: frozenset({
        "a", "abbr", "b", "blockquote", "br", "code", "del", "em",
        "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "li",
        "ol", "p", "pre", "s", "span", "strong", "sub", "sup",
        "table", "tbody", "td", "th", "thead", "tr", "u", "ul",
    }))
    allowed_attributes: Dict[str, Set[str]] = field(default_factory=lambda: {
        "*": {"class", "title"},
        "a": {"href", "rel", "target"},
        "img": {"src", "alt", "width", "height"},
        "td": {"colspan", "rowspan"},
        "th": {"colspan", "rowspan", "scope"},
    })
    allowed_protocols: FrozenSet[str] = field(default_factory=lambda: frozenset({
        "http", "https", "mailto", "tel",
    }))

    # URL transform: schemes that survive
    url_protocols: FrozenSet[str] = field(default_factory=lambda: frozenset({
        "http", "https", "ftp", "ftps", "mailto",
    }))

    @classmethod
    def from_config(cls, config: Config) -> "SanitizerConfig":
        """Build from a formrules Config ("sanitizer.*" keys)."""
        settings = cls(max_string_length=config.get_int("sanitizer.max_string_length", 10000))
        tags = config.get("sanitizer.allowed_tags")
        if tags:
            settings.allowed_tags = frozenset(config.get_list("sanitizer.allowed_tags"))
        return settings


class Sanitizer:
    """
    Input sanitizer.

    Example:
        sanitizer = Sanitizer()

        clean = sanitizer.apply_all(
            request.all(),
            {"email": "email", "age": "unsigned-int"},
        )
    """

    CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
    SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*>.*?</\1\s*>", re.DOTALL | re.IGNORECASE)
    TAGS = re.compile(r"<[^>]*>")
    LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
    LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")
    EMAIL_LOCAL_INVALID = re.compile(r"[^a-zA-Z0-9!#$%&'*+/=?^_`{|}~.-]")
    EMAIL_LABEL_INVALID = re.compile(r"[^a-z0-9-]")
    URL_INVALID = re.compile(r"[^a-zA-Z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\x80-\uffff]")
    URL_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
    KEY_INVALID = re.compile(r"[^a-z0-9_-]")

    TRUE_STRINGS = frozenset({"1", "true", "on", "yes"})

    ALIASES: Dict[str, str] = {
        "html": "richtext",
        "integer": "int",
        "absint": "unsigned-int",
        "boolean": "bool",
    }

    def __init__(self, config: Optional[SanitizerConfig] = None) -> None:
        self.config = config or SanitizerConfig()
        self._transforms: Dict[str, Callable[[Any], Any]] = {
            "text": self.text,
            "textarea": self.textarea,
            "richtext": self.richtext,
            "email": self.email,
            "url": self.url,
            "int": self.integer,
            "unsigned-int": self.unsigned_integer,
            "float": self.float_num,
            "bool": self.boolean,
            "slug": self.slug,
            "key": self.key,
        }

    @property
    def transforms(self) -> Set[str]:
        """Names of all supported transforms, aliases included."""
        return set(self._transforms) | set(self.ALIASES)

    def register(self, name: str, transform: Callable[[Any], Any]) -> None:
        """Add or replace a named transform."""
        self._transforms[name] = transform

    def apply(self, value: Any, transform: str = DEFAULT_TRANSFORM) -> Any:
        """
        Apply one named transform.

        Args:
            value: Raw value
            transform: Transform name

        Returns:
            Transformed value, or None when value is None
        """
        if value is None:
            return None

        name = self.ALIASES.get(transform, transform)
        func = self._transforms.get(name)
        if func is None:
            logger.debug("Unknown transform, using text", transform=transform)
            func = self._transforms[DEFAULT_TRANSFORM]
        return func(value)

    def apply_all(
        self,
        data: Mapping[str, Any],
        mapping: Mapping[str, str],
    ) -> Dict[str, Any]:
        """
        Sanitize every field that has a declared transform.

        Fields without a transform are copied unchanged; transforms for
        fields missing from ``data`` are ignored.
        """
        if not mapping:
            return dict(data)

        result = {
            key: self.apply(value, mapping[key]) if key in mapping else value
            for key, value in data.items()
        }
        logger.debug(
            "Sanitized input",
            fields=len(result),
            transformed=sum(1 for key in data if key in mapping),
        )
        return result

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def _clean_text(self, value: Any, keep_newlines: bool) -> str:
        result = str(value).replace("\x00", "")
        result = self.SCRIPT_STYLE.sub("", result)
        result = self.TAGS.sub("", result)
        result = self.CONTROL_CHARS.sub("", result)

        if self.config.normalize_unicode:
            result = unicodedata.normalize(self.config.unicode_form, result)

        if keep_newlines:
            result = result.replace("\r\n", "\n").replace("\r", "\n")
            lines = [re.sub(r"[^\S\n]+", " ", line).strip() for line in result.split("\n")]
            result = "\n".join(lines).strip("\n")
        else:
            result = re.sub(r"\s+", " ", result).strip()

        return result[: self.config.max_string_length]

    def text(self, value: Any) -> str:
        """Single-line plain text: tags removed, whitespace collapsed."""
        return self._clean_text(value, keep_newlines=False)

    def textarea(self, value: Any) -> str:
        """Multi-line plain text: like text, but line breaks are kept."""
        return self._clean_text(value, keep_newlines=True)

    def richtext(self, value: Any) -> str:
        """HTML restricted to the configured tags and attributes."""
        html_content = self.SCRIPT_STYLE.sub("", str(value))
        attributes = {
            tag: sorted(attrs) for tag, attrs in self.config.allowed_attributes.items()
        }
        return bleach.clean(
            html_content,
            tags=self.config.allowed_tags,
            attributes=attributes,
            protocols=self.config.allowed_protocols,
            strip=True,
        )

    # -------------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------------

    def email(self, value: Any) -> str:
        """
        Email address with invalid characters removed.

        Returns "" when what remains is not shaped like an address.
        """
        candidate = self.text(value)
        if len(candidate) < 6 or "@" not in candidate[1:]:
            return ""

        local, domain = candidate.split("@", 1)
        local = self.EMAIL_LOCAL_INVALID.sub("", local)
        if not local:
            return ""

        labels = []
        for label in domain.lower().split("."):
            label = self.EMAIL_LABEL_INVALID.sub("", label).strip("-")
            if label:
                labels.append(label)
        if len(labels) < 2:
            return ""

        return f"{local}@{'.'.join(labels)}"

    def url(self, value: Any) -> str:
        """
        URL with unsafe characters removed.

        Scheme-less values get "http://"; disallowed schemes give "".
        """
        candidate = self.CONTROL_CHARS.sub("", str(value)).strip()
        candidate = re.sub(r"\s+", "", candidate)
        candidate = self.URL_INVALID.sub("", candidate)
        if not candidate:
            return ""

        match = self.URL_SCHEME.match(candidate)
        if match is None:
            if candidate.startswith(("/", "#", "?")):
                return candidate
            candidate = f"http://{candidate}"
        elif match.group(1).lower() not in self.config.url_protocols:
            return ""

        return candidate

    # -------------------------------------------------------------------------
    # Numbers
    # -------------------------------------------------------------------------

    def integer(self, value: Any) -> int:
        """Leading integer of the value, 0 if there is none."""
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value == value and abs(value) != float("inf") else 0
        if isinstance(value, (list, tuple, dict)):
            return 1 if value else 0

        match = self.LEADING_INT.match(str(value))
        return int(match.group(1)) if match else 0

    def unsigned_integer(self, value: Any) -> int:
        return abs(self.integer(value))

    def float_num(self, value: Any) -> float:
        """Decimal number from the digits, sign and point characters."""
        if isinstance(value, (bool, int, float)):
            return float(value)

        digits = re.sub(r"[^0-9+\-.]", "", str(value))
        match = self.LEADING_FLOAT.match(digits)
        return float(match.group(1)) if match else 0.0

    def boolean(self, value: Any) -> bool:
        """True only for the usual "on" spellings."""
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in self.TRUE_STRINGS

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    def slug(self, value: Any) -> str:
        """
        URL slug.

        Example:
            >>> Sanitizer().slug("Héllo, Wörld!")
            'hello-world'
        """
        text = self.TAGS.sub("", str(value))
        text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
        text = re.sub(r"[^a-z0-9]+", "-", text.lower())
        return text.strip("-")

    def key(self, value: Any) -> str:
        """Lowercase identifier of [a-z0-9_-]."""
        return self.KEY_INVALID.sub("", str(value).lower())


# Global sanitizer instance
_sanitizer: Optional[Sanitizer] = None


def get_sanitizer() -> Sanitizer:
    """Get the process-wide sanitizer, built from the global config."""
    global _sanitizer
    if _sanitizer is None:
        _sanitizer = Sanitizer(SanitizerConfig.from_config(get_config()))
    return _sanitizer


def configure_sanitizer(config: Optional[Config] = None) -> Sanitizer:
    """Rebuild the process-wide sanitizer from configuration ("sanitizer.*" keys)."""
    global _sanitizer
    _sanitizer = Sanitizer(SanitizerConfig.from_config(config or get_config()))
    return _sanitizer


def sanitize(value: Any, transform: str = DEFAULT_TRANSFORM) -> Any:
    """Apply one transform with the global sanitizer."""
    return get_sanitizer().apply(value, transform)


def sanitize_input(data: Mapping[str, Any], mapping: Mapping[str, str]) -> Dict[str, Any]:
    """Sanitize a whole input mapping with the global sanitizer."""
    return get_sanitizer().apply_all(data, mapping)
