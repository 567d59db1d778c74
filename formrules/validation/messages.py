"""
FormRules Messages
==================

Error collection and message templating.

MessageBag keeps failures per field in the order they happened.
MessageResolver turns a failed rule into display text:

1. custom message for "field.rule"
2. custom message for "rule"
3. the extension rule's own message
4. the default message for the rule (translated when a translator
   is available), or the generic fallback

Placeholders are then filled in:

- ``:attribute``  the field label ("first_name" → "first name")
- ``:param0``...  rule parameters by position
- ``:values``     all parameters joined with ", "
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
)

import orjson

from formrules.validation.rules import builtin_rules

if TYPE_CHECKING:
    from formrules.i18n.translator import Translator


FALLBACK_MESSAGE = "The :attribute field is invalid."

DEFAULT_MESSAGES: Dict[str, str] = {
    name: rule.message() or FALLBACK_MESSAGE for name, rule in builtin_rules().items()
}
DEFAULT_MESSAGES["nullable"] = ""


class MessageBag:
    """
    Ordered per-field error messages.

    Example:
        bag = MessageBag()
        bag.add("email", "The email field is required.")

        bag.has("email")     # True
        bag.first("email")   # "The email field is required."
        bag.flatten()        # ["The email field is required."]
    """

    def __init__(self, messages: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._messages: Dict[str, List[str]] = {}
        if messages:
            for field_name, field_messages in messages.items():
                for message in field_messages:
                    self.add(field_name, message)

    def add(self, field: str, message: str) -> "MessageBag":
        """Append a message for a field."""
        self._messages.setdefault(field, []).append(message)
        return self

    def has_errors(self) -> bool:
        return bool(self._messages)

    def is_empty(self) -> bool:
        return not self._messages

    def has(self, field: str) -> bool:
        return bool(self._messages.get(field))

    def first(self, field: Optional[str] = None) -> Optional[str]:
        """
        Get the first message.

        Args:
            field: Field name; when omitted, the first message overall
        """
        if field is not None:
            messages = self._messages.get(field)
            return messages[0] if messages else None
        for messages in self._messages.values():
            if messages:
                return messages[0]
        return None

    def get(self, field: str) -> List[str]:
        return list(self._messages.get(field, []))

    def all(self) -> Dict[str, List[str]]:
        return {field: list(messages) for field, messages in self._messages.items()}

    def flatten(self) -> List[str]:
        """All messages, field order then message order."""
        return [message for messages in self._messages.values() for message in messages]

    def count(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def keys(self) -> List[str]:
        return list(self._messages)

    def to_dict(self) -> Dict[str, List[str]]:
        return self.all()

    def to_json(self) -> str:
        return orjson.dumps(self._messages).decode("utf-8")

    def __len__(self) -> int:
        return self.count()

    def __bool__(self) -> bool:
        return self.has_errors()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._messages))

    def __contains__(self, field: Any) -> bool:
        return isinstance(field, str) and self.has(field)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, MessageBag):
            return self._messages == other._messages
        return NotImplemented

    def __repr__(self) -> str:
        return f"MessageBag({self._messages!r})"


class MessageResolver:
    """
    Builds the display text for a failed rule.

    Args:
        messages: Custom messages keyed by "field.rule" or "rule"
        attributes: Display labels keyed by field name
        translator: Translates default (non-custom) templates
        defaults: Default templates keyed by rule name
        fallback: Template for rules without a default
    """

    def __init__(
        self,
        messages: Optional[Mapping[str, str]] = None,
        attributes: Optional[Mapping[str, str]] = None,
        translator: Optional["Translator"] = None,
        defaults: Optional[Mapping[str, str]] = None,
        fallback: str = FALLBACK_MESSAGE,
    ) -> None:
        self.messages = dict(messages or {})
        self.attributes = dict(attributes or {})
        self.translator = translator
        self.defaults = dict(DEFAULT_MESSAGES if defaults is None else defaults)
        self.fallback = fallback

    def resolve(
        self,
        field: str,
        rule: str,
        parameters: Sequence[str] = (),
        extension_message: Optional[str] = None,
    ) -> str:
        """Resolve and fill in the message for a failed rule."""
        template = self.template(field, rule, extension_message)
        return self.replace_placeholders(template, field, parameters)

    def template(
        self,
        field: str,
        rule: str,
        extension_message: Optional[str] = None,
    ) -> str:
        """Pick the message template, before placeholders are filled."""
        key = f"{field}.{rule}"
        if key in self.messages:
            return self.messages[key]

        if rule in self.messages:
            return self.messages[rule]

        if extension_message is not None:
            return extension_message

        message = self.defaults.get(rule) or self.fallback
        if self.translator is not None:
            return self.translator.translate(message)
        return message

    def attribute(self, field: str) -> str:
        """Display label for a field."""
        label = self.attributes.get(field)
        if label is not None:
            return label
        return field.replace("_", " ")

    def replace_placeholders(
        self,
        message: str,
        field: str,
        parameters: Sequence[str],
    ) -> str:
        message = message.replace(":attribute", self.attribute(field))
        message = message.replace(":values", ", ".join(str(p) for p in parameters))

        # Highest index first so ":param1" does not eat ":param10"
        for index in range(len(parameters) - 1, -1, -1):
            message = message.replace(f":param{index}", str(parameters[index]))

        return message
