"""
FormRules Rule Parser
=====================

Turns rule specifications into structured tokens.

Grammar:
    spec   := token ("|" token)*
    token  := name (":" params)?
    params := param ("," param)*

Example:
    >>> parse_rules("required|min:3|in:a,b")
    (RuleToken(name='required', parameters=()),
     RuleToken(name='min', parameters=('3',)),
     RuleToken(name='in', parameters=('a', 'b')))

Parameters cannot contain "," or ":" escapes; "regex:/a,b/" is split
into two parameters.

Blank tokens ("a||b") are skipped. A token with no name (":5") is kept
and fails as an unknown rule when evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from formrules.validation.rules import Rule

RULE_DELIMITER = "|"
PARAMETER_DELIMITER = ":"
PARAMETER_SEPARATOR = ","

NULLABLE = "nullable"


@dataclass(frozen=True)
class RuleToken:
    """
    One ``name[:params]`` unit of a rule specification.

    ``rule`` is set when the specification listed a Rule instance
    directly; such tokens are evaluated by that instance instead of
    being looked up by name.
    """

    name: str
    parameters: Tuple[str, ...] = ()
    rule: Optional["Rule"] = None

    @property
    def is_nullable(self) -> bool:
        return self.name == NULLABLE and self.rule is None

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}{PARAMETER_DELIMITER}{PARAMETER_SEPARATOR.join(self.parameters)}"


RuleSpecInput = Union[str, Sequence[Union[str, RuleToken, "Rule"]], RuleToken, "Rule"]


@lru_cache(maxsize=512)
def parse_rule(text: str) -> RuleToken:
    """
    Parse a single rule token.

    The name is everything before the first ":"; the rest is split
    on "," into parameters.
    """
    text = text.strip()
    if PARAMETER_DELIMITER not in text:
        return RuleToken(name=text)

    name, param_string = text.split(PARAMETER_DELIMITER, 1)
    return RuleToken(
        name=name.strip(),
        parameters=tuple(param_string.split(PARAMETER_SEPARATOR)),
    )


@lru_cache(maxsize=512)
def _parse_texts(texts: Tuple[str, ...]) -> Tuple[RuleToken, ...]:
    tokens = []
    for text in texts:
        if not text.strip():
            continue
        tokens.append(parse_rule(text))
    return tuple(tokens)


def parse_rules(spec: Any) -> Tuple[RuleToken, ...]:
    """
    Parse a field's rule specification into tokens.

    Args:
        spec: A pipe-delimited string, a list/tuple of token strings,
            RuleToken objects or Rule instances, or a single RuleToken
            or Rule.

    Returns:
        Tokens in declaration order.
    """
    from formrules.validation.rules import Rule

    if spec is None:
        return ()

    if isinstance(spec, str):
        return _parse_texts(tuple(spec.split(RULE_DELIMITER)))

    if isinstance(spec, RuleToken):
        return (spec,)

    if isinstance(spec, Rule):
        return (RuleToken(name=spec.name, rule=spec),)

    if isinstance(spec, (list, tuple)):
        if all(isinstance(item, str) for item in spec):
            return _parse_texts(tuple(spec))

        tokens = []
        for item in spec:
            if isinstance(item, str):
                tokens.extend(_parse_texts((item,)))
            elif isinstance(item, RuleToken):
                tokens.append(item)
            elif isinstance(item, Rule):
                tokens.append(RuleToken(name=item.name, rule=item))
            else:
                raise TypeError(
                    f"Unsupported rule specification item: {item!r}"
                )
        return tuple(tokens)

    raise TypeError(f"Unsupported rule specification: {spec!r}")


def is_nullable(tokens: Iterable[RuleToken]) -> bool:
    """Check whether a parsed spec carries the nullable gate."""
    return any(token.is_nullable for token in tokens)
