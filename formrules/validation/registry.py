"""
FormRules Rule Registry
=======================

Name → rule lookup for the validation engine.

A registry holds two tables:

- the built-in rules (fixed when the registry is created)
- extensions registered at runtime

Extensions are looked up first, so registering an extension named
"email" replaces the built-in email rule for every validator using
that registry.

One process-wide registry backs ``Validator.extend()``. Applications
that want isolation (tests, multi-tenant hosts) create their own and
pass it to ``Validator(..., registry=...)``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from formrules.utils.logger import get_logger
from formrules.validation.rules import CallableRule, Rule, builtin_rules

logger = get_logger("formrules.registry")

RuleLike = Union[Rule, Callable[..., bool]]


class RuleRegistry:
    """
    Table of named rules.

    Example:
        registry = RuleRegistry()
        registry.register("uppercase", UppercaseRule())

        rule, is_extension = registry.resolve("uppercase")
    """

    def __init__(self, builtins: Optional[Dict[str, Rule]] = None) -> None:
        self._builtins: Dict[str, Rule] = dict(builtins) if builtins is not None else builtin_rules()
        self._extensions: Dict[str, Rule] = {}

    def register(
        self,
        name: str,
        rule: RuleLike,
        message: Optional[str] = None,
    ) -> "RuleRegistry":
        """
        Register an extension rule.

        Args:
            name: Rule name used in rule strings
            rule: Rule instance or a callable
                ``(field, value, parameters, data) -> bool``
            message: Message template for callables

        Returns:
            Self for chaining
        """
        if not name:
            raise ValueError("Rule name must not be empty")

        if not isinstance(rule, Rule):
            if not callable(rule):
                raise TypeError(f"Rule '{name}' must be a Rule or a callable")
            rule = CallableRule(rule, template=message, name=name)

        if name in self._extensions:
            logger.debug("Replacing extension rule", rule=name)
        elif name in self._builtins:
            logger.debug("Extension shadows built-in rule", rule=name)
        else:
            logger.debug("Registered extension rule", rule=name)

        self._extensions[name] = rule
        return self

    def unregister(self, name: str) -> None:
        """Remove an extension (built-ins cannot be removed)."""
        self._extensions.pop(name, None)

    def reset(self) -> None:
        """Remove every extension."""
        self._extensions.clear()

    def extension(self, name: str) -> Optional[Rule]:
        return self._extensions.get(name)

    def builtin(self, name: str) -> Optional[Rule]:
        return self._builtins.get(name)

    def resolve(self, name: str) -> Optional[Tuple[Rule, bool]]:
        """
        Find the rule for a name.

        Returns:
            ``(rule, is_extension)`` or None when the name is unknown
        """
        rule = self._extensions.get(name)
        if rule is not None:
            return rule, True
        rule = self._builtins.get(name)
        if rule is not None:
            return rule, False
        return None

    def has(self, name: str) -> bool:
        return name in self._extensions or name in self._builtins

    def names(self) -> List[str]:
        """All known rule names, extensions first."""
        names = list(self._extensions)
        names.extend(name for name in self._builtins if name not in self._extensions)
        return names

    def extensions(self) -> Dict[str, Rule]:
        return dict(self._extensions)

    def copy(self) -> "RuleRegistry":
        """Independent registry with the same built-ins and extensions."""
        clone = RuleRegistry(self._builtins)
        clone._extensions = dict(self._extensions)
        return clone

    def __contains__(self, name: Any) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self.names())


_default_registry: Optional[RuleRegistry] = None


def default_registry() -> RuleRegistry:
    """Get the process-wide registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = RuleRegistry()
    return _default_registry


def extend(name: str, rule: RuleLike, message: Optional[str] = None) -> None:
    """Register an extension rule on the process-wide registry."""
    default_registry().register(name, rule, message)
