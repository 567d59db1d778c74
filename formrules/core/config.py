"""
FormRules Configuration
=======================

Layered configuration with dot-notation access.

Loading priority (highest to lowest):
1. Runtime overrides (``config.set(...)``)
2. Environment variables (FORMRULES_*)
3. Mappings added with ``add_source`` / ``load_mapping``
4. Built-in defaults

Environment variables map onto keys by dropping the prefix,
lowercasing, and turning "__" into "." so nested keys can keep
underscores:

    FORMRULES_VALIDATION__FALLBACK_MESSAGE  → validation.fallback_message
    FORMRULES_SANITIZER__MAX_STRING_LENGTH  → sanitizer.max_string_length

Example:
    config = Config()
    config.get("sanitizer.max_string_length")   # 10000
    config.set("logging.level", "debug")
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

import orjson

T = TypeVar("T")

ENV_PREFIX = "FORMRULES_"

DEFAULTS: Dict[str, Any] = {
    "validation": {
        "fallback_message": "The :attribute field is invalid.",
        "locale": None,
        "locale_dir": None,
        "gettext_domain": "formrules",
    },
    "sanitizer": {
        "max_string_length": 10000,
        "allowed_tags": None,
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
}


@dataclass
class ConfigSource:
    """A named layer of configuration with a priority."""

    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Configuration container.

    Args:
        data: Initial values (priority 10, above defaults)
        load_env: Read FORMRULES_* environment variables
        environ: Environment mapping (``os.environ`` by default)
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        load_env: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._sources: List[ConfigSource] = []
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        self.add_source("defaults", copy.deepcopy(DEFAULTS), priority=0)
        if data:
            self.add_source("app", dict(data), priority=10)
        if load_env:
            self.load_env(environ)

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def add_source(self, name: str, data: Dict[str, Any], priority: int = 0) -> None:
        """Add a configuration layer."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True

    def load_mapping(self, data: Mapping[str, Any], name: str = "mapping") -> "Config":
        """Add a mapping layer, with flat dotted keys allowed."""
        self.add_source(name, _unflatten(dict(data)), priority=20)
        return self

    def load_env(self, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Load FORMRULES_* overrides from the environment."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            config_key = key[len(ENV_PREFIX):].lower().replace("__", ".")
            overrides[config_key] = _parse_env_value(value)

        if overrides:
            self.add_source("env", _unflatten(overrides), priority=100)
        return self

    def _merge(self) -> Dict[str, Any]:
        if self._dirty:
            merged: Dict[str, Any] = {}
            for source in sorted(self._sources, key=lambda s: s.priority):
                _deep_merge(merged, copy.deepcopy(source.data))
            self._merged = merged
            self._dirty = False
        return self._merged

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def get(self, key: str, default: T = None) -> Union[Any, T]:
        """
        Get a value using dot notation.

        Args:
            key: Configuration key (e.g., "logging.level")
            default: Returned when the key is missing or None
        """
        current: Any = self._merge()
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return default if current is None else current

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        return str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "on")
        return bool(value)

    def get_list(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        """Get a list; comma-separated strings are split."""
        value = self.get(key)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple, set)):
            return list(value)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [value]

    def set(self, key: str, value: Any) -> None:
        """Set a runtime value (highest priority)."""
        runtime = next((s for s in self._sources if s.name == "runtime"), None)
        if runtime is None:
            runtime = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime)

        parts = key.split(".")
        current = runtime.data
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
        self._dirty = True

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get all values under a prefix."""
        value = self.get(prefix)
        return dict(value) if isinstance(value, dict) else {}

    def all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._merge())

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.has(key)


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable to bool, int, float, JSON or str."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.startswith(("{", "[")):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            pass

    return value


def _unflatten(flat: Dict[str, Any]) -> Dict[str, Any]:
    """Convert dot-notation keys to a nested dict."""
    result: Dict[str, Any] = {}
    for key, value in flat.items():
        parts = key.split(".")
        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        if isinstance(value, dict) and isinstance(current.get(parts[-1]), dict):
            _deep_merge(current[parts[-1]], value)
        else:
            current[parts[-1]] = value
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the process-wide configuration."""
    global _config
    if _config is None:
        _config = Config()
    return _config
