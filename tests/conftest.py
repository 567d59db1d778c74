"""Shared fixtures for the formrules test suite."""

import io

import pytest

import formrules.security.sanitizer as sanitizer_module
from formrules.utils.logger import configure_logging
from formrules.validation.registry import RuleRegistry, default_registry


@pytest.fixture(autouse=True)
def clean_default_registry():
    """Drop extensions registered on the process-wide registry."""
    default_registry().reset()
    yield
    default_registry().reset()


@pytest.fixture(autouse=True)
def clean_global_sanitizer(monkeypatch):
    """Rebuild the process-wide sanitizer from config in every test."""
    monkeypatch.setattr(sanitizer_module, "_sanitizer", None)


@pytest.fixture
def registry() -> RuleRegistry:
    """An isolated registry with only the built-in rules."""
    return RuleRegistry()


@pytest.fixture
def log_stream():
    """Capture formrules log output at DEBUG level."""
    stream = io.StringIO()
    configure_logging(level="debug", stream=stream)
    yield stream
    configure_logging(level="warning")
