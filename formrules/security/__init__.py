"""
FormRules Security Module
=========================

Input sanitization applied before validation.
"""

from formrules.security.sanitizer import (
    Sanitizer,
    SanitizerConfig,
    configure_sanitizer,
    get_sanitizer,
    sanitize,
    sanitize_input,
)

__all__ = [
    "Sanitizer",
    "SanitizerConfig",
    "configure_sanitizer",
    "get_sanitizer",
    "sanitize",
    "sanitize_input",
]
