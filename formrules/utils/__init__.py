"""
FormRules Utils Package
=======================

Logging.
"""

from __future__ import annotations

from formrules.utils.logger import (
    JsonFormatter,
    Logger,
    LogLevel,
    StreamHandler,
    TextFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "Logger",
    "LogLevel",
    "StreamHandler",
    "TextFormatter",
    "JsonFormatter",
    "get_logger",
    "configure_logging",
]
