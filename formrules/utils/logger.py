"""
FormRules Logger
================

Structured logging with pluggable handlers.

Loggers carry key=value context that is rendered by the formatter:

    logger = get_logger("formrules.validator")
    logger.debug("Validation finished", fields=3, errors=1)
    # 2024-01-15 10:30:45 [DEBUG] Validation finished fields=3 errors=1
"""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, TextIO, Union

import orjson


class LogLevel(IntEnum):
    """Log levels (same numeric values as the logging module)."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Read a level from a name ("debug") or number."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


@dataclass
class LogRecord:
    """One structured log entry."""

    level: LogLevel
    message: str
    logger_name: str = "formrules"
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "logger": self.logger_name,
            "message": self.message,
        }
        if self.context:
            data["context"] = self.context
        if self.exception is not None:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }
        return data


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2024-01-15 10:30:45 [WARNING] Invalid regex pattern pattern=[a-
    """

    _colors = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    _reset = "\033[0m"

    def __init__(
        self,
        date_format: str = "%Y-%m-%d %H:%M:%S",
        colors: bool = False,
    ) -> None:
        self.date_format = date_format
        self.colors = colors

    def format(self, record: LogRecord) -> str:
        level = record.level.name
        if self.colors:
            level = f"{self._colors.get(record.level, '')}{level}{self._reset}"

        parts = [
            record.timestamp.strftime(self.date_format),
            f"[{level}]",
            record.message,
        ]
        parts.extend(f"{key}={value}" for key, value in record.context.items())
        output = " ".join(parts)

        if record.exception is not None:
            output += "\n" + "".join(
                traceback.format_exception(
                    type(record.exception),
                    record.exception,
                    record.exception.__traceback__,
                )
            )
        return output


class JsonFormatter(LogFormatter):
    """One JSON object per line."""

    def format(self, record: LogRecord) -> str:
        return orjson.dumps(record.to_dict(), default=str).decode("utf-8")


class StreamHandler:
    """Writes formatted records to a stream (stderr by default)."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ) -> None:
        self.stream = stream
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level < self.level:
            return
        stream = self.stream or sys.stderr
        stream.write(self.formatter.format(record) + "\n")
        stream.flush()


class Logger:
    """
    Structured logger.

    Example:
        logger = Logger("formrules")
        logger.add_handler(StreamHandler())

        logger.info("Rule registered", rule="uppercase")

        scoped = logger.with_context(form="SignupRequest")
        scoped.debug("Sanitized input", fields=4)
    """

    def __init__(
        self,
        name: str = "formrules",
        level: LogLevel = LogLevel.INFO,
        handlers: Optional[List[StreamHandler]] = None,
    ) -> None:
        self.name = name
        self.level = level
        self.handlers: List[StreamHandler] = handlers if handlers is not None else []
        self._context: Dict[str, Any] = {}

    def add_handler(self, handler: StreamHandler) -> "Logger":
        self.handlers.append(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Create a logger sharing handlers, with extra context."""
        child = Logger(self.name, self.level, self.handlers)
        child._context = {**self._context, **context}
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            logger_name=self.name,
            context={**self._context, **context},
            exception=exception,
        )
        for handler in self.handlers:
            try:
                handler.handle(record)
            except Exception:
                # A broken handler must not break validation
                traceback.print_exc(file=sys.stderr)

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)

    def critical(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.CRITICAL, message, exception, **context)


# Global logger registry
_loggers: Dict[str, Logger] = {}
_default_level = LogLevel.WARNING
_default_handlers: List[StreamHandler] = [StreamHandler()]


def get_logger(name: str = "formrules") -> Logger:
    """
    Get or create a named logger.

    New loggers share the handlers and level set by configure_logging().
    """
    if name not in _loggers:
        _loggers[name] = Logger(name=name, level=_default_level, handlers=_default_handlers)
    return _loggers[name]


def configure_logging(
    level: Union[str, int, LogLevel] = LogLevel.INFO,
    format: str = "text",
    stream: Optional[TextIO] = None,
    colors: bool = False,
) -> None:
    """
    Configure every formrules logger.

    Args:
        level: Minimum level ("debug", "info", ... or a LogLevel)
        format: "text" or "json"
        stream: Output stream (defaults to stderr)
        colors: ANSI colors for text output
    """
    global _default_level

    formatter: LogFormatter
    if format == "json":
        formatter = JsonFormatter()
    elif format == "text":
        formatter = TextFormatter(colors=colors)
    else:
        raise ValueError(f"Unknown log format: {format!r}")

    _default_level = LogLevel.parse(level)
    _default_handlers[:] = [StreamHandler(stream=stream, formatter=formatter)]

    for logger in _loggers.values():
        logger.level = _default_level
