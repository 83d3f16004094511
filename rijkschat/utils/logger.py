"""
Logger Utility
==============

Console logging for the chat client.

Every component creates its own ``Logger`` with a short context name so
that the output of one request can be followed across the registry, the
tool invoker, the context assembler and the model backend:

    [2024-05-02T14:03:11] INFO  [Invoker] Calling tool search_artwork
    [2024-05-02T14:03:12] WARN  [Invoker] Tool call returned 500, retry 1/3 in 1.0s

Levels are filtered by the LOG_LEVEL environment variable. Errors go to
stderr, everything else to stdout. Colors are used only when the stream
is a terminal and NO_COLOR is unset, so redirected logs stay plain text.

Usage:
    from rijkschat.utils.logger import Logger

    logger = Logger("Registry")
    logger.info("Discovered tools", {"count": 7})

    child = logger.child("Discovery")
    child.debug("Raw listing received")
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Numeric log levels; messages below the configured level are dropped."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


# Label and ANSI color per level
_STYLES: dict[LogLevel, tuple[str, str]] = {
    LogLevel.DEBUG: ("DEBUG", "\033[36m"),
    LogLevel.INFO: ("INFO", "\033[32m"),
    LogLevel.WARNING: ("WARN", "\033[33m"),
    LogLevel.ERROR: ("ERROR", "\033[31m"),
}
_RESET = "\033[0m"
_DIM = "\033[2m"

_ALIASES = {"WARN": LogLevel.WARNING, "ERR": LogLevel.ERROR}


def parse_level(value: str | None) -> LogLevel:
    """
    Convert a level name into a LogLevel.

    Unknown or empty names fall back to INFO.
    """
    name = (value or "").strip().upper()
    if name in LogLevel.__members__:
        return LogLevel[name]
    return _ALIASES.get(name, LogLevel.INFO)


def _use_color(stream: TextIO) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class Logger:
    """
    A logger bound to a context name.

    The level is read from LOG_LEVEL when the logger is created, so loggers
    created at import time pick up whatever the process environment holds.

    Example:
        logger = Logger("Bridge")
        logger.info("Streaming response")

        stream_logger = logger.child("Stream")
        stream_logger.debug("Token received", {"length": 4})
        # -> [Bridge:Stream] Token received {"length": 4}
    """

    def __init__(self, context: str = "", level: LogLevel | None = None):
        """
        Args:
            context: Prefix printed with every message (e.g. "Invoker")
            level: Explicit minimum level; defaults to LOG_LEVEL
        """
        self.context = context
        self.level = level if level is not None else parse_level(os.getenv("LOG_LEVEL"))

    def child(self, name: str) -> "Logger":
        """Create a logger whose context is nested under this one."""
        return Logger(f"{self.context}:{name}" if self.context else name, level=self.level)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _write(self, level: LogLevel, message: str, data: dict[str, Any] | None) -> None:
        if level < self.level:
            return

        stream = sys.stderr if level >= LogLevel.ERROR else sys.stdout
        label, color = _STYLES[level]
        stamp = datetime.now().isoformat(timespec="seconds")
        prefix = f"[{self.context}] " if self.context else ""
        extra = f" {json.dumps(data, default=str, ensure_ascii=False)}" if data else ""

        if _use_color(stream):
            line = f"{_DIM}[{stamp}]{_RESET} {color}{label:<5}{_RESET} {prefix}{message}{_DIM}{extra}{_RESET}"
        else:
            line = f"[{stamp}] {label:<5} {prefix}{message}{extra}"

        stream.write(line + "\n")
        stream.flush()

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log detail that is only useful while developing (LOG_LEVEL=debug)."""
        self._write(LogLevel.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._write(LogLevel.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a recoverable problem, such as a retried tool call."""
        self._write(LogLevel.WARNING, message, data)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """
        Log a failure.

        Args:
            message: What was being attempted
            error: The exception; its type, message and any remote status
                are appended
        """
        data: dict[str, Any] | None = None
        if error is not None:
            data = {"type": type(error).__name__, "message": str(error)}
            status = getattr(error, "status", None)
            if status is not None:
                data["status"] = status
        self._write(LogLevel.ERROR, message, data)


# Default logger for code that has no component of its own
logger = Logger("RijksChat")
