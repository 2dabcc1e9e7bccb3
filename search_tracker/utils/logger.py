"""
Logging utility with timestamps and structured key/value data.
Provides colourful console output for collector activity.

The in-memory log buffer is stored in a ``contextvars.ContextVar`` so
that collectors running in separate async tasks do not interfere with
each other.  Debug lines are only emitted when ``SEARCH_TRACKER_DEBUG``
is set to ``true``.
"""

from __future__ import annotations

import contextvars
import os
import re
import sys
from datetime import UTC, datetime

# ============================================================================
# Per-context state (isolated via contextvars)
# ============================================================================

_log_buffer_var: contextvars.ContextVar[list[str]] = contextvars.ContextVar("_log_buffer_var")

MAX_BUFFERED_LINES = 1000

_ANSI_PATTERN = re.compile(r"\033\[[0-9;]*m")


def _get_log_buffer() -> list[str]:
    """Return the per-context log buffer, creating it on first access."""
    try:
        return _log_buffer_var.get()
    except LookupError:
        buf: list[str] = []
        _log_buffer_var.set(buf)
        return buf


def get_log_buffer() -> list[str]:
    """Return a copy of the accumulated log lines (ANSI-stripped)."""
    return list(_get_log_buffer())


def clear_log_buffer() -> None:
    """Clear the in-memory log buffer."""
    _get_log_buffer().clear()


def _debug_enabled() -> bool:
    return os.environ.get("SEARCH_TRACKER_DEBUG", "").lower() == "true"


# ============================================================================
# Formatting
# ============================================================================

_RESET = "\033[0m"
_DIM = "\033[2m"

# level -> (colour, tag)
_LEVELS = {
    "info": ("\033[36m", "INFO"),
    "warn": ("\033[33m", "WARN"),
    "error": ("\033[31m", "ERROR"),
    "debug": ("\033[90m", "DEBUG"),
}

MAX_VALUE_LENGTH = 200


def _render(value: object) -> str:
    if isinstance(value, str):
        if len(value) > MAX_VALUE_LENGTH:
            value = value[: MAX_VALUE_LENGTH - 3] + "..."
        return f'"{value}"'
    return str(value)


def _format_line(level: str, context: str, message: str, data: dict[str, object] | None) -> str:
    colour, tag = _LEVELS[level]
    now = datetime.now(UTC)
    stamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
    line = f"{_DIM}{stamp}{_RESET} {colour}{tag:<5}{_RESET} [{context}] {message}"
    if data:
        line += " " + " ".join(f"{key}={_render(value)}" for key, value in data.items())
    return line


# ============================================================================
# Logger
# ============================================================================


class Logger:
    """Structured logger with context prefix."""

    def __init__(self, context: str) -> None:
        self._context = context

    def _log(self, level: str, message: str, data: dict[str, object] | None) -> None:
        line = _format_line(level, self._context, message, data)
        print(line, file=sys.stderr)
        buffer = _get_log_buffer()
        buffer.append(_ANSI_PATTERN.sub("", line))
        if len(buffer) > MAX_BUFFERED_LINES:
            del buffer[: len(buffer) - MAX_BUFFERED_LINES]

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("info", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log only when ``SEARCH_TRACKER_DEBUG=true``."""
        if _debug_enabled():
            self._log("debug", message, data)


def create_logger(context: str) -> Logger:
    """Create a logger for a specific module."""
    return Logger(context)
