"""
Structured Logging for gitlogue.

This module provides:
- Structured JSON or key=value text logging with consistent fields
- Session context correlation (session id, current commit)
- Timing helpers for slow operations such as git queries

The terminal is owned by the playback UI while a session runs, so the
handler installed by configure_logging() writes to a log file when one is
configured and to stderr otherwise.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

ROOT_LOGGER_NAME = "gitlogue"

# =============================================================================
# Log Context
# =============================================================================


@dataclass
class LogContext:
    """Context information attached to log records."""

    session_id: str | None = None
    commit_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = {k: v for k, v in asdict(self).items() if v is not None and k != "extra"}
        d.update(self.extra)
        return d

    def with_update(self, **kwargs) -> LogContext:
        """Create a new context with updated values.

        Keywords other than the named fields land in extra.
        """
        extra = {**self.extra, **kwargs.pop("extra", {})}
        return LogContext(
            session_id=kwargs.pop("session_id", self.session_id),
            commit_id=kwargs.pop("commit_id", self.commit_id),
            extra={**extra, **kwargs},
        )


# One context for every gitlogue logger, so a session id set by the CLI
# shows up in records from the controller, source and UI alike.
_current_context: ContextVar[LogContext] = ContextVar("gitlogue_log_context", default=LogContext())


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """
    Logger with structured output and context tracking.

    Records are emitted as a JSON payload; the formatter installed by
    configure_logging() decides whether it is written as JSON or as text.

    Example:
        ```python
        logger = get_logger("gitlogue.source")

        with logger.session_context(commit_id="abc1234"):
            logger.info("Loaded commit", files=3)
        ```
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.name = name
        self._logger = logging.getLogger(name)

    @property
    def context(self) -> LogContext:
        return _current_context.get()

    def set_context(self, **kwargs) -> None:
        """Update the log context shared by all gitlogue loggers."""
        _current_context.set(_current_context.get().with_update(**kwargs))

    @contextmanager
    def session_context(
        self,
        session_id: str | None = None,
        **kwargs,
    ) -> Iterator[str]:
        """
        Context manager for session correlation.

        Args:
            session_id: Session ID (auto-generated if not provided)
            **kwargs: Additional context fields

        Yields:
            The session ID
        """
        session_id = session_id or generate_session_id()
        token = _current_context.set(
            _current_context.get().with_update(session_id=session_id, **kwargs)
        )
        try:
            yield session_id
        finally:
            _current_context.reset(token)

    def _log(
        self,
        level: int,
        message: str,
        event_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method."""
        if not self._logger.isEnabledFor(level):
            return

        record_data = {
            "message": message,
            **_current_context.get().to_dict(),
        }

        if event_type:
            record_data["event_type"] = event_type

        if data:
            record_data.update(data)

        self._logger.log(level, json.dumps(record_data, default=str))

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, data=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, data=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, data=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, data=kwargs)

    # Typed logging methods

    def log_transition(self, source: str, target: str, reason: str) -> None:
        """Log a modal state change of the session controller."""
        self._log(
            logging.DEBUG,
            f"State {source} -> {target}",
            event_type="transition",
            data={"from": source, "to": target, "reason": reason},
        )

    def log_error(
        self,
        error: Exception,
        message: str | None = None,
        **kwargs,
    ) -> None:
        """Log an error with context."""
        error_data = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            **kwargs,
        }

        # Extract additional info from GitlogueError
        if hasattr(error, "code"):
            error_data["error_code"] = str(error.code.value)
        if hasattr(error, "recoverable"):
            error_data["recoverable"] = error.recoverable
        if hasattr(error, "context") and error.context:
            error_data["error_context"] = error.context.to_dict()

        self._log(
            logging.ERROR,
            message or f"Error: {error}",
            event_type="error",
            data=error_data,
        )


# =============================================================================
# Formatters
# =============================================================================


def _decode(record: logging.LogRecord) -> dict[str, Any]:
    try:
        data = json.loads(record.getMessage())
    except (json.JSONDecodeError, TypeError):
        return {"message": record.getMessage()}
    if not isinstance(data, dict):
        return {"message": record.getMessage()}
    return data


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        log_data.update(_decode(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        color = self.LEVEL_COLORS.get(record.levelname, "") if self.color else ""
        reset = self.RESET if color else ""

        data = _decode(record)
        message = data.pop("message", "")
        extras = " ".join(f"{k}={v}" for k, v in data.items())
        line = f"{timestamp} {color}{record.levelname:8}{reset} {record.name}: {message}"
        if extras:
            line = f"{line} {extras}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# =============================================================================
# Utilities
# =============================================================================


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"session_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Timing Utilities
# =============================================================================


@dataclass
class Timer:
    """Simple timer for measuring durations."""

    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None

    def stop(self) -> float:
        """Stop the timer and return duration in milliseconds."""
        self.end_time = time.perf_counter()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000


@contextmanager
def timed() -> Iterator[Timer]:
    """Context manager for timing operations."""
    timer = Timer()
    try:
        yield timer
    finally:
        timer.stop()


# =============================================================================
# Global Logger
# =============================================================================

_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """Get or create a structured logger."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    log_file: str | Path | None = None,
) -> StructuredLogger:
    """Install the single handler used by every gitlogue logger."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        color = False
    else:
        handler = logging.StreamHandler(sys.stderr)
        color = sys.stderr.isatty()
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter(color=color))

    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))
    root.propagate = False
    return get_logger(ROOT_LOGGER_NAME)


__all__ = [
    "LogContext",
    "StructuredLogger",
    "JSONFormatter",
    "TextFormatter",
    "Timer",
    "timed",
    "generate_session_id",
    "get_logger",
    "configure_logging",
    "ROOT_LOGGER_NAME",
]
