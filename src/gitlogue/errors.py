"""
Error taxonomy for gitlogue.

This module provides a hierarchical exception system with:
- Error codes for programmatic handling
- Recoverable vs fatal classification
- Structured context for debugging
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for gitlogue."""

    # Commit source errors (1xxx)
    SOURCE_ERROR = "ERR_1000"
    COMMIT_NOT_FOUND = "ERR_1001"
    COMMITS_EXHAUSTED = "ERR_1002"
    EMPTY_WORKING_TREE = "ERR_1003"
    GIT_COMMAND_FAILED = "ERR_1004"

    # Configuration errors (2xxx)
    CONFIG_ERROR = "ERR_2000"
    INVALID_SPEED_RULE = "ERR_2001"

    # Terminal errors (3xxx)
    TERMINAL_ERROR = "ERR_3000"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    commit_id: str | None = None
    repo_path: str | None = None
    operation: str | None = None
    attempt: int = 1
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_id": self.commit_id,
            "repo_path": self.repo_path,
            "operation": self.operation,
            "attempt": self.attempt,
            **self.extra,
        }


class GitlogueError(Exception):
    """
    Base exception for all gitlogue errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message
        recoverable: Whether the session can carry on (typically by finishing cleanly)
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        recoverable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.commit_id:
            parts.append(f"(commit={self.context.commit_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Commit Source Errors
# =============================================================================


class CommitSourceError(GitlogueError):
    """Base class for failures reported by a commit source."""

    code = ErrorCode.SOURCE_ERROR
    recoverable = True


class CommitNotFoundError(CommitSourceError):
    """An explicit commit spec did not resolve. Not retried."""

    code = ErrorCode.COMMIT_NOT_FOUND
    recoverable = False

    def __init__(
        self,
        message: str = "Commit not found",
        *,
        spec: str | None = None,
        **kwargs,
    ):
        if spec:
            message = f"Commit not found: {spec}"
        super().__init__(message, **kwargs)
        self.spec = spec


class CommitsExhaustedError(CommitSourceError):
    """The traversal has no further commit to offer."""

    code = ErrorCode.COMMITS_EXHAUSTED

    def __init__(self, message: str = "No more commits", **kwargs):
        super().__init__(message, **kwargs)


class EmptyWorkingTreeError(CommitSourceError):
    """The working tree diff has no changes. Treated like exhaustion."""

    code = ErrorCode.EMPTY_WORKING_TREE

    def __init__(self, message: str = "Working tree has no changes", **kwargs):
        super().__init__(message, **kwargs)


class GitCommandError(CommitSourceError):
    """A git subprocess exited with a non-zero status."""

    code = ErrorCode.GIT_COMMAND_FAILED

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.returncode = returncode
        self.stderr = stderr


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(GitlogueError):
    """Base class for configuration errors."""

    code = ErrorCode.CONFIG_ERROR


class InvalidSpeedRuleError(ConfigError):
    """A speed rule could not be parsed or is out of range."""

    code = ErrorCode.INVALID_SPEED_RULE

    def __init__(
        self,
        message: str = "Invalid speed rule",
        *,
        rule: str | None = None,
        **kwargs,
    ):
        if rule is not None:
            message = f"{message}: {rule!r}"
        super().__init__(message, **kwargs)
        self.rule = rule


# =============================================================================
# Terminal Errors
# =============================================================================


class TerminalError(GitlogueError):
    """Terminal setup or teardown failed. Fatal."""

    code = ErrorCode.TERMINAL_ERROR


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "GitlogueError",
    "CommitSourceError",
    "CommitNotFoundError",
    "CommitsExhaustedError",
    "EmptyWorkingTreeError",
    "GitCommandError",
    "ConfigError",
    "InvalidSpeedRuleError",
    "TerminalError",
]
