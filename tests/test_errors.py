"""
Tests for the error taxonomy.
"""
import pytest

from gitlogue.errors import (
    CommitNotFoundError,
    CommitsExhaustedError,
    CommitSourceError,
    ConfigError,
    EmptyWorkingTreeError,
    ErrorCode,
    ErrorContext,
    GitCommandError,
    GitlogueError,
    InvalidSpeedRuleError,
    TerminalError,
)


class TestErrorCodes:
    """Test error code enumeration."""

    def test_error_codes_are_strings(self):
        """Every code carries the ERR_ prefix."""
        for code in ErrorCode:
            assert code.value.startswith("ERR_")

    def test_error_codes_are_unique(self):
        """No two errors share a code."""
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))


class TestGitlogueError:
    """Test the base error."""

    def test_str_includes_code_and_commit(self):
        """String form shows the code and the commit from the context."""
        error = GitlogueError("boom", context=ErrorContext(commit_id="abc1234"))
        assert str(error) == "[ERR_9000] boom (commit=abc1234)"

    def test_overrides(self):
        """Constructor arguments override class defaults."""
        error = GitlogueError("boom", code=ErrorCode.TERMINAL_ERROR, recoverable=True)
        assert error.code == ErrorCode.TERMINAL_ERROR
        assert error.recoverable

    def test_to_dict(self):
        """Serialized form includes type, code, cause and context."""
        cause = OSError("disk")
        error = GitCommandError("git show failed", returncode=128, cause=cause)
        data = error.to_dict()
        assert data["error_type"] == "GitCommandError"
        assert data["code"] == "ERR_1004"
        assert data["cause"] == "disk"
        assert data["context"]["attempt"] == 1


class TestHierarchy:
    """Test subclass relationships and recoverability."""

    @pytest.mark.parametrize(
        "error",
        [CommitsExhaustedError(), EmptyWorkingTreeError(), GitCommandError("x")],
    )
    def test_source_errors_are_recoverable(self, error):
        """Exhaustion and git failures let the session wind down."""
        assert isinstance(error, CommitSourceError)
        assert error.recoverable

    def test_commit_not_found(self):
        """An unknown commit is reported with its spec and is not recoverable."""
        error = CommitNotFoundError(spec="deadbeef")
        assert isinstance(error, CommitSourceError)
        assert error.message == "Commit not found: deadbeef"
        assert error.spec == "deadbeef"
        assert not error.recoverable

    def test_invalid_speed_rule(self):
        """A bad rule is a configuration error quoting the rule."""
        error = InvalidSpeedRuleError(rule="added:fast")
        assert isinstance(error, ConfigError)
        assert error.message == "Invalid speed rule: 'added:fast'"

    def test_terminal_error_is_fatal(self):
        assert not TerminalError("no tty").recoverable
