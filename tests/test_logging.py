"""Tests for structured logging."""

import json
import logging

import pytest

from gitlogue.errors import CommitNotFoundError
from gitlogue.logging import (
    ROOT_LOGGER_NAME,
    JSONFormatter,
    LogContext,
    TextFormatter,
    configure_logging,
    generate_session_id,
    get_logger,
    timed,
)


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "gitlogue.log"
    configure_logging(level="DEBUG", json_output=True, log_file=path)
    yield path
    reset_logging()


def reset_logging():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def read_records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestLogContext:
    """Test context merging."""

    def test_to_dict_skips_none(self):
        """Unset fields are left out of records."""
        assert LogContext(commit_id="abc").to_dict() == {"commit_id": "abc"}

    def test_with_update_keeps_unknown_fields(self):
        """Keywords other than the named fields are kept in extra."""
        context = LogContext(session_id="s").with_update(repo_path="/repo", commit_id="c")
        assert context.to_dict() == {"session_id": "s", "commit_id": "c", "repo_path": "/repo"}


class TestStructuredLogger:
    """Test emitted records."""

    def test_fields_are_included(self, log_file):
        """Keyword arguments become top-level fields of the record."""
        get_logger("gitlogue.test").info("Loaded", files=3)
        record = read_records(log_file)[-1]
        assert record["message"] == "Loaded"
        assert record["files"] == 3
        assert record["level"] == "INFO"
        assert record["logger"] == "gitlogue.test"

    def test_session_context_is_scoped(self, log_file):
        """Context fields apply inside the block only."""
        logger = get_logger("gitlogue.test")
        with logger.session_context(session_id="session_x", repo_path="/repo"):
            logger.info("inside")
        logger.info("outside")
        inside, outside = read_records(log_file)[-2:]
        assert inside["session_id"] == "session_x"
        assert inside["repo_path"] == "/repo"
        assert "session_id" not in outside

    def test_context_is_shared_across_loggers(self, log_file):
        """A session opened on one logger tags records from every other logger."""
        with get_logger("gitlogue.cli").session_context(session_id="session_y"):
            get_logger("gitlogue.controller").info("from controller")
        record = read_records(log_file)[-1]
        assert record["session_id"] == "session_y"
        assert record["logger"] == "gitlogue.controller"

    def test_set_context_is_visible_everywhere(self, log_file):
        get_logger("gitlogue.controller").set_context(commit_id="abc1234")
        get_logger("gitlogue.ui").info("drawn")
        assert read_records(log_file)[-1]["commit_id"] == "abc1234"
        assert get_logger("gitlogue.source").context.commit_id == "abc1234"

    def test_set_context_inside_session_is_undone(self, log_file):
        """Leaving a session drops context set inside it."""
        logger = get_logger("gitlogue.test")
        with logger.session_context(session_id="session_z"):
            logger.set_context(commit_id="abc1234")
        assert logger.context.commit_id is None
        assert logger.context.session_id is None

    def test_log_transition(self, log_file):
        """Transitions are logged with source, target and reason."""
        get_logger("gitlogue.test").log_transition("playing", "menu", "menu opened")
        record = read_records(log_file)[-1]
        assert record["event_type"] == "transition"
        assert (record["from"], record["to"], record["reason"]) == ("playing", "menu", "menu opened")

    def test_log_error(self, log_file):
        """Coded errors carry their code and recoverability."""
        get_logger("gitlogue.test").log_error(CommitNotFoundError(spec="abc"))
        record = read_records(log_file)[-1]
        assert record["level"] == "ERROR"
        assert record["error_code"] == "ERR_1001"
        assert record["recoverable"] is False

    def test_level_filtering(self, tmp_path):
        """Records below the configured level are dropped."""
        path = tmp_path / "warn.log"
        configure_logging(level="WARNING", json_output=True, log_file=path)
        try:
            get_logger("gitlogue.test").info("hidden")
            get_logger("gitlogue.test").warning("shown")
            assert [r["message"] for r in read_records(path)] == ["shown"]
        finally:
            reset_logging()


class TestFormatters:
    """Test formatter output."""

    def make_record(self, message):
        return logging.LogRecord("gitlogue.x", logging.INFO, __file__, 1, message, None, None)

    def test_text_formatter_expands_fields(self):
        """Structured fields are written as key=value pairs."""
        line = TextFormatter(color=False).format(self.make_record(json.dumps({"message": "hi", "n": 1})))
        assert line.endswith("gitlogue.x: hi n=1")

    def test_json_formatter_passes_plain_messages(self):
        """Non-JSON messages are wrapped as message fields."""
        data = json.loads(JSONFormatter().format(self.make_record("plain")))
        assert data["message"] == "plain"


class TestUtilities:
    """Test helpers."""

    def test_session_id(self):
        """Session ids are prefixed and unique."""
        assert generate_session_id().startswith("session_")
        assert generate_session_id() != generate_session_id()

    def test_timed(self):
        """timed() stops the timer when the block exits."""
        with timed() as timer:
            pass
        assert timer.end_time is not None
        assert timer.elapsed_ms >= 0

    def test_get_logger_is_cached(self):
        assert get_logger("gitlogue.same") is get_logger("gitlogue.same")
