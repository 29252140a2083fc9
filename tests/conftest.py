"""
Shared test fixtures and fakes for gitlogue tests.

This module provides:
- Commit factories (lines, file changes, commits)
- A scripted in-memory commit source
- A manual clock for driving the session loop
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from gitlogue.engine import PlaybackEngine
from gitlogue.errors import CommitNotFoundError, CommitsExhaustedError, EmptyWorkingTreeError
from gitlogue.logging import LogContext, _current_context
from gitlogue.models import ChangeStatus, CommitMetadata, DiffLine, FileChange
from gitlogue.speed import SpeedRuleSet

# =============================================================================
# Commit Factories
# =============================================================================


def make_file(
    path: str = "src/app.py",
    lines: Sequence[str] = ("+a", "+b", "+c"),
    status: ChangeStatus = ChangeStatus.MODIFIED,
) -> FileChange:
    """Build a FileChange from diff-marked strings ("+x", "-x", " x")."""
    parsed = []
    for raw in lines:
        marker, text = raw[:1], raw[1:]
        if marker == "+":
            parsed.append(DiffLine.added(text))
        elif marker == "-":
            parsed.append(DiffLine.removed(text))
        else:
            parsed.append(DiffLine.context(text))
    return FileChange(path, tuple(parsed), status)


def make_commit(
    id: str = "abc1234def5678",
    summary: str = "Add feature",
    files: Sequence[FileChange] | None = None,
    author: str | None = "Ada",
) -> CommitMetadata:
    """Create a CommitMetadata with sensible defaults."""
    if files is None:
        files = (make_file(),)
    return CommitMetadata(id=id, summary=summary, files=tuple(files), author=author)


def make_two_file_commit(id: str = "two0000files") -> CommitMetadata:
    """Two files with three and two lines."""
    return make_commit(
        id=id,
        summary="",
        files=(
            make_file("a.py", ("+one", "+two", "+three")),
            make_file("b.py", ("-four", "+five")),
        ),
    )


# =============================================================================
# Fake Commit Source
# =============================================================================


@dataclass
class FakeCommitSource:
    """In-memory commit source that records every call."""

    commits: list[CommitMetadata] = field(default_factory=list)
    working_tree: CommitMetadata | None = None
    missing: set[str] = field(default_factory=set)

    calls: list[str] = field(default_factory=list)
    reset_count: int = 0
    _index: int = 0

    def _next(self, name: str) -> CommitMetadata:
        self.calls.append(name)
        if self._index >= len(self.commits):
            raise CommitsExhaustedError()
        commit = self.commits[self._index]
        self._index += 1
        return commit

    def get_commit(self, spec: str) -> CommitMetadata:
        self.calls.append("get_commit")
        if spec in self.missing:
            raise CommitNotFoundError(spec=spec)
        for commit in self.commits:
            if commit.id.startswith(spec):
                return commit
        raise CommitNotFoundError(spec=spec)

    def random_commit(self) -> CommitMetadata:
        return self._next("random")

    def next_asc_commit(self) -> CommitMetadata:
        return self._next("asc")

    def next_desc_commit(self) -> CommitMetadata:
        return self._next("desc")

    def random_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._next(f"random_range:{commit_range}")

    def next_asc_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._next(f"asc_range:{commit_range}")

    def next_desc_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._next(f"desc_range:{commit_range}")

    def get_working_tree_diff(self, mode: str) -> CommitMetadata:
        self.calls.append(f"working_tree:{mode}")
        if self.working_tree is None:
            raise EmptyWorkingTreeError()
        return self.working_tree

    def reset_index(self) -> None:
        self.reset_count += 1
        self._index = 0


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def speed() -> SpeedRuleSet:
    return SpeedRuleSet(base_ms=10)


@pytest.fixture
def engine(speed) -> PlaybackEngine:
    return PlaybackEngine(speed)


@pytest.fixture
def commit() -> CommitMetadata:
    return make_commit()


@pytest.fixture
def two_file_commit() -> CommitMetadata:
    return make_two_file_commit()


@pytest.fixture
def source() -> FakeCommitSource:
    return FakeCommitSource(
        commits=[
            make_commit(id="1111111aaaa", summary="First"),
            make_commit(id="2222222bbbb", summary="Second"),
            make_commit(id="3333333cccc", summary="Third"),
        ]
    )


@pytest.fixture(autouse=True)
def isolated_log_context():
    """Start every test with an empty shared log context."""
    token = _current_context.set(LogContext())
    yield
    _current_context.reset(token)
