"""
Commit sources.

This module provides:
- CommitSource: the protocol the session controller consumes
- GitCommitSource: a source backed by the `git` executable
- parse_unified_diff: unified diff text -> FileChange list

Traversal state (ascending/descending cursors) lives in the source;
reset_index() rewinds it so a looping session can start over.
"""

from __future__ import annotations

import random
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import (
    CommitNotFoundError,
    CommitsExhaustedError,
    CommitSourceError,
    EmptyWorkingTreeError,
    ErrorContext,
    GitCommandError,
)
from .logging import get_logger, timed
from .models import ChangeStatus, CommitMetadata, DiffLine, FileChange

logger = get_logger("gitlogue.source")

TAB_WIDTH = 4

# Fields of the `git show` header, NUL separated
_SHOW_FORMAT = "%H%x00%an%x00%aI%x00%s%x00"

GitRunner = Callable[[Sequence[str]], str]


@runtime_checkable
class CommitSource(Protocol):
    """Supplies commits by id, traversal order, range, or working tree."""

    def get_commit(self, spec: str) -> CommitMetadata: ...

    def random_commit(self) -> CommitMetadata: ...

    def next_asc_commit(self) -> CommitMetadata: ...

    def next_desc_commit(self) -> CommitMetadata: ...

    def random_range_commit(self, commit_range: str) -> CommitMetadata: ...

    def next_asc_range_commit(self, commit_range: str) -> CommitMetadata: ...

    def next_desc_range_commit(self, commit_range: str) -> CommitMetadata: ...

    def get_working_tree_diff(self, mode: str) -> CommitMetadata: ...

    def reset_index(self) -> None: ...


# =============================================================================
# Diff parsing
# =============================================================================


def parse_unified_diff(text: str) -> list[FileChange]:
    """Parse `git diff` / `git show` patch output into file changes.

    Hunk headers and "no newline" markers are dropped; binary files keep
    their path with no lines.
    """
    changes: list[FileChange] = []
    path: str | None = None
    old_path: str | None = None
    status = ChangeStatus.MODIFIED
    lines: list[DiffLine] = []
    in_hunk = False

    def flush() -> None:
        if path is not None:
            changes.append(FileChange(path, tuple(lines), status, old_path))

    for raw in text.splitlines():
        if raw.startswith("diff --git "):
            flush()
            old_path, path = _paths_from_header(raw)
            if old_path == path:
                old_path = None
            status = ChangeStatus.MODIFIED
            lines = []
            in_hunk = False
        elif path is None:
            continue
        elif in_hunk:
            if raw.startswith("@@"):
                continue
            marker, content = raw[:1], raw[1:].expandtabs(TAB_WIDTH)
            if marker == "+":
                lines.append(DiffLine.added(content))
            elif marker == "-":
                lines.append(DiffLine.removed(content))
            elif marker == " " or raw == "":
                lines.append(DiffLine.context(content))
            # "\ No newline at end of file" and anything else is skipped
        elif raw.startswith("@@"):
            in_hunk = True
        elif raw.startswith("new file mode"):
            status = ChangeStatus.ADDED
        elif raw.startswith("deleted file mode"):
            status = ChangeStatus.DELETED
        elif raw.startswith("rename from "):
            old_path = raw[len("rename from "):]
            status = ChangeStatus.RENAMED
        elif raw.startswith("rename to "):
            path = raw[len("rename to "):]
            status = ChangeStatus.RENAMED

    flush()
    return changes


def _paths_from_header(header: str) -> tuple[str, str]:
    # diff --git a/old b/new
    rest = header[len("diff --git "):]
    if rest.startswith("a/") and " b/" in rest:
        old, new = rest[2:].split(" b/", 1)
        return old, new
    parts = rest.split(" ", 1)
    return parts[0], parts[-1]


# =============================================================================
# Git-backed source
# =============================================================================


def run_git(repo_path: Path) -> GitRunner:
    """Build a runner executing git inside *repo_path*."""

    def runner(args: Sequence[str]) -> str:
        command = ["git", "-C", str(repo_path), *args]
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise CommitSourceError(
                "git executable not found",
                context=ErrorContext(repo_path=str(repo_path), operation=args[0]),
                cause=e,
            ) from e
        if proc.returncode != 0:
            raise GitCommandError(
                f"git {args[0]} failed: {proc.stderr.strip()}",
                returncode=proc.returncode,
                stderr=proc.stderr,
                context=ErrorContext(repo_path=str(repo_path), operation=args[0]),
            )
        return proc.stdout

    return runner


class GitCommitSource:
    """Commit source reading a local git repository."""

    def __init__(
        self,
        repo_path: Path | str = ".",
        *,
        runner: GitRunner | None = None,
        rng: random.Random | None = None,
    ):
        self.repo_path = Path(repo_path)
        self._git = runner or run_git(self.repo_path)
        self._rng = rng or random.Random()
        self._revisions: dict[str | None, list[str]] = {}
        self._cursors: dict[tuple[str, str | None], int] = {}

    def verify(self) -> None:
        """Raise GitCommandError unless repo_path is inside a git work tree."""
        self._git(["rev-parse", "--git-dir"])

    # ---------------------------------------------------------- by id

    def get_commit(self, spec: str) -> CommitMetadata:
        try:
            commit_id = self._git(["rev-parse", "--verify", "--quiet", f"{spec}^{{commit}}"]).strip()
        except GitCommandError as e:
            raise CommitNotFoundError(spec=spec, cause=e) from e
        if not commit_id:
            raise CommitNotFoundError(spec=spec)
        return self._load(commit_id)

    # ---------------------------------------------------------- traversal

    def random_commit(self) -> CommitMetadata:
        return self._random(None)

    def next_asc_commit(self) -> CommitMetadata:
        return self._next("asc", None)

    def next_desc_commit(self) -> CommitMetadata:
        return self._next("desc", None)

    def random_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._random(commit_range)

    def next_asc_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._next("asc", commit_range)

    def next_desc_range_commit(self, commit_range: str) -> CommitMetadata:
        return self._next("desc", commit_range)

    def reset_index(self) -> None:
        self._cursors.clear()
        logger.debug("Traversal index reset", repo_path=str(self.repo_path))

    # ---------------------------------------------------------- working tree

    def get_working_tree_diff(self, mode: str) -> CommitMetadata:
        args = {
            "unstaged": ["diff"],
            "staged": ["diff", "--cached"],
            "all": ["diff", "HEAD"],
        }.get(mode)
        if args is None:
            raise ValueError(f"Unknown diff mode: {mode}")

        patch = self._git([*args, "--no-color", "--no-ext-diff", "-M"])
        files = parse_unified_diff(patch)
        if not files:
            raise EmptyWorkingTreeError(context=ErrorContext(repo_path=str(self.repo_path)))
        return CommitMetadata(
            id="working-tree",
            summary=f"Uncommitted changes ({mode})",
            files=tuple(files),
        )

    # ---------------------------------------------------------- helpers

    def _revision_list(self, commit_range: str | None) -> list[str]:
        if commit_range not in self._revisions:
            target = commit_range or "HEAD"
            try:
                output = self._git(["rev-list", "--no-merges", target])
            except GitCommandError as e:
                # An empty repository has no HEAD yet
                if commit_range is None:
                    output = ""
                else:
                    raise CommitNotFoundError(spec=commit_range, cause=e) from e
            self._revisions[commit_range] = [line for line in output.splitlines() if line]
        return self._revisions[commit_range]

    def _random(self, commit_range: str | None) -> CommitMetadata:
        revisions = self._revision_list(commit_range)
        if not revisions:
            raise CommitsExhaustedError("Repository has no commits")
        return self._load(self._rng.choice(revisions))

    def _next(self, order: str, commit_range: str | None) -> CommitMetadata:
        revisions = self._revision_list(commit_range)
        key = (order, commit_range)
        index = self._cursors.get(key, 0)
        if index >= len(revisions):
            raise CommitsExhaustedError(context=ErrorContext(operation=f"next_{order}"))
        self._cursors[key] = index + 1
        # rev-list is newest first
        commit_id = revisions[index] if order == "desc" else revisions[len(revisions) - 1 - index]
        return self._load(commit_id)

    def _load(self, commit_id: str) -> CommitMetadata:
        with timed() as timer:
            output = self._git([
                "show",
                "--no-color",
                "--no-ext-diff",
                "-M",
                f"--format={_SHOW_FORMAT}",
                "--patch",
                commit_id,
            ])
        full_id, author, date, subject, patch = output.split("\x00", 4)
        metadata = CommitMetadata(
            id=full_id.strip(),
            summary=subject,
            files=tuple(parse_unified_diff(patch)),
            author=author or None,
            date=date or None,
        )
        logger.debug(
            "Fetched commit",
            commit_id=metadata.id,
            files=len(metadata.files),
            duration_ms=round(timer.elapsed_ms, 1),
        )
        return metadata


__all__ = [
    "CommitSource",
    "GitCommitSource",
    "GitRunner",
    "parse_unified_diff",
    "run_git",
]
