"""
Commit data handed from a commit source to the playback engine.

All types are immutable; the engine owns a loaded commit until the next load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DiffLineKind(str, Enum):
    """Classification of a line within a file change."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"
    BLANK = "blank"


class ChangeStatus(str, Enum):
    """How a file was touched by the commit."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class DiffLine:
    """A single line of a file change."""

    kind: DiffLineKind
    text: str

    def __len__(self) -> int:
        return len(self.text)

    @classmethod
    def context(cls, text: str) -> DiffLine:
        return cls(DiffLineKind.BLANK if not text.strip() else DiffLineKind.CONTEXT, text)

    @classmethod
    def added(cls, text: str) -> DiffLine:
        return cls(DiffLineKind.BLANK if not text.strip() else DiffLineKind.ADDED, text)

    @classmethod
    def removed(cls, text: str) -> DiffLine:
        return cls(DiffLineKind.BLANK if not text.strip() else DiffLineKind.REMOVED, text)


@dataclass(frozen=True)
class FileChange:
    """A path and the ordered lines shown for it."""

    path: str
    lines: tuple[DiffLine, ...] = ()
    status: ChangeStatus = ChangeStatus.MODIFIED
    old_path: str | None = None  # set on renames

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.kind == DiffLineKind.ADDED)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.kind == DiffLineKind.REMOVED)


@dataclass(frozen=True)
class CommitMetadata:
    """An identifier, a summary and the file changes of one commit."""

    id: str
    summary: str
    files: tuple[FileChange, ...] = ()
    author: str | None = None
    date: str | None = None
    extra: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def short_id(self) -> str:
        return self.id[:7]


__all__ = [
    "DiffLineKind",
    "ChangeStatus",
    "DiffLine",
    "FileChange",
    "CommitMetadata",
]
