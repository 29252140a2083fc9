"""Session history of commits already shown."""

from __future__ import annotations

from .models import CommitMetadata


class History:
    """Ordered log of displayed commits with a cursor.

    Recording a commit drops every entry after the cursor first, the way
    an undo history does. Navigating with previous()/next() only moves the
    cursor and never records. At most *max_entries* commits are kept; the
    oldest one is dropped when a new commit would exceed the bound.
    """

    def __init__(self, max_entries: int = 1_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: list[CommitMetadata] = []
        self._index: int | None = None

    @property
    def index(self) -> int | None:
        return self._index

    @property
    def entries(self) -> tuple[CommitMetadata, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, commit: CommitMetadata) -> None:
        """Append *commit* after the cursor, truncating stale forward entries."""
        if self._index is not None:
            del self._entries[self._index + 1 :]
        self._entries.append(commit)
        if len(self._entries) > self.max_entries:
            del self._entries[0]
        self._index = len(self._entries) - 1

    def has_previous(self) -> bool:
        return self._index is not None and self._index > 0

    def has_next(self) -> bool:
        return self._index is not None and self._index < len(self._entries) - 1

    def previous(self) -> CommitMetadata | None:
        """Step the cursor back; None if already at the oldest entry."""
        if not self.has_previous():
            return None
        self._index -= 1
        return self._entries[self._index]

    def next(self) -> CommitMetadata | None:
        """Step the cursor forward; None if already at the newest entry."""
        if not self.has_next():
            return None
        self._index += 1
        return self._entries[self._index]


__all__ = ["History"]
