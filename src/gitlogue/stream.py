"""
Typing stream: a reveal cursor over ordered units of lines.

A unit is one file of a commit (or the whole header message). The cursor
moves one character at a time as wall-clock time accumulates, pausing
briefly at each line end. Leftover time is carried between calls so the
pacing does not drift with the frame rate.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

from .models import DiffLine
from .speed import SpeedRuleSet


@dataclass(frozen=True, order=True)
class StreamPosition:
    """Where the reveal cursor sits: (file, line, character)."""

    file_index: int = 0
    line_index: int = 0
    char_index: int = 0


class TypingStream:
    """Reveal cursor over *units* paced by a SpeedRuleSet."""

    def __init__(
        self,
        units: Sequence[Sequence[DiffLine]],
        speed: SpeedRuleSet,
        line_pause_ms: float = 0.0,
    ):
        if line_pause_ms < 0:
            raise ValueError("line_pause_ms cannot be negative")
        self._units: tuple[tuple[DiffLine, ...], ...] = tuple(tuple(unit) for unit in units)
        self._speed = speed
        self._line_pause_ms = line_pause_ms
        self._accumulated_ms = 0.0
        self._position = StreamPosition(self._skip_empty(0), 0, 0)

    @classmethod
    def empty(cls, speed: SpeedRuleSet) -> TypingStream:
        return cls((), speed)

    # ------------------------------------------------------------------ state

    @property
    def position(self) -> StreamPosition:
        return self._position

    @property
    def accumulated_ms(self) -> float:
        return self._accumulated_ms

    @property
    def terminal_position(self) -> StreamPosition:
        return StreamPosition(len(self._units), 0, 0)

    def is_finished(self) -> bool:
        return self._position.file_index >= len(self._units)

    @property
    def display_index(self) -> int | None:
        """Unit shown to the reader; the last one once everything is revealed."""
        if not self._units:
            return None
        return min(self._position.file_index, len(self._units) - 1)

    # ---------------------------------------------------------------- advance

    def advance(self, elapsed_ms: float) -> bool:
        """Consume *elapsed_ms* of wall-clock time.

        Returns True if at least one more character (or line break) was revealed.
        """
        if self.is_finished():
            return False

        self._accumulated_ms += max(elapsed_ms, 0.0)
        revealed = False

        while not self.is_finished():
            line = self._current_line()
            if self._position.char_index < len(line.text):
                interval = self._speed.resolve(line)
                if self._accumulated_ms < interval:
                    break
                self._accumulated_ms -= interval
                self._position = replace(self._position, char_index=self._position.char_index + 1)
            else:
                if self._accumulated_ms < self._line_pause_ms:
                    break
                self._accumulated_ms -= self._line_pause_ms
                self._position = self.next_line_start()
            revealed = True

        if self.is_finished():
            self._accumulated_ms = 0.0
        return revealed

    def next_line_start(self) -> StreamPosition:
        """Start of the line after the cursor; crosses unit boundaries."""
        if self.is_finished():
            return self.terminal_position
        pos = self._position
        if pos.line_index + 1 < len(self._units[pos.file_index]):
            return StreamPosition(pos.file_index, pos.line_index + 1, 0)
        return StreamPosition(self._skip_empty(pos.file_index + 1), 0, 0)

    def next_unit_start(self) -> StreamPosition:
        """Start of the next non-empty unit, or the terminal position."""
        if self.is_finished():
            return self.terminal_position
        return StreamPosition(self._skip_empty(self._position.file_index + 1), 0, 0)

    def jump_to(self, position: StreamPosition) -> None:
        """Place the cursor directly. Partial-character progress is discarded."""
        self._validate(position)
        self._position = position
        self._accumulated_ms = 0.0

    def reveal_all(self) -> None:
        self.jump_to(self.terminal_position)

    # ----------------------------------------------------------------- reading

    def revealed_lines(self) -> list[tuple[DiffLine, str]]:
        """Visible (line, text) pairs of the displayed unit."""
        index = self.display_index
        if index is None:
            return []
        lines = self._units[index]
        if self.is_finished():
            return [(line, line.text) for line in lines]

        pos = self._position
        visible = [(line, line.text) for line in lines[: pos.line_index]]
        current = lines[pos.line_index]
        visible.append((current, current.text[: pos.char_index]))
        return visible

    def current_text(self) -> str:
        """Revealed prefix of the displayed unit."""
        return "\n".join(text for _, text in self.revealed_lines())

    # ---------------------------------------------------------------- helpers

    def _current_line(self) -> DiffLine:
        pos = self._position
        return self._units[pos.file_index][pos.line_index]

    def _skip_empty(self, index: int) -> int:
        while index < len(self._units) and not self._units[index]:
            index += 1
        return index

    def _validate(self, position: StreamPosition) -> None:
        if position == self.terminal_position:
            return
        if not 0 <= position.file_index < len(self._units):
            raise ValueError(f"file_index out of range: {position}")
        lines = self._units[position.file_index]
        if not 0 <= position.line_index < len(lines):
            raise ValueError(f"line_index out of range: {position}")
        if not 0 <= position.char_index <= len(lines[position.line_index].text):
            raise ValueError(f"char_index out of range: {position}")

    def __repr__(self) -> str:
        return f"TypingStream(units={len(self._units)}, position={self._position})"


__all__ = ["StreamPosition", "TypingStream"]
