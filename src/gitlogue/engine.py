"""
Playback engine for commit replay.

This module provides:
- PlaybackEngine: typing animation over a commit's header and body
- StepGranularity: the two manual scrub sizes (line, change)
- Checkpoint: saved cursor enabling exact undo of one manual step

Timed vs forced advancement
---------------------------
tick() advances the active stream by wall-clock time. manual_step() jumps
the body cursor to the next line or file, bypassing timing, after saving
the pre-step cursor on the stack for its granularity. Restoring pops that
stack, so N steps followed by N restores of the same granularity land
exactly where scrubbing started.

The header (commit summary) is typed first and the body (file diffs)
second; the two never advance concurrently.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum

from .logging import get_logger
from .models import CommitMetadata, DiffLine
from .speed import SpeedRuleSet
from .stream import StreamPosition, TypingStream

logger = get_logger("gitlogue.engine")

DEFAULT_MAX_CHECKPOINTS = 10_000


class StepGranularity(str, Enum):
    """Manual step sizes."""

    LINE = "line"
    CHANGE = "change"


class ActiveStream(str, Enum):
    """Which stream tick() currently drives."""

    HEADER = "header"
    BODY = "body"


@dataclass(frozen=True)
class Checkpoint:
    """Body cursor captured right before a manual forward step."""

    granularity: StepGranularity
    position: StreamPosition


class PlaybackEngine:
    """Typing/reveal state machine for one loaded commit.

    Example:
        ```python
        engine = PlaybackEngine(SpeedRuleSet(base_ms=30))
        engine.load(commit)

        while not engine.is_finished():
            if engine.tick(clock_ms()):
                redraw(engine.body_lines())
        ```
    """

    def __init__(
        self,
        speed: SpeedRuleSet,
        line_pause_ms: float | None = None,
        max_checkpoints: int = DEFAULT_MAX_CHECKPOINTS,
    ):
        if max_checkpoints < 1:
            raise ValueError("max_checkpoints must be at least 1")
        self._speed = speed
        self._line_pause_ms = speed.base_ms if line_pause_ms is None else line_pause_ms
        self._max_checkpoints = max_checkpoints

        self._metadata: CommitMetadata | None = None
        self._header = TypingStream.empty(speed)
        self._body = TypingStream.empty(speed)
        self._active = ActiveStream.BODY
        self._checkpoints: dict[StepGranularity, deque[Checkpoint]] = {
            granularity: deque(maxlen=max_checkpoints) for granularity in StepGranularity
        }

        self._paused = False
        self._last_tick_ms: float | None = None

        self._viewport_height = 0
        self._content_width = 0

    # ------------------------------------------------------------------ load

    def load(self, metadata: CommitMetadata) -> None:
        """Replace the current commit and restart both streams."""
        header_lines = [DiffLine.context(line) for line in metadata.summary.splitlines()]
        self._metadata = metadata
        self._header = TypingStream([header_lines], self._speed, self._line_pause_ms)
        self._body = TypingStream(
            [change.lines for change in metadata.files],
            self._speed,
            self._line_pause_ms,
        )
        self._active = ActiveStream.BODY if self._header.is_finished() else ActiveStream.HEADER
        for stack in self._checkpoints.values():
            stack.clear()
        self._paused = False
        self._last_tick_ms = None

        logger.debug(
            "Loaded commit",
            commit_id=metadata.id,
            files=len(metadata.files),
        )

    # ------------------------------------------------------------------ tick

    def tick(self, now_ms: float) -> bool:
        """Advance the active stream by the time since the previous tick.

        Returns True when something visible changed.
        """
        if self._paused or (self._header.is_finished() and self._body.is_finished()):
            return False

        elapsed = 0.0 if self._last_tick_ms is None else now_ms - self._last_tick_ms
        self._last_tick_ms = now_ms

        if self._active == ActiveStream.HEADER:
            revealed = self._header.advance(elapsed)
            if self._header.is_finished():
                self._active = ActiveStream.BODY
                return True
            return revealed

        return self._body.advance(elapsed)

    def pause(self) -> None:
        self._paused = True
        self._last_tick_ms = None

    def resume(self) -> None:
        # The first tick after resuming measures from itself, so paused time is dropped.
        self._paused = False
        self._last_tick_ms = None

    @property
    def is_paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------- scrubbing

    def manual_step(self, granularity: StepGranularity) -> bool:
        """Jump the body to the next line or file, saving a checkpoint first.

        Returns False if the body is already fully revealed.
        """
        if self._body.is_finished():
            return False

        if self._active == ActiveStream.HEADER:
            self._header.reveal_all()
            self._active = ActiveStream.BODY

        self._checkpoints[granularity].append(Checkpoint(granularity, self._body.position))
        if granularity == StepGranularity.LINE:
            target = self._body.next_line_start()
        else:
            target = self._body.next_unit_start()
        self._body.jump_to(target)
        return True

    def restore_checkpoint(self, granularity: StepGranularity) -> bool:
        """Undo the latest manual step of *granularity*. False if none is recorded."""
        stack = self._checkpoints[granularity]
        if not stack:
            return False
        checkpoint = stack.pop()
        self._body.jump_to(checkpoint.position)
        return True

    def restore_line_checkpoint(self) -> bool:
        return self.restore_checkpoint(StepGranularity.LINE)

    def restore_change_checkpoint(self) -> bool:
        return self.restore_checkpoint(StepGranularity.CHANGE)

    def checkpoint_depth(self, granularity: StepGranularity) -> int:
        return len(self._checkpoints[granularity])

    # --------------------------------------------------------------- queries

    def is_finished(self) -> bool:
        return self._body.is_finished()

    @property
    def base_speed_ms(self) -> float:
        return self._speed.base_ms

    @property
    def active_stream(self) -> ActiveStream:
        return self._active

    def current_metadata(self) -> CommitMetadata | None:
        return self._metadata

    def current_file_index(self) -> int | None:
        if self._active == ActiveStream.HEADER:
            return None
        return self._body.display_index

    def cursor(self) -> StreamPosition:
        return self._body.position

    def header_text(self) -> str:
        return self._header.current_text()

    def body_text(self) -> str:
        return self._body.current_text()

    def body_lines(self) -> list[tuple[DiffLine, str]]:
        if self._active == ActiveStream.HEADER:
            return []
        return self._body.revealed_lines()

    # -------------------------------------------------------------- viewport

    def set_viewport_height(self, height: int) -> None:
        self._viewport_height = max(height, 0)

    def set_content_width(self, width: int) -> None:
        self._content_width = max(width, 0)

    @property
    def viewport_height(self) -> int:
        return self._viewport_height

    @property
    def content_width(self) -> int:
        return self._content_width

    def scroll_offset(self) -> int:
        """First body line to draw so the cursor line stays visible."""
        if self._viewport_height <= 0:
            return 0
        cursor_line = len(self.body_lines()) - 1
        return max(0, cursor_line - self._viewport_height + 1)


__all__ = [
    "StepGranularity",
    "ActiveStream",
    "Checkpoint",
    "PlaybackEngine",
    "DEFAULT_MAX_CHECKPOINTS",
]
