"""
Session controller: the modal state machine around the playback engine.

One loop iteration polls a key, dispatches it according to the current
mode, ticks the engine, evaluates automatic transitions, and redraws when
something changed. Automatic transitions always run after the key of the
same iteration was handled.

Modes
-----
PLAYING           engine typing the current commit (or paused by the user)
WAITING_FOR_NEXT  body finished, next commit loads at resume_at_ms
MENU              menu open, engine paused, prior mode saved
KEY_BINDINGS      dialog on top of the menu
ABOUT             dialog on top of the menu
FINISHED          terminal

Commit advancement retries exactly once after a loop reset, so one
advance never costs more than two source queries.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum

from . import keys
from .cancellation import CancellationToken
from .config import SourceConfig
from .engine import PlaybackEngine, StepGranularity
from .errors import CommitNotFoundError, CommitsExhaustedError, CommitSourceError
from .history import History
from .logging import get_logger
from .models import CommitMetadata
from .source import CommitSource
from .state import DIALOGS, NON_MODAL, Mode, ModalState, PlaybackState

logger = get_logger("gitlogue.controller")

# Pause between commits, in units of the base typing interval
WAIT_MULTIPLIER = 100


class MenuItem(str, Enum):
    """Entries of the menu, in display order."""

    KEY_BINDINGS = "Key Bindings"
    ABOUT = "About"
    QUIT = "Quit"


MENU_ITEMS: tuple[MenuItem, ...] = (MenuItem.KEY_BINDINGS, MenuItem.ABOUT, MenuItem.QUIT)

KEY_BINDINGS: tuple[tuple[str, str], ...] = (
    ("Space", "Pause / resume"),
    ("h / l", "Step one line back / forward"),
    ("H / L", "Step one file back / forward"),
    ("p / n", "Previous / next commit"),
    ("Esc", "Open / close menu"),
    ("↑ ↓ / k j", "Move in menu"),
    ("Enter", "Select"),
    ("q / Ctrl+C", "Quit"),
)


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class SessionController:
    """Drives one PlaybackEngine through a session of commits.

    Example:
        ```python
        engine = PlaybackEngine(SpeedRuleSet(base_ms=30))
        controller = SessionController(engine, GitCommitSource("."), SourceConfig())
        controller.start()
        controller.run(read_key, draw)
        ```
    """

    def __init__(
        self,
        engine: PlaybackEngine,
        source: CommitSource | None = None,
        options: SourceConfig | None = None,
        *,
        token: CancellationToken | None = None,
        max_history: int = 1_000,
    ):
        self.engine = engine
        self.source = source
        self.options = options or SourceConfig()
        self.token = token or CancellationToken()
        self.history = History(max_history)

        self.state = ModalState.playing()
        self.playback = PlaybackState.PLAYING
        self.menu_index = 0
        self._saved_state: ModalState | None = None

    # ------------------------------------------------------------------ queries

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def saved_state(self) -> ModalState | None:
        return self._saved_state

    @property
    def is_finished(self) -> bool:
        return self.state.is_finished

    @property
    def can_advance(self) -> bool:
        """Whether finishing a commit leads to another one."""
        return self.source is not None and not self.options.single_commit

    # ------------------------------------------------------------------ startup

    def start(self) -> None:
        """Load the first commit.

        Raises:
            CommitNotFoundError: the configured commit or range does not resolve.
        """
        if self.source is None:
            return
        if self.options.single_commit:
            commit = self.source.get_commit(self.options.commit)
        else:
            commit = self.advance_to_next_commit()

        if commit is None:
            self._finish("nothing to show")
        else:
            self.load_commit(commit)

    def load_commit(self, commit: CommitMetadata, *, record: bool = True) -> None:
        """Show *commit*, optionally recording it in the history."""
        self.engine.load(commit)
        logger.set_context(commit_id=commit.id)
        if record:
            self.history.record(commit)
        if self.playback == PlaybackState.PAUSED:
            self.engine.pause()
        if self.state.mode != Mode.PLAYING:
            self._transition(ModalState.playing(), "commit loaded")
        logger.info("Showing commit", commit_id=commit.id, files=len(commit.files), recorded=record)

    # ------------------------------------------------------------------ commits

    def advance_to_next_commit(self) -> CommitMetadata | None:
        """Fetch the commit that follows the current one, or None if there is none.

        With looping enabled an exhausted traversal is reset and queried
        once more; a second exhaustion is final.
        """
        if self.source is None:
            return None

        if self.options.diff_mode is not None:
            try:
                return self.source.get_working_tree_diff(self.options.diff_mode)
            except CommitSourceError as e:
                logger.info("Working tree unavailable", reason=str(e))
                return None

        try:
            return self._fetch_next()
        except CommitsExhaustedError as e:
            if not self.options.loop:
                logger.info("Commits exhausted", reason=str(e))
                return None
        except CommitNotFoundError:
            raise
        except CommitSourceError as e:
            logger.log_error(e, "Commit source failed")
            return None

        logger.info("Commits exhausted, restarting traversal")
        self.source.reset_index()
        try:
            return self._fetch_next()
        except CommitsExhaustedError as e:
            logger.info("Commits exhausted after reset", reason=str(e))
            return None
        except CommitNotFoundError:
            raise
        except CommitSourceError as e:
            logger.log_error(e, "Commit source failed after reset")
            return None

    def _fetch_next(self) -> CommitMetadata:
        order = self.options.order
        if self.options.range_mode:
            commit_range = self.options.commit
            if order == "asc":
                return self.source.next_asc_range_commit(commit_range)
            if order == "desc":
                return self.source.next_desc_range_commit(commit_range)
            return self.source.random_range_commit(commit_range)

        if order == "asc":
            return self.source.next_asc_commit()
        if order == "desc":
            return self.source.next_desc_commit()
        return self.source.random_commit()

    # ------------------------------------------------------------------ loop

    def update(self, now_ms: float) -> bool:
        """Automatic part of a loop iteration. Returns True if a redraw is needed."""
        if self.state.is_finished:
            return False
        if self.token.is_requested:
            self._finish("termination requested")
            return True

        redraw = self.engine.tick(now_ms)
        if self.playback != PlaybackState.PLAYING:
            return redraw

        if self.state.mode == Mode.PLAYING and self.engine.is_finished():
            if self.can_advance:
                resume_at = now_ms + self.engine.base_speed_ms * WAIT_MULTIPLIER
                self._transition(ModalState.waiting_for_next(resume_at), "body finished")
            else:
                self._finish("body finished")
            return True

        if self.state.mode == Mode.WAITING_FOR_NEXT and now_ms >= self.state.resume_at_ms:
            commit = self.advance_to_next_commit()
            if commit is None:
                self._finish("no next commit")
            else:
                self.load_commit(commit)
            return True

        return redraw

    def run(
        self,
        read_key: Callable[[float], str | None],
        draw: Callable[[SessionController], None],
        *,
        clock: Callable[[], float] = monotonic_ms,
        poll_interval_ms: float = 8.0,
        on_frame: Callable[[SessionController], None] | None = None,
    ) -> None:
        """Run until FINISHED: poll input, dispatch, tick, redraw when needed."""
        redraw = True
        while not self.state.is_finished:
            if on_frame is not None:
                on_frame(self)
            key = read_key(poll_interval_ms)
            if key is not None:
                redraw = self.handle_key(key, clock()) or redraw
            redraw = self.update(clock()) or redraw
            if redraw:
                draw(self)
                redraw = False

    # ------------------------------------------------------------------ input

    def handle_key(self, key: str, now_ms: float) -> bool:
        """Dispatch one key by mode. Returns True if a redraw is needed."""
        mode = self.state.mode
        if mode == Mode.FINISHED:
            return False
        if key == keys.CTRL_C:
            self._finish("interrupted")
            return True

        if mode in DIALOGS:
            if key in (keys.ESC, keys.ENTER, "q"):
                self._transition(ModalState.menu(), "dialog closed")
                return True
            return False

        if mode == Mode.MENU:
            return self._handle_menu_key(key)

        return self._handle_playback_key(key)

    def _handle_menu_key(self, key: str) -> bool:
        if key == keys.ESC:
            self.close_menu()
        elif key in (keys.UP, "k"):
            self.menu_index = (self.menu_index - 1) % len(MENU_ITEMS)
        elif key in (keys.DOWN, "j"):
            self.menu_index = (self.menu_index + 1) % len(MENU_ITEMS)
        elif key == keys.ENTER:
            self.select_menu_item(MENU_ITEMS[self.menu_index])
        elif key == "q":
            self._finish("quit from menu")
        else:
            return False
        return True

    def _handle_playback_key(self, key: str) -> bool:
        if key == "q":
            self._finish("quit")
        elif key == keys.ESC:
            self.open_menu()
        elif key == keys.SPACE:
            self.toggle_pause()
        elif key == "l":
            self.step(StepGranularity.LINE)
        elif key == "h":
            self.step_back(StepGranularity.LINE)
        elif key == "L":
            self.step(StepGranularity.CHANGE)
        elif key == "H":
            self.step_back(StepGranularity.CHANGE)
        elif key == "p":
            self.history_previous()
        elif key == "n":
            self.history_next()
        else:
            return False
        return True

    # ------------------------------------------------------------------ actions

    def toggle_pause(self) -> None:
        if self.playback == PlaybackState.PLAYING:
            self.playback = PlaybackState.PAUSED
            self.engine.pause()
            return

        self.playback = PlaybackState.PLAYING
        self.engine.resume()
        if self.state.mode == Mode.WAITING_FOR_NEXT and not self.engine.is_finished():
            self._transition(ModalState.playing(), "resumed before end of commit")

    def step(self, granularity: StepGranularity) -> bool:
        self._force_pause()
        return self.engine.manual_step(granularity)

    def step_back(self, granularity: StepGranularity) -> bool:
        self._force_pause()
        restored = self.engine.restore_checkpoint(granularity)
        if restored and self.state.mode == Mode.WAITING_FOR_NEXT:
            self._transition(ModalState.playing(), "scrubbed back")
        return restored

    def history_previous(self) -> bool:
        commit = self.history.previous()
        if commit is None:
            return False
        self.load_commit(commit, record=False)
        return True

    def history_next(self) -> bool:
        commit = self.history.next()
        if commit is not None:
            self.load_commit(commit, record=False)
            return True
        if not self.can_advance:
            return False

        commit = self.advance_to_next_commit()
        if commit is None:
            self._finish("no next commit")
            return False
        self.load_commit(commit)
        return True

    def open_menu(self) -> None:
        """Open the menu over playback; a no-op from the menu, a dialog or the end."""
        if self.state.mode not in NON_MODAL:
            return
        self._saved_state = self.state
        self.menu_index = 0
        self.engine.pause()
        self._transition(ModalState.menu(), "menu opened")

    def close_menu(self) -> None:
        restored = self._saved_state or ModalState.playing()
        self._saved_state = None
        if self.playback == PlaybackState.PLAYING:
            self.engine.resume()
        self._transition(restored, "menu closed")

    def select_menu_item(self, item: MenuItem) -> None:
        if item == MenuItem.KEY_BINDINGS:
            self._transition(ModalState(Mode.KEY_BINDINGS), "menu selection")
        elif item == MenuItem.ABOUT:
            self._transition(ModalState(Mode.ABOUT), "menu selection")
        else:
            self._finish("quit from menu")

    # ------------------------------------------------------------------ helpers

    def _force_pause(self) -> None:
        self.playback = PlaybackState.PAUSED
        self.engine.pause()

    def _finish(self, reason: str) -> None:
        self._saved_state = None
        self.engine.pause()
        self._transition(ModalState.finished(), reason)

    def _transition(self, new_state: ModalState, reason: str) -> None:
        logger.log_transition(str(self.state), str(new_state), reason)
        self.state = new_state


__all__ = [
    "SessionController",
    "MenuItem",
    "MENU_ITEMS",
    "KEY_BINDINGS",
    "WAIT_MULTIPLIER",
    "monotonic_ms",
]
