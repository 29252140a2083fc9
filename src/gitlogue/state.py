"""
Session states.

Modal state (what the screen is doing) and playback state (whether the
user paused autoplay) are independent: opening the menu pauses the engine
without touching the user's play/pause choice.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    """Top-level modes of the session controller."""

    PLAYING = "playing"
    WAITING_FOR_NEXT = "waiting_for_next"
    MENU = "menu"
    KEY_BINDINGS = "key_bindings"
    ABOUT = "about"
    FINISHED = "finished"


# Modes the menu can be opened from
NON_MODAL = frozenset({Mode.PLAYING, Mode.WAITING_FOR_NEXT})

# Modes that show a dialog on top of the menu
DIALOGS = frozenset({Mode.KEY_BINDINGS, Mode.ABOUT})


class PlaybackState(str, Enum):
    """Manual play/pause choice of the user."""

    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class ModalState:
    """A mode plus, for WAITING_FOR_NEXT, the time playback resumes."""

    mode: Mode
    resume_at_ms: float | None = None

    def __post_init__(self):
        if (self.mode == Mode.WAITING_FOR_NEXT) != (self.resume_at_ms is not None):
            raise ValueError("resume_at_ms is required for, and only for, WAITING_FOR_NEXT")

    @classmethod
    def playing(cls) -> ModalState:
        return cls(Mode.PLAYING)

    @classmethod
    def waiting_for_next(cls, resume_at_ms: float) -> ModalState:
        return cls(Mode.WAITING_FOR_NEXT, resume_at_ms)

    @classmethod
    def menu(cls) -> ModalState:
        return cls(Mode.MENU)

    @classmethod
    def finished(cls) -> ModalState:
        return cls(Mode.FINISHED)

    @property
    def is_finished(self) -> bool:
        return self.mode == Mode.FINISHED

    def __str__(self) -> str:
        return self.mode.value


__all__ = ["Mode", "ModalState", "PlaybackState", "NON_MODAL", "DIALOGS"]
