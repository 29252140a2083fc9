"""
Keyboard input.

Keys are reported as short names: printable characters as themselves
(" " for Space) and the names below for control keys. KeyReader puts the
terminal in raw mode so keys arrive unbuffered and unechoed.
"""

from __future__ import annotations

import os
import select
import sys
import termios
import tty
from typing import TextIO

from .errors import TerminalError

ESC = "esc"
ENTER = "enter"
UP = "up"
DOWN = "down"
CTRL_C = "ctrl+c"
SPACE = " "

# How long to wait for the rest of an escape sequence
_ESCAPE_TIMEOUT_S = 0.01

_ARROWS = {"A": UP, "B": DOWN}


def decode_key(data: str) -> str | None:
    """Map raw terminal input for a single key to its name."""
    if not data:
        return None
    if data == "\x03":
        return CTRL_C
    if data in ("\r", "\n"):
        return ENTER
    if data == "\x1b":
        return ESC
    if data.startswith("\x1b[") or data.startswith("\x1bO"):
        return _ARROWS.get(data[2:3])
    if len(data) == 1 and data.isprintable():
        return data
    return None


class KeyReader:
    """Non-blocking key reads from a TTY in raw mode.

    Usage:
        with KeyReader() as keys:
            key = keys.read_key(timeout_ms=8)
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdin
        self._fd = self._stream.fileno()
        self._saved_attrs: list | None = None

    def __enter__(self) -> KeyReader:
        self.setup()
        return self

    def __exit__(self, *exc_info) -> None:
        self.restore()

    def setup(self) -> None:
        if not os.isatty(self._fd):
            raise TerminalError("Standard input is not a terminal")
        try:
            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setraw(self._fd)
        except termios.error as e:
            raise TerminalError("Could not switch terminal to raw mode", cause=e) from e

    def restore(self) -> None:
        if self._saved_attrs is None:
            return
        try:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        except termios.error as e:
            raise TerminalError("Could not restore terminal mode", cause=e) from e
        finally:
            self._saved_attrs = None

    def read_key(self, timeout_ms: float) -> str | None:
        """Wait up to *timeout_ms* for a key; None if nothing arrived."""
        if not self._ready(timeout_ms / 1000):
            return None
        data = os.read(self._fd, 1).decode(errors="ignore")
        if data == "\x1b":
            while self._ready(_ESCAPE_TIMEOUT_S) and len(data) < 3:
                data += os.read(self._fd, 1).decode(errors="ignore")
        return decode_key(data)

    def _ready(self, timeout_s: float) -> bool:
        readable, _, _ = select.select([self._fd], [], [], timeout_s)
        return bool(readable)


__all__ = [
    "ESC",
    "ENTER",
    "UP",
    "DOWN",
    "CTRL_C",
    "SPACE",
    "decode_key",
    "KeyReader",
]
