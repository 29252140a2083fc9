"""
Terminal UI: layout, per-frame viewport metrics, and terminal lifecycle.

Layout
------
+------------+-------------------------+
| File Tree  | Editor (80%)            |
|   (30%)    +-------------------------+
|            | Terminal (20%)          |
+------------+-------------------------+
| Status bar (3 rows)                  |
+--------------------------------------+
"""

from __future__ import annotations

import os
import signal
import sys
from types import FrameType

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from .cancellation import CancellationToken
from .controller import SessionController
from .errors import TerminalError
from .keys import KeyReader
from .logging import get_logger
from .panes import (
    AboutDialog,
    EditorPane,
    FileTreePane,
    KeyBindingsDialog,
    MenuDialog,
    StatusBarPane,
    TerminalPane,
)
from .state import Mode

logger = get_logger("gitlogue.ui")

STATUS_BAR_HEIGHT = 3
BORDER_HEIGHT = 2
EDITOR_SHARE = 0.8
TREE_SHARE = 0.3

# Exit status of the forced-termination path (128 + SIGINT)
FORCED_EXIT_STATUS = 130


def viewport_metrics(width: int, height: int) -> tuple[int, int]:
    """Visible editor rows and columns for a terminal of *width* x *height*."""
    main_height = max(height - STATUS_BAR_HEIGHT - BORDER_HEIGHT, 0)
    viewport_height = max(int(main_height * EDITOR_SHARE) - BORDER_HEIGHT, 0)
    content_width = max(int(width * (1 - TREE_SHARE)) - BORDER_HEIGHT, 0)
    return viewport_height, content_width


class Screen:
    """Builds the pane layout for a controller and pushes it to a Live display."""

    def __init__(self, console: Console):
        self.console = console
        self.file_tree = FileTreePane()
        self.editor = EditorPane()
        self.terminal = TerminalPane()
        self.status_bar = StatusBarPane()
        self.dialogs = {
            Mode.MENU: MenuDialog(),
            Mode.KEY_BINDINGS: KeyBindingsDialog(),
            Mode.ABOUT: AboutDialog(),
        }
        self.live: Live | None = None

    def update_viewport(self, controller: SessionController) -> None:
        width, height = self.console.size
        viewport_height, content_width = viewport_metrics(width, height)
        controller.engine.set_viewport_height(viewport_height)
        controller.engine.set_content_width(content_width)

    def build(self, controller: SessionController) -> Layout:
        engine = controller.engine
        _, height = self.console.size

        layout = Layout()
        layout.split_column(
            Layout(name="main"),
            Layout(name="status", size=STATUS_BAR_HEIGHT),
        )
        layout["main"].split_row(
            Layout(name="tree", ratio=3),
            Layout(name="right", ratio=7),
        )
        layout["right"].split_column(
            Layout(name="editor", ratio=8),
            Layout(name="terminal", ratio=2),
        )

        tree_height = max(height - STATUS_BAR_HEIGHT - BORDER_HEIGHT, 0)
        layout["tree"].update(self.file_tree.render(engine, tree_height))
        dialog = self.dialogs.get(controller.mode)
        if dialog is not None:
            layout["editor"].update(dialog.render(controller))
        else:
            layout["editor"].update(self.editor.render(engine))
        layout["terminal"].update(self.terminal.render(engine))
        layout["status"].update(self.status_bar.render(controller))
        return layout

    def draw(self, controller: SessionController) -> None:
        if self.live is None:
            raise TerminalError("Screen is not attached to a live display")
        self.live.update(self.build(controller), refresh=True)


class TerminalSession:
    """Raw-mode keyboard, alternate screen and signal wiring for one session.

    The first SIGINT/SIGTERM requests cooperative shutdown through the
    token. A second one while that request is still pending restores the
    terminal as well as it can and exits the process immediately.
    """

    def __init__(self, console: Console, token: CancellationToken):
        self.console = console
        self.token = token
        self.keys = KeyReader()
        self.screen = Screen(console)
        self._live: Live | None = None
        self._previous_handlers: dict[int, object] = {}

    def __enter__(self) -> TerminalSession:
        self.keys.setup()
        try:
            self._live = Live(console=self.console, screen=True, auto_refresh=False)
            self._live.start()
        except Exception as e:
            self.keys.restore()
            raise TerminalError("Could not enter the alternate screen", cause=e) from e
        self.screen.live = self._live
        self._install_signal_handlers()
        return self

    def __exit__(self, *exc_info) -> None:
        self._restore_signal_handlers()
        try:
            if self._live is not None:
                self._live.stop()
        finally:
            self._live = None
            self.screen.live = None
            self.keys.restore()

    def read_key(self, timeout_ms: float) -> str | None:
        return self.keys.read_key(timeout_ms)

    def _install_signal_handlers(self) -> None:
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        if not self.token.is_requested:
            self.token.request()
            return
        # Second signal: skip the cooperative teardown entirely.
        try:
            if self._live is not None:
                self._live.stop()
            self.keys.restore()
        finally:
            sys.stderr.write("gitlogue: forced exit\n")
            os._exit(FORCED_EXIT_STATUS)


def run_session(
    controller: SessionController,
    *,
    console: Console | None = None,
    poll_interval_ms: float = 8.0,
) -> None:
    """Run *controller* on the real terminal until it finishes."""
    console = console or Console()
    with TerminalSession(console, controller.token) as session:
        logger.info("Terminal session started", width=console.size.width, height=console.size.height)
        controller.run(
            session.read_key,
            session.screen.draw,
            poll_interval_ms=poll_interval_ms,
            on_frame=session.screen.update_viewport,
        )
    logger.info("Terminal session ended", state=str(controller.state))


__all__ = [
    "Screen",
    "TerminalSession",
    "run_session",
    "viewport_metrics",
]
