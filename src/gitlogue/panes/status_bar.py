"""Status bar pane."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from .. import __version__
from ..controller import SessionController
from ..state import Mode, PlaybackState


class StatusBarPane:
    border_style = "white"

    def render(self, controller: SessionController) -> Panel:
        engine = controller.engine
        metadata = engine.current_metadata()

        parts = [f"gitlogue v{__version__}"]
        if metadata is not None:
            parts.append(f"Commit: {metadata.short_id}")
            if metadata.author:
                parts.append(f"Author: {metadata.author}")
            index = engine.current_file_index()
            if index is not None and metadata.files:
                parts.append(f"File {index + 1}/{len(metadata.files)}")
        if controller.history.index is not None:
            parts.append(f"History {controller.history.index + 1}/{len(controller.history)}")

        text = Text(" | ".join(parts))
        text.append(" | ")
        if controller.mode == Mode.WAITING_FOR_NEXT:
            text.append("Next commit…", style="yellow")
        elif controller.playback == PlaybackState.PAUSED:
            text.append("⏸ Paused", style="yellow")
        else:
            text.append("▶ Playing", style="green")
        text.append(" | Esc: menu  q: quit", style="dim")
        return Panel(text, border_style=self.border_style)
