"""Terminal pane: the commit summary typed like a shell session."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from ..engine import ActiveStream, PlaybackEngine
from .editor import CURSOR


class TerminalPane:
    title = "Terminal"
    border_style = "yellow"

    def render(self, engine: PlaybackEngine) -> Panel:
        text = Text()
        metadata = engine.current_metadata()
        if metadata is not None:
            text.append("$ ", style="bold green")
            text.append(f"git show {metadata.short_id}\n", style="bold")
            text.append(engine.header_text())
            if engine.active_stream == ActiveStream.HEADER:
                text.append(CURSOR, style="bold")
        return Panel(text, title=self.title, border_style=self.border_style)
