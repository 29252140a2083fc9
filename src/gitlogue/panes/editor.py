"""Editor pane: the current file's lines as they are typed."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from ..engine import PlaybackEngine
from ..models import DiffLineKind

CURSOR = "▌"

_LINE_STYLES = {
    DiffLineKind.ADDED: ("+ ", "green"),
    DiffLineKind.REMOVED: ("- ", "red"),
    DiffLineKind.CONTEXT: ("  ", "default"),
    DiffLineKind.BLANK: ("  ", "default"),
}


class EditorPane:
    """Scrolls so the line being typed stays inside the viewport."""

    title = "Editor"
    border_style = "green"

    def render(self, engine: PlaybackEngine) -> Panel:
        lines = engine.body_lines()
        offset = engine.scroll_offset()
        height = engine.viewport_height or len(lines)
        visible = lines[offset : offset + height]
        gutter = len(str(len(lines))) if lines else 1

        text = Text(no_wrap=True, overflow="crop")
        for n, (line, shown) in enumerate(visible):
            if n:
                text.append("\n")
            marker, style = _LINE_STYLES[line.kind]
            text.append(f"{offset + n + 1:>{gutter}} ", style="dim")
            text.append(marker + shown, style=style)
        if lines and not engine.is_finished():
            text.append(CURSOR, style="bold")

        metadata = engine.current_metadata()
        index = engine.current_file_index()
        title = self.title
        if metadata is not None and index is not None:
            title = f"{self.title}: {metadata.files[index].path}"
        return Panel(text, title=title, border_style=self.border_style)
