"""File tree pane: the commit's changed paths grouped by directory."""

from __future__ import annotations

from collections.abc import Sequence

from rich.panel import Panel
from rich.text import Text

from ..engine import PlaybackEngine
from ..models import ChangeStatus, FileChange

_STATUS_STYLES = {
    ChangeStatus.ADDED: "green",
    ChangeStatus.DELETED: "red",
    ChangeStatus.RENAMED: "magenta",
    ChangeStatus.MODIFIED: "default",
}


def tree_rows(paths: Sequence[str]) -> list[tuple[int | None, int, str]]:
    """(file index or None for a directory, depth, label) rows in commit order.

    A directory row is emitted whenever a path enters a directory the
    previous path was not in.
    """
    rows: list[tuple[int | None, int, str]] = []
    previous: list[str] = []
    for index, path in enumerate(paths):
        parts = path.split("/")
        dirs = parts[:-1]
        common = 0
        while common < min(len(dirs), len(previous)) and dirs[common] == previous[common]:
            common += 1
        for depth in range(common, len(dirs)):
            rows.append((None, depth, f"{dirs[depth]}/"))
        rows.append((index, len(dirs), parts[-1]))
        previous = dirs
    return rows


class FileTreePane:
    """Changed files of the current commit with the one being typed highlighted."""

    title = "File Tree"
    border_style = "cyan"

    def render(self, engine: PlaybackEngine, height: int) -> Panel:
        metadata = engine.current_metadata()
        files: Sequence[FileChange] = metadata.files if metadata else ()
        current = engine.current_file_index()

        rows = tree_rows([change.path for change in files])
        selected_row = next((i for i, row in enumerate(rows) if row[0] == current), 0)
        start = max(0, selected_row - height + 1) if height > 0 else 0
        visible = rows[start : start + height] if height > 0 else rows

        text = Text(no_wrap=True, overflow="ellipsis")
        for n, (index, depth, label) in enumerate(visible):
            if n:
                text.append("\n")
            indent = "  " * depth
            if index is None:
                text.append(f"{indent}{label}", style="bold blue")
                continue
            change = files[index]
            style = _STATUS_STYLES[change.status]
            if index == current:
                style = f"{style} reverse"
            text.append(f"{indent}{label}", style=style)
            text.append(f" +{change.additions}", style="green dim")
            text.append(f" -{change.deletions}", style="red dim")

        return Panel(text, title=self.title, border_style=self.border_style)
