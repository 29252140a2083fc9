"""Menu and dialogs drawn over the editor."""

from __future__ import annotations

from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .. import __version__
from ..controller import KEY_BINDINGS, MENU_ITEMS, SessionController


class MenuDialog:
    def render(self, controller: SessionController) -> Align:
        text = Text()
        for n, item in enumerate(MENU_ITEMS):
            if n:
                text.append("\n")
            if n == controller.menu_index:
                text.append(f"> {item.value}", style="bold reverse")
            else:
                text.append(f"  {item.value}")
        panel = Panel(text, title="Menu", border_style="bright_blue", width=30, padding=(0, 1))
        return Align.center(panel, vertical="middle")


class KeyBindingsDialog:
    def render(self, controller: SessionController) -> Align:
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Action")
        for key, action in KEY_BINDINGS:
            table.add_row(key, action)
        panel = Panel(
            table,
            title="Key Bindings",
            subtitle="[dim]Esc / Enter: back[/dim]",
            border_style="bright_blue",
            padding=(0, 1),
        )
        return Align.center(panel, vertical="middle")


class AboutDialog:
    def render(self, controller: SessionController) -> Align:
        text = Text(justify="center")
        text.append(f"gitlogue v{__version__}\n", style="bold")
        text.append("Replays git commits as a live typing animation.")
        panel = Panel(
            text,
            title="About",
            subtitle="[dim]Esc / Enter: back[/dim]",
            border_style="bright_blue",
            width=56,
            padding=(1, 2),
        )
        return Align.center(panel, vertical="middle")
