from .dialogs import AboutDialog, KeyBindingsDialog, MenuDialog
from .editor import EditorPane
from .file_tree import FileTreePane
from .status_bar import StatusBarPane
from .terminal import TerminalPane

__all__ = [
    "AboutDialog",
    "EditorPane",
    "FileTreePane",
    "KeyBindingsDialog",
    "MenuDialog",
    "StatusBarPane",
    "TerminalPane",
]
