"""
gitlogue: replay git commits in the terminal as a live typing animation.
"""

__version__ = "0.1.0"

from .cancellation import CancellationToken
from .config import Settings
from .controller import SessionController
from .engine import PlaybackEngine, StepGranularity
from .history import History
from .models import ChangeStatus, CommitMetadata, DiffLine, DiffLineKind, FileChange
from .source import CommitSource, GitCommitSource
from .speed import SpeedRule, SpeedRuleSet
from .state import Mode, ModalState, PlaybackState
from .stream import StreamPosition, TypingStream

__all__ = [
    "__version__",
    "CancellationToken",
    "Settings",
    "SessionController",
    "PlaybackEngine",
    "StepGranularity",
    "History",
    "ChangeStatus",
    "CommitMetadata",
    "DiffLine",
    "DiffLineKind",
    "FileChange",
    "CommitSource",
    "GitCommitSource",
    "SpeedRule",
    "SpeedRuleSet",
    "Mode",
    "ModalState",
    "PlaybackState",
    "StreamPosition",
    "TypingStream",
]
