"""Cancellation token for cooperative shutdown of the playback loop.

The session loop checks the token once per iteration. A signal handler is
the only other writer, so the token is backed by a threading.Event and
only needs eventual visibility.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class CancellationToken:
    """Mutable token for cooperative cancellation.

    Usage:
        token = CancellationToken()

        # In the loop:
        while not token.is_requested:
            step()

        # From a signal handler:
        token.request()
    """

    _event: threading.Event = field(default_factory=threading.Event, init=False)

    @property
    def is_requested(self) -> bool:
        """Check if termination was requested."""
        return self._event.is_set()

    def request(self) -> None:
        """Request termination (idempotent)."""
        self._event.set()


__all__ = ["CancellationToken"]
