"""Cooperative cancellation token shared by the engines and the scheduler.

WHY: A recompute may be superseded by a newer parameter change while it is
still running. Threads cannot be killed, so the engines poll a token and
stop early when it is set.

HOW: A thin wrapper around threading.Event. Engines call
raise_if_cancelled() between entries; the scheduler catches the resulting
RecomputeCancelled and discards the run.
"""

from __future__ import annotations

import threading
from typing import Optional

from srt_merger.core.errors import RecomputeCancelled


class CancelToken:
    """Thread-safe flag checked by long-running transformations."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RecomputeCancelled()


def check_cancelled(token: Optional[CancelToken]) -> None:
    """Raise RecomputeCancelled if a token is given and set."""
    if token is not None:
        token.raise_if_cancelled()
