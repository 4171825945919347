"""Processing pipeline: mode dispatch, undo stack, and live recompute.

WHY: An editing session works on one loaded track at a time. The user
tweaks parameters and watches the preview update, commits a result
("apply") to chain merge -> split -> merge, and may undo a commit. The
transformation engines are pure; this module is the coordination layer
that owns the session state around them.

HOW: process() is the pure dispatcher. ProcessingPipeline holds the
"original" and "processed" tuples plus a stack of prior originals, and
routes every parameter change through a DebouncedRecompute that shares the
pipeline's lock. Presentation layers subscribe() to be told when the
processed sequence changes.

RULES:
- Sequences are stored as tuples and replaced wholesale, never mutated
- A recompute always works on the original snapshot taken at request time
- apply_processed() pushes the current original before promoting
- restore_backup() is a no-op returning False on an empty stack
- load() clears the backup stack (a new file starts a new history)
- Parameters of the inactive mode are kept but ignored
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from srt_merger.config import DEFAULT_DEBOUNCE_SECONDS
from srt_merger.core.cancel import CancelToken
from srt_merger.core.merge import merge_entries
from srt_merger.core.models import Entry, ProcessingMode, ProcessingParams
from srt_merger.core.parser import parse_srt
from srt_merger.core.serializer import to_annotated, to_srt
from srt_merger.core.split import split_entries
from srt_merger.core.stats import (
    TrackStatistics,
    compute_statistics,
    count_delta,
    describe_delta,
)
from srt_merger.pipeline.recompute import DebouncedRecompute

logger = logging.getLogger(__name__)

Snapshot = Tuple[Entry, ...]
Subscriber = Callable[["ProcessingPipeline"], None]


def process(
    original: Sequence[Entry],
    mode: ProcessingMode,
    params: ProcessingParams,
    token: Optional[CancelToken] = None,
) -> List[Entry]:
    """Run the engine selected by ``mode`` over ``original``.

    Raises:
        ValueError: If the mode is unknown.
    """
    mode = ProcessingMode(mode)
    if mode == ProcessingMode.MERGE:
        return merge_entries(original, params.max_gap, token=token)
    return split_entries(
        original,
        params.max_duration,
        split_characters=params.split_characters,
        method=params.split_method,
        token=token,
    )


@dataclass
class PipelineStatistics:
    """Original versus processed summary, as shown next to the preview."""

    original: TrackStatistics
    processed: TrackStatistics
    delta: int
    delta_label: str


class ProcessingPipeline:
    """Stateful session around the pure merge/split engines.

    WHY: The presentation layer needs one object to load a track into,
    push live parameters at, read the preview from, and commit or undo
    results with. Keeping that state here keeps the engines pure.

    HOW: All state lives behind one re-entrant lock that is shared with the
    DebouncedRecompute, so changing parameters and scheduling the matching
    recompute happen atomically, and publishing a result cannot interleave
    with a newer request.

    RULES:
    - update() is debounced; recompute(), load(), apply_processed() and
      restore_backup() recompute synchronously
    - apply_processed() flushes a pending recompute first so it always
      commits the result of the latest parameters
    - Subscribers are called outside the lock after each published change
    """

    def __init__(
        self,
        entries: Optional[Sequence[Entry]] = None,
        mode: ProcessingMode = ProcessingMode.MERGE,
        params: Optional[ProcessingParams] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._lock = threading.RLock()
        self._original: Snapshot = ()
        self._processed: Snapshot = ()
        self._mode = ProcessingMode(mode)
        self._params = params if params is not None else ProcessingParams()
        self._backups: List[Snapshot] = []
        self._subscribers: List[Subscriber] = []
        self._recompute = DebouncedRecompute(
            self._compute,
            self._publish,
            notify=self._notify,
            delay=debounce_seconds,
            lock=self._lock,
        )
        if entries is not None:
            self.load(entries)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def original(self) -> Snapshot:
        return self._original

    @property
    def processed(self) -> Snapshot:
        return self._processed

    @property
    def mode(self) -> ProcessingMode:
        return self._mode

    @property
    def params(self) -> ProcessingParams:
        return self._params

    @property
    def backup_depth(self) -> int:
        return len(self._backups)

    @property
    def can_restore(self) -> bool:
        return bool(self._backups)

    @property
    def pending(self) -> bool:
        return self._recompute.pending

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._recompute.last_error

    # ------------------------------------------------------------------
    # Loading and parameters
    # ------------------------------------------------------------------

    def load(self, entries: Sequence[Entry]) -> Snapshot:
        """Replace the original track, clear history, and recompute."""
        snapshot = tuple(entries)
        with self._lock:
            self._original = snapshot
            self._processed = ()
            self._backups.clear()
        logger.info("Loaded %d entries", len(snapshot))
        return self.recompute()

    def load_text(self, text: str) -> Snapshot:
        """Parse SRT text and load the resulting entries."""
        return self.load(parse_srt(text))

    def update(self, mode: Optional[ProcessingMode] = None, **changes) -> int:
        """Change mode and/or parameters and schedule a debounced recompute.

        Args:
            mode: New processing mode, or None to keep the current one.
            **changes: ProcessingParams fields to change (max_gap,
                max_duration, split_characters, split_method).

        Returns:
            The generation number of the scheduled recompute.

        Raises:
            TypeError: If a parameter name is unknown.
            ValueError: If a value is out of range or the mode is unknown.
        """
        with self._lock:
            new_mode = ProcessingMode(mode) if mode is not None else self._mode
            new_params = self._params.with_changes(**changes) if changes else self._params
            self._mode = new_mode
            self._params = new_params
            return self._recompute.schedule(self._original, new_mode, new_params)

    def recompute(self) -> Snapshot:
        """Recompute synchronously, superseding any pending request."""
        with self._lock:
            generation, token = self._recompute.begin()
            args = (self._original, self._mode, self._params)
        self._recompute.run(generation, token, args, reraise=True)
        return self._processed

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no recompute is pending. Returns False on timeout."""
        return self._recompute.wait(timeout)

    # ------------------------------------------------------------------
    # Commit / undo
    # ------------------------------------------------------------------

    def apply_processed(self) -> bool:
        """Promote the processed track to be the new original.

        Returns:
            False (and changes nothing) if there is no processed track.
        """
        if self.pending:
            self.recompute()

        with self._lock:
            if not self._processed:
                return False
            self._backups.append(self._original)
            self._original = self._processed
            depth = len(self._backups)

        logger.info(
            "Applied %s result (%d entries), backup depth %d",
            self._mode.value, len(self._original), depth,
        )
        self.recompute()
        return True

    def restore_backup(self) -> bool:
        """Restore the original from before the last apply_processed().

        Returns:
            False (and changes nothing) if there is nothing to restore.
        """
        with self._lock:
            if not self._backups:
                logger.info("Nothing to restore")
                return False
            self._original = self._backups.pop()
            depth = len(self._backups)

        logger.info("Restored backup (%d entries), backup depth %d", len(self._original), depth)
        self.recompute()
        return True

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_srt(self) -> str:
        return to_srt(self._processed)

    def to_annotated(self) -> str:
        return to_annotated(self._processed)

    def statistics(self) -> PipelineStatistics:
        with self._lock:
            original, processed, mode = self._original, self._processed, self._mode
        delta = count_delta(original, processed)
        return PipelineStatistics(
            original=compute_statistics(original),
            processed=compute_statistics(processed),
            delta=delta,
            delta_label=describe_delta(mode, delta),
        )

    # ------------------------------------------------------------------
    # Subscriptions and lifecycle
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        """Cancel pending work. The pipeline stays readable."""
        self._recompute.cancel()

    def __enter__(self) -> "ProcessingPipeline":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Recompute callbacks
    # ------------------------------------------------------------------

    @staticmethod
    def _compute(
        token: CancelToken,
        original: Snapshot,
        mode: ProcessingMode,
        params: ProcessingParams,
    ) -> Snapshot:
        token.raise_if_cancelled()
        return tuple(process(original, mode, params, token=token))

    def _publish(self, result: Snapshot) -> None:
        self._processed = result

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(self)
            except Exception:
                logger.exception("Pipeline subscriber %r failed", callback)
