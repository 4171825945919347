"""Debounced, single-flight, cancellable background recompute.

WHY: Parameter changes arrive in bursts (a slider being dragged produces
dozens of values per second). Re-running a transformation for every value
wastes CPU, and a slow run for an old value must never overwrite the result
of a newer one.

HOW: Every request bumps a generation counter, cancels the pending timer
and the in-flight CancelToken, and starts a threading.Timer for the quiet
window. When the timer fires the compute callable runs on the timer thread
with its token; the result is published only if its generation is still
the newest, under the shared lock.

RULES:
- Only the last request inside a quiet window runs
- A superseded run is cancelled cooperatively; if it finishes anyway its
  result is discarded, never published
- RecomputeCancelled and a None result are sentinels; nothing is published
- Unexpected errors in background runs are logged and kept in last_error;
  published state is left untouched
- publish() runs under the lock; notify() runs after the lock is released
- The lock may be shared with the owner (pass ``lock=``) so that owner
  state changes and scheduling are atomic
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Tuple

from srt_merger.config import DEFAULT_DEBOUNCE_SECONDS
from srt_merger.core.cancel import CancelToken
from srt_merger.core.errors import RecomputeCancelled

logger = logging.getLogger(__name__)


class DebouncedRecompute:
    """Generation-counted scheduler for one recompute channel.

    Args:
        compute: ``compute(token, *args)`` returning a result, or None to
            signal an abandoned run.
        publish: ``publish(result)`` called under the lock for current
            generations only.
        notify: Optional zero-argument callback run after a publish, outside
            the lock.
        delay: Quiet window in seconds.
        lock: Optional re-entrant lock shared with the owner.
    """

    def __init__(
        self,
        compute: Callable[..., Any],
        publish: Callable[[Any], None],
        notify: Optional[Callable[[], None]] = None,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._compute = compute
        self._publish = publish
        self._notify = notify
        self._delay = delay
        self._lock = lock if lock is not None else threading.RLock()
        self._generation = 0
        self._timer: Optional[threading.Timer] = None
        self._token: Optional[CancelToken] = None
        self._idle = threading.Event()
        self._idle.set()
        self.last_error: Optional[BaseException] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """True while a request is waiting for its timer or still computing."""
        return not self._idle.is_set()

    def begin(self) -> Tuple[int, CancelToken]:
        """Supersede any outstanding work and open a new generation.

        Callers that need an atomic snapshot should hold the shared lock
        while calling begin() and reading their state.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._token is not None:
                self._token.cancel()
            self._generation += 1
            token = CancelToken()
            self._token = token
            self._idle.clear()
            return self._generation, token

    def schedule(self, *args: Any) -> int:
        """Run ``compute(token, *args)`` after the quiet window.

        Returns:
            The generation number of this request.
        """
        with self._lock:
            generation, token = self.begin()
            timer = threading.Timer(self._delay, self.run, args=(generation, token, args))
            timer.daemon = True
            self._timer = timer
            timer.start()
        logger.debug("Scheduled recompute generation %d in %.3fs", generation, self._delay)
        return generation

    def run_now(self, *args: Any) -> bool:
        """Supersede pending work and compute synchronously.

        Errors other than cancellation propagate to the caller.
        """
        generation, token = self.begin()
        return self.run(generation, token, args, reraise=True)

    def run(
        self,
        generation: int,
        token: CancelToken,
        args: Tuple[Any, ...],
        reraise: bool = False,
    ) -> bool:
        """Execute one generation and publish its result if still current.

        Returns:
            True if the result was published.
        """
        published = False
        try:
            result = self._execute(generation, token, args, reraise)
            if result is None:
                return False
            with self._lock:
                if token.cancelled or generation != self._generation:
                    logger.debug("Discarding stale recompute generation %d", generation)
                    return False
                self._publish(result)
                self.last_error = None
                published = True
        finally:
            with self._lock:
                if generation == self._generation:
                    self._timer = None
                    self._idle.set()

        if published and self._notify is not None:
            self._notify()
        return published

    def _execute(
        self,
        generation: int,
        token: CancelToken,
        args: Tuple[Any, ...],
        reraise: bool,
    ) -> Any:
        if token.cancelled:
            return None
        try:
            return self._compute(token, *args)
        except RecomputeCancelled:
            logger.debug("Recompute generation %d cancelled", generation)
            return None
        except Exception as exc:
            if reraise:
                raise
            logger.exception("Recompute generation %d failed", generation)
            with self._lock:
                if generation == self._generation:
                    self.last_error = exc
            return None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no request is pending. Returns False on timeout."""
        return self._idle.wait(timeout)

    def cancel(self) -> None:
        """Drop pending and in-flight work without publishing anything."""
        with self._lock:
            self.begin()
            self._idle.set()
