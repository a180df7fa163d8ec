"""Deduplicating, delaying, rate-limited queue of reconciliation keys.

The queue keeps three pieces of state:

- ``_queue``: keys ready to be handed out, FIFO among distinct keys
- ``_dirty``: keys that need processing (queued or re-added while in flight)
- ``_processing``: keys currently held by a worker

A key is never handed to two workers at once. Adding a key that is already
dirty is a no-op; adding a key that is in flight marks it dirty so it is queued
again exactly once when the worker calls :meth:`WorkQueue.done`.

Delayed keys wait in a heap until their ready time; workers blocked in
:meth:`WorkQueue.get` wake up for them without a separate timer thread.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections import deque
from typing import TYPE_CHECKING

from .rate_limit import default_controller_rate_limiter

if TYPE_CHECKING:
    from .rate_limit import Clock, RateLimiter

log = logging.getLogger(__name__)


class WorkQueue:
    def __init__(
        self,
        name: str,
        *,
        rate_limiter: RateLimiter | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.name = name
        self.rate_limiter = rate_limiter or default_controller_rate_limiter()
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: deque[str] = deque()
        self._dirty: set[str] = set()
        self._processing: set[str] = set()
        self._waiting: list[tuple[float, int, str]] = []
        self._ready_at: dict[str, float] = {}
        self._sequence = itertools.count()
        self._shutting_down = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    def add(self, key: str) -> None:
        """Mark ``key`` as needing processing. Idempotent while the key is pending."""

        with self._cond:
            self._add_locked(key)

    def add_after(self, key: str, delay: float) -> None:
        """Add ``key`` once ``delay`` seconds have passed. Keeps the earliest ready time."""

        if delay <= 0:
            self.add(key)
            return
        with self._cond:
            if self._shutting_down:
                return
            ready_at = self._clock() + delay
            current = self._ready_at.get(key)
            if current is not None and current <= ready_at:
                return
            self._ready_at[key] = ready_at
            heapq.heappush(self._waiting, (ready_at, next(self._sequence), key))
            self._cond.notify()

    def add_rate_limited(self, key: str) -> None:
        """Requeue ``key`` after the delay its rate limiter asks for."""

        delay = self.rate_limiter.when(key)
        log.debug("Requeueing %r on %s in %.3fs", key, self.name, delay)
        self.add_after(key, delay)

    def forget(self, key: str) -> None:
        """Clear backoff state for ``key``."""

        self.rate_limiter.forget(key)

    def num_requeues(self, key: str) -> int:
        return self.rate_limiter.num_requeues(key)

    def get(self, timeout: float | None = None) -> tuple[str | None, bool]:
        """Block until a key is available.

        Returns ``(key, False)`` for work, ``(None, True)`` once the queue is shut
        down, and ``(None, False)`` when ``timeout`` elapses with nothing to do.
        """

        deadline = None if timeout is None else self._clock() + timeout
        with self._cond:
            while True:
                if self._shutting_down:
                    return None, True
                self._promote_ready_locked()
                if self._queue:
                    key = self._queue.popleft()
                    self._processing.add(key)
                    self._dirty.discard(key)
                    return key, False

                wait_for = self._next_wakeup_locked()
                if deadline is not None:
                    remaining = deadline - self._clock()
                    if remaining <= 0:
                        return None, False
                    wait_for = remaining if wait_for is None else min(wait_for, remaining)
                if wait_for is not None:
                    # Condition.wait rejects timeouts above TIMEOUT_MAX
                    wait_for = min(wait_for, threading.TIMEOUT_MAX)
                self._cond.wait(wait_for)

    def done(self, key: str) -> None:
        """Release the in-flight marker; requeue the key if it was re-added meanwhile."""

        with self._cond:
            self._processing.discard(key)
            if key in self._dirty and not self._shutting_down:
                self._queue.append(key)
                self._cond.notify()

    def shut_down(self) -> None:
        """Stop handing out keys. Pending and delayed keys are discarded."""

        with self._cond:
            self._shutting_down = True
            self._queue.clear()
            self._dirty.clear()
            self._waiting.clear()
            self._ready_at.clear()
            self._cond.notify_all()

    def _add_locked(self, key: str) -> None:
        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        if key in self._processing:
            return
        self._queue.append(key)
        self._cond.notify()

    def _promote_ready_locked(self) -> None:
        now = self._clock()
        while self._waiting and self._waiting[0][0] <= now:
            ready_at, _, key = heapq.heappop(self._waiting)
            # stale heap entry superseded by an earlier add_after
            if self._ready_at.get(key) != ready_at:
                continue
            del self._ready_at[key]
            self._add_locked(key)

    def _next_wakeup_locked(self) -> float | None:
        if not self._waiting:
            return None
        return max(self._waiting[0][0] - self._clock(), 0.0)
