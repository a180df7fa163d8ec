"""Rate limiters deciding how long a key waits before it is requeued."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

Clock = Callable[[], float]


@runtime_checkable
class RateLimiter(Protocol):
    def when(self, key: str) -> float:
        """Return the delay in seconds before ``key`` may be processed again."""
        ...

    def forget(self, key: str) -> None:
        """Stop tracking ``key``; the next failure starts from scratch."""
        ...

    def num_requeues(self, key: str) -> int: ...


@dataclass(slots=True)
class ItemExponentialFailureRateLimiter:
    """Per-key exponential backoff: ``base * 2**failures``, capped at ``max_delay``."""

    base_delay: float = 0.005
    max_delay: float = 1000.0
    _failures: dict[str, int] = field(default_factory=dict[str, int])
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def when(self, key: str) -> float:
        with self._lock:
            exponent = self._failures.get(key, 0)
            self._failures[key] = exponent + 1
        try:
            delay = self.base_delay * (2**exponent)
        except OverflowError:
            return self.max_delay
        return min(delay, self.max_delay)

    def forget(self, key: str) -> None:
        with self._lock:
            self._failures.pop(key, None)

    def num_requeues(self, key: str) -> int:
        with self._lock:
            return self._failures.get(key, 0)


@dataclass(slots=True)
class BucketRateLimiter:
    """Overall token bucket shared by all keys (``qps`` refill, ``burst`` capacity)."""

    qps: float = 10.0
    burst: int = 100
    clock: Clock = time.monotonic
    _tokens: float = field(init=False)
    _last: float = field(init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __post_init__(self) -> None:
        self._tokens = float(self.burst)
        self._last = self.clock()

    def when(self, key: str) -> float:  # noqa: ARG002
        with self._lock:
            now = self.clock()
            if self.qps > 0:
                self._tokens = min(float(self.burst), self._tokens + (now - self._last) * self.qps)
            self._last = now
            # reserve a token even when the bucket is empty; the caller waits it out
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            if self.qps <= 0:
                return float("inf")
            return -self._tokens / self.qps

    def forget(self, key: str) -> None:
        pass

    def num_requeues(self, key: str) -> int:  # noqa: ARG002
        return 0


@dataclass(slots=True)
class MaxOfRateLimiter:
    """Combine limiters by taking the longest delay any of them asks for."""

    limiters: tuple[RateLimiter, ...]

    def when(self, key: str) -> float:
        return max((limiter.when(key) for limiter in self.limiters), default=0.0)

    def forget(self, key: str) -> None:
        for limiter in self.limiters:
            limiter.forget(key)

    def num_requeues(self, key: str) -> int:
        return max((limiter.num_requeues(key) for limiter in self.limiters), default=0)


def default_controller_rate_limiter(
    *,
    base_delay: float = 0.005,
    max_delay: float = 1000.0,
    qps: float = 10.0,
    burst: int = 100,
) -> MaxOfRateLimiter:
    return MaxOfRateLimiter(
        limiters=(
            ItemExponentialFailureRateLimiter(base_delay=base_delay, max_delay=max_delay),
            BucketRateLimiter(qps=qps, burst=burst),
        )
    )
