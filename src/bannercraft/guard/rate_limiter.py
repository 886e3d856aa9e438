"""Per-identity fixed-window request quotas.

Each identity key (the authenticated user id) owns one
:class:`RateLimitEntry`.  The first request opens a window of
``window_ms`` milliseconds; requests inside the window are counted until
``max_requests`` is reached, after which they are denied until the window
ends.  The next request after the window ends opens a fresh one.

State transitions per key::

    absent                         -> active(1, now + window)      allowed
    active(n, reset), now > reset  -> active(1, now + window)      allowed
    active(n, reset), n < max      -> active(n + 1, reset)         allowed
    active(n, reset), n >= max     -> unchanged                    denied

This is a fixed window, not a sliding window or token bucket: a client can
land up to ``2 * max_requests`` in a short burst straddling a boundary.

Storage and time are injected.  :class:`InMemoryRateLimitStore` keeps entries
in a process-local dict; another :class:`RateLimitStore` can be supplied for
a shared deployment.  The clock returns milliseconds so tests can drive time
deterministically.

Expired entries are ignored lazily on access.  :meth:`FixedWindowRateLimiter.cleanup`
removes them to bound memory and has no effect on decisions.
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .errors import RateLimited

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RateLimitEntry:
    """Counter for one identity.

    Attributes:
        count: Requests admitted in the current window.
        reset_at: Window end, in clock milliseconds.
    """

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitRule:
    """A quota: ``max_requests`` per ``window_ms`` milliseconds."""

    max_requests: int
    window_ms: int


class RateLimitStore(ABC):
    """Key-value storage for rate limit entries."""

    @abstractmethod
    def get(self, key: str) -> RateLimitEntry | None:
        """Return the entry for *key*, or None."""

    @abstractmethod
    def set(self, key: str, entry: RateLimitEntry) -> None:
        """Store *entry* under *key*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""

    @abstractmethod
    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        """Iterate over a snapshot of all stored entries."""


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)


class FixedWindowRateLimiter:
    """Fixed-window counter keyed by identity.

    Every read-modify-write of an entry runs under one lock, so concurrent
    requests for the same identity can never both observe the same count.

    Args:
        store: Entry storage.  Defaults to a new :class:`InMemoryRateLimitStore`.
        clock: Callable returning the current time in milliseconds.
    """

    def __init__(self, store: RateLimitStore | None = None, clock: Clock | None = None) -> None:
        self.store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock or _now_ms
        self._lock = threading.Lock()

    def try_acquire(self, identity: str, max_requests: int, window_ms: int) -> bool:
        """Count one request for *identity* if its quota allows it.

        Args:
            identity: Identity key, typically the authenticated user id.
            max_requests: Requests allowed per window.
            window_ms: Window length in milliseconds.

        Returns:
            True if the request is admitted, False if the quota is used up.
        """
        with self._lock:
            now = self._clock()
            entry = self.store.get(identity)

            if entry is None or now > entry.reset_at:
                self.store.set(identity, RateLimitEntry(count=1, reset_at=now + window_ms))
                return True

            if entry.count >= max_requests:
                return False

            self.store.set(identity, RateLimitEntry(count=entry.count + 1, reset_at=entry.reset_at))
            return True

    def retry_after(self, identity: str) -> int:
        """Whole seconds until *identity*'s window resets (at least 1)."""
        with self._lock:
            entry = self.store.get(identity)
            now = self._clock()
        if entry is None or now > entry.reset_at:
            return 1
        return max(1, math.ceil((entry.reset_at - now) / 1000))

    def check(self, identity: str, rule: RateLimitRule) -> None:
        """Admit a request under *rule* or raise.

        Raises:
            RateLimited: The identity has exhausted its quota for this window.
        """
        if not self.try_acquire(identity, rule.max_requests, rule.window_ms):
            retry_after = self.retry_after(identity)
            logger.info(f"Rate limit hit for {identity} (retry in {retry_after}s)")
            raise RateLimited(limit=rule.max_requests, retry_after=retry_after)

    def cleanup(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed.
        """
        removed = 0
        with self._lock:
            now = self._clock()
            for key, entry in self.store.items():
                if now > entry.reset_at:
                    self.store.delete(key)
                    removed += 1
        if removed:
            logger.debug(f"Swept {removed} expired rate limit entries")
        return removed

    async def run_periodic_cleanup(self, interval_seconds: float) -> None:
        """Call :meth:`cleanup` every *interval_seconds* until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.cleanup()
