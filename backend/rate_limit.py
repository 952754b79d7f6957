"""Fixed-window request limiting keyed by client address.

The limiter only talks to a RateLimitStore, so the in-process table used by
default can be swapped for an external counter without touching callers.
State is not durable: restarting the process clears every window.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request

import config
from errors import RateLimited

logger = logging.getLogger(__name__)


@dataclass
class WindowState:
    count: int
    reset_at: float


class RateLimitStore(Protocol):
    def get(self, key: str) -> WindowState | None: ...

    def increment(self, key: str) -> int: ...

    def reset(self, key: str, reset_at: float) -> None: ...


class InMemoryRateLimitStore:
    """Process-local table of windows."""

    def __init__(self) -> None:
        self._windows: dict[str, WindowState] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> WindowState | None:
        with self._lock:
            state = self._windows.get(key)
            return WindowState(state.count, state.reset_at) if state else None

    def increment(self, key: str) -> int:
        with self._lock:
            state = self._windows[key]
            state.count += 1
            return state.count

    def reset(self, key: str, reset_at: float) -> None:
        """Start a new window holding one request."""
        with self._lock:
            self._windows[key] = WindowState(count=1, reset_at=reset_at)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()


class RateLimiter:
    def __init__(
        self,
        store: RateLimitStore | None = None,
        max_requests: int | None = None,
        window_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.max_requests = config.RATE_LIMIT_MAX_REQUESTS if max_requests is None else max_requests
        self.window_seconds = config.RATE_LIMIT_WINDOW_SECONDS if window_seconds is None else window_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Count one request for `key`; False when the window is already full."""
        with self._lock:
            now = self._clock()
            state = self.store.get(key)
            if state is None or now > state.reset_at:
                self.store.reset(key, now + self.window_seconds)
                return True
            if state.count >= self.max_requests:
                return False
            self.store.increment(key)
            return True


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _limiter
    if _limiter is None:
        _limiter = RateLimiter()
    return _limiter


def reset_rate_limiter() -> None:
    """Drop the shared limiter (tests)."""
    global _limiter
    _limiter = None


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency: raise RateLimited when the caller is over its window."""
    key = client_key(request)
    if not get_rate_limiter().hit(key):
        logger.warning("Rate limit exceeded for %s", key)
        raise RateLimited()
