# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Sliding-window throttling for the credential endpoints."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from functools import wraps

from flask import current_app, request

from smartspend.shared.errors import RateLimitedError
from smartspend.shared.logging import logger


class InMemoryRateLimiter:
    """Per-key hit log kept in process memory.

    Good enough for a single worker; several workers each keep their own
    window, so the effective limit scales with the worker count.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = max(1, int(limit))
        self.window = max(0.1, float(window_seconds))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._mutex = threading.Lock()
        self._next_sweep = clock() + self.window

    def tracked_keys(self) -> int:
        """Number of keys with hits still inside the window."""
        with self._mutex:
            self._sweep(self._clock())
            return len(self._hits)

    def _live_hits(self, key: str, now: float) -> deque[float]:
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            self._live_hits(key, now)
        self._next_sweep = now + self.window

    def allow(self, key: str) -> bool:
        with self._mutex:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
            hits = self._live_hits(key, now)
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            self._hits[key] = hits
            return True

    def retry_after(self, key: str) -> float:
        with self._mutex:
            now = self._clock()
            hits = self._live_hits(key, now)
            if len(hits) < self.limit:
                return 0.0
            return round(hits[0] + self.window - now, 3)

    def reset(self) -> None:
        with self._mutex:
            self._hits.clear()


def _caller_address() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    return forwarded.split(",")[0].strip() or request.remote_addr or "unknown"


def rate_limit(limit: int, window_seconds: float):
    """Throttle a view per endpoint and caller address.

    ``app.config["RATE_LIMIT_ENABLED"]`` is consulted on each call, so a
    test app can switch throttling off after the views are defined.
    """
    limiter = InMemoryRateLimiter(limit, window_seconds)

    def decorator(view: Callable):
        @wraps(view)
        def throttled(*args, **kwargs):
            if current_app.config.get("RATE_LIMIT_ENABLED", True):
                key = f"{request.endpoint}|{_caller_address()}"
                if not limiter.allow(key):
                    wait = limiter.retry_after(key)
                    logger.warning(f"rate_limit: {request.endpoint} throttled, retry in {wait:.1f}s")
                    raise RateLimitedError(retry_after=wait)
            return view(*args, **kwargs)

        throttled.limiter = limiter  # type: ignore[attr-defined]
        return throttled

    return decorator


__all__ = ["InMemoryRateLimiter", "rate_limit"]
