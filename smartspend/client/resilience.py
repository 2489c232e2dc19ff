# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Circuit breaker and retry policy for talking to the API."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from smartspend.client.errors import NetworkFailure
from smartspend.shared.config import ClientConfig
from smartspend.shared.logging import get_logger

logger = get_logger("client")


@dataclass
class CircuitBreaker:
    """In-memory breaker that short-circuits calls after repeated network failures."""

    failure_threshold: int
    reset_timeout: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None

    @property
    def is_open(self) -> bool:
        return self._opened_at is not None

    def allow(self) -> bool:
        if self._opened_at is None:
            return True
        if self.clock() - self._opened_at >= self.reset_timeout:
            logger.info("breaker: half-open state")
            self._opened_at = None
            self._failures = self.failure_threshold - 1
            return True
        logger.warning("breaker: open state refusing call")
        return False

    def on_success(self) -> None:
        self._failures = 0
        self._opened_at = None

    def on_failure(self) -> None:
        self._failures += 1
        if self._failures >= self.failure_threshold and self._opened_at is None:
            self._opened_at = self.clock()
            logger.error("breaker: opening circuit after {} failures", self._failures)

    @classmethod
    def from_config(cls, config: ClientConfig) -> CircuitBreaker:
        return cls(
            failure_threshold=config.circuit_fail_threshold,
            reset_timeout=config.circuit_reset_timeout,
        )


def sync_retrying(config: ClientConfig) -> AsyncRetrying:
    """Bounded retry for explicit sync requests; only network failures are retried."""
    return AsyncRetrying(
        stop=stop_after_attempt(config.sync_retries + 1),
        wait=wait_exponential(multiplier=config.backoff_base, max=config.backoff_cap),
        retry=retry_if_exception_type(NetworkFailure),
        reraise=True,
    )


__all__ = ["CircuitBreaker", "sync_retrying"]
