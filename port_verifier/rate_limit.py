"""Utilities for applying delay and rate limiting to oracle calls."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import OracleConfig
from .models import OracleResponse


@dataclass
class DelayPolicy:
    """Simple policy describing artificial delay after each oracle call."""

    delay_seconds: float = 0.0


class RateLimiter:
    """Token bucket style rate limiter enforcing minimum interval between calls."""

    def __init__(self, calls_per_minute: Optional[float]) -> None:
        self._interval = 60.0 / float(calls_per_minute) if calls_per_minute else 0.0
        self._lock = threading.Lock()
        self._next_available = 0.0

    @property
    def interval(self) -> float:
        return self._interval

    def acquire(self) -> None:
        if self._interval <= 0:
            return
        with self._lock:
            now = time.monotonic()
            if now < self._next_available:
                time.sleep(self._next_available - now)
                now = time.monotonic()
            self._next_available = now + self._interval


class RateLimitedOracle:
    """Wrapper that enforces delay and rate limiting when invoking an oracle."""

    def __init__(
        self,
        oracle,
        *,
        display_name: Optional[str] = None,
        delay_policy: Optional[DelayPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._oracle = oracle
        self._display_name = display_name
        self._delay_policy = delay_policy or DelayPolicy()
        self._rate_limiter = rate_limiter or RateLimiter(None)

    @property
    def name(self) -> str:
        if self._display_name:
            return self._display_name
        return getattr(self._oracle, "name", self._oracle.__class__.__name__)

    @property
    def wrapped(self):
        return self._oracle

    def _pause(self) -> None:
        if self._delay_policy.delay_seconds > 0:
            time.sleep(self._delay_policy.delay_seconds)

    def verify_batch(self, names: Sequence[str], config: OracleConfig) -> OracleResponse:
        self._rate_limiter.acquire()
        try:
            return self._oracle.verify_batch(names, config)
        finally:
            self._pause()

    def summarize(self, lines: Sequence[str], config: OracleConfig) -> str:
        self._rate_limiter.acquire()
        try:
            return self._oracle.summarize(lines, config)
        finally:
            self._pause()
