"""
Client-side request throttling.

The Marketing API rejects accounts that call it too often, so every request
waits on a rate limiter first. Limiters are synchronous and meant for one
caller issuing requests in sequence.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from fb_reach.config.settings import ThrottleConfig

logger = logging.getLogger(__name__)


class RateLimiter(ABC):
    """Blocks the caller until the next request may be issued."""

    @abstractmethod
    def acquire(self) -> float:
        """Wait for permission to send one request. Returns seconds waited."""
        pass


class TokenBucketRateLimiter(RateLimiter):
    """
    Token bucket allowing ``requests_per_window`` calls per ``window_seconds``.

    The bucket holds at most ``requests_per_window`` tokens and refills
    continuously. It starts with ``initial_tokens`` (empty by default), so the
    first request also waits one full interval.
    """

    def __init__(
        self,
        requests_per_window: int = 1,
        window_seconds: float = 5.0,
        initial_tokens: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if requests_per_window < 1:
            raise ValueError("requests_per_window must be at least 1")
        if window_seconds < 0:
            raise ValueError("window_seconds must not be negative")

        self.capacity = float(requests_per_window)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._sleep = sleep
        self._tokens = min(float(initial_tokens), self.capacity)
        self._last_refill = clock()

    @property
    def refill_rate(self) -> float:
        """Tokens added per second."""
        if self.window_seconds == 0:
            return float("inf")
        return self.capacity / self.window_seconds

    @property
    def tokens(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self):
        now = self._clock()
        elapsed = max(now - self._last_refill, 0.0)
        self._last_refill = now
        if self.refill_rate == float("inf"):
            self._tokens = self.capacity
        else:
            self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)

    def acquire(self) -> float:
        self._refill()
        waited = 0.0
        if self._tokens < 1.0:
            waited = (1.0 - self._tokens) / self.refill_rate
            logger.debug(f"Throttling for {waited:.2f}s to stay under the rate limit")
            self._sleep(waited)
            self._refill()
        self._tokens = max(self._tokens - 1.0, 0.0)
        return waited


class FixedDelayRateLimiter(RateLimiter):
    """Sleeps for a fixed delay before every request, regardless of history."""

    def __init__(
        self, delay: float = 5.0, sleep: Callable[[float], None] = time.sleep
    ):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = float(delay)
        self._sleep = sleep

    def acquire(self) -> float:
        logger.debug(f"Waiting {self.delay:.2f}s before request")
        self._sleep(self.delay)
        return self.delay


def build_rate_limiter(throttle: ThrottleConfig) -> RateLimiter:
    """Create the rate limiter described by the throttle settings."""
    if throttle.mode == "fixed":
        return FixedDelayRateLimiter(delay=throttle.interval_seconds)
    return TokenBucketRateLimiter(
        requests_per_window=throttle.requests_per_window,
        window_seconds=throttle.window_seconds,
    )
