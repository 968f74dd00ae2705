"""
Retry policy for tenant writes.

Bounded exponential backoff around a single call. Once attempts run out the
event is dead-lettered: remembered in memory and logged, then the last error
is re-raised to the caller.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, Optional, TypeVar

import urllib3
from kubernetes.client.rest import ApiException

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class DeadLetter:
    """A write that failed every allowed attempt."""

    key: str
    attempts: int
    error: str
    failed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def is_transient(error: BaseException) -> bool:
    """Check whether a failed write is worth retrying."""
    if isinstance(error, ApiException):
        return error.status in TRANSIENT_STATUS_CODES
    return isinstance(error, urllib3.exceptions.HTTPError)


class RetryPolicy:
    """Bounded exponential backoff with dead-lettering."""

    DEAD_LETTER_LIMIT = 100

    def __init__(
        self,
        max_attempts: int = 1,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize retry policy.

        Args:
            max_attempts: Total attempts including the first (1 = no retries)
            base_delay: Delay in seconds before the first retry
            max_delay: Upper bound on any single delay
            sleep: Sleep function, replaceable in tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self.dead_letters: Deque[DeadLetter] = deque(maxlen=self.DEAD_LETTER_LIMIT)

    def delay_for(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))

    def call(self, fn: Callable[[], T], key: str = "", retryable: Optional[Callable] = None) -> T:
        """
        Run fn, retrying transient failures.

        Args:
            fn: Zero-argument callable performing the write
            key: Identifier used in logs and dead letters (namespace/name)
            retryable: Predicate deciding whether an error is transient

        Returns:
            Whatever fn returns
        """
        retryable = retryable or is_transient
        attempt = 0
        while True:
            attempt += 1
            try:
                return fn()
            except Exception as e:
                if not retryable(e):
                    raise
                if attempt >= self.max_attempts:
                    if self.max_attempts > 1:
                        self._dead_letter(key, attempt, e)
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"Write for {key} failed (attempt {attempt}/{self.max_attempts}): {e}; "
                    f"retrying in {delay:.1f}s"
                )
                self._sleep(delay)

    def _dead_letter(self, key: str, attempts: int, error: Exception) -> None:
        self.dead_letters.append(DeadLetter(key=key, attempts=attempts, error=str(error)))
        logger.error(f"Giving up on {key} after {attempts} attempts: {error}")
