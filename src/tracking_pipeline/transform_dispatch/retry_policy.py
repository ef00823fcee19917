"""Retry policy for transformation dispatch."""

from __future__ import annotations

import random
from dataclasses import dataclass

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SECONDS: tuple[int, ...] = (1, 2, 3)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with a flat, uniformly chosen backoff delay.

    The delay does not grow with the attempt number.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_seconds: tuple[int, ...] = DEFAULT_BACKOFF_SECONDS

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative.")
        if not self.backoff_seconds or any(delay <= 0 for delay in self.backoff_seconds):
            raise ValueError("backoff_seconds must contain positive delays.")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def next_delay(self, rng: random.Random) -> float:
        return float(rng.choice(self.backoff_seconds))
