# core/rate_limit.py
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class Bucket:
    tokens: float
    last: float


class TokenBucketLimiter:
    """
    Token bucket: allow 'rate' tokens per 'per_seconds' with burst up to 'capacity'.
    Keyed per caller (e.g. "career_chat:<user_id>").
    """
    def __init__(
        self,
        rate: float,
        per_seconds: float,
        capacity: float,
        clock: Callable[[], float] = time.time,
    ):
        self.rate = rate
        self.per_seconds = per_seconds
        self.capacity = capacity
        self._clock = clock
        self._buckets: Dict[str, Bucket] = {}

    def _refill(self, key: str) -> Bucket:
        now = self._clock()
        b = self._buckets.get(key)
        if b is None:
            b = Bucket(tokens=self.capacity, last=now)
            self._buckets[key] = b
            return b

        elapsed = now - b.last
        b.tokens = min(self.capacity, b.tokens + (elapsed / self.per_seconds) * self.rate)
        b.last = now
        return b

    def allow(self, key: str, cost: float = 1.0) -> bool:
        b = self._refill(key)
        if b.tokens >= cost:
            b.tokens -= cost
            return True
        return False

    def retry_after(self, key: str, cost: float = 1.0) -> float:
        """Seconds until 'cost' tokens are available again (0 if they already are)."""
        b = self._refill(key)
        missing = cost - b.tokens
        if missing <= 0:
            return 0.0
        return missing * self.per_seconds / self.rate

    def reset(self, key: str) -> None:
        self._buckets.pop(key, None)
