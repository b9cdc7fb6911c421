"""
SWOT Explorer Backend — Fixed-Window Rate Limiter

Per-client request quota for POST /api/generate.

Contract:
    - One RateLimitRecord per client identifier, created lazily on the first
      request and never evicted. The table grows with the number of distinct
      identifiers seen during the process lifetime.
    - State is in-process memory only; nothing is shared across workers.
    - check() is atomic per call: the read-compare-increment runs under a lock.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from swot_explorer.config import log

UNKNOWN_CLIENT = "unknown"

# Coarse per-socket flood guard (slowapi), applied on top of the per-client quota.
# Unlike RateLimiter it also counts requests that the quota has already denied.
flood_guard = Limiter(key_func=get_remote_address)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitRecord:
    count: int
    reset_at: int  # epoch ms


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    reset_at: Optional[int] = None  # epoch ms, set only when denied


class RateLimiter:
    """
    Fixed-window counter keyed by client identifier.

    For identifier k at time t:
        - no record, or t > record.reset_at: start a new window
          {count: 1, reset_at: t + window_ms} and allow
        - record.count >= limit: deny, return record.reset_at
        - otherwise: increment count and allow

    Denied requests do not advance the counter.

    Args:
        limit: Max allowed requests per window.
        window_ms: Window length in milliseconds.
        clock: Callable returning the current time in epoch milliseconds.
    """

    def __init__(self, limit: int = 10, window_ms: int = 60_000, clock: Callable[[], int] = _now_ms):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be positive")
        self.limit = limit
        self.window_ms = window_ms
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            record = self._records.get(identifier)

            if record is None or now > record.reset_at:
                self._records[identifier] = RateLimitRecord(count=1, reset_at=now + self.window_ms)
                return RateLimitResult(allowed=True)

            if record.count >= self.limit:
                log(
                    "WARN",
                    "rate limit exceeded",
                    client_id=identifier,
                    count=record.count,
                    limit=self.limit,
                    reset_at=record.reset_at,
                )
                return RateLimitResult(allowed=False, reset_at=record.reset_at)

            record.count += 1
            return RateLimitResult(allowed=True)

    def get_record(self, identifier: str) -> RateLimitRecord | None:
        """Return a copy of the current record for inspection, or None."""
        with self._lock:
            record = self._records.get(identifier)
            return RateLimitRecord(record.count, record.reset_at) if record else None

    def reset(self) -> None:
        """Drop every record. Intended for tests and manual operator resets."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def get_client_ip(request: Request) -> str:
    """
    Resolve the client identifier used as the rate-limit key.

    Order: first entry of X-Forwarded-For, then X-Real-IP, else "unknown".
    Requests without either header share the "unknown" bucket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return UNKNOWN_CLIENT
