from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Outcome of a single rate-limit check.

    :ivar allowed: Whether the request may proceed.
    :ivar remaining: Requests left in the current window (never negative).
    :ivar reset_at: Instant (UTC) at which the current window ends.
    """

    allowed: bool
    remaining: int
    reset_at: datetime

    def retry_after(self, now: datetime | None = None) -> int:
        """Seconds until the window resets, rounded up."""
        current = now or datetime.now(UTC)
        delta = (self.reset_at - current).total_seconds()
        return max(0, int(delta) + (1 if delta % 1 else 0))


class RateLimiter(Protocol):
    """
    Fixed-window request limiter keyed by an opaque client identifier.

    Implementations MUST count the current request before deciding.
    """

    limit: int
    window_seconds: int

    def check(self, identifier: str) -> RateLimitDecision: ...


class FixedWindowLimiter:
    """
    :class:`RateLimiter` backed by a ``limits`` storage.

    ``limit`` requests per ``window_seconds`` for each identifier; the window
    opens on the first counted request.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        limit: int,
        window_seconds: int,
        namespace: str = "gym_buddy",
    ) -> None:
        if limit < 1 or window_seconds < 1:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.storage = storage
        self._item = RateLimitItemPerSecond(limit, window_seconds, namespace=namespace)
        self._strategy = FixedWindowRateLimiter(storage)

    def check(self, identifier: str) -> RateLimitDecision:
        allowed = self._strategy.hit(self._item, identifier)
        stats = self._strategy.get_window_stats(self._item, identifier)
        return RateLimitDecision(
            allowed=allowed,
            remaining=max(0, stats.remaining),
            reset_at=datetime.fromtimestamp(stats.reset_time, tz=UTC),
        )


class InMemoryRateLimiter(FixedWindowLimiter):
    """Process-local limiter for single-worker deployments and tests."""

    def __init__(self, limit: int, window_seconds: int) -> None:
        super().__init__(MemoryStorage(), limit=limit, window_seconds=window_seconds)
