import redis  # type: ignore[import-untyped]
from limits.storage import RedisStorage

from gym_buddy.services._shared.ports.rate_limiter import FixedWindowLimiter


class RedisRateLimiter(FixedWindowLimiter):
    """
    Fixed-window limiter sharing its counters through Redis.

    Reuses the connection pool of the application's Redis client so every
    worker sees the same count.
    """

    def __init__(self, r: redis.Redis, *, limit: int, window_seconds: int, prefix: str = "rl"):
        super().__init__(
            RedisStorage("redis://", connection_pool=r.connection_pool),
            limit=limit,
            window_seconds=window_seconds,
            namespace=prefix,
        )
