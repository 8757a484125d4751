"""Per-client request limiting for API routes."""

from __future__ import annotations

import logging

from flask import Flask, current_app, g, request

from gym_buddy.core.errors import TooManyRequests
from gym_buddy.services._shared.ports.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitDecision,
    RateLimiter,
)

log = logging.getLogger(__name__)

EXTENSION_KEY = "rate_limiter"


def client_identifier() -> str:
    """Resolve the client address used as the limiter key.

    Prefers the first ``X-Forwarded-For`` hop, then ``X-Real-IP``, then the
    socket peer address.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    return request.remote_addr or "unknown"


def build_rate_limiter(app: Flask) -> RateLimiter:
    """Return a Redis-backed limiter when Redis is configured, else in-memory."""
    limit = int(app.config.get("RATE_LIMIT_REQUESTS", 100))
    window = int(app.config.get("RATE_LIMIT_WINDOW_SECONDS", 900))
    redis_client = app.extensions.get("redis_client")
    if redis_client is not None:
        from gym_buddy.infra.redis.redis_rate_limiter import RedisRateLimiter

        return RedisRateLimiter(redis_client, limit=limit, window_seconds=window)
    return InMemoryRateLimiter(limit=limit, window_seconds=window)


def get_rate_limiter() -> RateLimiter:
    limiter = current_app.extensions.get(EXTENSION_KEY)
    if limiter is None:
        limiter = build_rate_limiter(current_app)
        current_app.extensions[EXTENSION_KEY] = limiter
    return limiter


def init_app(app: Flask) -> None:
    """Install ``before_request``/``after_request`` hooks enforcing the limit.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``RATE_LIMIT_*`` settings drive the limiter. Only
        paths beneath ``API_BASE_PREFIX`` are counted, and nothing is
        enforced while ``RATE_LIMIT_ENABLED`` is false.
    """
    api_prefix = app.config.get("API_BASE_PREFIX", "/api")

    @app.before_request
    def _enforce_rate_limit() -> None:
        if not current_app.config.get("RATE_LIMIT_ENABLED", False):
            return
        if not request.path.startswith(api_prefix):
            return
        limiter = get_rate_limiter()
        client = client_identifier()
        decision = limiter.check(client)
        g.rate_limit = decision
        if not decision.allowed:
            log.warning("rate_limit.exceeded", extra={"client": client})
            raise TooManyRequests(
                "Too many requests, please try again later.",
                retry_after=decision.retry_after(),
            )

    @app.after_request
    def _inject_rate_limit_headers(response):
        decision: RateLimitDecision | None = g.get("rate_limit")
        if decision is None:
            return response
        limiter = current_app.extensions.get(EXTENSION_KEY)
        if limiter is not None:
            response.headers["X-RateLimit-Limit"] = str(limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(decision.reset_at.timestamp()))
        return response


__all__ = ["client_identifier", "build_rate_limiter", "get_rate_limiter", "init_app"]
