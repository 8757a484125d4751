"""
gym_buddy.services._shared.ports
================================

*Ports* (hexagonal interfaces) that keep cross-cutting infrastructure out of
the service layer.

Modules
-------
- :mod:`rate_limiter`:
    Defines :class:`~.RateLimiter` and :class:`~.RateLimitDecision`, the
    ``limits``-backed :class:`~.FixedWindowLimiter` and its process-local
    :class:`~.InMemoryRateLimiter`.

Concrete shared-store adapters live under ``gym_buddy.infra``.
"""

from __future__ import annotations

from .rate_limiter import FixedWindowLimiter, InMemoryRateLimiter, RateLimitDecision, RateLimiter

__all__ = ["RateLimiter", "RateLimitDecision", "FixedWindowLimiter", "InMemoryRateLimiter"]
