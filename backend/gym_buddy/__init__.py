"""Expose the application factory at package level.

Provide convenient access to :func:`gym_buddy.factory.create_app` so callers can
``from gym_buddy import create_app`` (e.g. ``gunicorn "gym_buddy:create_app()"``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
