"""Factory Boy base class bound to the per-test transactional session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import scoped_session

_bound: scoped_session | None = None


def bind_session(session: scoped_session | None) -> None:
    """Point every factory at ``session``; ``None`` unbinds."""
    global _bound
    _bound = session


def bound_session() -> scoped_session:
    if _bound is None:
        raise RuntimeError("Factories need the 'session' fixture to persist rows.")
    return _bound


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flushes rows (never commits) so each test's SAVEPOINT owns them."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = bound_session
        sqlalchemy_session_persistence = "flush"
