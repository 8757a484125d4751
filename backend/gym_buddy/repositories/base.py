"""Shared repository plumbing for the workout aggregates.

Repositories stage and flush; they never commit or roll back. The unit of
work owns the transaction and services decide when to open one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from gym_buddy.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


@dataclass(slots=True)
class Pagination:
    """1-based ``page`` and its ``limit``."""

    page: int
    limit: int


@dataclass(slots=True)
class Page(Generic[E]):
    """One slice of a listing plus the total number of matching rows."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Run ``stmt`` for one page and count every matching row.

    :param session: Active SQLAlchemy session.
    :param stmt: Filtered and ordered select.
    :param page: 1-based page number (clamped to ``>= 1``).
    :param limit: Page size (clamped to ``>= 1``).
    :returns: ``(items, total)``.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())

    sliced = stmt.limit(limit).offset((page - 1) * limit)
    return list(session.execute(sliced).scalars().all()), total


class BaseRepository(Generic[E]):
    """Persistence-only access to one mapped class keyed by a string ``id``.

    Subclasses set ``model``, list the attributes clients may write in
    ``_updatable_fields`` and may eager-load relationships in
    ``_default_eagerload``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Injected session, else the Flask-scoped ``db.session``."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _updatable_fields(self) -> set[str]:
        return set()

    def _sanitize_update_fields(self, fields: Mapping[str, Any], *, strict: bool) -> dict[str, Any]:
        """Keep only writable keys.

        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return {k: v for k, v in fields.items() if k in allowed}

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so defaults (id, timestamps) materialize."""
        self.session.add(instance)
        self.flush()
        return instance

    def get_for_update(self, entity_id: str) -> E | None:
        """Load one entity by id, with ``FOR UPDATE`` where the backend supports it."""
        id_attr = getattr(self.model, "id")
        stmt = self._default_eagerload(select(self.model).where(id_attr == entity_id))
        return cast(E | None, self.session.execute(stmt.with_for_update()).scalars().first())

    def exists(self, entity_id: str) -> bool:
        id_attr = getattr(self.model, "id")
        stmt = select(func.count()).select_from(self.model).where(id_attr == entity_id)
        return bool(self.session.execute(stmt).scalar())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign writable keys through ``setattr`` so ``@validates`` hooks run."""
        for k, v in self._sanitize_update_fields(fields, strict=strict).items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance
