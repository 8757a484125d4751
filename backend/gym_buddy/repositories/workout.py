"""Workout repository: filtered listing and aggregate reloads."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import selectinload

from gym_buddy.models.workout import Workout
from gym_buddy.repositories.base import BaseRepository, Page, Pagination, paginate_select


class WorkoutRepository(BaseRepository[Workout]):
    """Persist :class:`Workout` aggregates.

    Exercises are eager-loaded with ``selectinload`` so list pages never
    trigger per-row queries. Completion rows are only loaded by :meth:`reload`;
    list pages use grouped aggregates instead.
    """

    model = Workout

    def _updatable_fields(self) -> set[str]:
        return {"name", "description", "category", "is_favorite"}

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.options(selectinload(self.model.exercises))

    def search(
        self,
        pagination: Pagination,
        *,
        category: str | None = None,
        search: str | None = None,
        favorite: bool | None = None,
    ) -> Page[Workout]:
        """Filter and paginate workouts, favorites first then most recently updated.

        :param pagination: Page and limit.
        :param category: Case-insensitive exact category match.
        :param search: Case-insensitive substring of name or description.
        :param favorite: Restrict to favorites (``True``) or non-favorites.
        :returns: One page of workouts with their exercises loaded.
        :rtype: Page[Workout]
        """
        stmt: Select[Any] = select(self.model)
        if category:
            stmt = stmt.where(func.lower(self.model.category) == category.strip().lower())
        if search:
            stmt = stmt.where(
                or_(
                    self.model.name.icontains(search, autoescape=True),
                    self.model.description.icontains(search, autoescape=True),
                )
            )
        if favorite is not None:
            stmt = stmt.where(self.model.is_favorite.is_(favorite))

        stmt = self._default_eagerload(stmt).order_by(
            self.model.is_favorite.desc(),
            self.model.updated_at.desc(),
            self.model.id.asc(),
        )
        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    def reload(self, workout_id: str) -> Workout | None:
        """Fetch a workout discarding any stale in-session state (collections included)."""
        stmt = self._default_eagerload(select(self.model).where(self.model.id == workout_id))
        stmt = stmt.options(selectinload(self.model.completions)).execution_options(
            populate_existing=True
        )
        return self.session.execute(stmt).scalars().first()
