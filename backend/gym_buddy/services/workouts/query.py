from __future__ import annotations

import logging

from gym_buddy.repositories.completion import CompletionStats
from gym_buddy.repositories.workout import WorkoutRepository
from gym_buddy.services._shared.base import BaseService
from gym_buddy.services._shared.dto import PageMeta
from gym_buddy.services._shared.errors import NotFoundError

from ._converters import workout_to_out
from .dto import WorkoutListIn, WorkoutListOut, WorkoutOut

logger = logging.getLogger(__name__)

_NO_STATS = CompletionStats()


class WorkoutQueryService(BaseService):
    """Read-only workout projections."""

    def get(self, workout_id: str) -> WorkoutOut:
        """Return one workout with ordered exercises and its full completion history."""

        with self.ro_uow() as uow:
            repo: WorkoutRepository = uow.workouts
            workout = repo.reload(workout_id)
            if workout is None:
                raise NotFoundError("Workout", workout_id)
            return workout_to_out(workout, include_completions=True)

    def list(self, dto: WorkoutListIn, *, max_limit: int = 100) -> WorkoutListOut:
        """Filter and paginate workouts, favorites first.

        Completion aggregates for the page are fetched in one grouped query.
        """
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, max_limit=max_limit)

        with self.ro_uow() as uow:
            page = uow.workouts.search(
                pagination,
                category=dto.category,
                search=dto.search,
                favorite=dto.favorite,
            )
            items = list(page.items)
            stats = uow.completions.stats_for(w.id for w in items)
            out = [workout_to_out(w, stats=stats.get(w.id, _NO_STATS)) for w in items]

        logger.info(
            "Listed workouts",
            extra={"page": page.page, "limit": page.limit, "returned": len(out)},
        )
        return WorkoutListOut(
            items=out,
            meta=PageMeta.build(page=page.page, limit=page.limit, total=page.total),
        )
