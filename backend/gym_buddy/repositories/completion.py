"""Workout completion repository."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select

from gym_buddy.models.completion import WorkoutCompletion
from gym_buddy.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class CompletionStats:
    """Aggregate completion figures for one workout."""

    count: int = 0
    last_completed: datetime | None = None


class CompletionRepository(BaseRepository[WorkoutCompletion]):
    """Append-only access to :class:`WorkoutCompletion` rows."""

    model = WorkoutCompletion

    def add_for_workout(
        self,
        workout_id: str,
        *,
        notes: str | None = None,
        duration: int | None = None,
        completed_at: datetime | None = None,
    ) -> WorkoutCompletion:
        completion = self.model(workout_id=workout_id, notes=notes, duration=duration)
        if completed_at is not None:
            completion.completed_at = completed_at
        return self.add(completion)

    def stats_for(self, workout_ids: Iterable[str]) -> dict[str, CompletionStats]:
        """Return ``{workout_id: CompletionStats}``; workouts with none are omitted."""
        ids = list(workout_ids)
        if not ids:
            return {}
        stmt = (
            select(
                self.model.workout_id,
                func.count(self.model.id),
                func.max(self.model.completed_at),
            )
            .where(self.model.workout_id.in_(ids))
            .group_by(self.model.workout_id)
        )
        return {
            workout_id: CompletionStats(count=int(count), last_completed=last)
            for workout_id, count, last in self.session.execute(stmt).all()
        }
