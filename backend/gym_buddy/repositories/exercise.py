"""Exercise repository: per-workout exercise persistence for reconciliation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Select, delete, select

from gym_buddy.models.exercise import Exercise
from gym_buddy.repositories.base import BaseRepository
from gym_buddy.services._shared.errors import NotFoundError


class ExerciseRepository(BaseRepository[Exercise]):
    """Persist :class:`Exercise` rows scoped to their owning workout.

    Listings always sort by ``(order, created_at, id)`` so equal ``order``
    values come back in creation sequence.
    """

    model = Exercise

    def _updatable_fields(self) -> set[str]:
        return {"name", "reps", "sets", "duration", "notes", "order"}

    def _display_order(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.order_by(
            self.model.order.asc(), self.model.created_at.asc(), self.model.id.asc()
        )

    def _require(self, workout_id: str, exercise_id: str) -> Exercise:
        instance = self.session.get(self.model, exercise_id)
        if instance is None or instance.workout_id != workout_id:
            raise NotFoundError("Exercise", exercise_id)
        return instance

    # ----------------------------- Reconciliation -----------------------------

    def list_for_workout(self, workout_id: str) -> list[Exercise]:
        """Return the workout's exercises in display order."""
        stmt = self._display_order(select(self.model).where(self.model.workout_id == workout_id))
        return list(self.session.execute(stmt).scalars().all())

    def create_for_workout(self, workout_id: str, fields: Mapping[str, Any]) -> Exercise:
        """Insert a new exercise owned by ``workout_id``.

        :param workout_id: Owning workout identifier.
        :param fields: Exercise attributes; only whitelisted keys are used.
        :returns: The flushed instance with its generated id.
        :raises ValueError: If ``fields`` carries unknown keys.
        """
        values = self._sanitize_update_fields(fields, strict=True)
        return self.add(self.model(workout_id=workout_id, **values))

    def update_fields(
        self, workout_id: str, exercise_id: str, fields: Mapping[str, Any]
    ) -> Exercise:
        """Patch only the supplied fields of one of the workout's exercises.

        :raises NotFoundError: When ``workout_id`` owns no exercise ``exercise_id``.
        """
        instance = self._require(workout_id, exercise_id)
        return self.assign_updates(instance, fields, strict=True, flush=True)

    def delete_by_id(self, workout_id: str, exercise_id: str) -> None:
        """Delete one of the workout's exercises.

        :raises NotFoundError: When ``workout_id`` owns no exercise ``exercise_id``,
            including ids that belong to another workout.
        """
        self.delete(self._require(workout_id, exercise_id))

    def delete_many(self, workout_id: str, exercise_ids: Iterable[str]) -> int:
        """Bulk-delete the workout's exercises among ``exercise_ids``.

        Unknown or foreign ids are ignored. Returns rows removed.
        """
        ids = list(exercise_ids)
        if not ids:
            return 0
        result = self.session.execute(
            delete(self.model)
            .where(self.model.workout_id == workout_id, self.model.id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
