from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from gym_buddy.models.workout import Workout
from gym_buddy.repositories.workout import WorkoutRepository
from gym_buddy.schemas.common import Invalid
from gym_buddy.schemas.workout import validate_payload
from gym_buddy.services._shared.base import BaseService
from gym_buddy.services._shared.errors import (
    ConstraintError,
    InternalError,
    NotFoundError,
    ValidationError,
    classify_integrity_error,
)
from gym_buddy.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

from ._converters import completion_to_out, workout_to_out
from .dto import (
    CompletionOut,
    WorkoutCompleteIn,
    WorkoutCreateIn,
    WorkoutOut,
    WorkoutUpdateIn,
)
from .reconcile import reconcile_exercises

logger = logging.getLogger(__name__)


def _validated(mode: str, payload: Any) -> Any:
    result = validate_payload(mode, payload)  # type: ignore[arg-type]
    if isinstance(result, Invalid):
        raise ValidationError(result.errors)
    return result.value


class WorkoutCommandService(BaseService):
    """Orchestrate workout mutations, each inside one read-write unit of work."""

    @contextmanager
    def _transaction(self, entity: str = "Workout") -> Iterator[SQLAlchemyUnitOfWork]:
        """Yield a read-write UoW and map storage failures to service errors.

        Integrity violations become :class:`ConstraintError`. Lost connections
        (``OperationalError``) propagate for the 503 handler; any other
        SQLAlchemy failure becomes :class:`InternalError`.
        """
        try:
            with self.rw_uow() as uow:
                yield uow
        except IntegrityError as exc:
            kind = classify_integrity_error(exc)
            logger.warning("Write rejected by constraint", extra={"kind": kind})
            raise ConstraintError(entity, "Write violates a data constraint", kind) from exc
        except OperationalError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Write failed", extra={"entity": entity}, exc_info=True)
            raise InternalError(original=exc) from exc

    def _require(self, repo: WorkoutRepository, workout_id: str) -> Workout:
        workout = repo.get_for_update(workout_id)
        if workout is None:
            raise NotFoundError("Workout", workout_id)
        return workout

    def _reloaded(self, repo: WorkoutRepository, workout_id: str) -> WorkoutOut:
        fresh = repo.reload(workout_id)
        if fresh is None:
            raise NotFoundError("Workout", workout_id)
        return workout_to_out(fresh)

    def create(self, payload: Any) -> WorkoutOut:
        """Validate then insert a workout together with its exercises.

        :param payload: Decoded JSON body.
        :raises ValidationError: When the body fails validation; nothing is written.
        :rtype: WorkoutOut
        """
        dto: WorkoutCreateIn = _validated("create", payload)

        with self._transaction() as uow:
            workout = uow.workouts.add(
                Workout(name=dto.name, description=dto.description, category=dto.category)
            )
            for exercise in dto.exercises:
                uow.exercises.create_for_workout(workout.id, exercise.as_fields())

            logger.info(
                "Workout created",
                extra={"workout_id": workout.id, "exercises_created": len(dto.exercises)},
            )
            return self._reloaded(uow.workouts, workout.id)

    def update(self, workout_id: str, payload: Any) -> WorkoutOut:
        """Apply a partial update, reconciling exercises when an array is supplied.

        The workout must exist before the body is even validated. Scalar fields
        are written first, then the exercise directives; a failure anywhere
        rolls back both.

        :param workout_id: Target workout.
        :param payload: Decoded JSON body.
        :raises NotFoundError: Unknown workout, or a directive targets a missing exercise.
        :raises ValidationError: Invalid body.
        :rtype: WorkoutOut
        """
        with self._transaction() as uow:
            workout = self._require(uow.workouts, workout_id)
            dto: WorkoutUpdateIn = _validated("update", payload)

            if dto.fields:
                uow.workouts.assign_updates(workout, dto.fields)

            extra: dict[str, Any] = {"workout_id": workout_id, "fields": sorted(dto.fields)}
            if dto.exercises is not None:
                result = reconcile_exercises(
                    uow,
                    workout_id,
                    dto.exercises,
                    existing_ids=[e.id for e in workout.exercises],
                )
                extra.update(result.as_log_extra())

            logger.info("Workout updated", extra=extra)
            return self._reloaded(uow.workouts, workout_id)

    def delete(self, workout_id: str) -> None:
        """Delete a workout; its exercises and completions go with it."""

        with self._transaction() as uow:
            workout = self._require(uow.workouts, workout_id)
            uow.workouts.delete(workout)
            logger.info("Workout deleted", extra={"workout_id": workout_id})

    def toggle_favorite(self, workout_id: str) -> WorkoutOut:
        """Flip ``is_favorite`` and return the refreshed workout."""

        with self._transaction() as uow:
            workout = self._require(uow.workouts, workout_id)
            uow.workouts.assign_updates(workout, {"is_favorite": not workout.is_favorite})
            logger.info(
                "Workout favorite toggled",
                extra={"workout_id": workout_id, "is_favorite": workout.is_favorite},
            )
            return self._reloaded(uow.workouts, workout_id)

    def complete(self, workout_id: str, payload: Any) -> CompletionOut:
        """Append a completion record to an existing workout.

        :param workout_id: Completed workout.
        :param payload: Decoded JSON body; ``None`` counts as an empty object.
        :raises NotFoundError: Unknown workout.
        :raises ValidationError: Invalid body.
        :rtype: CompletionOut
        """
        with self._transaction("WorkoutCompletion") as uow:
            if not uow.workouts.exists(workout_id):
                raise NotFoundError("Workout", workout_id)
            dto: WorkoutCompleteIn = _validated("complete", {} if payload is None else payload)

            completion = uow.completions.add_for_workout(
                workout_id,
                notes=dto.notes,
                duration=dto.duration,
                completed_at=dto.completed_at,
            )
            logger.info(
                "Workout completed",
                extra={"workout_id": workout_id, "completion_id": completion.id},
            )
            return completion_to_out(completion)
