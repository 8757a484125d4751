from __future__ import annotations

from datetime import UTC, datetime

from gym_buddy.models.completion import WorkoutCompletion
from gym_buddy.models.exercise import Exercise
from gym_buddy.models.workout import Workout
from gym_buddy.repositories.completion import CompletionStats

from .dto import CompletionOut, ExerciseOut, WorkoutOut


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def exercise_to_out(row: Exercise) -> ExerciseOut:
    return ExerciseOut(
        id=row.id,
        name=row.name,
        reps=row.reps,
        sets=row.sets,
        duration=row.duration,
        notes=row.notes,
        order=row.order,
    )


def completion_to_out(row: WorkoutCompletion) -> CompletionOut:
    return CompletionOut(
        id=row.id,
        completed_at=_aware(row.completed_at),
        notes=row.notes,
        duration=row.duration,
    )


def workout_to_out(
    row: Workout,
    *,
    stats: CompletionStats | None = None,
    include_completions: bool = False,
) -> WorkoutOut:
    """Project a workout aggregate into its read model.

    Completion aggregates come from ``stats`` when given (list pages),
    otherwise from the loaded ``completions`` collection.
    """
    exercises = sorted(row.exercises, key=lambda e: (e.order, _aware(e.created_at), e.id))
    completions: list[WorkoutCompletion] | None = None
    if stats is None or include_completions:
        completions = sorted(
            row.completions,
            key=lambda c: (_aware(c.completed_at), c.id),
            reverse=True,
        )
    if stats is None:
        stats = CompletionStats(
            count=len(completions or []),
            last_completed=completions[0].completed_at if completions else None,
        )

    return WorkoutOut(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
        is_favorite=bool(row.is_favorite),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        exercise_count=len(exercises),
        completion_count=stats.count,
        last_completed=_aware(stats.last_completed),
        exercises=[exercise_to_out(e) for e in exercises],
        completions=[completion_to_out(c) for c in completions]
        if include_completions and completions is not None
        else None,
    )
