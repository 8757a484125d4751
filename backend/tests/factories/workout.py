"""Factory Boy definitions for workouts, exercises and completions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory
from gym_buddy.models import Exercise, Workout, WorkoutCompletion
from tests.factories import BaseFactory


class WorkoutFactory(BaseFactory):
    """Build persisted :class:`gym_buddy.models.Workout` rows (no exercises)."""

    class Meta:
        model = Workout

    name = factory.Sequence(lambda n: f"Workout {n}")
    description = factory.Faker("sentence", nb_words=6)
    category = "strength"
    is_favorite = False


class ExerciseFactory(BaseFactory):
    """Build persisted :class:`gym_buddy.models.Exercise` rows."""

    class Meta:
        model = Exercise

    workout = factory.SubFactory(WorkoutFactory)
    name = factory.Sequence(lambda n: f"Exercise {n}")
    reps = 10
    sets = 3
    duration = None
    notes = None
    order = factory.Sequence(lambda n: n)


class WorkoutCompletionFactory(BaseFactory):
    """Build persisted :class:`gym_buddy.models.WorkoutCompletion` rows."""

    class Meta:
        model = WorkoutCompletion

    workout = factory.SubFactory(WorkoutFactory)
    completed_at = factory.LazyFunction(lambda: datetime.now(UTC) - timedelta(days=1))
    notes = None
    duration = 45
