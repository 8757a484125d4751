"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest
from gym_buddy.models import Workout
from gym_buddy.uow import SQLAlchemyUnitOfWork
from sqlalchemy import func, select
from tests.factories.workout import WorkoutFactory


def _workout_count(session) -> int:
    return session.execute(select(func.count()).select_from(Workout)).scalar_one()


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, session):
        """
        GIVEN a writer UoW
        WHEN a workout is added through the repository and the block exits cleanly
        THEN the row is visible afterwards.
        """
        initial = _workout_count(session)

        with SQLAlchemyUnitOfWork() as uow:
            uow.workouts.add(WorkoutFactory.build())

        assert _workout_count(session) == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN nothing written in the block is persisted.
        """
        initial = _workout_count(session)

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            w = uow.workouts.add(WorkoutFactory.build())
            uow.exercises.create_for_workout(w.id, {"name": "Squat", "order": 0})
            raise RuntimeError("boom")

        assert _workout_count(session) == initial

    def test_repositories_share_the_session(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.workouts.session is uow.exercises.session is uow.completions.session
