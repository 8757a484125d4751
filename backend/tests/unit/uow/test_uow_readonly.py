import pytest
from gym_buddy.models import Workout
from gym_buddy.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from gym_buddy.uow import SQLAlchemyUnitOfWork as RWuow
from gym_buddy.uow.sqlalchemy_uow import READ_ONLY_KEY
from sqlalchemy import func, select, text
from tests.factories.workout import WorkoutFactory


@pytest.fixture()
def workout_id(session):
    with RWuow() as uow:
        w = uow.workouts.add(WorkoutFactory.build(name="Persisted"))
        return w.id


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(WorkoutFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session, workout_id):
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("DELETE FROM workouts WHERE id = :id"), {"id": workout_id})

    def test_allows_reads(self, session, workout_id):
        with ROuow() as uow:
            count = uow.session.execute(select(func.count()).select_from(Workout)).scalar_one()
            assert count >= 1
            assert uow.workouts.reload(workout_id).name == "Persisted"

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_mutations_do_not_persist(self, session, workout_id):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            w = uow.session.get(Workout, workout_id)
            w.name = "mutated-in-ro"
            uow.session.flush()

        session.expire_all()
        assert session.get(Workout, workout_id).name == "Persisted"

    def test_guards_are_cleared_on_exit(self, session):
        with ROuow() as uow:
            assert uow.session.info[READ_ONLY_KEY] is True

        assert READ_ONLY_KEY not in session.info
        # Writes work again once the read-only scope is closed
        with RWuow() as uow:
            uow.workouts.add(WorkoutFactory.build())
