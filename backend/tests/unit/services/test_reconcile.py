"""
Unit tests for exercise reconciliation against an in-memory unit of work.
"""

from __future__ import annotations

import pytest
from gym_buddy.models.exercise import UNTITLED_EXERCISE
from gym_buddy.services._shared.errors import NotFoundError
from gym_buddy.services.workouts.dto import ExerciseDirective
from gym_buddy.services.workouts.reconcile import reconcile_exercises, replacement_requested
from tests.helpers.fakes import FakeExerciseStore, FakeUnitOfWork

WORKOUT_ID = "w-1"


def _directive(id=None, action=None, **fields):
    return ExerciseDirective(id=id, action=action, fields=fields)


@pytest.fixture
def store():
    s = FakeExerciseStore()
    s.seed(
        WORKOUT_ID,
        {"id": "e1", "name": "Squats", "order": 0, "reps": 10},
        {"id": "e2", "name": "Lunges", "order": 1, "reps": 12},
        {"id": "e3", "name": "Plank", "order": 2, "duration": "1 minute"},
    )
    return s


@pytest.fixture
def uow(store):
    return FakeUnitOfWork(store)


def _names(store):
    return [row.name for row in store.list_for_workout(WORKOUT_ID)]


class TestReplacementRequested:
    def test_false_for_id_bearing_updates(self):
        assert not replacement_requested([_directive("e1"), _directive("e2", "update")])

    def test_true_when_an_entry_has_no_id(self):
        assert replacement_requested([_directive("e1"), _directive(name="New")])

    def test_true_for_explicit_create(self):
        assert replacement_requested([_directive("zzz", "create")])

    def test_deletes_alone_stay_patch(self):
        assert not replacement_requested([_directive("e1", "delete")])


class TestPatchMode:
    def test_updates_only_supplied_fields(self, uow, store):
        with uow:
            result = reconcile_exercises(uow, WORKOUT_ID, [_directive("e1", name="Front Squats")])

        row = store.rows["e1"]
        assert row.name == "Front Squats"
        assert row.reps == 10
        assert result.updated == ["e1"]
        assert result.mode == "patch"

    def test_unreferenced_exercises_survive(self, uow, store):
        with uow:
            reconcile_exercises(uow, WORKOUT_ID, [_directive("e2", reps=15)])

        assert set(store.rows) == {"e1", "e2", "e3"}

    def test_null_clears_optional_field(self, uow, store):
        with uow:
            reconcile_exercises(uow, WORKOUT_ID, [_directive("e1", reps=None)])

        assert store.rows["e1"].reps is None

    def test_resubmitting_unchanged_values_is_idempotent(self, uow, store):
        before = {k: dict(vars(v)) for k, v in store.rows.items()}
        directives = [
            _directive(row.id, name=row.name, order=row.order, reps=row.reps)
            for row in store.list_for_workout(WORKOUT_ID)
        ]
        with uow:
            reconcile_exercises(uow, WORKOUT_ID, directives)

        assert {k: dict(vars(v)) for k, v in store.rows.items()} == before

    def test_id_only_directive_issues_no_write(self, uow, store):
        with uow:
            result = reconcile_exercises(uow, WORKOUT_ID, [_directive("e1")])

        assert store.calls == []
        assert result.updated == ["e1"]

    def test_delete_action_removes_only_target(self, uow, store):
        with uow:
            result = reconcile_exercises(
                uow,
                WORKOUT_ID,
                [_directive("e1", name="Squats"), _directive("e2", "delete")],
            )

        assert set(store.rows) == {"e1", "e3"}
        assert result.deleted == ["e2"]
        assert result.mode == "patch"

    def test_directive_order_does_not_reorder(self, uow, store):
        with uow:
            reconcile_exercises(
                uow, WORKOUT_ID, [_directive("e3", name="Side Plank"), _directive("e1")]
            )

        assert _names(store) == ["Squats", "Lunges", "Side Plank"]

    def test_explicit_order_moves_exercise(self, uow, store):
        with uow:
            reconcile_exercises(
                uow, WORKOUT_ID, [_directive("e3", order=0), _directive("e1", order=5)]
            )

        assert _names(store) == ["Plank", "Lunges", "Squats"]


class TestReplaceMode:
    def test_mixed_update_and_create_replaces_the_rest(self, uow, store):
        with uow:
            result = reconcile_exercises(
                uow,
                WORKOUT_ID,
                [
                    _directive("e1", name="Updated"),
                    _directive(action="create", name="New", order=2),
                ],
            )

        assert _names(store) == ["Updated", "New"]
        assert "e2" not in store.rows and "e3" not in store.rows
        assert result.mode == "replace"
        assert sorted(result.deleted) == ["e2", "e3"]
        assert len(result.created) == 1

    def test_entry_without_id_triggers_replacement(self, uow, store):
        with uow:
            reconcile_exercises(uow, WORKOUT_ID, [_directive(name="Only One")])

        assert _names(store) == ["Only One"]

    def test_created_exercise_gets_defaults(self, uow, store):
        with uow:
            result = reconcile_exercises(uow, WORKOUT_ID, [_directive(reps=8)])

        created = store.rows[result.created[0]]
        assert created.name == UNTITLED_EXERCISE
        assert created.order == 0
        assert created.reps == 8

    def test_unknown_id_creates_with_fresh_id(self, uow, store):
        with uow:
            result = reconcile_exercises(uow, WORKOUT_ID, [_directive("ghost", name="Ghost")])

        assert "ghost" not in store.rows
        assert store.rows[result.created[0]].name == "Ghost"
        # An unknown id alone does not request replacement
        assert result.mode == "patch"
        assert {"e1", "e2", "e3"} <= set(store.rows)

    def test_create_action_with_known_id_still_updates(self, uow, store):
        with uow:
            result = reconcile_exercises(uow, WORKOUT_ID, [_directive("e1", "create", name="Again")])

        assert store.rows["e1"].name == "Again"
        assert result.updated == ["e1"]
        assert set(store.rows) == {"e1"}

    def test_explicit_delete_is_not_swept_again(self, uow, store):
        with uow:
            reconcile_exercises(
                uow, WORKOUT_ID, [_directive("e2", "delete"), _directive(name="Fresh")]
            )

        sweeps = [ids for op, ids in store.calls if op == "delete_many"]
        assert sweeps == [["e1", "e3"]]

    def test_existing_ids_argument_limits_the_sweep(self, uow, store):
        with uow:
            reconcile_exercises(uow, WORKOUT_ID, [_directive(name="Fresh")], existing_ids=["e1"])

        assert "e1" not in store.rows
        assert {"e2", "e3"} <= set(store.rows)


class TestAtomicity:
    def test_failed_delete_rolls_back_whole_batch(self, uow, store):
        before = _names(store)

        with pytest.raises(NotFoundError), uow:
            reconcile_exercises(
                uow,
                WORKOUT_ID,
                [
                    _directive("e1", name="Renamed"),
                    _directive(name="Created"),
                    _directive("missing", "delete"),
                ],
            )

        assert uow.rolled_back
        assert _names(store) == before

    def test_update_after_delete_of_same_row_fails(self, uow, store):
        with pytest.raises(NotFoundError), uow:
            reconcile_exercises(
                uow, WORKOUT_ID, [_directive("e1", "delete"), _directive("e1", name="Zombie")]
            )

        assert "e1" in store.rows

    def test_id_only_reference_after_delete_fails(self, uow, store):
        with pytest.raises(NotFoundError), uow:
            reconcile_exercises(uow, WORKOUT_ID, [_directive("e1", "delete"), _directive("e1")])

        assert "e1" in store.rows

    def test_delete_of_another_workouts_exercise_fails(self, uow, store):
        (foreign,) = store.seed("w-2", {"id": "other", "name": "Rows"})

        with pytest.raises(NotFoundError) as info, uow:
            reconcile_exercises(
                uow, WORKOUT_ID, [_directive("e1", name="Renamed"), _directive(foreign.id, "delete")]
            )

        assert info.value.key == "other"
        assert store.rows["other"].workout_id == "w-2"
        assert _names(store) == ["Squats", "Lunges", "Plank"]

    def test_operations_run_in_directive_order(self, uow, store):
        with uow:
            reconcile_exercises(
                uow,
                WORKOUT_ID,
                [_directive("e3", "delete"), _directive("e1", name="A"), _directive(name="B")],
            )

        assert [op for op, _ in store.calls] == ["delete", "update", "create", "delete_many"]
