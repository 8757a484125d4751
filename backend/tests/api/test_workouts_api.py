"""HTTP tests for the workout endpoints (Flask test client)."""

from __future__ import annotations

import pytest
from gym_buddy.repositories.workout import WorkoutRepository
from sqlalchemy.exc import SQLAlchemyError

BASE = "/api/v1/workouts"


def _create(client, **overrides):
    payload = {
        "name": "Leg Day",
        "category": "strength",
        "exercises": [{"name": "Squats", "sets": 4, "reps": 10, "order": 0}],
    }
    payload.update(overrides)
    resp = client.post(BASE, json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture()
def two_exercise_workout(client):
    return _create(
        client,
        exercises=[
            {"name": "E1", "order": 0, "reps": 10},
            {"name": "E2", "order": 1, "reps": 8},
        ],
    )


class TestCreate:
    def test_create_returns_workout(self, client):
        body = _create(client)

        assert body["name"] == "Leg Day"
        assert body["category"] == "strength"
        assert body["exerciseCount"] == 1
        assert body["completionCount"] == 0
        assert body["lastCompleted"] is None
        assert body["isFavorite"] is False
        assert [e["name"] for e in body["exercises"]] == ["Squats"]
        assert set(body["exercises"][0]) == {
            "id",
            "name",
            "reps",
            "sets",
            "duration",
            "notes",
            "order",
        }

    def test_validation_errors_are_listed(self, client):
        resp = client.post(
            BASE,
            json={
                "name": "Bad",
                "category": "strength",
                "exercises": [{"name": "ok"}, {"name": "", "reps": "lots"}],
            },
        )

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "validation_error"
        assert body["details"]["errors"] == [
            "Exercise 2: name is required, reps must be a valid number"
        ]
        assert body["request_id"]

    def test_invalid_json(self, client):
        resp = client.post(BASE, data="{not json", content_type="application/json")

        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON in request body"

    def test_json_array_body(self, client):
        resp = client.post(BASE, json=[{"name": "x"}])

        assert resp.status_code == 400
        assert resp.get_json()["details"]["errors"] == ["Request body must be a JSON object"]

    def test_storage_failure_is_an_opaque_500(self, client, monkeypatch):
        def _broken(self, *args, **kwargs):
            raise SQLAlchemyError("no such table: workouts")

        monkeypatch.setattr(WorkoutRepository, "add", _broken)

        resp = client.post(
            BASE, json={"name": "X", "category": "other", "exercises": [{"name": "A"}]}
        )

        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "internal_server_error"
        assert body["message"] == "Internal server error"
        assert "details" not in body


class TestRead:
    def test_get_one(self, client):
        created = _create(client)

        resp = client.get(f"{BASE}/{created['id']}")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["id"] == created["id"]
        assert body["completions"] == []

    def test_get_unknown(self, client):
        resp = client.get(f"{BASE}/nope")

        assert resp.status_code == 404
        body = resp.get_json()
        assert body["error"] == "not_found"
        assert body["message"] == "Workout with id nope not found"

    def test_list_filters_and_paginates(self, client):
        _create(client, name="Morning Run", category="cardio")
        _create(client, name="Evening Run", category="cardio")
        _create(client, name="Deadlifts", category="strength")

        resp = client.get(f"{BASE}?category=Cardio&limit=1&page=2")

        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body["data"]) == 1
        assert body["data"][0]["category"] == "cardio"
        assert body["pagination"] == {"page": 2, "limit": 1, "total": 2, "totalPages": 2}

    def test_list_search_and_favorites_first(self, client):
        plain = _create(client, name="Push A")
        fav = _create(client, name="Push B")
        client.patch(f"{BASE}/{fav['id']}/favorite")

        body = client.get(f"{BASE}?search=push").get_json()

        assert [w["id"] for w in body["data"]] == [fav["id"], plain["id"]]

    def test_list_rejects_bad_page(self, client):
        resp = client.get(f"{BASE}?page=0")

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation_error"

    def test_list_caps_limit(self, client):
        body = client.get(f"{BASE}?limit=500").get_json()

        assert body["pagination"]["limit"] == 100


class TestUpdate:
    def test_mixed_update_replaces_exercises(self, client, two_exercise_workout):
        w = two_exercise_workout
        e1 = w["exercises"][0]["id"]

        resp = client.put(
            f"{BASE}/{w['id']}",
            json={
                "exercises": [
                    {"id": e1, "name": "Updated"},
                    {"name": "New", "order": 2, "_action": "create"},
                ]
            },
        )

        assert resp.status_code == 200
        exercises = resp.get_json()["exercises"]
        assert [e["name"] for e in exercises] == ["Updated", "New"]
        assert exercises[0]["id"] == e1

    def test_delete_by_action_leaves_others(self, client, two_exercise_workout):
        w = two_exercise_workout
        e1, e2 = (e["id"] for e in w["exercises"])

        resp = client.put(
            f"{BASE}/{w['id']}",
            json={"exercises": [{"id": e1, "reps": 12}, {"id": e2, "_action": "delete"}]},
        )

        exercises = resp.get_json()["exercises"]
        assert [(e["id"], e["reps"]) for e in exercises] == [(e1, 12)]

    def test_pure_patch_is_idempotent(self, client, two_exercise_workout):
        w = two_exercise_workout
        payload = {"exercises": [{"id": e["id"], "name": e["name"]} for e in w["exercises"]]}

        first = client.put(f"{BASE}/{w['id']}", json=payload).get_json()
        second = client.put(f"{BASE}/{w['id']}", json=payload).get_json()

        assert first["exercises"] == second["exercises"] == w["exercises"]

    def test_failed_update_changes_nothing(self, client, two_exercise_workout):
        w = two_exercise_workout

        resp = client.put(
            f"{BASE}/{w['id']}",
            json={
                "name": "Half applied?",
                "exercises": [
                    {"name": "Brand new"},
                    {"id": "ghost", "_action": "delete"},
                ],
            },
        )

        assert resp.status_code == 404
        after = client.get(f"{BASE}/{w['id']}").get_json()
        assert after["name"] == "Leg Day"
        assert after["exercises"] == w["exercises"]

    def test_cannot_delete_another_workouts_exercise(self, client, two_exercise_workout):
        other = _create(client, name="Arm Day")
        foreign_id = other["exercises"][0]["id"]

        resp = client.put(
            f"{BASE}/{two_exercise_workout['id']}",
            json={"exercises": [{"id": foreign_id, "_action": "delete"}]},
        )

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "not_found"
        after = client.get(f"{BASE}/{other['id']}").get_json()
        assert [e["id"] for e in after["exercises"]] == [foreign_id]

    def test_update_unknown_workout(self, client):
        resp = client.put(f"{BASE}/nope", json={"name": ""})

        assert resp.status_code == 404

    def test_empty_body_is_rejected(self, client, two_exercise_workout):
        resp = client.put(f"{BASE}/{two_exercise_workout['id']}")

        assert resp.status_code == 400
        assert resp.get_json()["details"]["errors"] == ["Request body must be a JSON object"]


class TestDeleteFavoriteComplete:
    def test_delete(self, client):
        created = _create(client)

        resp = client.delete(f"{BASE}/{created['id']}")

        assert resp.status_code == 204
        assert resp.data == b""
        assert client.get(f"{BASE}/{created['id']}").status_code == 404
        assert client.delete(f"{BASE}/{created['id']}").status_code == 404

    def test_toggle_favorite(self, client):
        created = _create(client)

        on = client.patch(f"{BASE}/{created['id']}/favorite").get_json()
        off = client.patch(f"{BASE}/{created['id']}/favorite").get_json()

        assert (on["isFavorite"], off["isFavorite"]) == (True, False)

    def test_complete_then_read_aggregates(self, client):
        created = _create(client)

        resp = client.post(f"{BASE}/{created['id']}/complete", json={"duration": 45})

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Workout completed successfully"
        assert body["completion"]["duration"] == 45
        assert body["completion"]["notes"] is None

        after = client.get(f"{BASE}/{created['id']}").get_json()
        assert after["completionCount"] == 1
        assert after["lastCompleted"] == body["completion"]["completedAt"]
        assert [c["id"] for c in after["completions"]] == [body["completion"]["id"]]

    def test_complete_without_body(self, client):
        created = _create(client)

        resp = client.post(f"{BASE}/{created['id']}/complete")

        assert resp.status_code == 201
        assert resp.get_json()["completion"]["duration"] is None

    def test_complete_unknown(self, client):
        assert client.post(f"{BASE}/nope/complete", json={}).status_code == 404
