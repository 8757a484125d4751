"""Workout endpoints."""

from __future__ import annotations

from flask import Blueprint

from gym_buddy.api.deps import (
    empty_response,
    json_response,
    parse_list_query,
    read_json_body,
    timing,
)
from gym_buddy.schemas import (
    CompletionSchema,
    WorkoutDetailSchema,
    WorkoutSchema,
    build_pagination,
)
from gym_buddy.services.workouts.command import WorkoutCommandService
from gym_buddy.services.workouts.query import WorkoutQueryService

bp = Blueprint("workouts", __name__)

workout_schema = WorkoutSchema()
workout_list_schema = WorkoutSchema(many=True)
workout_detail_schema = WorkoutDetailSchema()
completion_schema = CompletionSchema()


@bp.get("")
@timing
def list_workouts():
    """Return filtered, paginated workouts (favorites first)."""

    filters = parse_list_query()
    result = WorkoutQueryService().list(filters)
    pagination = build_pagination(
        total=result.meta.total, page=result.meta.page, limit=result.meta.limit
    )
    return json_response({"data": workout_list_schema.dump(result.items), "pagination": pagination})


@bp.post("")
@timing
def create_workout():
    workout = WorkoutCommandService().create(read_json_body())
    return json_response(workout_schema.dump(workout), status=201)


@bp.get("/<workout_id>")
@timing
def get_workout(workout_id: str):
    """Return one workout with exercises and completion history."""

    workout = WorkoutQueryService().get(workout_id)
    return json_response(workout_detail_schema.dump(workout))


@bp.put("/<workout_id>")
@timing
def update_workout(workout_id: str):
    """Partially update a workout, reconciling its exercises when supplied."""

    workout = WorkoutCommandService().update(workout_id, read_json_body())
    return json_response(workout_schema.dump(workout))


@bp.delete("/<workout_id>")
@timing
def delete_workout(workout_id: str):
    WorkoutCommandService().delete(workout_id)
    return empty_response(204)


@bp.patch("/<workout_id>/favorite")
@timing
def toggle_favorite(workout_id: str):
    workout = WorkoutCommandService().toggle_favorite(workout_id)
    return json_response(workout_schema.dump(workout))


@bp.post("/<workout_id>/complete")
@timing
def complete_workout(workout_id: str):
    """Record that the workout was performed."""

    completion = WorkoutCommandService().complete(workout_id, read_json_body())
    return json_response(
        {
            "message": "Workout completed successfully",
            "completion": completion_schema.dump(completion),
        },
        status=201,
    )
