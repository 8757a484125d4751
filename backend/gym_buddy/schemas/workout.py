"""Workout resource schemas and the payload validation entry point."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates,
    validates_schema,
)

from gym_buddy.core.config import WORKOUT_CATEGORIES
from gym_buddy.services.workouts.dto import (
    DIRECTIVE_ACTIONS,
    ExerciseCreateIn,
    ExerciseDirective,
    WorkoutCompleteIn,
    WorkoutCreateIn,
    WorkoutListIn,
    WorkoutUpdateIn,
)

from .common import Invalid, PaginationQuerySchema, Valid, ValidationResult, flatten_messages
from .fields import BoundedInteger, Choice, CleanString, Identifier

ValidationMode = Literal["create", "update", "complete"]

CATEGORY_MESSAGE = f"Category must be one of: {', '.join(WORKOUT_CATEGORIES)}"
ACTION_MESSAGE = f"_action must be one of: {', '.join(DIRECTIVE_ACTIONS)}"
BODY_NOT_OBJECT = "Request body must be a JSON object"

# Tolerated clock skew for back-filled completions
COMPLETED_AT_SKEW = timedelta(minutes=1)


# ------------------------------- Exercises -------------------------------- #


class ExerciseCreateSchema(Schema):
    """Exercise entry of a workout creation payload."""

    error_messages = {"type": "exercise must be an object"}

    class Meta:
        unknown = EXCLUDE

    name = CleanString("name", min_length=1, max_length=100, required=True)
    reps = BoundedInteger("reps", minimum=1, maximum=1000, allow_none=True)
    sets = BoundedInteger("sets", minimum=1, maximum=100, allow_none=True)
    duration = CleanString(
        "duration", min_length=1, max_length=50, blank_as_none=True, allow_none=True
    )
    notes = CleanString("notes", max_length=500, blank_as_none=True, allow_none=True)
    order = BoundedInteger("order", minimum=0, maximum=1000, required=True)


class ExerciseDirectiveSchema(Schema):
    """Exercise directive inside a workout update (``_action`` optional)."""

    error_messages = {"type": "exercise must be an object"}

    class Meta:
        unknown = EXCLUDE

    id = Identifier("id", allow_none=True)
    name = CleanString("name", min_length=1, max_length=100)
    reps = BoundedInteger("reps", minimum=1, maximum=1000, blank_as_none=True, allow_none=True)
    sets = BoundedInteger("sets", minimum=1, maximum=100, blank_as_none=True, allow_none=True)
    duration = CleanString(
        "duration", min_length=1, max_length=50, blank_as_none=True, allow_none=True
    )
    notes = CleanString("notes", max_length=500, blank_as_none=True, allow_none=True)
    order = BoundedInteger("order", minimum=0, maximum=1000)
    action = Choice(
        "_action",
        choices=DIRECTIVE_ACTIONS,
        choice_message=ACTION_MESSAGE,
        error_messages={"invalid": ACTION_MESSAGE, "null": ACTION_MESSAGE},
        data_key="_action",
    )

    @validates_schema
    def _delete_requires_id(self, data: dict[str, Any], **_: Any) -> None:
        if data.get("action") == "delete" and not data.get("id"):
            raise ValidationError("id is required when _action is delete", "id")


# -------------------------------- Workouts -------------------------------- #


class WorkoutCreateSchema(Schema):
    """Full workout creation payload."""

    class Meta:
        unknown = EXCLUDE

    name = CleanString("name", min_length=1, max_length=100, required=True)
    description = CleanString(
        "description", max_length=500, blank_as_none=True, allow_none=True
    )
    category = Choice(
        "category", choices=WORKOUT_CATEGORIES, choice_message=CATEGORY_MESSAGE, required=True
    )
    exercises = fields.List(
        fields.Nested(ExerciseCreateSchema),
        required=True,
        validate=validate.Length(min=1, error="At least one exercise is required"),
        error_messages={
            "required": "exercises is required",
            "null": "exercises is required",
            "invalid": "exercises must be an array",
        },
    )

    @pre_load
    def _default_exercise_order(self, data: Any, **_: Any) -> Any:
        """Give exercises without an ``order`` their array position."""
        if not isinstance(data, Mapping):
            return data
        exercises = data.get("exercises")
        if not isinstance(exercises, list):
            return data
        defaulted = [
            {**item, "order": index}
            if isinstance(item, Mapping) and item.get("order") is None
            else item
            for index, item in enumerate(exercises)
        ]
        return {**data, "exercises": defaulted}


class WorkoutUpdateSchema(Schema):
    """Partial workout update; only supplied keys appear in the loaded data."""

    class Meta:
        unknown = EXCLUDE

    name = CleanString("name", min_length=1, max_length=100)
    description = CleanString(
        "description", max_length=500, blank_as_none=True, allow_none=True
    )
    category = Choice("category", choices=WORKOUT_CATEGORIES, choice_message=CATEGORY_MESSAGE)
    exercises = fields.List(
        fields.Nested(ExerciseDirectiveSchema),
        error_messages={
            "null": "exercises must be an array",
            "invalid": "exercises must be an array",
        },
    )


class WorkoutCompleteSchema(Schema):
    """Payload recording a workout completion."""

    class Meta:
        unknown = EXCLUDE

    notes = CleanString("notes", max_length=1000, blank_as_none=True, allow_none=True)
    duration = BoundedInteger("duration", minimum=1, maximum=600, allow_none=True)
    completed_at = fields.DateTime(
        data_key="completedAt",
        allow_none=True,
        error_messages={
            "invalid": "completedAt must be a valid ISO-8601 datetime",
            "invalid_awareness": "completedAt must be a valid ISO-8601 datetime",
            "format": "completedAt must be a valid ISO-8601 datetime",
        },
    )

    @validates("completed_at")
    def _not_in_future(self, value: datetime | None, **_: Any) -> None:
        if value is None:
            return
        if _as_utc(value) > datetime.now(UTC) + COMPLETED_AT_SKEW:
            raise ValidationError("completedAt cannot be in the future")

    @post_load
    def _normalize(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if data.get("completed_at") is not None:
            data["completed_at"] = _as_utc(data["completed_at"])
        return data


class WorkoutFilterSchema(PaginationQuerySchema):
    """Query parameters accepted by the workouts list endpoint."""

    category = fields.String(load_default=None)
    search = fields.String(load_default=None)
    favorite = fields.String(load_default=None)

    @post_load
    def _normalize_filters(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        category = (data.get("category") or "").strip().lower()
        search = (data.get("search") or "").strip()
        favorite = (data.get("favorite") or "").strip().lower()
        data["category"] = category or None
        data["search"] = search or None
        data["favorite"] = {"true": True, "false": False}.get(favorite)
        return data


# ------------------------------ Output shapes ----------------------------- #


class ExerciseSchema(Schema):
    """Public representation of an exercise."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    reps = fields.Integer(allow_none=True)
    sets = fields.Integer(allow_none=True)
    duration = fields.String(allow_none=True)
    notes = fields.String(allow_none=True)
    order = fields.Integer(required=True)


class CompletionSchema(Schema):
    """Public representation of a workout completion."""

    id = fields.String(required=True)
    completed_at = fields.DateTime(required=True, data_key="completedAt")
    notes = fields.String(allow_none=True)
    duration = fields.Integer(allow_none=True)


class WorkoutSchema(Schema):
    """Workout list item: ordered exercises plus completion aggregates."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    description = fields.String(allow_none=True)
    category = fields.String(required=True)
    is_favorite = fields.Boolean(required=True, data_key="isFavorite")
    created_at = fields.DateTime(required=True, data_key="createdAt")
    updated_at = fields.DateTime(required=True, data_key="updatedAt")
    exercise_count = fields.Integer(required=True, data_key="exerciseCount")
    completion_count = fields.Integer(required=True, data_key="completionCount")
    last_completed = fields.DateTime(allow_none=True, data_key="lastCompleted")
    exercises = fields.List(fields.Nested(ExerciseSchema))


class WorkoutDetailSchema(WorkoutSchema):
    """Single-workout fetch including the completion history."""

    completions = fields.List(fields.Nested(CompletionSchema))


# ------------------------------- Validation ------------------------------- #


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def _field_keys(schema: Schema) -> list[str]:
    return [f.data_key or name for name, f in schema.fields.items()]


def _ordered_messages(messages: Mapping[Any, Any], order: Sequence[str]) -> list[str]:
    keys = [k for k in order if k in messages]
    keys += [k for k in messages if k not in keys]
    out: list[str] = []
    for key in keys:
        out.extend(flatten_messages(messages[key]))
    return out


def _exercise_messages(messages: Any, item_schema: Schema) -> list[str]:
    """Prefix per-exercise problems with ``Exercise <n>: `` (1-based)."""
    if not isinstance(messages, Mapping):
        return flatten_messages(messages)
    out: list[str] = []
    item_order = _field_keys(item_schema)
    for index in sorted(messages, key=int):
        item = messages[index]
        if isinstance(item, Mapping):
            parts = _ordered_messages(item, item_order)
        else:
            parts = flatten_messages(item)
        out.append(f"Exercise {int(index) + 1}: {', '.join(parts)}")
    return out


def collect_errors(
    schema: Schema,
    messages: Mapping[str, Any],
    item_schema: Schema | None = None,
) -> list[str]:
    """Turn marshmallow's error mapping into ordered human-readable messages."""
    out: list[str] = []
    order = _field_keys(schema)
    keys = [k for k in order if k in messages]
    keys += [k for k in messages if k not in keys]
    for key in keys:
        if key == "exercises" and item_schema is not None:
            out.extend(_exercise_messages(messages[key], item_schema))
        else:
            out.extend(flatten_messages(messages[key]))
    return out


def _load(
    schema: Schema,
    payload: Any,
    item_schema: Schema | None = None,
) -> Valid[dict[str, Any]] | Invalid:
    if not isinstance(payload, Mapping):
        return Invalid([BODY_NOT_OBJECT])
    try:
        return Valid(schema.load(payload))
    except ValidationError as exc:
        messages = exc.messages if isinstance(exc.messages, Mapping) else {"_schema": exc.messages}
        return Invalid(collect_errors(schema, messages, item_schema))


def _build_create(data: Mapping[str, Any]) -> WorkoutCreateIn:
    return WorkoutCreateIn(
        name=data["name"],
        description=data.get("description"),
        category=data["category"],
        exercises=tuple(
            ExerciseCreateIn(
                name=item["name"],
                order=item["order"],
                reps=item.get("reps"),
                sets=item.get("sets"),
                duration=item.get("duration"),
                notes=item.get("notes"),
            )
            for item in data["exercises"]
        ),
    )


def _build_directive(item: Mapping[str, Any]) -> ExerciseDirective:
    values = dict(item)
    exercise_id = values.pop("id", None)
    action = values.pop("action", None)
    return ExerciseDirective(id=exercise_id, action=action, fields=values)


def _build_update(data: Mapping[str, Any]) -> WorkoutUpdateIn:
    scalars = {k: data[k] for k in ("name", "description", "category") if k in data}
    exercises = data.get("exercises")
    return WorkoutUpdateIn(
        fields=scalars,
        exercises=None if exercises is None else tuple(_build_directive(e) for e in exercises),
    )


def _build_complete(data: Mapping[str, Any]) -> WorkoutCompleteIn:
    return WorkoutCompleteIn(
        notes=data.get("notes"),
        duration=data.get("duration"),
        completed_at=data.get("completed_at"),
    )


def validate_payload(
    mode: ValidationMode, payload: Any
) -> ValidationResult[WorkoutCreateIn | WorkoutUpdateIn | WorkoutCompleteIn]:
    """Validate and sanitize an inbound payload without any I/O.

    Parameters
    ----------
    mode:
        ``"create"`` for full workouts, ``"update"`` for partial updates with
        exercise directives, ``"complete"`` for completion records.
    payload:
        Decoded JSON body of any shape.

    Returns
    -------
    Valid | Invalid
        ``Valid`` wraps the typed input DTO; ``Invalid`` lists every problem,
        per-exercise ones prefixed ``"Exercise <n>: "``.
    """
    if mode == "create":
        result = _load(WorkoutCreateSchema(), payload, ExerciseCreateSchema())
        return Valid(_build_create(result.value)) if isinstance(result, Valid) else result
    if mode == "update":
        result = _load(WorkoutUpdateSchema(), payload, ExerciseDirectiveSchema())
        return Valid(_build_update(result.value)) if isinstance(result, Valid) else result
    if mode == "complete":
        result = _load(WorkoutCompleteSchema(), payload)
        return Valid(_build_complete(result.value)) if isinstance(result, Valid) else result
    raise ValueError(f"Unknown validation mode: {mode!r}")


def parse_filters(
    args: Mapping[str, Any], *, default_limit: int = 20, max_limit: int = 100
) -> ValidationResult[WorkoutListIn]:
    """Validate list query parameters (``page`` >= 1, ``limit`` clamped)."""
    schema = WorkoutFilterSchema(default_limit=default_limit, max_limit=max_limit)
    try:
        data = schema.load(args)
    except ValidationError as exc:
        messages = exc.messages if isinstance(exc.messages, Mapping) else {"_schema": exc.messages}
        return Invalid(collect_errors(schema, messages))
    return Valid(
        WorkoutListIn(
            page=data["page"],
            limit=data["limit"],
            category=data["category"],
            search=data["search"],
            favorite=data["favorite"],
        )
    )
