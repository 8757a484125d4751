from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from gym_buddy.services._shared.dto import PageMeta

DirectiveAction = Literal["update", "create", "delete"]
DIRECTIVE_ACTIONS: tuple[str, ...] = ("update", "create", "delete")


# ------------------------------ Input DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class ExerciseCreateIn:
    """Sanitized exercise for workout creation (``order`` already defaulted)."""

    name: str
    order: int
    reps: int | None = None
    sets: int | None = None
    duration: str | None = None
    notes: str | None = None

    def as_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "order": self.order,
            "reps": self.reps,
            "sets": self.sets,
            "duration": self.duration,
            "notes": self.notes,
        }


@dataclass(frozen=True, slots=True)
class WorkoutCreateIn:
    name: str
    category: str
    exercises: tuple[ExerciseCreateIn, ...]
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ExerciseDirective:
    """
    One entry of an update payload's ``exercises`` array.

    :param id: Existing exercise id the directive refers to, if any.
    :param action: Explicit ``_action`` tag, if any.
    :param fields: Only the exercise fields the caller supplied; ``None``
        values clear optional columns.
    """

    id: str | None = None
    action: DirectiveAction | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_delete(self) -> bool:
        return self.action == "delete"

    @property
    def signals_replacement(self) -> bool:
        """Whether this directive switches reconciliation to replacement mode."""
        return self.id is None or self.action == "create"


@dataclass(frozen=True, slots=True)
class WorkoutUpdateIn:
    """
    Partial workout update.

    :param fields: Scalar workout fields actually supplied (absent keys untouched).
    :param exercises: Directives, or ``None`` when the array was not sent.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)
    exercises: tuple[ExerciseDirective, ...] | None = None


@dataclass(frozen=True, slots=True)
class WorkoutCompleteIn:
    notes: str | None = None
    duration: int | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class WorkoutListIn:
    page: int = 1
    limit: int = 20
    category: str | None = None
    search: str | None = None
    favorite: bool | None = None


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class ExerciseOut:
    id: str
    name: str
    reps: int | None
    sets: int | None
    duration: str | None
    notes: str | None
    order: int


@dataclass(frozen=True, slots=True)
class CompletionOut:
    id: str
    completed_at: datetime
    notes: str | None
    duration: int | None


@dataclass(frozen=True, slots=True)
class WorkoutOut:
    """Read model of a workout with ordered exercises and completion aggregates.

    ``completions`` is populated only for single-workout fetches.
    """

    id: str
    name: str
    description: str | None
    category: str
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
    exercise_count: int
    completion_count: int
    last_completed: datetime | None
    exercises: list[ExerciseOut]
    completions: list[CompletionOut] | None = None


@dataclass(frozen=True, slots=True)
class WorkoutListOut:
    items: list[WorkoutOut]
    meta: PageMeta
