"""Workout use-cases: reconciliation, commands and queries.

Import :mod:`.command` and :mod:`.query` directly; this package only re-exports
the DTOs so schemas can depend on it without pulling in the services.
"""

from __future__ import annotations

from .dto import (
    DIRECTIVE_ACTIONS,
    CompletionOut,
    ExerciseCreateIn,
    ExerciseDirective,
    ExerciseOut,
    WorkoutCompleteIn,
    WorkoutCreateIn,
    WorkoutListIn,
    WorkoutListOut,
    WorkoutOut,
    WorkoutUpdateIn,
)

__all__ = [
    "DIRECTIVE_ACTIONS",
    "CompletionOut",
    "ExerciseCreateIn",
    "ExerciseDirective",
    "ExerciseOut",
    "WorkoutCompleteIn",
    "WorkoutCreateIn",
    "WorkoutListIn",
    "WorkoutListOut",
    "WorkoutOut",
    "WorkoutUpdateIn",
]
