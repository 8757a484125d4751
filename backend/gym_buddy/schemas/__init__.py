"""Convenience exports for application schemas."""

from __future__ import annotations

from .common import (
    Invalid,
    PaginationMetaSchema,
    PaginationQuerySchema,
    Valid,
    ValidationResult,
    build_pagination,
)
from .fields import sanitize_string
from .workout import (
    CompletionSchema,
    ExerciseCreateSchema,
    ExerciseDirectiveSchema,
    ExerciseSchema,
    WorkoutCompleteSchema,
    WorkoutCreateSchema,
    WorkoutDetailSchema,
    WorkoutFilterSchema,
    WorkoutSchema,
    WorkoutUpdateSchema,
    parse_filters,
    validate_payload,
)

__all__ = [
    "Invalid",
    "Valid",
    "ValidationResult",
    "PaginationQuerySchema",
    "PaginationMetaSchema",
    "build_pagination",
    "sanitize_string",
    "CompletionSchema",
    "ExerciseCreateSchema",
    "ExerciseDirectiveSchema",
    "ExerciseSchema",
    "WorkoutCompleteSchema",
    "WorkoutCreateSchema",
    "WorkoutDetailSchema",
    "WorkoutFilterSchema",
    "WorkoutSchema",
    "WorkoutUpdateSchema",
    "parse_filters",
    "validate_payload",
]
