"""Repository package exposing persistence-layer access for workout models."""

from __future__ import annotations

from gym_buddy.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    paginate_select,
)
from gym_buddy.repositories.completion import CompletionRepository, CompletionStats
from gym_buddy.repositories.exercise import ExerciseRepository
from gym_buddy.repositories.workout import WorkoutRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    # Domain
    "CompletionRepository",
    "CompletionStats",
    "ExerciseRepository",
    "WorkoutRepository",
]
