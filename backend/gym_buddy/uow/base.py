"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol


class ExerciseStore(Protocol):
    """Exercise persistence operations the reconciliation engine relies on.

    Every call is scoped to one workout. ``update_fields`` and ``delete_by_id``
    raise :class:`~gym_buddy.services._shared.errors.NotFoundError` for ids the
    workout does not own.
    """

    def list_for_workout(self, workout_id: str) -> Sequence[Any]: ...
    def create_for_workout(self, workout_id: str, fields: Mapping[str, Any]) -> Any: ...
    def update_fields(
        self, workout_id: str, exercise_id: str, fields: Mapping[str, Any]
    ) -> Any: ...
    def delete_by_id(self, workout_id: str, exercise_id: str) -> None: ...
    def delete_many(self, workout_id: str, exercise_ids: Iterable[str]) -> int: ...


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Provide ``workouts``, ``exercises`` and ``completions`` repositories
      bound to the same session/transaction.
    - Commit on success, rollback on error.
    """

    exercises: ExerciseStore

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
