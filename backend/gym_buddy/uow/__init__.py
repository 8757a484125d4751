"""Unit of Work abstractions and concrete implementations.

Re-exports the SQLAlchemy-backed units of work used by the workout services,
alongside the abstract contracts the reconciliation engine depends on.
"""

from .base import ExerciseStore, UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "ExerciseStore",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
