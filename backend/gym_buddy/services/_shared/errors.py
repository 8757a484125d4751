"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP. Repositories and the reconciliation engine raise them; the translation
to JSON error responses happens in ``translate_service_error()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from sqlalchemy.exc import IntegrityError

ConstraintKind = Literal["duplicate", "foreign_key", "check"]


def classify_integrity_error(exc: IntegrityError) -> ConstraintKind:
    """Guess the violated constraint family from the driver message.

    Recognizes SQLite (``UNIQUE constraint failed``) and PostgreSQL
    (``duplicate key value``) wording; anything unrecognized is ``check``.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    if "unique" in message or "duplicate key" in message:
        return "duplicate"
    if "foreign key" in message:
        return "foreign_key"
    return "check"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationError(ServiceError):
    """
    Raised when an inbound payload fails validation.

    :param messages: Human-readable field-level messages, already prefixed
        with ``"Exercise <n>: "`` where they concern one exercise.
    :type messages: list[str]
    """

    messages: list[str] = field(default_factory=list)

    def __str__(self) -> str:  # pragma: no cover
        return "Validation failed"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Workout").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConstraintError(ServiceError):
    """
    Raised when the storage engine rejects a write.

    :param entity: Entity name (e.g., "Exercise").
    :param detail: Short human-readable explanation.
    :param kind: ``duplicate`` maps to 409; ``foreign_key`` and ``check`` to 400.
    """

    entity: str
    detail: str
    kind: ConstraintKind = "duplicate"

    def __str__(self) -> str:  # pragma: no cover
        return f"Constraint violation on {self.entity}: {self.detail}"


class InternalError(ServiceError):
    """Unexpected failure; the message is only surfaced in debug mode."""

    def __init__(self, message: str = "Internal server error", *, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.original = original
