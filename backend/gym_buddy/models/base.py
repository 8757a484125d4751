"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Return the current timezone-aware UTC instant (microsecond precision)."""
    return datetime.now(UTC)


def new_id() -> str:
    """Return a fresh opaque identifier (UUID4 text)."""
    return str(uuid4())


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp stamped in Python on insert; the server
        default only covers rows written outside the ORM.
    updated_at:
        Timezone-aware timestamp refreshed on every ORM update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class PKMixin:
    """Expose an opaque string primary key column named ``id``.

    Attributes
    ----------
    id:
        UUID4 text generated in Python when the row is first flushed.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        """Return a short and useful string representation.

        :returns: Debug-friendly ``<ClassName id=...>``.
        :rtype: str
        """
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
