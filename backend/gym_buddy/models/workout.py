"""Workout template model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from gym_buddy.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .completion import WorkoutCompletion
    from .exercise import Exercise


class Workout(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Named, categorized workout template.

    Owns its exercises and completion log; deleting a workout removes both.
    """

    __tablename__ = "workouts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    is_favorite: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        CheckConstraint("length(name) >= 1", name="name_not_empty"),
        Index("ix_workouts_category", "category"),
        Index("ix_workouts_favorite_updated", "is_favorite", "updated_at"),
    )

    exercises: Mapped[list[Exercise]] = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(Exercise.order, Exercise.created_at, Exercise.id)",
        lazy="selectin",
    )
    completions: Mapped[list[WorkoutCompletion]] = relationship(
        "WorkoutCompletion",
        back_populates="workout",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(WorkoutCompletion.completed_at.desc(), WorkoutCompletion.id)",
        lazy="select",
    )

    @validates("category")
    def _normalize_category(self, key: str, value: str) -> str:
        """Store categories lowercase."""
        return value.strip().lower() if isinstance(value, str) else value
