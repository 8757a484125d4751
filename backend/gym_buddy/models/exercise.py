"""Exercise model: one ordered step within a workout."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gym_buddy.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow

if TYPE_CHECKING:
    from .workout import Workout

# Fallback name for directives that create an exercise without one
UNTITLED_EXERCISE = "Untitled Exercise"


class Exercise(PKMixin, ReprMixin, db.Model):
    """
    Exercise belonging to exactly one workout.

    ``order`` is not unique; listings sort by ``(order, created_at, id)``.
    ``duration`` is free text such as ``"30 seconds"``.
    """

    __tablename__ = "exercises"

    workout_id: Mapped[str] = mapped_column(
        ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    reps: Mapped[int | None] = mapped_column(Integer)
    sets: Mapped[int | None] = mapped_column(Integer)
    duration: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

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

    __table_args__ = (
        CheckConstraint("reps IS NULL OR (reps >= 1 AND reps <= 1000)", name="reps_range"),
        CheckConstraint("sets IS NULL OR (sets >= 1 AND sets <= 100)", name="sets_range"),
        CheckConstraint('"order" >= 0', name="order_non_negative"),
        Index("ix_exercises_workout_order", "workout_id", "order"),
    )

    workout: Mapped[Workout] = relationship("Workout", back_populates="exercises")
