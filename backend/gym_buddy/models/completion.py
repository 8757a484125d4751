"""Append-only record of a performed workout."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gym_buddy.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow

if TYPE_CHECKING:
    from .workout import Workout


class WorkoutCompletion(PKMixin, ReprMixin, db.Model):
    """Completion entry; never updated, removed only with its workout."""

    __tablename__ = "workout_completions"

    workout_id: Mapped[str] = mapped_column(
        ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    notes: Mapped[str | None] = mapped_column(Text)
    # minutes
    duration: Mapped[int | None] = mapped_column(Integer)

    __table_args__ = (
        CheckConstraint(
            "duration IS NULL OR (duration >= 1 AND duration <= 600)", name="duration_range"
        ),
        Index("ix_workout_completions_workout_completed", "workout_id", "completed_at"),
    )

    workout: Mapped[Workout] = relationship("Workout", back_populates="completions")
