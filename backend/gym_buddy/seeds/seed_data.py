"""Idempotent sample data for local development databases."""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import Any, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gym_buddy.models import Exercise, Workout, WorkoutCompletion
from gym_buddy.models.base import utcnow

LOGGER = logging.getLogger(__name__)

# Source labels of the sample catalogue folded into the category allow-list
CATEGORY_MAP: dict[str, str] = {
    "Upper Body": "strength",
    "Lower Body": "strength",
    "HIIT": "cardio",
    "Core": "strength",
    "Full Body": "strength",
    "Flexibility": "flexibility",
    "Cardio": "cardio",
    "Strength Training": "strength",
}

WORKOUT_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "Upper Body Strength",
        "description": "Build strength in your chest, back, shoulders, and arms",
        "category": "Upper Body",
        "is_favorite": True,
        "exercises": [
            {"name": "Push-ups", "reps": 15, "sets": 3, "order": 1},
            {"name": "Pull-ups", "reps": 8, "sets": 3, "order": 2},
            {"name": "Dumbbell Bench Press", "reps": 12, "sets": 3, "order": 3},
            {"name": "Shoulder Press", "reps": 10, "sets": 3, "order": 4},
            {"name": "Bicep Curls", "reps": 15, "sets": 3, "order": 5},
        ],
    },
    {
        "name": "Lower Body Power",
        "description": "Explosive lower body workout targeting legs and glutes",
        "category": "Lower Body",
        "is_favorite": False,
        "exercises": [
            {"name": "Squats", "reps": 20, "sets": 4, "order": 1},
            {"name": "Deadlifts", "reps": 12, "sets": 3, "order": 2},
            {"name": "Lunges", "reps": 15, "sets": 3, "notes": "Each leg", "order": 3},
            {"name": "Calf Raises", "reps": 20, "sets": 3, "order": 4},
            {"name": "Leg Press", "reps": 15, "sets": 3, "order": 5},
        ],
    },
    {
        "name": "HIIT Cardio Blast",
        "description": "High-intensity interval training for maximum calorie burn",
        "category": "HIIT",
        "is_favorite": True,
        "exercises": [
            {"name": "Burpees", "duration": "30 seconds", "order": 1},
            {"name": "Mountain Climbers", "duration": "30 seconds", "order": 2},
            {"name": "Jump Squats", "duration": "30 seconds", "order": 3},
            {"name": "High Knees", "duration": "30 seconds", "order": 4},
            {"name": "Rest", "duration": "60 seconds", "order": 5},
        ],
    },
    {
        "name": "Core Crusher",
        "description": "Strengthen and define your core muscles",
        "category": "Core",
        "is_favorite": False,
        "exercises": [
            {"name": "Plank", "duration": "1 minute", "order": 1},
            {"name": "Russian Twists", "reps": 20, "sets": 3, "order": 2},
            {"name": "Bicycle Crunches", "reps": 30, "sets": 3, "order": 3},
            {"name": "Dead Bug", "reps": 10, "sets": 3, "notes": "Each side", "order": 4},
            {"name": "Side Plank", "duration": "30 seconds", "notes": "Each side", "order": 5},
        ],
    },
    {
        "name": "Full Body Circuit",
        "description": "Complete workout targeting all major muscle groups",
        "category": "Full Body",
        "is_favorite": True,
        "exercises": [
            {"name": "Squat to Press", "reps": 12, "sets": 3, "order": 1},
            {"name": "Renegade Rows", "reps": 10, "sets": 3, "order": 2},
            {"name": "Thrusters", "reps": 15, "sets": 3, "order": 3},
            {"name": "Turkish Get-ups", "reps": 5, "sets": 2, "notes": "Each side", "order": 4},
            {"name": "Burpees", "reps": 10, "sets": 3, "order": 5},
        ],
    },
    {
        "name": "Morning Flexibility Flow",
        "description": "Gentle stretching routine to start your day",
        "category": "Flexibility",
        "is_favorite": False,
        "exercises": [
            {"name": "Cat-Cow Stretch", "duration": "1 minute", "order": 1},
            {"name": "Child's Pose", "duration": "30 seconds", "order": 2},
            {"name": "Downward Dog", "duration": "1 minute", "order": 3},
            {"name": "Hip Circles", "reps": 10, "notes": "Each direction", "order": 4},
            {"name": "Neck Rolls", "reps": 5, "notes": "Each direction", "order": 5},
        ],
    },
    {
        "name": "Cardio Endurance",
        "description": "Build cardiovascular endurance with steady-state exercises",
        "category": "Cardio",
        "is_favorite": False,
        "exercises": [
            {"name": "Treadmill Run", "duration": "20 minutes", "order": 1},
            {"name": "Rowing Machine", "duration": "10 minutes", "order": 2},
            {"name": "Cycling", "duration": "15 minutes", "order": 3},
            {"name": "Step-ups", "duration": "5 minutes", "order": 4},
            {"name": "Cool Down Walk", "duration": "5 minutes", "order": 5},
        ],
    },
    {
        "name": "Strength Foundation",
        "description": "Basic strength training for beginners",
        "category": "Strength Training",
        "is_favorite": False,
        "exercises": [
            {"name": "Bodyweight Squats", "reps": 15, "sets": 3, "order": 1},
            {"name": "Modified Push-ups", "reps": 10, "sets": 3, "order": 2},
            {"name": "Assisted Pull-ups", "reps": 5, "sets": 3, "order": 3},
            {"name": "Plank Hold", "duration": "30 seconds", "sets": 3, "order": 4},
            {"name": "Glute Bridges", "reps": 20, "sets": 3, "order": 5},
        ],
    },
]

SAMPLE_COMPLETIONS = 5


def _session(database: SQLAlchemy) -> Session:
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def seed_workouts(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create each sample workout (matched by name) with its exercises."""
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    for fixture in WORKOUT_FIXTURES:
        existing = session.execute(
            select(Workout).where(Workout.name == fixture["name"])
        ).scalar_one_or_none()
        if existing is not None:
            _touch(summary, "workouts", created=False)
            continue

        workout = Workout(
            name=fixture["name"],
            description=fixture["description"],
            category=CATEGORY_MAP.get(fixture["category"], "other"),
            is_favorite=fixture["is_favorite"],
        )
        workout.exercises = [Exercise(**item) for item in fixture["exercises"]]
        session.add(workout)
        _touch(summary, "workouts", created=True)
        for _ in fixture["exercises"]:
            _touch(summary, "exercises", created=True)
        if verbose:
            LOGGER.info("Seeded workout %s", fixture["name"])
    session.commit()
    return summary


def seed_completions(
    database: SQLAlchemy, *, verbose: bool = False, rng: random.Random | None = None
) -> dict[str, dict[str, int]]:
    """Back-fill a few completions over the last 30 days when none exist yet."""
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    if session.execute(select(func.count(WorkoutCompletion.id))).scalar():
        _touch(summary, "workout_completions", created=False)
        return summary

    workouts = list(session.execute(select(Workout).order_by(Workout.name)).scalars())
    if not workouts:
        return summary

    rng = rng or random.Random(42)
    now = utcnow()
    for _ in range(SAMPLE_COMPLETIONS):
        workout = rng.choice(workouts)
        session.add(
            WorkoutCompletion(
                workout_id=workout.id,
                completed_at=now - timedelta(days=rng.randrange(30)),
                duration=rng.randrange(15, 75),
                notes="Great workout!" if rng.random() > 0.5 else None,
            )
        )
        _touch(summary, "workout_completions", created=True)
    session.commit()
    if verbose:
        LOGGER.info("Seeded %d completions", SAMPLE_COMPLETIONS)
    return summary


def run_all(
    database: SQLAlchemy, *, verbose: bool = False, with_completions: bool = True
) -> dict[str, dict[str, int]]:
    """Seed workouts, then (optionally) their completion history."""
    seeders = [seed_workouts, seed_completions] if with_completions else [seed_workouts]
    combined: dict[str, dict[str, int]] = {}
    for func_ in seeders:
        result = func_(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["CATEGORY_MAP", "WORKOUT_FIXTURES", "run_all", "seed_completions", "seed_workouts"]
