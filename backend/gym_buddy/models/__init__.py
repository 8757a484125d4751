from gym_buddy.models.completion import WorkoutCompletion
from gym_buddy.models.exercise import UNTITLED_EXERCISE, Exercise
from gym_buddy.models.workout import Workout

__all__ = [
    "Exercise",
    "UNTITLED_EXERCISE",
    "Workout",
    "WorkoutCompletion",
]
