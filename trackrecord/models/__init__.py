"""ORM models - import all so Base.metadata is complete for migrations."""

from trackrecord.models.exercise import Exercise
from trackrecord.models.user import User
from trackrecord.models.workout import Workout, WorkoutItem
from trackrecord.models.workout_log import WorkoutLog, WorkoutLogItem

__all__ = [
    "Exercise",
    "User",
    "Workout",
    "WorkoutItem",
    "WorkoutLog",
    "WorkoutLogItem",
]
