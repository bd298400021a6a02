"""Data access: one repository per aggregate, all sharing a session factory."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackrecord.repositories.errors import DuplicateEmailError, RecordNotFoundError
from trackrecord.repositories.exercises import ExerciseRepository
from trackrecord.repositories.users import UserRepository
from trackrecord.repositories.workout_logs import WorkoutLogRepository
from trackrecord.repositories.workouts import WorkoutRepository


@dataclass(frozen=True)
class Models:
    users: UserRepository
    exercises: ExerciseRepository
    workouts: WorkoutRepository
    workout_logs: WorkoutLogRepository

    @classmethod
    def from_sessions(cls, sessions: async_sessionmaker[AsyncSession]) -> "Models":
        return cls(
            users=UserRepository(sessions),
            exercises=ExerciseRepository(sessions),
            workouts=WorkoutRepository(sessions),
            workout_logs=WorkoutLogRepository(sessions),
        )


__all__ = [
    "DuplicateEmailError",
    "ExerciseRepository",
    "Models",
    "RecordNotFoundError",
    "UserRepository",
    "WorkoutLogRepository",
    "WorkoutRepository",
]
