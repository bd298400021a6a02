"""WorkoutLog schemas."""

import datetime as dt
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from trackrecord.schemas.common import Metadata
from trackrecord.schemas.exercise import ExerciseSummary


class WorkoutLogItemInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exercise_id: int = 0
    sets: int = 0
    reps: int = 0
    weight: float = 0


class WorkoutLogCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    workout_id: int = 0
    date: dt.date | None = None  # defaults to today (UTC)
    duration: int = 0
    notes: str = ""
    items: list[WorkoutLogItemInput] = []


class WorkoutLogItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    log_id: int
    exercise_id: int
    sets: int
    reps: int
    weight: float
    exercise: ExerciseSummary | None = None


class WorkoutLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workout_id: int
    user_id: int
    date: dt.date
    duration: int
    notes: str
    workout_name: str = ""
    items: list[WorkoutLogItemRead] = []
    created_at: datetime


class WorkoutLogEnvelope(BaseModel):
    workout_log: WorkoutLogRead


class WorkoutLogListEnvelope(BaseModel):
    workout_logs: list[WorkoutLogRead]
    metadata: Metadata
