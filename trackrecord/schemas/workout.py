"""Workout and WorkoutItem schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from trackrecord.schemas.common import Metadata
from trackrecord.schemas.exercise import ExerciseSummary


class WorkoutItemInput(BaseModel):
    """One item of a create/update body. Range checks happen in the validator, not here."""

    model_config = ConfigDict(extra="forbid")

    id: int | None = None  # accepted for client convenience; items are always re-created
    exercise_id: int = 0
    sets: int = 0
    reps: int = 0
    weight: float = 0


class WorkoutCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    description: str = ""
    schedule: datetime | None = None
    items: list[WorkoutItemInput] = []


class WorkoutUpdate(BaseModel):
    """Partial update. ``items`` given (even empty) replaces the whole item set."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    schedule: datetime | None = None
    items: list[WorkoutItemInput] | None = None


class WorkoutItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workout_id: int
    exercise_id: int
    sets: int
    reps: int
    weight: float
    exercise: ExerciseSummary | None = None


class WorkoutRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    user_id: int
    schedule: datetime | None = None
    items: list[WorkoutItemRead] = []
    created_at: datetime
    updated_at: datetime


class WorkoutEnvelope(BaseModel):
    workout: WorkoutRead


class WorkoutListEnvelope(BaseModel):
    workouts: list[WorkoutRead]
    metadata: Metadata
