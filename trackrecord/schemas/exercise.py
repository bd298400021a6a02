"""Exercise schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from trackrecord.schemas.common import Metadata


class ExerciseSummary(BaseModel):
    """Exercise fields joined onto workout and log items."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    category: str
    muscle_group: str


class ExerciseRead(ExerciseSummary):
    created_at: datetime
    updated_at: datetime


class ExerciseCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    description: str = ""
    category: str = ""
    muscle_group: str = ""


class ExerciseEnvelope(BaseModel):
    exercise: ExerciseRead


class ExerciseListEnvelope(BaseModel):
    exercises: list[ExerciseRead]
    metadata: Metadata
