"""Progress report schemas."""

from datetime import date

from pydantic import BaseModel

from trackrecord.schemas.workout_log import WorkoutLogRead


class ExerciseStats(BaseModel):
    exercise_id: int
    exercise_name: str
    total_sets: int = 0
    total_reps: int = 0
    max_weight: float = 0.0
    workouts: int = 0  # number of logged items for this exercise


class ProgressReport(BaseModel):
    start_date: date
    end_date: date
    workout_count: int
    total_duration: int
    workouts: list[WorkoutLogRead]
    exercise_stats: dict[int, ExerciseStats]


class ProgressReportEnvelope(BaseModel):
    report: ProgressReport
