"""API v1 router aggregation."""

from fastapi import APIRouter

from trackrecord.api.v1.endpoints import (
    exercises,
    health,
    reports,
    users,
    workout_logs,
    workouts,
)

api_router = APIRouter()

# Public
api_router.include_router(health.router, prefix="/healthcheck", tags=["health"])
api_router.include_router(users.router, tags=["users"])

# Bearer token required (guard is a per-route dependency)
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(workout_logs.router, prefix="/workout-logs", tags=["workout-logs"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
