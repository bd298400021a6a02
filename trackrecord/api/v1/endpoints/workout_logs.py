"""Workout log endpoints: record a completed session, read it back. No update or delete."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from trackrecord.api.deps import RequestContext, get_models, require_authenticated_user
from trackrecord.api.helpers import failed_validation, not_found, read_filters, read_id_param
from trackrecord.api.v1.endpoints.workouts import validate_items
from trackrecord.core.constants import MAX_DB_INT
from trackrecord.core.validator import Validator
from trackrecord.repositories import Models, RecordNotFoundError
from trackrecord.repositories.workout_logs import WORKOUT_LOG_SORT_SAFELIST
from trackrecord.schemas.workout_log import WorkoutLogCreate, WorkoutLogEnvelope, WorkoutLogListEnvelope

router = APIRouter()


def validate_workout_log(v: Validator, log: WorkoutLogCreate) -> None:
    v.check(log.workout_id > 0, "workout_id", "must be provided")
    v.check(log.workout_id <= MAX_DB_INT, "workout_id", "workout not found")
    v.check(log.duration > 0, "duration", "must be greater than zero")
    v.check(log.duration <= MAX_DB_INT, "duration", f"must not be more than {MAX_DB_INT}")
    v.check(len(log.items) > 0, "items", "must contain at least one item")
    validate_items(v, log.items)


@router.post("", response_model=WorkoutLogEnvelope, status_code=201)
async def log_workout(
    payload: WorkoutLogCreate,
    response: Response,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """Log a session of one of the caller's workouts (log + items in one transaction)."""
    v = Validator()
    validate_workout_log(v, payload)
    if v.valid:
        known = await models.exercises.existing_ids(item.exercise_id for item in payload.items)
        for i, item in enumerate(payload.items):
            v.check(item.exercise_id in known, f"items.{i}.exercise_id", "exercise not found")
    if not v.valid:
        raise failed_validation(v.errors)

    try:
        workout_log = await models.workout_logs.insert(
            ctx.user_id,
            payload.workout_id,
            payload.date or datetime.now(timezone.utc).date(),
            payload.duration,
            payload.notes,
            payload.items,
        )
    except RecordNotFoundError:
        # Someone else's workout looks exactly like a missing one
        v.add_error("workout_id", "workout not found")
        raise failed_validation(v.errors)

    response.headers["Location"] = f"/v1/workout-logs/{workout_log.id}"
    return {"workout_log": workout_log}


@router.get("", response_model=WorkoutLogListEnvelope)
async def list_workout_logs(
    request: Request,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    v = Validator()
    filters = read_filters(request.query_params, v, "-date", WORKOUT_LOG_SORT_SAFELIST)
    if not v.valid:
        raise failed_validation(v.errors)

    workout_logs, metadata = await models.workout_logs.get_all(ctx.user_id, filters)
    return {"workout_logs": workout_logs, "metadata": metadata}


@router.get("/{log_id}", response_model=WorkoutLogEnvelope)
async def get_workout_log(
    log_id: str,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    try:
        workout_log = await models.workout_logs.get(read_id_param(log_id), ctx.user_id)
    except RecordNotFoundError:
        raise not_found()
    return {"workout_log": workout_log}
