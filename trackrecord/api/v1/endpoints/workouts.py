"""Workout CRUD endpoints. Every query is scoped to the authenticated user."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from trackrecord.api.deps import RequestContext, get_models, require_authenticated_user
from trackrecord.api.helpers import failed_validation, not_found, read_filters, read_id_param
from trackrecord.core.constants import MAX_DB_INT, MAX_WEIGHT
from trackrecord.core.validator import Validator
from trackrecord.repositories import Models, RecordNotFoundError
from trackrecord.repositories.exercises import ExerciseRepository
from trackrecord.repositories.workouts import WORKOUT_SORT_SAFELIST
from trackrecord.schemas.common import MessageEnvelope
from trackrecord.schemas.workout import (
    WorkoutCreate,
    WorkoutEnvelope,
    WorkoutItemInput,
    WorkoutListEnvelope,
    WorkoutUpdate,
)
from trackrecord.schemas.workout_log import WorkoutLogItemInput

router = APIRouter()


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def validate_items(v: Validator, items: Sequence[WorkoutItemInput | WorkoutLogItemInput]) -> None:
    """Per-item rules shared by workouts and workout logs. Keys are ``items.<index>.<field>``."""
    for i, item in enumerate(items):
        v.check(item.exercise_id > 0, f"items.{i}.exercise_id", "must be provided")
        v.check(item.exercise_id <= MAX_DB_INT, f"items.{i}.exercise_id", "exercise not found")
        for field in ("sets", "reps"):
            value = getattr(item, field)
            v.check(value > 0, f"items.{i}.{field}", "must be greater than zero")
            v.check(value <= MAX_DB_INT, f"items.{i}.{field}", f"must not be more than {MAX_DB_INT}")
        # Non-finite weights get the range message ahead of the sign check
        v.check(math.isfinite(item.weight), f"items.{i}.weight", f"must be a finite value below {MAX_WEIGHT}")
        v.check(item.weight >= 0, f"items.{i}.weight", "must not be negative")
        v.check(round(item.weight, 2) < MAX_WEIGHT, f"items.{i}.weight", f"must be a finite value below {MAX_WEIGHT}")


def validate_workout(
    v: Validator,
    name: str,
    description: str,
    schedule: datetime | None,
    items: Sequence[WorkoutItemInput] = (),
) -> None:
    v.check(name != "", "name", "must be provided")
    v.check(len(name.encode()) <= 100, "name", "must not be more than 100 bytes long")
    v.check(description != "", "description", "must be provided")
    v.check(len(description.encode()) <= 1000, "description", "must not be more than 1000 bytes long")
    if schedule is not None:
        v.check(_as_utc(schedule) > datetime.now(timezone.utc), "schedule", "must be in the future")
    validate_items(v, items)


async def check_exercise_references(
    v: Validator, exercises: ExerciseRepository, items: Sequence[WorkoutItemInput]
) -> None:
    """Report items pointing at unknown exercises as field errors instead of a failed insert."""
    known = await exercises.existing_ids(item.exercise_id for item in items if item.exercise_id > 0)
    for i, item in enumerate(items):
        if item.exercise_id > 0:
            v.check(item.exercise_id in known, f"items.{i}.exercise_id", "exercise not found")


@router.get("", response_model=WorkoutListEnvelope)
async def list_workouts(
    request: Request,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    v = Validator()
    filters = read_filters(request.query_params, v, "created_at", WORKOUT_SORT_SAFELIST)
    if not v.valid:
        raise failed_validation(v.errors)

    workouts, metadata = await models.workouts.get_all(ctx.user_id, filters)
    return {"workouts": workouts, "metadata": metadata}


@router.post("", response_model=WorkoutEnvelope, status_code=201)
async def create_workout(
    payload: WorkoutCreate,
    response: Response,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """Create a workout together with its items (one transaction)."""
    v = Validator()
    validate_workout(v, payload.name, payload.description, payload.schedule, payload.items)
    if v.valid:
        await check_exercise_references(v, models.exercises, payload.items)
    if not v.valid:
        raise failed_validation(v.errors)

    workout = await models.workouts.insert(
        ctx.user_id, payload.name, payload.description, payload.schedule, payload.items
    )
    response.headers["Location"] = f"/v1/workouts/{workout.id}"
    return {"workout": workout}


@router.get("/{workout_id}", response_model=WorkoutEnvelope)
async def get_workout(
    workout_id: str,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    try:
        workout = await models.workouts.get(read_id_param(workout_id), ctx.user_id)
    except RecordNotFoundError:
        raise not_found()
    return {"workout": workout}


@router.patch("/{workout_id}", response_model=WorkoutEnvelope)
async def update_workout(
    workout_id: str,
    payload: WorkoutUpdate,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """
    Partial update. Omitted fields keep their value; ``items``, when present,
    replaces the full item list (old item ids are discarded).
    """
    id_ = read_id_param(workout_id)
    try:
        current = await models.workouts.get(id_, ctx.user_id)
    except RecordNotFoundError:
        raise not_found()

    name = payload.name if payload.name is not None else current.name
    description = payload.description if payload.description is not None else current.description
    schedule = payload.schedule if payload.schedule is not None else current.schedule

    v = Validator()
    # An unchanged schedule that has since passed is not the caller's fault
    validate_workout(v, name, description, payload.schedule, payload.items or ())
    if v.valid and payload.items:
        await check_exercise_references(v, models.exercises, payload.items)
    if not v.valid:
        raise failed_validation(v.errors)

    try:
        workout = await models.workouts.update(
            id_, ctx.user_id, name, description, schedule, payload.items
        )
    except RecordNotFoundError:
        raise not_found()
    return {"workout": workout}


@router.delete("/{workout_id}", response_model=MessageEnvelope)
async def delete_workout(
    workout_id: str,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """Delete a workout and its items."""
    try:
        await models.workouts.delete(read_id_param(workout_id), ctx.user_id)
    except RecordNotFoundError:
        raise not_found()
    return {"message": "workout successfully deleted"}
