"""Exercise endpoints (reference data)."""

from fastapi import APIRouter, Depends, Request, Response

from trackrecord.api.deps import RequestContext, get_models, require_authenticated_user
from trackrecord.api.helpers import failed_validation, not_found, read_filters, read_id_param, read_string
from trackrecord.core.validator import Validator
from trackrecord.repositories import Models, RecordNotFoundError
from trackrecord.repositories.exercises import EXERCISE_SORT_SAFELIST
from trackrecord.schemas.exercise import ExerciseCreate, ExerciseEnvelope, ExerciseListEnvelope

router = APIRouter()


def validate_exercise(v: Validator, exercise: ExerciseCreate) -> None:
    v.check(exercise.name != "", "name", "must be provided")
    v.check(len(exercise.name) <= 255, "name", "must not be more than 255 bytes long")
    v.check(len(exercise.description) <= 1000, "description", "must not be more than 1000 bytes long")
    v.check(exercise.category != "", "category", "must be provided")
    v.check(len(exercise.category) <= 100, "category", "must not be more than 100 bytes long")
    v.check(exercise.muscle_group != "", "muscle_group", "must be provided")
    v.check(len(exercise.muscle_group) <= 100, "muscle_group", "must not be more than 100 bytes long")


@router.get("", response_model=ExerciseListEnvelope)
async def list_exercises(
    request: Request,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """List exercises, optionally filtered by category and muscle group (case-insensitive)."""
    qs = request.query_params
    v = Validator()
    category = read_string(qs, "category", "")
    muscle_group = read_string(qs, "muscle_group", "")
    filters = read_filters(qs, v, "name", EXERCISE_SORT_SAFELIST)
    if not v.valid:
        raise failed_validation(v.errors)

    exercises, metadata = await models.exercises.get_all(category, muscle_group, filters)
    return {"exercises": exercises, "metadata": metadata}


@router.post("", response_model=ExerciseEnvelope, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    response: Response,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    v = Validator()
    validate_exercise(v, payload)
    if not v.valid:
        raise failed_validation(v.errors)

    exercise = await models.exercises.insert(payload)
    response.headers["Location"] = f"/v1/exercises/{exercise.id}"
    return {"exercise": exercise}


@router.get("/{exercise_id}", response_model=ExerciseEnvelope)
async def get_exercise(
    exercise_id: str,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    try:
        exercise = await models.exercises.get(read_id_param(exercise_id))
    except RecordNotFoundError:
        raise not_found()
    return {"exercise": exercise}
