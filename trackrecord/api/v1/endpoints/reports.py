"""Progress report endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from trackrecord.api.deps import RequestContext, get_models, require_authenticated_user
from trackrecord.api.helpers import failed_validation, read_int
from trackrecord.core.constants import MAX_DB_INT
from trackrecord.core.validator import Validator
from trackrecord.repositories import Models
from trackrecord.schemas.report import ProgressReportEnvelope
from trackrecord.services.progress_report import generate_progress_report, resolve_date_range

router = APIRouter()


@router.get("/progress", response_model=ProgressReportEnvelope)
async def progress_report(
    request: Request,
    ctx: RequestContext = Depends(require_authenticated_user),
    models: Models = Depends(get_models),
):
    """
    Totals per exercise over ``start_date``..``end_date`` (YYYY-MM-DD,
    default: the last 30 days). ``exercise_id`` limits both the logs
    considered and the per-exercise stats to that exercise.
    """
    qs = request.query_params
    v = Validator()
    today = datetime.now(timezone.utc).date()
    start, end = resolve_date_range(v, qs.get("start_date"), qs.get("end_date"), today)
    exercise_id = read_int(qs, "exercise_id", 0, v)
    v.check(exercise_id >= 0, "exercise_id", "must not be negative")
    v.check(exercise_id <= MAX_DB_INT, "exercise_id", f"must not be more than {MAX_DB_INT}")
    if not v.valid:
        raise failed_validation(v.errors)

    report = await generate_progress_report(
        models.workout_logs, ctx.user_id, start, end, exercise_id or None
    )
    return {"report": report}
