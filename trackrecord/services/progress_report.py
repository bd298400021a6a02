"""Progress report: per-exercise totals over a date-bounded set of workout logs."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from trackrecord.core.constants import REPORT_DEFAULT_DAYS, REPORT_PAGE_SIZE
from trackrecord.core.validator import Validator
from trackrecord.repositories.filters import Filters
from trackrecord.repositories.workout_logs import WORKOUT_LOG_SORT_SAFELIST, WorkoutLogRepository
from trackrecord.schemas.report import ExerciseStats, ProgressReport
from trackrecord.schemas.workout_log import WorkoutLogRead

DATE_FORMAT = "%Y-%m-%d"


def parse_report_date(v: Validator, key: str, raw: str | None, default: date) -> date:
    """Parse a YYYY-MM-DD value; blank means ``default``, garbage is recorded on ``v``."""
    if not raw:
        return default
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        v.add_error(key, "must be in format YYYY-MM-DD")
        return default


def resolve_date_range(
    v: Validator, start_raw: str | None, end_raw: str | None, today: date
) -> tuple[date, date]:
    """Each bound defaults on its own: start to 30 days ago, end to today."""
    start = parse_report_date(v, "start_date", start_raw, today - timedelta(days=REPORT_DEFAULT_DAYS))
    end = parse_report_date(v, "end_date", end_raw, today)
    if v.valid:
        v.check(start <= end, "end_date", "must not be before start_date")
    return start, end


def summarize_exercises(
    logs: Iterable[WorkoutLogRead], exercise_id: int | None = None
) -> dict[int, ExerciseStats]:
    stats: dict[int, ExerciseStats] = {}
    for log in logs:
        for item in log.items:
            if exercise_id and item.exercise_id != exercise_id:
                continue
            entry = stats.get(item.exercise_id)
            if entry is None:
                entry = stats[item.exercise_id] = ExerciseStats(
                    exercise_id=item.exercise_id,
                    exercise_name=item.exercise.name if item.exercise else "",
                )
            entry.total_sets += item.sets
            entry.total_reps += item.sets * item.reps
            entry.workouts += 1
            entry.max_weight = max(entry.max_weight, item.weight)
    return stats


def build_report(
    logs: list[WorkoutLogRead], start: date, end: date, exercise_id: int | None = None
) -> ProgressReport:
    # Session count and duration cover every matching log even when stats are filtered
    return ProgressReport(
        start_date=start,
        end_date=end,
        workout_count=len(logs),
        total_duration=sum(log.duration for log in logs),
        workouts=logs,
        exercise_stats=summarize_exercises(logs, exercise_id),
    )


async def generate_progress_report(
    repo: WorkoutLogRepository,
    user_id: int,
    start: date,
    end: date,
    exercise_id: int | None = None,
) -> ProgressReport:
    """Fetch every log in range (newest first, one batch at a time) and reduce it."""
    filters = Filters(page=1, page_size=REPORT_PAGE_SIZE, sort="-date", sort_safelist=WORKOUT_LOG_SORT_SAFELIST)
    logs: list[WorkoutLogRead] = []
    after: tuple[date, int] | None = None
    while True:
        batch, _ = await repo.get_all_between_dates(user_id, start, end, exercise_id, filters, after=after)
        logs.extend(batch)
        if len(batch) < REPORT_PAGE_SIZE:
            break
        after = (batch[-1].date, batch[-1].id)
    return build_report(logs, start, end, exercise_id)
