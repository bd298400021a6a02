"""Workout log aggregate: a log row plus its item rows. Logs are insert-only."""

from __future__ import annotations

import asyncio
import datetime as dt
from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackrecord.core.constants import QUERY_TIMEOUT_SECONDS
from trackrecord.models.exercise import Exercise
from trackrecord.models.workout import Workout
from trackrecord.models.workout_log import WorkoutLog, WorkoutLogItem
from trackrecord.repositories.errors import RecordNotFoundError
from trackrecord.repositories.filters import Filters, calculate_metadata, sort_safelist
from trackrecord.schemas.common import Metadata
from trackrecord.schemas.exercise import ExerciseSummary
from trackrecord.schemas.workout_log import WorkoutLogItemInput, WorkoutLogItemRead, WorkoutLogRead

WORKOUT_LOG_SORT_SAFELIST = sort_safelist("id", "date", "duration", "created_at")

_SORT_COLUMNS = {
    "id": WorkoutLog.id,
    "date": WorkoutLog.date,
    "duration": WorkoutLog.duration,
    "created_at": WorkoutLog.created_at,
}


async def load_log_items(session: AsyncSession, log_ids: Sequence[int]) -> dict[int, list[WorkoutLogItemRead]]:
    grouped: dict[int, list[WorkoutLogItemRead]] = defaultdict(list)
    if not log_ids:
        return grouped
    result = await session.execute(
        select(WorkoutLogItem, Exercise)
        .join(Exercise, Exercise.id == WorkoutLogItem.exercise_id)
        .where(WorkoutLogItem.log_id.in_(log_ids))
        .order_by(WorkoutLogItem.log_id, WorkoutLogItem.id)
    )
    for item, exercise in result.all():
        grouped[item.log_id].append(
            WorkoutLogItemRead(
                id=item.id,
                log_id=item.log_id,
                exercise_id=item.exercise_id,
                sets=item.sets,
                reps=item.reps,
                weight=item.weight,
                exercise=ExerciseSummary.model_validate(exercise),
            )
        )
    return grouped


def _to_read(log: WorkoutLog, workout_name: str, items: list[WorkoutLogItemRead]) -> WorkoutLogRead:
    return WorkoutLogRead(
        id=log.id,
        workout_id=log.workout_id,
        user_id=log.user_id,
        date=log.date,
        duration=log.duration,
        notes=log.notes,
        workout_name=workout_name,
        items=items,
        created_at=log.created_at,
    )


def _log_page_query(user_id: int, filters: Filters) -> Select:
    return (
        select(func.count().over().label("total_records"), WorkoutLog, Workout.name.label("workout_name"))
        .join(Workout, Workout.id == WorkoutLog.workout_id)
        .where(WorkoutLog.user_id == user_id)
        .order_by(*filters.order_by(_SORT_COLUMNS, WorkoutLog.id))
        .limit(filters.limit())
        .offset(filters.offset())
    )


class WorkoutLogRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(
        self,
        user_id: int,
        workout_id: int,
        date: dt.date,
        duration: int,
        notes: str,
        items: Sequence[WorkoutLogItemInput],
    ) -> WorkoutLogRead:
        """
        Log a session of one of the user's workouts: the log row first, then
        its items, all in one transaction. Raises RecordNotFoundError when the
        workout does not exist or belongs to someone else.
        """
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session, session.begin():
                owned = await session.execute(
                    select(Workout.id).where(Workout.id == workout_id, Workout.user_id == user_id)
                )
                if owned.scalar_one_or_none() is None:
                    raise RecordNotFoundError()

                log = WorkoutLog(
                    workout_id=workout_id,
                    user_id=user_id,
                    date=date,
                    duration=duration,
                    notes=notes,
                )
                session.add(log)
                await session.flush()
                session.add_all(
                    WorkoutLogItem(
                        log_id=log.id,
                        exercise_id=item.exercise_id,
                        sets=item.sets,
                        reps=item.reps,
                        weight=item.weight,
                    )
                    for item in items
                )
                await session.flush()
        return await self.get(log.id, user_id)

    async def get(self, log_id: int, user_id: int) -> WorkoutLogRead:
        if log_id < 1:
            raise RecordNotFoundError()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                result = await session.execute(
                    select(WorkoutLog, Workout.name.label("workout_name"))
                    .join(Workout, Workout.id == WorkoutLog.workout_id)
                    .where(WorkoutLog.id == log_id, WorkoutLog.user_id == user_id)
                )
                row = result.one_or_none()
                if row is None:
                    raise RecordNotFoundError()
                items = await load_log_items(session, [log_id])
        return _to_read(row.WorkoutLog, row.workout_name, items[log_id])

    async def get_all(self, user_id: int, filters: Filters) -> tuple[list[WorkoutLogRead], Metadata]:
        return await self._fetch_page(_log_page_query(user_id, filters), filters)

    async def get_all_between_dates(
        self,
        user_id: int,
        start_date: dt.date,
        end_date: dt.date,
        exercise_id: int | None,
        filters: Filters,
        after: tuple[dt.date, int] | None = None,
    ) -> tuple[list[WorkoutLogRead], Metadata]:
        """
        Logs dated within [start_date, end_date]; with ``exercise_id``, only
        logs that include that exercise.

        ``after`` is a ``(date, id)`` keyset cursor for the ``-date`` order:
        only logs that sort strictly after it are returned, so rows inserted
        between calls cannot shift a later page onto an earlier one.
        """
        stmt = _log_page_query(user_id, filters).where(
            WorkoutLog.date >= start_date,
            WorkoutLog.date <= end_date,
        )
        if after is not None:
            after_date, after_id = after
            stmt = stmt.where(
                or_(
                    WorkoutLog.date < after_date,
                    and_(WorkoutLog.date == after_date, WorkoutLog.id > after_id),
                )
            )
        if exercise_id:
            stmt = stmt.where(
                WorkoutLog.id.in_(
                    select(WorkoutLogItem.log_id).where(WorkoutLogItem.exercise_id == exercise_id)
                )
            )
        return await self._fetch_page(stmt, filters)

    async def _fetch_page(self, stmt: Select, filters: Filters) -> tuple[list[WorkoutLogRead], Metadata]:
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                rows = (await session.execute(stmt)).all()
                items = await load_log_items(session, [row.WorkoutLog.id for row in rows])

        total_records = rows[0].total_records if rows else 0
        logs = [_to_read(row.WorkoutLog, row.workout_name, items[row.WorkoutLog.id]) for row in rows]
        return logs, calculate_metadata(total_records, filters.page, filters.page_size)
