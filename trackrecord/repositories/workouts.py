"""Workout aggregate: a workout row plus its item rows, written and read as one unit."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackrecord.core.constants import QUERY_TIMEOUT_SECONDS
from trackrecord.models.exercise import Exercise
from trackrecord.models.workout import Workout, WorkoutItem
from trackrecord.repositories.errors import RecordNotFoundError
from trackrecord.repositories.filters import Filters, calculate_metadata, sort_safelist
from trackrecord.schemas.common import Metadata
from trackrecord.schemas.exercise import ExerciseSummary
from trackrecord.schemas.workout import WorkoutItemInput, WorkoutItemRead, WorkoutRead

WORKOUT_SORT_SAFELIST = sort_safelist("id", "name", "schedule", "created_at", "updated_at")

_SORT_COLUMNS = {
    "id": Workout.id,
    "name": Workout.name,
    "schedule": Workout.schedule,
    "created_at": Workout.created_at,
    "updated_at": Workout.updated_at,
}


async def load_workout_items(session: AsyncSession, workout_ids: Sequence[int]) -> dict[int, list[WorkoutItemRead]]:
    """Items for the given workouts joined with their exercise, in insertion order, grouped by workout."""
    grouped: dict[int, list[WorkoutItemRead]] = defaultdict(list)
    if not workout_ids:
        return grouped
    result = await session.execute(
        select(WorkoutItem, Exercise)
        .join(Exercise, Exercise.id == WorkoutItem.exercise_id)
        .where(WorkoutItem.workout_id.in_(workout_ids))
        .order_by(WorkoutItem.workout_id, WorkoutItem.id)
    )
    for item, exercise in result.all():
        grouped[item.workout_id].append(
            WorkoutItemRead(
                id=item.id,
                workout_id=item.workout_id,
                exercise_id=item.exercise_id,
                sets=item.sets,
                reps=item.reps,
                weight=item.weight,
                exercise=ExerciseSummary.model_validate(exercise),
            )
        )
    return grouped


def _to_read(workout: Workout, items: list[WorkoutItemRead]) -> WorkoutRead:
    # Built field by field so workout.items (an async lazy load) is never touched
    return WorkoutRead(
        id=workout.id,
        name=workout.name,
        description=workout.description,
        user_id=workout.user_id,
        schedule=workout.schedule,
        items=items,
        created_at=workout.created_at,
        updated_at=workout.updated_at,
    )


def _new_items(workout_id: int, items: Sequence[WorkoutItemInput]) -> list[WorkoutItem]:
    return [
        WorkoutItem(
            workout_id=workout_id,
            exercise_id=item.exercise_id,
            sets=item.sets,
            reps=item.reps,
            weight=item.weight,
        )
        for item in items
    ]


class WorkoutRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(
        self,
        user_id: int,
        name: str,
        description: str,
        schedule: datetime | None,
        items: Sequence[WorkoutItemInput],
    ) -> WorkoutRead:
        """Insert the workout then its items in one transaction; any failure leaves nothing behind."""
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session, session.begin():
                workout = Workout(user_id=user_id, name=name, description=description, schedule=schedule)
                session.add(workout)
                await session.flush()
                session.add_all(_new_items(workout.id, items))
                await session.flush()
        return await self.get(workout.id, user_id)

    async def get(self, workout_id: int, user_id: int) -> WorkoutRead:
        if workout_id < 1:
            raise RecordNotFoundError()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                result = await session.execute(
                    select(Workout).where(Workout.id == workout_id, Workout.user_id == user_id)
                )
                workout = result.scalar_one_or_none()
                if workout is None:
                    raise RecordNotFoundError()
                items = await load_workout_items(session, [workout.id])
        return _to_read(workout, items[workout.id])

    async def update(
        self,
        workout_id: int,
        user_id: int,
        name: str,
        description: str,
        schedule: datetime | None,
        items: Sequence[WorkoutItemInput] | None = None,
    ) -> WorkoutRead:
        """
        Update the workout's fields. When ``items`` is given the existing
        item rows are deleted and the new ones inserted (item ids are not kept).
        """
        if workout_id < 1:
            raise RecordNotFoundError()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session, session.begin():
                result = await session.execute(
                    select(Workout)
                    .where(Workout.id == workout_id, Workout.user_id == user_id)
                    .with_for_update()
                )
                workout = result.scalar_one_or_none()
                if workout is None:
                    raise RecordNotFoundError()
                workout.name = name
                workout.description = description
                workout.schedule = schedule
                workout.updated_at = datetime.now(timezone.utc)
                if items is not None:
                    await session.execute(delete(WorkoutItem).where(WorkoutItem.workout_id == workout_id))
                    session.add_all(_new_items(workout_id, items))
                await session.flush()
        return await self.get(workout_id, user_id)

    async def delete(self, workout_id: int, user_id: int) -> None:
        """Delete items, then the workout guarded by owner. No owned match rolls everything back."""
        if workout_id < 1:
            raise RecordNotFoundError()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session, session.begin():
                await session.execute(delete(WorkoutItem).where(WorkoutItem.workout_id == workout_id))
                result = await session.execute(
                    delete(Workout).where(Workout.id == workout_id, Workout.user_id == user_id)
                )
                if result.rowcount == 0:
                    raise RecordNotFoundError()

    async def get_all(self, user_id: int, filters: Filters) -> tuple[list[WorkoutRead], Metadata]:
        stmt = (
            select(func.count().over().label("total_records"), Workout)
            .where(Workout.user_id == user_id)
            .order_by(*filters.order_by(_SORT_COLUMNS, Workout.id))
            .limit(filters.limit())
            .offset(filters.offset())
        )
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                rows = (await session.execute(stmt)).all()
                items = await load_workout_items(session, [row.Workout.id for row in rows])

        total_records = rows[0].total_records if rows else 0
        workouts = [_to_read(row.Workout, items[row.Workout.id]) for row in rows]
        return workouts, calculate_metadata(total_records, filters.page, filters.page_size)
