"""Exercise reference data."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackrecord.core.constants import QUERY_TIMEOUT_SECONDS
from trackrecord.models.exercise import Exercise
from trackrecord.repositories.errors import RecordNotFoundError
from trackrecord.repositories.filters import Filters, calculate_metadata, sort_safelist
from trackrecord.schemas.common import Metadata
from trackrecord.schemas.exercise import ExerciseCreate, ExerciseRead

EXERCISE_SORT_SAFELIST = sort_safelist("id", "name", "category", "muscle_group", "created_at")

_SORT_COLUMNS = {
    "id": Exercise.id,
    "name": Exercise.name,
    "category": Exercise.category,
    "muscle_group": Exercise.muscle_group,
    "created_at": Exercise.created_at,
}


class ExerciseRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, payload: ExerciseCreate) -> ExerciseRead:
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session, session.begin():
                exercise = Exercise(**payload.model_dump())
                session.add(exercise)
                await session.flush()
        return ExerciseRead.model_validate(exercise)

    async def get(self, exercise_id: int) -> ExerciseRead:
        if exercise_id < 1:
            raise RecordNotFoundError()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                result = await session.execute(select(Exercise).where(Exercise.id == exercise_id))
                exercise = result.scalar_one_or_none()
        if exercise is None:
            raise RecordNotFoundError()
        return ExerciseRead.model_validate(exercise)

    async def get_all(
        self, category: str, muscle_group: str, filters: Filters
    ) -> tuple[list[ExerciseRead], Metadata]:
        """Page of exercises; empty ``category``/``muscle_group`` match everything (case-insensitive)."""
        stmt = select(func.count().over().label("total_records"), Exercise)
        if category:
            stmt = stmt.where(func.lower(Exercise.category) == category.lower())
        if muscle_group:
            stmt = stmt.where(func.lower(Exercise.muscle_group) == muscle_group.lower())
        stmt = (
            stmt.order_by(*filters.order_by(_SORT_COLUMNS, Exercise.id))
            .limit(filters.limit())
            .offset(filters.offset())
        )
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                rows = (await session.execute(stmt)).all()

        total_records = rows[0].total_records if rows else 0
        exercises = [ExerciseRead.model_validate(row.Exercise) for row in rows]
        return exercises, calculate_metadata(total_records, filters.page, filters.page_size)

    async def existing_ids(self, exercise_ids: Iterable[int]) -> set[int]:
        ids = set(exercise_ids)
        if not ids:
            return set()
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                result = await session.execute(select(Exercise.id).where(Exercise.id.in_(ids)))
                return set(result.scalars().all())
