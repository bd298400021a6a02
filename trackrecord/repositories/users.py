"""User accounts."""

from __future__ import annotations

import asyncio

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackrecord.core.constants import QUERY_TIMEOUT_SECONDS
from trackrecord.models.user import User
from trackrecord.repositories.errors import DuplicateEmailError, RecordNotFoundError


class UserRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email.lower(), password_hash=password_hash, activated=True)
        try:
            async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
                async with self._sessions() as session, session.begin():
                    session.add(user)
                    await session.flush()
        except IntegrityError as e:
            # users.email is the only unique constraint
            raise DuplicateEmailError() from e
        return user

    async def get_by_email(self, email: str) -> User:
        async with asyncio.timeout(QUERY_TIMEOUT_SECONDS):
            async with self._sessions() as session:
                result = await session.execute(select(User).where(User.email == email.lower()))
                user = result.scalar_one_or_none()
        if user is None:
            raise RecordNotFoundError()
        return user
