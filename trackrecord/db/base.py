"""SQLAlchemy declarative base shared by every model."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Index names match the ones created in alembic/versions
    metadata = MetaData(naming_convention={"ix": "ix_%(column_0_label)s"})
