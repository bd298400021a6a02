"""WorkoutLog and WorkoutLogItem models (immutable once written)."""

from __future__ import annotations

import datetime as dt
from datetime import datetime, timezone

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trackrecord.db.base import Base


class WorkoutLog(Base):
    """A completed session of one of the user's workouts."""

    __tablename__ = "workout_logs"
    __table_args__ = (
        Index("ix_workout_logs_user_id_date", "user_id", "date"),
        Index("ix_workout_logs_workout_id", "workout_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    items: Mapped[list["WorkoutLogItem"]] = relationship(
        "WorkoutLogItem", back_populates="log", order_by="WorkoutLogItem.id"
    )


class WorkoutLogItem(Base):
    """What was actually performed for one exercise in a logged session."""

    __tablename__ = "workout_log_items"
    __table_args__ = (
        Index("ix_workout_log_items_log_id", "log_id"),
        Index("ix_workout_log_items_exercise_id", "exercise_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    log_id: Mapped[int] = mapped_column(ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id"), nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False, default=0)

    log: Mapped["WorkoutLog"] = relationship("WorkoutLog", back_populates="items")
    exercise: Mapped["Exercise"] = relationship("Exercise")
