"""Habit and habit log models.

There is at most one log per (habit, calendar day); the unique constraint
is also the conflict target when a day is logged again.
"""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import CreatedAtMixin, OwnedMixin, TimestampMixin


class Habit(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "habits"

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(16), default="daily")
    target_days: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)  # 0-6
    time_of_day: Mapped[str | None] = mapped_column(String(16), default="anytime")
    status: Mapped[str | None] = mapped_column(String(16), default="active")
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class HabitLog(OwnedMixin, CreatedAtMixin, Base):
    __tablename__ = "habit_logs"

    habit_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("habits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_logs_habit_date"),
    )
