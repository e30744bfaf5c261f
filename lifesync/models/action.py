"""Action (task) model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import EpochTimestamp, OwnedMixin, TimestampMixin


class Action(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "actions"

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="task")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    priority: Mapped[str | None] = mapped_column(String(16), default="medium")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    project_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    linked_goal_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("goals.id", ondelete="SET NULL"), nullable=True
    )

    # Calendar day kept as "YYYY-MM-DD" text, not a timestamp
    date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    subtasks: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
