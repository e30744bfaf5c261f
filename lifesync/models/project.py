"""Project model. Goals and metrics are linked by id lists, not joins."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import EpochTimestamp, OwnedMixin, TimestampMixin


class Project(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    start_date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    deadline: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    goal_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    metric_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
