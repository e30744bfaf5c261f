"""Goal model.

Lifecycle::

    active -> completed | achieved | not_achieved | abandoned
           <-> paused

``progress`` is derived: while ``target_metric_id`` is set and the goal is
not completed it is recomputed from the metric values on the client, and
the server simply stores whatever the client last sent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import EpochTimestamp, OwnedMixin, TimestampMixin


class Goal(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "goals"

    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="active",
        comment="active | paused | achieved | not_achieved | abandoned | completed",
    )
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="strategic", comment="vision | strategic | tactical"
    )
    priority: Mapped[str | None] = mapped_column(String(16), default="medium")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    target_metric_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("metric_definitions.id", ondelete="SET NULL"),
        nullable=True,
    )
    metric_start_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    metric_target_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    metric_current_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    metric_direction: Mapped[str | None] = mapped_column(
        String(16), nullable=True, comment="increase | decrease | maintain"
    )

    # Checklist of {id, title, completed}
    sub_goals: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    start_date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    deadline: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)

    def __repr__(self) -> str:
        return f"<Goal id={self.id} status={self.status!r} progress={self.progress}>"
