"""Metric definitions and their recorded entries.

A definition belongs to a life area; entries are point-in-time values. The
"current value" of a definition is the entry with the latest date.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import CreatedAtMixin, EpochTimestamp, OwnedMixin


class MetricDefinition(OwnedMixin, CreatedAtMixin, Base):
    __tablename__ = "metric_definitions"

    area_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(
        String(32), default="number", comment="number | scale | boolean"
    )
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(32), default="weekly")


class MetricEntry(OwnedMixin, CreatedAtMixin, Base):
    __tablename__ = "metric_entries"

    metric_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("metric_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(EpochTimestamp(), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
