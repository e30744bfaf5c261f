"""Free-form content: notes, journal entries and calendar events."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import EpochTimestamp, OwnedMixin, TimestampMixin


class Note(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str | None] = mapped_column(String(32), default="note")
    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)


class JournalEntry(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "journal_entries"

    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    mood: Mapped[int | None] = mapped_column(Integer, nullable=True)
    date: Mapped[datetime | None] = mapped_column(EpochTimestamp(), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)


class CalendarEvent(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "calendar_events"

    area_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    start: Mapped[datetime] = mapped_column(EpochTimestamp(), nullable=False)
    end: Mapped[datetime] = mapped_column(EpochTimestamp(), nullable=False)
    all_day: Mapped[bool | None] = mapped_column(Boolean, default=False)
