"""Column types and mixins shared by every per-user table.

Temporal values are persisted as integer epoch seconds so the schema stays
portable between SQLite and PostgreSQL and matches the wire contract of the
sync endpoint.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class EpochTimestamp(TypeDecorator[datetime]):
    """Timezone-aware datetime stored as integer epoch seconds."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> int | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return int(value.timestamp())
        if isinstance(value, date):
            return int(datetime(value.year, value.month, value.day, tzinfo=UTC).timestamp())
        if isinstance(value, bool):
            raise TypeError("Boolean is not a valid timestamp")
        if isinstance(value, (int, float)):
            return int(value)
        raise TypeError(f"Cannot store {type(value).__name__} as an epoch timestamp")

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        return datetime.fromtimestamp(int(value), tz=UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)


class OwnedMixin:
    """Client-generated string id plus the owning-user foreign key."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        EpochTimestamp(), nullable=False, default=utcnow
    )


class TimestampMixin(CreatedAtMixin):
    updated_at: Mapped[datetime] = mapped_column(
        EpochTimestamp(), nullable=False, default=utcnow, onupdate=utcnow
    )
