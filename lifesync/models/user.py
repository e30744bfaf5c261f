"""User aggregate root.

Every per-user table carries a foreign key to ``users.id`` with cascading
delete, so this row must exist before any of the user's content can be
inserted. The sync endpoint recreates a placeholder row when a still-valid
session points at a user that no longer exists.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import EpochTimestamp, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str | None] = mapped_column(String(64), default="UTC")
    locale: Mapped[str | None] = mapped_column(String(16), default="en-US")
    avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    subscription_tier: Mapped[str] = mapped_column(
        String(32), nullable=False, default="free", comment="free | pro"
    )
    onboarding_completed: Mapped[bool] = mapped_column(default=False)

    created_at: Mapped[datetime] = mapped_column(
        EpochTimestamp(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        EpochTimestamp(), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} tier={self.subscription_tier!r}>"
