"""Life area (category) model.

Areas are the top of the user's taxonomy. A default set is seeded lazily by
the sync endpoint, which matches defaults by title. Titles are not unique:
a user may add a second "Health" area of their own.
"""

from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifesync.database import Base
from lifesync.models.types import CreatedAtMixin, OwnedMixin


class LifeArea(OwnedMixin, CreatedAtMixin, Base):
    __tablename__ = "life_areas"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(64), nullable=False, default="bg-slate-500")
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    order: Mapped[int | None] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<LifeArea id={self.id} title={self.title!r} order={self.order}>"
