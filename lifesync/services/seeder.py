"""Self-healing seeder for the baseline taxonomy.

Runs on every full fetch. Missing default areas (by title) are inserted,
then every area gets the default metrics its catalog entry lists (by
area id and metric name). Titles and metric names are not unique in the
schema, since users may create their own "Health" area or "Weight" metric,
so concurrent fetches are serialized by locking the owner's user row for
the rest of the transaction. The lists are read after the lock is taken,
which makes a second run a no-op.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lifesync.models.life_area import LifeArea
from lifesync.models.metric import MetricDefinition
from lifesync.models.types import utcnow
from lifesync.models.user import User
from lifesync.services.catalog import DEFAULT_AREAS, metrics_for_area

log = structlog.get_logger(__name__)


@dataclass
class SeedResult:
    areas: list[LifeArea]
    metric_definitions: list[MetricDefinition]
    areas_inserted: int = 0
    metrics_inserted: int = 0
    inserted_titles: list[str] = field(default_factory=list)


class Seeder:
    """Restores default areas and metrics for one user."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def heal(self, user_id: str) -> SeedResult:
        await self._lock_owner(user_id)
        result = SeedResult(
            areas=await self._load_areas(user_id),
            metric_definitions=await self._load_metrics(user_id),
        )

        existing_titles = {area.title for area in result.areas}
        missing = [tpl for tpl in DEFAULT_AREAS if tpl.title not in existing_titles]
        if missing:
            now = utcnow()
            rows = [
                {
                    "id": str(uuid.uuid4()),
                    "user_id": user_id,
                    "title": tpl.title,
                    "description": tpl.description,
                    "color": tpl.color,
                    "icon": tpl.icon,
                    "order": len(result.areas) + index + 1,
                    "created_at": now,
                }
                for index, tpl in enumerate(missing)
            ]
            await self._db.execute(insert(LifeArea), rows)
            result.inserted_titles = [tpl.title for tpl in missing]
            result.areas_inserted = len(rows)
            result.areas = await self._load_areas(user_id)
            log.info(
                "seeder.areas_restored",
                user_id=user_id,
                count=result.areas_inserted,
                titles=result.inserted_titles,
            )

        existing_pairs = {(m.area_id, m.name) for m in result.metric_definitions}
        metric_rows = []
        now = utcnow()
        for area in result.areas:
            for tpl in metrics_for_area(area.title):
                if (area.id, tpl.name) in existing_pairs:
                    continue
                metric_rows.append(
                    {
                        "id": str(uuid.uuid4()),
                        "user_id": user_id,
                        "area_id": area.id,
                        "name": tpl.name,
                        "type": tpl.type,
                        "unit": tpl.unit,
                        "description": tpl.description,
                        "frequency": tpl.frequency,
                        "created_at": now,
                    }
                )

        if metric_rows:
            await self._db.execute(insert(MetricDefinition), metric_rows)
            result.metrics_inserted = len(metric_rows)
            result.metric_definitions = await self._load_metrics(user_id)
            log.info(
                "seeder.metrics_restored",
                user_id=user_id,
                count=result.metrics_inserted,
            )

        return result

    async def _lock_owner(self, user_id: str) -> None:
        # A no-op write: row lock on PostgreSQL, write lock on SQLite
        await self._db.execute(
            update(User)
            .where(User.id == user_id)
            .values(updated_at=User.updated_at)
            .execution_options(synchronize_session=False)
        )

    async def _load_areas(self, user_id: str) -> list[LifeArea]:
        rows = await self._db.scalars(
            select(LifeArea)
            .where(LifeArea.user_id == user_id)
            .order_by(LifeArea.order, LifeArea.created_at)
            .execution_options(populate_existing=True)
        )
        return list(rows.all())

    async def _load_metrics(self, user_id: str) -> list[MetricDefinition]:
        rows = await self._db.scalars(
            select(MetricDefinition)
            .where(MetricDefinition.user_id == user_id)
            .order_by(MetricDefinition.created_at)
            .execution_options(populate_existing=True)
        )
        return list(rows.all())
