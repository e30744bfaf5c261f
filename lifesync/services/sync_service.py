"""Remote reconciler: persists client commands and serves the full snapshot.

Two operations back the ``/api/sync`` endpoint:

fetch_all_and_heal(user_id)
    1. recreate the user root row if it has vanished (a still-valid session
       can outlive a data wipe, and every per-user insert needs the row)
    2. read every per-user collection, in parallel when a session factory
       is available
    3. run the seeder
    4. return one camelCase list per collection

apply_command(user_id, command)
    Routes the command through ``COMMAND_TABLE``. Create and replace are
    upserts on the primary key, scoped to the caller's rows. Deletes are
    scoped by user. Toggles are read-modify-write. Command types without a
    route are accepted and ignored.

Storage failures surface as ``PersistenceError``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import cached_property
from typing import Any

import structlog
from pydantic.alias_generators import to_camel, to_snake
from sqlalchemy import delete, not_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lifesync.config import Settings, get_settings
from lifesync.database import Base, dialect_insert
from lifesync.metrics.derived import normalize_calendar_day, parse_timestamp
from lifesync.models import (
    Action,
    CalendarEvent,
    Goal,
    Habit,
    HabitLog,
    JournalEntry,
    LifeArea,
    MetricDefinition,
    MetricEntry,
    Note,
    Project,
    User,
)
from lifesync.models.types import EpochTimestamp, utcnow
from lifesync.services.seeder import Seeder
from lifesync.sync.commands import Command, CommandType

log = structlog.get_logger(__name__)

PLACEHOLDER_PASSWORD_HASH = "placeholder_hash_needs_reset"


class PersistenceError(Exception):
    """Raised when the store cannot read or write (wraps SQLAlchemyError)."""


class PayloadError(Exception):
    """Raised when a command payload lacks the fields its route needs."""


# --------------------------------------------------------------------------- #
# Entity registry
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class EntityKind:
    """How one wire collection maps onto its table."""

    model: type[Base]
    snapshot_key: str
    order_by: tuple[str, ...] = ("created_at",)
    conflict_keys: tuple[str, ...] = ("id",)
    calendar_day_fields: frozenset[str] = frozenset()
    # Wire field -> column, applied only when the column is absent
    aliases: dict[str, str] = field(default_factory=dict)

    @cached_property
    def columns(self) -> frozenset[str]:
        return frozenset(c.key for c in self.model.__table__.columns)

    @cached_property
    def temporal_fields(self) -> frozenset[str]:
        return frozenset(
            c.key for c in self.model.__table__.columns if isinstance(c.type, EpochTimestamp)
        )

    def to_row(self, payload: Any, user_id: str) -> dict[str, Any]:
        """Convert a camelCase wire object into a column dict for this table.

        Unknown keys are dropped and ``user_id`` is always the caller's.
        """
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise PayloadError(f"{self.snapshot_key} payload needs an id")

        row: dict[str, Any] = {}
        for key, value in payload.items():
            column = to_snake(key)
            if column in self.columns:
                row[column] = self._coerce(column, value)
        for alias, column in self.aliases.items():
            value = payload.get(to_camel(alias))
            if row.get(column) is None and value is not None:
                row[column] = self._coerce(column, value)

        row["id"] = str(payload["id"])
        row["user_id"] = user_id
        if "updated_at" in self.columns and row.get("updated_at") is None:
            row["updated_at"] = utcnow()
        if "created_at" in row and row["created_at"] is None:
            del row["created_at"]
        return row

    def _coerce(self, column: str, value: Any) -> Any:
        if column in self.temporal_fields:
            return parse_timestamp(value)
        if column in self.calendar_day_fields and value is not None:
            return normalize_calendar_day(value) or value
        return value

    def to_wire(self, obj: Base) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for column in self.model.__table__.columns:
            value = getattr(obj, column.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            out[to_camel(column.key)] = value
        return out


ENTITY_KINDS: dict[str, EntityKind] = {
    kind.snapshot_key: kind
    for kind in (
        EntityKind(Action, "actions", calendar_day_fields=frozenset({"date"})),
        EntityKind(Goal, "goals"),
        EntityKind(Project, "projects"),
        EntityKind(Note, "notes"),
        EntityKind(MetricDefinition, "metricDefinitions"),
        EntityKind(MetricEntry, "metricEntries", order_by=("date", "created_at")),
        EntityKind(
            LifeArea,
            "areas",
            order_by=("order", "created_at"),
            aliases={"icon_name": "icon"},
        ),
        EntityKind(CalendarEvent, "events", order_by=("start",)),
        EntityKind(JournalEntry, "journal"),
        EntityKind(Habit, "habits"),
        EntityKind(
            HabitLog,
            "habitLogs",
            conflict_keys=("habit_id", "date"),
            calendar_day_fields=frozenset({"date"}),
        ),
    )
}

_UPSERT_ROUTES: dict[CommandType, str] = {
    CommandType.ADD_ACTION: "actions",
    CommandType.UPDATE_ACTION: "actions",
    CommandType.ADD_GOAL: "goals",
    CommandType.UPDATE_GOAL: "goals",
    CommandType.ADD_PROJECT: "projects",
    CommandType.UPDATE_PROJECT: "projects",
    CommandType.ADD_HABIT: "habits",
    CommandType.UPDATE_HABIT: "habits",
    CommandType.ADD_NOTE: "notes",
    CommandType.UPDATE_NOTE: "notes",
    CommandType.ADD_JOURNAL: "journal",
    CommandType.UPDATE_JOURNAL: "journal",
    CommandType.ADD_EVENT: "events",
    CommandType.UPDATE_EVENT: "events",
    CommandType.ADD_METRIC_DEF: "metricDefinitions",
    CommandType.ADD_METRIC_ENTRY: "metricEntries",
    CommandType.ADD_AREA: "areas",
    CommandType.UPDATE_AREA: "areas",
}

_DELETE_ROUTES: dict[CommandType, str] = {
    CommandType.DELETE_ACTION: "actions",
    CommandType.DELETE_GOAL: "goals",
    CommandType.DELETE_PROJECT: "projects",
    CommandType.DELETE_HABIT: "habits",
    CommandType.DELETE_HABIT_LOG: "habitLogs",
    CommandType.DELETE_NOTE: "notes",
    CommandType.DELETE_JOURNAL: "journal",
    CommandType.DELETE_EVENT: "events",
    CommandType.DELETE_METRIC_DEF: "metricDefinitions",
    CommandType.DELETE_AREA: "areas",
}


# --------------------------------------------------------------------------- #
# Service
# --------------------------------------------------------------------------- #


Route = Callable[["SyncService", str, Any], Awaitable[None]]


class SyncService:
    """Reconciles one user's data with the store.

    Args:
        db: Session used for every write (and for reads when no factory)
        read_session_factory: When given, each collection is read in its
            own short-lived session so the reads run concurrently
        settings: Defaults to ``get_settings()``
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        read_session_factory: async_sessionmaker[AsyncSession] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._db = db
        self._read_factory = read_session_factory
        self._settings = settings or get_settings()

    # ---------------------------------------------------------------- #
    # Fetch all and heal
    # ---------------------------------------------------------------- #

    async def fetch_all_and_heal(self, user_id: str) -> dict[str, list[dict[str, Any]]]:
        try:
            if await self.resurrect_user(user_id):
                await self._db.commit()

            kinds = list(ENTITY_KINDS.values())
            if self._read_factory is not None:
                results = await asyncio.gather(
                    *(self._read_isolated(kind, user_id) for kind in kinds)
                )
            else:
                results = [await self._read(self._db, kind, user_id) for kind in kinds]
            collections = {kind.snapshot_key: rows for kind, rows in zip(kinds, results)}

            seeded = await Seeder(self._db).heal(user_id)
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise PersistenceError(f"fetch failed for user {user_id}") from exc

        collections["areas"] = seeded.areas
        collections["metricDefinitions"] = seeded.metric_definitions

        snapshot = {
            key: [ENTITY_KINDS[key].to_wire(obj) for obj in rows]
            for key, rows in collections.items()
        }
        for area in snapshot["areas"]:
            area["iconName"] = area.get("icon") or self._settings.default_area_icon

        log.info(
            "sync.snapshot_served",
            user_id=user_id,
            counts={key: len(rows) for key, rows in snapshot.items()},
            areas_seeded=seeded.areas_inserted,
            metrics_seeded=seeded.metrics_inserted,
        )
        return snapshot

    async def resurrect_user(self, user_id: str) -> bool:
        """Insert a placeholder user row if none exists. Returns True if inserted."""
        existing = await self._db.scalar(select(User.id).where(User.id == user_id))
        if existing is not None:
            return False

        self._db.add(
            User(
                id=user_id,
                email=f"restored_{user_id[:6]}@{self._settings.resurrected_email_domain}",
                name="User",
                password_hash=PLACEHOLDER_PASSWORD_HASH,
                subscription_tier="free",
            )
        )
        await self._db.flush()
        log.info("sync.user_resurrected", user_id=user_id)
        return True

    async def _read_isolated(self, kind: EntityKind, user_id: str) -> list[Base]:
        assert self._read_factory is not None
        async with self._read_factory() as session:
            return await self._read(session, kind, user_id)

    @staticmethod
    async def _read(session: AsyncSession, kind: EntityKind, user_id: str) -> list[Base]:
        model = kind.model
        stmt = (
            select(model)
            .where(model.user_id == user_id)
            .order_by(*(getattr(model, name) for name in kind.order_by))
        )
        rows = await session.scalars(stmt)
        return list(rows.all())

    # ---------------------------------------------------------------- #
    # Command apply
    # ---------------------------------------------------------------- #

    async def apply_command(self, user_id: str, command: Command) -> None:
        route = COMMAND_TABLE.get(command.type)
        if route is None:
            log.info("sync.command_ignored", user_id=user_id, command_type=command.type)
            return
        try:
            await route(self, user_id, command.payload)
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise PersistenceError(f"{command.type} failed for user {user_id}") from exc
        log.debug("sync.command_applied", user_id=user_id, command_type=command.type)

    async def upsert(self, kind: EntityKind, user_id: str, payload: Any) -> None:
        row = kind.to_row(payload, user_id)
        model = kind.model
        stmt = dialect_insert(self._db, model).values(**row)
        changed = {
            col: stmt.excluded[col]
            for col in row
            if col not in kind.conflict_keys and col not in ("user_id", "created_at")
        }
        stmt = stmt.on_conflict_do_update(
            index_elements=list(kind.conflict_keys),
            set_=changed,
            where=model.__table__.c.user_id == user_id,
        )
        await self._db.execute(stmt)

    async def delete(self, kind: EntityKind, user_id: str, payload: Any) -> None:
        entity_id = _require_id(payload)
        model = kind.model
        await self._db.execute(
            delete(model).where(model.id == entity_id, model.user_id == user_id)
        )

    async def log_habit(self, user_id: str, payload: Any) -> None:
        kind = ENTITY_KINDS["habitLogs"]
        row = kind.to_row(payload, user_id)
        # A log id moving to another day would collide on the primary key
        await self._db.execute(
            delete(HabitLog).where(
                HabitLog.id == row["id"],
                HabitLog.user_id == user_id,
                (HabitLog.habit_id != row.get("habit_id")) | (HabitLog.date != row.get("date")),
            )
        )
        await self.upsert(kind, user_id, payload)

    async def toggle_action(self, user_id: str, payload: Any) -> None:
        action_id = _require_id(payload)
        await self._db.execute(
            update(Action)
            .where(Action.id == action_id, Action.user_id == user_id)
            .values(completed=not_(Action.completed), updated_at=utcnow())
        )

    async def toggle_subgoal(self, user_id: str, payload: Any) -> None:
        goal_id = _require_id(payload)
        sub_goal_id = payload.get("subGoalId")
        if sub_goal_id is None:
            raise PayloadError("TOGGLE_SUBGOAL needs a subGoalId")

        goal = await self._db.scalar(
            select(Goal)
            .where(Goal.id == goal_id, Goal.user_id == user_id)
            .with_for_update()
        )
        if goal is None:
            return
        # Reassign so the JSON column is flagged dirty
        goal.sub_goals = [
            {**sg, "completed": not sg.get("completed", False)}
            if isinstance(sg, dict) and sg.get("id") == sub_goal_id
            else sg
            for sg in goal.sub_goals or []
        ]
        goal.updated_at = utcnow()
        await self._db.flush()


def _require_id(payload: Any) -> str:
    if not isinstance(payload, dict) or payload.get("id") is None:
        raise PayloadError("payload needs an id")
    return str(payload["id"])


def _upsert_route(key: str) -> Route:
    async def route(service: SyncService, user_id: str, payload: Any) -> None:
        await service.upsert(ENTITY_KINDS[key], user_id, payload)

    return route


def _delete_route(key: str) -> Route:
    async def route(service: SyncService, user_id: str, payload: Any) -> None:
        await service.delete(ENTITY_KINDS[key], user_id, payload)

    return route


COMMAND_TABLE: dict[CommandType, Route] = {
    **{ct: _upsert_route(key) for ct, key in _UPSERT_ROUTES.items()},
    **{ct: _delete_route(key) for ct, key in _DELETE_ROUTES.items()},
    CommandType.LOG_HABIT: SyncService.log_habit,
    CommandType.TOGGLE_ACTION: SyncService.toggle_action,
    CommandType.TOGGLE_SUBGOAL: SyncService.toggle_subgoal,
}
