"""
Client-side application state.

Each entity kind lives in an id-keyed arena (``dict[id, row]``) whose rows
are the camelCase JSON objects exchanged with the sync endpoint.
Relationships (goal → metric, log → habit) are resolved by id lookup. The
state is treated as immutable: the reducer builds a new ``AppState`` with
fresh arena dicts rather than editing one in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Row = dict[str, Any]
Arena = dict[str, Row]

# Snapshot key -> AppState attribute
ARENA_FIELDS: dict[str, str] = {
    "areas": "areas",
    "goals": "goals",
    "projects": "projects",
    "actions": "actions",
    "habits": "habits",
    "habitLogs": "habit_logs",
    "notes": "notes",
    "journal": "journal",
    "events": "events",
    "metricDefinitions": "metric_definitions",
    "metricEntries": "metric_entries",
}

PERIODS = frozenset({"day", "week", "month", "year"})


def default_notification_settings() -> dict[str, bool]:
    return {
        "enabled": True,
        "sound": True,
        "email": False,
        "push": True,
        "reminders": True,
    }


@dataclass(frozen=True)
class AppState:
    areas: Arena = field(default_factory=dict)
    goals: Arena = field(default_factory=dict)
    projects: Arena = field(default_factory=dict)
    actions: Arena = field(default_factory=dict)
    habits: Arena = field(default_factory=dict)
    habit_logs: Arena = field(default_factory=dict)
    notes: Arena = field(default_factory=dict)
    journal: Arena = field(default_factory=dict)
    events: Arena = field(default_factory=dict)
    metric_definitions: Arena = field(default_factory=dict)
    metric_entries: Arena = field(default_factory=dict)

    # Client only
    notifications: tuple[Row, ...] = ()
    notification_settings: dict[str, bool] = field(default_factory=default_notification_settings)
    user: Row = field(default_factory=lambda: {"name": "", "avatar": ""})
    period: str = "day"
    selected_area_id: str = "all"
    is_loading: bool = True

    def to_snapshot(self) -> dict[str, list[Row]]:
        """Arenas as the list-per-collection shape returned by ``GET /api/sync``."""
        return {key: list(getattr(self, attr).values()) for key, attr in ARENA_FIELDS.items()}

    def logs_for_habit(self, habit_id: str) -> list[Row]:
        return [log for log in self.habit_logs.values() if log.get("habitId") == habit_id]


def arena_from_rows(rows: list[Row]) -> Arena:
    """Index rows by id; rows without an id are dropped, later duplicates win."""
    return {str(row["id"]): dict(row) for row in rows if isinstance(row, dict) and row.get("id") is not None}
