"""
Closed command vocabulary.

A command is a typed mutation: ``{commandType, payload}`` on the wire. The
same enumeration drives the client reducer, the outbound queue and the
server's command table; tests assert that every member is handled on both
sides (or is marked local-only).

Payload shapes:
    ADD_* / UPDATE_*        full entity object (camelCase keys, client id)
    DELETE_*                {"id": ...}
    TOGGLE_ACTION           {"id": ...}
    TOGGLE_SUBGOAL          {"id": <goal id>, "subGoalId": ...}
    LOG_HABIT               habit log {"id", "habitId", "date", "completed"}
    MARK_NOTIFICATIONS_READ {"ids": [...]}   (empty list marks all)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class CommandType(StrEnum):
    # Actions
    ADD_ACTION = "ADD_ACTION"
    UPDATE_ACTION = "UPDATE_ACTION"
    DELETE_ACTION = "DELETE_ACTION"
    TOGGLE_ACTION = "TOGGLE_ACTION"
    # Goals
    ADD_GOAL = "ADD_GOAL"
    UPDATE_GOAL = "UPDATE_GOAL"
    DELETE_GOAL = "DELETE_GOAL"
    TOGGLE_SUBGOAL = "TOGGLE_SUBGOAL"
    # Projects
    ADD_PROJECT = "ADD_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    # Habits
    ADD_HABIT = "ADD_HABIT"
    UPDATE_HABIT = "UPDATE_HABIT"
    DELETE_HABIT = "DELETE_HABIT"
    LOG_HABIT = "LOG_HABIT"
    DELETE_HABIT_LOG = "DELETE_HABIT_LOG"
    # Notes and journal
    ADD_NOTE = "ADD_NOTE"
    UPDATE_NOTE = "UPDATE_NOTE"
    DELETE_NOTE = "DELETE_NOTE"
    ADD_JOURNAL = "ADD_JOURNAL"
    UPDATE_JOURNAL = "UPDATE_JOURNAL"
    DELETE_JOURNAL = "DELETE_JOURNAL"
    # Calendar
    ADD_EVENT = "ADD_EVENT"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"
    # Metrics
    ADD_METRIC_DEF = "ADD_METRIC_DEF"
    DELETE_METRIC_DEF = "DELETE_METRIC_DEF"
    ADD_METRIC_ENTRY = "ADD_METRIC_ENTRY"
    # Areas
    ADD_AREA = "ADD_AREA"
    UPDATE_AREA = "UPDATE_AREA"
    DELETE_AREA = "DELETE_AREA"
    # Local only
    INIT_DATA = "INIT_DATA"
    SET_LOADING = "SET_LOADING"
    SET_PERIOD = "SET_PERIOD"
    SET_AREA = "SET_AREA"
    ADD_NOTIFICATION = "ADD_NOTIFICATION"
    MARK_NOTIFICATIONS_READ = "MARK_NOTIFICATIONS_READ"
    CLEAR_NOTIFICATIONS = "CLEAR_NOTIFICATIONS"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"


# Applied to the local store only, never sent to the server
LOCAL_ONLY_COMMANDS: frozenset[CommandType] = frozenset(
    {
        CommandType.INIT_DATA,
        CommandType.SET_LOADING,
        CommandType.SET_PERIOD,
        CommandType.SET_AREA,
        CommandType.ADD_NOTIFICATION,
        CommandType.MARK_NOTIFICATIONS_READ,
        CommandType.CLEAR_NOTIFICATIONS,
        CommandType.UPDATE_SETTINGS,
    }
)

# Applying these twice is not the same as applying them once
NON_IDEMPOTENT_COMMANDS: frozenset[CommandType] = frozenset(
    {CommandType.TOGGLE_ACTION, CommandType.TOGGLE_SUBGOAL}
)


@dataclass(frozen=True)
class Command:
    """A typed mutation. ``type`` stays a plain string so unknown kinds survive parsing."""

    type: str
    payload: Any = None

    @property
    def is_local_only(self) -> bool:
        return self.type in LOCAL_ONLY_COMMANDS

    @property
    def is_idempotent(self) -> bool:
        return self.type not in NON_IDEMPOTENT_COMMANDS

    def entity_key(self) -> str | None:
        """Identity of the entity this command touches.

        Habit logs are keyed by (habit, day) since that is their upsert key.
        """
        if not isinstance(self.payload, dict):
            return None
        if self.type == CommandType.LOG_HABIT:
            habit_id = self.payload.get("habitId")
            day = self.payload.get("date")
            if habit_id is not None and day is not None:
                return f"{habit_id}@{day}"
        entity_id = self.payload.get("id")
        return None if entity_id is None else str(entity_id)

    def to_wire(self) -> dict[str, Any]:
        return {"commandType": str(self.type), "payload": self.payload}

    @classmethod
    def from_wire(cls, body: dict[str, Any]) -> Command:
        return cls(type=str(body["commandType"]), payload=body.get("payload"))
