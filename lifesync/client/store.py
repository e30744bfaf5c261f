"""
Local state store: the client's synchronous state-transition engine.

``reduce`` is a pure function ``(state, command, today) -> state``. It never
raises; unknown command types and malformed payloads leave the state as it
was and are logged. Derived fields are recomputed here, at the moment the
inputs change:

- a goal linked to a metric gets its ``progress`` from the metric values
  unless the goal is completed (completed goals are frozen)
- a habit's ``streak`` follows its logs
- loading a snapshot re-derives both for every goal and habit

``LocalStore`` owns one session's current state and notifies subscribers
after every change.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

import structlog

from lifesync.client.state import (
    ARENA_FIELDS,
    PERIODS,
    AppState,
    Arena,
    Row,
    arena_from_rows,
)
from lifesync.metrics.derived import (
    compute_goal_progress,
    compute_streak,
    latest_metric_values,
    normalize_calendar_day,
    parse_timestamp,
)
from lifesync.sync.commands import Command, CommandType

log = structlog.get_logger(__name__)

DEFAULT_NOTIFICATION_RETENTION_DAYS = 30

# Fields holding a calendar day, normalized to YYYY-MM-DD on snapshot load
_CALENDAR_DAY_FIELDS = {
    "journal": "date",
    "habit_logs": "date",
    "actions": "date",
}


@dataclass(frozen=True)
class _Context:
    today: date
    notification_retention_days: int


Handler = Callable[[AppState, Any, _Context], AppState]


# --------------------------------------------------------------------------- #
# Payload helpers
# --------------------------------------------------------------------------- #


def _entity(payload: Any) -> Row:
    if not isinstance(payload, dict):
        raise TypeError(f"expected an object payload, got {type(payload).__name__}")
    if payload.get("id") is None:
        raise ValueError("payload has no id")
    return dict(payload)


def _entity_id(payload: Any) -> str:
    return str(_entity(payload)["id"])


# --------------------------------------------------------------------------- #
# Derived fields
# --------------------------------------------------------------------------- #


def _derive_goal_progress(goal: Row) -> Row:
    """Recompute progress for a goal being created or replaced."""
    start = goal.get("metricStartValue")
    target = goal.get("metricTargetValue")
    if (
        not goal.get("targetMetricId")
        or start is None
        or target is None
        or goal.get("status") == "completed"
    ):
        return goal
    current = goal.get("metricCurrentValue")
    if current is None:
        current = start
    return {**goal, "progress": compute_goal_progress(current, start, target)}


def _goal_on_metric_value(goal: Row, value: float, *, keep_on_empty_range: bool) -> Row:
    updated = {**goal, "metricCurrentValue": value}
    if goal.get("status") == "completed":
        return updated
    start = goal.get("metricStartValue")
    target = goal.get("metricTargetValue")
    start = 0 if start is None else start
    target = 100 if target is None else target
    if keep_on_empty_range and start == target:
        return updated
    updated["progress"] = compute_goal_progress(value, start, target)
    return updated


def _with_streak(state: AppState, habit_logs: Arena, habit_id: str | None, today: date) -> Arena:
    if habit_id is None or habit_id not in state.habits:
        return state.habits
    logs = [row for row in habit_logs.values() if row.get("habitId") == habit_id]
    habit = state.habits[habit_id]
    return {**state.habits, habit_id: {**habit, "streak": compute_streak(logs, today)}}


# --------------------------------------------------------------------------- #
# Generic arena handlers
# --------------------------------------------------------------------------- #


def _upsert(attr: str, transform: Callable[[Row], Row] | None = None) -> Handler:
    def handler(state: AppState, payload: Any, ctx: _Context) -> AppState:
        row = _entity(payload)
        if transform is not None:
            row = transform(row)
        arena = getattr(state, attr)
        return dataclasses.replace(state, **{attr: {**arena, str(row["id"]): row}})

    return handler


def _replace(attr: str, transform: Callable[[Row], Row] | None = None) -> Handler:
    """Replace an existing row wholesale; unknown ids are ignored."""

    def handler(state: AppState, payload: Any, ctx: _Context) -> AppState:
        row = _entity(payload)
        arena = getattr(state, attr)
        entity_id = str(row["id"])
        if entity_id not in arena:
            return state
        if transform is not None:
            row = transform(row)
        return dataclasses.replace(state, **{attr: {**arena, entity_id: row}})

    return handler


def _delete(attr: str) -> Handler:
    def handler(state: AppState, payload: Any, ctx: _Context) -> AppState:
        entity_id = _entity_id(payload)
        arena = getattr(state, attr)
        if entity_id not in arena:
            return state
        remaining = {k: v for k, v in arena.items() if k != entity_id}
        return dataclasses.replace(state, **{attr: remaining})

    return handler


# --------------------------------------------------------------------------- #
# Specific handlers
# --------------------------------------------------------------------------- #


def _toggle_action(state: AppState, payload: Any, ctx: _Context) -> AppState:
    action_id = _entity_id(payload)
    action = state.actions.get(action_id)
    if action is None:
        return state
    flipped = {**action, "completed": not action.get("completed", False)}
    return dataclasses.replace(state, actions={**state.actions, action_id: flipped})


def _toggle_subgoal(state: AppState, payload: Any, ctx: _Context) -> AppState:
    goal_id = _entity_id(payload)
    sub_goal_id = payload["subGoalId"]
    goal = state.goals.get(goal_id)
    if goal is None:
        return state
    sub_goals = [
        {**sg, "completed": not sg.get("completed", False)}
        if isinstance(sg, dict) and sg.get("id") == sub_goal_id
        else sg
        for sg in goal.get("subGoals") or []
    ]
    return dataclasses.replace(state, goals={**state.goals, goal_id: {**goal, "subGoals": sub_goals}})


def _log_habit(state: AppState, payload: Any, ctx: _Context) -> AppState:
    entry = _entity(payload)
    habit_id = entry["habitId"]
    day = normalize_calendar_day(entry.get("date"))
    if day is None:
        raise ValueError(f"unreadable habit log date: {entry.get('date')!r}")
    entry["date"] = day
    entry.setdefault("completed", True)

    logs = {
        k: v
        for k, v in state.habit_logs.items()
        if not (v.get("habitId") == habit_id and normalize_calendar_day(v.get("date")) == day)
    }
    logs[str(entry["id"])] = entry
    return dataclasses.replace(
        state,
        habit_logs=logs,
        habits=_with_streak(state, logs, habit_id, ctx.today),
    )


def _delete_habit_log(state: AppState, payload: Any, ctx: _Context) -> AppState:
    log_id = _entity_id(payload)
    removed = state.habit_logs.get(log_id)
    if removed is None:
        return state
    logs = {k: v for k, v in state.habit_logs.items() if k != log_id}
    return dataclasses.replace(
        state,
        habit_logs=logs,
        habits=_with_streak(state, logs, removed.get("habitId"), ctx.today),
    )


def _delete_habit(state: AppState, payload: Any, ctx: _Context) -> AppState:
    habit_id = _entity_id(payload)
    if habit_id not in state.habits:
        return state
    return dataclasses.replace(
        state,
        habits={k: v for k, v in state.habits.items() if k != habit_id},
        habit_logs={k: v for k, v in state.habit_logs.items() if v.get("habitId") != habit_id},
    )


def _add_metric_entry(state: AppState, payload: Any, ctx: _Context) -> AppState:
    entry = _entity(payload)
    metric_id = entry["metricId"]
    value = entry["value"]
    goals = {
        gid: (
            _goal_on_metric_value(goal, value, keep_on_empty_range=False)
            if goal.get("targetMetricId") == metric_id
            else goal
        )
        for gid, goal in state.goals.items()
    }
    return dataclasses.replace(
        state,
        metric_entries={**state.metric_entries, str(entry["id"]): entry},
        goals=goals,
    )


def _delete_metric_def(state: AppState, payload: Any, ctx: _Context) -> AppState:
    metric_id = _entity_id(payload)
    if metric_id not in state.metric_definitions:
        return state
    goals = {
        gid: ({**goal, "targetMetricId": None} if goal.get("targetMetricId") == metric_id else goal)
        for gid, goal in state.goals.items()
    }
    return dataclasses.replace(
        state,
        metric_definitions={k: v for k, v in state.metric_definitions.items() if k != metric_id},
        metric_entries={k: v for k, v in state.metric_entries.items() if v.get("metricId") != metric_id},
        goals=goals,
    )


def _init_data(state: AppState, payload: Any, ctx: _Context) -> AppState:
    if not isinstance(payload, dict):
        raise TypeError("snapshot must be an object")

    changes: dict[str, Any] = {}
    for key, attr in ARENA_FIELDS.items():
        rows = payload.get(key)
        if not isinstance(rows, list):
            if rows is not None:
                log.warning("store.init_field_skipped", field=key, got=type(rows).__name__)
            continue
        arena = arena_from_rows(rows)
        day_field = _CALENDAR_DAY_FIELDS.get(attr)
        if day_field:
            for row in arena.values():
                day = normalize_calendar_day(row.get(day_field))
                if day is not None:
                    row[day_field] = day
        changes[attr] = arena

    if "notifications" in payload:
        cutoff = datetime.combine(
            ctx.today - timedelta(days=ctx.notification_retention_days), time.min, tzinfo=UTC
        )
        kept = []
        for note in payload["notifications"] or []:
            stamp = parse_timestamp(note.get("date")) if isinstance(note, dict) else None
            if stamp is not None and stamp >= cutoff:
                kept.append(dict(note))
        changes["notifications"] = tuple(kept)

    if isinstance(payload.get("notificationSettings"), dict):
        changes["notification_settings"] = {
            **state.notification_settings,
            **payload["notificationSettings"],
        }
    if isinstance(payload.get("user"), dict):
        changes["user"] = dict(payload["user"])

    merged = dataclasses.replace(state, **changes)

    latest = latest_metric_values(merged.metric_entries.values())
    goals = {}
    for gid, goal in merged.goals.items():
        metric_id = goal.get("targetMetricId")
        if metric_id and metric_id in latest:
            goal = _goal_on_metric_value(goal, latest[metric_id], keep_on_empty_range=True)
            if goal.get("status") == "completed":
                goal["progress"] = 100
        goals[gid] = goal

    logs_by_habit: dict[str, list[Row]] = {}
    for row in merged.habit_logs.values():
        logs_by_habit.setdefault(row.get("habitId"), []).append(row)
    habits = {
        hid: {**habit, "streak": compute_streak(logs_by_habit.get(hid, []), ctx.today)}
        for hid, habit in merged.habits.items()
    }

    return dataclasses.replace(merged, goals=goals, habits=habits, is_loading=False)


def _set_loading(state: AppState, payload: Any, ctx: _Context) -> AppState:
    if not isinstance(payload, bool):
        raise TypeError("SET_LOADING expects a boolean")
    return dataclasses.replace(state, is_loading=payload)


def _set_period(state: AppState, payload: Any, ctx: _Context) -> AppState:
    if payload not in PERIODS:
        raise ValueError(f"unknown period {payload!r}")
    return dataclasses.replace(state, period=payload)


def _set_area(state: AppState, payload: Any, ctx: _Context) -> AppState:
    if not isinstance(payload, str):
        raise TypeError("SET_AREA expects an area id")
    return dataclasses.replace(state, selected_area_id=payload)


def _add_notification(state: AppState, payload: Any, ctx: _Context) -> AppState:
    note = _entity(payload)
    note.setdefault("read", False)
    others = tuple(n for n in state.notifications if n.get("id") != note["id"])
    return dataclasses.replace(state, notifications=(note, *others))


def _mark_notifications_read(state: AppState, payload: Any, ctx: _Context) -> AppState:
    ids = set(payload["ids"])
    return dataclasses.replace(
        state,
        notifications=tuple(
            {**n, "read": True} if not ids or n.get("id") in ids else n
            for n in state.notifications
        ),
    )


def _clear_notifications(state: AppState, payload: Any, ctx: _Context) -> AppState:
    # Retention on load is the only way notifications go away
    return state


def _update_settings(state: AppState, payload: Any, ctx: _Context) -> AppState:
    if not isinstance(payload, dict):
        raise TypeError("UPDATE_SETTINGS expects an object")
    return dataclasses.replace(
        state, notification_settings={**state.notification_settings, **payload}
    )


HANDLERS: dict[CommandType, Handler] = {
    CommandType.ADD_ACTION: _upsert("actions"),
    CommandType.UPDATE_ACTION: _replace("actions"),
    CommandType.DELETE_ACTION: _delete("actions"),
    CommandType.TOGGLE_ACTION: _toggle_action,
    CommandType.ADD_GOAL: _upsert("goals", _derive_goal_progress),
    CommandType.UPDATE_GOAL: _replace("goals", _derive_goal_progress),
    CommandType.DELETE_GOAL: _delete("goals"),
    CommandType.TOGGLE_SUBGOAL: _toggle_subgoal,
    CommandType.ADD_PROJECT: _upsert("projects"),
    CommandType.UPDATE_PROJECT: _replace("projects"),
    CommandType.DELETE_PROJECT: _delete("projects"),
    CommandType.ADD_HABIT: _upsert("habits"),
    CommandType.UPDATE_HABIT: _replace("habits"),
    CommandType.DELETE_HABIT: _delete_habit,
    CommandType.LOG_HABIT: _log_habit,
    CommandType.DELETE_HABIT_LOG: _delete_habit_log,
    CommandType.ADD_NOTE: _upsert("notes"),
    CommandType.UPDATE_NOTE: _replace("notes"),
    CommandType.DELETE_NOTE: _delete("notes"),
    CommandType.ADD_JOURNAL: _upsert("journal"),
    CommandType.UPDATE_JOURNAL: _replace("journal"),
    CommandType.DELETE_JOURNAL: _delete("journal"),
    CommandType.ADD_EVENT: _upsert("events"),
    CommandType.UPDATE_EVENT: _replace("events"),
    CommandType.DELETE_EVENT: _delete("events"),
    CommandType.ADD_METRIC_DEF: _upsert("metric_definitions"),
    CommandType.DELETE_METRIC_DEF: _delete_metric_def,
    CommandType.ADD_METRIC_ENTRY: _add_metric_entry,
    CommandType.ADD_AREA: _upsert("areas"),
    CommandType.UPDATE_AREA: _replace("areas"),
    CommandType.DELETE_AREA: _delete("areas"),
    CommandType.INIT_DATA: _init_data,
    CommandType.SET_LOADING: _set_loading,
    CommandType.SET_PERIOD: _set_period,
    CommandType.SET_AREA: _set_area,
    CommandType.ADD_NOTIFICATION: _add_notification,
    CommandType.MARK_NOTIFICATIONS_READ: _mark_notifications_read,
    CommandType.CLEAR_NOTIFICATIONS: _clear_notifications,
    CommandType.UPDATE_SETTINGS: _update_settings,
}


def reduce(
    state: AppState,
    command: Command,
    today: date,
    *,
    notification_retention_days: int = DEFAULT_NOTIFICATION_RETENTION_DAYS,
) -> AppState:
    """Apply one command. Total: returns ``state`` itself when nothing applies."""
    handler = HANDLERS.get(command.type)
    if handler is None:
        log.debug("store.command_ignored", command_type=command.type)
        return state
    ctx = _Context(today=today, notification_retention_days=notification_retention_days)
    try:
        return handler(state, command.payload, ctx)
    except (KeyError, TypeError, ValueError) as exc:
        log.warning("store.command_rejected", command_type=command.type, error=str(exc))
        return state
    except Exception:
        log.exception("store.command_failed", command_type=command.type)
        return state


def utc_today() -> date:
    return datetime.now(UTC).date()


Listener = Callable[[AppState], None]


class LocalStore:
    """Current state for one client session.

    Constructed per session and handed to the dispatcher; there is no
    module-level instance.
    """

    def __init__(
        self,
        initial: AppState | None = None,
        *,
        today: Callable[[], date] = utc_today,
        notification_retention_days: int = DEFAULT_NOTIFICATION_RETENTION_DAYS,
    ) -> None:
        self._state = initial or AppState()
        self._today = today
        self._retention_days = notification_retention_days
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def apply(self, command: Command) -> AppState:
        new_state = reduce(
            self._state,
            command,
            self._today(),
            notification_retention_days=self._retention_days,
        )
        if new_state is not self._state:
            self._state = new_state
            self._notify()
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                log.exception("store.listener_failed", listener=repr(listener))
