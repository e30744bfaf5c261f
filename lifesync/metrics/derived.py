"""
Derived metrics engine.

Pure functions that turn raw user data (metric values, habit logs) into the
derived fields the rest of the system stores alongside it: a goal's
``progress`` percentage and a habit's ``streak``. Nothing here touches I/O
or mutable state, so the client store and tests call these directly.

Progress
--------
    total    = |target - start|
    progress = clamp(round(|current - start| / total * 100), 0, 100)

The distance is measured without sign, so a goal to go from 80 down to 70
reaches 50 at 75 just as a goal from 70 up to 80 does. A zero range yields
0. Rounding is half-up.

Streak
------
Consecutive calendar days with a completed log, ending today when today is
already logged, otherwise ending yesterday. Missing yesterday means 0.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

# Epoch numbers above this are treated as milliseconds
_EPOCH_MILLIS_THRESHOLD = 1e11


def compute_goal_progress(current: float, start: float, target: float) -> int:
    """Percentage of the start→target distance covered by ``current``."""
    total = abs(target - start)
    if total == 0:
        return 0
    raw = abs(current - start) / total * 100
    # Extreme floats can overflow the distance
    if math.isnan(raw):
        return 0
    if math.isinf(raw):
        return 100
    return max(0, min(100, math.floor(raw + 0.5)))


def is_achieved(current: float, target: float, direction: str | None) -> bool:
    if direction == "increase":
        return current >= target
    if direction == "decrease":
        return current <= target
    return False


def normalize_calendar_day(value: Any) -> str | None:
    """Coerce a date-like value to ``YYYY-MM-DD``.

    Accepts ``date``/``datetime`` objects, ISO strings (only the date part
    is kept, no timezone shift) and epoch numbers. Returns None for
    anything that cannot be read as a day.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        parsed = _from_epoch(value)
        return parsed.date().isoformat() if parsed else None
    if isinstance(value, str):
        head = value.strip().split("T", 1)[0].split(" ", 1)[0]
        try:
            return date.fromisoformat(head).isoformat()
        except ValueError:
            return None
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Best-effort conversion to an aware UTC datetime (None if unreadable)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _from_epoch(value: float) -> datetime | None:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    seconds = value / 1000 if abs(value) > _EPOCH_MILLIS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def compute_streak(logs: Iterable[Mapping[str, Any]], today: date) -> int:
    """Count consecutive completed days ending today (or yesterday)."""
    done = {
        day
        for log in logs
        if log.get("completed")
        and (day := normalize_calendar_day(log.get("date"))) is not None
    }
    cursor = today if today.isoformat() in done else today - timedelta(days=1)
    streak = 0
    while cursor.isoformat() in done:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def latest_metric_values(entries: Iterable[Mapping[str, Any]]) -> dict[str, float]:
    """Map each metric id to the value of its most recent entry.

    Entries with equal (or unreadable) dates keep their input order, so the
    later one wins.
    """
    floor = datetime.min.replace(tzinfo=UTC)
    ordered = sorted(
        (e for e in entries if e.get("metricId") is not None and e.get("value") is not None),
        key=lambda e: parse_timestamp(e.get("date")) or floor,
    )
    return {e["metricId"]: e["value"] for e in ordered}


@dataclass(frozen=True)
class GoalEvaluation:
    progress: int
    display_status: str  # on-track | at-risk | not-started | completed
    is_metric_based: bool
    reason: str


def evaluate_goal(
    goal: Mapping[str, Any],
    current_value: float | None = None,
    linked_actions: Iterable[Mapping[str, Any]] = (),
) -> GoalEvaluation:
    """Truthful progress of a goal, measured by outcome rather than activity.

    Vision goals are a direction and carry no progress. Strategic goals must
    be measured by a metric. Tactical goals use their metric when linked and
    otherwise report the manually entered progress.
    """
    goal_type = goal.get("type")
    if goal_type == "vision":
        return GoalEvaluation(0, "on-track", False, "vision goals are not measured")

    if not goal.get("targetMetricId"):
        if goal_type == "strategic":
            return GoalEvaluation(0, "not-started", True, "no linked metric")
        manual = int(goal.get("progress") or 0)
        status = "completed" if manual >= 100 else "on-track"
        return GoalEvaluation(manual, status, False, "manual estimate")

    start = goal.get("metricStartValue")
    target = goal.get("metricTargetValue")
    if start is None or target is None:
        return GoalEvaluation(0, "not-started", True, "metric range not set")

    current = start if current_value is None else current_value
    progress = compute_goal_progress(current, start, target)
    if progress >= 100:
        return GoalEvaluation(100, "completed", True, "target reached")
    if progress == 0:
        if any(True for _ in linked_actions):
            return GoalEvaluation(0, "at-risk", True, "actions logged but metric unchanged")
        return GoalEvaluation(0, "not-started", True, "no change yet")
    return GoalEvaluation(progress, "on-track", True, f"progress {progress}%")
