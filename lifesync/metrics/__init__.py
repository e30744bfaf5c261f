"""Derived metrics: goal progress, achievement and habit streaks."""

from lifesync.metrics.derived import (
    GoalEvaluation,
    compute_goal_progress,
    compute_streak,
    evaluate_goal,
    is_achieved,
    latest_metric_values,
    normalize_calendar_day,
)

__all__ = [
    "GoalEvaluation",
    "compute_goal_progress",
    "compute_streak",
    "evaluate_goal",
    "is_achieved",
    "latest_metric_values",
    "normalize_calendar_day",
]
