"""Tests for the derived metrics engine (progress, achievement, streaks)."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from lifesync.metrics.derived import (
    compute_goal_progress,
    compute_streak,
    evaluate_goal,
    is_achieved,
    latest_metric_values,
    normalize_calendar_day,
    parse_timestamp,
)

TODAY = date(2026, 3, 15)


def _logs(*days_ago: int, completed: bool = True) -> list[dict]:
    return [
        {"habitId": "h1", "date": (TODAY - timedelta(days=n)).isoformat(), "completed": completed}
        for n in days_ago
    ]


class TestComputeGoalProgress:
    def test_halfway_on_decreasing_goal(self):
        # 80 -> 70, currently 75
        assert compute_goal_progress(75, 80, 70) == 50

    def test_halfway_on_increasing_goal(self):
        assert compute_goal_progress(65, 60, 70) == 50

    def test_zero_range_is_zero(self):
        assert compute_goal_progress(10, 50, 50) == 0

    def test_clamped_to_100(self):
        assert compute_goal_progress(120, 0, 100) == 100

    def test_movement_away_from_target_counts_as_distance(self):
        # Unsigned distance from start
        assert compute_goal_progress(50, 60, 70) == 100

    def test_rounds_half_up(self):
        # 1/8 = 12.5%
        assert compute_goal_progress(1, 0, 8) == 13
        assert compute_goal_progress(2.5, 0, 200) == 1

    def test_start_value_is_zero_progress(self):
        assert compute_goal_progress(80, 80, 70) == 0

    def test_result_is_int(self):
        assert isinstance(compute_goal_progress(3.3, 0, 10), int)

    def test_overflowing_distance_is_clamped(self):
        assert compute_goal_progress(1e308, -1e308, 0) == 100

    def test_nan_is_zero(self):
        assert compute_goal_progress(float("nan"), 0, 10) == 0


class TestIsAchieved:
    @pytest.mark.parametrize(
        ("current", "target", "direction", "expected"),
        [
            (10, 10, "increase", True),
            (9, 10, "increase", False),
            (70, 70, "decrease", True),
            (71, 70, "decrease", False),
            (70, 70, "maintain", False),
            (70, 70, None, False),
        ],
    )
    def test_directions(self, current, target, direction, expected):
        assert is_achieved(current, target, direction) is expected


class TestComputeStreak:
    def test_no_logs(self):
        assert compute_streak([], TODAY) == 0

    def test_today_and_previous_days(self):
        assert compute_streak(_logs(0, 1, 2), TODAY) == 3

    def test_today_not_yet_logged_keeps_yesterdays_streak(self):
        assert compute_streak(_logs(1, 2, 3, 4), TODAY) == 4

    def test_missed_yesterday_breaks_streak(self):
        assert compute_streak(_logs(2, 3), TODAY) == 0

    def test_gap_stops_the_count(self):
        # today, yesterday missing -> only today counts
        assert compute_streak(_logs(0, 2, 3), TODAY) == 1

    def test_incomplete_logs_are_ignored(self):
        logs = _logs(0) + _logs(1, completed=False)
        assert compute_streak(logs, TODAY) == 1

    def test_long_run(self):
        assert compute_streak(_logs(*range(0, 40)), TODAY) == 40

    def test_unreadable_dates_are_skipped(self):
        logs = _logs(0) + [{"date": "not-a-date", "completed": True}]
        assert compute_streak(logs, TODAY) == 1


class TestNormalizeCalendarDay:
    def test_date(self):
        assert normalize_calendar_day(date(2026, 1, 2)) == "2026-01-02"

    def test_aware_datetime_is_taken_in_utc(self):
        value = datetime(2026, 1, 2, 23, 30, tzinfo=UTC) + timedelta(hours=1)
        assert normalize_calendar_day(value) == "2026-01-03"

    def test_iso_datetime_string_keeps_its_date_part(self):
        assert normalize_calendar_day("2026-01-02T23:30:00-05:00") == "2026-01-02"

    def test_plain_date_string(self):
        assert normalize_calendar_day("2026-01-02") == "2026-01-02"

    def test_epoch_seconds(self):
        assert normalize_calendar_day(1767312000) == "2026-01-02"

    def test_epoch_milliseconds(self):
        assert normalize_calendar_day(1767312000000) == "2026-01-02"

    @pytest.mark.parametrize("value", [None, "", "garbage", True, {"x": 1}])
    def test_unreadable_values(self, value):
        assert normalize_calendar_day(value) is None


class TestParseTimestamp:
    def test_zulu_suffix(self):
        assert parse_timestamp("2026-01-02T10:00:00Z") == datetime(2026, 1, 2, 10, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert parse_timestamp("2026-01-02T10:00:00").tzinfo is not None

    def test_garbage(self):
        assert parse_timestamp("yesterday") is None


class TestLatestMetricValues:
    def test_latest_by_date_not_by_order(self):
        entries = [
            {"metricId": "m1", "value": 3, "date": "2026-01-03"},
            {"metricId": "m1", "value": 1, "date": "2026-01-01"},
            {"metricId": "m2", "value": 7, "date": "2026-01-02"},
        ]
        assert latest_metric_values(entries) == {"m1": 3, "m2": 7}

    def test_same_date_later_entry_wins(self):
        entries = [
            {"metricId": "m1", "value": 1, "date": "2026-01-01"},
            {"metricId": "m1", "value": 2, "date": "2026-01-01"},
        ]
        assert latest_metric_values(entries) == {"m1": 2}


class TestEvaluateGoal:
    def _goal(self, **overrides) -> dict:
        goal = {
            "type": "strategic",
            "targetMetricId": "m1",
            "metricStartValue": 80,
            "metricTargetValue": 70,
            "progress": 0,
        }
        goal.update(overrides)
        return goal

    def test_vision_goal_has_no_progress(self):
        result = evaluate_goal(self._goal(type="vision"), 75)
        assert result.progress == 0
        assert result.display_status == "on-track"
        assert result.is_metric_based is False

    def test_metric_goal_on_track(self):
        result = evaluate_goal(self._goal(), 75)
        assert result.progress == 50
        assert result.display_status == "on-track"

    def test_unmoved_metric_with_actions_is_at_risk(self):
        result = evaluate_goal(self._goal(), 80, [{"id": "a1"}])
        assert result.display_status == "at-risk"

    def test_unmoved_metric_without_actions_is_not_started(self):
        assert evaluate_goal(self._goal(), None).display_status == "not-started"

    def test_reached_target_is_completed(self):
        assert evaluate_goal(self._goal(), 70).display_status == "completed"

    def test_strategic_without_metric_is_not_started(self):
        result = evaluate_goal(self._goal(targetMetricId=None))
        assert result.display_status == "not-started"
        assert result.is_metric_based is True

    def test_tactical_without_metric_uses_manual_progress(self):
        result = evaluate_goal(self._goal(type="tactical", targetMetricId=None, progress=40))
        assert result.progress == 40
        assert result.is_metric_based is False
