"""Tests for shared column types and model constraints."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from lifesync.models import Habit, HabitLog, LifeArea, MetricDefinition, MetricEntry, User
from lifesync.models.types import EpochTimestamp


class TestEpochTimestamp:
    @pytest.fixture
    def column_type(self) -> EpochTimestamp:
        return EpochTimestamp()

    def test_aware_datetime(self, column_type):
        value = datetime(2026, 1, 2, 0, 0, tzinfo=UTC)
        assert column_type.process_bind_param(value, None) == 1767312000

    def test_offset_datetime_is_converted(self, column_type):
        value = datetime(2026, 1, 2, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert column_type.process_bind_param(value, None) == 1767312000

    def test_naive_datetime_is_utc(self, column_type):
        assert column_type.process_bind_param(datetime(2026, 1, 2), None) == 1767312000

    def test_date(self, column_type):
        assert column_type.process_bind_param(date(2026, 1, 2), None) == 1767312000

    def test_number_passes_through(self, column_type):
        assert column_type.process_bind_param(1767312000.9, None) == 1767312000

    def test_bool_is_rejected(self, column_type):
        with pytest.raises(TypeError):
            column_type.process_bind_param(True, None)

    def test_string_is_rejected(self, column_type):
        with pytest.raises(TypeError):
            column_type.process_bind_param("2026-01-02", None)

    def test_result_is_aware_utc(self, column_type):
        assert column_type.process_result_value(1767312000, None) == datetime(2026, 1, 2, tzinfo=UTC)
        assert column_type.process_result_value(None, None) is None


class TestConstraints:
    @pytest.fixture
    async def owner(self, db) -> str:
        db.add(User(id="u1", email="u1@lifesync.test", name="U", password_hash="x"))
        await db.commit()
        return "u1"

    async def test_area_titles_and_metric_names_may_repeat(self, db, owner):
        db.add(LifeArea(id="a1", user_id=owner, title="Health"))
        db.add(LifeArea(id="a2", user_id=owner, title="Health"))
        db.add(MetricDefinition(id="m1", user_id=owner, area_id="a1", name="Weight"))
        db.add(MetricDefinition(id="m2", user_id=owner, area_id="a1", name="Weight"))
        await db.commit()

    async def test_one_log_per_habit_day(self, db, owner):
        db.add(Habit(id="h1", user_id=owner, title="Walk"))
        await db.commit()
        db.add(HabitLog(id="l1", user_id=owner, habit_id="h1", date="2026-03-15"))
        db.add(HabitLog(id="l2", user_id=owner, habit_id="h1", date="2026-03-15"))
        with pytest.raises(IntegrityError):
            await db.commit()

    async def test_content_requires_existing_user(self, db):
        db.add(LifeArea(id="a1", user_id="ghost", title="Health"))
        with pytest.raises(IntegrityError):
            await db.commit()

    async def test_deleting_user_cascades(self, db, owner):
        db.add(MetricDefinition(id="m1", user_id=owner, area_id="a1", name="Weight"))
        await db.commit()
        db.add(MetricEntry(id="e1", user_id=owner, metric_id="m1", value=80.0, date=datetime.now(UTC)))
        await db.commit()

        await db.execute(text("DELETE FROM users WHERE id = 'u1'"))
        await db.commit()

        remaining = await db.scalar(text("SELECT count(*) FROM metric_entries"))
        assert remaining == 0

    async def test_timestamps_roundtrip(self, db, owner):
        when = datetime(2026, 3, 15, 8, 30, tzinfo=UTC)
        db.add(MetricDefinition(id="m1", user_id=owner, area_id="a1", name="Weight"))
        db.add(MetricEntry(id="e1", user_id=owner, metric_id="m1", value=80.0, date=when))
        await db.commit()

        row = await db.scalar(text("SELECT date FROM metric_entries WHERE id = 'e1'"))
        assert row == int(when.timestamp())
        entry = await db.get(MetricEntry, "e1", populate_existing=True)
        assert entry.date == when
