"""Tests for the default area/metric seeder against a real SQLite database."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from lifesync.models import LifeArea, MetricDefinition, User
from lifesync.services.catalog import DEFAULT_AREAS, DEFAULT_METRICS, metrics_for_area
from lifesync.services.seeder import Seeder

TOTAL_DEFAULT_METRICS = sum(len(m) for m in DEFAULT_METRICS.values())


@pytest.fixture
async def owner(db, user_id) -> str:
    db.add(User(id=user_id, email="owner@lifesync.test", name="Owner", password_hash="x"))
    await db.commit()
    return user_id


async def _count(db, model, user_id) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(model.user_id == user_id))


class TestCatalog:
    def test_every_default_area_has_metrics(self):
        for area in DEFAULT_AREAS:
            assert metrics_for_area(area.title), area.title

    def test_legacy_titles_resolve(self):
        assert metrics_for_area("Body & Energy") == DEFAULT_METRICS["Health"]
        assert metrics_for_area("Подорожі") == DEFAULT_METRICS["Travel"]

    def test_unknown_title_gets_nothing(self):
        assert metrics_for_area("Woodworking") == ()


class TestSeeder:
    async def test_fresh_user_gets_full_taxonomy(self, db, owner):
        result = await Seeder(db).heal(owner)
        await db.commit()

        assert result.areas_inserted == len(DEFAULT_AREAS)
        assert result.metrics_inserted == TOTAL_DEFAULT_METRICS
        assert [a.title for a in result.areas] == [a.title for a in DEFAULT_AREAS]
        assert [a.order for a in result.areas] == list(range(1, len(DEFAULT_AREAS) + 1))
        assert await _count(db, LifeArea, owner) == len(DEFAULT_AREAS)
        assert await _count(db, MetricDefinition, owner) == TOTAL_DEFAULT_METRICS

    async def test_second_run_is_a_no_op(self, db, owner):
        first = await Seeder(db).heal(owner)
        await db.commit()

        second = await Seeder(db).heal(owner)
        await db.commit()

        assert second.areas_inserted == 0
        assert second.metrics_inserted == 0
        assert second.inserted_titles == []
        assert {a.id for a in second.areas} == {a.id for a in first.areas}
        assert await _count(db, MetricDefinition, owner) == TOTAL_DEFAULT_METRICS

    async def test_restores_only_missing_area(self, db, owner):
        first = await Seeder(db).heal(owner)
        await db.commit()
        travel = next(a for a in first.areas if a.title == "Travel")
        await db.delete(travel)
        await db.commit()

        result = await Seeder(db).heal(owner)
        await db.commit()

        assert result.inserted_titles == ["Travel"]
        assert result.metrics_inserted == len(DEFAULT_METRICS["Travel"])

    async def test_user_areas_are_kept_and_extended(self, db, owner):
        db.add(LifeArea(id="custom-1", user_id=owner, title="Woodworking", color="bg-amber-700", order=1))
        db.add(LifeArea(id="legacy-1", user_id=owner, title="Подорожі", color="bg-teal-500", order=2))
        await db.commit()

        result = await Seeder(db).heal(owner)
        await db.commit()

        titles = {a.title for a in result.areas}
        assert {"Woodworking", "Подорожі", "Travel"} <= titles
        assert result.areas_inserted == len(DEFAULT_AREAS)

        legacy_metrics = [m for m in result.metric_definitions if m.area_id == "legacy-1"]
        assert {m.name for m in legacy_metrics} == {m.name for m in DEFAULT_METRICS["Travel"]}
        assert not [m for m in result.metric_definitions if m.area_id == "custom-1"]

        new_orders = sorted(a.order for a in result.areas if a.id not in ("custom-1", "legacy-1"))
        assert new_orders[0] == 3

    async def test_duplicate_titles_each_get_default_metrics(self, db, owner):
        db.add(LifeArea(id="health-1", user_id=owner, title="Health", order=1))
        db.add(LifeArea(id="health-2", user_id=owner, title="Health", order=2))
        await db.commit()

        result = await Seeder(db).heal(owner)
        await db.commit()

        for area_id in ("health-1", "health-2"):
            names = {m.name for m in result.metric_definitions if m.area_id == area_id}
            assert names == {m.name for m in DEFAULT_METRICS["Health"]}
        assert "Health" not in result.inserted_titles

    async def test_missing_metric_is_restored(self, db, owner):
        first = await Seeder(db).heal(owner)
        await db.commit()
        weight = next(m for m in first.metric_definitions if m.name == "Weight")
        await db.delete(weight)
        await db.commit()

        result = await Seeder(db).heal(owner)
        await db.commit()

        assert result.metrics_inserted == 1
        assert "Weight" in {m.name for m in result.metric_definitions}

    async def test_user_metric_with_default_name_is_kept(self, db, owner):
        first = await Seeder(db).heal(owner)
        await db.commit()
        health = next(a for a in first.areas if a.title == "Health")
        db.add(MetricDefinition(id="mine", user_id=owner, area_id=health.id, name="Weight", unit="lb"))
        await db.commit()

        result = await Seeder(db).heal(owner)
        await db.commit()

        assert result.metrics_inserted == 0
        weights = [m for m in result.metric_definitions if m.area_id == health.id and m.name == "Weight"]
        assert len(weights) == 2
