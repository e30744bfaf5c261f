#!/usr/bin/env python3
"""Seed a development database with one user and sample data.

Creates (through the same code paths the sync endpoint uses):
  - a user row (or reuses it) and the default life areas + metrics
  - a metric-linked goal with a few metric entries
  - a daily habit with the last few days logged
  - prints a session token for the user

Idempotent: ids are fixed, so re-running upserts the same rows.

Usage:
    # From project root
    python scripts/seed.py [user-id]
"""

from __future__ import annotations

import asyncio
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Make "lifesync.*" importable when run as "python scripts/seed.py"
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

DEFAULT_USER_ID = "dev-user-0001"


async def seed(user_id: str) -> None:
    from lifesync.auth.tokens import create_session_token
    from lifesync.config import get_settings
    from lifesync.database import close_db, create_all, get_session_factory, init_db
    from lifesync.services.sync_service import SyncService
    from lifesync.sync.commands import Command, CommandType
    from lifesync.telemetry.logging import configure_logging

    settings = get_settings()
    configure_logging(json_logs=False, log_level="INFO")
    init_db(settings)
    await create_all()

    async with get_session_factory()() as session:
        service = SyncService(session, settings=settings)
        snapshot = await service.fetch_all_and_heal(user_id)

        health = next(a for a in snapshot["areas"] if a["title"] == "Health")
        weight = next(
            m
            for m in snapshot["metricDefinitions"]
            if m["areaId"] == health["id"] and m["name"] == "Weight"
        )

        today = datetime.now(UTC).replace(hour=8, minute=0, second=0, microsecond=0)
        commands = [
            Command(
                CommandType.ADD_GOAL,
                {
                    "id": "seed-goal-weight",
                    "areaId": health["id"],
                    "title": "Reach 70 kg",
                    "type": "strategic",
                    "status": "active",
                    "targetMetricId": weight["id"],
                    "metricStartValue": 80,
                    "metricTargetValue": 70,
                    "metricDirection": "decrease",
                    "progress": 0,
                },
            ),
            Command(
                CommandType.ADD_HABIT,
                {"id": "seed-habit-walk", "areaId": health["id"], "title": "Walk 30 minutes"},
            ),
        ]
        for weeks_ago, value in ((3, 80.0), (2, 78.5), (1, 77.0)):
            commands.append(
                Command(
                    CommandType.ADD_METRIC_ENTRY,
                    {
                        "id": f"seed-weight-{weeks_ago}",
                        "metricId": weight["id"],
                        "value": value,
                        "date": (today - timedelta(weeks=weeks_ago)).isoformat(),
                    },
                )
            )
        for days_ago in range(1, 4):
            day = (today - timedelta(days=days_ago)).date().isoformat()
            commands.append(
                Command(
                    CommandType.LOG_HABIT,
                    {
                        "id": f"seed-walk-{day}",
                        "habitId": "seed-habit-walk",
                        "date": day,
                        "completed": True,
                    },
                )
            )

        for command in commands:
            await service.apply_command(user_id, command)

    await close_db()

    token = create_session_token(user_id, settings=settings, expires_in=7 * 24 * 3600)
    print(f"\nSeeded user {user_id}")
    print(f"  areas:   {len(snapshot['areas'])}")
    print(f"  metrics: {len(snapshot['metricDefinitions'])}")
    print(f"\nSession token (7 days):\n  {token}\n")


if __name__ == "__main__":
    asyncio.run(seed(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_USER_ID))
