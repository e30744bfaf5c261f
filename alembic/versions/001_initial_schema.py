"""Initial LifeSync schema.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables (every per-user table has user_id -> users.id ON DELETE CASCADE):
  - users               aggregate root
  - life_areas
  - metric_definitions
  - metric_entries      metric_id -> metric_definitions.id CASCADE
  - goals               target_metric_id -> metric_definitions.id SET NULL
  - projects
  - actions             project_id, linked_goal_id -> SET NULL
  - habits
  - habit_logs          habit_id -> habits.id CASCADE, unique (habit_id, date)
  - notes, journal_entries, calendar_events

Notes:
  - Temporal columns are INTEGER epoch seconds.
  - Calendar days (actions.date, habit_logs.date) are 'YYYY-MM-DD' text.
  - Nested structures (sub_goals, subtasks, tags, id lists) are JSON.
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(64), primary_key=True, nullable=False)


def _owner(table: str) -> sa.Column:
    return sa.Column(
        "user_id",
        sa.String(64),
        sa.ForeignKey("users.id", ondelete="CASCADE", name=f"fk_{table}_user_id"),
        nullable=False,
        index=True,
    )


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.Integer(), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.Integer(), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("locale", sa.String(16), nullable=True),
        sa.Column("avatar", sa.String(1024), nullable=True),
        sa.Column("subscription_tier", sa.String(32), nullable=False, comment="free | pro"),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "life_areas",
        _id(),
        _owner("life_areas"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(64), nullable=False),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("order", sa.Integer(), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        "metric_definitions",
        _id(),
        _owner("metric_definitions"),
        sa.Column("area_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=True, comment="number | scale | boolean"),
        sa.Column("unit", sa.String(32), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("frequency", sa.String(32), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        "metric_entries",
        _id(),
        _owner("metric_entries"),
        sa.Column(
            "metric_id",
            sa.String(64),
            sa.ForeignKey("metric_definitions.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("date", sa.Integer(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        "goals",
        _id(),
        _owner("goals"),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("type", sa.String(32), nullable=False, comment="vision | strategic | tactical"),
        sa.Column("priority", sa.String(16), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column(
            "target_metric_id",
            sa.String(64),
            sa.ForeignKey("metric_definitions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("metric_start_value", sa.Float(), nullable=True),
        sa.Column("metric_target_value", sa.Float(), nullable=True),
        sa.Column("metric_current_value", sa.Float(), nullable=True),
        sa.Column("metric_direction", sa.String(16), nullable=True),
        sa.Column("sub_goals", sa.JSON(), nullable=True),
        sa.Column("start_date", sa.Integer(), nullable=True),
        sa.Column("deadline", sa.Integer(), nullable=True),
        sa.Column("end_date", sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "projects",
        _id(),
        _owner("projects"),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("start_date", sa.Integer(), nullable=True),
        sa.Column("deadline", sa.Integer(), nullable=True),
        sa.Column("goal_ids", sa.JSON(), nullable=True),
        sa.Column("metric_ids", sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "actions",
        _id(),
        _owner("actions"),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("priority", sa.String(16), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column(
            "project_id",
            sa.String(64),
            sa.ForeignKey("projects.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "linked_goal_id",
            sa.String(64),
            sa.ForeignKey("goals.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.String(10), nullable=True),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.Integer(), nullable=True),
        sa.Column("subtasks", sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "habits",
        _id(),
        _owner("habits"),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column("frequency", sa.String(16), nullable=True),
        sa.Column("target_days", sa.JSON(), nullable=True),
        sa.Column("time_of_day", sa.String(16), nullable=True),
        sa.Column("status", sa.String(16), nullable=True),
        sa.Column("streak", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "habit_logs",
        _id(),
        _owner("habit_logs"),
        sa.Column(
            "habit_id",
            sa.String(64),
            sa.ForeignKey("habits.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("habit_id", "date", name="uq_habit_logs_habit_date"),
    )

    op.create_table(
        "notes",
        _id(),
        _owner("notes"),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("type", sa.String(32), nullable=True),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("date", sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "journal_entries",
        _id(),
        _owner("journal_entries"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("mood", sa.Integer(), nullable=True),
        sa.Column("date", sa.Integer(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "calendar_events",
        _id(),
        _owner("calendar_events"),
        sa.Column("area_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("start", sa.Integer(), nullable=False),
        sa.Column("end", sa.Integer(), nullable=False),
        sa.Column("all_day", sa.Boolean(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "calendar_events",
        "journal_entries",
        "notes",
        "habit_logs",
        "habits",
        "actions",
        "projects",
        "goals",
        "metric_entries",
        "metric_definitions",
        "life_areas",
        "users",
    ):
        op.drop_table(table)
