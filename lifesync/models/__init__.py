"""ORM models package.

Import all models here so that SQLAlchemy's metadata is fully populated
when Alembic runs autogenerate. The user root comes first because every
other table references it.
"""

from lifesync.models.user import User
from lifesync.models.life_area import LifeArea
from lifesync.models.metric import MetricDefinition, MetricEntry
from lifesync.models.goal import Goal
from lifesync.models.project import Project
from lifesync.models.action import Action
from lifesync.models.habit import Habit, HabitLog
from lifesync.models.content import CalendarEvent, JournalEntry, Note

__all__ = [
    "User",
    "LifeArea",
    "MetricDefinition",
    "MetricEntry",
    "Goal",
    "Project",
    "Action",
    "Habit",
    "HabitLog",
    "Note",
    "JournalEntry",
    "CalendarEvent",
]
