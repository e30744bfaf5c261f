"""Baseline taxonomy: default life areas and the metrics each one starts with.

Titles are the natural key. ``LEGACY_AREA_TITLES`` maps older or localized
area titles to the catalog title so accounts created before a rename still
get their default metrics.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AreaTemplate:
    title: str
    description: str
    color: str
    icon: str


@dataclass(frozen=True)
class MetricTemplate:
    name: str
    type: str  # number | scale
    unit: str
    description: str
    frequency: str


DEFAULT_AREAS: tuple[AreaTemplate, ...] = (
    AreaTemplate("Health", "Physical and mental health", "bg-emerald-500", "Activity"),
    AreaTemplate("Finance", "Financial security and growth", "bg-blue-500", "DollarSign"),
    AreaTemplate("Career", "Professional development", "bg-purple-500", "Briefcase"),
    AreaTemplate("Personal", "Personal growth and hobbies", "bg-orange-500", "User"),
    AreaTemplate("Relationships", "Family, friends and partners", "bg-rose-500", "Heart"),
    AreaTemplate("Learning", "Education and skills", "bg-yellow-500", "BookOpen"),
    AreaTemplate("Projects", "Work and creative projects", "bg-indigo-500", "Folder"),
    AreaTemplate("Travel", "Trips and discoveries", "bg-teal-500", "Globe"),
)

_SCALE = "1-10"

DEFAULT_METRICS: dict[str, tuple[MetricTemplate, ...]] = {
    "Health": (
        MetricTemplate("Weight", "number", "kg", "Body weight, tracked for change", "weekly"),
        MetricTemplate("Sleep duration", "number", "h", "Average hours of sleep", "daily"),
        MetricTemplate("Energy level", "scale", _SCALE, "Subjective sense of energy", "daily"),
        MetricTemplate("Stress level", "scale", _SCALE, "Subjective sense of tension", "daily"),
        MetricTemplate("Physical activity", "number", "min", "Time spent moving or training", "daily"),
    ),
    "Finance": (
        MetricTemplate("Current balance", "number", "$", "Total across all accounts", "weekly"),
        MetricTemplate("Income for period", "number", "$", "All incoming money", "monthly"),
        MetricTemplate("Expenses for period", "number", "$", "All spending", "monthly"),
        MetricTemplate("Savings", "number", "$", "Money set aside", "monthly"),
        MetricTemplate("Debt", "number", "$", "Outstanding obligations", "monthly"),
    ),
    "Career": (
        MetricTemplate("Working hours", "number", "h", "Productive time", "daily"),
        MetricTemplate("Sense of progress", "scale", _SCALE, "Feeling of moving forward", "weekly"),
        MetricTemplate("Workload", "scale", _SCALE, "Subjective load", "weekly"),
        MetricTemplate("Focus on priorities", "scale", _SCALE, "Keeping the main thing first", "daily"),
    ),
    "Personal": (
        MetricTemplate("Overall satisfaction", "scale", _SCALE, "Satisfaction with life", "weekly"),
        MetricTemplate("Recovery", "scale", _SCALE, "Quality of rest", "weekly"),
        MetricTemplate("Emotional state", "scale", _SCALE, "Prevailing mood", "daily"),
    ),
    "Relationships": (
        MetricTemplate("Quality of interaction", "scale", _SCALE, "Depth and positivity", "weekly"),
        MetricTemplate("Communication", "scale", _SCALE, "Ease of talking", "weekly"),
        MetricTemplate("Emotional closeness", "scale", _SCALE, "Sense of connection", "monthly"),
    ),
    "Learning": (
        MetricTemplate("Study time", "number", "h", "Net time spent learning", "weekly"),
        MetricTemplate("Understanding", "scale", _SCALE, "How well material sticks", "monthly"),
        MetricTemplate("Learning focus", "scale", _SCALE, "Concentration while studying", "weekly"),
    ),
    "Projects": (
        MetricTemplate("Active projects", "number", "count", "Projects in progress", "weekly"),
        MetricTemplate("Project progress", "scale", _SCALE, "Overall movement to completion", "weekly"),
        MetricTemplate("Engagement", "scale", _SCALE, "Interest and motivation", "weekly"),
    ),
    "Travel": (
        MetricTemplate("Trips in period", "number", "count", "Number of trips", "monthly"),
        MetricTemplate("Impressions", "scale", _SCALE, "Vividness of the experience", "per_trip"),
        MetricTemplate("New experiences", "scale", _SCALE, "How new it felt", "per_trip"),
    ),
}

LEGACY_AREA_TITLES: dict[str, str] = {
    "Body & Energy": "Health",
    "Career & Business": "Career",
    "Family & Relations": "Relationships",
    "Growth & Learning": "Learning",
    "Project": "Projects",
    "Здоровʼя": "Health",
    "Фінанси": "Finance",
    "Карʼєра": "Career",
    "Особисте": "Personal",
    "Відносини": "Relationships",
    "Навчання": "Learning",
    "Проекти": "Projects",
    "Проєкти": "Projects",
    "Подорожі": "Travel",
}


def metrics_for_area(title: str) -> tuple[MetricTemplate, ...]:
    """Default metrics for an area title; unknown titles get none."""
    canonical = LEGACY_AREA_TITLES.get(title, title)
    return DEFAULT_METRICS.get(canonical, ())
