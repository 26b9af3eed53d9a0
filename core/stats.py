"""
core/stats.py
────────────────────────────────────────────────────────────────────────
Platform-wide numbers for `GET /health/stats`.

The store does the counting (`platform_counts()`), this module turns the
raw counts into rates and rounded averages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.metrics_calc import round_half_up

ACTIVE_USER_DAYS = 30
RECENT_ACTIVITY_DAYS = 7
TOP_GOALS = 5


@dataclass(frozen=True)
class PlatformCounts:
    total_users: int = 0
    active_users: int = 0
    total_plans: int = 0
    active_plans: int = 0
    completed_plans: int = 0
    average_bmi: float | None = None
    bmi_sample_size: int = 0
    goal_counts: list[tuple[str, int]] = field(default_factory=list)
    recent_activity: int = 0


def _rate(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole > 0 else 0


def platform_stats(counts: PlatformCounts) -> dict[str, Any]:
    goals = sorted(counts.goal_counts, key=lambda gc: gc[1], reverse=True)[:TOP_GOALS]
    return {
        "users": {
            "total": counts.total_users,
            "active": counts.active_users,
            "activity_rate": _rate(counts.active_users, counts.total_users),
        },
        "plans": {
            "total": counts.total_plans,
            "active": counts.active_plans,
            "completed": counts.completed_plans,
            "completion_rate": _rate(counts.completed_plans, counts.total_plans),
        },
        "health": {
            "average_bmi": (
                round(counts.average_bmi, 1)
                if counts.average_bmi is not None and counts.bmi_sample_size
                else None
            ),
            "bmi_sample_size": counts.bmi_sample_size,
        },
        "popular_goals": [{"goal": g, "count": n} for g, n in goals],
        "recent_activity": counts.recent_activity,
    }
