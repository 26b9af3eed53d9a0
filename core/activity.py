"""
core/activity.py
────────────────────────────────────────────────────────────────────────
Daily activity bookkeeping and the weekly progress roll-up.

Every meal slot and every logged exercise counts as one task; a day is
"completed" once at least 80 % of its tasks are done.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

import pandas as pd

from core.metrics_calc import round_half_up
from core.models.activity import ActivityEntry, ExerciseLog, MealsCompleted

_LOG = logging.getLogger(__name__)

COMPLETION_THRESHOLD = 80

_MERGEABLE = (
    "plan_id",
    "meals_completed",
    "exercises_completed",
    "water_intake",
    "sleep_hours",
    "weight",
    "calories_consumed",
    "calories_burned",
    "energy_level",
    "mood",
    "daily_notes",
    "challenges",
    "achievements",
)


def completion(
    meals: MealsCompleted, exercises: list[ExerciseLog]
) -> tuple[int, bool]:
    flags = list(meals.model_dump().values()) + [e.completed for e in exercises]
    if not flags:
        return 0, False
    pct = round_half_up(sum(flags) / len(flags) * 100)
    return pct, pct >= COMPLETION_THRESHOLD


def with_completion(entry: ActivityEntry) -> ActivityEntry:
    pct, done = completion(entry.meals_completed, entry.exercises_completed)
    return entry.model_copy(update={"completion_percentage": pct, "day_completed": done})


def merge_activity(existing: ActivityEntry, update: ActivityEntry) -> ActivityEntry:
    """Overlay `update` on `existing`; empty / zero values keep the old ones."""
    changes: dict[str, Any] = {}
    for name in _MERGEABLE:
        value = getattr(update, name)
        if name == "meals_completed":
            value = value if any(value.model_dump().values()) else None
        if value:
            changes[name] = value
    return with_completion(existing.model_copy(update=changes))


def daily_summary(entry: ActivityEntry) -> dict[str, Any]:
    return {
        "date": entry.date,
        "completion_percentage": entry.completion_percentage,
        "day_completed": entry.day_completed,
        "meals_completed": entry.meals_completed.model_dump(),
        "exercises_completed": len(entry.exercises_completed),
        "exercises_done": sum(e.completed for e in entry.exercises_completed),
        "water_intake": entry.water_intake,
        "sleep_hours": entry.sleep_hours,
        "energy_level": entry.energy_level,
        "mood": entry.mood,
        "achievements": entry.achievements,
        "challenges": entry.challenges,
    }


# ──────────────────────────────────────────────────────────────────────
#  Weekly roll-up
# ──────────────────────────────────────────────────────────────────────
def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def _empty_summary() -> dict[str, Any]:
    return {
        "total_days": 0,
        "completed_days": 0,
        "average_completion": 0,
        "total_water_intake": 0,
        "average_sleep": 0,
        "mood_distribution": {},
        "energy_levels": [],
        "weight_change": None,
    }


def weekly_summary(entries: list[ActivityEntry], week_start: date) -> dict[str, Any]:
    week_end = week_start + timedelta(days=7)
    rows = [
        e.model_dump(include={
            "date", "day_completed", "completion_percentage", "water_intake",
            "sleep_hours", "energy_level", "mood", "weight",
        })
        for e in entries
        if week_start <= e.date < week_end
    ]
    if not rows:
        return _empty_summary()

    df = pd.DataFrame(rows).sort_values("date").reset_index(drop=True)
    _LOG.debug("weekly summary over %d day(s) from %s", len(df), week_start)

    energy = df.dropna(subset=["energy_level"])
    weighed = df.dropna(subset=["weight"])
    weight_change = None
    if len(weighed) >= 1:
        weight_change = round(float(weighed["weight"].iloc[-1] - weighed["weight"].iloc[0]), 1)

    return {
        "total_days": int(len(df)),
        "completed_days": int(df["day_completed"].sum()),
        "average_completion": round_half_up(float(df["completion_percentage"].mean())),
        "total_water_intake": float(df["water_intake"].fillna(0).sum()),
        "average_sleep": round(float(df["sleep_hours"].fillna(0).mean()), 1),
        "mood_distribution": {
            str(k): int(v) for k, v in df["mood"].dropna().value_counts().items()
        },
        "energy_levels": [
            {"date": d, "level": int(lvl)}
            for d, lvl in zip(energy["date"], energy["energy_level"])
        ],
        "weight_change": weight_change,
    }


# ──────────────────────────────────────────────────────────────────────
#  Quick daily log (weight / calories / water / sleep)
# ──────────────────────────────────────────────────────────────────────
GENERAL_EXERCISE = "General Exercise"


def log_daily(
    existing: ActivityEntry | None,
    user_id: int,
    day: date,
    *,
    weight: float | None = None,
    calories_consumed: float | None = None,
    calories_burned: float | None = None,
    water_intake: float | None = None,
    sleep_hours: float | None = None,
    mood: str | None = None,
    exercise_minutes: float | None = None,
    notes: str | None = None,
    plan_id: int | None = None,
) -> ActivityEntry:
    """
    Apply a quick daily log.

    An existing entry only takes the non-empty measurements, mood and notes;
    its meals and exercises are left alone. A new entry gets one completed
    "General Exercise" when `exercise_minutes` is given.
    """
    if existing is not None:
        changes = {
            name: value
            for name, value in (
                ("weight", weight),
                ("calories_consumed", calories_consumed),
                ("calories_burned", calories_burned),
                ("water_intake", water_intake),
                ("sleep_hours", sleep_hours),
                ("mood", mood),
                ("daily_notes", notes),
            )
            if value
        }
        return with_completion(existing.model_copy(update=changes))

    exercises = []
    if exercise_minutes:
        exercises.append(
            ExerciseLog(exercise_name=GENERAL_EXERCISE, duration=exercise_minutes, completed=True)
        )
    entry = ActivityEntry(
        user_id=user_id,
        plan_id=plan_id,
        date=day,
        weight=weight,
        calories_consumed=calories_consumed,
        calories_burned=calories_burned,
        water_intake=water_intake or 0,
        sleep_hours=sleep_hours or 0,
        mood=mood or None,
        daily_notes=notes,
        exercises_completed=exercises,
    )
    return with_completion(entry)


# ──────────────────────────────────────────────────────────────────────
#  Per-user stats over the most recent entries
# ──────────────────────────────────────────────────────────────────────
STATS_WINDOW = 30
STREAK_THRESHOLD = 50


def _empty_stats() -> dict[str, Any]:
    return {
        "total_entries": 0,
        "average_weight": 0,
        "weight_progress": 0,
        "average_calories": 0,
        "average_exercise": 0,
        "average_water": 0,
        "average_sleep": 0,
        "current_streak": 0,
        "average_completion": 0,
    }


def _positive_mean(col: pd.Series) -> float:
    positive = col.dropna()
    positive = positive[positive > 0]
    return round(float(positive.mean()), 1) if len(positive) else 0


def user_stats(entries: list[ActivityEntry]) -> dict[str, Any]:
    """
    Averages, weight progress and the current streak over the newest
    `STATS_WINDOW` entries.

    Weight progress is the percentage lost from the oldest to the newest
    weighed entry (negative when weight went up). The streak counts
    consecutive newest days at or above 50 % completion.
    """
    if not entries:
        return _empty_stats()

    df = pd.DataFrame([
        {
            "date": e.date,
            "weight": e.weight,
            "calories_consumed": e.calories_consumed,
            "exercise_minutes": sum(x.duration or 0 for x in e.exercises_completed),
            "water_intake": e.water_intake,
            "sleep_hours": e.sleep_hours,
            "completion_percentage": e.completion_percentage,
        }
        for e in entries
    ])
    df = df.sort_values("date", ascending=False).head(STATS_WINDOW).reset_index(drop=True)
    _LOG.debug("user stats over %d entr(ies)", len(df))

    weights = df["weight"].dropna()
    weights = weights[weights > 0]
    progress = 0
    if len(weights) > 1:
        newest, oldest = float(weights.iloc[0]), float(weights.iloc[-1])
        progress = round((oldest - newest) / oldest * 100, 1)

    streak = 0
    for pct in df["completion_percentage"]:
        if pct < STREAK_THRESHOLD:
            break
        streak += 1

    return {
        "total_entries": int(len(df)),
        "average_weight": round(float(weights.mean()), 1) if len(weights) else 0,
        "weight_progress": progress,
        "average_calories": _positive_mean(df["calories_consumed"]),
        "average_exercise": _positive_mean(df["exercise_minutes"]),
        "average_water": _positive_mean(df["water_intake"]),
        "average_sleep": _positive_mean(df["sleep_hours"]),
        "current_streak": streak,
        "average_completion": round_half_up(float(df["completion_percentage"].mean())),
    }
