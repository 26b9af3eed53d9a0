from __future__ import annotations

from datetime import date as Date
from typing import Any

from pydantic import BaseModel, Field

from core.models.activity import ExerciseLog, MealsCompleted, Mood
from core.models.profile import NormalizedProfile


class ActivityIn(BaseModel):
    user_id: int
    plan_id: int | None = None
    date: Date | None = None         # defaults to today
    meals_completed: MealsCompleted = Field(default_factory=MealsCompleted)
    exercises_completed: list[ExerciseLog] = []
    water_intake: float = 0
    sleep_hours: float = 0
    weight: float | None = None
    calories_consumed: float | None = None
    calories_burned: float | None = None
    energy_level: int | None = Field(None, ge=1, le=10)
    mood: Mood | None = None
    daily_notes: str | None = None
    challenges: list[str] = []
    achievements: list[str] = []


class WeeklySummary(BaseModel):
    total_days: int
    completed_days: int
    average_completion: int
    total_water_intake: float
    average_sleep: float
    mood_distribution: dict[str, int]
    energy_levels: list[dict[str, Any]]
    weight_change: float | None = None


class WeeklyProgressResponse(BaseModel):
    week_start: Date
    week_end: Date
    days: list[dict[str, Any]]
    summary: WeeklySummary


class DailyEntryIn(BaseModel):
    user_id: int
    date: Date | None = None         # defaults to today
    weight: float | None = Field(None, ge=0)
    calories_consumed: float | None = Field(None, ge=0)
    calories_burned: float | None = Field(None, ge=0)
    water_intake: float | None = Field(None, ge=0)
    sleep_hours: float | None = Field(None, ge=0, le=24)
    mood: Mood | None = None
    exercise_minutes: float | None = Field(None, ge=0)
    notes: str | None = None


class UserStats(BaseModel):
    total_entries: int
    average_weight: float
    weight_progress: float
    average_calories: float
    average_exercise: float
    average_water: float
    average_sleep: float
    current_streak: int
    average_completion: int


class UserStatsResponse(BaseModel):
    stats: UserStats
    profile: NormalizedProfile | None = None
