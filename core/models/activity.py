from __future__ import annotations

from datetime import date as Date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Mood = Literal["excellent", "good", "average", "poor", "very_poor"]


class MealsCompleted(BaseModel):
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False
    snacks: bool = False


class ExerciseLog(BaseModel):
    exercise_name: str
    duration: float | None = None   # minutes
    completed: bool = False
    notes: str | None = None


class ActivityEntry(BaseModel):
    id: int | None = None
    user_id: int
    plan_id: int | None = None
    date: Date
    meals_completed: MealsCompleted = Field(default_factory=MealsCompleted)
    exercises_completed: list[ExerciseLog] = []
    water_intake: float = 0         # glasses
    sleep_hours: float = 0
    weight: float | None = None
    calories_consumed: float | None = None
    calories_burned: float | None = None
    energy_level: int | None = Field(None, ge=1, le=10)
    mood: Mood | None = None
    daily_notes: str | None = None
    challenges: list[str] = []
    achievements: list[str] = []
    completion_percentage: int = 0
    day_completed: bool = False

    model_config = ConfigDict(from_attributes=True)
