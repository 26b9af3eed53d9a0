from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PlanStatus = Literal["active", "completed", "paused", "cancelled"]
PLAN_STATUSES: tuple[str, ...] = ("active", "completed", "paused", "cancelled")


class MealSlots(BaseModel):
    breakfast: list[str] = []
    lunch: list[str] = []
    dinner: list[str] = []
    snacks: list[str] = []


class DayPlan(BaseModel):
    day: int = Field(..., ge=1, le=7)
    date: datetime
    food: MealSlots = Field(default_factory=MealSlots)
    exercise: list[str] = []
    daily_tips: list[str] = []
    water_intake_goal: int = 8   # glasses
    sleep_goal: int = 8          # hours


class ProgressMetric(BaseModel):
    metric_name: str
    target_value: str
    current_value: str = "0"
    unit: str


class PlanNote(BaseModel):
    date: datetime
    note: str


class PlanRecord(BaseModel):
    id: int | None = None
    user_id: int | None = None
    plan_name: str = "Personal Health Plan"
    daily_plans: list[DayPlan]
    generated_prompt: str
    raw_ai_response: str
    overall_goal: str
    target_weight: float | None = None
    estimated_duration: str
    progress_metrics: list[ProgressMetric] = []
    health_guidelines: list[str] = []
    safety_notes: list[str] = []
    status: PlanStatus = "active"
    start_date: datetime
    end_date: datetime | None = None
    user_notes: list[PlanNote] = []
    rating: int | None = Field(None, ge=1, le=5)
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
