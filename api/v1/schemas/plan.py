# api/v1/schemas/plan.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from core.models.plan import DayPlan, PlanRecord
from core.models.profile import NormalizedProfile


class GeneratePlanResponse(BaseModel):
    saved: bool
    profile: NormalizedProfile
    plan: PlanRecord | None = None
    daily_plans: list[DayPlan] | None = None
    raw_text: str


class PlanSummary(BaseModel):
    id: int | None
    plan_name: str
    overall_goal: str
    status: str
    start_date: datetime
    end_date: datetime | None = None
    estimated_duration: str
    days_completed: int
    created_at: datetime | None = None
    rating: int | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanHistoryResponse(BaseModel):
    plans: list[PlanSummary]
    page: int
    limit: int
    total: int
    pages: int


class TodayPlanResponse(BaseModel):
    plan_id: int
    plan_name: str
    day_number: int
    today: DayPlan


class PlanStatusUpdate(BaseModel):
    # bounds are checked by the core so the client gets a 400, not a 422
    status: str | None = None
    rating: int | None = None
    notes: str | None = None
