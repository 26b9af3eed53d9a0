from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class BmiRequest(BaseModel):
    weight: float = Field(..., description="kg")
    height: float = Field(..., description="cm")


class BmiResponse(BaseModel):
    bmi: float
    category: str
    health_risk: str
    recommendation: str


class CaloriesRequest(BaseModel):
    weight: float
    height: float
    age: int
    gender: str = Field(..., description="male or female")
    activity_level: str = "sedentary"


class MacrosOut(BaseModel):
    carbs: int
    protein: int
    fat: int


class CaloriesResponse(BaseModel):
    bmi: float
    bmi_category: str
    bmr: int
    maintenance_calories: int
    weight_loss_calories: int
    weight_gain_calories: int
    macros: MacrosOut
    activity_level: str


class TipsResponse(BaseModel):
    category: str
    tip: str
    all_tips: list[str]


class UserCounts(BaseModel):
    total: int
    active: int
    activity_rate: int


class PlanCounts(BaseModel):
    total: int
    active: int
    completed: int
    completion_rate: int


class BmiStats(BaseModel):
    average_bmi: float | None
    bmi_sample_size: int


class GoalCount(BaseModel):
    goal: str
    count: int


class PlatformStats(BaseModel):
    users: UserCounts
    plans: PlanCounts
    health: BmiStats
    popular_goals: list[GoalCount]
    recent_activity: int


class PlatformStatsResponse(BaseModel):
    stats: PlatformStats
    timestamp: datetime
