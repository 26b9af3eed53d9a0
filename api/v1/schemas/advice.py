from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NutritionAdviceRequest(BaseModel):
    question: str
    user_goal: str | None = None
    dietary_restrictions: str | None = None


class WorkoutRoutineRequest(BaseModel):
    fitness_level: str
    available_time: str
    equipment: str | None = None
    goals: str


class AdviceResponse(BaseModel):
    text: str
    timestamp: datetime


class ChatRequest(BaseModel):
    message: str = ""
