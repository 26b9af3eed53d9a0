# api/v1/deps.py
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.metrics_calc import MetricsCalculator
from core.plan_generation import TextGenerator
from services import gemini
from services.db import get_session
from services.repository import SqlPlanStore


def get_store(db: AsyncSession = Depends(get_session)) -> SqlPlanStore:
    return SqlPlanStore(db)


def get_text_generator() -> TextGenerator:
    return gemini.generate


def get_calculator() -> MetricsCalculator:
    return MetricsCalculator(min_safe_calories=settings.min_safe_calories)
