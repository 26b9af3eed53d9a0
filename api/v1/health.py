from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from core.guidelines import tips_for
from core.metrics_calc import MetricsCalculator, classify_bmi, compute_bmi
from core.stats import platform_stats
from services.repository import SqlPlanStore
from api.v1.deps import get_calculator, get_store
from api.v1.schemas import (
    BmiRequest,
    BmiResponse,
    CaloriesRequest,
    CaloriesResponse,
    MacrosOut,
    PlatformStatsResponse,
    TipsResponse,
)

router = APIRouter()


@router.post("/calculate-bmi", response_model=BmiResponse, status_code=status.HTTP_200_OK)
async def calculate_bmi(body: BmiRequest) -> BmiResponse:
    bmi = compute_bmi(body.weight, body.height)
    band = classify_bmi(bmi)
    return BmiResponse(
        bmi=bmi,
        category=band.name,
        health_risk=band.health_risk,
        recommendation=band.recommendation,
    )


@router.post("/calculate-calories", response_model=CaloriesResponse)
async def calculate_calories(
    body: CaloriesRequest,
    calc: MetricsCalculator = Depends(get_calculator),
) -> CaloriesResponse:
    res = calc.summarize(body.weight, body.height, body.age, body.gender, body.activity_level)
    return CaloriesResponse(
        bmi=res.bmi,
        bmi_category=res.bmi_category,
        bmr=res.bmr,
        maintenance_calories=res.maintenance_calories,
        weight_loss_calories=res.weight_loss_calories,
        weight_gain_calories=res.weight_gain_calories,
        macros=MacrosOut(
            carbs=res.macro_grams.carbs,
            protein=res.macro_grams.protein,
            fat=res.macro_grams.fat,
        ),
        activity_level=res.activity_level,
    )


@router.get("/tips/{category}", response_model=TipsResponse)
async def tips(category: str) -> TipsResponse:
    tip, all_tips = tips_for(category)
    return TipsResponse(category=category.lower(), tip=tip, all_tips=all_tips)


@router.get("/stats", response_model=PlatformStatsResponse)
async def stats(store: SqlPlanStore = Depends(get_store)) -> PlatformStatsResponse:
    now = datetime.now(timezone.utc)
    counts = await store.platform_counts(now)
    return PlatformStatsResponse.model_validate({"stats": platform_stats(counts), "timestamp": now})
