# api/v1/plans.py
from __future__ import annotations

import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.models.plan import PlanRecord
from core.models.profile import ProfileInput
from core.plan_aggregator import apply_status_update, plan_summary
from core.plan_generation import HealthPlanGenerator, TextGenerator
from core.plan_normalizer import plan_day_for
from services.repository import SqlPlanStore
from api.v1.deps import get_store, get_text_generator
from api.v1.schemas import (
    GeneratePlanResponse,
    PlanHistoryResponse,
    PlanStatusUpdate,
    PlanSummary,
    TodayPlanResponse,
)

_LOG = logging.getLogger(__name__)

router = APIRouter()


# ───────────────────────── generate ─────────────────────────
@router.post("/generate", response_model=GeneratePlanResponse, status_code=status.HTTP_200_OK)
async def generate_plan(
    body: ProfileInput,
    store: SqlPlanStore = Depends(get_store),
    generate: TextGenerator = Depends(get_text_generator),
) -> GeneratePlanResponse:
    result = await HealthPlanGenerator(generate, store).run(body)
    if result.saved_plan is None:
        _LOG.warning("plan for %s not saved, returning raw model output", result.profile.email)
    return GeneratePlanResponse(
        saved=result.saved_plan is not None,
        profile=result.profile,
        plan=result.saved_plan,
        daily_plans=result.week,
        raw_text=result.raw_text,
    )


# ───────────────────────── read ─────────────────────────────
@router.get("/users/{user_id}/active", response_model=PlanRecord)
async def active_plan(
    user_id: int,
    store: SqlPlanStore = Depends(get_store),
) -> PlanRecord:
    plan = await store.get_active_plan(user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="No active plan found")
    return plan


@router.get("/users/{user_id}/today", response_model=TodayPlanResponse)
async def todays_plan(
    user_id: int,
    store: SqlPlanStore = Depends(get_store),
) -> TodayPlanResponse:
    plan = await store.get_active_plan(user_id)
    if plan is None or not plan.daily_plans:
        raise HTTPException(status_code=404, detail="No active plan found")
    day = plan_day_for(plan.start_date)
    today = next((d for d in plan.daily_plans if d.day == day), plan.daily_plans[0])
    return TodayPlanResponse(plan_id=plan.id, plan_name=plan.plan_name, day_number=day, today=today)


@router.get("/users/{user_id}/history", response_model=PlanHistoryResponse)
async def plan_history(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    store: SqlPlanStore = Depends(get_store),
) -> PlanHistoryResponse:
    plans = await store.list_plans(user_id, offset=(page - 1) * limit, limit=limit)
    total = await store.count_plans(user_id)
    return PlanHistoryResponse(
        plans=[PlanSummary(**plan_summary(p)) for p in plans],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit),
    )


# ───────────────────────── lifecycle ────────────────────────
@router.patch("/{plan_id}/status", response_model=PlanRecord)
async def update_status(
    plan_id: int,
    body: PlanStatusUpdate,
    store: SqlPlanStore = Depends(get_store),
) -> PlanRecord:
    plan = await store.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    updated = apply_status_update(plan, body.status, body.rating, body.notes)
    return await store.update_plan(updated)
