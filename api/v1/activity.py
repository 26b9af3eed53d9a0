# api/v1/activity.py
from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query, status

from core.activity import (
    STATS_WINDOW,
    daily_summary,
    log_daily,
    merge_activity,
    user_stats,
    week_start_for,
    weekly_summary,
    with_completion,
)
from core.models.activity import ActivityEntry
from services.repository import SqlPlanStore
from api.v1.deps import get_store
from api.v1.schemas import ActivityIn, DailyEntryIn, UserStatsResponse, WeeklyProgressResponse

router = APIRouter()


# ───────────────────────── track ────────────────────────────
@router.post("", response_model=ActivityEntry, status_code=status.HTTP_200_OK)
async def track_activity(
    body: ActivityIn,
    store: SqlPlanStore = Depends(get_store),
) -> ActivityEntry:
    day = body.date or date.today()
    incoming = ActivityEntry(**body.model_dump(exclude={"date"}), date=day)
    if incoming.plan_id is None:
        active = await store.get_active_plan(body.user_id)
        if active is not None:
            incoming = incoming.model_copy(update={"plan_id": active.id})

    existing = await store.find_activity(body.user_id, day)
    entry = merge_activity(existing, incoming) if existing else with_completion(incoming)
    return await store.save_activity(entry)


@router.post("/daily", response_model=ActivityEntry)
async def log_daily_entry(
    body: DailyEntryIn,
    store: SqlPlanStore = Depends(get_store),
) -> ActivityEntry:
    day = body.date or date.today()
    existing = await store.find_activity(body.user_id, day)
    plan_id = None
    if existing is None:
        active = await store.get_active_plan(body.user_id)
        plan_id = active.id if active else None
    entry = log_daily(
        existing,
        body.user_id,
        day,
        plan_id=plan_id,
        **body.model_dump(exclude={"user_id", "date"}),
    )
    return await store.save_activity(entry)


# ───────────────────────── weekly roll-up ───────────────────
@router.get("/users/{user_id}/weekly", response_model=WeeklyProgressResponse)
async def weekly_progress(
    user_id: int,
    start_date: date | None = Query(None, description="any day of the week; defaults to this week"),
    store: SqlPlanStore = Depends(get_store),
) -> WeeklyProgressResponse:
    week_start = week_start_for(start_date or date.today())
    week_end = week_start + timedelta(days=7)
    entries = await store.list_activities(user_id, week_start, week_end)
    return WeeklyProgressResponse(
        week_start=week_start,
        week_end=week_end,
        days=[daily_summary(e) for e in entries],
        summary=weekly_summary(entries, week_start),
    )


# ───────────────────────── per-user stats ───────────────────
@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def activity_stats(
    user_id: int,
    store: SqlPlanStore = Depends(get_store),
) -> UserStatsResponse:
    entries = await store.recent_activities(user_id, limit=STATS_WINDOW)
    profile = await store.get_profile(user_id)
    return UserStatsResponse.model_validate({"stats": user_stats(entries), "profile": profile})
