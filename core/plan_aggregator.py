"""
core/plan_aggregator.py
────────────────────────────────────────────────────────────────────────
Assemble the record that gets persisted for a generated plan, and apply
the status changes a plan goes through afterwards.

A new plan is always created `active`; the store pauses whatever plan
was active before (create-then-supersede, no versioning).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from core.errors import InvalidInput
from core.guidelines import HEALTH_GUIDELINES, SAFETY_NOTES
from core.metrics_calc import compute_bmi
from core.models.plan import PLAN_STATUSES, DayPlan, PlanNote, PlanRecord, ProgressMetric
from core.models.profile import NormalizedProfile


def _fmt(value: float | int | None) -> str:
    if value is None:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def progress_metrics(profile: NormalizedProfile, bmi: float) -> list[ProgressMetric]:
    return [
        ProgressMetric(metric_name="Weight", target_value=_fmt(profile.current_weight), unit="kg"),
        ProgressMetric(metric_name="BMI", target_value=_fmt(bmi), unit="kg/m²"),
        ProgressMetric(
            metric_name="Weekly Exercise Sessions",
            target_value=_fmt(profile.workout_days),
            unit="sessions",
        ),
    ]


def build_plan_record(
    profile: NormalizedProfile,
    week_plan: list[DayPlan],
    raw_model_output: str,
    prompt: str,
    generated_at: datetime | None = None,
) -> PlanRecord:
    bmi = compute_bmi(profile.current_weight, profile.current_height)
    return PlanRecord(
        user_id=profile.id,
        plan_name=f"{profile.full_name or 'Personal'}'s Health Plan",
        daily_plans=week_plan,
        generated_prompt=prompt,
        raw_ai_response=raw_model_output,
        overall_goal=profile.goal,
        target_weight=profile.current_weight,
        estimated_duration=profile.plan_duration,
        progress_metrics=progress_metrics(profile, bmi),
        health_guidelines=list(HEALTH_GUIDELINES),
        safety_notes=list(SAFETY_NOTES) if profile.has_conditions else [],
        status="active",
        start_date=generated_at or datetime.now(timezone.utc),
    )


# ──────────────────────────────────────────────────────────────────────
#  Lifecycle
# ──────────────────────────────────────────────────────────────────────
def apply_status_update(
    plan: PlanRecord,
    status: str | None = None,
    rating: int | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> PlanRecord:
    """Return a copy of `plan` with the requested changes applied."""
    if status and status not in PLAN_STATUSES:
        raise InvalidInput(f"status must be one of: {', '.join(PLAN_STATUSES)}")
    if rating is not None and not 1 <= rating <= 5:
        raise InvalidInput("rating must be between 1 and 5")

    now = now or datetime.now(timezone.utc)
    update: dict[str, Any] = {}
    if status:
        update["status"] = status
        if status == "completed":
            update["end_date"] = now
    if rating:
        update["rating"] = rating
    if notes:
        update["user_notes"] = [*plan.user_notes, PlanNote(date=now, note=notes)]
    return plan.model_copy(update=update)


def plan_summary(plan: PlanRecord) -> dict[str, Any]:
    return {
        "id": plan.id,
        "plan_name": plan.plan_name,
        "overall_goal": plan.overall_goal,
        "status": plan.status,
        "start_date": plan.start_date,
        "end_date": plan.end_date,
        "estimated_duration": plan.estimated_duration,
        "days_completed": len(plan.daily_plans),
        "created_at": plan.created_at,
        "rating": plan.rating,
    }
