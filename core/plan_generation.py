"""
core/plan_generation.py
────────────────────────────────────────────────────────────────────────
End-to-end "generate my plan" flow:

  form → normalize_profile → upsert profile → BMI check → prompt
       → Gemini → parse + normalize_to_week → build_plan_record
       → pause previous active plan → save new plan

The text generator and the store are injected so the flow can run against
fakes in tests and against Gemini + SQLAlchemy in the API.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from core.field_normalizer import normalize_profile
from core.metrics_calc import compute_bmi
from core.models.plan import DayPlan, PlanRecord
from core.models.profile import NormalizedProfile, ProfileInput
from core.plan_aggregator import build_plan_record
from core.plan_normalizer import normalize_to_week, parse_generated_plan

_LOG = logging.getLogger(__name__)

TextGenerator = Callable[[str], str]


class PlanStore(Protocol):
    async def find_profile(self, email: str) -> NormalizedProfile | None: ...

    async def save_profile(self, profile: NormalizedProfile) -> NormalizedProfile: ...

    async def deactivate_active_plans(self, user_id: int) -> int: ...

    async def save_plan(self, record: PlanRecord) -> PlanRecord: ...

    async def set_active_plan(self, user_id: int, plan_id: int) -> None: ...

    async def record_generation_failure(
        self,
        user_id: int,
        stage: str,
        error: str,
        raw_input: str = "",
        raw_output: str = "",
    ) -> None: ...


@dataclass
class PlanGenerationResult:
    raw_text: str
    prompt: str
    profile: NormalizedProfile
    week: list[DayPlan] | None
    saved_plan: PlanRecord | None = None


# ──────────────────────────────────────────────────────────────────────
#  Prompt
# ──────────────────────────────────────────────────────────────────────
def _csv(items: list[str]) -> str:
    return ", ".join(items) or "None"


def build_prompt(p: NormalizedProfile, bmi: float) -> str:
    return f"""Create a comprehensive personalized health and fitness plan for {p.full_name or 'the user'}.

User Profile:
- Gender: {p.gender}
- Weight: {p.current_weight}kg
- Height: {p.current_height}cm
- BMI: {bmi}
- Age: {p.age if p.age is not None else 'Not provided'}
- Activity Level: {p.activity_level}

Primary Goal: {p.goal}
Exercise Frequency: {p.exercise_frequency}
Diet Preference: {p.diet_preference}
Preferred Meals Per Day: {p.meals_per_day}
Plan Duration: {p.plan_duration}

Nutrition Preferences:
- Favorite Nutrition Type: {p.fav_nutrition_type or 'Not specified'}
- Food Allergies: {_csv(p.food_allergies)}
- Nutrition Days per Week: {p.nutrition_days}
- Number of Meals: {p.meals_num}

Exercise Preferences:
- Favorite Workout Type: {p.fav_workout or 'Not specified'}
- Workout Goal: {p.workout_goal or 'Not specified'}
- Workout Days per Week: {p.workout_days}

Health Considerations:
- Health Conditions: {_csv(p.health_conditions)}
- Chronic Conditions: {_csv(p.chronic_conditions)}

Create a detailed 7-day plan with a day-by-day exercise schedule and meal plan
that respects the allergies, preferences and health conditions above.

IMPORTANT: Create exactly 7 days of content. Return the response as a JSON array with 7 objects. Each object should have this structure:
{{
  "food": {{
    "breakfast": ["meal item 1", "meal item 2"],
    "lunch": ["meal item 1", "meal item 2"],
    "dinner": ["meal item 1", "meal item 2"],
    "snacks": ["snack 1"]
  }},
  "exercise": ["exercise 1", "exercise 2", "exercise 3"]
}}

Return ONLY the JSON array, no other text or formatting."""


# ──────────────────────────────────────────────────────────────────────
#  Pipeline
# ──────────────────────────────────────────────────────────────────────
class HealthPlanGenerator:
    def __init__(self, generate: TextGenerator, store: PlanStore | None = None) -> None:
        self._generate = generate
        self._store = store

    async def _upsert_profile(self, raw: ProfileInput) -> tuple[NormalizedProfile, float]:
        existing = None
        if self._store and raw.email:
            existing = await self._store.find_profile(raw.email.strip().lower())
        profile = normalize_profile(raw, existing)
        # unrealistic measurements are rejected before anything is stored
        bmi = compute_bmi(profile.current_weight, profile.current_height)
        if self._store and profile.email:
            profile = await self._store.save_profile(profile)
            _LOG.info(
                "%s profile %s", "updated" if existing else "created", profile.id
            )
        return profile, bmi

    async def run(
        self,
        raw: ProfileInput | dict[str, Any],
        now: datetime | None = None,
    ) -> PlanGenerationResult:
        if isinstance(raw, dict):
            raw = ProfileInput.model_validate(raw)
        now = now or datetime.now(timezone.utc)

        profile, bmi = await self._upsert_profile(raw)
        prompt = build_prompt(profile, bmi)

        # SDK call is blocking
        text = await asyncio.to_thread(self._generate, prompt)

        week = normalize_to_week(parse_generated_plan(text), generated_at=now)
        result = PlanGenerationResult(raw_text=text, prompt=prompt, profile=profile, week=week)

        if self._store is None or profile.id is None:
            return result

        if week is None:
            _LOG.warning("no usable plan for profile %s – nothing saved", profile.id)
            await self._store.record_generation_failure(
                profile.id,
                stage="parse",
                error="generator output is not a day-plan array",
                raw_input=prompt,
                raw_output=text,
            )
            return result

        record = build_plan_record(profile, week, text, prompt, generated_at=now)
        paused = await self._store.deactivate_active_plans(profile.id)
        if paused:
            _LOG.info("paused %d previous plan(s) for profile %s", paused, profile.id)
        saved = await self._store.save_plan(record)
        await self._store.set_active_plan(profile.id, saved.id)
        result.saved_plan = saved
        result.profile = profile.model_copy(update={"active_plan_id": saved.id})
        _LOG.info("saved plan %s for profile %s", saved.id, profile.id)
        return result
