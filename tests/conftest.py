# tests/conftest.py
from __future__ import annotations

import json
from datetime import date

import pytest
from fastapi.testclient import TestClient

from core.errors import InvalidInput
from core.metrics_calc import compute_bmi
from core.models.activity import ActivityEntry
from core.models.plan import PlanRecord
from core.models.profile import NormalizedProfile
from core.stats import PlatformCounts


class MemoryStore:
    """Dict-backed stand-in for SqlPlanStore (same async surface, no DB)."""

    def __init__(self) -> None:
        self.profiles: dict[int, NormalizedProfile] = {}
        self.plans: dict[int, PlanRecord] = {}
        self.activities: dict[int, ActivityEntry] = {}
        self.failures: list[dict] = []

    # profiles
    async def find_profile(self, email):
        return next((p for p in self.profiles.values() if p.email == email.lower()), None)

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)

    async def save_profile(self, profile):
        pid = profile.id or len(self.profiles) + 1
        saved = profile.model_copy(update={"id": pid})
        self.profiles[pid] = saved
        return saved

    # plans
    async def deactivate_active_plans(self, user_id):
        n = 0
        for pid, plan in self.plans.items():
            if plan.user_id == user_id and plan.status == "active":
                self.plans[pid] = plan.model_copy(update={"status": "paused"})
                n += 1
        return n

    async def save_plan(self, record):
        pid = len(self.plans) + 1
        saved = record.model_copy(update={"id": pid, "created_at": record.start_date})
        self.plans[pid] = saved
        return saved

    async def update_plan(self, record):
        self.plans[record.id] = record
        return record

    async def set_active_plan(self, user_id, plan_id):
        p = self.profiles[user_id]
        self.profiles[user_id] = p.model_copy(update={"active_plan_id": plan_id})

    async def get_plan(self, plan_id):
        return self.plans.get(plan_id)

    async def get_active_plan(self, user_id):
        active = [p for p in self.plans.values() if p.user_id == user_id and p.status == "active"]
        return max(active, key=lambda p: p.id) if active else None

    async def list_plans(self, user_id, offset=0, limit=10):
        mine = sorted(
            (p for p in self.plans.values() if p.user_id == user_id),
            key=lambda p: p.id,
            reverse=True,
        )
        return mine[offset:offset + limit]

    async def count_plans(self, user_id, status=None):
        return sum(
            1 for p in self.plans.values()
            if p.user_id == user_id and (status is None or p.status == status)
        )

    async def record_generation_failure(self, user_id, stage, error, raw_input="", raw_output=""):
        self.failures.append(
            {"user_id": user_id, "stage": stage, "error": error, "raw_output": raw_output}
        )

    # activity
    async def find_activity(self, user_id, day):
        return next(
            (a for a in self.activities.values() if a.user_id == user_id and a.date == day),
            None,
        )

    async def save_activity(self, entry):
        aid = entry.id or len(self.activities) + 1
        saved = entry.model_copy(update={"id": aid})
        self.activities[aid] = saved
        return saved

    async def list_activities(self, user_id, start, end):
        return sorted(
            (a for a in self.activities.values() if a.user_id == user_id and start <= a.date < end),
            key=lambda a: a.date,
        )

    async def recent_activities(self, user_id, limit=30):
        mine = [a for a in self.activities.values() if a.user_id == user_id]
        return sorted(mine, key=lambda a: a.date, reverse=True)[:limit]

    # platform stats; every stored profile counts as recently active
    async def platform_counts(self, now=None):
        bmis = []
        for p in self.profiles.values():
            try:
                bmis.append(compute_bmi(p.current_weight, p.current_height))
            except InvalidInput:
                pass
        goals: dict[str, int] = {}
        for p in self.profiles.values():
            goals[p.goal] = goals.get(p.goal, 0) + 1
        statuses = [p.status for p in self.plans.values()]
        return PlatformCounts(
            total_users=len(self.profiles),
            active_users=len(self.profiles),
            total_plans=len(statuses),
            active_plans=statuses.count("active"),
            completed_plans=statuses.count("completed"),
            average_bmi=sum(bmis) / len(bmis) if bmis else None,
            bmi_sample_size=len(bmis),
            goal_counts=sorted(goals.items(), key=lambda gc: gc[1], reverse=True)[:5],
            recent_activity=len(self.activities),
        )


THREE_DAYS = [
    {"food": {"breakfast": ["oats"], "lunch": ["salad"], "dinner": ["fish"], "snacks": ["apple"]},
     "exercise": ["walk 30 min"]},
    {"food": {"breakfast": ["eggs"], "lunch": ["wrap"], "dinner": ["tofu"]},
     "exercise": ["yoga"]},
    {"food": {"breakfast": ["yogurt"], "dinner": ["chicken"]},
     "exercise": ["swim", "stretch"]},
]


def fake_generator(days=THREE_DAYS):
    calls: list[str] = []

    def generate(prompt: str) -> str:
        calls.append(prompt)
        return "```json\n" + json.dumps(days) + "\n```"

    generate.calls = calls  # type: ignore[attr-defined]
    return generate


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def profile_form() -> dict:
    return {
        "full_name": "Sam Lee",
        "email": "Sam@Example.com",
        "age": "30 years",
        "gender": "male",
        "current_weight": "70",
        "current_height": 175,
        "activity_level": "moderately active",
        "food_allergies": ["peanuts"],
        "workout_days": "four",
    }


@pytest.fixture
def client(store):
    from main import app
    from api.v1.deps import get_store, get_text_generator

    generator = fake_generator()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_text_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def make_generator():
    return fake_generator
