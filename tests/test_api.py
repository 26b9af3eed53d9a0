"""
HTTP layer via TestClient – store and generator are overridden in conftest.
"""
from core.errors import GeneratorQuotaExceeded
from api.v1.deps import get_text_generator

API = "/api/v1"


# ── health maths ────────────────────────────────────────────────────
def test_calculate_bmi(client):
    r = client.post(f"{API}/health/calculate-bmi", json={"weight": 70, "height": 175})
    assert r.status_code == 200
    body = r.json()
    assert body["bmi"] == 22.9
    assert body["category"] == "Normal"
    assert body["health_risk"] == "Low"


def test_calculate_bmi_rejects_zero(client):
    r = client.post(f"{API}/health/calculate-bmi", json={"weight": 0, "height": 175})
    assert r.status_code == 400


def test_calculate_calories(client):
    r = client.post(
        f"{API}/health/calculate-calories",
        json={"weight": 70, "height": 175, "age": 30, "gender": "male",
              "activity_level": "moderately_active"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["bmr"] == 1649
    assert body["maintenance_calories"] == 2556
    assert body["macros"] == {"carbs": 288, "protein": 160, "fat": 85}


def test_calculate_calories_rejects_unknown_gender(client):
    r = client.post(
        f"{API}/health/calculate-calories",
        json={"weight": 70, "height": 175, "age": 30, "gender": "other"},
    )
    assert r.status_code == 400


def test_tips(client):
    body = client.get(f"{API}/health/tips/exercise").json()
    assert body["tip"] in body["all_tips"]


# ── profiles ────────────────────────────────────────────────────────
def test_profile_upsert_and_fetch(client, profile_form):
    created = client.post(f"{API}/profiles", json=profile_form).json()
    again = client.post(f"{API}/profiles", json={"email": "sam@example.com", "current_weight": 72}).json()
    assert again["id"] == created["id"]
    assert again["current_weight"] == 72

    fetched = client.get(f"{API}/profiles/{created['id']}").json()
    assert fetched["email"] == "sam@example.com"
    assert client.get(f"{API}/profiles/999").status_code == 404


def test_profile_requires_email(client):
    assert client.post(f"{API}/profiles", json={"full_name": "x"}).status_code == 400


# ── plans ───────────────────────────────────────────────────────────
def test_plan_lifecycle(client, profile_form):
    gen = client.post(f"{API}/plans/generate", json=profile_form).json()
    assert gen["saved"] is True
    assert len(gen["plan"]["daily_plans"]) == 7
    uid, pid = gen["profile"]["id"], gen["plan"]["id"]

    active = client.get(f"{API}/plans/users/{uid}/active").json()
    assert active["id"] == pid

    today = client.get(f"{API}/plans/users/{uid}/today").json()
    assert 1 <= today["day_number"] <= 7
    assert today["today"]["day"] == today["day_number"]

    history = client.get(f"{API}/plans/users/{uid}/history", params={"limit": 5}).json()
    assert (history["total"], history["pages"], history["limit"]) == (1, 1, 5)

    r = client.patch(f"{API}/plans/{pid}/status",
                     json={"status": "completed", "rating": 4, "notes": "done!"})
    assert r.status_code == 200
    assert r.json()["end_date"] is not None
    assert r.json()["user_notes"][0]["note"] == "done!"

    assert client.get(f"{API}/plans/users/{uid}/active").status_code == 404


def test_plan_status_errors(client, profile_form):
    pid = client.post(f"{API}/plans/generate", json=profile_form).json()["plan"]["id"]
    assert client.patch(f"{API}/plans/{pid}/status", json={"status": "nope"}).status_code == 400
    assert client.patch(f"{API}/plans/{pid}/status", json={"rating": 9}).status_code == 400
    assert client.patch(f"{API}/plans/999/status", json={"status": "paused"}).status_code == 404


def test_quota_exhaustion_maps_to_429(client, profile_form):
    def exhausted(prompt):
        raise GeneratorQuotaExceeded("quota")

    client.app.dependency_overrides[get_text_generator] = lambda: exhausted
    r = client.post(f"{API}/plans/generate", json=profile_form)
    assert r.status_code == 429
    assert r.headers["retry-after"] == "60"


# ── activity ────────────────────────────────────────────────────────
def test_track_and_weekly_progress(client, profile_form, today):
    uid = client.post(f"{API}/profiles", json=profile_form).json()["id"]
    first = client.post(f"{API}/activity", json={
        "user_id": uid,
        "date": today.isoformat(),
        "meals_completed": {"breakfast": True, "lunch": True, "dinner": True},
        "water_intake": 4,
    }).json()
    assert first["completion_percentage"] == 75

    second = client.post(f"{API}/activity", json={
        "user_id": uid,
        "date": today.isoformat(),
        "exercises_completed": [{"exercise_name": "run", "completed": True}],
        "mood": "good",
    }).json()
    assert second["id"] == first["id"]
    assert second["water_intake"] == 4
    assert second["completion_percentage"] == 80
    assert second["day_completed"] is True

    week = client.get(f"{API}/activity/users/{uid}/weekly",
                      params={"start_date": today.isoformat()}).json()
    assert week["summary"]["total_days"] == 1
    assert week["summary"]["mood_distribution"] == {"good": 1}
    assert len(week["days"]) == 1


def test_daily_entry_and_user_stats(client, profile_form, today):
    uid = client.post(f"{API}/profiles", json=profile_form).json()["id"]
    created = client.post(f"{API}/activity/daily", json={
        "user_id": uid,
        "date": today.isoformat(),
        "weight": 71,
        "calories_consumed": 2200,
        "exercise_minutes": 25,
    }).json()
    assert created["exercises_completed"][0]["exercise_name"] == "General Exercise"
    assert created["completion_percentage"] == 20

    updated = client.post(f"{API}/activity/daily", json={
        "user_id": uid, "date": today.isoformat(), "sleep_hours": 7, "notes": "ok",
    }).json()
    assert updated["id"] == created["id"]
    assert updated["weight"] == 71
    assert updated["daily_notes"] == "ok"

    body = client.get(f"{API}/activity/users/{uid}/stats").json()
    assert body["stats"]["total_entries"] == 1
    assert body["stats"]["average_weight"] == 71
    assert body["stats"]["average_calories"] == 2200
    assert body["stats"]["average_exercise"] == 25
    assert body["profile"]["id"] == uid


def test_daily_entry_rejects_bad_mood(client):
    r = client.post(f"{API}/activity/daily", json={"user_id": 1, "mood": "ecstatic"})
    assert r.status_code == 422


# ── AI text + meta ──────────────────────────────────────────────────
def test_advice_endpoints(client):
    r = client.post(f"{API}/ai/nutrition-advice", json={"question": "Is rice ok?"})
    assert r.status_code == 200 and r.json()["text"]
    r = client.post(f"{API}/ai/workout-routine",
                    json={"fitness_level": "beginner", "available_time": "20 min", "goals": "stamina"})
    assert r.status_code == 200


def test_chat(client):
    r = client.post(f"{API}/ai/chat", json={"message": "How much water should I drink?"})
    assert r.status_code == 200
    assert r.json()["text"]


def test_chat_requires_a_message(client):
    assert client.post(f"{API}/ai/chat", json={"message": "   "}).status_code == 400
    assert client.post(f"{API}/ai/chat", json={}).status_code == 400


def test_platform_stats(client, profile_form):
    client.post(f"{API}/plans/generate", json=profile_form)
    body = client.get(f"{API}/health/stats").json()
    stats = body["stats"]
    assert stats["users"] == {"total": 1, "active": 1, "activity_rate": 100}
    assert stats["plans"]["total"] == 1 and stats["plans"]["active"] == 1
    assert stats["plans"]["completion_rate"] == 0
    assert stats["health"] == {"average_bmi": 22.9, "bmi_sample_size": 1}
    assert stats["popular_goals"] == [{"goal": "general_health", "count": 1}]
    assert body["timestamp"]


def test_health_without_database(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["database"] == "down"
