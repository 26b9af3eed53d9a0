"""
Daily completion rules and the weekly roll-up (pandas).
"""
from datetime import date, timedelta

from core.activity import (
    completion,
    log_daily,
    merge_activity,
    user_stats,
    week_start_for,
    weekly_summary,
    with_completion,
)
from core.models.activity import ActivityEntry, ExerciseLog, MealsCompleted

MONDAY = date(2024, 1, 1)


def _entry(day, **kw):
    return with_completion(ActivityEntry(user_id=1, date=day, **kw))


def test_four_of_five_tasks_completes_the_day():
    meals = MealsCompleted(breakfast=True, lunch=True, dinner=True)
    pct, done = completion(meals, [ExerciseLog(exercise_name="run", completed=True)])
    assert (pct, done) == (80, True)


def test_meals_only_day():
    pct, done = completion(MealsCompleted(breakfast=True, lunch=True), [])
    assert (pct, done) == (50, False)


def test_merge_keeps_previous_values_for_empty_fields():
    old = _entry(MONDAY, water_intake=5, mood="good",
                 meals_completed=MealsCompleted(breakfast=True))
    new = ActivityEntry(user_id=1, date=MONDAY, sleep_hours=7,
                        exercises_completed=[ExerciseLog(exercise_name="swim", completed=True)])
    merged = merge_activity(old, new)
    assert merged.water_intake == 5
    assert merged.sleep_hours == 7
    assert merged.mood == "good"
    assert merged.meals_completed.breakfast
    assert merged.completion_percentage == 40


def test_week_starts_on_monday():
    assert week_start_for(date(2024, 1, 3)) == MONDAY
    assert week_start_for(MONDAY) == MONDAY
    assert week_start_for(date(2024, 1, 7)) == MONDAY


def test_empty_week():
    s = weekly_summary([], MONDAY)
    assert s["total_days"] == 0
    assert s["average_completion"] == 0
    assert s["mood_distribution"] == {}
    assert s["energy_levels"] == []


def test_weekly_summary():
    all_meals = MealsCompleted(breakfast=True, lunch=True, dinner=True, snacks=True)
    entries = [
        _entry(MONDAY, meals_completed=all_meals, water_intake=5, sleep_hours=7,
               mood="good", energy_level=6, weight=80),
        _entry(MONDAY + timedelta(days=2), meals_completed=MealsCompleted(breakfast=True, lunch=True),
               water_intake=3, sleep_hours=8, mood="good", weight=79.5),
        _entry(MONDAY + timedelta(days=8), water_intake=100),      # next week
    ]
    s = weekly_summary(entries, MONDAY)
    assert s["total_days"] == 2
    assert s["completed_days"] == 1
    assert s["average_completion"] == 75
    assert s["total_water_intake"] == 8
    assert s["average_sleep"] == 7.5
    assert s["mood_distribution"] == {"good": 2}
    assert s["energy_levels"] == [{"date": MONDAY, "level": 6}]
    assert s["weight_change"] == -0.5


# ── quick daily log ─────────────────────────────────────────────────
def test_daily_log_creates_entry_with_general_exercise():
    e = log_daily(None, 1, MONDAY, weight=80, water_intake=3, exercise_minutes=20,
                  mood="good", calories_consumed=2100)
    assert [(x.exercise_name, x.duration, x.completed) for x in e.exercises_completed] == [
        ("General Exercise", 20, True)
    ]
    assert e.completion_percentage == 20
    assert (e.weight, e.water_intake, e.sleep_hours) == (80, 3, 0)
    assert e.calories_consumed == 2100
    assert e.mood == "good"


def test_daily_log_on_existing_day_only_overwrites_given_values():
    all_meals = MealsCompleted(breakfast=True, lunch=True, dinner=True, snacks=True)
    old = _entry(MONDAY, meals_completed=all_meals, water_intake=5, weight=81).model_copy(
        update={"id": 7}
    )
    e = log_daily(old, 1, MONDAY, weight=80, water_intake=0, notes="tired", exercise_minutes=45)
    assert e.id == 7
    assert e.weight == 80
    assert e.water_intake == 5
    assert e.daily_notes == "tired"
    assert e.exercises_completed == []
    assert e.completion_percentage == 100


# ── per-user stats ──────────────────────────────────────────────────
def test_user_stats_empty():
    s = user_stats([])
    assert s["total_entries"] == 0
    assert s["current_streak"] == 0
    assert s["average_weight"] == 0


def test_user_stats():
    all_meals = MealsCompleted(breakfast=True, lunch=True, dinner=True, snacks=True)
    entries = [
        _entry(MONDAY, meals_completed=MealsCompleted(breakfast=True), weight=80,
               water_intake=4, calories_consumed=2000),
        _entry(MONDAY + timedelta(days=1),
               meals_completed=MealsCompleted(breakfast=True, lunch=True, dinner=True),
               exercises_completed=[ExerciseLog(exercise_name="bike", duration=30)],
               weight=78, sleep_hours=7),
        _entry(MONDAY + timedelta(days=2), meals_completed=all_meals, water_intake=6,
               sleep_hours=8, calories_consumed=1800),
    ]
    s = user_stats(entries)
    assert s["total_entries"] == 3
    assert s["average_weight"] == 79.0
    assert s["weight_progress"] == 2.5
    assert s["average_water"] == 5.0
    assert s["average_sleep"] == 7.5
    assert s["average_calories"] == 1900.0
    assert s["average_exercise"] == 30.0
    assert s["average_completion"] == 62
    assert s["current_streak"] == 2


def test_user_stats_uses_the_newest_thirty_entries():
    entries = [_entry(MONDAY + timedelta(days=i), weight=100 - i) for i in range(35)]
    s = user_stats(entries)
    assert s["total_entries"] == 30
    # newest 30 weights are 95 .. 66
    assert s["average_weight"] == 80.5
