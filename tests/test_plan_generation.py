"""
End-to-end (no DB, no Gemini) – fake generator + in-memory store.
"""
import asyncio
from datetime import datetime, timezone

import pytest

from core.errors import GeneratorUnavailable, InvalidInput
from core.plan_generation import HealthPlanGenerator, build_prompt
from core.field_normalizer import normalize_profile

NOW = datetime(2024, 2, 5, 7, 0, tzinfo=timezone.utc)


def _run(generator, store, form):
    return asyncio.run(HealthPlanGenerator(generator, store).run(form, now=NOW))


def test_generates_and_saves_seven_days(store, profile_form, make_generator):
    gen = make_generator()
    res = _run(gen, store, profile_form)

    assert len(gen.calls) == 1
    assert res.saved_plan is not None
    assert len(res.saved_plan.daily_plans) == 7
    assert res.saved_plan.daily_plans[3].exercise == ["walk 30 min"]
    assert res.saved_plan.start_date == NOW
    assert res.profile.id == 1
    assert res.profile.active_plan_id == res.saved_plan.id
    assert store.profiles[1].active_plan_id == res.saved_plan.id


def test_second_plan_pauses_the_first(store, profile_form, make_generator):
    first = _run(make_generator(), store, profile_form)
    second = _run(make_generator(), store, profile_form)

    assert len(store.profiles) == 1
    assert store.plans[first.saved_plan.id].status == "paused"
    assert store.plans[second.saved_plan.id].status == "active"


def test_unparseable_output_is_recorded_not_saved(store, profile_form):
    res = _run(lambda prompt: "Sorry, I can't help with that.", store, profile_form)

    assert res.week is None
    assert res.saved_plan is None
    assert res.raw_text.startswith("Sorry")
    assert store.plans == {}
    assert store.failures[0]["stage"] == "parse"
    assert store.profiles[1].email == "sam@example.com"


def test_runs_without_a_store(profile_form, make_generator):
    res = _run(make_generator(), None, profile_form)
    assert res.saved_plan is None
    assert len(res.week) == 7


def test_bad_measurements_stop_before_generation(store, profile_form, make_generator):
    gen = make_generator()
    profile_form["current_height"] = 420
    with pytest.raises(InvalidInput):
        _run(gen, store, profile_form)
    assert gen.calls == []
    assert store.profiles == {}


def test_generator_errors_propagate(store, profile_form):
    def broken(prompt):
        raise GeneratorUnavailable("down")

    with pytest.raises(GeneratorUnavailable):
        _run(broken, store, profile_form)
    assert store.plans == {}


def test_prompt_mentions_profile_details(profile_form):
    p = normalize_profile(profile_form)
    prompt = build_prompt(p, 22.9)
    assert "BMI: 22.9" in prompt
    assert "Food Allergies: peanuts" in prompt
    assert "Chronic Conditions: None" in prompt
    assert "exactly 7 days" in prompt
