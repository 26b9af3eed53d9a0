"""
core/field_normalizer.py
────────────────────────────────────────────────────────────────────────
Turn the free-form profile form into a `NormalizedProfile`.

Form fields arrive as numbers, as "5 days", as "four_meals (main + snacks)"
or not at all. `extract_integer()` resolves them in a fixed order:

    explicit digits  →  spelled-out word (one … ten)  →  int()  →  fallback

and never raises.
"""
from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from numbers import Real
from typing import Any, Iterable

from core.metrics_calc import ACTIVITY_MULTIPLIERS, DEFAULT_ACTIVITY
from core.models.profile import NormalizedProfile, ProfileInput

_LOG = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")

# iteration order matters: "seventeen" resolves to 7
WORD_NUMBERS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}

_ACTIVITY_ALIASES = {
    "light": "lightly_active",
    "lightly": "lightly_active",
    "moderate": "moderately_active",
    "moderately": "moderately_active",
    "active": "very_active",
    "very": "very_active",
    "extra": "extra_active",
    "extremely_active": "extra_active",
}

DEFAULTS = {
    "current_weight": 70.0,
    "current_height": 170.0,
    "meals_per_day": 3,
    "nutrition_days": 7,
    "meals_num": 3,
    "workout_days": 5,
    "goal": "general_health",
    "exercise_frequency": "moderate",
    "diet_preference": "balanced",
    "plan_duration": "1 month",
}


# ──────────────────────────────────────────────────────────────────────
#  Scalars
# ──────────────────────────────────────────────────────────────────────
def extract_integer(value: Any, fallback: Any = None) -> Any:
    if isinstance(value, Real) and not isinstance(value, bool):
        return value if math.isfinite(value) else fallback
    if not isinstance(value, str):
        return fallback

    match = _DIGITS.search(value)
    if match:
        try:
            return int(match.group(0))
        except ValueError:
            # longer than the interpreter's int-conversion limit
            return fallback

    lowered = value.lower()
    for word, num in WORD_NUMBERS.items():
        if word in lowered:
            return num

    try:
        return int(value.strip())
    except ValueError:
        return fallback


def _as_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _as_float(value: Any, fallback: float) -> float:
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value) if value and math.isfinite(value) else fallback
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            try:
                parsed = float(extract_integer(value, 0))
            except OverflowError:
                return fallback
        return parsed if parsed and math.isfinite(parsed) else fallback
    return fallback


def _text(value: Any, fallback: str | None = None) -> str | None:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def normalize_gender(value: Any) -> str:
    g = (_text(value) or "").lower()
    if g in ("male", "m", "man"):
        return "male"
    if g in ("female", "f", "woman"):
        return "female"
    return "other"


def normalize_activity_level(value: Any) -> str:
    key = re.sub(r"[\s\-]+", "_", (_text(value) or "").lower())
    if key in ACTIVITY_MULTIPLIERS:
        return key
    return _ACTIVITY_ALIASES.get(key, DEFAULT_ACTIVITY)


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        _LOG.debug("ignoring unparseable dob %r", value)
        return None


def age_from_dob(dob: date | None, today: date | None = None) -> int | None:
    if dob is None:
        return None
    today = today or date.today()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


# ──────────────────────────────────────────────────────────────────────
#  Lists
# ──────────────────────────────────────────────────────────────────────
def merge_text_fields(*values: Any) -> list[str]:
    """Flatten strings / lists of strings into trimmed, non-empty items."""
    out: list[str] = []
    for v in values:
        items: Iterable[Any] = v if isinstance(v, (list, tuple)) else [v]
        for item in items:
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
    return out


# ──────────────────────────────────────────────────────────────────────
#  Whole profile
# ──────────────────────────────────────────────────────────────────────
def normalize_profile(
    raw: ProfileInput | dict[str, Any],
    existing: NormalizedProfile | None = None,
) -> NormalizedProfile:
    """
    Build a NormalizedProfile from form input.

    When `existing` is given (profile update) its values are the fallbacks
    instead of the hard defaults, so a partial form never wipes stored data.
    List fields are always replaced by what the form sends.
    """
    if isinstance(raw, dict):
        raw = ProfileInput.model_validate(raw)

    def prev(name: str) -> Any:
        if existing is not None:
            return getattr(existing, name)
        return DEFAULTS.get(name)

    dob = _parse_date(raw.dob) or (existing.dob if existing else None)
    age = _as_int(extract_integer(raw.age, None))
    if age is None:
        age = age_from_dob(dob) if dob else (existing.age if existing else None)

    gender = normalize_gender(raw.gender) if _text(raw.gender) else (
        existing.gender if existing else "other"
    )
    activity = normalize_activity_level(raw.activity_level) if _text(raw.activity_level) else (
        existing.activity_level if existing else DEFAULT_ACTIVITY
    )

    return NormalizedProfile(
        id=existing.id if existing else None,
        full_name=_text(raw.full_name, existing.full_name if existing else None),
        email=(_text(raw.email) or (existing.email if existing else "") or "").lower() or None,
        dob=dob,
        age=age,
        gender=gender,
        current_weight=_as_float(raw.current_weight, prev("current_weight")),
        current_height=_as_float(raw.current_height, prev("current_height")),
        activity_level=activity,
        goal=_text(raw.goal, prev("goal")),
        exercise_frequency=_text(raw.exercise_frequency, prev("exercise_frequency")),
        diet_preference=_text(raw.diet_preference, prev("diet_preference")),
        meals_per_day=_as_int(extract_integer(raw.meals_per_day, prev("meals_per_day"))),
        plan_duration=_text(raw.plan_duration, prev("plan_duration")),
        fav_nutrition_type=_text(raw.fav_nutrition_type),
        food_allergies=merge_text_fields(
            raw.food_allergies, raw.food_allergies2, raw.other_food_allergies
        ),
        nutrition_days=_as_int(extract_integer(raw.nutrition_days, prev("nutrition_days"))),
        meals_num=_as_int(extract_integer(raw.meals_num, prev("meals_num"))),
        fav_workout=_text(raw.fav_workout),
        workout_goal=_text(raw.workout_goal),
        workout_days=_as_int(extract_integer(raw.workout_days, prev("workout_days"))),
        health_conditions=merge_text_fields(
            raw.health_conditions, raw.other_health_conditions
        ),
        chronic_conditions=merge_text_fields(
            raw.chronic_conditions, raw.other_chronic_conditions
        ),
        active_plan_id=existing.active_plan_id if existing else None,
    )
