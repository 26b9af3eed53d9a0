"""
core/plan_normalizer.py
────────────────────────────────────────────────────────────────────────
Gemini is asked for a JSON array of exactly seven day objects, but what
comes back may hold 3 days, 10 days, prose, or a fenced ```json block.

* `parse_generated_plan()` – text → list of raw day objects, or None
* `normalize_to_week()`    – any non-empty list → exactly 7 `DayPlan`s
* `plan_day_for()`         – which day of the 7-day cycle "today" is
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Any

from core.errors import UnparseablePlan
from core.models.plan import DayPlan, MealSlots

_LOG = logging.getLogger(__name__)

WEEK_LENGTH = 7
MEAL_SLOTS = ("breakfast", "lunch", "dinner", "snacks")

_FENCED = re.compile(r"```(json)?[ \t]*([\s\S]*?)\s*```", re.IGNORECASE)


# ──────────────────────────────────────────────────────────────────────
#  Text → raw list
# ──────────────────────────────────────────────────────────────────────
def _load_array(payload: str) -> list[Any]:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise UnparseablePlan(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise UnparseablePlan(f"expected a JSON array, got {type(data).__name__}")
    return data


def _extract_array(text: str) -> list[Any]:
    clean = text.strip()
    if clean.startswith("[") and clean.endswith("]"):
        return _load_array(clean)

    # ```json blocks first, then bare ``` blocks, each in document order
    blocks = sorted(_FENCED.finditer(text), key=lambda m: m.group(1) is None)
    if not blocks:
        raise UnparseablePlan("no JSON array or fenced block in response")
    last_error = None
    for block in blocks:
        try:
            return _load_array(block.group(2))
        except UnparseablePlan as exc:
            last_error = exc
    raise UnparseablePlan(f"no fenced block holds a day array ({last_error})")


def parse_generated_plan(text: Any) -> list[Any] | None:
    """Return the day objects found in `text`, or None if there are none."""
    if not isinstance(text, str):
        return None
    try:
        days = _extract_array(text)
    except UnparseablePlan as exc:
        _LOG.info("could not parse structured plan: %s", exc)
        _LOG.debug("raw response head: %.500s", text)
        return None
    _LOG.debug("parsed %d day(s) from generator output", len(days))
    return days


# ──────────────────────────────────────────────────────────────────────
#  Raw list → WeekPlan
# ──────────────────────────────────────────────────────────────────────
def _item_text(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping) and isinstance(item.get("name"), str):
        extra = [str(v) for k, v in item.items() if k != "name" and v not in (None, "")]
        return f"{item['name']} ({', '.join(extra)})" if extra else item["name"]
    return json.dumps(item, ensure_ascii=False, default=str)


def _str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, Sequence):
        return [_item_text(v) for v in value if v is not None]
    return []


def _day_fields(entry: Any) -> dict[str, Any]:
    """Structural clone of one source day: fresh lists, no shared objects."""
    if isinstance(entry, DayPlan):
        entry = entry.model_dump()
    if not isinstance(entry, Mapping):
        entry = {}

    food = entry.get("food")
    food = food if isinstance(food, Mapping) else {}

    fields: dict[str, Any] = {
        "food": MealSlots(**{slot: _str_list(food.get(slot)) for slot in MEAL_SLOTS}),
        "exercise": _str_list(entry.get("exercise")),
        "daily_tips": _str_list(entry.get("daily_tips")),
    }
    for goal in ("water_intake_goal", "sleep_goal"):
        value = entry.get(goal)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            fields[goal] = value
    return fields


def normalize_to_week(
    raw_plan: Any,
    generated_at: datetime | None = None,
) -> list[DayPlan] | None:
    """
    Force an arbitrary-length plan to exactly seven days.

    Longer plans keep their first seven entries; shorter ones are padded by
    cycling through the original entries (0, 1, 2, 0, 1, 2, 0 for three).
    Day numbers and dates are always reassigned from `generated_at`.
    Returns None when `raw_plan` is not a non-empty list.
    """
    if not isinstance(raw_plan, (list, tuple)) or not raw_plan:
        return None

    entries = list(raw_plan)
    original_len = len(entries)
    if original_len > WEEK_LENGTH:
        _LOG.info("trimming plan from %d days to %d", original_len, WEEK_LENGTH)
        entries = entries[:WEEK_LENGTH]
    elif original_len < WEEK_LENGTH:
        _LOG.info("extending plan from %d days to %d", original_len, WEEK_LENGTH)
        while len(entries) < WEEK_LENGTH:
            entries.append(entries[len(entries) % original_len])

    start = generated_at or datetime.now(timezone.utc)
    return [
        DayPlan(day=i + 1, date=start + timedelta(days=i), **_day_fields(entry))
        for i, entry in enumerate(entries)
    ]


def plan_day_for(start: date | datetime, today: date | datetime | None = None) -> int:
    """1-based position of `today` in the repeating 7-day cycle."""
    if isinstance(start, datetime):
        start = start.date()
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    return (today - start).days % WEEK_LENGTH + 1
