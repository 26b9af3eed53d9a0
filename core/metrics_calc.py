"""
core/metrics_calc.py
────────────────────────────────────────────────────────────────────────
Body metrics used by the calculators and by plan generation:

1. BMI + category (half-open bands at 18.5 / 25 / 30)
2. BMR  (Mifflin–St Jeor)
3. Maintenance calories (activity multiplier)
4. Weight-loss / weight-gain targets (±500 kcal ≈ 1 lb per week)
5. Macro grams from the maintenance target (45 / 25 / 30 split)

Integers are rounded half-up, so 1648.5 → 1649 and -2.5 → -2.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real

from core.errors import InvalidInput

Logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extra_active": 1.9,
}
DEFAULT_ACTIVITY = "sedentary"

MACRO_RATIOS = {"carbs": 0.45, "protein": 0.25, "fat": 0.30}
_KCAL_PER_GRAM = {"carbs": 4, "protein": 4, "fat": 9}

CALORIE_DELTA = 500
MIN_SAFE_CALORIES = 1200

MAX_WEIGHT_KG = 1000
MAX_HEIGHT_CM = 300


# ──────────────────────────────────────────────────────────────────────
#  Unit helpers
# ──────────────────────────────────────────────────────────────────────
def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def cm_to_m(height_cm: float) -> float:
    return height_cm / 100


def _number(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
        raise InvalidInput(f"{name} must be a number")
    if math.isnan(value):
        raise InvalidInput(f"{name} must be a number")
    return float(value)


# ──────────────────────────────────────────────────────────────────────
#  BMI
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class BmiCategory:
    name: str           # "Underweight" | "Normal" | "Overweight" | "Obese"
    health_risk: str
    recommendation: str


_BMI_BANDS: list[tuple[float, BmiCategory]] = [
    (18.5, BmiCategory(
        "Underweight", "Low",
        "Consider increasing caloric intake with nutrient-dense foods "
        "and consult a healthcare provider.",
    )),
    (25.0, BmiCategory(
        "Normal", "Low",
        "Maintain your current healthy lifestyle with balanced diet "
        "and regular exercise.",
    )),
    (30.0, BmiCategory(
        "Overweight", "Moderate",
        "Consider reducing caloric intake and increasing physical activity. "
        "Consult a healthcare provider for guidance.",
    )),
    (math.inf, BmiCategory(
        "Obese", "High",
        "Strongly recommend consulting a healthcare provider for a "
        "comprehensive weight management plan.",
    )),
]


def compute_bmi(weight_kg: object, height_cm: object) -> float:
    """Body-mass index rounded to one decimal.

    Raises InvalidInput for missing, non-positive or unrealistic values
    (weight above 1000 kg, height above 300 cm).
    """
    if weight_kg is None or height_cm is None:
        raise InvalidInput("weight (kg) and height (cm) are required")
    w = _number(weight_kg, "weight")
    h = _number(height_cm, "height")
    if w <= 0 or h <= 0:
        raise InvalidInput("weight and height must be positive numbers")
    if w > MAX_WEIGHT_KG or h > MAX_HEIGHT_CM:
        raise InvalidInput("weight or height values seem unrealistic")
    return round(w / cm_to_m(h) ** 2, 1)


def classify_bmi(bmi: float) -> BmiCategory:
    for upper, category in _BMI_BANDS:
        if bmi < upper:
            return category
    return _BMI_BANDS[-1][1]


def bmi_category(bmi: float) -> str:
    return classify_bmi(bmi).name


# ──────────────────────────────────────────────────────────────────────
#  BMR / calories / macros
# ──────────────────────────────────────────────────────────────────────
def _gender(gender: object) -> str:
    g = str(gender or "").strip().lower()
    if g not in ("male", "female"):
        raise InvalidInput('gender must be either "male" or "female"')
    return g


def mifflin_st_jeor(
    weight_kg: object, height_cm: object, age_years: object, gender: object
) -> float:
    """Unrounded BMR in kcal/day."""
    w = _number(weight_kg, "weight")
    h = _number(height_cm, "height")
    a = _number(age_years, "age")
    if not 1 <= a <= 120:
        raise InvalidInput("age must be between 1 and 120")
    base = 10 * w + 6.25 * h - 5 * a
    return base + (5 if _gender(gender) == "male" else -161)


def compute_bmr(
    weight_kg: object, height_cm: object, age_years: object, gender: object
) -> int:
    return round_half_up(mifflin_st_jeor(weight_kg, height_cm, age_years, gender))


def activity_multiplier(activity_level: object) -> float:
    # unknown levels are treated as sedentary rather than rejected
    factor = ACTIVITY_MULTIPLIERS.get(str(activity_level or "").strip().lower())
    if factor is None:
        Logger.debug("unknown activity level %r – using sedentary", activity_level)
        return ACTIVITY_MULTIPLIERS[DEFAULT_ACTIVITY]
    return factor


def compute_daily_calories(bmr: float, activity_level: object) -> int:
    return round_half_up(bmr * activity_multiplier(activity_level))


def weight_loss_calories(maintenance: int, floor: int = MIN_SAFE_CALORIES) -> int:
    """maintenance − 500, never below `floor` (or maintenance, if lower)."""
    return max(maintenance - CALORIE_DELTA, min(floor, maintenance))


def weight_gain_calories(maintenance: int) -> int:
    return maintenance + CALORIE_DELTA


@dataclass(frozen=True)
class MacroGrams:
    carbs: int
    protein: int
    fat: int


def macro_grams(calories: float) -> MacroGrams:
    grams = {
        k: round_half_up(calories * MACRO_RATIOS[k] / _KCAL_PER_GRAM[k])
        for k in MACRO_RATIOS
    }
    return MacroGrams(**grams)


# ──────────────────────────────────────────────────────────────────────
#  Combined result
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class MetricsResult:
    bmi: float
    bmi_category: str
    bmr: int
    maintenance_calories: int
    weight_loss_calories: int
    weight_gain_calories: int
    macro_grams: MacroGrams
    activity_level: str = DEFAULT_ACTIVITY


class MetricsCalculator:
    """Source-of-truth for BMI, BMR, calorie targets and macros."""

    def __init__(self, min_safe_calories: int = MIN_SAFE_CALORIES) -> None:
        self._floor = min_safe_calories

    def summarize(
        self,
        weight_kg: object,
        height_cm: object,
        age_years: object,
        gender: object,
        activity_level: object,
    ) -> MetricsResult:
        bmi = compute_bmi(weight_kg, height_cm)
        raw_bmr = mifflin_st_jeor(weight_kg, height_cm, age_years, gender)
        # calories come from the unrounded BMR
        maintenance = compute_daily_calories(raw_bmr, activity_level)
        level = str(activity_level or "").strip().lower()
        return MetricsResult(
            bmi=bmi,
            bmi_category=bmi_category(bmi),
            bmr=round_half_up(raw_bmr),
            maintenance_calories=maintenance,
            weight_loss_calories=weight_loss_calories(maintenance, self._floor),
            weight_gain_calories=weight_gain_calories(maintenance),
            macro_grams=macro_grams(maintenance),
            activity_level=level if level in ACTIVITY_MULTIPLIERS else DEFAULT_ACTIVITY,
        )
