from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

Gender = Literal["male", "female", "other"]
ActivityLevel = Literal[
    "sedentary",
    "lightly_active",
    "moderately_active",
    "very_active",
    "extra_active",
]


class ProfileInput(BaseModel):
    """Raw form payload – any field may arrive as free text."""

    full_name: str | None = None
    email: str | None = None
    dob: Any = None
    age: Any = None
    gender: Any = None
    current_weight: Any = None
    current_height: Any = None
    activity_level: Any = None
    goal: Any = None
    exercise_frequency: Any = None
    diet_preference: Any = None
    meals_per_day: Any = None
    plan_duration: Any = None
    fav_nutrition_type: Any = None
    food_allergies: Any = None
    food_allergies2: Any = None
    other_food_allergies: Any = None
    nutrition_days: Any = None
    meals_num: Any = None
    fav_workout: Any = None
    workout_goal: Any = None
    workout_days: Any = None
    health_conditions: Any = None
    other_health_conditions: Any = None
    chronic_conditions: Any = None
    other_chronic_conditions: Any = None

    # the web form posts whatever it has
    model_config = ConfigDict(extra="allow")


class NormalizedProfile(BaseModel):
    id: int | None = None
    full_name: str | None = None
    email: str | None = None
    dob: date | None = None
    age: int | None = None
    gender: Gender = "other"
    current_weight: float = 70
    current_height: float = 170
    activity_level: ActivityLevel = "sedentary"
    goal: str = "general_health"
    exercise_frequency: str = "moderate"
    diet_preference: str = "balanced"
    meals_per_day: int | None = 3
    plan_duration: str = "1 month"
    fav_nutrition_type: str | None = None
    food_allergies: list[str] = []
    nutrition_days: int | None = 7
    meals_num: int | None = 3
    fav_workout: str | None = None
    workout_goal: str | None = None
    workout_days: int | None = 5
    health_conditions: list[str] = []
    chronic_conditions: list[str] = []
    active_plan_id: int | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def has_conditions(self) -> bool:
        return bool(self.health_conditions or self.chronic_conditions)
