"""Static text attached to plans and served by the tips endpoint."""
from __future__ import annotations

import random

HEALTH_GUIDELINES = [
    "Follow your meal plan consistently",
    "Stay hydrated with at least 8 glasses of water daily",
    "Get adequate sleep (7-9 hours per night)",
    "Listen to your body and rest when needed",
]

SAFETY_NOTES = [
    "Consult with healthcare provider before starting new exercise routines",
    "Monitor any existing health conditions closely",
    "Stop exercising if you experience unusual symptoms",
]

TIPS: dict[str, list[str]] = {
    "nutrition": [
        "Drink water before meals to help control appetite",
        "Include protein in every meal to maintain satiety",
        "Eat colorful vegetables to ensure diverse nutrients",
        "Practice portion control using smaller plates",
        "Limit processed foods and choose whole foods instead",
    ],
    "exercise": [
        "Start with 10-minute workouts if you're a beginner",
        "Include both cardio and strength training",
        "Take the stairs instead of elevators when possible",
        "Do bodyweight exercises during TV commercial breaks",
        "Schedule workouts like important appointments",
    ],
    "sleep": [
        "Maintain a consistent sleep schedule",
        "Create a relaxing bedtime routine",
        "Keep your bedroom cool and dark",
        "Avoid screens 1 hour before bedtime",
        "Limit caffeine intake after 2 PM",
    ],
    "general": [
        "Take regular breaks from sitting every hour",
        "Practice deep breathing exercises daily",
        "Spend time outdoors for vitamin D and fresh air",
        "Keep a gratitude journal for mental health",
        "Stay socially connected with friends and family",
    ],
}


def tips_for(category: str, rng: random.Random | None = None) -> tuple[str, list[str]]:
    """Random tip + full list; unknown categories get the general tips."""
    tips = TIPS.get(category.lower(), TIPS["general"])
    return (rng or random).choice(tips), list(tips)
