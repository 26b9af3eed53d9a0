"""Free-form prompts for the nutrition Q&A and workout routine endpoints."""
from __future__ import annotations


def nutrition_advice_prompt(
    question: str,
    user_goal: str | None = None,
    dietary_restrictions: str | None = None,
) -> str:
    return (
        f'As a nutrition expert, answer this question: "{question.strip()}"\n\n'
        "Consider:\n"
        f"- User's goal: {user_goal or 'general health'}\n"
        f"- Dietary restrictions: {dietary_restrictions or 'none'}\n\n"
        "Provide practical, science-based advice that is easy to follow."
    )


def workout_routine_prompt(
    fitness_level: str,
    available_time: str,
    goals: str,
    equipment: str | None = None,
) -> str:
    return (
        "Create a workout routine based on:\n"
        f"- Fitness Level: {fitness_level}\n"
        f"- Available Time: {available_time}\n"
        f"- Equipment: {equipment or 'none'}\n"
        f"- Goals: {goals}\n\n"
        "Provide a detailed workout plan with:\n"
        "1. Warm-up exercises\n"
        "2. Main workout routine\n"
        "3. Cool-down exercises\n"
        "4. Sets, reps, and duration\n"
        "5. Safety tips\n\n"
        "Make it practical and achievable."
    )
