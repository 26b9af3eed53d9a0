# api/v1/advice.py
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from core.advice import nutrition_advice_prompt, workout_routine_prompt
from core.errors import InvalidInput
from core.plan_generation import TextGenerator
from api.v1.deps import get_text_generator
from api.v1.schemas import AdviceResponse, ChatRequest, NutritionAdviceRequest, WorkoutRoutineRequest

router = APIRouter()


async def _ask(generate: TextGenerator, prompt: str) -> AdviceResponse:
    text = await asyncio.to_thread(generate, prompt)
    return AdviceResponse(text=text, timestamp=datetime.now(timezone.utc))


@router.post("/nutrition-advice", response_model=AdviceResponse)
async def nutrition_advice(
    body: NutritionAdviceRequest,
    generate: TextGenerator = Depends(get_text_generator),
) -> AdviceResponse:
    return await _ask(
        generate,
        nutrition_advice_prompt(body.question, body.user_goal, body.dietary_restrictions),
    )


@router.post("/workout-routine", response_model=AdviceResponse)
async def workout_routine(
    body: WorkoutRoutineRequest,
    generate: TextGenerator = Depends(get_text_generator),
) -> AdviceResponse:
    return await _ask(
        generate,
        workout_routine_prompt(body.fitness_level, body.available_time, body.goals, body.equipment),
    )


@router.post("/chat", response_model=AdviceResponse)
async def chat(
    body: ChatRequest,
    generate: TextGenerator = Depends(get_text_generator),
) -> AdviceResponse:
    if not body.message.strip():
        raise InvalidInput("message is required")
    return await _ask(generate, body.message)
