from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from core.errors import InvalidInput
from core.field_normalizer import normalize_profile
from core.models.profile import NormalizedProfile, ProfileInput
from services.repository import SqlPlanStore
from api.v1.deps import get_store

router = APIRouter()


# ───────────────────────── upsert ───────────────────────────
@router.post("", response_model=NormalizedProfile, status_code=status.HTTP_200_OK)
async def save_profile(
    body: ProfileInput,
    store: SqlPlanStore = Depends(get_store),
) -> NormalizedProfile:
    if not body.email:
        raise InvalidInput("email is required")
    existing = await store.find_profile(body.email.strip().lower())
    return await store.save_profile(normalize_profile(body, existing))


# ───────────────────────── fetch one ────────────────────────
@router.get("/{user_id}", response_model=NormalizedProfile)
async def fetch_profile(
    user_id: int,
    store: SqlPlanStore = Depends(get_store),
) -> NormalizedProfile:
    profile = await store.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
