# api/v1/router.py
from fastapi import APIRouter

from . import activity, advice, health, plans, profiles

api_router = APIRouter()

api_router.include_router(health.router,   prefix="/health",   tags=["Health maths"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(plans.router,    prefix="/plans",    tags=["Plans"])
api_router.include_router(activity.router, prefix="/activity", tags=["Activity"])
api_router.include_router(advice.router,   prefix="/ai",       tags=["AI"])
