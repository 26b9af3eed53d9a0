"""Re-export individual schema modules for easy imports."""

from .health import (
    BmiRequest,
    BmiResponse,
    CaloriesRequest,
    CaloriesResponse,
    MacrosOut,
    PlatformStatsResponse,
    TipsResponse,
)
from .plan import GeneratePlanResponse, PlanHistoryResponse, PlanStatusUpdate, PlanSummary, TodayPlanResponse
from .activity import ActivityIn, DailyEntryIn, UserStatsResponse, WeeklyProgressResponse, WeeklySummary
from .advice import AdviceResponse, ChatRequest, NutritionAdviceRequest, WorkoutRoutineRequest

__all__ = [
    "BmiRequest",
    "BmiResponse",
    "CaloriesRequest",
    "CaloriesResponse",
    "MacrosOut",
    "PlatformStatsResponse",
    "TipsResponse",
    "GeneratePlanResponse",
    "PlanHistoryResponse",
    "PlanStatusUpdate",
    "PlanSummary",
    "TodayPlanResponse",
    "ActivityIn",
    "DailyEntryIn",
    "UserStatsResponse",
    "WeeklyProgressResponse",
    "WeeklySummary",
    "AdviceResponse",
    "ChatRequest",
    "NutritionAdviceRequest",
    "WorkoutRoutineRequest",
]
