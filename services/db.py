"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Explicit `ConnectionState` value object – connect / ensure / ping /
  disconnect all take and return it, nothing is kept in module globals
* Tables for profiles, plans, daily activity and generation failures
* `get_session` FastAPI dependency
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
import random
from dataclasses import dataclass, replace
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, String, Text, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from core.errors import PersistenceUnavailable

_LOG = logging.getLogger(__name__)


# ───────── connection state ──────────────────────────────────────────
@dataclass(frozen=True)
class ConnectionState:
    url: str | None
    engine: AsyncEngine | None = None
    connected: bool = False
    attempts: int = 0
    last_error: str | None = None

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self.engine is None:
            raise PersistenceUnavailable("database engine not initialised")
        return async_sessionmaker(self.engine, expire_on_commit=False)


async def connect(
    url: str | None,
    retries: int = 3,
    create_tables: bool = False,
) -> ConnectionState:
    """Open an engine and prove it with `SELECT 1`, retrying with backoff.

    Never raises: a failed connect returns a disconnected state carrying
    the last error, so the app can still boot and answer 503s.
    """
    if not url:
        _LOG.warning("DATABASE_URL not set – running without persistence")
        return ConnectionState(url=None, last_error="DATABASE_URL not set")

    engine = create_async_engine(url, pool_pre_ping=True)
    last_error = None
    for attempt in range(1, retries + 1):
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if create_tables:
                    await conn.run_sync(Base.metadata.create_all)
            _LOG.info("connected to database %s", engine.url.render_as_string(hide_password=True))
            return ConnectionState(url=url, engine=engine, connected=True, attempts=attempt)
        except (SQLAlchemyError, OSError) as exc:
            last_error = str(exc)
            _LOG.warning("database connect attempt %d/%d failed: %s", attempt, retries, exc)
            if attempt < retries:
                await asyncio.sleep((2 ** (attempt - 1)) + random.random())

    await engine.dispose()
    return ConnectionState(url=url, attempts=retries, last_error=last_error)


async def ensure_connection(state: ConnectionState, retries: int = 1) -> ConnectionState:
    """Return a connected state, reconnecting once if needed."""
    if state.connected and state.engine is not None:
        return state
    if state.url is None:
        raise PersistenceUnavailable("database not configured")
    _LOG.info("reconnecting to database…")
    fresh = await connect(state.url, retries=retries)
    if not fresh.connected:
        raise PersistenceUnavailable(f"database unavailable: {fresh.last_error}")
    return replace(fresh, attempts=state.attempts + fresh.attempts)


async def ping(state: ConnectionState) -> bool:
    if not state.connected or state.engine is None:
        return False
    try:
        async with state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as exc:
        _LOG.error("database ping failed: %s", exc)
        return False


async def disconnect(state: ConnectionState) -> ConnectionState:
    if state.engine is not None:
        await state.engine.dispose()
        _LOG.info("database engine disposed")
    return replace(state, engine=None, connected=False)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    dob: Mapped[dt.date | None] = mapped_column(Date)
    age: Mapped[int | None] = mapped_column(Integer)
    gender: Mapped[str] = mapped_column(String, default="other")
    current_weight: Mapped[float] = mapped_column(Float, default=70)
    current_height: Mapped[float] = mapped_column(Float, default=170)
    bmi: Mapped[float | None] = mapped_column(Float)
    activity_level: Mapped[str] = mapped_column(String, default="sedentary")
    goal: Mapped[str] = mapped_column(String, default="general_health")
    exercise_frequency: Mapped[str] = mapped_column(String, default="moderate")
    diet_preference: Mapped[str] = mapped_column(String, default="balanced")
    meals_per_day: Mapped[int | None] = mapped_column(Integer)
    plan_duration: Mapped[str] = mapped_column(String, default="1 month")
    fav_nutrition_type: Mapped[str | None] = mapped_column(String)
    food_allergies: Mapped[list] = mapped_column(JSON, default=list)
    nutrition_days: Mapped[int | None] = mapped_column(Integer)
    meals_num: Mapped[int | None] = mapped_column(Integer)
    fav_workout: Mapped[str | None] = mapped_column(String)
    workout_goal: Mapped[str | None] = mapped_column(String)
    workout_days: Mapped[int | None] = mapped_column(Integer)
    health_conditions: Mapped[list] = mapped_column(JSON, default=list)
    chronic_conditions: Mapped[list] = mapped_column(JSON, default=list)
    active_plan_id: Mapped[int | None] = mapped_column(Integer)
    last_login: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class HealthPlan(Base):
    __tablename__ = "health_plans"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    plan_name: Mapped[str] = mapped_column(String, default="Personal Health Plan")
    daily_plans: Mapped[list] = mapped_column(JSON)          # 7 serialized DayPlans
    generated_prompt: Mapped[str] = mapped_column(Text)
    raw_ai_response: Mapped[str] = mapped_column(Text)
    overall_goal: Mapped[str] = mapped_column(String)
    target_weight: Mapped[float | None] = mapped_column(Float)
    estimated_duration: Mapped[str] = mapped_column(String)
    progress_metrics: Mapped[list] = mapped_column(JSON, default=list)
    health_guidelines: Mapped[list] = mapped_column(JSON, default=list)
    safety_notes: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String, default="active", index=True)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    user_notes: Mapped[list] = mapped_column(JSON, default=list)
    rating: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class UserActivity(Base):
    __tablename__ = "user_activities"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    plan_id: Mapped[int | None] = mapped_column(Integer)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    meals_completed: Mapped[dict] = mapped_column(JSON, default=dict)
    exercises_completed: Mapped[list] = mapped_column(JSON, default=list)
    water_intake: Mapped[float] = mapped_column(Float, default=0)
    sleep_hours: Mapped[float] = mapped_column(Float, default=0)
    weight: Mapped[float | None] = mapped_column(Float)
    calories_consumed: Mapped[float | None] = mapped_column(Float)
    calories_burned: Mapped[float | None] = mapped_column(Float)
    energy_level: Mapped[int | None] = mapped_column(Integer)
    mood: Mapped[str | None] = mapped_column(String)
    daily_notes: Mapped[str | None] = mapped_column(Text)
    challenges: Mapped[list] = mapped_column(JSON, default=list)
    achievements: Mapped[list] = mapped_column(JSON, default=list)
    day_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completion_percentage: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class GenerationFailure(Base):
    __tablename__ = "generation_failures"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int]
    stage: Mapped[str]
    error_message: Mapped[str]
    raw_input: Mapped[str | None] = mapped_column(Text)
    raw_output: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ───────── session helper ────────────────────────────────────────────
async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    state: ConnectionState = request.app.state.db
    state = await ensure_connection(state)
    request.app.state.db = state
    async with state.sessionmaker() as session:
        yield session


def row_dict(row: Any) -> dict[str, Any]:
    """Column values of an ORM row, ready for `model_validate`."""
    return {c.key: getattr(row, c.key) for c in row.__table__.columns}
