"""
services/repository.py
────────────────────────────────────────────────────────────────────────
SQLAlchemy-backed store used by the routers and by the plan pipeline.

Rows go out as pydantic models (`NormalizedProfile`, `PlanRecord`,
`ActivityEntry`); driver errors come back as the core error taxonomy:

* connection / timeout problems   → PersistenceUnavailable (503)
* integrity / bad data            → InvalidInput (400)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from sqlalchemy import func, select, update
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InvalidInput, PersistenceUnavailable
from core.metrics_calc import compute_bmi
from core.models.activity import ActivityEntry
from core.models.plan import PlanRecord
from core.models.profile import NormalizedProfile
from core.stats import ACTIVE_USER_DAYS, RECENT_ACTIVITY_DAYS, TOP_GOALS, PlatformCounts
from services.db import GenerationFailure, HealthPlan, User, UserActivity, row_dict

_LOG = logging.getLogger(__name__)

_PLAN_JSON = ("daily_plans", "progress_metrics", "user_notes")


@contextmanager
def _db_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (IntegrityError, DataError) as exc:
        raise InvalidInput(f"could not {action}: {exc.orig}") from exc
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        _LOG.error("database error while trying to %s: %s", action, exc)
        raise PersistenceUnavailable(f"database unavailable while trying to {action}") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            raise PersistenceUnavailable(f"connection lost while trying to {action}") from exc
        raise


def _profile_values(p: NormalizedProfile) -> dict:
    values = p.model_dump(exclude={"id"})
    try:
        values["bmi"] = compute_bmi(p.current_weight, p.current_height)
    except InvalidInput:
        values["bmi"] = None
    return values


def _plan_values(record: PlanRecord) -> dict:
    values = record.model_dump(exclude={"id", "created_at", *_PLAN_JSON})
    for name in _PLAN_JSON:
        values[name] = [item.model_dump(mode="json") for item in getattr(record, name)]
    return values


def _activity_values(entry: ActivityEntry) -> dict:
    values = entry.model_dump(exclude={"id", "meals_completed", "exercises_completed"})
    values["meals_completed"] = entry.meals_completed.model_dump()
    values["exercises_completed"] = [e.model_dump() for e in entry.exercises_completed]
    return values


class SqlPlanStore:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    # ───────────────────────── profiles ─────────────────────────
    async def find_profile(self, email: str) -> NormalizedProfile | None:
        with _db_errors("look up profile"):
            row = (
                await self._db.execute(select(User).where(User.email == email.lower()))
            ).scalar_one_or_none()
        return NormalizedProfile.model_validate(row_dict(row)) if row else None

    async def get_profile(self, user_id: int) -> NormalizedProfile | None:
        with _db_errors("load profile"):
            row = await self._db.get(User, user_id)
        return NormalizedProfile.model_validate(row_dict(row)) if row else None

    async def save_profile(self, profile: NormalizedProfile) -> NormalizedProfile:
        if not profile.email:
            raise InvalidInput("email is required to store a profile")
        with _db_errors("save profile"):
            row = await self._db.get(User, profile.id) if profile.id else None
            if row is None:
                row = User()
                self._db.add(row)
            for key, value in _profile_values(profile).items():
                setattr(row, key, value)
            row.last_login = datetime.now(timezone.utc)
            await self._db.commit()
            await self._db.refresh(row)
        return NormalizedProfile.model_validate(row_dict(row))

    # ───────────────────────── plans ────────────────────────────
    async def deactivate_active_plans(self, user_id: int) -> int:
        with _db_errors("pause active plans"):
            res = await self._db.execute(
                update(HealthPlan)
                .where(HealthPlan.user_id == user_id, HealthPlan.status == "active")
                .values(status="paused")
            )
            await self._db.commit()
        return res.rowcount or 0

    async def save_plan(self, record: PlanRecord) -> PlanRecord:
        with _db_errors("save plan"):
            row = HealthPlan(**_plan_values(record))
            self._db.add(row)
            await self._db.commit()
            await self._db.refresh(row)
        return PlanRecord.model_validate(row_dict(row))

    async def update_plan(self, record: PlanRecord) -> PlanRecord:
        with _db_errors("update plan"):
            row = await self._db.get(HealthPlan, record.id)
            if row is None:
                raise InvalidInput(f"plan {record.id} does not exist")
            for key, value in _plan_values(record).items():
                setattr(row, key, value)
            await self._db.commit()
            await self._db.refresh(row)
        return PlanRecord.model_validate(row_dict(row))

    async def set_active_plan(self, user_id: int, plan_id: int) -> None:
        with _db_errors("link active plan"):
            await self._db.execute(
                update(User).where(User.id == user_id).values(active_plan_id=plan_id)
            )
            await self._db.commit()

    async def get_plan(self, plan_id: int) -> PlanRecord | None:
        with _db_errors("load plan"):
            row = await self._db.get(HealthPlan, plan_id)
        return PlanRecord.model_validate(row_dict(row)) if row else None

    async def get_active_plan(self, user_id: int) -> PlanRecord | None:
        with _db_errors("load active plan"):
            row = (
                await self._db.execute(
                    select(HealthPlan)
                    .where(HealthPlan.user_id == user_id, HealthPlan.status == "active")
                    .order_by(HealthPlan.created_at.desc(), HealthPlan.id.desc())
                    .limit(1)
                )
            ).scalar_one_or_none()
        return PlanRecord.model_validate(row_dict(row)) if row else None

    async def list_plans(self, user_id: int, offset: int = 0, limit: int = 10) -> list[PlanRecord]:
        with _db_errors("list plans"):
            rows = (
                await self._db.execute(
                    select(HealthPlan)
                    .where(HealthPlan.user_id == user_id)
                    .order_by(HealthPlan.created_at.desc(), HealthPlan.id.desc())
                    .offset(offset)
                    .limit(limit)
                )
            ).scalars().all()
        return [PlanRecord.model_validate(row_dict(r)) for r in rows]

    async def count_plans(self, user_id: int, status: str | None = None) -> int:
        q = select(func.count()).select_from(HealthPlan).where(HealthPlan.user_id == user_id)
        if status:
            q = q.where(HealthPlan.status == status)
        with _db_errors("count plans"):
            return int((await self._db.execute(q)).scalar_one())

    async def record_generation_failure(
        self,
        user_id: int,
        stage: str,
        error: str,
        raw_input: str = "",
        raw_output: str = "",
    ) -> None:
        """Persist a generation failure for later debugging."""
        with _db_errors("record generation failure"):
            self._db.add(GenerationFailure(
                user_id=user_id,
                stage=stage,
                error_message=error,
                raw_input=raw_input,
                raw_output=raw_output,
            ))
            await self._db.commit()

    # ───────────────────────── activity ─────────────────────────
    async def find_activity(self, user_id: int, day: date) -> ActivityEntry | None:
        with _db_errors("look up activity"):
            row = (
                await self._db.execute(
                    select(UserActivity).where(
                        UserActivity.user_id == user_id, UserActivity.date == day
                    )
                )
            ).scalar_one_or_none()
        return ActivityEntry.model_validate(row_dict(row)) if row else None

    async def save_activity(self, entry: ActivityEntry) -> ActivityEntry:
        with _db_errors("save activity"):
            row = await self._db.get(UserActivity, entry.id) if entry.id else None
            if row is None:
                row = UserActivity()
                self._db.add(row)
            for key, value in _activity_values(entry).items():
                setattr(row, key, value)
            await self._db.commit()
            await self._db.refresh(row)
        return ActivityEntry.model_validate(row_dict(row))

    async def list_activities(self, user_id: int, start: date, end: date) -> list[ActivityEntry]:
        with _db_errors("list activities"):
            rows = (
                await self._db.execute(
                    select(UserActivity)
                    .where(
                        UserActivity.user_id == user_id,
                        UserActivity.date >= start,
                        UserActivity.date < end,
                    )
                    .order_by(UserActivity.date)
                )
            ).scalars().all()
        return [ActivityEntry.model_validate(row_dict(r)) for r in rows]

    async def recent_activities(self, user_id: int, limit: int = 30) -> list[ActivityEntry]:
        """Newest entries first."""
        with _db_errors("list recent activities"):
            rows = (
                await self._db.execute(
                    select(UserActivity)
                    .where(UserActivity.user_id == user_id)
                    .order_by(UserActivity.date.desc())
                    .limit(limit)
                )
            ).scalars().all()
        return [ActivityEntry.model_validate(row_dict(r)) for r in rows]

    # ───────────────────────── platform stats ───────────────────
    async def platform_counts(self, now: datetime | None = None) -> PlatformCounts:
        now = now or datetime.now(timezone.utc)
        active_since = now - timedelta(days=ACTIVE_USER_DAYS)
        recent_since = now - timedelta(days=RECENT_ACTIVITY_DAYS)

        def count(table, *where):
            return select(func.count()).select_from(table).where(*where)

        with _db_errors("collect platform stats"):
            total_users = (await self._db.execute(count(User))).scalar_one()
            active_users = (
                await self._db.execute(count(User, User.last_login >= active_since))
            ).scalar_one()
            by_status = dict(
                (
                    await self._db.execute(
                        select(HealthPlan.status, func.count()).group_by(HealthPlan.status)
                    )
                ).all()
            )
            avg_bmi, bmi_n = (
                await self._db.execute(
                    select(func.avg(User.bmi), func.count(User.bmi)).where(User.bmi.is_not(None))
                )
            ).one()
            goals = (
                await self._db.execute(
                    select(User.goal, func.count().label("n"))
                    .where(User.goal.is_not(None))
                    .group_by(User.goal)
                    .order_by(func.count().desc())
                    .limit(TOP_GOALS)
                )
            ).all()
            recent = (
                await self._db.execute(count(UserActivity, UserActivity.created_at >= recent_since))
            ).scalar_one()

        return PlatformCounts(
            total_users=int(total_users),
            active_users=int(active_users),
            total_plans=int(sum(by_status.values())),
            active_plans=int(by_status.get("active", 0)),
            completed_plans=int(by_status.get("completed", 0)),
            average_bmi=float(avg_bmi) if avg_bmi is not None else None,
            bmi_sample_size=int(bmi_n or 0),
            goal_counts=[(goal, int(n)) for goal, n in goals],
            recent_activity=int(recent),
        )
