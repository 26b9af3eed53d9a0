"""
scripts/check_db.py
────────────────────────────────────────────────────────────────────────
Smoke-test the database configured in DATABASE_URL / `.env`:

    python -m scripts.check_db                  # connect + ping
    python -m scripts.check_db --create-tables  # also create missing tables
    python -m scripts.check_db --user 12        # show that user's plan history
"""
from __future__ import annotations

import asyncio
import sys
from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import func, select

from config import settings
from services import db
from services.repository import SqlPlanStore


async def _report_user(state: db.ConnectionState, user_id: int) -> None:
    async with state.sessionmaker() as session:
        store = SqlPlanStore(session)
        profile = await store.get_profile(user_id)
        if profile is None:
            print(f"· user {user_id} not found")
            return
        total = await store.count_plans(user_id)
        active = await store.get_active_plan(user_id)
        print(f"· {profile.email}: {total} plan(s), active={active.id if active else None}")


async def _async_main() -> int:
    ap = ArgumentParser()
    ap.add_argument("--create-tables", action="store_true")
    ap.add_argument("--user", type=int, help="print plan history for this user-id")
    args = ap.parse_args()

    state = await db.connect(
        settings.database_url,
        retries=settings.db_connect_retries,
        create_tables=args.create_tables,
    )
    if not state.connected:
        print(f"✗ could not connect after {state.attempts} attempt(s): {state.last_error}")
        return 1

    try:
        print(f"✓ connected after {state.attempts} attempt(s)")
        async with state.sessionmaker() as session:
            for table in (db.User, db.HealthPlan, db.UserActivity):
                n = (await session.execute(select(func.count()).select_from(table))).scalar_one()
                print(f"  {table.__tablename__:<18} {n:>6} row(s)")
        if args.user:
            await _report_user(state, args.user)
    finally:
        await db.disconnect(state)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_async_main()))
