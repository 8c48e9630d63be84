"""
First-run data: the default admin account and the legacy status backfill.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dates import today_display_date
from app.core.security import get_password_hash
from app.models.user import ROLE_ADMIN, STATUS_APPROVED, User

logger = logging.getLogger(__name__)


async def seed_admin(session: AsyncSession) -> User | None:
    """Create the configured admin if missing. Returns the new user, if any."""
    result = await session.execute(
        select(User).where(User.username == settings.FIRST_ADMIN_USERNAME)
    )
    if result.scalar_one_or_none() is not None:
        logger.info("Admin user already exists: %s", settings.FIRST_ADMIN_USERNAME)
        return None

    admin = User(
        name=settings.FIRST_ADMIN_NAME,
        username=settings.FIRST_ADMIN_USERNAME,
        hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
        store_location="All Stores",
        join_date=today_display_date(),
        role=ROLE_ADMIN,
        account_status=STATUS_APPROVED,
        store_name="Blinkit HQ",
        store_address="Gurugram, Haryana",
        store_city="Gurugram",
        store_latitude=28.4595,
        store_longitude=77.0266,
        store_radius=500,
    )
    session.add(admin)
    await session.commit()
    logger.info(
        "Default admin created: %s (password: <redacted>)",
        settings.FIRST_ADMIN_USERNAME,
    )
    return admin


async def backfill_account_status(session: AsyncSession) -> int:
    """Mark accounts that predate the approval workflow as approved.

    Login already treats a missing status as approved; this makes the
    stored value agree so admin listings and filters see the same thing.
    """
    result = await session.execute(
        update(User)
        .where(User.account_status.is_(None))
        .values(account_status=STATUS_APPROVED)
    )
    await session.commit()
    if result.rowcount:
        logger.info("Backfilled account status on %d legacy users", result.rowcount)
    return result.rowcount or 0
