"""
Health check — public, reports database connectivity.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.core.config import settings
from app.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    db_ok = False
    try:
        await db.execute(select(1))
        db_ok = True
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check DB failure: %s", e)

    return HealthResponse(
        status="ok" if db_ok else "degraded",
        db=db_ok,
        version=settings.VERSION,
    )
