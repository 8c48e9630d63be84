"""
FastAPI dependencies — database session, caller identity and admin guard.

The caller is identified per request, never through shared state:
a bearer access token (issued at login) wins, otherwise the legacy
``X-User-Id`` header is used when ``ALLOW_HEADER_IDENTITY`` is on.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import decode_access_token
from app.db.session import async_session_factory
from app.models.user import ROLE_ADMIN, User

# auto_error=False so header-only clients are not rejected here
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Caller identity ─────────────────────────────────────────────────
async def get_caller_id(
    token: Optional[str] = Depends(oauth2_scheme),
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> int | None:
    """Resolve the caller's user id, or ``None`` if none was supplied."""
    if token:
        payload = decode_access_token(token)
        if payload is None or payload.get("sub") is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return int(payload["sub"])

    if not settings.ALLOW_HEADER_IDENTITY or not x_user_id:
        return None
    try:
        return int(x_user_id.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID",
        ) from None


async def require_caller_id(caller_id: int | None = Depends(get_caller_id)) -> int:
    if caller_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID required",
        )
    return caller_id


async def require_admin(
    caller_id: int = Depends(require_caller_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Only allow callers that resolve to an admin user."""
    user = await db.get(User, caller_id)
    if user is None or user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
