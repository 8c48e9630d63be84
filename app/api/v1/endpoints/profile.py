"""
Profile endpoints — an employee's own name, phone and photo.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.models.user import User
from app.schemas.user import (ProfilePhotoCleared, ProfilePhotoUpdate,
                              ProfileRead, ProfileUpdate)

router = APIRouter(prefix="/profile", tags=["profile"])
logger = logging.getLogger(__name__)


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/{user_id}", response_model=ProfileRead)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProfileRead:
    return ProfileRead.from_user(await _get_user_or_404(db, user_id))


@router.put("/{user_id}", response_model=ProfileRead)
async def update_profile(
    user_id: int,
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProfileRead:
    """Partial update: a blank name is ignored, any supplied phone is stored."""
    user = await _get_user_or_404(db, user_id)

    if body.name and body.name.strip():
        user.name = body.name.strip()
    if body.phone is not None:
        user.phone = body.phone

    await db.commit()
    logger.info("Updated profile of user %d", user_id)
    return ProfileRead.from_user(user)


@router.put("/{user_id}/photo", response_model=ProfileRead)
async def set_profile_photo(
    user_id: int,
    body: ProfilePhotoUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProfileRead:
    user = await _get_user_or_404(db, user_id)
    user.profile_photo = body.profile_photo
    await db.commit()
    return ProfileRead.from_user(user)


@router.delete("/{user_id}/photo", response_model=ProfilePhotoCleared)
async def clear_profile_photo(
    user_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProfilePhotoCleared:
    user = await _get_user_or_404(db, user_id)
    user.profile_photo = ""
    await db.commit()
    return ProfilePhotoCleared(message="Profile photo deleted")
