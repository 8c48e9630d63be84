"""
Auth endpoints — self-registration (pending admin approval) and login.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.core.config import settings
from app.core.dates import today_display_date
from app.core.security import check_credential, create_access_token, get_password_hash
from app.models.user import (ROLE_EMPLOYEE, STATUS_PENDING, STATUS_REJECTED,
                             User)
from app.schemas.user import (LoginRequest, RegisteredUser, RegisterRequest,
                              RegisterResponse, UserView)

# Rate limiter, keyed by client IP. Limits are read from settings per request.
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(lambda: settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """Create an employee account that stays pending until an admin approves it."""
    logger.info("Register request received: %s", body.username)

    user = User(
        name=body.name,
        username=body.username,
        hashed_password=get_password_hash(body.password),
        join_date=today_display_date(),
        role=ROLE_EMPLOYEE,
        account_status=STATUS_PENDING,
    )
    db.add(user)
    # The unique index on username decides; no check-then-insert race
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        ) from None

    logger.info("Registered user %s (id %d), awaiting approval", user.username, user.id)
    return RegisterResponse(
        message="Registration successful! Your account is pending admin approval.",
        user=RegisteredUser(
            id=user.id,
            name=user.name,
            username=user.username,
            account_status=STATUS_PENDING,
        ),
    )


@router.post("/login", response_model=UserView)
@limiter.limit(lambda: settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> UserView:
    """Authenticate with username/password; only approved accounts get in."""
    result = await db.execute(select(User).where(User.username == body.username))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_INVALID_CREDENTIALS)

    valid, needs_rehash = check_credential(body.password, user.hashed_password)
    if not valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_INVALID_CREDENTIALS)

    if needs_rehash:
        user.hashed_password = get_password_hash(body.password)
        await db.commit()
        logger.info("Upgraded stored credential for %s", user.username)

    account_status = user.effective_status()
    if account_status == STATUS_PENDING:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Your account is pending admin approval. Please wait for approval.",
                "accountStatus": STATUS_PENDING,
            },
        )
    if account_status == STATUS_REJECTED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Your account registration was rejected. Please contact admin.",
                "accountStatus": STATUS_REJECTED,
            },
        )

    logger.info("Login successful for %s (role %s)", user.username, user.role)
    return UserView(
        id=user.id,
        name=user.name,
        username=user.username,
        store_location=user.store_location,
        join_date=user.join_date,
        role=user.role or ROLE_EMPLOYEE,
        account_status=account_status,
        assigned_store=user.assigned_store,
        access_token=create_access_token(user.id),
    )
