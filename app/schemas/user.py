"""Pydantic schemas for registration, login, profiles and admin user views."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.models.user import User
from app.schemas.common import CamelModel


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty")
    return v


# ── Store ───────────────────────────────────────────────────────────
class AssignedStore(CamelModel):
    name: str = Field(max_length=200)
    address: str = Field(default="", max_length=500)
    city: str = Field(max_length=100)
    latitude: float
    longitude: float
    radius: float = 100

    @field_validator("name", "city")
    @classmethod
    def _names(cls, v: str) -> str:
        return _not_blank(v)


# ── Registration / login ────────────────────────────────────────────
class RegisterRequest(CamelModel):
    name: str = Field(max_length=200)
    username: str = Field(max_length=320)
    password: str = Field(min_length=1)

    @field_validator("name", "username")
    @classmethod
    def _strip(cls, v: str) -> str:
        return _not_blank(v)


class RegisteredUser(CamelModel):
    id: int
    name: str
    username: str
    account_status: str


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    pending: bool = True
    user: RegisteredUser


class LoginRequest(CamelModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return v.strip()


class UserView(CamelModel):
    """What a successful login returns. Never carries the credential."""

    id: int
    name: str
    username: str
    store_location: str
    join_date: str
    role: str
    account_status: str
    assigned_store: AssignedStore | None = None
    access_token: str
    token_type: str = "bearer"


# ── Admin views ─────────────────────────────────────────────────────
class UserRead(CamelModel):
    id: int
    name: str
    username: str
    store_location: str
    join_date: str
    role: str
    account_status: str
    assigned_store: AssignedStore | None = None
    phone: str = ""
    profile_photo: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> UserRead:
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            store_location=user.store_location,
            join_date=user.join_date,
            role=user.role,
            account_status=user.effective_status(),
            assigned_store=user.assigned_store,
            phone=user.phone or "",
            profile_photo=user.profile_photo or "",
            created_at=user.created_at,
        )


class EmployeeListResponse(CamelModel):
    success: bool = True
    count: int
    employees: list[UserRead]


class UserListResponse(CamelModel):
    success: bool = True
    count: int
    users: list[UserRead]


class UserResponse(CamelModel):
    success: bool = True
    message: str
    user: UserRead


class UserSummary(CamelModel):
    id: int
    name: str
    username: str


class UserStatusSummary(UserSummary):
    account_status: str


class UserStatusResponse(CamelModel):
    success: bool = True
    message: str
    user: UserStatusSummary


class UserSummaryResponse(CamelModel):
    success: bool = True
    message: str
    user: UserSummary


class AssignStoreRequest(CamelModel):
    assigned_store: AssignedStore


class ResetPasswordRequest(CamelModel):
    new_password: str | None = None


# ── Profile ─────────────────────────────────────────────────────────
class ProfileRead(CamelModel):
    id: int
    name: str
    username: str
    store_location: str
    join_date: str
    profile_photo: str = ""
    phone: str = ""

    @classmethod
    def from_user(cls, user: User) -> ProfileRead:
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            store_location=user.store_location,
            join_date=user.join_date,
            profile_photo=user.profile_photo or "",
            phone=user.phone or "",
        )


class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=30)


class ProfilePhotoUpdate(CamelModel):
    profile_photo: str


class ProfilePhotoCleared(CamelModel):
    success: bool = True
    message: str
    profile_photo: str = ""
