"""Pydantic schemas for attendance records, admin listings and dashboard stats."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.models.attendance import AttendanceRecord
from app.schemas.common import CamelModel
from app.schemas.user import UserRead


# ── Check-in / check-out ────────────────────────────────────────────
class AttendanceEvent(CamelModel):
    """Body of ``POST /attendance``.

    With ``id`` it is a check-out of that record, without it a check-in.
    Hours are computed by the client and stored as given.
    """

    id: int | None = None
    user_id: int | None = None
    date: str | None = Field(default=None, max_length=10)
    check_in_time: str | None = Field(default=None, max_length=40)
    check_out_time: str | None = Field(default=None, max_length=40)
    hours_worked: float | None = Field(default=None, ge=0)
    method: str | None = Field(default=None, max_length=50)
    status: str | None = Field(default=None, max_length=50)
    check_in_photo: str | None = None
    check_out_photo: str | None = None


class AttendanceRead(CamelModel):
    id: int
    user_id: int
    date: str
    check_in_time: str
    check_out_time: str | None = None
    hours_worked: float = 0.0
    method: str
    status: str
    check_in_photo: str | None = None
    check_out_photo: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: AttendanceRecord) -> AttendanceRead:
        return cls(
            id=record.id,
            user_id=record.user_id,
            date=record.date,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            hours_worked=record.hours_worked or 0.0,
            method=record.method,
            status=record.status,
            check_in_photo=record.check_in_photo,
            check_out_photo=record.check_out_photo,
            created_at=record.created_at,
        )


# ── Admin listings ──────────────────────────────────────────────────
class AdminAttendanceRead(AttendanceRead):
    user_name: str
    user_username: str


class AdminAttendanceListResponse(CamelModel):
    success: bool = True
    count: int
    records: list[AdminAttendanceRead]


class UserAttendanceResponse(CamelModel):
    success: bool = True
    user: UserRead
    records: list[AttendanceRead]


# ── Dashboard ───────────────────────────────────────────────────────
class AdminStats(CamelModel):
    total_employees: int
    checked_in_today: int
    currently_checked_in: int
    total_hours_today: float
    date: str


class AdminStatsResponse(CamelModel):
    success: bool = True
    stats: AdminStats
