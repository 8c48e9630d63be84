"""
Admin endpoints — user management, approval workflow, attendance oversight
and the dashboard statistics.

Every route here requires an admin caller (see ``require_admin``).
"""

from __future__ import annotations

import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin
from app.core.config import settings
from app.core.dates import today_display_date
from app.core.security import get_password_hash
from app.models.attendance import AttendanceRecord
from app.models.user import (ROLE_ADMIN, ROLE_EMPLOYEE, STATUS_APPROVED,
                             STATUS_PENDING, STATUS_REJECTED, User)
from app.schemas.attendance import (AdminAttendanceListResponse,
                                    AdminAttendanceRead, AdminStats,
                                    AdminStatsResponse, AttendanceRead,
                                    UserAttendanceResponse)
from app.schemas.common import MessageResponse
from app.schemas.user import (AssignStoreRequest, EmployeeListResponse,
                              ResetPasswordRequest, UserListResponse,
                              UserRead, UserResponse, UserStatusResponse,
                              UserStatusSummary, UserSummary,
                              UserSummaryResponse)

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)

ATTENDANCE_LIST_LIMIT = 500
USER_ATTENDANCE_LIMIT = 100


# ── Helpers ─────────────────────────────────────────────────────────
def _round_tenths(value: float) -> float:
    """Round to one decimal place, halves going up (2.25 -> 2.3)."""
    return math.floor(value * 10 + 0.5) / 10


def _summarise_day(records: list[AttendanceRecord]) -> tuple[int, int, float]:
    """Return (distinct users, open records, total hours) for one day's records."""
    checked_in = len({r.user_id for r in records})
    still_in = sum(1 for r in records if r.is_open)
    total_hours = _round_tenths(sum(r.hours_worked or 0.0 for r in records))
    return checked_in, still_in, total_hours


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ── User listings ───────────────────────────────────────────────────
@router.get("/employees", response_model=EmployeeListResponse)
async def list_employees(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> EmployeeListResponse:
    result = await db.execute(
        select(User).where(User.role == ROLE_EMPLOYEE).order_by(User.name, User.id)
    )
    employees = [UserRead.from_user(u) for u in result.scalars().all()]
    return EmployeeListResponse(count=len(employees), employees=employees)


@router.get("/employees/all", response_model=UserListResponse)
async def list_all_users(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserListResponse:
    """Every account, admins first ("admin" < "employee"), then by name."""
    result = await db.execute(select(User).order_by(User.role, User.name, User.id))
    users = [UserRead.from_user(u) for u in result.scalars().all()]
    return UserListResponse(count=len(users), users=users)


@router.get("/pending-users", response_model=UserListResponse)
async def list_pending_users(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserListResponse:
    """Registrations awaiting review, newest first."""
    result = await db.execute(
        select(User)
        .where(User.account_status == STATUS_PENDING)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    users = [UserRead.from_user(u) for u in result.scalars().all()]
    return UserListResponse(count=len(users), users=users)


# ── Attendance oversight ────────────────────────────────────────────
@router.get("/attendance", response_model=AdminAttendanceListResponse)
async def list_attendance(
    date_str: str | None = Query(default=None, alias="date"),
    user_id: int | None = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AdminAttendanceListResponse:
    """Most recent records first, each tagged with its owner's name."""
    query = select(AttendanceRecord)
    if date_str:
        query = query.where(AttendanceRecord.date == date_str)
    if user_id is not None:
        query = query.where(AttendanceRecord.user_id == user_id)
    query = query.order_by(
        AttendanceRecord.created_at.desc(), AttendanceRecord.id.desc()
    ).limit(ATTENDANCE_LIST_LIMIT)
    records = list((await db.execute(query)).scalars().all())

    # One lookup for all owners instead of one per record
    owners: dict[int, tuple[str, str]] = {}
    user_ids = {r.user_id for r in records}
    if user_ids:
        result = await db.execute(
            select(User.id, User.name, User.username).where(User.id.in_(user_ids))
        )
        owners = {uid: (name, username) for uid, name, username in result.all()}

    enriched = []
    for record in records:
        name, username = owners.get(record.user_id, ("Unknown", "unknown"))
        enriched.append(
            AdminAttendanceRead(
                **AttendanceRead.from_record(record).model_dump(),
                user_name=name,
                user_username=username,
            )
        )
    return AdminAttendanceListResponse(count=len(enriched), records=enriched)


@router.get("/attendance/{user_id}", response_model=UserAttendanceResponse)
async def get_user_attendance(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserAttendanceResponse:
    user = await _get_user_or_404(db, user_id)
    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.user_id == user_id)
        .order_by(AttendanceRecord.created_at.desc(), AttendanceRecord.id.desc())
        .limit(USER_ATTENDANCE_LIMIT)
    )
    return UserAttendanceResponse(
        user=UserRead.from_user(user),
        records=[AttendanceRead.from_record(r) for r in result.scalars().all()],
    )


@router.delete("/attendance/{record_id}", response_model=MessageResponse)
async def delete_attendance_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> MessageResponse:
    record = await db.get(AttendanceRecord, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Attendance record not found")

    await db.delete(record)
    await db.commit()
    logger.warning("Admin %d deleted attendance record %d", admin.id, record_id)
    return MessageResponse(message="Attendance record deleted successfully")


# ── Dashboard ───────────────────────────────────────────────────────
@router.get("/stats", response_model=AdminStatsResponse)
async def admin_stats(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AdminStatsResponse:
    """Today's headcount and hours.

    Records are matched on their ``dd/mm/yyyy`` date string, so "today"
    must come from the same formatter used when records are written.
    """
    today = today_display_date()

    emp_result = await db.execute(
        select(func.count(User.id)).where(User.role == ROLE_EMPLOYEE)
    )
    total_employees = emp_result.scalar() or 0

    att_result = await db.execute(
        select(AttendanceRecord).where(AttendanceRecord.date == today)
    )
    checked_in, still_in, total_hours = _summarise_day(list(att_result.scalars().all()))

    return AdminStatsResponse(
        stats=AdminStats(
            total_employees=total_employees,
            checked_in_today=checked_in,
            currently_checked_in=still_in,
            total_hours_today=total_hours,
            date=today,
        )
    )


# ── Store assignment ────────────────────────────────────────────────
@router.put("/employees/{user_id}/assign-store", response_model=UserResponse)
async def assign_store(
    user_id: int,
    body: AssignStoreRequest,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    user = await _get_user_or_404(db, user_id)

    store = body.assigned_store
    user.store_name = store.name
    user.store_address = store.address
    user.store_city = store.city
    user.store_latitude = store.latitude
    user.store_longitude = store.longitude
    user.store_radius = store.radius

    await db.commit()
    logger.info("Assigned store %s (%s) to user %d", store.name, store.city, user_id)
    return UserResponse(message="Store assigned successfully", user=UserRead.from_user(user))


# ── Employee removal ────────────────────────────────────────────────
@router.delete("/employees/{user_id}", response_model=MessageResponse)
async def delete_employee(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> MessageResponse:
    """Hard-delete an employee together with their attendance history."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")

    user = await _get_user_or_404(db, user_id)
    if user.role == ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Cannot delete admin users")

    # Records and user go in the same transaction
    result = await db.execute(
        sa_delete(AttendanceRecord).where(AttendanceRecord.user_id == user_id)
    )
    await db.delete(user)
    await db.commit()

    logger.warning(
        "Admin %d deleted employee %d (%s) and %d attendance records",
        admin.id,
        user_id,
        user.username,
        result.rowcount,
    )
    return MessageResponse(
        message="Employee and their attendance records deleted successfully"
    )


# ── Approval workflow ───────────────────────────────────────────────
async def _set_account_status(db: AsyncSession, user_id: int, target: str) -> UserStatusResponse:
    user = await _get_user_or_404(db, user_id)
    if user.effective_status() == target:
        raise HTTPException(status_code=400, detail=f"User is already {target}")

    user.account_status = target
    await db.commit()
    logger.info("User %d (%s) is now %s", user_id, user.username, target)
    return UserStatusResponse(
        message=f"User {user.name} has been {target}",
        user=UserStatusSummary(
            id=user.id,
            name=user.name,
            username=user.username,
            account_status=target,
        ),
    )


@router.put("/users/{user_id}/approve", response_model=UserStatusResponse)
async def approve_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserStatusResponse:
    return await _set_account_status(db, user_id, STATUS_APPROVED)


@router.put("/users/{user_id}/reject", response_model=UserStatusResponse)
async def reject_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserStatusResponse:
    return await _set_account_status(db, user_id, STATUS_REJECTED)


@router.put("/users/{user_id}/reset-password", response_model=UserSummaryResponse)
async def reset_password(
    user_id: int,
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserSummaryResponse:
    min_length = settings.MIN_PASSWORD_LENGTH
    if not body.new_password or len(body.new_password) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {min_length} characters",
        )

    user = await _get_user_or_404(db, user_id)
    user.hashed_password = get_password_hash(body.new_password)
    await db.commit()
    logger.info("Password reset for user %d", user_id)
    return UserSummaryResponse(
        message=f"Password reset successfully for {user.name}",
        user=UserSummary(id=user.id, name=user.name, username=user.username),
    )
