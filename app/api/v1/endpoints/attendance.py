"""
Attendance endpoints — employee-facing check-in / check-out log.

Check-in and check-out share ``POST /attendance``: a body carrying a
record ``id`` closes that record, a body without one opens a new record.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.models.attendance import AttendanceRecord
from app.schemas.attendance import AttendanceEvent, AttendanceRead
from app.schemas.common import MessageResponse

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)

_CHECKOUT_FIELDS = ("check_out_time", "hours_worked", "check_out_photo", "status")
_CHECKIN_REQUIRED = ("user_id", "date", "check_in_time", "method", "status")


@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    user_id: int | None = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db),
) -> list[AttendanceRead]:
    if user_id is None:
        raise HTTPException(status_code=400, detail="User ID is required")

    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.user_id == user_id)
        .order_by(AttendanceRecord.id)
    )
    return [AttendanceRead.from_record(r) for r in result.scalars().all()]


async def _check_out(body: AttendanceEvent, db: AsyncSession) -> AttendanceRecord:
    record = await db.get(AttendanceRecord, body.id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")

    supplied = body.model_dump(include=set(_CHECKOUT_FIELDS), exclude_unset=True)
    for field, value in supplied.items():
        if field == "status" and value is None:
            continue
        if field == "hours_worked" and value is None:
            value = 0.0
        setattr(record, field, value)

    await db.commit()
    logger.info("Check-out recorded on attendance %d (user %d)", record.id, record.user_id)
    return record


async def _check_in(body: AttendanceEvent, db: AsyncSession) -> AttendanceRecord:
    missing = [name for name in _CHECKIN_REQUIRED if getattr(body, name) in (None, "")]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}",
        )

    record = AttendanceRecord(
        user_id=body.user_id,
        date=body.date,
        check_in_time=body.check_in_time,
        check_out_time=body.check_out_time,
        hours_worked=body.hours_worked or 0.0,
        method=body.method,
        status=body.status,
        check_in_photo=body.check_in_photo,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info("Check-in recorded for user %d on %s", record.user_id, record.date)
    return record


@router.post("", response_model=AttendanceRead)
async def record_attendance(
    body: AttendanceEvent,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AttendanceRead:
    """Check in (no ``id``, 201) or check out an existing record (``id``, 200)."""
    if body.id is not None:
        record = await _check_out(body, db)
    else:
        record = await _check_in(body, db)
        response.status_code = status.HTTP_201_CREATED
    return AttendanceRead.from_record(record)


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_attendance(
    record_id: int,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete one record. Unknown ids are ignored."""
    record = await db.get(AttendanceRecord, record_id)
    if record is not None:
        await db.delete(record)
        await db.commit()
        logger.info("Deleted attendance %d", record_id)
    return MessageResponse(message="Record deleted")
