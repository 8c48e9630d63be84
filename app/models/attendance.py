"""
Attendance record model — one check-in / check-out cycle.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text

from app.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (Index("ix_attendance_user_date", "user_id", "date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    # Not a foreign key: admin listings still show records of removed users
    user_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # dd/mm/yyyy
    check_in_time: str = Column(String(40), nullable=False)  # type: ignore[assignment]
    check_out_time: str | None = Column(String(40), nullable=True)  # type: ignore[assignment]
    hours_worked: float = Column(Float, nullable=False, default=0.0, server_default="0")  # type: ignore[assignment]
    method: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    check_in_photo: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    check_out_photo: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    @property
    def is_open(self) -> bool:
        return not self.check_out_time
