"""
Certificate model — issued experience / appreciation / completion letters.

Employee and store details are copied in at issue time so a certificate
stays verifiable after the employee record changes or disappears.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.db.base import Base

CERTIFICATE_TYPES = ("experience", "appreciation", "completion")


class Certificate(Base):
    __tablename__ = "certificates"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    employee_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    employee_username: str = Column(String(320), nullable=False)  # type: ignore[assignment]
    certificate_type: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="experience",
        server_default="experience",
    )  # experience | appreciation | completion
    duration: int = Column(Integer, nullable=False)  # type: ignore[assignment]  # months, 1-60
    custom_message: str = Column(Text, nullable=False, default="", server_default="")  # type: ignore[assignment]
    issue_date: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    issued_by: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    signature: str = Column(String(200), nullable=False, default="", server_default="")  # type: ignore[assignment]
    verification_code: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    store_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    store_location: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
