"""
User model — identity, credential, role, approval state and store assignment.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from app.db.base import Base

ROLE_EMPLOYEE = "employee"
ROLE_ADMIN = "admin"

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    username: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    # bcrypt hash, or plaintext for accounts that predate hashing
    hashed_password: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    store_location: str = Column(  # type: ignore[assignment]
        String(200),
        nullable=False,
        default="Blinkit Store",
        server_default="Blinkit Store",
    )
    join_date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # dd/mm/yyyy
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=ROLE_EMPLOYEE,
        server_default=ROLE_EMPLOYEE,
    )  # employee | admin
    # NULL on legacy rows; read through effective_status()
    account_status: str | None = Column(  # type: ignore[assignment]
        String(20),
        nullable=True,
        default=STATUS_PENDING,
    )  # pending | approved | rejected
    phone: str = Column(String(30), nullable=False, default="", server_default="")  # type: ignore[assignment]
    profile_photo: str = Column(Text, nullable=False, default="", server_default="")  # type: ignore[assignment]

    # Assigned store (all NULL when unassigned)
    store_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    store_address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    store_city: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    store_latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    store_longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    store_radius: float | None = Column(Float, nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def effective_status(self) -> str:
        """Stored status, with legacy rows (no status) counted as approved."""
        return self.account_status or STATUS_APPROVED

    @property
    def assigned_store(self) -> dict | None:
        if self.store_name is None:
            return None
        return {
            "name": self.store_name,
            "address": self.store_address or "",
            "city": self.store_city,
            "latitude": self.store_latitude,
            "longitude": self.store_longitude,
            "radius": self.store_radius if self.store_radius is not None else 100,
        }
