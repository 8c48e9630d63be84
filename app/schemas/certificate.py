"""Pydantic schemas for certificate issuance, listing and public verification."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.models.certificate import Certificate
from app.schemas.common import CamelModel

CertificateType = Literal["experience", "appreciation", "completion"]


class CertificateCreate(CamelModel):
    employee_id: int
    certificate_type: CertificateType | None = None
    duration: int = Field(ge=1, le=60)  # months
    custom_message: str | None = Field(default=None, max_length=2000)
    signature: str | None = Field(default=None, max_length=200)


class CertificateRead(CamelModel):
    id: int
    employee_id: int
    employee_name: str
    employee_username: str
    certificate_type: str
    duration: int
    custom_message: str = ""
    issue_date: datetime | None = None
    issued_by: str
    signature: str = ""
    verification_code: str
    store_name: str | None = None
    store_location: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_certificate(cls, cert: Certificate) -> CertificateRead:
        return cls(
            id=cert.id,
            employee_id=cert.employee_id,
            employee_name=cert.employee_name,
            employee_username=cert.employee_username,
            certificate_type=cert.certificate_type,
            duration=cert.duration,
            custom_message=cert.custom_message or "",
            issue_date=cert.issue_date,
            issued_by=cert.issued_by,
            signature=cert.signature or "",
            verification_code=cert.verification_code,
            store_name=cert.store_name,
            store_location=cert.store_location,
            created_at=cert.created_at,
            updated_at=cert.updated_at,
        )


class CertificateResponse(CamelModel):
    success: bool = True
    message: str | None = None
    certificate: CertificateRead


class CertificateListResponse(CamelModel):
    success: bool = True
    count: int
    certificates: list[CertificateRead]


# ── Public verification (no internal ids) ──────────────────────────
class CertificateSummary(CamelModel):
    employee_name: str
    certificate_type: str
    duration: int
    issue_date: datetime | None = None
    issued_by: str
    store_name: str | None = None


class CertificateVerification(CamelModel):
    success: bool = True
    verified: bool = True
    certificate: CertificateSummary
