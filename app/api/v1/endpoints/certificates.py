"""
Certificate endpoints.

- ``/admin/certificates/...``: issue, list and revoke (admin only).
- ``/admin/certificates/verify/{code}``: public authenticity check.
- ``/certificates/...``: an employee's own certificates, scoped to the caller.
"""

from __future__ import annotations

import logging
import secrets
import string
import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin, require_caller_id
from app.core.config import settings
from app.models.certificate import Certificate
from app.models.user import User
from app.schemas.certificate import (CertificateCreate,
                                     CertificateListResponse,
                                     CertificateRead, CertificateResponse,
                                     CertificateSummary,
                                     CertificateVerification)
from app.schemas.common import MessageResponse

router = APIRouter(tags=["certificates"])
logger = logging.getLogger(__name__)

CERTIFICATE_LIST_LIMIT = 100
_CODE_ATTEMPTS = 3
_BASE36 = string.digits + string.ascii_uppercase


# ── Verification codes ──────────────────────────────────────────────
def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_verification_code(now_ms: int | None = None) -> str:
    """``<PREFIX>-<base36 ms timestamp>-<6 random base36 chars>``, uppercase."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{settings.CERTIFICATE_CODE_PREFIX}-{_to_base36(now_ms)}-{suffix}"


def _list_response(certs: list[Certificate]) -> CertificateListResponse:
    items = [CertificateRead.from_certificate(c) for c in certs]
    return CertificateListResponse(count=len(items), certificates=items)


# ── Admin: issue / list / revoke ────────────────────────────────────
@router.post("/admin/certificates", response_model=CertificateResponse, status_code=201)
async def issue_certificate(
    body: CertificateCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Issue a certificate; employee and store details are frozen at issue time."""
    employee = await db.get(User, body.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    admin_id = admin.id
    fields = dict(
        employee_id=employee.id,
        employee_name=employee.name,
        employee_username=employee.username,
        certificate_type=body.certificate_type or "experience",
        duration=body.duration,
        custom_message=body.custom_message or "",
        issued_by=admin.name,
        signature=body.signature or admin.name,
        store_name=employee.store_name or settings.DEFAULT_STORE_NAME,
        store_location=employee.store_city or settings.DEFAULT_STORE_LOCATION,
    )

    # The unique index on verification_code rejects a colliding code
    for attempt in range(1, _CODE_ATTEMPTS + 1):
        certificate = Certificate(verification_code=generate_verification_code(), **fields)
        db.add(certificate)
        try:
            await db.commit()
            break
        except IntegrityError:
            await db.rollback()
            if attempt == _CODE_ATTEMPTS:
                raise
            logger.warning("Verification code collision, regenerating (attempt %d)", attempt)
    await db.refresh(certificate)

    logger.info(
        "Admin %d issued %s certificate %s to user %d",
        admin_id,
        certificate.certificate_type,
        certificate.verification_code,
        certificate.employee_id,
    )
    return CertificateResponse(
        message="Certificate generated successfully",
        certificate=CertificateRead.from_certificate(certificate),
    )


@router.get("/admin/certificates", response_model=CertificateListResponse)
async def list_certificates(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> CertificateListResponse:
    result = await db.execute(
        select(Certificate)
        .order_by(Certificate.created_at.desc(), Certificate.id.desc())
        .limit(CERTIFICATE_LIST_LIMIT)
    )
    return _list_response(list(result.scalars().all()))


@router.get(
    "/admin/certificates/employee/{employee_id}",
    response_model=CertificateListResponse,
)
async def list_employee_certificates(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> CertificateListResponse:
    result = await db.execute(
        select(Certificate)
        .where(Certificate.employee_id == employee_id)
        .order_by(Certificate.created_at.desc(), Certificate.id.desc())
    )
    return _list_response(list(result.scalars().all()))


@router.delete("/admin/certificates/{certificate_id}", response_model=MessageResponse)
async def revoke_certificate(
    certificate_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> MessageResponse:
    certificate = await db.get(Certificate, certificate_id)
    if certificate is None:
        raise HTTPException(status_code=404, detail="Certificate not found")

    await db.delete(certificate)
    await db.commit()
    logger.warning(
        "Admin %d revoked certificate %s", admin.id, certificate.verification_code
    )
    return MessageResponse(message="Certificate revoked successfully")


# ── Public verification ─────────────────────────────────────────────
@router.get(
    "/admin/certificates/verify/{code}",
    response_model=CertificateVerification,
)
async def verify_certificate(
    code: str,
    db: AsyncSession = Depends(get_db),
) -> CertificateVerification:
    """Confirm a certificate is genuine without exposing internal ids."""
    result = await db.execute(
        select(Certificate).where(Certificate.verification_code == code.strip())
    )
    certificate = result.scalar_one_or_none()
    if certificate is None:
        raise HTTPException(
            status_code=404,
            detail="Certificate not found or invalid verification code",
        )

    return CertificateVerification(
        certificate=CertificateSummary(
            employee_name=certificate.employee_name,
            certificate_type=certificate.certificate_type,
            duration=certificate.duration,
            issue_date=certificate.issue_date,
            issued_by=certificate.issued_by,
            store_name=certificate.store_name,
        )
    )


# ── Employee self-service ───────────────────────────────────────────
@router.get("/certificates", response_model=CertificateListResponse)
async def list_own_certificates(
    caller_id: int = Depends(require_caller_id),
    db: AsyncSession = Depends(get_db),
) -> CertificateListResponse:
    result = await db.execute(
        select(Certificate)
        .where(Certificate.employee_id == caller_id)
        .order_by(Certificate.created_at.desc(), Certificate.id.desc())
    )
    return _list_response(list(result.scalars().all()))


@router.get("/certificates/{certificate_id}", response_model=CertificateResponse)
async def get_own_certificate(
    certificate_id: int,
    caller_id: int = Depends(require_caller_id),
    db: AsyncSession = Depends(get_db),
) -> CertificateResponse:
    result = await db.execute(
        select(Certificate).where(
            Certificate.id == certificate_id,
            Certificate.employee_id == caller_id,
        )
    )
    certificate = result.scalar_one_or_none()
    if certificate is None:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return CertificateResponse(certificate=CertificateRead.from_certificate(certificate))
