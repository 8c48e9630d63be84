"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import admin, attendance, auth, certificates, health, profile

api_router = APIRouter()

# Registration & login
api_router.include_router(auth.router)

# Employee-facing attendance log and profile
api_router.include_router(attendance.router)
api_router.include_router(profile.router)

# Admin dashboard, approvals, user management
api_router.include_router(admin.router)

# Certificates (admin issuance, public verification, self-service)
api_router.include_router(certificates.router)

# Liveness
api_router.include_router(health.router)
