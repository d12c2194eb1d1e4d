"""Main router for API v1.

This router combines all v1 endpoints under /api/v1 prefix.
"""

from fastapi import APIRouter

from actas.api.v1.admin_users.routes import router as admin_users_router
from actas.api.v1.audit.routes import router as audit_router
from actas.api.v1.impersonation.routes import router as impersonation_router

# Create main v1 router
api_router = APIRouter()

api_router.include_router(
    impersonation_router,
    prefix="/admin/impersonate",
    tags=["Impersonation"],
)

api_router.include_router(
    admin_users_router,
    prefix="/admin/users",
    tags=["Admin Users"],
)

# Audit endpoints (admin only)
api_router.include_router(audit_router, prefix="/admin")
