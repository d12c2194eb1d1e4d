"""Audit log routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from actas.api.dependencies import get_db, require_admin
from actas.domain.services.audit_service import AuditService

from .schemas import AuditLogListResponse, AuditLogResponse

router = APIRouter(prefix="/audit", tags=["Audit Logs"])


@router.get("/impersonation", response_model=AuditLogListResponse)
def list_impersonation_audit_logs(
    db: Annotated[Session, Depends(get_db)],
    current_admin: Annotated[str, Depends(require_admin)],
    page: int = Query(1, ge=1, description="Page"),
    per_page: int = Query(50, ge=1, le=100, alias="perPage", description="Items per page"),
    filter_admin_id: Optional[str] = Query(None, alias="adminId", description="Filter by admin"),
    target_user_id: Optional[str] = Query(None, alias="targetUserId", description="Filter by impersonated user"),
    action: Optional[str] = Query(None, pattern="^IMPERSONATE_(START|STOP)$"),
) -> AuditLogListResponse:
    """List impersonation audit entries, newest first.

    Requires admin privileges.
    """
    result = AuditService(db).list_entries(
        page=page,
        per_page=per_page,
        admin_id=filter_admin_id,
        target_user_id=target_user_id,
        action=action,
    )

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(row) for row in result.items],
        total=result.total,
        page=page,
        per_page=per_page,
        pages=(result.total + per_page - 1) // per_page if result.total > 0 else 0,
    )
