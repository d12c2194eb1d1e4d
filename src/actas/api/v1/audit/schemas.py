"""Schemas for audit log endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from actas.api.v1.impersonation.schemas import CamelModel


class AuditLogResponse(CamelModel):
    """Response schema for an impersonation audit entry."""

    id: str
    admin_id: str
    target_user_id: Optional[str] = None
    action: str
    route: str
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="details")
    created_at: datetime

    model_config = {**CamelModel.model_config, "from_attributes": True}


class AuditLogListResponse(CamelModel):
    """Response schema for paginated audit logs."""

    items: list[AuditLogResponse]
    total: int
    page: int
    per_page: int
    pages: int
