"""Schemas for the admin user listing."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from actas.api.v1.impersonation.schemas import CamelModel


class AdminUserResponse(CamelModel):
    """User as shown to admins picking an impersonation target."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    is_admin: bool = False
    disabled: bool = False
    custom_claims: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class Pagination(CamelModel):
    per_page: int
    has_more: bool


class AdminUserListResponse(CamelModel):
    """Response for GET /admin/users."""

    ok: bool = True
    users: list[AdminUserResponse]
    pagination: Pagination
