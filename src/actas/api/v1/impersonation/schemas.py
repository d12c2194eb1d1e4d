"""Schemas for impersonation endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TargetUser(CamelModel):
    """User being impersonated."""

    id: str
    email: str


class ImpersonationStartRequest(CamelModel):
    """Request body to start impersonation (documentation only).

    The route also accepts form-encoded bodies with the same fields.
    """

    user_id: str
    redirect_to: Optional[str] = None
    return_to: Optional[str] = None


class ImpersonationStartResponse(CamelModel):
    """Response when impersonation starts."""

    ok: bool = True
    custom_token: str
    redirect_to: str
    target_user: TargetUser


class ImpersonationStatusResponse(CamelModel):
    """Current impersonation state carried by the cookies."""

    is_impersonating: bool
    admin_id: Optional[str] = None
    target_user: Optional[TargetUser] = None
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class ErrorResponse(BaseModel):
    """Structured failure body."""

    ok: bool = False
    error: str
    message: str
