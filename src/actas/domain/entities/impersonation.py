"""Impersonation domain entities."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Bump when a field is added to a cookie record. Older cookies still decode.
CURRENT_SCHEMA_VERSION = 1


class ImpersonationSession(BaseModel):
    """Who is impersonating and where to return them to (session cookie)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    v: int = Field(default=CURRENT_SCHEMA_VERSION, ge=1, description="Schema version")
    admin_id: str = Field(..., min_length=1, description="Admin driving the session")
    access_token: str = Field(..., description="Admin credential material or placeholder")
    refresh_token: str = Field(default="", description="Admin refresh material or placeholder")
    return_to: Optional[str] = Field(None, description="Sanitized path restored on exit")


class ImpersonationTarget(BaseModel):
    """Who is being impersonated (target cookie)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    v: int = Field(default=CURRENT_SCHEMA_VERSION, ge=1, description="Schema version")
    user_id: str = Field(..., min_length=1, description="Impersonated user ID")
    email: str = Field(..., min_length=1, description="Impersonated user email")
    started_at: datetime = Field(..., description="When impersonation began")


class AuditAction(str, Enum):
    """Impersonation audit actions."""

    IMPERSONATE_START = "IMPERSONATE_START"
    IMPERSONATE_STOP = "IMPERSONATE_STOP"


class AuditEntry(BaseModel):
    """Append-only record of an impersonation transition."""

    model_config = ConfigDict(frozen=True)

    admin_id: str
    target_user_id: Optional[str] = None
    action: AuditAction
    route: str
    metadata: dict[str, Any] = Field(default_factory=dict)
