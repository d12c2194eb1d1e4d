"""Domain services."""

from actas.domain.services.admin_gate import AdminGate
from actas.domain.services.audit_service import AuditService, AuditSink, DatabaseAuditSink
from actas.domain.services.impersonation_codec import (
    IMPERSONATION_COOKIE_NAMES,
    ImpersonationCodec,
    impersonation_cookie_options,
)
from actas.domain.services.impersonation_service import (
    ImpersonationConfig,
    ImpersonationService,
    parse_start_request,
)

__all__ = [
    "AdminGate",
    "AuditService",
    "AuditSink",
    "DatabaseAuditSink",
    "IMPERSONATION_COOKIE_NAMES",
    "ImpersonationCodec",
    "ImpersonationConfig",
    "ImpersonationService",
    "impersonation_cookie_options",
    "parse_start_request",
]
