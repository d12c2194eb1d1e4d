"""Domain entities and DTOs."""

from actas.domain.entities.impersonation import (
    CURRENT_SCHEMA_VERSION,
    AuditAction,
    AuditEntry,
    ImpersonationSession,
    ImpersonationTarget,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "AuditAction",
    "AuditEntry",
    "ImpersonationSession",
    "ImpersonationTarget",
]
