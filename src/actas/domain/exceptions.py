"""Impersonation error taxonomy.

Each error carries a stable machine-readable code and the HTTP status the
API layer answers with. The API registers a single handler that renders
``{"ok": false, "error": code, "message": message}``.
"""

from typing import Optional


class ImpersonationError(Exception):
    """Base class for failures in the impersonation flow."""

    status_code: int = 500
    code: str = "IMPERSONATION_ERROR"
    default_message: str = "Impersonation request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ImpersonationError):
    """Bad or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class SessionNotFound(ImpersonationError):
    """The admin's own session could not be resolved."""

    status_code = 400
    code = "ADMIN_SESSION_NOT_FOUND"
    default_message = "Admin session not found"


class NoActiveSession(ImpersonationError):
    """Exit requested with no impersonation in progress."""

    status_code = 400
    code = "NO_ACTIVE_SESSION"
    default_message = "No active impersonation session"


class Unauthenticated(ImpersonationError):
    """No valid credential on the request."""

    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Could not validate credentials"


class NotAdmin(ImpersonationError):
    """Authenticated caller lacks admin privilege."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "Admin privileges required"


Forbidden = NotAdmin


class NotFound(ImpersonationError):
    """Target user does not exist."""

    status_code = 404
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class ImpersonationConflict(ImpersonationError):
    """Start requested while already impersonating and replacement is disabled."""

    status_code = 409
    code = "IMPERSONATION_ACTIVE"
    default_message = "An impersonation session is already active"


class ProviderError(ImpersonationError):
    """Identity provider call failed."""

    status_code = 500
    code = "PROVIDER_ERROR"
    default_message = "Identity provider request failed"


class ProviderUnconfigured(ImpersonationError):
    """Identity provider integration is not configured at all."""

    status_code = 501
    code = "IDENTITY_PROVIDER_NOT_CONFIGURED"
    default_message = "Identity provider is not configured"


ProviderUnavailable = ProviderUnconfigured


class AuditWriteError(Exception):
    """Audit sink could not persist an entry. Logged, never surfaced."""
