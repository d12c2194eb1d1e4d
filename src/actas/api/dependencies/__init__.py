"""API dependencies."""

from actas.api.dependencies.auth import get_verified_admin, require_admin
from actas.api.dependencies.database import get_db
from actas.api.dependencies.impersonation import get_impersonation_service

__all__ = ["get_db", "get_impersonation_service", "get_verified_admin", "require_admin"]
