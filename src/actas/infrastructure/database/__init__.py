"""Database infrastructure."""

from actas.infrastructure.database.base import Base, SessionLocal, engine, get_session, init_db
from actas.infrastructure.database.models import AdminAuditLog, User, UserRole

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_session",
    "init_db",
    "AdminAuditLog",
    "User",
    "UserRole",
]
