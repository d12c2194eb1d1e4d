"""SQLAlchemy models."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from actas.infrastructure.database.base import Base


class UserRole(str, Enum):
    """User roles."""

    ADMIN = "admin"
    SUPPORT = "support"
    MEMBER = "member"


class User(Base):
    """Accounts known to the local identity provider."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=UserRole.MEMBER.value,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    custom_claims: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=datetime.utcnow)
    last_sign_in_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        """Check if user holds the admin role."""
        return self.role == UserRole.ADMIN.value


class AdminAuditLog(Base):
    """Append-only log of admin impersonation actions.

    Rows are written once and never updated or deleted.
    """

    __tablename__ = "admin_audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    admin_id: Mapped[str] = mapped_column(String(128), nullable=False)
    target_user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)  # IMPERSONATE_START | IMPERSONATE_STOP
    route: Mapped[str] = mapped_column(String(255), nullable=False)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_admin_audit_admin", "admin_id"),
        Index("idx_admin_audit_target", "target_user_id"),
        Index("idx_admin_audit_action", "action"),
        Index("idx_admin_audit_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AdminAuditLog(id={self.id}, action={self.action}, admin={self.admin_id})>"
