"""Audit service for impersonation actions."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from actas.domain.entities.impersonation import AuditEntry
from actas.domain.exceptions import AuditWriteError
from actas.infrastructure.database.models import AdminAuditLog

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    """Append-only destination for audit entries."""

    def append(self, entry: AuditEntry) -> None:
        """Persist an entry. Raises AuditWriteError on failure."""
        ...


class DatabaseAuditSink:
    """Audit sink writing to the ``admin_audit_logs`` table."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: AuditEntry) -> None:
        audit_log = AdminAuditLog(
            admin_id=entry.admin_id,
            target_user_id=entry.target_user_id,
            action=entry.action.value,
            route=entry.route,
            details=dict(entry.metadata) or None,
        )
        try:
            self.db.add(audit_log)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuditWriteError(f"Failed to write audit log: {e}") from e


@dataclass
class AuditPage:
    """A page of audit rows."""

    items: list[AdminAuditLog]
    total: int


class AuditService:
    """Read access to the impersonation audit trail."""

    def __init__(self, db: Session):
        self.db = db

    def list_entries(
        self,
        page: int = 1,
        per_page: int = 50,
        admin_id: Optional[str] = None,
        target_user_id: Optional[str] = None,
        action: Optional[str] = None,
    ) -> AuditPage:
        """List audit entries, newest first.

        Args:
            page: 1-based page number
            per_page: Page size
            admin_id: Only entries driven by this admin
            target_user_id: Only entries about this impersonated user
            action: Only entries with this action

        Returns:
            AuditPage with the rows and the total matching count
        """
        conditions = []
        if admin_id:
            conditions.append(AdminAuditLog.admin_id == admin_id)
        if target_user_id:
            conditions.append(AdminAuditLog.target_user_id == target_user_id)
        if action:
            conditions.append(AdminAuditLog.action == action)

        query = select(AdminAuditLog)
        count_query = select(func.count()).select_from(AdminAuditLog)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        total = self.db.execute(count_query).scalar() or 0

        offset = (page - 1) * per_page
        items = (
            self.db.execute(
                query.order_by(AdminAuditLog.created_at.desc()).offset(offset).limit(per_page)
            )
            .scalars()
            .all()
        )

        return AuditPage(items=list(items), total=total)
