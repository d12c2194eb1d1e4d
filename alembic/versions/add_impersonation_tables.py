"""add_impersonation_tables

Creates the local identity provider users table and the append-only
admin audit log for impersonation start/stop.

Revision ID: add_impersonation_tables
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "add_impersonation_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and admin_audit_logs."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(50), nullable=False, server_default="member"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("custom_claims", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_sign_in_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "admin_audit_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("admin_id", sa.String(128), nullable=False),
        sa.Column("target_user_id", sa.String(128), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("route", sa.String(255), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_admin_audit_admin", "admin_audit_logs", ["admin_id"])
    op.create_index("idx_admin_audit_target", "admin_audit_logs", ["target_user_id"])
    op.create_index("idx_admin_audit_action", "admin_audit_logs", ["action"])
    op.create_index("idx_admin_audit_created_at", "admin_audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop admin_audit_logs and users."""
    op.drop_index("idx_admin_audit_created_at", table_name="admin_audit_logs")
    op.drop_index("idx_admin_audit_action", table_name="admin_audit_logs")
    op.drop_index("idx_admin_audit_target", table_name="admin_audit_logs")
    op.drop_index("idx_admin_audit_admin", table_name="admin_audit_logs")
    op.drop_table("admin_audit_logs")

    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
