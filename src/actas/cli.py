"""CLI application entry point."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError

from actas import __version__
from actas.core.config import get_settings
from actas.core.logging import configure_logging, get_logger
from actas.domain.exceptions import NotFound
from actas.domain.services.audit_service import AuditService
from actas.infrastructure.database.base import get_session, init_db
from actas.infrastructure.database.models import User, UserRole
from actas.infrastructure.identity import LocalIdentityProvider

# Load environment variables from .env file
dotenv_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path)

# Configure logging on module import
configure_logging()
logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
def app() -> None:
    """actas - admin impersonation service."""
    pass


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables."""
    init_db()
    click.echo("✅ Database initialized")


@app.command("create-user")
@click.option("--id", "user_id", help="User ID (generated when omitted)")
@click.option("--email", help="Contact email")
@click.option("--name", "display_name", help="Display name")
@click.option("--admin", is_flag=True, help="Grant the admin role")
def create_user(
    user_id: Optional[str],
    email: Optional[str],
    display_name: Optional[str],
    admin: bool,
) -> None:
    """Create a user in the local identity provider."""
    role = UserRole.ADMIN.value if admin else UserRole.MEMBER.value
    try:
        with get_session() as session:
            user = User(email=email, display_name=display_name, role=role)
            if user_id:
                user.id = user_id
            session.add(user)
            session.flush()
            created_id = user.id
    except IntegrityError:
        click.echo("❌ Error: a user with this ID or email already exists", err=True)
        raise click.Abort()

    logger.info(f"Created user {created_id} with role {role}")
    click.echo(f"✅ User created: {created_id} ({role})")


@app.command("issue-token")
@click.argument("user_id")
@click.option("--minutes", type=int, help="Token lifetime in minutes")
def issue_token(user_id: str, minutes: Optional[int]) -> None:
    """Issue a bearer access token for USER_ID (local testing)."""
    settings = get_settings()
    with get_session() as session:
        identity = LocalIdentityProvider(session, settings)
        try:
            identity.get_user(user_id)
        except NotFound:
            click.echo(f"❌ Error: user not found: {user_id}", err=True)
            raise click.Abort()

        expires = timedelta(minutes=minutes) if minutes else None
        token = identity.create_access_token(user_id, expires_delta=expires)

    click.echo(token)


@app.command("audit-log")
@click.option("--limit", type=int, default=20, show_default=True, help="Entries to show")
@click.option("--admin-id", help="Only entries driven by this admin")
@click.option("--target-user-id", help="Only entries about this impersonated user")
def audit_log(limit: int, admin_id: Optional[str], target_user_id: Optional[str]) -> None:
    """Print recent impersonation audit entries."""
    with get_session() as session:
        page = AuditService(session).list_entries(
            page=1,
            per_page=limit,
            admin_id=admin_id,
            target_user_id=target_user_id,
        )
        if not page.items:
            click.echo("No audit entries found")
            return

        for entry in page.items:
            click.echo(
                f"{entry.created_at.isoformat()}  {entry.action:<17}  "
                f"admin={entry.admin_id}  target={entry.target_user_id or '-'}  "
                f"route={entry.route}"
            )
        click.echo(f"\n{len(page.items)} of {page.total} entries")


if __name__ == "__main__":
    app()
