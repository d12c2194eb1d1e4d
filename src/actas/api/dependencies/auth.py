"""Authentication dependencies for FastAPI."""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from actas.api.dependencies.database import get_db
from actas.core.config import Settings, get_settings
from actas.domain.services.admin_gate import AdminGate
from actas.infrastructure.identity import LocalIdentityProvider, VerifiedIdentity


def get_identity_provider(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LocalIdentityProvider:
    """Get the identity provider for this request."""
    return LocalIdentityProvider(db, settings)


def get_admin_gate(
    identity: Annotated[LocalIdentityProvider, Depends(get_identity_provider)],
) -> AdminGate:
    return AdminGate(identity)


def get_verified_admin(
    gate: Annotated[AdminGate, Depends(get_admin_gate)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> VerifiedIdentity:
    """Verified identity of an admin caller.

    Raises the admin gate errors (401/403/501), rendered by the
    application error handler.
    """
    return gate.verify(authorization)


def require_admin(
    admin: Annotated[VerifiedIdentity, Depends(get_verified_admin)],
) -> str:
    """Shortcut dependency returning the verified admin ID.

    Usage:
        @router.get("/users")
        def list_users(admin_id: str = Depends(require_admin)):
            ...
    """
    return admin.uid
