"""Identity provider contract.

The impersonation flow never authenticates users itself. It asks an identity
provider to verify bearer credentials, look users up and mint delegated
sign-in tokens. The client that receives a minted token is responsible for
signing in with it, and for re-establishing the admin's own session once it
sees the impersonation cookies cleared.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol

IMPERSONATED_BY_CLAIM = "impersonatedBy"
IMPERSONATION_STARTED_CLAIM = "impersonationStarted"


@dataclass(frozen=True)
class IdentityUser:
    """User record as seen through the identity provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    is_admin: bool = False
    disabled: bool = False
    custom_claims: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


@dataclass(frozen=True)
class VerifiedIdentity:
    """Result of verifying a bearer credential."""

    uid: str
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def impersonated_by(self) -> Optional[str]:
        """Admin driving this credential, if it was minted for impersonation."""
        value = self.claims.get(IMPERSONATED_BY_CLAIM)
        return value if isinstance(value, str) and value else None


class IdentityProvider(Protocol):
    """Operations the impersonation flow needs from the identity provider."""

    @property
    def configured(self) -> bool:
        """False when the integration is disabled (no credentials to mint with)."""
        ...

    def verify_bearer(self, token: str) -> Optional[VerifiedIdentity]:
        """Verify a bearer credential. Returns None when invalid or expired."""
        ...

    def get_user(self, uid: str) -> IdentityUser:
        """Look a user up. Raises NotFound or ProviderError."""
        ...

    def list_users(self, limit: int, search: Optional[str] = None) -> list[IdentityUser]:
        """List users, newest first. Raises ProviderError."""
        ...

    def create_custom_token(self, uid: str, claims: dict[str, Any]) -> str:
        """Mint a delegated sign-in token. Raises ProviderError."""
        ...
