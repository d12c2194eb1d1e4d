"""Admin gate for impersonation operations."""

import logging
from typing import Optional

from actas.domain.exceptions import NotAdmin, NotFound, ProviderUnconfigured, Unauthenticated
from actas.infrastructure.identity.provider import IdentityProvider, VerifiedIdentity

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AdminGate:
    """Verifies that a caller is an authenticated admin.

    Failures are classified so callers can tell them apart:

    - ProviderUnconfigured: no identity provider configured at all (501)
    - Unauthenticated: missing, invalid or expired credential (401)
    - NotAdmin: valid credential without admin privilege (403)
    - ProviderError: identity provider lookup failed (500)
    """

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    def verify(self, authorization: Optional[str]) -> VerifiedIdentity:
        """Verify the request credential and require admin privilege.

        Args:
            authorization: Raw Authorization header value

        Returns:
            The verified identity of the admin
        """
        if not self.identity.configured:
            raise ProviderUnconfigured()

        token = extract_bearer_token(authorization)
        if token is None:
            raise Unauthenticated()

        verified = self.identity.verify_bearer(token)
        if verified is None:
            raise Unauthenticated()

        try:
            user = self.identity.get_user(verified.uid)
        except NotFound:
            raise Unauthenticated() from None

        if user.disabled:
            raise Unauthenticated("User account is disabled")

        if not user.is_admin:
            logger.warning(f"Non-admin user {user.uid} attempted an admin operation")
            raise NotAdmin()

        return verified

    def require_admin(self, authorization: Optional[str]) -> str:
        """Return the verified admin identifier or raise."""
        return self.verify(authorization).uid
