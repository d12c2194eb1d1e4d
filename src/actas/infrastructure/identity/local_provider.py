"""Identity provider backed by the local users table.

Bearer credentials and delegated sign-in tokens are JWTs signed with
python-jose. Access tokens use the application JWT secret; delegated
sign-in tokens use the identity provider signing key, so the provider is
only "configured" when that key is set.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from actas.core.config import Settings
from actas.domain.exceptions import NotFound, ProviderError, ProviderUnconfigured
from actas.infrastructure.database.models import User
from actas.infrastructure.identity.provider import IdentityUser, VerifiedIdentity

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
CUSTOM_TOKEN_TTL = timedelta(hours=1)

# Claims a delegated token may not override
RESERVED_CLAIMS = frozenset(
    {"acr", "amr", "at_hash", "aud", "auth_time", "azp", "cnf", "c_hash",
     "exp", "iat", "iss", "jti", "nbf", "nonce", "sub", "uid", "type"}
)

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class LocalIdentityProvider:
    """Identity provider for accounts stored in the application database."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.identity_provider_configured

    # =========================================================================
    # Bearer credentials
    # =========================================================================

    def create_access_token(
        self,
        uid: str,
        extra_claims: Optional[dict[str, Any]] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a bearer access token for a user."""
        now = datetime.now(timezone.utc)
        expire = now + (
            expires_delta
            or timedelta(minutes=self.settings.jwt_access_token_expire_minutes)
        )
        payload: dict[str, Any] = dict(extra_claims or {})
        payload.update({"sub": uid, "type": ACCESS_TOKEN_TYPE, "iat": now, "exp": expire})
        return jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm,
        )

    def verify_bearer(self, token: str) -> Optional[VerifiedIdentity]:
        """Decode and verify a bearer access token."""
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except JWTError:
            return None

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return None

        uid = payload.get("sub")
        if not isinstance(uid, str) or not uid:
            return None

        return VerifiedIdentity(uid=uid, claims=payload)

    # =========================================================================
    # User lookup
    # =========================================================================

    def _to_identity_user(self, user: User) -> IdentityUser:
        return IdentityUser(
            uid=user.id,
            email=user.email,
            display_name=user.display_name,
            is_admin=user.is_admin or user.id in self.settings.admin_user_ids,
            disabled=not user.is_active,
            custom_claims=dict(user.custom_claims or {}),
            created_at=user.created_at,
            last_sign_in_at=user.last_sign_in_at,
        )

    def get_user(self, uid: str) -> IdentityUser:
        """Get user by ID."""
        try:
            user = self.db.get(User, uid)
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed for {uid}: {e}")
            raise ProviderError("User lookup failed") from e

        if user is None:
            raise NotFound()
        return self._to_identity_user(user)

    def list_users(self, limit: int, search: Optional[str] = None) -> list[IdentityUser]:
        """List users, newest first, optionally filtered by ID or email."""
        query = select(User)
        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.where(
                or_(
                    User.id.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        query = query.order_by(User.created_at.desc()).limit(limit)

        try:
            users = self.db.execute(query).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"User listing failed: {e}")
            raise ProviderError("User listing failed") from e

        return [self._to_identity_user(user) for user in users]

    # =========================================================================
    # Delegated sign-in tokens
    # =========================================================================

    def create_custom_token(self, uid: str, claims: dict[str, Any]) -> str:
        """Mint a delegated sign-in token for ``uid`` carrying ``claims``."""
        if not self.configured:
            raise ProviderUnconfigured()

        reserved = RESERVED_CLAIMS.intersection(claims)
        if reserved:
            raise ProviderError(f"Reserved claims cannot be set: {', '.join(sorted(reserved))}")

        now = datetime.now(timezone.utc)
        payload = {
            "iss": self.settings.identity_service_account,
            "sub": self.settings.identity_service_account,
            "aud": self.settings.identity_token_audience,
            "uid": uid,
            "iat": now,
            "exp": now + CUSTOM_TOKEN_TTL,
            "claims": claims,
        }

        try:
            return jwt.encode(
                payload,
                self.settings.identity_signing_key,
                algorithm=self.settings.jwt_algorithm,
            )
        except JWTError as e:
            logger.error(f"Custom token signing failed for {uid}: {e}")
            raise ProviderError("Failed to create impersonation token") from e

    def verify_custom_token(self, token: str) -> Optional[dict[str, Any]]:
        """Decode a delegated sign-in token minted by this provider."""
        if not self.configured:
            return None
        try:
            return jwt.decode(
                token,
                self.settings.identity_signing_key,
                algorithms=[self.settings.jwt_algorithm],
                audience=self.settings.identity_token_audience,
            )
        except JWTError:
            return None
