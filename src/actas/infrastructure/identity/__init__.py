"""Identity provider integration."""

from actas.infrastructure.identity.local_provider import LocalIdentityProvider
from actas.infrastructure.identity.provider import (
    IMPERSONATED_BY_CLAIM,
    IMPERSONATION_STARTED_CLAIM,
    IdentityProvider,
    IdentityUser,
    VerifiedIdentity,
)

__all__ = [
    "IMPERSONATED_BY_CLAIM",
    "IMPERSONATION_STARTED_CLAIM",
    "IdentityProvider",
    "IdentityUser",
    "LocalIdentityProvider",
    "VerifiedIdentity",
]
