"""Impersonation cookie codec.

The two impersonation cookies are the only store for impersonation state.
Each record is serialized to JSON, then encrypted and authenticated with
Fernet. The Fernet timestamp enforces the same lifetime as the cookie
``max_age``, so a replayed cookie stops decoding once it would have expired
in the browser.

Decoding fails closed: any malformed, truncated, tampered, expired or
schema-mismatched value decodes to ``None``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from actas.core.config import Settings
from actas.core.security import InvalidToken, SecurityService
from actas.domain.entities.impersonation import (
    CURRENT_SCHEMA_VERSION,
    ImpersonationSession,
    ImpersonationTarget,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass(frozen=True)
class ImpersonationCookieNames:
    """Cookie names used by the impersonation flow."""

    session: str
    target: str


IMPERSONATION_COOKIE_NAMES = ImpersonationCookieNames(
    session="actas_impersonation_session",
    target="actas_impersonation_target",
)


def impersonation_cookie_options(settings: Settings) -> dict[str, Any]:
    """Options shared by every set/clear of the impersonation cookies.

    Returned as keyword arguments for ``Response.set_cookie``. ``lax``
    blocks cross-site POSTs while still sending the cookies on top-level
    GET navigations.
    """
    return {
        "max_age": settings.impersonation_cookie_max_age_seconds,
        "path": "/",
        "domain": settings.impersonation_cookie_domain,
        "secure": settings.cookie_secure,
        "httponly": True,
        "samesite": "lax",
    }


class ImpersonationCodec:
    """Encode/decode impersonation records into opaque cookie values."""

    def __init__(self, secret: str, max_age_seconds: int):
        self._security = SecurityService(secret)
        self.max_age_seconds = max_age_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImpersonationCodec":
        return cls(settings.cookie_secret, settings.impersonation_cookie_max_age_seconds)

    def _encode(self, record: BaseModel) -> str:
        return self._security.encrypt(record.model_dump_json())

    def _decode(self, value: Optional[str], model: type[RecordT]) -> Optional[RecordT]:
        if not value or not isinstance(value, str):
            return None

        try:
            plaintext = self._security.decrypt(value, ttl=self.max_age_seconds)
            data = json.loads(plaintext)
        except (InvalidToken, UnicodeDecodeError, ValueError):
            return None

        if not isinstance(data, dict):
            return None

        version = data.get("v", CURRENT_SCHEMA_VERSION)
        if not isinstance(version, int) or version > CURRENT_SCHEMA_VERSION:
            logger.debug(f"Rejecting {model.__name__} cookie with schema version {version!r}")
            return None

        try:
            return model.model_validate(data)
        except PydanticValidationError:
            return None

    def encode_session(self, session: ImpersonationSession) -> str:
        """Encode the session record."""
        return self._encode(session)

    def decode_session(self, value: Optional[str]) -> Optional[ImpersonationSession]:
        """Decode the session record, or None."""
        return self._decode(value, ImpersonationSession)

    def encode_target(self, target: ImpersonationTarget) -> str:
        """Encode the target record."""
        return self._encode(target)

    def decode_target(self, value: Optional[str]) -> Optional[ImpersonationTarget]:
        """Decode the target record, or None."""
        return self._decode(value, ImpersonationTarget)
