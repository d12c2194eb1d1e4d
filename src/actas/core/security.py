"""Security utilities for client-held state.

Provides authenticated encryption for values stored in browser cookies.
Uses Fernet symmetric encryption from cryptography library.
"""

import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

__all__ = ["InvalidToken", "SecurityService", "derive_fernet_key"]


def derive_fernet_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary application secret.

    Args:
        secret: Application secret (any length)

    Returns:
        URL-safe base64-encoded 32-byte key
    """
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class SecurityService:
    """Service for encrypting/decrypting cookie-safe tokens."""

    def __init__(self, secret: str):
        """Initialize with an application secret.

        Args:
            secret: Secret used to derive the Fernet key. Must not be empty.
        """
        if not secret:
            raise ValueError("A non-empty secret is required")
        self._fernet = Fernet(derive_fernet_key(secret))

    def encrypt(self, data: str) -> str:
        """Encrypt a string into a cookie-safe token.

        The base64 padding is stripped so the token only contains
        characters from the URL-safe alphabet.

        Args:
            data: Plain text to encrypt

        Returns:
            Encrypted token
        """
        token = self._fernet.encrypt(data.encode("utf-8")).decode("ascii")
        return token.rstrip("=")

    def decrypt(self, token: str, ttl: Optional[int] = None) -> str:
        """Decrypt a token produced by :meth:`encrypt`.

        Args:
            token: Encrypted token, with or without base64 padding
            ttl: Maximum token age in seconds (None disables the check)

        Returns:
            Decrypted plain text

        Raises:
            InvalidToken: If the token is malformed, tampered with or expired
        """
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = padded.encode("ascii")
        except UnicodeEncodeError as e:
            raise InvalidToken from e
        return self._fernet.decrypt(raw, ttl=ttl).decode("utf-8")
