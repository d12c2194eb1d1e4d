"""Cookie-backed store for the impersonation records.

Both cookies are always written together and always cleared together, with
the same options they were set with. A cookie is cleared by re-issuing it
empty with ``max_age=0``; the browser only drops it when path and domain
match the ones it was set with.
"""

from typing import Any, Optional

from fastapi import Request, Response

from actas.domain.services.impersonation_codec import IMPERSONATION_COOKIE_NAMES


def read_impersonation_cookies(request: Request) -> tuple[Optional[str], Optional[str]]:
    """Return the raw (session, target) cookie values from a request."""
    return (
        request.cookies.get(IMPERSONATION_COOKIE_NAMES.session),
        request.cookies.get(IMPERSONATION_COOKIE_NAMES.target),
    )


class ResponseCookieStore:
    """Collects cookie writes and applies them to a response."""

    def __init__(self, options: dict[str, Any]):
        self.options = options
        self._pending: list[tuple[str, str, dict[str, Any]]] = []

    def write(self, session_value: str, target_value: str) -> None:
        self._pending = [
            (IMPERSONATION_COOKIE_NAMES.session, session_value, dict(self.options)),
            (IMPERSONATION_COOKIE_NAMES.target, target_value, dict(self.options)),
        ]

    def clear(self) -> None:
        expired = {**self.options, "max_age": 0, "expires": 0}
        self._pending = [
            (IMPERSONATION_COOKIE_NAMES.session, "", expired),
            (IMPERSONATION_COOKIE_NAMES.target, "", dict(expired)),
        ]

    def apply(self, response: Response) -> None:
        for name, value, options in self._pending:
            response.set_cookie(name, value, **options)
