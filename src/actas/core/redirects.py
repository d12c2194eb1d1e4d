"""Redirect target sanitization.

Every "where to go next" value in the impersonation flow comes from the
client (query string or form field). Only same-origin, path-rooted values
are accepted; everything else is rejected so the flow cannot be used as an
open redirect.
"""

import posixpath
import re
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

MAX_REDIRECT_LENGTH = 2048

# ASCII control characters (includes CR, LF, TAB and NUL) and DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# First path segment that reads like a host name, e.g. "/evil.com/login"
_HOST_LIKE_SEGMENT = re.compile(
    r"^(?:[a-z0-9-]+\.)+[a-z][a-z0-9-]*(?::\d+)?$",
    re.IGNORECASE,
)


def _normalize_dot_segments(path: str) -> str:
    segments = path.split("/")
    if not any(segment in (".", "..") for segment in segments):
        return path

    normalized = posixpath.normpath(path)
    # posixpath keeps a leading "//" as-is
    normalized = "/" + normalized.lstrip("/")
    if path.endswith(("/", "/.", "/..")) and normalized != "/":
        normalized += "/"
    return normalized


def sanitize_relative_path(candidate: Any) -> Optional[str]:
    """Validate a client-supplied redirect target.

    A first path segment that reads like a host name (dotted labels ending in
    a label that starts with a letter, optional port) is rejected, so
    ``/evil.com/login`` fails. This also rejects legitimate same-origin paths
    whose first segment is a file name such as ``/favicon.ico`` or
    ``/report.pdf``. Segments like ``/v1.2/docs`` still pass.

    Args:
        candidate: Value taken from the request (may be None or non-string)

    Returns:
        A same-origin relative path (dot segments resolved), or None when the
        candidate is missing, empty, absolute, protocol-relative, contains
        control characters or backslashes, or looks like a host name.
    """
    if not isinstance(candidate, str):
        return None

    value = candidate.strip()
    if not value or len(value) > MAX_REDIRECT_LENGTH:
        return None

    if _CONTROL_CHARS.search(value) or "\\" in value:
        return None

    if not value.startswith("/") or value.startswith("//"):
        return None

    try:
        parts = urlsplit(value)
    except ValueError:
        return None

    if parts.scheme or parts.netloc:
        return None

    path = _normalize_dot_segments(parts.path)
    if not path.startswith("/") or path.startswith("//"):
        return None

    first_segment = path[1:].split("/", 1)[0]
    if first_segment and _HOST_LIKE_SEGMENT.match(first_segment):
        return None

    return urlunsplit(("", "", path, parts.query, parts.fragment))
