"""Impersonation service.

Lets an admin temporarily act as another user. The state machine has two
states, NoImpersonation and Impersonating, and two transitions:

- start: admin gate -> validate target -> mint delegated credential ->
  write session + target cookies -> audit IMPERSONATE_START
- exit: decode session cookie -> clear both cookies -> audit
  IMPERSONATE_STOP -> redirect

All state lives in the two cookies and in the append-only audit log.
Audit failures are logged and never undo a transition.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Protocol
from urllib.parse import quote

from actas.core.config import Settings
from actas.core.redirects import sanitize_relative_path
from actas.domain.entities.impersonation import (
    AuditAction,
    AuditEntry,
    ImpersonationSession,
    ImpersonationTarget,
)
from actas.domain.exceptions import (
    AuditWriteError,
    ImpersonationConflict,
    NoActiveSession,
    ProviderUnconfigured,
    SessionNotFound,
    ValidationError,
)
from actas.domain.services.audit_service import AuditSink
from actas.domain.services.impersonation_codec import ImpersonationCodec
from actas.infrastructure.identity.provider import (
    IMPERSONATED_BY_CLAIM,
    IMPERSONATION_STARTED_CLAIM,
    IdentityProvider,
    VerifiedIdentity,
)

logger = logging.getLogger(__name__)

# The local provider restores the admin client-side, no credential is kept
DELEGATED_ACCESS_PLACEHOLDER = "delegated-impersonation"


@dataclass(frozen=True)
class ImpersonationConfig:
    """Explicit configuration for the impersonation flow."""

    provider_configured: bool
    workspace_path: str = "/app"
    exit_path: str = "/admin"
    allow_replace: bool = True
    cookie_max_age_seconds: int = 8 * 60 * 60

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImpersonationConfig":
        return cls(
            provider_configured=settings.identity_provider_configured,
            workspace_path=sanitize_relative_path(settings.impersonation_workspace_path) or "/app",
            exit_path=sanitize_relative_path(settings.impersonation_exit_path) or "/admin",
            allow_replace=settings.impersonation_allow_replace,
            cookie_max_age_seconds=settings.impersonation_cookie_max_age_seconds,
        )


class ImpersonationCookieStore(Protocol):
    """Where the encoded cookie pair is written to or cleared from."""

    def write(self, session_value: str, target_value: str) -> None:
        ...

    def clear(self) -> None:
        ...


@dataclass(frozen=True)
class StartImpersonationRequest:
    """Validated start payload."""

    user_id: str
    redirect_to: Optional[str] = None
    return_to: Optional[str] = None


@dataclass(frozen=True)
class StartResult:
    custom_token: str
    redirect_to: str
    return_to: str
    target_user_id: str
    target_email: str


@dataclass(frozen=True)
class ExitResult:
    destination: str
    admin_id: str
    target_user_id: Optional[str]


@dataclass(frozen=True)
class ImpersonationStatus:
    is_impersonating: bool
    admin_id: Optional[str] = None
    target: Optional[ImpersonationTarget] = None
    expires_at: Optional[datetime] = None


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_start_request(payload: Mapping[str, Any]) -> StartImpersonationRequest:
    """Validate a start payload already extracted from JSON or form data.

    Non-string values are treated as absent.

    Raises:
        ValidationError: If ``userId`` is missing or blank
    """
    user_id = (_optional_str(payload.get("userId")) or "").strip()
    if not user_id:
        raise ValidationError("Missing userId")

    return StartImpersonationRequest(
        user_id=user_id,
        redirect_to=_optional_str(payload.get("redirectTo")),
        return_to=_optional_str(payload.get("returnTo")),
    )


class ImpersonationService:
    """Orchestrates impersonation start and exit."""

    def __init__(
        self,
        identity: IdentityProvider,
        audit_sink: AuditSink,
        codec: ImpersonationCodec,
        config: ImpersonationConfig,
    ):
        self.identity = identity
        self.audit_sink = audit_sink
        self.codec = codec
        self.config = config

    def _default_return_to(self, target_user_id: str) -> str:
        candidate = f"/admin/users/{quote(target_user_id, safe='')}"
        return sanitize_relative_path(candidate) or self.config.exit_path

    def _resolve_redirect(self, value: Optional[str], fallback: str, field_name: str) -> str:
        sanitized = sanitize_relative_path(value)
        if value and sanitized is None:
            logger.warning(f"Rejected unsafe {field_name}, using {fallback}")
        return sanitized or fallback

    @staticmethod
    def _resolve_admin_session(admin: Optional[VerifiedIdentity]) -> str:
        # A delegated credential cannot start another impersonation
        if admin is None or not admin.uid or admin.impersonated_by:
            raise SessionNotFound()
        return admin.uid

    def _append_audit(self, entry: AuditEntry) -> None:
        # Audit is best effort: the transition has already taken effect
        try:
            self.audit_sink.append(entry)
        except AuditWriteError as e:
            logger.error(
                f"Audit write failed for {entry.action.value} "
                f"(admin={entry.admin_id}, target={entry.target_user_id}): {e}"
            )
        except Exception:
            logger.exception(
                f"Unexpected audit sink failure for {entry.action.value} "
                f"(admin={entry.admin_id}, target={entry.target_user_id})"
            )

    def start(
        self,
        admin: Optional[VerifiedIdentity],
        request: StartImpersonationRequest,
        store: ImpersonationCookieStore,
        route: str,
        active_session_cookie: Optional[str] = None,
        active_target_cookie: Optional[str] = None,
    ) -> StartResult:
        """Start impersonating ``request.user_id``.

        Args:
            admin: Identity that passed the admin gate
            request: Validated start payload
            store: Cookie store the session and target records are written to
            route: Request path, recorded in the audit entry
            active_session_cookie: Current session cookie value, if any
            active_target_cookie: Current target cookie value, if any

        Returns:
            StartResult with the delegated credential and sanitized paths
        """
        if not self.config.provider_configured:
            raise ProviderUnconfigured()

        target_user_id = request.user_id
        redirect_to = self._resolve_redirect(
            request.redirect_to, self.config.workspace_path, "redirectTo"
        )
        return_to = self._resolve_redirect(
            request.return_to, self._default_return_to(target_user_id), "returnTo"
        )

        admin_id = self._resolve_admin_session(admin)

        previous = self.codec.decode_session(active_session_cookie)
        previous_target = None
        if previous is not None:
            if not self.config.allow_replace:
                raise ImpersonationConflict()
            previous_target = self.codec.decode_target(active_target_cookie)
            logger.warning(f"Admin {admin_id} is replacing an active impersonation session")

        target_user = self.identity.get_user(target_user_id)

        if not target_user.email:
            raise ValidationError("User has no email associated")
        if target_user.disabled:
            raise ValidationError("User account is disabled")

        started_at = datetime.now(timezone.utc)
        custom_token = self.identity.create_custom_token(
            target_user_id,
            {
                IMPERSONATED_BY_CLAIM: admin_id,
                IMPERSONATION_STARTED_CLAIM: started_at.isoformat(),
            },
        )

        session = ImpersonationSession(
            admin_id=admin_id,
            access_token=DELEGATED_ACCESS_PLACEHOLDER,
            refresh_token="",
            return_to=return_to,
        )
        target = ImpersonationTarget(
            user_id=target_user_id,
            email=target_user.email,
            started_at=started_at,
        )
        store.write(self.codec.encode_session(session), self.codec.encode_target(target))

        metadata: dict[str, Any] = {"redirectTo": redirect_to, "returnTo": return_to}
        if previous is not None:
            metadata["replacedAdminId"] = previous.admin_id
            if previous_target is not None:
                metadata["replacedTargetUserId"] = previous_target.user_id
        self._append_audit(
            AuditEntry(
                admin_id=admin_id,
                target_user_id=target_user_id,
                action=AuditAction.IMPERSONATE_START,
                route=route,
                metadata=metadata,
            )
        )

        logger.info(f"Admin {admin_id} started impersonating {target_user_id}")

        return StartResult(
            custom_token=custom_token,
            redirect_to=redirect_to,
            return_to=return_to,
            target_user_id=target_user_id,
            target_email=target_user.email,
        )

    def exit(
        self,
        session_cookie: Optional[str],
        target_cookie: Optional[str],
        redirect_override: Optional[str],
        store: ImpersonationCookieStore,
        route: str,
    ) -> ExitResult:
        """End the current impersonation.

        The destination is the sanitized override, else the sanitized
        ``return_to`` stored at start, else the configured exit path.
        Restoring the admin's own session is left to the client, which
        observes the cleared cookies.

        Raises:
            NoActiveSession: If the session cookie is missing or undecodable
        """
        session = self.codec.decode_session(session_cookie)
        if session is None:
            raise NoActiveSession()

        override = sanitize_relative_path(redirect_override)
        if redirect_override and override is None:
            logger.warning("Rejected unsafe exit redirect override")
        destination = (
            override
            or sanitize_relative_path(session.return_to)
            or self.config.exit_path
        )

        store.clear()

        target = self.codec.decode_target(target_cookie)
        target_user_id = target.user_id if target else None

        self._append_audit(
            AuditEntry(
                admin_id=session.admin_id,
                target_user_id=target_user_id,
                action=AuditAction.IMPERSONATE_STOP,
                route=route,
                metadata={"redirectTo": destination},
            )
        )

        logger.info(
            f"Admin {session.admin_id} stopped impersonating {target_user_id or 'unknown user'}"
        )

        return ExitResult(
            destination=destination,
            admin_id=session.admin_id,
            target_user_id=target_user_id,
        )

    def status(
        self, session_cookie: Optional[str], target_cookie: Optional[str]
    ) -> ImpersonationStatus:
        """Report the impersonation state carried by the request cookies."""
        session = self.codec.decode_session(session_cookie)
        if session is None:
            return ImpersonationStatus(is_impersonating=False)

        target = self.codec.decode_target(target_cookie)
        expires_at = None
        if target is not None:
            expires_at = target.started_at + timedelta(seconds=self.config.cookie_max_age_seconds)

        return ImpersonationStatus(
            is_impersonating=True,
            admin_id=session.admin_id,
            target=target,
            expires_at=expires_at,
        )
