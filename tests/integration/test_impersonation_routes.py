"""Integration tests for impersonation routes."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from actas.core.config import get_settings
from actas.domain.services.impersonation_codec import (
    IMPERSONATION_COOKIE_NAMES,
    ImpersonationCodec,
)
from actas.infrastructure.database.models import AdminAuditLog
from actas.infrastructure.identity import IMPERSONATED_BY_CLAIM
from tests.conftest import auth_headers, make_settings

START_URL = "/api/v1/admin/impersonate"
EXIT_URL = "/api/v1/admin/impersonate/exit"
STATUS_URL = "/api/v1/admin/impersonate/status"

SESSION_COOKIE = IMPERSONATION_COOKIE_NAMES.session
TARGET_COOKIE = IMPERSONATION_COOKIE_NAMES.target


def audit_rows(db_session) -> list[AdminAuditLog]:
    return list(
        db_session.execute(select(AdminAuditLog).order_by(AdminAuditLog.created_at)).scalars()
    )


def set_cookie_headers(response) -> list[str]:
    return response.headers.get_list("set-cookie")


class TestStartImpersonation:
    """Tests for POST /api/v1/admin/impersonate."""

    def test_start_returns_custom_token(
        self, client: TestClient, admin_token, target_user, identity
    ):
        """Test that an admin gets a delegated token for the target."""
        response = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["redirectTo"] == "/app"
        assert data["targetUser"] == {"id": "U9", "email": "u9@example.com"}

        payload = identity.verify_custom_token(data["customToken"])
        assert payload["uid"] == "U9"
        assert payload["claims"][IMPERSONATED_BY_CLAIM] == "A1"

    def test_start_sets_both_cookies(
        self, client: TestClient, admin_token, target_user, settings
    ):
        """Test that session and target cookies are set with safe attributes."""
        response = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))

        headers = set_cookie_headers(response)
        assert len(headers) == 2
        for header in headers:
            lowered = header.lower()
            assert "httponly" in lowered
            assert "path=/" in lowered
            assert "samesite=lax" in lowered
            assert f"max-age={8 * 60 * 60}" in lowered

        codec = ImpersonationCodec.from_settings(settings)
        session = codec.decode_session(response.cookies.get(SESSION_COOKIE))
        target = codec.decode_target(response.cookies.get(TARGET_COOKIE))
        assert session.admin_id == "A1"
        assert session.return_to == "/admin/users/U9"
        assert target.user_id == "U9"
        assert target.email == "u9@example.com"

    def test_start_writes_audit_entry(
        self, client: TestClient, admin_token, target_user, db_session
    ):
        """Test that one IMPERSONATE_START entry is appended."""
        client.post(
            START_URL,
            json={"userId": "U9", "redirectTo": "/app/billing", "returnTo": "/admin/users"},
            headers=auth_headers(admin_token),
        )

        rows = audit_rows(db_session)
        assert len(rows) == 1
        assert rows[0].action == "IMPERSONATE_START"
        assert rows[0].admin_id == "A1"
        assert rows[0].target_user_id == "U9"
        assert rows[0].route == START_URL
        assert rows[0].details == {"redirectTo": "/app/billing", "returnTo": "/admin/users"}

    def test_start_with_form_body(self, client: TestClient, admin_token, target_user):
        """Test that a form-encoded body is accepted."""
        response = client.post(
            START_URL,
            data={"userId": "U9", "redirectTo": "/app/inbox"},
            headers=auth_headers(admin_token),
        )

        assert response.status_code == 200
        assert response.json()["redirectTo"] == "/app/inbox"

    def test_unsafe_redirect_is_replaced(self, client: TestClient, admin_token, target_user):
        """Test that an absolute redirect falls back to the workspace."""
        response = client.post(
            START_URL,
            json={"userId": "U9", "redirectTo": "https://evil.com/phish"},
            headers=auth_headers(admin_token),
        )

        assert response.status_code == 200
        assert response.json()["redirectTo"] == "/app"

    def test_missing_user_id(self, client: TestClient, admin_token, db_session):
        """Test that a missing userId answers 400."""
        response = client.post(START_URL, json={}, headers=auth_headers(admin_token))

        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "error": "VALIDATION_ERROR",
            "message": "Missing userId",
        }
        assert set_cookie_headers(response) == []
        assert audit_rows(db_session) == []

    def test_unreadable_body(self, client: TestClient, admin_token):
        """Test that a body that is not JSON or form data answers 400."""
        response = client.post(
            START_URL,
            content=b"userId=U9",
            headers={**auth_headers(admin_token), "Content-Type": "text/plain"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_target_without_email(self, client: TestClient, admin_token, no_email_user, db_session):
        """Test that a target without email answers 400 and sets nothing."""
        response = client.post(
            START_URL, json={"userId": "U-NOEMAIL"}, headers=auth_headers(admin_token)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "User has no email associated"
        assert set_cookie_headers(response) == []
        assert audit_rows(db_session) == []

    def test_target_not_found(self, client: TestClient, admin_token):
        """Test that an unknown target answers 404."""
        response = client.post(START_URL, json={"userId": "NOPE"}, headers=auth_headers(admin_token))

        assert response.status_code == 404
        assert response.json()["error"] == "USER_NOT_FOUND"

    def test_without_credentials(self, client: TestClient, target_user):
        """Test that an anonymous caller answers 401."""
        response = client.post(START_URL, json={"userId": "U9"})

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHENTICATED"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self, client: TestClient, target_user):
        """Test that a forged token answers 401."""
        response = client.post(
            START_URL, json={"userId": "U9"}, headers=auth_headers("forged.token.value")
        )

        assert response.status_code == 401

    def test_non_admin(self, client: TestClient, support_token, target_user, db_session):
        """Test that a non-admin answers 403 and nothing is minted or set."""
        response = client.post(
            START_URL, json={"userId": "U9"}, headers=auth_headers(support_token)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"
        assert "customToken" not in response.json()
        assert set_cookie_headers(response) == []
        assert audit_rows(db_session) == []

    def test_delegated_credential(self, client: TestClient, identity, admin_user, target_user):
        """Test that a credential carrying impersonatedBy cannot start again."""
        token = identity.create_access_token("A1", extra_claims={IMPERSONATED_BY_CLAIM: "A2"})

        response = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(token))

        assert response.status_code == 400
        assert response.json()["error"] == "ADMIN_SESSION_NOT_FOUND"

    def test_provider_not_configured(self, client: TestClient, admin_token, target_user):
        """Test that an unconfigured provider answers 501."""
        from actas.api.main import app

        app.dependency_overrides[get_settings] = lambda: make_settings(identity_project_id="")

        response = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))

        assert response.status_code == 501
        assert response.json()["error"] == "IDENTITY_PROVIDER_NOT_CONFIGURED"

    def test_nested_start_replaces_session(
        self, client: TestClient, admin_token, other_admin_user, target_user, db_session,
        identity, settings,
    ):
        """Test that a second start overwrites the first and records it."""
        other_token = identity.create_access_token(other_admin_user.id)
        client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))

        response = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(other_token))

        assert response.status_code == 200
        rows = audit_rows(db_session)
        assert len(rows) == 2
        assert rows[1].admin_id == "A2"
        assert rows[1].details["replacedAdminId"] == "A1"
        assert rows[1].details["replacedTargetUserId"] == "U9"

        codec = ImpersonationCodec.from_settings(settings)
        assert codec.decode_session(client.cookies.get(SESSION_COOKIE)).admin_id == "A2"

    def test_nested_start_conflict(self, client: TestClient, admin_token, target_user):
        """Test that a second start answers 409 when replacement is disabled."""
        from actas.api.main import app

        app.dependency_overrides[get_settings] = lambda: make_settings(
            impersonation_allow_replace=False
        )
        first = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))
        second = client.post(START_URL, json={"userId": "U9"}, headers=auth_headers(admin_token))

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"] == "IMPERSONATION_ACTIVE"


class TestExitImpersonation:
    """Tests for POST /api/v1/admin/impersonate/exit."""

    def _start(self, client, token, **body):
        response = client.post(
            START_URL, json={"userId": "U9", **body}, headers=auth_headers(token)
        )
        assert response.status_code == 200
        return response

    def test_exit_redirects_to_return_to(
        self, client: TestClient, admin_token, target_user, db_session
    ):
        """Test that exit clears cookies and returns to the saved page."""
        self._start(client, admin_token)

        response = client.post(EXIT_URL, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/admin/users/U9"

        headers = set_cookie_headers(response)
        assert len(headers) == 2
        for name, header in zip((SESSION_COOKIE, TARGET_COOKIE), headers):
            assert header.startswith(f"{name}=")
            assert "max-age=0" in header.lower()
            assert "path=/" in header.lower()

        assert client.cookies.get(SESSION_COOKIE) is None
        assert client.cookies.get(TARGET_COOKIE) is None

        rows = audit_rows(db_session)
        assert [row.action for row in rows] == ["IMPERSONATE_START", "IMPERSONATE_STOP"]
        assert rows[1].admin_id == "A1"
        assert rows[1].target_user_id == "U9"
        assert rows[1].route == EXIT_URL
        assert rows[1].details == {"redirectTo": "/admin/users/U9"}

    def test_exit_with_safe_override(self, client: TestClient, admin_token, target_user):
        """Test that a safe redirect query parameter wins."""
        self._start(client, admin_token)

        response = client.post(
            EXIT_URL, params={"redirect": "/admin/reports"}, follow_redirects=False
        )

        assert response.headers["location"] == "/admin/reports"

    def test_exit_with_unsafe_override(self, client: TestClient, admin_token, target_user):
        """Test that an unsafe override falls back to the saved page."""
        self._start(client, admin_token, returnTo="/admin/users")

        response = client.post(
            EXIT_URL, params={"redirect": "//evil.com"}, follow_redirects=False
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/admin/users"

    def test_exit_without_session(self, client: TestClient, db_session):
        """Test that exit without a session answers 400 and writes nothing."""
        response = client.post(EXIT_URL, follow_redirects=False)

        assert response.status_code == 400
        assert response.json()["error"] == "NO_ACTIVE_SESSION"
        assert set_cookie_headers(response) == []
        assert audit_rows(db_session) == []

    def test_exit_twice(self, client: TestClient, admin_token, target_user, db_session):
        """Test that a second exit finds no session."""
        self._start(client, admin_token)

        first = client.post(EXIT_URL, follow_redirects=False)
        second = client.post(EXIT_URL, follow_redirects=False)

        assert first.status_code == 303
        assert second.status_code == 400
        assert len(audit_rows(db_session)) == 2

    def test_exit_with_tampered_cookie(self, client: TestClient, db_session):
        """Test that a forged session cookie is treated as no session."""
        client.cookies.set(SESSION_COOKIE, "forged-value")

        response = client.post(EXIT_URL, follow_redirects=False)

        assert response.status_code == 400
        assert audit_rows(db_session) == []


class TestImpersonationScenario:
    """Admin A1 impersonates U9 and comes back."""

    def test_full_round_trip(self, client: TestClient, admin_token, target_user, db_session):
        """Test start, status, exit and status again."""
        start = client.post(
            START_URL,
            json={"userId": "U9", "returnTo": "/admin/users/U9"},
            headers=auth_headers(admin_token),
        )
        assert start.status_code == 200
        assert start.json()["customToken"]

        status = client.get(STATUS_URL).json()
        assert status["isImpersonating"] is True
        assert status["adminId"] == "A1"
        assert status["targetUser"] == {"id": "U9", "email": "u9@example.com"}
        assert status["startedAt"] is not None
        assert status["expiresAt"] is not None

        exit_response = client.post(EXIT_URL, follow_redirects=False)
        assert exit_response.status_code == 303
        assert exit_response.headers["location"] == "/admin/users/U9"

        assert client.get(STATUS_URL).json()["isImpersonating"] is False

        actions = [(row.action, row.admin_id, row.target_user_id) for row in audit_rows(db_session)]
        assert actions == [
            ("IMPERSONATE_START", "A1", "U9"),
            ("IMPERSONATE_STOP", "A1", "U9"),
        ]


class TestImpersonationStatus:
    """Tests for GET /api/v1/admin/impersonate/status."""

    def test_status_without_cookies(self, client: TestClient):
        """Test that a fresh browser is not impersonating."""
        response = client.get(STATUS_URL)

        assert response.status_code == 200
        assert response.json()["isImpersonating"] is False
        assert response.json()["adminId"] is None

    @pytest.mark.parametrize("value", ["garbage", ""])
    def test_status_with_invalid_cookie(self, client: TestClient, value):
        """Test that an undecodable cookie reads as not impersonating."""
        client.cookies.set(SESSION_COOKIE, value)

        assert client.get(STATUS_URL).json()["isImpersonating"] is False
