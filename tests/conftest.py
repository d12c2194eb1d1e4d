"""Pytest configuration and fixtures."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from actas.api.dependencies import get_db
from actas.api.main import app
from actas.core.config import Settings, get_settings
from actas.infrastructure.database import Base
from actas.infrastructure.database.models import User, UserRole
from actas.infrastructure.identity import LocalIdentityProvider


# =============================================================================
# Settings Fixtures
# =============================================================================

def make_settings(**overrides) -> Settings:
    """Build settings for tests without reading .env files."""
    values = {
        "environment": "development",
        "jwt_secret_key": "test-jwt-secret",
        "identity_project_id": "actas-test",
        "identity_signing_key": "test-identity-signing-key",
        "impersonation_cookie_secret": "test-cookie-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    """Settings with the identity provider configured."""
    return make_settings()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a test database session using SQLite in-memory."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Single connection pool for shared in-memory DB
    )

    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()

    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def client(db_session: Session, settings: Settings) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with database and settings overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# User Fixtures
# =============================================================================

def _add_user(db_session: Session, **fields) -> User:
    user = User(**fields)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session: Session) -> User:
    """Create an admin user."""
    return _add_user(
        db_session,
        id="A1",
        email="admin@example.com",
        display_name="Admin User",
        role=UserRole.ADMIN.value,
    )


@pytest.fixture
def other_admin_user(db_session: Session) -> User:
    """Create a second admin user."""
    return _add_user(
        db_session,
        id="A2",
        email="admin2@example.com",
        display_name="Second Admin",
        role=UserRole.ADMIN.value,
    )


@pytest.fixture
def support_user(db_session: Session) -> User:
    """Create a non-admin staff user."""
    return _add_user(
        db_session,
        id="S1",
        email="support@example.com",
        display_name="Support User",
        role=UserRole.SUPPORT.value,
    )


@pytest.fixture
def target_user(db_session: Session) -> User:
    """Create the user to be impersonated."""
    return _add_user(
        db_session,
        id="U9",
        email="u9@example.com",
        display_name="Target User",
        role=UserRole.MEMBER.value,
    )


@pytest.fixture
def no_email_user(db_session: Session) -> User:
    """Create a user without an email on file."""
    return _add_user(
        db_session,
        id="U-NOEMAIL",
        email=None,
        display_name="No Email",
        role=UserRole.MEMBER.value,
    )


@pytest.fixture
def disabled_user(db_session: Session) -> User:
    """Create a disabled user."""
    return _add_user(
        db_session,
        id="U-DISABLED",
        email="disabled@example.com",
        role=UserRole.MEMBER.value,
        is_active=False,
    )


# =============================================================================
# Token Fixtures
# =============================================================================

@pytest.fixture
def identity(db_session: Session, settings: Settings) -> LocalIdentityProvider:
    """Local identity provider bound to the test database."""
    return LocalIdentityProvider(db_session, settings)


@pytest.fixture
def admin_token(identity: LocalIdentityProvider, admin_user: User) -> str:
    """Generate bearer token for the admin user."""
    return identity.create_access_token(admin_user.id)


@pytest.fixture
def support_token(identity: LocalIdentityProvider, support_user: User) -> str:
    """Generate bearer token for the support user."""
    return identity.create_access_token(support_user.id)


def auth_headers(token: str) -> dict:
    """Helper to create authorization headers."""
    return {"Authorization": f"Bearer {token}"}
