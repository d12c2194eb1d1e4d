"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Impersonation sessions must stay bounded to a working day
MAX_IMPERSONATION_COOKIE_AGE_SECONDS = 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./actas.db"

    # Authentication & Security
    jwt_secret_key: str = Field(
        default="change-this-secret-key-in-production",
        description="Secret key for bearer token signing. MUST be changed in production!",
    )
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 480  # 8 hours

    # Identity provider
    identity_project_id: str = ""
    identity_service_account: str = "actas-identity@localhost"
    identity_signing_key: str = ""
    identity_token_audience: str = "actas-identity-toolkit"
    admin_user_ids: str = ""

    # Impersonation cookies
    impersonation_cookie_secret: str = ""
    impersonation_cookie_max_age_seconds: int = Field(
        default=8 * 60 * 60,
        gt=0,
        le=MAX_IMPERSONATION_COOKIE_AGE_SECONDS,
    )
    impersonation_cookie_secure: bool | None = None
    impersonation_cookie_domain: str | None = None
    impersonation_allow_replace: bool = True
    impersonation_workspace_path: str = "/app"
    impersonation_exit_path: str = "/admin"

    # CORS
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    @field_validator("admin_user_ids", "cors_allowed_origins")
    @classmethod
    def parse_csv_list(cls, v: str) -> list[str]:
        """Parse comma-separated list."""
        if not v:
            return []
        return [item.strip() for item in v.split(",") if item.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def identity_provider_configured(self) -> bool:
        """True when the identity provider integration can mint credentials."""
        return bool(self.identity_project_id and self.identity_signing_key)

    @property
    def cookie_secure(self) -> bool:
        """Secure flag for impersonation cookies (defaults to production only)."""
        if self.impersonation_cookie_secure is not None:
            return self.impersonation_cookie_secure
        return self.is_production

    @property
    def cookie_secret(self) -> str:
        return self.impersonation_cookie_secret or self.jwt_secret_key


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
