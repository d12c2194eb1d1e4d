"""Impersonation service dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from actas.api.dependencies.auth import get_identity_provider
from actas.api.dependencies.database import get_db
from actas.core.config import Settings, get_settings
from actas.domain.services.audit_service import DatabaseAuditSink
from actas.domain.services.impersonation_codec import ImpersonationCodec
from actas.domain.services.impersonation_service import (
    ImpersonationConfig,
    ImpersonationService,
)
from actas.infrastructure.identity import LocalIdentityProvider


def get_impersonation_codec(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ImpersonationCodec:
    return ImpersonationCodec.from_settings(settings)


def get_audit_sink(db: Annotated[Session, Depends(get_db)]) -> DatabaseAuditSink:
    return DatabaseAuditSink(db)


def get_impersonation_service(
    identity: Annotated[LocalIdentityProvider, Depends(get_identity_provider)],
    audit_sink: Annotated[DatabaseAuditSink, Depends(get_audit_sink)],
    codec: Annotated[ImpersonationCodec, Depends(get_impersonation_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ImpersonationService:
    """Build the impersonation service with explicit configuration."""
    return ImpersonationService(
        identity=identity,
        audit_sink=audit_sink,
        codec=codec,
        config=ImpersonationConfig.from_settings(settings),
    )
