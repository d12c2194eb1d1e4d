"""Exception handlers mapping domain errors to structured responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from actas.domain.exceptions import ImpersonationError, Unauthenticated

logger = logging.getLogger(__name__)


async def impersonation_error_handler(request: Request, exc: ImpersonationError) -> JSONResponse:
    """Render ``{"ok": false, "error": code, "message": message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.code, "message": exc.message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ImpersonationError, impersonation_error_handler)
