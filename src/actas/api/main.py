"""FastAPI application for actas."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from actas import __version__
from actas.api.errors import register_exception_handlers
from actas.api.v1.router import api_router as v1_router
from actas.core.config import get_settings
from actas.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    configure_logging()
    settings = get_settings()
    logger.info(f"Starting actas ({settings.environment})...")
    if not settings.identity_provider_configured:
        logger.warning(
            "Identity provider is not configured; impersonation endpoints will answer 501. "
            "Set IDENTITY_PROJECT_ID and IDENTITY_SIGNING_KEY."
        )

    yield

    logger.info("Shutting down application...")


# Middleware to strip trailing slashes (avoid 307 redirects)
class TrailingSlashMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Remove trailing slash from path (except for root "/")
        if request.url.path != "/" and request.url.path.endswith("/"):
            scope = request.scope
            scope["path"] = request.url.path.rstrip("/")
        return await call_next(request)


app = FastAPI(
    title="actas API",
    description="Admin impersonation service with cookie-carried sessions and an audit trail",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,  # Disable automatic trailing slash redirects
)

register_exception_handlers(app)

app.add_middleware(TrailingSlashMiddleware)

# Configure CORS - MUST be added last to be processed first
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
