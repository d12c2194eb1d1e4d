"""Impersonation module for API v1.

Start and exit endpoints for admin impersonation, plus a status probe.
"""

from actas.api.v1.impersonation.routes import router

__all__ = ["router"]
