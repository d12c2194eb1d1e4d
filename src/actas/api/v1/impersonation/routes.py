"""Impersonation routes.

Lets an admin act as another user and come back.
"""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse

from actas.api.dependencies.auth import get_verified_admin
from actas.api.dependencies.impersonation import get_impersonation_service
from actas.api.v1.impersonation.cookies import ResponseCookieStore, read_impersonation_cookies
from actas.api.v1.impersonation.schemas import (
    ErrorResponse,
    ImpersonationStartRequest,
    ImpersonationStartResponse,
    ImpersonationStatusResponse,
    TargetUser,
)
from actas.core.config import Settings, get_settings
from actas.domain.services.impersonation_codec import impersonation_cookie_options
from actas.domain.services.impersonation_service import (
    ImpersonationService,
    parse_start_request,
)
from actas.infrastructure.identity import VerifiedIdentity

router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_start_payload(request: Request) -> dict[str, Any]:
    """Extract the raw start payload from a JSON or form-encoded body.

    Anything unreadable becomes an empty payload, which then fails
    validation on the missing ``userId``.
    """
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    if any(form_type in content_type for form_type in FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    return {}


@router.post(
    "",
    response_model=ImpersonationStartResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {
                    "schema": ImpersonationStartRequest.model_json_schema(by_alias=True)
                }
            }
        }
    },
)
def start_impersonation(
    request: Request,
    response: Response,
    admin: Annotated[VerifiedIdentity, Depends(get_verified_admin)],
    payload: Annotated[dict[str, Any], Depends(read_start_payload)],
    service: Annotated[ImpersonationService, Depends(get_impersonation_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ImpersonationStartResponse:
    """Start impersonating a user.

    Returns a delegated sign-in token for the target user. The client signs
    in with it and then navigates to ``redirectTo``. Sets the session and
    target cookies used by exit.
    """
    start_request = parse_start_request(payload)
    session_cookie, target_cookie = read_impersonation_cookies(request)

    store = ResponseCookieStore(impersonation_cookie_options(settings))
    result = service.start(
        admin=admin,
        request=start_request,
        store=store,
        route=request.url.path,
        active_session_cookie=session_cookie,
        active_target_cookie=target_cookie,
    )
    store.apply(response)

    return ImpersonationStartResponse(
        custom_token=result.custom_token,
        redirect_to=result.redirect_to,
        target_user=TargetUser(id=result.target_user_id, email=result.target_email),
    )


@router.post(
    "/exit",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
    responses={400: {"model": ErrorResponse}},
)
def exit_impersonation(
    request: Request,
    service: Annotated[ImpersonationService, Depends(get_impersonation_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    redirect: Optional[str] = Query(None, description="Relative path to land on after exit"),
) -> RedirectResponse:
    """End the impersonation session and redirect back.

    The destination is ``redirect`` when it is a safe relative path, else
    the ``returnTo`` saved at start, else the admin landing page. Both
    impersonation cookies are cleared; the client restores the admin's own
    session once it sees them gone.
    """
    session_cookie, target_cookie = read_impersonation_cookies(request)

    store = ResponseCookieStore(impersonation_cookie_options(settings))
    result = service.exit(
        session_cookie=session_cookie,
        target_cookie=target_cookie,
        redirect_override=redirect,
        store=store,
        route=request.url.path,
    )

    response = RedirectResponse(url=result.destination, status_code=status.HTTP_303_SEE_OTHER)
    store.apply(response)
    return response


@router.get("/status", response_model=ImpersonationStatusResponse)
def get_impersonation_status(
    request: Request,
    service: Annotated[ImpersonationService, Depends(get_impersonation_service)],
) -> ImpersonationStatusResponse:
    """Report whether the caller's browser carries an impersonation session."""
    session_cookie, target_cookie = read_impersonation_cookies(request)
    current = service.status(session_cookie, target_cookie)

    if not current.is_impersonating:
        return ImpersonationStatusResponse(is_impersonating=False)

    target = current.target
    return ImpersonationStatusResponse(
        is_impersonating=True,
        admin_id=current.admin_id,
        target_user=TargetUser(id=target.user_id, email=target.email) if target else None,
        started_at=target.started_at if target else None,
        expires_at=current.expires_at,
    )
