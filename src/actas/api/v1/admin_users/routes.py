"""Admin user listing routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from actas.api.dependencies.auth import get_identity_provider, require_admin
from actas.api.v1.admin_users.schemas import AdminUserListResponse, AdminUserResponse, Pagination
from actas.infrastructure.identity import LocalIdentityProvider

router = APIRouter()

MAX_PER_PAGE = 200


@router.get("", response_model=AdminUserListResponse)
def list_users(
    current_admin: Annotated[str, Depends(require_admin)],
    identity: Annotated[LocalIdentityProvider, Depends(get_identity_provider)],
    search: Optional[str] = Query(None, description="Search by user ID or email"),
    per_page: int = Query(25, alias="perPage", description="Users per page (1-200)"),
) -> AdminUserListResponse:
    """List users that can be impersonated.

    Requires admin privileges.
    """
    per_page = min(MAX_PER_PAGE, max(1, per_page))
    term = (search or "").strip() or None

    # One extra row tells whether another page exists
    users = identity.list_users(limit=per_page + 1, search=term)
    has_more = len(users) > per_page

    return AdminUserListResponse(
        users=[
            AdminUserResponse(
                id=user.uid,
                email=user.email,
                display_name=user.display_name,
                is_admin=user.is_admin,
                disabled=user.disabled,
                custom_claims=user.custom_claims,
                created_at=user.created_at,
                last_sign_in_at=user.last_sign_in_at,
            )
            for user in users[:per_page]
        ],
        pagination=Pagination(per_page=per_page, has_more=has_more),
    )
