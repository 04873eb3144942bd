from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from proximity.api.deps import get_current_session, get_user_service
from proximity.core.session import UserSession
from proximity.schemas.common import ErrorResponse
from proximity.schemas.user import UserCreateRequest, UserOut, UserSearchItem
from proximity.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserOut,
    status_code=201,
    summary="Register a user",
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}},
)
async def register_user(
    payload: UserCreateRequest,
    svc: UserService = Depends(get_user_service),
):
    return await svc.register(
        email=str(payload.email), full_name=payload.full_name, avatar_url=payload.avatar_url
    )


@router.get(
    "/search",
    response_model=list[UserSearchItem],
    summary="Search users by username",
    description="Case-insensitive substring match, excluding the caller.",
)
async def search_users(
    q: str = Query("", max_length=64, description="Username fragment"),
    limit: int = Query(20, ge=1, le=50),
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.search(ctx, q, limit=limit)
