from __future__ import annotations

from fastapi import APIRouter, Depends

from proximity.api.deps import get_current_session, get_friend_service
from proximity.core.session import UserSession
from proximity.schemas.common import ErrorResponse
from proximity.schemas.user import FriendRequestCreate, FriendRequestResult, UserPublic
from proximity.services.friends import FriendService

router = APIRouter(prefix="/me", tags=["friends"])

_NO_REQUEST = {404: {"model": ErrorResponse, "description": "No pending request"}}


@router.get("/friends", response_model=list[UserPublic], summary="Accepted friends")
async def list_friends(
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    return await svc.list_friends(ctx)


@router.get(
    "/friend-requests", response_model=list[UserPublic], summary="Pending requests received"
)
async def list_friend_requests(
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    return await svc.list_requests(ctx)


@router.post(
    "/friend-requests",
    response_model=FriendRequestResult,
    status_code=201,
    summary="Send a friend request",
    description="Accepts instead when the other user already sent one.",
    responses={
        400: {"model": ErrorResponse, "description": "Request to self"},
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Already friends or pending"},
    },
)
async def send_friend_request(
    payload: FriendRequestCreate,
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    status = await svc.send_request(ctx, payload.user_id)
    return FriendRequestResult(user_id=payload.user_id, status=status.value)


@router.post(
    "/friend-requests/{user_id}/accept", status_code=204, summary="Accept", responses=_NO_REQUEST
)
async def accept_friend_request(
    user_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    await svc.accept(ctx, user_id)
    return None


@router.post(
    "/friend-requests/{user_id}/reject", status_code=204, summary="Reject", responses=_NO_REQUEST
)
async def reject_friend_request(
    user_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    await svc.reject(ctx, user_id)
    return None


@router.delete("/friends/{user_id}", status_code=204, summary="Unfriend (idempotent)")
async def remove_friend(
    user_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: FriendService = Depends(get_friend_service),
):
    await svc.remove(ctx, user_id)
    return None
