from __future__ import annotations

from fastapi import APIRouter, Depends

from proximity.api.deps import get_current_session, get_post_service, get_user_service
from proximity.core.session import UserSession
from proximity.schemas.common import ErrorResponse
from proximity.schemas.post import PostItem
from proximity.schemas.user import (
    InterestsUpdateRequest,
    LocationUpdateRequest,
    OnboardingRequest,
    ProfileUpdateRequest,
    UsernameUpdateRequest,
    UserOut,
)
from proximity.services.posts import PostService
from proximity.services.users import UserService
from proximity.utils.geo import Coordinate

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserOut, summary="Current user profile")
async def get_me(
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.get_me(ctx)


@router.patch("", response_model=UserOut, summary="Update profile fields")
async def update_me(
    payload: ProfileUpdateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.update_profile(ctx, payload)


@router.put("/location", response_model=UserOut, summary="Store the current coordinate")
async def update_location(
    payload: LocationUpdateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.update_location(ctx, Coordinate(payload.latitude, payload.longitude))


@router.put(
    "/interests",
    response_model=UserOut,
    summary="Replace interest categories",
    responses={400: {"model": ErrorResponse, "description": "Unknown category"}},
)
async def update_interests(
    payload: InterestsUpdateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.update_interests(ctx, payload.interests)


@router.put(
    "/username",
    response_model=UserOut,
    summary="Claim a username",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid username"},
        409: {"model": ErrorResponse, "description": "Username taken"},
    },
)
async def set_username(
    payload: UsernameUpdateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.set_username(ctx, payload.username)


@router.post(
    "/onboarding",
    response_model=UserOut,
    summary="Finish onboarding",
    description="Saves the chosen interests; an empty list skips the step.",
    responses={400: {"model": ErrorResponse, "description": "Unknown category"}},
)
async def complete_onboarding(
    payload: OnboardingRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: UserService = Depends(get_user_service),
):
    return await svc.complete_onboarding(ctx, payload.interests)


@router.get("/posts", response_model=list[PostItem], summary="Caller's posts, newest first")
async def list_my_posts(
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.list_mine(ctx)
