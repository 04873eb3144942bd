from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from proximity.api.deps import get_current_session, get_origin, get_post_service
from proximity.core.session import UserSession
from proximity.schemas.common import ErrorResponse
from proximity.schemas.post import (
    ClusterListResponse,
    CommentCreateRequest,
    CommentItem,
    LikeResponse,
    PostCreateRequest,
    PostItem,
    PostListResponse,
)
from proximity.services.posts import PostService
from proximity.utils.geo import Coordinate

router = APIRouter(prefix="/posts", tags=["posts"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Post not found"}}


@router.post(
    "",
    response_model=PostItem,
    status_code=201,
    summary="Create a post at a coordinate",
    responses={404: {"model": ErrorResponse, "description": "Unknown category"}},
)
async def create_post(
    payload: PostCreateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.create(ctx, payload)


@router.get(
    "/nearby",
    response_model=PostListResponse,
    summary="Posts within the nearby radius",
    description="Latest posts filtered to the radius around lat/lng, newest first.",
)
async def list_nearby_posts(
    category: str | None = Query(None, description="Channel id filter"),
    origin: Coordinate = Depends(get_origin),
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.list_nearby(ctx, origin, category=category)


@router.get(
    "/clusters",
    response_model=ClusterListResponse,
    summary="Nearby posts grouped into map markers",
)
async def list_post_clusters(
    category: str | None = Query(None, description="Channel id filter"),
    origin: Coordinate = Depends(get_origin),
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.list_clusters(ctx, origin, category=category)


@router.post(
    "/{post_id}/like", response_model=LikeResponse, summary="Toggle like", responses=_NOT_FOUND
)
async def toggle_like(
    post_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.toggle_like(ctx, post_id)


@router.delete(
    "/{post_id}",
    status_code=204,
    summary="Delete own post",
    responses={**_NOT_FOUND, 403: {"model": ErrorResponse, "description": "Not the author"}},
)
async def delete_post(
    post_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    await svc.delete(ctx, post_id)
    return None


@router.get(
    "/{post_id}/comments",
    response_model=list[CommentItem],
    summary="Comments, newest first",
    responses=_NOT_FOUND,
)
async def list_comments(
    post_id: int,
    _: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.list_comments(post_id)


@router.post(
    "/{post_id}/comments",
    response_model=CommentItem,
    status_code=201,
    summary="Comment on a post",
    responses=_NOT_FOUND,
)
async def add_comment(
    post_id: int,
    payload: CommentCreateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    return await svc.add_comment(ctx, post_id, payload.content)


comments_router = APIRouter(prefix="/comments", tags=["posts"])


@comments_router.delete(
    "/{comment_id}",
    status_code=204,
    summary="Delete own comment",
    responses={
        404: {"model": ErrorResponse, "description": "Comment not found"},
        403: {"model": ErrorResponse, "description": "Not the author"},
    },
)
async def delete_comment(
    comment_id: int,
    ctx: UserSession = Depends(get_current_session),
    svc: PostService = Depends(get_post_service),
):
    await svc.delete_comment(ctx, comment_id)
    return None
