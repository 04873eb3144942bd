from __future__ import annotations

from fastapi import APIRouter, Depends

from proximity.api.deps import (
    get_chat_service,
    get_current_session,
    get_origin,
    get_slowmode_registry,
)
from proximity.core.session import UserSession
from proximity.schemas.chat import (
    ChannelItem,
    ChannelUsersResponse,
    MessageCreateRequest,
    MessageItem,
    MessageListResponse,
)
from proximity.schemas.common import ErrorResponse
from proximity.services.channels import INTEREST_CATEGORIES
from proximity.services.chat import ChatService
from proximity.services.slowmode import SlowmodeRegistry
from proximity.utils.geo import Coordinate

router = APIRouter(prefix="/channels", tags=["channels"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown channel"}}


@router.get("", response_model=list[ChannelItem], summary="Interest channels")
async def list_channels():
    return [ChannelItem(id=c.id, label=c.label, emoji=c.emoji) for c in INTEREST_CATEGORIES]


@router.get(
    "/{channel}/messages",
    response_model=MessageListResponse,
    summary="Nearby messages, oldest first",
    responses=_NOT_FOUND,
)
async def list_messages(
    channel: str,
    origin: Coordinate = Depends(get_origin),
    _: UserSession = Depends(get_current_session),
    svc: ChatService = Depends(get_chat_service),
):
    return await svc.list_messages(channel, origin)


@router.get(
    "/{channel}/users",
    response_model=ChannelUsersResponse,
    summary="Other users within the nearby radius",
    responses=_NOT_FOUND,
)
async def list_channel_users(
    channel: str,
    origin: Coordinate = Depends(get_origin),
    ctx: UserSession = Depends(get_current_session),
    svc: ChatService = Depends(get_chat_service),
):
    return await svc.nearby_users(ctx, channel, origin)


@router.post(
    "/{channel}/messages",
    response_model=MessageItem,
    status_code=201,
    summary="Send a message",
    description="Rejected with 429 while the sender's slowmode cooldown runs.",
    responses={**_NOT_FOUND, 429: {"description": "Slowmode cooldown active"}},
)
async def send_message(
    channel: str,
    payload: MessageCreateRequest,
    ctx: UserSession = Depends(get_current_session),
    svc: ChatService = Depends(get_chat_service),
    registry: SlowmodeRegistry = Depends(get_slowmode_registry),
):
    return await svc.send_message(ctx, channel, payload, registry)
