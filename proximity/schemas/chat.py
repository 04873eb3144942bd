from __future__ import annotations

from pydantic import BaseModel, Field

from proximity.schemas.common import CoordinateIn, ShortText
from proximity.schemas.user import UserPublic


class ChannelItem(BaseModel):
    id: str
    label: str
    emoji: str


class MessageCreateRequest(CoordinateIn):
    content: ShortText


class MessageItem(BaseModel):
    id: int
    channel: str
    sender: UserPublic
    content: str
    latitude: float
    longitude: float
    created_at: str | None = None
    distance_miles: float | None = None


class MessageListResponse(BaseModel):
    channel: str
    items: list[MessageItem] = Field(description="Oldest first")


class NearbyUserItem(BaseModel):
    id: int
    name: str
    avatar_url: str | None = None
    distance_miles: float


class ChannelUsersResponse(BaseModel):
    channel: str
    users: list[NearbyUserItem]
    slowmode_active: bool
    slowmode_seconds: int
