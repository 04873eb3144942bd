from __future__ import annotations

from pydantic import BaseModel, Field

from proximity.schemas.common import CoordinateIn, LongText, ShortText
from proximity.schemas.user import UserPublic


class PostCreateRequest(CoordinateIn):
    content: LongText
    category: str = Field(default="casual_chats", description="Channel id")
    image_url: str | None = Field(default=None, description="URL from the upload service")


class PostItem(BaseModel):
    id: int
    author: UserPublic
    content: str
    category: str
    image_url: str | None = None
    latitude: float
    longitude: float
    created_at: str | None = None
    distance_miles: float | None = Field(default=None, description="Distance from the viewer")
    like_count: int = 0
    liked_by_me: bool = False
    comment_count: int = 0


class PostListResponse(BaseModel):
    items: list[PostItem]
    radius_miles: float


class ClusterItem(BaseModel):
    latitude: float = Field(description="Mean latitude of member posts")
    longitude: float = Field(description="Mean longitude of member posts")
    count: int
    posts: list[PostItem]


class ClusterListResponse(BaseModel):
    clusters: list[ClusterItem]
    radius_miles: float
    merge_radius_miles: float


class LikeResponse(BaseModel):
    post_id: int
    liked: bool
    like_count: int


class CommentCreateRequest(BaseModel):
    content: ShortText


class CommentItem(BaseModel):
    id: int
    post_id: int
    author: UserPublic
    content: str
    created_at: str | None = None
