"""ORM -> response schema mapping shared by services."""

from __future__ import annotations

from proximity.models.comment import Comment
from proximity.models.message import Message
from proximity.models.post import Post
from proximity.models.user import User
from proximity.schemas.chat import MessageItem
from proximity.schemas.post import CommentItem, PostItem
from proximity.schemas.user import UserOut, UserPublic
from proximity.utils.datetime import iso


def user_public(u: User) -> UserPublic:
    return UserPublic(
        id=int(u.id),
        full_name=str(u.full_name or ""),
        username=u.username,
        avatar_url=u.avatar_url,
    )


def user_out(u: User) -> UserOut:
    return UserOut(
        id=int(u.id),
        email=u.email,
        full_name=str(u.full_name or ""),
        username=u.username,
        bio=u.bio,
        avatar_url=u.avatar_url,
        interests=list(u.interests or []),
        onboarding_completed=bool(u.onboarding_completed),
        latitude=u.latitude,
        longitude=u.longitude,
        location_updated_at=iso(u.location_updated_at),
    )


def post_item(
    p: Post,
    *,
    distance: float | None = None,
    like_count: int = 0,
    liked_by_me: bool = False,
    comment_count: int = 0,
) -> PostItem:
    return PostItem(
        id=int(p.id),
        author=user_public(p.author),
        content=p.content,
        category=p.category,
        image_url=p.image_url,
        latitude=float(p.latitude),
        longitude=float(p.longitude),
        created_at=iso(p.created_at),
        distance_miles=round(distance, 3) if distance is not None else None,
        like_count=like_count,
        liked_by_me=liked_by_me,
        comment_count=comment_count,
    )


def comment_item(c: Comment) -> CommentItem:
    return CommentItem(
        id=int(c.id),
        post_id=int(c.post_id),
        author=user_public(c.author),
        content=c.content,
        created_at=iso(c.created_at),
    )


def message_item(m: Message, *, distance: float | None = None) -> MessageItem:
    return MessageItem(
        id=int(m.id),
        channel=m.channel,
        sender=user_public(m.sender),
        content=m.content,
        latitude=float(m.latitude),
        longitude=float(m.longitude),
        created_at=iso(m.created_at),
        distance_miles=round(distance, 3) if distance is not None else None,
    )
