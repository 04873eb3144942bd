from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.config import Settings, get_settings
from proximity.core.exceptions import NotFoundError, PermissionDeniedError
from proximity.core.session import UserSession
from proximity.models.post import Post
from proximity.repositories.comment_repository import CommentRepository
from proximity.repositories.post_repository import PostRepository
from proximity.schemas.post import (
    ClusterItem,
    ClusterListResponse,
    CommentItem,
    LikeResponse,
    PostCreateRequest,
    PostItem,
    PostListResponse,
)
from proximity.services.channels import get_channel
from proximity.services.clustering import build_clusters
from proximity.services.mappers import comment_item, post_item
from proximity.utils.geo import AnnotatedRecord, Coordinate, filter_nearby

logger = structlog.get_logger(__name__)


class PostService:
    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.repo = PostRepository(session)
        self.comments = CommentRepository(session)
        self.session = session
        self.settings = settings or get_settings()

    async def create(self, ctx: UserSession, payload: PostCreateRequest) -> PostItem:
        get_channel(payload.category)
        post = await self.repo.create(
            author_id=ctx.user_id,
            content=payload.content.strip(),
            category=payload.category,
            image_url=payload.image_url,
            latitude=payload.latitude,
            longitude=payload.longitude,
        )
        await self.session.commit()
        logger.info("post_created", post_id=post.id, category=post.category)
        return post_item(post)

    async def nearby_records(
        self, origin: Coordinate, *, category: str | None = None, limit: int | None = None
    ) -> list[AnnotatedRecord[Post]]:
        """Latest posts within the nearby radius, newest first."""
        recent = await self.repo.list_recent(
            limit=limit or self.settings.feed_fetch_limit, category=category
        )
        return filter_nearby(origin, self.settings.nearby_radius_miles, recent)

    async def to_items(
        self, ctx: UserSession, pairs: list[tuple[Post, float | None]]
    ) -> list[PostItem]:
        """Attach like/comment counts to (post, distance) pairs, order kept."""
        ids = [int(p.id) for p, _ in pairs]
        likes = await self.repo.like_counts(ids)
        mine = await self.repo.liked_by(ctx.user_id, ids)
        comments = await self.repo.comment_counts(ids)
        return [
            post_item(
                p,
                distance=d,
                like_count=likes.get(int(p.id), 0),
                liked_by_me=int(p.id) in mine,
                comment_count=comments.get(int(p.id), 0),
            )
            for p, d in pairs
        ]

    async def list_nearby(
        self, ctx: UserSession, origin: Coordinate, *, category: str | None = None
    ) -> PostListResponse:
        if category:
            get_channel(category)
        records = await self.nearby_records(origin, category=category)
        items = await self.to_items(ctx, [(r.record, r.distance) for r in records])
        logger.info(
            "posts_nearby",
            lat=origin.latitude,
            lng=origin.longitude,
            category=category,
            returned=len(items),
        )
        return PostListResponse(items=items, radius_miles=self.settings.nearby_radius_miles)

    async def list_clusters(
        self, ctx: UserSession, origin: Coordinate, *, category: str | None = None
    ) -> ClusterListResponse:
        if category:
            get_channel(category)
        records = await self.nearby_records(origin, category=category)
        pairs = [(r.record, r.distance) for r in records]
        items = {item.id: item for item in await self.to_items(ctx, pairs)}
        clusters = build_clusters(records, self.settings.cluster_radius_miles)
        out = [
            ClusterItem(
                latitude=c.latitude,
                longitude=c.longitude,
                count=c.size,
                posts=[items[int(m.record.id)] for m in c.posts],
            )
            for c in clusters
        ]
        logger.info("posts_clustered", posts=len(records), clusters=len(out))
        return ClusterListResponse(
            clusters=out,
            radius_miles=self.settings.nearby_radius_miles,
            merge_radius_miles=self.settings.cluster_radius_miles,
        )

    async def list_mine(self, ctx: UserSession) -> list[PostItem]:
        posts = await self.repo.list_by_author(ctx.user_id)
        return await self.to_items(ctx, [(p, None) for p in posts])

    async def _require(self, post_id: int) -> Post:
        post = await self.repo.get(post_id)
        if post is None:
            raise NotFoundError("post not found")
        return post

    async def toggle_like(self, ctx: UserSession, post_id: int) -> LikeResponse:
        await self._require(post_id)
        if await self.repo.has_like(post_id=post_id, user_id=ctx.user_id):
            await self.repo.remove_like(post_id=post_id, user_id=ctx.user_id)
            liked = False
        else:
            await self.repo.add_like(post_id=post_id, user_id=ctx.user_id)
            liked = True
        await self.session.commit()
        counts = await self.repo.like_counts([post_id])
        return LikeResponse(post_id=post_id, liked=liked, like_count=counts.get(post_id, 0))

    async def delete(self, ctx: UserSession, post_id: int) -> None:
        post = await self._require(post_id)
        if post.author_id != ctx.user_id:
            raise PermissionDeniedError("only the author can delete this post")
        await self.repo.delete(post)
        await self.session.commit()
        logger.info("post_deleted", post_id=post_id)

    async def list_comments(self, post_id: int) -> list[CommentItem]:
        await self._require(post_id)
        return [comment_item(c) for c in await self.comments.list_for_post(post_id)]

    async def add_comment(self, ctx: UserSession, post_id: int, content: str) -> CommentItem:
        await self._require(post_id)
        comment = await self.comments.create(
            post_id=post_id, author_id=ctx.user_id, content=content.strip()
        )
        await self.session.commit()
        return comment_item(comment)

    async def delete_comment(self, ctx: UserSession, comment_id: int) -> None:
        comment = await self.comments.get(comment_id)
        if comment is None:
            raise NotFoundError("comment not found")
        if comment.author_id != ctx.user_id:
            raise PermissionDeniedError("only the author can delete this comment")
        await self.comments.delete(comment)
        await self.session.commit()
