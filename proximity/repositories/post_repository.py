from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models.comment import Comment
from proximity.models.post import Post, PostLike


class PostRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, post_id: int) -> Post | None:
        return await self._session.get(Post, int(post_id))

    async def create(self, **values) -> Post:
        post = Post(**values)
        self._session.add(post)
        await self._session.flush()
        await self._session.refresh(post, attribute_names=["author"])
        return post

    async def delete(self, post: Post) -> None:
        await self._session.execute(delete(PostLike).where(PostLike.post_id == post.id))
        await self._session.execute(delete(Comment).where(Comment.post_id == post.id))
        await self._session.delete(post)

    async def list_recent(self, *, limit: int, category: str | None = None) -> list[Post]:
        """Newest first, capped at ``limit`` (the upstream fetch cap)."""
        stmt = select(Post)
        if category:
            stmt = stmt.where(Post.category == category)
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_author(self, author_id: int) -> list[Post]:
        stmt = (
            select(Post)
            .where(Post.author_id == int(author_id))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def like_counts(self, post_ids: list[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        stmt = (
            select(PostLike.post_id, func.count())
            .where(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
        )
        return {int(pid): int(n) for pid, n in (await self._session.execute(stmt)).all()}

    async def liked_by(self, user_id: int, post_ids: list[int]) -> set[int]:
        if not post_ids:
            return set()
        stmt = select(PostLike.post_id).where(
            PostLike.user_id == int(user_id), PostLike.post_id.in_(post_ids)
        )
        return {int(pid) for pid in (await self._session.execute(stmt)).scalars().all()}

    async def comment_counts(self, post_ids: list[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        stmt = (
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
        )
        return {int(pid): int(n) for pid, n in (await self._session.execute(stmt)).all()}

    async def has_like(self, *, post_id: int, user_id: int) -> bool:
        return await self._session.get(PostLike, (int(post_id), int(user_id))) is not None

    async def add_like(self, *, post_id: int, user_id: int) -> None:
        self._session.add(PostLike(post_id=int(post_id), user_id=int(user_id)))
        await self._session.flush()

    async def remove_like(self, *, post_id: int, user_id: int) -> None:
        stmt = delete(PostLike).where(
            PostLike.post_id == int(post_id), PostLike.user_id == int(user_id)
        )
        await self._session.execute(stmt)
