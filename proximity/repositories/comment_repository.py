from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models.comment import Comment


class CommentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, comment_id: int) -> Comment | None:
        return await self._session.get(Comment, int(comment_id))

    async def list_for_post(self, post_id: int) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.post_id == int(post_id))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, *, post_id: int, author_id: int, content: str) -> Comment:
        comment = Comment(post_id=int(post_id), author_id=int(author_id), content=content)
        self._session.add(comment)
        await self._session.flush()
        await self._session.refresh(comment, attribute_names=["author"])
        return comment

    async def delete(self, comment: Comment) -> None:
        await self._session.delete(comment)
