from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models.message import Message


class MessageRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_recent(self, channel: str, *, limit: int) -> list[Message]:
        """Newest first, capped at ``limit``."""
        stmt = (
            select(Message)
            .where(Message.channel == channel)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, **values) -> Message:
        message = Message(**values)
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message, attribute_names=["sender"])
        return message
