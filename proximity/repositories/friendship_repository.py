from __future__ import annotations

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models.friendship import Friendship, FriendshipStatus


class FriendshipRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, *, requester_id: int, addressee_id: int) -> Friendship | None:
        return await self._session.get(Friendship, (int(requester_id), int(addressee_id)))

    async def between(self, a: int, b: int) -> Friendship | None:
        """The row linking two users in either direction."""
        stmt = select(Friendship).where(
            or_(
                and_(Friendship.requester_id == a, Friendship.addressee_id == b),
                and_(Friendship.requester_id == b, Friendship.addressee_id == a),
            )
        )
        return (await self._session.execute(stmt)).scalars().first()

    async def create(self, *, requester_id: int, addressee_id: int) -> Friendship:
        row = Friendship(
            requester_id=int(requester_id),
            addressee_id=int(addressee_id),
            status=FriendshipStatus.pending,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def for_user(self, user_id: int) -> list[Friendship]:
        stmt = select(Friendship).where(
            or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def friend_ids(self, user_id: int) -> list[int]:
        out: list[int] = []
        for row in await self.for_user(user_id):
            if row.status != FriendshipStatus.accepted:
                continue
            out.append(row.addressee_id if row.requester_id == user_id else row.requester_id)
        return out

    async def pending_requester_ids(self, addressee_id: int) -> list[int]:
        stmt = (
            select(Friendship.requester_id)
            .where(
                Friendship.addressee_id == int(addressee_id),
                Friendship.status == FriendshipStatus.pending,
            )
            .order_by(Friendship.created_at.desc())
        )
        return [int(i) for i in (await self._session.execute(stmt)).scalars().all()]

    async def remove_between(self, a: int, b: int) -> None:
        stmt = delete(Friendship).where(
            or_(
                and_(Friendship.requester_id == a, Friendship.addressee_id == b),
                and_(Friendship.requester_id == b, Friendship.addressee_id == a),
            )
        )
        await self._session.execute(stmt)
