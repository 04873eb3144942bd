from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.exceptions import ConflictError, NotFoundError, ValidationError
from proximity.core.session import UserSession
from proximity.models.friendship import FriendshipStatus
from proximity.repositories.friendship_repository import FriendshipRepository
from proximity.repositories.user_repository import UserRepository
from proximity.schemas.user import UserPublic
from proximity.services.mappers import user_public

logger = structlog.get_logger(__name__)


class FriendService:
    """Friend requests and the accepted friend list.

    One row per pair of users. A request the other side already sent is
    accepted instead of creating a second row.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.repo = FriendshipRepository(session)
        self.users = UserRepository(session)
        self.session = session

    async def list_friends(self, ctx: UserSession) -> list[UserPublic]:
        users = await self.users.get_many(await self.repo.friend_ids(ctx.user_id))
        return [user_public(u) for u in users]

    async def list_requests(self, ctx: UserSession) -> list[UserPublic]:
        """Pending requests received by the caller, newest first."""
        ids = await self.repo.pending_requester_ids(ctx.user_id)
        by_id = {int(u.id): u for u in await self.users.get_many(ids)}
        return [user_public(by_id[i]) for i in ids if i in by_id]

    async def send_request(self, ctx: UserSession, target_id: int) -> FriendshipStatus:
        if target_id == ctx.user_id:
            raise ValidationError("cannot send a friend request to yourself")
        if await self.users.get(target_id) is None:
            raise NotFoundError("user not found")

        existing = await self.repo.between(ctx.user_id, target_id)
        if existing is not None:
            if existing.status == FriendshipStatus.accepted:
                raise ConflictError("already friends")
            if existing.requester_id == ctx.user_id:
                raise ConflictError("friend request already sent")
            existing.status = FriendshipStatus.accepted
            await self.session.commit()
            logger.info("friend_request_accepted", user_id=ctx.user_id, other_id=target_id)
            return FriendshipStatus.accepted

        await self.repo.create(requester_id=ctx.user_id, addressee_id=target_id)
        await self.session.commit()
        logger.info("friend_request_sent", user_id=ctx.user_id, other_id=target_id)
        return FriendshipStatus.pending

    async def _pending_from(self, ctx: UserSession, requester_id: int):
        row = await self.repo.get(requester_id=requester_id, addressee_id=ctx.user_id)
        if row is None or row.status != FriendshipStatus.pending:
            raise NotFoundError("friend request not found")
        return row

    async def accept(self, ctx: UserSession, requester_id: int) -> None:
        row = await self._pending_from(ctx, requester_id)
        row.status = FriendshipStatus.accepted
        await self.session.commit()
        logger.info("friend_request_accepted", user_id=ctx.user_id, other_id=requester_id)

    async def reject(self, ctx: UserSession, requester_id: int) -> None:
        row = await self._pending_from(ctx, requester_id)
        await self.session.delete(row)
        await self.session.commit()

    async def remove(self, ctx: UserSession, other_id: int) -> None:
        await self.repo.remove_between(ctx.user_id, other_id)
        await self.session.commit()
