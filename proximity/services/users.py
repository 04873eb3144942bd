from __future__ import annotations

import re

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.exceptions import ConflictError, NotFoundError, ValidationError
from proximity.core.session import UserSession
from proximity.models.friendship import FriendshipStatus
from proximity.models.user import User
from proximity.repositories.friendship_repository import FriendshipRepository
from proximity.repositories.user_repository import UserRepository
from proximity.schemas.user import (
    FriendRelation,
    ProfileUpdateRequest,
    UserOut,
    UserSearchItem,
)
from proximity.services.channels import validate_categories
from proximity.services.mappers import user_out
from proximity.utils.datetime import utcnow
from proximity.utils.geo import Coordinate, to_coordinate

logger = structlog.get_logger(__name__)

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")


def validate_username(username: str) -> str:
    """Return an error message for an invalid username, or ""."""
    if len(username) < 3:
        return "Username must be at least 3 characters"
    if len(username) > 20:
        return "Username must be at most 20 characters"
    if not _USERNAME_RE.match(username):
        return "Username can only contain letters, numbers, and underscores"
    return ""


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self.repo = UserRepository(session)
        self.friendships = FriendshipRepository(session)
        self.session = session

    async def register(self, *, email: str, full_name: str, avatar_url: str | None) -> UserOut:
        if await self.repo.get_by_email(email) is not None:
            raise ConflictError("email already registered")
        user = await self.repo.create(email=email, full_name=full_name, avatar_url=avatar_url)
        await self.session.commit()
        logger.info("user_registered", user_id=user.id)
        return user_out(user)

    async def resolve_session(self, email: str) -> UserSession | None:
        """Build the caller context for a request, or None for unknown emails."""
        user = await self.repo.get_by_email(email)
        if user is None:
            return None
        return UserSession(
            user_id=int(user.id),
            email=user.email,
            full_name=str(user.full_name or ""),
            location=to_coordinate(user.latitude, user.longitude),
        )

    async def _require(self, ctx: UserSession) -> User:
        user = await self.repo.get(ctx.user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    async def get_me(self, ctx: UserSession) -> UserOut:
        return user_out(await self._require(ctx))

    async def update_profile(self, ctx: UserSession, payload: ProfileUpdateRequest) -> UserOut:
        user = await self._require(ctx)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        await self.session.commit()
        return user_out(user)

    async def update_location(self, ctx: UserSession, coord: Coordinate) -> UserOut:
        user = await self._require(ctx)
        user.latitude = coord.latitude
        user.longitude = coord.longitude
        user.location_updated_at = utcnow()
        await self.session.commit()
        return user_out(user)

    async def update_interests(self, ctx: UserSession, interests: list[str]) -> UserOut:
        user = await self._require(ctx)
        user.interests = validate_categories(interests)
        await self.session.commit()
        return user_out(user)

    async def set_username(self, ctx: UserSession, username: str) -> UserOut:
        username = username.strip()
        error = validate_username(username)
        if error:
            raise ValidationError(error)
        user = await self._require(ctx)
        taken = await self.repo.get_by_username(username)
        if taken is not None and taken.id != user.id:
            raise ConflictError("Username is already taken")
        user.username = username.lower()
        user.username_lower = username.lower()
        await self.session.commit()
        return user_out(user)

    async def complete_onboarding(self, ctx: UserSession, interests: list[str]) -> UserOut:
        user = await self._require(ctx)
        user.interests = validate_categories(interests)
        user.onboarding_completed = True
        await self.session.commit()
        logger.info("onboarding_completed", user_id=user.id, interests=len(user.interests))
        return user_out(user)

    async def search(self, ctx: UserSession, q: str, *, limit: int = 20) -> list[UserSearchItem]:
        if not q.strip():
            return []
        users = await self.repo.search_by_username(q, exclude_id=ctx.user_id, limit=limit)
        relations: dict[int, FriendRelation] = {}
        for row in await self.friendships.for_user(ctx.user_id):
            other = row.addressee_id if row.requester_id == ctx.user_id else row.requester_id
            if row.status == FriendshipStatus.accepted:
                relations[other] = FriendRelation.friend
            elif row.requester_id == ctx.user_id:
                relations[other] = FriendRelation.request_sent
            else:
                relations[other] = FriendRelation.request_received
        return [
            UserSearchItem(
                id=int(u.id),
                full_name=str(u.full_name or ""),
                username=u.username,
                avatar_url=u.avatar_url,
                relation=relations.get(int(u.id), FriendRelation.none),
            )
            for u in users
        ]
