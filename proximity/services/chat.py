"""Topic channels: location-filtered messages, nearby users and slowmode."""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.config import Settings, get_settings
from proximity.core.exceptions import SlowmodeError
from proximity.core.session import UserSession
from proximity.models.user import User
from proximity.repositories.message_repository import MessageRepository
from proximity.repositories.user_repository import UserRepository
from proximity.schemas.chat import (
    ChannelUsersResponse,
    MessageCreateRequest,
    MessageItem,
    MessageListResponse,
    NearbyUserItem,
)
from proximity.services.channels import get_channel
from proximity.services.mappers import message_item
from proximity.services.slowmode import SlowmodeRegistry, is_slowmode_active
from proximity.utils.datetime import utcnow
from proximity.utils.geo import AnnotatedRecord, Coordinate, filter_nearby, to_coordinate

logger = structlog.get_logger(__name__)


def _user_coordinate(u: User) -> Coordinate | None:
    return to_coordinate(u.latitude, u.longitude)


class ChatService:
    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.messages = MessageRepository(session)
        self.users = UserRepository(session)
        self.session = session
        self.settings = settings or get_settings()

    async def list_messages(self, channel: str, origin: Coordinate) -> MessageListResponse:
        get_channel(channel)
        recent = await self.messages.list_recent(channel, limit=self.settings.feed_fetch_limit)
        nearby = filter_nearby(origin, self.settings.nearby_radius_miles, recent)
        # fetched newest first, shown oldest first
        items = [message_item(r.record, distance=r.distance) for r in reversed(nearby)]
        return MessageListResponse(channel=channel, items=items)

    async def _nearby_users(
        self, ctx: UserSession, origin: Coordinate
    ) -> list[AnnotatedRecord[User]]:
        located = await self.users.list_located(exclude_id=ctx.user_id)
        return filter_nearby(
            origin, self.settings.nearby_radius_miles, located, locate=_user_coordinate
        )

    async def nearby_users(
        self, ctx: UserSession, channel: str, origin: Coordinate
    ) -> ChannelUsersResponse:
        get_channel(channel)
        nearby = await self._nearby_users(ctx, origin)
        users = [
            NearbyUserItem(
                id=int(r.record.id),
                name=str(r.record.full_name or r.record.username or ""),
                avatar_url=r.record.avatar_url,
                distance_miles=round(r.distance, 3),
            )
            for r in nearby
        ]
        return ChannelUsersResponse(
            channel=channel,
            users=users,
            slowmode_active=is_slowmode_active(len(users), self.settings.slowmode_threshold),
            slowmode_seconds=self.settings.slowmode_seconds,
        )

    async def send_message(
        self,
        ctx: UserSession,
        channel: str,
        payload: MessageCreateRequest,
        registry: SlowmodeRegistry,
        *,
        now: datetime | None = None,
    ) -> MessageItem:
        get_channel(channel)
        origin = Coordinate(payload.latitude, payload.longitude)
        occupancy = len(await self._nearby_users(ctx, origin))
        now = now or utcnow()
        state, allowed = registry.check(ctx.user_id, channel, occupancy, now)
        if not allowed:
            raise SlowmodeError(state.cooldown_seconds_remaining)

        message = await self.messages.create(
            channel=channel,
            sender_id=ctx.user_id,
            content=payload.content,
            latitude=payload.latitude,
            longitude=payload.longitude,
        )
        await self.session.commit()
        registry.record(ctx.user_id, channel, state, now)
        logger.info(
            "message_sent",
            message_id=message.id,
            channel=channel,
            occupancy=occupancy,
            slowmode=state.is_active,
        )
        return message_item(message, distance=0.0)


_registry: SlowmodeRegistry | None = None


def get_registry() -> SlowmodeRegistry:
    """Process-wide slowmode registry sized from settings."""
    global _registry
    if _registry is None:
        settings = get_settings()
        _registry = SlowmodeRegistry(
            threshold=settings.slowmode_threshold,
            cooldown_seconds=settings.slowmode_seconds,
        )
    return _registry
