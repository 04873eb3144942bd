"""API dependency helpers and service providers."""

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.session import UserSession
from proximity.db import get_async_session
from proximity.services.chat import ChatService, get_registry
from proximity.services.friends import FriendService
from proximity.services.geocode import GeocodeService
from proximity.services.location_info import LocationInfoService
from proximity.services.posts import PostService
from proximity.services.slowmode import SlowmodeRegistry
from proximity.services.summary import SummaryService
from proximity.services.users import UserService
from proximity.utils.geo import Coordinate
from proximity.utils.openai_client import OpenAIClientWrapper, build_llm_client

__all__ = [
    "get_async_session",
    "get_current_session",
    "get_origin",
    "get_user_service",
    "get_post_service",
    "get_chat_service",
    "get_friend_service",
    "get_summary_service",
    "get_geocode_service",
    "get_location_info_service",
    "get_llm_client",
    "get_http_client",
    "get_slowmode_registry",
]

USER_HEADER = "X-User-Email"


async def get_current_session(
    x_user_email: str | None = Header(default=None, alias=USER_HEADER),
    session: AsyncSession = Depends(get_async_session),
) -> UserSession:
    """Resolve the caller from the identifying header; 401 when unknown."""
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    ctx = await UserService(session).resolve_session(x_user_email)
    if ctx is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return ctx


def get_origin(
    lat: float = Query(..., ge=-90.0, le=90.0, description="Viewer latitude (-90..90)"),
    lng: float = Query(..., ge=-180.0, le=180.0, description="Viewer longitude (-180..180)"),
) -> Coordinate:
    return Coordinate(lat, lng)


# --- External collaborators (overridden in tests) ---


def get_llm_client() -> OpenAIClientWrapper | None:
    return build_llm_client()


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


def get_slowmode_registry() -> SlowmodeRegistry:
    return get_registry()


# --- Service providers for DI ---


def get_user_service(session: AsyncSession = Depends(get_async_session)) -> UserService:
    return UserService(session)


def get_post_service(session: AsyncSession = Depends(get_async_session)) -> PostService:
    return PostService(session)


def get_chat_service(session: AsyncSession = Depends(get_async_session)) -> ChatService:
    return ChatService(session)


def get_friend_service(session: AsyncSession = Depends(get_async_session)) -> FriendService:
    return FriendService(session)


def get_summary_service(
    session: AsyncSession = Depends(get_async_session),
    llm: OpenAIClientWrapper | None = Depends(get_llm_client),
) -> SummaryService:
    return SummaryService(session, llm)


def get_geocode_service(
    session: AsyncSession = Depends(get_async_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> GeocodeService:
    return GeocodeService(session, client)


def get_location_info_service(
    llm: OpenAIClientWrapper | None = Depends(get_llm_client),
) -> LocationInfoService:
    return LocationInfoService(llm)
