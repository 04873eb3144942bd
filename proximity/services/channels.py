"""Interest categories shared by posts, chat channels and summaries."""

from __future__ import annotations

from dataclasses import dataclass

from proximity.core.exceptions import NotFoundError, ValidationError


@dataclass(frozen=True)
class Channel:
    id: str
    label: str
    emoji: str


INTEREST_CATEGORIES: tuple[Channel, ...] = (
    Channel("lost_found_pets", "Lost & Found Pets", "🐾"),
    Channel("safety_crime", "Safety & Crime Alerts", "🚨"),
    Channel("weather_emergencies", "Weather & Emergencies", "⛈️"),
    Channel("local_services", "Local Services", "🛠️"),
    Channel("events_meetups", "Events & Meetups", "🎉"),
    Channel("garage_sales", "Garage Sales", "🏷️"),
    Channel("city_updates", "City Updates", "🏛️"),
    Channel("general_news", "General News", "📰"),
    Channel("casual_chats", "Casual Chats", "💬"),
)

DEFAULT_CATEGORY = "casual_chats"

_BY_ID = {c.id: c for c in INTEREST_CATEGORIES}


def get_channel(channel_id: str) -> Channel:
    channel = _BY_ID.get(channel_id)
    if channel is None:
        raise NotFoundError("channel not found")
    return channel


def label_for(channel_id: str) -> str:
    channel = _BY_ID.get(channel_id)
    return channel.label if channel else channel_id


def validate_categories(ids: list[str]) -> list[str]:
    """Deduplicate (order kept) and reject unknown category ids."""
    unknown = [i for i in ids if i not in _BY_ID]
    if unknown:
        raise ValidationError(f"unknown categories: {', '.join(unknown)}")
    return list(dict.fromkeys(ids))
