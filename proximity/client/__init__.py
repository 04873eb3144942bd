"""HTTP client helpers for Proximity channels."""

from proximity.client.chat_room import ChatRoom

__all__ = ["ChatRoom"]
