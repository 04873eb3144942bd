"""Router modules exposed for convenient imports."""

from . import channels, friends, healthz, locations, me, posts, readyz, summary, users

__all__ = [
    "channels",
    "friends",
    "healthz",
    "locations",
    "me",
    "posts",
    "readyz",
    "summary",
    "users",
]
