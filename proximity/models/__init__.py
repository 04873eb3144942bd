# Module imports so Alembic and create_all see every table
from .base import Base
from .comment import Comment
from .friendship import Friendship, FriendshipStatus
from .geocode_cache import GeocodeCache
from .message import Message
from .post import Post, PostLike
from .user import User

__all__ = [
    "Base",
    "Comment",
    "Friendship",
    "FriendshipStatus",
    "GeocodeCache",
    "Message",
    "Post",
    "PostLike",
    "User",
]
