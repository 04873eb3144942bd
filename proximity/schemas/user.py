from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, EmailStr, Field

from proximity.schemas.common import CoordinateIn


class UserCreateRequest(BaseModel):
    email: EmailStr = Field(description="Login email, also the session key")
    full_name: str = Field(min_length=1, max_length=120)
    avatar_url: str | None = None


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: str | None = None


class LocationUpdateRequest(CoordinateIn):
    pass


class InterestsUpdateRequest(BaseModel):
    interests: list[str] = Field(default_factory=list, description="Channel ids")


class UsernameUpdateRequest(BaseModel):
    # Length and charset are checked by the service so the message is specific
    username: str


class OnboardingRequest(BaseModel):
    interests: list[str] = Field(default_factory=list, description="Empty list skips")


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    username: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    interests: list[str] = Field(default_factory=list)
    onboarding_completed: bool = False
    latitude: float | None = None
    longitude: float | None = None
    location_updated_at: str | None = None


class UserPublic(BaseModel):
    id: int
    full_name: str
    username: str | None = None
    avatar_url: str | None = None


class FriendRelation(str, Enum):
    friend = "friend"
    request_sent = "request_sent"
    request_received = "request_received"
    none = "none"


class UserSearchItem(UserPublic):
    relation: FriendRelation = FriendRelation.none


class FriendRequestCreate(BaseModel):
    user_id: int


class FriendRequestResult(BaseModel):
    user_id: int
    status: str = Field(description="pending, or accepted when the other side had asked first")
