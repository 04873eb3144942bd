from __future__ import annotations

from pydantic import BaseModel, Field


class LocationSearchItem(BaseModel):
    name: str
    latitude: float
    longitude: float


class LocationInfo(BaseModel):
    name: str
    latitude: float
    longitude: float
    description: str | None = None
    place_type: str | None = None
    notable_features: list[str] = Field(default_factory=list)
    best_time: str | None = None
    directions_url: str
    view_url: str
