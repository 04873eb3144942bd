"""Per-request caller context passed explicitly into services."""

from __future__ import annotations

from dataclasses import dataclass

from proximity.utils.geo import Coordinate


@dataclass(frozen=True)
class UserSession:
    user_id: int
    email: str
    full_name: str
    location: Coordinate | None = None


__all__ = ["UserSession"]
