from __future__ import annotations

from typing import Any

import structlog

from proximity.core.exceptions import InfrastructureError
from proximity.schemas.location import LocationInfo
from proximity.utils.geo import Coordinate
from proximity.utils.openai_client import OpenAIClientWrapper

logger = structlog.get_logger(__name__)

DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"
VIEW_URL = "https://www.google.com/maps/search/?api=1&query={lat},{lng}"

_PROMPT = """Provide key information about this location: "{name}".

Include:
- Brief description (2-3 sentences)
- Type of place (restaurant, park, landmark, etc.)
- Notable features or what it's known for
- Best times to visit if applicable

Keep it concise and informative. Reply with a JSON object with the keys \
"description" (string), "place_type" (string), "notable_features" (array of \
strings) and "best_time" (string)."""


def map_links(coord: Coordinate) -> tuple[str, str]:
    """Google Maps directions and view links for a point."""
    params = {"lat": coord.latitude, "lng": coord.longitude}
    return DIRECTIONS_URL.format(**params), VIEW_URL.format(**params)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class LocationInfoService:
    def __init__(self, llm: OpenAIClientWrapper | None) -> None:
        self.llm = llm

    async def describe(self, name: str, coord: Coordinate) -> LocationInfo:
        if self.llm is None:
            raise InfrastructureError("location info is not configured")
        try:
            data = await self.llm.complete_json(_PROMPT.format(name=name))
        except Exception as exc:
            logger.warning("location_info_failed", name=name, error=str(exc))
            raise InfrastructureError("location info is unavailable") from exc

        features = data.get("notable_features") or []
        if isinstance(features, str):
            features = [features]
        directions_url, view_url = map_links(coord)
        return LocationInfo(
            name=name,
            latitude=coord.latitude,
            longitude=coord.longitude,
            description=_text(data.get("description")),
            place_type=_text(data.get("place_type")),
            notable_features=[str(f) for f in features if str(f).strip()],
            best_time=_text(data.get("best_time")),
            directions_url=directions_url,
            view_url=view_url,
        )
