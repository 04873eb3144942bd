"""Forward geocoding via Nominatim with a database-backed cache."""

from __future__ import annotations

import asyncio
import unicodedata
from typing import Any

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.config import Settings, get_settings
from proximity.models.geocode_cache import GeocodeCache
from proximity.schemas.location import LocationSearchItem
from proximity.utils.geo import to_coordinate

logger = structlog.get_logger(__name__)

_USER_AGENT = "Proximity/0.1 (admin@proximity.example)"
_PROVIDER = "nominatim"
RESULT_LIMIT = 5


def normalize_query(query: str) -> str:
    """Cache key for a free-text place query."""
    normalized = unicodedata.normalize("NFKC", query or "").replace("\x00", "")
    return " ".join(normalized.split()).lower()


def parse_results(data: Any) -> list[LocationSearchItem]:
    """Map Nominatim rows to search items, dropping rows without a usable point."""
    if not isinstance(data, list):
        return []
    out: list[LocationSearchItem] = []
    for row in data:
        if not isinstance(row, dict):
            continue
        coord = to_coordinate(_as_float(row.get("lat")), _as_float(row.get("lon")))
        if coord is None:
            continue
        out.append(
            LocationSearchItem(
                name=str(row.get("display_name") or ""),
                latitude=coord.latitude,
                longitude=coord.longitude,
            )
        )
    return out[:RESULT_LIMIT]


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


async def _request_json(
    client: httpx.AsyncClient, url: str, params: dict[str, Any], provider: str
) -> Any:
    """GET with exponential backoff on 429; None on any failure."""

    backoff = 0.1
    attempts = 0
    while True:
        attempts += 1
        try:
            response = await client.get(
                url,
                params=params,
                headers={"User-Agent": _USER_AGENT},
                timeout=10,
            )
        except httpx.RequestError as exc:
            logger.warning("geocode_request_failed", provider=provider, error=str(exc))
            return None

        if response.status_code == 429 and backoff <= 2.0 and attempts <= 3:
            await asyncio.sleep(backoff)
            backoff *= 2
            continue

        if response.status_code == 429:
            logger.warning("geocode_rate_limited", provider=provider)
            return None

        if not response.is_success:
            logger.warning(
                "geocode_request_failed", provider=provider, status=response.status_code
            )
            return None

        try:
            return response.json()
        except ValueError:
            logger.warning("geocode_invalid_json", provider=provider)
            return None


class GeocodeService:
    def __init__(
        self,
        session: AsyncSession,
        client: httpx.AsyncClient,
        settings: Settings | None = None,
    ) -> None:
        self.session = session
        self.client = client
        self.settings = settings or get_settings()

    async def _cached(self, key: str) -> GeocodeCache | None:
        stmt = select(GeocodeCache).where(GeocodeCache.query == key)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def search(self, query: str) -> list[LocationSearchItem]:
        key = normalize_query(query)
        if not key:
            return []

        cached = await self._cached(key)
        if cached is not None:
            logger.info("geocode_cache_hit", query=key)
            return [LocationSearchItem(**row) for row in cached.results or []]

        data = await _request_json(
            self.client,
            self.settings.nominatim_url,
            {"format": "json", "q": query.strip(), "limit": RESULT_LIMIT},
            _PROVIDER,
        )
        if data is None:
            # Failures are not cached so the next search retries
            return []

        results = parse_results(data)
        self.session.add(
            GeocodeCache(
                query=key,
                provider=_PROVIDER,
                results=[r.model_dump() for r in results],
            )
        )
        await self.session.commit()
        logger.info("geocode_searched", query=key, results=len(results))
        return results
