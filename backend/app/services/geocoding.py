import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import settings
from app.core.errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class GeocodingService:
    """Forward and reverse geocoding against a Nominatim-compatible API."""

    def __init__(self, base_url: str, user_agent: str, timeout_seconds: int = 8):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        try:
            async with aiohttp.ClientSession(headers=headers) as session:
                async with session.get(
                    url, params=params, timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
                ) as response:
                    if response.status != 200:
                        logger.warning("Geocoding %s returned HTTP %s", path, response.status)
                        raise UpstreamError(f"Geocoding service returned HTTP {response.status}")
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Geocoding %s failed: %s", path, e)
            raise UpstreamError("Geocoding service unavailable") from e

    async def geocode(self, address: str) -> Dict[str, Any]:
        """Resolve a free-text address to its best coordinate match."""
        results: Optional[List[Dict[str, Any]]] = await self._get(
            "/search", {"q": address, "format": "json", "limit": 1}
        )
        if not results:
            raise NotFoundError("Address not found")

        best = results[0]
        return {
            "lat": float(best["lat"]),
            "lng": float(best["lon"]),
            "displayName": best.get("display_name", address),
        }

    async def reverse(self, lat: float, lng: float) -> Dict[str, Any]:
        """Resolve coordinates to a display address."""
        data = await self._get("/reverse", {"lat": lat, "lon": lng, "format": "json"})
        if not data or "error" in data:
            raise NotFoundError("No address found for these coordinates")

        return {
            "displayName": data.get("display_name", ""),
            "address": data.get("address", {}),
        }


# Global geocoding service instance
geocoding_service = GeocodingService(
    base_url=settings.geocoding_base_url,
    user_agent=settings.geocoding_user_agent,
    timeout_seconds=settings.geocoding_timeout_seconds,
)
