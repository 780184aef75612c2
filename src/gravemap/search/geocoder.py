"""Geocoder protocol, Nominatim client and mock implementation."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel

from gravemap.core.config import GeocoderConfig
from gravemap.core.errors import LookupUnavailable

logger = logging.getLogger(__name__)


class GeocodeHit(BaseModel):
    """One geocoder result."""

    lat: float
    lng: float
    display_name: str = ""
    geometry: dict[str, Any] | None = None


@runtime_checkable
class Geocoder(Protocol):
    """Protocol for geocoding services. Results are ordered by relevance."""

    async def geocode(self, text: str) -> list[GeocodeHit]: ...


class NominatimGeocoder:
    """Talks to an OpenStreetMap Nominatim instance."""

    def __init__(self, config: GeocoderConfig) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={"User-Agent": config.user_agent},
        )

    async def geocode(self, text: str) -> list[GeocodeHit]:
        params: dict[str, Any] = {"q": text, "format": "json", "limit": 1}
        if self.config.fetch_boundary:
            params["polygon_geojson"] = 1
        try:
            resp = await self._http.get("/search", params=params)
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Geocoding %r failed: %s", text, exc)
            raise LookupUnavailable(f"Geocoding service error: {exc}") from exc
        except ValueError as exc:
            raise LookupUnavailable("Geocoding service returned invalid JSON") from exc

        hits = []
        for row in rows:
            try:
                hits.append(
                    GeocodeHit(
                        lat=float(row["lat"]),
                        lng=float(row["lon"]),
                        display_name=row.get("display_name", ""),
                        geometry=row.get("geojson"),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed geocoder row: %r", row)
        return hits

    async def close(self) -> None:
        await self._http.aclose()


class MockGeocoder:
    """Mock geocoder with fixture cemeteries for development/testing."""

    def __init__(self, config: GeocoderConfig | None = None) -> None:
        self.config = config or GeocoderConfig()
        self._places: list[GeocodeHit] = []
        self._load_fixtures()

    def _load_fixtures(self) -> None:
        self._places = [
            GeocodeHit(
                lat=-26.1842,
                lng=28.0264,
                display_name="Braamfontein Cemetery, Johannesburg",
                geometry={
                    "type": "Polygon",
                    "coordinates": [[
                        [28.0232, -26.1868],
                        [28.0296, -26.1868],
                        [28.0296, -26.1816],
                        [28.0232, -26.1816],
                        [28.0232, -26.1868],
                    ]],
                },
            ),
            GeocodeHit(
                lat=-26.1601,
                lng=27.9846,
                display_name="Westpark Cemetery, Johannesburg",
            ),
            GeocodeHit(
                lat=-26.2178,
                lng=27.9060,
                display_name="Avalon Cemetery, Soweto",
            ),
        ]

    async def geocode(self, text: str) -> list[GeocodeHit]:
        qualifier = self.config.query_qualifier.lower()
        words = [w for w in text.lower().split() if w != qualifier]
        if not words:
            return []
        return [
            place for place in self._places
            if all(w in place.display_name.lower() for w in words)
        ]


GEOCODER_REGISTRY: dict[str, type[Geocoder]] = {
    "mock": MockGeocoder,
    "nominatim": NominatimGeocoder,
}


def create_geocoder(config: GeocoderConfig) -> Geocoder:
    """Factory: select and instantiate a geocoder based on config.provider."""
    provider = config.provider.lower()
    if provider not in GEOCODER_REGISTRY:
        available = ", ".join(sorted(GEOCODER_REGISTRY))
        raise ValueError(
            f"Unknown geocoder provider {config.provider!r}. "
            f"Available: {available}"
        )
    return GEOCODER_REGISTRY[provider](config)
