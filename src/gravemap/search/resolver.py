"""Free-text cemetery search resolved to a coordinate and boundary."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from gravemap.geo.boundary import BoundaryPolygon, square_boundary
from gravemap.search.geocoder import Geocoder

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    """A resolved cemetery location."""

    model_config = ConfigDict(frozen=True)

    query: str
    lat: float
    lng: float
    display_name: str = ""
    boundary: BoundaryPolygon
    boundary_synthesized: bool = False


class NotFound(BaseModel):
    """A search that matched nothing."""

    model_config = ConfigDict(frozen=True)

    query: str
    message: str = "Cemetery not found"


class SearchResolver:
    """Resolves search text through a geocoder.

    The qualifier is appended to every query and only the first hit is used.
    When the hit carries no polygon, a small square around the coordinate is
    synthesized so a successful search always yields a boundary.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        qualifier: str = "cemetery",
        boundary_half_width: float = 0.001,
    ) -> None:
        self._geocoder = geocoder
        self._qualifier = qualifier
        self._half_width = boundary_half_width

    def build_query(self, query: str) -> str:
        text = query.strip()
        return f"{text} {self._qualifier}" if self._qualifier else text

    async def resolve(self, query: str) -> SearchResult | NotFound:
        """Resolve ``query``.

        Raises:
            LookupUnavailable: If the geocoding service cannot be reached.
        """
        if not query.strip():
            return NotFound(query=query, message="Enter a cemetery name to search")

        hits = await self._geocoder.geocode(self.build_query(query))
        if not hits:
            logger.info("No geocoder results for %r", query)
            return NotFound(query=query)

        hit = hits[0]
        boundary = BoundaryPolygon.from_geojson(hit.geometry)
        synthesized = boundary is None or not boundary.is_valid
        if synthesized:
            boundary = square_boundary(hit.lat, hit.lng, self._half_width)
        return SearchResult(
            query=query,
            lat=hit.lat,
            lng=hit.lng,
            display_name=hit.display_name,
            boundary=boundary,
            boundary_synthesized=synthesized,
        )
