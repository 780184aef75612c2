"""Cemetery boundary polygons."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# (lng, lat), GeoJSON axis order
Vertex = tuple[float, float]
Ring = list[Vertex]

MIN_RING_POINTS = 4


class BoundaryPolygon(BaseModel):
    """One or more rings of ``(lng, lat)`` vertices.

    The first ring is the outer boundary used for clipping. A GeoJSON
    ``Polygon`` contributes its outer ring only; for a ``MultiPolygon`` every
    member polygon contributes its outer ring.
    """

    model_config = ConfigDict(frozen=True)

    rings: list[Ring] = Field(default_factory=list)

    @property
    def outer_ring(self) -> Ring:
        return self.rings[0] if self.rings else []

    @property
    def is_valid(self) -> bool:
        ring = self.outer_ring
        return len(ring) >= MIN_RING_POINTS and ring[0] == ring[-1]

    @classmethod
    def from_geojson(cls, geometry: dict[str, Any] | None) -> BoundaryPolygon | None:
        """Build a polygon from a GeoJSON geometry.

        Returns None for missing geometries and for non-polygonal types
        (a geocoder may return a Point or LineString for small features).
        """
        if not geometry:
            return None
        geom_type = geometry.get("type")
        coordinates = geometry.get("coordinates") or []
        if geom_type == "Polygon":
            # Holes are dropped; only the outer ring bounds the cemetery
            rings = [_to_ring(ring) for ring in coordinates[:1]]
        elif geom_type == "MultiPolygon":
            rings = [_to_ring(polygon[0]) for polygon in coordinates if polygon]
        else:
            return None
        if not rings:
            return None
        return cls(rings=rings)

    def to_geojson(self) -> dict[str, Any]:
        if len(self.rings) == 1:
            return {"type": "Polygon", "coordinates": [_to_lists(self.rings[0])]}
        return {
            "type": "MultiPolygon",
            "coordinates": [[_to_lists(ring)] for ring in self.rings],
        }


def _to_ring(points: list[list[float]]) -> Ring:
    return [(float(p[0]), float(p[1])) for p in points]


def _to_lists(ring: Ring) -> list[list[float]]:
    return [[lng, lat] for lng, lat in ring]


def square_boundary(lat: float, lng: float, half_width: float = 0.001) -> BoundaryPolygon:
    """Synthesize a closed rectangular ring centred on a coordinate."""
    ring: Ring = [
        (lng - half_width, lat - half_width),
        (lng + half_width, lat - half_width),
        (lng + half_width, lat + half_width),
        (lng - half_width, lat + half_width),
        (lng - half_width, lat - half_width),
    ]
    return BoundaryPolygon(rings=[ring])
