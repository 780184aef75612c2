"""Clip region computation for the boundary overlay.

The overlay outside a searched cemetery is masked by a polygon in viewport
pixel space. The region depends on both the boundary and the current
pan/zoom transform, so it is recomputed from scratch on every call.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from gravemap.geo.boundary import MIN_RING_POINTS, BoundaryPolygon
from gravemap.geo.projection import PixelPoint, Projector


class ClipPath(BaseModel):
    """Ordered pixel ring describing a clip region."""

    model_config = ConfigDict(frozen=True)

    points: list[PixelPoint] = Field(default_factory=list)

    def to_css(self) -> str:
        """Render as a CSS ``clip-path`` polygon expression."""
        coords = ", ".join(f"{p.x:.2f}px {p.y:.2f}px" for p in self.points)
        return f"polygon({coords})"


def compute_clip_path(
    polygon: BoundaryPolygon | None,
    projector: Projector,
) -> ClipPath | None:
    """Project the outer ring of ``polygon`` into a clip region.

    Returns None when there is no polygon (show the full view) or when the
    ring is degenerate. Vertex order is preserved; the closing vertex of a
    closed ring collapses onto the first and is dropped.
    """
    if polygon is None:
        return None
    ring = polygon.outer_ring
    if len(ring) < MIN_RING_POINTS:
        return None
    if ring[0] == ring[-1]:
        ring = ring[:-1]
    points = [PixelPoint(*projector(lat, lng)) for lng, lat in ring]
    return ClipPath(points=points)
