"""Geographic to viewport pixel projection.

Implements the spherical Mercator transform used by slippy-map widgets: a
coordinate is placed in world pixel space at the current zoom, then offset so
the map centre sits in the middle of the viewport.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple

MERCATOR_LAT_BOUND = 85.05112878


class PixelPoint(NamedTuple):
    x: float
    y: float


# (lat, lng) -> viewport pixel point
Projector = Callable[[float, float], PixelPoint]


def lonlat_to_world(lng: float, lat: float, world_size: float) -> PixelPoint:
    """Convert geographic coordinates to Mercator world pixel coordinates."""
    lat = max(min(lat, MERCATOR_LAT_BOUND), -MERCATOR_LAT_BOUND)
    x = (lng + 180.0) / 360.0 * world_size
    sin_lat = math.sin(math.radians(lat))
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * world_size
    return PixelPoint(x, y)


@dataclass(frozen=True)
class WebMercatorProjector:
    """Project ``(lat, lng)`` to container pixels for a fixed pan/zoom transform.

    A new projector is built for every transform change, so anything derived
    from one is invalidated by construction.
    """

    center_lat: float
    center_lng: float
    zoom: float
    width: int
    height: int
    tile_size: int = 256

    @property
    def world_size(self) -> float:
        return self.tile_size * 2.0 ** self.zoom

    def __call__(self, lat: float, lng: float) -> PixelPoint:
        world = self.world_size
        point = lonlat_to_world(lng, lat, world)
        center = lonlat_to_world(self.center_lng, self.center_lat, world)
        return PixelPoint(
            point.x - center.x + self.width / 2.0,
            point.y - center.y + self.height / 2.0,
        )
