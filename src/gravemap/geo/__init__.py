"""Coordinate normalisation, boundary polygons and viewport clipping."""

from gravemap.geo.boundary import BoundaryPolygon, square_boundary
from gravemap.geo.clip import ClipPath, compute_clip_path
from gravemap.geo.coordinates import normalize, normalize_pair, parse_dms, require_decimal_degrees
from gravemap.geo.projection import PixelPoint, Projector, WebMercatorProjector

__all__ = [
    "BoundaryPolygon",
    "ClipPath",
    "PixelPoint",
    "Projector",
    "WebMercatorProjector",
    "compute_clip_path",
    "normalize",
    "normalize_pair",
    "parse_dms",
    "require_decimal_degrees",
    "square_boundary",
]
