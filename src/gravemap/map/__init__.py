"""Viewport filtering and marker view-models."""

from gravemap.map.markers import PlotMarker, build_markers, to_marker
from gravemap.map.viewport import DEFAULT_MIN_MARKER_ZOOM, ViewportState, visible

__all__ = [
    "DEFAULT_MIN_MARKER_ZOOM",
    "PlotMarker",
    "ViewportState",
    "build_markers",
    "to_marker",
    "visible",
]
