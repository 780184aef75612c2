"""Marker view-models handed to the map renderer."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from gravemap.core.types import PlotStatus
from gravemap.geo.coordinates import normalize_pair
from gravemap.map.viewport import DEFAULT_MIN_MARKER_ZOOM, ViewportState, visible
from gravemap.plots.merge import classify
from gravemap.plots.models import PlotRecord

ICONS: dict[PlotStatus, str] = {
    PlotStatus.OCCUPIED: "grave-occupied",
    PlotStatus.AVAILABLE: "grave-available",
}


class PlotMarker(BaseModel):
    """A renderable marker for one plot."""

    model_config = ConfigDict(frozen=True)

    key: str
    permit_id: str
    lat: float
    lng: float
    status: PlotStatus
    icon: str
    title: str
    detail: str


def _tooltip(record: PlotRecord, status: PlotStatus) -> tuple[str, str]:
    location = f"Lot: {record.lot} | Block: {record.block} | Grave: {record.grave}"
    if status is PlotStatus.AVAILABLE:
        return "Available Plot", location
    person = record.deceased
    if person is None:
        # Occupied by status but no deceased row attached
        return "Occupied Plot", location
    return person.full_name, f"{person.date_of_birth} - {person.date_of_death}"


def to_marker(record: PlotRecord) -> PlotMarker | None:
    """Build a marker, or None when the record has no usable position."""
    position = normalize_pair(record.lat, record.lng)
    if position is None:
        return None
    status = classify(record)
    title, detail = _tooltip(record, status)
    return PlotMarker(
        key=f"{record.permit_id}-{record.grave}",
        permit_id=record.permit_id,
        lat=position[0],
        lng=position[1],
        status=status,
        icon=ICONS[status],
        title=title,
        detail=detail,
    )


def build_markers(
    records: Sequence[PlotRecord],
    viewport: ViewportState,
    min_zoom: int = DEFAULT_MIN_MARKER_ZOOM,
) -> list[PlotMarker]:
    markers = []
    for record in visible(records, viewport, min_zoom=min_zoom):
        marker = to_marker(record)
        if marker is not None:
            markers.append(marker)
    return markers
