"""Viewport filtering of the unified plot collection."""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from gravemap.core.types import FilterStatus
from gravemap.geo.coordinates import normalize_pair
from gravemap.plots.merge import classify
from gravemap.plots.models import PlotRecord

logger = logging.getLogger(__name__)

DEFAULT_MIN_MARKER_ZOOM = 14


class ViewportState(BaseModel):
    """Zoom level and status filter of a map session."""

    model_config = ConfigDict(frozen=True)

    zoom: int = 15
    filter_status: FilterStatus = FilterStatus.ALL


def _has_coordinates(record: PlotRecord) -> bool:
    if record.lat is None or record.lng is None:
        return False
    if normalize_pair(record.lat, record.lng) is None:
        logger.debug("Skipping plot %s: unparseable coordinates (%r, %r)",
                     record.permit_id, record.lat, record.lng)
        return False
    return True


def _matches_filter(record: PlotRecord, filter_status: FilterStatus) -> bool:
    if filter_status is FilterStatus.ALL:
        return True
    return classify(record).value == filter_status.value


def visible(
    records: Sequence[PlotRecord],
    viewport: ViewportState,
    min_zoom: int = DEFAULT_MIN_MARKER_ZOOM,
) -> list[PlotRecord]:
    """Return the records to render for ``viewport``, in input order.

    Nothing is shown below ``min_zoom``. Records failing the status filter or
    lacking a parseable coordinate are dropped.
    """
    if viewport.zoom < min_zoom:
        return []
    return [
        r for r in records
        if _matches_filter(r, viewport.filter_status) and _has_coordinates(r)
    ]
