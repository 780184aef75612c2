"""Merging of occupied/available record sets and status classification."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Sequence

from gravemap.core.types import PlotStatus
from gravemap.plots.models import PlotRecord

logger = logging.getLogger(__name__)

_KNOWN_STATUSES = frozenset({"available", "occupied"})


def merge(
    occupied: Sequence[PlotRecord],
    available: Sequence[PlotRecord],
) -> list[PlotRecord]:
    """Concatenate both sources, occupied first, preserving source order.

    The sources are disjoint by construction; duplicates are not removed.
    """
    return [*occupied, *available]


def classify(record: PlotRecord) -> PlotStatus:
    """Classify a record by its ``status`` field.

    Only a case-insensitive ``"available"`` is available; every other value,
    including a missing one, is treated as occupied.
    """
    status = (record.status or "").lower()
    if status == PlotStatus.AVAILABLE:
        return PlotStatus.AVAILABLE
    if status not in _KNOWN_STATUSES:
        logger.debug("Plot %s has unrecognised status %r, treating as occupied",
                     record.permit_id, record.status)
    return PlotStatus.OCCUPIED


def is_available(record: PlotRecord) -> bool:
    return classify(record) is PlotStatus.AVAILABLE


def status_counts(records: Iterable[PlotRecord]) -> dict[PlotStatus, int]:
    counts = Counter(classify(r) for r in records)
    return {status: counts.get(status, 0) for status in PlotStatus}
