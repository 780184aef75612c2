"""Core type definitions shared across all gravemap modules."""

from __future__ import annotations

from enum import StrEnum


class PlotStatus(StrEnum):
    """Rendering classification of a burial plot."""

    OCCUPIED = "occupied"
    AVAILABLE = "available"


class FilterStatus(StrEnum):
    """Status filter selected in the map controls."""

    ALL = "all"
    OCCUPIED = "occupied"
    AVAILABLE = "available"


class Sex(StrEnum):
    MALE = "M"
    FEMALE = "F"


class NoticeKind(StrEnum):
    """Kinds of user-visible notices raised by a map session."""

    LOOKUP_NOT_FOUND = "lookup_not_found"
    LOOKUP_UNAVAILABLE = "lookup_unavailable"
    STORE_UNAVAILABLE = "store_unavailable"
    SAVED = "saved"
