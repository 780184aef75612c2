"""Coordinate normalisation: decimal degrees and DMS strings to signed decimals.

Plot coordinates arrive either as numbers that are already decimal degrees or
as degree/minute/second strings tagged with a hemisphere letter, e.g.
``26°11'38"S``. Everything is normalised to a signed decimal degree with south
and west negative. ``None`` is the uniform failure signal for readers;
writers use :func:`require_decimal_degrees`, which raises instead.
"""

from __future__ import annotations

import math
import re
from typing import Any

from gravemap.core.errors import ParseFailure

_NUMBER = r"\d+(?:\.\d+)?"

# Degree markers: ° º ˚ and the ASCII fallback '.
# Minute markers: ' ′ ’.  Second markers: " ″ ” and the ASCII fallback ''.
_DMS_PATTERN = re.compile(
    rf"""
    (?P<deg>{_NUMBER})\s*[°º˚']\s*
    (?:(?P<min>{_NUMBER})\s*['′’]?\s*)?
    (?:(?P<sec>{_NUMBER})\s*(?:''|["″”])?\s*)?
    (?P<hemi>[NSEW])
    """,
    re.IGNORECASE | re.VERBOSE,
)

_NEGATIVE_HEMISPHERES = frozenset({"S", "W"})


def parse_dms(text: str) -> float | None:
    """Parse a DMS string into signed decimal degrees, or ``None`` if it doesn't match."""
    match = _DMS_PATTERN.search(text)
    if match is None:
        return None
    degrees = float(match.group("deg"))
    minutes = float(match.group("min") or 0)
    seconds = float(match.group("sec") or 0)
    decimal = degrees + minutes / 60 + seconds / 3600
    if match.group("hemi").upper() in _NEGATIVE_HEMISPHERES:
        decimal = -decimal
    return decimal


def _parse_plain(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize(value: Any) -> float | None:
    """Convert a coordinate of unknown representation to decimal degrees.

    Numbers are returned unchanged. Empty values, unparseable strings and
    anything that is neither a number nor a string yield ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    decimal = parse_dms(text)
    if decimal is not None:
        return decimal
    return _parse_plain(text)


def normalize_pair(lat: Any, lng: Any) -> tuple[float, float] | None:
    """Normalise a lat/lng pair; ``None`` if either half fails."""
    norm_lat = normalize(lat)
    norm_lng = normalize(lng)
    if norm_lat is None or norm_lng is None:
        return None
    return float(norm_lat), float(norm_lng)


def require_decimal_degrees(value: Any, field: str = "coordinate") -> float:
    """Strict variant of :func:`normalize` for write paths.

    Raises:
        ParseFailure: If the value cannot be normalised.
    """
    decimal = normalize(value)
    if decimal is None:
        raise ParseFailure(value, field=field)
    return float(decimal)
