"""Error taxonomy for the plot map pipeline.

None of these escalate to a process fault: readers degrade to "omit this
item", everything else becomes a user-visible notice on the map session.
"""

from __future__ import annotations

from typing import Any


class GraveMapError(Exception):
    """Base class for all gravemap errors."""


class ParseFailure(GraveMapError, ValueError):
    """A coordinate value could not be converted to decimal degrees."""

    def __init__(self, value: Any, field: str = "coordinate") -> None:
        self.value = value
        self.field = field
        super().__init__(f"Unparseable {field}: {value!r}")


class LookupNotFound(GraveMapError):
    """A cemetery search matched nothing."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No location found for {query!r}")


class LookupUnavailable(GraveMapError):
    """The geocoding service could not be reached."""


class StoreUnavailable(GraveMapError):
    """A record store fetch or write failed."""

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        message = f"Record store {operation} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
