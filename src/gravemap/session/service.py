"""Map sessions: async I/O around the pure state container.

A :class:`MapSession` owns one :class:`MapState` and is the only thing that
mutates it, always through :meth:`MapSession.dispatch`. Failures from the
record store or geocoder never propagate out of a session; they become a
:class:`Notice` and the previous records stay on display.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable

from gravemap.core.config import MapConfig
from gravemap.core.errors import LookupUnavailable, StoreUnavailable
from gravemap.core.types import FilterStatus, NoticeKind, PlotStatus
from gravemap.geo.clip import ClipPath
from gravemap.map.markers import PlotMarker
from gravemap.plots.merge import status_counts
from gravemap.plots.models import AvailablePlotInput, OccupiedPlotInput, PlotRecord
from gravemap.plots.store import PlotStore
from gravemap.search.resolver import NotFound, SearchResolver, SearchResult
from gravemap.session.state import (
    FilterChanged,
    MapEvent,
    MapMoved,
    MapState,
    Notice,
    NoticeDismissed,
    NoticeRaised,
    RecordsLoaded,
    SearchCleared,
    SearchResolved,
    ZoomChanged,
    initial_state,
    reduce,
    select_clip_path,
    select_markers,
    select_visible,
)

logger = logging.getLogger(__name__)


class MapSession:
    """One interactive map view over the plot records."""

    def __init__(
        self,
        store: PlotStore,
        resolver: SearchResolver,
        config: MapConfig | None = None,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self._store = store
        self._resolver = resolver
        self._config = config or MapConfig()
        self._state = initial_state(self._config)

    @property
    def state(self) -> MapState:
        return self._state

    @property
    def config(self) -> MapConfig:
        return self._config

    def dispatch(self, event: MapEvent) -> MapState:
        self._state = reduce(self._state, event)
        return self._state

    # -- records -------------------------------------------------------------

    async def load(self) -> bool:
        """Fetch both record sets concurrently and replace the collection.

        Either fetch failing fails the whole load; the previous collection is
        kept and a notice is raised.
        """
        occupied, available = await asyncio.gather(
            self._store.list_occupied(),
            self._store.list_available(),
            return_exceptions=True,
        )
        for result in (occupied, available):
            if isinstance(result, StoreUnavailable):
                logger.error("Session %s: loading plots failed: %s", self.session_id, result)
                self._notify(NoticeKind.STORE_UNAVAILABLE, "Could not load plots. Showing last known data.")
                return False
            if isinstance(result, BaseException):
                raise result
        self.dispatch(RecordsLoaded(occupied=occupied, available=available))
        logger.info(
            "Session %s: loaded %d occupied and %d available plots",
            self.session_id, len(occupied), len(available),
        )
        return True

    async def add_occupied(self, plot: OccupiedPlotInput) -> PlotRecord | None:
        return await self._write(self._store.create_occupied(plot), "Entry saved", "Error saving entry")

    async def add_available(self, plot: AvailablePlotInput) -> PlotRecord | None:
        return await self._write(self._store.create_available(plot), "Plot saved", "Error saving plot")

    async def delete(self, permit_id: str) -> bool:
        try:
            await self._store.delete_by_permit(permit_id)
        except StoreUnavailable as exc:
            logger.error("Session %s: deleting %s failed: %s", self.session_id, permit_id, exc)
            self._notify(NoticeKind.STORE_UNAVAILABLE, "Failed to delete entry.")
            return False
        await self.load()
        return True

    async def _write(
        self,
        operation: Awaitable[PlotRecord],
        saved_message: str,
        failed_message: str,
    ) -> PlotRecord | None:
        try:
            record = await operation
        except StoreUnavailable as exc:
            logger.error("Session %s: write failed: %s", self.session_id, exc)
            self._notify(NoticeKind.STORE_UNAVAILABLE, failed_message)
            return None
        if await self.load():
            self._notify(NoticeKind.SAVED, saved_message)
        return record

    # -- search --------------------------------------------------------------

    async def search(self, query: str) -> SearchResult | NotFound | None:
        """Resolve a cemetery search and centre the map on it.

        Returns None when the geocoder is unreachable.
        """
        try:
            result = await self._resolver.resolve(query)
        except LookupUnavailable as exc:
            logger.error("Session %s: search for %r failed: %s", self.session_id, query, exc)
            self._notify(NoticeKind.LOOKUP_UNAVAILABLE, "Error searching location.")
            return None
        if isinstance(result, NotFound):
            self._notify(NoticeKind.LOOKUP_NOT_FOUND, result.message)
            return result
        self.dispatch(SearchResolved(result=result, zoom=self._config.search_zoom))
        return result

    def clear_search(self) -> MapState:
        return self.dispatch(SearchCleared())

    # -- viewport ------------------------------------------------------------

    def set_zoom(self, zoom: int) -> MapState:
        return self.dispatch(ZoomChanged(zoom=zoom))

    def set_filter(self, filter_status: FilterStatus | str) -> MapState:
        return self.dispatch(FilterChanged(filter_status=FilterStatus(filter_status)))

    def move(self, center_lat: float, center_lng: float, zoom: int | None = None) -> MapState:
        return self.dispatch(MapMoved(center_lat=center_lat, center_lng=center_lng, zoom=zoom))

    def dismiss_notice(self) -> MapState:
        return self.dispatch(NoticeDismissed())

    # -- derived views -------------------------------------------------------

    def visible_records(self) -> list[PlotRecord]:
        return select_visible(self._state, min_zoom=self._config.min_marker_zoom)

    def markers(self) -> list[PlotMarker]:
        return select_markers(self._state, min_zoom=self._config.min_marker_zoom)

    def clip_path(self, width: int | None = None, height: int | None = None) -> ClipPath | None:
        return select_clip_path(
            self._state,
            width or self._config.viewport_width,
            height or self._config.viewport_height,
            tile_size=self._config.tile_size,
        )

    def summary(self) -> dict[PlotStatus, int]:
        return status_counts(self._state.records)

    def _notify(self, kind: NoticeKind, message: str) -> None:
        self.dispatch(NoticeRaised(notice=Notice(kind=kind, message=message)))


class MapSessionManager:
    """In-memory registry of active map sessions.

    Sessions are discarded when the user navigates away; nothing about a
    session outlives it.
    """

    def __init__(
        self,
        store: PlotStore,
        resolver: SearchResolver,
        config: MapConfig | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._config = config or MapConfig()
        self._sessions: dict[str, MapSession] = {}

    async def create_session(self) -> MapSession:
        """Create a session and perform its initial load."""
        session = MapSession(self._store, self._resolver, config=self._config)
        self._sessions[session.session_id] = session
        await session.load()
        return session

    def get_session(self, session_id: str) -> MapSession | None:
        return self._sessions.get(session_id)

    def close_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def list_sessions(self) -> list[MapSession]:
        return list(self._sessions.values())

    @property
    def count(self) -> int:
        return len(self._sessions)
