"""Map session state container with pure reducer transitions.

Every change to a session goes through :func:`reduce`, which maps the
current :class:`MapState` and an event to a new state without side effects.
Derived values (visible records, markers, clip region) are selectors over
the state and are recomputed on every read.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from gravemap.core.config import MapConfig
from gravemap.core.types import FilterStatus, NoticeKind
from gravemap.geo.boundary import BoundaryPolygon
from gravemap.geo.clip import ClipPath, compute_clip_path
from gravemap.geo.projection import WebMercatorProjector
from gravemap.map.markers import PlotMarker, build_markers
from gravemap.map.viewport import DEFAULT_MIN_MARKER_ZOOM, ViewportState, visible
from gravemap.plots.merge import merge
from gravemap.plots.models import PlotRecord
from gravemap.search.resolver import SearchResult


class Notice(BaseModel):
    """A user-visible message."""

    model_config = ConfigDict(frozen=True)

    kind: NoticeKind
    message: str


class MapState(BaseModel):
    """Immutable snapshot of one map session."""

    model_config = ConfigDict(frozen=True)

    records: tuple[PlotRecord, ...] = ()
    viewport: ViewportState = ViewportState()
    center_lat: float = 0.0
    center_lng: float = 0.0
    search: SearchResult | None = None
    notice: Notice | None = None
    loaded: bool = False

    @property
    def boundary(self) -> BoundaryPolygon | None:
        return self.search.boundary if self.search is not None else None


# --- Events ---


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class RecordsLoaded(_Event):
    occupied: list[PlotRecord]
    available: list[PlotRecord]


class ZoomChanged(_Event):
    zoom: int


class FilterChanged(_Event):
    filter_status: FilterStatus


class MapMoved(_Event):
    center_lat: float
    center_lng: float
    zoom: int | None = None


class SearchResolved(_Event):
    result: SearchResult
    zoom: int


class SearchCleared(_Event):
    pass


class NoticeRaised(_Event):
    notice: Notice


class NoticeDismissed(_Event):
    pass


MapEvent = (
    RecordsLoaded
    | ZoomChanged
    | FilterChanged
    | MapMoved
    | SearchResolved
    | SearchCleared
    | NoticeRaised
    | NoticeDismissed
)


def initial_state(config: MapConfig | None = None) -> MapState:
    config = config or MapConfig()
    return MapState(
        viewport=ViewportState(zoom=config.default_zoom),
        center_lat=config.center_lat,
        center_lng=config.center_lng,
    )


def reduce(state: MapState, event: MapEvent) -> MapState:
    """Apply ``event`` to ``state`` and return the new state."""
    if isinstance(event, RecordsLoaded):
        notice = state.notice
        if notice is not None and notice.kind is NoticeKind.STORE_UNAVAILABLE:
            notice = None
        return state.model_copy(update={
            "records": tuple(merge(event.occupied, event.available)),
            "loaded": True,
            "notice": notice,
        })

    if isinstance(event, ZoomChanged):
        viewport = ViewportState(zoom=event.zoom, filter_status=state.viewport.filter_status)
        return state.model_copy(update={"viewport": viewport})

    if isinstance(event, FilterChanged):
        viewport = ViewportState(zoom=state.viewport.zoom, filter_status=event.filter_status)
        return state.model_copy(update={"viewport": viewport})

    if isinstance(event, MapMoved):
        update: dict = {"center_lat": event.center_lat, "center_lng": event.center_lng}
        if event.zoom is not None:
            update["viewport"] = ViewportState(
                zoom=event.zoom, filter_status=state.viewport.filter_status
            )
        return state.model_copy(update=update)

    if isinstance(event, SearchResolved):
        return state.model_copy(update={
            "search": event.result,
            "center_lat": event.result.lat,
            "center_lng": event.result.lng,
            "viewport": ViewportState(
                zoom=event.zoom, filter_status=state.viewport.filter_status
            ),
            "notice": None,
        })

    if isinstance(event, SearchCleared):
        return state.model_copy(update={"search": None})

    if isinstance(event, NoticeRaised):
        return state.model_copy(update={"notice": event.notice})

    if isinstance(event, NoticeDismissed):
        return state.model_copy(update={"notice": None})

    raise TypeError(f"Unknown map event: {type(event).__name__}")


# --- Selectors ---


def select_visible(state: MapState, min_zoom: int = DEFAULT_MIN_MARKER_ZOOM) -> list[PlotRecord]:
    return visible(state.records, state.viewport, min_zoom=min_zoom)


def select_markers(state: MapState, min_zoom: int = DEFAULT_MIN_MARKER_ZOOM) -> list[PlotMarker]:
    return build_markers(state.records, state.viewport, min_zoom=min_zoom)


def select_projector(
    state: MapState,
    width: int,
    height: int,
    tile_size: int = 256,
) -> WebMercatorProjector:
    return WebMercatorProjector(
        center_lat=state.center_lat,
        center_lng=state.center_lng,
        zoom=state.viewport.zoom,
        width=width,
        height=height,
        tile_size=tile_size,
    )


def select_clip_path(
    state: MapState,
    width: int,
    height: int,
    tile_size: int = 256,
) -> ClipPath | None:
    """Clip region for the current boundary under the current transform."""
    return compute_clip_path(state.boundary, select_projector(state, width, height, tile_size))
