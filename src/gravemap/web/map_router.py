"""FastAPI router for map session endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field, model_validator

from gravemap.core.errors import LookupNotFound, LookupUnavailable, StoreUnavailable
from gravemap.core.types import FilterStatus, NoticeKind
from gravemap.map.markers import PlotMarker
from gravemap.plots.models import AvailablePlotInput, OccupiedPlotInput
from gravemap.search.resolver import NotFound
from gravemap.session.service import MapSession
from gravemap.session.state import Notice

router = APIRouter()


class ViewportUpdate(BaseModel):
    zoom: int | None = Field(default=None, ge=0, le=22)
    filter_status: FilterStatus | None = None
    center_lat: float | None = Field(default=None, ge=-90, le=90)
    center_lng: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _centre_given_together(self) -> ViewportUpdate:
        if (self.center_lat is None) != (self.center_lng is None):
            raise ValueError("center_lat and center_lng must be given together")
        return self


class SearchRequest(BaseModel):
    query: str


class SessionView(BaseModel):
    """Everything a renderer needs to draw one session."""

    session_id: str
    zoom: int
    filter_status: FilterStatus
    center_lat: float
    center_lng: float
    loaded: bool
    record_count: int
    markers: list[PlotMarker]
    clip_path: list[tuple[float, float]] | None = None
    clip_css: str | None = None
    boundary: dict[str, Any] | None = None
    search_name: str | None = None
    notice: Notice | None = None


def _get_session(request: Request, session_id: str) -> MapSession:
    session = request.app.state.map_sessions.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return session


def _view(session: MapSession, width: int | None = None, height: int | None = None) -> SessionView:
    state = session.state
    clip = session.clip_path(width, height)
    return SessionView(
        session_id=session.session_id,
        zoom=state.viewport.zoom,
        filter_status=state.viewport.filter_status,
        center_lat=state.center_lat,
        center_lng=state.center_lng,
        loaded=state.loaded,
        record_count=len(state.records),
        markers=session.markers(),
        clip_path=[(p.x, p.y) for p in clip.points] if clip else None,
        clip_css=clip.to_css() if clip else None,
        boundary=state.boundary.to_geojson() if state.boundary else None,
        search_name=state.search.display_name if state.search else None,
        notice=state.notice,
    )


def _raise_store_failure(session: MapSession, operation: str) -> None:
    notice = session.state.notice
    reason = notice.message if notice and notice.kind is NoticeKind.STORE_UNAVAILABLE else ""
    raise StoreUnavailable(operation, reason)


# --- Session lifecycle ---


@router.post("/api/map/sessions", response_model=SessionView, status_code=201)
async def create_session(request: Request) -> SessionView:
    """Open a map session and load the plot records."""
    session = await request.app.state.map_sessions.create_session()
    return _view(session)


@router.get("/api/map/sessions/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    request: Request,
    width: int | None = Query(default=None, gt=0),
    height: int | None = Query(default=None, gt=0),
) -> SessionView:
    """Current markers, clip region and notice for a session."""
    return _view(_get_session(request, session_id), width, height)


@router.delete("/api/map/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, request: Request) -> Response:
    if not request.app.state.map_sessions.close_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return Response(status_code=204)


@router.post("/api/map/sessions/{session_id}/reload", response_model=SessionView)
async def reload_session(session_id: str, request: Request) -> SessionView:
    """Re-fetch records. On failure the previous records are kept."""
    session = _get_session(request, session_id)
    await session.load()
    return _view(session)


@router.get("/api/map/sessions/{session_id}/summary")
async def session_summary(session_id: str, request: Request) -> dict[str, int]:
    session = _get_session(request, session_id)
    counts = session.summary()
    return {status.value: count for status, count in counts.items()}


# --- Viewport + search ---


@router.put("/api/map/sessions/{session_id}/viewport", response_model=SessionView)
async def update_viewport(session_id: str, body: ViewportUpdate, request: Request) -> SessionView:
    session = _get_session(request, session_id)
    if body.center_lat is not None and body.center_lng is not None:
        session.move(body.center_lat, body.center_lng, zoom=body.zoom)
    elif body.zoom is not None:
        session.set_zoom(body.zoom)
    if body.filter_status is not None:
        session.set_filter(body.filter_status)
    return _view(session)


@router.post("/api/map/sessions/{session_id}/search", response_model=SessionView)
async def search(session_id: str, body: SearchRequest, request: Request) -> SessionView:
    """Search for a cemetery and centre the session on it."""
    session = _get_session(request, session_id)
    result = await session.search(body.query)
    if result is None:
        raise LookupUnavailable("Error searching location.")
    if isinstance(result, NotFound):
        raise LookupNotFound(body.query)
    return _view(session)


@router.post("/api/map/sessions/{session_id}/notice/dismiss", response_model=SessionView)
async def dismiss_notice(session_id: str, request: Request) -> SessionView:
    session = _get_session(request, session_id)
    session.dismiss_notice()
    return _view(session)


# --- Plot writes ---


@router.post("/api/map/sessions/{session_id}/plots/occupied", status_code=201)
async def add_occupied_plot(
    session_id: str, body: OccupiedPlotInput, request: Request
) -> dict[str, Any]:
    session = _get_session(request, session_id)
    record = await session.add_occupied(body)
    if record is None:
        _raise_store_failure(session, "create_occupied")
    return record.to_row()


@router.post("/api/map/sessions/{session_id}/plots/available", status_code=201)
async def add_available_plot(
    session_id: str, body: AvailablePlotInput, request: Request
) -> dict[str, Any]:
    session = _get_session(request, session_id)
    record = await session.add_available(body)
    if record is None:
        _raise_store_failure(session, "create_available")
    return record.to_row()


@router.delete("/api/map/sessions/{session_id}/plots/{permit_id}", status_code=204)
async def delete_plot(session_id: str, permit_id: str, request: Request) -> Response:
    session = _get_session(request, session_id)
    if not await session.delete(permit_id):
        _raise_store_failure(session, "delete_by_permit")
    return Response(status_code=204)
