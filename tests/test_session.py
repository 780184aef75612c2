"""Tests for the map session state container and service."""

from __future__ import annotations

import pytest

from gravemap.core.config import MapConfig
from gravemap.core.errors import LookupUnavailable
from gravemap.core.types import FilterStatus, NoticeKind, PlotStatus
from gravemap.geo.boundary import square_boundary
from gravemap.plots.models import AvailablePlotInput
from gravemap.search.geocoder import GeocodeHit, MockGeocoder
from gravemap.search.resolver import NotFound, SearchResolver, SearchResult
from gravemap.session.service import MapSession, MapSessionManager
from gravemap.session.state import (
    FilterChanged,
    MapMoved,
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
from tests.conftest import make_record


class UnreachableGeocoder:
    async def geocode(self, text: str) -> list[GeocodeHit]:
        raise LookupUnavailable("Geocoding service error: timeout")


def _result(lat: float = -26.18, lng: float = 28.02) -> SearchResult:
    return SearchResult(
        query="Braamfontein",
        lat=lat,
        lng=lng,
        display_name="Braamfontein Cemetery",
        boundary=square_boundary(lat, lng),
        boundary_synthesized=True,
    )


def _available(permit: str = "P-3001") -> AvailablePlotInput:
    return AvailablePlotInput(
        permit_id=permit, lot="30", block="D", grave="1", lat=-26.1942, lng=28.0275
    )


@pytest.fixture
def session(fixture_store) -> MapSession:
    return MapSession(fixture_store, SearchResolver(MockGeocoder()), config=MapConfig())


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

class TestReducer:
    def test_initial_state(self):
        state = initial_state(MapConfig(default_zoom=12, center_lat=-30.0, center_lng=25.0))
        assert state.viewport.zoom == 12
        assert state.viewport.filter_status is FilterStatus.ALL
        assert (state.center_lat, state.center_lng) == (-30.0, 25.0)
        assert state.records == ()
        assert not state.loaded

    def test_records_loaded_merges(self):
        state = reduce(
            initial_state(),
            RecordsLoaded(occupied=[make_record("O1")], available=[make_record("A1", "Available")]),
        )
        assert [r.permit_id for r in state.records] == ["O1", "A1"]
        assert state.loaded

    def test_records_loaded_clears_store_notice_only(self):
        notice = Notice(kind=NoticeKind.STORE_UNAVAILABLE, message="down")
        state = reduce(initial_state(), NoticeRaised(notice=notice))
        state = reduce(state, RecordsLoaded(occupied=[], available=[]))
        assert state.notice is None

        saved = Notice(kind=NoticeKind.SAVED, message="Plot saved")
        state = reduce(state, NoticeRaised(notice=saved))
        state = reduce(state, RecordsLoaded(occupied=[], available=[]))
        assert state.notice == saved

    def test_reduce_does_not_mutate(self):
        before = initial_state()
        after = reduce(before, ZoomChanged(zoom=18))
        assert before.viewport.zoom == 15
        assert after.viewport.zoom == 18

    def test_zoom_keeps_filter(self):
        state = reduce(initial_state(), FilterChanged(filter_status=FilterStatus.AVAILABLE))
        state = reduce(state, ZoomChanged(zoom=16))
        assert state.viewport.filter_status is FilterStatus.AVAILABLE

    def test_map_moved(self):
        state = reduce(initial_state(), MapMoved(center_lat=-26.0, center_lng=28.0))
        assert (state.center_lat, state.center_lng) == (-26.0, 28.0)
        assert state.viewport.zoom == 15
        state = reduce(state, MapMoved(center_lat=-26.1, center_lng=28.1, zoom=13))
        assert state.viewport.zoom == 13

    def test_search_resolved_centres_map(self):
        state = reduce(initial_state(), FilterChanged(filter_status=FilterStatus.OCCUPIED))
        state = reduce(state, NoticeRaised(notice=Notice(kind=NoticeKind.LOOKUP_NOT_FOUND, message="x")))
        state = reduce(state, SearchResolved(result=_result(), zoom=17))
        assert (state.center_lat, state.center_lng) == (-26.18, 28.02)
        assert state.viewport.zoom == 17
        assert state.viewport.filter_status is FilterStatus.OCCUPIED
        assert state.notice is None
        assert state.boundary is not None

    def test_search_cleared(self):
        state = reduce(initial_state(), SearchResolved(result=_result(), zoom=17))
        state = reduce(state, SearchCleared())
        assert state.search is None
        assert state.boundary is None

    def test_notice_dismissed(self):
        state = reduce(initial_state(), NoticeRaised(notice=Notice(kind=NoticeKind.SAVED, message="ok")))
        assert reduce(state, NoticeDismissed()).notice is None

    def test_unknown_event(self):
        with pytest.raises(TypeError, match="Unknown map event"):
            reduce(initial_state(), object())


class TestSelectors:
    def test_visible_and_markers(self):
        state = reduce(
            initial_state(),
            RecordsLoaded(occupied=[make_record("O1")], available=[make_record("A1", "Available")]),
        )
        assert len(select_visible(state)) == 2
        assert {m.status for m in select_markers(state)} == {PlotStatus.OCCUPIED, PlotStatus.AVAILABLE}
        assert select_markers(reduce(state, ZoomChanged(zoom=10))) == []

    def test_no_boundary_no_clip(self):
        assert select_clip_path(initial_state(), 800, 600) is None

    def test_clip_follows_transform(self):
        state = reduce(initial_state(), SearchResolved(result=_result(), zoom=17))
        at_17 = select_clip_path(state, 800, 600)
        at_18 = select_clip_path(reduce(state, ZoomChanged(zoom=18)), 800, 600)
        assert len(at_17.points) == 4
        assert at_17 != at_18
        moved = select_clip_path(reduce(state, MapMoved(center_lat=-26.181, center_lng=28.021)), 800, 600)
        assert moved != at_17


# ---------------------------------------------------------------------------
# Session service
# ---------------------------------------------------------------------------

class TestMapSessionLoad:
    @pytest.mark.asyncio
    async def test_load(self, session):
        assert await session.load() is True
        assert session.state.loaded
        assert len(session.state.records) == 4
        assert len(session.markers()) == 4

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous_records(self, failing_store):
        session = MapSession(failing_store, SearchResolver(MockGeocoder()))
        await session.load()
        failing_store.fail_available = True

        assert await session.load() is False
        assert len(session.state.records) == 4
        assert session.state.notice.kind is NoticeKind.STORE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_failed_first_load(self, failing_store):
        failing_store.fail_occupied = True
        session = MapSession(failing_store, SearchResolver(MockGeocoder()))
        assert await session.load() is False
        assert session.state.records == ()
        assert not session.state.loaded

    @pytest.mark.asyncio
    async def test_successful_reload_clears_store_notice(self, failing_store):
        session = MapSession(failing_store, SearchResolver(MockGeocoder()))
        failing_store.fail_occupied = True
        await session.load()
        failing_store.fail_occupied = False
        await session.load()
        assert session.state.notice is None

    @pytest.mark.asyncio
    async def test_summary(self, session):
        await session.load()
        assert session.summary() == {PlotStatus.OCCUPIED: 2, PlotStatus.AVAILABLE: 2}


class TestMapSessionWrites:
    @pytest.mark.asyncio
    async def test_add_available_refetches(self, session):
        await session.load()
        record = await session.add_available(_available())
        assert record.permit_id == "P-3001"
        assert len(session.state.records) == 5
        assert session.state.notice.kind is NoticeKind.SAVED

    @pytest.mark.asyncio
    async def test_write_failure_raises_notice(self, failing_store):
        session = MapSession(failing_store, SearchResolver(MockGeocoder()))
        await session.load()
        failing_store.fail_writes = True
        assert await session.add_available(_available()) is None
        assert session.state.notice.kind is NoticeKind.STORE_UNAVAILABLE
        assert session.state.notice.message == "Error saving plot"
        assert len(session.state.records) == 4

    @pytest.mark.asyncio
    async def test_duplicate_permit_is_store_failure(self, session):
        await session.load()
        assert await session.add_available(_available("P-1003")) is None
        assert session.state.notice.kind is NoticeKind.STORE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_delete(self, session):
        await session.load()
        assert await session.delete("P-1001") is True
        assert "P-1001" not in {r.permit_id for r in session.state.records}

    @pytest.mark.asyncio
    async def test_delete_failure(self, failing_store):
        session = MapSession(failing_store, SearchResolver(MockGeocoder()))
        await session.load()
        failing_store.fail_writes = True
        assert await session.delete("P-1001") is False
        assert session.state.notice.message == "Failed to delete entry."


class TestMapSessionSearch:
    @pytest.mark.asyncio
    async def test_search_found(self, session):
        result = await session.search("Braamfontein")
        assert isinstance(result, SearchResult)
        assert session.state.viewport.zoom == 17
        assert session.state.center_lat == pytest.approx(-26.1842)
        clip = session.clip_path()
        assert clip is not None
        assert len(clip.points) == 4

    @pytest.mark.asyncio
    async def test_search_not_found(self, session):
        result = await session.search("Atlantis")
        assert isinstance(result, NotFound)
        assert session.state.search is None
        assert session.state.notice.kind is NoticeKind.LOOKUP_NOT_FOUND
        assert session.state.notice.message == "Cemetery not found"

    @pytest.mark.asyncio
    async def test_search_unavailable(self, fixture_store):
        session = MapSession(fixture_store, SearchResolver(UnreachableGeocoder()))
        assert await session.search("Braamfontein") is None
        assert session.state.notice.kind is NoticeKind.LOOKUP_UNAVAILABLE
        assert session.state.notice.message == "Error searching location."

    @pytest.mark.asyncio
    async def test_clear_search(self, session):
        await session.search("Westpark")
        session.clear_search()
        assert session.clip_path() is None


class TestMapSessionViewport:
    @pytest.mark.asyncio
    async def test_zoom_gate(self, session):
        await session.load()
        session.set_zoom(13)
        assert session.markers() == []
        session.set_zoom(14)
        assert len(session.markers()) == 4

    @pytest.mark.asyncio
    async def test_filter(self, session):
        await session.load()
        session.set_filter("available")
        assert {r.permit_id for r in session.visible_records()} == {"P-1003", "P-1004"}
        session.set_filter(FilterStatus.OCCUPIED)
        assert {r.permit_id for r in session.visible_records()} == {"P-1001", "P-1002"}

    @pytest.mark.asyncio
    async def test_custom_marker_threshold(self, fixture_store):
        session = MapSession(
            fixture_store,
            SearchResolver(MockGeocoder()),
            config=MapConfig(min_marker_zoom=16),
        )
        await session.load()
        assert session.markers() == []

    def test_move(self, session):
        session.move(-26.2, 28.1, zoom=16)
        assert session.state.center_lat == -26.2
        assert session.state.viewport.zoom == 16


# ---------------------------------------------------------------------------
# Session manager
# ---------------------------------------------------------------------------

class TestMapSessionManager:
    @pytest.mark.asyncio
    async def test_create_loads(self, fixture_store):
        manager = MapSessionManager(fixture_store, SearchResolver(MockGeocoder()))
        session = await manager.create_session()
        assert session.state.loaded
        assert manager.get_session(session.session_id) is session
        assert manager.count == 1

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, fixture_store):
        manager = MapSessionManager(fixture_store, SearchResolver(MockGeocoder()))
        first = await manager.create_session()
        second = await manager.create_session()
        first.set_zoom(10)
        assert second.state.viewport.zoom == 15
        assert len(manager.list_sessions()) == 2

    @pytest.mark.asyncio
    async def test_close(self, fixture_store):
        manager = MapSessionManager(fixture_store, SearchResolver(MockGeocoder()))
        session = await manager.create_session()
        assert manager.close_session(session.session_id) is True
        assert manager.close_session(session.session_id) is False
        assert manager.get_session(session.session_id) is None
