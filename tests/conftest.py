"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from gravemap.core.errors import StoreUnavailable
from gravemap.plots.models import AvailablePlotInput, OccupiedPlotInput, PlotRecord
from gravemap.plots.store import InMemoryPlotStore
from gravemap.search.geocoder import GeocodeHit

FIXTURES_PATH = Path(__file__).resolve().parents[1] / "config" / "plot_fixtures.yml"


def make_record(permit: str, status: str | None = "Occupied", lat=-26.194, lng=28.027, **extra) -> PlotRecord:
    """Build a PlotRecord with sensible defaults."""
    return PlotRecord(
        permit_id=permit,
        lot=extra.pop("lot", "1"),
        block=extra.pop("block", "A"),
        grave=extra.pop("grave", "1"),
        status=status,
        lat=lat,
        lng=lng,
        **extra,
    )


class FailingStore(InMemoryPlotStore):
    """In-memory store whose operations can be switched to fail."""

    def __init__(self, fixtures_path: Path | None = None) -> None:
        super().__init__(fixtures_path=fixtures_path)
        self.fail_occupied = False
        self.fail_available = False
        self.fail_writes = False

    async def list_occupied(self) -> list[PlotRecord]:
        if self.fail_occupied:
            raise StoreUnavailable("list_occupied", "connection refused")
        return await super().list_occupied()

    async def list_available(self) -> list[PlotRecord]:
        if self.fail_available:
            raise StoreUnavailable("list_available", "connection refused")
        return await super().list_available()

    async def create_occupied(self, plot: OccupiedPlotInput) -> PlotRecord:
        if self.fail_writes:
            raise StoreUnavailable("create_occupied", "connection refused")
        return await super().create_occupied(plot)

    async def create_available(self, plot: AvailablePlotInput) -> PlotRecord:
        if self.fail_writes:
            raise StoreUnavailable("create_available", "connection refused")
        return await super().create_available(plot)

    async def delete_by_permit(self, permit_id: str) -> None:
        if self.fail_writes:
            raise StoreUnavailable("delete_by_permit", "connection refused")
        await super().delete_by_permit(permit_id)


class StaticGeocoder:
    """Geocoder returning canned hits and recording the queries it saw."""

    def __init__(self, hits: list[GeocodeHit] | None = None) -> None:
        self.hits = hits or []
        self.queries: list[str] = []

    async def geocode(self, text: str) -> list[GeocodeHit]:
        self.queries.append(text)
        return list(self.hits)


@pytest.fixture
def fixture_store() -> InMemoryPlotStore:
    return InMemoryPlotStore(fixtures_path=FIXTURES_PATH)


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore(fixtures_path=FIXTURES_PATH)
