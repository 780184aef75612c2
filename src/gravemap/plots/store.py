"""Plot record store protocol, in-memory implementation and factory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from gravemap.core.config import StoreConfig
from gravemap.core.errors import StoreUnavailable
from gravemap.plots.models import AvailablePlotInput, OccupiedPlotInput, PlotRecord

logger = logging.getLogger(__name__)

_PLOT_COLUMNS = ("Permit", "Lot", "Block", "Grave", "Status", "lat", "lng")
_DECEASED_COLUMNS = ("DecID", "DecNama", "DecSurname", "Sex", "DoB", "DoD")


@runtime_checkable
class PlotStore(Protocol):
    """Protocol for plot record stores.

    Every failure is reported as :class:`StoreUnavailable`.
    """

    async def list_occupied(self) -> list[PlotRecord]: ...

    async def list_available(self) -> list[PlotRecord]: ...

    async def create_occupied(self, plot: OccupiedPlotInput) -> PlotRecord: ...

    async def create_available(self, plot: AvailablePlotInput) -> PlotRecord: ...

    async def delete_by_permit(self, permit_id: str) -> None: ...


class InMemoryPlotStore:
    """In-memory plot store with optional YAML fixtures.

    Keeps plots and deceased rows in separate tables keyed by permit. A plot
    is occupied when a deceased row shares its permit and available
    otherwise.
    """

    def __init__(self, fixtures_path: str | Path | None = None) -> None:
        self._plots: dict[str, dict[str, Any]] = {}
        self._deceased: dict[str, dict[str, Any]] = {}
        if fixtures_path is not None:
            self._load_fixtures(Path(fixtures_path))

    def _load_fixtures(self, path: Path) -> None:
        if not path.exists():
            logger.info("Plot fixtures %s not found, starting empty", path)
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for plot in data.get("plots", []):
            self._plots[str(plot["Permit"])] = {k: plot.get(k) for k in _PLOT_COLUMNS}
        for person in data.get("deceased", []):
            self._deceased[str(person["Permit"])] = {
                k: person.get(k) for k in _DECEASED_COLUMNS
            }
        logger.info("Loaded %d plots from %s", len(self._plots), path)

    async def list_occupied(self) -> list[PlotRecord]:
        return [
            PlotRecord.from_row({**plot, **self._deceased[permit]})
            for permit, plot in self._plots.items()
            if permit in self._deceased
        ]

    async def list_available(self) -> list[PlotRecord]:
        return [
            PlotRecord.from_row(plot)
            for permit, plot in self._plots.items()
            if permit not in self._deceased
        ]

    async def create_occupied(self, plot: OccupiedPlotInput) -> PlotRecord:
        self._check_new_permit("create_occupied", plot.permit_id)
        payload = plot.to_payload()
        self._plots[plot.permit_id] = {k: payload[k] for k in _PLOT_COLUMNS}
        self._deceased[plot.permit_id] = {
            "DecID": plot.deceased_id,
            "DecNama": plot.first_name,
            "DecSurname": plot.surname,
            "Sex": payload["sex"],
            "DoB": plot.date_of_birth,
            "DoD": plot.date_of_death,
        }
        return PlotRecord.from_row(
            {**self._plots[plot.permit_id], **self._deceased[plot.permit_id]}
        )

    async def create_available(self, plot: AvailablePlotInput) -> PlotRecord:
        self._check_new_permit("create_available", plot.permit_id)
        payload = plot.to_payload()
        self._plots[plot.permit_id] = {k: payload[k] for k in _PLOT_COLUMNS}
        return PlotRecord.from_row(self._plots[plot.permit_id])

    async def delete_by_permit(self, permit_id: str) -> None:
        self._deceased.pop(permit_id, None)
        self._plots.pop(permit_id, None)

    @property
    def count(self) -> int:
        return len(self._plots)

    def _check_new_permit(self, operation: str, permit_id: str) -> None:
        if permit_id in self._plots:
            raise StoreUnavailable(operation, f"permit {permit_id!r} already exists")


def create_plot_store(config: StoreConfig) -> PlotStore:
    """Factory: select and instantiate a plot store based on config.provider."""
    from gravemap.plots.http_store import HttpPlotStore

    provider = config.provider.lower()
    if provider == "memory":
        return InMemoryPlotStore(fixtures_path=config.fixtures_path)
    if provider == "http":
        return HttpPlotStore(config)
    raise ValueError(
        f"Unknown plot store provider {config.provider!r}. Available: http, memory"
    )
