"""Plot store backed by the record-store REST API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from gravemap.core.config import StoreConfig
from gravemap.core.errors import StoreUnavailable
from gravemap.plots.models import AvailablePlotInput, OccupiedPlotInput, PlotRecord

logger = logging.getLogger(__name__)


class HttpPlotStore:
    """Talks to the record-store API.

    Endpoints: ``/api/plot`` (occupied, joined with the deceased table),
    ``/api/available`` and ``DELETE /api/plot/{permit}``. Reads are retried
    on transport errors and 5xx responses; writes are sent once.
    """

    def __init__(self, config: StoreConfig) -> None:
        self.config = config
        headers = {"Accept": "application/json"}
        if config.api_token is not None:
            headers["Authorization"] = f"Bearer {config.api_token.get_secret_value()}"
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers=headers,
        )

    # -- public API ----------------------------------------------------------

    async def list_occupied(self) -> list[PlotRecord]:
        rows = await self._get_rows("list_occupied", "/api/plot")
        return self._parse_rows(rows)

    async def list_available(self) -> list[PlotRecord]:
        rows = await self._get_rows("list_available", "/api/available")
        return self._parse_rows(rows)

    async def create_occupied(self, plot: OccupiedPlotInput) -> PlotRecord:
        row = await self._write("create_occupied", "POST", "/api/plot", plot.to_payload())
        return self._parse_created(row, plot)

    async def create_available(self, plot: AvailablePlotInput) -> PlotRecord:
        row = await self._write("create_available", "POST", "/api/available", plot.to_payload())
        return self._parse_created(row, plot)

    async def delete_by_permit(self, permit_id: str) -> None:
        await self._write("delete_by_permit", "DELETE", f"/api/plot/{quote(permit_id, safe='')}")

    async def close(self) -> None:
        await self._http.aclose()

    # -- internal ------------------------------------------------------------

    async def _get_rows(self, operation: str, path: str) -> list[dict[str, Any]]:
        max_attempts = max(1, self.config.max_retries + 1)
        for attempt in range(max_attempts):
            try:
                resp = await self._http.get(path)
            except httpx.TransportError as exc:
                if attempt < max_attempts - 1:
                    delay = self.config.retry_backoff_seconds * (2 ** attempt)
                    logger.warning(
                        "Transport error on %s: %s, retrying in %.1fs (%d/%d)",
                        path, exc, delay, attempt + 1, max_attempts,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise StoreUnavailable(operation, str(exc)) from exc
            except httpx.HTTPError as exc:
                raise StoreUnavailable(operation, str(exc)) from exc

            if resp.status_code >= 500 and attempt < max_attempts - 1:
                delay = self.config.retry_backoff_seconds * (2 ** attempt)
                logger.warning(
                    "Request to %s returned %d, retrying in %.1fs (%d/%d)",
                    path, resp.status_code, delay, attempt + 1, max_attempts,
                )
                await asyncio.sleep(delay)
                continue
            if resp.status_code >= 400:
                raise StoreUnavailable(operation, f"HTTP {resp.status_code}")
            try:
                data = resp.json()
            except ValueError as exc:
                raise StoreUnavailable(operation, "invalid JSON response") from exc
            if not isinstance(data, list):
                raise StoreUnavailable(operation, "expected a list of rows")
            return data

        raise StoreUnavailable(operation, "retries exhausted")  # pragma: no cover

    async def _write(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        try:
            resp = await self._http.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            raise StoreUnavailable(operation, str(exc)) from exc
        if resp.status_code >= 400:
            raise StoreUnavailable(operation, f"HTTP {resp.status_code}")
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreUnavailable(operation, "invalid JSON response") from exc

    @staticmethod
    def _parse_rows(rows: list[Any]) -> list[PlotRecord]:
        records: list[PlotRecord] = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning("Skipping non-object plot row: %r", row)
                continue
            try:
                records.append(PlotRecord.from_row(row))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed plot row %r: %d validation error(s)",
                    row.get("Permit"), exc.error_count(),
                )
        return records

    @staticmethod
    def _parse_created(row: Any, plot: AvailablePlotInput) -> PlotRecord:
        # The occupied insert only echoes the Plot table row
        payload = plot.to_payload()
        if isinstance(row, dict):
            payload.update(row)
        if isinstance(plot, OccupiedPlotInput):
            payload["Sex"] = payload.pop("sex", None)
        return PlotRecord.from_row(payload)
