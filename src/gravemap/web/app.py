"""FastAPI application for the burial plot map.

Serves map sessions to a rendering client: filtered plot markers, the
boundary clip region for a searched cemetery, and plot writes that go
through to the record store.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from gravemap import __version__
from gravemap.core.config import Settings
from gravemap.core.errors import LookupNotFound, LookupUnavailable, StoreUnavailable
from gravemap.plots.store import PlotStore, create_plot_store
from gravemap.search.geocoder import Geocoder, create_geocoder
from gravemap.search.resolver import SearchResolver
from gravemap.session.service import MapSessionManager
from gravemap.web.map_router import router as map_router


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = __version__
    active_sessions: int = 0


def _error_response(status_code: int, kind: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "kind": kind})


def create_app(
    settings: Settings | None = None,
    plot_store: PlotStore | None = None,
    geocoder: Geocoder | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with in-memory stores and mock geocoders.

    Args:
        settings: Application settings. Defaults to Settings().
        plot_store: Optional pre-built record store.
        geocoder: Optional pre-built geocoder.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("gravemap").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Grave Map",
        description="Burial plot records on an interactive map",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Dependencies
    if plot_store is None:
        plot_store = create_plot_store(settings.store)
    if geocoder is None:
        geocoder = create_geocoder(settings.geocoder)

    resolver = SearchResolver(
        geocoder,
        qualifier=settings.geocoder.query_qualifier,
        boundary_half_width=settings.geocoder.boundary_half_width,
    )
    map_sessions = MapSessionManager(plot_store, resolver, config=settings.map)

    app.state.settings = settings
    app.state.plot_store = plot_store
    app.state.geocoder = geocoder
    app.state.resolver = resolver
    app.state.map_sessions = map_sessions

    # Error taxonomy -> HTTP
    @app.exception_handler(LookupNotFound)
    async def lookup_not_found(request: Request, exc: LookupNotFound) -> JSONResponse:
        return _error_response(404, "lookup_not_found", exc)

    @app.exception_handler(LookupUnavailable)
    async def lookup_unavailable(request: Request, exc: LookupUnavailable) -> JSONResponse:
        return _error_response(502, "lookup_unavailable", exc)

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
        return _error_response(502, "store_unavailable", exc)

    app.include_router(map_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="gravemap",
            active_sessions=map_sessions.count,
        )

    return app
