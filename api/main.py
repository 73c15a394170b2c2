"""
Delivery Zoning API

Back office endpoints for same-day delivery planning:
- Zone recalculation (geocode, assign to existing zones, form new zones)
- Single address geocoding for the order form
- Read-through listing of zones for the route board
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

import httpx

import config
from store import RecordStore, RecordStoreError, build_http_client, get_resource_counts
from services import (
    FetchFailure,
    GeocodingError,
    GeocoderChain,
    RecalculationInProgress,
    ZoneRecalculator,
    build_geocoder,
)
from api.models import (
    ErrorResponse,
    GeocodeRequest,
    GeocodeResponse,
    RecalculateRequest,
    RecalculateResponse,
)

logger = logging.getLogger("zoning.api")


class AppState:
    def __init__(self):
        # HTTP clients (opened in lifespan unless injected beforehand)
        self.store_client: httpx.AsyncClient | None = None
        self.geocoder_client: httpx.AsyncClient | None = None

        # Services (lazy init after clients are ready)
        self._store = None
        self._geocoder = None
        self._recalculator = None

    def use_clients(self, store_client: httpx.AsyncClient, geocoder_client: httpx.AsyncClient):
        self.store_client = store_client
        self.geocoder_client = geocoder_client
        self._store = None
        self._geocoder = None
        self._recalculator = None

    @property
    def store(self) -> RecordStore:
        if not self._store:
            self._store = RecordStore(self.store_client)
        return self._store

    @property
    def geocoder(self) -> GeocoderChain:
        if not self._geocoder:
            self._geocoder = build_geocoder(self.store, self.geocoder_client)
        return self._geocoder

    @property
    def recalculator(self) -> ZoneRecalculator:
        if not self._recalculator:
            self._recalculator = ZoneRecalculator(self.store, self.geocoder)
        return self._recalculator

    async def close(self):
        for client in (self.store_client, self.geocoder_client):
            if client is not None:
                await client.aclose()
        self.use_clients(None, None)


state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open shared HTTP clients on startup."""
    config.configure_logging()
    if state.store_client is None:
        state.use_clients(
            build_http_client(),
            httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS),
        )
    logger.info("Zoning API ready (record store %s)", config.JSON_SERVER_URL)
    yield

    await state.close()
    logger.info("Zoning API shut down")


app = FastAPI(
    title="Delivery Zoning API",
    description="Zone recalculation and geocoding for same-day delivery",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _json_body(request: Request) -> dict:
    """Request JSON, or an empty dict when the body is missing or malformed."""
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


# =============================================================================
# Health & Status
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    return {"status": "ok", "service": "delivery-zoning-api"}


@app.get("/stats", tags=["Health"])
async def get_stats():
    """Record counts per resource, plus whether a recalculation is running."""
    counts = await get_resource_counts(state.store)
    return {**counts, "recalculation_in_progress": state.recalculator.in_progress}


# =============================================================================
# Zone Endpoints
# =============================================================================

@app.post(
    "/api/recalculate-zones",
    response_model=RecalculateResponse,
    responses={409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Zones"],
)
async def recalculate_zones(request: Request):
    """Geocode and zone every pending order in one pass."""
    payload = RecalculateRequest.model_validate(await _json_body(request))

    try:
        summary = await state.recalculator.recalculate(payload.radius)
    except RecalculationInProgress as e:
        return _error(409, "Ya hay un recálculo de zonas en curso.", str(e))
    except FetchFailure as e:
        logger.error("recalculate-zones: base data unavailable (%s)", e)
        return _error(500, "No se pudieron cargar datos base.", str(e))
    except Exception as e:
        logger.exception("recalculate-zones error")
        return _error(500, "Error al recalcular zonas.", str(e) or type(e).__name__)

    return RecalculateResponse(**summary.to_response())


@app.get("/zones", tags=["Zones"])
async def list_zones(time_window: str | None = None):
    """List zones, optionally for one delivery window."""
    params = {"time_window": time_window} if time_window else {}
    try:
        return await state.store.list("zones", **params)
    except (RecordStoreError, httpx.HTTPError) as e:
        raise HTTPException(status_code=502, detail=f"Record store unavailable: {e}")


# =============================================================================
# Geocoding Endpoints
# =============================================================================

@app.post("/api/geocode", response_model=GeocodeResponse, tags=["Geocoding"])
async def geocode_address(request: Request):
    """Resolve one address; unresolvable input gets the fallback coordinate."""
    payload = GeocodeRequest.model_validate(await _json_body(request))
    fallback = GeocodeResponse(
        latitude=config.FALLBACK_LATITUDE,
        longitude=config.FALLBACK_LONGITUDE,
    )

    address = payload.address
    if not isinstance(address, str) or not address.strip():
        return fallback

    try:
        result = await state.geocoder.resolve(address.strip())
    except (GeocodingError, RecordStoreError, httpx.HTTPError) as e:
        logger.warning("Geocoding %r fell back to default coordinates: %s", address, e)
        return fallback

    return GeocodeResponse(latitude=result.lat, longitude=result.lng, provider=result.provider)
