from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_utils import log_event
from .map_context import MapContext, build_map_context
from .models import (
    LocationRecord,
    LocationSearchResponse,
    PrefixSearchResponse,
    RasterQuery,
    RasterResponse,
    RouteResponse,
)
from .query_errors import QueryError, http_status_for
from .settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.map_context = build_map_context()
    except QueryError as e:
        # Serve /health anyway; map-backed endpoints answer 503 until data is fixed.
        log_event("map_context_unavailable", reason_code=e.reason_code, error_message=e.message)
        app.state.map_context = None
    yield
    app.state.map_context = None


app = FastAPI(title="Map Router", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list() or ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    status = http_status_for(exc)
    log_event(
        "query_rejected",
        path=request.url.path,
        reason_code=exc.reason_code,
        status_code=status,
    )
    return JSONResponse(status_code=status, content={"detail": exc.as_detail()})


def map_context(request: Request) -> MapContext:
    ctx: MapContext | None = getattr(request.app.state, "map_context", None)  # type: ignore[attr-defined]
    if ctx is None:
        raise QueryError(reason_code="map_data_unavailable", message="map data not loaded")
    return ctx


MapDep = Annotated[MapContext, Depends(map_context)]


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok", "message": "See /docs"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/raster", response_model=RasterResponse)
def raster(request: Request, ctx: MapDep) -> RasterResponse:
    t0 = time.perf_counter()
    query = RasterQuery.from_params(request.query_params)
    result = ctx.raster(query)
    log_event(
        "raster_request",
        depth=result.depth,
        query_success=result.query_success,
        rows=len(result.render_grid),
        cols=len(result.render_grid[0]) if result.render_grid else 0,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return RasterResponse(**result.as_params())


@app.get("/route", response_model=RouteResponse)
def route(
    ctx: MapDep,
    start_lon: Annotated[float, Query(ge=-180, le=180)],
    start_lat: Annotated[float, Query(ge=-90, le=90)],
    end_lon: Annotated[float, Query(ge=-180, le=180)],
    end_lat: Annotated[float, Query(ge=-90, le=90)],
) -> RouteResponse:
    t0 = time.perf_counter()
    plan = ctx.route(start_lon, start_lat, end_lon, end_lat)
    log_event(
        "route_request",
        vertices=len(plan.nodes),
        directions=len(plan.directions),
        distance_mi=round(plan.distance_mi, 6),
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return RouteResponse(
        route=list(plan.nodes),
        distance_mi=plan.distance_mi,
        directions=[d.to_text() for d in plan.directions],
    )


@app.get("/search/prefix", response_model=PrefixSearchResponse)
def search_prefix(ctx: MapDep, term: Annotated[str, Query()]) -> PrefixSearchResponse:
    return PrefixSearchResponse(term=term, matches=ctx.autocomplete(term))


@app.get("/search/locations", response_model=LocationSearchResponse)
def search_locations(ctx: MapDep, name: Annotated[str, Query()]) -> LocationSearchResponse:
    found = ctx.locations(name)
    return LocationSearchResponse(
        name=name,
        locations=[LocationRecord(id=p.id, lon=p.lon, lat=p.lat, name=p.name) for p in found],
    )
