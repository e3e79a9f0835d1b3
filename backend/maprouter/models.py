from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .query_errors import QueryError


def _finite(v: float) -> float:
    if not math.isfinite(v):
        raise ValueError("value must be finite")
    return v


class RasterQuery(BaseModel):
    """Query box (upper-left / lower-right corners) and viewport size in pixels."""

    ullon: float
    ullat: float
    lrlon: float
    lrlat: float
    w: float = Field(..., gt=0)
    h: float = Field(..., gt=0)

    @field_validator("ullon", "ullat", "lrlon", "lrlat", "w", "h")
    @classmethod
    def finite(cls, v: float) -> float:
        return _finite(v)

    @model_validator(mode="after")
    def _non_degenerate_box(self) -> "RasterQuery":
        if not self.ullon < self.lrlon:
            raise ValueError("ullon must be strictly less than lrlon")
        if not self.ullat > self.lrlat:
            raise ValueError("ullat must be strictly greater than lrlat")
        return self

    @property
    def lon_dpp(self) -> float:
        return (self.lrlon - self.ullon) / self.w

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "RasterQuery":
        try:
            return cls.model_validate(dict(params))
        except ValidationError as exc:
            raise QueryError(
                reason_code="tile_query_invalid",
                message="raster query parameters are missing or malformed",
                details={"errors": [err["msg"] for err in exc.errors()]},
            ) from exc


class RasterResponse(BaseModel):
    render_grid: list[list[str]]
    raster_ul_lon: float
    raster_ul_lat: float
    raster_lr_lon: float
    raster_lr_lat: float
    depth: int
    query_success: bool


class RouteResponse(BaseModel):
    route: list[int]
    distance_mi: float
    directions: list[str]


class PrefixSearchResponse(BaseModel):
    term: str
    matches: list[str]


class LocationRecord(BaseModel):
    id: int
    lon: float
    lat: float
    name: str


class LocationSearchResponse(BaseModel):
    name: str
    locations: list[LocationRecord]
