from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from .models import RasterQuery


@dataclass(frozen=True)
class TileBox:
    ullon: float
    ullat: float
    lrlon: float
    lrlat: float

    def contains_box(self, other: TileBox) -> bool:
        return (
            self.ullon <= other.ullon
            and self.lrlon >= other.lrlon
            and self.ullat >= other.ullat
            and self.lrlat <= other.lrlat
        )


@dataclass(frozen=True)
class RasterResult:
    render_grid: tuple[tuple[str, ...], ...]
    raster_ul_lon: float
    raster_ul_lat: float
    raster_lr_lon: float
    raster_lr_lat: float
    depth: int
    query_success: bool

    @property
    def bounds(self) -> TileBox:
        return TileBox(self.raster_ul_lon, self.raster_ul_lat, self.raster_lr_lon, self.raster_lr_lat)

    def as_params(self) -> dict[str, Any]:
        return {
            "render_grid": [list(row) for row in self.render_grid],
            "raster_ul_lon": self.raster_ul_lon,
            "raster_ul_lat": self.raster_ul_lat,
            "raster_lr_lon": self.raster_lr_lon,
            "raster_lr_lat": self.raster_lr_lat,
            "depth": self.depth,
            "query_success": self.query_success,
        }


class TileSelector:
    """Picks the coarsest tile depth that resolves a query box, and the tiles covering it.

    Depth ``d`` splits the root box into a ``2**d`` x ``2**d`` grid of
    ``tile_size`` pixel tiles; tile bounds come from linear subdivision of the
    root box, never from accumulated offsets.
    """

    def __init__(
        self,
        *,
        root: TileBox,
        tile_size: int = 256,
        max_depth: int = 7,
        suffix: str = ".png",
    ) -> None:
        self.root = root
        self.tile_size = int(tile_size)
        self.max_depth = int(max_depth)
        self.suffix = suffix
        scale = np.power(2.0, np.arange(self.max_depth + 1))
        self.lon_dpps = ((root.lrlon - root.ullon) / self.tile_size) / scale
        self.lat_dpps = ((root.ullat - root.lrlat) / self.tile_size) / scale

    def depth_for(self, query_lon_dpp: float) -> int:
        for depth, lon_dpp in enumerate(self.lon_dpps):
            if lon_dpp <= query_lon_dpp:
                return depth
        return self.max_depth

    def tile_id(self, depth: int, col: int, row: int) -> str:
        return f"d{depth}_x{col}_y{row}{self.suffix}"

    def tile_box(self, depth: int, col: int, row: int) -> TileBox:
        lon_dpp = self.lon_dpps[depth]
        lat_dpp = self.lat_dpps[depth]
        ts = self.tile_size
        return TileBox(
            ullon=float(self.root.ullon + col * lon_dpp * ts),
            ullat=float(self.root.ullat - row * lat_dpp * ts),
            lrlon=float(self.root.ullon + (col + 1) * lon_dpp * ts),
            lrlat=float(self.root.ullat - (row + 1) * lat_dpp * ts),
        )

    def _edges(self, depth: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        idx = np.arange(2**depth, dtype=np.float64)
        lon_dpp = self.lon_dpps[depth]
        lat_dpp = self.lat_dpps[depth]
        ts = self.tile_size
        lefts = self.root.ullon + idx * lon_dpp * ts
        rights = self.root.ullon + (idx + 1) * lon_dpp * ts
        uppers = self.root.ullat - idx * lat_dpp * ts
        lowers = self.root.ullat - (idx + 1) * lat_dpp * ts
        return lefts, rights, uppers, lowers

    def select(self, query: RasterQuery) -> RasterResult:
        depth = self.depth_for(query.lon_dpp)
        lefts, rights, uppers, lowers = self._edges(depth)

        # Overlap of positive length per axis; the covering set is their product.
        cols = np.flatnonzero((lefts < query.lrlon) & (rights > query.ullon))
        rows = np.flatnonzero((lowers < query.ullat) & (uppers > query.lrlat))
        if cols.size == 0 or rows.size == 0:
            return RasterResult(
                render_grid=(),
                raster_ul_lon=0.0,
                raster_ul_lat=0.0,
                raster_lr_lon=0.0,
                raster_lr_lat=0.0,
                depth=depth,
                query_success=False,
            )

        grid = tuple(
            tuple(self.tile_id(depth, int(c), int(r)) for c in cols) for r in rows
        )
        first = self.tile_box(depth, int(cols[0]), int(rows[0]))
        last = self.tile_box(depth, int(cols[-1]), int(rows[-1]))
        return RasterResult(
            render_grid=grid,
            raster_ul_lon=first.ullon,
            raster_ul_lat=first.ullat,
            raster_lr_lon=last.lrlon,
            raster_lr_lat=last.lrlat,
            depth=depth,
            query_success=True,
        )

    def select_params(self, params: Mapping[str, Any]) -> RasterResult:
        return self.select(RasterQuery.from_params(params))
