from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .directions import NavigationDirection, route_directions
from .logging_utils import log_event
from .models import RasterQuery
from .name_index import NameIndex
from .osm_loader import LoadedMap, Location, build_map, load_osm_xml
from .query_errors import QueryError
from .router import shortest_path
from .settings import Settings, settings
from .spatial_graph import SpatialGraph
from .tiles import RasterResult, TileBox, TileSelector


@dataclass(frozen=True)
class RoutePlan:
    nodes: tuple[int, ...]
    distance_mi: float
    directions: tuple[NavigationDirection, ...]


@dataclass(frozen=True)
class MapContext:
    """Everything a query needs, built once and shared read-only across requests."""

    graph: SpatialGraph
    names: NameIndex
    places: dict[int, Location]
    tiles: TileSelector

    def route(self, start_lon: float, start_lat: float, dest_lon: float, dest_lat: float) -> RoutePlan:
        result = shortest_path(self.graph, start_lon, start_lat, dest_lon, dest_lat)
        return RoutePlan(
            nodes=result.nodes,
            distance_mi=result.cost,
            directions=tuple(route_directions(self.graph, result.nodes)),
        )

    def autocomplete(self, prefix: str) -> list[str]:
        matches = self.names.find(prefix)
        if matches is None:
            raise QueryError(
                reason_code="prefix_unknown",
                message=f"no place name starts with {prefix!r}",
            )
        return matches

    def locations(self, name: str) -> list[Location]:
        ids = self.names.location_ids(name)
        if not ids:
            raise QueryError(
                reason_code="location_unknown",
                message=f"no place is named {name!r}",
            )
        return [self.places[i] for i in sorted(ids) if i in self.places]

    def raster(self, query: RasterQuery) -> RasterResult:
        return self.tiles.select(query)


def tile_selector_from_settings(cfg: Settings = settings) -> TileSelector:
    return TileSelector(
        root=TileBox(
            ullon=cfg.root_ullon,
            ullat=cfg.root_ullat,
            lrlon=cfg.root_lrlon,
            lrlat=cfg.root_lrlat,
        ),
        tile_size=cfg.tile_size,
        max_depth=cfg.tile_max_depth,
        suffix=cfg.tile_image_suffix,
    )


def context_from_loaded(loaded: LoadedMap, *, cfg: Settings = settings) -> MapContext:
    return MapContext(
        graph=loaded.graph,
        names=loaded.names,
        places=loaded.locations,
        tiles=tile_selector_from_settings(cfg),
    )


def build_map_context(path: str | Path | None = None, *, cfg: Settings = settings) -> MapContext:
    """Load ``path`` (default: the configured OSM file), or an empty map when neither is set."""
    raw_path = str(path if path is not None else (cfg.map_osm_path or "")).strip()
    if not raw_path:
        log_event("map_data_not_configured")
        return context_from_loaded(build_map([], []), cfg=cfg)
    osm_path = Path(raw_path)
    if not osm_path.exists():
        raise QueryError(
            reason_code="map_data_unavailable",
            message=f"map data file not found: {osm_path}",
            details={"map_osm_path": str(osm_path)},
        )
    loaded = load_osm_xml(osm_path, allowed_highways=cfg.allowed_highway_set())
    summary = loaded.graph.components()
    log_event(
        "map_context_ready",
        map_osm_path=str(osm_path),
        vertices=len(loaded.graph),
        component_count=summary.component_count,
        largest_component_ratio=round(summary.largest_component_ratio, 6),
    )
    return context_from_loaded(loaded, cfg=cfg)
