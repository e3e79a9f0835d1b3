from __future__ import annotations

import inspect

from fastapi.testclient import TestClient

import maprouter.main as main_module
from maprouter.main import app, map_context
from maprouter.map_context import MapContext, context_from_loaded
from maprouter.osm_loader import build_map
from maprouter.settings import settings
from maprouter.spatial_graph import GraphNode, GraphWay


def _context() -> MapContext:
    nodes = [
        GraphNode(id=1, lon=-122.26, lat=37.87),
        GraphNode(id=2, lon=-122.25, lat=37.87),
        GraphNode(id=3, lon=-122.25, lat=37.86),
        GraphNode(id=8, lon=-122.22, lat=37.83),
        GraphNode(id=9, lon=-122.23, lat=37.83),
        GraphNode(id=20, lon=-122.255, lat=37.865, tags={"name": "Blue Bottle Coffee"}),
        GraphNode(id=21, lon=-122.245, lat=37.866, tags={"name": "Blue Door"}),
    ]
    ways = [
        GraphWay(id=100, node_ids=[1, 2, 3], tags={"highway": "residential", "name": "Bancroft Way"}),
        GraphWay(id=200, node_ids=[8, 9], tags={"highway": "residential"}),
    ]
    return context_from_loaded(build_map(nodes, ways))


def _client_with(ctx: MapContext) -> TestClient:
    app.dependency_overrides[map_context] = lambda: ctx
    return TestClient(app)


def test_health_without_dependency() -> None:
    with TestClient(app) as client:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


def test_route_endpoint_returns_ids_distance_and_directions() -> None:
    ctx = _context()
    try:
        with _client_with(ctx) as client:
            resp = client.get(
                "/route",
                params={"start_lon": -122.26, "start_lat": 37.87, "end_lon": -122.25, "end_lat": 37.86},
            )
            assert resp.status_code == 200
            body = resp.json()
            assert body["route"] == [1, 2, 3]
            assert body["distance_mi"] > 0
            assert body["directions"] == [
                f"Start on Bancroft Way and continue for {body['distance_mi'] * 1.609344:.3f} kms."
            ]
    finally:
        app.dependency_overrides.clear()


def test_route_endpoint_no_path_is_404_with_reason_code() -> None:
    try:
        with _client_with(_context()) as client:
            resp = client.get(
                "/route",
                params={"start_lon": -122.26, "start_lat": 37.87, "end_lon": -122.22, "end_lat": 37.83},
            )
            assert resp.status_code == 404
            assert resp.json()["detail"]["reason_code"] == "routing_no_path"
    finally:
        app.dependency_overrides.clear()


def test_route_endpoint_rejects_out_of_range_coordinates() -> None:
    try:
        with _client_with(_context()) as client:
            resp = client.get(
                "/route",
                params={"start_lon": -222.0, "start_lat": 37.87, "end_lon": -122.25, "end_lat": 37.86},
            )
            assert resp.status_code == 422
    finally:
        app.dependency_overrides.clear()


def test_raster_endpoint_keys_and_grid() -> None:
    params = {
        "ullon": settings.root_ullon,
        "ullat": settings.root_ullat,
        "lrlon": settings.root_lrlon,
        "lrlat": settings.root_lrlat,
        "w": 256,
        "h": 256,
    }
    try:
        with _client_with(_context()) as client:
            resp = client.get("/raster", params=params)
            assert resp.status_code == 200
            body = resp.json()
            assert set(body) == {
                "render_grid",
                "raster_ul_lon",
                "raster_ul_lat",
                "raster_lr_lon",
                "raster_lr_lat",
                "depth",
                "query_success",
            }
            assert body["render_grid"] == [["d0_x0_y0.png"]]
            assert body["depth"] == 0
            assert body["query_success"] is True

            outside = client.get("/raster", params={**params, "ullon": -124.0, "lrlon": -123.5})
            assert outside.status_code == 200
            assert outside.json()["query_success"] is False

            bad = client.get("/raster", params={k: v for k, v in params.items() if k != "w"})
            assert bad.status_code == 422
            assert bad.json()["detail"]["reason_code"] == "tile_query_invalid"
    finally:
        app.dependency_overrides.clear()


def test_search_endpoints() -> None:
    try:
        with _client_with(_context()) as client:
            prefix = client.get("/search/prefix", params={"term": "blue"})
            assert prefix.status_code == 200
            assert prefix.json() == {"term": "blue", "matches": ["Blue Bottle Coffee", "Blue Door"]}

            missing = client.get("/search/prefix", params={"term": "qq"})
            assert missing.status_code == 404
            assert missing.json()["detail"]["reason_code"] == "prefix_unknown"

            found = client.get("/search/locations", params={"name": "blue door"})
            assert found.status_code == 200
            assert found.json()["locations"] == [
                {"id": 21, "lon": -122.245, "lat": 37.866, "name": "Blue Door"}
            ]

            unknown = client.get("/search/locations", params={"name": "blue"})
            assert unknown.status_code == 404
            assert unknown.json()["detail"]["reason_code"] == "location_unknown"
    finally:
        app.dependency_overrides.clear()


def test_map_endpoints_return_503_without_map_data() -> None:
    with TestClient(app) as client:
        app.state.map_context = None
        resp = client.get("/search/prefix", params={"term": "blue"})
        assert resp.status_code == 503
        assert resp.json()["detail"]["reason_code"] == "map_data_unavailable"


def test_map_backed_handlers_run_in_threadpool() -> None:
    # Plain functions are dispatched to FastAPI's threadpool, keeping graph work off the event loop.
    for handler in (main_module.raster, main_module.route, main_module.search_prefix, main_module.search_locations):
        assert not inspect.iscoroutinefunction(handler)
