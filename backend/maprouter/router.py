from __future__ import annotations

from .astar import PathNotFoundError, PathResult, astar_shortest_path
from .query_errors import QueryError
from .spatial_graph import SpatialGraph


def shortest_path(
    graph: SpatialGraph,
    start_lon: float,
    start_lat: float,
    dest_lon: float,
    dest_lat: float,
) -> PathResult[int]:
    """Shortest path between the vertices closest to the two query points.

    Great-circle distance is both the edge cost and the heuristic, so the
    heuristic is admissible. The result's ``cost`` is in miles.
    """
    start = graph.closest(start_lon, start_lat)
    goal = graph.closest(dest_lon, dest_lat)
    if start is None or goal is None:
        raise QueryError(reason_code="graph_empty", message="map graph has no vertices")
    try:
        return astar_shortest_path(
            start=start,
            goal=goal,
            neighbours=graph.adjacent,
            edge_cost=graph.distance,
            heuristic=graph.distance,
        )
    except PathNotFoundError as exc:
        raise QueryError(
            reason_code="routing_no_path",
            message=f"no path between vertex {start} and vertex {goal}",
            details={"start": start, "goal": goal},
        ) from exc
