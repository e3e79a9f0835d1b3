from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

# Mean Earth radius in miles; distances everywhere in the graph are miles.
EARTH_RADIUS_MI = 3963.0

WAY_NAME_TAG = "way_name"


def haversine_miles(lon_v: float, lat_v: float, lon_w: float, lat_w: float) -> float:
    """Great-circle distance in miles between two lon/lat points."""
    phi1 = math.radians(lat_v)
    phi2 = math.radians(lat_w)
    dphi = math.radians(lat_w - lat_v)
    dlambda = math.radians(lon_w - lon_v)

    a = math.sin(dphi / 2.0) * math.sin(dphi / 2.0)
    a += math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) * math.sin(dlambda / 2.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MI * c


def initial_bearing_deg(lon_v: float, lat_v: float, lon_w: float, lat_w: float) -> float:
    """Initial great-circle bearing from v to w, in degrees within (-180, 180]."""
    phi1 = math.radians(lat_v)
    phi2 = math.radians(lat_w)
    lambda1 = math.radians(lon_v)
    lambda2 = math.radians(lon_w)

    y = math.sin(lambda2 - lambda1) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2)
    x -= math.sin(phi1) * math.cos(phi2) * math.cos(lambda2 - lambda1)
    bearing = math.degrees(math.atan2(y, x))
    # atan2 can land exactly on -180; fold it onto the closed end of the range.
    return 180.0 if bearing == -180.0 else bearing


@dataclass
class GraphNode:
    id: int
    lon: float
    lat: float
    adjacency: set[int] = field(default_factory=set)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def way_name(self) -> str | None:
        return self.tags.get(WAY_NAME_TAG)


@dataclass
class GraphWay:
    id: int
    node_ids: list[int] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.tags.get("name")


@dataclass(frozen=True)
class ComponentSummary:
    component_count: int
    largest_component_nodes: int
    largest_component_ratio: float


class SpatialGraph:
    """Undirected road graph of lon/lat vertices built once by a loader.

    Mutators (``insert_node``, ``insert_way``, ``connect_nodes``) are only
    meant for load time; ``clean`` prunes isolated vertices once at the end,
    after which the graph is treated as read-only and safe to share across
    concurrent readers.
    """

    def __init__(self) -> None:
        # Insertion-ordered, so ``closest`` ties resolve to the first vertex loaded.
        self._nodes: dict[int, GraphNode] = {}
        self._ways: dict[int, GraphWay] = {}
        self._removed: dict[int, GraphNode] = {}
        self._cleaned = False

    # ---- load-time mutators

    def insert_node(self, node: GraphNode) -> None:
        self._nodes[node.id] = node

    def insert_way(self, way: GraphWay) -> None:
        self._ways[way.id] = way

    def connect_nodes(self, id1: int, id2: int) -> None:
        # Repeated refs would make a self-loop.
        if id1 == id2:
            return
        # Forward references between ways are tolerated: unknown ids are ignored.
        n1 = self._nodes.get(id1)
        n2 = self._nodes.get(id2)
        if n1 is None or n2 is None:
            return
        n1.adjacency.add(id2)
        n2.adjacency.add(id1)

    def clean(self) -> int:
        """Remove every vertex with no neighbours; returns how many were pruned."""
        if self._cleaned:
            raise RuntimeError("graph has already been cleaned")
        isolated = [node_id for node_id, node in self._nodes.items() if not node.adjacency]
        for node_id in isolated:
            self._removed[node_id] = self._nodes.pop(node_id)
        self._cleaned = True
        return len(isolated)

    # ---- queries

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def vertices(self) -> Iterable[int]:
        return self._nodes.keys()

    def adjacent(self, v: int) -> Iterable[int]:
        return self._nodes[v].adjacency

    def node(self, v: int) -> GraphNode:
        return self._nodes[v]

    def way(self, way_id: int) -> GraphWay:
        return self._ways[way_id]

    def ways(self) -> Iterable[GraphWay]:
        return self._ways.values()

    @property
    def removed_count(self) -> int:
        return len(self._removed)

    def lon(self, v: int) -> float:
        return self._nodes[v].lon

    def lat(self, v: int) -> float:
        return self._nodes[v].lat

    def way_name(self, v: int) -> str | None:
        return self._nodes[v].way_name

    def distance(self, v: int, w: int) -> float:
        return haversine_miles(self.lon(v), self.lat(v), self.lon(w), self.lat(w))

    def bearing(self, v: int, w: int) -> float:
        return initial_bearing_deg(self.lon(v), self.lat(v), self.lon(w), self.lat(w))

    def closest(self, lon: float, lat: float) -> int | None:
        """Vertex nearest to (lon, lat) by linear scan, or None on an empty graph."""
        best_id: int | None = None
        best_d = math.inf
        for node_id, node in self._nodes.items():
            d = haversine_miles(lon, lat, node.lon, node.lat)
            if d < best_d:
                best_id = node_id
                best_d = d
        return best_id

    def components(self) -> ComponentSummary:
        seen: set[int] = set()
        sizes: list[int] = []
        for start in self._nodes:
            if start in seen:
                continue
            seen.add(start)
            q: deque[int] = deque([start])
            size = 0
            while q:
                current = q.popleft()
                size += 1
                for nxt in self._nodes[current].adjacency:
                    if nxt not in seen:
                        seen.add(nxt)
                        q.append(nxt)
            sizes.append(size)
        largest = max(sizes, default=0)
        ratio = float(largest) / float(len(self._nodes)) if self._nodes else 0.0
        return ComponentSummary(
            component_count=len(sizes),
            largest_component_nodes=largest,
            largest_component_ratio=ratio,
        )
