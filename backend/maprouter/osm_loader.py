from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .logging_utils import timed_event
from .name_index import NameIndex
from .spatial_graph import WAY_NAME_TAG, GraphNode, GraphWay, SpatialGraph


@dataclass(frozen=True)
class Location:
    id: int
    lon: float
    lat: float
    name: str


@dataclass
class LoadedMap:
    graph: SpatialGraph
    names: NameIndex
    locations: dict[int, Location] = field(default_factory=dict)


def build_map(
    nodes: Iterable[GraphNode],
    ways: Iterable[GraphWay],
    *,
    allowed_highways: frozenset[str] | None = None,
) -> LoadedMap:
    """Build the graph and name index from loader records, then prune once.

    Ways without an allowed ``highway`` tag are skipped when ``allowed_highways``
    is given. A way's ``name`` is copied onto each member vertex, so a vertex
    shared by two named ways carries the name of the one loaded last.
    Named nodes are indexed as locations whether or not they survive pruning.
    """
    graph = SpatialGraph()
    names = NameIndex()
    locations: dict[int, Location] = {}
    ways_seen = 0
    ways_kept = 0
    with timed_event("map_build") as result:
        for node in nodes:
            graph.insert_node(node)
            place = node.tags.get("name")
            if place:
                names.add(place, node.id)
                locations[node.id] = Location(id=node.id, lon=node.lon, lat=node.lat, name=place)

        for way in ways:
            ways_seen += 1
            if allowed_highways is not None:
                highway = way.tags.get("highway", "").strip().lower()
                if highway not in allowed_highways:
                    continue
            ways_kept += 1
            graph.insert_way(way)
            for a, b in zip(way.node_ids, way.node_ids[1:]):
                graph.connect_nodes(a, b)
            if way.name:
                for node_id in way.node_ids:
                    if node_id in graph:
                        graph.node(node_id).tags[WAY_NAME_TAG] = way.name

        pruned = graph.clean()
        result.update(
            vertices=len(graph),
            pruned=pruned,
            ways_seen=ways_seen,
            ways_kept=ways_kept,
            locations=len(locations),
        )
    return LoadedMap(graph=graph, names=names, locations=locations)


def _tags_of(element: ET.Element) -> dict[str, str]:
    tags: dict[str, str] = {}
    for child in element.findall("tag"):
        key = str(child.attrib.get("k", "")).strip()
        if key:
            tags[key] = str(child.attrib.get("v", "")).strip()
    return tags


def parse_osm_xml(source: Path) -> tuple[list[GraphNode], list[GraphWay]]:
    tree = ET.parse(source)
    root = tree.getroot()

    nodes: list[GraphNode] = []
    for element in root.findall("node"):
        try:
            node_id = int(element.attrib["id"])
            lat = float(element.attrib["lat"])
            lon = float(element.attrib["lon"])
        except (KeyError, ValueError):
            continue
        nodes.append(GraphNode(id=node_id, lon=lon, lat=lat, tags=_tags_of(element)))

    ways: list[GraphWay] = []
    for element in root.findall("way"):
        try:
            way_id = int(element.attrib["id"])
        except (KeyError, ValueError):
            continue
        refs: list[int] = []
        for nd in element.findall("nd"):
            try:
                refs.append(int(nd.attrib["ref"]))
            except (KeyError, ValueError):
                continue
        if len(refs) < 2:
            continue
        ways.append(GraphWay(id=way_id, node_ids=refs, tags=_tags_of(element)))
    return nodes, ways


def load_osm_xml(source: Path, *, allowed_highways: frozenset[str] | None = None) -> LoadedMap:
    nodes, ways = parse_osm_xml(source)
    return build_map(nodes, ways, allowed_highways=allowed_highways)
