from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from maprouter.directions import route_directions
from maprouter.osm_loader import load_osm_xml
from maprouter.query_errors import QueryError
from maprouter.router import shortest_path
from maprouter.settings import settings


def build_report(
    source: Path,
    *,
    route: tuple[float, float, float, float] | None = None,
    all_highways: bool = False,
) -> dict[str, Any]:
    allowed = None if all_highways else settings.allowed_highway_set()
    loaded = load_osm_xml(source, allowed_highways=allowed)
    graph = loaded.graph
    summary = graph.components()
    report: dict[str, Any] = {
        "source": str(source),
        "vertices": len(graph),
        "pruned": graph.removed_count,
        "ways": sum(1 for _ in graph.ways()),
        "locations": len(loaded.locations),
        "named_places": len(loaded.names),
        "component_count": summary.component_count,
        "largest_component_nodes": summary.largest_component_nodes,
        "largest_component_ratio": round(summary.largest_component_ratio, 6),
    }
    if route is None:
        return report

    start_lon, start_lat, end_lon, end_lat = route
    try:
        result = shortest_path(graph, start_lon, start_lat, end_lon, end_lat)
    except QueryError as e:
        report["route"] = {"ok": False, **e.as_detail()}
        return report
    report["route"] = {
        "ok": True,
        "nodes": list(result.nodes),
        "distance_mi": round(result.cost, 6),
        "explored_states": result.explored_states,
        "directions": [d.to_text() for d in route_directions(graph, result.nodes)],
    }
    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load an OSM XML extract and print a graph/route report as JSON."
    )
    parser.add_argument("--source", type=Path, required=True, help="OSM XML file")
    parser.add_argument(
        "--route",
        type=float,
        nargs=4,
        metavar=("START_LON", "START_LAT", "END_LON", "END_LAT"),
        default=None,
    )
    parser.add_argument(
        "--all-highways",
        action="store_true",
        help="Keep every way instead of filtering on ALLOWED_HIGHWAYS.",
    )
    parser.add_argument("--output", type=Path, default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if not args.source.exists():
        parser.error(f"source not found: {args.source}")

    report = build_report(
        args.source,
        route=tuple(args.route) if args.route else None,
        all_highways=bool(args.all_highways),
    )
    text = json.dumps(report, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
    print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
