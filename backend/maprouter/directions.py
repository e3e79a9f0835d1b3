from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from .query_errors import QueryError
from .spatial_graph import SpatialGraph

UNKNOWN_ROAD = "unknown road"
KM_PER_MILE = 1.609344


class TurnKind(IntEnum):
    START = 0
    STRAIGHT = 1
    SLIGHT_LEFT = 2
    SLIGHT_RIGHT = 3
    RIGHT = 4
    LEFT = 5
    SHARP_LEFT = 6
    SHARP_RIGHT = 7

    @property
    def phrase(self) -> str:
        return _PHRASES[self]


_PHRASES: dict[TurnKind, str] = {
    TurnKind.START: "Start",
    TurnKind.STRAIGHT: "Go straight",
    TurnKind.SLIGHT_LEFT: "Slight left",
    TurnKind.SLIGHT_RIGHT: "Slight right",
    TurnKind.LEFT: "Turn left",
    TurnKind.RIGHT: "Turn right",
    TurnKind.SHARP_LEFT: "Sharp left",
    TurnKind.SHARP_RIGHT: "Sharp right",
}
_KIND_BY_PHRASE: dict[str, TurnKind] = {phrase: kind for kind, phrase in _PHRASES.items()}

_DIRECTION_RE = re.compile(
    r"^(?P<phrase>[A-Za-z ]+?) on (?P<way>.*) and continue for (?P<km>[0-9]+(?:\.[0-9]+)?) kms\.$"
)


def classify_bearing(bearing_deg: float) -> TurnKind:
    """Turn kind for a bearing in degrees; negative bearings are the left family."""
    magnitude = abs(bearing_deg)
    if magnitude < 15:
        return TurnKind.STRAIGHT
    if magnitude < 30:
        return TurnKind.SLIGHT_LEFT if bearing_deg < 0 else TurnKind.SLIGHT_RIGHT
    if magnitude < 100:
        return TurnKind.LEFT if bearing_deg < 0 else TurnKind.RIGHT
    return TurnKind.SHARP_LEFT if bearing_deg < 0 else TurnKind.SHARP_RIGHT


@dataclass(frozen=True)
class NavigationDirection:
    kind: TurnKind
    way: str
    distance: float  # miles travelled on ``way`` before the next change

    def to_text(self) -> str:
        return f"{self.kind.phrase} on {self.way} and continue for {self.distance * KM_PER_MILE:.3f} kms."

    def __str__(self) -> str:
        return self.to_text()

    @classmethod
    def from_text(cls, text: str) -> NavigationDirection:
        m = _DIRECTION_RE.match(text.strip())
        if m is None:
            raise QueryError(
                reason_code="direction_unparseable",
                message=f"not a navigation direction: {text!r}",
            )
        kind = _KIND_BY_PHRASE.get(m.group("phrase"))
        if kind is None:
            raise QueryError(
                reason_code="direction_unparseable",
                message=f"unknown turn phrase: {m.group('phrase')!r}",
            )
        return cls(kind=kind, way=m.group("way"), distance=float(m.group("km")) / KM_PER_MILE)


def route_directions(graph: SpatialGraph, route: Sequence[int]) -> list[NavigationDirection]:
    """Collapse a vertex path into one direction per run of the same way name.

    The first entry is always ``START``; each later entry's turn kind comes
    from the bearing of the segment that enters the new way.
    """
    if not route:
        return []

    def way_of(v: int) -> str:
        return graph.way_name(v) or UNKNOWN_ROAD

    directions: list[NavigationDirection] = []
    kind = TurnKind.START
    way = way_of(route[0])
    distance = 0.0
    prev = route[0]
    for v in route[1:]:
        distance += graph.distance(prev, v)
        name = way_of(v)
        if name != way:
            directions.append(NavigationDirection(kind=kind, way=way, distance=distance))
            kind = classify_bearing(graph.bearing(prev, v))
            way = name
            distance = 0.0
        prev = v
    directions.append(NavigationDirection(kind=kind, way=way, distance=distance))
    return directions
