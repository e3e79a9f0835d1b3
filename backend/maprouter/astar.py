from __future__ import annotations

import heapq
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from itertools import count
from typing import Generic, TypeVar

NodeT = TypeVar("NodeT", bound=Hashable)

NeighboursFn = Callable[[NodeT], Iterable[NodeT]]
CostFn = Callable[[NodeT, NodeT], float]


@dataclass(frozen=True)
class PathResult(Generic[NodeT]):
    nodes: tuple[NodeT, ...]
    cost: float
    explored_states: int = 0


@dataclass(frozen=True)
class SearchNode(Generic[NodeT]):
    vertex: NodeT
    distance: float
    predecessor: int  # arena index, -1 for the start node
    priority: float


class PathNotFoundError(ValueError):
    pass


def astar_shortest_path(
    *,
    start: NodeT,
    goal: NodeT,
    neighbours: NeighboursFn[NodeT],
    edge_cost: CostFn[NodeT],
    heuristic: CostFn[NodeT],
) -> PathResult[NodeT]:
    """A* from ``start`` to ``goal``.

    ``heuristic(v, goal)`` must never overestimate the remaining cost. Equal
    priorities pop in insertion order. Raises ``PathNotFoundError`` once the
    open set is exhausted without reaching ``goal``.
    """
    arena: list[SearchNode[NodeT]] = [SearchNode(start, 0.0, -1, heuristic(start, goal))]
    seq = count()
    heap: list[tuple[float, int, int]] = [(arena[0].priority, next(seq), 0)]
    passed: set[NodeT] = set()
    explored = 0

    while heap:
        _, _, idx = heapq.heappop(heap)
        current = arena[idx]
        if current.vertex in passed:
            continue
        explored += 1
        if current.vertex == goal:
            return PathResult(nodes=_reconstruct(arena, idx), cost=current.distance, explored_states=explored)
        passed.add(current.vertex)
        for nxt in neighbours(current.vertex):
            if nxt in passed:
                continue
            distance = current.distance + edge_cost(current.vertex, nxt)
            arena.append(SearchNode(nxt, distance, idx, distance + heuristic(nxt, goal)))
            heapq.heappush(heap, (arena[-1].priority, next(seq), len(arena) - 1))
    raise PathNotFoundError("no path")


def _reconstruct(arena: list[SearchNode[NodeT]], idx: int) -> tuple[NodeT, ...]:
    out: list[NodeT] = []
    while idx >= 0:
        out.append(arena[idx].vertex)
        idx = arena[idx].predecessor
    out.reverse()
    return tuple(out)
