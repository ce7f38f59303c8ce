"""Point-to-point A* search over a :class:`CityModel`.

The search is only optimal when the heuristic never overestimates the
remaining cost under the chosen edge-cost function (admissible) and obeys the
triangle inequality along edges (consistent). Straight-line distance is in
coordinate units, so it is admissible for ``length_cost`` on a network whose
coordinates share the edge-length unit, but not in general for
``travel_time_cost``; use :func:`travel_time_heuristic` (or a scale factor) for
time-valued costs.
"""

from __future__ import annotations

import heapq
import logging
import math
from typing import Callable, List, Optional, Tuple

from urbanflow.network.city_model import CityModel

from .shortest_path import EdgeCost, travel_time_cost

logger = logging.getLogger(__name__)

Heuristic = Callable[[int, int], float]


def euclidean_heuristic(city: CityModel, scale: float = 1.0) -> Heuristic:
    """Straight-line distance between node coordinates, multiplied by ``scale``."""
    if scale < 0:
        raise ValueError("Heuristic scale must be non-negative.")

    def heuristic(node: int, target: int) -> float:
        ax, ay = city.coordinates(node)
        bx, by = city.coordinates(target)
        return scale * math.hypot(ax - bx, ay - by)

    return heuristic


def travel_time_heuristic(city: CityModel) -> Heuristic:
    """Straight-line distance divided by the fastest free-flow speed in the network."""
    max_speed = 0.0
    for edge in city.graph.edges():
        if edge.base_travel_time > 0:
            max_speed = max(max_speed, edge.length / edge.base_travel_time)
    if max_speed <= 0:
        return zero_heuristic
    return euclidean_heuristic(city, scale=1.0 / max_speed)


def zero_heuristic(node: int, target: int) -> float:
    return 0.0


def build_heuristic(name: str, city: CityModel, scale: float = 1.0) -> Heuristic:
    """Look up a heuristic by its configuration name."""
    key = str(name).strip().lower()
    if key == "euclidean":
        return euclidean_heuristic(city, scale)
    if key == "travel_time":
        base = travel_time_heuristic(city)
        if scale == 1.0:
            return base
        return lambda node, target: scale * base(node, target)
    if key == "zero":
        return zero_heuristic
    raise ValueError(f"Unknown heuristic '{name}', expected euclidean, travel_time or zero.")


class HeuristicSearch:
    """A* keeping path cost ``g`` and priority ``f = g + h(node, target)``."""

    def __init__(self, city: CityModel, heuristic: Optional[Heuristic] = None) -> None:
        self.city = city
        self.graph = city.graph
        self.heuristic = heuristic if heuristic is not None else euclidean_heuristic(city)
        n = self.graph.num_nodes
        self._dist: List[float] = [math.inf] * n
        self._f_score: List[float] = [math.inf] * n
        self._parent: List[Optional[int]] = [None] * n
        self.source: Optional[int] = None
        self.target: Optional[int] = None
        self.expanded = 0

    def compute(self, source: int, target: int, cost: EdgeCost = travel_time_cost) -> None:
        """Search from ``source`` until ``target`` is popped from the frontier."""
        self.graph.validate_node(source)
        self.graph.validate_node(target)

        n = self.graph.num_nodes
        dist = [math.inf] * n
        f_score = [math.inf] * n
        parent: List[Optional[int]] = [None] * n
        dist[source] = 0.0
        f_score[source] = self.heuristic(source, target)

        open_set: List[Tuple[float, int]] = [(f_score[source], source)]
        expanded = 0
        while open_set:
            priority, u = heapq.heappop(open_set)
            if priority > f_score[u]:
                continue  # stale
            expanded += 1
            if u == target:
                break
            for edge in self.graph.outgoing(u):
                weight = cost(edge)
                if weight < 0:
                    raise ValueError(f"Edge {edge.id} has negative cost {weight}.")
                tentative = dist[u] + weight
                v = edge.destination
                if tentative < dist[v]:
                    dist[v] = tentative
                    parent[v] = u
                    f_score[v] = tentative + self.heuristic(v, target)
                    heapq.heappush(open_set, (f_score[v], v))

        self._dist = dist
        self._f_score = f_score
        self._parent = parent
        self.source = source
        self.target = target
        self.expanded = expanded
        logger.debug("A* %s -> %s expanded %s nodes", source, target, expanded)

    # ----------------------------------------------------------------- queries
    def distance(self, target: int) -> float:
        self.graph.validate_node(target)
        if target >= len(self._dist):
            return math.inf
        return self._dist[target]

    @property
    def distances(self) -> Tuple[float, ...]:
        return tuple(self._dist)

    def reachable(self, target: int) -> bool:
        return self.distance(target) < math.inf

    def build_path(self, target: int) -> List[int]:
        """Reconstruct the route to ``target``; empty when it was not reached."""
        if not self.reachable(target):
            return []
        path: List[int] = []
        node: Optional[int] = target
        while node is not None:
            path.append(node)
            node = self._parent[node]
        path.reverse()
        return path
