"""Single-source least-cost routes (Dijkstra) under a pluggable edge cost."""

from __future__ import annotations

import heapq
import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

from urbanflow.network.domain_types import Edge
from urbanflow.network.graph import Graph

logger = logging.getLogger(__name__)

EdgeCost = Callable[[Edge], float]


def travel_time_cost(edge: Edge) -> float:
    """Free-flow travel time; the default weight of every engine."""
    return edge.base_travel_time


def length_cost(edge: Edge) -> float:
    return edge.length


def path_cost(graph: Graph, path: Sequence[int], cost: EdgeCost = travel_time_cost) -> float:
    """Cumulative cost of ``path`` using the cheapest edge for each leg.

    Returns ``inf`` when a leg has no edge.
    """
    total = 0.0
    for u, v in zip(path, path[1:]):
        candidates = [cost(edge) for edge in graph.outgoing(u) if edge.destination == v]
        if not candidates:
            return math.inf
        total += min(candidates)
    return total


class ShortestPath:
    """Dijkstra's algorithm with lazy deletion of stale heap entries."""

    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self._dist: List[float] = [math.inf] * graph.num_nodes
        self._parent: List[Optional[int]] = [None] * graph.num_nodes
        self.source: Optional[int] = None

    def compute(self, source: int, cost: EdgeCost = travel_time_cost) -> None:
        """Compute least costs from ``source`` to every node.

        Each call starts from a clean state sized to the graph's current node
        count. Raises ``ValueError`` if ``cost`` yields a negative value.
        """
        self.graph.validate_node(source)
        n = self.graph.num_nodes
        dist = [math.inf] * n
        parent: List[Optional[int]] = [None] * n
        dist[source] = 0.0

        frontier: List[Tuple[float, int]] = [(0.0, source)]
        settled = 0
        while frontier:
            current, u = heapq.heappop(frontier)
            if current > dist[u]:
                continue  # stale
            settled += 1
            for edge in self.graph.outgoing(u):
                weight = cost(edge)
                if weight < 0:
                    raise ValueError(f"Edge {edge.id} has negative cost {weight}.")
                candidate = current + weight
                if candidate < dist[edge.destination]:
                    dist[edge.destination] = candidate
                    parent[edge.destination] = u
                    heapq.heappush(frontier, (candidate, edge.destination))

        self._dist = dist
        self._parent = parent
        self.source = source
        logger.debug("Dijkstra from %s settled %s of %s nodes", source, settled, n)

    # ----------------------------------------------------------------- queries
    def distance(self, target: int) -> float:
        self.graph.validate_node(target)
        if target >= len(self._dist):
            return math.inf  # added after the last compute
        return self._dist[target]

    @property
    def distances(self) -> Tuple[float, ...]:
        return tuple(self._dist)

    def predecessor(self, target: int) -> Optional[int]:
        if not self.reachable(target):
            return None
        return self._parent[target]

    def reachable(self, target: int) -> bool:
        return self.distance(target) < math.inf

    def build_path(self, target: int) -> List[int]:
        """Node sequence from the last source to ``target``; empty if unreachable."""
        if not self.reachable(target):
            return []
        path: List[int] = []
        node: Optional[int] = target
        while node is not None:
            path.append(node)
            node = self._parent[node]
        path.reverse()
        return path
