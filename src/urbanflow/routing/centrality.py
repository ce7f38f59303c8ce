"""Structural importance of intersections: degree, closeness and betweenness."""

from __future__ import annotations

import heapq
import logging
import math
from typing import Iterable, List, Optional, Tuple

from urbanflow.network.graph import Graph

from .shortest_path import EdgeCost, ShortestPath, travel_time_cost

logger = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-12


class Centrality:
    """Centrality scores for every node of ``graph`` under the edge cost ``cost``."""

    def __init__(self, graph: Graph, cost: EdgeCost = travel_time_cost) -> None:
        self.graph = graph
        self.cost = cost

    def degree(self) -> List[float]:
        """Out-degree of each node."""
        return [float(self.graph.out_degree(u)) for u in range(self.graph.num_nodes)]

    def closeness(self) -> List[float]:
        """``reachable / sum(distances)`` per node, excluding the node itself.

        Nodes that reach nothing, or whose distance sum is negligible, score 0.
        """
        n = self.graph.num_nodes
        result = [0.0] * n
        search = ShortestPath(self.graph)
        for source in range(n):
            search.compute(source, self.cost)
            total = 0.0
            reachable = 0
            for node, dist in enumerate(search.distances):
                if node == source or math.isinf(dist):
                    continue
                total += dist
                reachable += 1
            if reachable > 0 and total > TIE_TOLERANCE:
                result[source] = reachable / total
        return result

    def betweenness(self, normalized: bool = False) -> List[float]:
        """Brandes betweenness for weighted graphs.

        For each source a Dijkstra pass counts shortest paths (``sigma``) and
        records every predecessor lying on a shortest path, treating distances
        within :data:`TIE_TOLERANCE` as equal. Dependencies are then
        accumulated in order of non-increasing distance. On an undirected graph
        each unordered pair is counted once, so scores are halved. With
        ``normalized`` the scores are divided by the number of pairs not
        involving the node.
        """
        n = self.graph.num_nodes
        scores = [0.0] * n
        for source in range(n):
            order, predecessors, sigma = self._single_source_paths(source)
            delta = [0.0] * n
            for w in reversed(order):
                if sigma[w] > 0.0:
                    for v in predecessors[w]:
                        delta[v] += (sigma[v] / sigma[w]) * (1.0 + delta[w])
                if w != source:
                    scores[w] += delta[w]

        scale = 1.0 if self.graph.directed else 0.5
        if normalized and n > 2:
            pairs = (n - 1) * (n - 2) * scale
            scale = scale / pairs
        if scale != 1.0:
            scores = [value * scale for value in scores]
        logger.debug("Betweenness computed for %s nodes", n)
        return scores

    def _single_source_paths(
        self, source: int
    ) -> Tuple[List[int], List[List[int]], List[float]]:
        """Dijkstra pass returning (finalization order, predecessor lists, sigma)."""
        n = self.graph.num_nodes
        dist = [math.inf] * n
        sigma = [0.0] * n
        predecessors: List[List[int]] = [[] for _ in range(n)]
        settled = [False] * n
        order: List[int] = []

        dist[source] = 0.0
        sigma[source] = 1.0
        frontier: List[Tuple[float, int]] = [(0.0, source)]
        while frontier:
            d, v = heapq.heappop(frontier)
            if settled[v] or d > dist[v]:
                continue
            settled[v] = True
            order.append(v)
            for edge in self.graph.outgoing(v):
                w = edge.destination
                candidate = dist[v] + self.cost(edge)
                if candidate < dist[w] - TIE_TOLERANCE:
                    dist[w] = candidate
                    sigma[w] = sigma[v]
                    predecessors[w] = [v]
                    heapq.heappush(frontier, (candidate, w))
                elif abs(candidate - dist[w]) <= TIE_TOLERANCE:
                    sigma[w] += sigma[v]
                    predecessors[w].append(v)
        return order, predecessors, sigma


def rank_nodes(scores: Iterable[float], limit: Optional[int] = None) -> List[Tuple[int, float]]:
    """``(node, score)`` pairs by descending score, ties broken by node id."""
    ranked = sorted(enumerate(scores), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ranked = ranked[: max(int(limit), 0)]
    return ranked
