"""Maximum throughput and bottleneck roads between two intersections (Dinic)."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from urbanflow.network.domain_types import Edge
from urbanflow.network.graph import Graph

logger = logging.getLogger(__name__)

CAPACITY_EPS = 1e-12


@dataclass
class _ResidualArc:
    """Arc of the residual network; ``rev`` indexes the paired arc in ``to``'s list."""

    to: int
    rev: int
    capacity: float
    edge_id: Optional[int] = None  # None for reverse arcs


class MaxFlow:
    """Dinic's algorithm on a private residual copy of the graph.

    Edge capacities are read, never modified: every :meth:`compute` call builds
    a fresh residual network, so repeated calls are independent.
    """

    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self._residual: List[List[_ResidualArc]] = []
        self._level: List[int] = []
        self._cursor: List[int] = []
        self._arc_index: Dict[int, Tuple[int, int]] = {}
        self._max_flow = 0.0
        self._computed = False

    @property
    def max_flow(self) -> float:
        """Value returned by the last :meth:`compute`."""
        return self._max_flow

    def compute(self, source: int, sink: int) -> float:
        self.graph.validate_node(source)
        self.graph.validate_node(sink)
        if source == sink:
            raise ValueError("Max-flow source and sink must be different nodes.")

        self._build_residual()
        total = 0.0
        phases = 0
        while self._build_levels(source, sink):
            phases += 1
            self._cursor = [0] * self.graph.num_nodes
            while True:
                pushed = self._augment(source, sink)
                if pushed <= CAPACITY_EPS:
                    break
                total += pushed

        self._max_flow = total
        self._computed = True
        logger.debug("Max flow %s -> %s = %s after %s phases", source, sink, total, phases)
        return total

    # -------------------------------------------------------------- min cut --
    def min_cut_set(self, reference: int = 0) -> List[bool]:
        """Nodes reachable from ``reference`` in the final residual network.

        The source of the last :meth:`compute` is not remembered; pass it as
        ``reference`` to obtain the source side of the minimum cut.
        """
        self._require_computed()
        self.graph.validate_node(reference)
        visited = [False] * len(self._residual)
        visited[reference] = True
        queue = deque([reference])
        while queue:
            u = queue.popleft()
            for arc in self._residual[u]:
                if not visited[arc.to] and arc.capacity > CAPACITY_EPS:
                    visited[arc.to] = True
                    queue.append(arc.to)
        return visited

    def cut_edges(self, reference: int = 0) -> List[Edge]:
        """Graph edges leading from the reachable to the unreachable side."""
        side = self.min_cut_set(reference)
        return [
            edge
            for edge in self.graph.edges()
            if edge.id in self._arc_index and side[edge.origin] and not side[edge.destination]
        ]

    def edge_flows(self) -> Dict[int, float]:
        """Flow routed over each graph edge by the last computation."""
        self._require_computed()
        flows: Dict[int, float] = {}
        for edge_id, (node, index) in self._arc_index.items():
            arc = self._residual[node][index]
            # the paired reverse arc holds exactly the flow pushed forward
            flows[edge_id] = self._residual[arc.to][arc.rev].capacity
        return flows

    # ------------------------------------------------------------- internals --
    def _build_residual(self) -> None:
        n = self.graph.num_nodes
        residual: List[List[_ResidualArc]] = [[] for _ in range(n)]
        arc_index: Dict[int, Tuple[int, int]] = {}
        for edge in self.graph.edges():
            u, v = edge.origin, edge.destination
            if u == v:
                continue  # self-loops never carry source-sink flow
            forward = _ResidualArc(to=v, rev=len(residual[v]), capacity=max(edge.capacity, 0.0), edge_id=edge.id)
            backward = _ResidualArc(to=u, rev=len(residual[u]), capacity=0.0)
            residual[u].append(forward)
            residual[v].append(backward)
            arc_index[edge.id] = (u, len(residual[u]) - 1)
        self._residual = residual
        self._arc_index = arc_index
        self._level = [-1] * n
        self._cursor = [0] * n

    def _build_levels(self, source: int, sink: int) -> bool:
        level = [-1] * len(self._residual)
        level[source] = 0
        queue = deque([source])
        while queue:
            u = queue.popleft()
            for arc in self._residual[u]:
                if level[arc.to] < 0 and arc.capacity > CAPACITY_EPS:
                    level[arc.to] = level[u] + 1
                    queue.append(arc.to)
        self._level = level
        return level[sink] >= 0

    def _augment(self, source: int, sink: int) -> float:
        """Push flow along one level-increasing path found with an explicit stack.

        ``_cursor[u]`` is the next arc of ``u`` to try; it only moves forward
        within a phase, so every arc is abandoned at most once per phase.
        """
        level = self._level
        cursor = self._cursor
        residual = self._residual
        path: List[_ResidualArc] = []
        node = source

        while True:
            if node == sink:
                pushed = min(arc.capacity for arc in path)
                for arc in path:
                    arc.capacity -= pushed
                    residual[arc.to][arc.rev].capacity += pushed
                return pushed

            arcs = residual[node]
            advanced = False
            while cursor[node] < len(arcs):
                arc = arcs[cursor[node]]
                if arc.capacity > CAPACITY_EPS and level[arc.to] == level[node] + 1:
                    path.append(arc)
                    node = arc.to
                    advanced = True
                    break
                cursor[node] += 1
            if advanced:
                continue

            # Dead end: retreat and skip the arc that led here.
            if not path:
                return 0.0
            dead = path.pop()
            node = residual[dead.to][dead.rev].to
            cursor[node] += 1

    def _require_computed(self) -> None:
        if not self._computed:
            raise RuntimeError("MaxFlow.compute must be called before querying the cut.")

    def __repr__(self) -> str:
        return f"MaxFlow(max_flow={self._max_flow if self._computed else math.nan})"
