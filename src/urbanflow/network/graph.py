"""Adjacency-list road graph shared by every routing and traffic engine."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .domain_types import Edge, EdgeFlow, RoadType
from .errors import EdgeIndexError, NodeIndexError


class Graph:
    """Directed graph whose edges live in their origin node's outgoing list.

    Edge ids are global and dense: the n-th created edge has id ``n``. Edges
    are never removed; after creation only ``current_flow`` is mutated, and
    only through :meth:`set_flow`, :meth:`add_flow` or :meth:`reset_flows`.
    """

    def __init__(self, num_nodes: int = 0, directed: bool = True) -> None:
        if num_nodes < 0:
            raise ValueError("num_nodes must be non-negative.")
        self._directed = bool(directed)
        self._adjacency: List[List[Edge]] = [[] for _ in range(int(num_nodes))]
        self._edges: List[Edge] = []

    # ---------------------------------------------------------------- properties
    @property
    def num_nodes(self) -> int:
        return len(self._adjacency)

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    @property
    def directed(self) -> bool:
        return self._directed

    # ------------------------------------------------------------------ building
    def add_node(self) -> int:
        """Append a node and return its handle."""
        self._adjacency.append([])
        return len(self._adjacency) - 1

    def add_edge(
        self,
        origin: int,
        destination: int,
        length: float,
        base_travel_time: float,
        capacity: float,
        road_type: RoadType = RoadType.LOCAL,
        bidirectional: bool = False,
    ) -> int:
        """Insert a road and return the id of the forward edge.

        With ``bidirectional``, or on an undirected graph, a second, independent
        edge ``destination -> origin`` is created with the same static
        parameters and the next id.
        """
        self.validate_node(origin)
        self.validate_node(destination)

        forward = self._append_edge(origin, destination, length, base_travel_time, capacity, road_type)
        if bidirectional or not self._directed:
            self._append_edge(destination, origin, length, base_travel_time, capacity, road_type)
        return forward.id

    def _append_edge(
        self,
        origin: int,
        destination: int,
        length: float,
        base_travel_time: float,
        capacity: float,
        road_type: RoadType,
    ) -> Edge:
        edge = Edge(
            id=len(self._edges),
            origin=origin,
            destination=destination,
            length=float(length),
            base_travel_time=float(base_travel_time),
            capacity=float(capacity),
            road_type=road_type,
        )
        self._edges.append(edge)
        self._adjacency[origin].append(edge)
        return edge

    # ------------------------------------------------------------------- reading
    def outgoing(self, node: int) -> Tuple[Edge, ...]:
        """Outgoing edges of ``node`` in insertion order."""
        self.validate_node(node)
        return tuple(self._adjacency[node])

    def out_degree(self, node: int) -> int:
        self.validate_node(node)
        return len(self._adjacency[node])

    def edge(self, edge_id: int) -> Edge:
        if not isinstance(edge_id, int) or edge_id < 0 or edge_id >= len(self._edges):
            raise EdgeIndexError(edge_id, len(self._edges))
        return self._edges[edge_id]

    def find_edge(self, origin: int, destination: int) -> Optional[Edge]:
        """First edge ``origin -> destination`` in insertion order, if any."""
        self.validate_node(origin)
        for edge in self._adjacency[origin]:
            if edge.destination == destination:
                return edge
        return None

    def edges(self) -> Iterator[Edge]:
        """Iterate over all edges, grouped by origin node."""
        for outgoing in self._adjacency:
            yield from outgoing

    def flow_snapshot(self) -> List[EdgeFlow]:
        return [
            EdgeFlow(edge.origin, edge.destination, edge.current_flow, edge.capacity)
            for edge in self.edges()
        ]

    # ------------------------------------------------------------------ mutation
    def set_flow(self, edge_id: int, value: float) -> None:
        self.edge(edge_id).current_flow = float(value)

    def add_flow(self, edge_id: int, delta: float = 1.0) -> None:
        self.edge(edge_id).current_flow += float(delta)

    def reset_flows(self) -> None:
        for edge in self._edges:
            edge.current_flow = 0.0

    # ---------------------------------------------------------------- validation
    def validate_node(self, node: int) -> None:
        if not isinstance(node, int) or isinstance(node, bool) or node < 0 or node >= len(self._adjacency):
            raise NodeIndexError(node, len(self._adjacency))

    def __repr__(self) -> str:
        return f"Graph(num_nodes={self.num_nodes}, num_edges={self.num_edges}, directed={self._directed})"
