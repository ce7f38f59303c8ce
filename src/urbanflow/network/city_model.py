"""Named-intersection layer on top of :class:`Graph`."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Union

from .domain_types import Edge, Intersection, RoadType, TrafficSignal
from .errors import DuplicateIntersectionError, IntersectionNotFoundError, NodeIndexError
from .graph import Graph

NodeRef = Union[int, str]


class CityModel:
    """Road network with human-readable intersection names and coordinates.

    The intersection list and the underlying graph always have the same
    number of nodes: :meth:`add_intersection` extends both in one step and is
    the only way to create a node.
    """

    def __init__(self, directed: bool = True) -> None:
        self._graph = Graph(0, directed)
        self._intersections: List[Intersection] = []
        self._name_to_id: Dict[str, int] = {}

    # ------------------------------------------------------------ intersections
    def add_intersection(
        self,
        name: str,
        x: float = 0.0,
        y: float = 0.0,
        has_signal: bool = False,
        signal: Optional[TrafficSignal] = None,
    ) -> int:
        """Register a new intersection and return its node id."""
        key = str(name)
        if key in self._name_to_id:
            raise DuplicateIntersectionError(key)

        node_id = len(self._intersections)
        intersection = Intersection(
            id=node_id,
            name=key,
            x=float(x),
            y=float(y),
            has_signal=bool(has_signal or signal is not None),
            signal=signal if signal is not None else TrafficSignal(),
        )
        graph_id = self._graph.add_node()
        if graph_id != node_id:  # pragma: no cover - guarded by construction
            raise RuntimeError("Graph and intersection table are out of sync.")
        self._intersections.append(intersection)
        self._name_to_id[key] = node_id
        return node_id

    def has_intersection(self, name: str) -> bool:
        return str(name) in self._name_to_id

    def node_id(self, name: str) -> int:
        """Return the node id registered for ``name``."""
        try:
            return self._name_to_id[str(name)]
        except KeyError:
            raise IntersectionNotFoundError(str(name)) from None

    def try_node_id(self, name: str) -> Optional[int]:
        return self._name_to_id.get(str(name))

    def intersection(self, node: int) -> Intersection:
        self._validate(node)
        return self._intersections[node]

    def name_of(self, node: int) -> str:
        return self.intersection(node).name

    def coordinates(self, node: int) -> Tuple[float, float]:
        return self.intersection(node).position

    @property
    def intersections(self) -> Tuple[Intersection, ...]:
        return tuple(self._intersections)

    @property
    def num_intersections(self) -> int:
        return len(self._intersections)

    def resolve(self, node: NodeRef) -> int:
        """Accept either a node id or an intersection name."""
        if isinstance(node, str):
            return self.node_id(node)
        self._validate(node)
        return node

    def route_names(self, path: Iterable[int]) -> List[str]:
        """Translate a route of node ids into intersection names."""
        return [self.name_of(node) for node in path]

    # ------------------------------------------------------------------ signals
    def has_signal(self, node: int) -> bool:
        return self.intersection(node).has_signal

    def signal(self, node: int) -> TrafficSignal:
        return self.intersection(node).signal

    def set_signal(self, node: int, signal: TrafficSignal) -> None:
        intersection = self.intersection(node)
        intersection.has_signal = True
        intersection.signal = signal

    def enable_signal(self, node: int, enabled: bool = True) -> None:
        self.intersection(node).has_signal = bool(enabled)

    def toggle_signal(self, node: int) -> TrafficSignal:
        """Flip the green/red state of the signal at ``node``."""
        intersection = self.intersection(node)
        intersection.signal = intersection.signal.toggled()
        return intersection.signal

    # -------------------------------------------------------------------- roads
    def add_road(
        self,
        origin: NodeRef,
        destination: NodeRef,
        length: float,
        base_travel_time: float,
        capacity: float,
        road_type: RoadType = RoadType.LOCAL,
        bidirectional: bool = False,
    ) -> int:
        """Add a road between two intersections given by id or by name."""
        origin_id = self.resolve(origin)
        destination_id = self.resolve(destination)
        return self._graph.add_edge(
            origin_id,
            destination_id,
            length,
            base_travel_time,
            capacity,
            road_type,
            bidirectional,
        )

    def out_degree(self, node: int) -> int:
        self._validate(node)
        return self._graph.out_degree(node)

    def outgoing_edges(self, node: int) -> Tuple[Edge, ...]:
        self._validate(node)
        return self._graph.outgoing(node)

    @property
    def graph(self) -> Graph:
        return self._graph

    def reset_all_flows(self) -> None:
        self._graph.reset_flows()

    # --------------------------------------------------------------- validation
    def _validate(self, node: int) -> None:
        if (
            not isinstance(node, int)
            or isinstance(node, bool)
            or node < 0
            or node >= len(self._intersections)
        ):
            raise NodeIndexError(node, len(self._intersections), where="CityModel")

    def __repr__(self) -> str:
        return (
            f"CityModel(intersections={self.num_intersections}, "
            f"roads={self._graph.num_edges})"
        )
