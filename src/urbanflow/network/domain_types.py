"""Core dataclasses shared across the network, routing and traffic packages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple


class RoadType(str, Enum):
    """Advisory road classification; not used by any cost formula."""

    HIGHWAY = "highway"
    ARTERIAL = "arterial"
    LOCAL = "local"

    @classmethod
    def parse(cls, token: object) -> "RoadType":
        """Map loader tokens (``HW``, ``ART``, full names) to a road type."""
        text = str(token or "").strip().upper()
        if text in {"HW", "HIGHWAY"}:
            return cls.HIGHWAY
        if text in {"ART", "ARTERIAL"}:
            return cls.ARTERIAL
        return cls.LOCAL


@dataclass(frozen=True)
class TrafficSignal:
    """Signal plan attached to an intersection."""

    is_green: bool = True
    cycle_time: float = 60.0
    green_ratio: float = 0.6

    def toggled(self) -> "TrafficSignal":
        return replace(self, is_green=not self.is_green)

    @property
    def green_time(self) -> float:
        return self.cycle_time * self.green_ratio


@dataclass
class Intersection:
    """Named node of the road network with planar coordinates."""

    id: int
    name: str
    x: float = 0.0
    y: float = 0.0
    has_signal: bool = False
    signal: TrafficSignal = field(default_factory=TrafficSignal)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Edge:
    """Directed road segment. Only ``current_flow`` changes after creation."""

    id: int
    origin: int
    destination: int
    length: float
    base_travel_time: float
    capacity: float
    current_flow: float = 0.0
    road_type: RoadType = RoadType.LOCAL

    @property
    def flow_ratio(self) -> float:
        if self.capacity <= 0.0:
            return math.inf if self.current_flow > 0.0 else 0.0
        return self.current_flow / self.capacity

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.origin}->{self.destination}"


class EdgeFlow(NamedTuple):
    """Per-edge load record handed to exporters."""

    origin: int
    destination: int
    current_flow: float
    capacity: float


@dataclass
class Vehicle:
    """Vehicle following a precomputed route of node ids.

    ``current_index`` points at the edge currently being traversed, i.e. the
    leg ``path[current_index] -> path[current_index + 1]``.
    """

    id: str
    source: int
    destination: int
    path: List[int] = field(default_factory=list)
    current_index: int = 0
    time_on_edge: float = 0.0
    speed_factor: float = 1.0

    @property
    def arrived(self) -> bool:
        return self.current_index >= len(self.path) - 1

    @property
    def current_leg(self) -> Optional[Tuple[int, int]]:
        if self.arrived:
            return None
        return self.path[self.current_index], self.path[self.current_index + 1]

    @property
    def position(self) -> Optional[int]:
        """Node the vehicle last passed, or ``None`` without a route."""
        if not self.path:
            return None
        return self.path[min(self.current_index, len(self.path) - 1)]
