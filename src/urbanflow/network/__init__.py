"""Network package exports."""

from .city_model import CityModel
from .domain_types import Edge, EdgeFlow, Intersection, RoadType, TrafficSignal, Vehicle
from .errors import (
    DuplicateIntersectionError,
    EdgeIndexError,
    IntersectionNotFoundError,
    NodeIndexError,
    UrbanFlowError,
)
from .graph import Graph

__all__ = [
    "CityModel",
    "DuplicateIntersectionError",
    "Edge",
    "EdgeFlow",
    "EdgeIndexError",
    "Graph",
    "Intersection",
    "IntersectionNotFoundError",
    "NodeIndexError",
    "RoadType",
    "TrafficSignal",
    "UrbanFlowError",
    "Vehicle",
]
