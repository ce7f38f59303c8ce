"""Road-network routing, throughput, centrality and congestion simulation."""

from .network import CityModel, Edge, Graph, Intersection, RoadType, TrafficSignal, Vehicle
from .routing import Centrality, HeuristicSearch, MaxFlow, ShortestPath
from .traffic import CongestionFunction, CongestionModel, SimulationConfig, Simulator

__all__ = [
    "Centrality",
    "CityModel",
    "CongestionFunction",
    "CongestionModel",
    "Edge",
    "Graph",
    "HeuristicSearch",
    "Intersection",
    "MaxFlow",
    "RoadType",
    "ShortestPath",
    "SimulationConfig",
    "Simulator",
    "TrafficSignal",
    "Vehicle",
]

__version__ = "0.1.0"
