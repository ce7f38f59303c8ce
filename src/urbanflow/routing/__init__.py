"""Routing package exports."""

from .centrality import Centrality, rank_nodes
from .heuristic_search import (
    HeuristicSearch,
    build_heuristic,
    euclidean_heuristic,
    travel_time_heuristic,
    zero_heuristic,
)
from .max_flow import MaxFlow
from .shortest_path import ShortestPath, length_cost, path_cost, travel_time_cost

__all__ = [
    "Centrality",
    "HeuristicSearch",
    "MaxFlow",
    "ShortestPath",
    "build_heuristic",
    "euclidean_heuristic",
    "length_cost",
    "path_cost",
    "rank_nodes",
    "travel_time_cost",
    "travel_time_heuristic",
    "zero_heuristic",
]
