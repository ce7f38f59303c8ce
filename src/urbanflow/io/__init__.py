"""Loader and exporter exports."""

from .exporters import (
    centrality_frame,
    edge_congestion_frame,
    export_edge_congestion,
    export_vehicle_paths,
)
from .loaders import load_city, load_intersections, load_roads, load_vehicles

__all__ = [
    "centrality_frame",
    "edge_congestion_frame",
    "export_edge_congestion",
    "export_vehicle_paths",
    "load_city",
    "load_intersections",
    "load_roads",
    "load_vehicles",
]
