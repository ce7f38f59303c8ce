"""Writers for route and congestion files consumed by external viewers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from urbanflow.network.city_model import CityModel
from urbanflow.network.domain_types import Vehicle
from urbanflow.routing.centrality import Centrality

logger = logging.getLogger(__name__)


def _prepare(path: str | Path) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def export_vehicle_paths(path: str | Path, vehicles: Iterable[Vehicle], city: CityModel) -> int:
    """Write one ``id;NameA,NameB,...`` line per vehicle; returns the line count."""
    output_path = _prepare(path)
    count = 0
    with output_path.open("w", encoding="utf-8") as handle:
        for vehicle in vehicles:
            names = ",".join(city.route_names(vehicle.path))
            handle.write(f"{vehicle.id};{names}\n")
            count += 1
    logger.info("Exported %s vehicle paths to %s", count, output_path)
    return count


def edge_congestion_frame(city: CityModel) -> pd.DataFrame:
    """Per-edge congestion normalised so the most loaded edge has factor 1.

    Edges with non-positive capacity count as uncongested. When no edge
    carries flow every factor is 0.
    """
    records = city.graph.flow_snapshot()
    ratios = [
        record.current_flow / record.capacity if record.capacity > 0 else 0.0
        for record in records
    ]
    max_ratio = max(ratios, default=0.0)
    if max_ratio <= 0.0:
        max_ratio = 1.0
    return pd.DataFrame(
        {
            "origin": [city.name_of(record.origin) for record in records],
            "destination": [city.name_of(record.destination) for record in records],
            "flow": [record.current_flow for record in records],
            "capacity": [record.capacity for record in records],
            "factor": [ratio / max_ratio for ratio in ratios],
        },
        columns=["origin", "destination", "flow", "capacity", "factor"],
    )


def export_edge_congestion(path: str | Path, city: CityModel) -> pd.DataFrame:
    """Write ``origin,destination,factor`` rows without a header."""
    frame = edge_congestion_frame(city)
    output_path = _prepare(path)
    frame[["origin", "destination", "factor"]].to_csv(output_path, index=False, header=False)
    logger.info("Exported congestion for %s edges to %s", len(frame), output_path)
    return frame


def centrality_frame(city: CityModel, centrality: Optional[Centrality] = None) -> pd.DataFrame:
    """Degree, closeness and betweenness per intersection, most central first."""
    centrality = centrality or Centrality(city.graph)
    frame = pd.DataFrame(
        {
            "node": list(range(city.num_intersections)),
            "name": [intersection.name for intersection in city.intersections],
            "degree": centrality.degree(),
            "closeness": centrality.closeness(),
            "betweenness": centrality.betweenness(),
        }
    )
    return frame.sort_values(
        ["betweenness", "node"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)
