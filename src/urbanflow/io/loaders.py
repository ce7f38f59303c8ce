"""CSV loaders that populate a :class:`CityModel` and its vehicles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from urbanflow.network.city_model import CityModel
from urbanflow.network.domain_types import RoadType, Vehicle

logger = logging.getLogger(__name__)

INTERSECTION_COLUMNS = ("name", "x", "y")
ROAD_COLUMNS = ("from", "to", "length", "time", "capacity")
VEHICLE_COLUMNS = ("id", "source", "destination")


def _read_table(path: str | Path, required: Iterable[str]) -> pd.DataFrame:
    df = pd.read_csv(path, comment="#", skipinitialspace=True, dtype=str, keep_default_na=False)
    df.columns = [str(col).strip().lower() for col in df.columns]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns: {', '.join(missing)}")
    return df


def _parse_flag(value: object) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "y"}


def _optional(row: object, column: str) -> Optional[str]:
    value = getattr(row, column, None)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_intersections(path: str | Path, city: CityModel) -> int:
    """Load ``name,x,y[,has_signal]`` rows; returns the number added."""
    df = _read_table(path, INTERSECTION_COLUMNS)
    signal_column = "has_signal" if "has_signal" in df.columns else None
    if signal_column is None and "hassignal" in df.columns:
        signal_column = "hassignal"

    added = 0
    for row in df.itertuples(index=False):
        name = str(row.name).strip()
        if not name:
            continue
        has_signal = _parse_flag(getattr(row, signal_column)) if signal_column else False
        city.add_intersection(name, float(row.x), float(row.y), has_signal)
        added += 1
    logger.info("Loaded %s intersections from %s", added, path)
    return added


def load_roads(path: str | Path, city: CityModel) -> int:
    """Load ``from,to,length,time,capacity[,type,bidirectional]`` rows by name."""
    df = _read_table(path, ROAD_COLUMNS)
    df = df.rename(columns={"from": "origin", "to": "destination"})
    added = 0
    for row in df.itertuples(index=False):
        road_type = RoadType.parse(_optional(row, "type"))
        bidirectional = _parse_flag(_optional(row, "bidirectional") or "0")
        city.add_road(
            str(row.origin).strip(),
            str(row.destination).strip(),
            float(row.length),
            float(row.time),
            float(row.capacity),
            road_type,
            bidirectional,
        )
        added += 1
    logger.info("Loaded %s roads from %s", added, path)
    return added


def load_vehicles(path: str | Path, city: CityModel) -> List[Vehicle]:
    """Load ``id,source,destination[,speed_factor]`` rows with intersection names."""
    df = _read_table(path, VEHICLE_COLUMNS)
    vehicles: List[Vehicle] = []
    for row in df.itertuples(index=False):
        vehicle_id = str(row.id).strip()
        if not vehicle_id:
            continue
        speed = _optional(row, "speed_factor")
        speed_factor = float(speed) if speed else 1.0
        if speed_factor <= 0:
            raise ValueError(f"{path}: vehicle {vehicle_id} has non-positive speed_factor {speed}")
        vehicles.append(
            Vehicle(
                id=vehicle_id,
                source=city.node_id(str(row.source).strip()),
                destination=city.node_id(str(row.destination).strip()),
                speed_factor=speed_factor,
            )
        )
    logger.info("Loaded %s vehicles from %s", len(vehicles), path)
    return vehicles


def load_city(folder: str | Path, directed: bool = True) -> Tuple[CityModel, List[Vehicle]]:
    """Read ``intersections.csv``, ``roads.csv`` and ``vehicles.csv`` from ``folder``."""
    base = Path(folder)
    city = CityModel(directed=directed)
    load_intersections(base / "intersections.csv", city)
    load_roads(base / "roads.csv", city)
    vehicles_path = base / "vehicles.csv"
    if not vehicles_path.exists():
        logger.warning("No vehicles file at %s; simulating an empty network", vehicles_path)
        return city, []
    return city, load_vehicles(vehicles_path, city)
