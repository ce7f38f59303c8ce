from __future__ import annotations

from pathlib import Path

import pytest

from urbanflow.io.loaders import load_city, load_intersections, load_roads, load_vehicles
from urbanflow.network.city_model import CityModel
from urbanflow.network.domain_types import RoadType
from urbanflow.network.errors import IntersectionNotFoundError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def _write_city(folder: Path, with_vehicles: bool = True) -> Path:
    _write(
        folder / "intersections.csv",
        "# name,x,y,hasSignal\n"
        "name,x,y,hasSignal\n"
        "Harbor,0,0,1\n"
        "Market,3,4,0\n"
        "Station,6,8,true\n",
    )
    _write(
        folder / "roads.csv",
        "from,to,length,time,capacity,type,bidirectional\n"
        "Harbor,Market,5,2,10,HW,1\n"
        "Market,Station,5,3,4,ART,0\n"
        "# closed for repairs\n"
        "Harbor,Station,12,9,2,,0\n",
    )
    if with_vehicles:
        _write(
            folder / "vehicles.csv",
            "id,source,destination\n"
            "car-1,Harbor,Station\n"
            "car-2,Station,Harbor\n",
        )
    return folder


def test_load_city_reads_all_tables(tmp_path):
    city, vehicles = load_city(_write_city(tmp_path))
    assert [i.name for i in city.intersections] == ["Harbor", "Market", "Station"]
    assert city.has_signal(0) and city.has_signal(2) and not city.has_signal(1)
    assert city.coordinates(2) == (6.0, 8.0)

    assert city.graph.num_edges == 4
    forward = city.graph.find_edge(0, 1)
    assert forward.road_type is RoadType.HIGHWAY
    assert city.graph.find_edge(1, 0) is not None
    assert city.graph.find_edge(1, 2).road_type is RoadType.ARTERIAL
    assert city.graph.find_edge(0, 2).road_type is RoadType.LOCAL
    assert city.graph.find_edge(2, 1) is None

    assert [(v.id, v.source, v.destination) for v in vehicles] == [
        ("car-1", 0, 2),
        ("car-2", 2, 0),
    ]
    assert all(v.path == [] for v in vehicles)


def test_missing_vehicles_file_yields_empty_fleet(tmp_path):
    city, vehicles = load_city(_write_city(tmp_path, with_vehicles=False))
    assert city.num_intersections == 3
    assert vehicles == []


def test_roads_without_optional_columns(tmp_path):
    city = CityModel()
    load_intersections(_write(tmp_path / "i.csv", "name,x,y\nA,0,0\nB,1,1\n"), city)
    count = load_roads(_write(tmp_path / "r.csv", "from,to,length,time,capacity\nA,B,1,2,3\n"), city)
    assert count == 1
    edge = city.graph.edge(0)
    assert (edge.length, edge.base_travel_time, edge.capacity) == (1.0, 2.0, 3.0)
    assert city.graph.num_edges == 1
    assert not city.has_signal(0)


def test_vehicle_speed_factor_column(tmp_path):
    city = CityModel()
    load_intersections(_write(tmp_path / "i.csv", "name,x,y\nA,0,0\nB,1,1\n"), city)
    vehicles = load_vehicles(
        _write(tmp_path / "v.csv", "id,source,destination,speed_factor\nbus,A,B,0.5\ncar,B,A,\n"),
        city,
    )
    assert [v.speed_factor for v in vehicles] == [0.5, 1.0]


def test_unknown_names_raise(tmp_path):
    city = CityModel()
    load_intersections(_write(tmp_path / "i.csv", "name,x,y\nA,0,0\n"), city)
    with pytest.raises(IntersectionNotFoundError):
        load_roads(_write(tmp_path / "r.csv", "from,to,length,time,capacity\nA,Z,1,1,1\n"), city)
    with pytest.raises(IntersectionNotFoundError):
        load_vehicles(_write(tmp_path / "v.csv", "id,source,destination\nx,Z,A\n"), city)


def test_missing_required_columns(tmp_path):
    city = CityModel()
    with pytest.raises(ValueError, match="missing columns: y"):
        load_intersections(_write(tmp_path / "i.csv", "name,x\nA,0\n"), city)


@pytest.mark.parametrize("speed", ["0", "-1.5"])
def test_non_positive_speed_factor_rejected(tmp_path, speed):
    city = CityModel()
    load_intersections(_write(tmp_path / "i.csv", "name,x,y\nA,0,0\nB,1,1\n"), city)
    path = _write(tmp_path / "v.csv", f"id,source,destination,speed_factor\nv,A,B,{speed}\n")
    with pytest.raises(ValueError, match="vehicle v has non-positive speed_factor"):
        load_vehicles(path, city)
