from __future__ import annotations

import math

import pytest

from urbanflow.network.city_model import CityModel
from urbanflow.network.errors import NodeIndexError
from urbanflow.routing.heuristic_search import (
    HeuristicSearch,
    build_heuristic,
    euclidean_heuristic,
    travel_time_heuristic,
    zero_heuristic,
)
from urbanflow.routing.shortest_path import ShortestPath, length_cost, path_cost, travel_time_cost


def _grid_city() -> CityModel:
    """3x3 grid with unit spacing; road length equals coordinate distance."""
    city = CityModel()
    for row in range(3):
        for col in range(3):
            city.add_intersection(f"n{row}{col}", float(col), float(row))
    for row in range(3):
        for col in range(3):
            node = row * 3 + col
            if col < 2:
                city.add_road(node, node + 1, 1.0, 2.0, 10.0, bidirectional=True)
            if row < 2:
                city.add_road(node, node + 3, 1.0, 2.0, 10.0, bidirectional=True)
    return city


def test_admissible_heuristic_matches_dijkstra():
    city = _grid_city()
    sp = ShortestPath(city.graph)
    sp.compute(0, length_cost)
    for target in range(city.num_intersections):
        search = HeuristicSearch(city, euclidean_heuristic(city))
        search.compute(0, target, length_cost)
        assert search.distance(target) == pytest.approx(sp.distance(target))
        path = search.build_path(target)
        assert path[0] == 0 and path[-1] == target


def test_route_cost_matches_reported_distance():
    city = _grid_city()
    search = HeuristicSearch(city, travel_time_heuristic(city))
    for target in range(city.num_intersections):
        search.compute(0, target, travel_time_cost)
        path = search.build_path(target)
        assert path_cost(city.graph, path, travel_time_cost) == pytest.approx(search.distance(target))


def test_repeated_compute_gives_identical_distances():
    city = _grid_city()
    search = HeuristicSearch(city)
    search.compute(0, 8, length_cost)
    first = search.distances
    search.compute(8, 0, length_cost)
    search.compute(0, 8, length_cost)
    assert search.distances == first
    assert search.build_path(8)[0] == 0


def test_invalid_endpoints_raise_node_index_error():
    city = _grid_city()
    search = HeuristicSearch(city)
    with pytest.raises(NodeIndexError):
        search.compute(9, 0)
    with pytest.raises(NodeIndexError):
        search.compute(0, -1)
    with pytest.raises(NodeIndexError):
        search.distance(12)
    with pytest.raises(ValueError):
        search.compute(0, 8, lambda edge: -1.0)


def test_zero_heuristic_equals_dijkstra_on_travel_time():
    city = _grid_city()
    search = HeuristicSearch(city, zero_heuristic)
    search.compute(0, 8)
    assert search.distance(8) == pytest.approx(8.0)
    assert len(search.build_path(8)) == 5


def test_informed_search_expands_fewer_nodes():
    city = _grid_city()
    blind = HeuristicSearch(city, zero_heuristic)
    blind.compute(0, 2, length_cost)
    guided = HeuristicSearch(city, euclidean_heuristic(city))
    guided.compute(0, 2, length_cost)
    assert guided.distance(2) == pytest.approx(blind.distance(2))
    assert guided.expanded <= blind.expanded


def test_unreachable_target():
    city = CityModel()
    city.add_intersection("A", 0.0, 0.0)
    city.add_intersection("B", 5.0, 0.0)
    search = HeuristicSearch(city)
    search.compute(0, 1)
    assert math.isinf(search.distance(1))
    assert search.build_path(1) == []


def test_source_equals_target():
    city = _grid_city()
    search = HeuristicSearch(city)
    search.compute(4, 4)
    assert search.distance(4) == 0.0
    assert search.build_path(4) == [4]


def test_travel_time_heuristic_uses_fastest_speed():
    city = _grid_city()
    heuristic = travel_time_heuristic(city)
    # max speed is 1.0 / 2.0, so one unit of distance costs 2 time units
    assert heuristic(0, 2) == pytest.approx(4.0)


def test_travel_time_heuristic_falls_back_to_zero_without_roads():
    city = CityModel()
    city.add_intersection("A", 0.0, 0.0)
    city.add_intersection("B", 3.0, 4.0)
    assert travel_time_heuristic(city) is zero_heuristic


def test_build_heuristic_by_name():
    city = _grid_city()
    assert build_heuristic("Euclidean", city, 2.0)(0, 2) == pytest.approx(4.0)
    assert build_heuristic("travel_time", city, 0.5)(0, 2) == pytest.approx(2.0)
    assert build_heuristic("zero", city) is zero_heuristic
    with pytest.raises(ValueError):
        build_heuristic("manhattan", city)
    with pytest.raises(ValueError):
        euclidean_heuristic(city, -1.0)
