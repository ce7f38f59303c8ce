from __future__ import annotations

import pytest

from urbanflow.network.city_model import CityModel
from urbanflow.network.domain_types import Vehicle
from urbanflow.routing.heuristic_search import HeuristicSearch, zero_heuristic
from urbanflow.traffic.congestion import CongestionFunction, CongestionModel
from urbanflow.traffic.simulator import ArrivalRecord, Simulator, assign_routes


def _single_road() -> CityModel:
    city = CityModel()
    city.add_intersection("A", 0.0, 0.0)
    city.add_intersection("B", 1.0, 0.0)
    city.add_road("A", "B", 1.0, 4.0, 10.0)
    return city


def _corridor() -> CityModel:
    city = CityModel()
    for index, name in enumerate("ABCD"):
        city.add_intersection(name, float(index), 0.0)
    city.add_road("A", "B", 1.0, 1.0, 2.0)
    city.add_road("B", "C", 1.0, 2.0, 2.0)
    city.add_road("C", "D", 1.0, 1.0, 2.0)
    city.add_road("A", "D", 5.0, 10.0, 2.0)
    return city


def _bpr() -> CongestionModel:
    return CongestionModel(CongestionFunction.BPR, alpha=0.15, beta=4.0)


def test_five_vehicles_wait_for_congested_travel_time():
    city = _single_road()
    sim = Simulator(city, _bpr(), dt=1.0)
    for index in range(5):
        sim.add_vehicle(Vehicle(id=f"v{index}", source=0, destination=1, path=[0, 1]))
    sim.rebuild_flows()
    edge = city.graph.edge(0)
    assert edge.current_flow == 5.0
    assert sim.model.travel_time(edge) == pytest.approx(4.0375)

    sim.run(4)
    # dwell 4.0 is still short of 4.0375
    assert len(sim.vehicles) == 5
    assert all(vehicle.current_index == 0 for vehicle in sim.vehicles)
    assert all(vehicle.time_on_edge == pytest.approx(4.0) for vehicle in sim.vehicles)
    assert edge.current_flow == 5.0

    sim.update()
    assert sim.vehicles == ()
    assert edge.current_flow == 0.0
    assert sim.sim_time == pytest.approx(5.0)
    assert [record.vehicle_id for record in sim.arrivals] == [f"v{i}" for i in range(5)]
    assert sim.arrivals[0] == ArrivalRecord(vehicle_id="v0", time=5.0)


def test_flows_match_vehicle_positions_after_each_tick():
    city = _corridor()
    sim = Simulator(city, CongestionModel(), dt=0.5)
    sim.add_vehicle(Vehicle(id="fast", source=0, destination=3, path=[0, 1, 2, 3]))
    sim.add_vehicle(Vehicle(id="slow", source=0, destination=3, path=[0, 3]))

    for _ in range(6):
        sim.update()
        expected = {}
        for vehicle in sim.vehicles:
            edge = city.graph.find_edge(*vehicle.current_leg)
            expected[edge.id] = expected.get(edge.id, 0.0) + 1.0
        for edge in city.graph.edges():
            assert edge.current_flow == expected.get(edge.id, 0.0)


def test_vehicle_advances_once_dwell_reaches_travel_time():
    city = _corridor()
    sim = Simulator(city, CongestionModel(), dt=1.0)
    vehicle = Vehicle(id="solo", source=0, destination=2, path=[0, 1, 2])
    sim.add_vehicle(vehicle)

    sim.update()
    assert vehicle.current_index == 1
    assert vehicle.time_on_edge == 0.0
    # B->C: base 2.0, own flow 1/2 gives 3.0 under the linear model
    sim.update()
    sim.update()
    assert vehicle.current_index == 1
    sim.update()
    assert vehicle.arrived
    assert sim.vehicles == ()
    assert sim.arrivals == [ArrivalRecord("solo", 4.0)]


def test_missing_road_leaves_vehicle_in_place():
    city = _corridor()
    sim = Simulator(city, CongestionModel())
    stuck = Vehicle(id="stuck", source=3, destination=0, path=[3, 0])
    sim.add_vehicle(stuck)
    sim.run(3)
    assert stuck.current_index == 0
    assert stuck.time_on_edge == 0.0
    assert sim.skipped_moves == 3
    assert sim.vehicles == (stuck,)
    assert all(edge.current_flow == 0.0 for edge in city.graph.edges())


def test_empty_route_is_retired_on_first_tick():
    city = _corridor()
    sim = Simulator(city, CongestionModel())
    sim.add_vehicle(Vehicle(id="nowhere", source=3, destination=0))
    sim.update()
    assert sim.vehicles == ()
    assert sim.arrivals == [ArrivalRecord("nowhere", 1.0)]


def test_on_tick_callback_and_reset():
    city = _single_road()
    sim = Simulator(city, CongestionModel(), dt=2.0)
    sim.add_vehicle(Vehicle(id="v", source=0, destination=1, path=[0, 1]))
    seen = []
    sim.run(2, on_tick=lambda s: seen.append(s.sim_time))
    assert seen == [2.0, 4.0]

    sim.reset()
    assert sim.sim_time == 0.0
    assert sim.vehicles == ()
    assert sim.arrivals == []
    assert city.graph.edge(0).current_flow == 0.0


def test_non_positive_time_step_rejected():
    with pytest.raises(ValueError):
        Simulator(_single_road(), CongestionModel(), dt=0.0)


def test_assign_routes_uses_heuristic_search():
    city = _corridor()
    vehicles = [
        Vehicle(id="a", source=0, destination=3),
        Vehicle(id="b", source=3, destination=0),
    ]
    routed = assign_routes(city, vehicles, HeuristicSearch(city, zero_heuristic))
    assert routed is not vehicles
    assert vehicles[0].path == [0, 1, 2, 3]
    assert vehicles[1].path == []
    assert vehicles[0].current_index == 0
