"""Tick-based vehicle movement coupled to per-road congestion.

Each call to :meth:`Simulator.update` performs, in order:

1. advance the simulation clock by ``dt``;
2. move every active vehicle one step, using travel times computed from the
   edge flows left by the previous tick;
3. rebuild every edge's ``current_flow`` from scratch by counting the active
   vehicles occupying it;
4. retire vehicles whose cursor reached the last node of their route.

A vehicle whose next leg has no matching road is left untouched for that tick
instead of aborting the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from urbanflow.network.city_model import CityModel
from urbanflow.network.domain_types import Edge, Vehicle
from urbanflow.network.errors import NodeIndexError
from urbanflow.routing.heuristic_search import HeuristicSearch
from urbanflow.routing.shortest_path import EdgeCost, travel_time_cost

from .congestion import CongestionModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArrivalRecord:
    vehicle_id: str
    time: float


class Simulator:
    """Moves vehicles along precomputed routes and keeps edge flows in sync."""

    def __init__(self, city: CityModel, model: CongestionModel, dt: float = 1.0) -> None:
        if dt <= 0:
            raise ValueError("Simulation time step must be positive.")
        self.city = city
        self.graph = city.graph
        self.model = model
        self.dt = float(dt)
        self._vehicles: List[Vehicle] = []
        self._sim_time = 0.0
        self.arrivals: List[ArrivalRecord] = []
        self.skipped_moves = 0

    # ---------------------------------------------------------------------- API --
    def add_vehicle(self, vehicle: Vehicle) -> None:
        self._vehicles.append(vehicle)

    @property
    def vehicles(self) -> Tuple[Vehicle, ...]:
        return tuple(self._vehicles)

    @property
    def sim_time(self) -> float:
        return self._sim_time

    def update(self) -> None:
        """Advance the simulation by one tick."""
        self._sim_time += self.dt
        for vehicle in self._vehicles:
            self._update_vehicle(vehicle)
        self.rebuild_flows()
        self.remove_arrived()

    def run(
        self,
        ticks: int,
        on_tick: Optional[Callable[["Simulator"], None]] = None,
    ) -> None:
        """Run ``ticks`` updates, calling ``on_tick`` after each one."""
        for _ in range(int(ticks)):
            self.update()
            if on_tick is not None:
                on_tick(self)

    def rebuild_flows(self) -> None:
        """Zero every edge flow and recount it from the active vehicles."""
        self.graph.reset_flows()
        for vehicle in self._vehicles:
            edge = self._current_edge(vehicle)
            if edge is not None:
                self.graph.add_flow(edge.id, 1.0)

    def remove_arrived(self) -> List[Vehicle]:
        """Drop vehicles that reached the end of their route and return them."""
        arrived = [vehicle for vehicle in self._vehicles if vehicle.arrived]
        if not arrived:
            return []
        self._vehicles = [vehicle for vehicle in self._vehicles if not vehicle.arrived]
        for vehicle in arrived:
            self.arrivals.append(ArrivalRecord(vehicle_id=vehicle.id, time=self._sim_time))
        logger.debug("t=%.2f: %s vehicles arrived", self._sim_time, len(arrived))
        return arrived

    def reset(self) -> None:
        self._vehicles.clear()
        self.arrivals.clear()
        self._sim_time = 0.0
        self.skipped_moves = 0
        self.graph.reset_flows()

    # ----------------------------------------------------------------- internal --
    def _update_vehicle(self, vehicle: Vehicle) -> None:
        if vehicle.arrived:
            return
        edge = self._current_edge(vehicle)
        if edge is None:
            self.skipped_moves += 1
            logger.debug(
                "Vehicle %s: no road for leg %s, skipping this tick",
                vehicle.id,
                vehicle.current_leg,
            )
            return

        travel_time = self.model.travel_time(edge, vehicle.speed_factor)
        vehicle.time_on_edge += self.dt
        if vehicle.time_on_edge >= travel_time:
            vehicle.current_index += 1
            vehicle.time_on_edge = 0.0

    def _current_edge(self, vehicle: Vehicle) -> Optional[Edge]:
        leg = vehicle.current_leg
        if leg is None:
            return None
        try:
            return self.graph.find_edge(*leg)
        except NodeIndexError:
            return None


def assign_routes(
    city: CityModel,
    vehicles: Iterable[Vehicle],
    search: Optional[HeuristicSearch] = None,
    cost: EdgeCost = travel_time_cost,
) -> List[Vehicle]:
    """Give each vehicle the A* route from its source to its destination.

    Vehicles whose destination is unreachable get an empty route and are
    retired on the first tick.
    """
    search = search or HeuristicSearch(city)
    routed: List[Vehicle] = []
    for vehicle in vehicles:
        search.compute(vehicle.source, vehicle.destination, cost)
        vehicle.path = search.build_path(vehicle.destination)
        vehicle.current_index = 0
        vehicle.time_on_edge = 0.0
        if not vehicle.path:
            logger.warning(
                "Vehicle %s: no route from %s to %s",
                vehicle.id,
                city.name_of(vehicle.source),
                city.name_of(vehicle.destination),
            )
        routed.append(vehicle)
    return routed
