"""Command-line driver: load a city, analyse it, simulate traffic and export results."""

from __future__ import annotations

import argparse
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import List, Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from urbanflow.io.exporters import (
    centrality_frame,
    export_edge_congestion,
    export_vehicle_paths,
)
from urbanflow.io.loaders import load_city
from urbanflow.network.city_model import CityModel
from urbanflow.routing.centrality import Centrality
from urbanflow.routing.heuristic_search import HeuristicSearch, build_heuristic
from urbanflow.routing.max_flow import MaxFlow
from urbanflow.routing.shortest_path import ShortestPath
from urbanflow.traffic.config import SimulationConfig
from urbanflow.traffic.congestion import CongestionModel
from urbanflow.traffic.simulator import Simulator, assign_routes

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--data-dir",
        default="data",
        help="Folder containing intersections.csv, roads.csv and vehicles.csv.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional simulation config YAML (time_step, ticks, congestion_function, ...).",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Override the number of simulation ticks from the config.",
    )
    parser.add_argument(
        "--output-dir",
        default="output",
        help="Destination folder for vehicle_paths.csv and edge_congestion.csv.",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=5,
        help="Number of intersections listed in the centrality summary (default: 5).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.ticks is not None:
        config = replace(config, ticks=args.ticks)

    logger.info("Loading city from %s", args.data_dir)
    city, vehicles = load_city(args.data_dir)
    console.print(
        f"Intersections loaded: {city.num_intersections}  "
        f"Roads: {city.graph.num_edges}  Vehicles: {len(vehicles)}"
    )
    if city.num_intersections == 0:
        raise SystemExit("No intersections loaded; nothing to analyse.")

    _report_routes(console, city)
    _report_centrality(console, city, args.top)
    _report_max_flow(console, city)

    search = HeuristicSearch(
        city, build_heuristic(config.heuristic, city, config.heuristic_scale)
    )
    assign_routes(city, vehicles, search)

    output_dir = Path(args.output_dir)
    export_vehicle_paths(output_dir / "vehicle_paths.csv", vehicles, city)

    simulator = Simulator(city, CongestionModel.from_config(config), config.time_step)
    for vehicle in vehicles:
        simulator.add_vehicle(vehicle)
    _simulate_with_progress(simulator, config.ticks)
    console.print(
        f"Simulated {simulator.sim_time:g}s: {len(simulator.arrivals)} arrived, "
        f"{len(simulator.vehicles)} still en route"
    )
    if simulator.skipped_moves:
        logger.warning("%s vehicle moves skipped on legs without a road", simulator.skipped_moves)

    export_edge_congestion(output_dir / "edge_congestion.csv", city)


def _report_routes(console: Console, city: CityModel) -> None:
    last = city.num_intersections - 1
    sp = ShortestPath(city.graph)
    sp.compute(0)
    table = Table(title=f"Travel time from {city.name_of(0)}")
    table.add_column("Intersection")
    table.add_column("Time", justify="right")
    for node, dist in enumerate(sp.distances):
        table.add_row(city.name_of(node), "INF" if math.isinf(dist) else f"{dist:.2f}")
    console.print(table)

    if last > 0:
        search = HeuristicSearch(city)
        search.compute(0, last)
        route = " -> ".join(city.route_names(search.build_path(last))) or "unreachable"
        console.print(f"A* {city.name_of(0)} -> {city.name_of(last)}: {search.distance(last):g} ({route})")


def _report_centrality(console: Console, city: CityModel, top: int) -> None:
    frame = centrality_frame(city, Centrality(city.graph)).head(max(top, 0))
    table = Table(title="Most central intersections")
    for column in ("name", "degree", "closeness", "betweenness"):
        table.add_column(column, justify="left" if column == "name" else "right")
    for row in frame.itertuples(index=False):
        table.add_row(row.name, f"{row.degree:g}", f"{row.closeness:.4f}", f"{row.betweenness:.2f}")
    console.print(table)


def _report_max_flow(console: Console, city: CityModel) -> None:
    last = city.num_intersections - 1
    if last <= 0:
        return
    flow = MaxFlow(city.graph)
    value = flow.compute(0, last)
    bottlenecks: List[str] = [
        f"{city.name_of(edge.origin)}->{city.name_of(edge.destination)}"
        for edge in flow.cut_edges(reference=0)
    ]
    console.print(f"Max flow {city.name_of(0)} -> {city.name_of(last)}: {value:g}")
    if bottlenecks:
        console.print(f"Bottleneck roads: {', '.join(bottlenecks)}")


def _simulate_with_progress(simulator: Simulator, ticks: int) -> None:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        transient=True,
    )
    with progress:
        task_id = progress.add_task("Simulating traffic", total=ticks)

        def on_tick(sim: Simulator) -> None:
            progress.advance(task_id)
            logger.debug("time=%g vehicles=%s", sim.sim_time, len(sim.vehicles))

        simulator.run(ticks, on_tick=on_tick)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
