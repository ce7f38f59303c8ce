"""YAML-backed settings for a simulation run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping

import yaml

from .congestion import CongestionFunction

logger = logging.getLogger(__name__)

HEURISTICS = ("euclidean", "travel_time", "zero")


@dataclass
class SimulationConfig:
    """Parameters of one simulation context.

    Defaults run twenty one-second ticks with BPR congestion (0.15/4.0) and
    route vehicles with the straight-line heuristic.
    """

    time_step: float = 1.0
    ticks: int = 20
    congestion_function: CongestionFunction = CongestionFunction.BPR
    bpr_alpha: float = 0.15
    bpr_beta: float = 4.0
    heuristic: str = "euclidean"
    heuristic_scale: float = 1.0

    def __post_init__(self) -> None:
        self.time_step = float(self.time_step)
        self.ticks = int(self.ticks)
        self.congestion_function = CongestionFunction.parse(self.congestion_function)
        self.bpr_alpha = float(self.bpr_alpha)
        self.bpr_beta = float(self.bpr_beta)
        self.heuristic = str(self.heuristic).strip().lower()
        self.heuristic_scale = float(self.heuristic_scale)
        self._validate()

    def _validate(self) -> None:
        if self.time_step <= 0:
            raise ValueError("time_step must be positive.")
        if self.ticks < 0:
            raise ValueError("ticks must be non-negative.")
        if self.bpr_alpha < 0 or self.bpr_beta < 0:
            raise ValueError("BPR alpha and beta must be non-negative.")
        if self.heuristic not in HEURISTICS:
            raise ValueError(
                f"heuristic must be one of {', '.join(HEURISTICS)}; got {self.heuristic!r}"
            )
        if self.heuristic_scale <= 0:
            raise ValueError("heuristic_scale must be positive.")

    # --------------------------------------------------------------------- I/O --
    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown simulation settings: %s", ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SimulationConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Simulation config not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Simulation config YAML must contain a mapping at the top level")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, object]:
        return {
            "time_step": self.time_step,
            "ticks": self.ticks,
            "congestion_function": self.congestion_function.value,
            "bpr_alpha": self.bpr_alpha,
            "bpr_beta": self.bpr_beta,
            "heuristic": self.heuristic,
            "heuristic_scale": self.heuristic_scale,
        }

    def to_yaml(self, path: str | Path) -> None:
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self.to_dict(), handle, sort_keys=True)


__all__ = ["HEURISTICS", "SimulationConfig"]
