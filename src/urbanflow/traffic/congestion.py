"""Flow-dependent travel times for road segments."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from urbanflow.network.domain_types import Edge

if TYPE_CHECKING:  # pragma: no cover
    from .config import SimulationConfig

SATURATION_PENALTY = 1000.0


class CongestionFunction(str, Enum):
    LINEAR = "linear"
    BPR = "bpr"  # Bureau of Public Roads
    EXPONENTIAL = "exponential"

    @classmethod
    def parse(cls, value: object) -> "CongestionFunction":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text or member.name.lower() == text:
                return member
        raise ValueError(
            f"Unknown congestion function '{value}', expected linear, bpr or exponential."
        )


@dataclass
class CongestionModel:
    """Maps an edge's flow/capacity ratio to a multiplicative travel-time penalty.

    ``function`` and the BPR parameters can be changed between ticks; each
    simulator owns its own instance.
    """

    function: CongestionFunction = CongestionFunction.LINEAR
    alpha: float = 0.15
    beta: float = 4.0

    def __post_init__(self) -> None:
        self.function = CongestionFunction.parse(self.function)
        self.alpha = float(self.alpha)
        self.beta = float(self.beta)

    @classmethod
    def from_config(cls, config: "SimulationConfig") -> "CongestionModel":
        return cls(
            function=config.congestion_function,
            alpha=config.bpr_alpha,
            beta=config.bpr_beta,
        )

    # ---------------------------------------------------------- configuration --
    def set_function(self, function: CongestionFunction) -> None:
        self.function = CongestionFunction.parse(function)

    def set_bpr_parameters(self, alpha: float, beta: float) -> None:
        self.alpha = float(alpha)
        self.beta = float(beta)

    # ------------------------------------------------------------ evaluation --
    def penalty_for_ratio(self, ratio: float) -> float:
        if self.function is CongestionFunction.BPR:
            return 1.0 + self.alpha * math.pow(ratio, self.beta)
        if self.function is CongestionFunction.EXPONENTIAL:
            return math.exp(ratio)
        return 1.0 + ratio

    def penalty(self, edge: Edge) -> float:
        if edge.capacity <= 0.0:
            return SATURATION_PENALTY
        return self.penalty_for_ratio(edge.current_flow / edge.capacity)

    def travel_time(self, edge: Edge, speed_factor: float = 1.0) -> float:
        """``(base_travel_time / speed_factor) * penalty`` at the edge's current flow."""
        if speed_factor <= 0:
            raise ValueError("speed_factor must be positive.")
        return (edge.base_travel_time / speed_factor) * self.penalty(edge)

    def cost_function(self, speed_factor: float = 1.0) -> Callable[[Edge], float]:
        """Edge-cost callable for the routing engines reading live congestion."""
        if speed_factor <= 0:
            raise ValueError("speed_factor must be positive.")
        return lambda edge: self.travel_time(edge, speed_factor)
