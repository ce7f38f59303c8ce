"""Traffic package exports."""

from .config import SimulationConfig
from .congestion import SATURATION_PENALTY, CongestionFunction, CongestionModel
from .simulator import ArrivalRecord, Simulator, assign_routes

__all__ = [
    "ArrivalRecord",
    "CongestionFunction",
    "CongestionModel",
    "SATURATION_PENALTY",
    "SimulationConfig",
    "Simulator",
    "assign_routes",
]
