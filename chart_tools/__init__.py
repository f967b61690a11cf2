"""Natal, return and transit chart computation on top of Swiss Ephemeris."""

from .charts import (
    compute_house_decans,
    compute_life_cycle_years,
    compute_lunar_return,
    compute_natal_chart,
    compute_solar_return,
)
from .errors import (
    ChartToolsError,
    ComputationError,
    InvalidTimezone,
    OptionalBodyUnavailable,
    SolverDivergence,
)
from .models import BodyPosition, ChartSnapshot, CivilMoment, HouseFrame, Location
from .transits import compute_transits

__all__ = [
    "BodyPosition",
    "ChartSnapshot",
    "ChartToolsError",
    "CivilMoment",
    "ComputationError",
    "HouseFrame",
    "InvalidTimezone",
    "Location",
    "OptionalBodyUnavailable",
    "SolverDivergence",
    "compute_house_decans",
    "compute_life_cycle_years",
    "compute_lunar_return",
    "compute_natal_chart",
    "compute_solar_return",
    "compute_transits",
]
