"""Newton-Raphson search for the instant a body reaches a given ecliptic longitude.

Solar and Lunar Returns are the same problem with different periods: a
`PeriodAnchor` supplies the starting estimate and decides whether a converged
instant lies in the requested year or month, shifting by one period if not.
All attempts share one iteration budget.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .analysis.signs import shortest_angle
from .ephemeris import MOON_ID, SUN_ID, PositionProvider, get_provider
from .errors import SolverDivergence
from .models import normalize_angle
from .timeconv import SECOND_IN_DAYS, civil_to_jd, jd_to_civil

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 50
# Upper bound on the accepted residual; for the Sun one second of motion is
# about 1.1e-5°, for the Moon the bound itself applies.
ANGLE_TOLERANCE = 1e-5

SOLAR_PERIOD_DAYS = 365.25
LUNAR_PERIOD_DAYS = 29.53
MEAN_MOON_SPEED = 13.2
# Day of year on which the Sun reaches 0° Aries (about March 20).
ARIES_INGRESS_DAY = 79


class PeriodAnchor(ABC):
    """Where to start looking and which period a solution must belong to."""

    body_id: int
    period_days: float

    @abstractmethod
    def seed(self, target: float, provider: PositionProvider) -> float:
        """First estimate of the instant the body reaches `target`."""

    @abstractmethod
    def correction(self, jd_ut: float) -> float:
        """Days to shift a converged instant by; 0.0 when it lies in the period."""


@dataclass(frozen=True)
class SolarPeriod(PeriodAnchor):
    year: int

    body_id = SUN_ID
    period_days = SOLAR_PERIOD_DAYS

    def seed(self, target: float, provider: PositionProvider) -> float:
        # About 1° a day from the Aries ingress.
        day_of_year = ARIES_INGRESS_DAY + target
        if day_of_year > 365:
            # Late Pisces: the crossing falls early in the same year.
            day_of_year -= SOLAR_PERIOD_DAYS
        return civil_to_jd(self.year, 1, 1) + day_of_year

    def correction(self, jd_ut: float) -> float:
        # A return in the first days of year+1 still belongs to this period.
        solved = jd_to_civil(jd_ut).year
        if solved in (self.year, self.year + 1):
            return 0.0
        if solved > self.year + 1:
            return -self.period_days
        return self.period_days


@dataclass(frozen=True)
class LunarPeriod(PeriodAnchor):
    year: int
    month: int

    body_id = MOON_ID
    period_days = LUNAR_PERIOD_DAYS

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be 1-12, got {self.month}")

    @property
    def start_jd(self) -> float:
        return civil_to_jd(self.year, self.month, 1)

    @property
    def end_jd(self) -> float:
        if self.month == 12:
            return civil_to_jd(self.year + 1, 1, 1)
        return civil_to_jd(self.year, self.month + 1, 1)

    def seed(self, target: float, provider: PositionProvider) -> float:
        start = self.start_jd
        moon = provider.position(start, self.body_id)
        return start + shortest_angle(target - moon.longitude) / MEAN_MOON_SPEED

    def correction(self, jd_ut: float) -> float:
        if jd_ut < self.start_jd:
            return self.period_days
        if jd_ut >= self.end_jd:
            return -self.period_days
        return 0.0


def _tolerance(speed: float) -> float:
    return min(abs(speed) * SECOND_IN_DAYS, ANGLE_TOLERANCE)


def _newton_step(
    provider: PositionProvider, body_id: int, target: float, jd_ut: float
) -> tuple[float, float, bool]:
    """One iteration: (next estimate, signed residual, converged)."""

    pos = provider.position(jd_ut, body_id)
    residual = shortest_angle(target - pos.longitude)
    if abs(residual) < _tolerance(pos.speed):
        return jd_ut, residual, True
    if not pos.speed or not math.isfinite(pos.speed):
        raise SolverDivergence(abs(residual), 0)
    return jd_ut + residual / pos.speed, residual, False


def solve(
    target_longitude: float,
    anchor: PeriodAnchor,
    body_id: int | None = None,
    provider: PositionProvider | None = None,
) -> float:
    """
    Return the Julian day (UT) at which the body reaches `target_longitude`
    within the anchor's period.

    Raises SolverDivergence, carrying the residual angle, if the iteration budget
    runs out.
    """

    provider = provider or get_provider()
    body = anchor.body_id if body_id is None else body_id
    target = normalize_angle(target_longitude)
    jd_ut = anchor.seed(target, provider)
    residual = math.inf

    for iteration in range(1, MAX_ITERATIONS + 1):
        jd_ut, residual, converged = _newton_step(provider, body, target, jd_ut)
        if not converged:
            continue
        shift = anchor.correction(jd_ut)
        if not shift:
            logger.debug(
                "Body %d reached %.6f° at JD %.6f after %d iterations", body, target, jd_ut, iteration
            )
            return jd_ut
        logger.debug("Solution at JD %.6f outside %r; shifting %.2f days", jd_ut, anchor, shift)
        jd_ut += shift

    raise SolverDivergence(abs(residual), MAX_ITERATIONS)


def find_longitude_crossing(
    target_longitude: float,
    start_jd: float,
    body_id: int = SUN_ID,
    provider: PositionProvider | None = None,
) -> float:
    """Nearest instant to `start_jd` at which the body sits on `target_longitude`."""

    provider = provider or get_provider()
    target = normalize_angle(target_longitude)
    jd_ut = start_jd
    residual = math.inf
    for _ in range(MAX_ITERATIONS):
        jd_ut, residual, converged = _newton_step(provider, body_id, target, jd_ut)
        if converged:
            return jd_ut
    raise SolverDivergence(abs(residual), MAX_ITERATIONS)


def find_solar_return(
    natal_sun_longitude: float, year: int, provider: PositionProvider | None = None
) -> float:
    return solve(natal_sun_longitude, SolarPeriod(year), provider=provider)


def find_lunar_return(
    natal_moon_longitude: float, year: int, month: int, provider: PositionProvider | None = None
) -> float:
    return solve(natal_moon_longitude, LunarPeriod(year, month), provider=provider)
