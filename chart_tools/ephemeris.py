"""Swiss Ephemeris wrapper: body positions and house frames.

The engine talks to any object with `position()` and `houses()` methods
(see `PositionProvider`), so tests can pass a deterministic fake. The default
provider is a process-wide Swiss Ephemeris handle opened lazily, once.
"""

from __future__ import annotations

import logging
import math
import os
import threading
from dataclasses import dataclass
from typing import Protocol

import swisseph as swe

from .errors import ComputationError
from .models import RawHouses, RawPosition

logger = logging.getLogger(__name__)

EPHE_PATH = os.environ.get("SWISSEPH_EPHE")
FLAGS = swe.FLG_SWIEPH | swe.FLG_SPEED


@dataclass(frozen=True)
class RosterEntry:
    name: str
    body_id: int


# Bodies queried for every chart, in display order.
BODY_ROSTER: tuple[RosterEntry, ...] = (
    RosterEntry("Sun", swe.SUN),
    RosterEntry("Moon", swe.MOON),
    RosterEntry("Mercury", swe.MERCURY),
    RosterEntry("Venus", swe.VENUS),
    RosterEntry("Mars", swe.MARS),
    RosterEntry("Jupiter", swe.JUPITER),
    RosterEntry("Saturn", swe.SATURN),
    RosterEntry("Uranus", swe.URANUS),
    RosterEntry("Neptune", swe.NEPTUNE),
    RosterEntry("Pluto", swe.PLUTO),
    RosterEntry("North Node", swe.MEAN_NODE),
    RosterEntry("Lilith", swe.MEAN_APOG),
    RosterEntry("Chiron", swe.CHIRON),
)
SUN_ID = swe.SUN
MOON_ID = swe.MOON
NORTH_NODE_ID = swe.MEAN_NODE

HOUSE_SYSTEMS = {
    "P": "Placidus",
    "K": "Koch",
    "E": "Equal",
    "W": "Whole Sign",
    "C": "Campanus",
    "R": "Regiomontanus",
    "O": "Porphyry",
    "T": "Topocentric",
    "M": "Morinus",
    "B": "Alcabitius",
}
DEFAULT_HOUSE_SYSTEM = "P"


class PositionProvider(Protocol):
    def position(self, jd_ut: float, body_id: int) -> RawPosition: ...

    def houses(self, jd_ut: float, latitude: float, longitude: float, system: str) -> RawHouses: ...


def check_house_system(code: str) -> str:
    if code not in HOUSE_SYSTEMS:
        raise ValueError(f"Unknown house system {code!r}; expected one of {''.join(HOUSE_SYSTEMS)}")
    return code


def _finite(values, what: str) -> None:
    if not all(math.isfinite(v) for v in values):
        raise ComputationError(f"Ephemeris returned non-finite values for {what}")


class SwissEphemeris:
    """Position provider and house calculator backed by pyswisseph."""

    def __init__(self, ephe_path: str | None = None) -> None:
        self.ephe_path = ephe_path
        self._lock = threading.Lock()
        self._opened = False

    def open(self) -> None:
        """Point Swiss Ephemeris at its data directory; safe to call repeatedly."""

        if self._opened:
            return
        with self._lock:
            if self._opened:
                return
            if self.ephe_path:
                swe.set_ephe_path(self.ephe_path)
                logger.info("Swiss Ephemeris %s using data in %s", swe.version, self.ephe_path)
            else:
                logger.info(
                    "Swiss Ephemeris %s without a data path; falling back to Moshier. "
                    "Set SWISSEPH_EPHE to use ephemeris files.",
                    swe.version,
                )
            self._opened = True

    def close(self) -> None:
        with self._lock:
            if self._opened:
                swe.close()
                self._opened = False

    def position(self, jd_ut: float, body_id: int) -> RawPosition:
        """Return ecliptic longitude/latitude, distance and daily longitude speed."""

        self.open()
        try:
            result = swe.calc_ut(jd_ut, body_id, FLAGS)
        except swe.Error as exc:
            raise ComputationError(f"Position of body {body_id} failed: {exc}") from exc
        # pyswisseph returns either a flat tuple of floats or (position_tuple, retflag).
        if len(result) == 2 and isinstance(result[0], (tuple, list)):
            position = result[0]
        else:
            position = result
        lon, lat, dist, speed = (float(v) for v in position[:4])
        _finite((lon, lat, dist, speed), f"body {body_id}")
        return RawPosition(longitude=lon % 360.0, latitude=lat, distance=dist, speed=speed)

    def houses(self, jd_ut: float, latitude: float, longitude: float, system: str) -> RawHouses:
        """Compute the 12 cusps plus Ascendant, MC, ARMC and Vertex."""

        self.open()
        try:
            cusps, ascmc = swe.houses_ex(jd_ut, latitude, longitude, system.encode("ascii"))
        except swe.Error as exc:
            raise ComputationError(f"House calculation ({system}) failed: {exc}") from exc
        # Older bindings prefix the cusps with an unused index-0 slot.
        cusp_values = [float(c) for c in cusps]
        if len(cusp_values) == 13:
            cusp_values = cusp_values[1:]
        if len(cusp_values) != 12 or len(ascmc) < 4:
            raise ComputationError("House calculation returned an incomplete frame")
        asc, mc, armc, vertex = (float(v) for v in ascmc[:4])
        _finite([*cusp_values, asc, mc, armc, vertex], "house frame")
        return RawHouses(
            cusps=tuple(c % 360.0 for c in cusp_values),
            ascendant=asc % 360.0,
            mc=mc % 360.0,
            armc=armc % 360.0,
            vertex=vertex % 360.0,
        )


_default_provider: SwissEphemeris | None = None
_provider_lock = threading.Lock()


def set_ephe_path(path: str) -> None:
    """Override the ephemeris directory used for all Swiss Ephemeris calls."""

    global EPHE_PATH, _default_provider
    with _provider_lock:
        EPHE_PATH = path
        if _default_provider is not None:
            _default_provider.close()
        _default_provider = None


def get_provider() -> SwissEphemeris:
    """Return the shared provider, opening it on first use; later callers reuse it."""

    global _default_provider
    provider = _default_provider
    if provider is None:
        with _provider_lock:
            if _default_provider is None:
                opened = SwissEphemeris(EPHE_PATH)
                opened.open()
                _default_provider = opened
            provider = _default_provider
    return provider
