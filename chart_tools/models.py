"""Dataclasses that capture the chart data used throughout the project.

Everything produced by the engine is frozen; list-like fields are tuples so a
finished chart cannot be mutated by its consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


def normalize_angle(angle: float) -> float:
    """Normalize to [0, 360)."""

    value = angle % 360.0
    # -1e-17 % 360.0 rounds to 360.0
    return 0.0 if value >= 360.0 else value


class PointKind(str, Enum):
    BODY = "body"  # queried from the ephemeris
    DERIVED = "derived"  # South Node, Part of Fortune


@dataclass(frozen=True)
class CivilMoment:
    """Wall-clock time in a named IANA zone."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    timezone: str = "UTC"


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    timezone: str = "UTC"
    name: str = ""


@dataclass(frozen=True)
class UtcTime:
    """Calendar fields of a UTC instant; `second` keeps its fraction."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float


@dataclass(frozen=True)
class ResolvedTime:
    """Result of resolving a civil moment against its zone."""

    utc: datetime
    jd_ut: float
    offset_minutes: float


@dataclass(frozen=True)
class RawPosition:
    """What the position provider returns for one body."""

    longitude: float
    latitude: float
    distance: float
    speed: float


@dataclass(frozen=True)
class RawHouses:
    """What the house calculator returns: 12 cusps plus angles."""

    cusps: tuple[float, ...]
    ascendant: float
    mc: float
    armc: float
    vertex: float


@dataclass(frozen=True)
class BodyPosition:
    """A placed point of the chart, either a real body or a derived point."""

    name: str
    kind: PointKind
    body_id: int | None
    longitude: float
    latitude: float
    distance: float
    speed: float
    house: int | None = None

    @property
    def retrograde(self) -> bool:
        return self.speed < 0

    @property
    def sign_index(self) -> int:
        """0 for Aries through 11 for Pisces."""

        return int(normalize_angle(self.longitude) // 30) % 12

    @property
    def degree_in_sign(self) -> float:
        return normalize_angle(self.longitude) % 30.0

    @property
    def is_derived(self) -> bool:
        return self.kind is PointKind.DERIVED


@dataclass(frozen=True)
class HouseFrame:
    """House cusps (index 0 is house 1) with the chart angles."""

    cusps: tuple[float, ...]
    ascendant: float
    mc: float
    armc: float
    vertex: float
    system: str = "P"

    def cusp(self, house: int) -> float:
        """Cusp longitude of a 1-based house number, cyclic past 12."""

        return self.cusps[(house - 1) % 12]

    @property
    def descendant(self) -> float:
        return normalize_angle(self.ascendant + 180.0)

    @property
    def ic(self) -> float:
        return normalize_angle(self.mc + 180.0)

    def span(self, house: int) -> float:
        """Width of a house in degrees, wrap-safe at 0°."""

        width = normalize_angle(self.cusp(house + 1) - self.cusp(house))
        return width if width > 0 else 360.0


@dataclass(frozen=True)
class AspectKind:
    name: str
    angle: float
    max_orb: float


@dataclass(frozen=True)
class Aspect:
    """Angular relationship between two chart points."""

    body_a: str
    body_b: str
    kind: str
    angle: float
    orb: float
    applying: bool


@dataclass(frozen=True)
class InterceptedSign:
    house: int
    sign_index: int


@dataclass(frozen=True)
class ChartSnapshot:
    """One fully computed chart. Built once by the assembler, read-only afterwards."""

    chart_type: str
    jd_ut: float
    utc: datetime
    houses: HouseFrame
    bodies: tuple[BodyPosition, ...]
    part_of_fortune: BodyPosition | None
    aspects: tuple[Aspect, ...]
    intercepted: tuple[InterceptedSign, ...]
    location: Location | None = None
    moment: CivilMoment | None = None
    offset_minutes: float = 0.0
    is_daytime: bool | None = None
    omitted: tuple[str, ...] = ()

    @property
    def points(self) -> tuple[BodyPosition, ...]:
        """Bodies plus the Part of Fortune, the set aspects are computed over."""

        if self.part_of_fortune is None:
            return self.bodies
        return self.bodies + (self.part_of_fortune,)

    def body(self, name: str) -> BodyPosition | None:
        return next((p for p in self.points if p.name == name), None)


@dataclass(frozen=True)
class DecanSegment:
    """One equal sub-division of a house span."""

    index: int
    start_longitude: float
    end_longitude: float
    span: float
    sign_index: int
    ruling_sign: int
    ruler: str
    bodies: tuple[BodyPosition, ...]
    topic: str  # empty for life-cycle years


@dataclass(frozen=True)
class YearSegment(DecanSegment):
    """A life-cycle year: a decan-style segment labelled with age and calendar year."""

    age: int
    calendar_year: int


@dataclass(frozen=True)
class HouseSegments:
    house: int
    cusp_longitude: float
    sign_index: int
    span: float
    segment_span: float
    segments: tuple[DecanSegment, ...]
    age_start: int | None = None
    age_end: int | None = None


@dataclass(frozen=True)
class HouseTiming:
    """When the Sun crosses into and out of one Solar Return house."""

    house: int
    cusp_longitude: float
    enter_jd: float
    leave_jd: float
    enter_local: datetime
    leave_local: datetime
    sign_index: int
    decan_sign: int
    ruler: str
    bodies: tuple[BodyPosition, ...]

    @property
    def duration_days(self) -> float:
        return self.leave_jd - self.enter_jd


@dataclass(frozen=True)
class SolarReturnChart:
    chart: ChartSnapshot
    natal_sun_longitude: float
    solved_year: int
    house_timing: tuple[HouseTiming, ...]


@dataclass(frozen=True)
class LunarReturnChart:
    chart: ChartSnapshot
    natal_moon_longitude: float


@dataclass(frozen=True)
class TransitChart:
    """Transiting bodies placed in natal houses, with both aspect sets."""

    chart: ChartSnapshot
    natal: ChartSnapshot
    cross_aspects: tuple[Aspect, ...]
    transit_aspects: tuple[Aspect, ...]
