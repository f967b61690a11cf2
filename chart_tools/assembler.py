"""Build a ChartSnapshot from the two ephemeris providers."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Sequence

from .analysis.aspects import find_aspects
from .ephemeris import (
    BODY_ROSTER,
    DEFAULT_HOUSE_SYSTEM,
    MOON_ID,
    NORTH_NODE_ID,
    SUN_ID,
    PositionProvider,
    RosterEntry,
    check_house_system,
    get_provider,
)
from .errors import ComputationError, OptionalBodyUnavailable
from .models import (
    BodyPosition,
    ChartSnapshot,
    CivilMoment,
    HouseFrame,
    InterceptedSign,
    Location,
    PointKind,
    RawPosition,
    normalize_angle,
)
from .timeconv import jd_to_datetime

logger = logging.getLogger(__name__)

SOUTH_NODE = "South Node"
PART_OF_FORTUNE = "Part of Fortune"


def house_for_longitude(longitude: float, cusps: Sequence[float]) -> int:
    """Return the house (1-12) whose [cusp, next cusp) arc holds the longitude."""

    lon = normalize_angle(longitude)
    for i in range(12):
        cusp = normalize_angle(cusps[i])
        next_cusp = normalize_angle(cusps[(i + 1) % 12])
        if next_cusp > cusp:
            if cusp <= lon < next_cusp:
                return i + 1
        elif lon >= cusp or lon < next_cusp:
            # arc crosses 0°
            return i + 1
    raise ComputationError(f"Longitude {lon:.4f}° is not covered by the house cusps")


def intercepted_signs(cusps: Sequence[float]) -> List[InterceptedSign]:
    """
    Signs wholly enclosed in a house.

    A house spanning two or more sign boundaries intercepts every sign after the
    one its cusp falls in.
    """

    found: List[InterceptedSign] = []
    for i in range(12):
        cusp_sign = int(normalize_angle(cusps[i]) // 30)
        next_sign = int(normalize_angle(cusps[(i + 1) % 12]) // 30)
        sign_span = (next_sign - cusp_sign) % 12
        for step in range(1, sign_span):
            found.append(InterceptedSign(house=i + 1, sign_index=(cusp_sign + step) % 12))
    return found


def part_of_fortune(
    ascendant: float, sun: BodyPosition | None, moon: BodyPosition | None
) -> tuple[float, bool] | None:
    """
    Return (longitude, is_daytime), or None without both lights.

    The chart is diurnal when the Sun, counted from the Ascendant in zodiacal
    order, lies more than 180° on (houses 7-12, above the horizon).
    Day: ASC + Moon - Sun. Night: ASC + Sun - Moon.
    """

    if sun is None or moon is None:
        return None
    is_daytime = normalize_angle(sun.longitude - ascendant) > 180.0
    if is_daytime:
        longitude = ascendant + moon.longitude - sun.longitude
    else:
        longitude = ascendant + sun.longitude - moon.longitude
    return normalize_angle(longitude), is_daytime


def south_node(north: BodyPosition) -> BodyPosition:
    """Opposite point of the mean node; shares its speed and so its retrograde flag."""

    return BodyPosition(
        name=SOUTH_NODE,
        kind=PointKind.DERIVED,
        body_id=None,
        longitude=normalize_angle(north.longitude + 180.0),
        latitude=-north.latitude,
        distance=north.distance,
        speed=north.speed,
    )


def _query_body(provider: PositionProvider, jd_ut: float, entry: RosterEntry) -> RawPosition:
    try:
        return provider.position(jd_ut, entry.body_id)
    except ComputationError as exc:
        raise OptionalBodyUnavailable(entry.name, str(exc)) from exc


def query_roster(
    provider: PositionProvider, jd_ut: float, roster: Sequence[RosterEntry] = BODY_ROSTER
) -> tuple[list[BodyPosition], list[str]]:
    """
    Positions for the roster. A body that fails is logged and skipped, the Sun
    and Moon included: a chart without them simply has no Part of Fortune.
    """

    bodies: list[BodyPosition] = []
    omitted: list[str] = []
    for entry in roster:
        try:
            raw = _query_body(provider, jd_ut, entry)
        except OptionalBodyUnavailable as exc:
            logger.warning("Omitting %s from chart at JD %.6f: %s", exc.body, jd_ut, exc.reason)
            omitted.append(entry.name)
            continue
        bodies.append(
            BodyPosition(
                name=entry.name,
                kind=PointKind.BODY,
                body_id=entry.body_id,
                longitude=normalize_angle(raw.longitude),
                latitude=raw.latitude,
                distance=raw.distance,
                speed=raw.speed,
            )
        )

    north = next((b for b in bodies if b.body_id == NORTH_NODE_ID), None)
    if north is not None:
        bodies.append(south_node(north))
    return bodies, omitted


def house_frame(
    provider: PositionProvider, jd_ut: float, location: Location, system: str = DEFAULT_HOUSE_SYSTEM
) -> HouseFrame:
    raw = provider.houses(jd_ut, location.latitude, location.longitude, check_house_system(system))
    if len(raw.cusps) != 12:
        raise ComputationError(f"Expected 12 house cusps, got {len(raw.cusps)}")
    return HouseFrame(
        cusps=tuple(normalize_angle(c) for c in raw.cusps),
        ascendant=normalize_angle(raw.ascendant),
        mc=normalize_angle(raw.mc),
        armc=raw.armc,
        vertex=normalize_angle(raw.vertex),
        system=system,
    )


def _placed(body: BodyPosition, cusps: Sequence[float]) -> BodyPosition:
    return BodyPosition(
        name=body.name,
        kind=body.kind,
        body_id=body.body_id,
        longitude=body.longitude,
        latitude=body.latitude,
        distance=body.distance,
        speed=body.speed,
        house=house_for_longitude(body.longitude, cusps),
    )


def assemble(
    jd_ut: float,
    location: Location,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    provider: PositionProvider | None = None,
    *,
    chart_type: str = "natal",
    houses: HouseFrame | None = None,
    include_fortune: bool = True,
    moment: CivilMoment | None = None,
    offset_minutes: float = 0.0,
    utc: datetime | None = None,
) -> ChartSnapshot:
    """
    Compute positions, houses, derived points, interceptions and aspects for one instant.

    Passing `houses` borrows an existing frame (transits use the natal houses)
    instead of computing one at `location`. `utc` is the already-resolved instant
    when the caller has one; otherwise it is derived from `jd_ut`. A house frame
    that cannot be computed raises ComputationError.
    """

    provider = provider or get_provider()
    frame = houses if houses is not None else house_frame(provider, jd_ut, location, house_system)

    raw_bodies, omitted = query_roster(provider, jd_ut)
    bodies = [_placed(b, frame.cusps) for b in raw_bodies]

    fortune: BodyPosition | None = None
    is_daytime: bool | None = None
    if include_fortune:
        sun = next((b for b in bodies if b.body_id == SUN_ID), None)
        moon = next((b for b in bodies if b.body_id == MOON_ID), None)
        computed = part_of_fortune(frame.ascendant, sun, moon)
        if computed is not None:
            fortune_lon, is_daytime = computed
            fortune = BodyPosition(
                name=PART_OF_FORTUNE,
                kind=PointKind.DERIVED,
                body_id=None,
                longitude=fortune_lon,
                latitude=0.0,
                distance=0.0,
                speed=0.0,
                house=house_for_longitude(fortune_lon, frame.cusps),
            )

    points = bodies + ([fortune] if fortune is not None else [])
    aspects = find_aspects(points)
    logger.debug(
        "Assembled %s chart at JD %.6f: %d bodies, %d aspects", chart_type, jd_ut, len(bodies), len(aspects)
    )

    return ChartSnapshot(
        chart_type=chart_type,
        jd_ut=jd_ut,
        utc=utc if utc is not None else jd_to_datetime(jd_ut),
        houses=frame,
        bodies=tuple(bodies),
        part_of_fortune=fortune,
        aspects=tuple(aspects),
        intercepted=tuple(intercepted_signs(frame.cusps)),
        location=location,
        moment=moment,
        offset_minutes=offset_minutes,
        is_daytime=is_daytime,
        omitted=tuple(omitted),
    )
