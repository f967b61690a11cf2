"""Chart-level operations: natal, Solar Return, Lunar Return, decans and life cycles."""

from __future__ import annotations

import logging
from typing import Iterable, List

from .analysis.segments import DECAN_PARTS, LIFE_CYCLE_PARTS, segment
from .analysis.signs import DEFAULT_RULERSHIP, decan_sign_for_longitude, rulers, sign_index_from_longitude
from .assembler import assemble
from .ephemeris import DEFAULT_HOUSE_SYSTEM, MOON_ID, SUN_ID, PositionProvider, get_provider
from .errors import ComputationError
from .models import (
    BodyPosition,
    ChartSnapshot,
    CivilMoment,
    HouseFrame,
    HouseSegments,
    HouseTiming,
    Location,
    LunarReturnChart,
    SolarReturnChart,
    normalize_angle,
)
from .solver import find_longitude_crossing, find_lunar_return, find_solar_return
from .timeconv import jd_to_civil, jd_to_local, resolve

logger = logging.getLogger(__name__)

# Birth months after June label a Solar Return by the year it mostly runs into.
LATE_BIRTH_MONTH = 6


def compute_natal_chart(
    moment: CivilMoment,
    location: Location,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    provider: PositionProvider | None = None,
) -> ChartSnapshot:
    """Resolve the birth moment in its zone and assemble the natal chart."""

    resolved = resolve(moment)
    return assemble(
        resolved.jd_ut,
        location,
        house_system,
        provider,
        chart_type="natal",
        moment=moment,
        offset_minutes=resolved.offset_minutes,
        utc=resolved.utc,
    )


def _required_body(chart: ChartSnapshot, body_id: int, label: str) -> BodyPosition:
    body = next((b for b in chart.bodies if b.body_id == body_id), None)
    if body is None:
        raise ComputationError(f"Natal chart has no {label}")
    return body


def solar_return_year(birth_month: int, year: int) -> int:
    """
    Calendar year in which the return for the labelled `year` happens.

    The label names the year most of the return-to-birthday interval falls in, so
    for births from July on the event itself is in the previous year.
    """

    return year - 1 if birth_month > LATE_BIRTH_MONTH else year


def compute_solar_return(
    natal: ChartSnapshot,
    year: int,
    location: Location,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    provider: PositionProvider | None = None,
) -> SolarReturnChart:
    """Solar Return chart for `year` at `location`, with the house timing table."""

    provider = provider or get_provider()
    natal_sun = _required_body(natal, SUN_ID, "Sun")
    birth_month = natal.moment.month if natal.moment is not None else 1
    solved_year = solar_return_year(birth_month, year)

    jd_ut = find_solar_return(natal_sun.longitude, solved_year, provider)
    _, offset = jd_to_local(jd_ut, location.timezone)
    chart = assemble(
        jd_ut,
        location,
        house_system,
        provider,
        chart_type="solar_return",
        offset_minutes=offset,
    )
    logger.info("Solar Return %d (event year %d) at JD %.6f", year, solved_year, jd_ut)
    timing = house_timing(chart, natal_sun.longitude, location.timezone, provider=provider)
    return SolarReturnChart(
        chart=chart,
        natal_sun_longitude=natal_sun.longitude,
        solved_year=solved_year,
        house_timing=tuple(timing),
    )


def house_timing(
    chart: ChartSnapshot,
    sun_longitude: float,
    timezone_name: str,
    rulership: str | list[str] = DEFAULT_RULERSHIP,
    provider: PositionProvider | None = None,
) -> List[HouseTiming]:
    """
    When the Sun enters and leaves each house of a Solar Return chart.

    Starting from the return instant, the Sun needs roughly one day per degree
    to reach each cusp; that estimate seeds a Newton solve for the exact crossing.
    """

    provider = provider or get_provider()
    ruler_table = rulers(rulership)
    frame = chart.houses
    rows: List[HouseTiming] = []
    for house in range(1, 13):
        cusp = frame.cusp(house)
        next_cusp = frame.cusp(house + 1)
        enter_offset = normalize_angle(cusp - sun_longitude)
        leave_offset = normalize_angle(next_cusp - sun_longitude)
        if leave_offset <= enter_offset:
            leave_offset += 360.0

        enter_jd = find_longitude_crossing(cusp, chart.jd_ut + enter_offset, SUN_ID, provider)
        leave_jd = find_longitude_crossing(next_cusp, chart.jd_ut + leave_offset, SUN_ID, provider)
        enter_local, _ = jd_to_local(enter_jd, timezone_name)
        leave_local, _ = jd_to_local(leave_jd, timezone_name)
        decan = decan_sign_for_longitude(cusp)
        rows.append(
            HouseTiming(
                house=house,
                cusp_longitude=cusp,
                enter_jd=enter_jd,
                leave_jd=leave_jd,
                enter_local=enter_local,
                leave_local=leave_local,
                sign_index=sign_index_from_longitude(cusp),
                decan_sign=decan,
                ruler=ruler_table[decan],
                bodies=tuple(b for b in chart.bodies if b.house == house),
            )
        )
    return rows


def compute_lunar_return(
    natal: ChartSnapshot,
    year: int,
    month: int,
    location: Location,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    provider: PositionProvider | None = None,
) -> LunarReturnChart:
    """Lunar Return chart for the given calendar month at `location`."""

    provider = provider or get_provider()
    natal_moon = _required_body(natal, MOON_ID, "Moon")
    jd_ut = find_lunar_return(natal_moon.longitude, year, month, provider)
    _, offset = jd_to_local(jd_ut, location.timezone)
    chart = assemble(
        jd_ut,
        location,
        house_system,
        provider,
        chart_type="lunar_return",
        offset_minutes=offset,
    )
    solved = jd_to_civil(jd_ut)
    logger.info("Lunar Return %04d-%02d at JD %.6f", solved.year, solved.month, jd_ut)
    return LunarReturnChart(chart=chart, natal_moon_longitude=natal_moon.longitude)


def compute_house_decans(
    frame: HouseFrame,
    bodies: Iterable[BodyPosition],
    rulership: str | list[str] = DEFAULT_RULERSHIP,
) -> List[HouseSegments]:
    """Split every house into three ruled decans."""

    return segment(frame, bodies, DECAN_PARTS, rulership)


def compute_life_cycle_years(
    frame: HouseFrame,
    bodies: Iterable[BodyPosition],
    birth_year: int,
    rulership: str | list[str] = DEFAULT_RULERSHIP,
) -> List[HouseSegments]:
    """Seven years per house: an 84-year cycle with calendar-year labels."""

    return segment(frame, bodies, LIFE_CYCLE_PARTS, rulership, birth_year=birth_year)
