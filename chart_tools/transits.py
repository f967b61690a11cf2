"""Transits: the sky at a moment, read against a natal chart."""

from __future__ import annotations

from .analysis.aspects import find_aspects, find_cross_aspects
from .assembler import assemble
from .ephemeris import PositionProvider
from .models import ChartSnapshot, CivilMoment, Location, TransitChart
from .timeconv import resolve


def compute_transits(
    natal: ChartSnapshot,
    moment: CivilMoment,
    location: Location,
    provider: PositionProvider | None = None,
) -> TransitChart:
    """
    Transiting positions placed in the natal houses.

    The transit chart borrows the natal house frame, so it carries no Part of
    Fortune of its own. Cross-aspects run from every transiting body to every
    natal body; transit-to-transit aspects are reported separately.
    """

    resolved = resolve(moment)
    chart = assemble(
        resolved.jd_ut,
        location,
        natal.houses.system,
        provider,
        chart_type="transit",
        houses=natal.houses,
        include_fortune=False,
        moment=moment,
        offset_minutes=resolved.offset_minutes,
        utc=resolved.utc,
    )
    return TransitChart(
        chart=chart,
        natal=natal,
        cross_aspects=tuple(find_cross_aspects(chart.bodies, natal.bodies)),
        transit_aspects=tuple(find_aspects(chart.bodies)),
    )
