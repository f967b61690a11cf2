"""Decans and life-cycle years: equal sub-divisions of each house span.

A house starting in sign S is split into n equal parts. Part k is ruled by the
sign k places further round S's triplicity, so the rulers rotate through the
three signs of one element rather than through consecutive signs.
"""

from __future__ import annotations

from typing import Iterable, List

from ..models import BodyPosition, DecanSegment, HouseFrame, HouseSegments, YearSegment, normalize_angle
from .signs import DEFAULT_RULERSHIP, rulers, sign_index_from_longitude, triplicity_sign

DECAN_PARTS = 3
LIFE_CYCLE_PARTS = 7
YEARS_PER_HOUSE = LIFE_CYCLE_PARTS

# Life matters read from each decan of a house, first to third.
HOUSE_DECAN_TOPICS = {
    1: ("Physical build, appearance", "Personality, character", "General health, vocational bent"),
    2: ("Personal income, earnings", "Material security, savings", "Values, talents"),
    3: ("Siblings, close surroundings", "Short journeys, transport", "Communication, learning"),
    4: ("Family roots, father", "Home, property", "Emotional security, later years"),
    5: ("Love, romance", "Children, creativity", "Entertainment, speculation"),
    6: ("Daily work, routines", "Health, diet", "Service, pets"),
    7: ("Marriage, spouse", "Business partnerships", "Open enemies, lawsuits"),
    8: ("Shared finances, inheritance", "Transformation, crises", "Sexuality, hidden matters"),
    9: ("Higher education, philosophy", "Long journeys, abroad", "Law, publishing"),
    10: ("Career, social standing", "Authority, mother", "Success, recognition"),
    11: ("Friends, social circle", "Hopes, goals", "Groups, communities"),
    12: ("Subconscious, hidden enemies", "Isolation, hospitals", "Spiritual growth, sacrifice"),
}


def _offset_from_cusp(longitude: float, cusp: float) -> float:
    return normalize_angle(longitude - cusp)


def _bodies_by_part(
    cusp: float, span: float, parts: int, bodies: list[BodyPosition]
) -> list[list[BodyPosition]]:
    """Bodies within `span` degrees past the cusp, bucketed by part and sorted by offset."""

    step = span / parts
    buckets: list[list[tuple[float, BodyPosition]]] = [[] for _ in range(parts)]
    for body in bodies:
        offset = _offset_from_cusp(body.longitude, cusp)
        if offset >= span:
            continue
        idx = min(int(offset // step), parts - 1)
        buckets[idx].append((offset, body))
    return [[b for _, b in sorted(bucket, key=lambda item: item[0])] for bucket in buckets]


def segment(
    frame: HouseFrame,
    bodies: Iterable[BodyPosition],
    n: int,
    rulership: str | list[str] = DEFAULT_RULERSHIP,
    birth_year: int | None = None,
) -> List[HouseSegments]:
    """
    Split all 12 houses into `n` segments (3 for decans, 7 for life-cycle years).

    Bodies are placed by their offset from each cusp, so they need not carry a
    house number. Decans are labelled with the life matters of their house.
    With n=7 and a birth year, each segment is a YearSegment labelled with the
    age it stands for (7 years per house, house 1 starting at age 0).
    """

    if n not in (DECAN_PARTS, LIFE_CYCLE_PARTS):
        raise ValueError(f"Segment count must be {DECAN_PARTS} or {LIFE_CYCLE_PARTS}, got {n}")
    ruler_table = rulers(rulership)
    body_list = list(bodies)

    result: List[HouseSegments] = []
    for house in range(1, 13):
        cusp = normalize_angle(frame.cusp(house))
        span = frame.span(house)
        step = span / n
        cusp_sign = sign_index_from_longitude(cusp)
        placed = _bodies_by_part(cusp, span, n, body_list)
        age_start = (house - 1) * YEARS_PER_HOUSE

        segments: list[DecanSegment] = []
        for k in range(n):
            start = normalize_angle(cusp + k * step)
            end = normalize_angle(cusp + (k + 1) * step)
            ruling = triplicity_sign(cusp_sign, k)
            fields = dict(
                index=k,
                start_longitude=start,
                end_longitude=end,
                span=step,
                sign_index=sign_index_from_longitude(start),
                ruling_sign=ruling,
                ruler=ruler_table[ruling],
                bodies=tuple(placed[k]),
                topic=HOUSE_DECAN_TOPICS[house][k] if n == DECAN_PARTS else "",
            )
            if birth_year is not None and n == LIFE_CYCLE_PARTS:
                age = age_start + k
                segments.append(YearSegment(age=age, calendar_year=birth_year + age, **fields))
            else:
                segments.append(DecanSegment(**fields))

        is_cycle = n == LIFE_CYCLE_PARTS
        result.append(
            HouseSegments(
                house=house,
                cusp_longitude=cusp,
                sign_index=cusp_sign,
                span=span,
                segment_span=step,
                segments=tuple(segments),
                age_start=age_start if is_cycle else None,
                age_end=age_start + YEARS_PER_HOUSE - 1 if is_cycle else None,
            )
        )
    return result
