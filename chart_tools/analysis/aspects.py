from __future__ import annotations

from itertools import combinations
from typing import Iterable, List, Tuple

from ..models import Aspect, AspectKind, BodyPosition

# Catalogue order is the tie-break: the first entry whose orb admits the
# separation wins, so a major aspect always shadows a minor one that overlaps it.
ASPECTS: Tuple[AspectKind, ...] = (
    AspectKind("conjunction", 0.0, 8.0),
    AspectKind("opposition", 180.0, 8.0),
    AspectKind("trine", 120.0, 8.0),
    AspectKind("square", 90.0, 7.0),
    AspectKind("sextile", 60.0, 6.0),
    AspectKind("semisquare", 45.0, 2.0),
    AspectKind("sesquiquadrate", 135.0, 2.0),
    AspectKind("semisextile", 30.0, 2.0),
    AspectKind("quincunx", 150.0, 2.0),
    AspectKind("quintile", 72.0, 1.0),
    AspectKind("biquintile", 144.0, 1.0),
)
MAX_ORBS = {kind.name: kind.max_orb for kind in ASPECTS}


def _shortest_distance(a: float, b: float) -> float:
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def classify_separation(
    separation: float, catalogue: Tuple[AspectKind, ...] = ASPECTS
) -> Tuple[AspectKind, float] | None:
    """Return (aspect kind, orb) for the first catalogue entry within orb, else None."""

    for kind in catalogue:
        orb = abs(separation - kind.angle)
        if orb <= kind.max_orb:
            return kind, orb
    return None


def is_applying(separation: float, relative_speed: float, aspect_angle: float) -> bool:
    """
    Whether the gap towards exactness is closing.

    Above the exact angle the pair applies when the relative speed is positive,
    at or below it when the relative speed is negative.
    """

    if separation > aspect_angle:
        return relative_speed > 0
    return relative_speed < 0


def aspect_between(
    a: BodyPosition, b: BodyPosition, catalogue: Tuple[AspectKind, ...] = ASPECTS
) -> Aspect | None:
    separation = _shortest_distance(a.longitude, b.longitude)
    match = classify_separation(separation, catalogue)
    if match is None:
        return None
    kind, orb = match
    return Aspect(
        body_a=a.name,
        body_b=b.name,
        kind=kind.name,
        angle=kind.angle,
        orb=orb,
        applying=is_applying(separation, a.speed - b.speed, kind.angle),
    )


def find_aspects(
    points: Iterable[BodyPosition], catalogue: Tuple[AspectKind, ...] = ASPECTS
) -> List[Aspect]:
    """Aspects for every unordered pair of chart points."""

    found: List[Aspect] = []
    for a, b in combinations(list(points), 2):
        aspect = aspect_between(a, b, catalogue)
        if aspect is not None:
            found.append(aspect)
    return found


def find_cross_aspects(
    moving: Iterable[BodyPosition],
    fixed: Iterable[BodyPosition],
    catalogue: Tuple[AspectKind, ...] = ASPECTS,
) -> List[Aspect]:
    """
    Aspects from transiting points to natal points.

    Natal points do not move, so application is judged from the transiting
    body's own signed speed.
    """

    fixed = list(fixed)
    found: List[Aspect] = []
    for transit in moving:
        for natal in fixed:
            separation = _shortest_distance(transit.longitude, natal.longitude)
            match = classify_separation(separation, catalogue)
            if match is None:
                continue
            kind, orb = match
            found.append(
                Aspect(
                    body_a=transit.name,
                    body_b=natal.name,
                    kind=kind.name,
                    angle=kind.angle,
                    orb=orb,
                    applying=is_applying(separation, transit.speed, kind.angle),
                )
            )
    return found
