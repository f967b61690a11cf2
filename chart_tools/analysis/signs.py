from __future__ import annotations

from typing import Dict, Tuple

from ..models import normalize_angle

SIGNS = [
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
]

SIGN_SYMBOLS = {
    "Aries": "♈",
    "Taurus": "♉",
    "Gemini": "♊",
    "Cancer": "♋",
    "Leo": "♌",
    "Virgo": "♍",
    "Libra": "♎",
    "Scorpio": "♏",
    "Sagittarius": "♐",
    "Capricorn": "♑",
    "Aquarius": "♒",
    "Pisces": "♓",
}

# Signs sharing an element, in zodiacal order, 120° apart.
TRIPLICITIES: Dict[str, Tuple[int, int, int]] = {
    "fire": (0, 4, 8),
    "earth": (1, 5, 9),
    "air": (2, 6, 10),
    "water": (3, 7, 11),
}

CLASSICAL_RULERS = [
    "Mars",
    "Venus",
    "Mercury",
    "Moon",
    "Sun",
    "Mercury",
    "Venus",
    "Mars",
    "Jupiter",
    "Saturn",
    "Saturn",
    "Jupiter",
]

MODERN_RULERS = list(CLASSICAL_RULERS)
MODERN_RULERS[7] = "Pluto"  # Scorpio
MODERN_RULERS[10] = "Uranus"  # Aquarius
MODERN_RULERS[11] = "Neptune"  # Pisces

MODERN_CHIRON_RULERS = list(MODERN_RULERS)
MODERN_CHIRON_RULERS[5] = "Chiron"  # Virgo

RULERSHIPS: Dict[str, list[str]] = {
    "classical": CLASSICAL_RULERS,
    "modern": MODERN_RULERS,
    "modern_chiron": MODERN_CHIRON_RULERS,
}
DEFAULT_RULERSHIP = "modern_chiron"


def sign_index_from_longitude(longitude: float) -> int:
    return int(normalize_angle(longitude) // 30) % 12


def degree_in_sign(longitude: float) -> float:
    return normalize_angle(longitude) % 30.0


def shortest_angle(angle: float) -> float:
    """Normalize to [-180, 180]."""

    a = normalize_angle(angle)
    if a > 180:
        a -= 360
    return a


def element_for_sign(sign_idx: int) -> str:
    for element, members in TRIPLICITIES.items():
        if sign_idx % 12 in members:
            return element
    raise ValueError(f"Sign index out of range: {sign_idx}")


def triplicity_sign(sign_idx: int, step: int) -> int:
    """The sign `step` places further round the triplicity of `sign_idx`."""

    cycle = TRIPLICITIES[element_for_sign(sign_idx)]
    return cycle[(cycle.index(sign_idx % 12) + step) % 3]


def rulers(table: str | list[str] = DEFAULT_RULERSHIP) -> list[str]:
    """Resolve a rulership table by name into a fresh list; a 12-entry list is copied."""

    if isinstance(table, str):
        try:
            return list(RULERSHIPS[table])
        except KeyError:
            raise ValueError(
                f"Unknown rulership table {table!r}; expected one of {sorted(RULERSHIPS)}"
            ) from None
    if len(table) != 12:
        raise ValueError("A rulership table needs one ruler per sign")
    return list(table)


def decan_sign_for_longitude(longitude: float) -> int:
    """Sign ruling the 10° band a longitude falls in, counted through its triplicity."""

    band = int(degree_in_sign(longitude) // 10)
    return triplicity_sign(sign_index_from_longitude(longitude), band)
