from __future__ import annotations

from .aspects import ASPECTS, classify_separation, find_aspects, find_cross_aspects, is_applying
from .segments import segment
from .signs import SIGNS, decan_sign_for_longitude, sign_index_from_longitude

__all__ = [
    "ASPECTS",
    "SIGNS",
    "classify_separation",
    "decan_sign_for_longitude",
    "find_aspects",
    "find_cross_aspects",
    "is_applying",
    "segment",
    "sign_index_from_longitude",
]
