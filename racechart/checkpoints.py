"""Canonical points of call and fractional checkpoints by breed and distance.

Each template applies from its floor distance (in feet) up to the next
floor. Templates are shared read-only; callers get deep copies because
starters fill in their own positions and distances.
"""

import copy
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from racechart.floor_map import FloorMap
from racechart.models import (
    FINISH_POINT,
    STRETCH_POINT,
    Breed,
    Fractional,
    PointOfCall,
    PointsOfCall,
)

logger = logging.getLogger(__name__)


def _start() -> PointOfCall:
    return PointOfCall(1, "Start")


def _stretch(text: str = "Str") -> PointOfCall:
    return PointOfCall(STRETCH_POINT, text)


def _finish() -> PointOfCall:
    return PointOfCall(FINISH_POINT, "Fin")


def _call(point: int, text: str, compact: str, feet: int) -> PointOfCall:
    return PointOfCall(point, text, compact, feet)


# ── Points of call ──────────────────────────────────────────────────────────

_THOROUGHBRED_POINTS_OF_CALL = [
    PointsOfCall("Up to 4 1/2 furlongs", 0, [
        _start(), _call(3, "1/4", "2f", 1320), _stretch(), _finish(),
    ]),
    PointsOfCall("5 furlongs", 3300, [
        _start(), _call(2, "3/16", "1 1/2f", 990), _call(3, "3/8", "3f", 1980), _stretch(), _finish(),
    ]),
    PointsOfCall("5 1/2 furlongs", 3630, [
        _start(), _call(2, "1/4", "2f", 1320), _call(3, "3/8", "3f", 1980), _stretch(), _finish(),
    ]),
    PointsOfCall("6 to 7 1/2 furlongs", 3960, [
        _start(), _call(2, "1/4", "2f", 1320), _call(3, "1/2", "4f", 2640), _stretch(), _finish(),
    ]),
    PointsOfCall("1 to 1 3/16 miles", 5280, [
        _start(), _call(2, "1/4", "2f", 1320), _call(3, "1/2", "4f", 2640),
        _call(4, "3/4", "6f", 3960), _stretch(), _finish(),
    ]),
    PointsOfCall("1 1/4 to 1 7/16 miles", 6600, [
        _start(), _call(2, "1/2", "4f", 2640), _call(3, "3/4", "6f", 3960),
        _call(4, "1m", "1m", 5280), _stretch(), _finish(),
    ]),
    PointsOfCall("1 1/2 miles and over", 7920, [
        _start(), _call(2, "1/2", "4f", 2640), _call(3, "1m", "1m", 5280),
        _call(4, "1 1/4m", "1 1/4m", 6600), _stretch(), _finish(),
    ]),
]

_QUARTER_HORSE_POINTS_OF_CALL = [
    PointsOfCall("Up to 500 yards", 0, [
        _start(), _stretch(), _finish(),
    ]),
    PointsOfCall("550 to 870 yards", 1650, [
        _start(), PointOfCall(4, "Str1"), _stretch("Str2"), _finish(),
    ]),
    PointsOfCall("880 yards and over", 2640, [
        _start(), _call(2, "1/4", "2f", 1320), PointOfCall(4, "Str1"), _stretch("Str2"), _finish(),
    ]),
]


# ── Fractionals ─────────────────────────────────────────────────────────────


def _fractional(point: int, text: str, compact: str, feet: int) -> Fractional:
    return Fractional(point, text, compact, feet)


def _fin() -> Fractional:
    return Fractional(FINISH_POINT, "Fin", None, None)


_QUARTER = _fractional(1, "1/4", "2f", 1320)
_HALF = _fractional(2, "1/2", "4f", 2640)
_FIVE_EIGHTHS = _fractional(3, "5/8", "5f", 3300)
_THREE_QUARTERS = _fractional(3, "3/4", "6f", 3960)
_MILE = _fractional(4, "1m", "1m", 5280)
_MILE_AND_QUARTER = _fractional(5, "1 1/4m", "1 1/4m", 6600)

_THOROUGHBRED_FRACTIONALS = [
    (0, [_QUARTER, _fin()]),
    (2970, [_QUARTER, _HALF, _fin()]),
    (3630, [_QUARTER, _HALF, _FIVE_EIGHTHS, _fin()]),
    (4290, [_QUARTER, _HALF, _THREE_QUARTERS, _fin()]),
    (5281, [_QUARTER, _HALF, _THREE_QUARTERS, _MILE, _fin()]),
    (7920, [_QUARTER, _HALF, _THREE_QUARTERS, _MILE, _MILE_AND_QUARTER, _fin()]),
]

# every Quarter Horse starter is timed individually
_QUARTER_HORSE_FRACTIONALS: list[tuple[int, list[Fractional]]] = [(0, [])]


@dataclass(frozen=True)
class CheckpointRegistry:
    """Read-only per-breed checkpoint templates."""

    points_of_call: dict[Breed, FloorMap[PointsOfCall]]
    fractionals: dict[Breed, FloorMap[list[Fractional]]]

    @classmethod
    def default(cls) -> "CheckpointRegistry":
        thoroughbred_calls = FloorMap((p.floor, p) for p in _THOROUGHBRED_POINTS_OF_CALL)
        quarter_horse_calls = FloorMap((p.floor, p) for p in _QUARTER_HORSE_POINTS_OF_CALL)
        thoroughbred_fractionals = FloorMap(_THOROUGHBRED_FRACTIONALS)
        quarter_horse_fractionals = FloorMap(_QUARTER_HORSE_FRACTIONALS)
        return cls(
            points_of_call={
                Breed.THOROUGHBRED: thoroughbred_calls,
                Breed.ARABIAN: thoroughbred_calls,
                Breed.QUARTER_HORSE: quarter_horse_calls,
                Breed.MIXED: quarter_horse_calls,
            },
            fractionals={
                Breed.THOROUGHBRED: thoroughbred_fractionals,
                Breed.ARABIAN: thoroughbred_fractionals,
                Breed.QUARTER_HORSE: quarter_horse_fractionals,
                Breed.MIXED: quarter_horse_fractionals,
            },
        )

    def resolve(self, breed: Breed, feet: int) -> Optional[PointsOfCall]:
        """Points of call for the greatest registered floor <= feet, as a private copy."""
        template = self.points_of_call[breed].floor(feet)
        return copy.deepcopy(template) if template is not None else None

    def resolve_fractionals(
        self, breed: Breed, feet: int, compact: Optional[str]
    ) -> list[Fractional]:
        """Fractional checkpoints for a race; the finish takes the race distance."""
        template = self.fractionals[breed].floor(feet)
        if not template:
            return []
        fractionals = copy.deepcopy(template)
        finish = fractionals[-1]
        if finish.feet is None:
            finish.feet = feet
            finish.compact = compact
        return fractionals


@lru_cache
def get_checkpoint_registry() -> CheckpointRegistry:
    return CheckpointRegistry.default()
