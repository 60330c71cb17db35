"""Domain records shared across the chart parsing pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional

from racechart.exceptions import NoMatchingBreed, PointOfCallNotFound

if TYPE_CHECKING:
    from racechart.wagering import WinPlaceShowPayoff

FEET_PER_FURLONG = 660

# "1A", "1X" and "1" all bet as entry "1"
_ENTRY_SUFFIX = re.compile(r"^(\d+)[A-Z]$")


def entry_program(program: Optional[str]) -> Optional[str]:
    """Strip a coupled/field entry's trailing letter from a program number."""
    if program is None:
        return None
    m = _ENTRY_SUFFIX.match(program)
    return m.group(1) if m else program


def to_furlongs(feet: Optional[int]) -> Optional[float]:
    return round(feet / FEET_PER_FURLONG, 2) if feet is not None else None


# Compact labels of the standard race distances, by feet
COMPACTS: dict[int, str] = {
    450: "150y",
    660: "1f",
    1320: "2f",
    1650: "2 1/2f",
    1980: "3f",
    2145: "3 1/4f",
    2310: "3 1/2f",
    2475: "3 3/4f",
    2640: "4f",
    2970: "4 1/2f",
    3000: "1000y",
    3300: "5f",
    3465: "5 1/4f",
    3630: "5 1/2f",
    3960: "6f",
    4290: "6 1/2f",
    4620: "7f",
    4950: "7 1/2f",
    5280: "1m",
    5370: "1m 30y",
    5400: "1m 40y",
    5490: "1m 70y",
    5610: "1 1/16m",
    5940: "1 1/8m",
    6270: "1 3/16m",
    6600: "1 1/4m",
    6930: "1 5/16m",
    7260: "1 3/8m",
    7590: "1 7/16m",
    7920: "1 1/2m",
    8250: "1 9/16m",
    8580: "1 5/8m",
    8910: "1 11/16m",
    9240: "1 3/4m",
    9570: "1 13/16m",
    9900: "1 7/8m",
    10230: "1 15/16m",
    10560: "2m",
    10680: "2m 40y",
    10770: "2m 70y",
    10890: "2 1/16m",
    11220: "2 1/8m",
    11550: "2 3/16m",
    11880: "2 1/4m",
    12210: "2 5/16m",
    15840: "3m",
    17160: "3 1/4m",
    18480: "3 1/2m",
    21120: "4m",
}


def lookup_compact(feet: Optional[int]) -> Optional[str]:
    return COMPACTS.get(feet) if feet is not None else None


# ── Breeds and tracks ───────────────────────────────────────────────────────


class Breed(str, Enum):
    """Breed of the race, as printed after the race type on the chart."""

    THOROUGHBRED = "Thoroughbred"
    QUARTER_HORSE = "Quarter Horse"
    ARABIAN = "Arabian"
    MIXED = "Mixed"

    @property
    def code(self) -> str:
        return _BREED_CODES[self]

    @classmethod
    def for_chart_value(cls, text: Optional[str]) -> "Breed":
        for breed in cls:
            if breed.value == text:
                return breed
        raise NoMatchingBreed(str(text))

    @classmethod
    def for_code(cls, code: Optional[str]) -> "Breed":
        for breed, breed_code in _BREED_CODES.items():
            if breed_code == code:
                return breed
        raise NoMatchingBreed(str(code))

    @property
    def records_individual_times(self) -> bool:
        """Quarter Horse and Mixed charts time every starter rather than the leader."""
        return self in (Breed.QUARTER_HORSE, Breed.MIXED)


_BREED_CODES = {
    Breed.THOROUGHBRED: "TB",
    Breed.QUARTER_HORSE: "QH",
    Breed.ARABIAN: "ARAB",
    Breed.MIXED: "MIX",
}


@dataclass(frozen=True)
class Track:
    code: str
    name: str
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    canonical: Optional[str] = None  # original code when a track changed or shares codes

    @property
    def canonical_code(self) -> str:
        return self.canonical or self.code


# ── Participants ────────────────────────────────────────────────────────────


@dataclass
class Horse:
    name: str
    color: Optional[str] = None
    sex: Optional[str] = None
    sire: Optional[str] = None
    dam: Optional[str] = None
    dam_sire: Optional[str] = None
    foaling_date: Optional[date] = None
    foaling_location: Optional[str] = None
    breeder: Optional[str] = None


@dataclass
class Jockey:
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


@dataclass
class Trainer:
    program: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


@dataclass
class Owner:
    program: Optional[str]
    name: str


@dataclass
class Weight:
    carried: Optional[int]
    text: str


@dataclass
class MedicationEquipment:
    medication: Optional[str] = None
    equipment: Optional[str] = None


@dataclass
class LastRaced:
    """A starter's previous race, e.g. "13Dec16 8AQU3"; all None for a first-time starter."""

    text: str
    race_date: Optional[date] = None
    race_number: Optional[int] = None
    track_code: Optional[str] = None
    position: Optional[int] = None
    days_since: Optional[int] = None


@dataclass
class Claim:
    price: Optional[int]
    claimed: bool = False
    new_trainer_name: Optional[str] = None
    new_owner_name: Optional[str] = None


# ── Points of call ──────────────────────────────────────────────────────────


@dataclass
class Lengths:
    """Lengths as printed on the chart ("1 1/2", "Hd") and as a number."""

    text: str
    lengths: Optional[float]


@dataclass
class RelativePosition:
    position: Optional[int]
    lengths_ahead: Optional[Lengths] = None
    total_lengths_behind: Optional[Lengths] = None


@dataclass
class PointOfCall:
    point: int
    text: str
    compact: Optional[str] = None
    feet: Optional[int] = None
    relative_position: Optional[RelativePosition] = None

    @property
    def furlongs(self) -> Optional[float]:
        return to_furlongs(self.feet)

    @property
    def has_known_distance(self) -> bool:
        return self.feet is not None

    @property
    def has_lengths(self) -> bool:
        return self.relative_position is not None and self.relative_position.lengths_ahead is not None


STRETCH_POINT = 5
FINISH_POINT = 6


@dataclass
class PointsOfCall:
    """The ordered checkpoints charted for races from `floor` feet upwards."""

    distance: str
    floor: int
    calls: list[PointOfCall] = field(default_factory=list)

    def call_at(self, point: int) -> Optional[PointOfCall]:
        for call in self.calls:
            if call.point == point:
                return call
        return None

    @property
    def stretch(self) -> Optional[PointOfCall]:
        return self.call_at(STRETCH_POINT)

    @property
    def finish(self) -> Optional[PointOfCall]:
        return self.call_at(FINISH_POINT)


# ── Times ───────────────────────────────────────────────────────────────────


@dataclass
class Fractional:
    """Elapsed time at a checkpoint."""

    point: int
    text: str
    compact: Optional[str]
    feet: Optional[int]
    time: Optional[str] = None
    millis: Optional[int] = None

    @property
    def furlongs(self) -> Optional[float]:
        return to_furlongs(self.feet)


@dataclass
class Split:
    """Time taken between two consecutive fractionals."""

    point: int
    text: str
    compact: Optional[str]
    feet: Optional[int]
    time: Optional[str] = None
    millis: Optional[int] = None
    from_text: Optional[str] = None
    to_text: Optional[str] = None

    @property
    def furlongs(self) -> Optional[float]:
        return to_furlongs(self.feet)


class RatingKind(str, Enum):
    GENERIC = "generic"
    AQHA_SPEED_INDEX = "aqha_speed_index"


@dataclass(frozen=True)
class Rating:
    """A speed figure or class rating; `kind` says which fields are meaningful."""

    kind: RatingKind
    name: str
    text: str
    value: Optional[float]
    extra: Optional[str] = None
    millis: Optional[int] = None  # AQHA speed index: the starter's individual time

    @classmethod
    def aqha_speed_index(cls, value: int, millis: Optional[int]) -> "Rating":
        return cls(
            kind=RatingKind.AQHA_SPEED_INDEX,
            name="AQHA Speed Index",
            text=str(value),
            value=float(value),
            millis=millis,
        )


# ── Ancillary chart sections ────────────────────────────────────────────────


@dataclass
class Cancellation:
    cancelled: bool = False
    reason: Optional[str] = None


@dataclass
class Wind:
    speed: Optional[int]
    direction: Optional[str] = None


@dataclass
class Weather:
    text: Optional[str]
    wind: Optional[Wind] = None


@dataclass
class PostTimeStartCommentsTimer:
    post_time: Optional[str]
    start_comments: Optional[str] = None
    timer: Optional[str] = None


@dataclass
class Winner:
    horse_name: str
    color: Optional[str] = None
    sex: Optional[str] = None
    sire: Optional[str] = None
    dam: Optional[str] = None
    dam_sire: Optional[str] = None
    foaling_date: Optional[date] = None
    foaling_location: Optional[str] = None
    breeder: Optional[str] = None


@dataclass
class ClaimingPrice:
    program: Optional[str]
    horse_name: Optional[str]
    price: int


@dataclass
class ClaimedHorse:
    horse_name: str
    new_trainer_name: Optional[str]
    new_owner_name: Optional[str]


@dataclass
class Scratch:
    horse_name: str
    reason: Optional[str] = None


@dataclass
class Disqualification:
    program: Optional[str]
    horse_name: Optional[str]
    original_position: int
    new_position: int


# ── Starter ─────────────────────────────────────────────────────────────────


@dataclass
class Starter:
    """A participant in the race, built from its running line then reconciled in place."""

    program: Optional[str]
    horse: Horse
    jockey: Optional[Jockey] = None
    last_raced: Optional[LastRaced] = None
    weight: Optional[Weight] = None
    medication_equipment: Optional[MedicationEquipment] = None
    post_position: Optional[int] = None
    odds: Optional[float] = None
    favorite: bool = False
    comments: Optional[str] = None
    individual_time_millis: Optional[int] = None
    points_of_call: list[PointOfCall] = field(default_factory=list)
    ratings: list[Rating] = field(default_factory=list)

    # populated by reconciliation
    entry: bool = False
    trainer: Optional[Trainer] = None
    owner: Optional[Owner] = None
    claim: Optional[Claim] = None
    official_position: Optional[int] = None
    disqualified: bool = False
    position_dead_heat: bool = False
    wagering_position: Optional[int] = None
    win_place_show_payoff: Optional[WinPlaceShowPayoff] = None
    choice: Optional[int] = None
    fractionals: list[Fractional] = field(default_factory=list)
    splits: list[Split] = field(default_factory=list)

    @property
    def entry_program(self) -> Optional[str]:
        return entry_program(self.program)

    @property
    def horse_name(self) -> str:
        return self.horse.name

    @property
    def finish_position(self) -> Optional[int]:
        """Unofficial position at the last point of call."""
        if self.points_of_call:
            relative = self.points_of_call[-1].relative_position
            return relative.position if relative is not None else None
        return None

    @property
    def placing(self) -> Optional[int]:
        """Official position, falling back to the finish position."""
        return self.official_position if self.official_position is not None else self.finish_position

    @property
    def is_winner(self) -> bool:
        return self.placing == 1

    @property
    def finished_first(self) -> bool:
        # may have passed the post first and still been disqualified
        return self.finish_position == 1

    @property
    def finish_fractional(self) -> Optional[Fractional]:
        return self.fractionals[-1] if self.fractionals else None

    def matches(self, program: Optional[str], horse_name: Optional[str]) -> bool:
        """Match by program number; horse name only when the record carries no program."""
        if program is not None:
            return program == self.program
        return horse_name is not None and horse_name == self.horse.name

    def point_of_call_at(self, feet: Optional[int]) -> Optional[PointOfCall]:
        if feet is None:
            return None
        for call in self.points_of_call:
            if call.feet == feet:
                return call
        return None

    def point_of_call_named(self, text: str) -> Optional[PointOfCall]:
        for call in self.points_of_call:
            if call.text == text:
                return call
        return None

    def set_total_lengths_behind(self, column: str, preview: RelativePosition) -> None:
        """Record the total lengths behind the leader from the running line preview."""
        call = self.point_of_call_named(column)
        if call is None:
            raise PointOfCallNotFound(column)
        if call.relative_position is None:
            return
        position = preview.position
        lengths = preview.total_lengths_behind
        if position is not None and position != 1 and lengths is not None and lengths.lengths is not None:
            call.relative_position.total_lengths_behind = Lengths(lengths.text, lengths.lengths)

    def set_payoff(self, payoff: WinPlaceShowPayoff) -> None:
        self.win_place_show_payoff = payoff
        self.wagering_position = payoff.wagering_position

    def apply_disqualification(self, dq: Disqualification) -> None:
        self.disqualified = True
        self.official_position = dq.new_position

    def update_winner(self, winner: Winner) -> None:
        """A winner's chart entry carries breeding details the running line lacks."""
        self.horse.color = winner.color
        self.horse.sex = winner.sex
        self.horse.sire = winner.sire
        self.horse.dam = winner.dam
        self.horse.dam_sire = winner.dam_sire
        self.horse.foaling_date = winner.foaling_date
        self.horse.foaling_location = winner.foaling_location
        self.horse.breeder = winner.breeder
