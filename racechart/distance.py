"""Race distance, surface and track record.

The chart spells the distance out ("One And One Sixteenth Miles On The
Turf"), so the phrase is decoded back into feet and a compact label.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from racechart.exceptions import InvalidDistanceError, NoRaceDistanceFound
from racechart.models import FEET_PER_FURLONG, lookup_compact, to_furlongs
from racechart.purse import FOREIGN_CURRENCY_DISCLAIMER, PURSE_PATTERN
from racechart.timing import format_time, parse_time_millis

logger = logging.getLogger(__name__)

FEET_PER_MILE = 5280
FEET_PER_YARD = 3

DIST_SURF_RECORD_PATTERN = re.compile(
    r"^((About )?(One|Two|Three|Four|Five|Six|Seven|Eight|Nine)[\w\s]+) "
    r"On The ([A-Za-z\s]+)(\s?- Originally Scheduled For the "
    r"([A-Za-z0-9\-\s]+))?(\|Track Record: \((.+) - ([\d:\.]+) - (.+)\))?"
)

_INVALID_DISTANCE_TERMS = ("claiming price", "allowed", "non winners", "other than")

NUMERATORS = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen",
]
TENS = [
    "zero", "ten", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety",
]

_MILES_ONLY = re.compile(r"^(about)? ?([\w]+)( and ([\w ]+))? miles?$")
_FURLONGS_ONLY = re.compile(r"^(about)? ?([\w]+)( and ([\w ]+))? furlongs?$")
_YARDS_ONLY = re.compile(
    r"^(about)? ?((\w+) thousand)? ?(([\w]+) hundred ?( ?and )?([\w ]+)?)? yards?$"
)
_MILES_YARDS = re.compile(r"(about)? ?([\w]+) miles? and ([\w ]+) yards?")
_FURLONGS_YARDS = re.compile(r"(about)? ?([\w]+) furlongs? and ([\w ]+) yards?")
# the "Yards" is sometimes left off
_MISSING_YARDS = re.compile(
    r"^(about)? ?((\w+) thousand)? ?(([\w]+) hundred ?( ?and )?([\w ]+)?)?$"
)

# denominator -> (feet per unit, compact suffix)
_MILE_FRACTIONS = {
    "sixteenth": (330, "/16m"),
    "sixteenths": (330, "/16m"),
    "eighth": (660, "/8m"),
    "eighths": (660, "/8m"),
    "fourth": (1320, "/4m"),
    "fourths": (1320, "/4m"),
    "half": (2640, "/2m"),
}
_FURLONG_FRACTIONS = {
    "fourth": (165, "/4f"),
    "fourths": (165, "/4f"),
    "half": (330, "/2f"),
}


class Surface(str, Enum):
    DIRT = "Dirt"
    TURF = "Turf"
    SYNTHETIC = "Synthetic"


class Format(str, Enum):
    FLAT = "Flat"
    JUMPS = "Jumps"


# chart course text -> (surface, course, format)
SURFACE_COURSE_FORMATS: dict[str, tuple[Surface, str, Format]] = {
    "Dirt": (Surface.DIRT, "Dirt", Format.FLAT),
    "Turf": (Surface.TURF, "Turf", Format.FLAT),
    "All Weather Track": (Surface.SYNTHETIC, "All Weather Track", Format.FLAT),
    "Inner track": (Surface.DIRT, "Inner Track", Format.FLAT),
    "Inner turf": (Surface.TURF, "Inner Turf", Format.FLAT),
    "Hurdle": (Surface.TURF, "Hurdle", Format.JUMPS),
    "Downhill turf": (Surface.TURF, "Downhill Turf", Format.FLAT),
    "Outer turf": (Surface.TURF, "Outer Turf", Format.FLAT),
    "Timber": (Surface.TURF, "Timber", Format.JUMPS),
    "Steeplechase": (Surface.TURF, "Steeplechase", Format.JUMPS),
    "Hunt on turf": (Surface.TURF, "Hunt On Turf", Format.JUMPS),
}


@dataclass
class RaceDistance:
    text: str
    compact: Optional[str]
    exact: bool
    feet: int
    run_up: Optional[int] = None
    temp_rail: Optional[int] = None

    @property
    def furlongs(self) -> float:
        return to_furlongs(self.feet)


@dataclass(frozen=True)
class TrackRecord:
    holder: str
    time: Optional[str]
    millis: Optional[int]
    race_date: Optional[date]


@dataclass
class DistanceSurfaceTrackRecord:
    distance: RaceDistance
    surface: Optional[Surface]
    course: Optional[str]
    format: Optional[Format]
    scheduled_surface: Optional[Surface] = None
    scheduled_course: Optional[str] = None
    track_record: Optional[TrackRecord] = None
    track_condition: Optional[str] = None

    @property
    def off_turf(self) -> bool:
        return self.scheduled_surface is not None and self.scheduled_surface != self.surface


# ── Block location ──────────────────────────────────────────────────────────


def is_valid_distance_text(text: str) -> bool:
    """Conditions text can look like a distance ("Six Furlongs On The ... Claiming Price")."""
    lowered = text.lower()
    if "track record" in lowered:
        return True
    return not any(term in lowered for term in _INVALID_DISTANCE_TERMS)


def find_distance_line(texts: Iterable[str]) -> Optional[int]:
    for index, text in enumerate(texts):
        if DIST_SURF_RECORD_PATTERN.search(text) and is_valid_distance_text(text):
            return index
    return None


def parse_distance_surface_track_record(texts: list[str]) -> DistanceSurfaceTrackRecord:
    """Locate and parse the distance block; raises NoRaceDistanceFound."""
    start = find_distance_line(texts)
    if start is None:
        raise NoRaceDistanceFound("")

    # the track record can wrap onto the following lines
    block = [texts[start]]
    for text in texts[start + 1:]:
        if PURSE_PATTERN.search(text) or FOREIGN_CURRENCY_DISCLAIMER.search(text):
            break
        block.append(text)
    joined = " ".join(block)

    parsed = parse_distance_surface(joined)
    if parsed is None:
        raise NoRaceDistanceFound(joined)
    return parsed


def parse_distance_surface(text: str) -> Optional[DistanceSurfaceTrackRecord]:
    m = DIST_SURF_RECORD_PATTERN.search(text)
    if not m:
        return None

    surface, course, course_format = _surface_course_format(m.group(4).strip())

    scheduled_surface = scheduled_course = None
    if m.group(5) is not None and m.group(6) and m.group(6).strip():
        scheduled = SURFACE_COURSE_FORMATS.get(m.group(6).strip())
        if scheduled is not None:
            scheduled_surface, scheduled_course, _ = scheduled
        else:
            logger.warning(f"Unrecognised scheduled course: {m.group(6).strip()}")

    track_record = None
    if m.group(7) is not None:
        millis = parse_time_millis(m.group(9))
        track_record = TrackRecord(
            holder=m.group(8),
            time=format_time(millis),
            millis=millis,
            race_date=parse_chart_date(m.group(10)),
        )

    return DistanceSurfaceTrackRecord(
        distance=parse_race_distance(m.group(1)),
        surface=surface,
        course=course,
        format=course_format,
        scheduled_surface=scheduled_surface,
        scheduled_course=scheduled_course,
        track_record=track_record,
    )


def _surface_course_format(course: str) -> tuple[Optional[Surface], Optional[str], Optional[Format]]:
    found = SURFACE_COURSE_FORMATS.get(course)
    if found is None:
        logger.warning(f"Unrecognised course: {course}")
        return None, None, None
    return found


def parse_chart_date(text: Optional[str]) -> Optional[date]:
    """Dates are printed "May 7, 2016" (sometimes abbreviated "Jan 1, 2000")."""
    if not text:
        return None
    for fmt in ("%B %d, %Y", "%b %d, %Y", "%m/%d/%Y"):
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    logger.warning(f"Unable to parse chart date: {text}")
    return None


# ── Distance decoding ───────────────────────────────────────────────────────


def parse_race_distance(description: str) -> RaceDistance:
    """Decode a spelled-out distance into feet and a compact label."""
    lowered = description.lower().strip()

    m = _MILES_ONLY.search(lowered)
    if m:
        return _for_miles(description, m)
    m = _FURLONGS_ONLY.search(lowered)
    if m:
        return _for_furlongs(description, m)
    m = _YARDS_ONLY.search(lowered)
    if m:
        return _for_yards(description, m)
    m = _MILES_YARDS.search(lowered)
    if m:
        return _for_whole_and_yards(description, m, FEET_PER_MILE, "m")
    m = _FURLONGS_YARDS.search(lowered)
    if m:
        return _for_whole_and_yards(description, m, FEET_PER_FURLONG, "f")
    m = _MISSING_YARDS.search(lowered)
    if m:
        return _for_yards(description, m)

    raise InvalidDistanceError(f"Unable to parse race distance from text: {description}")


def _index(word: str, table: list[str]) -> int:
    try:
        return table.index(word)
    except ValueError as e:
        raise InvalidDistanceError(f"Unable to decode distance term: {word}") from e


def _abt(exact: bool) -> str:
    return "" if exact else "Abt "


def _for_fraction(m: re.Match, unit_feet: int, fractions: dict, unit: str) -> tuple[bool, int, str]:
    exact = m.group(1) is None
    feet = 0
    suffix = unit

    fraction = m.group(4)
    if fraction:
        parts = fraction.split(" ")
        if len(parts) != 2 or parts[1] not in fractions:
            raise InvalidDistanceError(f"Unable to parse a fractional denominator from text: {fraction}")
        per_unit, suffix = fractions[parts[1]]
        numerator = _index(parts[0], NUMERATORS)
        feet = numerator * per_unit
        suffix = f" {numerator}{suffix}"

    whole = _index(m.group(2), NUMERATORS)
    feet += whole * unit_feet
    return exact, feet, f"{_abt(exact)}{whole}{suffix}"


def _for_miles(description: str, m: re.Match) -> RaceDistance:
    exact, feet, compact = _for_fraction(m, FEET_PER_MILE, _MILE_FRACTIONS, "m")
    return RaceDistance(description, compact, exact, feet)


def _for_furlongs(description: str, m: re.Match) -> RaceDistance:
    exact, feet, compact = _for_fraction(m, FEET_PER_FURLONG, _FURLONG_FRACTIONS, "f")
    return RaceDistance(description, compact, exact, feet)


def _for_yards(description: str, m: re.Match) -> RaceDistance:
    exact = m.group(1) is None
    feet = 0

    yards = m.group(7)
    if yards:
        yards = yards.strip()
        words = yards.split(" ")
        if len(words) == 2:
            feet = _index(words[0], TENS) * 10 * FEET_PER_YARD + _index(words[1], NUMERATORS) * FEET_PER_YARD
        elif yards in TENS:
            feet = TENS.index(yards) * 10 * FEET_PER_YARD
        else:
            feet = _index(yards, NUMERATORS) * FEET_PER_YARD

    if m.group(3) is not None:
        feet += _index(m.group(3), NUMERATORS) * 3000
    if m.group(5) is not None:
        feet += _index(m.group(5), NUMERATORS) * 300

    if feet <= 0:
        raise InvalidDistanceError(f"Unable to parse race distance from text: {description}")

    return RaceDistance(description, f"{_abt(exact)}{feet // FEET_PER_YARD}y", exact, feet)


def _for_whole_and_yards(description: str, m: re.Match, unit_feet: int, unit: str) -> RaceDistance:
    exact = m.group(1) is None
    yard_feet = _index(m.group(3).strip(), TENS) * 10 * FEET_PER_YARD
    whole = _index(m.group(2), NUMERATORS)
    feet = whole * unit_feet + yard_feet
    compact = f"{_abt(exact)}{whole}{unit} {yard_feet // FEET_PER_YARD}y"
    return RaceDistance(description, compact, exact, feet)


def compact_for_feet(feet: int) -> str:
    """Standard label for a distance, else furlongs to two places."""
    return lookup_compact(feet) or f"{feet / FEET_PER_FURLONG:.2f}f"
