"""Starters from the running-line grid.

The running-line header names its columns ("Last Raced|Pgm|Horse Name
(Jockey)|Wgt|M/E|PP|Start|1/4|1/2|Str|Fin|Odds|Comments"); every column not
in the fixed set is a point of call, matched positionally to the breed's
checkpoint template for the race distance.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from racechart.checkpoints import CheckpointRegistry
from racechart.distance import RaceDistance, compact_for_feet
from racechart.exceptions import InvalidPointsOfCall
from racechart.glyphs import Glyph, line_text
from racechart.grid import ColumnRange, Row, assign_row, cell_text, column_floors, split_columns
from racechart.lines import Line
from racechart.models import (
    FEET_PER_FURLONG,
    Breed,
    Horse,
    Jockey,
    LastRaced,
    Lengths,
    MedicationEquipment,
    PointsOfCall,
    Rating,
    RelativePosition,
    Starter,
    Weight,
)
from racechart.timing import parse_time_millis

logger = logging.getLogger(__name__)

LAST_RACED = "LastRaced"
PROGRAM = "Pgm"
HORSE_JOCKEY = "HorseName(Jockey)"
WEIGHT = "Wgt"
POST_POSITION = "PP"
ODDS = "Odds"
INDIVIDUAL_TIME = "Ind.Time"
SPEED_INDEX = "Sp.In."
MEDICATION_EQUIPMENT = "M/E"
COMMENTS = "Comments"

NAMED_COLUMNS = {
    LAST_RACED, PROGRAM, HORSE_JOCKEY, WEIGHT, POST_POSITION,
    ODDS, INDIVIDUAL_TIME, SPEED_INDEX, MEDICATION_EQUIPMENT, COMMENTS,
}

# lines printed after the starters, inside the running-line section
TRAILER_PREFIXES = ("Fractional Times:", "Final Time:", "Split Times:", "Run-Up:")

_LAST_RACED = re.compile(r"^(\d{1,2}[A-Z][a-z]{2}\d{2})\s*(\d{1,2})([A-Z]+)(\d{1,2})?$")
_HORSE_JOCKEY = re.compile(r"^(.+?)\s*\((.+)\)$")
_WEIGHT = re.compile(r"^(\d+)")
_POST_POSITION_NOISE = re.compile(r"\||\s")

_LENGTH_WORDS = {
    "nose": 0.05,
    "ns": 0.05,
    "head": 0.1,
    "hd": 0.1,
    "neck": 0.25,
    "nk": 0.25,
}
_VULGAR_FRACTIONS = {"¼": 0.25, "½": 0.5, "¾": 0.75}
_FRACTION = re.compile(r"^(\d+)/(\d+)$")


@dataclass(frozen=True)
class RunningLineGrid:
    """The running-line section split into its header columns and starter rows."""

    columns: dict[str, ColumnRange]
    rows: list[Line]
    trailer: list[Line]

    @property
    def point_of_call_columns(self) -> list[str]:
        return [name for name in self.columns if name not in NAMED_COLUMNS]


def split_running_lines(section: Sequence[Line]) -> Optional[RunningLineGrid]:
    """Header, starter rows and trailing timing lines; None when there is no section."""
    if not section:
        return None
    header, *rest = section
    rows: list[Line] = []
    trailer: list[Line] = []
    for line in rest:
        text = line_text(line)
        if text.startswith(TRAILER_PREFIXES) or trailer:
            trailer.append(line)
        else:
            rows.append(line)
    return RunningLineGrid(columns=split_columns(header), rows=rows, trailer=trailer)


# ── Column parsers ──────────────────────────────────────────────────────────


def parse_last_raced(text: str, race_date: Optional[date]) -> LastRaced:
    """"13Dec16 8AQU3" -> date, race 8 at AQU, finished 3rd; "---" for a first-time starter."""
    m = _LAST_RACED.match(text.strip())
    if not m:
        return LastRaced(text=text)
    try:
        last_date = datetime.strptime(m.group(1), "%d%b%y").date()
    except ValueError:
        logger.warning(f"Unable to parse last raced date: {text}")
        return LastRaced(text=text)
    return LastRaced(
        text=text,
        race_date=last_date,
        race_number=int(m.group(2)),
        track_code=m.group(3),
        position=int(m.group(4)) if m.group(4) else None,
        days_since=(race_date - last_date).days if race_date else None,
    )


def parse_horse_jockey(text: str) -> tuple[Horse, Optional[Jockey]]:
    """"Tiz the Law (Franco, Manuel)" -> horse and jockey."""
    m = _HORSE_JOCKEY.match(text.strip())
    if not m:
        return Horse(name=text.strip()), None
    last, _, first = m.group(2).partition(",")
    return Horse(name=m.group(1).strip()), Jockey(first_name=first.strip() or None, last_name=last.strip())


def parse_weight(text: str) -> Optional[Weight]:
    if not text:
        return None
    m = _WEIGHT.match(text)
    return Weight(carried=int(m.group(1)) if m else None, text=text)


def parse_medication_equipment(text: str) -> Optional[MedicationEquipment]:
    """Medication codes are upper case ("L"), equipment lower case ("bf")."""
    letters = [c for c in text if c.isalpha()]
    if not letters:
        return None
    medication = "".join(c for c in letters if c.isupper())
    equipment = "".join(c for c in letters if c.islower())
    return MedicationEquipment(medication=medication or None, equipment=equipment or None)


def parse_post_position(text: str) -> Optional[int]:
    """Post position, tolerating M/E glyphs that spill into the column."""
    if not text:
        return None
    if "|" in text or " " in text:
        parts = _POST_POSITION_NOISE.split(text)
        if len(parts) == 2:
            logger.warning(f"Detected PP affected by M/E in text: {text}; extracting the PP to be {parts[1]}")
            text = parts[1]
        elif len(parts) == 3:
            logger.warning(f"Detected PP affected by M/E in text: {text}; extracting the PP to be {parts[1] + parts[2]}")
            text = parts[1] + parts[2]
    try:
        return int(text)
    except ValueError:
        logger.warning(f"Unable to parse post position: {text}")
        return 0


def parse_odds(text: str) -> tuple[Optional[float], bool]:
    """"*1.40" -> (1.4, favorite)."""
    if not text:
        return None, False
    favorite = "*" in text
    text = text.replace("*", "").strip()
    try:
        return round(float(text), 2), favorite
    except ValueError as e:
        logger.warning(f"Unable to parse value: {text}, due to {e}")
        return None, favorite


def parse_lengths(text: str) -> Optional[Lengths]:
    """"Hd", "Nk", "1/2", "1 3/4", "15" -> lengths; None for no margin."""
    text = text.strip()
    if not text:
        return None
    word = _LENGTH_WORDS.get(text.lower())
    if word is not None:
        return Lengths(text, word)

    total = 0.0
    for part in text.split():
        if part[-1] in _VULGAR_FRACTIONS:
            whole = part[:-1]
            total += (int(whole) if whole.isdigit() else 0) + _VULGAR_FRACTIONS[part[-1]]
            continue
        fraction = _FRACTION.match(part)
        if fraction:
            total += int(fraction.group(1)) / int(fraction.group(2))
        elif part.isdigit():
            total += int(part)
        else:
            logger.warning(f"Unable to parse lengths: {text}")
            return Lengths(text, None)
    return Lengths(text, round(total, 2))


def parse_relative_position(glyphs: Sequence[Glyph]) -> Optional[RelativePosition]:
    """Position digits are printed in the largest font; the margin ahead is superscript."""
    chars = [g for g in glyphs if g.char != "|"]
    if not chars:
        return None
    largest = max(g.font_size for g in chars)
    position_text = "".join(g.char for g in chars if g.font_size == largest).strip()
    lengths_text = "".join(g.char for g in chars if g.font_size < largest)

    position = int(position_text) if position_text.isdecimal() else None
    lengths = parse_lengths(lengths_text)
    if position is None and lengths is None:
        return None
    return RelativePosition(position=position, lengths_ahead=lengths)


# ── Starters ────────────────────────────────────────────────────────────────


def parse_starters(
    grid: RunningLineGrid,
    breed: Breed,
    distance: RaceDistance,
    race_date: Optional[date],
    registry: CheckpointRegistry,
) -> list[Starter]:
    floors = column_floors(grid.columns)
    return [
        parse_starter(assign_row(row, floors), grid, breed, distance, race_date, registry)
        for row in grid.rows
    ]


def parse_starter(
    row: Row,
    grid: RunningLineGrid,
    breed: Breed,
    distance: RaceDistance,
    race_date: Optional[date],
    registry: CheckpointRegistry,
) -> Starter:
    def text(column: str) -> str:
        return cell_text(row.get(column))

    horse, jockey = parse_horse_jockey(text(HORSE_JOCKEY))
    odds, favorite = parse_odds(text(ODDS))
    individual_time = parse_time_millis(text(INDIVIDUAL_TIME)) if text(INDIVIDUAL_TIME) else None

    starter = Starter(
        program=text(PROGRAM).upper() or None,
        horse=horse,
        jockey=jockey,
        last_raced=parse_last_raced(text(LAST_RACED), race_date) if LAST_RACED in row else None,
        weight=parse_weight(text(WEIGHT)),
        medication_equipment=parse_medication_equipment(text(MEDICATION_EQUIPMENT)),
        post_position=parse_post_position(text(POST_POSITION)),
        odds=odds,
        favorite=favorite,
        comments=text(COMMENTS) or None,
        individual_time_millis=individual_time,
    )

    speed_index = text(SPEED_INDEX)
    if speed_index:
        try:
            value = int(speed_index)
        except ValueError:
            logger.warning(f"Unable to parse speed index: {speed_index}")
            value = 0
        starter.ratings.append(Rating.aqha_speed_index(value, individual_time))

    cells = [row.get(name, []) for name in grid.point_of_call_columns]
    points_of_call = build_points_of_call(breed, distance, registry, len(cells), horse.name)
    for call, cell in zip(points_of_call.calls, cells):
        call.relative_position = parse_relative_position(cell)
    update_stretch_and_finish(distance, points_of_call)
    starter.points_of_call = points_of_call.calls

    return starter


def build_points_of_call(
    breed: Breed,
    distance: RaceDistance,
    registry: CheckpointRegistry,
    chart_calls: int,
    horse_name: str,
) -> PointsOfCall:
    """Resolve the template and reconcile it with the number of calls printed."""
    points_of_call = registry.resolve(breed, distance.feet)
    if points_of_call is None:
        raise InvalidPointsOfCall(f"No points of call for {breed.value} at {distance.text}")

    calls = points_of_call.calls
    if chart_calls and breed.records_individual_times and chart_calls < len(calls):
        for call in calls:
            if call.text == "Str2":
                logger.warning(
                    f'Removing the extraneous "Str2" point of call from the race of distance '
                    f'"{distance.text}" for starter "{horse_name}"'
                )
                calls.remove(call)
                break
        if chart_calls != len(calls):
            raise InvalidPointsOfCall(
                f"Unable to parse values for all of the following points of call: "
                f"{[c.text for c in calls]}"
            )

    if chart_calls > len(calls):
        raise InvalidPointsOfCall(
            f"{chart_calls} points of call on the chart but only {len(calls)} for "
            f"{breed.value} at {distance.text}"
        )
    return points_of_call


def update_stretch_and_finish(distance: RaceDistance, points_of_call: PointsOfCall) -> None:
    """The stretch call is a furlong out; the finish is the race distance."""
    stretch = points_of_call.stretch
    if stretch is not None and not stretch.has_known_distance:
        if distance.feet >= 2 * FEET_PER_FURLONG:
            stretch.feet = distance.feet - FEET_PER_FURLONG
            stretch.compact = compact_for_feet(stretch.feet)
        else:
            stretch.compact = "Str"

    finish = points_of_call.finish
    if finish is not None and not finish.has_known_distance:
        finish.feet = distance.feet
        finish.compact = distance.compact
