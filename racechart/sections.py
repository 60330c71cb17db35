"""Parsers for the free-text sections printed around the running lines.

Each parser takes the page's rendered line texts and returns None (or an
empty list) when its section is not on the page. Separator glyphs ("|")
between words are read as spaces except in the running line preview, where
they delimit columns.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from racechart.distance import RaceDistance, parse_chart_date
from racechart.exceptions import ClaimingPriceParseError, InvalidRaceError
from racechart.models import (
    Cancellation,
    ClaimedHorse,
    ClaimingPrice,
    Disqualification,
    Lengths,
    Owner,
    PostTimeStartCommentsTimer,
    RelativePosition,
    Scratch,
    Starter,
    Trainer,
    Weather,
    Wind,
    Winner,
)
from racechart.purse import parse_amount
from racechart.running_line import parse_lengths

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

_RACE_IDENTITY = re.compile(r"^(.+?) - ([A-Z][a-z]+ \d{1,2}, \d{4}) - Race (\d+)$")
_CANCELLED = re.compile(r"^Race Cancelled(?: - (.+))?$")
_WEATHER = re.compile(r"Weather: (.+?) Track: (.+?)(?= Wind Speed:|$)")
_WIND = re.compile(r"Wind Speed: (\d+)(?: mph)?(?: Wind Direction: (.+))?$")
_POST_TIME = re.compile(r"^Off at: (.+?)(?: Start: (.+?))?(?: Timer: (.+))?$")
_WINNER = re.compile(
    r"^Winner: (.+?), (.+) (\S+), by (.+?) out of (.+?), by (.+?)\. "
    r"Foaled (\w{3,9} \d{1,2}, \d{4}) in (.+?)\.?$"
)
_BREEDER = re.compile(r"^Breeder: (.+)$")
_CLAIMING_PRICES = re.compile(r"^Claiming Prices: (.+)$")
_CLAIMING_PRICE = re.compile(r"^(?:(\w+) - )?(.+?): \$([\d,]+)$")
_CLAIMED_HORSES = re.compile(r"^(?:\d+ )?Claimed Horse\(s\): (.+)$")
_CLAIMED_HORSE = re.compile(r"^(.+?) New Trainer: (.+?) New Owner: (.+)$")
_TRAINERS = re.compile(r"^Trainers: (.+)$")
_OWNERS = re.compile(r"^Owners: (.+)$")
_PROGRAM_VALUE = re.compile(r"^(?:(\w+) - )?(.+)$")
_SCRATCHES = re.compile(r"^Scratched Horse\(s\): (.+)$")
_OUTSIDE_PARENTHESES_COMMA = re.compile(r",\s*(?![^()]*\))")
_SCRATCH = re.compile(r"^(.+?)(?:\s*\((.*)\))?$")
_DISQUALIFICATIONS = re.compile(r"^Disqualification\(s\): (.+)$")
_DISQUALIFICATION = re.compile(r"^(?:#(\w+) )?(.+?) from (\d+) to (\d+)$")
_FOOTNOTES = "Footnotes"
_COPYRIGHT = re.compile(r"^Copyright (\d+) Equibase Company LLC\. All Rights Reserved\.$")
_RUN_UP = re.compile(r"Run-Up: (\d+) feet(?: Temporary Rail: (\d+) feet)?")
_FRACTIONAL_TIMES = re.compile(r"Fractional Times: (.+?) Final Time: (\S+)")
_FINAL_TIME = re.compile(r"^Final Time: (\S+)")
_PREVIEW_HEADER = "Past Performance Running Line Preview"
_PREVIEW_PROGRAM = re.compile(r"^\d+[A-Z]?$")


def flatten(text: str) -> str:
    """Read separator glyphs as spaces and collapse runs of whitespace."""
    return _WHITESPACE.sub(" ", text.replace("|", " ")).strip()


def _first_match(pattern: re.Pattern, texts: Sequence[str]) -> Optional[re.Match]:
    for text in texts:
        m = pattern.search(flatten(text))
        if m:
            return m
    return None


def _entries(text: str) -> list[str]:
    return [e.strip() for e in text.split(";") if e.strip()]


# ── Race identity ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RaceIdentity:
    track_name: str
    race_date: date
    race_number: int


def parse_race_identity(texts: Sequence[str]) -> RaceIdentity:
    """"AQUEDUCT - January 1, 2017 - Race 1"."""
    m = _first_match(_RACE_IDENTITY, texts)
    if not m:
        raise InvalidRaceError("Unable to find the track, race date and race number")
    try:
        race_date = datetime.strptime(m.group(2), "%B %d, %Y").date()
    except ValueError as e:
        raise InvalidRaceError(f"Unable to parse race date: {m.group(2)}") from e
    return RaceIdentity(track_name=m.group(1).strip(), race_date=race_date, race_number=int(m.group(3)))


def parse_cancellation(texts: Sequence[str]) -> Cancellation:
    m = _first_match(_CANCELLED, texts)
    if not m:
        return Cancellation()
    return Cancellation(cancelled=True, reason=m.group(1))


# ── Conditions of the day ───────────────────────────────────────────────────


def parse_weather(texts: Sequence[str]) -> tuple[Optional[Weather], Optional[str]]:
    """Weather and the track condition, e.g. "Weather: Clear Track: Fast"."""
    m = _first_match(_WEATHER, texts)
    if not m:
        return None, None
    return Weather(text=m.group(1)), m.group(2)


def parse_wind(texts: Sequence[str]) -> Optional[Wind]:
    m = _first_match(_WIND, texts)
    if not m:
        return None
    return Wind(speed=int(m.group(1)), direction=m.group(2))


def parse_post_time(texts: Sequence[str]) -> Optional[PostTimeStartCommentsTimer]:
    m = _first_match(_POST_TIME, texts)
    if not m:
        return None
    return PostTimeStartCommentsTimer(post_time=m.group(1), start_comments=m.group(2), timer=m.group(3))


# ── Winners ─────────────────────────────────────────────────────────────────


def parse_winners(texts: Sequence[str]) -> list[Winner]:
    """Winner declarations; a "Breeder:" line belongs to the winner above it."""
    winners: list[Winner] = []
    for text in texts:
        text = flatten(text)
        m = _WINNER.match(text)
        if m:
            winners.append(
                Winner(
                    horse_name=m.group(1),
                    color=m.group(2),
                    sex=m.group(3),
                    sire=m.group(4),
                    dam=m.group(5),
                    dam_sire=m.group(6),
                    foaling_date=parse_chart_date(m.group(7)),
                    foaling_location=m.group(8),
                )
            )
            continue
        m = _BREEDER.match(text)
        if m and winners:
            winners[-1].breeder = m.group(1)
    return winners


# ── Claims ──────────────────────────────────────────────────────────────────


def parse_claiming_prices(texts: Sequence[str]) -> list[ClaimingPrice]:
    """"Claiming Prices: 1 - Horse A: $25,000; 3 - Horse B: $20,000"."""
    m = _first_match(_CLAIMING_PRICES, texts)
    if not m:
        return []
    prices = []
    for entry in _entries(m.group(1)):
        price = _CLAIMING_PRICE.match(entry)
        if not price:
            logger.warning(f"Unable to parse claiming price: {entry}")
            continue
        program = price.group(1).upper() if price.group(1) else None
        try:
            amount = parse_amount(price.group(3))
        except ValueError as e:
            raise ClaimingPriceParseError(f"Unable to parse claiming price value from text: {entry}") from e
        prices.append(ClaimingPrice(program=program, horse_name=price.group(2), price=amount))
    return prices


def parse_claimed_horses(texts: Sequence[str]) -> list[ClaimedHorse]:
    claimed: list[ClaimedHorse] = []
    active = False
    for text in texts:
        text = flatten(text)
        m = _CLAIMED_HORSES.match(text)
        if m:
            active = True
            text = m.group(1)
        elif not active:
            continue
        horse = _CLAIMED_HORSE.match(text)
        if not horse:
            break
        claimed.append(
            ClaimedHorse(horse_name=horse.group(1), new_trainer_name=horse.group(2), new_owner_name=horse.group(3))
        )
    return claimed


# ── Connections ─────────────────────────────────────────────────────────────


def parse_trainers(texts: Sequence[str]) -> list[Trainer]:
    """"Trainers: 1 - Barclay, Kristin; 2 - Pletcher, Todd"."""
    m = _first_match(_TRAINERS, texts)
    if not m:
        return []
    trainers = []
    for entry in _entries(m.group(1)):
        parts = _PROGRAM_VALUE.match(entry)
        last, _, first = parts.group(2).partition(",")
        trainers.append(
            Trainer(
                program=parts.group(1).upper() if parts.group(1) else None,
                first_name=first.strip() or None,
                last_name=last.strip() or None,
            )
        )
    return trainers


def parse_owners(texts: Sequence[str]) -> list[Owner]:
    m = _first_match(_OWNERS, texts)
    if not m:
        return []
    owners = []
    for entry in _entries(m.group(1)):
        parts = _PROGRAM_VALUE.match(entry)
        owners.append(
            Owner(program=parts.group(1).upper() if parts.group(1) else None, name=parts.group(2).strip())
        )
    return owners


# ── Scratches and disqualifications ─────────────────────────────────────────


def parse_scratches(texts: Sequence[str]) -> list[Scratch]:
    """"Scratched Horse(s): Horse A (Vet), Horse B (Trainer)"."""
    m = _first_match(_SCRATCHES, texts)
    if not m:
        return []
    scratches = []
    for entry in _OUTSIDE_PARENTHESES_COMMA.split(m.group(1)):
        entry = entry.strip()
        if not entry:
            continue
        parts = _SCRATCH.match(entry)
        scratches.append(Scratch(horse_name=parts.group(1).strip(), reason=parts.group(2) or None))
    return scratches


def parse_disqualifications(texts: Sequence[str]) -> list[Disqualification]:
    """"Disqualification(s): #3 Horse C from 2 to 5"."""
    m = _first_match(_DISQUALIFICATIONS, texts)
    if not m:
        return []
    disqualifications = []
    for entry in _entries(m.group(1)):
        dq = _DISQUALIFICATION.match(entry)
        if not dq:
            logger.warning(f"Unable to parse disqualification: {entry}")
            continue
        disqualifications.append(
            Disqualification(
                program=dq.group(1).upper() if dq.group(1) else None,
                horse_name=dq.group(2),
                original_position=int(dq.group(3)),
                new_position=int(dq.group(4)),
            )
        )
    return disqualifications


# ── Footnotes ───────────────────────────────────────────────────────────────


def parse_footnotes(texts: Sequence[str]) -> Optional[str]:
    for i, text in enumerate(texts):
        if flatten(text) == _FOOTNOTES:
            notes = [flatten(t) for t in texts[i + 1:]]
            notes = [t for t in notes if t and not _COPYRIGHT.match(t)]
            return " ".join(notes) or None
    return None


# ── Timing lines ────────────────────────────────────────────────────────────


def parse_run_up(texts: Sequence[str], distance: Optional[RaceDistance]) -> None:
    """Attach the run-up and temporary rail distances (in feet) to the race distance."""
    m = _first_match(_RUN_UP, texts)
    if not m or distance is None:
        return
    distance.run_up = int(m.group(1))
    distance.temp_rail = int(m.group(2)) if m.group(2) else None


@dataclass(frozen=True)
class FractionalTimes:
    times: list[str] = field(default_factory=list)
    final_time: Optional[str] = None


def parse_fractional_times(texts: Sequence[str]) -> FractionalTimes:
    """"Fractional Times: 22.94 46.11 1:10.62 Final Time: 1:23.73"."""
    for text in texts:
        text = flatten(text)
        m = _FRACTIONAL_TIMES.search(text)
        if m:
            return FractionalTimes(times=m.group(1).split(), final_time=m.group(2))
        m = _FINAL_TIME.match(text)
        if m:
            return FractionalTimes(final_time=m.group(1))
    return FractionalTimes()


# ── Past performance running line preview ───────────────────────────────────


@dataclass
class PreviewRow:
    program: Optional[str]
    horse_name: str
    positions: dict[str, RelativePosition] = field(default_factory=dict)


def parse_preview(texts: Sequence[str]) -> list[PreviewRow]:
    """Rows of "Pgm|Horse Name|Start|1/4|...", each call "position [lengths behind]"."""
    start = None
    for i, text in enumerate(texts):
        if text.replace("|", " ").startswith(_PREVIEW_HEADER):
            start = i + 1
            break
    if start is None or start >= len(texts):
        return []

    header = [c.replace(" ", "") for c in texts[start].split("|")]
    calls = header[2:]
    rows = []
    for text in texts[start + 1:]:
        cells = [c.strip() for c in text.split("|")]
        if len(cells) < 3 or not _PREVIEW_PROGRAM.match(cells[0]):
            break
        row = PreviewRow(program=cells[0].upper(), horse_name=cells[1])
        for call, cell in zip(calls, cells[2:]):
            position = parse_preview_position(cell)
            if position is not None:
                row.positions[call] = position
        rows.append(row)
    return rows


def parse_preview_position(text: str) -> Optional[RelativePosition]:
    """"3 1 1/2" -> third, 1.5 lengths behind the leader."""
    position_text, _, lengths_text = text.strip().partition(" ")
    if not position_text.isdigit():
        return None
    lengths: Optional[Lengths] = parse_lengths(lengths_text)
    return RelativePosition(position=int(position_text), total_lengths_behind=lengths)


def apply_preview(starters: Sequence[Starter], rows: Sequence[PreviewRow]) -> None:
    """Copy each non-leader's total lengths behind onto its matching point of call."""
    for row in rows:
        for starter in starters:
            if starter.matches(row.program, row.horse_name):
                for call, position in row.positions.items():
                    starter.set_total_lengths_behind(call, position)
                break
