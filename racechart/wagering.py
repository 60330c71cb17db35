"""Win/place/show and exotic payoffs from the wagering grid.

The grid follows the "Total WPS Pool: $..." line. Its header names the
columns (Pgm, Horse, Win, Place, Show, Wager Type, Winning Numbers, Payoff,
Pool, Carryover); horse name and win payoff share a cell, as do winning
numbers and payoff, separated by "|".
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from racechart.exceptions import ChartParserError, PayoffParseError, TotalWPSParseError
from racechart.glyphs import Glyph, line_text
from racechart.grid import (
    ColumnRange,
    Row,
    assign_columns,
    build_grid,
    cell_text,
    group_rows,
    merge_wrapped_rows,
)
from racechart.lines import Line
from racechart.models import entry_program

logger = logging.getLogger(__name__)

TOTAL_WPS_POOL = re.compile(r"Total WPS Pool: \$([0-9]{1,3}(,[0-9]{3})*)( .+)?")
WAGERING_COLUMN_NAMES = [
    "Pgm", "Horse", "Win", "Place", "Show", "WagerType", "WinningNumbers", "Payoff", "Pool", "Carryover",
]
# shared cells: the second column's glyphs belong to the first
_MERGED_COLUMNS = {
    "Horse": ("HorseWin", "Win"),
    "WinningNumbers": ("WinningNumbersPayoff", "Payoff"),
}

_WAGER_UNIT = re.compile(r"^\$(\d\.\d\d) (.+)$")
_WINNING_NUMBERS = re.compile(r"^([^(]+)(\((\d+) correct\))?")

WPS_UNIT = 2.0


def parse_number(text: str) -> float:
    """"1,234.50" -> 1234.5; raises ValueError."""
    return float(text.replace(",", "").strip())


def calculate_odds(unit: Optional[float], payoff: Optional[float]) -> Optional[float]:
    if unit is None or payoff is None or unit <= 0 or payoff <= 0:
        return None
    return round((payoff - unit) / unit, 2)


class WagerType(str, Enum):
    """Straight pools paid on every chart."""

    WIN = "Win"
    PLACE = "Place"
    SHOW = "Show"


@dataclass(frozen=True)
class WinPlaceShow:
    type: WagerType
    payoff: float
    unit: float = WPS_UNIT

    @property
    def odds(self) -> Optional[float]:
        return calculate_odds(self.unit, self.payoff)


@dataclass
class WinPlaceShowPayoff:
    """Straight payoffs for one starter, per $2."""

    program: Optional[str]
    horse_name: Optional[str]
    win: Optional[WinPlaceShow] = None
    place: Optional[WinPlaceShow] = None
    show: Optional[WinPlaceShow] = None

    @property
    def entry_program(self) -> Optional[str]:
        return entry_program(self.program)

    @property
    def wagering_position(self) -> Optional[int]:
        """1 when paying to win, 2 to place, 3 to show only."""
        if self.win is not None:
            return 1
        if self.place is not None:
            return 2
        if self.show is not None:
            return 3
        return None

    @property
    def has_payoff(self) -> bool:
        return self.wagering_position is not None


@dataclass
class ExoticPayoff:
    name: Optional[str]
    unit: Optional[float]
    winning_numbers: Optional[str]
    number_correct: Optional[int] = None
    payoff: Optional[float] = None
    pool: Optional[float] = None
    carryover: Optional[float] = None

    @property
    def odds(self) -> Optional[float]:
        return calculate_odds(self.unit, self.payoff)

    @property
    def has_payoff(self) -> bool:
        return self.unit is not None and bool(self.winning_numbers)


@dataclass
class WagerPayoffPools:
    total_win_place_show_pool: int
    win_place_show_payoffs: list[WinPlaceShowPayoff] = field(default_factory=list)
    exotic_payoffs: list[ExoticPayoff] = field(default_factory=list)


# ── Parsing ─────────────────────────────────────────────────────────────────


def parse_wagering(lines: Sequence[Line], row_slack: float = 10.0) -> Optional[WagerPayoffPools]:
    """Payoffs from the page's lines; None when the chart has no wagering grid."""
    for line in lines:
        total = parse_total_wps_pool(line_text(line))
        if total is not None:
            return parse_payoffs(total, wagering_glyphs(line), row_slack)
    return None


def parse_total_wps_pool(text: str) -> Optional[int]:
    m = TOTAL_WPS_POOL.search(text)
    if not m:
        return None
    try:
        return int(m.group(1).replace(",", ""))
    except ValueError as e:
        raise TotalWPSParseError(f"Unable to parse Total WPS Pool: {text}") from e


def wagering_glyphs(line: Line) -> list[Glyph]:
    """The grid starts on the first row below the Total WPS Pool text."""
    for i in range(1, len(line)):
        if line[i].y != line[i - 1].y:
            return line[i:]
    raise ChartParserError("No wagering grid found")


def parse_payoffs(total_pool: int, glyphs: Sequence[Glyph], row_slack: float = 10.0) -> WagerPayoffPools:
    if not glyphs:
        raise ChartParserError("Unable to parse payoffs as wagering line is invalid")

    rows = group_rows(glyphs, slack=row_slack)
    header = rows.pop(glyphs[0].y)
    columns = wagering_columns(header)
    grid = merge_wrapped_rows(build_grid(rows, columns))

    pools = WagerPayoffPools(total_win_place_show_pool=total_pool)
    for row in grid.values():
        wps = parse_win_place_show(row)
        if wps.has_payoff:
            pools.win_place_show_payoffs.append(wps)
        exotic = parse_exotic(row)
        if exotic.has_payoff:
            pools.exotic_payoffs.append(exotic)
    return pools


def wagering_columns(header: Sequence[Glyph]) -> dict[str, ColumnRange]:
    """Header columns, folding each shared cell's second column into the first."""
    columns = assign_columns(header, WAGERING_COLUMN_NAMES)
    for name, (merged, absorbed) in _MERGED_COLUMNS.items():
        if name not in columns:
            continue
        first = columns.pop(name)
        right = columns.pop(absorbed).right if absorbed in columns else first.right
        columns[merged] = ColumnRange(name=merged, left=first.left, right=right)
    return columns


def _payoff(text: str, wager_type: WagerType) -> Optional[WinPlaceShow]:
    if not text:
        return None
    try:
        return WinPlaceShow(wager_type, parse_number(text))
    except ValueError:
        logger.warning(f"Unable to parse {wager_type.value.lower()} payoff {text}")
        return None


def parse_win_place_show(row: Row) -> WinPlaceShowPayoff:
    program = cell_text(row.get("Pgm")) or None
    horse_name, _, win_text = cell_text(row.get("HorseWin")).partition("|")
    return WinPlaceShowPayoff(
        program=program.upper() if program else None,
        horse_name=horse_name.strip() or None,
        win=_payoff(win_text.strip(), WagerType.WIN),
        place=_payoff(cell_text(row.get("Place")), WagerType.PLACE),
        show=_payoff(cell_text(row.get("Show")), WagerType.SHOW),
    )


def parse_exotic(row: Row) -> ExoticPayoff:
    unit, name = parse_wager_name_unit(cell_text(row.get("WagerType")))
    winning_numbers, number_correct, payoff = parse_winning_numbers_payoff(
        cell_text(row.get("WinningNumbersPayoff"))
    )
    return ExoticPayoff(
        name=name,
        unit=unit,
        winning_numbers=winning_numbers,
        number_correct=number_correct,
        payoff=payoff,
        pool=_amount(cell_text(row.get("Pool")), "pool"),
        carryover=_amount(cell_text(row.get("Carryover")), "carryover"),
    )


def parse_wager_name_unit(text: str) -> tuple[Optional[float], Optional[str]]:
    """"$1.00 Pick 3 (2-7-1)" -> (1.0, "Pick 3 (2-7-1)")."""
    text = text.replace("\n", " ", 1)
    m = _WAGER_UNIT.search(text)
    if not m:
        return None, None
    return float(m.group(1)), m.group(2)


def parse_winning_numbers_payoff(text: str) -> tuple[Optional[str], Optional[int], Optional[float]]:
    """"2-7-1 (3 correct)|1,234.50" -> ("2-7-1", 3, 1234.5)."""
    if not text:
        return None, None, None
    first, _, continued = text.partition("\n")
    numbers, _, payoff_text = first.partition("|")
    if continued:
        numbers = f"{numbers} {continued}"

    number_correct = None
    m = _WINNING_NUMBERS.search(numbers)
    if m:
        numbers = m.group(1).strip()
        if m.group(3) is not None:
            number_correct = int(m.group(3))

    payoff = None
    if payoff_text:
        try:
            payoff = parse_number(payoff_text)
        except ValueError as e:
            raise PayoffParseError(f"Failed to parse payoff text: {payoff_text}") from e
    return numbers or None, number_correct, payoff


def _amount(text: str, label: str) -> Optional[float]:
    if not text:
        return None
    try:
        return parse_number(text)
    except ValueError as e:
        raise PayoffParseError(f"Failed to parse {label} text: {text}") from e
