"""Column/grid reconstruction from glyph coordinates.

Charts carry no table markup, so column membership is recovered from the
header row's glyph positions: each named column spans from its first header
glyph to the right edge of its last one, and any glyph belongs to the column
with the greatest left edge at or before it.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from racechart.floor_map import FloorMap
from racechart.glyphs import Glyph

logger = logging.getLogger(__name__)

# Characters the extraction layer emits between words; never part of a column name
_SEPARATORS = {"|", " "}

Row = dict[str, list[Glyph]]
Grid = dict[float, Row]


@dataclass(frozen=True)
class ColumnRange:
    """A named column with inclusive horizontal bounds."""

    name: str
    left: float
    right: float

    def contains(self, x: float) -> bool:
        return self.left <= x <= self.right


def assign_columns(
    header: Sequence[Glyph], known_column_names: Iterable[str]
) -> dict[str, ColumnRange]:
    """Build column ranges by matching accumulated header text against known names.

    A name that is also the start of a longer name (e.g. "Win" and
    "WinningNumbers") only closes a column the first time it is seen;
    afterwards accumulation continues towards the longer name.
    """
    names = list(known_column_names)
    prefixes = {n for n in names if any(o != n and o.startswith(n) for o in names)}
    consumed: set[str] = set()

    columns: dict[str, ColumnRange] = {}
    text = ""
    progress: list[Glyph] = []
    for glyph in header:
        if glyph.char in _SEPARATORS:
            continue
        progress.append(glyph)
        text += glyph.char

        if text in prefixes:
            if text in consumed:
                continue
            consumed.add(text)

        if text in names:
            first, last = progress[0], progress[-1]
            columns[text] = ColumnRange(
                name=text,
                left=round(first.x, 2),
                right=round(last.x + last.width, 2),
            )
            text = ""
            progress = []

    return columns


def split_columns(header: Sequence[Glyph], separator: str = "|") -> dict[str, ColumnRange]:
    """Build column ranges from a header whose labels are separated by a separator glyph.

    Column names are the labels with spaces removed ("Horse Name (Jockey)"
    becomes "HorseName(Jockey)").
    """
    columns: dict[str, ColumnRange] = {}
    progress: list[Glyph] = []

    def close():
        label = "".join(g.char for g in progress).replace(" ", "")
        if label:
            first, last = progress[0], progress[-1]
            columns[label] = ColumnRange(
                name=label,
                left=round(first.x, 2),
                right=round(last.x + last.width, 2),
            )

    for glyph in header:
        if glyph.char == separator:
            close()
            progress = []
        else:
            progress.append(glyph)
    close()
    return columns


def column_floors(columns: Mapping[str, ColumnRange]) -> FloorMap[str]:
    return FloorMap((c.left, c.name) for c in columns.values())


def assign_row(glyphs: Iterable[Glyph], floors: FloorMap[str]) -> Row:
    """Place each glyph in the column with the greatest left edge <= its x."""
    row: Row = {}
    for glyph in glyphs:
        name = floors.floor(glyph.x)
        if name is None:
            continue
        row.setdefault(name, []).append(glyph)
    return row


def group_rows(glyphs: Iterable[Glyph], slack: Optional[float] = None) -> dict[float, list[Glyph]]:
    """Group glyphs by vertical position.

    With a slack, glyphs sitting more than `slack` below the lowest row seen
    so far are dropped (sponsor blurbs printed under a grid).
    """
    rows: dict[float, list[Glyph]] = {}
    for glyph in glyphs:
        if slack is not None and rows and glyph.y > max(rows) + slack:
            continue
        rows.setdefault(glyph.y, []).append(glyph)
    return rows


def build_grid(
    rows: Mapping[float, Sequence[Glyph]],
    columns: Mapping[str, ColumnRange],
) -> Grid:
    """Assign every row's glyphs to columns; rows with nothing in any column are omitted."""
    floors = column_floors(columns)
    grid: Grid = {}
    if not floors:
        return grid
    for key, glyphs in rows.items():
        row = assign_row(glyphs, floors)
        if row:
            grid[key] = row
    return grid


def merge_wrapped_rows(
    grid: Mapping[float, Row],
    label_column: str = "WagerType",
    value_column: str = "WinningNumbersPayoff",
    label_marker: str = "$",
) -> Grid:
    """Fold rows whose label or value text wrapped onto the next line back into the row above.

    A row is a continuation when it has only one of the two columns, or has
    both but its label does not start with the marker character. Continued
    cells are appended to the previous row's cells and removed from the
    continuation row. Returns a new grid; running it again changes nothing.
    """
    merged: Grid = {key: {name: list(cell) for name, cell in row.items()} for key, row in grid.items()}
    previous: Optional[Row] = None

    for row in merged.values():
        if previous is None:
            previous = row
            continue

        label = row.get(label_column)
        value = row.get(value_column)
        if label is None and value is not None:
            _append_cell(previous, row, value_column)
        elif label is not None and value is None:
            _append_cell(previous, row, label_column)
        elif label and _first_char(label) != label_marker and value is not None:
            _append_cell(previous, row, label_column)
            _append_cell(previous, row, value_column)
        else:
            previous = row

    return merged


def _first_char(cell: Sequence[Glyph]) -> str:
    for glyph in cell:
        if glyph.char not in _SEPARATORS:
            return glyph.char
    return ""


def _append_cell(previous: Row, row: Row, column: str) -> None:
    if column in previous:
        previous[column].extend(row.pop(column))


def cell_text(glyphs: Optional[Sequence[Glyph]]) -> str:
    """Render a grid cell; glyphs on different vertical positions are separate lines."""
    if not glyphs:
        return ""
    lines: list[str] = []
    current = ""
    y = glyphs[0].y
    for glyph in glyphs:
        if glyph.y != y:
            lines.append(current)
            current = ""
            y = glyph.y
        current += glyph.char
    lines.append(current)
    return "\n".join(line.strip("| ") for line in lines if line.strip("| "))
