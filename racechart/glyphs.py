"""Positioned glyph records supplied by the chart text-extraction layer.

The extraction layer dumps one glyph per row in a pipe-delimited format:

    xDirAdj|yDirAdj|fontSize|xScale|height|widthOfSpace|widthDirAdj|unicode
    9.92|52.61|7.0|7.0|4.9|1.9|4.27|A

A page is a header row followed by its glyph rows; several pages may be
concatenated, each starting with its own header row.
"""

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from racechart.exceptions import ChartParserError

logger = logging.getLogger(__name__)

GLYPH_COLUMNS = [
    "xDirAdj", "yDirAdj", "fontSize", "xScale", "height", "widthOfSpace", "widthDirAdj", "unicode",
]
_HEADER = "|".join(GLYPH_COLUMNS)


class Glyph(BaseModel):
    """A single decoded character and its position on the page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x: float = Field(alias="xDirAdj")
    y: float = Field(alias="yDirAdj")
    font_size: float = Field(default=0.0, alias="fontSize")
    x_scale: float = Field(default=0.0, alias="xScale")
    height: float = Field(default=0.0, alias="height")
    width_of_space: float = Field(default=0.0, alias="widthOfSpace")
    width: float = Field(default=0.0, alias="widthDirAdj")
    char: str = Field(alias="unicode", min_length=1, max_length=1)


def line_text(glyphs: Iterable[Glyph]) -> str:
    """Render glyphs back to text in reading order, no separators added."""
    return "".join(g.char for g in glyphs)


def read_glyphs(text: str) -> list[Glyph]:
    """Parse a single page of pipe-delimited glyph rows (header row first)."""
    pages = read_pages(text)
    if len(pages) > 1:
        raise ChartParserError(f"Expected a single page of glyphs, found {len(pages)}")
    return pages[0] if pages else []


def read_pages(text: str) -> list[list[Glyph]]:
    """Parse a glyph dump into pages, one page per header row."""
    pages: list[list[Glyph]] = []
    current: list[Glyph] | None = None

    for row_number, row in enumerate(text.splitlines(), start=1):
        if not row.strip():
            continue
        if row.strip() == _HEADER:
            current = []
            pages.append(current)
            continue
        if current is None:
            raise ChartParserError(f"Glyph row {row_number} appears before a header row")
        current.append(_parse_row(row, row_number))

    return pages


def _parse_row(row: str, row_number: int) -> Glyph:
    # the glyph itself may be a pipe, so only split off the leading columns
    values = row.split("|", len(GLYPH_COLUMNS) - 1)
    if len(values) != len(GLYPH_COLUMNS):
        raise ChartParserError(
            f"Error deserializing glyph row {row_number}: expected {len(GLYPH_COLUMNS)} "
            f"columns, found {len(values)}"
        )
    try:
        return Glyph.model_validate(dict(zip(GLYPH_COLUMNS, values)))
    except ValidationError as e:
        raise ChartParserError(f"Error deserializing glyph row {row_number}: {e}") from e
