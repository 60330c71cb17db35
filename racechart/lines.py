"""Line segmentation of a chart page's glyph stream."""

import logging
from typing import Sequence

from racechart.glyphs import Glyph, line_text

logger = logging.getLogger(__name__)

LINE_START_X = 9.92
PREVIEW_HEADER_X = 209.385
PREVIEW_HEADER_CHAR = "P"

RUNNING_LINE_HEADER_PREFIX = "Last Raced|Pgm"
RUN_UP_PREFIX = "Run-Up:"

Line = list[Glyph]


def segment_lines(
    glyphs: Sequence[Glyph],
    line_start_x: float = LINE_START_X,
    preview_header_x: float = PREVIEW_HEADER_X,
) -> list[Line]:
    """Group a page's glyphs into lines in reading order.

    A glyph starts a new line when it sits on the left margin, or when it is
    the "P" of the "Past Performance Running Line Preview" header (which is
    printed mid-page at a fixed position).
    """
    lines: list[Line] = []
    line: Line = []
    for glyph in glyphs:
        if line and (
            glyph.x == line_start_x
            or (glyph.x == preview_header_x and glyph.char == PREVIEW_HEADER_CHAR)
        ):
            lines.append(line)
            line = []
        line.append(glyph)
    if line:
        lines.append(line)
    return lines


def texts(lines: Sequence[Line]) -> list[str]:
    return [line_text(line) for line in lines]


def running_lines(lines: Sequence[Line]) -> list[Line]:
    """Extract the running-line section: header row through the Run-Up line."""
    section: list[Line] = []
    active = False
    for line in lines:
        text = line_text(line)
        if text.startswith(RUNNING_LINE_HEADER_PREFIX):
            active = True
        elif active and text.startswith(RUN_UP_PREFIX):
            section.append(line)
            active = False
        if active:
            section.append(line)
    return section
