"""Shared test fixtures for racechart: glyph builders and a synthetic chart page."""

from typing import Optional

import pytest

from racechart.checkpoints import CheckpointRegistry
from racechart.config import Settings
from racechart.glyphs import Glyph
from racechart.lines import LINE_START_X
from racechart.tracks import TrackRegistry

CHAR_WIDTH = 3.0
FONT_SIZE = 7.0
SUPERSCRIPT_SIZE = 5.0


def build_glyphs(
    text: str, x: float, y: float, font_size: float = FONT_SIZE, width: float = CHAR_WIDTH
) -> list[Glyph]:
    return [
        Glyph(x=x + i * width, y=y, font_size=font_size, width=width, char=c)
        for i, c in enumerate(text)
    ]


def build_line(text: str, y: float) -> list[Glyph]:
    """A line of text starting on the left margin."""
    return build_glyphs(text, LINE_START_X, y)


def build_columns(cells: list[tuple[float, str]], y: float, separator: Optional[str] = "|") -> list[Glyph]:
    """Cells of text at fixed x positions, with a separator glyph after each cell but the last."""
    glyphs: list[Glyph] = []
    for i, (x, text) in enumerate(cells):
        glyphs.extend(build_glyphs(text, x, y))
        if separator and i < len(cells) - 1:
            glyphs.append(Glyph(x=x + len(text) * CHAR_WIDTH, y=y, font_size=FONT_SIZE, width=1.0, char=separator))
    return glyphs


def build_call(x: float, y: float, position: str, lengths: str = "") -> list[Glyph]:
    """A point-of-call cell: position in the body font, lengths ahead in superscript."""
    glyphs = build_glyphs(position, x, y)
    glyphs.extend(build_glyphs(lengths, x + len(position) * CHAR_WIDTH, y, SUPERSCRIPT_SIZE, 2.0))
    return glyphs


# ── Running lines ───────────────────────────────────────────────────────────

RUNNING_COLUMNS = [
    ("Last Raced", LINE_START_X),
    ("Pgm", 60.0),
    ("Horse Name (Jockey)", 80.0),
    ("Wgt", 180.0),
    ("M/E", 200.0),
    ("PP", 220.0),
    ("Start", 240.0),
    ("1/4", 260.0),
    ("1/2", 280.0),
    ("Str", 300.0),
    ("Fin", 320.0),
    ("Odds", 340.0),
    ("Comments", 370.0),
]
_X = dict(RUNNING_COLUMNS)
_CALL_COLUMNS = ["Start", "1/4", "1/2", "Str", "Fin"]

STARTERS = [
    {
        "Last Raced": "13Dec16 8AQU3",
        "Pgm": "1",
        "Horse Name (Jockey)": "Tiz the Law (Franco, Manuel)",
        "Wgt": "120",
        "M/E": "Lb",
        "PP": "3",
        "calls": [("2", ""), ("1", "1/2"), ("1", "2"), ("1", "3"), ("1", "4 1/2")],
        "Odds": "*1.40",
        "Comments": "drew clear",
    },
    {
        "Last Raced": "---",
        "Pgm": "2",
        "Horse Name (Jockey)": "Second Horse (Ortiz, Jose)",
        "Wgt": "118",
        "M/E": "L",
        "PP": "1",
        "calls": [("1", "Hd"), ("2", "2"), ("2", "1"), ("2", "Hd"), ("2", "Nk")],
        "Odds": "3.10",
        "Comments": "game",
    },
    {
        "Last Raced": "20Nov16 5AQU2",
        "Pgm": "3",
        "Horse Name (Jockey)": "Third Horse (Lezcano, Abel)",
        "Wgt": "118",
        "M/E": "Lb",
        "PP": "2",
        "calls": [("3", ""), ("3", ""), ("3", ""), ("3", ""), ("3", "")],
        "Odds": "3.10",
        "Comments": "faded",
    },
]


def build_running_header(y: float) -> list[Glyph]:
    return build_columns([(x, label) for label, x in RUNNING_COLUMNS], y)


def build_starter_row(starter: dict, y: float) -> list[Glyph]:
    glyphs = build_glyphs(starter["Last Raced"], _X["Last Raced"], y)
    for column in ("Pgm", "Horse Name (Jockey)", "Wgt", "M/E", "PP"):
        glyphs.extend(build_glyphs(starter[column], _X[column], y))
    for column, (position, lengths) in zip(_CALL_COLUMNS, starter["calls"]):
        glyphs.extend(build_call(_X[column], y, position, lengths))
    glyphs.extend(build_glyphs(starter["Odds"], _X["Odds"], y))
    glyphs.extend(build_glyphs(starter["Comments"], _X["Comments"], y))
    return glyphs


# ── Wagering grid ───────────────────────────────────────────────────────────

WAGERING_HEADER = [
    (12.0, "Pgm"),
    (40.0, "Horse"),
    (120.0, "Win"),
    (150.0, "Place"),
    (180.0, "Show"),
    (220.0, "Wager Type"),
    (300.0, "Winning Numbers"),
    (380.0, "Payoff"),
    (420.0, "Pool"),
    (470.0, "Carryover"),
]


def build_wagering_line(y: float) -> list[Glyph]:
    """The Total WPS Pool text followed by its grid, all one line."""
    glyphs = build_line("Total WPS Pool: $123,456", y)
    glyphs.extend(build_columns(WAGERING_HEADER, y + 8))
    glyphs.extend(
        build_columns(
            [(12.0, "1"), (40.0, "Tiz the Law"), (120.0, "6.20"), (150.0, "3.40"), (180.0, "2.60"),
             (220.0, "$2.00 Exacta"), (300.0, "1-2"), (380.0, "25.40"), (420.0, "150,000")],
            y + 16,
        )
    )
    glyphs.extend(
        build_columns(
            [(12.0, "2"), (40.0, "Second Horse"), (150.0, "3.60"), (180.0, "2.80"),
             (220.0, "$1.00 Trifecta"), (300.0, "1-2-3 (3 correct)"), (380.0, "40.10"), (420.0, "90,000")],
            y + 24,
        )
    )
    return glyphs


# ── Chart page ──────────────────────────────────────────────────────────────

HEADER_TEXTS = [
    "AQUEDUCT - January 1, 2017 - Race 1",
    "CLAIMING - Thoroughbred",
    "For Three Year Olds And Upward. Claiming Price: $25,000 - $20,000",
    "Six Furlongs On The Dirt|Track Record: (Kelly Kip - 1:07.54 - April 10, 1999)",
    "Purse: $40,000",
    "Weather: Clear Track: Fast",
    "Off at: 12:31 Start: Good for all Timer: Electronic",
]

TRAILER_TEXTS = [
    "Fractional Times: 22.25 45.60 57.90 Final Time: 1:10.55",
    "Split Times: (23.35) (12.30) (12.65)",
    "Run-Up: 48 feet",
    "Winner: Tiz the Law, Bay Colt, by Constitution out of Tizfiz, by Tiznow. Foaled Mar 22, 2017 in Kentucky.",
    "Breeder: Tiz the Law LLC",
    "Trainers: 1 - Barclay, Kristin; 2 - Pletcher, Todd; 3 - Brown, Chad",
    "Owners: 1 - Sackatoga Stable; 2 - Repole Stable; 3 - Klaravich Stables",
    "Claiming Prices: 2 - Second Horse: $25,000; 3 - Third Horse: $20,000",
    "1 Claimed Horse(s): Third Horse New Trainer: Rudy Rodriguez New Owner: Michael Dubb",
    "Scratched Horse(s): Scratchy (Vet)",
]

FOOTNOTE_TEXTS = [
    "Footnotes",
    "TIZ THE LAW broke alertly and drew clear.",
    "Copyright 2017 Equibase Company LLC. All Rights Reserved.",
]


def build_chart_page(
    header_texts: Optional[list[str]] = None,
    starters: Optional[list[dict]] = None,
    trailer_texts: Optional[list[str]] = None,
) -> list[Glyph]:
    header_texts = HEADER_TEXTS if header_texts is None else header_texts
    starters = STARTERS if starters is None else starters
    trailer_texts = TRAILER_TEXTS if trailer_texts is None else trailer_texts

    glyphs: list[Glyph] = []
    y = 10.0
    for text in header_texts:
        glyphs.extend(build_line(text, y))
        y += 10
    glyphs.extend(build_running_header(y))
    y += 10
    for starter in starters:
        glyphs.extend(build_starter_row(starter, y))
        y += 10
    for text in trailer_texts:
        glyphs.extend(build_line(text, y))
        y += 10
    glyphs.extend(build_wagering_line(y))
    y += 40
    for text in FOOTNOTE_TEXTS:
        glyphs.extend(build_line(text, y))
        y += 10
    return glyphs


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def checkpoints() -> CheckpointRegistry:
    return CheckpointRegistry.default()


@pytest.fixture
def tracks() -> TrackRegistry:
    return TrackRegistry.default()


@pytest.fixture
def chart_page() -> list[Glyph]:
    """A complete six furlong claiming race with three starters."""
    return build_chart_page()
