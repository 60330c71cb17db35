"""Typed failures raised while parsing a single race chart page.

Everything derives from ChartParserError so the orchestrator can turn any of
them into a page-scoped ParseFailure without catching unrelated errors.
"""


class ChartParserError(Exception):
    """Base exception for race chart parsing failures."""

    pass


class NoLinesToParse(ChartParserError):
    """The page produced no lines of glyphs."""

    pass


class InvalidRaceError(ChartParserError):
    """The track / race date / race number header could not be found."""

    pass


class TrackNotFound(ChartParserError):
    def __init__(self, name: str):
        super().__init__(f"Unable to find Track with name: {name}")
        self.name = name


class RaceTypeNotIdentifiable(ChartParserError):
    def __init__(self):
        super().__init__("Unable to identify a valid race type, name and/or breed")


class NoMatchingBreed(ChartParserError):
    def __init__(self, text: str):
        super().__init__(f"Did not match a breed for {text}")
        self.text = text


class NoRaceDistanceFound(ChartParserError):
    def __init__(self, text: str):
        super().__init__(
            f"Unable to identify a valid race distance, surface, and/or track record: {text}"
        )
        self.text = text


class InvalidDistanceError(ChartParserError):
    """A distance phrase matched a grammar but a term could not be decoded."""

    pass


class PurseParseError(ChartParserError):
    pass


class ClaimingPriceParseError(ChartParserError):
    pass


class TotalWPSParseError(ChartParserError):
    pass


class PayoffParseError(ChartParserError):
    pass


class InvalidPointsOfCall(ChartParserError):
    pass


class InvalidFractionals(ChartParserError):
    pass


class PointOfCallNotFound(ChartParserError):
    def __init__(self, column: str):
        super().__init__(f"Point of call not found for column: {column}")
        self.column = column


class NoWinnersDeclared(ChartParserError):
    def __init__(self):
        super().__init__("No winners declared")
