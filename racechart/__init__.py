"""Race chart parsing: positioned glyphs to structured race results."""

from racechart.parser import ChartParser, ParseFailure, ParseSuccess
from racechart.result import RaceResult

__all__ = ["ChartParser", "ParseFailure", "ParseSuccess", "RaceResult"]
