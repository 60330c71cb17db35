"""The reconciled race result and its derived values."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from racechart.conditions import RaceConditions
from racechart.distance import DistanceSurfaceTrackRecord
from racechart.models import (
    Breed,
    Cancellation,
    Fractional,
    PostTimeStartCommentsTimer,
    Rating,
    Scratch,
    Split,
    Starter,
    Track,
    Weather,
)
from racechart.race_type import RaceTypeNameBlackTypeBreed
from racechart.wagering import WagerPayoffPools

_CHART_EMBEDDED = "https://www.equibase.com/premium/chartEmb.cfm?track=%s&raceDate=%s&cy=%s&rn=%s"
_CHART_PDF = (
    "https://www.equibase.com/premium/eqbPDFChartPlus.cfm?"
    "RACE=%d&BorP=P&TID=%s&CTRY=%s&DT=%s&DAY=D&STYLE=EQB"
)
_RACE_DAY_EMBEDDED = "https://www.equibase.com/premium/chartEmb.cfm?track=%s&raceDate=%s&cy=%s"
_RACE_DAY_PDF = (
    "https://www.equibase.com/premium/eqbPDFChartPlus.cfm?"
    "RACE=A&BorP=P&TID=%s&CTRY=%s&DT=%s&DAY=D&STYLE=EQB"
)


@dataclass(frozen=True)
class Link:
    href: str
    rel: str


def month_day_year(race_date: date) -> str:
    """1/7/2017, without zero padding."""
    return f"{race_date.month}/{race_date.day}/{race_date.year}"


def build_links(track: Optional[Track], race_date: Optional[date], race_number: Optional[int]) -> list[Link]:
    """Equibase chart links for the race and for the whole race day."""
    if track is None or race_date is None:
        return []
    mdy = month_day_year(race_date)
    return [
        Link(_CHART_EMBEDDED % (track.code, mdy, track.country, race_number), "web"),
        Link(_CHART_PDF % (race_number, track.code, track.country, mdy), "pdf"),
        Link(_RACE_DAY_EMBEDDED % (track.code, mdy, track.country), "allWeb"),
        Link(_RACE_DAY_PDF % (track.code, track.country, mdy), "allPdf"),
    ]


def format_summary(track: Track, race_date: date, race_number: int, breed: Optional[Breed]) -> str:
    """E.g. "PRX (Parx Racing), 2016-05-07, Race 8 (TB)"."""
    breed_code = breed.code if breed is not None else "Failed to parse"
    return "%s (%s), %s, Race %d (%s)" % (track.code, track.name, race_date.isoformat(), race_number, breed_code)


@dataclass
class RaceResult:
    track: Track
    race_date: date
    race_number: int
    cancellation: Cancellation = field(default_factory=Cancellation)
    breed: Optional[Breed] = None
    race_type: Optional[RaceTypeNameBlackTypeBreed] = None
    conditions: Optional[RaceConditions] = None
    distance_surface_track_record: Optional[DistanceSurfaceTrackRecord] = None
    weather: Optional[Weather] = None
    post_time: Optional[PostTimeStartCommentsTimer] = None
    dead_heat: bool = False
    starters: list[Starter] = field(default_factory=list)
    scratches: list[Scratch] = field(default_factory=list)
    fractionals: list[Fractional] = field(default_factory=list)
    splits: list[Split] = field(default_factory=list)
    wager_payoff_pools: Optional[WagerPayoffPools] = None
    footnotes: Optional[str] = None
    ratings: list[Rating] = field(default_factory=list)

    @property
    def links(self) -> list[Link]:
        return build_links(self.track, self.race_date, self.race_number)

    def link(self, rel: str) -> Optional[Link]:
        for link in self.links:
            if link.rel.lower() == rel.lower():
                return link
        return None

    @property
    def number_of_runners(self) -> int:
        return len(self.starters)

    @property
    def winners(self) -> list[Starter]:
        return [s for s in self.starters if s.is_winner]

    @property
    def first_finishers(self) -> list[Starter]:
        return [s for s in self.starters if s.finished_first]

    @property
    def final_time(self) -> Optional[str]:
        finish = self._first_finish_fractional()
        return finish.time if finish else None

    @property
    def final_millis(self) -> Optional[int]:
        finish = self._first_finish_fractional()
        return finish.millis if finish else None

    def _first_finish_fractional(self) -> Optional[Fractional]:
        first = self.first_finishers
        return first[0].finish_fractional if first else None

    def summary_text(self) -> str:
        return format_summary(self.track, self.race_date, self.race_number, self.breed)

    def simple_summary(self) -> str:
        return f"{self.track.code} {self.race_date.isoformat()} R{self.race_number}"
