"""Chart page orchestration: glyphs in, reconciled RaceResult out.

Each page is parsed independently. Any ChartParserError raised while
parsing a page becomes a ParseFailure for that page; the remaining pages
are still parsed.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from racechart.checkpoints import CheckpointRegistry, get_checkpoint_registry
from racechart.conditions import parse_conditions
from racechart.config import Settings, get_settings
from racechart.distance import parse_distance_surface_track_record
from racechart.exceptions import ChartParserError, NoLinesToParse, TrackNotFound
from racechart.glyphs import Glyph
from racechart.lines import running_lines, segment_lines, texts
from racechart.purse import parse_purse
from racechart.race_type import find_race_type
from racechart.reconcile import (
    RaceDraft,
    apply_claims,
    apply_disqualifications,
    apply_historical_exceptions,
    apply_owners,
    apply_trainers,
    apply_winners,
    finalize,
)
from racechart.result import RaceResult, format_summary
from racechart.running_line import parse_starters, split_running_lines
from racechart.sections import (
    RaceIdentity,
    apply_preview,
    parse_cancellation,
    parse_claimed_horses,
    parse_claiming_prices,
    parse_disqualifications,
    parse_footnotes,
    parse_fractional_times,
    parse_owners,
    parse_post_time,
    parse_preview,
    parse_race_identity,
    parse_run_up,
    parse_scratches,
    parse_trainers,
    parse_weather,
    parse_wind,
    parse_winners,
)
from racechart.timing import leader_fractionals
from racechart.tracks import TrackRegistry, get_track_registry
from racechart.wagering import parse_wagering

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseSuccess:
    page: int
    result: RaceResult


@dataclass(frozen=True)
class ParseFailure:
    page: int
    message: str
    race: Optional[str] = None  # race summary, once the identity is known


ParseOutcome = Union[ParseSuccess, ParseFailure]


class ChartParser:
    """Parse chart pages with shared, read-only reference data."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tracks: Optional[TrackRegistry] = None,
        checkpoints: Optional[CheckpointRegistry] = None,
    ):
        self.settings = settings or get_settings()
        self.tracks = tracks or get_track_registry()
        self.checkpoints = checkpoints or get_checkpoint_registry()

    def parse_pages(self, pages: Iterable[Sequence[Glyph]], file_name: str = "<glyphs>") -> list[ParseOutcome]:
        outcomes: list[ParseOutcome] = []
        for page, glyphs in enumerate(pages, start=1):
            draft: Optional[RaceDraft] = None
            try:
                draft = self._identify(glyphs)
                outcomes.append(ParseSuccess(page=page, result=self.parse_page(glyphs, draft)))
            except ChartParserError as e:
                if draft is None:
                    logger.error(f"File: {file_name}, page: {page} - {e}")
                    outcomes.append(ParseFailure(page=page, message=str(e)))
                else:
                    summary = race_summary(draft)
                    logger.error(f"File: {file_name}, page: {page}, race: {summary} - {e}")
                    outcomes.append(ParseFailure(page=page, message=str(e), race=summary))
        return outcomes

    def parse_page(self, glyphs: Sequence[Glyph], draft: Optional[RaceDraft] = None) -> RaceResult:
        """Parse one page; raises ChartParserError."""
        if draft is None:
            draft = self._identify(glyphs)
        lines = self._lines(glyphs)
        page_texts = texts(lines)

        draft.cancellation = parse_cancellation(page_texts)
        if draft.cancellation.cancelled:
            logger.info(f"Race {draft.race_number} was cancelled: {draft.cancellation.reason}")
            return RaceResult(
                track=draft.track,
                race_date=draft.race_date,
                race_number=draft.race_number,
                cancellation=draft.cancellation,
            )

        # race type, conditions, distance and purse
        _, draft.race_type = find_race_type(page_texts)
        draft.breed = draft.race_type.breed
        draft.conditions = parse_conditions(page_texts)
        draft.conditions.race_type = draft.race_type
        draft.conditions.purse = parse_purse(page_texts)
        dstr = parse_distance_surface_track_record(page_texts)
        draft.distance_surface_track_record = dstr

        draft.weather, dstr.track_condition = parse_weather(page_texts)
        if draft.weather is not None:
            draft.weather.wind = parse_wind(page_texts)
        draft.post_time = parse_post_time(page_texts)

        # running lines
        grid = split_running_lines(running_lines(lines))
        if grid is None:
            raise ChartParserError("Unable to find the running lines")
        trailer = texts(grid.trailer)
        parse_run_up(trailer, dstr.distance)
        draft.starters = parse_starters(grid, draft.breed, dstr.distance, draft.race_date, self.checkpoints)

        fractional_times = parse_fractional_times(trailer)
        draft.fractionals = leader_fractionals(
            self.checkpoints.resolve_fractionals(draft.breed, dstr.distance.feet, dstr.distance.compact),
            fractional_times.times,
            fractional_times.final_time,
        )

        # ancillary sections
        apply_winners(draft.starters, parse_winners(page_texts))
        apply_claims(draft.starters, parse_claiming_prices(page_texts), parse_claimed_horses(page_texts))
        apply_trainers(draft.starters, parse_trainers(page_texts))
        apply_owners(draft.starters, parse_owners(page_texts))
        draft.scratches = parse_scratches(page_texts)
        apply_disqualifications(draft.starters, parse_disqualifications(page_texts))
        apply_historical_exceptions(draft, self.settings)

        draft.wager_payoff_pools = parse_wagering(lines, self.settings.wagering_row_slack)
        apply_preview(draft.starters, parse_preview(page_texts))
        draft.footnotes = parse_footnotes(page_texts)

        result = finalize(draft, self.settings)
        logger.info(f"Parsed {result.summary_text()} with {result.number_of_runners} starters")
        return result

    def _lines(self, glyphs: Sequence[Glyph]):
        lines = segment_lines(glyphs, self.settings.line_start_x, self.settings.preview_header_x)
        if not lines:
            raise NoLinesToParse("No lines of glyphs to parse")
        return lines

    def _identify(self, glyphs: Sequence[Glyph]) -> RaceDraft:
        identity: RaceIdentity = parse_race_identity(texts(self._lines(glyphs)))
        track = self.tracks.for_name(identity.track_name)
        if track is None:
            raise TrackNotFound(identity.track_name)
        return RaceDraft(track=track, race_date=identity.race_date, race_number=identity.race_number)


def race_summary(draft: RaceDraft) -> str:
    return format_summary(draft.track, draft.race_date, draft.race_number, draft.breed)
