"""Reconciliation of independently parsed chart sections into one race result.

Starters are built from the running lines first; the ancillary sections
(winners, claims, connections, disqualifications, payoffs) are then matched
onto them, and `finalize` runs the race-level passes in FINALIZE_PASSES
order. Ancillary records match a starter by program number, and by horse
name only when the record carries no program.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional, Sequence

from racechart.conditions import RaceConditions
from racechart.config import Settings
from racechart.distance import DistanceSurfaceTrackRecord
from racechart.exceptions import NoWinnersDeclared
from racechart.models import (
    FINISH_POINT,
    Breed,
    Cancellation,
    Claim,
    ClaimedHorse,
    ClaimingPrice,
    Disqualification,
    Fractional,
    Owner,
    PostTimeStartCommentsTimer,
    Rating,
    Scratch,
    Split,
    Starter,
    Track,
    Trainer,
    Weather,
    Winner,
)
from racechart.race_type import RaceTypeNameBlackTypeBreed
from racechart.result import RaceResult
from racechart.timing import estimate_individual_time, format_time, splits_from_fractionals
from racechart.wagering import WagerPayoffPools, WinPlaceShowPayoff

logger = logging.getLogger(__name__)

# Settled by the stewards with no dead heat for first, although the chart
# prints two starters in first
HISTORICAL_EXCEPTIONS = {
    ("PRX", date(2016, 5, 7), 8),
}


def is_historical_exception(track_code: str, race_date: date, race_number: int) -> bool:
    return (track_code, race_date, race_number) in HISTORICAL_EXCEPTIONS


@dataclass
class RaceDraft:
    """Mutable staging record for a race while its sections are reconciled."""

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
    starters: list[Starter] = field(default_factory=list)
    scratches: list[Scratch] = field(default_factory=list)
    fractionals: list[Fractional] = field(default_factory=list)
    splits: list[Split] = field(default_factory=list)
    wager_payoff_pools: Optional[WagerPayoffPools] = None
    footnotes: Optional[str] = None
    ratings: list[Rating] = field(default_factory=list)
    dead_heat: bool = False

    @property
    def historical_exception(self) -> bool:
        return is_historical_exception(self.track.code, self.race_date, self.race_number)


def find_starter(starters: Sequence[Starter], program: Optional[str], horse_name: Optional[str]) -> Optional[Starter]:
    for starter in starters:
        if starter.matches(program, horse_name):
            return starter
    return None


# ── Ancillary sections ──────────────────────────────────────────────────────


def apply_winners(starters: Sequence[Starter], winners: Sequence[Winner]) -> None:
    """Enrich the winners' horses with breeding details."""
    if not winners:
        logger.warning(str(NoWinnersDeclared()))
        return
    for winner in winners:
        starter = find_starter(starters, None, winner.horse_name)
        if starter is None:
            logger.warning(f"No starter found for winner: {winner.horse_name}")
            continue
        starter.update_winner(winner)


def apply_claims(
    starters: Sequence[Starter],
    claiming_prices: Sequence[ClaimingPrice],
    claimed_horses: Sequence[ClaimedHorse],
) -> None:
    for starter in starters:
        price = next(
            (p for p in claiming_prices if starter.matches(p.program, p.horse_name)), None
        )
        claimed = next((c for c in claimed_horses if c.horse_name == starter.horse_name), None)
        if price is None and claimed is None:
            continue
        starter.claim = Claim(
            price=price.price if price else None,
            claimed=claimed is not None,
            new_trainer_name=claimed.new_trainer_name if claimed else None,
            new_owner_name=claimed.new_owner_name if claimed else None,
        )


def apply_trainers(starters: Sequence[Starter], trainers: Sequence[Trainer]) -> None:
    """Match by program; a trainer listed without a program goes to the starter at its index."""
    for index, trainer in enumerate(trainers):
        if trainer.program is not None:
            starter = find_starter(starters, trainer.program, None)
        else:
            starter = starters[index] if index < len(starters) else None
        if starter is not None:
            starter.trainer = trainer


def apply_owners(starters: Sequence[Starter], owners: Sequence[Owner]) -> None:
    for index, owner in enumerate(owners):
        if owner.program is not None:
            starter = find_starter(starters, owner.program, None)
        else:
            starter = starters[index] if index < len(starters) else None
        if starter is not None:
            starter.owner = owner


def apply_disqualifications(starters: Sequence[Starter], disqualifications: Sequence[Disqualification]) -> None:
    """Set the disqualified starter's official position and move up those it was placed behind.

    Every other starter whose position lies after the original position, up
    to and including the new one, gains one place.
    """
    for dq in disqualifications:
        disqualified = find_starter(starters, dq.program, dq.horse_name)
        if disqualified is None:
            logger.warning(f"No starter found for disqualification of #{dq.program} {dq.horse_name}")
            continue
        disqualified.apply_disqualification(dq)
        for starter in starters:
            if starter is disqualified:
                continue
            if starter.official_position is None:
                starter.official_position = starter.finish_position
            official = starter.official_position
            if official is not None and dq.original_position < official <= dq.new_position:
                starter.official_position = official - 1


def apply_historical_exceptions(draft: RaceDraft, settings: Settings) -> None:
    """Official placings for races settled differently from the chart's finish order."""
    if not settings.historical_exceptions_enabled or not draft.historical_exception:
        return
    for starter in draft.starters:
        finish = starter.finish_position
        if finish is not None and finish > 1:
            starter.official_position = finish - 1


# ── Finalize passes ─────────────────────────────────────────────────────────


def mark_entries(draft: RaceDraft, settings: Settings) -> None:
    """Flag coupled/field entries: starters sharing an entry program."""
    groups: dict[Optional[str], list[Starter]] = defaultdict(list)
    for starter in draft.starters:
        groups[starter.entry_program].append(starter)
    for key, group in groups.items():
        if key is not None and len(group) > 1:
            for starter in group:
                starter.entry = True


def attach_payoffs(draft: RaceDraft, settings: Settings) -> None:
    """Apply each entry's WPS payoff to every starter in the entry, else match on horse name."""
    if draft.wager_payoff_pools is None:
        return
    first_by_entry: dict[Optional[str], WinPlaceShowPayoff] = {}
    for payoff in draft.wager_payoff_pools.win_place_show_payoffs:
        first_by_entry.setdefault(payoff.entry_program, payoff)

    entry_programs = {s.entry_program for s in draft.starters}
    for key, payoff in first_by_entry.items():
        if key is not None and key in entry_programs:
            for starter in draft.starters:
                if starter.entry_program == key:
                    starter.set_payoff(payoff)
        else:
            starter = find_starter(draft.starters, None, payoff.horse_name)
            if starter is not None:
                starter.set_payoff(payoff)


def compute_fractionals(draft: RaceDraft, settings: Settings) -> None:
    """Per-starter fractionals and splits.

    With leader times (Thoroughbred, Arabian) each starter's time at a
    checkpoint it has a point of call at is estimated from its lengths
    behind. Quarter Horse and Mixed charts time every starter at the
    finish; the first finisher's time is the race's.
    """
    if draft.fractionals:
        for starter in draft.starters:
            starter.fractionals = []
            for leader in draft.fractionals:
                point_of_call = starter.point_of_call_at(leader.feet)
                if point_of_call is None:
                    continue
                starter.fractionals.append(
                    estimate_individual_time(leader, point_of_call, settings.length_in_feet)
                )
            starter.splits = splits_from_fractionals(starter.fractionals)
        draft.splits = splits_from_fractionals(draft.fractionals)
        return

    if draft.breed is None or not draft.breed.records_individual_times:
        return
    dstr = draft.distance_surface_track_record
    if dstr is None:
        return
    distance = dstr.distance
    for starter in draft.starters:
        millis = starter.individual_time_millis
        if millis is None:
            continue
        finish = Fractional(FINISH_POINT, "Fin", distance.compact, distance.feet, format_time(millis), millis)
        starter.fractionals = [finish]
        starter.splits = splits_from_fractionals(starter.fractionals)
        if not draft.fractionals and starter.finished_first:
            draft.fractionals = [
                Fractional(finish.point, finish.text, finish.compact, finish.feet, finish.time, finish.millis)
            ]
            draft.splits = splits_from_fractionals(draft.fractionals)


def rank_odds(draft: RaceDraft, settings: Settings) -> None:
    """1-based betting choice; equal odds share a rank and the next rank is skipped."""
    ordered = sorted(s.odds for s in draft.starters if s.odds is not None)
    for starter in draft.starters:
        if starter.odds is not None:
            starter.choice = ordered.index(starter.odds) + 1


def mark_position_dead_heats(draft: RaceDraft, settings: Settings) -> None:
    groups: dict[int, list[Starter]] = defaultdict(list)
    for starter in draft.starters:
        if starter.finish_position is not None:
            groups[starter.finish_position].append(starter)
    for group in groups.values():
        if len(group) > 1:
            for starter in group:
                starter.position_dead_heat = True


def detect_race_dead_heat(draft: RaceDraft, settings: Settings) -> None:
    if settings.historical_exceptions_enabled and draft.historical_exception:
        draft.dead_heat = False
        return
    draft.dead_heat = sum(1 for s in draft.starters if s.placing == 1) > 1


Pass = Callable[[RaceDraft, Settings], None]

FINALIZE_PASSES: tuple[tuple[str, Pass], ...] = (
    ("mark_entries", mark_entries),
    ("attach_payoffs", attach_payoffs),
    ("compute_fractionals", compute_fractionals),
    ("rank_odds", rank_odds),
    ("mark_position_dead_heats", mark_position_dead_heats),
    ("detect_race_dead_heat", detect_race_dead_heat),
)


def finalize(draft: RaceDraft, settings: Settings) -> RaceResult:
    for name, run in FINALIZE_PASSES:
        logger.debug(f"Running {name} for race {draft.race_number}")
        run(draft, settings)
    return RaceResult(
        track=draft.track,
        race_date=draft.race_date,
        race_number=draft.race_number,
        cancellation=draft.cancellation,
        breed=draft.breed,
        race_type=draft.race_type,
        conditions=draft.conditions,
        distance_surface_track_record=draft.distance_surface_track_record,
        weather=draft.weather,
        post_time=draft.post_time,
        dead_heat=draft.dead_heat,
        starters=draft.starters,
        scratches=draft.scratches,
        fractionals=draft.fractionals,
        splits=draft.splits,
        wager_payoff_pools=draft.wager_payoff_pools,
        footnotes=draft.footnotes,
        ratings=draft.ratings,
    )
