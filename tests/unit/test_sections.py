"""Tests for the free-text chart sections."""

from datetime import date

import pytest

from racechart.distance import RaceDistance
from racechart.exceptions import ClaimingPriceParseError, InvalidRaceError, PointOfCallNotFound
from racechart.models import Horse, PointOfCall, RelativePosition, Starter
from racechart.sections import (
    apply_preview,
    flatten,
    parse_cancellation,
    parse_claimed_horses,
    parse_claiming_prices,
    parse_disqualifications,
    parse_footnotes,
    parse_fractional_times,
    parse_owners,
    parse_post_time,
    parse_preview,
    parse_preview_position,
    parse_race_identity,
    parse_run_up,
    parse_scratches,
    parse_trainers,
    parse_weather,
    parse_wind,
    parse_winners,
)
from tests.conftest import FOOTNOTE_TEXTS, HEADER_TEXTS, TRAILER_TEXTS

PAGE_TEXTS = HEADER_TEXTS + TRAILER_TEXTS + FOOTNOTE_TEXTS


class TestFlatten:
    def test_separators_become_spaces(self):
        assert flatten("Weather:|Clear| Track:|Fast") == "Weather: Clear Track: Fast"


class TestRaceIdentity:
    def test_identity(self):
        identity = parse_race_identity(PAGE_TEXTS)
        assert identity.track_name == "AQUEDUCT"
        assert identity.race_date == date(2017, 1, 1)
        assert identity.race_number == 1

    def test_multi_word_track(self):
        identity = parse_race_identity(["PARX RACING - May 7, 2016 - Race 8"])
        assert identity.track_name == "PARX RACING"
        assert identity.race_number == 8

    def test_missing(self):
        with pytest.raises(InvalidRaceError):
            parse_race_identity(["Purse: $40,000"])

    def test_bad_date(self):
        with pytest.raises(InvalidRaceError, match="race date"):
            parse_race_identity(["AQUEDUCT - Smarch 1, 2017 - Race 1"])


class TestCancellation:
    def test_not_cancelled(self):
        assert not parse_cancellation(PAGE_TEXTS).cancelled

    def test_cancelled_with_reason(self):
        cancellation = parse_cancellation(["AQUEDUCT - January 1, 2017 - Race 9", "Race Cancelled - Weather"])
        assert cancellation.cancelled
        assert cancellation.reason == "Weather"

    def test_cancelled_without_reason(self):
        cancellation = parse_cancellation(["Race Cancelled"])
        assert cancellation.cancelled
        assert cancellation.reason is None


class TestConditionsOfTheDay:
    def test_weather_and_track_condition(self):
        weather, condition = parse_weather(PAGE_TEXTS)
        assert weather.text == "Clear"
        assert condition == "Fast"

    def test_weather_with_wind(self):
        texts = ["Weather: Cloudy Track: Good Wind Speed: 12 mph Wind Direction: Head"]
        weather, condition = parse_weather(texts)
        assert weather.text == "Cloudy"
        assert condition == "Good"
        wind = parse_wind(texts)
        assert wind.speed == 12
        assert wind.direction == "Head"

    def test_no_weather(self):
        assert parse_weather(["Purse: $40,000"]) == (None, None)
        assert parse_wind(PAGE_TEXTS) is None

    def test_post_time(self):
        post_time = parse_post_time(PAGE_TEXTS)
        assert post_time.post_time == "12:31"
        assert post_time.start_comments == "Good for all"
        assert post_time.timer == "Electronic"

    def test_post_time_only(self):
        assert parse_post_time(["Off at: 4:05"]).start_comments is None


class TestWinners:
    def test_winner_and_breeder(self):
        [winner] = parse_winners(PAGE_TEXTS)
        assert winner.horse_name == "Tiz the Law"
        assert winner.color == "Bay"
        assert winner.sex == "Colt"
        assert winner.sire == "Constitution"
        assert winner.dam == "Tizfiz"
        assert winner.dam_sire == "Tiznow"
        assert winner.foaling_date == date(2017, 3, 22)
        assert winner.foaling_location == "Kentucky"
        assert winner.breeder == "Tiz the Law LLC"

    def test_dead_heat_winners(self):
        texts = [
            "Winner: Alpha, Dark Bay or Brown Filly, by Sire A out of Dam A, by Damsire A. Foaled Apr 1, 2014 in Florida.",
            "Breeder: Breeder A",
            "Winner: Beta, Chestnut Gelding, by Sire B out of Dam B, by Damsire B. Foaled Feb 2, 2013 in Kentucky.",
            "Breeder: Breeder B",
        ]
        alpha, beta = parse_winners(texts)
        assert alpha.color == "Dark Bay or Brown"
        assert alpha.breeder == "Breeder A"
        assert beta.sex == "Gelding"
        assert beta.breeder == "Breeder B"

    def test_none(self):
        assert parse_winners(["Breeder: Orphan"]) == []


class TestClaims:
    def test_claiming_prices(self):
        prices = parse_claiming_prices(PAGE_TEXTS)
        assert [(p.program, p.horse_name, p.price) for p in prices] == [
            ("2", "Second Horse", 25000),
            ("3", "Third Horse", 20000),
        ]

    def test_claiming_price_without_program(self):
        [price] = parse_claiming_prices(["Claiming Prices: Lonely Horse: $5,000"])
        assert price.program is None
        assert price.horse_name == "Lonely Horse"

    def test_unparseable_claiming_price(self):
        with pytest.raises(ClaimingPriceParseError, match="Second Horse"):
            parse_claiming_prices(["Claiming Prices: 2 - Second Horse: $,"])

    def test_claimed_horses(self):
        [claimed] = parse_claimed_horses(PAGE_TEXTS)
        assert claimed.horse_name == "Third Horse"
        assert claimed.new_trainer_name == "Rudy Rodriguez"
        assert claimed.new_owner_name == "Michael Dubb"

    def test_claimed_horses_on_following_lines(self):
        texts = [
            "2 Claimed Horse(s): Alpha New Trainer: Trainer A New Owner: Owner A",
            "Beta New Trainer: Trainer B New Owner: Owner B",
            "Scratched Horse(s): None",
        ]
        assert [c.horse_name for c in parse_claimed_horses(texts)] == ["Alpha", "Beta"]

    def test_no_claims(self):
        assert parse_claiming_prices(["Purse: $40,000"]) == []
        assert parse_claimed_horses(["Purse: $40,000"]) == []


class TestConnections:
    def test_trainers(self):
        trainers = parse_trainers(PAGE_TEXTS)
        assert [(t.program, t.first_name, t.last_name) for t in trainers] == [
            ("1", "Kristin", "Barclay"),
            ("2", "Todd", "Pletcher"),
            ("3", "Chad", "Brown"),
        ]
        assert trainers[0].name == "Kristin Barclay"

    def test_owners(self):
        owners = parse_owners(PAGE_TEXTS)
        assert [(o.program, o.name) for o in owners] == [
            ("1", "Sackatoga Stable"),
            ("2", "Repole Stable"),
            ("3", "Klaravich Stables"),
        ]

    def test_entry_programs_upper_cased(self):
        [owner] = parse_owners(["Owners: 1a - Stable A"])
        assert owner.program == "1A"


class TestScratchesAndDisqualifications:
    def test_scratches(self):
        [scratch] = parse_scratches(PAGE_TEXTS)
        assert scratch.horse_name == "Scratchy"
        assert scratch.reason == "Vet"

    def test_scratch_reasons_with_commas(self):
        scratches = parse_scratches(["Scratched Horse(s): Alpha (Trainer, Sick), Beta"])
        assert [(s.horse_name, s.reason) for s in scratches] == [("Alpha", "Trainer, Sick"), ("Beta", None)]

    def test_disqualifications(self):
        [dq] = parse_disqualifications(["Disqualification(s): #3 Third Horse from 2 to 5"])
        assert dq.program == "3"
        assert dq.horse_name == "Third Horse"
        assert dq.original_position == 2
        assert dq.new_position == 5

    def test_disqualification_without_program(self):
        [dq] = parse_disqualifications(["Disqualification(s): Third Horse from 1 to 3"])
        assert dq.program is None

    def test_none(self):
        assert parse_scratches(["Purse: $40,000"]) == []
        assert parse_disqualifications(PAGE_TEXTS) == []


class TestFootnotes:
    def test_footnotes_without_copyright(self):
        assert parse_footnotes(PAGE_TEXTS) == "TIZ THE LAW broke alertly and drew clear."

    def test_none(self):
        assert parse_footnotes(HEADER_TEXTS) is None


class TestTimingLines:
    def test_run_up(self):
        distance = RaceDistance("Six Furlongs", "6f", True, 3960)
        parse_run_up(["Run-Up: 48 feet Temporary Rail: 20 feet"], distance)
        assert distance.run_up == 48
        assert distance.temp_rail == 20

    def test_run_up_without_rail(self):
        distance = RaceDistance("Six Furlongs", "6f", True, 3960)
        parse_run_up(TRAILER_TEXTS, distance)
        assert distance.run_up == 48
        assert distance.temp_rail is None

    def test_fractional_times(self):
        times = parse_fractional_times(TRAILER_TEXTS)
        assert times.times == ["22.25", "45.60", "57.90"]
        assert times.final_time == "1:10.55"

    def test_final_time_only(self):
        times = parse_fractional_times(["Final Time: 21.345"])
        assert times.times == []
        assert times.final_time == "21.345"

    def test_no_times(self):
        assert parse_fractional_times(["Run-Up: 48 feet"]).final_time is None


class TestPreview:
    TEXTS = [
        "Past Performance Running Line Preview",
        "Pgm|Horse Name|Start|1/4|1/2|Str|Fin",
        "1|Tiz the Law|2 Hd|1|1|1|1",
        "2|Second Horse|1|2 1/2|2 2|2 3|2 4 1/2",
        "Trainers: 1 - Barclay, Kristin",
    ]

    def test_rows(self):
        first, second = parse_preview(self.TEXTS)
        assert first.program == "1"
        assert first.horse_name == "Tiz the Law"
        assert list(first.positions) == ["Start", "1/4", "1/2", "Str", "Fin"]
        assert second.positions["Fin"].position == 2
        assert second.positions["Fin"].total_lengths_behind.lengths == 4.5

    def test_no_preview(self):
        assert parse_preview(HEADER_TEXTS) == []

    def test_preview_position(self):
        relative = parse_preview_position("3 1 1/2")
        assert relative.position == 3
        assert relative.total_lengths_behind.lengths == 1.5
        assert parse_preview_position("---") is None

    def test_apply_preview(self):
        starter = Starter(
            program="2",
            horse=Horse("Second Horse"),
            points_of_call=[
                PointOfCall(5, "Str", relative_position=RelativePosition(2)),
                PointOfCall(6, "Fin", relative_position=RelativePosition(2)),
            ],
        )
        rows = parse_preview(self.TEXTS)
        rows[1].positions = {k: v for k, v in rows[1].positions.items() if k in ("Str", "Fin")}
        apply_preview([starter], rows)
        assert starter.point_of_call_named("Str").relative_position.total_lengths_behind.lengths == 3.0
        assert starter.point_of_call_named("Fin").relative_position.total_lengths_behind.lengths == 4.5

    def test_apply_preview_unknown_column(self):
        starter = Starter(program="2", horse=Horse("Second Horse"))
        with pytest.raises(PointOfCallNotFound):
            apply_preview([starter], parse_preview(self.TEXTS))
