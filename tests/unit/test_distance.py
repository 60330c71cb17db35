"""Tests for distance, surface and track record parsing."""

from datetime import date

import pytest

from racechart.distance import (
    Format,
    Surface,
    compact_for_feet,
    is_valid_distance_text,
    parse_chart_date,
    parse_distance_surface,
    parse_distance_surface_track_record,
    parse_race_distance,
)
from racechart.exceptions import InvalidDistanceError, NoRaceDistanceFound


class TestParseRaceDistance:
    def test_furlongs(self):
        distance = parse_race_distance("Six Furlongs")
        assert distance.feet == 3960
        assert distance.compact == "6f"
        assert distance.exact
        assert distance.furlongs == 6.0

    def test_furlongs_and_fraction(self):
        distance = parse_race_distance("Five And One Half Furlongs")
        assert distance.feet == 3630
        assert distance.compact == "5 1/2f"

    def test_about(self):
        distance = parse_race_distance("About Seven And One Half Furlongs")
        assert distance.feet == 4950
        assert distance.compact == "Abt 7 1/2f"
        assert not distance.exact

    def test_mile(self):
        distance = parse_race_distance("One Mile")
        assert distance.feet == 5280
        assert distance.compact == "1m"

    def test_miles_and_fraction(self):
        distance = parse_race_distance("One And One Sixteenth Miles")
        assert distance.feet == 5610
        assert distance.compact == "1 1/16m"

    def test_miles_and_yards(self):
        distance = parse_race_distance("One Mile And Seventy Yards")
        assert distance.feet == 5490
        assert distance.compact == "1m 70y"

    def test_yards(self):
        distance = parse_race_distance("Three Hundred Fifty Yards")
        assert distance.feet == 1050
        assert distance.compact == "350y"

    def test_thousand_yards(self):
        distance = parse_race_distance("One Thousand Yards")
        assert distance.feet == 3000
        assert distance.compact == "1000y"

    def test_furlongs_and_yards(self):
        distance = parse_race_distance("Four Furlongs And Fifty Yards")
        assert distance.feet == 2640 + 150
        assert distance.compact == "4f 50y"

    def test_unknown_term(self):
        with pytest.raises(InvalidDistanceError):
            parse_race_distance("Sixty Furlongs")

    def test_unparseable(self):
        with pytest.raises(InvalidDistanceError):
            parse_race_distance("A Long Way")


class TestCompactForFeet:
    def test_standard(self):
        assert compact_for_feet(3300) == "5f"

    def test_nonstandard(self):
        assert compact_for_feet(3500) == "5.30f"


class TestParseChartDate:
    def test_formats(self):
        assert parse_chart_date("April 10, 1999") == date(1999, 4, 10)
        assert parse_chart_date("Apr 10, 1999") == date(1999, 4, 10)
        assert parse_chart_date("4/10/1999") == date(1999, 4, 10)

    def test_unparseable(self):
        assert parse_chart_date("sometime") is None
        assert parse_chart_date(None) is None


class TestParseDistanceSurface:
    def test_with_track_record(self):
        dstr = parse_distance_surface(
            "Six Furlongs On The Dirt|Track Record: (Kelly Kip - 1:07.54 - April 10, 1999)"
        )
        assert dstr.distance.feet == 3960
        assert dstr.surface is Surface.DIRT
        assert dstr.course == "Dirt"
        assert dstr.format is Format.FLAT
        assert dstr.track_record.holder == "Kelly Kip"
        assert dstr.track_record.time == "1:07.54"
        assert dstr.track_record.millis == 67540
        assert dstr.track_record.race_date == date(1999, 4, 10)
        assert not dstr.off_turf

    def test_off_the_turf(self):
        dstr = parse_distance_surface(
            "One Mile On The Dirt - Originally Scheduled For the Turf"
        )
        assert dstr.surface is Surface.DIRT
        assert dstr.scheduled_surface is Surface.TURF
        assert dstr.off_turf
        assert dstr.track_record is None

    def test_jumps_course(self):
        dstr = parse_distance_surface("Two Miles On The Hurdle")
        assert dstr.surface is Surface.TURF
        assert dstr.format is Format.JUMPS

    def test_unknown_course(self):
        dstr = parse_distance_surface("Six Furlongs On The Beach")
        assert dstr.surface is None
        assert dstr.course is None

    def test_no_match(self):
        assert parse_distance_surface("Purse: $40,000") is None


class TestParseDistanceSurfaceTrackRecord:
    def test_wrapped_track_record(self):
        texts = [
            "CLAIMING - Thoroughbred",
            "Six Furlongs On The Dirt|Track Record: (Kelly Kip - 1:07.54 -",
            "April 10, 1999)",
            "Purse: $40,000",
        ]
        dstr = parse_distance_surface_track_record(texts)
        assert dstr.track_record.race_date == date(1999, 4, 10)

    def test_conditions_lookalike_skipped(self):
        texts = [
            "Six Furlongs On The Dirt For Horses Which Have Not Won A Race Other Than Claiming",
            "Seven Furlongs On The Turf",
        ]
        assert parse_distance_surface_track_record(texts).distance.feet == 4620

    def test_missing(self):
        with pytest.raises(NoRaceDistanceFound):
            parse_distance_surface_track_record(["Purse: $40,000"])


class TestIsValidDistanceText:
    def test_conditions(self):
        assert not is_valid_distance_text("Six Furlongs On The Dirt Claiming Price $25,000")

    def test_track_record_overrides(self):
        assert is_valid_distance_text("Six Furlongs On The Dirt|Track Record: (Allowed Time - 1:07.54 - May 1, 2000)")
