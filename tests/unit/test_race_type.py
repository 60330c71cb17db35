"""Tests for race type, name, black type and breed parsing."""

import pytest

from racechart.exceptions import RaceTypeNotIdentifiable
from racechart.models import Breed
from racechart.race_type import find_race_type, parse_race_type_line


class TestParseRaceTypeLine:
    def test_plain_claiming(self):
        parsed = parse_race_type_line("CLAIMING - Thoroughbred")
        assert parsed.type == "CLAIMING"
        assert parsed.code == "CLM"
        assert parsed.breed is Breed.THOROUGHBRED
        assert parsed.name is None
        assert parsed.is_claiming

    def test_longest_type_wins(self):
        parsed = parse_race_type_line("ALLOWANCE OPTIONAL CLAIMING Handicap - Thoroughbred")
        assert parsed.code == "AOC"
        assert parsed.name == "Handicap"

    def test_graded_stakes(self):
        parsed = parse_race_type_line("STAKES Kentucky Derby Grade 1 - Thoroughbred")
        assert parsed.code == "STK"
        assert parsed.name == "Kentucky Derby"
        assert parsed.grade == 1
        assert parsed.black_type == "Grade 1"
        assert not parsed.is_claiming

    def test_listed_stakes(self):
        parsed = parse_race_type_line("STAKES Some Stakes Listed - Thoroughbred")
        assert parsed.grade is None
        assert parsed.black_type == "Listed"

    def test_quarter_horse(self):
        parsed = parse_race_type_line("MAIDEN - Quarter Horse")
        assert parsed.code == "MDN"
        assert parsed.breed is Breed.QUARTER_HORSE

    def test_claiming_stake_typo(self):
        parsed = parse_race_type_line("Claiming stake Lone Star Stakes - Thoroughbred")
        assert parsed.type == "CLAIMING STAKES"
        assert parsed.code == "CST"

    def test_not_a_race_type_line(self):
        assert parse_race_type_line("AQUEDUCT - January 1, 2017 - Race 1") is None
        assert parse_race_type_line("Purse: $40,000") is None


class TestFindRaceType:
    def test_first_matching_line(self):
        index, parsed = find_race_type(["AQUEDUCT - January 1, 2017 - Race 1", "MAIDEN SPECIAL WEIGHT - Thoroughbred"])
        assert index == 1
        assert parsed.code == "MSW"

    def test_none_found(self):
        with pytest.raises(RaceTypeNotIdentifiable):
            find_race_type(["Purse: $40,000"])
