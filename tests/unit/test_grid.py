"""Tests for column and grid reconstruction."""

from racechart.floor_map import FloorMap
from racechart.grid import (
    ColumnRange,
    assign_columns,
    assign_row,
    build_grid,
    cell_text,
    column_floors,
    group_rows,
    merge_wrapped_rows,
    split_columns,
)
from tests.conftest import WAGERING_HEADER, build_columns, build_glyphs


# ── FloorMap ────────────────────────────────────────────────────────────────


class TestFloorMap:
    def test_floor_lookup(self):
        floors = FloorMap([(3960, "six"), (0, "sprint"), (5280, "mile")])
        assert floors.floor(0) == "sprint"
        assert floors.floor(3959) == "sprint"
        assert floors.floor(3960) == "six"
        assert floors.floor(10560) == "mile"

    def test_below_lowest_key(self):
        assert FloorMap([(10.0, "a")]).floor(9.99) is None

    def test_floor_entry(self):
        assert FloorMap([(1, "a"), (5, "b")]).floor_entry(7) == (5, "b")

    def test_keys_sorted(self):
        floors = FloorMap([(5, "b"), (1, "a")])
        assert floors.keys() == (1, 5)
        assert floors.values() == ("a", "b")
        assert len(floors) == 2

    def test_empty(self):
        floors = FloorMap()
        assert not floors
        assert floors.floor(1) is None


# ── Columns ─────────────────────────────────────────────────────────────────


class TestAssignColumns:
    def test_known_names(self):
        header = build_columns([(10.0, "Pgm"), (30.0, "Horse Name")], 5.0)
        columns = assign_columns(header, ["Pgm", "HorseName"])
        assert columns["Pgm"] == ColumnRange("Pgm", 10.0, 19.0)
        assert columns["HorseName"].left == 30.0

    def test_prefix_name_closes_once(self):
        columns = assign_columns(build_columns(WAGERING_HEADER, 5.0), [
            "Pgm", "Horse", "Win", "Place", "Show", "WagerType", "WinningNumbers", "Payoff", "Pool", "Carryover",
        ])
        assert columns["Win"].left == 120.0
        assert columns["WinningNumbers"].left == 300.0
        assert columns["Payoff"].left == 380.0
        assert len(columns) == 10

    def test_unknown_text_never_closes(self):
        header = build_columns([(10.0, "Pgm"), (30.0, "Mystery")], 5.0)
        assert list(assign_columns(header, ["Pgm"])) == ["Pgm"]


class TestSplitColumns:
    def test_labels_without_spaces(self):
        header = build_columns([(9.92, "Last Raced"), (60.0, "Pgm"), (80.0, "Horse Name (Jockey)")], 5.0)
        columns = split_columns(header)
        assert list(columns) == ["LastRaced", "Pgm", "HorseName(Jockey)"]
        assert columns["Pgm"].left == 60.0
        assert columns["Pgm"].right == 69.0

    def test_contains(self):
        column = ColumnRange("Pgm", 60.0, 69.0)
        assert column.contains(60.0)
        assert column.contains(69.0)
        assert not column.contains(69.5)


# ── Rows and grids ──────────────────────────────────────────────────────────


class TestAssignRow:
    def test_floor_placement(self):
        floors = column_floors({"A": ColumnRange("A", 10.0, 20.0), "B": ColumnRange("B", 50.0, 60.0)})
        row = assign_row(build_glyphs("xy", 10.0, 1.0) + build_glyphs("z", 70.0, 1.0), floors)
        assert cell_text(row["A"]) == "xy"
        assert cell_text(row["B"]) == "z"

    def test_left_of_first_column_dropped(self):
        floors = column_floors({"A": ColumnRange("A", 10.0, 20.0)})
        assert assign_row(build_glyphs("x", 1.0, 1.0), floors) == {}


class TestGroupRows:
    def test_by_y(self):
        rows = group_rows(build_glyphs("ab", 10.0, 1.0) + build_glyphs("c", 10.0, 2.0))
        assert sorted(rows) == [1.0, 2.0]
        assert len(rows[1.0]) == 2

    def test_slack_drops_distant_rows(self):
        glyphs = build_glyphs("a", 10.0, 1.0) + build_glyphs("b", 10.0, 9.0) + build_glyphs("c", 10.0, 40.0)
        rows = group_rows(glyphs, slack=10.0)
        assert sorted(rows) == [1.0, 9.0]


class TestBuildGrid:
    def test_rows_with_no_columns_omitted(self):
        columns = {"A": ColumnRange("A", 10.0, 20.0)}
        rows = {1.0: build_glyphs("x", 12.0, 1.0), 2.0: build_glyphs("y", 2.0, 2.0)}
        assert list(build_grid(rows, columns)) == [1.0]

    def test_no_columns(self):
        assert build_grid({1.0: build_glyphs("x", 12.0, 1.0)}, {}) == {}


class TestMergeWrappedRows:
    def _grid(self, *rows):
        return {float(i): row for i, row in enumerate(rows)}

    def test_value_only_row_folds_into_previous(self):
        grid = self._grid(
            {"WagerType": build_glyphs("$1.00 Pick 3", 0, 0.0), "WinningNumbersPayoff": build_glyphs("2-7", 50, 0.0)},
            {"WinningNumbersPayoff": build_glyphs("-1|12.40", 50, 1.0)},
        )
        merged = merge_wrapped_rows(grid)
        assert cell_text(merged[0.0]["WinningNumbersPayoff"]) == "2-7\n-1|12.40"
        assert merged[1.0] == {}

    def test_label_without_marker_folds_both_cells(self):
        grid = self._grid(
            {"WagerType": build_glyphs("$2.00 Daily", 0, 0.0), "WinningNumbersPayoff": build_glyphs("1-2", 50, 0.0)},
            {"WagerType": build_glyphs("Double", 0, 1.0), "WinningNumbersPayoff": build_glyphs("|9.80", 50, 1.0)},
        )
        merged = merge_wrapped_rows(grid)
        assert cell_text(merged[0.0]["WagerType"]) == "$2.00 Daily\nDouble"
        assert "WagerType" not in merged[1.0]

    def test_new_wager_row_kept(self):
        grid = self._grid(
            {"WagerType": build_glyphs("$2.00 Exacta", 0, 0.0), "WinningNumbersPayoff": build_glyphs("1-2", 50, 0.0)},
            {"WagerType": build_glyphs("$1.00 Trifecta", 0, 1.0), "WinningNumbersPayoff": build_glyphs("1-2-3", 50, 1.0)},
        )
        merged = merge_wrapped_rows(grid)
        assert cell_text(merged[1.0]["WagerType"]) == "$1.00 Trifecta"

    def test_idempotent(self):
        grid = self._grid(
            {"WagerType": build_glyphs("$1.00 Pick 3", 0, 0.0), "WinningNumbersPayoff": build_glyphs("2-7", 50, 0.0)},
            {"WinningNumbersPayoff": build_glyphs("-1|12.40", 50, 1.0)},
            {"WagerType": build_glyphs("$2.00 Exacta", 0, 2.0), "WinningNumbersPayoff": build_glyphs("1-2", 50, 2.0)},
        )
        once = merge_wrapped_rows(grid)
        twice = merge_wrapped_rows(once)
        assert {k: {n: cell_text(c) for n, c in row.items()} for k, row in once.items()} == \
            {k: {n: cell_text(c) for n, c in row.items()} for k, row in twice.items()}

    def test_input_not_modified(self):
        grid = self._grid(
            {"WagerType": build_glyphs("$1.00 Pick 3", 0, 0.0), "WinningNumbersPayoff": build_glyphs("2-7", 50, 0.0)},
            {"WinningNumbersPayoff": build_glyphs("-1", 50, 1.0)},
        )
        merge_wrapped_rows(grid)
        assert "WinningNumbersPayoff" in grid[1.0]


class TestCellText:
    def test_separators_stripped(self):
        assert cell_text(build_glyphs("| 3.40 |", 0, 1.0)) == "3.40"

    def test_lines_joined(self):
        assert cell_text(build_glyphs("ab", 0, 1.0) + build_glyphs("cd", 0, 2.0)) == "ab\ncd"

    def test_empty(self):
        assert cell_text(None) == ""
        assert cell_text([]) == ""
