"""Unit tests for src/sumzero/patterns.py"""

import random

import pytest

from src.core.shared_types import PatternKind
from src.sumzero.board import Board
from src.sumzero.patterns import (
    LineDirection,
    LinePattern,
    RectanglePattern,
    TerritoryRegion,
    calculate_new_points,
    diagonal_line_points,
    find_line_patterns,
    find_rectangle_patterns,
    find_territory_patterns,
    recognize_patterns,
    rectangle_points,
    resolve_overlapping_patterns,
    straight_line_points,
)


def board_with(rows: int, cols: int, cells: list[tuple[int, int]], player: int = 1) -> Board:
    return Board.create_empty(rows, cols).place(cells, player)


# --- POINT TABLE ---
@pytest.mark.parametrize(
    "length, expected",
    [
        (4, ("SHORT_LINE_4", 5)),
        (5, ("SHORT_LINE_5", 6)),
        (6, ("MEDIUM_LINE_6", 8)),
        (7, ("MEDIUM_LINE_7", 9)),
        (8, ("LONG_LINE_8", 15)),
        (9, ("LONG_LINE_9", 18)),
        (10, ("LONG_LINE_10", 20)),
        (11, ("EXTRA_LONG_LINE", 30)),
        (15, ("EXTRA_LONG_LINE", 30)),
    ],
)
def test_straight_line_points(length: int, expected: tuple[str, int]) -> None:
    assert straight_line_points(length) == expected


@pytest.mark.parametrize(
    "length, expected",
    [
        (4, ("DIAGONAL_CHAIN_4", 6)),
        (5, ("DIAGONAL_CHAIN_5", 7)),
        (6, ("DIAGONAL_CHAIN_LONG", 12)),
        (9, ("DIAGONAL_CHAIN_LONG", 18)),
    ],
)
def test_diagonal_line_points(length: int, expected: tuple[str, int]) -> None:
    assert diagonal_line_points(length) == expected


@pytest.mark.parametrize(
    "width, height, expected",
    [
        (2, 2, ("EXTRA_LARGE_SQUARE", 8)),
        (3, 3, ("MINI_SQUARE_3x3", 10)),
        (4, 4, ("LARGE_SQUARE_4x4", 22)),
        (5, 5, ("LARGE_SQUARE_5x5", 30)),
        (6, 6, ("EXTRA_LARGE_SQUARE", 72)),
        (2, 3, ("SMALL_RECTANGLE_2x3", 7)),
        (3, 2, ("SMALL_RECTANGLE_2x3", 7)),
        (4, 3, ("LARGE_RECTANGLE_3x4", 18)),
        (6, 2, ("LARGE_RECTANGLE_2x6", 16)),
        (2, 4, ("CUSTOM_RECTANGLE", 12)),
        (5, 3, ("CUSTOM_RECTANGLE", 22)),
    ],
)
def test_rectangle_points(width: int, height: int, expected: tuple[str, int]) -> None:
    assert rectangle_points(width, height) == expected


# --- LINES ---
def test_short_lines_are_ignored() -> None:
    board = board_with(8, 8, [(0, 3), (1, 3), (2, 3)])
    assert find_line_patterns(board, board.cells_of(1)) == []


def test_maximal_run_only() -> None:
    cells = [(x, 2) for x in range(1, 7)]
    board = board_with(8, 8, cells)
    patterns = find_line_patterns(board, board.cells_of(1))
    assert len(patterns) == 1
    assert patterns[0].pattern_id == "MEDIUM_LINE_6"
    assert patterns[0].direction == LineDirection.HORIZONTAL
    assert patterns[0].cells == tuple(cells)
    assert patterns[0].kind == PatternKind.LINE


@pytest.mark.parametrize(
    "cells, direction, pattern_id",
    [
        ([(2, y) for y in range(1, 5)], LineDirection.VERTICAL, "SHORT_LINE_4"),
        ([(i, i) for i in range(1, 5)], LineDirection.DIAGONAL, "DIAGONAL_CHAIN_4"),
        ([(6 - i, i) for i in range(5)], LineDirection.ANTI_DIAGONAL, "DIAGONAL_CHAIN_5"),
    ],
)
def test_line_directions(
    cells: list[tuple[int, int]], direction: LineDirection, pattern_id: str
) -> None:
    board = board_with(8, 8, cells)
    patterns = find_line_patterns(board, board.cells_of(1))
    assert [(p.direction, p.pattern_id) for p in patterns] == [(direction, pattern_id)]
    assert sorted(patterns[0].cells) == sorted(cells)


def test_full_row_and_column_beat_ordinary_lines() -> None:
    row = board_with(6, 5, [(x, 0) for x in range(5)])
    (full_row,) = find_line_patterns(row, row.cells_of(1))
    assert full_row.pattern_id == "FULL_ROW"
    assert full_row.points == 25

    column = board_with(6, 5, [(4, y) for y in range(6)])
    (full_column,) = find_line_patterns(column, column.cells_of(1))
    assert full_column.pattern_id == "FULL_COLUMN"
    assert full_column.points > straight_line_points(6)[1]


def test_long_full_row_is_still_worth_more() -> None:
    board = board_with(2, 12, [(x, 1) for x in range(12)])
    (full_row,) = find_line_patterns(board, board.cells_of(1))
    assert full_row.points == 31


def test_opponent_cells_break_a_line() -> None:
    board = board_with(8, 8, [(0, 0), (1, 0), (3, 0), (4, 0)]).place([(2, 0)], 2)
    assert find_line_patterns(board, board.cells_of(1)) == []


# --- RECTANGLES ---
def test_filled_2x3_block() -> None:
    cells = [(x, y) for y in range(3, 5) for x in range(2, 5)]
    board = board_with(8, 8, cells)
    found = {(p.pattern_id, p.width, p.height) for p in find_rectangle_patterns(board, board.cells_of(1))}
    assert found == {
        ("EXTRA_LARGE_SQUARE", 2, 2),
        ("SMALL_RECTANGLE_2x3", 3, 2),
    }
    squares = [p for p in find_rectangle_patterns(board, board.cells_of(1)) if p.width == p.height]
    assert len(squares) == 2
    assert all(p.kind == PatternKind.SQUARE for p in squares)


def test_rectangle_kind() -> None:
    assert RectanglePattern("SMALL_RECTANGLE_2x3", 7, (), 3, 2).kind == PatternKind.RECTANGLE
    assert RectanglePattern("MINI_SQUARE_3x3", 10, (), 3, 3).kind == PatternKind.SQUARE


def test_full_board_counts_every_position() -> None:
    board = board_with(3, 3, [(x, y) for y in range(3) for x in range(3)])
    patterns = find_rectangle_patterns(board, board.cells_of(1))
    # 2x2: 4 positions, 2x3 and 3x2: 2 each, 3x3: 1
    assert len(patterns) == 4 + 2 + 2 + 1


# --- TERRITORY ---
def test_corner_control() -> None:
    corner = [(x, y) for y in range(3) for x in range(3) if (x, y) not in ((2, 2), (2, 0))]
    board = board_with(8, 8, corner)
    territory = find_territory_patterns(board, board.cells_of(1))
    assert [(p.pattern_id, p.label, p.controlled) for p in territory] == [
        ("CORNER_CONTROL", "top_left", 7)
    ]
    assert territory[0].region == TerritoryRegion.CORNER
    assert territory[0].kind == PatternKind.TERRITORY


def test_corner_needs_seven_cells() -> None:
    six = [(x, y) for y in range(5, 8) for x in range(5, 8)][:6]
    board = board_with(8, 8, six)
    assert find_territory_patterns(board, board.cells_of(1)) == []


def test_edge_control_threshold() -> None:
    """10 cells: 80% is 8 cells."""
    seven = board_with(5, 10, [(x, 4) for x in range(8) if x != 3] + [(3, 3)])
    assert find_territory_patterns(seven, seven.cells_of(1)) == []

    with_eight = seven.place([(3, 4)], 1)
    labels = [p.label for p in find_territory_patterns(with_eight, with_eight.cells_of(1))]
    assert labels == ["bottom"]


def test_center_dominance() -> None:
    """8x8: the centred 4x4 block spans x, y in [2, 6); 12 of its 16 cells are enough."""
    block = [(x, y) for y in range(2, 6) for x in range(2, 6)][:12]
    board = board_with(8, 8, block)
    territory = find_territory_patterns(board, board.cells_of(1))
    assert [(p.pattern_id, p.label) for p in territory] == [("CENTER_DOMINANCE_4x4", "center_4x4")]
    assert territory[0].points == 20


def test_small_boards_skip_regions_that_do_not_fit() -> None:
    board = board_with(2, 2, [(0, 0), (1, 0), (0, 1), (1, 1)])
    territory = find_territory_patterns(board, board.cells_of(1))
    assert {p.region for p in territory} == {TerritoryRegion.EDGE}


# --- RESOLUTION ---
def test_resolution_prefers_points_then_priority() -> None:
    low = LinePattern("SHORT_LINE_4", 5, ((0, 0), (1, 0), (2, 0), (3, 0)), LineDirection.HORIZONTAL, 4)
    high = RectanglePattern("EXTRA_LARGE_SQUARE", 8, ((0, 0), (1, 0), (0, 1), (1, 1)), 2, 2)
    assert resolve_overlapping_patterns([low, high]) == [high]

    short = LinePattern("X", 6, ((5, 5), (6, 5)), LineDirection.HORIZONTAL, 2)
    long = LinePattern("Y", 6, ((5, 5), (5, 6), (5, 7)), LineDirection.VERTICAL, 3)
    assert resolve_overlapping_patterns([short, long]) == [long]


def test_resolution_is_stable_for_ties() -> None:
    first = LinePattern("A", 6, ((0, 0), (1, 0)), LineDirection.HORIZONTAL, 2)
    second = LinePattern("B", 6, ((1, 0), (2, 0)), LineDirection.HORIZONTAL, 2)
    assert resolve_overlapping_patterns([first, second]) == [first]
    assert resolve_overlapping_patterns([second, first]) == [second]


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_accepted_patterns_never_share_cells(seed: int) -> None:
    rng = random.Random(seed)
    cells = [(x, y) for y in range(10) for x in range(10) if rng.random() < 0.7]
    board = board_with(10, 10, cells)
    accepted = resolve_overlapping_patterns(recognize_patterns(board, 1))
    assert accepted
    seen: set[tuple[int, int]] = set()
    for pattern in accepted:
        assert seen.isdisjoint(pattern.cells)
        seen.update(pattern.cells)


# --- NEW POINTS ---
def test_isolated_t4_scores_nothing() -> None:
    board = board_with(8, 8, [(2, 2), (3, 2), (4, 2), (3, 3)])
    scan = calculate_new_points(board, 1, [(2, 2), (3, 2), (4, 2), (3, 3)])
    assert scan.total_points == 0
    assert scan.patterns == ()


def test_o4_makes_a_small_square() -> None:
    cells = [(3, 3), (4, 3), (3, 4), (4, 4)]
    scan = calculate_new_points(board_with(8, 8, cells), 1, cells)
    assert scan.total_points == 8
    assert [p.pattern_id for p in scan.patterns] == ["EXTRA_LARGE_SQUARE"]


def test_only_patterns_touching_new_cells_count() -> None:
    old_line = [(x, 0) for x in range(1, 5)]
    new_cells = [(1, 6), (2, 6), (3, 6), (4, 6)]
    board = board_with(8, 8, old_line + new_cells)
    scan = calculate_new_points(board, 1, new_cells)
    assert scan.total_points == 5
    assert [p.cells for p in scan.patterns] == [tuple(new_cells)]
    assert len(scan.all_patterns) == 2


def test_other_players_cells_do_not_score() -> None:
    board = board_with(8, 8, [(3, 3), (4, 3), (3, 4), (4, 4)], player=2)
    assert calculate_new_points(board, 1, [(3, 3)]).total_points == 0
