"""
Pattern recognition for scoring.

Stateless scan of one player's cells on a board snapshot:
* lines: maximal runs of >= 4 cells (horizontal, vertical, diagonal, anti-diagonal)
* rectangles and squares: completely filled blocks from 2x2 up to 6x6
* territory: corner, edge and centre control

Candidates are then resolved greedily so that every cell counts for at most one pattern.
"""

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Iterable, Optional, Sequence

from src.core.shared_types import PatternKind
from src.sumzero.board import Board
from src.sumzero.geometry import Cell, Cells

MIN_LINE_LENGTH = 4
MIN_RECTANGLE_SIDE = 2
MAX_RECTANGLE_SIDE = 6

CORNER_SIZE = 3
CORNER_REQUIRED = 7
CENTER_SIZES: tuple[int, ...] = (4, 5)

# fixed point table. Pattern ids without an entry are computed (see the `_points` helpers)
PATTERN_POINTS: dict[str, int] = {
    "SHORT_LINE_4": 5,
    "SHORT_LINE_5": 6,
    "MEDIUM_LINE_6": 8,
    "MEDIUM_LINE_7": 9,
    "LONG_LINE_8": 15,
    "LONG_LINE_9": 18,
    "LONG_LINE_10": 20,
    "FULL_ROW": 25,
    "FULL_COLUMN": 25,
    "DIAGONAL_CHAIN_4": 6,
    "DIAGONAL_CHAIN_5": 7,
    "SMALL_RECTANGLE_2x3": 7,
    "LARGE_RECTANGLE_3x4": 18,
    "LARGE_RECTANGLE_2x6": 16,
    "MINI_SQUARE_3x3": 10,
    "LARGE_SQUARE_4x4": 22,
    "LARGE_SQUARE_5x5": 30,
    "CORNER_CONTROL": 12,
    "EDGE_CONTROL": 15,
    "CENTER_DOMINANCE_4x4": 20,
    "CENTER_DOMINANCE_5x5": 25,
}

STRAIGHT_LINE_IDS: dict[int, str] = {
    4: "SHORT_LINE_4",
    5: "SHORT_LINE_5",
    6: "MEDIUM_LINE_6",
    7: "MEDIUM_LINE_7",
    8: "LONG_LINE_8",
    9: "LONG_LINE_9",
    10: "LONG_LINE_10",
}
DIAGONAL_LINE_IDS: dict[int, str] = {4: "DIAGONAL_CHAIN_4", 5: "DIAGONAL_CHAIN_5"}
SQUARE_IDS: dict[int, str] = {3: "MINI_SQUARE_3x3", 4: "LARGE_SQUARE_4x4", 5: "LARGE_SQUARE_5x5"}
RECTANGLE_IDS: dict[tuple[int, int], str] = {
    (2, 3): "SMALL_RECTANGLE_2x3",
    (3, 4): "LARGE_RECTANGLE_3x4",
    (2, 6): "LARGE_RECTANGLE_2x6",
}


class LineDirection(StrEnum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"
    ANTI_DIAGONAL = "anti_diagonal"


class TerritoryRegion(StrEnum):
    CORNER = "corner"
    EDGE = "edge"
    CENTER = "center"


# scan order of the line directions: unit step of each
LINE_STEPS: dict[LineDirection, tuple[int, int]] = {
    LineDirection.HORIZONTAL: (1, 0),
    LineDirection.VERTICAL: (0, 1),
    LineDirection.DIAGONAL: (1, 1),
    LineDirection.ANTI_DIAGONAL: (-1, 1),
}


# --- PATTERN VARIANTS ---
@dataclass(frozen=True)
class LinePattern:
    pattern_id: str
    points: int
    cells: Cells
    direction: LineDirection
    length: int

    kind: ClassVar[PatternKind] = PatternKind.LINE

    @property
    def priority(self) -> int:
        return self.length


@dataclass(frozen=True)
class RectanglePattern:
    """Covers squares too: `kind` tells them apart."""

    pattern_id: str
    points: int
    cells: Cells
    width: int
    height: int

    @property
    def kind(self) -> PatternKind:
        return PatternKind.SQUARE if self.width == self.height else PatternKind.RECTANGLE

    @property
    def priority(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class TerritoryPattern:
    """`cells` are only the player's cells inside the region, `controlled` is how many there are."""

    pattern_id: str
    points: int
    cells: Cells
    region: TerritoryRegion
    label: str
    controlled: int

    kind: ClassVar[PatternKind] = PatternKind.TERRITORY

    @property
    def priority(self) -> int:
        return self.controlled


Pattern = LinePattern | RectanglePattern | TerritoryPattern


@dataclass(frozen=True)
class PatternScan:
    """Result of scoring one move: the new patterns (and their total) and every accepted pattern."""

    total_points: int
    patterns: tuple[Pattern, ...]
    all_patterns: tuple[Pattern, ...]


# --- POINTS ---
def straight_line_points(length: int) -> tuple[str, int]:
    pattern_id = STRAIGHT_LINE_IDS.get(length, "EXTRA_LONG_LINE")
    return pattern_id, PATTERN_POINTS.get(pattern_id, min(30, 3 * length))


def diagonal_line_points(length: int) -> tuple[str, int]:
    pattern_id = DIAGONAL_LINE_IDS.get(length, "DIAGONAL_CHAIN_LONG")
    return pattern_id, PATTERN_POINTS.get(pattern_id, 2 * length)


def full_line_points(pattern_id: str, length: int) -> int:
    """A full row/column is always worth strictly more than an ordinary line of the same length."""
    _, ordinary = straight_line_points(length)
    return max(PATTERN_POINTS[pattern_id], ordinary + 1)


def rectangle_points(width: int, height: int) -> tuple[str, int]:
    if width == height:
        pattern_id = SQUARE_IDS.get(width, "EXTRA_LARGE_SQUARE")
        return pattern_id, PATTERN_POINTS.get(pattern_id, 2 * width * height)

    key = (min(width, height), max(width, height))
    pattern_id = RECTANGLE_IDS.get(key, "CUSTOM_RECTANGLE")
    return pattern_id, PATTERN_POINTS.get(pattern_id, math.floor(1.5 * width * height))


# --- LINES ---
def _line_pattern(cells: Cells, direction: LineDirection, board: Board) -> LinePattern:
    length = len(cells)
    if direction in (LineDirection.DIAGONAL, LineDirection.ANTI_DIAGONAL):
        pattern_id, points = diagonal_line_points(length)
    elif direction == LineDirection.HORIZONTAL and length == board.cols:
        pattern_id = "FULL_ROW"
        points = full_line_points(pattern_id, length)
    elif direction == LineDirection.VERTICAL and length == board.rows:
        pattern_id = "FULL_COLUMN"
        points = full_line_points(pattern_id, length)
    else:
        pattern_id, points = straight_line_points(length)
    return LinePattern(pattern_id, points, cells, direction, length)


def find_line_patterns(board: Board, player_cells: Sequence[Cell]) -> list[LinePattern]:
    """
    Maximal runs only: a run of n cells gives exactly one pattern of length n.
    ----

    A cell starts a run when the previous cell in that direction is not the player's.
    `player_cells` are expected in row-major order, so runs come out ordered by their first cell.
    """
    owned = set(player_cells)
    patterns: list[LinePattern] = []
    for direction, (dx, dy) in LINE_STEPS.items():
        for x, y in player_cells:
            if (x - dx, y - dy) in owned:
                continue
            run = []
            cx, cy = x, y
            while (cx, cy) in owned:
                run.append((cx, cy))
                cx, cy = cx + dx, cy + dy
            if len(run) >= MIN_LINE_LENGTH:
                patterns.append(_line_pattern(tuple(run), direction, board))
    return patterns


# --- RECTANGLES ---
def _prefix_sums(board: Board, owned: set[Cell]) -> list[list[int]]:
    """sums[y][x] = number of owned cells in the block [0, x) x [0, y)"""
    sums = [[0] * (board.cols + 1) for _ in range(board.rows + 1)]
    for y in range(board.rows):
        row_total = 0
        for x in range(board.cols):
            row_total += (x, y) in owned
            sums[y + 1][x + 1] = sums[y][x + 1] + row_total
    return sums


def _block_count(sums: list[list[int]], x: int, y: int, width: int, height: int) -> int:
    return sums[y + height][x + width] - sums[y][x + width] - sums[y + height][x] + sums[y][x]


def _block_cells(x: int, y: int, width: int, height: int) -> Cells:
    return tuple((x + dx, y + dy) for dy in range(height) for dx in range(width))


def find_rectangle_patterns(board: Board, player_cells: Sequence[Cell]) -> list[RectanglePattern]:
    """Every completely filled block from 2x2 to 6x6, at every position (width-major, then height)."""
    sums = _prefix_sums(board, set(player_cells))
    patterns: list[RectanglePattern] = []
    for width in range(MIN_RECTANGLE_SIDE, min(MAX_RECTANGLE_SIDE, board.cols) + 1):
        for height in range(MIN_RECTANGLE_SIDE, min(MAX_RECTANGLE_SIDE, board.rows) + 1):
            pattern_id, points = rectangle_points(width, height)
            for y in range(board.rows - height + 1):
                for x in range(board.cols - width + 1):
                    if _block_count(sums, x, y, width, height) == width * height:
                        patterns.append(
                            RectanglePattern(
                                pattern_id, points, _block_cells(x, y, width, height), width, height
                            )
                        )
    return patterns


# --- TERRITORY ---
def _territory(
    pattern_id: str,
    region: TerritoryRegion,
    label: str,
    region_cells: Iterable[Cell],
    owned: set[Cell],
    required: int,
) -> Optional[TerritoryPattern]:
    controlled_cells = tuple(cell for cell in region_cells if cell in owned)
    if len(controlled_cells) < required:
        return None
    return TerritoryPattern(
        pattern_id,
        PATTERN_POINTS[pattern_id],
        controlled_cells,
        region,
        label,
        len(controlled_cells),
    )


def find_territory_patterns(board: Board, player_cells: Sequence[Cell]) -> list[TerritoryPattern]:
    """
    Fixed thresholds:
    ---

    * corner: at least 7 of the 9 cells of a 3x3 corner block
    * edge: at least 80% (rounded up) of a full board edge
    * centre: at least 75% (rounded up) of the centred 4x4 / 5x5 block, when it fits
    """
    owned = set(player_cells)
    candidates: list[Optional[TerritoryPattern]] = []

    corners = {
        "top_left": (0, 0),
        "top_right": (board.cols - CORNER_SIZE, 0),
        "bottom_left": (0, board.rows - CORNER_SIZE),
        "bottom_right": (board.cols - CORNER_SIZE, board.rows - CORNER_SIZE),
    }
    for label, (x, y) in corners.items():
        if x < 0 or y < 0:
            continue
        candidates.append(
            _territory(
                "CORNER_CONTROL",
                TerritoryRegion.CORNER,
                label,
                _block_cells(x, y, CORNER_SIZE, CORNER_SIZE),
                owned,
                CORNER_REQUIRED,
            )
        )

    edges = {
        "top": [(x, 0) for x in range(board.cols)],
        "bottom": [(x, board.rows - 1) for x in range(board.cols)],
        "left": [(0, y) for y in range(board.rows)],
        "right": [(board.cols - 1, y) for y in range(board.rows)],
    }
    for label, edge_cells in edges.items():
        required = (len(edge_cells) * 4 + 4) // 5
        candidates.append(
            _territory("EDGE_CONTROL", TerritoryRegion.EDGE, label, edge_cells, owned, required)
        )

    center_x, center_y = board.cols // 2, board.rows // 2
    for size in CENTER_SIZES:
        x, y = center_x - size // 2, center_y - size // 2
        if x < 0 or y < 0 or x + size > board.cols or y + size > board.rows:
            continue
        required = (size * size * 3 + 3) // 4
        candidates.append(
            _territory(
                f"CENTER_DOMINANCE_{size}x{size}",
                TerritoryRegion.CENTER,
                f"center_{size}x{size}",
                _block_cells(x, y, size, size),
                owned,
                required,
            )
        )

    return [pattern for pattern in candidates if pattern is not None]


# --- RESOLUTION ---
def recognize_patterns(board: Board, player_id: int) -> list[Pattern]:
    """All candidates for one player: lines, then rectangles, then territory."""
    player_cells = board.cells_of(player_id)
    patterns: list[Pattern] = []
    patterns.extend(find_line_patterns(board, player_cells))
    patterns.extend(find_rectangle_patterns(board, player_cells))
    patterns.extend(find_territory_patterns(board, player_cells))
    return patterns


def resolve_overlapping_patterns(patterns: Iterable[Pattern]) -> list[Pattern]:
    """
    Greedy selection: highest points first, then highest priority (stable for ties).
    A pattern is kept only if none of its cells was claimed by a pattern kept before it.
    """
    ordered = sorted(patterns, key=lambda pattern: (-pattern.points, -pattern.priority))
    claimed: set[Cell] = set()
    accepted: list[Pattern] = []
    for pattern in ordered:
        if claimed.isdisjoint(pattern.cells):
            accepted.append(pattern)
            claimed.update(pattern.cells)
    return accepted


def patterns_touching(patterns: Iterable[Pattern], new_cells: Iterable[Cell]) -> list[Pattern]:
    new = set(new_cells)
    return [pattern for pattern in patterns if not new.isdisjoint(pattern.cells)]


def calculate_new_points(board: Board, player_id: int, new_cells: Sequence[Cell]) -> PatternScan:
    """Only accepted patterns that include at least one of the new cells are worth points."""
    accepted = resolve_overlapping_patterns(recognize_patterns(board, player_id))
    new_patterns = patterns_touching(accepted, new_cells)
    return PatternScan(
        total_points=sum(pattern.points for pattern in new_patterns),
        patterns=tuple(new_patterns),
        all_patterns=tuple(accepted),
    )
