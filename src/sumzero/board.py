"""The Game board: a rows x cols grid of cell states. Every update returns a new Board."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Self, Sequence

from src.core.exceptions import MalformedStateError, OccupiedOrOutOfBoundsError
from src.sumzero.geometry import Cell

Grid = tuple[tuple[int, ...], ...]


class CellState(IntEnum):
    """Values double as the encoding in the save document."""

    UNUSABLE = -1
    EMPTY = 0
    PLAYER_1 = 1
    PLAYER_2 = 2


VALID_CELL_VALUES: frozenset[int] = frozenset(state.value for state in CellState)


@dataclass(frozen=True)
class Board:
    """
    Grid indexed as grid[y][x].
    ----

    Unusable cells only exist on shaped boards. They are set at construction time and never change:
    they are never legal targets and do not count towards the draft budget.
    """

    rows: int
    cols: int
    grid: Grid

    def __post_init__(self) -> None:
        if len(self.grid) != self.rows:
            raise MalformedStateError(
                f"Grid height mismatch: expected {self.rows} rows, got {len(self.grid)}"
            )
        for row in self.grid:
            if len(row) != self.cols:
                raise MalformedStateError(
                    f"Grid width mismatch: expected {self.cols} columns, got {len(row)}"
                )

    @classmethod
    def create_empty(cls, rows: int, cols: int) -> Self:
        empty_row = tuple([CellState.EMPTY.value] * cols)
        return cls(rows, cols, tuple(empty_row for _ in range(rows)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> Self:
        """Build from nested lists (ex. the grid of a save document)."""
        grid = tuple(tuple(int(value) for value in row) for row in rows)
        n_cols = len(grid[0]) if grid else 0
        for row in grid:
            for value in row:
                if value not in VALID_CELL_VALUES:
                    raise MalformedStateError(f"Invalid cell value: {value!r}")
        return cls(len(grid), n_cols, grid)

    def to_rows(self) -> list[list[int]]:
        return [list(row) for row in self.grid]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def cell(self, x: int, y: int) -> CellState:
        if not self.in_bounds(x, y):
            raise OccupiedOrOutOfBoundsError(f"Cell {(x, y)} is out of bounds")
        return CellState(self.grid[y][x])

    def is_empty(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.grid[y][x] == CellState.EMPTY

    def cells_are_empty(self, cells: Iterable[Cell]) -> bool:
        """True iff every cell is in bounds, usable and currently empty."""
        return all(self.is_empty(x, y) for x, y in cells)

    def place(self, cells: Sequence[Cell], owner: int) -> Self:
        """
        Final guard when committing a move. Callers validate through the placement engine first.
        """
        if owner not in (CellState.PLAYER_1, CellState.PLAYER_2):
            raise OccupiedOrOutOfBoundsError(f"Cannot place cells for owner {owner!r}")
        for x, y in cells:
            if not self.in_bounds(x, y):
                raise OccupiedOrOutOfBoundsError(f"Cell {(x, y)} is out of bounds")
            if self.grid[y][x] != CellState.EMPTY:
                raise OccupiedOrOutOfBoundsError(f"Cell {(x, y)} is not empty")
        if len(set(cells)) != len(cells):
            raise OccupiedOrOutOfBoundsError("The same cell appears twice")
        return self._with_values(cells, int(owner))

    def with_unusable(self, cells: Iterable[Cell]) -> Self:
        """Shaped boards: mark cells as permanently unplayable (construction time only)."""
        in_bounds = [(x, y) for x, y in cells if self.in_bounds(x, y)]
        return self._with_values(in_bounds, CellState.UNUSABLE.value)

    def cells_of(self, state: int) -> list[Cell]:
        """All cells holding `state`, in row-major order."""
        return [
            (x, y)
            for y, row in enumerate(self.grid)
            for x, value in enumerate(row)
            if value == state
        ]

    def count(self, state: int) -> int:
        return sum(row.count(state) for row in self.grid)

    def usable_cell_count(self) -> int:
        return self.rows * self.cols - self.count(CellState.UNUSABLE)

    def _with_values(self, cells: Iterable[Cell], value: int) -> Self:
        """Copy-on-write: only the touched rows are rebuilt."""
        touched: dict[int, list[int]] = {}
        for x, y in cells:
            row = touched.setdefault(y, list(self.grid[y]))
            row[x] = value
        grid = tuple(
            tuple(touched[y]) if y in touched else row
            for y, row in enumerate(self.grid)
        )
        return type(self)(self.rows, self.cols, grid)
