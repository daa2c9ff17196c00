"""
The 19 polyominoes of SumZero and their precomputed orientations.

The catalog is built once (`PieceCatalog.build()`) and never changes afterwards.
Components receive it as an argument; `STANDARD_CATALOG` is the instance used when none is given.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Self

from src.core.exceptions import UnknownPieceError
from src.sumzero.geometry import (
    ALL_TRANSFORMS,
    Cells,
    Transform,
    apply_transform,
    normalize,
)

PieceId = str

TETROMINO_SIZE = 4
PENTOMINO_SIZE = 5


@dataclass(frozen=True)
class PieceShape:
    """A canonical polyomino. Its cost during the draft equals its number of cells."""

    id: PieceId
    cells: Cells
    size: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "size", len(self.cells))

    @property
    def cost(self) -> int:
        return self.size


@dataclass(frozen=True)
class Orientation:
    """One of the (at most 8) distinct ways a piece can lie on the board."""

    transform: Transform
    cells: Cells


def _shape(piece_id: PieceId, cells: list[tuple[int, int]]) -> PieceShape:
    return PieceShape(piece_id, normalize(cells))


# Tetrominoes (cost 4)
TETROMINOES: tuple[PieceShape, ...] = (
    _shape("I4", [(0, 0), (1, 0), (2, 0), (3, 0)]),
    _shape("O4", [(0, 0), (1, 0), (0, 1), (1, 1)]),
    _shape("T4", [(0, 0), (1, 0), (2, 0), (1, 1)]),
    _shape("S4", [(1, 0), (2, 0), (0, 1), (1, 1)]),
    _shape("Z4", [(0, 0), (1, 0), (1, 1), (2, 1)]),
    _shape("L4", [(0, 0), (0, 1), (0, 2), (1, 2)]),
    _shape("J4", [(1, 0), (1, 1), (1, 2), (0, 2)]),
)

# Pentominoes (cost 5)
PENTOMINOES: tuple[PieceShape, ...] = (
    _shape("I5", [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]),
    _shape("L5", [(0, 0), (0, 1), (0, 2), (0, 3), (1, 3)]),
    _shape("P5", [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]),
    _shape("N5", [(0, 0), (1, 0), (2, 0), (2, 1), (3, 1)]),
    _shape("T5", [(0, 0), (1, 0), (2, 0), (1, 1), (1, 2)]),
    _shape("U5", [(0, 0), (0, 1), (1, 1), (2, 1), (2, 0)]),
    _shape("V5", [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]),
    _shape("W5", [(0, 0), (1, 0), (1, 1), (2, 1), (2, 2)]),
    _shape("X5", [(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)]),
    _shape("Y5", [(0, 1), (1, 0), (1, 1), (1, 2), (1, 3)]),
    _shape("Z5", [(0, 0), (1, 0), (1, 1), (1, 2), (2, 2)]),
    _shape("F5", [(1, 0), (0, 1), (1, 1), (1, 2), (2, 2)]),
)


def unique_orientations(cells: Cells) -> tuple[Orientation, ...]:
    """
    Apply all 8 isometries and keep one orientation per distinct cell set.
    ---

    Symmetric pieces collapse: O4 and X5 have one orientation, I4 two, T4 four.
    """
    seen: set[Cells] = set()
    orientations: list[Orientation] = []
    for transform in ALL_TRANSFORMS:
        transformed = apply_transform(cells, transform)
        key = tuple(sorted(transformed))
        if key in seen:
            continue
        seen.add(key)
        orientations.append(Orientation(transform, transformed))
    return tuple(orientations)


@dataclass(frozen=True)
class PieceCatalog:
    """Read-only lookup of piece shapes and their orientations, keyed by piece id."""

    shapes: Mapping[PieceId, PieceShape]
    orientation_table: Mapping[PieceId, tuple[Orientation, ...]]

    @classmethod
    def build(cls, shapes: tuple[PieceShape, ...] = TETROMINOES + PENTOMINOES) -> Self:
        """Precompute every orientation once. Searching legal moves only reads this table."""
        shape_map = {shape.id: shape for shape in shapes}
        orientation_map = {
            shape.id: unique_orientations(shape.cells) for shape in shapes
        }
        return cls(MappingProxyType(shape_map), MappingProxyType(orientation_map))

    def has(self, piece_id: PieceId) -> bool:
        return piece_id in self.shapes

    def get(self, piece_id: PieceId) -> PieceShape:
        try:
            return self.shapes[piece_id]
        except (KeyError, TypeError):
            raise UnknownPieceError(f"Unknown piece: {piece_id!r}") from None

    def cost(self, piece_id: PieceId) -> int:
        return self.get(piece_id).cost

    def all_shapes(self) -> list[PieceShape]:
        return list(self.shapes.values())

    def ids(self) -> list[PieceId]:
        return list(self.shapes.keys())

    def by_size(self, size: int) -> list[PieceShape]:
        return [shape for shape in self.shapes.values() if shape.size == size]

    def orientations(self, piece_id: PieceId) -> tuple[Orientation, ...]:
        self.get(piece_id)
        return self.orientation_table[piece_id]


STANDARD_CATALOG = PieceCatalog.build()
