"""
Geometry of polyomino pieces.

Pure functions: rotate/flip a piece's relative cells, translate them to an anchor, measure their bounding box.
Coordinates are (x, y): x grows to the right, y grows downward, (0, 0) is the top-left corner.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from src.core.exceptions import InvalidTransformError

Cell = tuple[int, int]
Cells = tuple[Cell, ...]

VALID_ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)


@dataclass(frozen=True)
class Transform:
    """
    An isometry of the square grid.
    ---

    Applied as: flip first (x -> -x) if `flip_x`, then rotate counter-clockwise `rotation` degrees.
    NOTE: no coercion. `True`/`False` are the only flips, and `1` or `90.0` do not count as valid values.
    """

    rotation: int = 0
    flip_x: bool = False

    def __post_init__(self) -> None:
        if type(self.rotation) is not int or self.rotation not in VALID_ROTATIONS:
            raise InvalidTransformError(
                f"Rotation must be one of {VALID_ROTATIONS}, got {self.rotation!r}"
            )
        if type(self.flip_x) is not bool:
            raise InvalidTransformError(
                f"flip_x must be a boolean, got {self.flip_x!r}"
            )


IDENTITY = Transform(0, False)

# rotation-major, flip-minor. Orientation dedup keeps the first transform producing a shape.
ALL_TRANSFORMS: tuple[Transform, ...] = tuple(
    Transform(rotation, flip_x)
    for rotation in VALID_ROTATIONS
    for flip_x in (False, True)
)


@dataclass(frozen=True)
class Bounds:
    width: int
    height: int


def normalize(cells: Iterable[Cell]) -> Cells:
    """Translate so that the minimum x and the minimum y both become 0 (cell order is kept)."""
    cells = tuple(cells)
    if not cells:
        return ()
    min_x = min(x for x, _ in cells)
    min_y = min(y for _, y in cells)
    return tuple((x - min_x, y - min_y) for x, y in cells)


def apply_transform(cells: Sequence[Cell], transform: Transform) -> Cells:
    """
    Flip, rotate and re-normalize.
    ----

    Total and deterministic: the result is normalized whether or not the input was.
    """
    if not isinstance(transform, Transform):
        raise InvalidTransformError(f"Expected a Transform, got {transform!r}")

    result = [(x, y) for x, y in cells]
    if transform.flip_x:
        result = [(-x, y) for x, y in result]

    # each quarter turn counter-clockwise: (x, y) -> (-y, x)
    for _ in range(transform.rotation // 90):
        result = [(-y, x) for x, y in result]

    return normalize(result)


def compute_absolute_cells(cells: Sequence[Cell], anchor: Cell) -> Cells:
    """Translate relative cells to the board: cells[i] + anchor."""
    anchor_x, anchor_y = anchor
    return tuple((anchor_x + dx, anchor_y + dy) for dx, dy in cells)


def compute_bounds(cells: Sequence[Cell]) -> Bounds:
    """width = max(x) + 1, height = max(y) + 1"""
    if not cells:
        return Bounds(0, 0)
    return Bounds(
        width=max(x for x, _ in cells) + 1,
        height=max(y for _, y in cells) + 1,
    )


def same_cell_set(first: Sequence[Cell], second: Sequence[Cell]) -> bool:
    """Order-insensitive comparison (the geometry functions themselves keep order)."""
    return sorted(first) == sorted(second)
