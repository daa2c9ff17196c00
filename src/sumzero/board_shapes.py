"""
Non-rectangular boards.

`SHAPE_RULES` maps each shape name to a rule `(x, y, size) -> bool` telling whether the cell
stays playable. Building a board walks every cell of the size x size square through the rule
and marks the rejected cells UNUSABLE.

Random holes (optional) use a `random.Random` passed in by the caller, so a seeded game config
always produces the same board.
"""

import logging
import math
import random
from collections import deque
from typing import Callable, Optional

from src.core.exceptions import InvalidConfigError
from src.sumzero.board import Board, CellState
from src.sumzero.geometry import Cell

logger = logging.getLogger(__name__)

KeepCellFn = Callable[[int, int, int], bool]

MIN_SHAPE_SIZE = 5
MIN_REGION_AFTER_HOLE = 8
HOLE_FRACTION_MIN = 0.03
HOLE_FRACTION_SPREAD = 0.05
HOLE_PLACEMENT_ATTEMPTS = 50
RANDOM_SHAPE = "random"


# --- SHAPE RULES ---
def _cross(x: int, y: int, size: int) -> bool:
    center = size // 2
    arm = size // 3
    return abs(x - center) <= arm or abs(y - center) <= arm


def _plus(x: int, y: int, size: int) -> bool:
    center = size // 2
    arm = max(1, size // 5)
    return abs(x - center) <= arm or abs(y - center) <= arm


def _diamond(x: int, y: int, size: int) -> bool:
    center = size // 2
    return abs(x - center) + abs(y - center) <= center


def _hexagonal(x: int, y: int, size: int) -> bool:
    center = size // 2
    radius = size // 2 - 1
    dx, dy = x - center, y - center
    hex_distance = max(abs(dx), abs(dy), abs(dx + dy))
    return math.hypot(dx, dy) <= radius and hex_distance <= radius


def _lshape(x: int, y: int, size: int) -> bool:
    corner = math.floor(size * 0.6)
    return x < corner or y >= size - corner


def _tshape(x: int, y: int, size: int) -> bool:
    stem_width = size // 4
    stem_start = size // 3
    center = size // 2
    return y < stem_start or abs(x - center) <= stem_width


def _ushape(x: int, y: int, size: int) -> bool:
    wall = size // 4
    opening = size // 3
    return x < wall or x >= size - wall or y >= size - opening


def _hourglass(x: int, y: int, size: int) -> bool:
    center = size // 2
    neck = max(1, size // 6)
    width = neck + math.floor((abs(y - center) / center) * (size / 2 - neck))
    return abs(x - center) <= width


def _star(x: int, y: int, size: int) -> bool:
    center = size // 2
    inner = size // 4
    outer = size // 2 - 1
    dx, dy = x - center, y - center
    point = math.cos(6 * math.atan2(dy, dx))
    return math.hypot(dx, dy) <= inner + (outer - inner) * (0.5 + 0.5 * point)


def _triangle(x: int, y: int, size: int) -> bool:
    width = size - y
    start = (size - width) // 2
    return start <= x < start + width


def _arrow(x: int, y: int, size: int) -> bool:
    center = size // 2
    shaft = size // 4
    head_start = size // 3
    if x >= head_start:
        return abs(y - center) <= shaft
    head_width = math.floor((head_start - x) * size / head_start / 2)
    return abs(y - center) <= head_width


def _bowtie(x: int, y: int, size: int) -> bool:
    center = size // 2
    return size / 2 - max(abs(x - center), abs(y - center)) > 0


def _octagon(x: int, y: int, size: int) -> bool:
    center = size // 2
    radius = size // 2 - 1
    cutoff = math.floor(radius * 0.7)
    dx, dy = abs(x - center), abs(y - center)
    return not (dx > cutoff and dy > cutoff and dx + dy > radius)


def _pentagon(x: int, y: int, size: int) -> bool:
    center = size // 2
    radius = size // 2 - 1
    dx, dy = x - center, y - center
    side = math.cos(5 * (math.atan2(dy, dx) + math.pi / 5))
    return math.hypot(dx, dy) <= radius * (0.7 + 0.3 * side)


def _spiral(x: int, y: int, size: int) -> bool:
    center = size // 2
    dx, dy = x - center, y - center
    distance = math.hypot(dx, dy)
    spiral_radius = (math.atan2(dy, dx) + math.pi) / (2 * math.pi) * (size / 3)
    return abs(distance - spiral_radius) <= 2 and distance <= size / 2 - 1


def _zigzag(x: int, y: int, size: int) -> bool:
    amplitude = size // 4
    middle = size // 2 + amplitude * math.sin(y * 2 * math.pi / size)
    return abs(x - middle) <= size // 4


def _ring(x: int, y: int, size: int) -> bool:
    center = size // 2
    distance = math.hypot(x - center, y - center)
    return size // 4 <= distance <= size // 2 - 1


SHAPE_RULES: dict[str, KeepCellFn] = {
    "cross": _cross,
    "diamond": _diamond,
    "hexagonal": _hexagonal,
    "lshape": _lshape,
    "plus": _plus,
    "tshape": _tshape,
    "ushape": _ushape,
    "hourglass": _hourglass,
    "star": _star,
    "triangle": _triangle,
    "arrow": _arrow,
    "bowtie": _bowtie,
    "octagon": _octagon,
    "pentagon": _pentagon,
    "spiral": _spiral,
    "zigzag": _zigzag,
    "ring": _ring,
}

SHAPE_NAMES: tuple[str, ...] = tuple(SHAPE_RULES)


def is_known_shape(name: str) -> bool:
    return name == RANDOM_SHAPE or name in SHAPE_RULES


# --- BOARD CONSTRUCTION ---
def create_shaped_board(
    shape: str,
    size: int,
    add_holes: bool = True,
    rng: Optional[random.Random] = None,
) -> Board:
    """
    Square `size` x `size` board with every cell outside the named shape marked unusable.
    ----

    * "random" picks one of the named shapes with the given rng.
    * `add_holes` punches a few extra unusable cells, never isolating a small region.
    """
    if not is_known_shape(shape):
        raise InvalidConfigError(
            f"Unknown board shape {shape!r}. Pick one from {', '.join(SHAPE_NAMES + (RANDOM_SHAPE,))}"
        )
    if size < MIN_SHAPE_SIZE:
        raise InvalidConfigError(
            f"Shaped boards need a size of at least {MIN_SHAPE_SIZE}, got {size}"
        )
    rng = rng or random.Random()

    if shape == RANDOM_SHAPE:
        shape = rng.choice(SHAPE_NAMES)
        logger.debug("Random board shape resolved to %s", shape)

    keep = SHAPE_RULES[shape]
    excluded = [
        (x, y) for y in range(size) for x in range(size) if not keep(x, y, size)
    ]
    board = Board.create_empty(size, size).with_unusable(excluded)

    if add_holes:
        board = add_random_holes(board, rng)
    return board


def add_random_holes(board: Board, rng: random.Random) -> Board:
    """Turn 3-8% of the playable cells into holes, skipping holes that would cut off a small area."""
    playable = board.count(CellState.EMPTY)
    n_holes = math.floor(playable * (HOLE_FRACTION_MIN + rng.random() * HOLE_FRACTION_SPREAD))

    for _ in range(n_holes):
        for _attempt in range(HOLE_PLACEMENT_ATTEMPTS):
            x = rng.randrange(board.cols)
            y = rng.randrange(board.rows)
            if board.grid[y][x] != CellState.EMPTY:
                continue
            candidate = board.with_unusable([(x, y)])
            if not would_isolate_area(candidate, (x, y)):
                board = candidate
                break
    return board


def would_isolate_area(board: Board, hole: Cell) -> bool:
    """With `hole` already unusable: is the largest empty area next to it smaller than the minimum?"""
    hole_x, hole_y = hole
    visited: set[Cell] = set()
    largest = 0
    for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        neighbour = (hole_x + dx, hole_y + dy)
        if neighbour in visited or not board.is_empty(*neighbour):
            continue
        largest = max(largest, connected_area(board, neighbour, visited))
    return largest < MIN_REGION_AFTER_HOLE


def connected_area(board: Board, start: Cell, visited: Optional[set[Cell]] = None) -> int:
    """Size of the 4-connected empty region containing `start` (worklist, no recursion)."""
    visited = visited if visited is not None else set()
    if start in visited or not board.is_empty(*start):
        return 0

    area = 0
    queue: deque[Cell] = deque([start])
    visited.add(start)
    while queue:
        x, y = queue.popleft()
        area += 1
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            neighbour = (x + dx, y + dy)
            if neighbour not in visited and board.is_empty(*neighbour):
                visited.add(neighbour)
                queue.append(neighbour)
    return area
