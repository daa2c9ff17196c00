"""Unit tests for src/sumzero/geometry.py"""

from typing import Any

import pytest

from src.core.exceptions import InvalidTransformError
from src.sumzero.geometry import (
    ALL_TRANSFORMS,
    IDENTITY,
    Bounds,
    Transform,
    apply_transform,
    compute_absolute_cells,
    compute_bounds,
    normalize,
    same_cell_set,
)
from src.sumzero.pieces import STANDARD_CATALOG

L4 = ((0, 0), (0, 1), (0, 2), (1, 2))


# --- TRANSFORM VALIDATION ---
@pytest.mark.parametrize("rotation", [0, 90, 180, 270])
@pytest.mark.parametrize("flip_x", [True, False])
def test_valid_transforms(rotation: int, flip_x: bool) -> None:
    transform = Transform(rotation, flip_x)
    assert transform.rotation == rotation
    assert transform.flip_x is flip_x


@pytest.mark.parametrize(
    "rotation, flip_x",
    [
        (45, False),  # not a quarter turn
        (360, False),  # full turn is not accepted either
        (-90, False),
        (90.0, False),  # no float coercion
        ("90", False),  # no string coercion
        (True, False),  # bool is not a rotation
        (0, 1),  # 1 is not a boolean
        (0, 0),
        (0, "yes"),
        (0, None),
    ],
)
def test_invalid_transforms(rotation: Any, flip_x: Any) -> None:
    with pytest.raises(InvalidTransformError):
        _ = Transform(rotation, flip_x)


def test_apply_transform_rejects_non_transform() -> None:
    with pytest.raises(InvalidTransformError):
        _ = apply_transform(L4, {"rotation": 90, "flipX": False})  # type: ignore[arg-type]


def test_all_transforms_are_the_8_isometries() -> None:
    assert len(ALL_TRANSFORMS) == 8
    assert len(set(ALL_TRANSFORMS)) == 8
    assert ALL_TRANSFORMS[0] == IDENTITY
    assert ALL_TRANSFORMS[1] == Transform(0, True)


# --- APPLY TRANSFORM ---
def test_rotate_90_counter_clockwise() -> None:
    """(x, y) -> (-y, x) then normalized."""
    horizontal = ((0, 0), (1, 0), (2, 0), (3, 0))
    assert apply_transform(horizontal, Transform(90)) == ((0, 0), (0, 1), (0, 2), (0, 3))


def test_flip_then_rotate() -> None:
    """Flip happens before the rotation."""
    flipped = apply_transform(L4, Transform(0, True))
    assert flipped == ((1, 0), (1, 1), (1, 2), (0, 2))

    flipped_then_rotated = apply_transform(L4, Transform(90, True))
    assert flipped_then_rotated == apply_transform(flipped, Transform(90))


def test_identity_is_idempotent_and_normalizes() -> None:
    shifted = ((5, 7), (5, 8), (5, 9), (6, 9))
    once = apply_transform(shifted, IDENTITY)
    twice = apply_transform(once, IDENTITY)
    assert once == twice == L4
    assert min(x for x, _ in once) == 0
    assert min(y for _, y in once) == 0


@pytest.mark.parametrize("piece_id", STANDARD_CATALOG.ids())
def test_rotation_closure(piece_id: str) -> None:
    """Four quarter turns return the original cells."""
    cells = STANDARD_CATALOG.get(piece_id).cells
    result = cells
    for _ in range(4):
        result = apply_transform(result, Transform(90))
    assert same_cell_set(result, cells)


@pytest.mark.parametrize("piece_id", STANDARD_CATALOG.ids())
def test_flip_involution(piece_id: str) -> None:
    cells = STANDARD_CATALOG.get(piece_id).cells
    twice = apply_transform(apply_transform(cells, Transform(0, True)), Transform(0, True))
    assert same_cell_set(twice, cells)


def test_transform_keeps_cell_order() -> None:
    """The i-th output cell is the image of the i-th input cell."""
    result = apply_transform(((0, 0), (1, 0)), Transform(180))
    assert result == ((1, 0), (0, 0))


# --- HELPERS ---
def test_normalize() -> None:
    assert normalize([(3, -2), (4, -2), (3, -1)]) == ((0, 0), (1, 0), (0, 1))
    assert normalize([]) == ()


def test_compute_absolute_cells() -> None:
    assert compute_absolute_cells(((0, 0), (1, 0), (0, 1), (1, 1)), (3, 3)) == (
        (3, 3),
        (4, 3),
        (3, 4),
        (4, 4),
    )


def test_compute_bounds() -> None:
    assert compute_bounds(L4) == Bounds(width=2, height=3)
    assert compute_bounds(((0, 0), (1, 0), (2, 0), (3, 0), (4, 0))) == Bounds(5, 1)
    assert compute_bounds(()) == Bounds(0, 0)
