"""
Placement rules: single-move legality, legal-move search, move validation and commit.

Key idea: only the precomputed orientations of the catalog are searched, and anchors are bounded
by the orientation's bounding box so every candidate already fits inside the board.
"""

import logging
from dataclasses import replace
from typing import Iterator, Sequence

from src.core.exceptions import InvalidMoveError
from src.sumzero.board import Board
from src.sumzero.geometry import (
    Cell,
    Transform,
    apply_transform,
    compute_absolute_cells,
    compute_bounds,
)
from src.sumzero.moves import Move
from src.sumzero.pieces import PieceCatalog, PieceId
from src.sumzero.state import PLAYER_IDS, GameState

logger = logging.getLogger(__name__)

DEFAULT_MOVE_LIMIT = 1000


def is_legal(board: Board, cells: Sequence[Cell], anchor: Cell) -> bool:
    """Every translated cell is in bounds and empty. There is no adjacency rule."""
    return board.cells_are_empty(compute_absolute_cells(cells, anchor))


def _candidate_moves(
    state: GameState, player_id: int, catalog: PieceCatalog
) -> Iterator[Move]:
    """
    Legal moves, lazily.
    ---

    Order: arsenal order, then orientation order of the catalog, then anchors row by row.
    """
    board = state.board
    for piece_id, count in state.player(player_id).arsenal.items():
        if count <= 0:
            continue
        for orientation in catalog.orientations(piece_id):
            bounds = compute_bounds(orientation.cells)
            for y in range(board.rows - bounds.height + 1):
                for x in range(board.cols - bounds.width + 1):
                    if is_legal(board, orientation.cells, (x, y)):
                        yield Move(
                            player=player_id,
                            piece_id=piece_id,
                            transform=orientation.transform,
                            anchor=(x, y),
                            cells=compute_absolute_cells(orientation.cells, (x, y)),
                        )


def has_legal_move(state: GameState, player_id: int, catalog: PieceCatalog) -> bool:
    """Stops at the first legal placement found."""
    return next(_candidate_moves(state, player_id, catalog), None) is not None


def enumerate_legal_moves(
    state: GameState,
    player_id: int,
    catalog: PieceCatalog,
    limit: int = DEFAULT_MOVE_LIMIT,
) -> list[Move]:
    """
    Up to `limit` legal moves.
    ---

    The limit only keeps the result size reasonable on large empty boards. To know whether any
    move exists use `has_legal_move`.
    """
    moves: list[Move] = []
    if limit <= 0:
        return moves
    for move in _candidate_moves(state, player_id, catalog):
        moves.append(move)
        if len(moves) >= limit:
            break
    return moves


def create_move(
    player_id: int,
    piece_id: PieceId,
    transform: Transform,
    anchor: Cell,
    catalog: PieceCatalog,
) -> Move:
    """Build a move with its absolute cells. Raises UnknownPieceError / InvalidTransformError."""
    shape = catalog.get(piece_id)
    cells = apply_transform(shape.cells, transform)
    return Move(player_id, piece_id, transform, anchor, compute_absolute_cells(cells, anchor))


def validate_move(state: GameState, move: Move, catalog: PieceCatalog) -> bool:
    """
    All of the following must hold:
    ----

    * the player owns at least one copy of the piece
    * the piece exists in the catalog
    * the move's cells are exactly what piece + transform + anchor produce (same order)
    * those cells are a legal placement on the current board
    """
    if move.player not in PLAYER_IDS:
        return False
    if not state.player(move.player).owns(move.piece_id):
        return False
    if not catalog.has(move.piece_id) or not isinstance(move.transform, Transform):
        return False

    expected = move.derive_cells(catalog)
    if tuple(move.cells) != expected:
        return False

    return state.board.cells_are_empty(expected)


def commit(state: GameState, move: Move, catalog: PieceCatalog) -> GameState:
    """
    Apply a move: place it, take the piece out of the arsenal, append the move to the history.

    The move is validated again here, whatever the caller checked before.
    """
    if not validate_move(state, move, catalog):
        logger.warning("Rejected move of player %s: %s at %s", move.player, move.piece_id, move.anchor)
        raise InvalidMoveError(
            f"Invalid move: player {move.player} cannot place {move.piece_id} at {move.anchor}"
        )

    board = state.board.place(move.cells, move.player)
    mover = state.player(move.player).with_piece(move.piece_id, -1)
    return replace(
        state.with_player(mover),
        board=board,
        history=state.history + (move,),
    )
