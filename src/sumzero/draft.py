"""
Draft economy: budgets, stock, purchases and passes.

Only bookkeeping lives here. Whose turn comes next and leaving the draft phase are decided by the Game.
"""

import logging
from dataclasses import replace
from typing import Mapping

from src.core.exceptions import InvalidPurchaseError, UnknownPieceError
from src.sumzero.pieces import PieceCatalog, PieceId
from src.sumzero.state import (
    PLAYER_1,
    PLAYER_IDS,
    UNLIMITED,
    DraftState,
    GameState,
    PlayerState,
)

logger = logging.getLogger(__name__)


def can_afford(player: PlayerState, piece_id: PieceId, catalog: PieceCatalog) -> bool:
    """budget >= cost. Unknown pieces raise UnknownPieceError."""
    return player.budget >= catalog.cost(piece_id)


def is_available(stock: Mapping[PieceId, int], piece_id: PieceId) -> bool:
    """Copies left (> 0) or unlimited (-1). Pieces missing from the stock are not available."""
    count = stock.get(piece_id, 0)
    return count > 0 or count == UNLIMITED


def buy(
    state: GameState, player_id: int, piece_id: PieceId, catalog: PieceCatalog
) -> GameState:
    """
    Purchase one copy of a piece.
    ----

    Checks everything first and only then builds the new state: a rejected purchase changes nothing.
    Any purchase clears both pass flags.
    """
    if state.current_player != player_id:
        raise InvalidPurchaseError(f"Player {player_id} cannot buy: it is not their turn")
    if piece_id not in state.stock:
        raise InvalidPurchaseError(f"Piece {piece_id!r} is not part of this game's stock")

    player = state.player(player_id)
    try:
        affordable = can_afford(player, piece_id, catalog)
    except UnknownPieceError as e:
        raise InvalidPurchaseError(str(e)) from e
    if not affordable:
        raise InvalidPurchaseError(
            f"Player {player_id} cannot afford {piece_id} "
            f"(cost {catalog.cost(piece_id)}, budget {player.budget})"
        )
    if not is_available(state.stock, piece_id):
        raise InvalidPurchaseError(f"Piece {piece_id} is out of stock")

    stock = dict(state.stock)
    if stock[piece_id] != UNLIMITED:
        stock[piece_id] -= 1

    buyer = replace(player, budget=player.budget - catalog.cost(piece_id)).with_piece(piece_id, 1)
    logger.debug("Player %d bought %s, %d budget left", player_id, piece_id, buyer.budget)
    return replace(state.with_player(buyer), stock=stock, draft=DraftState())


def pass_draft(state: GameState, player_id: int) -> GameState:
    """Set the player's pass flag: counter is 2 when both flags are set, 1 otherwise."""
    draft = state.draft
    if player_id == PLAYER_1:
        draft = replace(draft, player1_passed=True)
    else:
        draft = replace(draft, player2_passed=True)

    both_passed = draft.player1_passed and draft.player2_passed
    draft = replace(draft, consecutive_passes=2 if both_passed else 1)
    return replace(state, draft=draft)


def is_draft_over(state: GameState, catalog: PieceCatalog) -> bool:
    """Both players passed, or nobody can afford anything still available."""
    if state.draft.consecutive_passes >= 2:
        return True

    return not any(
        is_available(state.stock, piece_id) and can_afford(state.player(pid), piece_id, catalog)
        for pid in PLAYER_IDS
        for piece_id in state.stock
    )


def available_pieces(state: GameState, player_id: int, catalog: PieceCatalog) -> list[PieceId]:
    """Pieces this player could buy right now, in stock order."""
    player = state.player(player_id)
    return [
        piece_id
        for piece_id in state.stock
        if is_available(state.stock, piece_id) and can_afford(player, piece_id, catalog)
    ]


def arsenal_value(arsenal: Mapping[PieceId, int], catalog: PieceCatalog) -> int:
    return sum(catalog.cost(piece_id) * count for piece_id, count in arsenal.items())


def has_any_pieces(arsenal: Mapping[PieceId, int]) -> bool:
    return any(count > 0 for count in arsenal.values())
