"""
Computer opponent contract and a simple greedy reference opponent.

An opponent only ever chooses among what the engine offers: a piece it can buy (or a pass) during the
draft, a move from `enumerate_legal_moves` during placement. Its randomness lives in its own
`random.Random`, so it never leaks into the rules engine.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional, Protocol

from src.core.exceptions import WrongPhaseError
from src.core.shared_types import Phase
from src.sumzero.game import SumZeroGame
from src.sumzero.moves import Move
from src.sumzero.patterns import calculate_new_points
from src.sumzero.pieces import PieceId
from src.sumzero.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftAction:
    """Buy `piece_id`, or pass when it is None."""

    piece_id: Optional[PieceId] = None

    @property
    def is_pass(self) -> bool:
        return self.piece_id is None


class Opponent(Protocol):
    """Minimal contract for computer players."""

    def choose_draft_action(
        self, game: SumZeroGame, state: GameState, player_id: int
    ) -> DraftAction: ...

    def choose_move(
        self, game: SumZeroGame, state: GameState, player_id: int
    ) -> Optional[Move]: ...


class GreedyOpponent:
    """
    Draft: the most expensive piece it can buy, pass when there is none.
    Placement: the legal move with the most immediate points. Ties are broken by its own seeded rng.
    """

    def __init__(self, seed: Optional[int] = None, move_limit: int = 1000):
        self.rng = random.Random(seed)
        self.move_limit = move_limit

    def choose_draft_action(
        self, game: SumZeroGame, state: GameState, player_id: int
    ) -> DraftAction:
        candidates = game.available_pieces(state, player_id)
        if not candidates:
            return DraftAction()

        best_cost = max(game.catalog.cost(piece_id) for piece_id in candidates)
        best = [piece_id for piece_id in candidates if game.catalog.cost(piece_id) == best_cost]
        return DraftAction(self.rng.choice(best))

    def choose_move(
        self, game: SumZeroGame, state: GameState, player_id: int
    ) -> Optional[Move]:
        moves = game.enumerate_legal_moves(state, player_id, self.move_limit)
        if not moves:
            return None

        scored = [(self.immediate_points(state, move), move) for move in moves]
        best_points = max(points for points, _ in scored)
        best = [move for points, move in scored if points == best_points]
        return self.rng.choice(best)

    @staticmethod
    def immediate_points(state: GameState, move: Move) -> int:
        board = state.board.place(move.cells, move.player)
        return calculate_new_points(board, move.player, move.cells).total_points


def play_turn(game: SumZeroGame, state: GameState, opponent: Opponent) -> GameState:
    """Let `opponent` act for the current player and apply its choice."""
    player_id = state.current_player

    if state.phase == Phase.DRAFT:
        action = opponent.choose_draft_action(game, state, player_id)
        if action.is_pass:
            return game.draft_pass(state, player_id)
        return game.draft_buy(state, player_id, action.piece_id)

    if state.phase == Phase.PLACEMENT:
        move = opponent.choose_move(game, state, player_id)
        if move is None:
            logger.debug("Player %d found no move", player_id)
            return state
        return game.place_piece(state, move)

    raise WrongPhaseError(f"Nothing to play in phase {state.phase}")
