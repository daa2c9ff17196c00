"""
The SumZeroGame class is the entrypoint into the domain layer for the service layer.
It orchestrates draft, placement and scoring into phase transitions:

    SETUP -> DRAFT -> PLACEMENT -> GAME_OVER

The game object itself holds no game: every call takes a GameState and returns a new one.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from src.core.exceptions import NotYourTurnError, WrongPhaseError
from src.core.models import SaveDocument
from src.core.shared_types import Phase
from src.sumzero import draft, placement, scoring, serialization
from src.sumzero.geometry import Cell, Transform
from src.sumzero.moves import Move
from src.sumzero.pieces import STANDARD_CATALOG, PieceCatalog, PieceId
from src.sumzero.state import (
    PLAYER_1,
    GameConfig,
    GameState,
    HighlightedPattern,
    ScoringEvent,
    new_game_state,
    opponent,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class GameStatus:
    phase: Phase
    current_player: int
    winner: Optional[int]
    turn_number: int
    scores: dict[int, int]
    is_game_over: bool
    end_reason: Optional[str]
    last_scoring_event: Optional[ScoringEvent]
    highlighted_pattern: Optional[HighlightedPattern]


class SumZeroGame:
    """
    Rules engine facade.
    ----

    * `catalog`: the piece catalog every rule consults
    * `clock`: milliseconds, only used for scoring timestamps and highlight expiry. Inject a fixed
      clock to make whole games bit-for-bit reproducible.
    """

    def __init__(self, catalog: PieceCatalog = STANDARD_CATALOG, clock: Clock = wall_clock_ms):
        self.catalog = catalog
        self.clock = clock

    # --- DOMAIN LAYER API CALLED BY SERVICE ---
    def new_game(self, config: Optional[GameConfig] = None) -> GameState:
        return new_game_state(config or GameConfig(), self.catalog)

    def restart(self, state: GameState) -> GameState:
        """Fresh game with the same configuration."""
        return self.new_game(state.config)

    def draft_buy(self, state: GameState, player_id: int, piece_id: PieceId) -> GameState:
        self._assert_phase(state, Phase.DRAFT)
        self._assert_your_turn(state, player_id)

        new_state = draft.buy(state, player_id, piece_id, self.catalog)
        new_state = replace(new_state, current_player=opponent(player_id))
        return self._end_draft_if_over(new_state)

    def draft_pass(self, state: GameState, player_id: int) -> GameState:
        self._assert_phase(state, Phase.DRAFT)
        self._assert_your_turn(state, player_id)

        new_state = draft.pass_draft(state, player_id)
        logger.debug("Player %d passed the draft", player_id)
        new_state = replace(new_state, current_player=opponent(player_id))
        return self._end_draft_if_over(new_state)

    def create_move(
        self, player_id: int, piece_id: PieceId, transform: Transform, anchor: Cell
    ) -> Move:
        return placement.create_move(player_id, piece_id, transform, anchor, self.catalog)

    def place_piece(self, state: GameState, move: Move) -> GameState:
        """
        Commit, score, hand the turn over, then run the start-of-turn check for the next player.
        """
        self._assert_phase(state, Phase.PLACEMENT)
        self._assert_your_turn(state, move.player)

        new_state = placement.commit(state, move, self.catalog)
        move_id = f"move_{len(new_state.history)}"
        award = scoring.award_points(new_state, move.player, move.cells, move_id, self.clock())

        new_state = replace(award.state, current_player=opponent(move.player))
        return self._start_turn(new_state)

    def enumerate_legal_moves(
        self, state: GameState, player_id: int, limit: int = placement.DEFAULT_MOVE_LIMIT
    ) -> list[Move]:
        return placement.enumerate_legal_moves(state, player_id, self.catalog, limit)

    def has_legal_move(self, state: GameState, player_id: int) -> bool:
        return placement.has_legal_move(state, player_id, self.catalog)

    def available_pieces(self, state: GameState, player_id: int) -> list[PieceId]:
        return draft.available_pieces(state, player_id, self.catalog)

    def status(self, state: GameState) -> GameStatus:
        return GameStatus(
            phase=state.phase,
            current_player=state.current_player,
            winner=state.winner,
            turn_number=len(state.history) + 1,
            scores=scoring.current_scores(state),
            is_game_over=state.is_over,
            end_reason=state.end_reason,
            last_scoring_event=scoring.last_scoring_event(state),
            highlighted_pattern=state.scoring.highlighted,
        )

    def statistics(self, state: GameState) -> scoring.GameStatistics:
        return scoring.game_statistics(state)

    def save(self, state: GameState) -> SaveDocument:
        return serialization.to_document(state)

    def load(self, document: SaveDocument) -> GameState:
        return serialization.from_document(document, self.catalog)

    # --- PHASE TRANSITIONS ---
    def _end_draft_if_over(self, state: GameState) -> GameState:
        if not draft.is_draft_over(state, self.catalog):
            return state
        logger.info("Draft over, entering placement phase")
        return self._start_turn(replace(state, phase=Phase.PLACEMENT, current_player=PLAYER_1))

    def _start_turn(self, state: GameState) -> GameState:
        """
        Start-of-turn check.
        ----

        * current player can move: nothing to do
        * only the other player can move: skip the blocked player's turn
        * nobody can move: game over
        """
        if state.phase != Phase.PLACEMENT:
            return state

        state = scoring.clear_expired_highlight(state, self.clock())
        if self.has_legal_move(state, state.current_player):
            return state

        other = opponent(state.current_player)
        if self.has_legal_move(state, other):
            logger.info("Player %d has no legal move, turn skipped", state.current_player)
            return self._start_turn(replace(state, current_player=other))

        return self._end_game(state)

    def _end_game(self, state: GameState) -> GameState:
        result = scoring.check_game_end(state, self.has_legal_move)
        logger.info("Game over: %s", result.reason)
        return replace(
            state,
            phase=Phase.GAME_OVER,
            winner=result.winner,
            end_reason=result.reason,
        )

    # --- GUARDS ---
    def _assert_phase(self, state: GameState, phase: Phase) -> None:
        if state.phase != phase:
            raise WrongPhaseError(
                f"Action requires phase {phase}, game is in phase {state.phase}"
            )

    def _assert_your_turn(self, state: GameState, player_id: int) -> None:
        if state.current_player != player_id:
            raise NotYourTurnError(
                f"It's not your turn: player {state.current_player} is to play, not player {player_id}"
            )
