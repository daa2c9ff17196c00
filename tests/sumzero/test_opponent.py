"""Unit tests for src/sumzero/opponent.py"""

from typing import Callable

import pytest

from src.core.exceptions import WrongPhaseError
from src.core.shared_types import Phase
from src.sumzero.game import SumZeroGame
from src.sumzero.opponent import DraftAction, GreedyOpponent, play_turn
from src.sumzero.pieces import PENTOMINO_SIZE, TETROMINO_SIZE, PieceCatalog
from src.sumzero.state import GameConfig, GameState, PlayerState

MAX_TURNS = 200


def self_play(game: SumZeroGame, config: GameConfig, seed: int) -> GameState:
    first, second = GreedyOpponent(seed), GreedyOpponent(seed + 1)
    state = game.new_game(config)
    for _ in range(MAX_TURNS):
        if state.is_over:
            return state
        opponent = first if state.current_player == 1 else second
        state = play_turn(game, state, opponent)
    raise AssertionError("game did not finish")


# --- DRAFT ---
def test_draft_action() -> None:
    assert DraftAction().is_pass
    assert not DraftAction("T4").is_pass


def test_buys_the_most_expensive_piece(game: SumZeroGame, catalog: PieceCatalog) -> None:
    state = game.new_game()
    action = GreedyOpponent(seed=0).choose_draft_action(game, state, 1)
    assert action.piece_id is not None
    assert catalog.cost(action.piece_id) == PENTOMINO_SIZE

    poor = state.with_player(PlayerState(1, 4))
    action = GreedyOpponent(seed=0).choose_draft_action(game, poor, 1)
    assert action.piece_id is not None
    assert catalog.cost(action.piece_id) == TETROMINO_SIZE


def test_passes_when_nothing_is_affordable(game: SumZeroGame) -> None:
    broke = game.new_game().with_player(PlayerState(1, 3))
    assert GreedyOpponent().choose_draft_action(game, broke, 1).is_pass


# --- PLACEMENT ---
def test_picks_the_highest_scoring_move(game: SumZeroGame, make_state: Callable[..., GameState]) -> None:
    rows = [[0] * 8 for _ in range(8)]
    for x in range(2, 6):
        rows[5][x] = 1
    state = make_state(rows, arsenal_1={"I4": 1})

    opponent = GreedyOpponent(seed=3)
    move = opponent.choose_move(game, state, 1)
    assert move is not None
    assert opponent.immediate_points(state, move) == 12
    # the state itself is not touched by the look-ahead
    assert state.board.count(1) == 4


def test_no_move_available(game: SumZeroGame, make_state: Callable[..., GameState]) -> None:
    state = make_state([[0, 0], [0, 0]], arsenal_1={"I5": 1})
    assert GreedyOpponent().choose_move(game, state, 1) is None
    assert play_turn(game, state, GreedyOpponent()) is state


def test_same_seed_same_choices(game: SumZeroGame, make_state: Callable[..., GameState]) -> None:
    state = make_state([[0] * 8 for _ in range(8)], arsenal_1={"T4": 1, "L4": 1})
    first = GreedyOpponent(seed=9).choose_move(game, state, 1)
    second = GreedyOpponent(seed=9).choose_move(game, state, 1)
    assert first == second


# --- PLAY ---
def test_play_turn_in_each_phase(game: SumZeroGame) -> None:
    opponent = GreedyOpponent(seed=1)
    state = play_turn(game, game.new_game(GameConfig(board_rows=6, board_cols=6)), opponent)
    assert state.phase == Phase.DRAFT
    assert state.current_player == 2
    assert state.player(1).remaining_pieces == 1


def test_play_turn_after_game_over(game: SumZeroGame) -> None:
    over = game.draft_pass(game.new_game(GameConfig(board_rows=2, board_cols=2)), 1)
    assert over.phase == Phase.GAME_OVER
    with pytest.raises(WrongPhaseError):
        _ = play_turn(game, over, GreedyOpponent())


@pytest.mark.parametrize(
    "config",
    [
        GameConfig(board_rows=6, board_cols=6),
        GameConfig(board_rows=5, board_cols=9, allow_pentominoes=False),
        GameConfig(board_shape="diamond", shape_size=9, seed=4),
    ],
)
def test_self_play_reaches_game_over(game: SumZeroGame, config: GameConfig) -> None:
    final = self_play(game, config, seed=21)
    assert final.phase == Phase.GAME_OVER
    assert final.winner in (1, 2)
    assert final.end_reason
    assert not game.has_legal_move(final, 1)
    assert not game.has_legal_move(final, 2)
    assert game.load(game.save(final)) == final


def test_self_play_is_reproducible(game: SumZeroGame) -> None:
    config = GameConfig(board_rows=7, board_cols=7)
    assert self_play(game, config, seed=5) == self_play(game, config, seed=5)
