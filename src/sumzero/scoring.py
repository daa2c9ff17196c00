"""
Scoring: running scores, scoring history, end of game and winner.

Timestamps are integer milliseconds handed in by the caller (the Game owns the clock).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from src.core.shared_types import PatternKind
from src.sumzero.geometry import Cell
from src.sumzero.patterns import Pattern, calculate_new_points
from src.sumzero.state import (
    PLAYER_1,
    PLAYER_2,
    PLAYER_IDS,
    GameState,
    HighlightedPattern,
    ScoringEvent,
)

logger = logging.getLogger(__name__)

HIGHLIGHT_DURATION_MS = 3000

HasLegalMoveFn = Callable[[GameState, int], bool]


@dataclass(frozen=True)
class AwardResult:
    state: GameState
    points_earned: int
    patterns: tuple[Pattern, ...]


@dataclass(frozen=True)
class GameEndResult:
    """`winner`, `reason` and the totals are only filled in when `ended`."""

    ended: bool
    winner: Optional[int] = None
    reason: Optional[str] = None
    final_scores: Optional[dict[int, int]] = None
    remaining_pieces: Optional[dict[int, int]] = None


@dataclass(frozen=True)
class PlayerStatistics:
    total_score: int
    patterns_created: int
    average_points_per_pattern: float
    points_by_pattern_type: dict[PatternKind, int]
    remaining_pieces: int
    favorite_pattern_type: Optional[PatternKind]


@dataclass(frozen=True)
class GameStatistics:
    players: dict[int, PlayerStatistics]
    total_moves: int
    total_patterns: int
    time_elapsed: int


def award_points(
    state: GameState,
    player_id: int,
    new_cells: Sequence[Cell],
    move_id: str,
    now: int,
) -> AwardResult:
    """
    Score the move that just placed `new_cells`.
    ----

    * one history event per accepted pattern touching the new cells
    * the best of them (first one on equal points) becomes the highlighted pattern
    * a move forming nothing earns 0 and leaves the highlight alone
    """
    scan = calculate_new_points(state.board, player_id, new_cells)
    turn_number = len(state.history)

    events = tuple(
        ScoringEvent(
            turn_number=turn_number,
            player=player_id,
            move_id=move_id,
            pattern_id=pattern.pattern_id,
            kind=pattern.kind,
            points=pattern.points,
            cells=pattern.cells,
            timestamp=now,
        )
        for pattern in scan.patterns
    )

    scoring = replace(
        state.scoring.with_points(player_id, scan.total_points),
        history=state.scoring.history + events,
        last_scoring_move=move_id,
    )
    if scan.patterns:
        best = max(scan.patterns, key=lambda pattern: pattern.points)
        scoring = replace(
            scoring,
            highlighted=HighlightedPattern(
                pattern_id=best.pattern_id,
                kind=best.kind,
                player=player_id,
                points=best.points,
                cells=best.cells,
                expires_at=now + HIGHLIGHT_DURATION_MS,
            ),
        )
        logger.debug(
            "Player %d scored %d points with %s",
            player_id,
            scan.total_points,
            ", ".join(pattern.pattern_id for pattern in scan.patterns),
        )

    return AwardResult(replace(state, scoring=scoring), scan.total_points, scan.patterns)


def count_remaining_pieces(state: GameState, player_id: int) -> int:
    return state.player(player_id).remaining_pieces


def current_scores(state: GameState) -> dict[int, int]:
    return {pid: state.scoring.score_of(pid) for pid in PLAYER_IDS}


def check_game_end(state: GameState, has_legal_move_fn: HasLegalMoveFn) -> GameEndResult:
    """
    The game ends only when neither player can move.
    ----

    Winner: higher score, then fewer pieces left in the arsenal, then player 1.
    """
    if has_legal_move_fn(state, PLAYER_1) or has_legal_move_fn(state, PLAYER_2):
        return GameEndResult(ended=False)

    score_1, score_2 = state.scoring.player1_score, state.scoring.player2_score
    left_1 = count_remaining_pieces(state, PLAYER_1)
    left_2 = count_remaining_pieces(state, PLAYER_2)

    if score_1 > score_2:
        winner = PLAYER_1
        reason = f"Player 1 wins with {score_1} points vs {score_2} points"
    elif score_2 > score_1:
        winner = PLAYER_2
        reason = f"Player 2 wins with {score_2} points vs {score_1} points"
    elif left_1 < left_2:
        winner = PLAYER_1
        reason = f"Tie at {score_1} points - Player 1 wins with fewer pieces remaining ({left_1} vs {left_2})"
    elif left_2 < left_1:
        winner = PLAYER_2
        reason = f"Tie at {score_1} points - Player 2 wins with fewer pieces remaining ({left_2} vs {left_1})"
    else:
        winner = PLAYER_1
        reason = f"Perfect tie at {score_1} points with {left_1} pieces - Player 1 wins by default"

    return GameEndResult(
        ended=True,
        winner=winner,
        reason=reason,
        final_scores={PLAYER_1: score_1, PLAYER_2: score_2},
        remaining_pieces={PLAYER_1: left_1, PLAYER_2: left_2},
    )


# --- READ SIDE ---
def scoring_history(state: GameState, player_id: Optional[int] = None) -> list[ScoringEvent]:
    history = state.scoring.history
    if player_id is None:
        return list(history)
    return [event for event in history if event.player == player_id]


def points_by_pattern_type(state: GameState, player_id: int) -> dict[PatternKind, int]:
    points: defaultdict[PatternKind, int] = defaultdict(int)
    for event in scoring_history(state, player_id):
        points[event.kind] += event.points
    return dict(points)


def last_scoring_event(state: GameState) -> Optional[ScoringEvent]:
    history = state.scoring.history
    return history[-1] if history else None


def clear_expired_highlight(state: GameState, now: int) -> GameState:
    """Drop the highlighted pattern once `now` reaches its expiry (the rules never look at it)."""
    highlighted = state.scoring.highlighted
    if highlighted is None or now < highlighted.expires_at:
        return state
    return replace(state, scoring=replace(state.scoring, highlighted=None))


def _favorite_pattern_type(points: dict[PatternKind, int]) -> Optional[PatternKind]:
    """Most points; the first type reached wins a tie."""
    if not points:
        return None
    return max(points, key=lambda kind: points[kind])


def player_statistics(state: GameState, player_id: int) -> PlayerStatistics:
    history = scoring_history(state, player_id)
    total = state.scoring.score_of(player_id)
    points = points_by_pattern_type(state, player_id)
    return PlayerStatistics(
        total_score=total,
        patterns_created=len(history),
        average_points_per_pattern=total / len(history) if history else 0.0,
        points_by_pattern_type=points,
        remaining_pieces=count_remaining_pieces(state, player_id),
        favorite_pattern_type=_favorite_pattern_type(points),
    )


def game_statistics(state: GameState) -> GameStatistics:
    """End-of-game summary. Elapsed time spans the first to the last scoring event."""
    history = state.scoring.history
    elapsed = history[-1].timestamp - history[0].timestamp if history else 0
    return GameStatistics(
        players={pid: player_statistics(state, pid) for pid in PLAYER_IDS},
        total_moves=len(state.history),
        total_patterns=len(history),
        time_elapsed=elapsed,
    )
