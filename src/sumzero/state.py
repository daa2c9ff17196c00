"""
Game state: the root aggregate and its sub-records.

Every record is a frozen dataclass. Engine functions never mutate a state: they build a new one with
`dataclasses.replace`, copying only the parts that change (board, the acting player, draft or scoring).
The dicts held inside (arsenal, stock, players) are treated as read-only too.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import InvalidConfigError
from src.core.shared_types import PatternKind, Phase, StockMode
from src.sumzero.board import Board
from src.sumzero.board_shapes import MIN_SHAPE_SIZE, create_shaped_board, is_known_shape
from src.sumzero.geometry import Cells
from src.sumzero.moves import Move
from src.sumzero.pieces import PENTOMINO_SIZE, TETROMINO_SIZE, PieceCatalog, PieceId

logger = logging.getLogger(__name__)

PLAYER_1 = 1
PLAYER_2 = 2
PLAYER_IDS: tuple[int, int] = (PLAYER_1, PLAYER_2)

UNLIMITED = -1
MIN_BOARD_DIMENSION = 1
MAX_BOARD_DIMENSION = 64

STATE_VERSION = "1.3"

Arsenal = dict[PieceId, int]
Stock = dict[PieceId, int]


def opponent(player_id: int) -> int:
    return PLAYER_2 if player_id == PLAYER_1 else PLAYER_1


# --- CONFIGURATION ---
class GameConfig(BaseModel):
    """
    Parameters of a new game.
    ---

    * Either a plain `board_rows` x `board_cols` rectangle, or a named shape (`board_shape`) on a
      `shape_size` square. `seed` makes shaped boards (and their random holes) reproducible.
    * Field aliases are camelCase: that is how the config is stored in a save document.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    board_rows: int = 10
    board_cols: int = 10
    board_shape: Optional[str] = None
    shape_size: int = 14
    add_holes: bool = True
    seed: Optional[int] = None
    stock_mode: StockMode = StockMode.SINGLETON
    allow_tetrominoes: bool = True
    allow_pentominoes: bool = True

    @field_validator("board_rows", "board_cols", "shape_size")
    @classmethod
    def validate_dimension(cls, value: int) -> int:
        if not MIN_BOARD_DIMENSION <= value <= MAX_BOARD_DIMENSION:
            raise InvalidConfigError(
                f"Board dimensions must be between {MIN_BOARD_DIMENSION} and {MAX_BOARD_DIMENSION}, got {value}"
            )
        return value

    @field_validator("board_shape")
    @classmethod
    def validate_board_shape(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_known_shape(value):
            raise InvalidConfigError(f"Unknown board shape: {value!r}")
        return value

    @model_validator(mode="after")
    def validate_combination(self) -> Self:
        if not (self.allow_tetrominoes or self.allow_pentominoes):
            raise InvalidConfigError("At least one piece size must be enabled")
        if self.board_shape is not None and self.shape_size < MIN_SHAPE_SIZE:
            raise InvalidConfigError(
                f"Shaped boards need a size of at least {MIN_SHAPE_SIZE}, got {self.shape_size}"
            )
        return self

    def allowed_sizes(self) -> tuple[int, ...]:
        sizes = []
        if self.allow_tetrominoes:
            sizes.append(TETROMINO_SIZE)
        if self.allow_pentominoes:
            sizes.append(PENTOMINO_SIZE)
        return tuple(sizes)

    def build_board(self) -> Board:
        if self.board_shape is None:
            return Board.create_empty(self.board_rows, self.board_cols)
        return create_shaped_board(
            self.board_shape,
            self.shape_size,
            add_holes=self.add_holes,
            rng=random.Random(self.seed),
        )


# --- STATE RECORDS ---
@dataclass(frozen=True)
class PlayerState:
    """Arsenal maps piece id -> owned count. Pieces that reach zero are dropped from the mapping."""

    id: int
    budget: int
    arsenal: Arsenal = field(default_factory=dict)

    def owns(self, piece_id: PieceId) -> bool:
        return self.arsenal.get(piece_id, 0) > 0

    @property
    def remaining_pieces(self) -> int:
        return sum(self.arsenal.values())

    def with_piece(self, piece_id: PieceId, delta: int) -> Self:
        arsenal = dict(self.arsenal)
        count = arsenal.get(piece_id, 0) + delta
        if count > 0:
            arsenal[piece_id] = count
        else:
            arsenal.pop(piece_id, None)
        return replace(self, arsenal=arsenal)


@dataclass(frozen=True)
class DraftState:
    player1_passed: bool = False
    player2_passed: bool = False
    consecutive_passes: int = 0

    def has_passed(self, player_id: int) -> bool:
        return self.player1_passed if player_id == PLAYER_1 else self.player2_passed


@dataclass(frozen=True)
class HighlightedPattern:
    """Presentation only: the best pattern of the last scoring move, shown until `expires_at` (ms)."""

    pattern_id: str
    kind: PatternKind
    player: int
    points: int
    cells: Cells
    expires_at: int


@dataclass(frozen=True)
class ScoringEvent:
    """One accepted pattern of one move."""

    turn_number: int
    player: int
    move_id: str
    pattern_id: str
    kind: PatternKind
    points: int
    cells: Cells
    timestamp: int


@dataclass(frozen=True)
class ScoringState:
    player1_score: int = 0
    player2_score: int = 0
    history: tuple[ScoringEvent, ...] = ()
    last_scoring_move: Optional[str] = None
    highlighted: Optional[HighlightedPattern] = None

    def score_of(self, player_id: int) -> int:
        return self.player1_score if player_id == PLAYER_1 else self.player2_score

    def with_points(self, player_id: int, points: int) -> Self:
        if player_id == PLAYER_1:
            return replace(self, player1_score=self.player1_score + points)
        return replace(self, player2_score=self.player2_score + points)


@dataclass(frozen=True)
class GameState:
    """
    Root aggregate: everything a save document holds.
    ---

    `players` is keyed by player id (1 and 2). `history` holds the committed moves in order.
    """

    phase: Phase
    board: Board
    players: dict[int, PlayerState]
    stock: Stock
    current_player: int
    config: GameConfig
    draft: DraftState = field(default_factory=DraftState)
    scoring: ScoringState = field(default_factory=ScoringState)
    history: tuple[Move, ...] = ()
    winner: Optional[int] = None
    end_reason: Optional[str] = None
    version: str = STATE_VERSION

    def player(self, player_id: int) -> PlayerState:
        return self.players[player_id]

    def with_player(self, player: PlayerState) -> Self:
        players = dict(self.players)
        players[player.id] = player
        return replace(self, players=players)

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER


def starting_budget(board: Board) -> int:
    """floor(usable cells / 2) + 1: unusable cells of shaped boards do not count."""
    return board.usable_cell_count() // 2 + 1


def initial_stock(config: GameConfig, catalog: PieceCatalog) -> Stock:
    copies = 1 if config.stock_mode == StockMode.SINGLETON else UNLIMITED
    sizes = config.allowed_sizes()
    return {shape.id: copies for shape in catalog.all_shapes() if shape.size in sizes}


def new_game_state(config: GameConfig, catalog: PieceCatalog) -> GameState:
    """SETUP -> DRAFT happens right here: the returned state is already drafting, player 1 to act."""
    board = config.build_board()
    budget = starting_budget(board)
    logger.info(
        "New game: %dx%d board (%s), budget %d, stock mode %s",
        board.rows,
        board.cols,
        config.board_shape or "rectangle",
        budget,
        config.stock_mode,
    )
    return GameState(
        phase=Phase.DRAFT,
        board=board,
        players={pid: PlayerState(pid, budget) for pid in PLAYER_IDS},
        stock=initial_stock(config, catalog),
        current_player=PLAYER_1,
        config=config,
    )
