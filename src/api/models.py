"""Requests and Response models"""

from typing import Any, Optional, Self
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Phase, StockMode
from src.sumzero.board_shapes import is_known_shape
from src.sumzero.geometry import VALID_ROTATIONS
from src.sumzero.pieces import STANDARD_CATALOG
from src.sumzero.placement import DEFAULT_MOVE_LIMIT
from src.sumzero.state import MAX_BOARD_DIMENSION, MIN_BOARD_DIMENSION, PLAYER_IDS, GameConfig

MAX_LEGAL_MOVES_LIMIT = 5000

PieceId = str
PlayerId = int


def _validate_player_id(value: int) -> int:
    if value not in PLAYER_IDS:
        raise InvalidRequestError(f"Player id must be 1 or 2, got {value!r}")
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    """Plain rectangle (rows x cols) unless a board shape is named."""

    board_rows: int = 10
    board_cols: int = 10
    board_shape: Optional[str] = None
    shape_size: int = 14
    add_holes: bool = True
    stock_mode: StockMode = StockMode.SINGLETON
    allow_tetrominoes: bool = True
    allow_pentominoes: bool = True
    seed: Optional[int] = None

    @field_validator(*["board_rows", "board_cols", "shape_size"])
    @classmethod
    def validate_dimension(cls, value: int) -> int:
        if not MIN_BOARD_DIMENSION <= value <= MAX_BOARD_DIMENSION:
            raise InvalidRequestError(
                f"Board dimensions must be between {MIN_BOARD_DIMENSION} and {MAX_BOARD_DIMENSION}, got {value}."
            )
        return value

    @field_validator("board_shape")
    @classmethod
    def validate_board_shape(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not is_known_shape(value):
            raise InvalidRequestError(f"Unknown board shape: {value!r}.")
        return value

    @model_validator(mode="after")
    def validate_piece_sizes(self) -> Self:
        if not (self.allow_tetrominoes or self.allow_pentominoes):
            raise InvalidRequestError("Enable tetrominoes, pentominoes or both.")
        return self

    def to_config(self) -> GameConfig:
        return GameConfig(**self.model_dump())


class DraftBuyRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    piece_id: PieceId

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: int) -> int:
        return _validate_player_id(value)

    @field_validator("piece_id")
    @classmethod
    def validate_piece_id(cls, value: str) -> str:
        if not STANDARD_CATALOG.has(value):
            raise InvalidRequestError(
                f"Unknown piece: {value!r}. Pick one from {','.join(STANDARD_CATALOG.ids())}"
            )
        return value


class DraftPassRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: int) -> int:
        return _validate_player_id(value)


class PlaceMoveRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    piece_id: PieceId
    rotation: int = 0
    flip_x: bool = False
    anchor_x: int
    anchor_y: int

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: int) -> int:
        return _validate_player_id(value)

    @field_validator("piece_id")
    @classmethod
    def validate_piece_id(cls, value: str) -> str:
        if not STANDARD_CATALOG.has(value):
            raise InvalidRequestError(f"Unknown piece: {value!r}.")
        return value

    @field_validator("rotation", mode="before")
    @classmethod
    def validate_rotation(cls, value: Any) -> int:
        # strict: 90.0, "90" and True are not rotations
        if isinstance(value, bool) or not isinstance(value, int) or value not in VALID_ROTATIONS:
            raise InvalidRequestError(
                f"Rotation must be one of {VALID_ROTATIONS}, got {value!r}."
            )
        return value

    @field_validator("flip_x", mode="before")
    @classmethod
    def validate_flip_x(cls, value: Any) -> bool:
        if not isinstance(value, bool):
            raise InvalidRequestError(f"flip_x must be true or false, got {value!r}.")
        return value

    @field_validator(*["anchor_x", "anchor_y"])
    @classmethod
    def validate_anchor(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"Anchor coordinates cannot be negative, got {value}.")
        return value


class LegalMovesRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    limit: int = DEFAULT_MOVE_LIMIT

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: int) -> int:
        return _validate_player_id(value)

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        if not 1 <= value <= MAX_LEGAL_MOVES_LIMIT:
            raise InvalidRequestError(
                f"limit must be between 1 and {MAX_LEGAL_MOVES_LIMIT}, got {value}."
            )
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class LoadGameRequest(BaseModel):
    """Import a save document (any supported version) as a new game."""

    document: dict[str, Any]


# --- RESPONSE MODELS ---
class MoveResponse(BaseModel):
    player_id: PlayerId
    piece_id: PieceId
    rotation: int
    flip_x: bool
    anchor_x: int
    anchor_y: int
    cells: list[tuple[int, int]]


class GameResponse(BaseModel):
    game_id: UUID
    phase: Phase
    current_player: PlayerId
    turn_number: int
    scores: dict[PlayerId, int]
    winner: Optional[PlayerId]
    end_reason: Optional[str]
    is_game_over: bool
    board: list[list[int]]
    budgets: dict[PlayerId, int]
    arsenals: dict[PlayerId, dict[PieceId, int]]
    stock: dict[PieceId, int]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    player_id: PlayerId
    legal_moves: list[MoveResponse]


class SaveResponse(BaseModel):
    game_id: UUID
    document: dict[str, Any]
