"""
Save documents: GameState <-> JSON-ready dict.

Key idea: older documents are upgraded one version at a time (pure dict -> dict steps), then the
result is validated by a pydantic schema plus a few semantic checks before any GameState is built.
Every failure surfaces as MalformedStateError: a load either returns a complete state or raises.

Document layout (v1.3) uses camelCase keys and players keyed "1" / "2".
"""

import copy
import json
import logging
from typing import Annotated, Any, Callable, Optional, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from src.core.exceptions import GameError, MalformedStateError
from src.core.models import SaveDocument
from src.core.shared_types import PatternKind, Phase
from src.sumzero.board import VALID_CELL_VALUES, Board
from src.sumzero.moves import Move
from src.sumzero.pieces import STANDARD_CATALOG, PieceCatalog
from src.sumzero.state import (
    MAX_BOARD_DIMENSION,
    MIN_BOARD_DIMENSION,
    PLAYER_IDS,
    UNLIMITED,
    DraftState,
    GameConfig,
    GameState,
    HighlightedPattern,
    PlayerState,
    ScoringEvent,
    ScoringState,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = "1.3"
SUPPORTED_VERSIONS: tuple[str, ...] = ("1.1", "1.2", "1.3")

END_CONDITION = {"type": "both_players_blocked", "scoreToWin": None}


# --- MIGRATIONS ---
def _default_draft_state() -> dict[str, Any]:
    return {"player1Passed": False, "player2Passed": False, "consecutivePasses": 0}


def _default_scoring() -> dict[str, Any]:
    return {
        "player1Score": 0,
        "player2Score": 0,
        "scoringHistory": [],
        "lastScoringMove": None,
        "highlightedPattern": None,
    }


def migrate_1_1_to_1_2(document: SaveDocument) -> SaveDocument:
    """Arsenal lists of duplicate ids become count maps. A missing draft state gets the defaults."""
    players = document.get("players")
    for player in players.values() if isinstance(players, dict) else ():
        if isinstance(player, dict) and isinstance(player.get("arsenal"), list):
            counts: dict[str, int] = {}
            for piece_id in player["arsenal"]:
                if not isinstance(piece_id, str):
                    raise MalformedStateError(f"Arsenal entries must be piece ids, got {piece_id!r}")
                counts[piece_id] = counts.get(piece_id, 0) + 1
            player["arsenal"] = counts
    if not document.get("draftState"):
        document["draftState"] = _default_draft_state()
    document["version"] = "1.2"
    return document


def migrate_1_2_to_1_3(document: SaveDocument) -> SaveDocument:
    """Scoring did not exist before 1.3: zero scores, empty history."""
    if not document.get("scoring"):
        document["scoring"] = _default_scoring()
    document.setdefault("endCondition", dict(END_CONDITION))
    document["version"] = "1.3"
    return document


MIGRATIONS: dict[str, Callable[[SaveDocument], SaveDocument]] = {
    "1.1": migrate_1_1_to_1_2,
    "1.2": migrate_1_2_to_1_3,
}


def migrate(document: SaveDocument) -> SaveDocument:
    """Upgrade to CURRENT_VERSION. Works on a deep copy: the caller's document is never touched."""
    if not isinstance(document, dict):
        raise MalformedStateError(f"Save document must be an object, got {type(document).__name__}")
    version = document.get("version")
    if version not in SUPPORTED_VERSIONS:
        raise MalformedStateError(f"Unsupported save version: {version!r}")

    migrated = copy.deepcopy(document)
    while migrated["version"] != CURRENT_VERSION:
        from_version = migrated["version"]
        migrated = MIGRATIONS[from_version](migrated)
        logger.info("Migrated save document from %s to %s", from_version, migrated["version"])
    return migrated


# --- DOCUMENT SCHEMA ---
class _DocModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


CellPair = tuple[int, int]
Count = Annotated[int, Field(ge=0)]


class BoardDoc(_DocModel):
    rows: int
    cols: int
    grid: list[list[int]]

    @model_validator(mode="after")
    def validate_grid(self) -> Self:
        for dimension in (self.rows, self.cols):
            if not MIN_BOARD_DIMENSION <= dimension <= MAX_BOARD_DIMENSION:
                raise MalformedStateError(
                    f"Board dimensions out of range: {self.rows}x{self.cols}"
                )
        if len(self.grid) != self.rows:
            raise MalformedStateError("Grid height mismatch")
        for row in self.grid:
            if len(row) != self.cols:
                raise MalformedStateError("Grid width mismatch")
            for value in row:
                if value not in VALID_CELL_VALUES:
                    raise MalformedStateError(f"Invalid cell value: {value!r}")
        return self


class PlayerDoc(_DocModel):
    id: int
    budget: Count
    arsenal: dict[str, Count] = Field(default_factory=dict)


class DraftStateDoc(_DocModel):
    player1_passed: bool = False
    player2_passed: bool = False
    consecutive_passes: int = Field(default=0, ge=0, le=2)


class ScoringEventDoc(_DocModel):
    turn: int
    player: int
    move_id: str
    pattern: str
    points: int
    cells: list[CellPair]
    pattern_type: PatternKind
    timestamp: int


class HighlightDoc(_DocModel):
    pattern_id: str
    kind: PatternKind
    player_id: int
    points: int
    cells: list[CellPair]
    expires_at: int


class ScoringDoc(_DocModel):
    player1_score: int
    player2_score: int
    scoring_history: list[ScoringEventDoc]
    last_scoring_move: Optional[str] = None
    highlighted_pattern: Optional[HighlightDoc] = None


class TransformDoc(_DocModel):
    # no coercion: "0", 90.0, 1 and "false" are all rejected
    rotation: StrictInt
    flip_x: StrictBool


class MoveDoc(_DocModel):
    player: int
    piece_id: str
    transform: TransformDoc
    anchor: CellPair
    abs_cells: list[CellPair]


class SaveDocumentModel(_DocModel):
    """Shape of a current-version document. Required: version, phase, board, players, stock, currentPlayer."""

    version: str
    phase: Phase
    board: BoardDoc
    players: dict[str, PlayerDoc]
    stock: dict[str, int]
    current_player: int
    draft_state: DraftStateDoc = Field(default_factory=DraftStateDoc)
    scoring: ScoringDoc
    history: list[MoveDoc] = Field(default_factory=list)
    winner: Optional[int] = None
    end_reason: Optional[str] = None
    config: Optional[dict[str, Any]] = None

    @field_validator("current_player")
    @classmethod
    def validate_current_player(cls, value: int) -> int:
        if value not in PLAYER_IDS:
            raise MalformedStateError(f"Invalid current player: {value!r}")
        return value

    @field_validator("winner")
    @classmethod
    def validate_winner(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value not in PLAYER_IDS:
            raise MalformedStateError(f"Invalid winner: {value!r}")
        return value

    @field_validator("players")
    @classmethod
    def validate_players(cls, value: dict[str, PlayerDoc]) -> dict[str, PlayerDoc]:
        for player_id in PLAYER_IDS:
            player = value.get(str(player_id))
            if player is None or player.id != player_id:
                raise MalformedStateError(f"Invalid player data for player {player_id}")
        return value

    @field_validator("stock")
    @classmethod
    def validate_stock(cls, value: dict[str, int]) -> dict[str, int]:
        for piece_id, count in value.items():
            if count < 0 and count != UNLIMITED:
                raise MalformedStateError(f"Invalid stock count for {piece_id}: {count}")
        return value


def _check_piece_ids(model: SaveDocumentModel, catalog: PieceCatalog) -> None:
    referenced = set(model.stock)
    for player in model.players.values():
        referenced.update(player.arsenal)
    unknown = sorted(piece_id for piece_id in referenced if not catalog.has(piece_id))
    if unknown:
        raise MalformedStateError(f"Unknown pieces in save document: {', '.join(unknown)}")


# --- GAME STATE -> DOCUMENT ---
def _cells(cells: tuple[tuple[int, int], ...]) -> list[list[int]]:
    return [list(cell) for cell in cells]


def to_document(state: GameState) -> SaveDocument:
    """Plain dict, ready for `json.dumps`. Captures the whole state."""
    highlighted = state.scoring.highlighted
    return {
        "version": state.version,
        "phase": state.phase.value,
        "board": {
            "rows": state.board.rows,
            "cols": state.board.cols,
            "grid": state.board.to_rows(),
        },
        "players": {
            str(pid): {
                "id": player.id,
                "budget": player.budget,
                "arsenal": dict(player.arsenal),
            }
            for pid, player in sorted(state.players.items())
        },
        "stock": dict(state.stock),
        "currentPlayer": state.current_player,
        "draftState": {
            "player1Passed": state.draft.player1_passed,
            "player2Passed": state.draft.player2_passed,
            "consecutivePasses": state.draft.consecutive_passes,
        },
        "scoring": {
            "player1Score": state.scoring.player1_score,
            "player2Score": state.scoring.player2_score,
            "scoringHistory": [
                {
                    "turn": event.turn_number,
                    "player": event.player,
                    "moveId": event.move_id,
                    "pattern": event.pattern_id,
                    "points": event.points,
                    "cells": _cells(event.cells),
                    "patternType": event.kind.value,
                    "timestamp": event.timestamp,
                }
                for event in state.scoring.history
            ],
            "lastScoringMove": state.scoring.last_scoring_move,
            "highlightedPattern": None
            if highlighted is None
            else {
                "patternId": highlighted.pattern_id,
                "kind": highlighted.kind.value,
                "playerId": highlighted.player,
                "points": highlighted.points,
                "cells": _cells(highlighted.cells),
                "expiresAt": highlighted.expires_at,
            },
        },
        "endCondition": dict(END_CONDITION),
        "history": [move.to_dict() for move in state.history],
        "winner": state.winner,
        "endReason": state.end_reason,
        "config": state.config.model_dump(mode="json", by_alias=True),
    }


# --- DOCUMENT -> GAME STATE ---
def _to_cells(pairs: list[CellPair]) -> tuple[tuple[int, int], ...]:
    return tuple((x, y) for x, y in pairs)


def _build_state(model: SaveDocumentModel) -> GameState:
    board = Board.from_rows(model.board.grid)
    if model.config is None:
        config = GameConfig(board_rows=board.rows, board_cols=board.cols)
    else:
        config = GameConfig.model_validate(model.config)

    players = {
        pid: PlayerState(
            id=pid,
            budget=model.players[str(pid)].budget,
            arsenal={
                piece_id: count
                for piece_id, count in model.players[str(pid)].arsenal.items()
                if count > 0
            },
        )
        for pid in PLAYER_IDS
    }

    scoring_doc = model.scoring
    highlight_doc = scoring_doc.highlighted_pattern
    scoring = ScoringState(
        player1_score=scoring_doc.player1_score,
        player2_score=scoring_doc.player2_score,
        history=tuple(
            ScoringEvent(
                turn_number=event.turn,
                player=event.player,
                move_id=event.move_id,
                pattern_id=event.pattern,
                kind=event.pattern_type,
                points=event.points,
                cells=_to_cells(event.cells),
                timestamp=event.timestamp,
            )
            for event in scoring_doc.scoring_history
        ),
        last_scoring_move=scoring_doc.last_scoring_move,
        highlighted=None
        if highlight_doc is None
        else HighlightedPattern(
            pattern_id=highlight_doc.pattern_id,
            kind=highlight_doc.kind,
            player=highlight_doc.player_id,
            points=highlight_doc.points,
            cells=_to_cells(highlight_doc.cells),
            expires_at=highlight_doc.expires_at,
        ),
    )

    history = tuple(
        Move.from_dict(move.model_dump(by_alias=True)) for move in model.history
    )

    return GameState(
        version=CURRENT_VERSION,
        phase=model.phase,
        board=board,
        players=players,
        stock=dict(model.stock),
        current_player=model.current_player,
        config=config,
        draft=DraftState(
            player1_passed=model.draft_state.player1_passed,
            player2_passed=model.draft_state.player2_passed,
            consecutive_passes=model.draft_state.consecutive_passes,
        ),
        scoring=scoring,
        history=history,
        winner=model.winner,
        end_reason=model.end_reason,
    )


def from_document(document: SaveDocument, catalog: PieceCatalog = STANDARD_CATALOG) -> GameState:
    """Migrate, validate, build. Raises MalformedStateError on anything it cannot accept."""
    migrated = migrate(document)
    try:
        model = SaveDocumentModel.model_validate(migrated)
        _check_piece_ids(model, catalog)
        return _build_state(model)
    except ValidationError as e:
        raise MalformedStateError(f"Invalid save document: {e}") from e
    except MalformedStateError:
        raise
    except GameError as e:
        # bad config values or transforms inside an otherwise well-formed document
        raise MalformedStateError(f"Invalid save document: {e}") from e


def dumps(state: GameState) -> str:
    return json.dumps(to_document(state))


def loads(text: str, catalog: PieceCatalog = STANDARD_CATALOG) -> GameState:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedStateError(f"Save data is not valid JSON: {e}") from e
    return from_document(document, catalog)
