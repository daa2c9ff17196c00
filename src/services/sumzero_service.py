"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    DraftBuyRequest,
    DraftPassRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    LoadGameRequest,
    MoveResponse,
    PlaceMoveRequest,
    SaveResponse,
)
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.repository import GameRepository
from src.sumzero.game import SumZeroGame
from src.sumzero.geometry import Transform
from src.sumzero.moves import Move
from src.sumzero.state import PLAYER_IDS, GameState

logger = logging.getLogger(__name__)


class SumZeroService:
    """Orchestration of layers for a SumZero game."""

    def __init__(self, repository: GameRepository, game: SumZeroGame | None = None) -> None:
        self.repo = repository
        self.game = game or SumZeroGame()

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Set up a new game: board, budgets and stock. The draft starts right away."""
        state = self.game.new_game(request.to_config())
        stored_game, game_id = self.repo.create_game(self._to_model(state))
        logger.info("Created game %s", game_id)
        return self._create_game_response(game_id, self._to_state(stored_game))

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        state = self._fetch_state(request.game_id)
        return self._create_game_response(request.game_id, state)

    def draft_buy(self, request: DraftBuyRequest) -> GameResponse:
        state = self._fetch_state(request.game_id)
        after_buy = self.game.draft_buy(state, request.player_id, request.piece_id)
        return self._store(request.game_id, after_buy)

    def draft_pass(self, request: DraftPassRequest) -> GameResponse:
        state = self._fetch_state(request.game_id)
        after_pass = self.game.draft_pass(state, request.player_id)
        return self._store(request.game_id, after_pass)

    def place_piece(self, request: PlaceMoveRequest) -> GameResponse:
        """Make a move attempt."""
        state = self._fetch_state(request.game_id)
        move = self.game.create_move(
            request.player_id,
            request.piece_id,
            Transform(request.rotation, request.flip_x),
            (request.anchor_x, request.anchor_y),
        )
        after_move = self.game.place_piece(state, move)
        return self._store(request.game_id, after_move)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """retrieve (up to `limit`) legal moves of a player."""
        state = self._fetch_state(request.game_id)
        moves = self.game.enumerate_legal_moves(state, request.player_id, request.limit)
        return LegalMovesResponse(
            game_id=request.game_id,
            player_id=request.player_id,
            legal_moves=[self._create_move_response(move) for move in moves],
        )

    def save_game(self, request: GetGameRequest) -> SaveResponse:
        """Export the save document of a game."""
        state = self._fetch_state(request.game_id)
        return SaveResponse(game_id=request.game_id, document=self.game.save(state))

    def load_game(self, request: LoadGameRequest) -> GameResponse:
        """Import a save document (older versions are migrated) and store it as a new game."""
        state = self.game.load(request.document)
        stored_game, game_id = self.repo.create_game(self._to_model(state))
        logger.info("Loaded game %s from a version %s document", game_id, request.document.get("version"))
        return self._create_game_response(game_id, self._to_state(stored_game))

    def restart_game(self, request: GetGameRequest) -> GameResponse:
        """Start over with the same configuration, keeping the game ID."""
        state = self._fetch_state(request.game_id)
        return self._store(request.game_id, self.game.restart(state))

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")

    # -- Internal helpers --
    def _store(self, game_id: UUID, state: GameState) -> GameResponse:
        updated = self.repo.update_game(game_id, self._to_model(state))
        if updated is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return self._create_game_response(game_id, state)

    def _to_model(self, state: GameState) -> GameModel:
        return GameModel(
            document=self.game.save(state),
            phase=state.phase.value,
            winner=state.winner,
        )

    def _to_state(self, model: GameModel) -> GameState:
        return self.game.load(model.document)

    def _create_game_response(self, game_id: UUID, state: GameState) -> GameResponse:
        """Convert a GameState to a GameResponse (for game with given ID.)"""
        status = self.game.status(state)
        return GameResponse(
            game_id=game_id,
            phase=status.phase,
            current_player=status.current_player,
            turn_number=status.turn_number,
            scores=status.scores,
            winner=status.winner,
            end_reason=status.end_reason,
            is_game_over=status.is_game_over,
            board=state.board.to_rows(),
            budgets={pid: state.player(pid).budget for pid in PLAYER_IDS},
            arsenals={pid: dict(state.player(pid).arsenal) for pid in PLAYER_IDS},
            stock=dict(state.stock),
        )

    def _create_move_response(self, move: Move) -> MoveResponse:
        anchor_x, anchor_y = move.anchor
        return MoveResponse(
            player_id=move.player,
            piece_id=move.piece_id,
            rotation=move.transform.rotation,
            flip_x=move.transform.flip_x,
            anchor_x=anchor_x,
            anchor_y=anchor_y,
            cells=list(move.cells),
        )

    def _fetch_state(self, game_id: UUID) -> GameState:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return self._to_state(game_model)
