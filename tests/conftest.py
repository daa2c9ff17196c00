"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator, Optional, Sequence

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.shared_types import Phase
from src.db.schema import Base
from src.sumzero.board import Board
from src.sumzero.game import SumZeroGame
from src.sumzero.pieces import STANDARD_CATALOG, PieceCatalog
from src.sumzero.state import GameConfig, GameState, PlayerState

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

FIXED_TIME_MS = 1_700_000_000_000


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def db_session_shared() -> Generator[Session, None, None]:
    """Connection to a test database. Mock real setup with multiple sessions connecting to the same engine / database tables."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- GAME FIXTURES ---
@pytest.fixture
def catalog() -> PieceCatalog:
    return STANDARD_CATALOG


@pytest.fixture
def game() -> SumZeroGame:
    """Game with a frozen clock: runs are fully reproducible."""
    return SumZeroGame(clock=lambda: FIXED_TIME_MS)


@pytest.fixture
def make_state() -> Callable[..., GameState]:
    """
    Call the inner function to build a state directly (no draft needed).

    Rows use the cell encoding of the board: 0 empty, 1 / 2 players, -1 unusable.
    """

    def _make_state(
        rows: Sequence[Sequence[int]],
        arsenal_1: Optional[dict[str, int]] = None,
        arsenal_2: Optional[dict[str, int]] = None,
        phase: Phase = Phase.PLACEMENT,
        current_player: int = 1,
        budget: int = 0,
    ) -> GameState:
        board = Board.from_rows(rows)
        state = GameState(
            phase=phase,
            board=board,
            players={
                1: PlayerState(1, budget, dict(arsenal_1 or {})),
                2: PlayerState(2, budget, dict(arsenal_2 or {})),
            },
            stock={},
            current_player=current_player,
            config=GameConfig(board_rows=board.rows, board_cols=board.cols),
        )
        return state

    return _make_state

