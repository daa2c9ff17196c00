"""
Exceptions shared across layers.

Every rules violation is reported as a subclass of GameError so the Service/API layers can catch one type.
The engine raises these synchronously and never modifies the state it was given.
"""


class GameError(Exception):
    """Base class for anything the game (or the layers around it) rejects."""


class GameStateError(GameError):
    """The action does not fit the current state of the game."""


class WrongPhaseError(GameStateError):
    """Action attempted in a phase that does not accept it (ex. placing a piece during the draft)."""


class NotYourTurnError(GameStateError):
    """Action attempted by the player who is not the current player."""


class InvalidTransformError(GameError):
    """Rotation not in {0, 90, 180, 270} or flip not a boolean."""


class UnknownPieceError(GameError):
    """Piece id not in the catalog."""


class InvalidPurchaseError(GameError):
    """Buy attempted out of turn, over budget, or against depleted stock."""


class InvalidMoveError(GameError):
    """Placement fails ownership, legality or cell-consistency checks."""


class OccupiedOrOutOfBoundsError(InvalidMoveError):
    """Final guard of the board: a target cell is outside, unusable or already taken."""


class MalformedStateError(GameError):
    """A saved document could not be migrated or failed validation."""


class InvalidConfigError(GameError):
    """Game configuration that cannot produce a game."""


class InvalidRequestError(GameError):
    """Request payload rejected by the API models."""


class RepositoryError(GameError):
    """Persistence layer could not find or store a game."""
