"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the API layer (higher) and the db layer (lower) send/receive this model to/from the Service.
The game itself travels as its save document, so the db layer never needs to know about boards or pieces.
"""

from dataclasses import dataclass
from typing import Any, Optional

# Type aliases to make GameModel easier to read
SaveDocument = dict[str, Any]


@dataclass
class GameModel:
    """Transport-safe representation of a SumZero game used between API, Service, DB, and Game layers."""

    document: SaveDocument
    phase: str
    winner: Optional[int] = None
