"""
A placement move: which piece, which orientation, where.

Legality is checked later by the placement engine.
"""

from dataclasses import dataclass
from typing import Any, Self

from src.sumzero.geometry import (
    Cell,
    Cells,
    Transform,
    apply_transform,
    compute_absolute_cells,
)
from src.sumzero.pieces import PieceCatalog, PieceId


@dataclass(frozen=True)
class Move:
    """
    basic definition of a move to be made
    ---

    `cells` are the absolute board cells. They must equal transform(piece) translated by `anchor`,
    which the placement engine re-checks with `derive_cells` every time the move is used.
    """

    player: int
    piece_id: PieceId
    transform: Transform
    anchor: Cell
    cells: Cells

    def derive_cells(self, catalog: PieceCatalog) -> Cells:
        """What `cells` should be. Raises UnknownPieceError for pieces missing from the catalog."""
        shape = catalog.get(self.piece_id)
        return compute_absolute_cells(apply_transform(shape.cells, self.transform), self.anchor)

    def to_dict(self) -> dict[str, Any]:
        """Save document encoding (camelCase keys, cells as [x, y] pairs)."""
        return {
            "player": self.player,
            "pieceId": self.piece_id,
            "transform": {
                "rotation": self.transform.rotation,
                "flipX": self.transform.flip_x,
            },
            "anchor": list(self.anchor),
            "absCells": [list(cell) for cell in self.cells],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        transform = data["transform"]
        return cls(
            player=data["player"],
            piece_id=data["pieceId"],
            transform=Transform(transform["rotation"], transform["flipX"]),
            anchor=(data["anchor"][0], data["anchor"][1]),
            cells=tuple((x, y) for x, y in data["absCells"]),
        )
