"""Klondike solitaire: rules engine plus a small pygame front end."""

from klondike.engine import DrawKind, DrawResult, GameEngine, GameStats, GameStatus, MoveResult
from klondike.errors import EmptyDeckError, InvariantError, RejectReason
from klondike.piles import STOCK, WASTE, PileId, foundation, tableau
from klondike.solver import MoveDescription

__all__ = [
    "DrawKind",
    "DrawResult",
    "EmptyDeckError",
    "GameEngine",
    "GameStats",
    "GameStatus",
    "InvariantError",
    "MoveDescription",
    "MoveResult",
    "PileId",
    "RejectReason",
    "STOCK",
    "WASTE",
    "foundation",
    "tableau",
]
