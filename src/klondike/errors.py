"""Error types for the Klondike engine.

Illegal moves are expected and frequent, so they are reported as
:class:`RejectReason` values inside move results instead of exceptions.
Exceptions are reserved for misuse (dealing from an empty deck) and for
internal corruption of the card model.
"""

from __future__ import annotations

from enum import Enum


class EmptyDeckError(Exception):
    """Raised when dealing from a deck that has no cards left."""


class InvariantError(AssertionError):
    """The 52-card model is corrupted (duplicate or missing cards)."""


class RejectReason(Enum):
    WRONG_RANK = "wrong_rank"
    WRONG_COLOR = "wrong_color"
    WRONG_SUIT = "wrong_suit"
    MULTI_CARD_TO_FOUNDATION = "multi_card_to_foundation"
    TARGET_FACE_DOWN = "target_face_down"
    EMPTY_SELECTION = "empty_selection"
    BROKEN_RUN = "broken_run"
    FACE_DOWN_CARD = "face_down_card"
    NOT_TOP_CARD = "not_top_card"
    SAME_PILE = "same_pile"
    INVALID_SOURCE = "invalid_source"
    INVALID_TARGET = "invalid_target"
    GAME_NOT_IN_PROGRESS = "game_not_in_progress"

    def __str__(self) -> str:
        return self.value.replace("_", " ")
