"""Undo history built from value snapshots of the table."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Tuple

from klondike.common import Card
from klondike.piles import Table

MAX_UNDO = 20

# (suit, rank, face_up)
CardValue = Tuple[int, int, bool]


@dataclass(frozen=True)
class GameStateSnapshot:
    """An independent copy of all thirteen piles and the score.

    Piles are stored as flat tuples of card values, in ``Table.ordered()``
    order, so a snapshot never shares card objects with the live table.
    """

    piles: Tuple[Tuple[CardValue, ...], ...]
    score: int

    @classmethod
    def capture(cls, table: Table, score: int) -> "GameStateSnapshot":
        return cls(
            piles=tuple(
                tuple((c.suit, c.rank, c.face_up) for c in pile.cards)
                for _, pile in table.ordered()
            ),
            score=score,
        )

    def restore_into(self, table: Table) -> int:
        """Rebuild the table from this snapshot and return the stored score."""
        for (_, pile), values in zip(table.ordered(), self.piles):
            pile.load([Card(s, r, up) for s, r, up in values])
        return self.score


class UndoManager:
    """
    Bounded history of snapshots. After each mutating action the engine
    pushes the state from before it; the oldest entry falls off at the limit.
    """

    def __init__(self, limit: int = MAX_UNDO):
        self._stack: Deque[GameStateSnapshot] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._stack.maxlen

    def push(self, snapshot: GameStateSnapshot):
        self._stack.append(snapshot)

    def pop(self) -> Optional[GameStateSnapshot]:
        if self._stack:
            return self._stack.pop()
        return None

    def can_undo(self) -> bool:
        return len(self._stack) > 0

    def clear(self):
        self._stack.clear()

    def __len__(self):
        return len(self._stack)
