"""Hints, auto-complete helpers and the exhaustive move search used to
detect a stalled game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from klondike import rules as R
from klondike.common import Card
from klondike.piles import (
    FOUNDATION_KIND,
    WASTE,
    PileId,
    Table,
    foundation,
    tableau,
)


@dataclass(frozen=True)
class MoveDescription:
    """A move in user-facing terms."""

    source: PileId
    card_index: int
    target: PileId
    card: Card

    def describe(self) -> str:
        if self.target.kind == FOUNDATION_KIND:
            if self.source == WASTE:
                return f"Move {self.card} from waste to foundation"
            return f"Move {self.card} to foundation"
        return f"Move {self.card} to {self.target}"

    def __str__(self) -> str:
        return self.describe()


def foundation_target(table: Table, card: Card) -> Optional[int]:
    """Index of the first foundation that accepts ``card``."""
    for fi, f in enumerate(table.foundations):
        if R.can_move_to_foundation(card, f):
            return fi
    return None


def foundation_move_from(table: Table, source: PileId) -> Optional[MoveDescription]:
    """Foundation move for the face-up top card of ``source``, if there is one."""
    pile = table.get(source)
    top = pile.peek()
    if top is None or not top.face_up:
        return None
    fi = foundation_target(table, top)
    if fi is None:
        return None
    return MoveDescription(source, len(pile) - 1, foundation(fi), top)


def find_hint(table: Table) -> Optional[MoveDescription]:
    # Foundation-directed moves only; tableau-to-tableau moves are never hinted.
    for ti in range(len(table.tableau)):
        move = foundation_move_from(table, tableau(ti))
        if move is not None:
            return move
    return foundation_move_from(table, WASTE)


def can_auto_complete(table: Table) -> bool:
    if table.stock.cards:
        return False
    return all(c.face_up for t in table.tableau for c in t.cards)


def auto_complete_sources(table: Table) -> List[PileId]:
    """Scan order for one auto-complete pass: tableau tops, then waste."""
    return [tableau(ti) for ti in range(len(table.tableau))] + [WASTE]


def _tableau_targets(table: Table, cards: List[Card], exclude: Optional[int] = None) -> Iterator[int]:
    for ti, t in enumerate(table.tableau):
        if ti == exclude:
            continue
        if R.can_move_to_tableau(cards, t):
            yield ti


def find_any_move(table: Table) -> Optional[MoveDescription]:
    """First legal move found, checking every category before giving up.

    1. waste top to a foundation
    2. waste top to a tableau column
    3. face-up tableau top to a foundation
    4. face-up tableau top to another column
    5. face-up run of two or more cards to another column
    """
    waste_top = table.waste.peek()
    if waste_top is not None:
        move = foundation_move_from(table, WASTE)
        if move is not None:
            return move
        for ti in _tableau_targets(table, [waste_top]):
            return MoveDescription(WASTE, len(table.waste) - 1, tableau(ti), waste_top)

    for ti in range(len(table.tableau)):
        move = foundation_move_from(table, tableau(ti))
        if move is not None:
            return move

    for si, src in enumerate(table.tableau):
        top = src.peek()
        if top is None or not top.face_up:
            continue
        for ti in _tableau_targets(table, [top], exclude=si):
            return MoveDescription(tableau(si), len(src) - 1, tableau(ti), top)

    for si, src in enumerate(table.tableau):
        for k in range(len(src) - 2, src.face_up_start() - 1, -1):
            run = src.cards[k:]
            for ti in _tableau_targets(table, run, exclude=si):
                return MoveDescription(tableau(si), k, tableau(ti), run[0])
    return None


def has_available_move(table: Table) -> bool:
    return find_any_move(table) is not None
