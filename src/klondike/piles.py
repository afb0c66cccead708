"""Pile containers for the Klondike table.

Cards are stored bottom-to-top, so ``cards[-1]`` is always the top card.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from klondike.common import Card

STOCK_KIND = "stock"
WASTE_KIND = "waste"
FOUNDATION_KIND = "foundation"
TABLEAU_KIND = "tableau"

FOUNDATION_COUNT = 4
TABLEAU_COUNT = 7
DRAW_COUNT = 3


@dataclass(frozen=True)
class PileId:
    """Address of a pile on the table, e.g. ``PileId("tableau", 3)``."""

    kind: str
    index: int = 0

    def __str__(self) -> str:
        if self.kind in (FOUNDATION_KIND, TABLEAU_KIND):
            return f"{self.kind} {self.index + 1}"
        return self.kind


STOCK = PileId(STOCK_KIND)
WASTE = PileId(WASTE_KIND)


def foundation(index: int) -> PileId:
    if not 0 <= index < FOUNDATION_COUNT:
        raise ValueError(f"foundation index out of range: {index}")
    return PileId(FOUNDATION_KIND, index)


def tableau(index: int) -> PileId:
    if not 0 <= index < TABLEAU_COUNT:
        raise ValueError(f"tableau index out of range: {index}")
    return PileId(TABLEAU_KIND, index)


class Pile:
    kind = ""

    def __init__(self, cards: Optional[Sequence[Card]] = None):
        self.cards: List[Card] = list(cards or [])

    def push(self, card: Card):
        self.cards.append(card)

    def extend(self, cards: Sequence[Card]):
        for c in cards:
            self.push(c)

    def pop(self) -> Card:
        return self.cards.pop()

    def peek(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    def take_from(self, index: int) -> List[Card]:
        """Remove and return ``cards[index:]``."""
        taken = self.cards[index:]
        del self.cards[index:]
        return taken

    def load(self, cards: Sequence[Card]):
        """Replace the contents verbatim, keeping each card's face state."""
        self.cards = list(cards)

    def clear(self):
        self.cards = []

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self):
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __repr__(self):
        return f"{type(self).__name__}({self.cards!r})"


class StockPile(Pile):
    kind = STOCK_KIND

    def push(self, card: Card):
        card.face_up = False
        self.cards.append(card)

    def draw(self, count: int = DRAW_COUNT) -> List[Card]:
        """Pop up to ``count`` cards, first popped first in the result."""
        drawn = []
        for _ in range(min(count, len(self.cards))):
            drawn.append(self.cards.pop())
        return drawn


class WastePile(Pile):
    kind = WASTE_KIND

    def push(self, card: Card):
        card.face_up = True
        self.cards.append(card)

    def receive(self, cards: Sequence[Card]):
        # last drawn card ends up on top
        self.extend(cards)

    def drain(self) -> List[Card]:
        """Empty the pile, returning its cards bottom to top."""
        drained = self.cards
        self.cards = []
        return drained


class FoundationPile(Pile):
    kind = FOUNDATION_KIND

    def __init__(self, cards: Optional[Sequence[Card]] = None):
        super().__init__(cards)
        # Suit is fixed by the first card placed, not at construction.
        self.suit: Optional[int] = self.cards[0].suit if self.cards else None

    def push(self, card: Card):
        if not self.cards:
            self.suit = card.suit
        card.face_up = True
        self.cards.append(card)

    def pop(self) -> Card:
        card = self.cards.pop()
        if not self.cards:
            self.suit = None
        return card

    def take_from(self, index: int) -> List[Card]:
        taken = super().take_from(index)
        if not self.cards:
            self.suit = None
        return taken

    def load(self, cards: Sequence[Card]):
        super().load(cards)
        self.suit = self.cards[0].suit if self.cards else None

    def clear(self):
        super().clear()
        self.suit = None

    def is_complete(self) -> bool:
        return len(self.cards) == 13


class TableauPile(Pile):
    kind = TABLEAU_KIND

    def movable_run(self, index: int) -> Optional[List[Card]]:
        """Return the run from ``index`` to the top, or None if any card in it is face-down."""
        if not 0 <= index < len(self.cards):
            return None
        run = self.cards[index:]
        if any(not c.face_up for c in run):
            return None
        return run

    def face_up_start(self) -> int:
        """Index of the lowest card of the face-up suffix (len(cards) if none)."""
        i = len(self.cards)
        while i > 0 and self.cards[i - 1].face_up:
            i -= 1
        return i

    def flip_top(self) -> bool:
        top = self.peek()
        if top is not None and not top.face_up:
            top.face_up = True
            return True
        return False


class Table:
    """The thirteen piles of a Klondike layout."""

    def __init__(self):
        self.stock = StockPile()
        self.waste = WastePile()
        self.foundations = [FoundationPile() for _ in range(FOUNDATION_COUNT)]
        self.tableau = [TableauPile() for _ in range(TABLEAU_COUNT)]

    def get(self, pile_id: PileId) -> Pile:
        if pile_id.kind == STOCK_KIND:
            return self.stock
        if pile_id.kind == WASTE_KIND:
            return self.waste
        if pile_id.kind == FOUNDATION_KIND:
            return self.foundations[pile_id.index]
        if pile_id.kind == TABLEAU_KIND:
            return self.tableau[pile_id.index]
        raise KeyError(pile_id)

    def ordered(self) -> List[Tuple[PileId, Pile]]:
        """All piles in snapshot order: stock, waste, foundations, tableau."""
        out: List[Tuple[PileId, Pile]] = [(STOCK, self.stock), (WASTE, self.waste)]
        out.extend((foundation(i), f) for i, f in enumerate(self.foundations))
        out.extend((tableau(i), t) for i, t in enumerate(self.tableau))
        return out

    def all_cards(self) -> List[Card]:
        return [c for _, p in self.ordered() for c in p.cards]

    def clear(self):
        for _, p in self.ordered():
            p.clear()
