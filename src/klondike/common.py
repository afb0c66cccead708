# common.py - cards and the deck shared by the rules engine and the UI
import random
from typing import List, Optional

from klondike.errors import EmptyDeckError

SPADES, HEARTS, DIAMONDS, CLUBS = 0, 1, 2, 3
SUITS = ["♠", "♥", "♦", "♣"]  # 0..3

ACE, KING = 1, 13
RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)


def is_red(suit):
    return suit in (HEARTS, DIAMONDS)


class Card:
    """A playing card. Suit and rank never change; only the face flag does."""

    __slots__ = ("_suit", "_rank", "face_up")

    def __init__(self, suit, rank, face_up=False):
        if suit not in (SPADES, HEARTS, DIAMONDS, CLUBS):
            raise ValueError(f"invalid suit: {suit!r}")
        if not ACE <= rank <= KING:
            raise ValueError(f"invalid rank: {rank!r}")
        self._suit = suit
        self._rank = rank
        self.face_up = face_up

    @property
    def suit(self):
        return self._suit

    @property
    def rank(self):
        return self._rank

    @property
    def is_red(self):
        return is_red(self._suit)

    def color(self):
        return "red" if self.is_red else "black"

    def key(self):
        return (self._suit, self._rank)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __str__(self):
        return f"{RANK_TO_TEXT[self._rank]}{SUITS[self._suit]}"

    def __repr__(self):
        return f"{self}{'↑' if self.face_up else '↓'}"


class Deck:
    """The 52 cards of one game, consumed by dealing."""

    def __init__(self):
        self.cards: List[Card] = [Card(suit, rank, False) for suit in range(4) for rank in range(1, 14)]

    def shuffle(self, rng: Optional[random.Random] = None):
        (rng or random).shuffle(self.cards)

    def deal(self) -> Card:
        if not self.cards:
            raise EmptyDeckError("deck is exhausted")
        return self.cards.pop()

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self):
        return len(self.cards)
