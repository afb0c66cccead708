"""Move legality checks.

Every function here is pure: it inspects cards and piles and never
mutates them. The ``*_rejection`` helpers return the reason a move is
illegal (or ``None``); the ``can_*`` predicates are thin wrappers.
"""

from __future__ import annotations

from typing import Optional, Sequence

from klondike.common import ACE, Card
from klondike.errors import RejectReason
from klondike.piles import FoundationPile, TableauPile


def can_stack(upper: Card, lower: Card) -> bool:
    """True if ``upper`` may sit directly on ``lower`` in a tableau run."""
    return upper.is_red != lower.is_red and upper.rank == lower.rank - 1


def run_rejection(cards: Sequence[Card]) -> Optional[RejectReason]:
    if not cards:
        return RejectReason.EMPTY_SELECTION
    for lower, upper in zip(cards, cards[1:]):
        if not can_stack(upper, lower):
            return RejectReason.BROKEN_RUN
    return None


def is_valid_run(cards: Sequence[Card]) -> bool:
    return run_rejection(cards) is None


def foundation_rejection(cards: Sequence[Card], foundation: FoundationPile) -> Optional[RejectReason]:
    if not cards:
        return RejectReason.EMPTY_SELECTION
    if len(cards) != 1:
        return RejectReason.MULTI_CARD_TO_FOUNDATION
    card = cards[0]
    top = foundation.peek()
    if top is None:
        return None if card.rank == ACE else RejectReason.WRONG_RANK
    if card.suit != top.suit:
        return RejectReason.WRONG_SUIT
    if card.rank != top.rank + 1:
        return RejectReason.WRONG_RANK
    return None


def can_move_to_foundation(card: Card, foundation: FoundationPile) -> bool:
    return foundation_rejection([card], foundation) is None


def tableau_rejection(cards: Sequence[Card], tableau: TableauPile) -> Optional[RejectReason]:
    reason = run_rejection(cards)
    if reason is not None:
        return reason
    top = tableau.peek()
    if top is None:
        # Any card may start an empty column, not just a King.
        return None
    if not top.face_up:
        return RejectReason.TARGET_FACE_DOWN
    first = cards[0]
    if first.is_red == top.is_red:
        return RejectReason.WRONG_COLOR
    if first.rank != top.rank - 1:
        return RejectReason.WRONG_RANK
    return None


def can_move_to_tableau(cards: Sequence[Card], tableau: TableauPile) -> bool:
    return tableau_rejection(cards, tableau) is None
