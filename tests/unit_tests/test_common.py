import random

import pytest

from klondike.common import CLUBS, DIAMONDS, HEARTS, SPADES, Card, Deck
from klondike.errors import EmptyDeckError


def test_deck_holds_52_unique_cards_in_canonical_order():
    deck = Deck()
    assert len(deck) == 52
    assert len({c.key() for c in deck.cards}) == 52
    assert deck.cards[0].key() == (SPADES, 1)
    assert deck.cards[12].key() == (SPADES, 13)
    assert deck.cards[-1].key() == (CLUBS, 13)
    assert all(not c.face_up for c in deck.cards)


def test_shuffle_is_a_permutation():
    deck = Deck()
    deck.shuffle(random.Random(7))
    assert sorted(c.key() for c in deck.cards) == sorted(c.key() for c in Deck().cards)
    assert [c.key() for c in deck.cards] != [c.key() for c in Deck().cards]


def test_deal_until_exhausted_then_raises():
    deck = Deck()
    last = deck.cards[-1]
    assert deck.deal() is last
    for _ in range(51):
        deck.deal()
    assert deck.is_empty()
    with pytest.raises(EmptyDeckError):
        deck.deal()


@pytest.mark.parametrize(
    "suit, red",
    [(SPADES, False), (HEARTS, True), (DIAMONDS, True), (CLUBS, False)],
)
def test_card_color(suit, red):
    c = Card(suit, 5)
    assert c.is_red is red
    assert c.color() == ("red" if red else "black")


def test_card_identity_ignores_face_state():
    assert Card(HEARTS, 7, True) == Card(HEARTS, 7, False)
    assert hash(Card(HEARTS, 7, True)) == hash(Card(HEARTS, 7, False))
    assert Card(HEARTS, 7) != Card(DIAMONDS, 7)


def test_card_suit_and_rank_are_read_only():
    c = Card(SPADES, 1)
    with pytest.raises(AttributeError):
        c.rank = 2
    with pytest.raises(AttributeError):
        c.suit = HEARTS
    c.face_up = True
    assert c.face_up


def test_card_text():
    assert str(Card(HEARTS, 10)) == "10♥"
    assert str(Card(SPADES, 1)) == "A♠"
    assert repr(Card(CLUBS, 13, True)) == "K♣↑"


@pytest.mark.parametrize("suit, rank", [(4, 1), (-1, 1), (0, 0), (0, 14)])
def test_card_rejects_out_of_range_values(suit, rank):
    with pytest.raises(ValueError):
        Card(suit, rank)
