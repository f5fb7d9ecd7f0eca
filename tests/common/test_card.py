import pytest

from chipjack.common.card import Card, Rank, Suit


def test_card_initialization():
    card = Card(Rank.EIGHT, Suit.HEARTS)
    assert card.rank == Rank.EIGHT
    assert card.suit == Suit.HEARTS
    assert card.id


def test_card_repr():
    card = Card(Rank.EIGHT, Suit.HEARTS)
    assert repr(card) == "Card(Rank.EIGHT, Suit.HEARTS)"


def test_card_str():
    assert str(Card(Rank.TEN, Suit.DIAMONDS)) == "10♦"
    assert str(Card(Rank.QUEEN, Suit.SPADES)) == "Q♠"


def test_card_equality_ignores_id():
    first = Card(Rank.ACE, Suit.CLUBS)
    second = Card(Rank.ACE, Suit.CLUBS)
    assert first.id != second.id
    assert first == second
    assert hash(first) == hash(second)


def test_cards_are_immutable():
    card = Card(Rank.TWO, Suit.CLUBS)
    with pytest.raises(AttributeError):
        card.rank = Rank.THREE


def test_invalid_suit():
    with pytest.raises(TypeError):
        Card(Rank.EIGHT, "Z")


def test_invalid_rank():
    with pytest.raises(TypeError):
        Card("8", Suit.HEARTS)


@pytest.mark.parametrize(
    "label,rank,suit",
    [
        ("A♠", Rank.ACE, Suit.SPADES),
        ("10♥", Rank.TEN, Suit.HEARTS),
        ("k♦", Rank.KING, Suit.DIAMONDS),
        (" 7♣ ", Rank.SEVEN, Suit.CLUBS),
    ],
)
def test_parse(label, rank, suit):
    card = Card.parse(label)
    assert card.rank == rank
    assert card.suit == suit


@pytest.mark.parametrize("label", ["", "A", "1♠", "AX", "11♥"])
def test_parse_rejects_bad_labels(label):
    with pytest.raises(ValueError):
        Card.parse(label)


def test_deck_dimensions():
    assert len(Rank) == 13
    assert len(Suit) == 4
    assert [rank for rank in Rank if rank.is_face] == [Rank.JACK, Rank.QUEEN, Rank.KING]
