import itertools

import pytest

from chipjack.blackjack.hand import (
    Score,
    best_value,
    card_values,
    is_blackjack,
    is_bust,
    possible_totals,
)
from chipjack.common.card import Card, Rank, Suit


def hand(*labels):
    return [Card.parse(label) for label in labels]


def test_card_values():
    assert card_values(Rank.ACE) == (1, 11)
    assert card_values(Rank.TWO) == (2,)
    assert card_values(Rank.TEN) == (10,)
    for face in (Rank.JACK, Rank.QUEEN, Rank.KING):
        assert card_values(face) == (10,)


def test_empty_hand():
    assert best_value([]) == Score(0, False)
    assert possible_totals([]) == {0}


def test_soft_seventeen():
    assert best_value(hand("A♠", "6♥")) == Score(17, True)


def test_ace_forced_low():
    assert best_value(hand("A♠", "6♥", "9♦")) == Score(16, False)


def test_bust_reports_minimum_total():
    assert best_value(hand("10♠", "9♥", "5♦")) == Score(24, False)


def test_bust_with_aces_reports_minimum_total():
    # 10 + 10 + A + A: totals 22, 32, 42
    assert best_value(hand("K♠", "Q♥", "A♦", "A♣")) == Score(22, False)


def test_two_aces():
    assert possible_totals(hand("A♠", "A♥")) == {2, 12, 22}
    assert best_value(hand("A♠", "A♥")) == Score(12, True)


def test_two_aces_and_nine_make_soft_21():
    assert best_value(hand("A♠", "A♥", "9♦")) == Score(21, True)


def test_hand_that_only_reaches_hard_total():
    assert best_value(hand("A♠", "5♥", "A♦", "K♣")) == Score(17, False)


def test_natural():
    cards = hand("A♠", "K♥")
    assert best_value(cards) == Score(21, True)
    assert is_blackjack(cards)


def test_three_card_21_is_not_blackjack():
    cards = hand("7♠", "7♥", "7♦")
    assert best_value(cards).value == 21
    assert not is_blackjack(cards)


def test_two_card_non_21_is_not_blackjack():
    assert not is_blackjack(hand("10♠", "9♥"))


def test_is_bust():
    assert is_bust(hand("10♠", "9♥", "5♦"))
    assert not is_bust(hand("10♠", "A♥", "K♦"))
    assert Score(22).is_bust
    assert not Score(21).is_bust


NON_ACES = [rank for rank in Rank if rank is not Rank.ACE]


@pytest.mark.parametrize("size", [1, 2, 3])
def test_hands_without_aces_score_their_plain_sum(size):
    for ranks in itertools.product(NON_ACES, repeat=size):
        cards = [Card(rank, Suit.SPADES) for rank in ranks]
        expected = sum(card_values(rank)[0] for rank in ranks)
        assert best_value(cards) == Score(expected, False)


def test_order_does_not_change_score():
    cards = hand("A♠", "4♥", "A♦", "3♣")
    for ordering in itertools.permutations(cards):
        assert best_value(list(ordering)) == Score(19, True)


def test_best_value_is_pure():
    cards = tuple(hand("A♠", "6♥", "A♦"))
    assert best_value(cards) == best_value(cards)
    assert best_value(cards) == Score(18, True)


def test_soft_flag_matches_ace_counted_high():
    # Every hand of up to three cards: soft iff some ace is counted as 11.
    for ranks in itertools.product(list(Rank), repeat=3):
        cards = [Card(rank, Suit.HEARTS) for rank in ranks]
        score = best_value(cards)
        hard_total = sum(card_values(rank)[0] for rank in ranks)
        if score.value > 21:
            assert not score.is_soft
        else:
            assert score.is_soft == (score.value == hard_total + 10)
