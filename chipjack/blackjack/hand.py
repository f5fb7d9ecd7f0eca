"""
Hand evaluation for blackjack.

A hand is any ordered sequence of cards. Its score is derived on demand and
never cached, so a `Score` is only meaningful for the exact cards it was
computed from.
"""

from dataclasses import dataclass
from typing import Sequence, Set, Tuple

from chipjack.common.card import Card, Rank

BLACKJACK = 21
SOFT_ACE_BONUS = 10


@dataclass(frozen=True)
class Score:
    """The best attainable total of a hand and whether it counts an ace as 11."""

    value: int
    is_soft: bool = False

    @property
    def is_bust(self) -> bool:
        return self.value > BLACKJACK


def card_values(rank: Rank) -> Tuple[int, ...]:
    """
    Return every value a card of the given rank may count as.

    >>> card_values(Rank.ACE)
    (1, 11)
    >>> card_values(Rank.KING)
    (10,)
    """
    if rank is Rank.ACE:
        return (1, 11)
    if rank.is_face:
        return (10,)
    return (int(rank.value),)


def possible_totals(cards: Sequence[Card]) -> Set[int]:
    """
    Expand the set of totals reachable by choosing each card's value independently.

    The set starts as ``{0}`` and is crossed with each card's values in turn,
    so a hand with n aces holds at most n + 1 distinct totals.
    """
    totals = {0}
    for card in cards:
        totals = {total + value for total in totals for value in card_values(card.rank)}
    return totals


def best_value(cards: Sequence[Card]) -> Score:
    """
    Compute the best score of a hand.

    The value is the highest total not over 21. The hand is soft when that
    total counts an ace as 11, i.e. when the same cards can also reach the
    total minus 10. If every total is over 21, the lowest one is reported and
    the hand is never soft.

    Args:
        cards: The cards in the hand, in any order.

    Returns:
        The hand's Score. An empty hand scores 0 and is not soft.
    """
    totals = possible_totals(cards)
    under = [total for total in totals if total <= BLACKJACK]
    if under:
        best = max(under)
        return Score(best, (best - SOFT_ACE_BONUS) in totals)
    return Score(min(totals), False)


def is_bust(cards: Sequence[Card]) -> bool:
    """Check if the hand's best value is over 21."""
    return best_value(cards).is_bust


def is_blackjack(cards: Sequence[Card]) -> bool:
    """Check if the hand is a natural: exactly two cards worth 21."""
    return len(cards) == 2 and best_value(cards).value == BLACKJACK
