"""
Card sources.

A card source is any zero-argument callable returning a `Card`. The table
draws from an infinite deck: every draw is independent and uniform over the
13 ranks x 4 suits, so there is no shoe to deplete or reshuffle.

>>> deck = StackedDeck([Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.HEARTS)])
>>> deck.draw()
Card(Rank.ACE, Suit.SPADES)
>>> deck.remaining
1
"""

import random
from typing import Callable, Iterable, List, Optional

from chipjack.common.card import Card, Rank, Suit

CardSource = Callable[[], Card]

RANKS: List[Rank] = list(Rank)
SUITS: List[Suit] = list(Suit)


class DeckExhaustedError(Exception):
    """Raised when a stacked deck has no cards left to draw."""


def draw_random_card(rng: Optional[random.Random] = None) -> Card:
    """
    Draw one card uniformly at random, with replacement.

    :param rng: Optional random generator; the module-level generator is used if omitted.
    :return: A freshly created card.
    """
    rng = rng or random
    return Card(rng.choice(RANKS), rng.choice(SUITS))


class InfiniteDeck:
    """
    A seedable infinite deck.

    >>> first = InfiniteDeck(seed=7).draw()
    >>> first == InfiniteDeck(seed=7).draw()
    True
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)
        self.drawn = 0

    def draw(self) -> Card:
        """Draw a single card."""
        self.drawn += 1
        return draw_random_card(self.rng)

    __call__ = draw


class StackedDeck:
    """
    A deterministic card source that deals a fixed sequence in order.

    Used to replay rounds and to drive tests. Unlike the infinite deck it can
    run dry, in which case `DeckExhaustedError` is raised.
    """

    def __init__(self, cards: Iterable[Card]):
        self.cards: List[Card] = list(cards)
        self._index = 0

    @classmethod
    def from_labels(cls, *labels: str) -> "StackedDeck":
        """
        Build a stacked deck from card labels.

        >>> StackedDeck.from_labels("A♠", "10♥").remaining
        2
        """
        return cls(Card.parse(label) for label in labels)

    @property
    def remaining(self) -> int:
        """The number of cards not yet drawn."""
        return len(self.cards) - self._index

    def draw(self) -> Card:
        """
        Draw the next card in the sequence.

        :raises DeckExhaustedError: If every card has already been drawn.
        """
        if self._index >= len(self.cards):
            raise DeckExhaustedError(
                f"Stacked deck exhausted after {len(self.cards)} cards"
            )
        card = self.cards[self._index]
        self._index += 1
        return card

    __call__ = draw
