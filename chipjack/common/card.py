"""
This module defines the `Suit`, `Rank`, and `Card` types used to represent playing cards.

- `Suit`: An enum representing the four suits of a standard deck of playing
cards: Spades, Hearts, Diamonds, and Clubs.

- `Rank`: An enum representing the thirteen ranks of a standard deck of playing
cards: Ace, Two through Ten, Jack, Queen, and King.

- `Card`: An immutable playing card. A card has a rank, a suit and an id. The
id only distinguishes individual draws for display purposes; two cards of the
same rank and suit compare equal regardless of their ids.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum, unique


@unique
class Suit(Enum):
    """
    Enum for suits in a card deck.
    """

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


@unique
class Rank(Enum):
    """
    Enum for ranks in a card deck.

    The value is the rank's printed symbol. Scoring lives in
    `chipjack.blackjack.hand`, since a rank's numeric worth is a game rule.
    """

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    @property
    def is_face(self) -> bool:
        """True for Jack, Queen and King."""
        return self in (Rank.JACK, Rank.QUEEN, Rank.KING)

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        """
        Look up a rank by its printed symbol.

        >>> Rank.from_symbol("q")
        <Rank.QUEEN: 'Q'>
        """
        try:
            return cls(symbol.upper())
        except ValueError as exc:
            raise ValueError(f"Invalid rank symbol: {symbol!r}") from exc

    def __str__(self) -> str:
        return self.value


def _new_card_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class Card:
    """
    Class representing a playing card.

    >>> card = Card(Rank.TWO, Suit.HEARTS)
    >>> print(card)
    2♥
    >>> card == Card(Rank.TWO, Suit.HEARTS)
    True
    """

    rank: Rank
    suit: Suit
    id: str = field(default_factory=_new_card_id, compare=False)

    def __post_init__(self):
        if not isinstance(self.rank, Rank):
            raise TypeError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            raise TypeError(f"Invalid suit: {self.suit}")

    @classmethod
    def parse(cls, text: str) -> "Card":
        """
        Build a card from a short label such as ``"A♠"`` or ``"10♦"``.

        :param text: Rank symbol followed by a suit symbol.
        :return: The parsed card.
        :raises ValueError: If either part is not recognised.
        """
        text = text.strip()
        if len(text) < 2:
            raise ValueError(f"Invalid card label: {text!r}")
        try:
            suit = Suit(text[-1])
        except ValueError as exc:
            raise ValueError(f"Invalid suit in card label: {text!r}") from exc
        return cls(Rank.from_symbol(text[:-1]), suit)

    def __repr__(self) -> str:
        return f"Card(Rank.{self.rank.name}, Suit.{self.suit.name})"

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"
