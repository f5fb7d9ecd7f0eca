"""
Table rules, dealer policy and round resolution.

Everything here is a pure function of its arguments: the dealer policy draws
from whatever card source it is handed, and the resolvers only compare
totals and compute chip deltas. None of it touches the chip balance.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from chipjack.blackjack.hand import BLACKJACK, best_value
from chipjack.common.card import Card
from chipjack.common.deck import CardSource, draw_random_card


class GameResult(Enum):
    """The outcome of a settled round, from the player's side."""

    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    BLACKJACK = "blackjack"

    def __str__(self) -> str:
        return self.value


class Rules:
    """
    Table rules.

    Args:
        blackjack_payout: Net profit multiplier for a natural, rounded down.
        dealer_stand_value: The dealer draws while below this total.
        max_dealer_cards: Hard cap on the dealer's hand size.
        min_bet: Smallest accepted bet.
        max_bet: Largest accepted bet, or None for no table limit.
        starting_chips: Balance given to a player seen for the first time.
    """

    def __init__(
        self,
        blackjack_payout: float = 1.5,
        dealer_stand_value: int = 17,
        max_dealer_cards: int = 12,
        min_bet: int = 1,
        max_bet: Optional[int] = None,
        starting_chips: int = 1000,
    ):
        self.blackjack_payout = blackjack_payout
        self.dealer_stand_value = dealer_stand_value
        self.max_dealer_cards = max_dealer_cards
        self.min_bet = min_bet
        self.max_bet = max_bet
        self.starting_chips = starting_chips

    def to_dict(self) -> dict:
        """Convert rules to a dictionary for serialization."""
        return {
            "blackjack_payout": self.blackjack_payout,
            "dealer_stand_value": self.dealer_stand_value,
            "max_dealer_cards": self.max_dealer_cards,
            "min_bet": self.min_bet,
            "max_bet": self.max_bet,
            "starting_chips": self.starting_chips,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Rules":
        """Build rules from a config mapping, ignoring unknown keys."""
        data = data or {}
        known = cls().to_dict()
        return cls(**{key: value for key, value in data.items() if key in known})

    def should_dealer_hit(self, cards: Sequence[Card]) -> bool:
        """Determine if the dealer should draw another card."""
        return best_value(cards).value < self.dealer_stand_value

    def bet_error(self, amount: int, chips: int) -> Optional[str]:
        """Return why a bet is not acceptable, or None if it is."""
        if amount <= 0:
            return "Bet must be positive"
        if amount < self.min_bet:
            return f"Bet is below the table minimum of {self.min_bet}"
        if self.max_bet is not None and amount > self.max_bet:
            return f"Bet is above the table maximum of {self.max_bet}"
        if amount > chips:
            return "Insufficient chips"
        return None

    def __repr__(self) -> str:
        return f"Rules({self.to_dict()!r})"


DEFAULT_RULES = Rules()


def dealer_play(
    initial_cards: Sequence[Card],
    draw: CardSource = draw_random_card,
    rules: Optional[Rules] = None,
) -> Tuple[Card, ...]:
    """
    Play out the dealer's hand.

    The dealer draws while the hand's best value is 16 or less and stands on
    anything from 17 up, soft or hard, or on a bust. The hand never grows past
    `max_dealer_cards`, whatever the source deals.

    Args:
        initial_cards: The dealer's cards so far.
        draw: Card source to draw from.
        rules: Table rules; the defaults are used if omitted.

    Returns:
        The dealer's final hand, starting with the initial cards.
    """
    rules = rules or DEFAULT_RULES
    dealer: List[Card] = list(initial_cards)
    while len(dealer) < rules.max_dealer_cards and rules.should_dealer_hit(dealer):
        dealer.append(draw())
    return tuple(dealer)


@dataclass(frozen=True)
class Comparison:
    """The result of comparing two finished hands."""

    result: GameResult
    player: int
    dealer: int


def compare_hands(player_cards: Sequence[Card], dealer_cards: Sequence[Card]) -> Comparison:
    """
    Compare a finished player hand against a finished dealer hand.

    A player bust loses whatever the dealer holds; otherwise a dealer bust
    wins; otherwise the higher total wins and equal totals push. Naturals are
    not distinguished here.
    """
    player = best_value(player_cards).value
    dealer = best_value(dealer_cards).value

    if player > BLACKJACK:
        result = GameResult.LOSS
    elif dealer > BLACKJACK:
        result = GameResult.WIN
    elif player > dealer:
        result = GameResult.WIN
    elif player < dealer:
        result = GameResult.LOSS
    else:
        result = GameResult.PUSH
    return Comparison(result, player, dealer)


def calculate_chips_won(bet: int, result: GameResult, rules: Optional[Rules] = None) -> int:
    """
    Compute the signed net chip change for a settled bet.

    >>> calculate_chips_won(100, GameResult.BLACKJACK)
    150
    >>> calculate_chips_won(100, GameResult.LOSS)
    -100
    """
    result = GameResult(result)
    if result is GameResult.BLACKJACK:
        payout = (rules or DEFAULT_RULES).blackjack_payout
        return math.floor(bet * payout)
    if result is GameResult.WIN:
        return bet
    if result is GameResult.PUSH:
        return 0
    return -bet


def determine_game_result(
    player_score: int,
    dealer_score: int,
    player_blackjack: bool,
    dealer_blackjack: bool,
    player_busted: bool,
    dealer_busted: bool,
) -> GameResult:
    """
    Classify a round from already computed scores and flags.

    Precedence: both naturals push, a player natural is a blackjack, a dealer
    natural loses, then bust checks, then the totals.
    """
    if player_blackjack and dealer_blackjack:
        return GameResult.PUSH
    if player_blackjack:
        return GameResult.BLACKJACK
    if dealer_blackjack:
        return GameResult.LOSS
    if player_busted:
        return GameResult.LOSS
    if dealer_busted:
        return GameResult.WIN
    if player_score > dealer_score:
        return GameResult.WIN
    if player_score < dealer_score:
        return GameResult.LOSS
    return GameResult.PUSH
