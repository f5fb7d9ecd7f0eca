"""
Hit/stand hints.

The table only offers hit and stand, so the hint is the hit/stand slice of
basic strategy: what to do with a given hard or soft total against the
dealer's up card.
"""

import logging
from typing import Sequence

from chipjack.blackjack.action import Action
from chipjack.blackjack.hand import BLACKJACK, best_value, card_values
from chipjack.common.card import Card

logger = logging.getLogger(__name__)


def _up_card_value(card: Card) -> int:
    # Aces count high when reading the dealer's up card.
    return max(card_values(card.rank))


def _hard_hit(total: int, up: int) -> bool:
    if total <= 11:
        return True
    if total == 12:
        return not 4 <= up <= 6
    if total <= 16:
        return up >= 7
    return False


def _soft_hit(total: int, up: int) -> bool:
    if total <= 17:
        return True
    if total == 18:
        return up >= 9
    return False


def suggest_action(player_cards: Sequence[Card], dealer_cards: Sequence[Card]) -> Action:
    """
    Suggest whether the player should hit or stand.

    Args:
        player_cards: The player's current hand.
        dealer_cards: The dealer's cards; the first one is the up card.

    Returns:
        Action.HIT or Action.STAND.
    """
    score = best_value(player_cards)
    if score.value >= BLACKJACK or not dealer_cards:
        return Action.STAND

    up = _up_card_value(dealer_cards[0])
    hit = _soft_hit(score.value, up) if score.is_soft else _hard_hit(score.value, up)
    action = Action.HIT if hit else Action.STAND
    logger.debug(
        "Hint for %s%d vs %d: %s",
        "soft " if score.is_soft else "hard ",
        score.value,
        up,
        action.value,
    )
    return action
