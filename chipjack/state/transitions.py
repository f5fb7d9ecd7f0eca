"""
State transition functions for a round of blackjack.

This module provides pure functions for moving a round between stages
without modifying the original state objects. Each function takes the
current round and the player's chip balance and returns a `Transition`.
Invalid requests are not errors: they come back with ``accepted=False``,
the original state and the original balance.

Nothing here publishes events; callers compare the states before and after
a transition to announce what happened.
"""

import logging
from dataclasses import replace
from typing import Optional

from chipjack.blackjack.action import Action
from chipjack.blackjack.hand import is_blackjack, is_bust
from chipjack.blackjack.rules import (
    DEFAULT_RULES,
    GameResult,
    Rules,
    calculate_chips_won,
    compare_hands,
    dealer_play,
)
from chipjack.common.deck import CardSource, draw_random_card
from chipjack.state.models import RoundResult, RoundState, RoundStatus, Transition

logger = logging.getLogger(__name__)


class RoundTransitionEngine:
    """
    Pure functions for round transitions.

    This class contains static methods that implement the round's state
    machine. Each method takes a state and returns a new one, without
    modifying the original.
    """

    @staticmethod
    def _reject(state: RoundState, chips: int, action: Action, reason: str) -> Transition:
        logger.debug("Rejected %s in %s: %s", action.value, state.status.value, reason)
        return Transition(state, chips, accepted=False, reason=reason)

    @staticmethod
    def place_bet(
        state: RoundState, chips: int, amount: int, rules: Optional[Rules] = None
    ) -> Transition:
        """
        Place a bet for the round.

        Args:
            state: Current round state
            chips: The player's balance before the bet
            amount: Amount to bet
            rules: Table rules (bet limits)

        Returns:
            The round holding the bet and the balance with the bet deducted
        """
        rules = rules or DEFAULT_RULES
        if state.status != RoundStatus.IDLE:
            return RoundTransitionEngine._reject(
                state, chips, Action.PLACE_BET, "Bets are only taken before the deal"
            )
        if state.bet is not None:
            return RoundTransitionEngine._reject(
                state, chips, Action.PLACE_BET, "A bet is already placed"
            )

        error = rules.bet_error(amount, chips)
        if error:
            return RoundTransitionEngine._reject(state, chips, Action.PLACE_BET, error)

        return Transition(replace(state, bet=amount), chips - amount)

    @staticmethod
    def deal(
        state: RoundState, chips: int, source: CardSource = draw_random_card
    ) -> Transition:
        """
        Deal the opening cards: two to the player, then one to the dealer.

        Args:
            state: Current round state, idle with a bet held
            chips: The player's balance
            source: Card source to deal from

        Returns:
            The round in PLAYING, or settled as PLAYER_BUST
        """
        if state.status != RoundStatus.IDLE:
            return RoundTransitionEngine._reject(
                state, chips, Action.DEAL, "Cards have already been dealt"
            )
        if not state.bet:
            return RoundTransitionEngine._reject(
                state, chips, Action.DEAL, "Place a bet before dealing"
            )

        first, second = source(), source()
        up_card = source()
        new_state = replace(
            state,
            player=(first, second),
            dealer=(up_card,),
            status=RoundStatus.PLAYING,
        )

        if is_bust(new_state.player):
            return RoundTransitionEngine._settle_bust(new_state, chips)
        return Transition(new_state, chips)

    @staticmethod
    def hit(
        state: RoundState, chips: int, source: CardSource = draw_random_card
    ) -> Transition:
        """
        Deal one more card to the player.

        Args:
            state: Current round state, PLAYING
            chips: The player's balance
            source: Card source to deal from

        Returns:
            The round still PLAYING, or settled as PLAYER_BUST
        """
        if state.status != RoundStatus.PLAYING:
            return RoundTransitionEngine._reject(
                state, chips, Action.HIT, "The player is not in play"
            )

        new_state = replace(state, player=state.player + (source(),))
        if is_bust(new_state.player):
            return RoundTransitionEngine._settle_bust(new_state, chips)
        return Transition(new_state, chips)

    @staticmethod
    def stand(
        state: RoundState,
        chips: int,
        source: CardSource = draw_random_card,
        rules: Optional[Rules] = None,
    ) -> Transition:
        """
        Stand, play out the dealer and settle the round.

        The dealer's turn runs to completion inside this call, so the round
        goes from PLAYING straight to ROUND_END.

        Args:
            state: Current round state, PLAYING
            chips: The player's balance
            source: Card source for the dealer's draws
            rules: Table rules (dealer policy and blackjack payout)

        Returns:
            The settled round and the balance with the payout credited
        """
        rules = rules or DEFAULT_RULES
        if state.status != RoundStatus.PLAYING:
            return RoundTransitionEngine._reject(
                state, chips, Action.STAND, "The player is not in play"
            )

        dealing = replace(state, status=RoundStatus.DEALER_PLAYING)
        dealing = replace(dealing, dealer=dealer_play(dealing.dealer, source, rules))

        comparison = compare_hands(dealing.player, dealing.dealer)
        outcome = comparison.result
        if outcome is GameResult.WIN and is_blackjack(dealing.player):
            outcome = GameResult.BLACKJACK

        delta = calculate_chips_won(state.bet, outcome, rules)
        result = RoundResult(
            outcome=outcome,
            player_value=comparison.player,
            dealer_value=comparison.dealer,
            delta=delta,
            bet=state.bet,
        )
        new_state = replace(dealing, status=RoundStatus.ROUND_END, last_result=result)

        logger.info(
            "Round %s: %s (player %d, dealer %d, %+d chips)",
            state.id,
            outcome.value,
            comparison.player,
            comparison.dealer,
            delta,
        )
        # The stake was taken at bet time, so it comes back with anything but a loss.
        return Transition(new_state, chips + state.bet + delta)

    @staticmethod
    def _settle_bust(state: RoundState, chips: int) -> Transition:
        result = RoundResult(
            outcome=GameResult.LOSS,
            player_value=state.player_score.value,
            dealer_value=state.dealer_score.value,
            delta=-state.bet,
            bet=state.bet,
        )
        logger.info("Round %s: player bust on %d", state.id, result.player_value)
        return Transition(
            replace(state, status=RoundStatus.PLAYER_BUST, last_result=result), chips
        )

    @staticmethod
    def reset(state: RoundState, chips: int) -> Transition:
        """
        Start a fresh round after a finished one.

        Args:
            state: Current round state, PLAYER_BUST or ROUND_END
            chips: The player's balance

        Returns:
            A new idle round with no cards, bet or result
        """
        if not state.is_terminal:
            return RoundTransitionEngine._reject(
                state, chips, Action.RESET, "The round is not finished"
            )
        return Transition(RoundState(), chips)

    @staticmethod
    def reduce(
        state: RoundState,
        action: Action,
        chips: int,
        source: Optional[CardSource] = None,
        amount: Optional[int] = None,
        rules: Optional[Rules] = None,
    ) -> Transition:
        """
        Apply any action to a round.

        Args:
            state: Current round state
            action: The action to apply
            chips: The player's balance
            source: Card source for dealing actions
            amount: Bet amount, for PLACE_BET
            rules: Table rules

        Returns:
            The resulting Transition
        """
        source = source or draw_random_card
        if action == Action.PLACE_BET:
            if amount is None:
                return RoundTransitionEngine._reject(
                    state, chips, action, "No bet amount given"
                )
            return RoundTransitionEngine.place_bet(state, chips, amount, rules)
        if action == Action.DEAL:
            return RoundTransitionEngine.deal(state, chips, source)
        if action == Action.HIT:
            return RoundTransitionEngine.hit(state, chips, source)
        if action == Action.STAND:
            return RoundTransitionEngine.stand(state, chips, source, rules)
        if action == Action.RESET:
            return RoundTransitionEngine.reset(state, chips)
        return RoundTransitionEngine._reject(state, chips, action, "Unknown action")
