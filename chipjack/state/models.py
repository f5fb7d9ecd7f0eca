"""
Immutable state models for a round of blackjack.

These classes are used with the pure transition functions in
`chipjack.state.transitions`, which create new state instances rather than
modifying existing ones. The chip balance is deliberately not part of the
round: it is passed into each transition and handed back in the `Transition`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from enum import Enum
import time
import uuid

from chipjack.blackjack.hand import Score, best_value
from chipjack.blackjack.rules import GameResult
from chipjack.common.card import Card


class RoundStatus(Enum):
    """
    Stages of a round.

    IDLE covers both "no bet yet" and "bet placed, waiting for the deal".
    DEALER_PLAYING is transient: a stand passes through it and resolves in
    the same transition, so it is never observed in a returned state.
    """

    IDLE = "idle"
    PLAYING = "playing"
    PLAYER_BUST = "player_bust"
    DEALER_PLAYING = "dealer_playing"
    ROUND_END = "round_end"

    @property
    def is_terminal(self) -> bool:
        return self in (RoundStatus.PLAYER_BUST, RoundStatus.ROUND_END)


@dataclass(frozen=True)
class RoundResult:
    """
    The settlement of a finished round.

    Attributes:
        outcome: win, loss, push or blackjack
        player_value: The player's final best value
        dealer_value: The dealer's final best value
        delta: Signed net chip change (profit, zero, or minus the bet)
        bet: The bet the round was played for
    """

    outcome: GameResult
    player_value: int
    dealer_value: int
    delta: int
    bet: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "player_value": self.player_value,
            "dealer_value": self.dealer_value,
            "delta": self.delta,
            "bet": self.bet,
        }


@dataclass(frozen=True)
class RoundState:
    """
    Immutable representation of a round.

    Attributes:
        id: Unique identifier for this round
        player: The player's cards in deal order
        dealer: The dealer's cards in deal order
        bet: The bet held for this round, if one has been placed
        status: Current stage of the round
        last_result: Settlement, only set once the round is terminal
        timestamp: When this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    player: Tuple[Card, ...] = ()
    dealer: Tuple[Card, ...] = ()
    bet: Optional[int] = None
    status: RoundStatus = RoundStatus.IDLE
    last_result: Optional[RoundResult] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def player_score(self) -> Score:
        return best_value(self.player)

    @property
    def dealer_score(self) -> Score:
        return best_value(self.dealer)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        """Convert the round to a dictionary for rendering and serialization."""
        return {
            "id": self.id,
            "status": self.status.value,
            "bet": self.bet,
            "player": {
                "cards": [str(card) for card in self.player],
                "value": self.player_score.value,
                "is_soft": self.player_score.is_soft,
            },
            "dealer": {
                "cards": [str(card) for card in self.dealer],
                "value": self.dealer_score.value,
                "is_soft": self.dealer_score.is_soft,
            },
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }


@dataclass(frozen=True)
class Transition:
    """
    The outcome of applying one action to a round.

    Attributes:
        state: The round after the action (the same object if rejected)
        chips: The chip balance after the action
        accepted: Whether the action was applied
        reason: Why the action was rejected, if it was
    """

    state: RoundState
    chips: int
    accepted: bool = True
    reason: Optional[str] = None

    @property
    def rejected(self) -> bool:
        return not self.accepted
