"""
Blackjack table engine.

This module provides the BlackjackEngine class, which drives a round of
blackjack for one authenticated player: it applies the pure round
transitions, owns the in-memory chip balance, and persists each settled
round to a `GameStore` in the background.

The round transitions are pure; the engine compares the round before and
after each action and publishes what happened on the event bus.

Persistence never holds up play. A settlement (new balance plus history row,
written in one store transaction) runs on a worker thread after the round has
already been resolved in memory; if the write fails nothing is stored, the
settlement is reported as unconfirmed and it is not retried.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import asyncio
import logging
import time

from chipjack.blackjack.action import Action
from chipjack.blackjack.rules import Rules
from chipjack.blackjack.strategy import suggest_action
from chipjack.common.deck import CardSource, InfiniteDeck
from chipjack.events import EventBus, EngineEventType
from chipjack.state import RoundState, RoundStatus, RoundTransitionEngine, Transition
from chipjack.storage import (
    GameRecord,
    GameStore,
    HistoryPage,
    HistoryStatistics,
    PlayerIdentity,
)

logger = logging.getLogger(__name__)


class SettlementStatus(Enum):
    """Persistence status of a settled round."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"


@dataclass
class Settlement:
    """A settled round on its way to the store."""

    round_id: str
    record: GameRecord
    status: SettlementStatus = SettlementStatus.PENDING
    error: Optional[str] = None


class BlackjackEngine:
    """
    Engine for a single-player blackjack table.

    Args:
        identity: The player the table plays for
        store: Balance and history storage
        config: Configuration options; ``"rules"`` is passed to `Rules.from_dict`
            and ``"seed"`` seeds the default card source
        source: Card source; an infinite deck if omitted
    """

    def __init__(
        self,
        identity: PlayerIdentity,
        store: GameStore,
        config: Optional[Dict[str, Any]] = None,
        source: Optional[CardSource] = None,
    ):
        self.identity = identity
        self.store = store
        self.config = config or {}
        self.rules = Rules.from_dict(self.config.get("rules"))
        self.source = source or InfiniteDeck(seed=self.config.get("seed"))
        self.event_bus = EventBus.get_instance()

        self.state = RoundState()
        self.chips = 0
        self.settlements: List[Settlement] = []

        # One worker keeps writes in settlement order.
        self._executor = ThreadPoolExecutor(max_workers=1)
        self._pending: List[asyncio.Task] = []

    async def _run(self, func: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def initialize(self) -> None:
        """
        Load the player's balance, registering them if they are new.
        """
        self.chips = await self._run(
            self.store.ensure_user, self.identity, self.rules.starting_chips
        )
        logger.info("%s sits down with %d chips", self.identity.username, self.chips)
        self.event_bus.emit(
            EngineEventType.ENGINE_INIT,
            {
                "user_id": self.identity.user_id,
                "chips": self.chips,
                "rules": self.rules.to_dict(),
                "timestamp": time.time(),
            },
        )

    async def shutdown(self) -> None:
        """
        Wait for outstanding settlements and release the worker thread.
        """
        await self.wait_for_settlement()
        self._executor.shutdown(wait=True)
        self.event_bus.emit(
            EngineEventType.ENGINE_SHUTDOWN,
            {"user_id": self.identity.user_id, "timestamp": time.time()},
        )

    async def place_bet(self, amount: int) -> Transition:
        """
        Place a bet for the next deal.

        Args:
            amount: Chips to stake

        Returns:
            The transition; rejected if the bet is not allowed right now
        """
        return self._apply(Action.PLACE_BET, amount=amount)

    async def deal(self) -> Transition:
        """Deal the opening cards."""
        return self._apply(Action.DEAL)

    async def hit(self) -> Transition:
        """Take another card."""
        return self._apply(Action.HIT)

    async def stand(self) -> Transition:
        """Stand and let the dealer play out the round."""
        return self._apply(Action.STAND)

    async def reset(self) -> Transition:
        """Clear a finished round and get ready for the next bet."""
        return self._apply(Action.RESET)

    async def execute_action(self, action: Action, amount: Optional[int] = None) -> Transition:
        """
        Execute any table action.

        Args:
            action: Action to perform
            amount: Bet amount, for PLACE_BET
        """
        return self._apply(action, amount=amount)

    def _apply(self, action: Action, amount: Optional[int] = None) -> Transition:
        previous = self.state
        transition = RoundTransitionEngine.reduce(
            self.state,
            action,
            self.chips,
            source=self.source,
            amount=amount,
            rules=self.rules,
        )
        if transition.rejected:
            self.event_bus.emit(
                EngineEventType.ACTION_REJECTED,
                {
                    "round_id": previous.id,
                    "action": action.value,
                    "status": previous.status.value,
                    "reason": transition.reason,
                },
            )
            return transition

        self._announce(action, previous, transition)
        self.event_bus.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "user_id": self.identity.user_id,
                "round_id": previous.id,
                "action": action.value,
                "status": transition.state.status.value,
            },
        )

        if transition.chips != self.chips:
            self.event_bus.emit(
                EngineEventType.BANKROLL_UPDATED,
                {
                    "user_id": self.identity.user_id,
                    "before": self.chips,
                    "after": transition.chips,
                },
            )

        self.state = transition.state
        self.chips = transition.chips

        if self.state.is_terminal and not previous.is_terminal:
            self._schedule_settlement()
        return transition

    def _announce(self, action: Action, previous: RoundState, transition: Transition) -> None:
        """Publish what an accepted action did to the round."""
        state = transition.state
        emit = self.event_bus.emit

        if action == Action.PLACE_BET:
            emit(
                EngineEventType.PLAYER_BET,
                {"round_id": state.id, "amount": state.bet, "chips": transition.chips},
            )
        elif action == Action.RESET:
            emit(
                EngineEventType.ROUND_RESET,
                {"round_id": previous.id, "next_round_id": state.id},
            )
            return

        if action == Action.DEAL:
            emit(
                EngineEventType.ROUND_STARTED,
                {"round_id": state.id, "bet": state.bet, "timestamp": state.timestamp},
            )
        for card in state.player[len(previous.player):]:
            emit(
                EngineEventType.CARD_DEALT,
                {"round_id": state.id, "card": str(card), "is_dealer": False},
            )
        if action == Action.DEAL:
            for card in state.dealer:
                emit(
                    EngineEventType.CARD_DEALT,
                    {"round_id": state.id, "card": str(card), "is_dealer": True},
                )
        elif action == Action.STAND:
            emit(
                EngineEventType.DEALER_ACTION,
                {
                    "round_id": state.id,
                    "drawn": [str(card) for card in state.dealer[len(previous.dealer):]],
                    "final_value": state.dealer_score.value,
                },
            )

        if state.is_terminal and not previous.is_terminal:
            if state.status == RoundStatus.PLAYER_BUST:
                emit(
                    EngineEventType.HAND_BUSTED,
                    {"round_id": state.id, "value": state.player_score.value},
                )
            emit(
                EngineEventType.ROUND_ENDED,
                {
                    "round_id": state.id,
                    **state.last_result.to_dict(),
                    "chips": transition.chips,
                },
            )

    def _schedule_settlement(self) -> None:
        result = self.state.last_result
        record = GameRecord(
            user_id=self.identity.user_id,
            username=self.identity.username,
            bet=result.bet,
            player_score=result.player_value,
            dealer_score=result.dealer_value,
            result=result.outcome,
            chips_won=result.delta,
            chips_after=self.chips,
        )
        settlement = Settlement(round_id=self.state.id, record=record)
        self.settlements.append(settlement)
        task = asyncio.get_running_loop().create_task(self._persist(settlement))
        self._pending.append(task)
        task.add_done_callback(self._pending.remove)

    async def _persist(self, settlement: Settlement) -> None:
        record = settlement.record
        try:
            settlement.record = await self._run(self.store.settle, record)
        except Exception as e:
            settlement.status = SettlementStatus.UNCONFIRMED
            settlement.error = str(e)
            logger.error(
                "Settlement of round %s not confirmed: %s",
                settlement.round_id,
                e,
                exc_info=True,
            )
            self.event_bus.emit(
                EngineEventType.SETTLEMENT_FAILED,
                {
                    "user_id": record.user_id,
                    "round_id": settlement.round_id,
                    "error": settlement.error,
                },
            )
            return

        settlement.status = SettlementStatus.CONFIRMED
        logger.debug("Settlement of round %s confirmed", settlement.round_id)
        self.event_bus.emit(
            EngineEventType.SETTLEMENT_CONFIRMED,
            {
                "user_id": record.user_id,
                "round_id": settlement.round_id,
                "game_id": settlement.record.game_id,
                "chips_after": record.chips_after,
            },
        )

    @property
    def last_settlement(self) -> Optional[Settlement]:
        """The most recent settlement, if any round has finished."""
        return self.settlements[-1] if self.settlements else None

    async def wait_for_settlement(self) -> None:
        """Wait until every scheduled settlement has been written or has failed."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def hint(self) -> Optional[Action]:
        """Suggest hit or stand for the current hand, or None outside play."""
        if self.state.status != RoundStatus.PLAYING:
            return None
        return suggest_action(self.state.player, self.state.dealer)

    async def history(self, page: int = 1, limit: int = 50) -> HistoryPage:
        """Fetch a page of the player's settled rounds, newest first."""
        return await self._run(self.store.get_history, self.identity.user_id, page, limit)

    async def statistics(self) -> HistoryStatistics:
        """Fetch aggregates over the player's settled rounds."""
        return await self._run(self.store.get_statistics, self.identity.user_id)

    def render_state(self) -> Dict[str, Any]:
        """
        Snapshot of the table for rendering.

        Returns:
            The round as a dict, plus the player, balance and settlement status
        """
        settlement = self.last_settlement
        return {
            **self.state.to_dict(),
            "username": self.identity.username,
            "chips": self.chips,
            "settlement": settlement.status.value if settlement else None,
        }
