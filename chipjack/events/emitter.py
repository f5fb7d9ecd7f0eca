"""
Table events.

The engine announces each step of a round (bets, cards, busts, payouts,
settlements) on a process-wide bus. Front ends subscribe to the events they
care about; the console game uses them for its debug trace and to warn the
player when a round could not be saved.

Listeners run synchronously in subscription order. A listener that raises is
logged and skipped, so a broken front end never stops the table.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple
import logging
import threading

logger = logging.getLogger("chipjack.events")

EventData = Dict[str, Any]
Listener = Callable[[EventData], None]
AnyListener = Callable[[Tuple[str, EventData]], None]


class EngineEventType(Enum):
    """Events published by the table engine."""

    ENGINE_INIT = "engine_init"
    ENGINE_SHUTDOWN = "engine_shutdown"

    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"
    ROUND_RESET = "round_reset"

    PLAYER_BET = "player_bet"
    PLAYER_ACTION = "player_action"
    ACTION_REJECTED = "action_rejected"

    CARD_DEALT = "card_dealt"
    HAND_BUSTED = "hand_busted"
    DEALER_ACTION = "dealer_action"

    BANKROLL_UPDATED = "bankroll_updated"
    SETTLEMENT_CONFIRMED = "settlement_confirmed"
    SETTLEMENT_FAILED = "settlement_failed"


class EventEmitter:
    """Dispatches table events to subscribed listeners."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._any_listeners: List[AnyListener] = []
        self._lock = threading.Lock()

    def on(self, event_type: EngineEventType, callback: Listener) -> Callable[[], None]:
        """
        Subscribe to one event type.

        Args:
            event_type: The event to listen for
            callback: Called with the event's data dict

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._listeners[event_type.name].append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners[event_type.name]:
                    self._listeners[event_type.name].remove(callback)

        return unsubscribe

    def on_any(self, callback: AnyListener) -> Callable[[], None]:
        """
        Subscribe to every event.

        The callback receives an ``(event_name, data)`` pair.
        """
        with self._lock:
            self._any_listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._any_listeners:
                    self._any_listeners.remove(callback)

        return unsubscribe

    def emit(self, event_type: EngineEventType, data: EventData) -> None:
        """Deliver an event to its listeners, then to the catch-all listeners."""
        name = event_type.name
        with self._lock:
            listeners = list(self._listeners.get(name, ()))
            any_listeners = list(self._any_listeners)

        calls = [(callback, data) for callback in listeners]
        calls += [(callback, (name, data)) for callback in any_listeners]
        for callback, payload in calls:
            try:
                callback(payload)
            except Exception:
                logger.exception("Listener for %s failed", name)


class EventBus:
    """Holder of the process-wide `EventEmitter`."""

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance
