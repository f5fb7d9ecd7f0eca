"""
Engine module for chipjack.

The engine ties the round state machine to a player's stored balance and
history.
"""

from chipjack.engine.blackjack import BlackjackEngine, Settlement, SettlementStatus

__all__ = ["BlackjackEngine", "Settlement", "SettlementStatus"]
