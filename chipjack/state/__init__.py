"""
Immutable state management for a round of blackjack.

This package provides immutable state classes and pure transition functions
for moving a round through betting, play and settlement.
"""

from chipjack.state.models import (
    RoundResult,
    RoundState,
    RoundStatus,
    Transition,
)

from chipjack.state.transitions import RoundTransitionEngine

__all__ = [
    "RoundResult",
    "RoundState",
    "RoundStatus",
    "Transition",
    "RoundTransitionEngine",
]
