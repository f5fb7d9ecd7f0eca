"""Defines the Action enum for the steps a player can take at the table."""
from enum import Enum


class Action(Enum):
    """Enum for the possible actions in a round of blackjack."""

    PLACE_BET = "bet"
    DEAL = "deal"
    HIT = "hit"
    STAND = "stand"
    RESET = "reset"

    @classmethod
    def from_input(cls, text: str) -> "Action":
        """Match user input against an action's name or value."""
        text = text.strip().lower()
        for action in cls:
            if text in (action.value, action.name.lower()):
                return action
        raise ValueError(f"Unknown action: {text!r}")
