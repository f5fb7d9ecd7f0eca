"""
Records exchanged with the storage layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chipjack.blackjack.rules import GameResult


class StorageError(Exception):
    """Base class for storage failures."""


class UserNotFoundError(StorageError):
    """Raised when a balance is read or written for an unknown user."""


class InvalidGameRecordError(StorageError):
    """Raised when a game record fails validation before it is saved."""


@dataclass(frozen=True)
class PlayerIdentity:
    """The authenticated player a table is playing for."""

    user_id: str
    username: str


@dataclass(frozen=True)
class GameRecord:
    """
    A settled round as kept in the history.

    Attributes:
        user_id: Owner of the record
        username: Owner's display name at the time of play
        bet: The stake
        player_score: The player's final value
        dealer_score: The dealer's final value
        result: win, loss, push or blackjack
        chips_won: Signed net chip change
        chips_after: Balance after settlement
        date: Settlement time (UTC)
        game_id: Database id, set once stored
    """

    user_id: str
    username: str
    bet: int
    player_score: int
    dealer_score: int
    result: GameResult
    chips_won: int
    chips_after: int
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    game_id: Optional[int] = None

    def validate(self) -> None:
        """
        Check the record before it is written.

        Raises:
            InvalidGameRecordError: If any field is out of range.
        """
        if not isinstance(self.result, GameResult):
            raise InvalidGameRecordError(f"Invalid result value: {self.result!r}")
        if self.bet < 0:
            raise InvalidGameRecordError(f"Bet cannot be negative: {self.bet}")
        if self.chips_after < 0:
            raise InvalidGameRecordError(
                f"Balance after the game cannot be negative: {self.chips_after}"
            )
        if not self.user_id or not self.username:
            raise InvalidGameRecordError("Missing user information")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "user_id": self.user_id,
            "username": self.username,
            "date": self.date.isoformat(),
            "bet": self.bet,
            "player_score": self.player_score,
            "dealer_score": self.dealer_score,
            "result": self.result.value,
            "chips_won": self.chips_won,
            "chips_after": self.chips_after,
        }


@dataclass(frozen=True)
class HistoryStatistics:
    """Aggregates over a player's whole history."""

    total_games: int = 0
    total_wins: int = 0
    total_losses: int = 0
    total_pushes: int = 0
    total_chips_won: int = 0
    total_bet: int = 0

    @property
    def win_rate(self) -> str:
        """Share of games won (blackjacks included), as a one-decimal percentage."""
        if self.total_games == 0:
            return "0.0"
        return f"{self.total_wins / self.total_games * 100:.1f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_games": self.total_games,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "total_pushes": self.total_pushes,
            "total_chips_won": self.total_chips_won,
            "total_bet": self.total_bet,
            "win_rate": self.win_rate,
        }


@dataclass(frozen=True)
class HistoryPage:
    """One page of a player's history, newest first."""

    games: List[GameRecord]
    page: int
    limit: int
    total_games: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_games // self.limit) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games": [game.to_dict() for game in self.games],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total_games": self.total_games,
                "total_pages": self.total_pages,
            },
        }
