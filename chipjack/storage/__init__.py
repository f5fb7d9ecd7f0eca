"""
Balance and game-history storage for chipjack.
"""

from chipjack.storage.models import (
    GameRecord,
    HistoryPage,
    HistoryStatistics,
    InvalidGameRecordError,
    PlayerIdentity,
    StorageError,
    UserNotFoundError,
)
from chipjack.storage.store import GameStore, SQLiteStore

__all__ = [
    "GameRecord",
    "GameStore",
    "HistoryPage",
    "HistoryStatistics",
    "InvalidGameRecordError",
    "PlayerIdentity",
    "SQLiteStore",
    "StorageError",
    "UserNotFoundError",
]
