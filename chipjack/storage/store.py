"""
Balance and history storage.

`GameStore` is the interface the table engine talks to; `SQLiteStore` keeps
balances and settled rounds in SQLite.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Optional
import logging
import sqlite3
import threading

import numpy as np

from chipjack.blackjack.rules import GameResult
from chipjack.storage.models import (
    GameRecord,
    HistoryPage,
    HistoryStatistics,
    InvalidGameRecordError,
    PlayerIdentity,
    StorageError,
    UserNotFoundError,
)
from chipjack.storage.schema import initialize_database

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class GameStore(ABC):
    """
    Abstract base class for balance and history storage.

    Implementations are called from a worker thread by the table engine, so
    they must be safe to use off the event loop's thread.
    """

    @abstractmethod
    def ensure_user(self, identity: PlayerIdentity, starting_chips: int) -> int:
        """Register the player if unknown and return their balance."""

    @abstractmethod
    def get_balance(self, user_id: str) -> int:
        """Return the stored balance."""

    @abstractmethod
    def set_balance(self, user_id: str, chips: int) -> None:
        """Overwrite the stored balance."""

    @abstractmethod
    def save_game(self, record: GameRecord) -> GameRecord:
        """Append a settled round and return it with its id."""

    @abstractmethod
    def settle(self, record: GameRecord) -> GameRecord:
        """Write the balance and append the round atomically; return the stored record."""

    @abstractmethod
    def get_history(
        self, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> HistoryPage:
        """Return one page of history, newest first."""

    @abstractmethod
    def get_statistics(self, user_id: str) -> HistoryStatistics:
        """Return aggregates over the player's whole history."""


class SQLiteStore(GameStore):
    """
    Store balances and game history in SQLite.

    Args:
        db_path: Optional path to the database file. If None, an in-memory
            database is used.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        self.conn = initialize_database(db_path)
        self._lock = threading.Lock()

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def ensure_user(self, identity: PlayerIdentity, starting_chips: int) -> int:
        with self._lock:
            row = self.conn.execute(
                "SELECT chips FROM users WHERE user_id = ?", (identity.user_id,)
            ).fetchone()
            if row is not None:
                return row["chips"]
            self.conn.execute(
                "INSERT INTO users (user_id, username, chips) VALUES (?, ?, ?)",
                (identity.user_id, identity.username, starting_chips),
            )
            self.conn.commit()
        logger.info(
            "Registered %s (%s) with %d chips",
            identity.username,
            identity.user_id,
            starting_chips,
        )
        return starting_chips

    def get_balance(self, user_id: str) -> int:
        with self._lock:
            row = self.conn.execute(
                "SELECT chips FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return row["chips"]

    def set_balance(self, user_id: str, chips: int) -> None:
        if chips < 0:
            raise ValueError(f"Balance cannot be negative: {chips}")
        with self._lock:
            cursor = self.conn.execute(
                "UPDATE users SET chips = ? WHERE user_id = ?", (chips, user_id)
            )
            self.conn.commit()
        if cursor.rowcount == 0:
            raise UserNotFoundError(f"User not found: {user_id}")
        logger.debug("Balance for %s set to %d", user_id, chips)

    def _insert_game(self, record: GameRecord) -> int:
        # Runs inside the caller's transaction; the caller holds the lock.
        cursor = self.conn.execute(
            """
            INSERT INTO game_history (
                user_id, username, date, bet, player_score, dealer_score,
                result, chips_won, chips_after
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.user_id,
                record.username,
                record.date.isoformat(),
                record.bet,
                record.player_score,
                record.dealer_score,
                record.result.value,
                record.chips_won,
                record.chips_after,
            ),
        )
        return cursor.lastrowid

    def save_game(self, record: GameRecord) -> GameRecord:
        record.validate()
        try:
            with self._lock, self.conn:
                game_id = self._insert_game(record)
        except sqlite3.IntegrityError as exc:
            raise InvalidGameRecordError(str(exc)) from exc
        logger.debug("Saved game %d for %s", game_id, record.user_id)
        return replace(record, game_id=game_id)

    def settle(self, record: GameRecord) -> GameRecord:
        """
        Store a settled round: the new balance and its history row.

        Both writes share one transaction. If either fails, neither is kept.

        Raises:
            InvalidGameRecordError: If the record is rejected.
            UserNotFoundError: If the player is not registered.
            StorageError: If the database cannot be written.
        """
        record.validate()
        try:
            with self._lock, self.conn:
                cursor = self.conn.execute(
                    "UPDATE users SET chips = ? WHERE user_id = ?",
                    (record.chips_after, record.user_id),
                )
                if cursor.rowcount == 0:
                    raise UserNotFoundError(f"User not found: {record.user_id}")
                game_id = self._insert_game(record)
        except sqlite3.IntegrityError as exc:
            raise InvalidGameRecordError(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StorageError(f"Settlement not saved: {exc}") from exc
        logger.debug(
            "Settled game %d for %s at %d chips",
            game_id,
            record.user_id,
            record.chips_after,
        )
        return replace(record, game_id=game_id)

    def get_history(
        self, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> HistoryPage:
        page = max(1, page)
        limit = max(1, limit)
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT * FROM game_history
                WHERE user_id = ?
                ORDER BY date DESC, game_id DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, (page - 1) * limit),
            ).fetchall()
            total = self.conn.execute(
                "SELECT COUNT(*) FROM game_history WHERE user_id = ?", (user_id,)
            ).fetchone()[0]
        return HistoryPage(
            games=[self._row_to_record(row) for row in rows],
            page=page,
            limit=limit,
            total_games=total,
        )

    def get_statistics(self, user_id: str) -> HistoryStatistics:
        with self._lock:
            rows = self.conn.execute(
                "SELECT result, chips_won, bet FROM game_history WHERE user_id = ?",
                (user_id,),
            ).fetchall()
        if not rows:
            return HistoryStatistics()

        results = np.array([row["result"] for row in rows])
        chips_won = np.array([row["chips_won"] for row in rows], dtype=np.int64)
        bets = np.array([row["bet"] for row in rows], dtype=np.int64)

        return HistoryStatistics(
            total_games=len(rows),
            total_wins=int(
                np.isin(results, [GameResult.WIN.value, GameResult.BLACKJACK.value]).sum()
            ),
            total_losses=int((results == GameResult.LOSS.value).sum()),
            total_pushes=int((results == GameResult.PUSH.value).sum()),
            total_chips_won=int(chips_won.sum()),
            total_bet=int(bets.sum()),
        )

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> GameRecord:
        return GameRecord(
            user_id=row["user_id"],
            username=row["username"],
            bet=row["bet"],
            player_score=row["player_score"],
            dealer_score=row["dealer_score"],
            result=GameResult(row["result"]),
            chips_won=row["chips_won"],
            chips_after=row["chips_after"],
            date=datetime.fromisoformat(row["date"]),
            game_id=row["game_id"],
        )
