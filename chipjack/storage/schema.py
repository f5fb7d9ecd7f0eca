"""
Database schema for chipjack.

This module defines the SQLite schema used to store player balances and
the history of settled rounds.
"""

from pathlib import Path
from typing import Optional
import sqlite3


SCHEMA_SQL = """
-- Players and their chip balances
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    username TEXT NOT NULL,
    chips INTEGER NOT NULL CHECK (chips >= 0),
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

-- One row per settled round
CREATE TABLE IF NOT EXISTS game_history (
    game_id INTEGER PRIMARY KEY,
    user_id TEXT NOT NULL,
    username TEXT NOT NULL,
    date TEXT NOT NULL,  -- ISO 8601, UTC
    bet INTEGER NOT NULL CHECK (bet >= 0),
    player_score INTEGER NOT NULL,
    dealer_score INTEGER NOT NULL,
    result TEXT NOT NULL CHECK (result IN ('win', 'loss', 'push', 'blackjack')),
    chips_won INTEGER NOT NULL,  -- signed net change
    chips_after INTEGER NOT NULL CHECK (chips_after >= 0),
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);

CREATE INDEX IF NOT EXISTS idx_game_history_user_date
    ON game_history (user_id, date DESC);
"""


def default_db_path() -> str:
    """Return the default database location, creating its directory."""
    chipjack_dir = Path.home() / ".chipjack"
    chipjack_dir.mkdir(exist_ok=True)
    return str(chipjack_dir / "chipjack.db")


def initialize_database(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Open a database and create the schema if it does not exist yet.

    Args:
        db_path: Path to the database file; ":memory:" if omitted.

    Returns:
        sqlite3.Connection: An open connection usable from any thread.
    """
    conn = sqlite3.connect(db_path or ":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return conn
