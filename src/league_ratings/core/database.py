"""
SQLite store for the league: connection setup and idempotent schema creation.
"""

import sqlite3
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

SCHEMA = [
    '''
    CREATE TABLE IF NOT EXISTS players (
        id     INTEGER PRIMARY KEY AUTOINCREMENT,
        name   TEXT NOT NULL UNIQUE,
        rating REAL NOT NULL,
        rd     REAL NOT NULL,
        vol    REAL NOT NULL
    )
    ''',
    '''
    CREATE TABLE IF NOT EXISTS matches (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        player_1      INTEGER NOT NULL REFERENCES players (id),
        player_2      INTEGER NOT NULL REFERENCES players (id),
        score1        INTEGER NOT NULL,
        score2        INTEGER NOT NULL,
        date          TEXT NOT NULL,
        rating_period INTEGER NOT NULL
    )
    ''',
    '''
    CREATE INDEX IF NOT EXISTS idx_matches_rating_period
        ON matches (rating_period)
    ''',
    '''
    CREATE TABLE IF NOT EXISTS rating_history (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        player_id     INTEGER NOT NULL REFERENCES players (id),
        rating_period INTEGER NOT NULL,
        rating_before REAL NOT NULL,
        rd_before     REAL NOT NULL,
        vol_before    REAL NOT NULL,
        rating_after  REAL NOT NULL,
        rd_after      REAL NOT NULL,
        vol_after     REAL NOT NULL,
        recorded_at   TEXT NOT NULL
    )
    ''',
]


def connect(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Open (creating if needed) the league database."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block as one transaction: commit on success, roll back on any error."""
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise


def create_schema(conn: sqlite3.Connection):
    """Create the players, matches and rating_history tables if they don't exist."""
    with transaction(conn):
        cursor = conn.cursor()
        # sqlite3 opens no implicit transaction for DDL
        if not conn.in_transaction:
            cursor.execute("BEGIN")
        for statement in SCHEMA:
            cursor.execute(statement)
    logger.debug("Schema verified")


def open_database(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Connect and make sure the schema exists."""
    conn = connect(db_path)
    try:
        create_schema(conn)
    except sqlite3.Error:
        conn.close()
        raise
    return conn
