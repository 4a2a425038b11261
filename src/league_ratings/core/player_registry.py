"""
Player registry: identities and current rating triples.

Functions take an open connection and never commit; the caller decides the
transaction boundary.
"""

import sqlite3
from typing import Dict, Iterable, List, Optional

from .models import DEFAULT_RATING, DEFAULT_RD, DEFAULT_VOLATILITY, Player, Rating


def get_player_id(conn: sqlite3.Connection, name: str) -> Optional[int]:
    cursor = conn.cursor()
    cursor.execute("SELECT id FROM players WHERE name = ?", (name,))
    result = cursor.fetchone()
    return result[0] if result else None


def create_player(conn: sqlite3.Connection, name: str) -> int:
    """Register a player with the default rating, or return the existing id."""
    cursor = conn.cursor()
    cursor.execute('''
        INSERT OR IGNORE INTO players (name, rating, rd, vol)
        VALUES (?, ?, ?, ?)
    ''', (name, DEFAULT_RATING, DEFAULT_RD, DEFAULT_VOLATILITY))
    return get_player_id(conn, name)


def get_ratings(conn: sqlite3.Connection, player_ids: Iterable[int]) -> Dict[int, Rating]:
    """Bulk read ratings; unknown ids are left out of the result."""
    ids = sorted(set(player_ids))
    if not ids:
        return {}
    placeholders = ",".join("?" * len(ids))
    cursor = conn.cursor()
    cursor.execute(f"SELECT id, rating, rd, vol FROM players WHERE id IN ({placeholders})", ids)
    return {row[0]: Rating(row[1], row[2], row[3]) for row in cursor.fetchall()}


def get_all_ratings(conn: sqlite3.Connection) -> Dict[int, Rating]:
    cursor = conn.cursor()
    cursor.execute("SELECT id, rating, rd, vol FROM players")
    return {row[0]: Rating(row[1], row[2], row[3]) for row in cursor.fetchall()}


def set_ratings(conn: sqlite3.Connection, ratings: Dict[int, Rating]):
    """Bulk write rating triples."""
    cursor = conn.cursor()
    cursor.executemany(
        "UPDATE players SET rating = ?, rd = ?, vol = ? WHERE id = ?",
        [(r.rating, r.deviation, r.volatility, player_id) for player_id, r in ratings.items()]
    )


def get_player_names(conn: sqlite3.Connection, player_ids: Iterable[int]) -> Dict[int, str]:
    ids = sorted(set(player_ids))
    if not ids:
        return {}
    placeholders = ",".join("?" * len(ids))
    cursor = conn.cursor()
    cursor.execute(f"SELECT id, name FROM players WHERE id IN ({placeholders})", ids)
    return dict(cursor.fetchall())


def list_players(conn: sqlite3.Connection) -> List[Player]:
    """All registered players in id order."""
    cursor = conn.cursor()
    cursor.execute("SELECT id, name, rating, rd, vol FROM players ORDER BY id")
    return [Player(row[0], row[1], Rating(row[2], row[3], row[4])) for row in cursor.fetchall()]
