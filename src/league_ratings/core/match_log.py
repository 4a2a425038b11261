"""
Append-only match log. There is deliberately no update or delete.
"""

import sqlite3
from datetime import datetime
from typing import List, Optional

from .models import Match

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def append_match(conn: sqlite3.Connection, match: Match) -> int:
    """Insert a match and return its id."""
    cursor = conn.cursor()
    cursor.execute('''
        INSERT INTO matches (player_1, player_2, score1, score2, date, rating_period)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (match.player1_id, match.player2_id, match.score1, match.score2,
          match.date.strftime(DATE_FORMAT), match.rating_period))
    match.id = cursor.lastrowid
    return match.id


def get_period_matches(conn: sqlite3.Connection, rating_period: int) -> List[Match]:
    """All matches of a rating period in insertion order."""
    cursor = conn.cursor()
    cursor.execute('''
        SELECT id, player_1, player_2, score1, score2, date, rating_period
        FROM matches
        WHERE rating_period = ?
        ORDER BY id
    ''', (rating_period,))
    return [
        Match(
            date=datetime.strptime(date, DATE_FORMAT),
            player1_id=player1_id,
            player2_id=player2_id,
            score1=score1,
            score2=score2,
            rating_period=period,
            id=match_id,
        )
        for match_id, player1_id, player2_id, score1, score2, date, period in cursor.fetchall()
    ]


def count_matches(conn: sqlite3.Connection, rating_period: Optional[int] = None) -> int:
    cursor = conn.cursor()
    if rating_period is None:
        cursor.execute("SELECT COUNT(*) FROM matches")
    else:
        cursor.execute("SELECT COUNT(*) FROM matches WHERE rating_period = ?", (rating_period,))
    return cursor.fetchone()[0]
