import sqlite3
from datetime import datetime
from typing import Dict, List

from .models import RatingChange


def save_period_history(conn: sqlite3.Connection, rating_period: int, changes: List[RatingChange]):
    """Saves each player's before/after rating for a rating period (no commit)."""
    recorded_at = datetime.now().isoformat(timespec='seconds')
    cursor = conn.cursor()
    cursor.executemany("""
        INSERT INTO rating_history
        (player_id, rating_period, rating_before, rd_before, vol_before,
         rating_after, rd_after, vol_after, recorded_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, [
        (c.player_id, rating_period,
         c.before.rating, c.before.deviation, c.before.volatility,
         c.after.rating, c.after.deviation, c.after.volatility,
         recorded_at)
        for c in changes
    ])


def is_period_applied(conn: sqlite3.Connection, rating_period: int) -> bool:
    """True if a rating update has already been recorded for this period."""
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM rating_history WHERE rating_period = ? LIMIT 1", (rating_period,))
    return cursor.fetchone() is not None


def get_player_history(conn: sqlite3.Connection, player_id: int) -> List[Dict]:
    """
    Get the rating history of one player, oldest first.

    Returns:
        List of dicts with keys: rating_period, rating_before, rd_before,
        rating_after, rd_after, vol_after, recorded_at
    """
    cursor = conn.cursor()
    cursor.execute("""
        SELECT rating_period, rating_before, rd_before, rating_after, rd_after, vol_after, recorded_at
        FROM rating_history
        WHERE player_id = ?
        ORDER BY id ASC
    """, (player_id,))

    history = []
    for period, rating_before, rd_before, rating_after, rd_after, vol_after, recorded_at in cursor.fetchall():
        history.append({
            'rating_period': period,
            'rating_before': float(rating_before),
            'rd_before': float(rd_before),
            'rating_after': float(rating_after),
            'rd_after': float(rd_after),
            'vol_after': float(vol_after),
            'recorded_at': recorded_at,
        })
    return history
