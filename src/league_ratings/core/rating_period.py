"""
Apply a rating period: read the prior ratings and the period's matches,
run the Glicko-2 engine and persist every new rating in one transaction.
"""

import sqlite3
import logging
from typing import List, Optional

from .database import transaction
from .errors import PeriodAlreadyAppliedError
from .glicko2 import GlickoSystem
from .match_log import get_period_matches
from .models import RatingChange
from .player_registry import get_all_ratings, get_player_names, get_ratings, set_ratings
from .rating_history import is_period_applied, save_period_history

logger = logging.getLogger(__name__)


def update_rating_period(conn: sqlite3.Connection, rating_period: int,
                         system: Optional[GlickoSystem] = None,
                         include_inactive: bool = False,
                         force: bool = False) -> List[RatingChange]:
    """
    Compute and persist the ratings for one rating period.

    Args:
        conn: Open league database
        rating_period: Period label the matches were loaded with
        system: Glicko-2 constants (defaults to GlickoSystem())
        include_inactive: Also relax the RD of registered players without
            matches in this period
        force: Apply even if this period already has recorded history

    Returns:
        One RatingChange per updated player, ordered by new rating (highest first)
    """
    system = system or GlickoSystem()

    with transaction(conn):
        if not force and is_period_applied(conn, rating_period):
            raise PeriodAlreadyAppliedError(rating_period)

        matches = get_period_matches(conn, rating_period)
        logger.info(f"Rating period {rating_period}: {len(matches)} matches")

        if include_inactive:
            prior = get_all_ratings(conn)
            scope = list(prior)
        else:
            referenced = {m.player1_id for m in matches} | {m.player2_id for m in matches}
            prior = get_ratings(conn, referenced)
            scope = None

        new_ratings = system.compute_period(prior, matches, scope)
        names = get_player_names(conn, new_ratings)

        changes = [
            RatingChange(player_id, names[player_id], prior[player_id], rating)
            for player_id, rating in new_ratings.items()
        ]
        changes.sort(key=lambda c: (-c.after.rating, c.name))

        set_ratings(conn, new_ratings)
        save_period_history(conn, rating_period, changes)

    logger.info(f"Updated {len(changes)} player ratings for period {rating_period}")
    return changes
