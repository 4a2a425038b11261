#!/usr/bin/env python3
"""
Command line interface for the league rating system.

  league-ratings -d league.db load matches.csv 3     # append matches as period 3
  league-ratings -d league.db update 3               # apply rating period 3
  league-ratings -d league.db print -o ranking.md    # write the ranking
  league-ratings -d league.db history Alice          # one player's periods
"""

import argparse
import sqlite3
import sys
import logging
from contextlib import contextmanager

from .core.database import open_database
from .core.errors import LeagueRatingsError
from .core.glicko2 import GlickoSystem
from .core.player_registry import get_player_id, list_players
from .core.rating_history import get_player_history
from .core.rating_period import update_rating_period
from .parsers.match_import import load_matches
from .reporting.leaderboard import render_player_history, render_ranking, render_rating_update
from .utils.config import load_config

logger = logging.getLogger(__name__)


@contextmanager
def open_output(path):
    """Yield a writable text stream: the given file, or stdout."""
    if path is None:
        yield sys.stdout
        return
    with open(path, 'w', encoding='utf-8') as f:
        yield f


def print_command(conn, args, config) -> int:
    with open_output(args.output) as out:
        out.write(render_ranking(list_players(conn)))
    return 0


def update_command(conn, args, config) -> int:
    system = GlickoSystem.from_config(config)
    changes = update_rating_period(
        conn, args.rating_period, system,
        include_inactive=args.all_players,
        force=args.force,
    )
    if not changes:
        print(f"⚠️  No matches found for rating period {args.rating_period}")
    with open_output(args.output) as out:
        out.write(render_rating_update(changes))
    return 0


def load_command(conn, args, config) -> int:
    delimiter = args.delimiter or config["csv_delimiter"]
    has_header = args.has_header or config["csv_has_header"]
    count = load_matches(conn, args.source, args.rating_period,
                         delimiter=delimiter, has_header=has_header,
                         timeout=config["request_timeout"])
    print(f"✅ Loaded {count} matches into rating period {args.rating_period}")
    return 0


def history_command(conn, args, config) -> int:
    player_id = get_player_id(conn, args.player)
    if player_id is None:
        print(f"❌ Unknown player: {args.player}")
        return 1
    with open_output(args.output) as out:
        out.write(render_player_history(args.player, get_player_history(conn, player_id)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Glicko-2 ratings for head-to-head leagues')
    parser.add_argument('-d', '--database', help='SQLite database file (default from config: league.db)')
    parser.add_argument('-o', '--output', help='Write report to this file instead of stdout')
    parser.add_argument('-c', '--config', help='JSON config file (default: league_config.json if present)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    print_parser = subparsers.add_parser('print', help='Show the current ranking')
    print_parser.set_defaults(func=print_command)

    update_parser = subparsers.add_parser('update', help='Apply a rating period')
    update_parser.add_argument('rating_period', type=int, help='Rating period to apply')
    update_parser.add_argument('--all-players', action='store_true',
                               help='Also relax the deviation of players without matches in this period')
    update_parser.add_argument('--force', action='store_true',
                               help='Apply even if this period was already applied')
    update_parser.set_defaults(func=update_command)

    load_parser = subparsers.add_parser('load', help='Load matches from a CSV file or URL')
    load_parser.add_argument('source', metavar='FILE', help='Match file path or http(s) URL')
    load_parser.add_argument('rating_period', type=int, help='Rating period for these matches')
    load_parser.add_argument('--has-header', action='store_true', help='Skip the first row')
    load_parser.add_argument('--delimiter', help='Field delimiter (default: ,)')
    load_parser.set_defaults(func=load_command)

    history_parser = subparsers.add_parser('history', help="Show a player's rating history")
    history_parser.add_argument('player', help='Player name')
    history_parser.set_defaults(func=history_command)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"❌ Error loading config: {e}")
        return 1

    db_path = args.database or config["database_path"]
    try:
        conn = open_database(db_path)
    except sqlite3.Error as e:
        logger.error(f"Could not open database {db_path}: {e}")
        print(f"❌ Error: {e}")
        return 1

    try:
        return args.func(conn, args, config)
    except (LeagueRatingsError, sqlite3.Error, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"❌ Error: {e}")
        return 1
    finally:
        conn.close()


if __name__ == "__main__":
    sys.exit(main())
