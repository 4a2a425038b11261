#!/usr/bin/env python3
"""
Tests for the SQLite store: schema, player registry and match log.
"""

import sqlite3
import unittest
from datetime import datetime

from league_ratings.core.database import create_schema, open_database, transaction
from league_ratings.core.match_log import append_match, count_matches, get_period_matches
from league_ratings.core.models import Match, Rating
from league_ratings.core.player_registry import (
    create_player, get_all_ratings, get_player_id, get_player_names, get_ratings,
    list_players, set_ratings,
)


class SchemaTests(unittest.TestCase):

    def setUp(self):
        self.conn = open_database(":memory:")

    def tearDown(self):
        self.conn.close()

    def test_required_tables_exist(self):
        cursor = self.conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}
        for table in ("players", "matches", "rating_history"):
            self.assertIn(table, tables, f"Required table {table} missing")

        cursor.execute("PRAGMA table_info(matches)")
        columns = {row[1] for row in cursor.fetchall()}
        self.assertEqual(columns, {"id", "player_1", "player_2", "score1", "score2", "date", "rating_period"})

    def test_schema_creation_is_idempotent(self):
        create_player(self.conn, "Alice")
        self.conn.commit()
        create_schema(self.conn)
        create_schema(self.conn)
        self.assertEqual(get_player_id(self.conn, "Alice"), 1)

    def test_schema_creation_is_one_transaction(self):
        conn = sqlite3.connect(":memory:")
        # A table squatting on the index name makes the third statement fail
        conn.execute("CREATE TABLE idx_matches_rating_period (x INTEGER)")
        with self.assertRaises(sqlite3.OperationalError):
            create_schema(conn)

        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        self.assertNotIn("players", tables)
        self.assertNotIn("matches", tables)
        self.assertFalse(conn.in_transaction)
        conn.close()

    def test_transaction_rolls_back_on_error(self):
        with self.assertRaises(RuntimeError):
            with transaction(self.conn):
                create_player(self.conn, "Alice")
                raise RuntimeError("boom")
        self.assertIsNone(get_player_id(self.conn, "Alice"))


class PlayerRegistryTests(unittest.TestCase):

    def setUp(self):
        self.conn = open_database(":memory:")

    def tearDown(self):
        self.conn.close()

    def test_unknown_name(self):
        self.assertIsNone(get_player_id(self.conn, "Nobody"))

    def test_create_assigns_default_rating(self):
        player_id = create_player(self.conn, "Alice")
        self.assertEqual(get_player_id(self.conn, "Alice"), player_id)
        self.assertEqual(get_ratings(self.conn, [player_id]), {player_id: Rating(1500.0, 350.0, 0.06)})

    def test_create_is_idempotent_per_name(self):
        first = create_player(self.conn, "Alice")
        second = create_player(self.conn, "Alice")
        self.assertEqual(first, second)
        self.assertEqual(len(list_players(self.conn)), 1)

    def test_name_uniqueness_enforced_by_schema(self):
        create_player(self.conn, "Alice")
        with self.assertRaises(sqlite3.IntegrityError):
            self.conn.execute("INSERT INTO players (name, rating, rd, vol) VALUES ('Alice', 1500, 350, 0.06)")

    def test_bulk_read_and_write(self):
        alice = create_player(self.conn, "Alice")
        bob = create_player(self.conn, "Bob")
        carol = create_player(self.conn, "Carol")

        set_ratings(self.conn, {alice: Rating(1610.5, 120.0, 0.059), bob: Rating(1420.0, 90.0, 0.061)})

        ratings = get_ratings(self.conn, [alice, bob, 999])
        self.assertEqual(ratings, {alice: Rating(1610.5, 120.0, 0.059), bob: Rating(1420.0, 90.0, 0.061)})
        self.assertEqual(get_all_ratings(self.conn)[carol], Rating())
        self.assertEqual(get_ratings(self.conn, []), {})

    def test_names_and_listing(self):
        alice = create_player(self.conn, "Alice")
        bob = create_player(self.conn, "Bob")
        self.assertEqual(get_player_names(self.conn, [bob, alice]), {alice: "Alice", bob: "Bob"})
        self.assertEqual([p.name for p in list_players(self.conn)], ["Alice", "Bob"])


class MatchLogTests(unittest.TestCase):

    def setUp(self):
        self.conn = open_database(":memory:")
        self.alice = create_player(self.conn, "Alice")
        self.bob = create_player(self.conn, "Bob")

    def tearDown(self):
        self.conn.close()

    def _match(self, period, day=1, score1=2, score2=1):
        return Match(date=datetime(2024, 3, day), player1_id=self.alice, player2_id=self.bob,
                     score1=score1, score2=score2, rating_period=period)

    def test_append_assigns_ids(self):
        first = append_match(self.conn, self._match(1))
        second = append_match(self.conn, self._match(1))
        self.assertLess(first, second)

    def test_read_by_period_in_insertion_order(self):
        append_match(self.conn, self._match(1, day=5, score1=0))
        append_match(self.conn, self._match(2, day=6))
        append_match(self.conn, self._match(1, day=2, score1=3))

        matches = get_period_matches(self.conn, 1)
        self.assertEqual([m.score1 for m in matches], [0, 3])
        self.assertEqual(matches[0].date, datetime(2024, 3, 5))
        self.assertTrue(all(m.rating_period == 1 for m in matches))
        self.assertEqual(get_period_matches(self.conn, 7), [])

    def test_counts(self):
        append_match(self.conn, self._match(1))
        append_match(self.conn, self._match(2))
        self.assertEqual(count_matches(self.conn), 2)
        self.assertEqual(count_matches(self.conn, 2), 1)

    def test_date_stored_at_midnight(self):
        append_match(self.conn, self._match(1))
        stored = self.conn.execute("SELECT date FROM matches").fetchone()[0]
        self.assertEqual(stored, "2024-03-01 00:00:00")


if __name__ == "__main__":
    unittest.main()
