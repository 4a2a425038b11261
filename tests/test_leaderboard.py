#!/usr/bin/env python3
"""
Tests for the text reports.
"""

import unittest

from league_ratings.core.models import Player, Rating, RatingChange
from league_ratings.reporting.leaderboard import (
    rank_players, render_player_history, render_rating_update, render_ranking,
)


class LeaderboardTests(unittest.TestCase):

    def test_ranking_order(self):
        players = [
            Player(1, "Alice", Rating(1600, 50, 0.06)),
            Player(2, "Bob", Rating(1500, 80, 0.06)),
            Player(3, "Carol", Rating(1550, 120, 0.06)),
        ]
        self.assertEqual(
            render_ranking(players),
            "# Ranking\n```\n"
            "1: Alice — 1600±50\n"
            "2: Carol — 1550±120\n"
            "3: Bob — 1500±80\n"
            "```\n"
        )

    def test_ties_are_deterministic(self):
        players = [Player(2, "Zed", Rating()), Player(1, "Amy", Rating())]
        self.assertEqual([p.name for p in rank_players(players)], ["Amy", "Zed"])
        self.assertEqual(rank_players(players), rank_players(list(reversed(players))))

    def test_empty_ranking(self):
        self.assertEqual(render_ranking([]), "# Ranking\n```\n```\n")

    def test_rating_update(self):
        change = RatingChange(1, "Alice", Rating(), Rating(1584.4, 227.3, 0.06))
        self.assertEqual(
            render_rating_update([change]),
            "# Rating Update\n```\nAlice — 1500±350 → 1584±227\n```\n"
        )

    def test_player_history(self):
        history = [{
            'rating_period': 1, 'rating_before': 1500.0, 'rd_before': 350.0,
            'rating_after': 1584.4, 'rd_after': 227.3, 'vol_after': 0.06,
            'recorded_at': '2024-01-07T10:00:00',
        }]
        text = render_player_history("Alice", history)
        self.assertIn("period 1: 1500±350 → 1584±227 (+84)", text)
        self.assertIn("no rating periods applied", render_player_history("Bob", []))


if __name__ == "__main__":
    unittest.main()
