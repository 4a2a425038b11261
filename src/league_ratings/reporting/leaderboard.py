"""
Text reports: ranking table, rating update summary and player history.
"""

from typing import Dict, List

from ..core.models import Player, RatingChange


def rank_players(players: List[Player]) -> List[Player]:
    """Sort by rating, highest first; ties go by name, then id."""
    return sorted(players, key=lambda p: (-p.rating.rating, p.name, p.id))


def render_ranking(players: List[Player]) -> str:
    lines = ["# Ranking", "```"]
    for rank, player in enumerate(rank_players(players), 1):
        lines.append(f"{rank}: {player.name} — {player.rating.rating:.0f}±{player.rating.deviation:.0f}")
    lines.append("```")
    return "\n".join(lines) + "\n"


def render_rating_update(changes: List[RatingChange]) -> str:
    lines = ["# Rating Update", "```"]
    for change in changes:
        lines.append(
            f"{change.name} — {change.before.rating:.0f}±{change.before.deviation:.0f}"
            f" → {change.after.rating:.0f}±{change.after.deviation:.0f}"
        )
    lines.append("```")
    return "\n".join(lines) + "\n"


def render_player_history(name: str, history: List[Dict]) -> str:
    """One line per applied rating period, oldest first."""
    lines = [f"# History: {name}", "```"]
    if not history:
        lines.append("no rating periods applied")
    for entry in history:
        delta = entry['rating_after'] - entry['rating_before']
        lines.append(
            f"period {entry['rating_period']}: {entry['rating_before']:.0f}±{entry['rd_before']:.0f}"
            f" → {entry['rating_after']:.0f}±{entry['rd_after']:.0f} ({delta:+.0f})"
        )
    lines.append("```")
    return "\n".join(lines) + "\n"
