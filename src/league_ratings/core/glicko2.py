"""
Glicko-2 rating period engine.

Implements the method from Mark Glickman's "Example of the Glicko-2 system":
every player's prior rating is combined with all unit games they played in a
rating period, including the Illinois-variant volatility solver.
"""

import math
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import (
    MatchIntegrityError, MissingPlayerError, RatingVarianceError, VolatilityConvergenceError,
)
from .models import DEFAULT_RD, GLICKO2_SCALE, Match, Rating

logger = logging.getLogger(__name__)

DEFAULT_TAU = 0.5  # System constant (volatility change)
CONVERGENCE_TOLERANCE = 0.000001
MAX_ITERATIONS = 100

# (opponent mu, opponent phi, outcome, number of unit games)
Game = Tuple[float, float, float, int]


def g(phi: float) -> float:
    """Glicko-2 g function."""
    return 1 / math.sqrt(1 + 3 * phi * phi / (math.pi * math.pi))


def E(mu: float, mu_j: float, phi_j: float) -> float:
    """Expected outcome function."""
    return 1 / (1 + math.exp(-g(phi_j) * (mu - mu_j)))


def solve_volatility(delta: float, phi: float, v: float, sigma: float, tau: float,
                     tolerance: float = CONVERGENCE_TOLERANCE,
                     max_iterations: int = MAX_ITERATIONS) -> float:
    """
    Find the new volatility sigma' (step 5 of Glicko-2).

    Uses the Illinois variant of regula falsi on
    f(x) = e^x(delta^2 - phi^2 - v - e^x) / (2(phi^2 + v + e^x)^2) - (x - a)/tau^2
    with a = ln(sigma^2).

    Raises:
        VolatilityConvergenceError: if either the bracketing search or the
            main iteration exceeds max_iterations.
    """
    a = math.log(sigma * sigma)
    delta_sq = delta * delta
    phi_sq = phi * phi

    def f(x: float) -> float:
        ex = math.exp(x)
        return (ex * (delta_sq - phi_sq - v - ex) / (2 * (phi_sq + v + ex) ** 2)
                - (x - a) / (tau * tau))

    A = a
    if delta_sq > phi_sq + v:
        B = math.log(delta_sq - phi_sq - v)
    else:
        k = 1
        while f(a - k * tau) < 0:
            k += 1
            if k > max_iterations:
                raise VolatilityConvergenceError(
                    f"could not bracket volatility root within {max_iterations} steps")
        B = a - k * tau

    f_A = f(A)
    f_B = f(B)
    iterations = 0
    while abs(B - A) > tolerance:
        iterations += 1
        if iterations > max_iterations:
            raise VolatilityConvergenceError(
                f"volatility did not converge within {max_iterations} iterations "
                f"(delta={delta}, phi={phi}, v={v}, sigma={sigma})")
        C = A + (A - B) * f_A / (f_B - f_A)
        f_C = f(C)
        if f_C * f_B <= 0:
            A, f_A = B, f_B
        else:
            f_A = f_A / 2
        B, f_B = C, f_C

    logger.debug("Volatility solver converged in %d iterations", iterations)
    return math.exp(A / 2)


def build_game_list(player_id: int, matches: Iterable[Match],
                    prior_ratings: Dict[int, Rating]) -> List[Game]:
    """
    Expand every match the player took part in into unit games.

    A 3-1 match gives the player three wins and one loss (or the reverse),
    each against the opponent's pre-period rating. Identical unit games are
    kept as one entry with a count.
    """
    games = []
    for match in matches:
        if match.player1_id == player_id:
            opponent_id, wins, losses = match.player2_id, match.score1, match.score2
        elif match.player2_id == player_id:
            opponent_id, wins, losses = match.player1_id, match.score2, match.score1
        else:
            continue

        if opponent_id not in prior_ratings:
            raise MissingPlayerError(opponent_id)
        opponent_mu, opponent_phi, _ = prior_ratings[opponent_id].to_glicko2_scale()

        if wins:
            games.append((opponent_mu, opponent_phi, 1.0, wins))
        if losses:
            games.append((opponent_mu, opponent_phi, 0.0, losses))
    return games


class GlickoSystem:
    """Glicko-2 rating system with its tuning constants."""

    def __init__(self, tau: float = DEFAULT_TAU, tolerance: float = CONVERGENCE_TOLERANCE,
                 max_iterations: int = MAX_ITERATIONS, max_deviation: float = DEFAULT_RD):
        self.tau = tau
        self.epsilon = tolerance  # Convergence tolerance
        self.max_iterations = max_iterations
        self.max_deviation = max_deviation  # RD ceiling for inactive players

    @classmethod
    def from_config(cls, config: Dict) -> 'GlickoSystem':
        return cls(
            tau=config.get("tau", DEFAULT_TAU),
            tolerance=config.get("convergence_tolerance", CONVERGENCE_TOLERANCE),
            max_iterations=config.get("max_iterations", MAX_ITERATIONS),
            max_deviation=config.get("max_deviation", DEFAULT_RD),
        )

    def phi(self, rd: float) -> float:
        """Convert RD to Glicko-2 scale."""
        return rd / GLICKO2_SCALE

    def update_rating(self, rating: Rating, games: List[Game]) -> Rating:
        """
        Update one player's rating from their unit games in a period.

        An empty game list only relaxes the deviation: rating and volatility
        are unchanged and RD grows towards max_deviation.
        """
        mu, phi, sigma = rating.to_glicko2_scale()

        if not games:
            phi_star = math.sqrt(phi * phi + sigma * sigma)
            # Never shrink RD, even for a prior above the ceiling
            new_phi = min(phi_star, max(phi, self.phi(self.max_deviation)))
            return Rating(rating.rating, new_phi * GLICKO2_SCALE, sigma)

        v_inv = 0.0
        improvement = 0.0
        for mu_j, phi_j, outcome, count in games:
            g_val = g(phi_j)
            E_val = E(mu, mu_j, phi_j)
            v_inv += count * g_val * g_val * E_val * (1 - E_val)
            improvement += count * g_val * (outcome - E_val)
        if v_inv == 0:
            raise RatingVarianceError(
                f"expected scores saturated for rating {rating.rating:.1f}; variance is undefined")
        v = 1 / v_inv
        delta = v * improvement

        new_sigma = solve_volatility(delta, phi, v, sigma, self.tau,
                                     self.epsilon, self.max_iterations)

        phi_star = math.sqrt(phi * phi + new_sigma * new_sigma)
        new_phi = 1 / math.sqrt(1 / (phi_star * phi_star) + 1 / v)
        new_mu = mu + new_phi * new_phi * improvement

        return Rating.from_glicko2_scale(new_mu, new_phi, new_sigma)

    def compute_period(self, prior_ratings: Dict[int, Rating], period_matches: Iterable[Match],
                       scope: Optional[Iterable[int]] = None) -> Dict[int, Rating]:
        """
        Compute posterior ratings for one rating period.

        Args:
            prior_ratings: Rating of every player as of the start of the period
            period_matches: All matches recorded for the period
            scope: Extra player ids to update even without games (e.g. the
                whole registry, so inactive players' RD relaxes)

        Returns:
            Dict of player id -> new Rating for every player in a match or in scope

        Raises:
            MissingPlayerError: a match or scope id has no prior rating
            MatchIntegrityError: a match pairs a player with themself
            VolatilityConvergenceError: the volatility solver did not converge
            RatingVarianceError: a rating gap so wide the expected scores saturate
        """
        matches = list(period_matches)

        players = {}  # ordered set
        for match in matches:
            if match.player1_id == match.player2_id:
                raise MatchIntegrityError(
                    f"match {match.id} pairs player {match.player1_id} with themself")
            players[match.player1_id] = None
            players[match.player2_id] = None
        for player_id in scope or ():
            players[player_id] = None

        for player_id in players:
            if player_id not in prior_ratings:
                raise MissingPlayerError(player_id)

        new_ratings = {}
        for player_id in players:
            games = build_game_list(player_id, matches, prior_ratings)
            new_ratings[player_id] = self.update_rating(prior_ratings[player_id], games)

        logger.debug("Computed %d ratings from %d matches", len(new_ratings), len(matches))
        return new_ratings


def compute_period(prior_ratings: Dict[int, Rating], period_matches: Iterable[Match],
                   scope: Optional[Iterable[int]] = None,
                   system: Optional[GlickoSystem] = None) -> Dict[int, Rating]:
    """Compute a rating period with the given (or default) Glicko-2 system."""
    return (system or GlickoSystem()).compute_period(prior_ratings, period_matches, scope)
