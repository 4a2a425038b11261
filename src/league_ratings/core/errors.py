"""
Exception types for the league rating system.
"""


class LeagueRatingsError(Exception):
    """Base class for every error raised by league_ratings."""


class MatchImportError(LeagueRatingsError, ValueError):
    """Match data could not be read or parsed."""


class MissingPlayerError(LeagueRatingsError, KeyError):
    """A match references a player with no prior rating."""

    def __init__(self, player_id: int):
        super().__init__(player_id)
        self.player_id = player_id

    def __str__(self):
        return f"player {self.player_id} has no prior rating in this period"


class MatchIntegrityError(LeagueRatingsError):
    """A match record is structurally invalid (e.g. a player facing themself)."""


class VolatilityConvergenceError(LeagueRatingsError, ArithmeticError):
    """The volatility solver did not converge within its iteration cap."""


class PeriodAlreadyAppliedError(LeagueRatingsError):
    """The rating period has already been applied to the registry."""

    def __init__(self, rating_period: int):
        super().__init__(f"rating period {rating_period} has already been applied")
        self.rating_period = rating_period


class RatingVarianceError(LeagueRatingsError, ArithmeticError):
    """Every expected score saturated to 0 or 1, so the variance is undefined."""
