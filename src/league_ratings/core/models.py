"""
Data model shared by the registry, match log and rating engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

GLICKO2_SCALE = 173.7178  # Glicko <-> Glicko-2 conversion factor
DEFAULT_RATING = 1500.0
DEFAULT_RD = 350.0
DEFAULT_VOLATILITY = 0.06


@dataclass(frozen=True)
class Rating:
    """A player's rating triple on the external (1500-centred) scale."""
    rating: float = DEFAULT_RATING
    deviation: float = DEFAULT_RD     # RD, uncertainty in rating
    volatility: float = DEFAULT_VOLATILITY

    def to_glicko2_scale(self) -> Tuple[float, float, float]:
        """Convert to Glicko-2 internal scale (mu, phi, sigma)."""
        mu = (self.rating - DEFAULT_RATING) / GLICKO2_SCALE
        phi = self.deviation / GLICKO2_SCALE
        return mu, phi, self.volatility

    @classmethod
    def from_glicko2_scale(cls, mu: float, phi: float, sigma: float) -> 'Rating':
        """Create from Glicko-2 internal scale values."""
        return cls(
            rating=mu * GLICKO2_SCALE + DEFAULT_RATING,
            deviation=phi * GLICKO2_SCALE,
            volatility=sigma,
        )


@dataclass
class Player:
    id: int
    name: str
    rating: Rating = field(default_factory=Rating)


@dataclass
class Match:
    """One match record; score1/score2 count unit games won by each side."""
    date: datetime
    player1_id: int
    player2_id: int
    score1: int
    score2: int
    rating_period: int
    id: Optional[int] = None


@dataclass
class RatingChange:
    """Before/after ratings of one player for one applied period."""
    player_id: int
    name: str
    before: Rating
    after: Rating

    @property
    def rating_delta(self) -> float:
        return self.after.rating - self.before.rating
