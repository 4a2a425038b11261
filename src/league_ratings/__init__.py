"""
League ratings: Glicko-2 skill ratings for head-to-head leagues.
"""

__version__ = "1.0.0"
