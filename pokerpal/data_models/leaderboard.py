"""
Leaderboard data models.

Provides immutable data transfer objects for season leaderboard aggregation.
"""

from dataclasses import dataclass
from typing import List

from pokerpal.database.models import Player


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    player: Player
    points: int
    tournaments: int


@dataclass(frozen=True)
class SeasonLeaderboard:
    """Season standings, best first."""
    season_id: str
    entries: List[LeaderboardEntry]
    tournaments_counted: int
