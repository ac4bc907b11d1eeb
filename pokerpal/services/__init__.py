"""
Services package for PokerPal.

Prize pool arithmetic, points allocation, season leaderboards and image storage.
"""

from .base import BaseService
from .image_storage import ImageStorage
from .leaderboard import LeaderboardService
from .prize_pool import PrizePoolCalculator

__all__ = ['BaseService', 'ImageStorage', 'LeaderboardService', 'PrizePoolCalculator']
