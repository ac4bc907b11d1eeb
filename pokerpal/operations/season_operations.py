"""
Season Operations Module

Business logic for seasons and the points systems attached to them.

Key functionality:
- Season CRUD scoped to an existing club
- Points system CRUD scoped to an existing season
- Points allocation CRUD with position range validation
- season_leaderboard(): standings through LeaderboardService
"""

from typing import Any, Dict, List, Optional

from pokerpal.data_models.leaderboard import SeasonLeaderboard
from pokerpal.database.models import Season, PointsSystem, PointsAllocation
from pokerpal.services.leaderboard import LeaderboardService
from pokerpal.utils.exceptions import InvalidDataError, NotFoundError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)


class AllocationRangeError(InvalidDataError):
    """Raised when a points allocation covers an impossible position range"""
    pass


def validate_allocation_range(position: int, position_end: Optional[int]) -> None:
    if position is None or position < 1:
        raise AllocationRangeError(f"Invalid position {position}", "Position must be at least 1")
    if position_end is not None and position_end < position:
        raise AllocationRangeError(
            f"Allocation range {position}-{position_end} ends before it starts",
            "Position end must be greater than or equal to position"
        )


class SeasonOperations:
    """Business logic operations for seasons, points systems and allocations."""

    def __init__(self, database):
        self.db = database
        self.logger = logger
        self.leaderboard_service = LeaderboardService(database.session_factory)

    # Seasons

    async def list_seasons(self, club_id: Optional[str] = None) -> List[Season]:
        return await self.db.list_seasons(club_id)

    async def get_season(self, season_id: str) -> Season:
        season = await self.db.get_season(season_id)
        if not season:
            raise NotFoundError("Season", season_id)
        return season

    async def create_season(self, data: Dict[str, Any]) -> Season:
        if not await self.db.get_club(data['club_id']):
            raise NotFoundError("Club", data['club_id'])

        season = await self.db.create_season(data)
        self.logger.info(f"Created season {season.id} for club {season.club_id}")
        return season

    async def update_season(self, season_id: str, data: Dict[str, Any]) -> Season:
        await self.get_season(season_id)
        if data.get('club_id') and not await self.db.get_club(data['club_id']):
            raise NotFoundError("Club", data['club_id'])

        season = await self.db.update_season(season_id, data)
        self.logger.info(f"Updated season {season_id}: {sorted(data)}")
        return season

    async def delete_season(self, season_id: str) -> None:
        if not await self.db.delete_season(season_id):
            raise NotFoundError("Season", season_id)
        self.logger.info(f"Deleted season {season_id}")

    async def season_leaderboard(self, season_id: str) -> SeasonLeaderboard:
        await self.get_season(season_id)
        return await self.leaderboard_service.season_leaderboard(season_id)

    # Points systems

    async def list_points_systems(self, season_id: str) -> List[PointsSystem]:
        await self.get_season(season_id)
        return await self.db.list_points_systems(season_id)

    async def get_points_system(self, points_system_id: str) -> PointsSystem:
        points_system = await self.db.get_points_system(points_system_id)
        if not points_system:
            raise NotFoundError("Points system", points_system_id)
        return points_system

    async def create_points_system(self, season_id: str, data: Dict[str, Any]) -> PointsSystem:
        await self.get_season(season_id)

        points_system = await self.db.create_points_system({**data, 'season_id': season_id})
        self.logger.info(f"Created points system {points_system.id} for season {season_id}")
        return points_system

    async def update_points_system(self, points_system_id: str, data: Dict[str, Any]) -> PointsSystem:
        await self.get_points_system(points_system_id)

        data = {key: value for key, value in data.items() if key != 'season_id'}
        points_system = await self.db.update_points_system(points_system_id, data)
        self.logger.info(f"Updated points system {points_system_id}: {sorted(data)}")
        return points_system

    async def delete_points_system(self, points_system_id: str) -> None:
        if not await self.db.delete_points_system(points_system_id):
            raise NotFoundError("Points system", points_system_id)
        self.logger.info(f"Deleted points system {points_system_id}")

    # Allocations

    async def list_allocations(self, points_system_id: str) -> List[PointsAllocation]:
        await self.get_points_system(points_system_id)
        return await self.db.list_allocations(points_system_id)

    async def create_allocation(self, points_system_id: str, data: Dict[str, Any]) -> PointsAllocation:
        await self.get_points_system(points_system_id)
        validate_allocation_range(data.get('position'), data.get('position_end'))

        allocation = await self.db.create_allocation({**data, 'points_system_id': points_system_id})
        self.logger.info(
            f"Created allocation {allocation.id}: positions {allocation.position}"
            f"-{allocation.position_end or allocation.position} = {allocation.points} points"
        )
        return allocation

    async def update_allocation(self, allocation_id: str, data: Dict[str, Any]) -> PointsAllocation:
        allocation = await self.db.get_allocation(allocation_id)
        if not allocation:
            raise NotFoundError("Points allocation", allocation_id)

        data = {key: value for key, value in data.items() if key != 'points_system_id'}
        validate_allocation_range(
            data.get('position', allocation.position),
            data.get('position_end', allocation.position_end)
        )

        allocation = await self.db.update_allocation(allocation_id, data)
        self.logger.info(f"Updated allocation {allocation_id}: {sorted(data)}")
        return allocation

    async def delete_allocation(self, allocation_id: str) -> None:
        if not await self.db.delete_allocation(allocation_id):
            raise NotFoundError("Points allocation", allocation_id)
        self.logger.info(f"Deleted allocation {allocation_id}")
