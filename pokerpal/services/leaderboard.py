"""
Leaderboard service for season standings.

Aggregates awarded points across every tournament of a season.
"""

import logging
from sqlalchemy import select, func

from pokerpal.services.base import BaseService
from pokerpal.data_models.leaderboard import LeaderboardEntry, SeasonLeaderboard
from pokerpal.database.models import Player, Tournament, TournamentRegistration

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Service for season leaderboard queries."""

    async def season_leaderboard(self, season_id: str) -> SeasonLeaderboard:
        """
        Build the season leaderboard.

        Only registrations with points awarded count; each one adds its points
        and one tournament to the player's row. Ties on points go to the player
        with more counted tournaments, then alphabetically.
        """
        total_points = func.sum(TournamentRegistration.points_awarded).label('total_points')
        tournaments_played = func.count(TournamentRegistration.id).label('tournaments_played')

        async with self.get_session() as session:
            result = await session.execute(
                select(Player, total_points, tournaments_played)
                .join(TournamentRegistration, TournamentRegistration.player_id == Player.id)
                .join(Tournament, Tournament.id == TournamentRegistration.tournament_id)
                .where(
                    Tournament.season_id == season_id,
                    TournamentRegistration.points_awarded > 0
                )
                .group_by(Player.id)
                .order_by(total_points.desc(), tournaments_played.desc(), Player.name)
            )
            rows = result.all()

            tournament_count = await session.execute(
                select(func.count(Tournament.id)).where(Tournament.season_id == season_id)
            )
            tournaments_counted = tournament_count.scalar() or 0

        entries = [
            LeaderboardEntry(rank=index + 1, player=player, points=int(points), tournaments=int(played))
            for index, (player, points, played) in enumerate(rows)
        ]
        logger.debug(f"Season {season_id} leaderboard: {len(entries)} players over {tournaments_counted} tournaments")

        return SeasonLeaderboard(season_id=season_id, entries=entries, tournaments_counted=tournaments_counted)
