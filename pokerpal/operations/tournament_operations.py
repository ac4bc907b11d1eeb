"""
Tournament Operations Module

Business logic for tournaments from setup to results.

Key functionality:
- list_tournaments(): tournaments with their confirmed player counts
- create_tournament() / patch_tournament(): plain writes with reference checks
- update_tournament(): owner-checked update that logs status changes and prize pool locks
- finalize_tournament(): positions, prizes and points in one transaction
- prize_pool(): PrizePoolSummary for the current registrations
- dashboard_stats(): figures for the landing dashboard

Architecture Benefits:
- All prize arithmetic goes through PrizePoolCalculator
- Finalization is atomic: either every registration gets its result or none does
"""

import json
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pokerpal.constants import TournamentConstants
from pokerpal.data_models.accounts import SessionUser
from pokerpal.data_models.prize_pool import PrizePoolSummary
from pokerpal.data_models.tournament import DashboardStats, FinalizeResult, TournamentListing
from pokerpal.database.models import ActivityEventType, Tournament, TournamentStatus, utcnow
from pokerpal.operations.club_operations import ensure_can_manage_club
from pokerpal.services.points import finishing_order, knockout_bonus, points_for_position
from pokerpal.services.prize_pool import PrizePoolCalculator, round_whole, ZERO
from pokerpal.utils.exceptions import InvalidDataError, NotFoundError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

FINALIZED_DESCRIPTION = "Tournament finalized - positions, prizes, and points assigned"


class TournamentOperationError(InvalidDataError):
    """Base exception for tournament operation errors"""
    pass


def status_label(status: TournamentStatus) -> str:
    return TournamentConstants.STATUS_LABELS.get(status.value, status.value)


class TournamentOperations:
    """
    Business logic operations for tournament management.

    Writes that touch more than one row (status change plus activity entry,
    finalization) share a single transaction.
    """

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    @asynccontextmanager
    async def _get_session_context(self, session: Optional[AsyncSession] = None):
        """
        Provides a session context. Uses the provided session if available,
        otherwise opens a transaction that commits on exit.
        """
        if session:
            yield session
        else:
            async with self.db.transaction() as new_session:
                yield new_session

    async def get_tournament(self, tournament_id: str, session: Optional[AsyncSession] = None) -> Tournament:
        tournament = await self.db.get_tournament(tournament_id, session)
        if not tournament:
            raise NotFoundError("Tournament", tournament_id)
        return tournament

    async def list_tournaments(self, club_id: Optional[str] = None,
                               season_id: Optional[str] = None) -> List[TournamentListing]:
        tournaments = await self.db.list_tournaments(club_id=club_id, season_id=season_id)
        counts = await self.db.count_confirmed_registrations()
        return [
            TournamentListing(tournament=tournament, confirmed_player_count=counts.get(tournament.id, 0))
            for tournament in tournaments
        ]

    async def _check_references(self, data: Dict[str, Any], session: Optional[AsyncSession] = None) -> None:
        """Referenced club, season and points system must exist."""
        if data.get('club_id') and not await self.db.get_club(data['club_id'], session):
            raise NotFoundError("Club", data['club_id'])
        if data.get('season_id') and not await self.db.get_season(data['season_id'], session):
            raise NotFoundError("Season", data['season_id'])
        if data.get('points_system_id') and not await self.db.get_points_system(data['points_system_id'], session):
            raise NotFoundError("Points system", data['points_system_id'])

    async def create_tournament(self, data: Dict[str, Any]) -> Tournament:
        await self._check_references(data)

        tournament = await self.db.create_tournament(data)
        self.logger.info(f"Created tournament {tournament.id} ({tournament.name}) for club {tournament.club_id}")
        return tournament

    async def patch_tournament(self, tournament_id: str, data: Dict[str, Any]) -> Tournament:
        """Partial update with no activity logging or permission checks."""
        await self.get_tournament(tournament_id)
        await self._check_references(data)

        tournament = await self.db.update_tournament(tournament_id, data)
        self.logger.info(f"Patched tournament {tournament_id}: {sorted(data)}")
        return tournament

    async def update_tournament(self, tournament_id: str, data: Dict[str, Any], actor: SessionUser) -> Tournament:
        """
        Update a tournament on behalf of its club owner or an admin.

        A status change is written to the activity log. Locking the prize pool
        stamps the lock time and is logged too; unlocking clears the stamp.

        Raises:
            NotFoundError: Tournament or a referenced entity does not exist
            PermissionDeniedError: Actor is neither admin nor club owner
        """
        async with self.db.transaction() as session:
            tournament = await self.get_tournament(tournament_id, session)
            club = await self.db.get_club(tournament.club_id, session)
            ensure_can_manage_club(club, actor)
            await self._check_references(data, session)

            old_status = tournament.status
            was_locked = bool(tournament.prize_pool_locked)

            changes = dict(data)
            if changes.get('prize_pool_locked') and not was_locked:
                changes['prize_pool_locked_at'] = utcnow()
            elif changes.get('prize_pool_locked') is False:
                changes['prize_pool_locked_at'] = None

            tournament = await self.db.update_tournament(tournament_id, changes, session)

            if tournament.status != old_status:
                await self.db.create_activity(
                    tournament_id,
                    ActivityEventType.STATUS_CHANGE,
                    f"Tournament status changed to {status_label(tournament.status)}",
                    event_data=json.dumps({'from': old_status.value, 'to': tournament.status.value}),
                    session=session
                )
                self.logger.info(
                    f"Tournament {tournament_id} status {old_status.value} -> {tournament.status.value}"
                )

            if tournament.prize_pool_locked and not was_locked:
                await self.db.create_activity(
                    tournament_id,
                    ActivityEventType.PRIZE_POOL_LOCKED,
                    "Prize pool locked",
                    session=session
                )
                self.logger.info(f"Tournament {tournament_id} prize pool locked")

        return tournament

    async def delete_tournament(self, tournament_id: str, actor: SessionUser) -> None:
        tournament = await self.get_tournament(tournament_id)
        club = await self.db.get_club(tournament.club_id)
        ensure_can_manage_club(club, actor)

        await self.db.delete_tournament(tournament_id)
        self.logger.info(f"Deleted tournament {tournament_id} by {actor.id}")

    async def prize_pool(self, tournament_id: str) -> PrizePoolSummary:
        tournament = await self.get_tournament(tournament_id)
        registrations = await self.db.list_registrations(tournament_id)
        return PrizePoolCalculator.summarize(tournament, registrations)

    async def finalize_tournament(self, tournament_id: str) -> FinalizeResult:
        """
        Assign final positions, prizes and points, then complete the tournament.

        Positions follow the finishing order: players still in first, then the
        eliminated from last out to first out. Prizes are the payout share of
        the net prize pool. Points are awarded only when the tournament tracks
        points and has a points system. Zero prizes and points are stored as null.
        """
        async with self._get_session_context() as session:
            tournament = await self.get_tournament(tournament_id, session)
            if tournament.status == TournamentStatus.CANCELLED:
                raise TournamentOperationError(
                    f"Tournament {tournament_id} is cancelled", "Cannot finalize a cancelled tournament"
                )
            registrations = await self.db.list_registrations(tournament_id, with_players=True, session=session)

            summary = PrizePoolCalculator.summarize(tournament, registrations)
            prizes = {line.position: line.amount for line in summary.payouts}

            allocations = []
            participation_points = 0
            knockout_points = 0
            if tournament.track_points and tournament.points_system_id:
                points_system = await self.db.get_points_system(tournament.points_system_id, session)
                if points_system:
                    allocations = await self.db.list_allocations(points_system.id, session)
                    participation_points = points_system.participation_points or 0
                    knockout_points = points_system.knockout_points or 0

            results = []
            for position, registration in enumerate(finishing_order(registrations), start=1):
                prize = prizes.get(position, ZERO)
                points = (
                    points_for_position(position, allocations, participation_points)
                    + knockout_bonus(registration.knockouts, knockout_points)
                )

                updated = await self.db.update_registration(registration.id, {
                    'final_position': position,
                    'prize_amount': prize if prize > 0 else None,
                    'points_awarded': points if points > 0 else None,
                }, session)
                results.append(updated)

            tournament = await self.db.update_tournament(
                tournament_id, {'status': TournamentStatus.COMPLETED}, session
            )
            await self.db.create_activity(
                tournament_id,
                ActivityEventType.STATUS_CHANGE,
                FINALIZED_DESCRIPTION,
                session=session
            )

        self.logger.info(
            f"Finalized tournament {tournament_id}: {len(results)} players, "
            f"net prize pool {summary.net_prize_pool}"
        )
        return FinalizeResult(tournament=tournament, summary=summary, results=results)

    async def dashboard_stats(self) -> DashboardStats:
        tournaments = await self.db.list_tournaments()
        players = await self.db.list_players()
        clubs = await self.db.list_clubs()

        registrations_by_tournament = defaultdict(list)
        for registration in await self.db.list_all_registrations():
            registrations_by_tournament[registration.tournament_id].append(registration)

        total_prize_pool = ZERO
        for tournament in tournaments:
            summary = PrizePoolCalculator.summarize(
                tournament, registrations_by_tournament[tournament.id], include_payouts=False
            )
            total_prize_pool += summary.net_prize_pool

        active = sum(
            1 for tournament in tournaments
            if tournament.status.value in TournamentConstants.ACTIVE_STATUSES
        )

        return DashboardStats(
            active_tournaments=active,
            total_players=len(players),
            total_prize_pool=round_whole(total_prize_pool),
            active_clubs=len(clubs),
        )
