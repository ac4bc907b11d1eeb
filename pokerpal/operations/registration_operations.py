"""
Registration Operations Module

Business logic for everything that happens to a player inside a tournament:
registering, paying, re-buys, add-ons, eliminations, knockouts and high hands.

Key functionality:
- register_player(): registration plus its activity entry
- update_registration(): tracked update with prize pool lock guard and activity logging
- patch_registration(): plain partial update without side effects
- confirm_payment(): payment flag plus activity entry
- pending_payments() / confirmed_payments(): the self-service registration queues
- Pending actions: players request re-buys, add-ons and knockouts, a director confirms them
- list_activity(): the tournament's activity feed

Every write that also logs activity shares one transaction with its log entry.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pokerpal.data_models.tournament import RegistrationPayment
from pokerpal.database.models import (
    ActivityEventType, ActivityLog, PendingAction, PendingActionType,
    Tournament, TournamentRegistration, utcnow
)
from pokerpal.services.prize_pool import amount_owed
from pokerpal.utils.exceptions import InvalidDataError, NotFoundError, PrizePoolLockedError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

UNKNOWN_PLAYER = "Unknown player"


class RegistrationError(InvalidDataError):
    """Raised when a registration request breaks a tournament rule"""
    pass


class PendingActionError(InvalidDataError):
    """Raised when a pending action cannot be created or applied"""
    pass


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


@dataclass(frozen=True)
class _RegistrationSnapshot:
    rebuys: int
    addons: int
    is_eliminated: bool
    entering_high_hands: bool
    high_hand_winner: bool
    payment_confirmed: bool

    @classmethod
    def of(cls, registration: TournamentRegistration) -> '_RegistrationSnapshot':
        return cls(
            rebuys=registration.rebuys or 0,
            addons=registration.addons or 0,
            is_eliminated=bool(registration.is_eliminated),
            entering_high_hands=bool(registration.entering_high_hands),
            high_hand_winner=bool(registration.high_hand_winner),
            payment_confirmed=bool(registration.payment_confirmed),
        )


class RegistrationOperations:
    """
    Business logic operations for tournament registrations.

    Tracked updates compare the registration before and after the change and
    write one activity entry per observable event.
    """

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    async def _get_tournament(self, tournament_id: str, session: Optional[AsyncSession] = None) -> Tournament:
        tournament = await self.db.get_tournament(tournament_id, session)
        if not tournament:
            raise NotFoundError("Tournament", tournament_id)
        return tournament

    async def get_registration(self, registration_id: str,
                               session: Optional[AsyncSession] = None) -> TournamentRegistration:
        registration = await self.db.get_registration(registration_id, session)
        if not registration:
            raise NotFoundError("Registration", registration_id)
        return registration

    async def _player_name(self, player_id: Optional[str], session: AsyncSession) -> str:
        player = await self.db.get_player(player_id, session) if player_id else None
        return player.name if player else UNKNOWN_PLAYER

    async def list_registrations(self, tournament_id: str) -> List[TournamentRegistration]:
        await self._get_tournament(tournament_id)
        return await self.db.list_registrations(tournament_id, with_players=True)

    async def register_player(self, tournament_id: str, data: Dict[str, Any]) -> TournamentRegistration:
        """
        Register a player for a tournament.

        Raises:
            NotFoundError: Unknown tournament or player
            PrizePoolLockedError: The prize pool is locked
            RegistrationError: High hands requested but not offered, or already registered
        """
        async with self.db.transaction() as session:
            tournament = await self._get_tournament(tournament_id, session)

            if tournament.prize_pool_locked:
                raise PrizePoolLockedError("Cannot register new players after the prize pool is locked")

            if data.get('entering_high_hands') and not tournament.enable_high_hand:
                raise RegistrationError(
                    f"Tournament {tournament_id} has no high hand pool",
                    "This tournament does not offer high hands"
                )

            player_id = data['player_id']
            if await self.db.get_player_registration(tournament_id, player_id, session):
                raise RegistrationError(
                    f"Player {player_id} already registered for {tournament_id}",
                    "Player is already registered for this tournament"
                )

            player = await self.db.get_player(player_id, session)
            if not player:
                raise NotFoundError("Player", player_id)

            registration = await self.db.create_registration({**data, 'tournament_id': tournament_id}, session)
            await self.db.create_activity(
                tournament_id,
                ActivityEventType.REGISTRATION,
                f"{player.name} registered for the tournament",
                player_id=player_id,
                session=session
            )

        self.logger.info(f"Registered player {player_id} for tournament {tournament_id}")
        return registration

    async def patch_registration(self, registration_id: str, data: Dict[str, Any],
                                 tournament_id: Optional[str] = None) -> TournamentRegistration:
        """Plain partial update, no lock guard and no activity entries."""
        registration = await self.get_registration(registration_id)
        if tournament_id and registration.tournament_id != tournament_id:
            raise NotFoundError("Registration", registration_id)

        registration = await self.db.update_registration(registration_id, data)
        self.logger.info(f"Patched registration {registration_id}: {sorted(data)}")
        return registration

    async def update_registration(self, registration_id: str, data: Dict[str, Any]) -> TournamentRegistration:
        async with self.db.transaction() as session:
            registration = await self.get_registration(registration_id, session)
            tournament = await self._get_tournament(registration.tournament_id, session)
            registration = await self._apply_tracked_update(session, tournament, registration, data)
        return registration

    async def _apply_tracked_update(
        self,
        session: AsyncSession,
        tournament: Tournament,
        registration: TournamentRegistration,
        data: Dict[str, Any]
    ) -> TournamentRegistration:
        """
        Apply a registration change inside the caller's transaction.

        While the prize pool is locked, re-buy and add-on counts cannot grow
        and players cannot start entering high hands. Eliminating a player
        stamps the elimination time when none is given; restoring a player
        clears the elimination fields.
        """
        before = _RegistrationSnapshot.of(registration)
        changes = {
            key: value for key, value in data.items()
            if key not in ('id', 'tournament_id', 'player_id')
        }

        if tournament.prize_pool_locked:
            if (changes.get('rebuys') or 0) > before.rebuys:
                raise PrizePoolLockedError("Cannot add re-buys after the prize pool is locked")
            if (changes.get('addons') or 0) > before.addons:
                raise PrizePoolLockedError("Cannot add add-ons after the prize pool is locked")
            if changes.get('entering_high_hands') and not before.entering_high_hands:
                raise PrizePoolLockedError("Cannot enter high hands after the prize pool is locked")

        if changes.get('is_eliminated') and not before.is_eliminated:
            if changes.get('elimination_time') is None:
                changes['elimination_time'] = utcnow()
        elif changes.get('is_eliminated') is False and before.is_eliminated:
            changes['elimination_time'] = None
            changes['eliminated_by'] = None

        registration = await self.db.update_registration(registration.id, changes, session)
        await self._log_changes(session, registration, before)
        return registration

    async def _log_changes(self, session: AsyncSession, registration: TournamentRegistration,
                           before: _RegistrationSnapshot) -> None:
        after = _RegistrationSnapshot.of(registration)
        name = await self._player_name(registration.player_id, session)
        events = []

        if after.is_eliminated and not before.is_eliminated:
            description = f"{name} was eliminated"
            event_data = None
            if registration.eliminated_by:
                description += f" by {await self._player_name(registration.eliminated_by, session)}"
                event_data = json.dumps({'eliminatedBy': registration.eliminated_by})
            events.append((ActivityEventType.ELIMINATION, description, event_data))
        elif before.is_eliminated and not after.is_eliminated:
            events.append((ActivityEventType.PLAYER_RESTORED, f"{name} was restored to active", None))

        if after.rebuys > before.rebuys:
            added = after.rebuys - before.rebuys
            events.append((ActivityEventType.REBUY, f"{name} made {_plural(added, 're-buy')}", None))

        if after.addons > before.addons:
            added = after.addons - before.addons
            events.append((ActivityEventType.ADDON, f"{name} purchased {_plural(added, 'add-on')}", None))

        if after.high_hand_winner and not before.high_hand_winner:
            description = f"{name} won high hand"
            event_data = None
            if registration.high_hand_amount:
                description += f" (${registration.high_hand_amount:.2f})"
                event_data = json.dumps({'amount': str(registration.high_hand_amount)})
            events.append((ActivityEventType.HIGH_HAND, description, event_data))

        for event_type, description, event_data in events:
            await self.db.create_activity(
                registration.tournament_id,
                event_type,
                description,
                player_id=registration.player_id,
                event_data=event_data,
                session=session
            )
            self.logger.info(f"Tournament {registration.tournament_id}: {description}")

    async def delete_registration(self, registration_id: str) -> None:
        if not await self.db.delete_registration(registration_id):
            raise NotFoundError("Registration", registration_id)
        self.logger.info(f"Deleted registration {registration_id}")

    # Payments

    async def confirm_payment(self, registration_id: str) -> TournamentRegistration:
        async with self.db.transaction() as session:
            registration = await self.get_registration(registration_id, session)
            already_confirmed = bool(registration.payment_confirmed)

            registration = await self.db.update_registration(
                registration_id, {'payment_confirmed': True}, session
            )
            if not already_confirmed:
                name = await self._player_name(registration.player_id, session)
                await self.db.create_activity(
                    registration.tournament_id,
                    ActivityEventType.PAYMENT_CONFIRMED,
                    f"Payment confirmed for {name}",
                    player_id=registration.player_id,
                    session=session
                )

        self.logger.info(f"Payment confirmed for registration {registration_id}")
        return registration

    async def _payments(self, tournament_id: str, confirmed: bool) -> List[RegistrationPayment]:
        tournament = await self._get_tournament(tournament_id)
        registrations = await self.db.list_registrations(tournament_id, with_players=True)
        return [
            RegistrationPayment(registration=registration, amount=amount_owed(tournament, registration))
            for registration in registrations
            if bool(registration.payment_confirmed) == confirmed
        ]

    async def pending_payments(self, tournament_id: str) -> List[RegistrationPayment]:
        """Unconfirmed registrations with the amount each player owes."""
        return await self._payments(tournament_id, confirmed=False)

    async def confirmed_payments(self, tournament_id: str) -> List[RegistrationPayment]:
        """Confirmed registrations with the amount each player paid."""
        return await self._payments(tournament_id, confirmed=True)

    # Pending actions

    async def list_pending_actions(self, tournament_id: str) -> List[PendingAction]:
        await self._get_tournament(tournament_id)
        return await self.db.list_pending_actions(tournament_id)

    async def create_pending_action(self, tournament_id: str, data: Dict[str, Any]) -> PendingAction:
        """
        Queue a player's request for a director to confirm.

        Raises:
            NotFoundError: Unknown tournament
            PendingActionError: Player not registered, or a knockout without a valid target
            PrizePoolLockedError: Re-buy or add-on requested after the prize pool is locked
        """
        tournament = await self._get_tournament(tournament_id)
        action_type = PendingActionType(getattr(data['action_type'], 'value', data['action_type']))
        player_id = data['player_id']
        target_player_id = data.get('target_player_id')

        if not await self.db.get_player_registration(tournament_id, player_id):
            raise PendingActionError(
                f"Player {player_id} not registered for {tournament_id}",
                "Player is not registered for this tournament"
            )

        if action_type == PendingActionType.KNOCKOUT:
            if not target_player_id:
                raise PendingActionError("Knockout without target", "Knockouts require a target player")
            if target_player_id == player_id:
                raise PendingActionError("Knockout targets the acting player", "Players cannot knock themselves out")
            if not await self.db.get_player_registration(tournament_id, target_player_id):
                raise PendingActionError(
                    f"Target {target_player_id} not registered for {tournament_id}",
                    "Target player is not registered for this tournament"
                )
        elif tournament.prize_pool_locked:
            raise PrizePoolLockedError("Cannot request re-buys or add-ons after the prize pool is locked")
        else:
            target_player_id = None

        action = await self.db.create_pending_action({
            'tournament_id': tournament_id,
            'player_id': player_id,
            'action_type': action_type,
            'target_player_id': target_player_id,
        })
        self.logger.info(f"Queued {action_type.value} for player {player_id} in tournament {tournament_id}")
        return action

    async def delete_pending_action(self, action_id: str) -> None:
        if not await self.db.delete_pending_action(action_id):
            raise NotFoundError("Pending action", action_id)
        self.logger.info(f"Deleted pending action {action_id}")

    async def confirm_pending_action(self, action_id: str) -> List[TournamentRegistration]:
        """
        Apply a pending action and remove it from the queue.

        A re-buy or add-on increments the acting player's count. A knockout
        eliminates the target, crediting the acting player, and increments the
        acting player's knockouts. Activity is logged the same way as for a
        tracked registration update.

        Returns:
            The registrations that changed, the acting player's first
        """
        async with self.db.transaction() as session:
            action = await self.db.get_pending_action(action_id, session)
            if not action:
                raise NotFoundError("Pending action", action_id)

            tournament = await self._get_tournament(action.tournament_id, session)
            registration = await self.db.get_player_registration(action.tournament_id, action.player_id, session)
            if not registration:
                raise NotFoundError("Registration")

            changed = []
            if action.action_type == PendingActionType.REBUY:
                changed.append(await self._apply_tracked_update(
                    session, tournament, registration, {'rebuys': (registration.rebuys or 0) + 1}
                ))
            elif action.action_type == PendingActionType.ADDON:
                changed.append(await self._apply_tracked_update(
                    session, tournament, registration, {'addons': (registration.addons or 0) + 1}
                ))
            else:
                target = await self.db.get_player_registration(
                    action.tournament_id, action.target_player_id, session
                )
                if not target:
                    raise NotFoundError("Registration")
                if target.is_eliminated:
                    raise PendingActionError(
                        f"Target {action.target_player_id} already eliminated",
                        "Target player is already eliminated"
                    )

                changed.append(await self._apply_tracked_update(
                    session, tournament, registration, {'knockouts': (registration.knockouts or 0) + 1}
                ))
                changed.append(await self._apply_tracked_update(
                    session, tournament, target, {'is_eliminated': True, 'eliminated_by': action.player_id}
                ))

            await self.db.delete_pending_action(action_id, session)

        self.logger.info(f"Confirmed pending {action.action_type.value} {action_id}")
        return changed

    # Activity

    async def list_activity(self, tournament_id: str) -> List[ActivityLog]:
        await self._get_tournament(tournament_id)
        return await self.db.list_activity(tournament_id)
