"""
Player Operations Module

Business logic for players, the people who sit at tournament tables. A player
may or may not have a login account; the phone number is the de-duplication
key used by the self-service registration flow.
"""

from typing import Any, Dict, List, Optional

from pokerpal.database.models import Player, TournamentRegistration
from pokerpal.utils.exceptions import ConflictError, NotFoundError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

DUPLICATE_PHONE_MESSAGE = "A player with this phone number already exists"


def player_summary(player: Player) -> Dict[str, Any]:
    """The player as the client sees it, camelCase keys and a UTC timestamp."""
    return {
        'id': player.id,
        'name': player.name,
        'email': player.email,
        'phone': player.phone,
        'imageUrl': player.image_url,
        'userId': player.user_id,
        'createdAt': player.created_at.isoformat() + 'Z' if player.created_at else None,
    }


class DuplicatePhoneError(ConflictError):
    """Raised when a phone number already belongs to another player"""

    def __init__(self, existing_player: Player):
        super().__init__(
            f"Phone already registered to player {existing_player.id}",
            DUPLICATE_PHONE_MESSAGE,
            payload={'message': DUPLICATE_PHONE_MESSAGE, 'existingPlayer': player_summary(existing_player)},
        )
        self.existing_player = existing_player


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    return phone.strip() or None


class PlayerOperations:
    """Business logic operations for Player management."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    async def list_players(self) -> List[Player]:
        return await self.db.list_players()

    async def get_player(self, player_id: str) -> Player:
        player = await self.db.get_player(player_id)
        if not player:
            raise NotFoundError("Player", player_id)
        return player

    async def _ensure_phone_available(self, phone: Optional[str], player_id: Optional[str] = None) -> None:
        if not phone:
            return
        existing = await self.db.get_player_by_phone(phone)
        if existing and existing.id != player_id:
            raise DuplicatePhoneError(existing)

    async def create_player(self, data: Dict[str, Any]) -> Player:
        """
        Create a player.

        Raises:
            DuplicatePhoneError: If another player already uses the phone number.
                The existing player travels with the error so the client can
                offer to register that player instead.
        """
        data = dict(data)
        if 'phone' in data:
            data['phone'] = normalize_phone(data['phone'])
        await self._ensure_phone_available(data.get('phone'))

        player = await self.db.create_player(data)
        self.logger.info(f"Created player {player.id} ({player.name})")
        return player

    async def update_player(self, player_id: str, data: Dict[str, Any]) -> Player:
        await self.get_player(player_id)

        data = dict(data)
        if 'phone' in data:
            data['phone'] = normalize_phone(data['phone'])
            await self._ensure_phone_available(data['phone'], player_id)

        player = await self.db.update_player(player_id, data)
        self.logger.info(f"Updated player {player_id}: {sorted(data)}")
        return player

    async def delete_player(self, player_id: str) -> None:
        if not await self.db.delete_player(player_id):
            raise NotFoundError("Player", player_id)
        self.logger.info(f"Deleted player {player_id}")

    async def player_registrations(self, player_id: str) -> List[TournamentRegistration]:
        await self.get_player(player_id)
        return await self.db.list_player_registrations(player_id)
