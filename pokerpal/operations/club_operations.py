"""
Club Operations Module

Business logic for clubs: creation with unique slugs, ownership-checked
updates and deletes, and member counts.
"""

from typing import Any, Dict, List

from pokerpal.data_models.accounts import SessionUser
from pokerpal.database.models import Club
from pokerpal.utils.exceptions import ConflictError, InvalidDataError, NotFoundError, PermissionDeniedError
from pokerpal.utils.logger import setup_logger
from pokerpal.utils.slugs import slugify

logger = setup_logger(__name__)


def ensure_can_manage_club(club: Club, actor: SessionUser) -> None:
    """Only admins and the club owner may change a club or its tournaments."""
    if actor.is_admin or club.owner_id == actor.id:
        return
    raise PermissionDeniedError(
        f"User {actor.id} may not manage club {club.id}",
        "You do not have permission to manage this club"
    )


class ClubOperations:
    """Business logic operations for clubs."""

    def __init__(self, database):
        self.db = database
        self.logger = logger

    async def list_clubs(self) -> List[Club]:
        return await self.db.list_clubs()

    async def get_club(self, club_id: str) -> Club:
        club = await self.db.get_club(club_id)
        if not club:
            raise NotFoundError("Club", club_id)
        return club

    async def get_club_by_slug(self, slug: str) -> Club:
        club = await self.db.get_club_by_slug(slug)
        if not club:
            raise NotFoundError("Club", slug)
        return club

    async def _resolve_slug(self, requested: str, club_id: str = None) -> str:
        slug = slugify(requested)
        if not slug:
            raise InvalidDataError(f"Cannot derive slug from {requested!r}", "Club slug cannot be empty")

        existing = await self.db.get_club_by_slug(slug)
        if existing and existing.id != club_id:
            raise ConflictError(f"Club slug already taken: {slug}", "A club with this slug already exists")
        return slug

    async def create_club(self, data: Dict[str, Any], actor: SessionUser) -> Club:
        """
        Create a club owned by the acting user.

        The slug is derived from the name when not given.
        """
        data = dict(data)
        data['slug'] = await self._resolve_slug(data.get('slug') or data['name'])
        data['owner_id'] = actor.id

        club = await self.db.create_club(data)
        self.logger.info(f"Created club {club.id} ({club.slug}) owned by {actor.id}")
        return club

    async def update_club(self, club_id: str, data: Dict[str, Any], actor: SessionUser) -> Club:
        club = await self.get_club(club_id)
        ensure_can_manage_club(club, actor)

        data = dict(data)
        data.pop('owner_id', None)
        if data.get('slug'):
            data['slug'] = await self._resolve_slug(data['slug'], club_id)
        elif 'slug' in data:
            del data['slug']

        club = await self.db.update_club(club_id, data)
        self.logger.info(f"Updated club {club_id}: {sorted(data)}")
        return club

    async def delete_club(self, club_id: str, actor: SessionUser) -> None:
        club = await self.get_club(club_id)
        ensure_can_manage_club(club, actor)

        await self.db.delete_club(club_id)
        self.logger.info(f"Deleted club {club_id} by {actor.id}")

    async def members_count(self, club_id: str) -> int:
        await self.get_club(club_id)
        return await self.db.count_club_members(club_id)
