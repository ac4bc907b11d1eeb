"""
Request dependencies shared by the routers.

The database and image storage live on ``app.state``; the acting user is
named by the signed session cookie and reloaded from the database.
"""

from typing import Optional

from fastapi import Depends, Request

from pokerpal.constants import SessionKeys
from pokerpal.data_models.accounts import SessionUser
from pokerpal.database.database import Database
from pokerpal.database.models import UserRole
from pokerpal.operations import (
    AdminOperations, AuthOperations, ClubOperations, PlayerOperations,
    RegistrationOperations, SeasonOperations, TournamentOperations,
)
from pokerpal.services.image_storage import ImageStorage
from pokerpal.utils.exceptions import AuthenticationError, PermissionDeniedError


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_storage(request: Request) -> ImageStorage:
    return request.app.state.storage


def current_user(request: Request) -> Optional[SessionUser]:
    user_id = request.session.get(SessionKeys.USER_ID)
    if not user_id:
        return None
    return SessionUser(id=user_id, role=request.session.get(SessionKeys.ROLE) or UserRole.FULL_MEMBER.value)


async def require_auth(
    request: Request,
    user: Optional[SessionUser] = Depends(current_user),
    db: Database = Depends(get_db),
) -> SessionUser:
    """Reload the session user so role changes and deletions apply to cookies already issued."""
    if user is None:
        raise AuthenticationError()

    stored = await db.get_user(user.id)
    if stored is None:
        request.session.clear()
        raise AuthenticationError("User not found")
    return SessionUser(id=stored.id, role=stored.role.value)


def require_admin(user: SessionUser = Depends(require_auth)) -> SessionUser:
    """Admin rights follow the stored role of the acting user, so an impersonating admin loses them."""
    if not user.is_admin:
        raise PermissionDeniedError(f"User {user.id} is not an admin", "Admin access required")
    return user


def auth_operations(db: Database = Depends(get_db)) -> AuthOperations:
    return AuthOperations(db)


def admin_operations(db: Database = Depends(get_db)) -> AdminOperations:
    return AdminOperations(db)


def club_operations(db: Database = Depends(get_db)) -> ClubOperations:
    return ClubOperations(db)


def season_operations(db: Database = Depends(get_db)) -> SeasonOperations:
    return SeasonOperations(db)


def player_operations(db: Database = Depends(get_db)) -> PlayerOperations:
    return PlayerOperations(db)


def tournament_operations(db: Database = Depends(get_db)) -> TournamentOperations:
    return TournamentOperations(db)


def registration_operations(db: Database = Depends(get_db)) -> RegistrationOperations:
    return RegistrationOperations(db)
