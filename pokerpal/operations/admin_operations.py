"""
Administrative Operations Module

Business logic for the admin user-management panel.

Key functionality:
- list_accounts(): users and players merged into one list, newest first
- update_user(): role, status and contact changes with email uniqueness
- impersonate() / stop_impersonation(): switch a session to another user and back

Impersonation works on the session mapping directly. The first admin to start
impersonating is remembered, so nested impersonation always returns to them.
"""

from datetime import datetime
from typing import Any, Dict, List, MutableMapping

from pokerpal.constants import SessionKeys
from pokerpal.data_models.accounts import AccountSummary
from pokerpal.database.models import User, UserRole
from pokerpal.operations.auth_operations import normalize_email
from pokerpal.utils.exceptions import ConflictError, InvalidDataError, NotFoundError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

# Role shown for players that have no login account
CLUB_MEMBER_ROLE = 'club_member'


class AdminOperationError(InvalidDataError):
    """Raised when an admin operation is not applicable"""
    pass


def start_session(session: MutableMapping[str, Any], user: User) -> None:
    """Point the session at a user, keeping any impersonation markers."""
    session[SessionKeys.USER_ID] = user.id
    session[SessionKeys.ROLE] = user.role.value


def is_impersonating(session: MutableMapping[str, Any]) -> bool:
    return SessionKeys.ORIGINAL_ADMIN_ID in session


class AdminOperations:
    """Business logic operations for user management and impersonation."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    async def list_accounts(self) -> List[AccountSummary]:
        users = await self.db.list_users()
        players = await self.db.list_players()

        accounts = [
            AccountSummary(
                id=user.id,
                type='user',
                name=user.name,
                email=user.email,
                phone=user.phone,
                image_url=user.image_url,
                role=user.role.value,
                is_active=bool(user.is_active),
                created_at=user.created_at,
                last_login_at=user.last_login_at,
            )
            for user in users
        ]
        accounts.extend(
            AccountSummary(
                id=player.id,
                type='player',
                name=player.name,
                email=player.email,
                phone=player.phone,
                image_url=player.image_url,
                role=CLUB_MEMBER_ROLE,
                is_active=True,
                user_id=player.user_id,
                created_at=player.created_at,
            )
            for player in players
        )

        accounts.sort(key=lambda account: account.created_at or datetime.min, reverse=True)
        return accounts

    async def update_user(self, user_id: str, data: Dict[str, Any]) -> User:
        """
        Apply an admin edit to a user account.

        Args:
            user_id: Account to change
            data: Any of name, email, phone, role, is_active, image_url

        Raises:
            AdminOperationError: If the role is not admin or full_member
            ConflictError: If the email belongs to another user
            NotFoundError: If the user does not exist
        """
        user = await self.db.get_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        changes = dict(data)
        if 'role' in changes:
            try:
                changes['role'] = UserRole(getattr(changes['role'], 'value', changes['role']))
            except ValueError:
                raise AdminOperationError(f"Invalid role {changes['role']!r}", "Invalid role")

        if changes.get('email'):
            changes['email'] = normalize_email(changes['email'])
            existing = await self.db.get_user_by_email(changes['email'])
            if existing and existing.id != user_id:
                raise ConflictError(f"Email already in use: {changes['email']}", "Email already in use")

        user = await self.db.update_user(user_id, changes)
        self.logger.info(f"Admin updated user {user_id}: {sorted(changes)}")
        return user

    async def impersonate(self, session: MutableMapping[str, Any], target_user_id: str) -> User:
        target = await self.db.get_user(target_user_id)
        if not target:
            raise NotFoundError("User", target_user_id)

        if not is_impersonating(session):
            session[SessionKeys.ORIGINAL_ADMIN_ID] = session.get(SessionKeys.USER_ID)
            session[SessionKeys.ORIGINAL_ADMIN_ROLE] = session.get(SessionKeys.ROLE)

        admin_id = session[SessionKeys.ORIGINAL_ADMIN_ID]
        start_session(session, target)
        self.logger.info(f"Admin {admin_id} is now impersonating user {target.id}")
        return target

    async def stop_impersonation(self, session: MutableMapping[str, Any]) -> User:
        if not is_impersonating(session):
            raise AdminOperationError("Stop impersonation without active impersonation",
                                      "Not currently impersonating")

        admin_id = session.pop(SessionKeys.ORIGINAL_ADMIN_ID)
        admin_role = session.pop(SessionKeys.ORIGINAL_ADMIN_ROLE, None)
        session[SessionKeys.USER_ID] = admin_id
        session[SessionKeys.ROLE] = admin_role

        admin = await self.db.get_user(admin_id)
        if not admin:
            session.clear()
            raise NotFoundError("User", admin_id)

        self.logger.info(f"Admin {admin_id} stopped impersonating")
        return admin
