"""
Auth Operations Module

Business logic for user accounts: registration, credential checks, profile
changes and password changes.

Key functionality:
- hash_password() / verify_password(): bcrypt hashing at Config.BCRYPT_ROUNDS
- validate_password_strength(): length and character class rules
- create_user(): new full member with a unique email
- authenticate(): credential check that stamps last_login_at
- update_profile() / change_password(): self-service account edits

Hashing runs in a worker thread so the event loop is never blocked by bcrypt.
"""

import asyncio
import re
from typing import List, Optional

import bcrypt

from pokerpal.config import Config
from pokerpal.constants import PasswordConstants
from pokerpal.database.models import User, UserRole, utcnow
from pokerpal.utils.exceptions import (
    AccountDisabledError, AuthenticationError, ConflictError, InvalidDataError, NotFoundError
)
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)


class WeakPasswordError(InvalidDataError):
    """Raised when a password fails the strength rules"""

    def __init__(self, errors: List[str]):
        super().__init__("Password does not meet requirements", details=errors)
        self.errors = errors


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_password_strength(password: str) -> List[str]:
    """Return a list of unmet password rules, empty when the password is strong enough."""
    errors = []
    if len(password) < PasswordConstants.MIN_LENGTH:
        errors.append(f"Password must be at least {PasswordConstants.MIN_LENGTH} characters long")
    if not re.search(r'[A-Z]', password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r'\d', password):
        errors.append("Password must contain at least one number")
    return errors


def _hash_sync(password: str) -> str:
    salt = bcrypt.gensalt(rounds=Config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def _verify_sync(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class AuthOperations:
    """
    Business logic operations for user accounts.

    Users are the people who log in; players are tournament participants and
    may exist without an account.
    """

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    async def hash_password(self, password: str) -> str:
        return await asyncio.to_thread(_hash_sync, password)

    async def verify_password(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(_verify_sync, password, password_hash)

    def ensure_strong_password(self, password: str) -> None:
        errors = validate_password_strength(password)
        if errors:
            raise WeakPasswordError(errors)

    async def get_user(self, user_id: str) -> User:
        user = await self.db.get_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.FULL_MEMBER
    ) -> User:
        """
        Create a user account.

        Args:
            email: Login email, stored lower-cased
            password: Plain password, checked against the strength rules
            name: Display name
            phone: Optional phone number
            role: Account role, full member unless stated

        Returns:
            The created User

        Raises:
            WeakPasswordError: If the password fails the strength rules
            ConflictError: If the email is already registered
        """
        email = normalize_email(email)
        self.ensure_strong_password(password)

        if await self.db.get_user_by_email(email):
            raise ConflictError(f"Email already registered: {email}", "Email already registered")

        user = await self.db.create_user({
            'email': email,
            'password_hash': await self.hash_password(password),
            'name': name.strip(),
            'phone': phone or None,
            'role': role,
            'is_active': True,
        })
        self.logger.info(f"Created user {user.id} ({email}) with role {role.value}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials and record the login.

        Raises:
            AuthenticationError: Unknown email or wrong password
            AccountDisabledError: Credentials are right but the account is disabled
        """
        user = await self.db.get_user_by_email(normalize_email(email))
        if not user or not await self.verify_password(password, user.password_hash):
            self.logger.info(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            self.logger.info(f"Login refused for disabled user {user.id}")
            raise AccountDisabledError()

        user = await self.db.update_user(user.id, {'last_login_at': utcnow()})
        self.logger.info(f"User {user.id} logged in")
        return user

    async def update_profile(self, user_id: str, name: str, email: str,
                             phone: Optional[str] = None) -> User:
        email = normalize_email(email)
        user = await self.get_user(user_id)

        if email != user.email:
            existing = await self.db.get_user_by_email(email)
            if existing and existing.id != user_id:
                raise ConflictError(f"Email already in use: {email}", "Email already in use")

        user = await self.db.update_user(user_id, {
            'name': name.strip(),
            'email': email,
            'phone': phone or None,
        })
        self.logger.info(f"Updated profile for user {user_id}")
        return user

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = await self.get_user(user_id)
        self.ensure_strong_password(new_password)

        if not await self.verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        await self.db.update_user(user_id, {'password_hash': await self.hash_password(new_password)})
        self.logger.info(f"Changed password for user {user_id}")
