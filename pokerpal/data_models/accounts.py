"""
Account data models.

Rows of the admin user-management list, where user accounts and players
without an account are shown side by side.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AccountSummary:
    """One row of the merged users and players list."""
    id: str
    type: str  # 'user' or 'player'
    name: str
    role: str
    is_active: bool
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionUser:
    """The user a request acts as, reloaded from the database on each request."""
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'
