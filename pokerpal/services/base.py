"""
Base service class for PokerPal.

Services here run aggregate queries straight against the session factory
instead of going through the Database facade.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

class BaseService:
    """Base class for read-side services."""

    def __init__(self, session_factory):
        """
        Args:
            session_factory: Async session factory from Database.session_factory
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Read scope. Nothing is committed; the session closes on exit."""
        async with self.session_factory() as session:
            yield session
