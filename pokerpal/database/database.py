from typing import Optional, List, Any, Dict, Type
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy import select, delete, func, event
from contextlib import asynccontextmanager

from pokerpal.config import Config
from pokerpal.database.models import (
    Base, User, Club, Season, Player, Tournament, TournamentRegistration,
    PointsSystem, PointsAllocation, PendingAction, ActivityLog, ActivityEventType
)
from pokerpal.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine = None
        self.async_session = None

    @property
    def session_factory(self):
        return self.async_session

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        database_url = self.database_url or Config.get_async_database_url()

        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            future=True
        )

        if self.engine.dialect.name == 'sqlite':
            # SQLite only honours ON DELETE CASCADE / SET NULL with this pragma
            @event.listens_for(self.engine.sync_engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Create all tables
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context will be committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                await db.update_registration(reg_id, {...}, session=session)
                await db.create_activity(..., session=session)
                # Both writes commit together here

        The caller is responsible for passing the yielded session to all
        participating calls. Exceptions must propagate out of the context for
        rollback to occur.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Generic helpers

    @asynccontextmanager
    async def _read_scope(self, session: Optional[AsyncSession] = None):
        if session is not None:
            yield session
        else:
            async with self.get_session() as new_session:
                yield new_session

    @asynccontextmanager
    async def _write_scope(self, session: Optional[AsyncSession] = None):
        """Join the caller's transaction, or commit a new one on exit"""
        if session is not None:
            yield session
            await session.flush()
        else:
            async with self.transaction() as new_session:
                yield new_session
                await new_session.flush()

    async def _get(self, model: Type[Base], entity_id: str, session: Optional[AsyncSession] = None):
        async with self._read_scope(session) as s:
            return await s.get(model, entity_id)

    async def _list(self, query, session: Optional[AsyncSession] = None) -> List[Any]:
        async with self._read_scope(session) as s:
            result = await s.execute(query)
            return list(result.scalars().all())

    async def _create(self, model: Type[Base], data: Dict[str, Any], session: Optional[AsyncSession] = None):
        async with self._write_scope(session) as s:
            entity = model(**data)
            s.add(entity)
        return entity

    async def _update(self, model: Type[Base], entity_id: str, data: Dict[str, Any],
                      session: Optional[AsyncSession] = None):
        async with self._write_scope(session) as s:
            entity = await s.get(model, entity_id)
            if entity is None:
                return None
            for key, value in data.items():
                setattr(entity, key, value)
        return entity

    async def _delete(self, model: Type[Base], entity_id: str, session: Optional[AsyncSession] = None) -> bool:
        async with self._write_scope(session) as s:
            result = await s.execute(delete(model).where(model.id == entity_id))
        return result.rowcount > 0

    # User operations
    async def get_user(self, user_id: str, session: Optional[AsyncSession] = None) -> Optional[User]:
        return await self._get(User, user_id, session)

    async def get_user_by_email(self, email: str, session: Optional[AsyncSession] = None) -> Optional[User]:
        async with self._read_scope(session) as s:
            result = await s.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        return await self._list(select(User).order_by(User.created_at.desc()))

    async def create_user(self, data: Dict[str, Any], session: Optional[AsyncSession] = None) -> User:
        return await self._create(User, data, session)

    async def update_user(self, user_id: str, data: Dict[str, Any],
                          session: Optional[AsyncSession] = None) -> Optional[User]:
        return await self._update(User, user_id, data, session)

    # Club operations
    async def get_club(self, club_id: str, session: Optional[AsyncSession] = None) -> Optional[Club]:
        return await self._get(Club, club_id, session)

    async def get_club_by_slug(self, slug: str) -> Optional[Club]:
        async with self.get_session() as session:
            result = await session.execute(select(Club).where(Club.slug == slug))
            return result.scalar_one_or_none()

    async def list_clubs(self) -> List[Club]:
        return await self._list(select(Club).order_by(Club.name))

    async def create_club(self, data: Dict[str, Any]) -> Club:
        return await self._create(Club, data)

    async def update_club(self, club_id: str, data: Dict[str, Any]) -> Optional[Club]:
        return await self._update(Club, club_id, data)

    async def delete_club(self, club_id: str) -> bool:
        return await self._delete(Club, club_id)

    async def count_club_members(self, club_id: str) -> int:
        """Count distinct players registered in any of the club's tournaments"""
        async with self.get_session() as session:
            result = await session.execute(
                select(func.count(func.distinct(TournamentRegistration.player_id)))
                .join(Tournament, Tournament.id == TournamentRegistration.tournament_id)
                .where(Tournament.club_id == club_id)
            )
            return result.scalar() or 0

    # Season operations
    async def get_season(self, season_id: str, session: Optional[AsyncSession] = None) -> Optional[Season]:
        return await self._get(Season, season_id, session)

    async def list_seasons(self, club_id: Optional[str] = None) -> List[Season]:
        query = select(Season)
        if club_id:
            query = query.where(Season.club_id == club_id)
        return await self._list(query.order_by(Season.start_date.desc()))

    async def create_season(self, data: Dict[str, Any]) -> Season:
        return await self._create(Season, data)

    async def update_season(self, season_id: str, data: Dict[str, Any]) -> Optional[Season]:
        return await self._update(Season, season_id, data)

    async def delete_season(self, season_id: str) -> bool:
        return await self._delete(Season, season_id)

    # Player operations
    async def get_player(self, player_id: str, session: Optional[AsyncSession] = None) -> Optional[Player]:
        return await self._get(Player, player_id, session)

    async def get_player_by_phone(self, phone: str) -> Optional[Player]:
        async with self.get_session() as session:
            result = await session.execute(select(Player).where(Player.phone == phone).limit(1))
            return result.scalar_one_or_none()

    async def list_players(self) -> List[Player]:
        return await self._list(select(Player).order_by(Player.name))

    async def create_player(self, data: Dict[str, Any]) -> Player:
        return await self._create(Player, data)

    async def update_player(self, player_id: str, data: Dict[str, Any]) -> Optional[Player]:
        return await self._update(Player, player_id, data)

    async def delete_player(self, player_id: str) -> bool:
        return await self._delete(Player, player_id)

    # Tournament operations
    async def get_tournament(self, tournament_id: str,
                             session: Optional[AsyncSession] = None) -> Optional[Tournament]:
        return await self._get(Tournament, tournament_id, session)

    async def list_tournaments(self, club_id: Optional[str] = None,
                               season_id: Optional[str] = None) -> List[Tournament]:
        query = select(Tournament)
        if club_id:
            query = query.where(Tournament.club_id == club_id)
        elif season_id:
            query = query.where(Tournament.season_id == season_id)
        return await self._list(query.order_by(Tournament.start_date_time.desc()))

    async def create_tournament(self, data: Dict[str, Any]) -> Tournament:
        return await self._create(Tournament, data)

    async def update_tournament(self, tournament_id: str, data: Dict[str, Any],
                                session: Optional[AsyncSession] = None) -> Optional[Tournament]:
        return await self._update(Tournament, tournament_id, data, session)

    async def delete_tournament(self, tournament_id: str) -> bool:
        return await self._delete(Tournament, tournament_id)

    # Registration operations
    async def get_registration(self, registration_id: str,
                               session: Optional[AsyncSession] = None) -> Optional[TournamentRegistration]:
        return await self._get(TournamentRegistration, registration_id, session)

    async def list_registrations(self, tournament_id: str, with_players: bool = False,
                                 session: Optional[AsyncSession] = None) -> List[TournamentRegistration]:
        query = (
            select(TournamentRegistration)
            .where(TournamentRegistration.tournament_id == tournament_id)
            .order_by(TournamentRegistration.registration_time)
        )
        if with_players:
            query = query.options(selectinload(TournamentRegistration.player))
        return await self._list(query, session)

    async def list_player_registrations(self, player_id: str) -> List[TournamentRegistration]:
        return await self._list(
            select(TournamentRegistration)
            .where(TournamentRegistration.player_id == player_id)
            .order_by(TournamentRegistration.registration_time.desc())
        )

    async def get_player_registration(self, tournament_id: str, player_id: str,
                                      session: Optional[AsyncSession] = None) -> Optional[TournamentRegistration]:
        async with self._read_scope(session) as s:
            result = await s.execute(
                select(TournamentRegistration).where(
                    TournamentRegistration.tournament_id == tournament_id,
                    TournamentRegistration.player_id == player_id
                )
            )
            return result.scalar_one_or_none()

    async def create_registration(self, data: Dict[str, Any],
                                  session: Optional[AsyncSession] = None) -> TournamentRegistration:
        return await self._create(TournamentRegistration, data, session)

    async def update_registration(self, registration_id: str, data: Dict[str, Any],
                                  session: Optional[AsyncSession] = None) -> Optional[TournamentRegistration]:
        return await self._update(TournamentRegistration, registration_id, data, session)

    async def delete_registration(self, registration_id: str) -> bool:
        return await self._delete(TournamentRegistration, registration_id)

    async def count_confirmed_registrations(self) -> Dict[str, int]:
        """Map tournament id to its number of payment-confirmed registrations"""
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentRegistration.tournament_id, func.count(TournamentRegistration.id))
                .where(TournamentRegistration.payment_confirmed.is_(True))
                .group_by(TournamentRegistration.tournament_id)
            )
            return {tournament_id: count for tournament_id, count in result.all()}

    async def list_all_registrations(self) -> List[TournamentRegistration]:
        return await self._list(select(TournamentRegistration))

    # Points system operations
    async def get_points_system(self, points_system_id: str,
                                session: Optional[AsyncSession] = None) -> Optional[PointsSystem]:
        return await self._get(PointsSystem, points_system_id, session)

    async def list_points_systems(self, season_id: str) -> List[PointsSystem]:
        return await self._list(
            select(PointsSystem)
            .where(PointsSystem.season_id == season_id)
            .order_by(PointsSystem.created_at)
        )

    async def create_points_system(self, data: Dict[str, Any]) -> PointsSystem:
        return await self._create(PointsSystem, data)

    async def update_points_system(self, points_system_id: str, data: Dict[str, Any]) -> Optional[PointsSystem]:
        return await self._update(PointsSystem, points_system_id, data)

    async def delete_points_system(self, points_system_id: str) -> bool:
        return await self._delete(PointsSystem, points_system_id)

    async def get_allocation(self, allocation_id: str) -> Optional[PointsAllocation]:
        return await self._get(PointsAllocation, allocation_id)

    async def list_allocations(self, points_system_id: str,
                               session: Optional[AsyncSession] = None) -> List[PointsAllocation]:
        return await self._list(
            select(PointsAllocation)
            .where(PointsAllocation.points_system_id == points_system_id)
            .order_by(PointsAllocation.position),
            session
        )

    async def create_allocation(self, data: Dict[str, Any]) -> PointsAllocation:
        return await self._create(PointsAllocation, data)

    async def update_allocation(self, allocation_id: str, data: Dict[str, Any]) -> Optional[PointsAllocation]:
        return await self._update(PointsAllocation, allocation_id, data)

    async def delete_allocation(self, allocation_id: str) -> bool:
        return await self._delete(PointsAllocation, allocation_id)

    # Pending action operations
    async def get_pending_action(self, action_id: str,
                                 session: Optional[AsyncSession] = None) -> Optional[PendingAction]:
        return await self._get(PendingAction, action_id, session)

    async def list_pending_actions(self, tournament_id: str) -> List[PendingAction]:
        return await self._list(
            select(PendingAction)
            .where(PendingAction.tournament_id == tournament_id)
            .options(selectinload(PendingAction.player), selectinload(PendingAction.target_player))
            .order_by(PendingAction.timestamp)
        )

    async def create_pending_action(self, data: Dict[str, Any]) -> PendingAction:
        return await self._create(PendingAction, data)

    async def delete_pending_action(self, action_id: str, session: Optional[AsyncSession] = None) -> bool:
        return await self._delete(PendingAction, action_id, session)

    # Activity log operations
    async def list_activity(self, tournament_id: str) -> List[ActivityLog]:
        return await self._list(
            select(ActivityLog)
            .where(ActivityLog.tournament_id == tournament_id)
            .options(selectinload(ActivityLog.player))
            .order_by(ActivityLog.timestamp.desc())
        )

    async def create_activity(
        self,
        tournament_id: str,
        event_type: ActivityEventType,
        description: str,
        player_id: Optional[str] = None,
        event_data: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> ActivityLog:
        return await self._create(ActivityLog, {
            'tournament_id': tournament_id,
            'player_id': player_id,
            'event_type': event_type,
            'event_data': event_data,
            'description': description,
        }, session)
