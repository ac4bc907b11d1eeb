import uuid
from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, Numeric,
    ForeignKey, Enum as SQLEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
from enum import Enum

Base = declarative_base()

def generate_id() -> str:
    return str(uuid.uuid4())

def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds, so same-second events keep their order"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

class UserRole(Enum):
    ADMIN = "admin"
    FULL_MEMBER = "full_member"

class TournamentStatus(Enum):
    SCHEDULED = "scheduled"
    REGISTRATION = "registration"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class RakeType(Enum):
    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED = "fixed"

class PayoutStructure(Enum):
    STANDARD = "standard"
    TOP3 = "top3"
    TOP5 = "top5"
    TOP8 = "top8"
    TOP9 = "top9"
    CUSTOM = "custom"

class PendingActionType(Enum):
    REBUY = "rebuy"
    ADDON = "addon"
    KNOCKOUT = "knockout"

class ActivityEventType(Enum):
    REGISTRATION = "registration"
    ELIMINATION = "elimination"
    REBUY = "rebuy"
    ADDON = "addon"
    STATUS_CHANGE = "status_change"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PLAYER_RESTORED = "player_restored"
    PRIZE_POOL_LOCKED = "prize_pool_locked"
    HIGH_HAND = "high_hand"

Money = Numeric(10, 2)

class User(Base):
    """Full member with a login"""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(50))
    image_url = Column(Text)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.FULL_MEMBER)
    is_active = Column(Boolean, default=True)

    # Metadata
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User(email='{self.email}', role={self.role.value if self.role else None})>"

class Club(Base):
    __tablename__ = 'clubs'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    description = Column(Text)
    image_url = Column(Text)
    timezone = Column(String(100))  # Derived from the address by the client
    address = Column(Text)

    # Social links
    discord_url = Column(Text)
    twitter_url = Column(Text)
    facebook_url = Column(Text)
    instagram_url = Column(Text)
    website_url = Column(Text)

    owner_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Club(name='{self.name}', slug='{self.slug}')>"

class Season(Base):
    __tablename__ = 'seasons'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    club_id = Column(String(36), ForeignKey('clubs.id', ondelete='CASCADE'), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Season(name='{self.name}', club_id='{self.club_id}')>"

class Player(Base):
    """Club member, no login required"""
    __tablename__ = 'players'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    email = Column(String(255))
    phone = Column(String(50), index=True)
    image_url = Column(Text)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))  # Set once upgraded to full member
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Player(name='{self.name}')>"

class Tournament(Base):
    __tablename__ = 'tournaments'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    image_url = Column(Text)

    club_id = Column(String(36), ForeignKey('clubs.id', ondelete='CASCADE'), nullable=False, index=True)
    season_id = Column(String(36), ForeignKey('seasons.id', ondelete='SET NULL'), index=True)
    points_system_id = Column(String(36), ForeignKey('points_systems.id', ondelete='SET NULL'))

    start_date_time = Column(DateTime, nullable=False)
    status = Column(SQLEnum(TournamentStatus), nullable=False, default=TournamentStatus.SCHEDULED)

    # Pricing
    buy_in_amount = Column(Money, nullable=False)
    rebuy_amount = Column(Money)
    addon_amount = Column(Money)
    max_rebuys = Column(Integer)
    rebuy_period_minutes = Column(Integer)

    # Rake policy per entry kind
    rake_type = Column(SQLEnum(RakeType), nullable=False, default=RakeType.NONE)
    rake_amount = Column(Money, default=0)
    rebuy_rake_type = Column(SQLEnum(RakeType), default=RakeType.NONE)
    rebuy_rake_amount = Column(Money, default=0)
    addon_rake_type = Column(SQLEnum(RakeType), default=RakeType.NONE)
    addon_rake_amount = Column(Money, default=0)

    # Payouts
    payout_structure = Column(SQLEnum(PayoutStructure), nullable=False, default=PayoutStructure.STANDARD)
    custom_payouts = Column(Text)  # JSON list of percentages

    # High hand side pot
    enable_high_hand = Column(Boolean, default=False)
    high_hand_amount = Column(Money)
    high_hand_rake_type = Column(SQLEnum(RakeType), default=RakeType.NONE)
    high_hand_rake_amount = Column(Money, default=0)
    high_hand_payouts = Column(Integer, default=1)

    enable_late_registration = Column(Boolean, default=False)
    track_points = Column(Boolean, default=True)
    min_players = Column(Integer, default=8)
    max_players = Column(Integer, nullable=False)

    # Prize pool lock
    prize_pool_locked = Column(Boolean, default=False)
    prize_pool_locked_at = Column(DateTime)
    manual_prize_pool = Column(Money)

    # Location
    use_club_address = Column(Boolean, default=True)
    address = Column(Text)

    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint('high_hand_payouts BETWEEN 1 AND 4', name='ck_tournament_high_hand_payouts'),
    )

    def __repr__(self):
        return f"<Tournament(name='{self.name}', status={self.status.value if self.status else None})>"

class TournamentRegistration(Base):
    __tablename__ = 'tournament_registrations'

    id = Column(String(36), primary_key=True, default=generate_id)
    tournament_id = Column(String(36), ForeignKey('tournaments.id', ondelete='CASCADE'), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey('players.id', ondelete='CASCADE'), nullable=False, index=True)
    registration_time = Column(DateTime, default=utcnow)

    # Entries
    buy_ins = Column(Integer, default=1)
    rebuys = Column(Integer, default=0)
    addons = Column(Integer, default=0)

    # Outcome
    final_position = Column(Integer)
    prize_amount = Column(Money)
    points_awarded = Column(Integer)

    # Elimination tracking
    is_eliminated = Column(Boolean, default=False)
    elimination_time = Column(DateTime)
    eliminated_by = Column(String(36), ForeignKey('players.id', ondelete='SET NULL'))
    knockouts = Column(Integer, default=0)

    # Self-service registration / high hand
    entering_high_hands = Column(Boolean, default=False)
    payment_confirmed = Column(Boolean, default=False)
    high_hand_winner = Column(Boolean, default=False)
    high_hand_amount = Column(Money)

    player = relationship("Player", foreign_keys=[player_id])

    __table_args__ = (UniqueConstraint('tournament_id', 'player_id'),)

    def __repr__(self):
        return f"<TournamentRegistration(tournament_id='{self.tournament_id}', player_id='{self.player_id}')>"

class PointsSystem(Base):
    __tablename__ = 'points_systems'

    id = Column(String(36), primary_key=True, default=generate_id)
    season_id = Column(String(36), ForeignKey('seasons.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    participation_points = Column(Integer, default=0)
    knockout_points = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<PointsSystem(name='{self.name}')>"

class PointsAllocation(Base):
    __tablename__ = 'points_allocations'

    id = Column(String(36), primary_key=True, default=generate_id)
    points_system_id = Column(String(36), ForeignKey('points_systems.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    position_end = Column(Integer)  # Inclusive end of a position range, e.g. 4-10
    points = Column(Integer, nullable=False)
    description = Column(Text)

    def covers(self, position: int) -> bool:
        if self.position_end:
            return self.position <= position <= self.position_end
        return position == self.position

    def __repr__(self):
        return f"<PointsAllocation(position={self.position}, end={self.position_end}, points={self.points})>"

class PendingAction(Base):
    """Player-submitted rebuy/addon/knockout waiting for an organizer"""
    __tablename__ = 'pending_actions'

    id = Column(String(36), primary_key=True, default=generate_id)
    tournament_id = Column(String(36), ForeignKey('tournaments.id', ondelete='CASCADE'), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    action_type = Column(SQLEnum(PendingActionType), nullable=False)
    target_player_id = Column(String(36), ForeignKey('players.id', ondelete='CASCADE'))
    timestamp = Column(DateTime, default=utcnow)

    player = relationship("Player", foreign_keys=[player_id])
    target_player = relationship("Player", foreign_keys=[target_player_id])

    def __repr__(self):
        return f"<PendingAction(type={self.action_type.value}, player_id='{self.player_id}')>"

class ActivityLog(Base):
    __tablename__ = 'activity_log'

    id = Column(String(36), primary_key=True, default=generate_id)
    tournament_id = Column(String(36), ForeignKey('tournaments.id', ondelete='CASCADE'), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey('players.id', ondelete='CASCADE'))
    event_type = Column(SQLEnum(ActivityEventType), nullable=False)
    event_data = Column(Text)  # JSON string for additional event details
    description = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow, index=True)

    player = relationship("Player", foreign_keys=[player_id])

    def __repr__(self):
        return f"<ActivityLog(type={self.event_type.value}, description='{self.description}')>"
