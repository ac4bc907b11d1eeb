"""
Request and response models for the HTTP API.

JSON bodies use camelCase keys; Python code sees snake_case attributes.
Update models have every field optional and are applied with
``model_dump(exclude_unset=True)`` so only the keys a client sends change.
Money travels as decimal strings in responses.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, ClassVar, List, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

from pokerpal.database.models import (
    ActivityEventType, PayoutStructure, PendingActionType, RakeType, TournamentStatus, UserRole
)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _iso_utc(value: datetime) -> str:
    return value.isoformat() + 'Z'


def _parse_json_text(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _dump_json_list(value: Any) -> Any:
    if isinstance(value, list):
        return json.dumps(value)
    return value


# Stored as naive UTC, sent back with an explicit Z
UTCDateTime = Annotated[
    datetime,
    AfterValidator(_to_naive_utc),
    PlainSerializer(_iso_utc, return_type=str, when_used='json'),
]
Money = Annotated[Decimal, Field(ge=0)]
JSONText = Annotated[Any, BeforeValidator(_parse_json_text)]
CustomPayouts = Annotated[Optional[Union[str, list]], AfterValidator(_dump_json_list)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    # Optional on update, but an explicit null would blank a required column
    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='after')
    def reject_explicit_nulls(self):
        for field in self.NOT_NULL:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent, by attribute name."""
        return self.model_dump(exclude_unset=True)


class MessageResponse(CamelModel):
    message: str


# Auth

class RegisterRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    phone: Optional[str] = None


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    phone: Optional[str] = None
    image_url: Optional[str] = None
    role: UserRole
    is_active: bool = True
    last_login_at: Optional[UTCDateTime] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None


class CurrentUserResponse(UserResponse):
    impersonating: bool = False
    original_admin_id: Optional[str] = None


class UserEnvelope(CamelModel):
    message: str
    user: UserResponse


# Admin

class AccountResponse(CamelModel):
    id: str
    type: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    role: str
    is_active: bool
    user_id: Optional[str] = None
    created_at: Optional[UTCDateTime] = None
    last_login_at: Optional[UTCDateTime] = None


class AdminUserUpdate(CamelModel):
    NOT_NULL = ('name', 'email', 'role', 'is_active')

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


# Clubs

class ClubFields(CamelModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    timezone: Optional[str] = None
    address: Optional[str] = None
    discord_url: Optional[str] = None
    twitter_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    website_url: Optional[str] = None


class ClubCreate(ClubFields):
    name: str = Field(min_length=1)
    slug: Optional[str] = None


class ClubUpdate(ClubFields):
    NOT_NULL = ('name', 'slug')

    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None


class ClubResponse(ClubFields):
    id: str
    name: str
    slug: str
    owner_id: Optional[str] = None
    created_at: Optional[UTCDateTime] = None


class CountResponse(CamelModel):
    count: int


# Seasons and points

class SeasonCreate(CamelModel):
    name: str = Field(min_length=1)
    club_id: str
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    is_active: bool = True


class SeasonUpdate(CamelModel):
    NOT_NULL = ('name', 'club_id', 'start_date', 'is_active')

    name: Optional[str] = Field(default=None, min_length=1)
    club_id: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    is_active: Optional[bool] = None


class SeasonResponse(CamelModel):
    id: str
    name: str
    club_id: str
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    is_active: bool = True
    created_at: Optional[UTCDateTime] = None


class PointsSystemCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    participation_points: int = Field(default=0, ge=0)
    knockout_points: int = Field(default=0, ge=0)


class PointsSystemUpdate(CamelModel):
    NOT_NULL = ('name', 'participation_points', 'knockout_points')

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    participation_points: Optional[int] = Field(default=None, ge=0)
    knockout_points: Optional[int] = Field(default=None, ge=0)


class PointsSystemResponse(CamelModel):
    id: str
    season_id: str
    name: str
    description: Optional[str] = None
    participation_points: int = 0
    knockout_points: int = 0
    created_at: Optional[UTCDateTime] = None


class AllocationCreate(CamelModel):
    position: int = Field(ge=1)
    position_end: Optional[int] = None
    points: int
    description: Optional[str] = None


class AllocationUpdate(CamelModel):
    NOT_NULL = ('position', 'points')

    position: Optional[int] = Field(default=None, ge=1)
    position_end: Optional[int] = None
    points: Optional[int] = None
    description: Optional[str] = None


class AllocationResponse(CamelModel):
    id: str
    points_system_id: str
    position: int
    position_end: Optional[int] = None
    points: int
    description: Optional[str] = None


# Players

class PlayerCreate(CamelModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None


class PlayerUpdate(CamelModel):
    NOT_NULL = ('name',)

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None


class PlayerResponse(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[UTCDateTime] = None


# Tournaments

class TournamentFields(CamelModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    season_id: Optional[str] = None
    points_system_id: Optional[str] = None

    rebuy_amount: Optional[Money] = None
    addon_amount: Optional[Money] = None
    max_rebuys: Optional[int] = Field(default=None, ge=0)
    rebuy_period_minutes: Optional[int] = Field(default=None, ge=0)

    custom_payouts: CustomPayouts = None
    high_hand_amount: Optional[Money] = None
    manual_prize_pool: Optional[Money] = None
    address: Optional[str] = None


class TournamentCreate(TournamentFields):
    name: str = Field(min_length=1)
    club_id: str
    start_date_time: UTCDateTime
    status: TournamentStatus = TournamentStatus.SCHEDULED
    buy_in_amount: Money
    max_players: int = Field(gt=0)
    min_players: int = Field(default=8, ge=0)

    rake_type: RakeType = RakeType.NONE
    rake_amount: Money = Decimal('0')
    rebuy_rake_type: RakeType = RakeType.NONE
    rebuy_rake_amount: Money = Decimal('0')
    addon_rake_type: RakeType = RakeType.NONE
    addon_rake_amount: Money = Decimal('0')

    payout_structure: PayoutStructure = PayoutStructure.STANDARD
    enable_high_hand: bool = False
    high_hand_rake_type: RakeType = RakeType.NONE
    high_hand_rake_amount: Money = Decimal('0')
    high_hand_payouts: int = Field(default=1, ge=1, le=4)

    enable_late_registration: bool = False
    track_points: bool = True
    prize_pool_locked: bool = False
    use_club_address: bool = True


class TournamentUpdate(TournamentFields):
    NOT_NULL = (
        'name', 'club_id', 'start_date_time', 'status', 'buy_in_amount', 'max_players', 'min_players',
        'rake_type', 'rake_amount', 'rebuy_rake_type', 'rebuy_rake_amount', 'addon_rake_type',
        'addon_rake_amount', 'payout_structure', 'enable_high_hand', 'high_hand_rake_type',
        'high_hand_rake_amount', 'high_hand_payouts', 'enable_late_registration', 'track_points',
        'prize_pool_locked', 'use_club_address',
    )

    name: Optional[str] = Field(default=None, min_length=1)
    club_id: Optional[str] = None
    start_date_time: Optional[UTCDateTime] = None
    status: Optional[TournamentStatus] = None
    buy_in_amount: Optional[Money] = None
    max_players: Optional[int] = Field(default=None, gt=0)
    min_players: Optional[int] = Field(default=None, ge=0)

    rake_type: Optional[RakeType] = None
    rake_amount: Optional[Money] = None
    rebuy_rake_type: Optional[RakeType] = None
    rebuy_rake_amount: Optional[Money] = None
    addon_rake_type: Optional[RakeType] = None
    addon_rake_amount: Optional[Money] = None

    payout_structure: Optional[PayoutStructure] = None
    enable_high_hand: Optional[bool] = None
    high_hand_rake_type: Optional[RakeType] = None
    high_hand_rake_amount: Optional[Money] = None
    high_hand_payouts: Optional[int] = Field(default=None, ge=1, le=4)

    enable_late_registration: Optional[bool] = None
    track_points: Optional[bool] = None
    prize_pool_locked: Optional[bool] = None
    use_club_address: Optional[bool] = None


class TournamentResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    club_id: str
    season_id: Optional[str] = None
    points_system_id: Optional[str] = None
    start_date_time: UTCDateTime
    status: TournamentStatus

    buy_in_amount: Decimal
    rebuy_amount: Optional[Decimal] = None
    addon_amount: Optional[Decimal] = None
    max_rebuys: Optional[int] = None
    rebuy_period_minutes: Optional[int] = None

    rake_type: RakeType
    rake_amount: Optional[Decimal] = None
    rebuy_rake_type: Optional[RakeType] = None
    rebuy_rake_amount: Optional[Decimal] = None
    addon_rake_type: Optional[RakeType] = None
    addon_rake_amount: Optional[Decimal] = None

    payout_structure: PayoutStructure
    custom_payouts: Optional[JSONText] = None

    enable_high_hand: bool = False
    high_hand_amount: Optional[Decimal] = None
    high_hand_rake_type: Optional[RakeType] = None
    high_hand_rake_amount: Optional[Decimal] = None
    high_hand_payouts: int = 1

    enable_late_registration: bool = False
    track_points: bool = True
    min_players: Optional[int] = None
    max_players: int

    prize_pool_locked: bool = False
    prize_pool_locked_at: Optional[UTCDateTime] = None
    manual_prize_pool: Optional[Decimal] = None

    use_club_address: bool = True
    address: Optional[str] = None
    created_at: Optional[UTCDateTime] = None


class TournamentListResponse(TournamentResponse):
    confirmed_player_count: int = 0


class HighHandPoolResponse(CamelModel):
    entrants: int
    gross: Decimal
    rake: Decimal
    net: Decimal
    payouts: int
    per_winner: Decimal


class PayoutLineResponse(CamelModel):
    position: int
    percentage: float
    amount: Decimal


class PrizePoolResponse(CamelModel):
    total_buy_ins: int
    total_rebuys: int
    total_addons: int
    buy_in_total: Decimal
    rebuy_total: Decimal
    addon_total: Decimal
    gross_total: Decimal
    buy_in_rake: Decimal
    rebuy_rake: Decimal
    addon_rake: Decimal
    rake: Decimal
    net_prize_pool: Decimal
    is_manual: bool
    high_hand: HighHandPoolResponse
    payouts: List[PayoutLineResponse]


class DashboardStatsResponse(CamelModel):
    active_tournaments: int
    total_players: int
    total_prize_pool: Decimal
    active_clubs: int


# Registrations

class RegistrationCreate(CamelModel):
    player_id: str
    buy_ins: int = Field(default=1, ge=1)
    entering_high_hands: bool = False
    payment_confirmed: bool = False


class RegistrationUpdate(CamelModel):
    NOT_NULL = (
        'buy_ins', 'rebuys', 'addons', 'is_eliminated', 'knockouts',
        'entering_high_hands', 'payment_confirmed', 'high_hand_winner',
    )

    buy_ins: Optional[int] = Field(default=None, ge=0)
    rebuys: Optional[int] = Field(default=None, ge=0)
    addons: Optional[int] = Field(default=None, ge=0)
    final_position: Optional[int] = Field(default=None, ge=1)
    prize_amount: Optional[Money] = None
    points_awarded: Optional[int] = None
    is_eliminated: Optional[bool] = None
    elimination_time: Optional[UTCDateTime] = None
    eliminated_by: Optional[str] = None
    knockouts: Optional[int] = Field(default=None, ge=0)
    entering_high_hands: Optional[bool] = None
    payment_confirmed: Optional[bool] = None
    high_hand_winner: Optional[bool] = None
    high_hand_amount: Optional[Money] = None


class RegistrationResponse(CamelModel):
    id: str
    tournament_id: str
    player_id: str
    registration_time: Optional[UTCDateTime] = None
    buy_ins: int = 1
    rebuys: int = 0
    addons: int = 0
    final_position: Optional[int] = None
    prize_amount: Optional[Decimal] = None
    points_awarded: Optional[int] = None
    is_eliminated: bool = False
    elimination_time: Optional[UTCDateTime] = None
    eliminated_by: Optional[str] = None
    knockouts: int = 0
    entering_high_hands: bool = False
    payment_confirmed: bool = False
    high_hand_winner: bool = False
    high_hand_amount: Optional[Decimal] = None


class RegistrationWithPlayerResponse(RegistrationResponse):
    player: Optional[PlayerResponse] = None


class PendingRegistrationResponse(RegistrationWithPlayerResponse):
    amount_owed: Decimal


class ConfirmedRegistrationResponse(RegistrationWithPlayerResponse):
    amount_paid: Decimal


class FinalizeResponse(CamelModel):
    success: bool = True
    message: str
    tournament: TournamentResponse
    net_prize_pool: Decimal
    results: List[RegistrationWithPlayerResponse]


# Pending actions and activity

class PendingActionCreate(CamelModel):
    player_id: str
    action_type: PendingActionType
    target_player_id: Optional[str] = None


class PendingActionResponse(CamelModel):
    id: str
    tournament_id: str
    player_id: str
    action_type: PendingActionType
    target_player_id: Optional[str] = None
    timestamp: Optional[UTCDateTime] = None


class PendingActionWithPlayersResponse(PendingActionResponse):
    player: Optional[PlayerResponse] = None
    target_player: Optional[PlayerResponse] = None


class ConfirmActionResponse(CamelModel):
    message: str
    registrations: List[RegistrationResponse]


class ActivityResponse(CamelModel):
    id: str
    tournament_id: str
    player_id: Optional[str] = None
    event_type: ActivityEventType
    event_data: Optional[JSONText] = None
    description: str
    timestamp: Optional[UTCDateTime] = None
    player: Optional[PlayerResponse] = None


# Leaderboard and uploads

class LeaderboardEntryResponse(CamelModel):
    rank: int
    player: PlayerResponse
    points: int
    tournaments: int


class LeaderboardResponse(CamelModel):
    season_id: str
    tournaments_counted: int
    entries: List[LeaderboardEntryResponse]


class UploadResponse(CamelModel):
    image_url: str
