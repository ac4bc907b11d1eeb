"""
Tournament data models.

Listing rows, finalization results and dashboard figures.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from pokerpal.database.models import Tournament, TournamentRegistration
from pokerpal.data_models.prize_pool import PrizePoolSummary


@dataclass(frozen=True)
class TournamentListing:
    """A tournament with its number of payment-confirmed players."""
    tournament: Tournament
    confirmed_player_count: int = 0


@dataclass(frozen=True)
class FinalizeResult:
    """Outcome of finalizing a tournament, results ordered by finishing position."""
    tournament: Tournament
    summary: PrizePoolSummary
    results: List[TournamentRegistration] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardStats:
    active_tournaments: int
    total_players: int
    total_prize_pool: Decimal
    active_clubs: int


@dataclass(frozen=True)
class RegistrationPayment:
    """A registration with what the player owes or has paid."""
    registration: TournamentRegistration
    amount: Decimal
