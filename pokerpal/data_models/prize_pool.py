"""
Prize pool data models.

Immutable data transfer objects for prize-pool arithmetic results.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class HighHandPool:
    """High hand side pot, kept apart from the main prize pool."""
    entrants: int = 0
    gross: Decimal = Decimal('0')
    rake: Decimal = Decimal('0')
    net: Decimal = Decimal('0')
    payouts: int = 1
    per_winner: Decimal = Decimal('0')


@dataclass(frozen=True)
class PayoutLine:
    """Prize for one finishing position."""
    position: int
    percentage: float
    amount: Decimal


@dataclass(frozen=True)
class PrizePoolSummary:
    """Totals for a tournament's main prize pool."""
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
    is_manual: bool = False
    high_hand: HighHandPool = field(default_factory=HighHandPool)
    payouts: List[PayoutLine] = field(default_factory=list)
