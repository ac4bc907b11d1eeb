"""
Prize pool arithmetic.

Gross, rake and net figures for a tournament's main pool, the high hand side
pot, and payout amounts by finishing position. Everything is computed with
Decimal so currency amounts never pick up float noise.
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, List, Optional, Sequence

from pokerpal.constants import PayoutConstants
from pokerpal.data_models.prize_pool import HighHandPool, PayoutLine, PrizePoolSummary
from pokerpal.database.models import RakeType, PayoutStructure

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_money(value) -> Decimal:
    """Coerce a stored amount (Decimal, float, str or None) to Decimal."""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid money amount: {value!r}")


def round_whole(amount: Decimal) -> Decimal:
    """Round to whole currency units, halves away from zero."""
    return amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def _rake_type(value) -> RakeType:
    if value is None:
        return RakeType.NONE
    if isinstance(value, RakeType):
        return value
    return RakeType(value)


def payout_percentages(structure, custom_payouts: Optional[str] = None) -> List[float]:
    """
    Get payout shares by position for a payout structure.

    Custom structures store a JSON list, either of numbers or of objects with a
    ``percentage`` key. Values above 1 are read as percents. Anything that does
    not parse falls back to the standard structure.
    """
    if isinstance(structure, PayoutStructure):
        structure = structure.value

    if structure == PayoutStructure.CUSTOM.value:
        parsed = _parse_custom_payouts(custom_payouts)
        if parsed:
            return parsed
        logger.warning("Custom payout structure without valid payouts, using standard")
        return list(PayoutConstants.STANDARD)

    return list(PayoutConstants.STRUCTURES.get(structure, PayoutConstants.STANDARD))


def _parse_custom_payouts(raw: Optional[str]) -> List[float]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(data, list):
        return []

    shares = []
    for item in data:
        value = item.get('percentage') if isinstance(item, dict) else item
        try:
            share = float(value)
        except (TypeError, ValueError):
            return []
        if share < 0:
            return []
        shares.append(share / 100 if share > 1 else share)
    return shares


def payouts(net_prize_pool: Decimal, percentages: Sequence[float]) -> List[PayoutLine]:
    """Split the net pool by position, each prize rounded to whole units."""
    lines = []
    for index, share in enumerate(percentages):
        amount = round_whole(net_prize_pool * Decimal(str(share)))
        lines.append(PayoutLine(position=index + 1, percentage=share, amount=amount))
    return lines


def amount_owed(tournament, registration) -> Decimal:
    """Buy-in plus the high hand entry when the player opted in and the tournament offers it."""
    total = to_money(tournament.buy_in_amount)
    if registration.entering_high_hands and tournament.enable_high_hand:
        total += to_money(tournament.high_hand_amount)
    return total


class PrizePoolCalculator:
    """Computes prize pool summaries for a tournament and its registrations."""

    @staticmethod
    def component_rake(rake_type, rake_amount, component_total: Decimal, entries: int) -> Decimal:
        """
        Rake taken from one entry kind (buy-ins, re-buys or add-ons).

        Percentage rake applies to the component total; fixed rake is charged
        per entry.
        """
        rake_type = _rake_type(rake_type)
        amount = to_money(rake_amount)
        if rake_type == RakeType.PERCENTAGE:
            return component_total * amount / HUNDRED
        if rake_type == RakeType.FIXED:
            return amount * entries
        return ZERO

    @staticmethod
    def high_hand_pool(tournament, registrations: Iterable) -> HighHandPool:
        """High hand side pot. Fixed rake here is a flat amount, not per entrant."""
        payout_count = tournament.high_hand_payouts or 1
        if payout_count <= 0:
            payout_count = 1

        if not tournament.enable_high_hand:
            return HighHandPool(payouts=payout_count)

        entrants = sum(1 for reg in registrations if reg.entering_high_hands)
        gross = to_money(tournament.high_hand_amount) * entrants

        rake_type = _rake_type(tournament.high_hand_rake_type)
        rake_amount = to_money(tournament.high_hand_rake_amount)
        if rake_type == RakeType.PERCENTAGE:
            rake = gross * rake_amount / HUNDRED
        elif rake_type == RakeType.FIXED:
            rake = min(rake_amount, gross)
        else:
            rake = ZERO

        net = max(gross - rake, ZERO)
        return HighHandPool(
            entrants=entrants,
            gross=gross,
            rake=rake,
            net=net,
            payouts=payout_count,
            per_winner=net / payout_count,
        )

    @classmethod
    def summarize(cls, tournament, registrations: Sequence, include_payouts: bool = True) -> PrizePoolSummary:
        """Calculate gross, rake and net totals for the tournament's main pool."""
        registrations = list(registrations)

        total_buy_ins = sum(reg.buy_ins or 0 for reg in registrations)
        total_rebuys = sum(reg.rebuys or 0 for reg in registrations)
        total_addons = sum(reg.addons or 0 for reg in registrations)

        buy_in_total = to_money(tournament.buy_in_amount) * total_buy_ins
        rebuy_total = to_money(tournament.rebuy_amount) * total_rebuys
        addon_total = to_money(tournament.addon_amount) * total_addons
        gross_total = buy_in_total + rebuy_total + addon_total

        buy_in_rake = cls.component_rake(tournament.rake_type, tournament.rake_amount, buy_in_total, total_buy_ins)
        rebuy_rake = cls.component_rake(
            tournament.rebuy_rake_type, tournament.rebuy_rake_amount, rebuy_total, total_rebuys
        )
        addon_rake = cls.component_rake(
            tournament.addon_rake_type, tournament.addon_rake_amount, addon_total, total_addons
        )
        rake = buy_in_rake + rebuy_rake + addon_rake

        is_manual = tournament.manual_prize_pool is not None
        if is_manual:
            net_prize_pool = to_money(tournament.manual_prize_pool)
        else:
            net_prize_pool = max(gross_total - rake, ZERO)

        payout_lines = []
        if include_payouts:
            shares = payout_percentages(tournament.payout_structure, tournament.custom_payouts)
            payout_lines = payouts(net_prize_pool, shares)

        return PrizePoolSummary(
            total_buy_ins=total_buy_ins,
            total_rebuys=total_rebuys,
            total_addons=total_addons,
            buy_in_total=buy_in_total,
            rebuy_total=rebuy_total,
            addon_total=addon_total,
            gross_total=gross_total,
            buy_in_rake=buy_in_rake,
            rebuy_rake=rebuy_rake,
            addon_rake=addon_rake,
            rake=rake,
            net_prize_pool=net_prize_pool,
            is_manual=is_manual,
            high_hand=cls.high_hand_pool(tournament, registrations),
            payouts=payout_lines,
        )
