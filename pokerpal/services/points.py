from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from pokerpal.database.models import PointsAllocation


def points_for_position(
    position: int,
    allocations: Iterable[PointsAllocation],
    participation_points: Optional[int] = 0,
) -> int:
    """Return points for a finishing position, or participation points when no allocation covers it."""
    if position <= 0:
        raise ValueError("Position must be a positive integer.")
    for allocation in allocations:
        if allocation.covers(position):
            return allocation.points
    return participation_points or 0


def knockout_bonus(knockouts: Optional[int], knockout_points: Optional[int]) -> int:
    """Return bonus points earned for knockouts."""
    if not knockouts or not knockout_points:
        return 0
    return knockouts * knockout_points


def finishing_order(registrations: Sequence) -> List:
    """
    Order registrations from best to worst finish.

    Players still in the tournament come first in their existing order. Eliminated
    players follow, the latest elimination first; eliminations without a time
    sort last.
    """
    active = [reg for reg in registrations if not reg.is_eliminated]
    eliminated = [reg for reg in registrations if reg.is_eliminated]
    eliminated.sort(key=lambda reg: reg.elimination_time or datetime.min, reverse=True)
    return active + eliminated
