"""
Stats Aggregator - Summary statistics across stored sessions.
"""
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Sequence

from cadence.models.schemas import SessionRecord, SessionStats

TWO_PLACES = Decimal("0.01")


def round2(value: float) -> float:
    """
    Round to 2 decimal places, ties away from zero.

    Rounds the shortest decimal representation of the float, so 100.005
    becomes 100.01 rather than falling to the binary neighbour below it.
    Works for any finite float, however large; infinities pass through.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the two decimals
        ctx.prec = max(28, exact.adjusted() + 3)
        return float(exact.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def summarize(records: Sequence[SessionRecord]) -> SessionStats:
    """
    Compute summary statistics for a collection of sessions.

    Args:
        records: All stored session records

    Returns:
        SessionStats with mean cadence and totals; all zero when empty
    """
    total_records = len(records)
    if total_records == 0:
        return SessionStats()

    average_cadence = sum(r.averageCadence for r in records) / total_records
    total_steps = sum(r.totalSteps for r in records)
    total_duration = sum(r.duration for r in records)

    return SessionStats(
        totalRecords=total_records,
        averageCadence=round2(average_cadence),
        totalSteps=total_steps,
        totalDuration=round2(total_duration),
    )
