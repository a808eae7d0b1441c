"""
Aggregation helpers shared by the calculators.

All arithmetic runs on Decimal. Each line item is rounded once, to three
decimal places (half-up), at the moment it is priced; every breakdown entry and
grand total is then an exact sum of rounded line items, so any grouping of the
same items adds up to the same total.

Rounding and summing run with WIDE_PRECISION significant digits so that any
input accepted by validation (up to the largest float) keeps all three
decimals instead of overflowing the default 28-digit context.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Callable, Dict, Hashable, Iterable, TypeVar

THREE_PLACES = Decimal('0.001')
ZERO = Decimal('0')
WIDE_PRECISION = 400

T = TypeVar('T')


def round3(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = WIDE_PRECISION
        return value.quantize(THREE_PLACES, rounding=ROUND_HALF_UP)


def round_count(value: Decimal) -> int:
    """Half-up rounding to a whole number of participants."""
    with localcontext() as ctx:
        ctx.prec = WIDE_PRECISION
        return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def total(values: Iterable[Decimal]) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = WIDE_PRECISION
        return sum(values, ZERO)


def group_sum(items: Iterable[T], key: Callable[[T], Hashable],
              value: Callable[[T], Decimal]) -> Dict[Hashable, Decimal]:
    """Sum ``value(item)`` per ``key(item)``, keeping first-seen key order."""
    grouped: Dict[Hashable, Decimal] = {}
    with localcontext() as ctx:
        ctx.prec = WIDE_PRECISION
        for item in items:
            k = key(item)
            grouped[k] = grouped.get(k, ZERO) + value(item)
    return grouped


def share(part: Decimal, whole: Decimal) -> float:
    """Percentage of ``whole`` taken by ``part`` (0 when whole is zero)."""
    if whole == 0:
        return 0.0
    return float(part / whole * 100)
