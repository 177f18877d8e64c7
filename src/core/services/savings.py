"""Savings computation for the price comparison widget."""

from __future__ import annotations

import math
import re
from typing import Iterable

from core.domain.models import Medication, SavingsBreakdown

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def parse_price(value: str | None) -> float:
    """Extract the first decimal number from a free-text price ("₹1,250.50/strip")."""

    if not value:
        return 0.0
    match = _NUMBER_RE.search(value.replace(",", ""))
    if not match:
        return 0.0
    return float(match.group(0))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_savings(medications: Iterable[Medication]) -> SavingsBreakdown | None:
    """Aggregate market vs Jan Aushadhi prices.

    Returns None when the widget should not be shown: no medications, or a
    total market price of zero.
    """

    meds = list(medications or [])
    if not meds:
        return None

    total_brand = sum(parse_price(m.brand_price_est) for m in meds)
    total_generic = sum(parse_price(m.jan_aushadhi_price_est) for m in meds)
    if total_brand <= 0:
        return None

    total_savings = total_brand - total_generic
    return SavingsBreakdown(
        total_brand_price=total_brand,
        total_generic_price=total_generic,
        total_savings=total_savings,
        savings_percentage=_round_half_up(total_savings / total_brand * 100),
    )
