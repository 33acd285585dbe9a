"""Derived metrics: percentages, pot odds and expected value.

All reported figures are rounded half away from zero at the hundredths
place so identical seeded runs print identical numbers.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from utils.card_utils import pot_odds


def round_half_away(value: float, places: int = 2) -> float:
    """Round *value* to *places* decimals, ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    # str() keeps the shortest repr so 0.125 stays a tie instead of 0.12499…
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(fraction: float) -> float:
    """Express a ``[0, 1]`` fraction as a two-decimal percentage."""
    return round_half_away(fraction * 100.0)


def pot_odds_pct(pot: float, bet: float) -> float:
    """Pot odds as a percentage in ``[0, 100]`` (``0`` without a bet)."""
    return min(max(percent(pot_odds(pot, bet)), 0.0), 100.0)


def expected_value(equity_pct: float, pot: float, bet: float) -> float:
    """Expected value of calling *bet* into *pot* at *equity_pct*.

    ``e * (pot + bet) - (1 - e) * bet`` with ``e = equity_pct / 100``.
    """
    equity = equity_pct / 100.0
    return round_half_away(equity * (pot + bet) - (1.0 - equity) * bet)
