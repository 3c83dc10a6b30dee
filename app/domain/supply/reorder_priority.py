"""Reorder suggestion priority tiers and reasons.

NO DATA ACCESS - pure functions only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

URGENT = "URGENT"
HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"

# Higher sorts first
PRIORITY_RANK: dict[str, int] = {URGENT: 4, HIGH: 3, MEDIUM: 2, LOW: 1}


@dataclass(frozen=True)
class PriorityTiers:
    """Day thresholds for priority tiers (merchant settings or defaults)."""

    urgent_days: int = 0
    high_days: int = 7
    medium_days: int = 14
    low_days: int = 30


def classify_priority(
    on_hand: float,
    velocity: float,
    days_of_stock: float,
    below_minimum: bool,
    stock_alert_min: int | None,
    tiers: PriorityTiers,
    location_name: str | None = None,
) -> tuple[str, str]:
    """Pick priority and human-readable reason for a reorder suggestion.

    Args:
        on_hand: Raw on-hand quantity (absent inventory = 0)
        velocity: Daily average units sold
        days_of_stock: Runway at current velocity (available stock)
        below_minimum: Available is at/below the effective floor
        stock_alert_min: Effective floor
        tiers: Tier thresholds
        location_name: Appended to floor reasons when known

    Returns:
        (priority, reason)

    Examples:
        >>> classify_priority(0, 1.5, 0, False, None, PriorityTiers())
        ('URGENT', 'Out of stock with active sales')
        >>> classify_priority(20, 2, 10, False, None, PriorityTiers())
        ('MEDIUM', 'Less than 14 days of stock remaining')
    """
    if on_hand <= tiers.urgent_days:
        if velocity > 0:
            return URGENT, "Out of stock with active sales"
        return MEDIUM, "Out of stock - no recent sales"

    if below_minimum and stock_alert_min:
        where = f" at {location_name}" if location_name else ""
        return HIGH, f"Below stock alert threshold ({stock_alert_min} units){where}"

    if days_of_stock < tiers.high_days:
        return HIGH, f"URGENT: Less than {tiers.high_days} days of stock"
    if days_of_stock < tiers.medium_days:
        return MEDIUM, f"Less than {tiers.medium_days} days of stock remaining"
    if days_of_stock < tiers.low_days:
        return LOW, f"Less than {tiers.low_days} days of stock remaining"
    return LOW, "Below minimum stock level"


def gross_margin_percent(retail_cents: int | None, unit_cost_cents: int | None) -> float | None:
    """Gross margin rounded half-up to one decimal, or None without price and cost.

    Examples:
        >>> gross_margin_percent(1000, 600)
        40.0
        >>> gross_margin_percent(0, 600) is None
        True
    """
    if not retail_cents or not unit_cost_cents or retail_cents <= 0 or unit_cost_cents <= 0:
        return None
    raw = (retail_cents - unit_cost_cents) / retail_cents * 1000
    return math.floor(raw + 0.5) / 10
