"""Reorder quantity and days-of-stock formulas.

Single source of truth for:
- Suggested reorder quantity (supply target, case pack, reorder multiple, stock caps)
- Days of stock remaining at current velocity

NO DATA ACCESS - pure functions only. Data access happens in services layer.
"""

from __future__ import annotations

import math

# Reported when nothing sells: effectively infinite runway, sorts last
NO_VELOCITY_DAYS = 999


def ceil_to_multiple(qty: float, mult: int) -> int:
    """Round quantity up to nearest multiple."""
    if mult <= 1:
        return math.ceil(qty)
    return math.ceil(qty / mult) * mult


def calculate_reorder_quantity(
    velocity: float,
    supply_days: float,
    lead_time_days: float = 0,
    safety_days: float = 0,
    reorder_multiple: int | None = 1,
    case_pack: int | None = 1,
    stock_alert_min: int | None = 0,
    stock_alert_max: int | None = None,
    current_stock: float = 0,
) -> int:
    """Calculate suggested reorder quantity for a variation.

    threshold = supply_days + lead_time_days + safety_days
    target    = ceil(velocity * threshold), or one case / one multiple / one
                unit when nothing sells
    suggested = target - current_stock, rounded up to case pack, then to
                reorder multiple, then capped at stock_alert_max

    Args:
        velocity: Daily average units sold (91-day window)
        supply_days: Target days of supply
        lead_time_days: Vendor lead time in days
        safety_days: Safety stock buffer in days
        reorder_multiple: Order granularity (applied after case pack)
        case_pack: Units per shipped case
        stock_alert_min: Stock floor; target always clears it by one unit
        stock_alert_max: Stock ceiling (None = unlimited)
        current_stock: Available stock (on hand - committed); may be negative

    Returns:
        Suggested order quantity (>= 0)

    Examples:
        >>> calculate_reorder_quantity(2, 45, current_stock=20)
        70
        >>> calculate_reorder_quantity(1, 45, case_pack=6, reorder_multiple=12, current_stock=10)
        36
        >>> calculate_reorder_quantity(2, 45, stock_alert_max=50, current_stock=60)
        0
    """
    case_pack = case_pack or 1
    reorder_multiple = reorder_multiple or 1
    stock_alert_min = stock_alert_min or 0

    threshold = supply_days + (lead_time_days or 0) + (safety_days or 0)

    if velocity <= 0:
        if case_pack > 1:
            target_qty = case_pack
        elif reorder_multiple > 1:
            target_qty = reorder_multiple
        else:
            target_qty = 1
    else:
        target_qty = math.ceil(velocity * threshold)

    if stock_alert_min > 0:
        target_qty = max(stock_alert_min + 1, target_qty)

    suggested = math.ceil(max(0, target_qty - current_stock))

    # Case pack first, then reorder multiple (may push to a higher multiple)
    if case_pack > 1:
        suggested = ceil_to_multiple(suggested, case_pack)
    if reorder_multiple > 1:
        suggested = ceil_to_multiple(suggested, reorder_multiple)

    if stock_alert_max is not None:
        suggested = math.ceil(min(suggested, stock_alert_max - current_stock))

    return max(0, int(suggested))


def calculate_days_of_stock(current_stock: float, velocity: float) -> float:
    """Days of stock remaining, rounded half-up to one decimal.

    Examples:
        >>> calculate_days_of_stock(10, 3)
        3.3
        >>> calculate_days_of_stock(0, 0)
        0
        >>> calculate_days_of_stock(5, 0)
        999
    """
    if current_stock <= 0:
        return 0
    if velocity <= 0:
        return NO_VELOCITY_DAYS
    return math.floor(current_stock / velocity * 10 + 0.5) / 10
