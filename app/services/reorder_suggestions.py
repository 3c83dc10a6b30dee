"""Reorder suggestions service.

Builds per variation x location order suggestions from the shared
stock positions: which items to reorder, how many units (case pack,
reorder multiple, stock cap, minus open PO quantity), at what priority,
and what it costs with the primary vendor.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import ReorderDefaults
from app.core.metrics import reorder_suggestions_total
from app.db.utils import as_int
from app.domain.supply.reorder_math import calculate_days_of_stock, calculate_reorder_quantity
from app.domain.supply.reorder_priority import (
    PRIORITY_RANK,
    PriorityTiers,
    classify_priority,
    gross_margin_percent,
)
from app.domain.supply.stock_health import is_at_or_above_cap, is_below_reorder_point
from app.services.images import batch_resolve_image_urls
from app.services.inventory_snapshot import (
    PositionRow,
    VendorCost,
    load_pending_po_coverage,
    load_stock_positions,
    load_vendor_links,
)
from app.services.merchant_settings import get_merchant_settings

logger = logging.getLogger(__name__)

# vendor_id filter value selecting variations without any vendor link
NO_VENDOR = "none"

MIN_SUPPLY_DAYS = 1
MAX_SUPPLY_DAYS = 365


def _pick_vendor(links: list[VendorCost], vendor_id: str | None) -> tuple[bool, VendorCost | None]:
    """(include, vendor) for a variation's links under the vendor filter."""
    if vendor_id == NO_VENDOR:
        return (not links), None
    if vendor_id:
        match = next((link for link in links if link.vendor_id == vendor_id), None)
        return match is not None, match
    return True, (links[0] if links else None)


def _build_suggestion(
    row: PositionRow,
    vendor: VendorCost | None,
    primary: VendorCost | None,
    pending_qty: int,
    supply_days: int,
    safety_days: int,
    tiers: PriorityTiers,
) -> dict[str, Any] | None:
    pos = row.position
    available = pos.available
    velocity = pos.daily_velocity
    floor = pos.effective_alert_min
    cap = pos.effective_alert_max
    days_of_stock = calculate_days_of_stock(available, velocity)
    below_minimum = floor is not None and available <= floor

    priority, reason = classify_priority(
        pos.on_hand or 0,
        velocity,
        days_of_stock,
        below_minimum,
        floor,
        tiers,
        row.location_name,
    )

    case_pack_adjusted = calculate_reorder_quantity(
        velocity,
        supply_days,
        lead_time_days=0,
        safety_days=safety_days,
        reorder_multiple=row.reorder_multiple,
        case_pack=row.case_pack_quantity,
        stock_alert_min=floor,
        stock_alert_max=cap,
        current_stock=available,
    )
    final_qty = max(0, case_pack_adjusted - pending_qty)
    if final_qty <= 0:
        return None

    unit_cost = (vendor.unit_cost_cents if vendor else None) or 0
    retail = row.price_money or 0

    return {
        "variation_id": pos.variation_id,
        "item_id": row.item_id,
        "item_name": row.item_name,
        "variation_name": row.variation_name,
        "sku": row.sku,
        "category_name": row.category_name,
        "location_id": pos.location_id,
        "location_name": row.location_name,
        "current_stock": pos.on_hand or 0,
        "committed_quantity": pos.committed,
        "available_quantity": available,
        "daily_avg_quantity": velocity,
        "weekly_avg_quantity": row.weekly_velocity,
        "days_until_stockout": days_of_stock,
        "below_minimum": below_minimum,
        "stock_alert_min": floor,
        "stock_alert_max": cap,
        "priority": priority,
        "reorder_reason": reason,
        "base_suggested_qty": math.ceil(velocity * (supply_days + safety_days)),
        "case_pack_quantity": row.case_pack_quantity or 1,
        "reorder_multiple": row.reorder_multiple or 1,
        "case_pack_adjusted_qty": case_pack_adjusted,
        "pending_po_quantity": pending_qty,
        "final_suggested_qty": final_qty,
        "unit_cost_cents": unit_cost,
        "retail_price_cents": retail,
        "gross_margin_percent": gross_margin_percent(retail, unit_cost),
        "order_cost": final_qty * unit_cost / 100,
        "vendor_id": vendor.vendor_id if vendor else None,
        "vendor_name": vendor.vendor_name if vendor else None,
        "vendor_code": (vendor.vendor_code if vendor else None) or "N/A",
        "is_primary_vendor": vendor is not None and primary is not None and vendor.vendor_id == primary.vendor_id,
        "lead_time_days": vendor.lead_time_days if vendor else None,
        "has_velocity": velocity > 0,
        "images": row.images,
        "item_images": row.item_images,
    }


def get_reorder_suggestions(
    db: Session,
    merchant_id: int,
    defaults: ReorderDefaults | None = None,
    *,
    vendor_id: str | None = None,
    supply_days: int | None = None,
    location_id: str | None = None,
    min_cost: float | None = None,
) -> dict[str, Any]:
    """Calculate reorder suggestions for a merchant.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        defaults: Process-level reorder fallbacks
        vendor_id: Only this vendor's linked variations ("none" = unlinked only)
        supply_days: Target supply days (default: merchant setting)
        location_id: Only this location (variations without inventory rows stay)
        min_cost: Drop suggestions whose order cost (dollars) is below this

    Returns:
        ``{"count": int, "suggestions": [...]}`` sorted by priority, then
        days of stock ascending, then velocity descending

    Raises:
        ValueError: If merchant_id is missing, supply_days is outside
            1..365, or min_cost is negative

    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for get_reorder_suggestions")

    settings = get_merchant_settings(db, merchant_id, defaults)
    supply = supply_days if supply_days is not None else settings.default_supply_days
    if not MIN_SUPPLY_DAYS <= supply <= MAX_SUPPLY_DAYS:
        raise ValueError("supply_days must be a number between 1 and 365")
    if min_cost is not None and min_cost < 0:
        raise ValueError("min_cost must be a positive number")

    safety = settings.reorder_safety_days
    threshold = supply + safety
    tiers = PriorityTiers(
        urgent_days=settings.priority_urgent_days,
        high_days=settings.priority_high_days,
        medium_days=settings.priority_medium_days,
        low_days=settings.priority_low_days,
    )

    rows = load_stock_positions(db, merchant_id)
    if location_id:
        rows = [r for r in rows if r.position.location_id in (location_id, None)]
    coverage = load_pending_po_coverage(db, merchant_id)
    links = load_vendor_links(db, merchant_id)

    suggestions: list[dict[str, Any]] = []
    for row in rows:
        pos = row.position
        variation_links = links.get(pos.variation_id, [])
        include, vendor = _pick_vendor(variation_links, vendor_id)
        if not include:
            continue
        if is_at_or_above_cap(pos) or not is_below_reorder_point(pos, threshold):
            continue

        suggestion = _build_suggestion(
            row,
            vendor,
            variation_links[0] if variation_links else None,
            as_int(coverage.get(pos.variation_id)),
            supply,
            safety,
            tiers,
        )
        if suggestion is not None:
            suggestions.append(suggestion)

    if min_cost:
        suggestions = [s for s in suggestions if s["order_cost"] >= min_cost]

    suggestions.sort(
        key=lambda s: (
            -PRIORITY_RANK[s["priority"]],
            s["days_until_stockout"],
            -s["daily_avg_quantity"],
        )
    )

    image_urls = batch_resolve_image_urls(db, merchant_id, suggestions)
    for index, suggestion in enumerate(suggestions):
        suggestion["image_urls"] = image_urls.get(index, [])
        del suggestion["images"]
        del suggestion["item_images"]
        reorder_suggestions_total.labels(priority=suggestion["priority"]).inc()

    logger.info(
        "Reorder suggestions calculated",
        extra={
            "merchant_id": merchant_id,
            "vendor_id": vendor_id,
            "supply_days": supply,
            "safety_days": safety,
            "reorder_threshold": threshold,
            "location_id": location_id,
            "suggestion_count": len(suggestions),
        },
    )
    return {"count": len(suggestions), "suggestions": suggestions}
