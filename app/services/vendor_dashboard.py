"""Vendor dashboard service.

Per-vendor stock stats (OOS, reorder, reorder value, pending PO value,
last ordered), a synthetic "No Vendor Assigned" bucket, and the
merchant-wide OOS count. Stock facts come from the shared position
shape and ``stock_health`` predicates, so this screen, reorder
suggestions and the global OOS figure agree.

The vendor, unassigned and global-OOS reads are independent queries
without a shared transaction; under concurrent inventory sync they may
observe slightly different snapshots.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.config import ReorderDefaults
from app.core.metrics import vendor_dashboard_duration_seconds, vendor_settings_updates_total
from app.db.models import PO_ORDERED_STATUSES, PO_PENDING_VALUE_STATUSES, VENDOR_ACTIVE, Vendor
from app.db.utils import as_bool, as_int, as_optional_int, exec_scoped
from app.domain.supply.stock_health import StockTally, evaluate_variations
from app.domain.supply.vendor_status import OK, compute_status
from app.services.inventory_snapshot import (
    count_global_oos,
    load_pending_po_coverage,
    load_stock_positions,
)
from app.services.merchant_settings import get_merchant_settings

logger = logging.getLogger(__name__)

UNASSIGNED_VENDOR_ID = "__unassigned__"
UNASSIGNED_VENDOR_NAME = "No Vendor Assigned"

# Closed set of locally editable vendor fields; applied in this order
VENDOR_SETTINGS_FIELDS: tuple[str, ...] = (
    "schedule_type",
    "order_day",
    "receive_day",
    "lead_time_days",
    "minimum_order_amount",
    "payment_method",
    "payment_terms",
    "contact_email",
    "order_method",
    "default_supply_days",
    "notes",
)


def _iso(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _load_variation_links(db: Session, merchant_id: int) -> dict[str, tuple[bool, list[tuple[str, int | None]]]]:
    """variation_id -> (discontinued, [(vendor_id, unit_cost_cents), ...]) for live variations."""
    result = exec_scoped(
        db,
        """
        SELECT v.id AS variation_id, v.discontinued, vv.vendor_id, vv.unit_cost_money
        FROM variations v
        JOIN items i ON v.item_id = i.id AND i.merchant_id = :merchant_id
        LEFT JOIN variation_vendors vv ON vv.variation_id = v.id AND vv.merchant_id = :merchant_id
        WHERE v.merchant_id = :merchant_id
          AND COALESCE(v.is_deleted, FALSE) = FALSE
          AND COALESCE(i.is_deleted, FALSE) = FALSE
        """,
        merchant_id=merchant_id,
    )
    links: dict[str, tuple[bool, list[tuple[str, int | None]]]] = {}
    for row in result:
        entry = links.setdefault(row.variation_id, (as_bool(row.discontinued), []))
        if row.vendor_id is not None:
            entry[1].append((row.vendor_id, as_optional_int(row.unit_cost_money)))
    return links


def _load_po_stats(db: Session, merchant_id: int) -> dict[str, dict[str, Any]]:
    result = exec_scoped(
        db,
        """
        SELECT
            vendor_id,
            SUM(CASE WHEN status IN :pending THEN total_cents ELSE 0 END) AS pending_po_value,
            MAX(CASE WHEN status IN :ordered THEN order_date ELSE NULL END) AS last_ordered_at
        FROM purchase_orders
        WHERE merchant_id = :merchant_id
        GROUP BY vendor_id
        """,
        {"pending": list(PO_PENDING_VALUE_STATUSES), "ordered": list(PO_ORDERED_STATUSES)},
        merchant_id=merchant_id,
        expanding=("pending", "ordered"),
    )
    return {
        row.vendor_id: {
            "pending_po_value": as_int(row.pending_po_value),
            "last_ordered_at": _iso(row.last_ordered_at),
        }
        for row in result
    }


def _load_active_vendors(db: Session, merchant_id: int) -> list[Any]:
    result = exec_scoped(
        db,
        """
        SELECT id, name, schedule_type, order_day, receive_day, lead_time_days,
               minimum_order_amount, payment_method, payment_terms, contact_email,
               order_method, notes, default_supply_days
        FROM vendors
        WHERE merchant_id = :merchant_id AND status = :active
        ORDER BY name
        """,
        {"active": VENDOR_ACTIVE},
        merchant_id=merchant_id,
    )
    return list(result)


def format_vendor_row(
    vendor: Mapping[str, Any],
    tally: StockTally,
    po_stats: Mapping[str, Any] | None,
    default_supply_days: int,
) -> dict[str, Any]:
    """Build the dashboard shape for one vendor (or the unassigned bucket)."""
    po_stats = po_stats or {}
    lead_time = vendor.get("lead_time_days")
    supply_days = vendor.get("default_supply_days")
    row = {
        "id": vendor["id"],
        "name": vendor["name"],
        "schedule_type": vendor.get("schedule_type") or "anytime",
        "order_day": vendor.get("order_day"),
        "receive_day": vendor.get("receive_day"),
        "lead_time_days": as_int(lead_time) if lead_time is not None else None,
        "minimum_order_amount": as_int(vendor.get("minimum_order_amount")),
        "payment_method": vendor.get("payment_method"),
        "payment_terms": vendor.get("payment_terms"),
        "contact_email": vendor.get("contact_email"),
        "order_method": vendor.get("order_method"),
        "notes": vendor.get("notes"),
        "default_supply_days": as_int(supply_days) if supply_days is not None else default_supply_days,
        "total_items": tally.total_items,
        "oos_count": tally.oos_count,
        "reorder_count": tally.reorder_count,
        "reorder_value": tally.reorder_value,
        "costed_reorder_count": tally.costed_reorder_count,
        "pending_po_value": as_int(po_stats.get("pending_po_value")),
        "last_ordered_at": po_stats.get("last_ordered_at"),
    }
    row["status"] = compute_status(row)
    return row


def get_vendor_dashboard(
    db: Session, merchant_id: int, defaults: ReorderDefaults | None = None
) -> dict[str, Any]:
    """Get all ACTIVE vendors with dashboard stats for a merchant.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        defaults: Process-level reorder fallbacks

    Returns:
        ``{"vendors": [...], "global_oos_count": int}``; vendors ordered by
        name, unassigned bucket last (only when it holds items)

    Raises:
        ValueError: If merchant_id is missing

    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for get_vendor_dashboard")

    with vendor_dashboard_duration_seconds.time():
        settings = get_merchant_settings(db, merchant_id, defaults)

        positions = [row.position for row in load_stock_positions(db, merchant_id)]
        coverage = load_pending_po_coverage(db, merchant_id)
        verdicts = evaluate_variations(positions, settings.reorder_threshold_days, coverage)

        tallies: dict[str, StockTally] = defaultdict(StockTally)
        unassigned = StockTally()
        for variation_id, (discontinued, vendor_links) in _load_variation_links(db, merchant_id).items():
            health = None if discontinued else verdicts.get(variation_id)
            if not vendor_links:
                # No vendor to cost against: monetary figures stay 0
                unassigned.add(variation_id, health)
                continue
            for vendor_id, unit_cost in vendor_links:
                tallies[vendor_id].add(variation_id, health, unit_cost)

        po_stats = _load_po_stats(db, merchant_id)
        vendors = [
            format_vendor_row(
                row._mapping,
                tallies.get(row.id) or StockTally(),
                po_stats.get(row.id),
                settings.default_supply_days,
            )
            for row in _load_active_vendors(db, merchant_id)
        ]

        if unassigned.total_items > 0:
            vendors.append(
                format_vendor_row(
                    {"id": UNASSIGNED_VENDOR_ID, "name": UNASSIGNED_VENDOR_NAME, "minimum_order_amount": 0},
                    unassigned,
                    None,
                    settings.default_supply_days,
                )
            )

        global_oos_count = count_global_oos(db, merchant_id)

    logger.info(
        "Vendor dashboard loaded",
        extra={
            "merchant_id": merchant_id,
            "vendor_count": len(vendors),
            "unassigned_items": unassigned.total_items,
            "global_oos": global_oos_count,
            "action_needed": sum(1 for v in vendors if v["status"] != OK),
        },
    )
    return {"vendors": vendors, "global_oos_count": global_oos_count}


def vendor_to_dict(vendor: Vendor) -> dict[str, Any]:
    return {
        "id": vendor.id,
        "merchant_id": vendor.merchant_id,
        "name": vendor.name,
        "status": vendor.status,
        "schedule_type": vendor.schedule_type,
        "order_day": vendor.order_day,
        "receive_day": vendor.receive_day,
        "lead_time_days": vendor.lead_time_days,
        "minimum_order_amount": vendor.minimum_order_amount,
        "payment_method": vendor.payment_method,
        "payment_terms": vendor.payment_terms,
        "contact_email": vendor.contact_email,
        "order_method": vendor.order_method,
        "default_supply_days": vendor.default_supply_days,
        "notes": vendor.notes,
        "created_at": _iso(vendor.created_at),
        "updated_at": _iso(vendor.updated_at),
    }


def update_vendor_settings(
    db: Session,
    vendor_id: str,
    merchant_id: int,
    patch: Mapping[str, Any],
) -> dict[str, Any] | None:
    """Partially update locally-owned vendor settings.

    Keys outside ``VENDOR_SETTINGS_FIELDS`` are dropped silently. An empty
    filtered patch returns the current record unchanged.

    Args:
        db: Database session
        vendor_id: Vendor ID
        merchant_id: Merchant ID (ownership)
        patch: Untrusted field -> value mapping

    Returns:
        Updated vendor dict, or None if the vendor does not exist for
        this merchant

    Raises:
        ValueError: If merchant_id is missing

    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for update_vendor_settings")

    owned = select(Vendor).where(Vendor.id == vendor_id, Vendor.merchant_id == merchant_id)
    vendor = db.execute(owned).scalar_one_or_none()
    if vendor is None:
        vendor_settings_updates_total.labels(outcome="not_found").inc()
        return None

    changes = {key: patch[key] for key in VENDOR_SETTINGS_FIELDS if key in patch}
    if not changes:
        vendor_settings_updates_total.labels(outcome="noop").inc()
        return vendor_to_dict(vendor)

    # Ownership predicate is repeated on the write itself
    stmt = (
        update(Vendor)
        .where(Vendor.id == vendor_id, Vendor.merchant_id == merchant_id)
        .values(**changes, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()

    if result.rowcount == 0:
        vendor_settings_updates_total.labels(outcome="not_found").inc()
        return None

    db.refresh(vendor)
    vendor_settings_updates_total.labels(outcome="updated").inc()
    logger.info(
        f"Vendor settings updated: {vendor_id}",
        extra={"merchant_id": merchant_id, "vendor_id": vendor_id, "fields": list(changes)},
    )
    return vendor_to_dict(vendor)
