"""Catalog audit service.

Read-only data-quality report over every non-deleted variation of a
merchant. Stock figures use the same on-hand minus committed rule as
the reorder engine.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from sqlalchemy.orm import Session

from app.db.models import STATE_IN_STOCK, STATE_RESERVED_FOR_SALE, VELOCITY_PERIODS
from app.db.utils import as_bool, as_float, as_int, as_optional_int, exec_scoped
from app.domain.catalog.audit_flags import (
    AUDIT_FLAGS,
    COUNTED_FLAGS,
    AuditRecord,
    compute_flags,
    summarize_issues,
)
from app.domain.supply.reorder_math import calculate_days_of_stock
from app.services.images import batch_resolve_image_urls, parse_json_ids
from app.services.inventory_snapshot import load_cheapest_vendors, load_pending_po_coverage

logger = logging.getLogger(__name__)

# Square location ids are alphanumeric
_LOCATION_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Velocity window at the audited location, or the merchant-wide (NULL location) row
_VELOCITY_JOIN = """
    LEFT JOIN sales_velocity sv{period} ON sv{period}.variation_id = v.id
        AND sv{period}.merchant_id = :merchant_id
        AND sv{period}.period_days = {period}
        AND ((CAST(:location_id AS TEXT) IS NULL AND sv{period}.location_id IS NULL)
             OR sv{period}.location_id = :location_id)
"""

_AUDIT_SQL = """
    SELECT
        v.id AS variation_id,
        v.sku,
        v.upc,
        v.name AS variation_name,
        v.price_money,
        v.track_inventory,
        v.inventory_alert_type,
        v.inventory_alert_threshold,
        v.stock_alert_min,
        v.images AS variation_images,
        v.present_at_all_locations AS variation_present_at_all,
        v.discontinued,
        i.id AS item_id,
        i.name AS item_name,
        i.description,
        i.category_id,
        i.category_name,
        i.product_type,
        i.taxable,
        i.available_online,
        i.seo_title,
        i.seo_description,
        i.images AS item_images,
        i.present_at_all_locations AS item_present_at_all,
        i.present_at_location_ids AS item_present_at_location_ids,
        i.tax_ids,
        (SELECT COUNT(*) FROM variation_vendors vv
         WHERE vv.variation_id = v.id AND vv.merchant_id = :merchant_id) AS vendor_count,
        (SELECT COALESCE(SUM(ic.quantity), 0) FROM inventory_counts ic
         WHERE ic.catalog_object_id = v.id AND ic.merchant_id = :merchant_id
           AND ic.state = :in_stock
           AND (CAST(:location_id AS TEXT) IS NULL OR ic.location_id = :location_id)) AS current_stock,
        (SELECT COALESCE(SUM(ic.quantity), 0) FROM inventory_counts ic
         WHERE ic.catalog_object_id = v.id AND ic.merchant_id = :merchant_id
           AND ic.state = :reserved
           AND (CAST(:location_id AS TEXT) IS NULL OR ic.location_id = :location_id)) AS committed_quantity,
        (SELECT MAX(vls.stock_alert_min) FROM variation_location_settings vls
         WHERE vls.variation_id = v.id AND vls.merchant_id = :merchant_id
           AND vls.stock_alert_min > 0) AS location_stock_alert_min,
        sv91.daily_avg_quantity AS daily_velocity,
        sv91.weekly_avg_quantity AS weekly_avg_91d,
        sv182.weekly_avg_quantity AS weekly_avg_182d,
        sv365.weekly_avg_quantity AS weekly_avg_365d,
        sv91.total_quantity_sold AS total_sold_91d
    FROM variations v
    JOIN items i ON v.item_id = i.id AND i.merchant_id = :merchant_id
{velocity_joins}    WHERE v.merchant_id = :merchant_id
      AND COALESCE(v.is_deleted, FALSE) = FALSE
      AND COALESCE(i.is_deleted, FALSE) = FALSE
    ORDER BY i.name, v.name
""".replace(
    "{velocity_joins}", "".join(_VELOCITY_JOIN.format(period=period) for period in VELOCITY_PERIODS)
)


def sanitize_location_id(location_id: str | None) -> str | None:
    """Location id if it looks like a Square id, else None (filter ignored)."""
    if location_id and _LOCATION_ID_RE.match(location_id):
        return location_id
    return None


def _optional_bool(value: Any) -> bool | None:
    return as_bool(value) if value is not None else None


def _days_of_stock(available: int, velocity: float) -> float | None:
    if velocity > 0 and available > 0:
        return calculate_days_of_stock(available, velocity)
    return None


def get_catalog_audit(
    db: Session,
    merchant_id: int,
    location_id: str | None = None,
    issue_type: str | None = None,
) -> dict[str, Any]:
    """Audit catalog data quality.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        location_id: Compute stock at this location only (malformed ids are ignored)
        issue_type: Only return variations with this flag set

    Returns:
        ``{"stats": {...}, "count": int, "items": [...]}``; stats cover
        all audited variations, ``items`` honour ``issue_type``

    Raises:
        ValueError: If merchant_id is missing or issue_type is unknown

    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for get_catalog_audit")
    if issue_type is not None and issue_type not in AUDIT_FLAGS:
        raise ValueError(f"Unknown issue_type: {issue_type}")

    location = sanitize_location_id(location_id)
    result = exec_scoped(
        db,
        _AUDIT_SQL,
        {"location_id": location, "in_stock": STATE_IN_STOCK, "reserved": STATE_RESERVED_FOR_SALE},
        merchant_id=merchant_id,
    )
    rows = list(result)
    vendors = load_cheapest_vendors(db, merchant_id)
    on_order = load_pending_po_coverage(db, merchant_id)

    audited: list[dict[str, Any]] = []
    for row in rows:
        vendor = vendors.get(row.variation_id)
        available = as_int(row.current_stock) - as_int(row.committed_quantity)
        variation_images = parse_json_ids(row.variation_images)
        item_images = parse_json_ids(row.item_images)
        record = AuditRecord(
            variation_name=row.variation_name,
            sku=row.sku,
            upc=row.upc,
            price_money=as_optional_int(row.price_money),
            track_inventory=_optional_bool(row.track_inventory),
            inventory_alert_type=row.inventory_alert_type,
            inventory_alert_threshold=as_optional_int(row.inventory_alert_threshold),
            stock_alert_min=as_optional_int(row.stock_alert_min),
            location_stock_alert_min=as_optional_int(row.location_stock_alert_min),
            has_variation_images=bool(variation_images),
            has_item_images=bool(item_images),
            category_id=row.category_id,
            category_name=row.category_name,
            description=row.description,
            product_type=row.product_type,
            taxable=_optional_bool(row.taxable),
            seo_title=row.seo_title,
            seo_description=row.seo_description,
            available_online=_optional_bool(row.available_online),
            item_present_at_all=_optional_bool(row.item_present_at_all),
            item_location_count=len(parse_json_ids(row.item_present_at_location_ids)),
            has_tax_ids=bool(parse_json_ids(row.tax_ids)),
            variation_present_at_all=_optional_bool(row.variation_present_at_all),
            vendor_count=as_int(row.vendor_count),
            unit_cost_cents=vendor.unit_cost_cents if vendor else None,
            available_quantity=available,
            discontinued=as_bool(row.discontinued),
        )
        flags = compute_flags(record)
        issue_count, issues = summarize_issues(flags)
        velocity = as_float(row.daily_velocity)
        audited.append(
            {
                "variation_id": row.variation_id,
                "item_id": row.item_id,
                "item_name": row.item_name,
                "variation_name": row.variation_name,
                "sku": row.sku,
                "upc": row.upc,
                "category_name": row.category_name,
                "product_type": row.product_type,
                "price_money": record.price_money,
                "vendor_name": vendor.vendor_name if vendor else None,
                "unit_cost_cents": record.unit_cost_cents,
                "current_stock": as_int(row.current_stock),
                "committed_quantity": as_int(row.committed_quantity),
                "available_quantity": available,
                "on_order_quantity": as_float(on_order.get(row.variation_id)),
                "daily_velocity": velocity,
                "weekly_avg_91d": as_float(row.weekly_avg_91d),
                "weekly_avg_182d": as_float(row.weekly_avg_182d),
                "weekly_avg_365d": as_float(row.weekly_avg_365d),
                "total_sold_91d": as_float(row.total_sold_91d),
                "days_of_stock": _days_of_stock(available, velocity),
                **flags,
                "issue_count": issue_count,
                "issues": issues,
                "images": variation_images,
                "item_images": item_images,
            }
        )

    stats: dict[str, int] = {"total_items": len(audited)}
    for flag in AUDIT_FLAGS:
        stats[flag] = sum(1 for item in audited if item[flag])
    stats["items_with_issues"] = sum(
        1 for item in audited if any(item[flag] for flag in COUNTED_FLAGS)
    )

    items = [item for item in audited if item[issue_type]] if issue_type else audited

    image_urls = batch_resolve_image_urls(db, merchant_id, items)
    for index, item in enumerate(items):
        item["image_urls"] = image_urls.get(index, [])
        del item["images"]
        del item["item_images"]

    logger.info(
        "Catalog audit completed",
        extra={
            "merchant_id": merchant_id,
            "location_id": location,
            "issue_type": issue_type,
            "total_items": stats["total_items"],
            "items_with_issues": stats["items_with_issues"],
        },
    )
    return {"stats": stats, "count": len(items), "items": items}
