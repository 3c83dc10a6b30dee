"""Inventory snapshot reader.

Materialises the live stock picture of a merchant from the catalog
mirror:
- ``load_stock_positions``: the shared variation x IN_STOCK location
  shape every stock-health consumer folds (dashboard, suggestions, low stock)
- ``load_pending_po_coverage``: outstanding PO quantity per variation
- ``count_global_oos``: merchant-wide OOS count (INNER join from inventory)
- ``get_inventory`` / ``get_low_stock``: listing endpoints

Driver values are coerced once here; nothing downstream re-parses them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from app.db.models import (
    PO_TERMINAL_STATUSES,
    STATE_IN_STOCK,
    STATE_RESERVED_FOR_SALE,
)
from app.db.utils import as_bool, as_float, as_int, as_optional_int, exec_scoped
from app.domain.supply.reorder_math import calculate_days_of_stock
from app.domain.supply.stock_health import StockPosition
from app.services.images import batch_resolve_image_urls, parse_json_ids

logger = logging.getLogger(__name__)

# Variation x IN_STOCK location. LEFT joins keep variations without any
# inventory row (ic.catalog_object_id IS NULL); committed, velocity and the
# location override are matched on the SAME location as the IN_STOCK row.
_POSITIONS_SQL = """
    SELECT
        v.id AS variation_id,
        v.name AS variation_name,
        v.sku,
        v.price_money,
        v.case_pack_quantity,
        v.reorder_multiple,
        v.stock_alert_min,
        v.stock_alert_max,
        v.images,
        v.discontinued,
        i.id AS item_id,
        i.name AS item_name,
        i.category_name,
        i.images AS item_images,
        ic.catalog_object_id AS inventory_row,
        ic.location_id,
        ic.quantity AS on_hand,
        ic_c.quantity AS committed,
        l.name AS location_name,
        sv.daily_avg_quantity,
        sv.weekly_avg_quantity,
        vls.stock_alert_min AS location_alert_min,
        vls.stock_alert_max AS location_alert_max
    FROM variations v
    JOIN items i ON v.item_id = i.id AND i.merchant_id = :merchant_id
    LEFT JOIN inventory_counts ic ON ic.catalog_object_id = v.id
        AND ic.merchant_id = :merchant_id
        AND ic.state = :in_stock
    LEFT JOIN inventory_counts ic_c ON ic_c.catalog_object_id = v.id
        AND ic_c.merchant_id = :merchant_id
        AND ic_c.state = :reserved
        AND ic_c.location_id = ic.location_id
    LEFT JOIN locations l ON l.id = ic.location_id AND l.merchant_id = :merchant_id
    LEFT JOIN sales_velocity sv ON sv.variation_id = v.id
        AND sv.merchant_id = :merchant_id
        AND sv.period_days = 91
        AND (sv.location_id = ic.location_id OR (sv.location_id IS NULL AND ic.location_id IS NULL))
    LEFT JOIN variation_location_settings vls ON vls.variation_id = v.id
        AND vls.merchant_id = :merchant_id
        AND vls.location_id = ic.location_id
    WHERE v.merchant_id = :merchant_id
      AND COALESCE(v.is_deleted, FALSE) = FALSE
      AND COALESCE(i.is_deleted, FALSE) = FALSE
"""

_NOT_DISCONTINUED = " AND COALESCE(v.discontinued, FALSE) = FALSE"


@dataclass(frozen=True)
class PositionRow:
    """A ``StockPosition`` plus the catalog attributes listings display."""

    position: StockPosition
    item_id: str
    item_name: str | None
    variation_name: str | None
    sku: str | None
    category_name: str | None
    location_name: str | None
    price_money: int | None
    case_pack_quantity: int | None
    reorder_multiple: int | None
    weekly_velocity: float = 0.0
    discontinued: bool = False
    images: list[str] = field(default_factory=list)
    item_images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VendorCost:
    """Vendor link of a variation with its unit cost."""

    vendor_id: str
    vendor_name: str | None
    vendor_code: str | None
    unit_cost_cents: int | None
    lead_time_days: int | None = None


def _require_merchant(merchant_id: int | None, operation: str) -> None:
    if merchant_id is None:
        raise ValueError(f"merchant_id is required for {operation}")


def _position_from_row(row: Any) -> PositionRow:
    has_row = row.inventory_row is not None
    position = StockPosition(
        variation_id=row.variation_id,
        location_id=row.location_id,
        # Present row with NULL quantity counts as zero; absent row stays None
        on_hand=as_int(row.on_hand) if has_row else None,
        committed=as_int(row.committed),
        daily_velocity=as_float(row.daily_avg_quantity),
        variation_alert_min=as_optional_int(row.stock_alert_min),
        variation_alert_max=as_optional_int(row.stock_alert_max),
        location_alert_min=as_optional_int(row.location_alert_min),
        location_alert_max=as_optional_int(row.location_alert_max),
    )
    return PositionRow(
        position=position,
        item_id=row.item_id,
        item_name=row.item_name,
        variation_name=row.variation_name,
        sku=row.sku,
        category_name=row.category_name,
        location_name=row.location_name,
        price_money=as_optional_int(row.price_money),
        case_pack_quantity=as_optional_int(row.case_pack_quantity),
        reorder_multiple=as_optional_int(row.reorder_multiple),
        weekly_velocity=as_float(row.weekly_avg_quantity),
        discontinued=as_bool(row.discontinued),
        images=parse_json_ids(row.images),
        item_images=parse_json_ids(row.item_images),
    )


def load_stock_positions(
    db: Session,
    merchant_id: int,
    *,
    location_id: str | None = None,
    variation_ids: list[str] | None = None,
    include_discontinued: bool = False,
) -> list[PositionRow]:
    """Load stock positions for non-deleted variations.

    Discontinued variations are left out unless ``include_discontinued``
    is set; stock-health consumers must never see them.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        location_id: Restrict to one IN_STOCK location (drops absent rows)
        variation_ids: Restrict to these variations
        include_discontinued: Also return discontinued variations (listings)

    Returns:
        One row per variation x IN_STOCK location, plus one ``on_hand=None``
        row for each variation without any inventory row

    """
    _require_merchant(merchant_id, "load_stock_positions")

    sql = _POSITIONS_SQL
    params: dict[str, Any] = {"in_stock": STATE_IN_STOCK, "reserved": STATE_RESERVED_FOR_SALE}
    expanding: tuple[str, ...] = ()
    if not include_discontinued:
        sql += _NOT_DISCONTINUED
    if location_id:
        sql += " AND ic.location_id = :location_id"
        params["location_id"] = location_id
    if variation_ids is not None:
        if not variation_ids:
            return []
        sql += " AND v.id IN :variation_ids"
        params["variation_ids"] = list(variation_ids)
        expanding = ("variation_ids",)
    sql += " ORDER BY i.name, v.name, v.id, l.name"

    result = exec_scoped(db, sql, params, merchant_id=merchant_id, expanding=expanding)
    return [_position_from_row(row) for row in result]


def load_pending_po_coverage(db: Session, merchant_id: int) -> dict[str, float]:
    """Outstanding (ordered - received) quantity per variation on open POs.

    Only lines on non-terminal orders with positive outstanding quantity
    count.
    """
    _require_merchant(merchant_id, "load_pending_po_coverage")
    result = exec_scoped(
        db,
        """
        SELECT poi.variation_id,
               SUM(poi.quantity_ordered - COALESCE(poi.received_quantity, 0)) AS outstanding
        FROM purchase_order_items poi
        JOIN purchase_orders po ON poi.purchase_order_id = po.id
            AND po.merchant_id = :merchant_id
        WHERE poi.merchant_id = :merchant_id
          AND po.status NOT IN :terminal
          AND (poi.quantity_ordered - COALESCE(poi.received_quantity, 0)) > 0
        GROUP BY poi.variation_id
        """,
        {"terminal": list(PO_TERMINAL_STATUSES)},
        merchant_id=merchant_id,
        expanding=("terminal",),
    )
    return {row.variation_id: as_float(row.outstanding) for row in result}


def count_global_oos(db: Session, merchant_id: int) -> int:
    """Distinct variations with an IN_STOCK row at quantity 0, merchant-wide.

    Same OOS definition as ``stock_health.is_out_of_stock``: the inventory
    row must exist (INNER join from inventory_counts).
    """
    _require_merchant(merchant_id, "count_global_oos")
    result = exec_scoped(
        db,
        """
        SELECT COUNT(DISTINCT v.id) AS oos_count
        FROM inventory_counts ic
        JOIN variations v ON ic.catalog_object_id = v.id AND v.merchant_id = :merchant_id
        JOIN items i ON v.item_id = i.id AND i.merchant_id = :merchant_id
        WHERE ic.merchant_id = :merchant_id
          AND ic.state = :in_stock
          AND COALESCE(ic.quantity, 0) = 0
          AND COALESCE(v.is_deleted, FALSE) = FALSE
          AND COALESCE(i.is_deleted, FALSE) = FALSE
          AND COALESCE(v.discontinued, FALSE) = FALSE
        """,
        {"in_stock": STATE_IN_STOCK},
        merchant_id=merchant_id,
    )
    return as_int(result.scalar())


def load_vendor_links(db: Session, merchant_id: int) -> dict[str, list[VendorCost]]:
    """Vendor links per variation, cheapest first (unit cost asc, earliest link first).

    Links without a cost sort after costed ones.
    """
    _require_merchant(merchant_id, "load_vendor_links")
    result = exec_scoped(
        db,
        """
        SELECT vv.variation_id, vv.vendor_id, vv.vendor_code, vv.unit_cost_money,
               vv.created_at, vv.id AS link_id, ve.name AS vendor_name, ve.lead_time_days
        FROM variation_vendors vv
        JOIN vendors ve ON vv.vendor_id = ve.id AND ve.merchant_id = :merchant_id
        WHERE vv.merchant_id = :merchant_id
        """,
        merchant_id=merchant_id,
    )
    rows = sorted(
        result,
        key=lambda r: (
            r.unit_cost_money is None,
            as_int(r.unit_cost_money),
            str(r.created_at or ""),
            as_int(r.link_id),
        ),
    )
    links: dict[str, list[VendorCost]] = {}
    for row in rows:
        links.setdefault(row.variation_id, []).append(
            VendorCost(
                vendor_id=row.vendor_id,
                vendor_name=row.vendor_name,
                vendor_code=row.vendor_code,
                unit_cost_cents=as_optional_int(row.unit_cost_money),
                lead_time_days=as_optional_int(row.lead_time_days),
            )
        )
    return links


def load_cheapest_vendors(db: Session, merchant_id: int) -> dict[str, VendorCost]:
    """Primary (cheapest) vendor link per variation."""
    return {variation_id: links[0] for variation_id, links in load_vendor_links(db, merchant_id).items()}


def _velocity_by_window(db: Session, merchant_id: int) -> dict[tuple[str, str | None, int], Any]:
    result = exec_scoped(
        db,
        """
        SELECT variation_id, location_id, period_days, daily_avg_quantity, weekly_avg_quantity
        FROM sales_velocity
        WHERE merchant_id = :merchant_id
        """,
        merchant_id=merchant_id,
    )
    return {(row.variation_id, row.location_id, as_int(row.period_days)): row for row in result}


def _weekly(velocity: dict, pos: StockPosition, period: int) -> float | None:
    hit = velocity.get((pos.variation_id, pos.location_id, period))
    return as_float(hit.weekly_avg_quantity) if hit is not None else None


def get_inventory(
    db: Session,
    merchant_id: int,
    *,
    location_id: str | None = None,
    low_stock: bool = False,
) -> dict[str, Any]:
    """Current inventory levels with sales velocity.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        location_id: Restrict to one location
        low_stock: Only rows whose on-hand is below the effective floor

    Returns:
        Dict with ``count`` and ``inventory`` rows ordered by item,
        variation and location name

    Raises:
        ValueError: If merchant_id is missing

    """
    _require_merchant(merchant_id, "get_inventory")

    # Listings only show real inventory rows; discontinued stock is still on the shelf
    rows = [
        r
        for r in load_stock_positions(db, merchant_id, location_id=location_id, include_discontinued=True)
        if r.position.has_inventory_row
    ]
    if low_stock:
        rows = [r for r in rows if _units_below_min(r) > 0]

    velocity = _velocity_by_window(db, merchant_id)
    vendors = load_cheapest_vendors(db, merchant_id)
    image_urls = batch_resolve_image_urls(
        db, merchant_id, [{"images": r.images, "item_images": r.item_images} for r in rows]
    )

    inventory = []
    for index, row in enumerate(rows):
        pos = row.position
        vendor = vendors.get(pos.variation_id)

        inventory.append(
            {
                "variation_id": pos.variation_id,
                "item_id": row.item_id,
                "item_name": row.item_name,
                "variation_name": row.variation_name,
                "sku": row.sku,
                "category_name": row.category_name,
                "price_money": row.price_money,
                "location_id": pos.location_id,
                "location_name": row.location_name,
                "quantity": pos.on_hand,
                "committed_quantity": pos.committed,
                "available_quantity": pos.available,
                "stock_alert_min": pos.effective_alert_min,
                "stock_alert_max": pos.effective_alert_max,
                "case_pack_quantity": row.case_pack_quantity,
                "discontinued": row.discontinued,
                "daily_avg_quantity": pos.daily_velocity,
                "weekly_avg_91d": _weekly(velocity, pos, 91),
                "weekly_avg_182d": _weekly(velocity, pos, 182),
                "weekly_avg_365d": _weekly(velocity, pos, 365),
                "days_until_stockout": calculate_days_of_stock(pos.available, pos.daily_velocity),
                "vendor_name": vendor.vendor_name if vendor else None,
                "vendor_code": vendor.vendor_code if vendor else None,
                "unit_cost_cents": vendor.unit_cost_cents if vendor else None,
                "image_urls": image_urls.get(index, []),
            }
        )

    logger.debug(f"Inventory listing: {len(inventory)} rows for merchant {merchant_id}")
    return {"count": len(inventory), "inventory": inventory}


def _units_below_min(row: PositionRow) -> int:
    floor = row.position.effective_alert_min
    if floor is None or row.position.on_hand is None:
        return 0
    return floor - row.position.on_hand


def get_low_stock(db: Session, merchant_id: int) -> dict[str, Any]:
    """Variations whose on-hand at a location is below the effective floor.

    Returns:
        Dict with ``count`` and ``low_stock_items``, largest shortfall first

    """
    _require_merchant(merchant_id, "get_low_stock")

    rows = [r for r in load_stock_positions(db, merchant_id) if _units_below_min(r) > 0]
    rows.sort(key=lambda r: (-_units_below_min(r), r.item_name or ""))

    image_urls = batch_resolve_image_urls(
        db, merchant_id, [{"images": r.images, "item_images": r.item_images} for r in rows]
    )

    items = [
        {
            "id": r.position.variation_id,
            "sku": r.sku,
            "item_name": r.item_name,
            "variation_name": r.variation_name,
            "current_stock": r.position.on_hand,
            "stock_alert_min": r.position.effective_alert_min,
            "stock_alert_max": r.position.effective_alert_max,
            "location_id": r.position.location_id,
            "location_name": r.location_name,
            "units_below_min": _units_below_min(r),
            "image_urls": image_urls.get(index, []),
        }
        for index, r in enumerate(rows)
    ]
    return {"count": len(items), "low_stock_items": items}


__all__ = [
    "PositionRow",
    "VendorCost",
    "count_global_oos",
    "get_inventory",
    "get_low_stock",
    "load_cheapest_vendors",
    "load_vendor_links",
    "load_pending_po_coverage",
    "load_stock_positions",
]
