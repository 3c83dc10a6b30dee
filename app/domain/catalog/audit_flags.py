"""Catalog data-quality flags.

Each variation is checked for missing or inconsistent catalog data.
Physical-product checks (SKU, UPC, inventory, vendor, cost) only apply
to regular products, not services or gift cards.

NO DATA ACCESS - pure functions only.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.supply.stock_health import has_reorder_floor

# (flag, label, counts toward issue_count); order is display order
AUDIT_CHECKS: tuple[tuple[str, str | None, bool], ...] = (
    ("missing_category", "No Category", True),
    ("not_taxable", "Not Taxable", True),
    ("missing_price", "No Price", True),
    ("missing_description", "No Description", True),
    ("missing_item_image", "No Image", True),
    ("missing_sku", "No SKU", True),
    ("missing_upc", "No UPC", True),
    ("stock_tracking_off", "Stock Tracking Off", True),
    ("inventory_alerts_off", "Inv Alerts Off", True),
    ("no_reorder_threshold", "OOS, No Min", True),
    ("missing_vendor", "No Vendor", True),
    ("missing_cost", "No Cost", True),
    ("location_mismatch", "Location Mismatch", True),
    ("any_channel_off", "Channel Disabled", True),
    ("pos_disabled", "POS Disabled", False),
    ("online_disabled", "Online Disabled", False),
    ("missing_seo_title", "No SEO Title", False),
    ("missing_seo_description", "No SEO Description", False),
    ("no_tax_ids", "No Tax IDs", False),
    ("missing_variation_image", None, False),
)

AUDIT_FLAGS: tuple[str, ...] = tuple(flag for flag, _, _ in AUDIT_CHECKS)
COUNTED_FLAGS: frozenset[str] = frozenset(flag for flag, _, counted in AUDIT_CHECKS if counted)


@dataclass(frozen=True)
class AuditRecord:
    """Catalog facts about one variation, as loaded for the audit."""

    variation_name: str | None = None
    sku: str | None = None
    upc: str | None = None
    price_money: int | None = None
    track_inventory: bool | None = None
    inventory_alert_type: str | None = None
    inventory_alert_threshold: int | None = None
    stock_alert_min: int | None = None
    location_stock_alert_min: int | None = None
    has_variation_images: bool = False
    has_item_images: bool = False
    category_id: str | None = None
    category_name: str | None = None
    description: str | None = None
    product_type: str | None = None
    taxable: bool | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    available_online: bool | None = None
    item_present_at_all: bool | None = None
    item_location_count: int = 0
    has_tax_ids: bool = False
    variation_present_at_all: bool | None = None
    vendor_count: int = 0
    unit_cost_cents: int | None = None
    available_quantity: int = 0
    discontinued: bool = False


def is_physical(product_type: str | None) -> bool:
    return product_type is None or product_type == "REGULAR"


def _blank(value: str | None) -> bool:
    return value is None or value == ""


def is_missing_reorder_threshold(record: AuditRecord) -> bool:
    """Out of available stock with no floor configured at any level."""
    if record.discontinued or not is_physical(record.product_type):
        return False
    if record.available_quantity > 0:
        return False
    return not has_reorder_floor(
        record.stock_alert_min,
        record.location_stock_alert_min,
        record.inventory_alert_type,
        record.inventory_alert_threshold,
    )


def is_pos_disabled(record: AuditRecord) -> bool:
    """Item is neither at all locations nor at any listed location."""
    return not record.item_present_at_all and record.item_location_count == 0


def compute_flags(record: AuditRecord) -> dict[str, bool]:
    physical = is_physical(record.product_type)
    pos_disabled = is_pos_disabled(record)
    online_disabled = not record.available_online
    return {
        "missing_category": record.category_id is None or _blank(record.category_name),
        "not_taxable": not record.taxable,
        "missing_price": not record.price_money,
        "missing_description": _blank(record.description),
        "missing_item_image": not record.has_item_images,
        "missing_variation_image": not record.has_variation_images,
        "missing_sku": physical and _blank(record.sku),
        "missing_upc": physical and _blank(record.upc),
        "stock_tracking_off": physical and not record.track_inventory,
        "inventory_alerts_off": (
            physical
            and record.inventory_alert_type != "LOW_QUANTITY"
            and not record.location_stock_alert_min
        ),
        "no_reorder_threshold": is_missing_reorder_threshold(record),
        "missing_vendor": physical and record.vendor_count == 0,
        "missing_cost": (
            physical
            and record.unit_cost_cents is None
            # Samples ship free
            and "SAMPLE" not in (record.variation_name or "").upper()
        ),
        "missing_seo_title": _blank(record.seo_title),
        "missing_seo_description": _blank(record.seo_description),
        "location_mismatch": record.variation_present_at_all is True and record.item_present_at_all is False,
        "no_tax_ids": not record.has_tax_ids,
        "pos_disabled": pos_disabled,
        "online_disabled": online_disabled,
        "any_channel_off": pos_disabled or online_disabled,
    }


def summarize_issues(flags: dict[str, bool]) -> tuple[int, list[str]]:
    """(issue_count, labels) for one variation's flags."""
    count = 0
    labels: list[str] = []
    for flag, label, counted in AUDIT_CHECKS:
        if not flags.get(flag):
            continue
        if counted:
            count += 1
        if label:
            labels.append(label)
    return count, labels
