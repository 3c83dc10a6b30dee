"""Tests for the vendor dashboard aggregator."""

from __future__ import annotations

from datetime import date

import pytest

from app.db.models import PO_CANCELLED, PO_DRAFT, PO_RECEIVED, PO_SUBMITTED, MerchantSettings
from app.domain.supply.vendor_status import BELOW_MIN, HAS_OOS, NEEDS_ORDER, OK, READY
from app.services.vendor_dashboard import (
    UNASSIGNED_VENDOR_ID,
    UNASSIGNED_VENDOR_NAME,
    get_vendor_dashboard,
)

M = 1


@pytest.fixture
def shop(seed):
    seed.merchant(M)
    seed.location(M, "L1", "Main")
    seed.location(M, "L2", "Annex")
    return seed


def by_id(dashboard):
    return {v["id"]: v for v in dashboard["vendors"]}


def test_empty_merchant(db, shop, defaults):
    assert get_vendor_dashboard(db, M, defaults) == {"vendors": [], "global_oos_count": 0}


def test_vendor_without_items_still_listed(db, shop, defaults):
    """One ACTIVE vendor with nothing linked; OOS stock linked to an inactive vendor."""
    shop.vendor(M, "ACME")
    shop.vendor(M, "OLD", status="INACTIVE")
    shop.variation(M, "V1")
    shop.link(M, "V1", "OLD", 100)
    shop.stock(M, "V1", "L1", 0)

    dashboard = get_vendor_dashboard(db, M, defaults)

    assert [v["id"] for v in dashboard["vendors"]] == ["ACME"]
    acme = dashboard["vendors"][0]
    for key in (
        "total_items",
        "oos_count",
        "reorder_count",
        "reorder_value",
        "costed_reorder_count",
        "pending_po_value",
        "minimum_order_amount",
    ):
        assert acme[key] == 0
    assert acme["status"] == OK
    assert acme["schedule_type"] == "anytime"
    assert acme["default_supply_days"] == 45
    assert dashboard["global_oos_count"] == 1


def test_vendor_counts(db, shop, defaults):
    shop.vendor(M, "ACME", minimum_order_amount=1000)
    # empty shelf, costed
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 400)
    shop.stock(M, "V1", "L1", 0)
    # plenty of stock, no sales
    shop.variation(M, "V2")
    shop.link(M, "V2", "ACME", 300)
    shop.stock(M, "V2", "L1", 100)
    # 10 days of runway, costed
    shop.variation(M, "V3")
    shop.link(M, "V3", "ACME", 500)
    shop.stock(M, "V3", "L1", 10)
    shop.velocity(M, "V3", "L1", 1)
    # 5 days of runway, no cost
    shop.variation(M, "V4")
    shop.link(M, "V4", "ACME")
    shop.stock(M, "V4", "L1", 5)
    shop.velocity(M, "V4", "L1", 1)

    acme = by_id(get_vendor_dashboard(db, M, defaults))["ACME"]

    assert acme["total_items"] == 4
    assert acme["oos_count"] == 1
    assert acme["reorder_count"] == 3
    assert acme["reorder_value"] == 900
    assert acme["costed_reorder_count"] == 2
    assert acme["status"] == HAS_OOS
    for key in ("total_items", "oos_count", "reorder_count", "reorder_value", "minimum_order_amount"):
        assert type(acme[key]) is int


def test_status_from_minimum_order(db, shop, defaults):
    shop.vendor(M, "SMALL", minimum_order_amount=1000)
    shop.vendor(M, "EXACT", minimum_order_amount=500)
    shop.vendor(M, "NOMIN")
    for vendor_id in ("SMALL", "EXACT", "NOMIN"):
        variation_id = f"V-{vendor_id}"
        shop.variation(M, variation_id)
        shop.link(M, variation_id, vendor_id, 500)
        shop.stock(M, variation_id, "L1", 3)
        shop.velocity(M, variation_id, "L1", 1)

    vendors = by_id(get_vendor_dashboard(db, M, defaults))
    assert vendors["SMALL"]["status"] == BELOW_MIN
    assert vendors["EXACT"]["status"] == READY
    assert vendors["NOMIN"]["status"] == NEEDS_ORDER


def test_oos_deduplicated_across_locations(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 0)
    shop.stock(M, "V1", "L2", 0)

    dashboard = get_vendor_dashboard(db, M, defaults)
    acme = by_id(dashboard)["ACME"]
    assert acme["total_items"] == 1
    assert acme["oos_count"] == 1
    assert acme["reorder_value"] == 100
    assert dashboard["global_oos_count"] == 1


def test_variation_without_inventory_row(db, shop, defaults):
    """Absent inventory is not OOS but still needs reorder."""
    shop.vendor(M, "ACME")
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 100)

    dashboard = get_vendor_dashboard(db, M, defaults)
    acme = by_id(dashboard)["ACME"]
    assert acme["oos_count"] == 0
    assert acme["reorder_count"] == 1
    assert dashboard["global_oos_count"] == 0


def test_committed_stock_reduces_available(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 4, committed=4)

    acme = by_id(get_vendor_dashboard(db, M, defaults))["ACME"]
    assert acme["oos_count"] == 0
    assert acme["reorder_count"] == 1


def test_stock_cap_suppresses_reorder(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1", stock_alert_max=5)
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 5)
    shop.velocity(M, "V1", "L1", 1)

    assert by_id(get_vendor_dashboard(db, M, defaults))["ACME"]["reorder_count"] == 0


def test_location_floor_triggers_reorder(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1", stock_alert_min=1)
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 6)
    shop.location_settings(M, "V1", "L1", stock_alert_min=8)

    assert by_id(get_vendor_dashboard(db, M, defaults))["ACME"]["reorder_count"] == 1


def test_open_po_suppresses_only_positive_stock(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "LOW")
    shop.link(M, "LOW", "ACME", 100)
    shop.stock(M, "LOW", "L1", 10)
    shop.velocity(M, "LOW", "L1", 1)
    shop.variation(M, "EMPTY")
    shop.link(M, "EMPTY", "ACME", 100)
    shop.stock(M, "EMPTY", "L1", 0)
    shop.purchase_order(M, "ACME", PO_SUBMITTED, lines=[("LOW", 20, 0), ("EMPTY", 20, 0)])

    acme = by_id(get_vendor_dashboard(db, M, defaults))["ACME"]
    assert acme["reorder_count"] == 1
    assert acme["reorder_value"] == 100


def test_received_or_cancelled_po_does_not_suppress(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 10)
    shop.velocity(M, "V1", "L1", 1)
    shop.purchase_order(M, "ACME", PO_RECEIVED, lines=[("V1", 20, 0)])
    shop.purchase_order(M, "ACME", PO_CANCELLED, lines=[("V1", 20, 0)])
    shop.purchase_order(M, "ACME", PO_SUBMITTED, lines=[("V1", 20, 20)])

    assert by_id(get_vendor_dashboard(db, M, defaults))["ACME"]["reorder_count"] == 1


def test_po_value_and_last_ordered(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.purchase_order(M, "ACME", PO_DRAFT, total_cents=1200)
    shop.purchase_order(M, "ACME", PO_SUBMITTED, total_cents=3000, order_date=date(2026, 3, 1))
    shop.purchase_order(M, "ACME", PO_RECEIVED, total_cents=9999, order_date=date(2026, 4, 2))
    shop.purchase_order(M, "ACME", PO_CANCELLED, total_cents=5000, order_date=date(2026, 5, 1))

    acme = by_id(get_vendor_dashboard(db, M, defaults))["ACME"]
    assert acme["pending_po_value"] == 4200
    assert acme["last_ordered_at"] == "2026-04-02"


def test_unassigned_bucket(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "LINKED")
    shop.link(M, "LINKED", "ACME", 100)
    shop.stock(M, "LINKED", "L1", 50)
    shop.variation(M, "LOOSE")
    shop.stock(M, "LOOSE", "L1", 0)
    shop.variation(M, "DISC", discontinued=True)
    shop.stock(M, "DISC", "L1", 0)

    dashboard = get_vendor_dashboard(db, M, defaults)
    vendors = dashboard["vendors"]

    assert vendors[-1]["id"] == UNASSIGNED_VENDOR_ID
    unassigned = vendors[-1]
    assert unassigned["name"] == UNASSIGNED_VENDOR_NAME
    assert unassigned["total_items"] == 2
    assert unassigned["oos_count"] == 1
    assert unassigned["reorder_count"] == 1
    assert unassigned["reorder_value"] == 0
    assert unassigned["costed_reorder_count"] == 0
    assert unassigned["pending_po_value"] == 0
    assert unassigned["status"] == HAS_OOS
    # discontinued stock is excluded merchant-wide too
    assert dashboard["global_oos_count"] == 1


def test_deleted_variations_ignored(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "GONE", is_deleted=True)
    shop.link(M, "GONE", "ACME", 100)
    shop.stock(M, "GONE", "L1", 0)
    shop.variation(M, "GONE_ITEM", item_fields={"is_deleted": True})
    shop.stock(M, "GONE_ITEM", "L1", 0)

    dashboard = get_vendor_dashboard(db, M, defaults)
    assert [v["id"] for v in dashboard["vendors"]] == ["ACME"]
    assert dashboard["vendors"][0]["total_items"] == 0
    assert dashboard["global_oos_count"] == 0


def test_vendors_ordered_by_name(db, shop, defaults):
    shop.vendor(M, "V-Z", "Zeta Supply")
    shop.vendor(M, "V-A", "Alpha Foods")
    shop.variation(M, "LOOSE")

    names = [v["name"] for v in get_vendor_dashboard(db, M, defaults)["vendors"]]
    assert names == ["Alpha Foods", "Zeta Supply", UNASSIGNED_VENDOR_NAME]


def test_tenant_isolation(db, shop, defaults):
    shop.merchant(2, "Other")
    shop.location(2, "L9")
    shop.vendor(2, "THEIRS")
    shop.variation(2, "T1")
    shop.link(2, "T1", "THEIRS", 100)
    shop.stock(2, "T1", "L9", 0)
    shop.variation(2, "T2")
    shop.stock(2, "T2", "L9", 0)
    shop.vendor(M, "OURS")

    dashboard = get_vendor_dashboard(db, M, defaults)
    assert [v["id"] for v in dashboard["vendors"]] == ["OURS"]
    assert dashboard["global_oos_count"] == 0


def test_merchant_settings_change_threshold(db, shop, defaults):
    shop.vendor(M, "ACME")
    shop.variation(M, "V1")
    shop.link(M, "V1", "ACME", 100)
    shop.stock(M, "V1", "L1", 20)
    shop.velocity(M, "V1", "L1", 1)

    assert by_id(get_vendor_dashboard(db, M, defaults))["ACME"]["reorder_count"] == 1

    db.add(MerchantSettings(merchant_id=M, default_supply_days=10, reorder_safety_days=0))
    db.flush()
    acme = by_id(get_vendor_dashboard(db, M, defaults))["ACME"]
    assert acme["reorder_count"] == 0
    assert acme["default_supply_days"] == 10


def test_vendor_supply_days_override(db, shop, defaults):
    shop.vendor(M, "ACME", default_supply_days=30)
    assert by_id(get_vendor_dashboard(db, M, defaults))["ACME"]["default_supply_days"] == 30


def test_requires_merchant(db, defaults):
    with pytest.raises(ValueError, match="merchant_id is required"):
        get_vendor_dashboard(db, None, defaults)
