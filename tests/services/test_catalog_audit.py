"""Tests for the catalog audit report."""

from __future__ import annotations

import pytest

from app.services.catalog_audit import get_catalog_audit, sanitize_location_id

M = 1

CLEAN_ITEM = {
    "description": "Crunchy",
    "category_id": "CAT1",
    "category_name": "Food",
    "product_type": "REGULAR",
    "taxable": True,
    "tax_ids": ["TAX1"],
    "images": ["IMG1"],
    "seo_title": "Kibble",
    "seo_description": "Crunchy kibble",
    "available_online": True,
    "present_at_all_locations": True,
}


@pytest.fixture
def shop(seed):
    seed.merchant(M)
    seed.location(M, "L1", "Main")
    seed.location(M, "L2", "Annex")
    seed.vendor(M, "A", "Acme")
    seed.image(M, "IMG1", "https://cdn.example.com/img1.jpg")

    seed.variation(
        M,
        "CLEAN",
        item_name="A Kibble",
        item_fields=CLEAN_ITEM,
        sku="KB-1",
        upc="0001",
        price_money=1500,
        track_inventory=True,
        inventory_alert_type="LOW_QUANTITY",
        inventory_alert_threshold=2,
        images=["IMG1"],
    )
    seed.link(M, "CLEAN", "A", 700)
    seed.stock(M, "CLEAN", "L1", 10)
    seed.velocity(M, "CLEAN", None, 1)

    seed.variation(M, "PROBLEM", item_name="B Mystery")
    seed.stock(M, "PROBLEM", "L1", 0)
    return seed


def items_by_id(result):
    return {item["variation_id"]: item for item in result["items"]}


def test_clean_and_problem_items(db, shop):
    result = get_catalog_audit(db, M)
    items = items_by_id(result)

    clean = items["CLEAN"]
    assert clean["issue_count"] == 0
    assert clean["issues"] == []
    assert clean["days_of_stock"] == 10.0
    assert clean["vendor_name"] == "Acme"
    assert clean["image_urls"] == ["https://cdn.example.com/img1.jpg"]

    problem = items["PROBLEM"]
    assert problem["issue_count"] == 12
    assert "OOS, No Min" in problem["issues"]
    assert problem["no_reorder_threshold"] is True
    assert problem["missing_sku"] is True
    assert problem["stock_tracking_off"] is False
    assert problem["location_mismatch"] is False
    assert problem["online_disabled"] is True
    assert problem["any_channel_off"] is True
    assert "Channel Disabled" in problem["issues"]
    assert problem["no_tax_ids"] is True
    assert problem["days_of_stock"] is None
    assert problem["image_urls"] == []


def test_stats(db, shop):
    stats = get_catalog_audit(db, M)["stats"]
    assert stats["total_items"] == 2
    assert stats["items_with_issues"] == 1
    assert stats["missing_sku"] == 1
    assert stats["no_reorder_threshold"] == 1
    assert stats["missing_seo_title"] == 1


def test_issue_type_filter_keeps_full_stats(db, shop):
    result = get_catalog_audit(db, M, issue_type="missing_sku")
    assert result["count"] == 1
    assert [i["variation_id"] for i in result["items"]] == ["PROBLEM"]
    assert result["stats"]["total_items"] == 2


def test_unknown_issue_type(db, shop):
    with pytest.raises(ValueError, match="Unknown issue_type"):
        get_catalog_audit(db, M, issue_type="drop_tables")


def test_threshold_flag_follows_location(db, shop):
    shop.stock(M, "PROBLEM", "L2", 5)

    def flag(location_id):
        return items_by_id(get_catalog_audit(db, M, location_id=location_id))["PROBLEM"]["no_reorder_threshold"]

    assert flag(None) is False
    assert flag("L1") is True
    assert flag("L2") is False


def test_committed_counts_against_stock(db, shop):
    shop.variation(M, "HELD", item_name="C Held")
    shop.stock(M, "HELD", "L1", 3, committed=3)

    held = items_by_id(get_catalog_audit(db, M))["HELD"]
    assert held["available_quantity"] == 0
    assert held["no_reorder_threshold"] is True


def test_floors_suppress_threshold_flag(db, shop):
    shop.variation(M, "VMIN", item_name="D", stock_alert_min=3)
    shop.stock(M, "VMIN", "L1", 0)
    shop.variation(M, "LMIN", item_name="E")
    shop.stock(M, "LMIN", "L1", 0)
    shop.location_settings(M, "LMIN", "L1", stock_alert_min=4)

    items = items_by_id(get_catalog_audit(db, M))
    assert items["VMIN"]["no_reorder_threshold"] is False
    assert items["LMIN"]["no_reorder_threshold"] is False
    assert items["LMIN"]["inventory_alerts_off"] is False


def test_discontinued_never_flags_threshold(db, shop):
    shop.variation(M, "DISC", item_name="F", discontinued=True)
    shop.stock(M, "DISC", "L1", 0)

    assert items_by_id(get_catalog_audit(db, M))["DISC"]["no_reorder_threshold"] is False


def test_on_order_quantity(db, shop):
    shop.purchase_order(M, "A", lines=[("PROBLEM", 6, 0)])
    assert items_by_id(get_catalog_audit(db, M))["PROBLEM"]["on_order_quantity"] == 6.0


def test_malformed_location_is_ignored(db, shop):
    assert sanitize_location_id("L1'; DROP TABLE items; --") is None
    assert sanitize_location_id("LH7Q2Z9") == "LH7Q2Z9"
    result = get_catalog_audit(db, M, location_id="L1' OR '1'='1")
    assert result["stats"]["total_items"] == 2


def test_tenant_isolation(db, shop):
    shop.merchant(2)
    assert get_catalog_audit(db, 2)["stats"]["total_items"] == 0


def add_clean_variation(seed, variation_id, item_name, **item_overrides):
    seed.variation(
        M,
        variation_id,
        item_name=item_name,
        item_fields={**CLEAN_ITEM, **item_overrides},
        sku=f"SKU-{variation_id}",
        upc=f"UPC-{variation_id}",
        price_money=900,
        track_inventory=True,
        inventory_alert_type="LOW_QUANTITY",
        inventory_alert_threshold=1,
        images=["IMG1"],
        present_at_all_locations=item_overrides.get("present_at_all_locations", True),
    )
    seed.link(M, variation_id, "A", 300)
    seed.stock(M, variation_id, "L1", 4)


def test_channel_off_counts_as_issue(db, shop):
    add_clean_variation(shop, "WEBOFF", "G Web Off", available_online=False)
    add_clean_variation(
        shop, "NOPOS", "H No POS", present_at_all_locations=False, present_at_location_ids=[]
    )
    add_clean_variation(
        shop, "SOMEPOS", "I Some POS", present_at_all_locations=False, present_at_location_ids=["L1"]
    )
    add_clean_variation(shop, "NOTAX", "J No Tax", tax_ids=[])

    result = get_catalog_audit(db, M)
    items = items_by_id(result)

    assert items["WEBOFF"]["any_channel_off"] is True
    assert items["WEBOFF"]["issues"] == ["Channel Disabled", "Online Disabled"]
    assert items["NOPOS"]["pos_disabled"] is True
    assert items["NOPOS"]["issue_count"] == 1
    assert items["SOMEPOS"]["pos_disabled"] is False
    assert items["SOMEPOS"]["any_channel_off"] is False
    assert items["NOTAX"]["no_tax_ids"] is True
    assert items["NOTAX"]["issue_count"] == 0
    assert items["NOTAX"]["issues"] == ["No Tax IDs"]

    stats = result["stats"]
    assert stats["any_channel_off"] == 3  # PROBLEM is not online either
    assert stats["pos_disabled"] == 1
    assert stats["no_tax_ids"] == 2
    # PROBLEM, WEBOFF, NOPOS; tax ids alone are informational
    assert stats["items_with_issues"] == 3


def test_velocity_windows(db, shop):
    shop.velocity(M, "CLEAN", None, 0.5, period_days=182)
    shop.velocity(M, "CLEAN", "L1", 2, period_days=182)

    clean = items_by_id(get_catalog_audit(db, M))["CLEAN"]
    assert clean["daily_velocity"] == 1.0
    assert clean["weekly_avg_91d"] == 7.0
    assert clean["weekly_avg_182d"] == 3.5
    assert clean["weekly_avg_365d"] == 0.0
    assert clean["total_sold_91d"] == 91.0

    at_l1 = items_by_id(get_catalog_audit(db, M, location_id="L1"))["CLEAN"]
    assert at_l1["weekly_avg_91d"] == 0.0
    assert at_l1["weekly_avg_182d"] == 14.0
