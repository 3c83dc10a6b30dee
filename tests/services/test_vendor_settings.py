"""Tests for the vendor settings allowlist mutator."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from app.db.models import Vendor
from app.services.vendor_dashboard import VENDOR_SETTINGS_FIELDS, update_vendor_settings

M = 1


def _outcome(outcome: str) -> float:
    return REGISTRY.get_sample_value("vendor_settings_updates_total", {"outcome": outcome}) or 0.0


@pytest.fixture
def vendor(seed, db):
    seed.merchant(M)
    seed.merchant(2)
    seed.vendor(M, "ACME", "Acme Supply", lead_time_days=3, notes="old")
    seed.commit()
    return "ACME"


def test_allowlist_fields():
    assert set(VENDOR_SETTINGS_FIELDS) == {
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
    }


def test_update_applies_allowed_fields(db, vendor):
    result = update_vendor_settings(
        db, vendor, M, {"lead_time_days": 7, "order_day": "Monday", "minimum_order_amount": 25000}
    )

    assert result["lead_time_days"] == 7
    assert result["order_day"] == "Monday"
    assert result["minimum_order_amount"] == 25000
    assert result["notes"] == "old"
    stored = db.get(Vendor, vendor)
    assert stored.lead_time_days == 7


def test_unknown_keys_dropped(db, vendor):
    before = _outcome("updated")
    result = update_vendor_settings(
        db,
        vendor,
        M,
        {
            "name": "Hacked",
            "merchant_id": 2,
            "status": "INACTIVE",
            "__proto__": {"admin": True},
            "constructor": "x",
            "id": "OTHER",
            "notes": "new",
        },
    )

    assert result["name"] == "Acme Supply"
    assert result["merchant_id"] == M
    assert result["status"] == "ACTIVE"
    assert result["id"] == "ACME"
    assert result["notes"] == "new"
    assert _outcome("updated") == before + 1


def test_empty_patch_is_noop(db, vendor):
    before = _outcome("noop")
    result = update_vendor_settings(db, vendor, M, {"name": "Ignored"})

    assert result["name"] == "Acme Supply"
    assert result["lead_time_days"] == 3
    assert _outcome("noop") == before + 1


def test_null_clears_field(db, vendor):
    result = update_vendor_settings(db, vendor, M, {"notes": None})
    assert result["notes"] is None


def test_other_merchant_gets_none(db, vendor):
    before = _outcome("not_found")
    assert update_vendor_settings(db, vendor, 2, {"lead_time_days": 99}) is None
    assert _outcome("not_found") == before + 1
    db.expire_all()
    assert db.get(Vendor, vendor).lead_time_days == 3


def test_unknown_vendor_gets_none(db, vendor):
    assert update_vendor_settings(db, "NOPE", M, {"notes": "x"}) is None


def test_idempotent(db, vendor):
    patch = {"payment_terms": "Net 30", "default_supply_days": 21}
    first = update_vendor_settings(db, vendor, M, patch)
    second = update_vendor_settings(db, vendor, M, patch)

    first.pop("updated_at")
    second.pop("updated_at")
    assert first == second


def test_requires_merchant(db, vendor):
    with pytest.raises(ValueError, match="merchant_id is required"):
        update_vendor_settings(db, vendor, None, {"notes": "x"})
