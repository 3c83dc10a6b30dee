"""Tests for merchant reorder settings."""

from __future__ import annotations

import pytest

from app.core.config import ReorderDefaults
from app.db.models import MerchantSettings
from app.services.merchant_settings import (
    get_merchant_settings,
    resolve_settings,
    update_merchant_settings,
)

M = 1


def test_defaults_without_row(db, defaults):
    settings = get_merchant_settings(db, M, defaults)
    assert settings.default_supply_days == 45
    assert settings.reorder_safety_days == 7
    assert settings.reorder_threshold_days == 52


def test_builtin_defaults():
    settings = resolve_settings(None, ReorderDefaults())
    assert settings.to_dict() == {
        "default_supply_days": 45,
        "reorder_safety_days": 7,
        "priority_urgent_days": 0,
        "priority_high_days": 7,
        "priority_medium_days": 14,
        "priority_low_days": 30,
        "reorder_threshold_days": 52,
    }


def test_zero_supply_days_falls_back_but_zero_safety_is_kept(defaults):
    row = MerchantSettings(merchant_id=M, default_supply_days=0, reorder_safety_days=0)
    settings = resolve_settings(row, defaults)
    assert settings.default_supply_days == 45
    assert settings.reorder_safety_days == 0


def test_null_columns_fall_back(defaults):
    row = MerchantSettings(merchant_id=M, default_supply_days=30, reorder_priority_high_days=None)
    settings = resolve_settings(row, defaults)
    assert settings.default_supply_days == 30
    assert settings.priority_high_days == defaults.priority_high_days


def test_update_creates_row(db, seed, defaults):
    seed.merchant(M)
    settings = update_merchant_settings(
        db, M, {"default_supply_days": 30, "reorder_priority_high_days": 10}, defaults
    )
    assert settings.default_supply_days == 30
    assert settings.priority_high_days == 10
    assert get_merchant_settings(db, M, defaults).default_supply_days == 30


def test_update_ignores_unknown_keys(db, seed, defaults):
    seed.merchant(M)
    settings = update_merchant_settings(db, M, {"merchant_id": 9, "id": 5}, defaults)
    assert settings == get_merchant_settings(db, M, defaults)
    assert db.query(MerchantSettings).count() == 0


def test_update_is_merchant_scoped(db, seed, defaults):
    seed.merchant(M)
    seed.merchant(2)
    update_merchant_settings(db, 2, {"reorder_safety_days": 1}, defaults)
    assert get_merchant_settings(db, M, defaults).reorder_safety_days == 7
    assert get_merchant_settings(db, 2, defaults).reorder_safety_days == 1


def test_requires_merchant(db):
    with pytest.raises(ValueError):
        get_merchant_settings(db, None)
