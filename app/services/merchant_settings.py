"""Per-merchant reorder settings with process-level fallbacks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import ReorderDefaults
from app.db.models import MerchantSettings

logger = logging.getLogger(__name__)

MERCHANT_SETTINGS_FIELDS: frozenset[str] = frozenset(
    {
        "default_supply_days",
        "reorder_safety_days",
        "reorder_priority_urgent_days",
        "reorder_priority_high_days",
        "reorder_priority_medium_days",
        "reorder_priority_low_days",
    }
)


@dataclass(frozen=True)
class MerchantReorderSettings:
    """Resolved reorder knobs for one merchant."""

    default_supply_days: int
    reorder_safety_days: int
    priority_urgent_days: int
    priority_high_days: int
    priority_medium_days: int
    priority_low_days: int

    @property
    def reorder_threshold_days(self) -> int:
        """Runway below which an item needs reorder."""
        return self.default_supply_days + self.reorder_safety_days

    def to_dict(self) -> dict[str, int]:
        data = asdict(self)
        data["reorder_threshold_days"] = self.reorder_threshold_days
        return data


def _or_default(value: int | None, default: int) -> int:
    return value if value is not None else default


def resolve_settings(row: MerchantSettings | None, defaults: ReorderDefaults) -> MerchantReorderSettings:
    """Merge a stored row over the defaults.

    Supply days of 0 fall back to the default (a zero-day target is
    meaningless); every other column only falls back when NULL.
    """
    if row is None:
        return MerchantReorderSettings(
            default_supply_days=defaults.default_supply_days,
            reorder_safety_days=defaults.reorder_safety_days,
            priority_urgent_days=defaults.priority_urgent_days,
            priority_high_days=defaults.priority_high_days,
            priority_medium_days=defaults.priority_medium_days,
            priority_low_days=defaults.priority_low_days,
        )
    return MerchantReorderSettings(
        default_supply_days=row.default_supply_days or defaults.default_supply_days,
        reorder_safety_days=_or_default(row.reorder_safety_days, defaults.reorder_safety_days),
        priority_urgent_days=_or_default(row.reorder_priority_urgent_days, defaults.priority_urgent_days),
        priority_high_days=_or_default(row.reorder_priority_high_days, defaults.priority_high_days),
        priority_medium_days=_or_default(row.reorder_priority_medium_days, defaults.priority_medium_days),
        priority_low_days=_or_default(row.reorder_priority_low_days, defaults.priority_low_days),
    )


def _load_row(db: Session, merchant_id: int) -> MerchantSettings | None:
    stmt = select(MerchantSettings).where(MerchantSettings.merchant_id == merchant_id)
    return db.execute(stmt).scalar_one_or_none()


def get_merchant_settings(
    db: Session, merchant_id: int, defaults: ReorderDefaults | None = None
) -> MerchantReorderSettings:
    """Get reorder settings for a merchant.

    Args:
        db: Database session
        merchant_id: Merchant ID
        defaults: Process-level fallbacks (default: built-in constants)

    Returns:
        Resolved settings; missing row or NULL columns use ``defaults``

    Raises:
        ValueError: If merchant_id is missing

    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for get_merchant_settings")
    return resolve_settings(_load_row(db, merchant_id), defaults or ReorderDefaults())


def update_merchant_settings(
    db: Session,
    merchant_id: int,
    patch: Mapping[str, Any],
    defaults: ReorderDefaults | None = None,
) -> MerchantReorderSettings:
    """Apply an allowlisted partial update, creating the row when missing.

    Keys outside ``MERCHANT_SETTINGS_FIELDS`` are dropped silently.
    """
    if merchant_id is None:
        raise ValueError("merchant_id is required for update_merchant_settings")

    changes = {key: patch[key] for key in MERCHANT_SETTINGS_FIELDS if key in patch}
    row = _load_row(db, merchant_id)

    if changes:
        if row is None:
            row = MerchantSettings(merchant_id=merchant_id)
            db.add(row)
        for key, value in changes.items():
            setattr(row, key, value)
        db.commit()
        db.refresh(row)
        logger.info(
            f"Merchant settings updated for merchant {merchant_id}",
            extra={"merchant_id": merchant_id, "fields": sorted(changes)},
        )

    return resolve_settings(row, defaults or ReorderDefaults())
