"""Vendor status classification from aggregated dashboard stats."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.db.utils import as_int

HAS_OOS = "has_oos"
BELOW_MIN = "below_min"
READY = "ready"
NEEDS_ORDER = "needs_order"
OK = "ok"

# Lower = more urgent
STATUS_PRIORITY: dict[str, int] = {
    HAS_OOS: 0,
    BELOW_MIN: 1,
    READY: 2,
    NEEDS_ORDER: 3,
    OK: 4,
}


def compute_status(vendor: Mapping[str, Any]) -> str:
    """Map vendor stats to one of the five statuses (first match wins).

    Numeric fields may be strings, None or missing; they are coerced to
    int with 0 as default, so this never raises.

    Examples:
        >>> compute_status({"oos_count": "2"})
        'has_oos'
        >>> compute_status({"reorder_count": 5, "reorder_value": 60000,
        ...                 "costed_reorder_count": 5, "minimum_order_amount": 50000})
        'ready'
    """
    oos_count = as_int(vendor.get("oos_count"))
    reorder_count = as_int(vendor.get("reorder_count"))
    reorder_value = as_int(vendor.get("reorder_value"))
    costed_count = as_int(vendor.get("costed_reorder_count"))
    minimum_order_amount = as_int(vendor.get("minimum_order_amount"))

    if oos_count > 0:
        return HAS_OOS

    # Value vs minimum only means something when some reorder items have cost data
    comparable = reorder_count > 0 and costed_count > 0 and minimum_order_amount > 0
    if comparable and reorder_value < minimum_order_amount:
        return BELOW_MIN
    if comparable:
        return READY
    if reorder_count > 0:
        return NEEDS_ORDER
    return OK


def sort_by_urgency(vendors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Most urgent first, then by name."""
    return sorted(
        vendors,
        key=lambda v: (STATUS_PRIORITY.get(v.get("status", OK), len(STATUS_PRIORITY)), v.get("name") or ""),
    )
