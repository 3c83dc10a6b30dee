"""Stock-health predicates shared by every screen that counts OOS/reorder items.

The vendor dashboard, the unassigned bucket, reorder suggestions and the
catalog audit all evaluate the same functions over the same
``StockPosition`` records, so their numbers cannot drift apart.

Discontinued and soft-deleted variations are filtered out before
positions reach this module.

NO DATA ACCESS - pure functions only.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StockPosition:
    """One variation at one location (or with no inventory row at all).

    ``on_hand`` is None when no IN_STOCK row exists. That is not proof of
    zero stock for OOS counting, but counts as no stock for reorder purposes.
    """

    variation_id: str
    location_id: str | None
    on_hand: int | None
    committed: int = 0
    daily_velocity: float = 0.0
    variation_alert_min: int | None = None
    variation_alert_max: int | None = None
    location_alert_min: int | None = None
    location_alert_max: int | None = None

    @property
    def has_inventory_row(self) -> bool:
        return self.on_hand is not None

    @property
    def available(self) -> int:
        """On hand minus committed at the same location."""
        return (self.on_hand or 0) - self.committed

    @property
    def effective_alert_min(self) -> int | None:
        if self.location_alert_min is not None:
            return self.location_alert_min
        return self.variation_alert_min

    @property
    def effective_alert_max(self) -> int | None:
        if self.location_alert_max is not None:
            return self.location_alert_max
        return self.variation_alert_max


@dataclass(frozen=True)
class StockHealth:
    out_of_stock: bool
    needs_reorder: bool


def is_out_of_stock(position: StockPosition) -> bool:
    """An IN_STOCK row exists and its quantity is exactly zero."""
    return position.on_hand is not None and position.on_hand == 0


def is_below_reorder_point(position: StockPosition, reorder_threshold_days: float) -> bool:
    """Empty, at/below floor, or running out within the threshold."""
    available = position.available
    if available <= 0:
        return True
    floor = position.effective_alert_min
    if floor is not None and available <= floor:
        return True
    velocity = position.daily_velocity
    return velocity > 0 and available / velocity < reorder_threshold_days


def is_at_or_above_cap(position: StockPosition) -> bool:
    cap = position.effective_alert_max
    return cap is not None and position.available >= cap


def needs_reorder(
    position: StockPosition,
    reorder_threshold_days: float,
    on_order_quantity: float = 0,
) -> bool:
    """Whether the position should be reordered.

    Outstanding purchase-order quantity suppresses the flag only while
    stock is still positive; empty shelves always need reorder.
    """
    if not is_below_reorder_point(position, reorder_threshold_days):
        return False
    if is_at_or_above_cap(position):
        return False
    if on_order_quantity > 0 and position.available > 0:
        return False
    return True


def evaluate(
    position: StockPosition,
    reorder_threshold_days: float,
    on_order_quantity: float = 0,
) -> StockHealth:
    return StockHealth(
        out_of_stock=is_out_of_stock(position),
        needs_reorder=needs_reorder(position, reorder_threshold_days, on_order_quantity),
    )


def evaluate_variations(
    positions: Iterable[StockPosition],
    reorder_threshold_days: float,
    on_order: Mapping[str, float] | None = None,
) -> dict[str, StockHealth]:
    """Fold per-location facts to one verdict per variation (any location counts)."""
    on_order = on_order or {}
    verdicts: dict[str, StockHealth] = {}
    for position in positions:
        health = evaluate(
            position, reorder_threshold_days, on_order.get(position.variation_id, 0)
        )
        previous = verdicts.get(position.variation_id)
        if previous is not None:
            health = StockHealth(
                out_of_stock=previous.out_of_stock or health.out_of_stock,
                needs_reorder=previous.needs_reorder or health.needs_reorder,
            )
        verdicts[position.variation_id] = health
    return verdicts


@dataclass
class StockTally:
    """Deduplicated counters for a group of variations (one vendor, or unassigned)."""

    total_items: int = 0
    oos_count: int = 0
    reorder_count: int = 0
    reorder_value: int = 0
    costed_reorder_count: int = 0
    _seen: set[str] = field(default_factory=set, repr=False)

    def add(self, variation_id: str, health: StockHealth | None, unit_cost: int | None = None):
        """Count a variation once. ``health`` is None for discontinued variations."""
        if variation_id in self._seen:
            return
        self._seen.add(variation_id)
        self.total_items += 1
        if health is None:
            return
        if health.out_of_stock:
            self.oos_count += 1
        if health.needs_reorder:
            self.reorder_count += 1
            if unit_cost is not None and unit_cost > 0:
                self.reorder_value += unit_cost
                self.costed_reorder_count += 1


def has_reorder_floor(
    variation_alert_min: int | None,
    location_alert_min: int | None,
    inventory_alert_type: str | None,
    inventory_alert_threshold: int | None,
) -> bool:
    """A floor is configured at variation, location or Square-alert level."""
    if variation_alert_min:
        return True
    if location_alert_min:
        return True
    return inventory_alert_type == "LOW_QUANTITY" and bool(inventory_alert_threshold)
