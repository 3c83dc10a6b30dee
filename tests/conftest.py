"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.core.config import ReorderDefaults
from app.db.models import (
    PO_SUBMITTED,
    STATE_IN_STOCK,
    STATE_RESERVED_FOR_SALE,
    VENDOR_ACTIVE,
    Base,
    Image,
    InventoryCount,
    Item,
    Location,
    Merchant,
    PurchaseOrder,
    PurchaseOrderItem,
    SalesVelocity,
    Variation,
    VariationLocationSettings,
    VariationVendor,
    Vendor,
)


@pytest.fixture
def db() -> Session:
    """Create in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    session = Session(engine)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def defaults() -> ReorderDefaults:
    return ReorderDefaults(default_supply_days=45, reorder_safety_days=7)


class CatalogSeeder:
    """Builds a small Square catalog mirror for one merchant at a time."""

    def __init__(self, db: Session):
        self.db = db
        self._po_seq = 0

    def merchant(self, merchant_id: int, name: str = "Shop") -> int:
        self.db.add(Merchant(id=merchant_id, business_name=name))
        self.db.flush()
        return merchant_id

    def location(self, merchant_id: int, location_id: str, name: str | None = None) -> str:
        self.db.add(Location(id=location_id, merchant_id=merchant_id, name=name or location_id))
        self.db.flush()
        return location_id

    def vendor(self, merchant_id: int, vendor_id: str, name: str | None = None, **fields) -> str:
        fields.setdefault("status", VENDOR_ACTIVE)
        self.db.add(Vendor(id=vendor_id, merchant_id=merchant_id, name=name or vendor_id, **fields))
        self.db.flush()
        return vendor_id

    def variation(
        self,
        merchant_id: int,
        variation_id: str,
        item_name: str | None = None,
        item_fields: dict | None = None,
        **fields,
    ) -> str:
        item_id = f"ITEM-{variation_id}"
        self.db.add(
            Item(
                id=item_id,
                merchant_id=merchant_id,
                name=item_name or f"Item {variation_id}",
                **(item_fields or {}),
            )
        )
        fields.setdefault("name", "Regular")
        self.db.add(Variation(id=variation_id, merchant_id=merchant_id, item_id=item_id, **fields))
        self.db.flush()
        return variation_id

    def stock(
        self,
        merchant_id: int,
        variation_id: str,
        location_id: str,
        quantity: int | None,
        committed: int | None = None,
    ) -> None:
        self.db.add(
            InventoryCount(
                merchant_id=merchant_id,
                catalog_object_id=variation_id,
                location_id=location_id,
                state=STATE_IN_STOCK,
                quantity=quantity,
            )
        )
        if committed is not None:
            self.db.add(
                InventoryCount(
                    merchant_id=merchant_id,
                    catalog_object_id=variation_id,
                    location_id=location_id,
                    state=STATE_RESERVED_FOR_SALE,
                    quantity=committed,
                )
            )
        self.db.flush()

    def velocity(
        self,
        merchant_id: int,
        variation_id: str,
        location_id: str | None,
        daily: float,
        period_days: int = 91,
    ) -> None:
        self.db.add(
            SalesVelocity(
                merchant_id=merchant_id,
                variation_id=variation_id,
                location_id=location_id,
                period_days=period_days,
                total_quantity_sold=daily * period_days,
                daily_avg_quantity=daily,
                weekly_avg_quantity=daily * 7,
            )
        )
        self.db.flush()

    def location_settings(
        self,
        merchant_id: int,
        variation_id: str,
        location_id: str,
        stock_alert_min: int | None = None,
        stock_alert_max: int | None = None,
    ) -> None:
        self.db.add(
            VariationLocationSettings(
                merchant_id=merchant_id,
                variation_id=variation_id,
                location_id=location_id,
                stock_alert_min=stock_alert_min,
                stock_alert_max=stock_alert_max,
            )
        )
        self.db.flush()

    def link(
        self,
        merchant_id: int,
        variation_id: str,
        vendor_id: str,
        unit_cost: int | None = None,
        vendor_code: str | None = None,
    ) -> None:
        self.db.add(
            VariationVendor(
                merchant_id=merchant_id,
                variation_id=variation_id,
                vendor_id=vendor_id,
                unit_cost_money=unit_cost,
                vendor_code=vendor_code,
            )
        )
        self.db.flush()

    def purchase_order(
        self,
        merchant_id: int,
        vendor_id: str,
        status: str = PO_SUBMITTED,
        total_cents: int = 0,
        order_date: date | None = None,
        lines: list[tuple[str, float, float]] | None = None,
    ) -> int:
        """Create a PO; ``lines`` are (variation_id, ordered, received)."""
        self._po_seq += 1
        po = PurchaseOrder(
            merchant_id=merchant_id,
            po_number=f"PO-{merchant_id}-{self._po_seq}",
            vendor_id=vendor_id,
            status=status,
            total_cents=total_cents,
            order_date=order_date,
        )
        self.db.add(po)
        self.db.flush()
        for variation_id, ordered, received in lines or []:
            self.db.add(
                PurchaseOrderItem(
                    merchant_id=merchant_id,
                    purchase_order_id=po.id,
                    variation_id=variation_id,
                    quantity_ordered=ordered,
                    received_quantity=received,
                )
            )
        self.db.flush()
        return po.id

    def image(self, merchant_id: int, image_id: str, url: str | None) -> None:
        self.db.add(Image(id=image_id, merchant_id=merchant_id, url=url))
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()


@pytest.fixture
def seed(db: Session) -> CatalogSeeder:
    return CatalogSeeder(db)
