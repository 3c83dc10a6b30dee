"""SQLAlchemy ORM models for the reorder engine.

This module defines the local mirror of the Square catalog that the
reorder engine reads:
- Reference data (Merchants, Locations, Items, Variations, Images)
- Fact tables mutated by the external sync layer (Inventory Counts, Sales Velocity)
- Operational tables owned by this service (Vendors, Vendor links,
  Purchase Orders, Location overrides, Merchant Settings)

Every tenant-scoped table carries ``merchant_id``; queries must always
filter on it. Catalog identifiers are Square object ids (strings).
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Inventory states (Square InventoryState subset used by the engine)
STATE_IN_STOCK = "IN_STOCK"
STATE_RESERVED_FOR_SALE = "RESERVED_FOR_SALE"

# Purchase order statuses
PO_DRAFT = "DRAFT"
PO_SUBMITTED = "SUBMITTED"
PO_RECEIVED = "RECEIVED"
PO_CANCELLED = "CANCELLED"
PO_TERMINAL_STATUSES = (PO_RECEIVED, PO_CANCELLED)
PO_PENDING_VALUE_STATUSES = (PO_DRAFT, PO_SUBMITTED)
PO_ORDERED_STATUSES = (PO_SUBMITTED, PO_RECEIVED)

VENDOR_ACTIVE = "ACTIVE"

# Sales velocity windows (days)
VELOCITY_PERIODS = (91, 182, 365)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Tenants & reference data
# =============================================================================


class Merchant(Base):
    """Merchant (tenant) connected to a Square account."""

    __tablename__ = "merchants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_name: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class MerchantSettings(Base):
    """Per-merchant reorder configuration. NULL columns fall back to process defaults."""

    __tablename__ = "merchant_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(
        ForeignKey("merchants.id", ondelete="CASCADE"), unique=True
    )
    default_supply_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_safety_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_priority_urgent_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_priority_high_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_priority_medium_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_priority_low_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class Location(Base):
    """Square business location."""

    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class Image(Base):
    """Catalog image id -> hosted URL."""

    __tablename__ = "images"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)


class Item(Base):
    """Product grouping (Square ITEM)."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    category_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    product_type: Mapped[str | None] = mapped_column(String(40), nullable=True)  # REGULAR, ...
    taxable: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tax_ids: Mapped[list | None] = mapped_column(JSON, nullable=True)
    images: Mapped[list | None] = mapped_column(JSON, nullable=True)
    seo_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    present_at_all_locations: Mapped[bool | None] = mapped_column(Boolean, default=True)
    present_at_location_ids: Mapped[list | None] = mapped_column(JSON, nullable=True)
    available_online: Mapped[bool | None] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool | None] = mapped_column(Boolean, default=False)
    is_archived: Mapped[bool | None] = mapped_column(Boolean, default=False)


class Variation(Base):
    """Sellable SKU (Square ITEM_VARIATION) with local reorder knobs."""

    __tablename__ = "variations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    item_id: Mapped[str] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    upc: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price_money: Mapped[int | None] = mapped_column(Integer, nullable=True)  # cents
    track_inventory: Mapped[bool | None] = mapped_column(Boolean, default=True)
    inventory_alert_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    inventory_alert_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True)
    present_at_all_locations: Mapped[bool | None] = mapped_column(Boolean, default=True)
    images: Mapped[list | None] = mapped_column(JSON, nullable=True)
    case_pack_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reorder_multiple: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stock_alert_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stock_alert_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discontinued: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool | None] = mapped_column(Boolean, default=False)


# =============================================================================
# Fact tables (mutated by external sync)
# =============================================================================


class InventoryCount(Base):
    """Signed quantity per (variation, location, state)."""

    __tablename__ = "inventory_counts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    catalog_object_id: Mapped[str] = mapped_column(
        ForeignKey("variations.id", ondelete="CASCADE"), index=True
    )
    location_id: Mapped[str] = mapped_column(ForeignKey("locations.id", ondelete="CASCADE"))
    state: Mapped[str] = mapped_column(String(40))  # IN_STOCK | RESERVED_FOR_SALE | ...
    quantity: Mapped[int | None] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "merchant_id", "catalog_object_id", "location_id", "state", name="uq_inventory_count"
        ),
        Index("ix_inventory_counts_state", "merchant_id", "state"),
    )


class SalesVelocity(Base):
    """Trailing-window sales rollup. NULL location = merchant-wide aggregate."""

    __tablename__ = "sales_velocity"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    variation_id: Mapped[str] = mapped_column(
        ForeignKey("variations.id", ondelete="CASCADE"), index=True
    )
    location_id: Mapped[str | None] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), nullable=True
    )
    period_days: Mapped[int] = mapped_column(Integer)  # 91 | 182 | 365
    total_quantity_sold: Mapped[float] = mapped_column(Float, default=0)
    daily_avg_quantity: Mapped[float] = mapped_column(Float, default=0)
    weekly_avg_quantity: Mapped[float] = mapped_column(Float, default=0)

    __table_args__ = (
        UniqueConstraint(
            "merchant_id", "variation_id", "location_id", "period_days", name="uq_sales_velocity"
        ),
    )


# =============================================================================
# Operational tables (owned by this service)
# =============================================================================


class VariationLocationSettings(Base):
    """Per-location override of the variation stock floor/ceiling."""

    __tablename__ = "variation_location_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    variation_id: Mapped[str] = mapped_column(ForeignKey("variations.id", ondelete="CASCADE"))
    location_id: Mapped[str] = mapped_column(ForeignKey("locations.id", ondelete="CASCADE"))
    stock_alert_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stock_alert_max: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("merchant_id", "variation_id", "location_id", name="uq_vls"),
    )


class Vendor(Base):
    """Supplier. Only ACTIVE vendors appear on dashboards."""

    __tablename__ = "vendors"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    schedule_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    order_day: Mapped[str | None] = mapped_column(String(20), nullable=True)
    receive_day: Mapped[str | None] = mapped_column(String(20), nullable=True)
    lead_time_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    minimum_order_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)  # cents
    payment_method: Mapped[str | None] = mapped_column(String(60), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(120), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    order_method: Mapped[str | None] = mapped_column(String(60), nullable=True)
    default_supply_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class VariationVendor(Base):
    """Variation <-> vendor link carrying the vendor's unit cost."""

    __tablename__ = "variation_vendors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    variation_id: Mapped[str] = mapped_column(
        ForeignKey("variations.id", ondelete="CASCADE"), index=True
    )
    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), index=True)
    vendor_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    unit_cost_money: Mapped[int | None] = mapped_column(Integer, nullable=True)  # cents
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("merchant_id", "variation_id", "vendor_id", name="uq_variation_vendor"),
    )


class PurchaseOrder(Base):
    """Purchase order header."""

    __tablename__ = "purchase_orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    po_number: Mapped[str] = mapped_column(String(60))
    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="RESTRICT"), index=True)
    location_id: Mapped[str | None] = mapped_column(ForeignKey("locations.id"), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PO_DRAFT)
    order_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_cents: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (UniqueConstraint("merchant_id", "po_number", name="uq_po_number"),)


class PurchaseOrderItem(Base):
    """Purchase order line."""

    __tablename__ = "purchase_order_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("merchants.id"), index=True)
    purchase_order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"), index=True
    )
    variation_id: Mapped[str] = mapped_column(ForeignKey("variations.id", ondelete="RESTRICT"))
    quantity_ordered: Mapped[float] = mapped_column(Float)
    received_quantity: Mapped[float | None] = mapped_column(Float, default=0)
    unit_cost_cents: Mapped[int] = mapped_column(Integer, default=0)
