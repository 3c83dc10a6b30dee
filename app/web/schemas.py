"""Pydantic schemas for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# Vendor dashboard schemas
class VendorStat(BaseModel):
    """One vendor (or the unassigned bucket) with stock stats."""

    id: str
    name: str
    schedule_type: str = "anytime"
    order_day: str | None = None
    receive_day: str | None = None
    lead_time_days: int | None = None
    minimum_order_amount: int = Field(0, description="Cents")
    payment_method: str | None = None
    payment_terms: str | None = None
    contact_email: str | None = None
    order_method: str | None = None
    notes: str | None = None
    default_supply_days: int
    total_items: int
    oos_count: int
    reorder_count: int
    reorder_value: int = Field(..., description="Sum of unit costs (cents) of costed reorder items")
    costed_reorder_count: int
    pending_po_value: int = Field(..., description="DRAFT/SUBMITTED PO totals (cents)")
    last_ordered_at: str | None = None
    status: str = Field(..., description="has_oos | below_min | ready | needs_order | ok")


class VendorDashboardResponse(BaseModel):
    """Vendor dashboard payload."""

    vendors: list[VendorStat]
    global_oos_count: int


class VendorSettingsPatch(BaseModel):
    """Locally editable vendor settings. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    schedule_type: str | None = Field(None, max_length=40)
    order_day: str | None = Field(None, max_length=20)
    receive_day: str | None = Field(None, max_length=20)
    lead_time_days: int | None = Field(None, ge=0, le=365)
    minimum_order_amount: int | None = Field(None, ge=0, description="Cents")
    payment_method: str | None = Field(None, max_length=60)
    payment_terms: str | None = Field(None, max_length=120)
    contact_email: str | None = Field(None, max_length=255)
    order_method: str | None = Field(None, max_length=60)
    default_supply_days: int | None = Field(None, ge=1, le=365)
    notes: str | None = Field(None, max_length=5000)


class VendorRecord(BaseModel):
    """Stored vendor row."""

    id: str
    merchant_id: int
    name: str
    status: str | None = None
    schedule_type: str | None = None
    order_day: str | None = None
    receive_day: str | None = None
    lead_time_days: int | None = None
    minimum_order_amount: int | None = None
    payment_method: str | None = None
    payment_terms: str | None = None
    contact_email: str | None = None
    order_method: str | None = None
    default_supply_days: int | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class VendorSettingsResponse(BaseModel):
    success: bool
    vendor: VendorRecord


# Merchant settings schemas
class MerchantSettingsPatch(BaseModel):
    """Per-merchant reorder settings. NULL resets a field to the default."""

    model_config = ConfigDict(extra="ignore")

    default_supply_days: int | None = Field(None, ge=1, le=365)
    reorder_safety_days: int | None = Field(None, ge=0, le=365)
    reorder_priority_urgent_days: int | None = Field(None, ge=0, le=365)
    reorder_priority_high_days: int | None = Field(None, ge=0, le=365)
    reorder_priority_medium_days: int | None = Field(None, ge=0, le=365)
    reorder_priority_low_days: int | None = Field(None, ge=0, le=365)


class MerchantSettingsResponse(BaseModel):
    default_supply_days: int
    reorder_safety_days: int
    priority_urgent_days: int
    priority_high_days: int
    priority_medium_days: int
    priority_low_days: int
    reorder_threshold_days: int
