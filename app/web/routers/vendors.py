"""Vendor dashboard and vendor settings API endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.domain.supply.vendor_status import sort_by_urgency
from app.services.vendor_dashboard import get_vendor_dashboard, update_vendor_settings
from app.web.deps import DBSession, Defaults, MerchantScope
from app.web.schemas import VendorDashboardResponse, VendorSettingsPatch, VendorSettingsResponse

router = APIRouter(prefix="/api/v1", tags=["vendors"])


@router.get("/vendor-dashboard", response_model=VendorDashboardResponse)
def vendor_dashboard(
    merchant_id: MerchantScope,
    db: DBSession,
    defaults: Defaults,
    sort: Literal["name", "urgency"] = Query("name", description="name (unassigned last) or urgency"),
):
    """ACTIVE vendors with stock stats and status, plus the global OOS count."""
    dashboard = get_vendor_dashboard(db, merchant_id, defaults)
    if sort == "urgency":
        dashboard["vendors"] = sort_by_urgency(dashboard["vendors"])
    return dashboard


@router.patch(
    "/vendors/{vendor_id}/settings",
    response_model=VendorSettingsResponse,
    responses={404: {"description": "Vendor not found or does not belong to this merchant"}},
)
def patch_vendor_settings(
    vendor_id: str,
    body: VendorSettingsPatch,
    merchant_id: MerchantScope,
    db: DBSession,
):
    """Update locally-owned vendor settings.

    Only fields present in the body are written; an empty body is a no-op
    that returns the current record.
    """
    vendor = update_vendor_settings(db, vendor_id, merchant_id, body.model_dump(exclude_unset=True))
    if vendor is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "error": "Vendor not found or does not belong to this merchant"},
        )
    return {"success": True, "vendor": vendor}
