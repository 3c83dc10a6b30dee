"""Reorder suggestions API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.services.reorder_suggestions import get_reorder_suggestions
from app.web.deps import DBSession, Defaults, MerchantScope

router = APIRouter(prefix="/api/v1", tags=["reorder"])


@router.get("/reorder-suggestions")
def reorder_suggestions(
    merchant_id: MerchantScope,
    db: DBSession,
    defaults: Defaults,
    vendor_id: str | None = Query(None, description='Vendor ID, or "none" for unassigned items'),
    supply_days: int | None = Query(None, description="Target supply days (1-365)"),
    location_id: str | None = Query(None, description="Filter by location ID"),
    min_cost: float | None = Query(None, description="Minimum order cost in dollars"),
):
    """Items to reorder with quantities, priority and cost."""
    try:
        return get_reorder_suggestions(
            db,
            merchant_id,
            defaults,
            vendor_id=vendor_id,
            supply_days=supply_days,
            location_id=location_id,
            min_cost=min_cost,
        )
    except ValueError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "invalid_parameter", "message": str(e)},
        )
