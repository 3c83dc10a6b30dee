"""Catalog audit API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.services.catalog_audit import get_catalog_audit
from app.web.deps import DBSession, MerchantScope

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])


@router.get("/audit")
def catalog_audit(
    merchant_id: MerchantScope,
    db: DBSession,
    location_id: str | None = Query(None, description="Compute stock at this location"),
    issue_type: str | None = Query(None, description="Only items with this flag"),
):
    """Catalog data-quality report."""
    try:
        return get_catalog_audit(db, merchant_id, location_id=location_id, issue_type=issue_type)
    except ValueError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "invalid_parameter", "message": str(e)},
        )
