"""Inventory listing API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from app.services.inventory_snapshot import get_inventory, get_low_stock
from app.web.deps import DBSession, MerchantScope

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])


@router.get("")
def list_inventory(
    merchant_id: MerchantScope,
    db: DBSession,
    location_id: str | None = Query(None, description="Filter by location ID"),
    low_stock: bool = Query(False, description="Only rows below their stock floor"),
):
    """Current inventory levels with sales velocity and primary vendor."""
    return get_inventory(db, merchant_id, location_id=location_id, low_stock=low_stock)


@router.get("/low-stock")
def list_low_stock(merchant_id: MerchantScope, db: DBSession):
    """Variations below their minimum stock level, largest shortfall first."""
    return get_low_stock(db, merchant_id)
