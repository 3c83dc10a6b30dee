"""FastAPI dependencies for database, merchant scope and reorder defaults."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import ReorderDefaults, get_reorder_defaults
from app.db.session import get_db


def get_merchant_scope(x_merchant_id: Annotated[str | None, Header()] = None) -> int:
    """Get merchant_id for scoping queries.

    Authentication happens upstream; this only reads the merchant context
    it forwards.

    Args:
        x_merchant_id: Merchant ID from the X-Merchant-Id header

    Returns:
        Merchant ID for filtering

    Raises:
        HTTPException: 403 if the header is missing or not a positive integer

    """
    try:
        merchant_id = int(x_merchant_id) if x_merchant_id is not None else None
    except ValueError:
        merchant_id = None

    if merchant_id is None or merchant_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No merchant scope. Request must carry a valid X-Merchant-Id header.",
        )
    return merchant_id


def get_defaults() -> ReorderDefaults:
    """Process-level reorder fallbacks (built once from settings)."""
    return get_reorder_defaults()


# Type aliases for cleaner endpoints
DBSession = Annotated[Session, Depends(get_db)]
MerchantScope = Annotated[int, Depends(get_merchant_scope)]
Defaults = Annotated[ReorderDefaults, Depends(get_defaults)]
