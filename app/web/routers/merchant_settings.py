"""Merchant reorder settings API endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from app.services.merchant_settings import get_merchant_settings, update_merchant_settings
from app.web.deps import DBSession, Defaults, MerchantScope
from app.web.schemas import MerchantSettingsPatch, MerchantSettingsResponse

router = APIRouter(prefix="/api/v1/merchant-settings", tags=["settings"])


@router.get("", response_model=MerchantSettingsResponse)
def read_merchant_settings(merchant_id: MerchantScope, db: DBSession, defaults: Defaults):
    return get_merchant_settings(db, merchant_id, defaults).to_dict()


@router.patch("", response_model=MerchantSettingsResponse)
def patch_merchant_settings(
    body: MerchantSettingsPatch,
    merchant_id: MerchantScope,
    db: DBSession,
    defaults: Defaults,
):
    """Partially update reorder settings; omitted fields are left unchanged."""
    settings = update_merchant_settings(
        db, merchant_id, body.model_dump(exclude_unset=True), defaults
    )
    return settings.to_dict()
