"""Batched image URL resolution for catalog listings.

Listings resolve every row's image ids with ONE query, then map the
URLs back by row position. A failed lookup degrades to the S3 URL
pattern instead of failing the listing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.metrics import image_lookup_failures_total
from app.db.utils import exec_scoped

logger = logging.getLogger(__name__)


def parse_json_ids(value: Any) -> list[str]:
    """Id list from a JSON column (list, JSON text, or NULL)."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if not isinstance(value, list):
        return []
    return [str(image_id) for image_id in value if image_id]


def s3_fallback_url(image_id: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    return (
        f"https://{settings.image_s3_bucket}.s3.{settings.image_s3_region}"
        f".amazonaws.com/files/{image_id}/original.jpeg"
    )


def batch_resolve_image_urls(
    db: Session,
    merchant_id: int,
    rows: Sequence[Mapping[str, Any]],
    settings: Settings | None = None,
) -> dict[int, list[str]]:
    """Resolve image URLs for many rows in a single query.

    Each row contributes its ``images`` ids, or ``item_images`` when the
    variation has none.

    Args:
        db: Database session
        merchant_id: Merchant ID for scoping
        rows: Listing rows carrying ``images`` / ``item_images``
        settings: Settings for the S3 fallback (default: process settings)

    Returns:
        Map of row index -> list of URLs (rows without images map to [])

    """
    settings = settings or get_settings()

    ids_by_row: list[list[str]] = []
    wanted: set[str] = set()
    for row in rows:
        ids = parse_json_ids(row.get("images")) or parse_json_ids(row.get("item_images"))
        ids_by_row.append(ids)
        wanted.update(ids)

    url_by_id: dict[str, str] = {}
    if wanted:
        try:
            # SAVEPOINT: a failed lookup must not discard the caller's pending work
            with db.begin_nested():
                result = exec_scoped(
                    db,
                    "SELECT id, url FROM images WHERE merchant_id = :merchant_id AND id IN :ids",
                    {"ids": sorted(wanted)},
                    merchant_id=merchant_id,
                    expanding=("ids",),
                )
                url_by_id = {row.id: row.url for row in result if row.url}
        except SQLAlchemyError as e:
            image_lookup_failures_total.inc()
            logger.warning(
                "Image lookup failed, using S3 fallback URLs",
                extra={"merchant_id": merchant_id, "image_count": len(wanted), "error": str(e)},
            )

    return {
        index: [url_by_id.get(image_id) or s3_fallback_url(image_id, settings) for image_id in ids]
        for index, ids in enumerate(ids_by_row)
    }
