"""Database utilities: merchant-scoped SQL execution and row coercion."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Result
from sqlalchemy.orm import Session

from app.core.metrics import tenant_unscoped_query_total

logger = logging.getLogger(__name__)

_MERCHANT_BIND = re.compile(r":merchant_id\b")


def exec_scoped(
    db: Session,
    sql: str,
    params: dict[str, Any] | None = None,
    merchant_id: int | None = None,
    expanding: Sequence[str] = (),
) -> Result:
    """Execute SQL with mandatory merchant_id scoping.

    Args:
        db: Database session
        sql: SQL query string
        params: Query parameters (always bound, never interpolated)
        merchant_id: Merchant ID (required for scoped queries)
        expanding: Names of list parameters used in ``IN :name`` clauses

    Returns:
        SQLAlchemy Result

    Raises:
        RuntimeError: If merchant_id missing or SQL doesn't bind :merchant_id

    Usage:
        >>> exec_scoped(db, "SELECT * FROM vendors WHERE merchant_id = :merchant_id", {}, merchant_id=1)

    """
    if merchant_id is None:
        tenant_unscoped_query_total.labels(error_type="missing_merchant_id").inc()
        logger.error(f"exec_scoped called without merchant_id for SQL: {sql[:100]}...")
        raise RuntimeError("merchant_id is required for scoped queries")

    # The tenant predicate must be a bound parameter, not just a selected column
    if not _MERCHANT_BIND.search(sql):
        tenant_unscoped_query_total.labels(error_type="missing_filter").inc()
        logger.error(f"Unscoped SQL detected (missing merchant_id): {sql[:200]}...")
        raise RuntimeError("Scoped SQL must filter on :merchant_id")

    merged_params = dict(params or {})
    merged_params["merchant_id"] = merchant_id

    stmt = text(sql)
    if expanding:
        stmt = stmt.bindparams(*(bindparam(name, expanding=True) for name in expanding))

    try:
        return db.execute(stmt, merged_params)
    except Exception as e:
        logger.error(
            "exec_scoped failed",
            extra={"error": str(e), "sql": sql[:200], "merchant_id": merchant_id},
        )
        raise


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a driver value (str, Decimal, None, ...) to float."""
    if value is None:
        return default
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        result = float(value)
    else:
        try:
            result = float(str(value).strip())
        except (TypeError, ValueError):
            return default
    if result != result or result in (float("inf"), float("-inf")):
        return default
    return result


def as_int(value: Any, default: int = 0) -> int:
    """Coerce a driver value to int, truncating fractions. Never raises."""
    if value is None:
        return default
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    number = as_float(value, default=float("nan"))
    if number != number:
        return default
    return int(number)


def as_optional_int(value: Any) -> int | None:
    """Like ``as_int`` but keeps NULL (and unparseable values) as None."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = as_float(value, default=float("nan"))
    if number != number:
        return None
    return int(number)


def as_bool(value: Any) -> bool:
    """Coerce SQLite 0/1 and Postgres booleans alike."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "t", "true", "yes")
    return bool(value)
