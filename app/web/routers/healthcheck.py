"""Healthcheck endpoint with dependency checks."""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import SessionLocal

router = APIRouter()


@router.get("/healthz")
def healthz():
    """Health check with database, disk and memory checks.

    Returns:
        200 OK if all checks pass
        503 Service Unavailable if the database is unreachable or disk is nearly full

    """
    status = "healthy"
    checks = {}
    overall_healthy = True

    # 1. Database
    db = SessionLocal()
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency = (time.time() - start) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(latency, 2)}
    except SQLAlchemyError as e:
        checks["database"] = {"status": "error", "error": str(e)}
        overall_healthy = False
        status = "unhealthy"
    finally:
        db.close()

    # 2. Disk
    disk = psutil.disk_usage("/")
    disk_check = {
        "status": "ok",
        "free_gb": round(disk.free / (1024**3), 2),
        "used_percent": disk.percent,
    }
    if disk.percent > 90:
        disk_check["status"] = "warning"
        overall_healthy = False
        status = "degraded" if status == "healthy" else status
    checks["disk"] = disk_check

    # 3. Memory (warning only)
    mem = psutil.virtual_memory()
    checks["memory"] = {
        "status": "warning" if mem.percent > 90 else "ok",
        "available_mb": round(mem.available / (1024**2), 2),
        "used_percent": mem.percent,
    }
    if mem.percent > 90 and status == "healthy":
        status = "degraded"

    # 4. Process uptime
    uptime_seconds = time.time() - psutil.Process(os.getpid()).create_time()
    checks["uptime"] = {
        "status": "ok",
        "uptime_seconds": round(uptime_seconds, 2),
        "uptime_human": _format_uptime(uptime_seconds),
    }
    checks["timestamp"] = datetime.now(timezone.utc).isoformat()

    response = {"status": status, "healthy": overall_healthy, "checks": checks}
    if not overall_healthy:
        raise HTTPException(status_code=503, detail=response)
    return response


def _format_uptime(seconds: float) -> str:
    """Format uptime as e.g. "1d 2h 30m"."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)
