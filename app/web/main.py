"""FastAPI application for the reorder and inventory-health API."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.core.config import get_settings
from app.core.logging import get_logger, get_request_id, setup_logging
from app.core.metrics import app_info, app_uptime_seconds, errors_total
from app.web.middleware import PrometheusMiddleware
from app.web.routers import (
    catalog,
    healthcheck,
    inventory,
    merchant_settings,
    reorder,
    vendors,
)

log = get_logger("reorder_hub.web")

# Application start time for uptime calculation
APP_START_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(level=settings.log_level, file_path=settings.log_file)
    app_info.labels(version=settings.app_version, environment=settings.environment).set(1)
    log.info("Reorder Hub API started", extra={"version": settings.app_version})
    yield


app = FastAPI(
    title="Reorder Hub API",
    version=get_settings().app_version,
    description="Reorder suggestions, vendor dashboard and catalog audit for Square merchants",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler for unhandled errors (500)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unhandled exceptions and answer with an opaque request id."""
    request_id = get_request_id() or str(uuid.uuid4())
    errors_total.labels(error_type=type(exc).__name__, component="web").inc()

    log.error(
        "unhandled_exception",
        extra={
            "request_id": request_id,
            "path": str(request.url.path),
            "method": request.method,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "request_id": request_id,
            "hint": "Contact support with this request_id",
        },
    )


app.include_router(healthcheck.router, tags=["Monitoring"])
app.include_router(vendors.router)
app.include_router(inventory.router)
app.include_router(reorder.router)
app.include_router(catalog.router)
app.include_router(merchant_settings.router)


@app.get("/health")
def health():
    """Basic health check for monitoring."""
    return {"status": "healthy"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    app_uptime_seconds.set(time.time() - APP_START_TIME)
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
