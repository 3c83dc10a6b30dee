"""Prometheus metrics middleware for FastAPI."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import set_request_id
from app.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        method = request.method
        path = request.url.path
        set_request_id(request.headers.get("x-request-id"))

        # Normalize path (replace IDs with placeholders)
        endpoint = self._normalize_path(path)

        # Track in-progress requests
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()

        # Measure request duration
        start_time = time.time()
        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            # Track failed requests
            http_requests_total.labels(
                method=method, endpoint=endpoint, status="500"
            ).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()
            raise
        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                duration
            )

        # Track completed requests
        http_requests_total.labels(
            method=method, endpoint=endpoint, status=str(status)
        ).inc()
        http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        return response

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing IDs with placeholders.

        Examples:
            /api/v1/vendors/VND123/settings -> /api/v1/vendors/{id}/settings
            /api/v1/inventory?low_stock=true -> /api/v1/inventory
        """
        # Remove query parameters
        path = path.split("?")[0]

        # Replace common ID patterns
        parts = path.split("/")
        normalized = []
        for i, part in enumerate(parts):
            # Skip empty parts
            if not part:
                normalized.append(part)
                continue

            # Check if part looks like an ID
            if (
                part.isdigit()  # Numeric ID
                or (len(part) > 10 and part.isupper())  # Square ids are upper-case alphanumerics
                or (i > 0 and parts[i - 1] == "vendors")
            ):
                normalized.append("{id}")
            else:
                normalized.append(part)

        return "/".join(normalized)
