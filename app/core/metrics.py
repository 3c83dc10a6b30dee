"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# HTTP Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

# Tenant isolation
tenant_unscoped_query_total = Counter(
    "tenant_unscoped_query_total",
    "Queries rejected for missing merchant scoping",
    ["error_type"],  # missing_merchant_id, missing_filter
)

# Business metrics
vendor_dashboard_duration_seconds = Histogram(
    "vendor_dashboard_duration_seconds",
    "Time to build the vendor dashboard",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

vendor_settings_updates_total = Counter(
    "vendor_settings_updates_total",
    "Vendor settings update attempts",
    ["outcome"],  # updated, noop, not_found
)

reorder_suggestions_total = Counter(
    "reorder_suggestions_total",
    "Reorder suggestions produced",
    ["priority"],
)

image_lookup_failures_total = Counter(
    "image_lookup_failures_total",
    "Batched image URL lookups that fell back to S3 URLs",
)

# System metrics
app_uptime_seconds = Gauge(
    "app_uptime_seconds",
    "Application uptime in seconds",
)

app_info = Gauge(
    "app_info",
    "Application info",
    ["version", "environment"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by type",
    ["error_type", "component"],
)
