"""Prometheus metrics definitions for the lead collection backend.

This module provides centralized metric definitions for observability.
Metrics are exported via the /metrics endpoint for Prometheus scraping.
"""

from prometheus_client import Counter, Gauge, Histogram  # type: ignore[import-not-found]

# Request metrics
HTTP_REQUESTS = Counter(
    "lead_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
HTTP_LATENCY = Histogram(
    "lead_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)

# Processing metrics
ANSWERS_PROCESSED = Counter(
    "lead_answers_processed_total",
    "Answers processed",
    ["status"],
)
ANSWER_LATENCY = Histogram(
    "lead_answer_processing_seconds",
    "Answer processing latency",
)

# Business metrics
VALIDATIONS = Counter(
    "lead_validations_total",
    "Field validations",
    ["field_type", "result"],
)
MANUAL_FALLBACKS = Counter(
    "lead_manual_fallbacks_total",
    "Switches to typed input after repeated validation failures",
    ["field"],
)
ACTIVE_SESSIONS = Gauge(
    "lead_sessions_active",
    "Active sessions",
)
SESSIONS = Counter(
    "lead_sessions_total",
    "Sessions by outcome",
    ["status"],
)
