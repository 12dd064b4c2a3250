"""Monitoring and metrics instrumentation for the Hybrid Inference Layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from hybrid_inference.monitoring.metrics import (
    admission_decisions_total,
    local_latency_seconds,
    local_sessions_active,
    processing_errors_total,
    provider_latency_seconds,
    provider_requests_total,
    validation_failures_total,
)

__all__ = [
    "admission_decisions_total",
    "local_sessions_active",
    "local_latency_seconds",
    "provider_requests_total",
    "provider_latency_seconds",
    "validation_failures_total",
    "processing_errors_total",
]
