"""Custom Prometheus metrics for the Hybrid Inference Layer.

These metrics are exposed at /metrics by the fallback server and can be
scraped from any process embedding the routing layer.
Alert rules should be configured for:
- processing_errors_total (high error rate per code)
- provider_requests_total with outcome="error" (provider outage or bad keys)
- validation_failures_total (model drifting away from the output contract)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Admission Metrics ===

admission_decisions_total = Counter(
    "admission_decisions_total",
    "Admission decisions by operation and chosen path",
    ["operation", "path"],
)
"""
Admission decisions counter.

Labels:
- operation: summarise, draft, multimodal
- path: local, fallback, rejected

A rising fallback share usually means local models are missing or
content is routinely over the local ceilings.
"""

# === Local Engine Metrics ===

local_sessions_active = Gauge(
    "local_sessions_active",
    "Local model sessions currently held open",
)
"""
Open local sessions.

Must return to zero between requests; a value that only grows means a
session is leaking.
"""

local_latency_seconds = Histogram(
    "local_latency_seconds",
    "On-device generation latency in seconds",
    ["operation", "success"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# === Provider Metrics ===

provider_requests_total = Counter(
    "provider_requests_total",
    "Outbound provider calls by provider, operation and outcome",
    ["provider", "operation", "outcome"],
)
"""
Provider calls counter.

Labels:
- provider: gemini, openai, anthropic, shared_fallback
- operation: summarise, draft
- outcome: success, http_error, network_error, empty
"""

provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Provider call latency in seconds",
    ["provider"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

# === Validation Metrics ===

validation_failures_total = Counter(
    "validation_failures_total",
    "Output validation failures by payload kind and error type",
    ["kind", "error_type"],
)
"""
Validation failures counter.

Labels:
- kind: summary, drafts
- error_type: empty_content, no_json_object, json_decode_error, schema_violation
"""

# === Error Metrics ===

processing_errors_total = Counter(
    "processing_errors_total",
    "Classified processing errors by code and operation",
    ["code", "operation"],
)
