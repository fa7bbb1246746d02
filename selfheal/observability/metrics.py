"""Prometheus metrics for the engine's own behaviour.

All collectors register on the default ``prometheus_client`` registry,
which ``GET /metrics`` exposes.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

webhook_requests_total = Counter(
    "selfheal_webhook_requests_total",
    "Webhook deliveries received, by HTTP response code.",
    ["code"],
)

alerts_received_total = Counter(
    "selfheal_alerts_received_total",
    "Alerts seen in webhook batches, by alert status.",
    ["status"],
)

recovery_actions_total = Counter(
    "selfheal_recovery_actions_total",
    "Recovery actions attempted, by action kind and outcome.",
    ["action", "outcome"],
)

actions_suppressed_total = Counter(
    "selfheal_actions_suppressed_total",
    "Recovery actions suppressed by the cooldown guard.",
    ["action"],
)

cluster_call_duration_seconds = Histogram(
    "selfheal_cluster_call_duration_seconds",
    "Latency of Kubernetes API calls made by the executor.",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
