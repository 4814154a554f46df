"""Prometheus metrics for the kwimount operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "kwimount_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "kwimount_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

retries_scheduled_total = Counter(
    "kwimount_operator_retries_scheduled_total",
    "Total number of delayed retries scheduled for missing dependencies",
    ["kind", "reason"],
)

# Generated object metrics
config_maps_created_total = Counter(
    "kwimount_operator_config_maps_created_total",
    "Total number of generated credential configuration objects written",
    ["target"],
)

workload_patches_total = Counter(
    "kwimount_operator_workload_patches_total",
    "Total number of workload patch decisions",
    ["result"],
)

# API call metrics
api_call_total = Counter(
    "kwimount_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "kwimount_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "kwimount_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

# Error and status metrics
error_total = Counter(
    "kwimount_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "kwimount_operator_resource_status_total",
    "Resource status transitions",
    ["kind", "status"],
)
