"""Prometheus metrics for Squadron.

Tracks deployment transitions, swap latency, provisioning call outcomes
and reconciliation findings.
"""

from prometheus_client import Counter, Gauge, Histogram

# Transition metrics
TRANSITIONS = Counter(
    "squadron_transitions_total",
    "Deployment transitions attempted",
    labelnames=["kind", "outcome"],
)

SWAP_LATENCY = Histogram(
    "squadron_swap_latency_seconds",
    "End-to-end latency of a resource swap",
    labelnames=["kind"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

# Provisioning API metrics
PROVISIONING_CALLS = Counter(
    "squadron_provisioning_calls_total",
    "Calls to the provisioning API",
    labelnames=["operation", "outcome"],
)

RESOURCE_DELETE_FAILURES = Counter(
    "squadron_resource_delete_failures_total",
    "Old resources that could not be deleted after a swap",
)

# Bulk run metrics
BULK_ENTRIES = Counter(
    "squadron_bulk_entries_total",
    "Bulk upgrade plan entries by final status",
    labelnames=["status"],
)

# Reconciliation metrics
ORPHANED_RESOURCES = Gauge(
    "squadron_orphaned_resources",
    "Live resources with no deployment record, as of the last scan",
)

ORPHANED_DEPLOYMENTS = Gauge(
    "squadron_orphaned_deployments",
    "Deployment records pointing at a missing resource, as of the last scan",
)
