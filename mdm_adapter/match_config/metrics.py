# -*- coding: utf-8 -*-
"""
Prometheus Metrics - MDM Match Configuration Adapter

Metrics:
    1. mdm_upstream_requests_total (Counter, labels: operation, outcome)
    2. mdm_ground_truth_pages_total (Counter, labels: category)
    3. mdm_ground_truth_scores_total (Counter, labels: category)
    4. mdm_operation_errors_total (Counter, labels: operation, error_type)
    5. mdm_operation_duration_seconds (Histogram, labels: operation)
    6. mdm_inbound_auth_failures_total (Counter, labels: reason)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Upstream HTTP calls by gateway operation and outcome
mdm_upstream_requests_total = Counter(
    "mdm_upstream_requests_total",
    "Total upstream MDM requests",
    labelnames=["operation", "outcome"],
)

# 2. Ground-truth pages fetched by category
mdm_ground_truth_pages_total = Counter(
    "mdm_ground_truth_pages_total",
    "Total ground-truth link pages fetched",
    labelnames=["category"],
)

# 3. Ground-truth scores collected by category
mdm_ground_truth_scores_total = Counter(
    "mdm_ground_truth_scores_total",
    "Total ground-truth scores aggregated",
    labelnames=["category"],
)

# 4. Failed service operations by error type
mdm_operation_errors_total = Counter(
    "mdm_operation_errors_total",
    "Total failed adapter operations",
    labelnames=["operation", "error_type"],
)

# 5. Service operation duration
mdm_operation_duration_seconds = Histogram(
    "mdm_operation_duration_seconds",
    "Adapter operation duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.05, 0.1, 0.25, 0.5, 1.0, 2.5,
        5.0, 10.0, 30.0, 60.0, 120.0,
    ),
)

# 6. Rejected inbound credentials
mdm_inbound_auth_failures_total = Counter(
    "mdm_inbound_auth_failures_total",
    "Total rejected inbound authentication attempts",
    labelnames=["reason"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def inc_upstream_requests(operation: str, outcome: str) -> None:
    """Record an upstream request.

    Args:
        operation: Gateway operation (authenticate, fetch_match_configuration,
            update_match_configuration, query_links).
        outcome: ``success`` or ``error``.
    """
    mdm_upstream_requests_total.labels(
        operation=operation, outcome=outcome,
    ).inc()


def inc_ground_truth_pages(category: str) -> None:
    """Record one fetched ground-truth page."""
    mdm_ground_truth_pages_total.labels(category=category).inc()


def inc_ground_truth_scores(category: str, count: int) -> None:
    """Record scores extracted from a page.

    Args:
        category: MATCH or NO_MATCH.
        count: Number of scores extracted.
    """
    if count:
        mdm_ground_truth_scores_total.labels(category=category).inc(count)


def inc_errors(operation: str, error_type: str) -> None:
    """Record a failed service operation."""
    mdm_operation_errors_total.labels(
        operation=operation, error_type=error_type,
    ).inc()


def observe_duration(operation: str, seconds: float) -> None:
    """Record the duration of a service operation."""
    mdm_operation_duration_seconds.labels(operation=operation).observe(seconds)


def inc_auth_failures(reason: str) -> None:
    """Record a rejected inbound credential."""
    mdm_inbound_auth_failures_total.labels(reason=reason).inc()


__all__ = [
    "inc_upstream_requests",
    "inc_ground_truth_pages",
    "inc_ground_truth_scores",
    "inc_errors",
    "observe_duration",
    "inc_auth_failures",
]
