# -*- coding: utf-8 -*-
"""
Prometheus Metrics - ESG Engine

Metrics:
    1. esg_calculations_total (Counter, labels: action, status)
    2. esg_errors_total (Counter, labels: error_type)
    3. esg_processing_duration_seconds (Histogram, labels: operation)
    4. esg_region_fallbacks_total (Counter, labels: region)
    5. esg_emissions_kg (Histogram, labels: region)
    6. esg_offset_budget_infeasible_total (Counter)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Service actions by outcome
esg_calculations_total = Counter(
    "esg_calculations_total",
    "Total ESG engine actions processed",
    labelnames=["action", "status"],
)

# 2. Engine errors by exception type
esg_errors_total = Counter(
    "esg_errors_total",
    "Total ESG engine errors by type",
    labelnames=["error_type"],
)

# 3. Processing duration by operation
esg_processing_duration_seconds = Histogram(
    "esg_processing_duration_seconds",
    "ESG engine processing duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.0005, 0.001, 0.005, 0.01, 0.05,
        0.1, 0.5, 1.0, 5.0,
    ),
)

# 4. Region fallbacks by requested region
esg_region_fallbacks_total = Counter(
    "esg_region_fallbacks_total",
    "Calculations that fell back to the default emission factor region",
    labelnames=["region"],
)

# 5. Reported total emissions by region
esg_emissions_kg = Histogram(
    "esg_emissions_kg",
    "Distribution of total reported emissions in kgCO2e",
    labelnames=["region"],
    buckets=(
        100.0, 1_000.0, 10_000.0, 100_000.0,
        1_000_000.0, 10_000_000.0, 100_000_000.0,
    ),
)

# 6. Offset budgets that no provider could satisfy
esg_offset_budget_infeasible_total = Counter(
    "esg_offset_budget_infeasible_total",
    "Offset selections whose budget excluded every provider",
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_calculation(action: str, status: str) -> None:
    """Record a processed service action.

    Args:
        action: Action name (calculate_carbon, track_targets, ...).
        status: Outcome (success, error).
    """
    esg_calculations_total.labels(action=action, status=status).inc()


def record_error(error_type: str) -> None:
    """Record an engine error.

    Args:
        error_type: Exception class name.
    """
    esg_errors_total.labels(error_type=error_type).inc()


def observe_duration(operation: str, seconds: float) -> None:
    """Observe the duration of an engine operation."""
    esg_processing_duration_seconds.labels(operation=operation).observe(seconds)


def record_region_fallback(region: str) -> None:
    """Record a fallback from an unknown region to the default region."""
    esg_region_fallbacks_total.labels(region=region).inc()


def observe_emissions(region: str, total_kg: float) -> None:
    """Observe a reported total emissions figure."""
    esg_emissions_kg.labels(region=region).observe(total_kg)


def record_infeasible_budget() -> None:
    """Record an offset selection whose budget was infeasible."""
    esg_offset_budget_infeasible_total.inc()


__all__ = [
    "esg_calculations_total",
    "esg_errors_total",
    "esg_processing_duration_seconds",
    "esg_region_fallbacks_total",
    "esg_emissions_kg",
    "esg_offset_budget_infeasible_total",
    "record_calculation",
    "record_error",
    "observe_duration",
    "record_region_fallback",
    "observe_emissions",
    "record_infeasible_budget",
]
