# -*- coding: utf-8 -*-
"""
Rule-based reduction recommendations for a carbon report.

Deterministic thresholds only; free-form advice belongs to the injected
TextInsightProvider.
"""

from typing import List

from esg_engine.models import ConsumptionRecord, ScopeResult

SCOPE2_RENEWABLE_THRESHOLD_KG = 1000.0
FLIGHT_VIDEO_CONFERENCE_THRESHOLD_KM = 10000.0

ELECTRIFY_FLEET = "Consider electric vehicles to reduce Scope 1 emissions"
RENEWABLE_CONTRACTS = "Evaluate renewable energy contracts for Scope 2"
SUPPLIER_PROGRAMME = "Implement a sustainable supplier programme"
VIDEO_CONFERENCING = "Replace business trips with video conferencing where possible"


def recommend(scopes: ScopeResult, consumption: ConsumptionRecord) -> List[str]:
    """Return the recommendations whose rule fires, in a fixed order."""
    s1 = scopes.scope1.total
    s2 = scopes.scope2.total
    s3 = scopes.scope3.total

    recommendations = []
    if s1 > s2:
        recommendations.append(ELECTRIFY_FLEET)
    if s2 > SCOPE2_RENEWABLE_THRESHOLD_KG:
        recommendations.append(RENEWABLE_CONTRACTS)
    if s3 > s1 + s2:
        recommendations.append(SUPPLIER_PROGRAMME)
    if consumption.flight_km > FLIGHT_VIDEO_CONFERENCE_THRESHOLD_KM:
        recommendations.append(VIDEO_CONFERENCING)
    return recommendations


__all__ = [
    "recommend",
    "ELECTRIFY_FLEET",
    "RENEWABLE_CONTRACTS",
    "SUPPLIER_PROGRAMME",
    "VIDEO_CONFERENCING",
]
