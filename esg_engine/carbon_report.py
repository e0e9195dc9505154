# -*- coding: utf-8 -*-
"""
Carbon Report Builder

Runs the full emissions pipeline for one company:

    raw consumption -> ConsumptionNormalizer -> EmissionFactorRegistry.resolve
        -> ScopeCalculator.compute -> IntensityNormalizer.normalize

and stamps the resulting EmissionsReport with a SHA-256 content hash.
"""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from esg_engine.consumption import ConsumptionNormalizer
from esg_engine.emission_factors import DEFAULT_REGISTRY, EmissionFactorRegistry, FactorResolution
from esg_engine.intensity import IntensityNormalizer
from esg_engine.metrics import observe_emissions
from esg_engine.models import EmissionsReport
from esg_engine.provenance import compute_hash
from esg_engine.scope_calculator import ScopeCalculator

logger = logging.getLogger(__name__)


class CarbonReportBuilder:
    """Builds EmissionsReports from raw consumption payloads.

    Args:
        registry: Emission factor registry (module default if None)
        calculator: Scope calculator (configured flight mode if None)
        normalizer: Intensity normalizer
        consumption_normalizer: Raw input validator
    """

    def __init__(
        self,
        registry: Optional[EmissionFactorRegistry] = None,
        calculator: Optional[ScopeCalculator] = None,
        normalizer: Optional[IntensityNormalizer] = None,
        consumption_normalizer: Optional[ConsumptionNormalizer] = None,
    ):
        self.registry = registry or DEFAULT_REGISTRY
        self.calculator = calculator or ScopeCalculator()
        self.normalizer = normalizer or IntensityNormalizer()
        self.consumption_normalizer = consumption_normalizer or ConsumptionNormalizer()

    def build(
        self,
        consumption: Optional[Mapping[str, Any]],
        employees: Any,
        revenue: Any,
        region: Optional[str] = None,
        calculated_at: Optional[datetime] = None,
    ) -> Tuple[EmissionsReport, FactorResolution]:
        """
        Produce an emissions report and the factor resolution behind it.

        Raises:
            InvalidConsumption: a consumption quantity is invalid
            UnknownRegion: strict registry and unregistered region
            DivisionByZero: employees or revenue <= 0
        """
        record = self.consumption_normalizer.normalize(consumption)
        resolution = self.registry.resolve(region)
        scopes = self.calculator.compute(record, resolution.factors, resolution.region_used)
        report = self.normalizer.normalize(
            scopes, employees, revenue, consumption=record, calculated_at=calculated_at,
        )
        report = report.model_copy(update={
            "provenance_hash": compute_hash(report.model_dump(exclude={"provenance_hash"})),
        })

        observe_emissions(resolution.region_used, report.total_emissions_kg)
        logger.info(
            "Carbon report built: region=%s total=%.2f kg (%.2f t)",
            resolution.region_used, report.total_emissions_kg, report.total_emissions_tons,
        )
        return report, resolution

    def build_request(self, request: Mapping[str, Any]) -> EmissionsReport:
        """``build`` driven by a request mapping, as used by batch runs."""
        report, _ = self.build(
            request.get("consumption"),
            request.get("employees"),
            request.get("revenue"),
            region=request.get("region"),
        )
        return report


__all__ = ["CarbonReportBuilder"]
