# -*- coding: utf-8 -*-
"""
Intensity Normalizer

Derives per-employee, per-revenue and carbon-intensity metrics from a
ScopeResult and assembles the final EmissionsReport.

    per_employee        = total_kg / employees
    per_million_revenue = total_kg / (revenue / 1_000_000)
    carbon_intensity    = total_kg / revenue * 1000
    total_emissions_tons = total_kg / 1000

Every denominator must be strictly positive; a zero or negative headcount
or revenue raises DivisionByZero instead of producing Infinity or NaN.
All results are rounded half-up to 2 decimals.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from esg_engine.determinism import quantize, round2, to_decimal
from esg_engine.exceptions import DivisionByZero
from esg_engine.models import (
    ConsumptionRecord,
    EmissionsReport,
    ScopeResult,
    ScopeShares,
)
from esg_engine.recommendations import recommend

logger = logging.getLogger(__name__)

MILLION = Decimal("1000000")
KG_PER_TON = Decimal("1000")
HUNDRED = Decimal("100")


def _positive_denominator(name: str, value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise DivisionByZero(
            f"{name} is required to normalize emissions",
            context={"field": name, "value": value},
        )
    try:
        number = to_decimal(value)
    except (TypeError, ArithmeticError) as e:
        raise DivisionByZero(
            f"{name} must be a positive number, got {value!r}",
            context={"field": name, "value": str(value)},
        ) from e
    if not number.is_finite() or number <= 0:
        raise DivisionByZero(
            f"{name} must be greater than zero, got {value}",
            context={"field": name, "value": str(value)},
        )
    return number


def _share(part: float, total: Decimal) -> float:
    if total == 0:
        return 0.0
    return round2(to_decimal(part) / total * HUNDRED)


class IntensityNormalizer:
    """Builds EmissionsReports with intensity metrics."""

    def normalize(
        self,
        scopes: ScopeResult,
        employees: Any,
        revenue: Any,
        consumption: Optional[ConsumptionRecord] = None,
        calculated_at: Optional[datetime] = None,
    ) -> EmissionsReport:
        """
        Fill in the derived fields of an emissions report.

        Args:
            scopes: Output of ScopeCalculator.compute
            employees: Headcount (> 0)
            revenue: Revenue in reporting currency (> 0)
            consumption: Source record, used for recommendations
            calculated_at: Report timestamp (defaults to now, UTC)

        Returns:
            Immutable EmissionsReport

        Raises:
            DivisionByZero: employees or revenue is missing or <= 0
        """
        headcount = _positive_denominator("employees", employees)
        revenue_d = _positive_denominator("revenue", revenue)

        total_kg = to_decimal(scopes.total_emissions_kg)
        timestamp = calculated_at or datetime.now(timezone.utc)

        recommendations = recommend(scopes, consumption) if consumption is not None else []

        report = EmissionsReport(
            scope1=scopes.scope1,
            scope2=scopes.scope2,
            scope3=scopes.scope3,
            total_emissions_kg=float(quantize(total_kg)),
            total_emissions_tons=round2(total_kg / KG_PER_TON),
            per_employee=round2(total_kg / headcount),
            per_million_revenue=round2(total_kg / (revenue_d / MILLION)),
            carbon_intensity=round2(total_kg / revenue_d * KG_PER_TON),
            scope_shares=ScopeShares(
                scope1=_share(scopes.scope1.total, total_kg),
                scope2=_share(scopes.scope2.total, total_kg),
                scope3=_share(scopes.scope3.total, total_kg),
            ),
            region=scopes.region or "",
            calculation_date=timestamp.isoformat(),
            recommendations=recommendations,
        )

        logger.debug(
            "Intensity normalized: total=%.2f kg per_employee=%.2f intensity=%.2f",
            report.total_emissions_kg, report.per_employee, report.carbon_intensity,
        )
        return report


__all__ = ["IntensityNormalizer"]
