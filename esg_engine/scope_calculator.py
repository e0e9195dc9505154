# -*- coding: utf-8 -*-
"""
Scope Calculator - GHG Protocol Scope 1/2/3 Emissions

Converts a validated ConsumptionRecord into three scope breakdowns using a
region's EmissionFactorSet:

1. Scope 1 (direct): natural gas, diesel, gasoline, company vehicles
2. Scope 2 (energy-indirect): electricity, heating, cooling
3. Scope 3 (value chain): flights, train, commuting, waste, water, paper,
   plastic, purchased goods, upstream transport

Heating and cooling are modelled as fractional equivalents of grid
electricity intensity (0.8x and 1.2x), not as separate factors. Purchased
goods and upstream transport use fixed approximation constants.

Arithmetic runs on Decimal; each scope total is rounded half-up to 2
decimals and the grand total is the sum of the three rounded totals, so
``total == scope1.total + scope2.total + scope3.total`` holds exactly.

Reference: GHG Protocol Corporate Standard
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from esg_engine.config import get_config
from esg_engine.determinism import dsum, quantize, to_decimal
from esg_engine.models import (
    ConsumptionRecord,
    EmissionFactorSet,
    FlightFactorMode,
    ScopeBreakdown,
    ScopeResult,
)

logger = logging.getLogger(__name__)

# Engine constants (not looked up from the factor set)
PURCHASED_GOODS_KG_PER_EUR = Decimal("0.0002")
UPSTREAM_TRANSPORT_KG_PER_KM = Decimal("0.1")
HEATING_ELECTRICITY_RATIO = Decimal("0.8")
COOLING_ELECTRICITY_RATIO = Decimal("1.2")
COMMUTE_CAR_SHARE = Decimal("0.5")


def _line(quantity: float, factor: float, multiplier: Decimal = Decimal("1")) -> Decimal:
    return to_decimal(quantity) * to_decimal(factor) * multiplier


def _breakdown(items: Dict[str, Decimal]) -> ScopeBreakdown:
    return ScopeBreakdown(
        breakdown={name: float(value) for name, value in items.items()},
        total=float(quantize(dsum(items.values()))),
    )


class ScopeCalculator:
    """
    Scope 1/2/3 emissions calculator.

    Pure and side-effect free: identical (consumption, factors) inputs
    always produce identical output.

    Args:
        flight_factor_mode: Flight distance treatment; defaults to the
            configured mode (legacy long-haul unless overridden)
    """

    def __init__(self, flight_factor_mode: Optional[FlightFactorMode] = None):
        if flight_factor_mode is None:
            flight_factor_mode = FlightFactorMode(get_config().flight_factor_mode)
        self.flight_factor_mode = FlightFactorMode(flight_factor_mode)

    def calculate_scope1(
        self, consumption: ConsumptionRecord, factors: EmissionFactorSet
    ) -> ScopeBreakdown:
        """Direct emissions from fuels burned and company vehicles."""
        return _breakdown({
            "natural_gas": _line(consumption.natural_gas_m3, factors.natural_gas_m3),
            "diesel": _line(consumption.diesel_l, factors.diesel_l),
            "gasoline": _line(consumption.gasoline_l, factors.gasoline_l),
            "company_vehicles": _line(consumption.company_vehicle_km, factors.car_km),
        })

    def calculate_scope2(
        self, consumption: ConsumptionRecord, factors: EmissionFactorSet
    ) -> ScopeBreakdown:
        """Purchased energy emissions, all keyed off grid electricity intensity."""
        return _breakdown({
            "electricity": _line(consumption.electricity_kwh, factors.electricity_kwh),
            "heating": _line(
                consumption.heating_kwh, factors.electricity_kwh, HEATING_ELECTRICITY_RATIO
            ),
            "cooling": _line(
                consumption.cooling_kwh, factors.electricity_kwh, COOLING_ELECTRICITY_RATIO
            ),
        })

    def calculate_scope3(
        self, consumption: ConsumptionRecord, factors: EmissionFactorSet
    ) -> ScopeBreakdown:
        """Value-chain emissions."""
        return _breakdown({
            "business_travel_flights": self._flight_emissions(consumption, factors),
            "business_travel_train": _line(consumption.train_km, factors.train_km),
            "employee_commuting": _line(
                consumption.commute_km, factors.car_km, COMMUTE_CAR_SHARE
            ),
            "waste": _line(consumption.waste_kg, factors.waste_kg),
            "water": _line(consumption.water_m3, factors.water_m3),
            "paper": _line(consumption.paper_kg, factors.paper_kg),
            "plastic": _line(consumption.plastic_kg, factors.plastic_kg),
            "purchased_goods": to_decimal(consumption.purchased_goods_eur)
            * PURCHASED_GOODS_KG_PER_EUR,
            "upstream_transport": to_decimal(consumption.upstream_transport_km)
            * UPSTREAM_TRANSPORT_KG_PER_KM,
        })

    def _flight_emissions(
        self, consumption: ConsumptionRecord, factors: EmissionFactorSet
    ) -> Decimal:
        # Unsplit flight_km is always charged at the long-haul factor, even
        # though a short-haul factor exists. HAUL_SPLIT adds the split inputs.
        emissions = _line(consumption.flight_km, factors.flight_km_long)
        if self.flight_factor_mode is FlightFactorMode.HAUL_SPLIT:
            emissions += _line(consumption.flight_km_short, factors.flight_km_short)
            emissions += _line(consumption.flight_km_long, factors.flight_km_long)
        elif consumption.flight_km_short or consumption.flight_km_long:
            logger.debug(
                "flight_km_short/flight_km_long ignored in %s mode",
                self.flight_factor_mode.value,
            )
        return emissions

    def compute(
        self,
        consumption: ConsumptionRecord,
        factors: EmissionFactorSet,
        region: Optional[str] = None,
    ) -> ScopeResult:
        """
        Compute all three scopes.

        Args:
            consumption: Validated consumption record
            factors: Emission factor set for the region
            region: Region label carried into the result

        Returns:
            ScopeResult with per-scope breakdowns and the grand total
        """
        scope1 = self.calculate_scope1(consumption, factors)
        scope2 = self.calculate_scope2(consumption, factors)
        scope3 = self.calculate_scope3(consumption, factors)

        total = quantize(
            to_decimal(scope1.total) + to_decimal(scope2.total) + to_decimal(scope3.total)
        )

        logger.debug(
            "Scopes computed: s1=%.2f s2=%.2f s3=%.2f total=%s region=%s",
            scope1.total, scope2.total, scope3.total, total, region,
        )

        return ScopeResult(
            scope1=scope1,
            scope2=scope2,
            scope3=scope3,
            total_emissions_kg=float(total),
            region=region,
            flight_factor_mode=self.flight_factor_mode,
        )


__all__ = [
    "ScopeCalculator",
    "PURCHASED_GOODS_KG_PER_EUR",
    "UPSTREAM_TRANSPORT_KG_PER_KM",
    "HEATING_ELECTRICITY_RATIO",
    "COOLING_ELECTRICITY_RATIO",
    "COMMUTE_CAR_SHARE",
]
