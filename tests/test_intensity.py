# -*- coding: utf-8 -*-
"""Tests for intensity metrics, report assembly and recommendations."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from esg_engine.consumption import normalize_consumption
from esg_engine.exceptions import DivisionByZero
from esg_engine.intensity import IntensityNormalizer
from esg_engine.models import METHODOLOGY
from esg_engine.recommendations import (
    ELECTRIFY_FLEET,
    RENEWABLE_CONTRACTS,
    SUPPLIER_PROGRAMME,
    VIDEO_CONFERENCING,
    recommend,
)


@pytest.fixture
def normalizer():
    return IntensityNormalizer()


@pytest.fixture
def europe_scopes(calculator, europe_factors, europe_consumption):
    return calculator.compute(normalize_consumption(europe_consumption), europe_factors, "europe")


# ==============================================================================
# Intensity metrics
# ==============================================================================

class TestIntensityMetrics:
    """Derived per-employee and per-revenue figures."""

    def test_reference_scenario(self, normalizer, europe_scopes):
        report = normalizer.normalize(europe_scopes, employees=10, revenue=1_000_000)

        assert report.total_emissions_kg == 680.0
        assert report.total_emissions_tons == 0.68
        assert report.per_employee == 68.0
        assert report.per_million_revenue == 680.0
        assert report.carbon_intensity == 0.68
        assert report.region == "europe"
        assert report.methodology == METHODOLOGY

    def test_scope_shares(self, normalizer, europe_scopes):
        report = normalizer.normalize(europe_scopes, employees=10, revenue=1_000_000)

        assert report.scope_shares.scope1 == 59.41
        assert report.scope_shares.scope2 == 40.59
        assert report.scope_shares.scope3 == 0.0

    def test_zero_total_has_zero_shares(self, normalizer, calculator, europe_factors):
        scopes = calculator.compute(normalize_consumption({}), europe_factors)
        report = normalizer.normalize(scopes, employees=5, revenue=100)

        assert report.per_employee == 0.0
        assert report.scope_shares.scope1 == 0.0
        assert report.scope_shares.scope2 == 0.0

    def test_rounding_half_up(self, normalizer, europe_scopes):
        # 680 / 3 = 226.666...
        report = normalizer.normalize(europe_scopes, employees=3, revenue=1_000_000)
        assert report.per_employee == 226.67

    def test_numeric_strings_accepted(self, normalizer, europe_scopes):
        report = normalizer.normalize(europe_scopes, employees="10", revenue="1000000")
        assert report.per_employee == 68.0

    def test_calculation_date(self, normalizer, europe_scopes):
        moment = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        report = normalizer.normalize(
            europe_scopes, employees=1, revenue=1, calculated_at=moment,
        )
        assert report.calculation_date == "2025-03-01T12:00:00+00:00"

    def test_report_is_frozen(self, normalizer, europe_scopes):
        report = normalizer.normalize(europe_scopes, employees=10, revenue=1_000_000)
        with pytest.raises(ValidationError):
            report.per_employee = 0.0


class TestDivisionByZero:
    """Non-positive denominators are rejected, never turned into inf/NaN."""

    @pytest.mark.parametrize("employees", [0, -5, None, "abc", float("nan")])
    def test_invalid_employees(self, normalizer, europe_scopes, employees):
        with pytest.raises(DivisionByZero) as exc_info:
            normalizer.normalize(europe_scopes, employees=employees, revenue=1_000_000)
        assert exc_info.value.context["field"] == "employees"

    @pytest.mark.parametrize("revenue", [0, -1.5, None])
    def test_invalid_revenue(self, normalizer, europe_scopes, revenue):
        with pytest.raises(DivisionByZero) as exc_info:
            normalizer.normalize(europe_scopes, employees=10, revenue=revenue)
        assert exc_info.value.context["field"] == "revenue"

    def test_error_code(self, normalizer, europe_scopes):
        with pytest.raises(DivisionByZero) as exc_info:
            normalizer.normalize(europe_scopes, employees=0, revenue=1)
        assert exc_info.value.error_code == "ESG_DIVISION_BY_ZERO"


# ==============================================================================
# Recommendations
# ==============================================================================

class TestRecommendations:
    """Deterministic recommendation rules."""

    def _scopes(self, calculator, factors, **consumption):
        record = normalize_consumption(consumption)
        return calculator.compute(record, factors), record

    def test_scope1_dominant(self, calculator, europe_factors):
        scopes, record = self._scopes(calculator, europe_factors, natural_gas_m3=200)
        assert recommend(scopes, record) == [ELECTRIFY_FLEET]

    def test_large_scope2(self, calculator, europe_factors):
        scopes, record = self._scopes(calculator, europe_factors, electricity_kwh=4000)
        assert recommend(scopes, record) == [RENEWABLE_CONTRACTS]

    def test_scope3_dominant(self, calculator, europe_factors):
        scopes, record = self._scopes(calculator, europe_factors, waste_kg=1000)
        assert recommend(scopes, record) == [SUPPLIER_PROGRAMME]

    def test_flight_threshold_is_exclusive(self, calculator, europe_factors):
        scopes, record = self._scopes(calculator, europe_factors, flight_km=10000)
        assert VIDEO_CONFERENCING not in recommend(scopes, record)

        scopes, record = self._scopes(calculator, europe_factors, flight_km=10001)
        assert VIDEO_CONFERENCING in recommend(scopes, record)

    def test_fixed_order(self, calculator, europe_factors):
        scopes, record = self._scopes(
            calculator, europe_factors,
            diesel_l=2000, electricity_kwh=5000, flight_km=50000,
        )
        assert recommend(scopes, record) == [
            ELECTRIFY_FLEET, RENEWABLE_CONTRACTS, SUPPLIER_PROGRAMME, VIDEO_CONFERENCING,
        ]

    def test_attached_to_report(self, normalizer, calculator, europe_factors):
        scopes, record = self._scopes(calculator, europe_factors, natural_gas_m3=200)

        with_consumption = normalizer.normalize(scopes, 1, 1, consumption=record)
        without = normalizer.normalize(scopes, 1, 1)

        assert with_consumption.recommendations == [ELECTRIFY_FLEET]
        assert without.recommendations == []
