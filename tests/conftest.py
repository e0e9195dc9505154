# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import os
from datetime import datetime, timezone

import pytest

import esg_engine.provenance as provenance_module
import esg_engine.setup as setup_module
from esg_engine.config import reset_config
from esg_engine.emission_factors import EmissionFactorRegistry
from esg_engine.provenance import ProvenanceTracker
from esg_engine.scope_calculator import ScopeCalculator
from esg_engine.setup import EsgEngineService

EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_singletons(monkeypatch):
    """Every test starts from default config and fresh singletons."""
    for name in list(os.environ):
        if name.startswith("ESG_ENGINE_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    monkeypatch.setattr(setup_module, "_service_instance", None)
    monkeypatch.setattr(provenance_module, "_tracker_instance", None)
    yield
    reset_config()


@pytest.fixture
def epoch():
    return EPOCH


@pytest.fixture
def registry():
    return EmissionFactorRegistry()


@pytest.fixture
def europe_factors(registry):
    return registry.factors_for("europe")


@pytest.fixture
def calculator():
    return ScopeCalculator()


@pytest.fixture
def europe_consumption():
    """Reference scenario: 1000 kWh electricity and 200 m3 natural gas."""
    return {"electricity_kwh": 1000, "natural_gas_m3": 200}


@pytest.fixture
def full_consumption():
    """One non-zero quantity for every consumption field."""
    return {
        "electricity_kwh": 12500,
        "natural_gas_m3": 830,
        "diesel_l": 420,
        "gasoline_l": 310,
        "company_vehicle_km": 18400,
        "heating_kwh": 6400,
        "cooling_kwh": 2100,
        "flight_km": 24000,
        "flight_km_short": 3200,
        "flight_km_long": 8800,
        "train_km": 5100,
        "commute_km": 42000,
        "waste_kg": 950,
        "water_m3": 310,
        "paper_kg": 120,
        "plastic_kg": 45,
        "purchased_goods_eur": 250000,
        "upstream_transport_km": 7300,
    }


@pytest.fixture
def provenance():
    return ProvenanceTracker(genesis_seed="test-genesis")


@pytest.fixture
def service(provenance):
    svc = EsgEngineService(provenance=provenance)
    svc.startup()
    return svc
