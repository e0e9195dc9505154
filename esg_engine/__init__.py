# -*- coding: utf-8 -*-
"""
ESG Engine: GHG Accounting and ESG Target Tracking
==================================================

Deterministic engine for a multi-tenant CRM/ERP. It supports:

- Three-scope carbon reports (GHG Protocol Corporate Standard) from raw
  resource consumption, using region-specific emission factors
- Intensity metrics per employee and per unit revenue
- Reduction target tracking against time-based pacing
- Carbon offset selection and costing under a budget
- ESG score comparison against industry benchmarks
- Supplier spend summaries
- Parallel batch recomputation with per-item error isolation
- SHA-256 provenance chain tracking for audit trails
- Prometheus metrics for observability

Key Components:
    - config: EsgEngineConfig with ESG_ENGINE_ env prefix
    - emission_factors: Immutable region -> factor set registry
    - consumption: Raw consumption validation and defaulting
    - scope_calculator: Scope 1/2/3 breakdowns
    - intensity: Intensity metrics and report assembly
    - target_tracker: Progress, pacing and on-track status
    - offsets: Offset catalog and budget-aware selector
    - benchmarks: Industry benchmark table and comparator
    - batch: Thread-pool batch processor
    - provenance: SHA-256 chain-hashed audit trails
    - metrics: Prometheus metrics
    - setup: Service facade with named actions

Example:
    >>> from esg_engine import EsgEngineService
    >>> service = EsgEngineService()
    >>> service.startup()
    >>> result = service.calculate_carbon(
    ...     {"electricity_kwh": 1000, "natural_gas_m3": 200},
    ...     employees=10, revenue=1_000_000, region="europe",
    ... )
    >>> result["data"]["total_emissions_kg"]
    680.0
"""

__version__ = "1.0.0"

from esg_engine.config import EsgEngineConfig, get_config, reset_config, set_config
from esg_engine.exceptions import (
    DivisionByZero,
    EsgEngineError,
    InfeasibleBudget,
    InvalidConsumption,
    InvalidScores,
    InvalidTargetDefinition,
    UnknownRegion,
    UnsupportedAction,
)
from esg_engine.models import (
    ConsumptionRecord,
    EmissionFactorSet,
    EmissionsReport,
    FlightFactorMode,
    ReductionTarget,
    Region,
    TrackedTarget,
)
from esg_engine.emission_factors import DEFAULT_REGISTRY, EmissionFactorRegistry
from esg_engine.consumption import ConsumptionNormalizer
from esg_engine.scope_calculator import ScopeCalculator
from esg_engine.intensity import IntensityNormalizer
from esg_engine.carbon_report import CarbonReportBuilder
from esg_engine.target_tracker import REFERENCE_EPOCH, TargetTracker
from esg_engine.offsets import DEFAULT_CATALOG, OffsetCatalog, OffsetSelector
from esg_engine.benchmarks import INDUSTRY_BENCHMARKS, BenchmarkComparator
from esg_engine.insights import NullInsightProvider, TextInsightProvider
from esg_engine.batch import BatchProcessor
from esg_engine.provenance import ProvenanceTracker
from esg_engine.setup import EsgEngineService, get_service, reset_service, set_service

__all__ = [
    "__version__",
    # config
    "EsgEngineConfig",
    "get_config",
    "set_config",
    "reset_config",
    # errors
    "EsgEngineError",
    "InvalidConsumption",
    "UnknownRegion",
    "InvalidTargetDefinition",
    "DivisionByZero",
    "InfeasibleBudget",
    "InvalidScores",
    "UnsupportedAction",
    # models
    "Region",
    "FlightFactorMode",
    "EmissionFactorSet",
    "ConsumptionRecord",
    "EmissionsReport",
    "ReductionTarget",
    "TrackedTarget",
    # engines
    "EmissionFactorRegistry",
    "DEFAULT_REGISTRY",
    "ConsumptionNormalizer",
    "ScopeCalculator",
    "IntensityNormalizer",
    "CarbonReportBuilder",
    "TargetTracker",
    "REFERENCE_EPOCH",
    "OffsetCatalog",
    "OffsetSelector",
    "DEFAULT_CATALOG",
    "BenchmarkComparator",
    "INDUSTRY_BENCHMARKS",
    "TextInsightProvider",
    "NullInsightProvider",
    "BatchProcessor",
    "ProvenanceTracker",
    # service
    "EsgEngineService",
    "get_service",
    "set_service",
    "reset_service",
]
