# -*- coding: utf-8 -*-
"""
ESG Engine Data Models

Pydantic v2 data models for the GHG accounting and ESG target-tracking
engine. Defines enumerations, immutable factor and consumption records,
scope and report models, reduction-target models, carbon offset models,
benchmark models and supply-chain summary models.

Enumerations (3):
    - Region, FlightFactorMode, OffsetType

Emission models (6):
    - EmissionFactorSet, ConsumptionRecord, ScopeBreakdown, ScopeResult,
      ScopeShares, EmissionsReport

Target models (5):
    - ReductionTarget, TrackedTarget, TargetSummary, BatchItemError,
      TargetTrackingResult

Offset models (4):
    - OffsetProvider, OffsetQuote, MarketPriceRange, OffsetSelection

Benchmark and supply-chain models (6):
    - IndustryBenchmark, EsgScores, BenchmarkDeltas, BenchmarkComparison,
      Supplier, SupplyChainSummary
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Activity identifiers every EmissionFactorSet must define.
FACTOR_ACTIVITIES: tuple = (
    "electricity_kwh",
    "natural_gas_m3",
    "diesel_l",
    "gasoline_l",
    "flight_km_short",
    "flight_km_long",
    "train_km",
    "car_km",
    "waste_kg",
    "water_m3",
    "paper_kg",
    "plastic_kg",
)

#: Consumption identifiers accepted by the normalizer.
CONSUMPTION_FIELDS: tuple = (
    "electricity_kwh",
    "natural_gas_m3",
    "diesel_l",
    "gasoline_l",
    "company_vehicle_km",
    "heating_kwh",
    "cooling_kwh",
    "flight_km",
    "flight_km_short",
    "flight_km_long",
    "train_km",
    "commute_km",
    "waste_kg",
    "water_m3",
    "paper_kg",
    "plastic_kg",
    "purchased_goods_eur",
    "upstream_transport_km",
)

METHODOLOGY: str = "GHG Protocol Corporate Standard"


# =============================================================================
# Enumerations
# =============================================================================


class Region(str, Enum):
    """Geographic region selecting an emission factor set."""

    EUROPE = "europe"
    NORTH_AMERICA = "north_america"
    LATAM = "latam"
    ASIA = "asia"


class FlightFactorMode(str, Enum):
    """How business-travel flight distance is converted to emissions.

    LEGACY_LONG_HAUL: every flight_km is charged at the long-haul factor.
    HAUL_SPLIT: flight_km_short / flight_km_long use their own factors;
        unsplit flight_km stays at the long-haul factor.
    """

    LEGACY_LONG_HAUL = "legacy_long_haul"
    HAUL_SPLIT = "haul_split"


class OffsetType(str, Enum):
    """Project category of a carbon offset provider."""

    RENEWABLE_ENERGY = "renewable_energy"
    FORESTRY = "forestry"
    METHANE_CAPTURE = "methane_capture"
    COMMUNITY_FORESTRY = "community_forestry"
    SOIL_CARBON = "soil_carbon"


# =============================================================================
# Emission models
# =============================================================================


class EmissionFactorSet(BaseModel):
    """Emission factors for one region, in kgCO2e per unit of activity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    electricity_kwh: float = Field(..., ge=0.0)
    natural_gas_m3: float = Field(..., ge=0.0)
    diesel_l: float = Field(..., ge=0.0)
    gasoline_l: float = Field(..., ge=0.0)
    flight_km_short: float = Field(..., ge=0.0)
    flight_km_long: float = Field(..., ge=0.0)
    train_km: float = Field(..., ge=0.0)
    car_km: float = Field(..., ge=0.0)
    waste_kg: float = Field(..., ge=0.0)
    water_m3: float = Field(..., ge=0.0)
    paper_kg: float = Field(..., ge=0.0)
    plastic_kg: float = Field(..., ge=0.0)


class ConsumptionRecord(BaseModel):
    """Complete, validated consumption quantities for one calculation.

    Units are those expected by the factor set: kWh, m3, litres, km, kg
    and EUR for purchased goods.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Scope 1
    natural_gas_m3: float = Field(default=0.0, ge=0.0)
    diesel_l: float = Field(default=0.0, ge=0.0)
    gasoline_l: float = Field(default=0.0, ge=0.0)
    company_vehicle_km: float = Field(default=0.0, ge=0.0)
    # Scope 2
    electricity_kwh: float = Field(default=0.0, ge=0.0)
    heating_kwh: float = Field(default=0.0, ge=0.0)
    cooling_kwh: float = Field(default=0.0, ge=0.0)
    # Scope 3
    flight_km: float = Field(default=0.0, ge=0.0)
    flight_km_short: float = Field(default=0.0, ge=0.0)
    flight_km_long: float = Field(default=0.0, ge=0.0)
    train_km: float = Field(default=0.0, ge=0.0)
    commute_km: float = Field(default=0.0, ge=0.0)
    waste_kg: float = Field(default=0.0, ge=0.0)
    water_m3: float = Field(default=0.0, ge=0.0)
    paper_kg: float = Field(default=0.0, ge=0.0)
    plastic_kg: float = Field(default=0.0, ge=0.0)
    purchased_goods_eur: float = Field(default=0.0, ge=0.0)
    upstream_transport_km: float = Field(default=0.0, ge=0.0)


class ScopeBreakdown(BaseModel):
    """Line items of one GHG scope and their rounded total (kgCO2e)."""

    model_config = ConfigDict(frozen=True)

    breakdown: Dict[str, float] = Field(default_factory=dict)
    total: float = 0.0


class ScopeResult(BaseModel):
    """Output of the scope calculator for one consumption record."""

    model_config = ConfigDict(frozen=True)

    scope1: ScopeBreakdown
    scope2: ScopeBreakdown
    scope3: ScopeBreakdown
    total_emissions_kg: float
    region: Optional[str] = None
    flight_factor_mode: FlightFactorMode = FlightFactorMode.LEGACY_LONG_HAUL


class ScopeShares(BaseModel):
    """Percentage of total emissions contributed by each scope."""

    model_config = ConfigDict(frozen=True)

    scope1: float = 0.0
    scope2: float = 0.0
    scope3: float = 0.0


class EmissionsReport(BaseModel):
    """Three-scope carbon report with intensity metrics.

    Computed on demand and never mutated after creation.
    """

    model_config = ConfigDict(frozen=True)

    scope1: ScopeBreakdown
    scope2: ScopeBreakdown
    scope3: ScopeBreakdown
    total_emissions_kg: float
    total_emissions_tons: float
    per_employee: float
    per_million_revenue: float
    carbon_intensity: float
    scope_shares: ScopeShares
    region: str
    calculation_date: str
    methodology: str = METHODOLOGY
    recommendations: List[str] = Field(default_factory=list)
    provenance_hash: str = ""


# =============================================================================
# Target models
# =============================================================================


def _coerce_deadline(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return date.fromisoformat(text)
    return value


class ReductionTarget(BaseModel):
    """A tracked reduction metric. ``current`` is updated externally."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str
    baseline: float
    target: float
    current: float
    deadline: date

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, value: Any) -> Any:
        """Accept dates, datetimes and ISO-8601 strings."""
        return _coerce_deadline(value)


class TrackedTarget(ReductionTarget):
    """A reduction target with its derived pacing fields."""

    progress_percent: float
    expected_progress_percent: float
    on_track: bool
    remaining: float
    annual_reduction_needed: float


class TargetSummary(BaseModel):
    """Aggregate status counts across a collection of tracked targets."""

    model_config = ConfigDict(frozen=True)

    total_targets: int = 0
    on_track: int = 0
    at_risk: int = 0
    not_started: int = 0


class BatchItemError(BaseModel):
    """A skipped batch item and the reason it failed."""

    model_config = ConfigDict(frozen=True)

    index: int
    item: Optional[str] = None
    error_code: str
    message: str


class TargetTrackingResult(BaseModel):
    """Tracked targets, their summary, and any items that failed."""

    model_config = ConfigDict(frozen=True)

    targets: List[TrackedTarget] = Field(default_factory=list)
    summary: TargetSummary = Field(default_factory=TargetSummary)
    errors: List[BatchItemError] = Field(default_factory=list)


# =============================================================================
# Offset models
# =============================================================================


class OffsetProvider(BaseModel):
    """A catalog entry for a carbon offset seller."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price_per_ton: float = Field(..., gt=0.0)
    type: OffsetType
    location: str
    rating: float = Field(..., ge=0.0, le=5.0)
    tons_available: int = Field(default=0, ge=0)


class OffsetQuote(OffsetProvider):
    """A provider priced for a specific emissions volume."""

    total_cost: float
    verification: str = "Third-party verified"
    co_benefits: List[str] = Field(default_factory=list)


class MarketPriceRange(BaseModel):
    """Min, max and average total cost across all quoted providers."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    average: float


class OffsetSelection(BaseModel):
    """Ranked offset options for an emissions volume and optional budget."""

    model_config = ConfigDict(frozen=True)

    emissions_to_offset: float
    options: List[OffsetQuote]
    recommended: Optional[OffsetQuote] = None
    budget: Optional[float] = None
    budget_feasible: bool = True
    market_price_range: MarketPriceRange


# =============================================================================
# Benchmark and supply-chain models
# =============================================================================


class IndustryBenchmark(BaseModel):
    """Typical E/S/G scores (0-100) for an industry."""

    model_config = ConfigDict(frozen=True)

    environmental: float = Field(..., ge=0.0, le=100.0)
    social: float = Field(..., ge=0.0, le=100.0)
    governance: float = Field(..., ge=0.0, le=100.0)


class EsgScores(IndustryBenchmark):
    """Assessed E/S/G scores for a company, supplied by the caller."""


class BenchmarkDeltas(BaseModel):
    """Assessed minus benchmark, per dimension. Negative = underperforming."""

    model_config = ConfigDict(frozen=True)

    vs_industry_environmental: float
    vs_industry_social: float
    vs_industry_governance: float


class BenchmarkComparison(BaseModel):
    """Result of comparing assessed scores with an industry benchmark."""

    model_config = ConfigDict(frozen=True)

    industry: str
    assessed: EsgScores
    industry_benchmark: IndustryBenchmark
    comparison: BenchmarkDeltas


class Supplier(BaseModel):
    """A supplier in the value chain."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str
    category: str = "uncategorized"
    spend: float = Field(default=0.0, ge=0.0)
    country: str = "unknown"


class SupplyChainSummary(BaseModel):
    """Numeric overview of a supplier list."""

    model_config = ConfigDict(frozen=True)

    total_suppliers: int
    total_spend: float
    geographic_distribution: List[str]
    spend_by_category: Dict[str, float]


__all__ = [
    "FACTOR_ACTIVITIES",
    "CONSUMPTION_FIELDS",
    "METHODOLOGY",
    "Region",
    "FlightFactorMode",
    "OffsetType",
    "EmissionFactorSet",
    "ConsumptionRecord",
    "ScopeBreakdown",
    "ScopeResult",
    "ScopeShares",
    "EmissionsReport",
    "ReductionTarget",
    "TrackedTarget",
    "TargetSummary",
    "BatchItemError",
    "TargetTrackingResult",
    "OffsetProvider",
    "OffsetQuote",
    "MarketPriceRange",
    "OffsetSelection",
    "IndustryBenchmark",
    "EsgScores",
    "BenchmarkDeltas",
    "BenchmarkComparison",
    "Supplier",
    "SupplyChainSummary",
]
