# -*- coding: utf-8 -*-
"""
Emission Factor Registry

Immutable table of emission factors keyed by region. Factors are expressed
in kgCO2e per unit of activity (kWh, m3, litre, km, kg).

Resolution policy:
    - Registered region -> exact factor set
    - Unregistered region, strict mode -> UnknownRegion
    - Unregistered region, default mode -> default region (europe), logged
      at WARNING and reported via ``FactorResolution.fallback_applied``

The registry is built once at process start and shared read-only across
concurrent calculations; it holds no mutable state.

Example:
    >>> from esg_engine.emission_factors import DEFAULT_REGISTRY
    >>> DEFAULT_REGISTRY.factors_for("europe").electricity_kwh
    0.276
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from esg_engine.exceptions import UnknownRegion
from esg_engine.metrics import record_region_fallback
from esg_engine.models import EmissionFactorSet, Region

logger = logging.getLogger(__name__)

DEFAULT_REGION: str = Region.EUROPE.value

# Built-in factor table (kgCO2e per unit)
_BUILTIN_FACTORS: Dict[str, Dict[str, float]] = {
    Region.EUROPE.value: {
        "electricity_kwh": 0.276,
        "natural_gas_m3": 2.02,
        "diesel_l": 2.68,
        "gasoline_l": 2.31,
        "flight_km_short": 0.255,
        "flight_km_long": 0.195,
        "train_km": 0.041,
        "car_km": 0.171,
        "waste_kg": 0.467,
        "water_m3": 0.344,
        "paper_kg": 0.919,
        "plastic_kg": 2.53,
    },
    Region.NORTH_AMERICA.value: {
        "electricity_kwh": 0.385,
        "natural_gas_m3": 2.02,
        "diesel_l": 2.68,
        "gasoline_l": 2.31,
        "flight_km_short": 0.255,
        "flight_km_long": 0.195,
        "train_km": 0.089,
        "car_km": 0.192,
        "waste_kg": 0.467,
        "water_m3": 0.376,
        "paper_kg": 0.919,
        "plastic_kg": 2.53,
    },
    Region.LATAM.value: {
        "electricity_kwh": 0.189,
        "natural_gas_m3": 2.02,
        "diesel_l": 2.68,
        "gasoline_l": 2.31,
        "flight_km_short": 0.255,
        "flight_km_long": 0.195,
        "train_km": 0.056,
        "car_km": 0.185,
        "waste_kg": 0.467,
        "water_m3": 0.298,
        "paper_kg": 0.919,
        "plastic_kg": 2.53,
    },
    Region.ASIA.value: {
        "electricity_kwh": 0.512,
        "natural_gas_m3": 2.02,
        "diesel_l": 2.68,
        "gasoline_l": 2.31,
        "flight_km_short": 0.255,
        "flight_km_long": 0.195,
        "train_km": 0.035,
        "car_km": 0.168,
        "waste_kg": 0.467,
        "water_m3": 0.312,
        "paper_kg": 0.919,
        "plastic_kg": 2.53,
    },
}


@dataclass(frozen=True)
class FactorResolution:
    """
    Tracks how a region was resolved to a factor set.

    Attributes:
        region_requested: Region key supplied by the caller
        region_used: Region whose factors were returned
        fallback_applied: True when region_used != region_requested
        factors: The resolved factor set
    """
    region_requested: str
    region_used: str
    fallback_applied: bool
    factors: EmissionFactorSet


class EmissionFactorRegistry:
    """
    Read-only region -> EmissionFactorSet table.

    Args:
        table: Mapping of region key to factor mapping
        default_region: Region used for fallback; must be in ``table``
        strict: Raise UnknownRegion instead of falling back
    """

    def __init__(
        self,
        table: Optional[Mapping[str, Mapping[str, float]]] = None,
        default_region: str = DEFAULT_REGION,
        strict: bool = False,
    ):
        source = table if table is not None else _BUILTIN_FACTORS
        factor_sets = {}
        for region, values in source.items():
            try:
                factor_sets[str(region).lower()] = EmissionFactorSet(**values)
            except ValidationError as e:
                raise ValueError(f"Invalid emission factors for region '{region}': {e}") from e

        default_key = default_region.lower()
        if default_key not in factor_sets:
            raise ValueError(
                f"Default region '{default_region}' is not registered "
                f"(available: {sorted(factor_sets)})"
            )

        self._factors: Mapping[str, EmissionFactorSet] = MappingProxyType(factor_sets)
        self.default_region = default_key
        self.strict = strict

        logger.debug(
            "EmissionFactorRegistry built: regions=%s default=%s strict=%s",
            sorted(factor_sets), default_key, strict,
        )

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path],
        default_region: str = DEFAULT_REGION,
        strict: bool = False,
    ) -> EmissionFactorRegistry:
        """
        Load a factor table from YAML.

        Expected layout::

            regions:
              europe:
                electricity_kwh: 0.276
                ...

        A bare ``region -> factors`` mapping (no ``regions`` key) is also
        accepted.
        """
        with open(path, "r", encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}

        table = data.get("regions", data) if isinstance(data, dict) else None
        if not isinstance(table, dict) or not table:
            raise ValueError(f"No emission factor regions found in {path}")

        logger.info("Loaded emission factors for %d regions from %s", len(table), path)
        return cls(table=table, default_region=default_region, strict=strict)

    def regions(self) -> Tuple[str, ...]:
        """Registered region keys, sorted."""
        return tuple(sorted(self._factors))

    def __contains__(self, region: object) -> bool:
        return isinstance(region, str) and region.lower() in self._factors

    def resolve(self, region: Optional[Union[str, Region]] = None) -> FactorResolution:
        """
        Resolve a region to its factor set, applying the fallback policy.

        Args:
            region: Region key or Region enum; None selects the default

        Returns:
            FactorResolution describing what was used

        Raises:
            UnknownRegion: In strict mode when the region is not registered
        """
        if isinstance(region, Region):
            requested = region.value
        else:
            requested = (region or self.default_region).strip().lower()

        factors = self._factors.get(requested)
        if factors is not None:
            return FactorResolution(requested, requested, False, factors)

        if self.strict:
            raise UnknownRegion(
                f"No emission factors registered for region '{requested}'",
                context={"region": requested, "available": list(self.regions())},
            )

        logger.warning(
            "Unknown region '%s', falling back to default region '%s'",
            requested, self.default_region,
        )
        record_region_fallback(requested)
        return FactorResolution(
            requested, self.default_region, True, self._factors[self.default_region]
        )

    def factors_for(self, region: Optional[Union[str, Region]] = None) -> EmissionFactorSet:
        """Return the factor set for ``region`` (see ``resolve``)."""
        return self.resolve(region).factors


DEFAULT_REGISTRY = EmissionFactorRegistry()


__all__ = [
    "DEFAULT_REGION",
    "DEFAULT_REGISTRY",
    "EmissionFactorRegistry",
    "FactorResolution",
]
