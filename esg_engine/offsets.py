# -*- coding: utf-8 -*-
"""
Carbon Offset Catalog and Selector

Prices every catalog provider for an emissions volume, filters by an
optional budget and ranks by rating.

Budget handling:
    - ``budget=None`` keeps every provider
    - otherwise quotes with ``total_cost <= budget`` are kept
    - if nothing fits, the full list is returned with
      ``budget_feasible=False`` and a warning is logged

The market price range always covers the unfiltered quotes.
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from esg_engine.determinism import quantize, round_whole, to_decimal
from esg_engine.exceptions import InvalidConsumption
from esg_engine.metrics import record_infeasible_budget
from esg_engine.models import (
    MarketPriceRange,
    OffsetProvider,
    OffsetQuote,
    OffsetSelection,
    OffsetType,
)

logger = logging.getLogger(__name__)


def _finite_quantity(name: str, value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidConsumption(
            f"{name} must be a number, got {value!r}",
            context={"field": name, "value": value},
        )
    try:
        number = to_decimal(value)
    except (TypeError, ArithmeticError) as e:
        raise InvalidConsumption(
            f"{name} must be a number, got {value!r}",
            context={"field": name, "value": str(value)},
        ) from e
    if not number.is_finite() or number < 0:
        raise InvalidConsumption(
            f"{name} must be a finite non-negative number, got {value}",
            context={"field": name, "value": str(value)},
        )
    return number


# Every offset type has its own entry; community_forestry and soil_carbon do
# not fall back to the methane/technology pair.
CO_BENEFITS: Mapping[OffsetType, Tuple[str, ...]] = MappingProxyType({
    OffsetType.FORESTRY: ("Biodiversity", "Local communities"),
    OffsetType.COMMUNITY_FORESTRY: ("Biodiversity", "Local communities"),
    OffsetType.RENEWABLE_ENERGY: ("Local employment", "Energy transition"),
    OffsetType.METHANE_CAPTURE: ("Methane reduction", "Technology innovation"),
    OffsetType.SOIL_CARBON: ("Soil health", "Agricultural resilience"),
})

_DEFAULT_PROVIDERS = (
    OffsetProvider(
        id="gold_standard", name="Gold Standard", price_per_ton=18.50,
        type=OffsetType.RENEWABLE_ENERGY, location="Global", rating=4.8,
        tons_available=8500,
    ),
    OffsetProvider(
        id="verra_vcs", name="Verra VCS", price_per_ton=15.20,
        type=OffsetType.FORESTRY, location="Amazon", rating=4.6,
        tons_available=10000,
    ),
    OffsetProvider(
        id="american_carbon", name="American Carbon Registry", price_per_ton=22.00,
        type=OffsetType.METHANE_CAPTURE, location="USA", rating=4.9,
        tons_available=4200,
    ),
    OffsetProvider(
        id="plan_vivo", name="Plan Vivo", price_per_ton=12.80,
        type=OffsetType.COMMUNITY_FORESTRY, location="Africa", rating=4.5,
        tons_available=6000,
    ),
    OffsetProvider(
        id="climate_action", name="Climate Action Reserve", price_per_ton=19.50,
        type=OffsetType.SOIL_CARBON, location="North America", rating=4.7,
        tons_available=3100,
    ),
)


class OffsetCatalog:
    """Read-only, ordered list of offset providers."""

    def __init__(self, providers: Optional[Iterable[OffsetProvider]] = None):
        self._providers: Tuple[OffsetProvider, ...] = tuple(
            _DEFAULT_PROVIDERS if providers is None else providers
        )
        ids = [p.id for p in self._providers]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate offset provider ids: {ids}")

    def providers(self) -> Tuple[OffsetProvider, ...]:
        return self._providers

    def get(self, provider_id: str) -> Optional[OffsetProvider]:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    def __len__(self) -> int:
        return len(self._providers)


DEFAULT_CATALOG = OffsetCatalog()


class OffsetSelector:
    """Quotes, filters and ranks offsets from a catalog."""

    def __init__(self, catalog: Optional[OffsetCatalog] = None):
        self.catalog = catalog or DEFAULT_CATALOG

    def quote(self, provider: OffsetProvider, emissions_tons: float) -> OffsetQuote:
        """Price one provider for ``emissions_tons``."""
        total = quantize(to_decimal(provider.price_per_ton) * to_decimal(emissions_tons))
        return OffsetQuote(
            **provider.model_dump(),
            total_cost=float(total),
            co_benefits=list(CO_BENEFITS.get(provider.type, ())),
        )

    def select_offsets(
        self,
        emissions_tons: float,
        budget: Optional[float] = None,
    ) -> OffsetSelection:
        """
        Build ranked offset options for an emissions volume.

        Args:
            emissions_tons: Tonnes CO2e to offset (>= 0)
            budget: Optional spending cap; 0 is a real cap

        Returns:
            OffsetSelection, options sorted by rating descending

        Raises:
            InvalidConsumption: emissions_tons or budget is negative,
                not finite or not a number
        """
        tons = _finite_quantity("emissions_tons", emissions_tons)
        cap = None if budget is None else _finite_quantity("budget", budget)

        quotes = [self.quote(p, tons) for p in self.catalog.providers()]
        costs = [to_decimal(q.total_cost) for q in quotes]

        feasible = True
        options: List[OffsetQuote] = quotes
        if cap is not None:
            options = [q for q in quotes if to_decimal(q.total_cost) <= cap]
            if not options:
                feasible = False
                options = quotes
                record_infeasible_budget()
                logger.warning(
                    "No offset provider fits budget %s for %s t; returning all %d options",
                    budget, emissions_tons, len(quotes),
                )

        # sorted() is stable, ties keep catalog order
        options = sorted(options, key=lambda q: q.rating, reverse=True)

        if costs:
            price_range = MarketPriceRange(
                min=float(min(costs)),
                max=float(max(costs)),
                average=round_whole(sum(costs) / len(costs)),
            )
        else:
            price_range = MarketPriceRange(min=0.0, max=0.0, average=0.0)

        return OffsetSelection(
            emissions_to_offset=float(tons),
            options=options,
            recommended=options[0] if options else None,
            budget=None if cap is None else float(cap),
            budget_feasible=feasible,
            market_price_range=price_range,
        )


__all__ = [
    "CO_BENEFITS",
    "DEFAULT_CATALOG",
    "OffsetCatalog",
    "OffsetSelector",
]
