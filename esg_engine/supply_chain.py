# -*- coding: utf-8 -*-
"""
Supply-chain summary: supplier count, total spend, countries and spend
per category. Numeric only; supplier risk narratives are produced by the
injected insight provider, if any.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError

from esg_engine.determinism import dsum, round2, to_decimal
from esg_engine.exceptions import InvalidConsumption
from esg_engine.models import Supplier, SupplyChainSummary

logger = logging.getLogger(__name__)

SupplierInput = Union[Supplier, Mapping[str, Any]]


def _coerce_supplier(index: int, item: SupplierInput) -> Supplier:
    if isinstance(item, Supplier):
        return item
    if not isinstance(item, Mapping):
        raise InvalidConsumption(
            f"Supplier {index} must be a mapping, got {type(item).__name__}",
            context={"index": index},
        )
    try:
        return Supplier(**{k: v for k, v in item.items() if v is not None})
    except ValidationError as e:
        raise InvalidConsumption(
            f"Invalid supplier {index}: {e.errors()[0]['msg']}",
            context={"index": index, "name": item.get("name")},
        ) from e


def summarize_suppliers(suppliers: Iterable[SupplierInput]) -> SupplyChainSummary:
    """
    Summarize a supplier list.

    Countries are listed once each, in first-seen order.

    Raises:
        InvalidConsumption: a supplier is malformed or has negative spend
    """
    records: List[Supplier] = [
        _coerce_supplier(i, item) for i, item in enumerate(suppliers)
    ]

    countries: List[str] = []
    by_category: Dict[str, list] = {}
    for supplier in records:
        if supplier.country not in countries:
            countries.append(supplier.country)
        by_category.setdefault(supplier.category, []).append(to_decimal(supplier.spend))

    summary = SupplyChainSummary(
        total_suppliers=len(records),
        total_spend=round2(dsum(to_decimal(s.spend) for s in records)),
        geographic_distribution=countries,
        spend_by_category={cat: round2(dsum(v)) for cat, v in by_category.items()},
    )
    logger.debug(
        "Supply chain summarized: %d suppliers across %d countries",
        summary.total_suppliers, len(countries),
    )
    return summary


__all__ = ["summarize_suppliers"]
