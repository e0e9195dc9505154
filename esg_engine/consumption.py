# -*- coding: utf-8 -*-
"""
Consumption Normalizer

Turns a raw, loosely typed consumption payload into a complete
``ConsumptionRecord``:

- missing keys default to 0
- non-numeric values (None, booleans, non-numeric strings, lists) default to 0
- numeric strings are parsed ("1200.5")
- negative, NaN or infinite quantities raise InvalidConsumption

No unit conversion is performed; callers supply values in the units the
emission factor set expects (kWh, m3, litres, km, kg, EUR).
"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from esg_engine.exceptions import InvalidConsumption
from esg_engine.models import CONSUMPTION_FIELDS, ConsumptionRecord

logger = logging.getLogger(__name__)


def _coerce_quantity(field: str, value: Any) -> float:
    """Return a validated float quantity for one consumption field."""
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError as e:
            raise InvalidConsumption(
                f"Consumption '{field}' must be a finite number, got {value!r}",
                context={"field": field, "value": str(value)},
            ) from e
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            logger.debug("Non-numeric value for %s=%r, defaulting to 0", field, value)
            return 0.0
    else:
        logger.debug("Non-numeric value for %s=%r, defaulting to 0", field, value)
        return 0.0

    if math.isnan(number) or math.isinf(number):
        raise InvalidConsumption(
            f"Consumption '{field}' must be a finite number, got {value!r}",
            context={"field": field, "value": str(value)},
        )
    if number < 0:
        raise InvalidConsumption(
            f"Consumption '{field}' must be non-negative, got {number}",
            context={"field": field, "value": number},
        )
    return number


class ConsumptionNormalizer:
    """Validates and defaults raw consumption input."""

    def normalize(self, raw: Optional[Mapping[str, Any]]) -> ConsumptionRecord:
        """
        Build a ConsumptionRecord from a raw mapping.

        Args:
            raw: Mapping of consumption identifier to quantity; None or
                an existing ConsumptionRecord are also accepted

        Returns:
            Complete ConsumptionRecord

        Raises:
            InvalidConsumption: Negative, NaN or infinite quantity
        """
        if isinstance(raw, ConsumptionRecord):
            return raw
        if raw is None:
            return ConsumptionRecord()
        if not isinstance(raw, Mapping):
            raise InvalidConsumption(
                f"Consumption must be a mapping, got {type(raw).__name__}",
                context={"type": type(raw).__name__},
            )

        unknown = sorted(str(k) for k in raw if k not in CONSUMPTION_FIELDS)
        if unknown:
            logger.debug("Ignoring unknown consumption keys: %s", unknown)

        values: Dict[str, float] = {
            field: _coerce_quantity(field, raw.get(field))
            for field in CONSUMPTION_FIELDS
        }
        return ConsumptionRecord(**values)


def normalize_consumption(raw: Optional[Mapping[str, Any]]) -> ConsumptionRecord:
    """Module-level shortcut for ``ConsumptionNormalizer().normalize``."""
    return ConsumptionNormalizer().normalize(raw)


__all__ = ["ConsumptionNormalizer", "normalize_consumption"]
