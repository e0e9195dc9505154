# -*- coding: utf-8 -*-
"""
Industry benchmark table and comparator for assessed E/S/G scores.

Deltas are ``assessed - benchmark`` per dimension, unclamped. Unknown
industries fall back to the configured default industry (technology)
with a warning, in the same way unknown regions fall back for
emission factors.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from esg_engine.config import get_config
from esg_engine.determinism import round2, round_whole, to_decimal
from esg_engine.exceptions import InvalidScores
from esg_engine.models import (
    BenchmarkComparison,
    BenchmarkDeltas,
    EsgScores,
    IndustryBenchmark,
)

logger = logging.getLogger(__name__)

INDUSTRY_BENCHMARKS: Mapping[str, IndustryBenchmark] = MappingProxyType({
    "technology": IndustryBenchmark(environmental=72, social=68, governance=75),
    "manufacturing": IndustryBenchmark(environmental=58, social=62, governance=70),
    "retail": IndustryBenchmark(environmental=61, social=65, governance=68),
    "healthcare": IndustryBenchmark(environmental=67, social=78, governance=73),
    "finance": IndustryBenchmark(environmental=69, social=64, governance=82),
    "energy": IndustryBenchmark(environmental=45, social=58, governance=71),
    "agriculture": IndustryBenchmark(environmental=52, social=60, governance=65),
    "construction": IndustryBenchmark(environmental=48, social=55, governance=67),
    "hospitality": IndustryBenchmark(environmental=56, social=72, governance=64),
    "logistics": IndustryBenchmark(environmental=42, social=59, governance=69),
})

DIMENSIONS = ("environmental", "social", "governance")


class BenchmarkComparator:
    """Compares assessed scores with the industry benchmark table.

    Args:
        table: Industry -> benchmark mapping (built-in table by default)
        default_industry: Row used for unknown industries
    """

    def __init__(
        self,
        table: Optional[Mapping[str, IndustryBenchmark]] = None,
        default_industry: Optional[str] = None,
    ):
        self._table = MappingProxyType(dict(table if table is not None else INDUSTRY_BENCHMARKS))
        self.default_industry = (default_industry or get_config().default_industry).lower()
        if self.default_industry not in self._table:
            raise ValueError(
                f"default_industry '{self.default_industry}' is not in the benchmark table"
            )

    def industries(self) -> List[str]:
        return sorted(self._table)

    def resolve_industry(self, industry: Optional[str]) -> str:
        """Return the table key used for ``industry``."""
        key = (industry or "").strip().lower()
        if key in self._table:
            return key
        logger.warning(
            "Unknown industry '%s', falling back to '%s'", industry, self.default_industry
        )
        return self.default_industry

    def benchmark_for(self, industry: Optional[str]) -> IndustryBenchmark:
        return self._table[self.resolve_industry(industry)]

    def market_average(self) -> IndustryBenchmark:
        """Per-dimension mean across all industries, rounded to whole points."""
        count = len(self._table)
        return IndustryBenchmark(**{
            dim: round_whole(
                sum(to_decimal(getattr(b, dim)) for b in self._table.values()) / count
            )
            for dim in DIMENSIONS
        })

    def compare(
        self,
        scores: Union[EsgScores, Mapping[str, Any]],
        industry: Optional[str],
    ) -> BenchmarkComparison:
        """
        Compare assessed scores against an industry benchmark.

        Args:
            scores: Assessed environmental/social/governance scores (0-100)
            industry: Industry key, case-insensitive

        Returns:
            BenchmarkComparison with signed per-dimension deltas

        Raises:
            InvalidScores: scores missing or out of range
        """
        assessed = self._coerce_scores(scores)
        key = self.resolve_industry(industry)
        benchmark = self._table[key]

        deltas = {
            f"vs_industry_{dim}": round2(
                to_decimal(getattr(assessed, dim)) - to_decimal(getattr(benchmark, dim))
            )
            for dim in DIMENSIONS
        }
        return BenchmarkComparison(
            industry=key,
            assessed=assessed,
            industry_benchmark=benchmark,
            comparison=BenchmarkDeltas(**deltas),
        )

    @staticmethod
    def _coerce_scores(scores: Union[EsgScores, Mapping[str, Any]]) -> EsgScores:
        if isinstance(scores, EsgScores):
            return scores
        if not isinstance(scores, Mapping):
            raise InvalidScores(
                f"Scores must be a mapping, got {type(scores).__name__}",
                context={"type": type(scores).__name__},
            )
        try:
            return EsgScores(**{dim: scores.get(dim) for dim in DIMENSIONS})
        except ValidationError as e:
            raise InvalidScores(
                f"Invalid ESG scores: {e.errors()[0]['msg']}",
                context={"scores": {dim: scores.get(dim) for dim in DIMENSIONS}},
            ) from e


def benchmark_table() -> Dict[str, Dict[str, float]]:
    """Plain-dict view of the built-in table, for serialization."""
    return {name: b.model_dump() for name, b in INDUSTRY_BENCHMARKS.items()}


__all__ = [
    "INDUSTRY_BENCHMARKS",
    "BenchmarkComparator",
    "benchmark_table",
]
