# -*- coding: utf-8 -*-
"""
ESG Engine Service Setup

Provides the ``EsgEngineService`` facade which wires together the engine
components (emission factor registry, report builder, target tracker,
offset selector, benchmark comparator, batch processor, provenance
tracker) and maps named actions onto them:

    calculate_carbon      -> CarbonReportBuilder.build
    track_targets         -> TargetTracker.track_all
    get_offset_options    -> OffsetSelector.select_offsets
    get_benchmarks        -> BenchmarkComparator.benchmark_for / market_average
    assess_esg_risk       -> BenchmarkComparator.compare
    analyze_supply_chain  -> summarize_suppliers
    calculate_carbon_batch -> BatchProcessor.calculate_batch

Every action returns ``{"success": True, "data": ...}``, records a
provenance entry and updates the Prometheus metrics. Errors propagate to
the caller unchanged.

Usage:
    >>> from esg_engine.setup import get_service
    >>> service = get_service()
    >>> result = service.dispatch("get_offset_options", {"emissions_tons": 100})
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from esg_engine.batch import BatchProcessor, CarbonBatchResult
from esg_engine.benchmarks import DIMENSIONS, BenchmarkComparator
from esg_engine.carbon_report import CarbonReportBuilder
from esg_engine.config import EsgEngineConfig, get_config
from esg_engine.emission_factors import EmissionFactorRegistry
from esg_engine.exceptions import EsgEngineError, InvalidTargetDefinition, UnsupportedAction
from esg_engine.insights import NullInsightProvider, TextInsightProvider, safe_generate
from esg_engine.metrics import observe_duration, record_calculation, record_error
from esg_engine.models import EsgScores
from esg_engine.offsets import OffsetCatalog, OffsetSelector
from esg_engine.provenance import ProvenanceTracker, compute_hash, get_provenance_tracker
from esg_engine.scope_calculator import ScopeCalculator
from esg_engine.supply_chain import summarize_suppliers
from esg_engine.target_tracker import TargetTracker

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def _parse_now(value: Any) -> Union[datetime, date, None]:
    if value is None or isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidTargetDefinition(
                f"Unparseable evaluation time: {value!r}",
                context={"now": value},
            ) from e
    raise InvalidTargetDefinition(
        f"Evaluation time must be an ISO-8601 string, got {type(value).__name__}",
        context={"now": str(value)},
    )


_ENTITY_TYPES = {
    "calculate_carbon": "emissions_report",
    "track_targets": "target_tracking",
    "get_offset_options": "offset_selection",
    "get_benchmarks": "industry_benchmark",
    "assess_esg_risk": "benchmark_comparison",
    "analyze_supply_chain": "supply_chain",
    "calculate_carbon_batch": "emissions_batch",
}


# ===================================================================
# EsgEngineService facade
# ===================================================================


class EsgEngineService:
    """Facade service for the ESG engine.

    Attributes:
        config: Engine configuration.
        registry: Emission factor registry built from config.
        builder: Carbon report builder.
        tracker: Reduction target tracker.
        offsets: Offset selector.
        benchmarks: Benchmark comparator.
        batch: Thread-pool batch processor.
        insight_provider: Source of optional narrative text.
    """

    def __init__(
        self,
        config: Optional[EsgEngineConfig] = None,
        insight_provider: Optional[TextInsightProvider] = None,
        catalog: Optional[OffsetCatalog] = None,
        provenance: Optional[ProvenanceTracker] = None,
    ) -> None:
        self.config = config or get_config()
        self.insight_provider = insight_provider or NullInsightProvider()
        self._provenance = provenance or get_provenance_tracker()

        self.registry = EmissionFactorRegistry(
            default_region=self.config.default_region,
            strict=self.config.strict_regions,
        )
        self.builder = CarbonReportBuilder(
            registry=self.registry,
            calculator=ScopeCalculator(self.config.flight_factor_mode),
        )
        self.tracker = TargetTracker(tolerance=self.config.on_track_tolerance)
        self.offsets = OffsetSelector(catalog)
        self.benchmarks = BenchmarkComparator(default_industry=self.config.default_industry)
        self.batch = BatchProcessor(
            builder=self.builder,
            tracker=self.tracker,
            max_workers=self.config.max_workers,
        )

        self._stats = {action: 0 for action in _ENTITY_TYPES}
        self._stats["errors"] = 0
        self._stats_lock = threading.Lock()
        self._started = False
        logger.info("EsgEngineService created")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def startup(self) -> None:
        self._started = True
        logger.info(
            "EsgEngineService started (regions=%s, flights=%s)",
            ",".join(self.registry.regions()), self.config.flight_factor_mode,
        )

    def shutdown(self) -> None:
        self._started = False
        logger.info("EsgEngineService shutdown")

    # ------------------------------------------------------------------
    # Health & Statistics
    # ------------------------------------------------------------------

    def health_check(self) -> Dict[str, Any]:
        """Return service health status."""
        return {
            "status": "healthy" if self._started else "starting",
            "service": "esg_engine",
            "regions": list(self.registry.regions()),
            "industries": self.benchmarks.industries(),
            "offset_providers": len(self.offsets.catalog),
            "insights": type(self.insight_provider).__name__,
            "timestamp": _utcnow().isoformat(),
        }

    def get_stats(self) -> Dict[str, Any]:
        """Return per-action counts and the provenance chain length."""
        with self._stats_lock:
            stats = dict(self._stats)
        return {
            **stats,
            "provenance_entries": self._provenance.entry_count,
            "timestamp": _utcnow().isoformat(),
        }

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def actions(self) -> List[str]:
        return list(_ENTITY_TYPES)

    def dispatch(
        self,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run a named action.

        Args:
            action: One of ``actions()``
            params: Action parameters
            context: Request context; ``company_id`` is used as the
                provenance entity id when params carry none

        Raises:
            UnsupportedAction: Unknown action name
        """
        p = dict(params or {})
        ctx = dict(context or {})
        handlers: Dict[str, Callable[[], Dict[str, Any]]] = {
            "calculate_carbon": lambda: self.calculate_carbon(
                p.get("consumption"),
                p.get("employees"),
                p.get("revenue"),
                region=p.get("region"),
                company_id=p.get("company_id") or ctx.get("company_id"),
            ),
            "track_targets": lambda: self.track_targets(
                p.get("targets") or [],
                now=p.get("now"),
                company_id=p.get("company_id") or ctx.get("company_id"),
            ),
            "get_offset_options": lambda: self.get_offset_options(
                p.get("emissions_tons", p.get("emissions")),
                budget=p.get("budget"),
            ),
            "get_benchmarks": lambda: self.get_benchmarks(p.get("industry")),
            "assess_esg_risk": lambda: self.assess_esg_risk(
                p.get("scores") or {},
                p.get("industry"),
                company_id=p.get("company_id") or ctx.get("company_id"),
            ),
            "analyze_supply_chain": lambda: self.analyze_supply_chain(
                p.get("suppliers") or [],
                company_id=p.get("company_id") or ctx.get("company_id"),
            ),
            "calculate_carbon_batch": lambda: self._execute(
                "calculate_carbon_batch",
                p.get("company_id") or ctx.get("company_id"),
                lambda: self.calculate_carbon_batch(p.get("requests") or []).to_dict(),
            ),
        }

        handler = handlers.get(action)
        if handler is None:
            record_calculation(str(action), "unsupported")
            raise UnsupportedAction(
                f"Unsupported action: {action}",
                context={"action": action, "supported": self.actions()},
            )
        return handler()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def calculate_carbon(
        self,
        consumption: Optional[Mapping[str, Any]],
        employees: Any,
        revenue: Any,
        region: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build a three-scope emissions report for one company."""

        def run() -> Dict[str, Any]:
            report, resolution = self.builder.build(consumption, employees, revenue, region)
            data = report.model_dump(mode="json")
            data["factor_resolution"] = {
                "region_requested": resolution.region_requested,
                "region_used": resolution.region_used,
                "fallback_applied": resolution.fallback_applied,
            }
            return data

        return self._execute("calculate_carbon", company_id, run)

    def track_targets(
        self,
        targets: Iterable[Any],
        now: Any = None,
        company_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Track reduction targets; failing targets are listed in ``errors``."""

        def run() -> Dict[str, Any]:
            result = self.tracker.track_all(list(targets), _parse_now(now))
            return result.model_dump(mode="json")

        return self._execute("track_targets", company_id, run)

    def get_offset_options(
        self,
        emissions_tons: float,
        budget: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Rank offset providers for an emissions volume under a budget."""
        return self._execute(
            "get_offset_options",
            None,
            lambda: self.offsets.select_offsets(emissions_tons, budget).model_dump(mode="json"),
        )

    def get_benchmarks(self, industry: Optional[str] = None) -> Dict[str, Any]:
        """Industry benchmark row plus the cross-industry average."""

        def run() -> Dict[str, Any]:
            key = self.benchmarks.resolve_industry(industry or self.config.default_industry)
            return {
                "industry": key,
                "benchmark": self.benchmarks.benchmark_for(key).model_dump(),
                "market_average": self.benchmarks.market_average().model_dump(),
                "industries": self.benchmarks.industries(),
            }

        return self._execute("get_benchmarks", None, run)

    def assess_esg_risk(
        self,
        scores: Union[EsgScores, Mapping[str, Any]],
        industry: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Compare assessed scores with the industry and flag lagging dimensions."""

        def run() -> Dict[str, Any]:
            comparison = self.benchmarks.compare(scores, industry)
            data = comparison.model_dump(mode="json")
            data["underperforming"] = [
                dim for dim in DIMENSIONS
                if getattr(comparison.comparison, f"vs_industry_{dim}") < 0
            ]
            return data

        return self._execute("assess_esg_risk", company_id, run)

    def analyze_supply_chain(
        self,
        suppliers: Iterable[Any],
        company_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Numeric supplier summary."""
        return self._execute(
            "analyze_supply_chain",
            company_id,
            lambda: summarize_suppliers(suppliers).model_dump(mode="json"),
        )

    def calculate_carbon_batch(
        self,
        requests: Iterable[Mapping[str, Any]],
    ) -> CarbonBatchResult:
        """Build reports for many companies in the thread pool."""
        return self.batch.calculate_batch(list(requests))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(
        self,
        action: str,
        entity_id: Optional[str],
        run: Callable[[], Dict[str, Any]],
    ) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            data = run()
        except EsgEngineError as exc:
            record_calculation(action, "error")
            record_error(type(exc).__name__)
            with self._stats_lock:
                self._stats["errors"] += 1
            logger.warning("Action %s failed: %s", action, exc)
            raise

        data_hash = compute_hash(data)
        if self.config.enable_provenance:
            self._provenance.record(
                _ENTITY_TYPES[action], str(entity_id or "anonymous"), action, data_hash,
            )

        elapsed = time.perf_counter() - start
        record_calculation(action, "success")
        observe_duration(action, elapsed)
        with self._stats_lock:
            self._stats[action] += 1

        result: Dict[str, Any] = {"success": True, "data": data, "provenance_hash": data_hash}
        narrative = safe_generate(self.insight_provider, action, data)
        if narrative is not None:
            result["narrative"] = narrative

        logger.debug("Action %s completed in %.2f ms", action, elapsed * 1000.0)
        return result


# ---------------------------------------------------------------------------
# Thread-safe singleton
# ---------------------------------------------------------------------------

_service_instance: Optional[EsgEngineService] = None
_service_lock = threading.Lock()


def get_service() -> EsgEngineService:
    """Return the singleton EsgEngineService.

    Thread-safe lazy initialization. Returns the same instance
    on every call within the process.
    """
    global _service_instance
    if _service_instance is None:
        with _service_lock:
            if _service_instance is None:
                _service_instance = EsgEngineService()
                _service_instance.startup()
    return _service_instance


def set_service(service: EsgEngineService) -> None:
    """Replace the singleton EsgEngineService (tests, custom wiring)."""
    global _service_instance
    with _service_lock:
        _service_instance = service


def reset_service() -> EsgEngineService:
    """Reset and return a new singleton instance."""
    global _service_instance
    with _service_lock:
        _service_instance = EsgEngineService()
        _service_instance.startup()
    return _service_instance


__all__ = [
    "EsgEngineService",
    "get_service",
    "set_service",
    "reset_service",
]
