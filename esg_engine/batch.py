# -*- coding: utf-8 -*-
"""
Batch Processor

Parallel recomputation over many companies or targets.

Features:
- Thread pool execution (``max_workers`` from config)
- Error isolation (one failure doesn't stop the batch)
- Results returned in input order
- Duration metrics per batch
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from esg_engine.carbon_report import CarbonReportBuilder
from esg_engine.config import get_config
from esg_engine.determinism import dsum, round2, to_decimal
from esg_engine.metrics import observe_duration, record_error
from esg_engine.models import BatchItemError, EmissionsReport, TargetTrackingResult, TrackedTarget
from esg_engine.target_tracker import TargetTracker, target_label

logger = logging.getLogger(__name__)


@dataclass
class CarbonBatchResult:
    """
    Result of a batch carbon calculation.

    Attributes:
        reports: One entry per request, None where the request failed
        errors: Failed requests, by input index
        total_emissions_kg: Sum over successful reports
        successful_count: Number of successful requests
        failed_count: Number of failed requests
        batch_duration_seconds: Wall-clock time of the batch
    """
    reports: List[Optional[EmissionsReport]]
    errors: List[BatchItemError] = field(default_factory=list)
    total_emissions_kg: float = 0.0
    successful_count: int = 0
    failed_count: int = 0
    batch_duration_seconds: float = 0.0

    def __post_init__(self):
        ok = [r for r in self.reports if r is not None]
        self.successful_count = len(ok)
        self.failed_count = len(self.errors)
        self.total_emissions_kg = round2(dsum(to_decimal(r.total_emissions_kg) for r in ok))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reports": [r.model_dump(mode="json") if r is not None else None for r in self.reports],
            "errors": [e.model_dump() for e in self.errors],
            "total_emissions_kg": self.total_emissions_kg,
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
            "batch_duration_seconds": self.batch_duration_seconds,
        }


def _error_for(index: int, item: Any, exc: Exception) -> BatchItemError:
    return BatchItemError(
        index=index,
        item=item,
        error_code=getattr(exc, "error_code", type(exc).__name__),
        message=getattr(exc, "message", str(exc)),
    )


class BatchProcessor:
    """
    Runs independent engine calls in a thread pool.

    Args:
        builder: Carbon report builder used for ``calculate_batch``
        tracker: Target tracker used for ``track_targets_batch``
        max_workers: Pool size (configured ``max_workers`` if None)
    """

    def __init__(
        self,
        builder: Optional[CarbonReportBuilder] = None,
        tracker: Optional[TargetTracker] = None,
        max_workers: Optional[int] = None,
    ):
        self.builder = builder or CarbonReportBuilder()
        self.tracker = tracker or TargetTracker()
        self.max_workers = max_workers or get_config().max_workers

    def _run(
        self,
        items: Sequence[Any],
        fn: Callable[[Any], Any],
        label: Callable[[Any], Optional[str]],
    ) -> Tuple[List[Any], List[BatchItemError]]:
        results: List[Any] = [None] * len(items)
        errors: List[BatchItemError] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(fn, item): i for i, item in enumerate(items)
            }
            for future in as_completed(future_to_index):
                i = future_to_index[future]
                try:
                    results[i] = future.result()
                except Exception as e:
                    logger.error("Batch item %d failed: %s", i, e)
                    record_error(type(e).__name__)
                    errors.append(_error_for(i, label(items[i]), e))

        errors.sort(key=lambda err: err.index)
        return results, errors

    def calculate_batch(
        self,
        requests: Sequence[Mapping[str, Any]],
    ) -> CarbonBatchResult:
        """
        Build emissions reports for many companies.

        Each request mapping holds ``consumption``, ``employees``,
        ``revenue`` and optionally ``region`` and ``company_id``.
        """
        requests = list(requests)
        start = time.perf_counter()
        logger.info("Starting batch carbon calculation: %d requests", len(requests))

        reports, errors = self._run(
            requests,
            self.builder.build_request,
            lambda r: str(r.get("company_id")) if isinstance(r, Mapping) and r.get("company_id") else None,
        )

        duration = time.perf_counter() - start
        observe_duration("calculate_batch", duration)
        result = CarbonBatchResult(
            reports=reports, errors=errors, batch_duration_seconds=round(duration, 6),
        )
        logger.info(
            "Batch carbon calculation completed: %d ok, %d failed in %.3fs",
            result.successful_count, result.failed_count, duration,
        )
        return result

    def track_targets_batch(
        self,
        targets: Sequence[Any],
        now: Union[datetime, date, None] = None,
    ) -> TargetTrackingResult:
        """Track many targets in parallel, all evaluated at the same ``now``."""
        targets = list(targets)
        now = now or datetime.now(timezone.utc)
        start = time.perf_counter()

        tracked, errors = self._run(
            targets,
            lambda t: self.tracker.track(t, now),
            target_label,
        )

        ok: List[TrackedTarget] = [t for t in tracked if t is not None]
        observe_duration("track_targets_batch", time.perf_counter() - start)
        return TargetTrackingResult(
            targets=ok,
            summary=self.tracker.summarize(ok),
            errors=errors,
        )


__all__ = ["BatchProcessor", "CarbonBatchResult"]
