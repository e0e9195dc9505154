# -*- coding: utf-8 -*-
"""
Target Tracker

Computes progress, time-based pacing and required annual reduction for
emission reduction targets.

Pacing is measured against a fixed reference epoch (2020-01-01 UTC) for
every target, regardless of when the target was created:

    progress  = (baseline - current) / (baseline - target) * 100   clamped [0, 100]
    expected  = (now - epoch) / (deadline - epoch) * 100
    on_track  = progress >= expected * tolerance                   (tolerance 0.9)
    remaining = current - target
    annual    = remaining / max(1, deadline.year - now.year)

``on_track`` compares the unrounded values; the reported percentages are
rounded half-up to whole percent.
"""

import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from esg_engine.config import get_config
from esg_engine.determinism import round2, round_whole, to_decimal
from esg_engine.exceptions import EsgEngineError, InvalidTargetDefinition
from esg_engine.models import (
    BatchItemError,
    ReductionTarget,
    TargetSummary,
    TargetTrackingResult,
    TrackedTarget,
)

logger = logging.getLogger(__name__)

REFERENCE_EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)

HUNDRED = Decimal("100")
ZERO = Decimal("0")

TargetInput = Union[ReductionTarget, Mapping[str, Any]]

_TARGET_FIELDS = {"name", "baseline", "target", "current", "deadline"}


def _as_utc(moment: Union[datetime, date, None]) -> datetime:
    if moment is None:
        return datetime.now(timezone.utc)
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)
    return datetime.combine(moment, time.min, tzinfo=timezone.utc)


def _coerce_target(target: Any) -> ReductionTarget:
    if isinstance(target, ReductionTarget):
        return target
    if not isinstance(target, Mapping):
        raise InvalidTargetDefinition(
            f"Target must be a mapping, got {type(target).__name__}",
            context={"type": type(target).__name__},
        )
    try:
        return ReductionTarget(**target)
    except (ValidationError, TypeError) as e:
        raise InvalidTargetDefinition(
            f"Invalid target definition: {e}",
            context={"name": target.get("name")},
        ) from e


class TargetTracker:
    """
    Reduction target tracker.

    Args:
        tolerance: Fraction of expected progress required to be on track;
            defaults to the configured ``on_track_tolerance``
        epoch: Pacing reference point (2020-01-01 UTC unless overridden)
    """

    def __init__(
        self,
        tolerance: Optional[float] = None,
        epoch: datetime = REFERENCE_EPOCH,
    ):
        self.tolerance = to_decimal(
            tolerance if tolerance is not None else get_config().on_track_tolerance
        )
        self.epoch = _as_utc(epoch)

    def track(
        self,
        target: TargetInput,
        now: Union[datetime, date, None] = None,
    ) -> TrackedTarget:
        """
        Derive pacing fields for one target.

        Args:
            target: ReductionTarget or mapping with name, baseline, target,
                current and deadline
            now: Evaluation time (defaults to now, UTC)

        Returns:
            TrackedTarget

        Raises:
            InvalidTargetDefinition: baseline equals target, the deadline
                is missing, unparseable or not after the reference epoch
        """
        target = _coerce_target(target)
        now_utc = _as_utc(now)

        baseline = to_decimal(target.baseline)
        goal = to_decimal(target.target)
        current = to_decimal(target.current)

        if baseline == goal:
            raise InvalidTargetDefinition(
                f"Target '{target.name}' has baseline equal to target ({target.baseline})",
                context={"name": target.name, "baseline": target.baseline},
            )

        deadline = _as_utc(target.deadline)
        total_seconds = to_decimal((deadline - self.epoch).total_seconds())
        if total_seconds <= 0:
            raise InvalidTargetDefinition(
                f"Target '{target.name}' deadline {target.deadline} is not after "
                f"{self.epoch.date().isoformat()}",
                context={"name": target.name, "deadline": target.deadline.isoformat()},
            )

        progress = (baseline - current) / (baseline - goal) * HUNDRED
        progress = min(max(progress, ZERO), HUNDRED)

        elapsed_seconds = to_decimal((now_utc - self.epoch).total_seconds())
        expected = elapsed_seconds / total_seconds * HUNDRED

        remaining = current - goal
        years_left = max(1, target.deadline.year - now_utc.year)

        return TrackedTarget(
            **target.model_dump(include=_TARGET_FIELDS),
            progress_percent=round_whole(progress),
            expected_progress_percent=round_whole(expected),
            on_track=progress >= expected * self.tolerance,
            remaining=round2(remaining),
            annual_reduction_needed=round2(remaining / years_left),
        )

    def summarize(self, tracked: Iterable[TrackedTarget]) -> TargetSummary:
        """Count on-track, at-risk and not-started targets."""
        tracked = list(tracked)
        return TargetSummary(
            total_targets=len(tracked),
            on_track=sum(1 for t in tracked if t.on_track),
            at_risk=sum(1 for t in tracked if not t.on_track and t.progress_percent > 0),
            not_started=sum(1 for t in tracked if t.progress_percent == 0),
        )

    def track_all(
        self,
        targets: Iterable[Any],
        now: Union[datetime, date, None] = None,
    ) -> TargetTrackingResult:
        """
        Track a collection of targets, skipping the ones that fail.

        Every input is evaluated at the same ``now``. Failing items are
        reported in ``errors`` and excluded from the summary.
        """
        now_utc = _as_utc(now)
        tracked: List[TrackedTarget] = []
        errors: List[BatchItemError] = []

        for index, item in enumerate(targets):
            try:
                tracked.append(self.track(item, now_utc))
            except EsgEngineError as e:
                logger.error("Skipping target %d: %s", index, e)
                errors.append(BatchItemError(
                    index=index,
                    item=target_label(item),
                    error_code=e.error_code,
                    message=e.message,
                ))

        return TargetTrackingResult(
            targets=tracked,
            summary=self.summarize(tracked),
            errors=errors,
        )


def target_label(item: Any) -> Optional[str]:
    """Best-effort display name of a target input, for error reports."""
    if isinstance(item, ReductionTarget):
        return item.name
    if isinstance(item, Mapping) and item.get("name") is not None:
        return str(item.get("name"))
    return None


__all__ = ["TargetTracker", "REFERENCE_EPOCH", "target_label"]
