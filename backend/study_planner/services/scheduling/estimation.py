"""
Workload Estimation Hook

Optional AI augmentation of the workload analysis. An external estimator
(see llm_estimator.py) can predict total hours, stress, and risk for a
student's pending work. When no estimator is configured, or the estimator
fails, a deterministic fallback heuristic is used so schedule generation
is never blocked by the hook.

Fallback heuristic:
- Total hours = sum of class workload hours
- Average daily hours = total / planning window (14 days)
- Stress = clamp(ceil(avg), 1, 10)
- Recommended daily hours = clamp(ceil(avg x 1.2), 2, 8)
- Overload / burnout risk from fixed thresholds
- Peak dates = dates with the most deadlines; conflicts = dates with 2+ deadlines

Usage:
    from study_planner.services.scheduling.estimation import estimate_workload

    estimate, used_fallback = await estimate_workload(tasks, workloads, estimator)
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, datetime
from typing import Optional, Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from study_planner.config.scheduling import scheduling_settings
from study_planner.exceptions import EstimationHookError
from study_planner.models.scheduling import (
    ClassWorkload,
    Task,
    WorkloadAnalysis,
    WorkloadEstimate,
    WorkloadRecommendations,
)
from study_planner.utils.time_utils import days_until, ensure_timezone_aware, utc_now

logger = logging.getLogger(__name__)


@runtime_checkable
class WorkloadEstimator(Protocol):
    """Interface for external workload estimators."""

    async def estimate_workload(
        self,
        tasks: list[Task],
        class_workloads: list[ClassWorkload],
    ) -> WorkloadEstimate:
        """Estimate workload metrics; raise EstimationHookError on failure."""
        ...


def _deadline_counts(tasks: list[Task]) -> Counter:
    """Number of pending task deadlines per calendar date."""
    return Counter(
        ensure_timezone_aware(task.due_date).date()
        for task in tasks
        if task.due_date is not None and not task.completed
    )


def find_peak_workload_dates(tasks: list[Task], limit: Optional[int] = None) -> list[date]:
    """Dates with the most deadlines, busiest first (earliest date on ties)."""
    limit = limit if limit is not None else scheduling_settings.FALLBACK_PEAK_DATES
    counts = _deadline_counts(tasks)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [day for day, _ in ranked[:limit]]


def count_deadline_conflicts(tasks: list[Task]) -> int:
    """Number of dates on which two or more deadlines fall."""
    return sum(1 for count in _deadline_counts(tasks).values() if count >= 2)


def fallback_workload_estimate(
    tasks: list[Task],
    class_workloads: list[ClassWorkload],
) -> WorkloadEstimate:
    """
    Deterministic workload estimate used when no AI estimate is available.

    Args:
        tasks: Pending tasks considered in the analysis
        class_workloads: Per-class workload summaries

    Returns:
        WorkloadEstimate built from simple hour summation and ratio thresholds
    """
    s = scheduling_settings
    total_hours = sum(cw.total_estimated_hours for cw in class_workloads)
    avg_hours_per_day = total_hours / s.PLANNING_WINDOW_DAYS

    if total_hours > s.FALLBACK_OVERLOAD_HIGH_HOURS:
        overload_risk = 0.8
    elif total_hours > s.FALLBACK_OVERLOAD_MEDIUM_HOURS:
        overload_risk = 0.5
    else:
        overload_risk = 0.2

    if avg_hours_per_day > s.FALLBACK_BURNOUT_HIGH_DAILY_HOURS:
        burnout_risk = 0.7
    elif avg_hours_per_day > s.FALLBACK_BURNOUT_MEDIUM_DAILY_HOURS:
        burnout_risk = 0.4
    else:
        burnout_risk = 0.1

    return WorkloadEstimate(
        estimated_total_hours=total_hours,
        stress_level=min(10, max(1, math.ceil(avg_hours_per_day))),
        recommended_daily_hours=min(
            s.FALLBACK_MAX_DAILY_HOURS,
            max(
                s.FALLBACK_MIN_DAILY_HOURS,
                math.ceil(avg_hours_per_day * s.FALLBACK_DAILY_HOURS_FACTOR),
            ),
        ),
        peak_workload_dates=find_peak_workload_dates(tasks),
        recommendations=WorkloadRecommendations(
            immediate_actions=[
                "Consider extending deadlines where possible"
                if total_hours > s.FALLBACK_OVERLOAD_MEDIUM_HOURS
                else "Maintain current pace",
                "Focus on high-priority assignments first",
            ],
            schedule_adjustments=[
                "Distribute study time evenly across subjects",
                "Schedule regular breaks to avoid burnout",
            ],
            long_term_strategies=[
                "Develop better time management habits",
                "Create a consistent study routine",
            ],
        ),
        overload_risk=overload_risk,
        deadline_conflicts=count_deadline_conflicts(tasks),
        burnout_risk=burnout_risk,
    )


async def estimate_workload(
    tasks: list[Task],
    class_workloads: list[ClassWorkload],
    estimator: Optional[WorkloadEstimator] = None,
) -> tuple[WorkloadEstimate, bool]:
    """
    Estimate workload with the external hook, falling back on failure.

    Hook failures are logged and never propagated.

    Args:
        tasks: Pending tasks considered in the analysis
        class_workloads: Per-class workload summaries
        estimator: Optional external estimator

    Returns:
        Tuple of (estimate, used_fallback)
    """
    if estimator is None:
        return fallback_workload_estimate(tasks, class_workloads), True

    try:
        estimate = await estimator.estimate_workload(tasks, class_workloads)
        if not isinstance(estimate, WorkloadEstimate):
            estimate = WorkloadEstimate.model_validate(estimate)
        return estimate, False
    except (EstimationHookError, PydanticValidationError) as e:
        logger.warning(f"Workload estimator failed, using fallback: {e}")
    except Exception as e:
        logger.error(f"Unexpected workload estimator error, using fallback: {e}")

    return fallback_workload_estimate(tasks, class_workloads), True


def build_workload_analysis(
    tasks: list[Task],
    class_workloads: list[ClassWorkload],
    estimate: WorkloadEstimate,
    now: Optional[datetime] = None,
    used_fallback: bool = False,
) -> WorkloadAnalysis:
    """
    Combine class workloads and an estimate into a WorkloadAnalysis.

    Args:
        tasks: Pending tasks considered in the analysis
        class_workloads: Ranked per-class workload summaries
        estimate: Estimate from the hook or the fallback
        now: Analysis time (defaults to current UTC time)
        used_fallback: Whether the estimate came from the fallback heuristic

    Returns:
        WorkloadAnalysis snapshot
    """
    now = ensure_timezone_aware(now) if now else utc_now()
    horizon = scheduling_settings.CRITICAL_DEADLINE_DAYS
    upcoming = sum(
        1
        for task in tasks
        if task.due_date is not None and days_until(task.due_date, now) <= horizon
    )
    return WorkloadAnalysis(
        analysis_date=now,
        total_assignments=len(tasks),
        upcoming_deadlines=upcoming,
        estimated_total_hours=estimate.estimated_total_hours,
        class_workloads=class_workloads,
        stress_level_prediction=estimate.stress_level,
        recommended_daily_hours=estimate.recommended_daily_hours,
        peak_workload_dates=estimate.peak_workload_dates,
        used_fallback_estimate=used_fallback,
    )
