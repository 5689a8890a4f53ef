"""
Schedule Optimizer

Entry points of the scheduling engine. A run is:

    context builder -> one strategy (by primary goal)
                    -> optimization passes -> validation passes

The engine is a pure, synchronous computation over in-memory data. It does
no I/O and holds no state between runs; tasks, classes, and any AI
workload estimate are gathered by the caller beforehand (see service.py).

Failure semantics:
- end_date before start_date raises InvalidRangeError
- everything else (no preferences, no workload, a zero daily limit)
  yields a valid, possibly empty schedule; the reasons are reported as
  warnings in the ScheduleResult metadata

Usage:
    from study_planner.services.scheduling.optimizer import generate_optimized_schedule

    sessions = generate_optimized_schedule(
        start_date=date(2025, 3, 3),
        end_date=date(2025, 3, 30),
        workload_analysis=analysis,
        study_profile=profile,
        goals=[OptimizationGoal.MEET_DEADLINES],
        tasks=tasks,
    )
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from study_planner.enums.scheduling import (
    OptimizationGoal,
    OptimizationMethod,
    ScheduleWarning,
)
from study_planner.models.scheduling import (
    ScheduleMetadata,
    ScheduleResult,
    StudyProfile,
    StudySession,
    Task,
    WorkloadAnalysis,
)
from study_planner.services.scheduling.context import (
    OptimizationContext,
    build_optimization_context,
)
from study_planner.services.scheduling.optimization import apply_optimizations
from study_planner.services.scheduling.strategies import determine_primary_goal, get_strategy
from study_planner.services.scheduling.validation import validate_and_adjust_schedule

logger = logging.getLogger(__name__)


def determine_optimization_method(primary_goal: OptimizationGoal) -> OptimizationMethod:
    """Label describing how a schedule was generated."""
    if primary_goal == OptimizationGoal.MEET_DEADLINES:
        return OptimizationMethod.DEADLINE_FOCUSED
    if primary_goal == OptimizationGoal.MAXIMIZE_RETENTION:
        return OptimizationMethod.RETENTION_OPTIMIZED
    return OptimizationMethod.BALANCED


def collect_warnings(context: OptimizationContext) -> list[ScheduleWarning]:
    """Non-fatal conditions that explain an empty or sparse schedule."""
    warnings = []
    if not context.study_profile.preferred_study_times:
        warnings.append(ScheduleWarning.EMPTY_PROFILE)
    elif context.available_hours <= 0 or context.daily_limit_minutes <= 0:
        warnings.append(ScheduleWarning.NO_CAPACITY)
    if not context.class_workloads:
        warnings.append(ScheduleWarning.NO_WORKLOAD)
    if context.workload_analysis.used_fallback_estimate:
        warnings.append(ScheduleWarning.ESTIMATOR_FALLBACK)
    return warnings


def class_time_distribution(sessions: Iterable[StudySession]) -> dict[str, float]:
    """Scheduled hours per class id."""
    minutes: dict[str, int] = defaultdict(int)
    for session in sessions:
        minutes[session.class_id] += session.duration_minutes
    return {class_id: total / 60 for class_id, total in minutes.items()}


def build_metadata(
    sessions: list[StudySession],
    context: OptimizationContext,
    primary_goal: OptimizationGoal,
    warnings: list[ScheduleWarning],
) -> ScheduleMetadata:
    total_hours = sum(s.duration_minutes for s in sessions) / 60
    return ScheduleMetadata(
        schedule_id=context.schedule_id,
        start_date=context.start_date,
        end_date=context.end_date,
        primary_goal=primary_goal,
        optimization_method=determine_optimization_method(primary_goal),
        total_hours=total_hours,
        session_count=len(sessions),
        sessions_per_week=len(sessions) / context.weeks,
        class_time_distribution=class_time_distribution(sessions),
        warnings=warnings,
    )


def optimize_schedule(
    start_date: date,
    end_date: date,
    workload_analysis: WorkloadAnalysis,
    study_profile: StudyProfile,
    goals: Iterable[OptimizationGoal] = (),
    tasks: Optional[Iterable[Task]] = None,
    schedule_id: Optional[str] = None,
    excluded_dates: Iterable[date] = (),
) -> ScheduleResult:
    """
    Generate a study schedule together with its run metadata.

    Args:
        start_date: First day to schedule (inclusive)
        end_date: Last day to schedule (inclusive)
        workload_analysis: Workload snapshot
        study_profile: Student capacity contract
        goals: Requested goals; the primary one selects the strategy
        tasks: Raw task list (used by the deadline and stress strategies)
        schedule_id: Id stamped on sessions (derived from the range if omitted)
        excluded_dates: Days never to schedule

    Returns:
        ScheduleResult with chronologically ordered sessions

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    goals = list(goals)
    context = build_optimization_context(
        start_date=start_date,
        end_date=end_date,
        workload_analysis=workload_analysis,
        study_profile=study_profile,
        goals=goals,
        tasks=tasks or (),
        schedule_id=schedule_id,
        excluded_dates=excluded_dates,
    )
    primary_goal = determine_primary_goal(goals)
    warnings = collect_warnings(context)

    if ScheduleWarning.EMPTY_PROFILE in warnings:
        logger.warning(
            f"Study profile {study_profile.id or '<unsaved>'} has no study time "
            f"preferences, returning an empty schedule"
        )
        return ScheduleResult(
            sessions=[],
            metadata=build_metadata([], context, primary_goal, warnings),
        )

    logger.debug(
        f"Generating schedule {context.schedule_id}: {start_date} to {end_date}, "
        f"primary goal {primary_goal.value}"
    )

    sessions = get_strategy(primary_goal).generate(context)
    sessions = apply_optimizations(sessions, context)
    sessions = validate_and_adjust_schedule(sessions, context)

    metadata = build_metadata(sessions, context, primary_goal, warnings)
    logger.info(
        f"Schedule {context.schedule_id}: {metadata.session_count} sessions, "
        f"{metadata.total_hours:.1f}h ({metadata.optimization_method.value})"
    )
    return ScheduleResult(sessions=sessions, metadata=metadata)


def generate_optimized_schedule(
    start_date: date,
    end_date: date,
    workload_analysis: WorkloadAnalysis,
    study_profile: StudyProfile,
    goals: Iterable[OptimizationGoal] = (),
    tasks: Optional[Iterable[Task]] = None,
    schedule_id: Optional[str] = None,
    excluded_dates: Iterable[date] = (),
) -> list[StudySession]:
    """
    Generate an optimized list of study sessions.

    Same as optimize_schedule() without the metadata.

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    return optimize_schedule(
        start_date=start_date,
        end_date=end_date,
        workload_analysis=workload_analysis,
        study_profile=study_profile,
        goals=goals,
        tasks=tasks,
        schedule_id=schedule_id,
        excluded_dates=excluded_dates,
    ).sessions
