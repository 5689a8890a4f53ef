"""
Optimization Context

Bundles everything a scheduling run needs into one read-only object built
once per run: the planning range, available study hours, the workload
analysis, the study profile, the requested goals, and the raw tasks.

Every strategy and pass reads the context; none mutates it.

Usage:
    from study_planner.services.scheduling.context import build_optimization_context

    context = build_optimization_context(
        start_date=date(2025, 3, 3),
        end_date=date(2025, 3, 16),
        workload_analysis=analysis,
        study_profile=profile,
        goals=[OptimizationGoal.MEET_DEADLINES],
        tasks=tasks,
    )
    print(f"{context.available_hours:.1f}h available over {context.total_days} days")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Iterable, Iterator, Optional

from study_planner.enums.scheduling import OptimizationGoal
from study_planner.exceptions import InvalidRangeError
from study_planner.models.scheduling import (
    ClassWorkload,
    StudyProfile,
    StudyTimePreference,
    Task,
    WorkloadAnalysis,
)
from study_planner.services.scheduling.workload import UNASSIGNED_CLASS_ID
from study_planner.utils.time_utils import day_of_week, ensure_timezone_aware, iter_days

logger = logging.getLogger(__name__)


def _deadline_sort_key(task: Task) -> tuple:
    if task.due_date is None:
        return (1, None)
    return (0, ensure_timezone_aware(task.due_date))


@dataclass(frozen=True)
class StudyWindow:
    """One concrete occurrence of a weekly preference on a calendar day."""

    day_index: int
    date: date
    preference: StudyTimePreference

    @property
    def start_minutes(self) -> int:
        return self.preference.start_minutes

    @property
    def duration_minutes(self) -> int:
        return self.preference.duration_minutes

    @property
    def productivity_score(self) -> float:
        return self.preference.productivity_score


@dataclass(frozen=True)
class OptimizationContext:
    """
    Read-only inputs for one scheduling run.

    Attributes:
        start_date: First day of the planning range (inclusive)
        end_date: Last day of the planning range (inclusive)
        total_days: Number of calendar days in the range
        available_hours: Sum of preference-window hours over the range
        weekly_target_hours: available_hours / weeks in range
        workload_analysis: Workload snapshot driving the run
        study_profile: Student capacity contract
        goals: Requested optimization goals
        tasks: Raw task list
        schedule_id: Identifier stamped on every emitted session
        excluded_dates: Days that must never be scheduled
    """

    start_date: date
    end_date: date
    total_days: int
    available_hours: float
    weekly_target_hours: float
    workload_analysis: WorkloadAnalysis
    study_profile: StudyProfile
    goals: tuple[OptimizationGoal, ...]
    tasks: tuple[Task, ...]
    schedule_id: str
    excluded_dates: frozenset[date] = field(default_factory=frozenset)

    @property
    def class_workloads(self) -> list[ClassWorkload]:
        return self.workload_analysis.class_workloads

    @cached_property
    def workloads_by_class(self) -> dict[str, ClassWorkload]:
        return {cw.class_id: cw for cw in self.class_workloads}

    @cached_property
    def task_ids_by_class(self) -> dict[str, list[str]]:
        """Pending task ids per class, soonest deadline first (undated last)."""
        grouped: dict[str, list[Task]] = {}
        for task in self.pending_tasks():
            grouped.setdefault(task.class_id or UNASSIGNED_CLASS_ID, []).append(task)
        return {
            class_id: [task.id for task in sorted(tasks, key=_deadline_sort_key)]
            for class_id, tasks in grouped.items()
        }

    @property
    def weeks(self) -> float:
        return self.total_days / 7

    @property
    def daily_limit_minutes(self) -> int:
        return self.study_profile.daily_limit_minutes

    def windows_for(self, day: date) -> list[StudyTimePreference]:
        """Preference windows configured for a calendar day, in profile order."""
        if day in self.excluded_dates:
            return []
        weekday = day_of_week(day)
        return [
            pref
            for pref in self.study_profile.preferred_study_times
            if pref.day_of_week == weekday
        ]

    def iter_windows(self) -> Iterator[StudyWindow]:
        """Walk every study window in the range, day by day."""
        for index, day in enumerate(iter_days(self.start_date, self.end_date)):
            for pref in self.windows_for(day):
                yield StudyWindow(day_index=index, date=day, preference=pref)

    def study_days(self) -> list[date]:
        """Days in the range that have at least one study window."""
        return [d for d in iter_days(self.start_date, self.end_date) if self.windows_for(d)]

    def pending_tasks(self) -> list[Task]:
        return [task for task in self.tasks if not task.completed]


def check_range(start_date: date, end_date: date) -> None:
    """Raise InvalidRangeError if end_date is before start_date."""
    if end_date < start_date:
        raise InvalidRangeError(
            f"end_date {end_date} is before start_date {start_date}",
            details={"start_date": str(start_date), "end_date": str(end_date)},
        )


def default_schedule_id(start_date: date, end_date: date) -> str:
    """Deterministic schedule id derived from the planning range."""
    return f"schedule-{start_date:%Y%m%d}-{end_date:%Y%m%d}"


def calculate_available_hours(
    start_date: date,
    end_date: date,
    study_profile: StudyProfile,
    excluded_dates: Iterable[date] = (),
) -> float:
    """Sum of preference-window durations (hours) over the inclusive range."""
    excluded = set(excluded_dates)
    total_minutes = 0
    for day in iter_days(start_date, end_date):
        if day in excluded:
            continue
        weekday = day_of_week(day)
        total_minutes += sum(
            pref.duration_minutes
            for pref in study_profile.preferred_study_times
            if pref.day_of_week == weekday
        )
    return total_minutes / 60


def build_optimization_context(
    start_date: date,
    end_date: date,
    workload_analysis: WorkloadAnalysis,
    study_profile: StudyProfile,
    goals: Iterable[OptimizationGoal] = (),
    tasks: Iterable[Task] = (),
    schedule_id: Optional[str] = None,
    excluded_dates: Iterable[date] = (),
) -> OptimizationContext:
    """
    Build the context for one scheduling run.

    Args:
        start_date: First day to schedule (inclusive)
        end_date: Last day to schedule (inclusive)
        workload_analysis: Workload snapshot
        study_profile: Student capacity contract
        goals: Requested optimization goals
        tasks: Raw task list
        schedule_id: Id for emitted sessions (derived from the range if omitted)
        excluded_dates: Days never to schedule

    Returns:
        OptimizationContext

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    check_range(start_date, end_date)

    excluded = frozenset(excluded_dates)
    total_days = (end_date - start_date).days + 1
    available_hours = calculate_available_hours(
        start_date, end_date, study_profile, excluded
    )

    context = OptimizationContext(
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        available_hours=available_hours,
        weekly_target_hours=available_hours / (total_days / 7),
        workload_analysis=workload_analysis,
        study_profile=study_profile,
        goals=tuple(goals),
        tasks=tuple(tasks),
        schedule_id=schedule_id or default_schedule_id(start_date, end_date),
        excluded_dates=excluded,
    )

    logger.debug(
        f"Optimization context: {total_days} days, "
        f"{available_hours:.1f}h available, "
        f"{context.weekly_target_hours:.1f}h/week target, "
        f"{len(context.class_workloads)} classes"
    )
    return context
