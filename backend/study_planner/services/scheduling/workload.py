"""
Workload Analyzer

Converts a student's pending tasks and class roster into a ranked,
per-class workload summary used by every schedule strategy.

Heuristics:
- Estimated hours per task = base hours for its type x complexity multiplier,
  where the multiplier grows with description length (capped at 2x)
- Priority per class = sum over tasks of urgency x importance, with
  urgency = max(0, 10 - days_until_due / 3) and importance = base hours
- Difficulty per task comes from a fixed 1-5 table per task type

The analyzer is a pure function of its inputs and the reference time.
Tasks and classes are fetched by the caller, never by this module.

Usage:
    from study_planner.services.scheduling.workload import analyze_workload

    workloads = analyze_workload(tasks, classes, now=datetime.now(timezone.utc))
    for workload in workloads:
        print(f"{workload.class_name}: {workload.total_estimated_hours:.1f}h")
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

from study_planner.config.scheduling import (
    get_task_type_difficulty,
    get_task_type_hours,
    scheduling_settings,
)
from study_planner.models.scheduling import ClassInfo, ClassWorkload, Task
from study_planner.utils.time_utils import days_until, ensure_timezone_aware, utc_now

logger = logging.getLogger(__name__)

UNASSIGNED_CLASS_ID = "unassigned"
UNASSIGNED_CLASS_NAME = "Unassigned"


def base_hours_for_type(task_type: Optional[str]) -> float:
    """Base hours of work for a task type (default for unknown types)."""
    table = get_task_type_hours()
    key = (task_type or "assignment").lower()
    return table.get(key, scheduling_settings.DEFAULT_TASK_HOURS)


def complexity_multiplier(description: Optional[str]) -> float:
    """
    Scale factor for task effort based on description length.

    Grows by 1.0 per COMPLEXITY_CHARS_PER_STEP characters, capped at
    MAX_COMPLEXITY_MULTIPLIER. Tasks without a description get 1.0.
    """
    if not description:
        return 1.0
    growth = len(description) / scheduling_settings.COMPLEXITY_CHARS_PER_STEP
    return min(scheduling_settings.MAX_COMPLEXITY_MULTIPLIER, 1.0 + growth)


def estimate_task_hours(task: Task) -> float:
    """Estimated hours to complete a single task."""
    return base_hours_for_type(task.type) * complexity_multiplier(task.description)


def estimate_task_difficulty(task: Task) -> int:
    """Difficulty of a task on the 1-5 scale."""
    table = get_task_type_difficulty()
    return table.get(task.type, scheduling_settings.DEFAULT_TASK_DIFFICULTY)


def urgency_score(task: Task, now: datetime) -> float:
    """
    Urgency of a dated task; zero once the deadline is ~30 days out.

    Undated tasks have no urgency.
    """
    if task.due_date is None:
        return 0.0
    days = days_until(task.due_date, now)
    return max(
        0.0,
        scheduling_settings.URGENCY_MAX - days / scheduling_settings.URGENCY_DAYS_DIVISOR,
    )


def calculate_priority_score(tasks: Iterable[Task], now: datetime) -> float:
    """Sum of urgency x importance over a class's tasks."""
    return sum(urgency_score(task, now) * base_hours_for_type(task.type) for task in tasks)


def calculate_average_difficulty(tasks: list[Task]) -> float:
    """Mean task difficulty, 3 (medium) for an empty list."""
    if not tasks:
        return float(scheduling_settings.DEFAULT_TASK_DIFFICULTY)
    return sum(estimate_task_difficulty(task) for task in tasks) / len(tasks)


def find_critical_deadlines(tasks: Iterable[Task], now: datetime) -> list[datetime]:
    """Due dates falling within the next CRITICAL_DEADLINE_DAYS, soonest first."""
    horizon = scheduling_settings.CRITICAL_DEADLINE_DAYS
    deadlines = [
        ensure_timezone_aware(task.due_date)
        for task in tasks
        if task.due_date is not None and 0 <= days_until(task.due_date, now) <= horizon
    ]
    return sorted(deadlines)


def filter_upcoming_tasks(
    tasks: Iterable[Task],
    now: Optional[datetime] = None,
    horizon_days: Optional[int] = None,
) -> list[Task]:
    """
    Keep incomplete tasks due within [now, now + horizon_days].

    Args:
        tasks: Tasks from the task store
        now: Reference time (defaults to current UTC time)
        horizon_days: Look-ahead in days (defaults to UPCOMING_TASK_HORIZON_DAYS)

    Returns:
        Pending, dated tasks inside the horizon, in input order
    """
    now = ensure_timezone_aware(now) if now else utc_now()
    horizon = horizon_days if horizon_days is not None else scheduling_settings.UPCOMING_TASK_HORIZON_DAYS
    cutoff = now + timedelta(days=horizon)
    return [
        task
        for task in tasks
        if not task.completed
        and task.due_date is not None
        and now <= ensure_timezone_aware(task.due_date) <= cutoff
    ]


class WorkloadAnalyzer:
    """
    Builds ranked ClassWorkload summaries from tasks and a class roster.

    Attributes:
        now: Reference time for urgency and critical-deadline calculations
    """

    def __init__(self, now: Optional[datetime] = None):
        self.now = ensure_timezone_aware(now) if now else utc_now()

    def analyze(
        self,
        tasks: Iterable[Task],
        classes: Iterable[ClassInfo],
    ) -> list[ClassWorkload]:
        """
        Group pending tasks by class and compute per-class workload metrics.

        Completed tasks are ignored. Tasks without a class fall into a
        synthetic "unassigned" bucket.

        Args:
            tasks: Tasks (optionally pre-filtered with filter_upcoming_tasks)
            classes: Class roster used for display names

        Returns:
            ClassWorkload list sorted by priority score, highest first;
            ties keep first-seen grouping order
        """
        roster = {c.id: c for c in classes}
        grouped: dict[str, list[Task]] = {}

        for task in tasks:
            if task.completed:
                continue
            class_id = task.class_id or UNASSIGNED_CLASS_ID
            grouped.setdefault(class_id, []).append(task)

        workloads = [
            self._build_workload(class_id, class_tasks, roster.get(class_id))
            for class_id, class_tasks in grouped.items()
        ]
        workloads.sort(key=lambda w: -w.priority_score)

        logger.debug(
            f"Workload analyzed: {len(workloads)} classes, "
            f"{sum(w.pending_assignments for w in workloads)} pending tasks, "
            f"{sum(w.total_estimated_hours for w in workloads):.1f}h estimated"
        )
        return workloads

    def _build_workload(
        self,
        class_id: str,
        tasks: list[Task],
        class_info: Optional[ClassInfo],
    ) -> ClassWorkload:
        """Compute the workload summary for one class."""
        hours = sum(estimate_task_hours(task) for task in tasks)
        return ClassWorkload(
            class_id=class_id,
            class_name=class_info.name if class_info else UNASSIGNED_CLASS_NAME,
            pending_assignments=len(tasks),
            total_estimated_hours=hours,
            average_assignment_difficulty=calculate_average_difficulty(tasks),
            recommended_daily_minutes=math.ceil(
                hours * 60 / scheduling_settings.PLANNING_WINDOW_DAYS
            ),
            priority_score=calculate_priority_score(tasks, self.now),
            critical_deadlines=find_critical_deadlines(tasks, self.now),
        )


def analyze_workload(
    tasks: Iterable[Task],
    classes: Iterable[ClassInfo],
    now: Optional[datetime] = None,
) -> list[ClassWorkload]:
    """
    Analyze pending tasks into ranked per-class workloads.

    Convenience wrapper around WorkloadAnalyzer.

    Args:
        tasks: Tasks for one student
        classes: That student's class roster
        now: Reference time (defaults to current UTC time)

    Returns:
        ClassWorkload list sorted by priority score, highest first
    """
    return WorkloadAnalyzer(now=now).analyze(tasks, classes)
