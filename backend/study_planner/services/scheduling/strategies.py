"""
Base Schedule Strategies

Five interchangeable generators that turn an OptimizationContext into an
initial (unsorted, possibly overlapping) list of study sessions. Exactly
one strategy runs per schedule, chosen from the requested goals by
GOAL_PRIORITY.

All strategies share one skeleton: walk every day of the range, and for
each day every study window configured for that weekday. For each window
the strategy either plans one session or skips it. Strategy state (what
has been studied, how much allocation is left) is an immutable value
threaded through the walk, so each strategy is a fold over the windows
and can be tested in isolation.

Strategies:
- RetentionStrategy: spaced repetition over intervals [1, 3, 7, 14, 30] days
- DeadlineStrategy: per-task budgets ramped toward each due date
- StressStrategy: flat daily target, halved on days around clustered deadlines
- BalancedStrategy: even per-class allocation, round-robin over windows
- DifficultyStrategy: allocation by difficulty, peak windows for the hardest class

Usage:
    from study_planner.services.scheduling.strategies import get_strategy

    strategy = get_strategy(OptimizationGoal.MEET_DEADLINES)
    sessions = strategy.generate(context)
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from study_planner.config.scheduling import scheduling_settings
from study_planner.enums.scheduling import GOAL_PRIORITY, OptimizationGoal, SessionType
from study_planner.models.scheduling import ClassWorkload, StudySession, Task
from study_planner.services.scheduling.context import OptimizationContext, StudyWindow
from study_planner.services.scheduling.workload import (
    UNASSIGNED_CLASS_ID,
    base_hours_for_type,
    estimate_task_difficulty,
    estimate_task_hours,
)
from study_planner.utils.time_utils import ensure_timezone_aware, format_hhmm

logger = logging.getLogger(__name__)


# =============================================================================
# Shared Helpers
# =============================================================================


@dataclass(frozen=True)
class SessionPlan:
    """What a strategy wants to study in one window."""

    class_id: str
    duration_minutes: int
    session_type: SessionType
    task_ids: tuple[str, ...] = ()
    focus_area: str = ""
    difficulty_level: int = 3
    notes: str = ""


def determine_primary_goal(goals: Iterable[OptimizationGoal]) -> OptimizationGoal:
    """
    Pick the single goal that drives base generation.

    First match in GOAL_PRIORITY wins; no goals means balance_subjects.
    """
    requested = {OptimizationGoal(goal) for goal in goals}
    for goal in GOAL_PRIORITY:
        if goal in requested:
            return goal
    return OptimizationGoal.BALANCE_SUBJECTS


def session_type_for_productivity(productivity_score: float) -> SessionType:
    """High-productivity windows learn new material, low ones review."""
    if productivity_score >= scheduling_settings.NEW_MATERIAL_PRODUCTIVITY:
        return SessionType.NEW_MATERIAL
    if productivity_score >= scheduling_settings.PRACTICE_PRODUCTIVITY:
        return SessionType.PRACTICE
    return SessionType.REVIEW


def session_type_for_task(task: Task) -> SessionType:
    if task.type in ("exam", "quiz"):
        return SessionType.REVIEW
    if task.type == "reading":
        return SessionType.NEW_MATERIAL
    return SessionType.PRACTICE


def difficulty_level(workload: ClassWorkload) -> int:
    """Round a class's average difficulty onto the 1-5 session scale."""
    return min(5, max(1, int(round(workload.average_assignment_difficulty))))


def base_duration(context: OptimizationContext, window: StudyWindow) -> int:
    """One focus block, bounded by the window."""
    return min(window.duration_minutes, context.study_profile.focus_duration_minutes)


def plan_for_class(
    context: OptimizationContext,
    workload: ClassWorkload,
    duration_minutes: int,
    session_type: SessionType,
    notes: str = "",
) -> SessionPlan:
    return SessionPlan(
        class_id=workload.class_id,
        duration_minutes=duration_minutes,
        session_type=session_type,
        task_ids=tuple(context.task_ids_by_class.get(workload.class_id, [])),
        focus_area=workload.class_name,
        difficulty_level=difficulty_level(workload),
        notes=notes,
    )


def build_session(
    context: OptimizationContext,
    window: StudyWindow,
    plan: SessionPlan,
    sequence: int,
) -> StudySession:
    """Materialize a plan at the start of its window."""
    start = window.start_minutes
    return StudySession(
        id=f"{context.schedule_id}-session-{sequence}",
        schedule_id=context.schedule_id,
        date=window.date,
        start_time=format_hhmm(start),
        end_time=format_hhmm(start + plan.duration_minutes),
        duration_minutes=plan.duration_minutes,
        class_id=plan.class_id,
        task_ids=list(plan.task_ids),
        session_type=plan.session_type,
        focus_area=plan.focus_area,
        difficulty_level=plan.difficulty_level,
        notes=plan.notes,
    )


# =============================================================================
# Strategy Base
# =============================================================================


class ScheduleStrategy:
    """
    Common day/window walk shared by all strategies.

    Subclasses implement initial_state() and plan_window(). plan_window()
    must not mutate the state it receives; it returns the next state.
    """

    goal: OptimizationGoal
    name: str = "base"

    def initial_state(self, context: OptimizationContext) -> Any:
        raise NotImplementedError

    def plan_window(
        self,
        context: OptimizationContext,
        window: StudyWindow,
        state: Any,
    ) -> tuple[Optional[SessionPlan], Any]:
        raise NotImplementedError

    def generate(self, context: OptimizationContext) -> list[StudySession]:
        """
        Produce the base schedule for a context.

        Args:
            context: Optimization context for this run

        Returns:
            Sessions in generation order (not yet conflict-free)
        """
        min_minutes = scheduling_settings.MIN_SESSION_MINUTES
        state = self.initial_state(context)
        sessions: list[StudySession] = []

        for window in context.iter_windows():
            if base_duration(context, window) < min_minutes:
                continue
            plan, state = self.plan_window(context, window, state)
            if plan is None:
                continue
            sessions.append(build_session(context, window, plan, len(sessions) + 1))

        logger.debug(
            f"{self.name} strategy generated {len(sessions)} sessions "
            f"({sum(s.duration_minutes for s in sessions)} min)"
        )
        return sessions


# =============================================================================
# Retention (spaced repetition)
# =============================================================================


@dataclass(frozen=True)
class RetentionState:
    last_studied: dict[str, date] = field(default_factory=dict)
    reviews: dict[str, int] = field(default_factory=dict)
    current_day: Optional[date] = None
    studied_today: frozenset[str] = frozenset()


class RetentionStrategy(ScheduleStrategy):
    """
    Schedule each class when its next review interval comes due.

    A class never studied is always a candidate. A studied class becomes a
    candidate once the days since it was last studied reach its next
    interval, minus a tolerance of floor(interval x retention curve
    steepness). Among candidates the class whose gap is closest to its
    interval wins; ties go to the higher-priority class.
    """

    goal = OptimizationGoal.MAXIMIZE_RETENTION
    name = "retention"

    def intervals(self, context: OptimizationContext) -> list[int]:
        multiplier = context.study_profile.review_interval_multiplier
        return [
            max(1, int(round(interval * multiplier)))
            for interval in scheduling_settings.SPACED_REPETITION_INTERVALS
        ]

    def initial_state(self, context: OptimizationContext) -> RetentionState:
        return RetentionState()

    def plan_window(self, context, window, state: RetentionState):
        if state.current_day != window.date:
            state = replace(state, current_day=window.date, studied_today=frozenset())

        intervals = self.intervals(context)
        steepness = context.study_profile.retention_curve_steepness
        best: Optional[tuple[float, ClassWorkload, int]] = None

        for workload in context.class_workloads:
            class_id = workload.class_id
            if class_id in state.studied_today:
                continue
            if class_id not in state.last_studied:
                score, interval = 0.0, 0
            else:
                reviews = state.reviews[class_id]
                interval = intervals[min(reviews - 1, len(intervals) - 1)]
                days_since = (window.date - state.last_studied[class_id]).days
                if days_since < interval - math.floor(interval * steepness):
                    continue
                score = abs(days_since - interval)
            if best is None or score < best[0]:
                best = (score, workload, interval)

        if best is None:
            return None, state

        _, workload, interval = best
        class_id = workload.class_id
        review_count = state.reviews.get(class_id, 0)
        if review_count == 0:
            session_type, notes = SessionType.NEW_MATERIAL, "First pass"
        else:
            session_type = SessionType.REVIEW
            notes = f"Review #{review_count} ({interval}-day interval)"

        plan = plan_for_class(context, workload, base_duration(context, window), session_type, notes)
        next_state = replace(
            state,
            last_studied={**state.last_studied, class_id: window.date},
            reviews={**state.reviews, class_id: review_count + 1},
            studied_today=state.studied_today | {class_id},
        )
        return plan, next_state


# =============================================================================
# Deadlines
# =============================================================================


@dataclass(frozen=True)
class TaskSlice:
    """Minutes of one task's work budgeted for a day."""

    task_id: str
    minutes: int
    due_day: date
    order: int


@dataclass(frozen=True)
class DeadlineState:
    allocations: dict[date, tuple[TaskSlice, ...]] = field(default_factory=dict)
    current_day: Optional[date] = None
    queue: tuple[TaskSlice, ...] = ()


def _merge_slices(slices: Iterable[TaskSlice]) -> tuple[TaskSlice, ...]:
    """Combine slices of the same task, keeping deadline order."""
    merged: dict[str, TaskSlice] = {}
    for item in slices:
        if item.task_id in merged:
            item = replace(item, minutes=merged[item.task_id].minutes + item.minutes)
        merged[item.task_id] = item
    return tuple(sorted(merged.values(), key=lambda s: s.order))


class DeadlineStrategy(ScheduleStrategy):
    """
    Spend each task's estimated hours on the study days before it is due.

    Tasks are ordered by due date, then by larger base hours. A task's
    minutes are spread over its eligible study days with linearly
    increasing weight, so days closer to the deadline get more. Overdue
    tasks (and tasks due before the first study day) land on the first
    study day. Each window works on the first task in the day's queue;
    minutes not spent carry to the next study day while the task is
    still due.
    """

    goal = OptimizationGoal.MEET_DEADLINES
    name = "deadline"

    def ordered_tasks(self, context: OptimizationContext) -> list[Task]:
        dated = [task for task in context.pending_tasks() if task.due_date is not None]
        return sorted(
            dated,
            key=lambda t: (ensure_timezone_aware(t.due_date), -base_hours_for_type(t.type), t.id),
        )

    def allocate(self, context: OptimizationContext) -> dict[date, tuple[TaskSlice, ...]]:
        """Per-day task budgets for the whole range."""
        min_minutes = scheduling_settings.MIN_SESSION_MINUTES
        study_days = context.study_days()
        allocations: dict[date, list[TaskSlice]] = {}
        if not study_days:
            return {}

        for order, task in enumerate(self.ordered_tasks(context)):
            due_day = ensure_timezone_aware(task.due_date).date()
            last_day = min(due_day, context.end_date)
            eligible = [d for d in study_days if d <= last_day] or study_days[:1]

            total = int(round(estimate_task_hours(task) * 60))
            weights = list(range(1, len(eligible) + 1))
            weight_sum = sum(weights)
            shares = [total * w // weight_sum for w in weights]
            shares[-1] += total - sum(shares)

            carry = 0
            for day, share in zip(eligible, shares):
                minutes = share + carry
                if minutes < min_minutes and day != eligible[-1]:
                    carry = minutes
                    continue
                carry = 0
                if minutes > 0:
                    allocations.setdefault(day, []).append(
                        TaskSlice(task_id=task.id, minutes=minutes, due_day=due_day, order=order)
                    )

        return {day: tuple(slices) for day, slices in allocations.items()}

    def initial_state(self, context: OptimizationContext) -> DeadlineState:
        return DeadlineState(allocations=self.allocate(context))

    def plan_window(self, context, window, state: DeadlineState):
        if state.current_day != window.date:
            carried = [s for s in state.queue if s.due_day >= window.date]
            queue = _merge_slices([*carried, *state.allocations.get(window.date, ())])
            state = replace(state, current_day=window.date, queue=queue)

        min_minutes = scheduling_settings.MIN_SESSION_MINUTES
        index = next(
            (i for i, s in enumerate(state.queue) if s.minutes >= min_minutes), None
        )
        if index is None:
            return None, state

        current = state.queue[index]
        duration = min(base_duration(context, window), current.minutes)
        task = next(t for t in context.tasks if t.id == current.task_id)
        remaining = current.minutes - duration

        queue = list(state.queue)
        if remaining > 0:
            queue[index] = replace(current, minutes=remaining)
        else:
            del queue[index]

        class_id = task.class_id or UNASSIGNED_CLASS_ID
        plan = SessionPlan(
            class_id=class_id,
            duration_minutes=duration,
            session_type=session_type_for_task(task),
            task_ids=(task.id,),
            focus_area=task.title,
            difficulty_level=estimate_task_difficulty(task),
            notes=f"Due {current.due_day.isoformat()}",
        )
        return plan, replace(state, queue=tuple(queue))


# =============================================================================
# Stress
# =============================================================================


@dataclass(frozen=True)
class StressState:
    daily_target: float = 0.0
    deadline_counts: Counter = field(default_factory=Counter)
    remaining: dict[str, int] = field(default_factory=dict)
    scheduled: dict[str, int] = field(default_factory=dict)
    current_day: Optional[date] = None
    used_today: int = 0


class StressStrategy(ScheduleStrategy):
    """
    Keep every day at a modest, flat target.

    daily target = min(0.8 x daily limit, total workload / total days).
    Days where the deadlines on that day and the next reach
    STRESS_DEADLINE_THRESHOLD are buffer days and get half the target.
    Each window goes to the least-scheduled class with work remaining.
    """

    goal = OptimizationGoal.MINIMIZE_STRESS
    name = "stress"

    def deadline_counts(self, context: OptimizationContext) -> Counter:
        dated = [t.due_date for t in context.pending_tasks() if t.due_date is not None]
        if not dated:
            dated = [d for cw in context.class_workloads for d in cw.critical_deadlines]
        return Counter(ensure_timezone_aware(d).date() for d in dated)

    def daily_target_minutes(self, context: OptimizationContext) -> float:
        total_hours = sum(cw.total_estimated_hours for cw in context.class_workloads)
        return min(
            scheduling_settings.STRESS_DAILY_CAP_RATIO * context.daily_limit_minutes,
            total_hours * 60 / context.total_days,
        )

    def is_buffer_day(self, day: date, counts: Counter) -> bool:
        concurrent = counts.get(day, 0) + counts.get(day + timedelta(days=1), 0)
        return concurrent >= scheduling_settings.STRESS_DEADLINE_THRESHOLD

    def initial_state(self, context: OptimizationContext) -> StressState:
        return StressState(
            daily_target=self.daily_target_minutes(context),
            deadline_counts=self.deadline_counts(context),
            remaining={
                cw.class_id: int(round(cw.total_estimated_hours * 60))
                for cw in context.class_workloads
            },
            scheduled={cw.class_id: 0 for cw in context.class_workloads},
        )

    def plan_window(self, context, window, state: StressState):
        if state.current_day != window.date:
            state = replace(state, current_day=window.date, used_today=0)

        target = state.daily_target
        if self.is_buffer_day(window.date, state.deadline_counts):
            target *= scheduling_settings.STRESS_BUFFER_RATIO
        budget = int(target) - state.used_today

        min_minutes = scheduling_settings.MIN_SESSION_MINUTES
        candidates = [
            cw for cw in context.class_workloads if state.remaining[cw.class_id] >= min_minutes
        ]
        if budget < min_minutes or not candidates:
            return None, state

        workload = min(candidates, key=lambda cw: state.scheduled[cw.class_id])
        class_id = workload.class_id
        duration = min(base_duration(context, window), budget, state.remaining[class_id])

        plan = plan_for_class(
            context,
            workload,
            duration,
            session_type_for_productivity(window.productivity_score),
        )
        next_state = replace(
            state,
            remaining={**state.remaining, class_id: state.remaining[class_id] - duration},
            scheduled={**state.scheduled, class_id: state.scheduled[class_id] + duration},
            used_today=state.used_today + duration,
        )
        return plan, next_state


# =============================================================================
# Balanced
# =============================================================================


@dataclass(frozen=True)
class BalancedState:
    remaining: tuple[int, ...] = ()
    pointer: int = 0


class BalancedStrategy(ScheduleStrategy):
    """
    Give each class an equal share of the available hours.

    Shares are weighted by priority score when BALANCE_WEIGHT_BY_PRIORITY
    is set, and never exceed the class's estimated hours. Windows are
    handed to classes round-robin, skipping classes whose share is spent.
    """

    goal = OptimizationGoal.BALANCE_SUBJECTS
    name = "balanced"

    def allocation_minutes(self, context: OptimizationContext) -> list[int]:
        workloads = context.class_workloads
        if not workloads:
            return []
        available = context.available_hours * 60
        total_priority = sum(cw.priority_score for cw in workloads)

        if scheduling_settings.BALANCE_WEIGHT_BY_PRIORITY and total_priority > 0:
            shares = [available * cw.priority_score / total_priority for cw in workloads]
        else:
            shares = [available / len(workloads)] * len(workloads)

        return [
            int(min(share, cw.total_estimated_hours * 60))
            for share, cw in zip(shares, workloads)
        ]

    def initial_state(self, context: OptimizationContext) -> BalancedState:
        return BalancedState(remaining=tuple(self.allocation_minutes(context)))

    def plan_window(self, context, window, state: BalancedState):
        count = len(state.remaining)
        min_minutes = scheduling_settings.MIN_SESSION_MINUTES

        for offset in range(count):
            index = (state.pointer + offset) % count
            if state.remaining[index] < min_minutes:
                continue
            workload = context.class_workloads[index]
            duration = min(base_duration(context, window), state.remaining[index])
            remaining = list(state.remaining)
            remaining[index] -= duration
            plan = plan_for_class(
                context,
                workload,
                duration,
                session_type_for_productivity(window.productivity_score),
            )
            return plan, BalancedState(remaining=tuple(remaining), pointer=(index + 1) % count)

        return None, state


# =============================================================================
# Difficulty
# =============================================================================


@dataclass(frozen=True)
class DifficultyState:
    order: tuple[str, ...] = ()
    remaining: dict[str, int] = field(default_factory=dict)


class DifficultyStrategy(ScheduleStrategy):
    """
    Spend more time on harder classes, in the student's best windows.

    Allocation is proportional to average difficulty times the profile's
    subject weight (1 when absent). Peak windows (productivity >= 8) go to
    the hardest class with allocation left and may stretch to 1.2x the
    focus duration. Other windows go to the class with the most allocation
    left among the rest.
    """

    goal = OptimizationGoal.FOCUS_DIFFICULT
    name = "difficulty"

    def ranked_workloads(self, context: OptimizationContext) -> list[ClassWorkload]:
        return sorted(
            context.class_workloads,
            key=lambda cw: -cw.average_assignment_difficulty,
        )

    def weight(self, context: OptimizationContext, workload: ClassWorkload) -> float:
        subject_weight = context.study_profile.subject_difficulty_weights.get(
            workload.class_id, 1.0
        )
        return workload.average_assignment_difficulty * subject_weight

    def initial_state(self, context: OptimizationContext) -> DifficultyState:
        ranked = self.ranked_workloads(context)
        weights = [self.weight(context, cw) for cw in ranked]
        total_weight = sum(weights)
        available = context.available_hours * 60
        remaining = {
            cw.class_id: int(available * w / total_weight) if total_weight > 0 else 0
            for cw, w in zip(ranked, weights)
        }
        return DifficultyState(order=tuple(cw.class_id for cw in ranked), remaining=remaining)

    def plan_window(self, context, window, state: DifficultyState):
        min_minutes = scheduling_settings.MIN_SESSION_MINUTES
        open_classes = [c for c in state.order if state.remaining[c] >= min_minutes]
        if not open_classes:
            return None, state

        hardest = open_classes[0]
        focus = context.study_profile.focus_duration_minutes
        is_peak = window.productivity_score >= scheduling_settings.PEAK_PRODUCTIVITY_THRESHOLD

        if is_peak:
            class_id = hardest
            limit = int(focus * scheduling_settings.PEAK_FOCUS_MULTIPLIER)
            session_type = SessionType.NEW_MATERIAL
            notes = "Peak focus window"
        else:
            others = open_classes[1:] or [hardest]
            class_id = max(others, key=lambda c: state.remaining[c])
            limit = focus
            session_type = session_type_for_productivity(window.productivity_score)
            notes = ""

        duration = min(window.duration_minutes, limit, state.remaining[class_id])
        plan = plan_for_class(
            context, context.workloads_by_class[class_id], duration, session_type, notes
        )
        next_state = replace(
            state,
            remaining={**state.remaining, class_id: state.remaining[class_id] - duration},
        )
        return plan, next_state


# =============================================================================
# Registry
# =============================================================================

STRATEGIES: dict[OptimizationGoal, ScheduleStrategy] = {
    strategy.goal: strategy
    for strategy in (
        RetentionStrategy(),
        DeadlineStrategy(),
        StressStrategy(),
        BalancedStrategy(),
        DifficultyStrategy(),
    )
}


def get_strategy(goal: OptimizationGoal) -> ScheduleStrategy:
    """Strategy that generates base schedules for a primary goal."""
    return STRATEGIES[OptimizationGoal(goal)]
