"""
Scheduling Enums

Defines enums for optimization goals, study session types and statuses,
and the warnings attached to generated schedules.
"""

from enum import Enum


class OptimizationGoal(str, Enum):
    """
    Objectives a student can request for a schedule.

    Exactly one primary goal drives base generation, chosen by
    GOAL_PRIORITY (first match wins).
    """

    MAXIMIZE_RETENTION = "maximize_retention"  # Spaced repetition
    MEET_DEADLINES = "meet_deadlines"  # Prioritize upcoming deadlines
    MINIMIZE_STRESS = "minimize_stress"  # Spread workload evenly
    BALANCE_SUBJECTS = "balance_subjects"  # Equal time for all subjects
    FOCUS_DIFFICULT = "focus_difficult"  # More time on difficult subjects


# Primary goal selection order
GOAL_PRIORITY: tuple[OptimizationGoal, ...] = (
    OptimizationGoal.MEET_DEADLINES,
    OptimizationGoal.MAXIMIZE_RETENTION,
    OptimizationGoal.MINIMIZE_STRESS,
    OptimizationGoal.FOCUS_DIFFICULT,
    OptimizationGoal.BALANCE_SUBJECTS,
)


class SessionType(str, Enum):
    """What a study session is for."""

    NEW_MATERIAL = "new_material"  # Learning new concepts
    REVIEW = "review"  # Reviewing previously learned material
    PRACTICE = "practice"  # Working on assignments/homework


class SessionStatus(str, Enum):
    """
    Study session lifecycle.

    The engine only ever emits SCHEDULED. Terminal states are set by callers.
    """

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    MISSED = "missed"


class OptimizationMethod(str, Enum):
    """Label stored on a schedule describing how it was generated."""

    BALANCED = "balanced"
    DEADLINE_FOCUSED = "deadline_focused"
    RETENTION_OPTIMIZED = "retention_optimized"


class ScheduleWarning(str, Enum):
    """Non-fatal conditions reported in schedule metadata."""

    EMPTY_PROFILE = "empty_profile"  # No study time preferences configured
    NO_WORKLOAD = "no_workload"  # Nothing to schedule
    NO_CAPACITY = "no_capacity"  # Daily limit or windows leave no time
    ESTIMATOR_FALLBACK = "estimator_fallback"  # AI estimate unavailable
