"""
Centralized enum definitions for the application.

All enums are organized by domain:
- scheduling.py: Optimization goals, session types/statuses, schedule warnings

Usage:
    from study_planner.enums import OptimizationGoal, SessionType

    # Or import from specific module
    from study_planner.enums.scheduling import GOAL_PRIORITY
"""

from study_planner.enums.scheduling import (
    GOAL_PRIORITY,
    OptimizationGoal,
    OptimizationMethod,
    ScheduleWarning,
    SessionStatus,
    SessionType,
)

__all__ = [
    "GOAL_PRIORITY",
    "OptimizationGoal",
    "OptimizationMethod",
    "ScheduleWarning",
    "SessionStatus",
    "SessionType",
]
