"""Services package for workload analysis and study schedule generation."""

from study_planner.services.scheduling import (
    StudyScheduleService,
    analyze_workload,
    generate_optimized_schedule,
    optimize_schedule,
)

__all__ = [
    "StudyScheduleService",
    "analyze_workload",
    "generate_optimized_schedule",
    "optimize_schedule",
]
