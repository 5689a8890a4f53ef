"""
Study Scheduling Services

The study-schedule optimization engine and the async service around it.

Modules:
- workload: per-class workload analysis from pending tasks
- estimation: workload estimator hook with deterministic fallback
- llm_estimator: LiteLLM-backed workload estimator
- context: optimization context built once per run
- strategies: the five base schedule strategies
- optimization: optimization pass pipeline
- validation: validation pass pipeline
- optimizer: engine entry points
- service: task store orchestration, analytics, recommendations

Usage:
    from study_planner.services.scheduling import (
        analyze_workload,
        generate_optimized_schedule,
        StudyScheduleService,
    )
"""

from study_planner.services.scheduling.context import (
    OptimizationContext,
    build_optimization_context,
)
from study_planner.services.scheduling.estimation import (
    WorkloadEstimator,
    build_workload_analysis,
    estimate_workload,
    fallback_workload_estimate,
)
from study_planner.services.scheduling.llm_estimator import LLMWorkloadEstimator
from study_planner.services.scheduling.optimization import apply_optimizations
from study_planner.services.scheduling.optimizer import (
    generate_optimized_schedule,
    optimize_schedule,
)
from study_planner.services.scheduling.service import (
    StudyScheduleService,
    TaskStore,
    create_default_study_profile,
)
from study_planner.services.scheduling.strategies import (
    ScheduleStrategy,
    determine_primary_goal,
    get_strategy,
)
from study_planner.services.scheduling.validation import validate_and_adjust_schedule
from study_planner.services.scheduling.workload import (
    WorkloadAnalyzer,
    analyze_workload,
    filter_upcoming_tasks,
)

__all__ = [
    # Workload
    "WorkloadAnalyzer",
    "analyze_workload",
    "filter_upcoming_tasks",
    # Estimation
    "WorkloadEstimator",
    "LLMWorkloadEstimator",
    "estimate_workload",
    "fallback_workload_estimate",
    "build_workload_analysis",
    # Engine
    "OptimizationContext",
    "build_optimization_context",
    "ScheduleStrategy",
    "determine_primary_goal",
    "get_strategy",
    "apply_optimizations",
    "validate_and_adjust_schedule",
    "generate_optimized_schedule",
    "optimize_schedule",
    # Service
    "StudyScheduleService",
    "TaskStore",
    "create_default_study_profile",
]
