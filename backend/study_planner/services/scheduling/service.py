"""
Study Schedule Service

Async orchestration around the scheduling engine. The service fetches a
student's tasks and classes from the external task store, runs the
workload analysis (with the optional AI estimator), and hands the result
to the synchronous engine. All I/O happens here, before the engine runs.

Usage:
    from study_planner.services.scheduling.service import StudyScheduleService

    service = StudyScheduleService(store=my_store, estimator=LLMWorkloadEstimator())
    response = await service.generate_study_schedule(
        "user-1",
        ScheduleOptimizationRequest(
            start_date=date(2025, 3, 3),
            end_date=date(2025, 3, 16),
            optimization_goals=[OptimizationGoal.MEET_DEADLINES],
        ),
    )
"""

import logging
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from study_planner.enums.scheduling import ScheduleWarning
from study_planner.exceptions import TaskStoreError, ValidationError
from study_planner.models.scheduling import (
    ClassInfo,
    RiskFactors,
    ScheduleAnalytics,
    ScheduleOptimizationRequest,
    ScheduleResult,
    StudyProfile,
    StudySchedule,
    StudyScheduleResponse,
    StudyTimePreference,
    Task,
    WorkloadAnalysisResponse,
)
from study_planner.services.scheduling.context import check_range, default_schedule_id
from study_planner.services.scheduling.estimation import (
    WorkloadEstimator,
    build_workload_analysis,
    estimate_workload,
)
from study_planner.services.scheduling.optimizer import optimize_schedule
from study_planner.services.scheduling.workload import analyze_workload, filter_upcoming_tasks
from study_planner.utils.time_utils import ensure_timezone_aware, utc_now

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskStore(Protocol):
    """Read-only access to a student's tasks and classes."""

    async def get_tasks(self, user_id: str) -> list[Task]:
        ...

    async def get_classes(self, user_id: str) -> list[ClassInfo]:
        ...


def create_default_study_profile(user_id: str) -> StudyProfile:
    """
    Starter profile for students who have not configured one.

    Weekday windows: Monday and Wednesday mornings, Tuesday and Thursday
    afternoons, Friday late morning.
    """
    windows = [
        (1, "09:00", "11:00", 8),
        (2, "14:00", "16:00", 7),
        (3, "09:00", "11:00", 8),
        (4, "14:00", "16:00", 7),
        (5, "10:00", "12:00", 6),
    ]
    return StudyProfile(
        id=f"default_{user_id}",
        user_id=user_id,
        preferred_study_times=[
            StudyTimePreference(
                day_of_week=day,
                start_time=start,
                end_time=end,
                productivity_score=score,
            )
            for day, start, end, score in windows
        ],
        focus_duration_minutes=90,
        break_duration_minutes=15,
        daily_study_limit_hours=6,
        subject_difficulty_weights={},
        retention_curve_steepness=0.3,
        review_interval_multiplier=1.5,
    )


def calculate_schedule_analytics(
    result: ScheduleResult,
    estimated_total_hours: float,
) -> ScheduleAnalytics:
    """Aggregate statistics for a generated schedule."""
    metadata = result.metadata
    coverage = 0.0
    if estimated_total_hours > 0:
        coverage = min(1.0, metadata.total_hours / estimated_total_hours)
    return ScheduleAnalytics(
        total_study_hours=metadata.total_hours,
        sessions_per_week=metadata.sessions_per_week,
        class_time_distribution=metadata.class_time_distribution,
        workload_coverage=coverage,
    )


def build_schedule_recommendations(
    result: ScheduleResult,
    analytics: ScheduleAnalytics,
) -> list[str]:
    """Short advice for the student based on how the schedule turned out."""
    warnings = result.metadata.warnings
    recommendations = []

    if ScheduleWarning.EMPTY_PROFILE in warnings:
        recommendations.append("Add preferred study times to your profile to get a schedule.")
    if ScheduleWarning.NO_CAPACITY in warnings:
        recommendations.append("Increase your daily study limit or add study windows.")
    if ScheduleWarning.NO_WORKLOAD in warnings:
        recommendations.append("No pending work found; use the time to review past material.")
    elif result.sessions and analytics.workload_coverage < 1.0:
        recommendations.append(
            f"Scheduled time covers {analytics.workload_coverage:.0%} of your estimated "
            f"workload. Consider adding study windows."
        )

    if result.sessions:
        recommendations.append("Take regular breaks to maintain focus.")
    return recommendations


class StudyScheduleService:
    """
    Generates workload analyses and study schedules for students.

    Attributes:
        store: Source of tasks and classes
        estimator: Optional AI workload estimator (fallback heuristic if None)
    """

    def __init__(
        self,
        store: TaskStore,
        estimator: Optional[WorkloadEstimator] = None,
    ):
        self.store = store
        self.estimator = estimator

    async def _load(self, user_id: str) -> tuple[list[Task], list[ClassInfo]]:
        """Fetch tasks and classes, normalizing records into models."""
        try:
            tasks = await self.store.get_tasks(user_id)
            classes = await self.store.get_classes(user_id)
        except Exception as e:
            logger.error(f"Failed to load tasks for user {user_id}: {e}")
            raise TaskStoreError(
                f"Could not load tasks for user {user_id}",
                details={"user_id": user_id},
            ) from e

        return (
            [t if isinstance(t, Task) else Task.model_validate(t) for t in tasks],
            [c if isinstance(c, ClassInfo) else ClassInfo.model_validate(c) for c in classes],
        )

    async def _analyze(
        self,
        user_id: str,
        now: Optional[datetime],
        include_classes: Optional[list[str]] = None,
    ) -> tuple[list[Task], WorkloadAnalysisResponse]:
        if not user_id:
            raise ValidationError("user_id is required")

        now = ensure_timezone_aware(now) if now else utc_now()
        tasks, classes = await self._load(user_id)
        upcoming = filter_upcoming_tasks(tasks, now=now)
        if include_classes:
            allowed = set(include_classes)
            upcoming = [t for t in upcoming if t.class_id in allowed]

        workloads = analyze_workload(upcoming, classes, now=now)
        estimate, used_fallback = await estimate_workload(upcoming, workloads, self.estimator)
        analysis = build_workload_analysis(
            upcoming, workloads, estimate, now=now, used_fallback=used_fallback
        )

        logger.debug(
            f"Workload for user {user_id}: {analysis.total_assignments} tasks, "
            f"{analysis.estimated_total_hours:.1f}h, fallback={used_fallback}"
        )
        response = WorkloadAnalysisResponse(
            analysis=analysis,
            recommendations=estimate.recommendations,
            risk_factors=RiskFactors(
                overload_risk=estimate.overload_risk,
                deadline_conflicts=estimate.deadline_conflicts,
                burnout_risk=estimate.burnout_risk,
            ),
        )
        return upcoming, response

    async def analyze_workload(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> WorkloadAnalysisResponse:
        """
        Analyze a student's pending workload.

        Args:
            user_id: Student id
            now: Reference time (defaults to current UTC time)

        Returns:
            WorkloadAnalysisResponse with analysis, recommendations, risks

        Raises:
            ValidationError: If user_id is empty
            TaskStoreError: If the task store fails
        """
        _, response = await self._analyze(user_id, now)
        return response

    async def generate_study_schedule(
        self,
        user_id: str,
        request: ScheduleOptimizationRequest,
        profile: Optional[StudyProfile] = None,
        now: Optional[datetime] = None,
    ) -> StudyScheduleResponse:
        """
        Analyze workload and generate an optimized schedule.

        Args:
            user_id: Student id
            request: Range, goals, class filter, and excluded dates
            profile: Study profile (a default profile is used if None)
            now: Reference time (defaults to current UTC time)

        Returns:
            StudyScheduleResponse with schedule, analytics, recommendations

        Raises:
            ValidationError: If user_id is empty
            TaskStoreError: If the task store fails
            InvalidRangeError: If request.end_date is before request.start_date
        """
        check_range(request.start_date, request.end_date)
        now = ensure_timezone_aware(now) if now else utc_now()
        tasks, workload = await self._analyze(user_id, now, request.include_classes)
        profile = profile or create_default_study_profile(user_id)

        schedule_id = f"{user_id}-{default_schedule_id(request.start_date, request.end_date)}"
        result = optimize_schedule(
            start_date=request.start_date,
            end_date=request.end_date,
            workload_analysis=workload.analysis,
            study_profile=profile,
            goals=request.optimization_goals,
            tasks=tasks,
            schedule_id=schedule_id,
            excluded_dates=request.exclude_dates,
        )

        schedule = StudySchedule(
            id=schedule_id,
            user_id=user_id,
            start_date=request.start_date,
            end_date=request.end_date,
            generated_at=now,
            optimization_method=result.metadata.optimization_method,
            study_sessions=result.sessions,
        )
        analytics = calculate_schedule_analytics(
            result, workload.analysis.estimated_total_hours
        )
        return StudyScheduleResponse(
            schedule=schedule,
            analytics=analytics,
            recommendations=build_schedule_recommendations(result, analytics),
            warnings=result.metadata.warnings,
        )
