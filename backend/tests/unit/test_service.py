"""
Unit tests for StudyScheduleService.

The task store is an in-memory fake and the estimator an AsyncMock, so the
tests exercise the orchestration without any I/O.
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from study_planner.enums import (
    OptimizationGoal,
    OptimizationMethod,
    ScheduleWarning,
)
from study_planner.exceptions import InvalidRangeError, TaskStoreError, ValidationError
from study_planner.models import (
    ScheduleAnalytics,
    ScheduleMetadata,
    ScheduleOptimizationRequest,
    ScheduleResult,
    StudyProfile,
    WorkloadEstimate,
)
from study_planner.services.scheduling.service import (
    StudyScheduleService,
    TaskStore,
    build_schedule_recommendations,
    calculate_schedule_analytics,
    create_default_study_profile,
)
from tests.conftest import NOW, RANGE_END, RANGE_START, make_session


class InMemoryTaskStore:
    """Task store backed by plain lists."""

    def __init__(self, tasks, classes):
        self.tasks = tasks
        self.classes = classes
        self.calls = []

    async def get_tasks(self, user_id):
        self.calls.append(("tasks", user_id))
        return self.tasks

    async def get_classes(self, user_id):
        self.calls.append(("classes", user_id))
        return self.classes


class FailingTaskStore:
    async def get_tasks(self, user_id):
        raise ConnectionError("database unavailable")

    async def get_classes(self, user_id):
        return []


@pytest.fixture
def store(sample_tasks, sample_classes):
    return InMemoryTaskStore(sample_tasks, sample_classes)


@pytest.fixture
def schedule_request():
    return ScheduleOptimizationRequest(start_date=RANGE_START, end_date=RANGE_END)


def _metadata(**overrides):
    fields = dict(
        schedule_id="schedule-test",
        start_date=RANGE_START,
        end_date=RANGE_END,
        primary_goal=OptimizationGoal.BALANCE_SUBJECTS,
        optimization_method=OptimizationMethod.BALANCED,
    )
    fields.update(overrides)
    return ScheduleMetadata(**fields)


# ============================================================================
# Workload Analysis
# ============================================================================


class TestAnalyzeWorkload:
    """Tests for StudyScheduleService.analyze_workload."""

    @pytest.mark.asyncio
    async def test_fallback_estimate_without_estimator(self, store):
        service = StudyScheduleService(store)

        response = await service.analyze_workload("user-1", now=NOW)

        analysis = response.analysis
        assert analysis.used_fallback_estimate is True
        # t7 is completed
        assert analysis.total_assignments == 7
        assert {cw.class_id for cw in analysis.class_workloads} == {"c1", "c2", "c3", "unassigned"}
        assert analysis.estimated_total_hours == pytest.approx(27.0)
        assert store.calls == [("tasks", "user-1"), ("classes", "user-1")]

    @pytest.mark.asyncio
    async def test_estimator_result_is_used(self, store):
        estimator = AsyncMock()
        estimator.estimate_workload.return_value = WorkloadEstimate(
            estimated_total_hours=42,
            stress_level=7,
            overload_risk=0.3,
            deadline_conflicts=2,
        )
        service = StudyScheduleService(store, estimator=estimator)

        response = await service.analyze_workload("user-1", now=NOW)

        assert response.analysis.used_fallback_estimate is False
        assert response.analysis.estimated_total_hours == 42
        assert response.analysis.stress_level_prediction == 7
        assert response.risk_factors.overload_risk == 0.3
        assert response.risk_factors.deadline_conflicts == 2

    @pytest.mark.asyncio
    async def test_estimator_failure_falls_back(self, store):
        estimator = AsyncMock()
        estimator.estimate_workload.side_effect = RuntimeError("model unavailable")
        service = StudyScheduleService(store, estimator=estimator)

        response = await service.analyze_workload("user-1", now=NOW)

        assert response.analysis.used_fallback_estimate is True
        assert response.analysis.estimated_total_hours == pytest.approx(27.0)

    @pytest.mark.asyncio
    async def test_store_records_are_validated(self):
        store = InMemoryTaskStore(
            [{"id": "t1", "title": "Essay", "class": "c1", "dueDate": "2025-03-06T12:00:00Z", "type": "Paper"}],
            [{"id": "c1", "name": "Literature"}],
        )
        service = StudyScheduleService(store)

        response = await service.analyze_workload("user-1", now=NOW)

        workload = response.analysis.class_workloads[0]
        assert workload.class_name == "Literature"
        assert workload.total_estimated_hours == 6

    @pytest.mark.asyncio
    async def test_empty_user_id_raises(self, store):
        service = StudyScheduleService(store)

        with pytest.raises(ValidationError) as exc_info:
            await service.analyze_workload("", now=NOW)

        assert exc_info.value.status_code == 422
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_raises_task_store_error(self):
        service = StudyScheduleService(FailingTaskStore())

        with pytest.raises(TaskStoreError) as exc_info:
            await service.analyze_workload("user-1", now=NOW)

        assert exc_info.value.status_code == 503
        assert exc_info.value.details == {"user_id": "user-1"}
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_fakes_satisfy_store_protocol(self, store):
        assert isinstance(store, TaskStore)
        assert isinstance(FailingTaskStore(), TaskStore)


# ============================================================================
# Schedule Generation
# ============================================================================


class TestGenerateStudySchedule:
    """Tests for StudyScheduleService.generate_study_schedule."""

    @pytest.mark.asyncio
    async def test_schedule_with_default_profile(self, store, schedule_request):
        service = StudyScheduleService(store)

        response = await service.generate_study_schedule("user-1", schedule_request, now=NOW)

        schedule = response.schedule
        assert schedule.id == "user-1-schedule-20250303-20250316"
        assert schedule.user_id == "user-1"
        assert schedule.generated_at == NOW
        assert schedule.optimization_method == OptimizationMethod.BALANCED
        assert schedule.study_sessions
        assert all(s.id.startswith(f"{schedule.id}-session-") for s in schedule.study_sessions)
        # default profile only has weekday windows
        assert all(s.date.weekday() < 5 for s in schedule.study_sessions)
        assert ScheduleWarning.ESTIMATOR_FALLBACK in response.warnings

    @pytest.mark.asyncio
    async def test_explicit_profile_and_goals(self, store, weekday_profile):
        service = StudyScheduleService(store)
        request = ScheduleOptimizationRequest(
            start_date=RANGE_START,
            end_date=RANGE_END,
            optimization_goals=[OptimizationGoal.MAXIMIZE_RETENTION],
        )

        response = await service.generate_study_schedule(
            "user-1", request, profile=weekday_profile, now=NOW
        )

        assert response.schedule.optimization_method == OptimizationMethod.RETENTION_OPTIMIZED
        assert {s.date.weekday() for s in response.schedule.study_sessions} <= {0, 2, 3}

    @pytest.mark.asyncio
    async def test_include_classes_filters_sessions(self, store, weekday_profile):
        service = StudyScheduleService(store)
        request = ScheduleOptimizationRequest(
            start_date=RANGE_START,
            end_date=RANGE_END,
            include_classes=["c1"],
        )

        response = await service.generate_study_schedule(
            "user-1", request, profile=weekday_profile, now=NOW
        )

        assert response.schedule.study_sessions
        assert {s.class_id for s in response.schedule.study_sessions} == {"c1"}

    @pytest.mark.asyncio
    async def test_exclude_dates(self, store, weekday_profile):
        service = StudyScheduleService(store)
        request = ScheduleOptimizationRequest(
            start_date=RANGE_START,
            end_date=RANGE_END,
            exclude_dates=[date(2025, 3, 3), date(2025, 3, 12)],
        )

        response = await service.generate_study_schedule(
            "user-1", request, profile=weekday_profile, now=NOW
        )

        dates = {s.date for s in response.schedule.study_sessions}
        assert date(2025, 3, 3) not in dates
        assert date(2025, 3, 12) not in dates

    @pytest.mark.asyncio
    async def test_empty_profile_returns_advice(self, store, schedule_request):
        service = StudyScheduleService(store)

        response = await service.generate_study_schedule(
            "user-1", schedule_request, profile=StudyProfile(), now=NOW
        )

        assert response.schedule.study_sessions == []
        assert ScheduleWarning.EMPTY_PROFILE in response.warnings
        assert response.recommendations[0] == (
            "Add preferred study times to your profile to get a schedule."
        )
        assert response.analytics.total_study_hours == 0

    @pytest.mark.asyncio
    async def test_analytics_cover_sessions(self, store, weekday_profile, schedule_request):
        service = StudyScheduleService(store)

        response = await service.generate_study_schedule(
            "user-1", schedule_request, profile=weekday_profile, now=NOW
        )

        sessions = response.schedule.study_sessions
        total_hours = sum(s.duration_minutes for s in sessions) / 60
        assert response.analytics.total_study_hours == pytest.approx(total_hours)
        assert response.analytics.workload_coverage == pytest.approx(total_hours / 27.0)
        assert response.recommendations[-1] == "Take regular breaks to maintain focus."

    @pytest.mark.asyncio
    async def test_empty_user_id_raises(self, store, schedule_request):
        service = StudyScheduleService(store)

        with pytest.raises(ValidationError):
            await service.generate_study_schedule("", schedule_request, now=NOW)

    @pytest.mark.asyncio
    async def test_inverted_range_raises_before_loading(self, store):
        """An inverted range fails without touching the store or the estimator."""
        estimator = AsyncMock()
        service = StudyScheduleService(store, estimator=estimator)
        request = ScheduleOptimizationRequest(
            start_date=date(2025, 3, 10), end_date=date(2025, 3, 3)
        )

        with pytest.raises(InvalidRangeError):
            await service.generate_study_schedule("user-1", request, now=NOW)

        assert store.calls == []
        assert estimator.estimate_workload.await_count == 0


# ============================================================================
# Helpers
# ============================================================================


class TestDefaultProfile:
    def test_weekday_windows(self):
        profile = create_default_study_profile("user-9")

        assert profile.id == "default_user-9"
        assert profile.user_id == "user-9"
        assert [p.day_of_week for p in profile.preferred_study_times] == [1, 2, 3, 4, 5]
        assert profile.focus_duration_minutes == 90
        assert profile.daily_study_limit_hours == 6
        assert profile.review_interval_multiplier == 1.5


class TestAnalyticsAndRecommendations:
    """Tests for post-generation summaries."""

    def test_coverage_is_capped_at_one(self):
        result = ScheduleResult(metadata=_metadata(total_hours=12))

        assert calculate_schedule_analytics(result, 10).workload_coverage == 1.0
        assert calculate_schedule_analytics(result, 24).workload_coverage == 0.5

    def test_coverage_without_estimate_is_zero(self):
        result = ScheduleResult(metadata=_metadata(total_hours=3))

        assert calculate_schedule_analytics(result, 0).workload_coverage == 0.0

    def test_partial_coverage_advice(self):
        result = ScheduleResult(
            sessions=[make_session(RANGE_START, "09:00", 60)],
            metadata=_metadata(total_hours=1),
        )
        analytics = ScheduleAnalytics(total_study_hours=1, workload_coverage=0.5)

        assert build_schedule_recommendations(result, analytics) == [
            "Scheduled time covers 50% of your estimated workload. Consider adding study windows.",
            "Take regular breaks to maintain focus.",
        ]

    def test_no_capacity_and_no_workload_advice(self):
        result = ScheduleResult(
            metadata=_metadata(warnings=[ScheduleWarning.NO_CAPACITY, ScheduleWarning.NO_WORKLOAD])
        )

        assert build_schedule_recommendations(result, ScheduleAnalytics()) == [
            "Increase your daily study limit or add study windows.",
            "No pending work found; use the time to review past material.",
        ]
