"""Pydantic models for the application."""

from study_planner.models.scheduling import (
    ClassInfo,
    ClassWorkload,
    RiskFactors,
    ScheduleAnalytics,
    ScheduleMetadata,
    ScheduleOptimizationRequest,
    ScheduleResult,
    StudyProfile,
    StudySchedule,
    StudyScheduleResponse,
    StudySession,
    StudyTimePreference,
    Task,
    WorkloadAnalysis,
    WorkloadAnalysisResponse,
    WorkloadEstimate,
    WorkloadRecommendations,
)

__all__ = [
    "ClassInfo",
    "ClassWorkload",
    "RiskFactors",
    "ScheduleAnalytics",
    "ScheduleMetadata",
    "ScheduleOptimizationRequest",
    "ScheduleResult",
    "StudyProfile",
    "StudySchedule",
    "StudyScheduleResponse",
    "StudySession",
    "StudyTimePreference",
    "Task",
    "WorkloadAnalysis",
    "WorkloadAnalysisResponse",
    "WorkloadEstimate",
    "WorkloadRecommendations",
]
