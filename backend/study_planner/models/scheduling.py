"""
Study Scheduling Models (Pydantic)

Schemas for the study-schedule optimization engine including:
- Tasks and classes read from the external task store
- Per-class workload analysis and the workload estimate
- Study profiles and their weekly time preferences
- Study sessions and generated schedules

ARCHITECTURE NOTE:
    Tasks and classes are owned by an external store and are read-only here.
    Sessions are immutable values; the engine only appends, filters, or
    replaces them.

    Data flows: Task Store → Task/ClassInfo → Workload Analysis → Engine → StudySession
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from study_planner.enums.scheduling import (
    OptimizationGoal,
    OptimizationMethod,
    ScheduleWarning,
    SessionStatus,
    SessionType,
)
from study_planner.models.base import StrictRequest, StrictResponse, ValueModel
from study_planner.utils.time_utils import format_hhmm, minutes_between, parse_hhmm


def _validate_hhmm(value: str) -> str:
    return format_hhmm(parse_hhmm(value))


# ===========================================
# Task Store Records
# ===========================================


class Task(StrictResponse):
    """
    An academic work item (assignment, exam, project, ...).

    Owned by the external task store. Accepts the store's camelCase
    column names (``dueDate``, ``class``) as well as snake_case.
    """

    id: str
    title: str = ""
    class_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("class_id", "class", "classId")
    )
    due_date: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("due_date", "dueDate")
    )
    type: str = Field("assignment", description="Task type, e.g. exam, quiz, project")
    completed: bool = False
    description: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Optional[str]) -> str:
        return (value or "assignment").strip().lower()


class ClassInfo(StrictResponse):
    """A class (course) from the roster."""

    id: str
    name: str


# ===========================================
# Workload Analysis
# ===========================================


class ClassWorkload(StrictResponse):
    """
    Per-class aggregate of pending work.

    Recomputed on every analysis call and never persisted by the engine.
    """

    class_id: str
    class_name: str
    pending_assignments: int = 0
    total_estimated_hours: float = 0.0
    average_assignment_difficulty: float = Field(3.0, ge=1.0, le=5.0)
    recommended_daily_minutes: int = 0
    priority_score: float = 0.0
    critical_deadlines: list[datetime] = Field(default_factory=list)


class WorkloadRecommendations(StrictResponse):
    """Advice returned alongside a workload estimate."""

    immediate_actions: list[str] = Field(default_factory=list)
    schedule_adjustments: list[str] = Field(default_factory=list)
    long_term_strategies: list[str] = Field(default_factory=list)


class WorkloadEstimate(StrictResponse):
    """
    Result of the workload-estimation hook (AI or fallback heuristic).

    stress_level is on a 1-10 scale; risks are 0-1.
    """

    estimated_total_hours: float = Field(0.0, ge=0.0)
    stress_level: float = Field(1.0, ge=1.0, le=10.0)
    recommended_daily_hours: float = Field(0.0, ge=0.0)
    peak_workload_dates: list[date] = Field(default_factory=list)
    recommendations: WorkloadRecommendations = Field(
        default_factory=WorkloadRecommendations
    )
    overload_risk: float = Field(0.0, ge=0.0, le=1.0)
    deadline_conflicts: int = Field(0, ge=0)
    burnout_risk: float = Field(0.0, ge=0.0, le=1.0)


class RiskFactors(StrictResponse):
    """Risk indicators derived from a workload estimate."""

    overload_risk: float = 0.0
    deadline_conflicts: int = 0
    burnout_risk: float = 0.0


class WorkloadAnalysis(StrictResponse):
    """
    Snapshot of a student's pending workload used to drive scheduling.

    class_workloads is ranked by priority score (highest first).
    """

    analysis_date: datetime
    total_assignments: int = 0
    upcoming_deadlines: int = 0
    estimated_total_hours: float = 0.0
    class_workloads: list[ClassWorkload] = Field(default_factory=list)
    stress_level_prediction: float = 1.0
    recommended_daily_hours: float = 0.0
    peak_workload_dates: list[date] = Field(default_factory=list)
    used_fallback_estimate: bool = False


class WorkloadAnalysisResponse(StrictResponse):
    """Workload analysis with recommendations and risk factors."""

    analysis: WorkloadAnalysis
    recommendations: WorkloadRecommendations
    risk_factors: RiskFactors


# ===========================================
# Study Profile
# ===========================================


class StudyTimePreference(StrictResponse):
    """
    A recurring weekly window during which the student is willing to study.

    day_of_week uses 0=Sunday through 6=Saturday. Times are 24h "HH:MM".
    """

    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str
    end_time: str
    productivity_score: float = Field(5.0, ge=0.0, le=10.0)

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        return _validate_hhmm(value)

    @model_validator(mode="after")
    def _check_window(self) -> StudyTimePreference:
        if minutes_between(self.start_time, self.end_time) <= 0:
            raise ValueError(
                f"end_time {self.end_time} must be after start_time {self.start_time}"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start_time, self.end_time)


class StudyProfile(StrictResponse):
    """
    The student's capacity contract.

    Supplied by the caller and read-only to the engine.
    """

    id: str = ""
    user_id: str = ""
    preferred_study_times: list[StudyTimePreference] = Field(default_factory=list)
    focus_duration_minutes: int = Field(90, gt=0)
    break_duration_minutes: int = Field(15, ge=0)
    daily_study_limit_hours: float = Field(6.0, ge=0.0)

    # class_id -> difficulty weight (1-5 scale, 1 when absent)
    subject_difficulty_weights: dict[str, float] = Field(default_factory=dict)

    # Spaced repetition tuning
    retention_curve_steepness: float = Field(0.3, ge=0.0, le=1.0)
    review_interval_multiplier: float = Field(1.0, gt=0.0)

    @property
    def daily_limit_minutes(self) -> int:
        return int(self.daily_study_limit_hours * 60)


# ===========================================
# Study Sessions
# ===========================================


class StudySession(ValueModel):
    """
    A single time-boxed study block.

    end_time always equals start_time + duration_minutes. Use with_timing()
    to produce a moved or resized copy.
    """

    id: str
    schedule_id: str
    date: date
    start_time: str
    end_time: str
    duration_minutes: int = Field(..., ge=0)
    class_id: str
    task_ids: list[str] = Field(default_factory=list)
    session_type: SessionType = SessionType.NEW_MATERIAL
    focus_area: str = ""
    difficulty_level: int = Field(3, ge=1, le=5)
    status: SessionStatus = SessionStatus.SCHEDULED
    notes: str = ""

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        """Minutes since midnight at which the session ends (may exceed 1440)."""
        return self.start_minutes + self.duration_minutes

    def overlaps(self, other: StudySession) -> bool:
        """Whether the two sessions share any minute on the same date."""
        return (
            self.date == other.date
            and self.start_minutes < other.end_minutes
            and other.start_minutes < self.end_minutes
        )

    def with_timing(
        self,
        start_minutes: Optional[int] = None,
        duration_minutes: Optional[int] = None,
    ) -> StudySession:
        """Copy with a new start and/or duration and a consistent end_time."""
        start = self.start_minutes if start_minutes is None else start_minutes
        duration = self.duration_minutes if duration_minutes is None else duration_minutes
        return self.model_copy(
            update={
                "start_time": format_hhmm(start),
                "end_time": format_hhmm(start + duration),
                "duration_minutes": duration,
            }
        )


# ===========================================
# Schedule Results
# ===========================================


class ScheduleMetadata(BaseModel):
    """Summary of a generation run, including non-fatal warnings."""

    schedule_id: str
    start_date: date
    end_date: date
    primary_goal: OptimizationGoal
    optimization_method: OptimizationMethod
    total_hours: float = 0.0
    session_count: int = 0
    sessions_per_week: float = 0.0
    class_time_distribution: dict[str, float] = Field(default_factory=dict)
    warnings: list[ScheduleWarning] = Field(default_factory=list)


class ScheduleResult(BaseModel):
    """Sessions produced by one run together with their metadata."""

    sessions: list[StudySession] = Field(default_factory=list)
    metadata: ScheduleMetadata


class ScheduleOptimizationRequest(StrictRequest):
    """
    Request to generate a study schedule for a user.

    include_classes restricts scheduling to the given class ids (empty = all).
    exclude_dates are never scheduled.
    """

    start_date: date
    end_date: date
    optimization_goals: list[OptimizationGoal] = Field(default_factory=list)
    include_classes: list[str] = Field(default_factory=list)
    exclude_dates: list[date] = Field(default_factory=list)


class StudySchedule(BaseModel):
    """A generated schedule ready for persistence by the host service."""

    id: str
    user_id: str
    start_date: date
    end_date: date
    version: int = 1
    generated_at: datetime
    optimization_method: OptimizationMethod
    study_sessions: list[StudySession] = Field(default_factory=list)


class ScheduleAnalytics(BaseModel):
    """Aggregate statistics for a generated schedule."""

    total_study_hours: float = 0.0
    sessions_per_week: float = 0.0
    class_time_distribution: dict[str, float] = Field(default_factory=dict)
    workload_coverage: float = Field(0.0, description="Scheduled / estimated hours (0-1)")


class StudyScheduleResponse(BaseModel):
    """Schedule, analytics, and advice returned by the schedule service."""

    schedule: StudySchedule
    analytics: ScheduleAnalytics
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[ScheduleWarning] = Field(default_factory=list)
