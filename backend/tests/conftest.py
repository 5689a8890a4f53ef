"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.
"""

import os
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator, Iterable, Optional

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from study_planner.models.scheduling import (  # noqa: E402
    ClassInfo,
    ClassWorkload,
    StudyProfile,
    StudySession,
    StudyTimePreference,
    Task,
    WorkloadAnalysis,
)
from study_planner.services.scheduling.context import (  # noqa: E402
    OptimizationContext,
    build_optimization_context,
)
from study_planner.services.scheduling.estimation import (  # noqa: E402
    build_workload_analysis,
    fallback_workload_estimate,
)
from study_planner.services.scheduling.workload import analyze_workload  # noqa: E402
from study_planner.utils.time_utils import format_hhmm, parse_hhmm  # noqa: E402

# Monday 2025-03-03, 08:00 UTC
NOW = datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)
RANGE_START = date(2025, 3, 3)
RANGE_END = date(2025, 3, 16)


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """
    Set up test environment variables before any tests run.

    Provider keys are blanked so no test can reach a real LLM.
    """
    original_env = os.environ.copy()

    test_env = {
        "OPENAI_API_KEY": "test-api-key",
        "ANTHROPIC_API_KEY": "",
        "GEMINI_API_KEY": "",
        "DEBUG": "true",
    }
    os.environ.update(test_env)

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ============================================================================
# Builders
# ============================================================================


def make_task(
    task_id: str,
    class_id: Optional[str] = "c1",
    task_type: str = "assignment",
    due_in_days: Optional[float] = 7,
    completed: bool = False,
    description: Optional[str] = None,
) -> Task:
    """Build a Task due a number of days after NOW."""
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        class_id=class_id,
        due_date=NOW + timedelta(days=due_in_days) if due_in_days is not None else None,
        type=task_type,
        completed=completed,
        description=description,
    )


def make_profile(
    windows: Iterable[tuple[int, str, str, float]],
    **overrides,
) -> StudyProfile:
    """Build a StudyProfile from (day_of_week, start, end, productivity) tuples."""
    return StudyProfile(
        id="profile-1",
        user_id="user-1",
        preferred_study_times=[
            StudyTimePreference(
                day_of_week=day,
                start_time=start,
                end_time=end,
                productivity_score=score,
            )
            for day, start, end, score in windows
        ],
        **overrides,
    )


def make_session(
    day: date,
    start: str,
    duration: int,
    class_id: str = "c1",
    difficulty: int = 3,
    session_id: Optional[str] = None,
    notes: str = "",
) -> StudySession:
    """Build a StudySession with a consistent end_time."""
    start_minutes = parse_hhmm(start)
    return StudySession(
        id=session_id or f"s-{day.isoformat()}-{start}",
        schedule_id="schedule-test",
        date=day,
        start_time=start,
        end_time=format_hhmm(start_minutes + duration),
        duration_minutes=duration,
        class_id=class_id,
        difficulty_level=difficulty,
        notes=notes,
    )


def make_analysis(
    tasks: list[Task],
    classes: list[ClassInfo],
    now: datetime = NOW,
) -> WorkloadAnalysis:
    """Workload analysis using the deterministic fallback estimate."""
    workloads = analyze_workload(tasks, classes, now=now)
    estimate = fallback_workload_estimate(tasks, workloads)
    return build_workload_analysis(tasks, workloads, estimate, now=now, used_fallback=True)


def make_workload(class_id: str, hours: float, difficulty: float = 3.0, **overrides) -> ClassWorkload:
    return ClassWorkload(
        class_id=class_id,
        class_name=overrides.pop("class_name", class_id.upper()),
        pending_assignments=overrides.pop("pending_assignments", 1),
        total_estimated_hours=hours,
        average_assignment_difficulty=difficulty,
        **overrides,
    )


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """Frozen reference time for analysis and scheduling."""
    return NOW


@pytest.fixture
def sample_classes() -> list[ClassInfo]:
    return [
        ClassInfo(id="c1", name="Calculus"),
        ClassInfo(id="c2", name="History"),
        ClassInfo(id="c3", name="Chemistry"),
    ]


@pytest.fixture
def sample_tasks() -> list[Task]:
    """A realistic mix of pending, completed, and undated tasks."""
    return [
        make_task("t1", "c1", "exam", due_in_days=4),
        make_task("t2", "c1", "homework", due_in_days=2),
        make_task("t3", "c2", "paper", due_in_days=10, description="x" * 500),
        make_task("t4", "c2", "reading", due_in_days=3),
        make_task("t5", "c3", "lab", due_in_days=6),
        make_task("t6", "c3", "quiz", due_in_days=6),
        make_task("t7", "c1", "assignment", due_in_days=5, completed=True),
        make_task("t8", None, "discussion", due_in_days=1),
    ]


@pytest.fixture
def weekday_profile() -> StudyProfile:
    """Monday/Wednesday mornings (peak), Thursday afternoon."""
    return make_profile(
        [
            (1, "09:00", "11:00", 8),
            (3, "09:00", "11:00", 8),
            (4, "14:00", "16:00", 6),
        ]
    )


@pytest.fixture
def busy_profile() -> StudyProfile:
    """Two windows every day of the week, one overlapping pair on Saturdays."""
    windows = []
    for day in range(7):
        windows.append((day, "08:00", "10:00", 8))
        windows.append((day, "15:00", "17:30", 5))
    windows.append((6, "08:30", "10:30", 4))
    return make_profile(windows, daily_study_limit_hours=3)


@pytest.fixture
def context_factory() -> Callable[..., OptimizationContext]:
    """Build an OptimizationContext from tasks, classes, and a profile."""

    def _build(
        profile: StudyProfile,
        tasks: Optional[list[Task]] = None,
        classes: Optional[list[ClassInfo]] = None,
        start: date = RANGE_START,
        end: date = RANGE_END,
        goals=(),
        **kwargs,
    ) -> OptimizationContext:
        tasks = tasks or []
        classes = classes or []
        return build_optimization_context(
            start_date=start,
            end_date=end,
            workload_analysis=make_analysis(tasks, classes),
            study_profile=profile,
            goals=goals,
            tasks=tasks,
            **kwargs,
        )

    return _build
