"""
Scheduling Engine Configuration

Configuration settings for the study-schedule optimization engine. These
settings control the workload heuristics, the base schedule strategies,
and the optimization and validation passes.

All settings can be overridden via environment variables with SCHEDULING_ prefix.
Task-type lookup tables can additionally be overridden from the
``task_types`` section of config/default.yaml.

Usage:
    from study_planner.config.scheduling import scheduling_settings

    floor = scheduling_settings.MIN_SESSION_MINUTES
    intervals = scheduling_settings.SPACED_REPETITION_INTERVALS
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

from study_planner.config.settings import load_yaml_config

logger = logging.getLogger(__name__)


# Estimated hours of work per task type
DEFAULT_TASK_TYPE_HOURS: dict[str, float] = {
    "exam": 8,
    "project": 12,
    "paper": 6,
    "assignment": 3,
    "homework": 2,
    "quiz": 1,
    "discussion": 1,
    "reading": 2,
    "lab": 4,
    "presentation": 4,
    "research": 6,
}

# Difficulty per task type (1-5 scale)
DEFAULT_TASK_TYPE_DIFFICULTY: dict[str, int] = {
    "exam": 5,
    "project": 4,
    "paper": 4,
    "research": 4,
    "assignment": 3,
    "homework": 2,
    "lab": 3,
    "presentation": 3,
    "quiz": 2,
    "discussion": 1,
    "reading": 2,
}


class SchedulingSettings(BaseSettings):
    """
    Scheduling engine configuration.

    Attributes are grouped by category:
    - Session limits
    - Workload analysis heuristics
    - Base schedule strategies
    - Optimization passes
    - Validation passes
    - Fallback workload estimate
    - AI workload estimator
    """

    # =========================================================================
    # SESSION LIMITS
    # =========================================================================

    # Minimum viable session length (minutes)
    MIN_SESSION_MINUTES: int = 15

    # =========================================================================
    # WORKLOAD ANALYSIS
    # =========================================================================

    # Days over which a class's hours are spread for recommended daily minutes
    PLANNING_WINDOW_DAYS: int = 14

    # Deadlines within this many days are critical
    CRITICAL_DEADLINE_DAYS: int = 7

    # Pending tasks due within this many days are analyzed
    UPCOMING_TASK_HORIZON_DAYS: int = 30

    # Complexity multiplier grows by 1.0 per this many description characters
    COMPLEXITY_CHARS_PER_STEP: int = 1000
    MAX_COMPLEXITY_MULTIPLIER: float = 2.0

    # Fallbacks for unknown task types
    DEFAULT_TASK_HOURS: float = 3.0
    DEFAULT_TASK_DIFFICULTY: int = 3

    # urgency = max(0, URGENCY_MAX - days_until_due / URGENCY_DAYS_DIVISOR)
    URGENCY_MAX: float = 10.0
    URGENCY_DAYS_DIVISOR: float = 3.0

    # =========================================================================
    # BASE SCHEDULE STRATEGIES
    # =========================================================================

    # Spaced repetition intervals (days)
    SPACED_REPETITION_INTERVALS: list[int] = [1, 3, 7, 14, 30]

    # Stress-minimized: fraction of daily limit used as the daily ceiling
    STRESS_DAILY_CAP_RATIO: float = 0.8

    # Stress-minimized: fraction of the daily target kept on buffer days
    STRESS_BUFFER_RATIO: float = 0.5

    # Deadlines on a day and the next needed to flag a buffer day
    STRESS_DEADLINE_THRESHOLD: int = 2

    # Windows at or above this productivity score are peak windows
    PEAK_PRODUCTIVITY_THRESHOLD: float = 8.0

    # Peak windows may run up to this multiple of the focus duration
    PEAK_FOCUS_MULTIPLIER: float = 1.2

    # Balanced: weight the per-class allocation by priority score
    BALANCE_WEIGHT_BY_PRIORITY: bool = False

    # Productivity thresholds for session type (new material / practice)
    NEW_MATERIAL_PRODUCTIVITY: float = 8.0
    PRACTICE_PRODUCTIVITY: float = 5.0

    # =========================================================================
    # OPTIMIZATION PASSES
    # =========================================================================

    # Sessions starting before this hour are in the cognitive peak block
    MORNING_CUTOFF_HOUR: int = 12

    # Conflict resolution: maximum forward shift before a session is rejected
    MAX_RESCHEDULE_SHIFT_MINUTES: int = 180

    # =========================================================================
    # VALIDATION PASSES
    # =========================================================================

    # Maximum session length as a multiple of focus duration
    MAX_SESSION_FOCUS_MULTIPLIER: float = 2.0

    # Recovery gap between intensive sessions as a multiple of break duration
    RECOVERY_BREAK_MULTIPLIER: float = 2.0

    # Sessions longer than this are intensive
    INTENSIVE_SESSION_MINUTES: int = 90

    # =========================================================================
    # FALLBACK WORKLOAD ESTIMATE
    # =========================================================================

    FALLBACK_OVERLOAD_HIGH_HOURS: float = 60.0
    FALLBACK_OVERLOAD_MEDIUM_HOURS: float = 40.0
    FALLBACK_BURNOUT_HIGH_DAILY_HOURS: float = 6.0
    FALLBACK_BURNOUT_MEDIUM_DAILY_HOURS: float = 4.0
    FALLBACK_MIN_DAILY_HOURS: int = 2
    FALLBACK_MAX_DAILY_HOURS: int = 8
    FALLBACK_DAILY_HOURS_FACTOR: float = 1.2
    FALLBACK_PEAK_DATES: int = 3

    # =========================================================================
    # AI WORKLOAD ESTIMATOR
    # =========================================================================

    # Empty means use the application TEXT_MODEL
    ESTIMATOR_MODEL: str = ""
    ESTIMATOR_TEMPERATURE: float = 0.1
    ESTIMATOR_MAX_TOKENS: int = 2048
    ESTIMATOR_DESCRIPTION_TRUNCATE: int = 200

    class Config:
        env_prefix = "SCHEDULING_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_scheduling_settings() -> SchedulingSettings:
    """Get cached scheduling settings instance."""
    return SchedulingSettings()


# Convenience instance
scheduling_settings = get_scheduling_settings()


def _task_type_overrides(key: str) -> dict:
    """Read one task-type table from the YAML config."""
    task_types = load_yaml_config().get("task_types") or {}
    overrides = task_types.get(key) or {}
    if not isinstance(overrides, dict):
        logger.warning(f"Ignoring malformed task_types.{key} in YAML config")
        return {}
    return {str(k).lower(): v for k, v in overrides.items()}


@lru_cache()
def get_task_type_hours() -> dict[str, float]:
    """Base hours per task type, with YAML overrides applied."""
    table = dict(DEFAULT_TASK_TYPE_HOURS)
    table.update({k: float(v) for k, v in _task_type_overrides("hours").items()})
    return table


@lru_cache()
def get_task_type_difficulty() -> dict[str, int]:
    """Difficulty per task type, with YAML overrides applied."""
    table = dict(DEFAULT_TASK_TYPE_DIFFICULTY)
    table.update({k: int(v) for k, v in _task_type_overrides("difficulty").items()})
    return table
