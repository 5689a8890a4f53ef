"""
Schedule Validation

Hard-constraint passes run after optimization, whichever strategy built
the schedule. Like the optimization passes they only drop or shrink
sessions and never raise.

Checks:
1. Session length between max(break, 15) minutes and 2x focus duration
2. Recovery time of 2x break between back-to-back sessions over 90 minutes
3. Weekly minutes within daily limit x 7 (sessions shrunk proportionally)
4. Session dates inside the planning range

Running the validation passes on an already-valid schedule returns it
unchanged.

Usage:
    from study_planner.services.scheduling.validation import validate_and_adjust_schedule

    sessions = validate_and_adjust_schedule(sessions, context)
"""

import logging
from itertools import groupby

from study_planner.config.scheduling import scheduling_settings
from study_planner.models.scheduling import StudySession
from study_planner.services.scheduling.context import OptimizationContext
from study_planner.services.scheduling.optimization import SchedulePass, by_day, chronological
from study_planner.utils.time_utils import week_key

logger = logging.getLogger(__name__)


def enforce_session_length(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """Clamp sessions to 2x focus duration and drop those shorter than a break."""
    profile = context.study_profile
    max_minutes = int(profile.focus_duration_minutes * scheduling_settings.MAX_SESSION_FOCUS_MULTIPLIER)
    min_minutes = max(profile.break_duration_minutes, scheduling_settings.MIN_SESSION_MINUTES)

    adjusted = []
    for session in sessions:
        if session.duration_minutes > max_minutes:
            session = session.with_timing(duration_minutes=max_minutes)
        if session.duration_minutes < min_minutes:
            continue
        adjusted.append(session)
    return adjusted


def enforce_recovery_time(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """
    Require a long rest between two intensive sessions.

    When a session and the previous kept session of the day both exceed
    INTENSIVE_SESSION_MINUTES and the gap between them is shorter than
    2x break duration, the later session is dropped.
    """
    intensive = scheduling_settings.INTENSIVE_SESSION_MINUTES
    recovery = context.study_profile.break_duration_minutes * scheduling_settings.RECOVERY_BREAK_MULTIPLIER

    kept: list[StudySession] = []
    for day, day_sessions in by_day(sessions):
        previous = None
        for session in day_sessions:
            if (
                previous is not None
                and previous.duration_minutes > intensive
                and session.duration_minutes > intensive
                and session.start_minutes - previous.end_minutes < recovery
            ):
                logger.debug(f"Insufficient recovery before {session.id} on {day}, dropping")
                continue
            kept.append(session)
            previous = session
    return kept


def rebalance_weekly_totals(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """Shrink every session of a week whose total exceeds daily limit x 7."""
    weekly_cap = context.daily_limit_minutes * 7
    min_minutes = scheduling_settings.MIN_SESSION_MINUTES

    ordered = sorted(chronological(sessions), key=lambda s: week_key(s.date))
    rebalanced: list[StudySession] = []
    for week, week_sessions in groupby(ordered, key=lambda s: week_key(s.date)):
        week_sessions = list(week_sessions)
        total = sum(s.duration_minutes for s in week_sessions)
        if total <= weekly_cap:
            rebalanced.extend(week_sessions)
            continue

        factor = weekly_cap / total
        logger.debug(f"Week {week[0]}-W{week[1]:02d} over cap ({total} min), scaling by {factor:.2f}")
        rebalanced.extend(
            s.with_timing(duration_minutes=max(min_minutes, s.duration_minutes * weekly_cap // total))
            for s in week_sessions
        )
    return chronological(rebalanced)


def enforce_date_range(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    return [s for s in sessions if context.start_date <= s.date <= context.end_date]


VALIDATION_PASSES: tuple[SchedulePass, ...] = (
    enforce_session_length,
    enforce_recovery_time,
    rebalance_weekly_totals,
    enforce_date_range,
)


def validate_and_adjust_schedule(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """
    Enforce hard constraints on an optimized schedule.

    Args:
        sessions: Optimized sessions
        context: Optimization context for this run

    Returns:
        Valid sessions in chronological order
    """
    for validation_pass in VALIDATION_PASSES:
        before = len(sessions)
        sessions = validation_pass(sessions, context)
        if len(sessions) != before:
            logger.debug(f"{validation_pass.__name__} removed {before - len(sessions)} sessions")
    return chronological(sessions)
