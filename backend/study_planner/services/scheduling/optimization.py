"""
Optimization Passes

Transformations applied, in a fixed order, to the base schedule produced
by a strategy. Each pass is a pure function

    (sessions, context) -> sessions

that only filters sessions or replaces them with moved/resized copies.
Passes never raise; infeasible sessions are dropped.

Pass order:
1. resolve_conflicts - push overlapping sessions later, or drop them
2. sequence_sessions - hardest content into the earliest morning slots
3. balance_cognitive_load - drop sessions over the daily study limit
4. insert_breaks - restore the minimum break between adjacent sessions
5. final_cleanup - drop too-short sessions and note the weekday

Conflict resolution must run before sequencing and load balancing, since
both assume the sessions of a day do not overlap.

Usage:
    from study_planner.services.scheduling.optimization import apply_optimizations

    sessions = apply_optimizations(base_sessions, context)
"""

import logging
from itertools import groupby
from typing import Callable, Iterable

from study_planner.config.scheduling import scheduling_settings
from study_planner.models.scheduling import StudySession
from study_planner.services.scheduling.context import OptimizationContext
from study_planner.utils.time_utils import MINUTES_PER_DAY, day_name

logger = logging.getLogger(__name__)

SchedulePass = Callable[[list[StudySession], OptimizationContext], list[StudySession]]

# Content fields moved between slots by sequence_sessions
CONTENT_FIELDS = (
    "class_id",
    "task_ids",
    "session_type",
    "focus_area",
    "difficulty_level",
    "notes",
)


def chronological(sessions: Iterable[StudySession]) -> list[StudySession]:
    """Sessions sorted by (date, start time); stable for equal starts."""
    return sorted(sessions, key=lambda s: (s.date, s.start_minutes))


def by_day(sessions: Iterable[StudySession]):
    """Yield (date, sessions) groups in chronological order."""
    for day, group in groupby(chronological(sessions), key=lambda s: s.date):
        yield day, list(group)


def resolve_conflicts(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """
    Make every day's sessions non-overlapping.

    A session that overlaps an accepted one is moved to start when the
    conflicting session ends, repeatedly. It is dropped if that moves it
    more than MAX_RESCHEDULE_SHIFT_MINUTES or past midnight.
    """
    max_shift = scheduling_settings.MAX_RESCHEDULE_SHIFT_MINUTES
    resolved: list[StudySession] = []

    for day, day_sessions in by_day(sessions):
        accepted: list[StudySession] = []
        for session in day_sessions:
            candidate = session
            while True:
                conflict = next((a for a in accepted if a.overlaps(candidate)), None)
                if conflict is None:
                    accepted.append(candidate)
                    break
                new_start = conflict.end_minutes
                if (
                    new_start - session.start_minutes > max_shift
                    or new_start + candidate.duration_minutes > MINUTES_PER_DAY
                ):
                    logger.debug(f"Dropping conflicting session {session.id} on {day}")
                    break
                candidate = candidate.with_timing(start_minutes=new_start)
        resolved.extend(chronological(accepted))

    return resolved


def sequence_sessions(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """
    Put the hardest content into the earliest morning slots.

    Morning slots (starting before MORNING_CUTOFF_HOUR) keep their id,
    timing and duration; only what is studied in them is reordered, by
    difficulty, highest first. Equal difficulty keeps chronological order.
    Afternoon sessions stay as they are.
    """
    cutoff = scheduling_settings.MORNING_CUTOFF_HOUR * 60
    sequenced: list[StudySession] = []

    for _, day_sessions in by_day(sessions):
        morning = [s for s in day_sessions if s.start_minutes < cutoff]
        rest = [s for s in day_sessions if s.start_minutes >= cutoff]

        contents = sorted(morning, key=lambda s: -s.difficulty_level)
        for slot, content in zip(morning, contents):
            if slot is content:
                sequenced.append(slot)
                continue
            update = {name: getattr(content, name) for name in CONTENT_FIELDS}
            sequenced.append(slot.model_copy(update=update))
        sequenced.extend(rest)

    return chronological(sequenced)


def balance_cognitive_load(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """Drop sessions that would push a day past the daily study limit."""
    limit = context.daily_limit_minutes
    balanced: list[StudySession] = []

    for day, day_sessions in by_day(sessions):
        total = 0
        for session in day_sessions:
            if total + session.duration_minutes > limit:
                logger.debug(f"Daily limit reached on {day}, dropping {session.id}")
                continue
            total += session.duration_minutes
            balanced.append(session)

    return balanced


def insert_breaks(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """
    Keep at least break_duration_minutes between adjacent sessions.

    Later sessions are pushed forward (cascading); a session pushed past
    midnight is dropped.
    """
    gap = context.study_profile.break_duration_minutes
    spaced: list[StudySession] = []

    for _, day_sessions in by_day(sessions):
        previous_end = None
        for session in day_sessions:
            if previous_end is not None and session.start_minutes < previous_end + gap:
                new_start = previous_end + gap
                if new_start + session.duration_minutes > MINUTES_PER_DAY:
                    logger.debug(f"No room for a break before {session.id}, dropping")
                    continue
                session = session.with_timing(start_minutes=new_start)
            spaced.append(session)
            previous_end = session.end_minutes

    return spaced


def final_cleanup(
    sessions: list[StudySession],
    context: OptimizationContext,
) -> list[StudySession]:
    """Drop sessions below the minimum length and note the weekday."""
    min_minutes = scheduling_settings.MIN_SESSION_MINUTES
    cleaned = []
    for session in chronological(sessions):
        if session.duration_minutes < min_minutes:
            continue
        summary = f"Scheduled for {day_name(session.date)}"
        notes = f"{session.notes} - {summary}" if session.notes else summary
        cleaned.append(session.model_copy(update={"notes": notes}))
    return cleaned


OPTIMIZATION_PASSES: tuple[SchedulePass, ...] = (
    resolve_conflicts,
    sequence_sessions,
    balance_cognitive_load,
    insert_breaks,
    final_cleanup,
)


def apply_optimizations(
    sessions: list[StudySession],
    context: OptimizationContext,
    passes: tuple[SchedulePass, ...] = OPTIMIZATION_PASSES,
) -> list[StudySession]:
    """
    Run the optimization passes in order.

    Args:
        sessions: Base schedule from a strategy
        context: Optimization context for this run
        passes: Pass sequence (defaults to OPTIMIZATION_PASSES)

    Returns:
        Optimized sessions in chronological order
    """
    for schedule_pass in passes:
        before = len(sessions)
        sessions = schedule_pass(sessions, context)
        logger.debug(f"{schedule_pass.__name__}: {before} -> {len(sessions)} sessions")
    return sessions
