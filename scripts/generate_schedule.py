#!/usr/bin/env python3
"""
Study Schedule Generation Script

Analyze a student's workload and generate an optimized study schedule from
a JSON export of the task store.

The input file holds the raw store records plus an optional study profile:

    {
        "user_id": "student-1",
        "tasks": [{"id": "t1", "title": "...", "class": "c1", "dueDate": "...", "type": "exam"}],
        "classes": [{"id": "c1", "name": "Calculus"}],
        "profile": {"preferred_study_times": [...], "focus_duration_minutes": 90}
    }

Without a "profile" the default weekday profile is used.

Setup:
    1. Copy .env.example to .env in the project root
    2. For AI workload estimates, set an API key for the estimator model
       (e.g. GEMINI_API_KEY for the default model) and pass --llm

Usage:
    # Workload analysis only
    python scripts/generate_schedule.py analyze scripts/examples/semester.json --now 2025-03-03

    # Two-week schedule with the default goal (balance subjects)
    python scripts/generate_schedule.py schedule scripts/examples/semester.json \\
        --start 2025-03-03 --end 2025-03-16 --now 2025-03-03

    # Deadline-focused schedule, skipping a day, as JSON
    python scripts/generate_schedule.py schedule scripts/examples/semester.json \\
        --start 2025-03-03 --end 2025-03-30 --goal meet_deadlines --now 2025-03-03 \\
        --exclude 2025-03-14 --format json --output-file schedule.json

    # Use the LiteLLM estimator instead of the fallback heuristic
    python scripts/generate_schedule.py schedule scripts/examples/semester.json \\
        --start 2025-03-03 --end 2025-03-16 --now 2025-03-03 --llm

Environment Variables (set in .env or environment):
    Optional:
    - TEXT_MODEL / SCHEDULING_ESTIMATOR_MODEL: Model for AI estimates
    - SCHEDULING_*: Engine tuning (see study_planner/config/scheduling.py)
    - DEBUG: Enable verbose logging
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Optional

# Add backend to path for imports (must be before study_planner.* imports)
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from dotenv import load_dotenv

# Load environment variables from project root .env
project_root = Path(__file__).parent.parent
if (project_root / ".env").exists():
    load_dotenv(project_root / ".env")

from study_planner.enums import OptimizationGoal
from study_planner.exceptions import ServiceError
from study_planner.models import (
    ClassInfo,
    ScheduleOptimizationRequest,
    StudyProfile,
    StudyScheduleResponse,
    Task,
    WorkloadAnalysisResponse,
)
from study_planner.services.scheduling import LLMWorkloadEstimator, StudyScheduleService
from study_planner.utils.time_utils import day_name


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    # Reduce noise from LiteLLM and its HTTP stack (unless --debug)
    if not debug:
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


class JsonFileTaskStore:
    """Task store reading a single JSON export."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    async def get_tasks(self, user_id: str) -> list[Task]:
        return [Task.model_validate(record) for record in self.data.get("tasks", [])]

    async def get_classes(self, user_id: str) -> list[ClassInfo]:
        return [ClassInfo.model_validate(record) for record in self.data.get("classes", [])]


def load_input(path: str) -> dict[str, Any]:
    input_path = Path(path).expanduser()
    if not input_path.exists():
        print(f"❌ Input file not found: {input_path}")
        sys.exit(1)
    with open(input_path) as f:
        return json.load(f)


def write_output(payload: str, output_file: Optional[str]) -> None:
    if output_file:
        Path(output_file).write_text(payload)
        print(f"💾 Saved to {output_file}")
    else:
        print(payload)


# =============================================================================
# Analyze Command
# =============================================================================


def print_analysis(response: WorkloadAnalysisResponse) -> None:
    analysis = response.analysis
    print("\n" + "=" * 70)
    print("📊 WORKLOAD ANALYSIS")
    print("=" * 70)
    print(f"  Pending tasks:      {analysis.total_assignments}")
    print(f"  Due within a week:  {analysis.upcoming_deadlines}")
    print(f"  Estimated hours:    {analysis.estimated_total_hours:.1f}")
    print(f"  Stress level:       {analysis.stress_level_prediction:.0f}/10")
    source = "fallback heuristic" if analysis.used_fallback_estimate else "AI estimate"
    print(f"  Estimate source:    {source}")

    print(f"\n{'─' * 70}")
    for workload in analysis.class_workloads:
        print(
            f"  {workload.class_name:<28} {workload.pending_assignments:>2} tasks  "
            f"{workload.total_estimated_hours:>5.1f}h  priority {workload.priority_score:.1f}"
        )

    actions = response.recommendations.immediate_actions
    if actions:
        print(f"\n{'─' * 70}")
        for action in actions:
            print(f"  • {action}")
    print()


async def analyze(
    service: StudyScheduleService,
    user_id: str,
    now: Optional[datetime],
    output_format: str,
    output_file: Optional[str],
) -> None:
    response = await service.analyze_workload(user_id, now=now)
    if output_format == "json":
        write_output(response.model_dump_json(indent=2), output_file)
    else:
        print_analysis(response)


# =============================================================================
# Schedule Command
# =============================================================================


def print_schedule(response: StudyScheduleResponse) -> None:
    schedule = response.schedule
    print("\n" + "=" * 70)
    print(f"📅 STUDY SCHEDULE {schedule.start_date} → {schedule.end_date}")
    print("=" * 70)
    print(f"  Method: {schedule.optimization_method.value}")
    print(f"  Sessions: {len(schedule.study_sessions)}")
    print(f"  Total: {response.analytics.total_study_hours:.1f}h")

    current = None
    for session in schedule.study_sessions:
        if session.date != current:
            current = session.date
            print(f"\n  {day_name(current)} {current.isoformat()}")
        print(
            f"    {session.start_time}-{session.end_time}  {session.focus_area or session.class_id:<24} "
            f"{session.session_type.value:<13} {session.notes}"
        )

    if response.warnings:
        print(f"\n{'─' * 70}")
        print("⚠️  " + ", ".join(w.value for w in response.warnings))

    if response.recommendations:
        print(f"\n{'─' * 70}")
        for recommendation in response.recommendations:
            print(f"  • {recommendation}")
    print()


async def schedule(
    service: StudyScheduleService,
    user_id: str,
    request: ScheduleOptimizationRequest,
    profile: Optional[StudyProfile],
    now: Optional[datetime],
    output_format: str,
    output_file: Optional[str],
) -> None:
    response = await service.generate_study_schedule(
        user_id, request, profile=profile, now=now
    )
    if output_format == "json":
        write_output(response.model_dump_json(indent=2), output_file)
    else:
        print_schedule(response)


# =============================================================================
# CLI
# =============================================================================


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze workload and generate optimized study schedules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("input", help="JSON file with tasks, classes, and profile")
        sub.add_argument("--user-id", help="Student id (defaults to user_id in the input)")
        sub.add_argument("--llm", action="store_true", help="Use the LiteLLM workload estimator")
        sub.add_argument("--model", help="Estimator model (defaults to configured model)")
        sub.add_argument("--format", choices=["summary", "json"], default="summary")
        sub.add_argument("--output-file", help="Write JSON output to a file")
        sub.add_argument("--now", type=parse_date, help="Reference date for the analysis (defaults to today)")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze pending workload")
    add_common(analyze_parser)

    schedule_parser = subparsers.add_parser("schedule", help="Generate a study schedule")
    add_common(schedule_parser)
    schedule_parser.add_argument("--start", type=parse_date, required=True, help="First day (YYYY-MM-DD)")
    schedule_parser.add_argument("--end", type=parse_date, required=True, help="Last day (YYYY-MM-DD)")
    schedule_parser.add_argument(
        "--goal",
        action="append",
        choices=[g.value for g in OptimizationGoal],
        default=[],
        help="Optimization goal (repeatable)",
    )
    schedule_parser.add_argument("--class", dest="classes", action="append", default=[], help="Only schedule this class id (repeatable)")
    schedule_parser.add_argument("--exclude", type=parse_date, action="append", default=[], help="Date to skip (repeatable)")

    return parser


async def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.debug)

    data = load_input(args.input)
    user_id = args.user_id or data.get("user_id", "local-user")
    estimator = LLMWorkloadEstimator(model=args.model) if args.llm else None
    service = StudyScheduleService(JsonFileTaskStore(data), estimator=estimator)
    now = datetime.combine(args.now, time(), tzinfo=timezone.utc) if args.now else None

    try:
        if args.command == "analyze":
            await analyze(service, user_id, now, args.format, args.output_file)

        elif args.command == "schedule":
            profile = None
            if data.get("profile"):
                profile = StudyProfile.model_validate({"user_id": user_id, **data["profile"]})
            request = ScheduleOptimizationRequest(
                start_date=args.start,
                end_date=args.end,
                optimization_goals=args.goal,
                include_classes=args.classes,
                exclude_dates=args.exclude,
            )
            await schedule(
                service, user_id, request, profile, now, args.format, args.output_file
            )
    except ServiceError as e:
        print(f"❌ {e.error_code}: {e.message}")
        sys.exit(1)


async def run_with_cleanup() -> None:
    """Run main and properly cleanup async clients."""
    try:
        await main()
    finally:
        # Cleanup LiteLLM async HTTP clients
        import litellm

        if getattr(litellm, "aclient", None):
            await litellm.aclient.close()


if __name__ == "__main__":
    asyncio.run(run_with_cleanup())
