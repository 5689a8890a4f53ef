"""
Study Planner

Turns a student's pending academic workload and study profile into a
time-boxed study schedule.

Usage:
    from study_planner import analyze_workload, generate_optimized_schedule
"""

from study_planner.services.scheduling import (
    analyze_workload,
    generate_optimized_schedule,
)

__all__ = ["analyze_workload", "generate_optimized_schedule"]
