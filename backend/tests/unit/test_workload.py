"""
Unit tests for the workload analyzer.

Tests the per-task heuristics (hours, difficulty, urgency) and the
per-class aggregation and ranking.
"""

import math

import pytest

from study_planner.models import ClassInfo
from study_planner.services.scheduling.workload import (
    UNASSIGNED_CLASS_ID,
    WorkloadAnalyzer,
    analyze_workload,
    base_hours_for_type,
    calculate_average_difficulty,
    calculate_priority_score,
    complexity_multiplier,
    estimate_task_difficulty,
    estimate_task_hours,
    filter_upcoming_tasks,
    find_critical_deadlines,
    urgency_score,
)
from tests.conftest import NOW, make_task


class TestTaskHeuristics:
    """Tests for single-task estimates."""

    @pytest.mark.parametrize(
        "task_type,expected",
        [("exam", 8), ("project", 12), ("quiz", 1), ("lab", 4), ("unknown", 3), (None, 3)],
    )
    def test_base_hours_for_type(self, task_type, expected):
        assert base_hours_for_type(task_type) == expected

    def test_complexity_multiplier_grows_with_description(self):
        assert complexity_multiplier(None) == 1.0
        assert complexity_multiplier("") == 1.0
        assert complexity_multiplier("x" * 500) == pytest.approx(1.5)

    def test_complexity_multiplier_is_capped(self):
        assert complexity_multiplier("x" * 5000) == 2.0

    def test_estimate_task_hours(self):
        task = make_task("t1", task_type="paper", description="x" * 250)

        assert estimate_task_hours(task) == pytest.approx(7.5)

    def test_estimate_task_difficulty(self):
        assert estimate_task_difficulty(make_task("t1", task_type="exam")) == 5
        assert estimate_task_difficulty(make_task("t2", task_type="discussion")) == 1
        assert estimate_task_difficulty(make_task("t3", task_type="mystery")) == 3


class TestUrgencyAndPriority:
    """Tests for deadline urgency and class priority."""

    def test_urgency_decreases_with_distance(self):
        assert urgency_score(make_task("t1", due_in_days=3), NOW) == pytest.approx(9.0)
        assert urgency_score(make_task("t2", due_in_days=15), NOW) == pytest.approx(5.0)

    def test_urgency_zero_beyond_thirty_days(self):
        assert urgency_score(make_task("t1", due_in_days=45), NOW) == 0.0

    def test_undated_task_has_no_urgency(self):
        assert urgency_score(make_task("t1", due_in_days=None), NOW) == 0.0

    def test_priority_is_urgency_times_importance(self):
        tasks = [
            make_task("t1", task_type="exam", due_in_days=3),  # 9 x 8
            make_task("t2", task_type="quiz", due_in_days=6),  # 8 x 1
        ]

        assert calculate_priority_score(tasks, NOW) == pytest.approx(80.0)

    def test_average_difficulty_defaults_to_medium(self):
        assert calculate_average_difficulty([]) == 3.0

    def test_critical_deadlines_within_a_week(self):
        tasks = [
            make_task("t1", due_in_days=6),
            make_task("t2", due_in_days=2),
            make_task("t3", due_in_days=10),
            make_task("t4", due_in_days=-1),
            make_task("t5", due_in_days=None),
        ]

        deadlines = find_critical_deadlines(tasks, NOW)

        assert deadlines == [tasks[1].due_date, tasks[0].due_date]


class TestFilterUpcomingTasks:
    """Tests for the pending-task horizon filter."""

    def test_keeps_pending_dated_tasks_in_horizon(self):
        tasks = [
            make_task("keep", due_in_days=5),
            make_task("done", due_in_days=5, completed=True),
            make_task("undated", due_in_days=None),
            make_task("past", due_in_days=-1),
            make_task("far", due_in_days=40),
        ]

        upcoming = filter_upcoming_tasks(tasks, now=NOW)

        assert [t.id for t in upcoming] == ["keep"]

    def test_custom_horizon(self):
        tasks = [make_task("t1", due_in_days=40)]

        assert filter_upcoming_tasks(tasks, now=NOW, horizon_days=60) == tasks


class TestWorkloadAnalyzer:
    """Tests for per-class aggregation."""

    def test_groups_tasks_by_class(self, sample_tasks, sample_classes):
        workloads = analyze_workload(sample_tasks, sample_classes, now=NOW)
        by_id = {w.class_id: w for w in workloads}

        assert set(by_id) == {"c1", "c2", "c3", UNASSIGNED_CLASS_ID}
        # completed t7 is ignored
        assert by_id["c1"].pending_assignments == 2
        assert by_id["c1"].total_estimated_hours == pytest.approx(10.0)
        assert by_id["c2"].total_estimated_hours == pytest.approx(11.0)
        assert by_id["c1"].class_name == "Calculus"

    def test_unassigned_bucket(self, sample_tasks, sample_classes):
        workloads = analyze_workload(sample_tasks, sample_classes, now=NOW)
        unassigned = next(w for w in workloads if w.class_id == UNASSIGNED_CLASS_ID)

        assert unassigned.class_name == "Unassigned"
        assert unassigned.pending_assignments == 1

    def test_sorted_by_priority_descending(self, sample_tasks, sample_classes):
        workloads = analyze_workload(sample_tasks, sample_classes, now=NOW)
        scores = [w.priority_score for w in workloads]

        assert scores == sorted(scores, reverse=True)
        assert workloads[0].class_id == "c1"

    def test_ties_keep_grouping_order(self):
        tasks = [
            make_task("t1", "b", "quiz", due_in_days=60),
            make_task("t2", "a", "quiz", due_in_days=60),
        ]

        workloads = analyze_workload(tasks, [], now=NOW)

        assert [w.class_id for w in workloads] == ["b", "a"]

    def test_recommended_daily_minutes_spreads_over_two_weeks(self):
        workloads = analyze_workload(
            [make_task("t1", "c1", "exam")], [ClassInfo(id="c1", name="Calc")], now=NOW
        )

        assert workloads[0].recommended_daily_minutes == math.ceil(8 * 60 / 14)

    def test_average_difficulty(self, sample_tasks, sample_classes):
        workloads = WorkloadAnalyzer(now=NOW).analyze(sample_tasks, sample_classes)
        c3 = next(w for w in workloads if w.class_id == "c3")

        assert c3.average_assignment_difficulty == pytest.approx(2.5)

    def test_empty_input(self):
        assert analyze_workload([], [], now=NOW) == []
