"""
Integration Test Fixtures

Integration tests drive StudyScheduleService end to end: an in-memory task
store stands in for the host database and the LiteLLM estimator runs with
acompletion patched, so no provider is ever contacted.
"""

from datetime import timedelta

import pytest

from study_planner.models.scheduling import ClassInfo, Task
from tests.conftest import NOW


class InMemoryTaskStore:
    """Task store serving raw records, the way the host database returns them."""

    def __init__(self, tasks: list[dict], classes: list[dict]):
        self.tasks = tasks
        self.classes = classes

    async def get_tasks(self, user_id: str) -> list[Task]:
        return [Task.model_validate(record) for record in self.tasks]

    async def get_classes(self, user_id: str) -> list[ClassInfo]:
        return [ClassInfo.model_validate(record) for record in self.classes]


def _record(task_id: str, class_id: str, task_type: str, due_in_days: int, **extra) -> dict:
    return {
        "id": task_id,
        "title": f"{task_type.title()} {task_id}",
        "class": class_id,
        "dueDate": (NOW + timedelta(days=due_in_days)).isoformat(),
        "type": task_type,
        **extra,
    }


@pytest.fixture
def semester_store() -> InMemoryTaskStore:
    """Three classes with a month of mixed coursework."""
    classes = [
        {"id": "math", "name": "Linear Algebra"},
        {"id": "bio", "name": "Cell Biology"},
        {"id": "lit", "name": "World Literature"},
    ]
    tasks = [
        _record("m1", "math", "homework", 2),
        _record("m2", "math", "quiz", 5),
        _record("m3", "math", "exam", 12),
        _record("b1", "bio", "lab", 4),
        _record("b2", "bio", "reading", 4),
        _record("b3", "bio", "project", 20, description="Group project. " * 40),
        _record("l1", "lit", "reading", 1),
        _record("l2", "lit", "paper", 9),
        _record("l3", "lit", "discussion", 3, completed=True),
    ]
    return InMemoryTaskStore(tasks, classes)
