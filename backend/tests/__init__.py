"""
Study Planner Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and builders
    ├── unit/                # Unit tests (isolated, no external dependencies)
    │   ├── test_config.py   # Configuration loading tests
    │   ├── test_workload.py # Workload analyzer heuristics
    │   ├── test_strategies.py  # Base schedule strategies
    │   └── ...
    └── integration/         # End-to-end runs through the schedule service
        └── test_schedule_generation.py

Running Tests:
    # Run all tests
    pytest backend/tests/ -v

    # Run only unit tests
    pytest backend/tests/unit/ -v

    # Run with coverage
    pytest backend/tests/ --cov=study_planner --cov-report=html
"""
