"""
Unit Tests for Configuration Management

Tests the Settings classes and YAML configuration loading.
These tests verify:
- Environment variable loading
- Default value handling
- YAML configuration parsing
- Task-type table overrides
"""

import os
from unittest.mock import patch

from study_planner.config import (
    SchedulingSettings,
    Settings,
    get_settings,
    get_task_type_difficulty,
    get_task_type_hours,
    load_yaml_config,
)
from study_planner.config.scheduling import DEFAULT_TASK_TYPE_HOURS


class TestSettings:
    """Test suite for the Settings Pydantic model."""

    def test_default_values(self) -> None:
        """Settings should have sensible defaults when env vars are not set."""
        with patch.dict(os.environ, {}, clear=True):
            test_settings = Settings(_env_file=None)

            assert test_settings.APP_NAME == "Study Planner"
            assert test_settings.DEBUG is False
            assert test_settings.LOG_LEVEL == "INFO"
            assert test_settings.TEXT_MODEL == "gemini/gemini-2.5-flash"

    def test_env_variable_override(self) -> None:
        """Environment variables should override default values."""
        env_overrides = {
            "APP_NAME": "Custom Planner",
            "DEBUG": "true",
            "TEXT_MODEL": "openai/gpt-4o-mini",
        }

        with patch.dict(os.environ, env_overrides, clear=True):
            test_settings = Settings(_env_file=None)

            assert test_settings.APP_NAME == "Custom Planner"
            assert test_settings.DEBUG is True
            assert test_settings.TEXT_MODEL == "openai/gpt-4o-mini"

    def test_get_settings_is_cached(self) -> None:
        """get_settings should return the same instance on repeated calls."""
        assert get_settings() is get_settings()


class TestSchedulingSettings:
    """Test suite for scheduling engine settings."""

    def test_default_values(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            s = SchedulingSettings(_env_file=None)

            assert s.MIN_SESSION_MINUTES == 15
            assert s.PLANNING_WINDOW_DAYS == 14
            assert s.SPACED_REPETITION_INTERVALS == [1, 3, 7, 14, 30]
            assert s.STRESS_DAILY_CAP_RATIO == 0.8
            assert s.PEAK_FOCUS_MULTIPLIER == 1.2

    def test_env_prefix_override(self) -> None:
        """SCHEDULING_ prefixed variables override engine constants."""
        env_overrides = {
            "SCHEDULING_MIN_SESSION_MINUTES": "20",
            "SCHEDULING_SPACED_REPETITION_INTERVALS": "[2, 4, 8]",
        }

        with patch.dict(os.environ, env_overrides, clear=True):
            s = SchedulingSettings(_env_file=None)

            assert s.MIN_SESSION_MINUTES == 20
            assert s.SPACED_REPETITION_INTERVALS == [2, 4, 8]


class TestYamlConfigLoading:
    """Test suite for YAML configuration loading."""

    def test_load_yaml_config_returns_dict(self) -> None:
        load_yaml_config.cache_clear()
        config = load_yaml_config()

        assert isinstance(config, dict)

    def test_yaml_config_has_task_type_tables(self) -> None:
        load_yaml_config.cache_clear()
        config = load_yaml_config()

        assert "task_types" in config
        assert config["task_types"]["hours"]["exam"] == 8
        assert config["task_types"]["difficulty"]["exam"] == 5

    def test_explicit_path(self, tmp_path) -> None:
        config_file = tmp_path / "school.yaml"
        config_file.write_text("task_types:\n  hours:\n    exam: 12\n")

        config = load_yaml_config(str(config_file))

        assert config == {"task_types": {"hours": {"exam": 12}}}

    def test_env_variable_path(self, tmp_path) -> None:
        config_file = tmp_path / "env.yaml"
        config_file.write_text("app:\n  name: Override\n")
        load_yaml_config.cache_clear()

        with patch.dict(os.environ, {"STUDY_PLANNER_CONFIG": str(config_file)}):
            config = load_yaml_config()
        load_yaml_config.cache_clear()

        assert config["app"]["name"] == "Override"

    def test_missing_file_is_empty(self, tmp_path) -> None:
        assert load_yaml_config(str(tmp_path / "missing.yaml")) == {}


class TestTaskTypeTables:
    """Tests for the task-type lookup tables and their YAML overrides."""

    def teardown_method(self) -> None:
        get_task_type_hours.cache_clear()
        get_task_type_difficulty.cache_clear()

    def test_defaults_match_builtin_table(self) -> None:
        get_task_type_hours.cache_clear()
        hours = get_task_type_hours()

        for task_type, expected in DEFAULT_TASK_TYPE_HOURS.items():
            assert hours[task_type] == expected

    @patch("study_planner.config.scheduling.load_yaml_config")
    def test_yaml_overrides_are_merged(self, mock_load) -> None:
        """Overrides replace built-in values and add new types."""
        mock_load.return_value = {
            "task_types": {
                "hours": {"exam": 10, "Capstone": 20},
                "difficulty": {"reading": 3},
            }
        }
        get_task_type_hours.cache_clear()
        get_task_type_difficulty.cache_clear()

        hours = get_task_type_hours()
        difficulty = get_task_type_difficulty()

        assert hours["exam"] == 10.0
        assert hours["capstone"] == 20.0
        assert hours["quiz"] == 1
        assert difficulty["reading"] == 3

    @patch("study_planner.config.scheduling.load_yaml_config")
    def test_malformed_override_is_ignored(self, mock_load) -> None:
        mock_load.return_value = {"task_types": {"hours": ["exam", 10]}}
        get_task_type_hours.cache_clear()

        assert get_task_type_hours() == DEFAULT_TASK_TYPE_HOURS
