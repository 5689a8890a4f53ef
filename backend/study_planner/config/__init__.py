"""Configuration package."""

from study_planner.config.scheduling import (
    SchedulingSettings,
    get_scheduling_settings,
    get_task_type_difficulty,
    get_task_type_hours,
    scheduling_settings,
)
from study_planner.config.settings import (
    Settings,
    get_settings,
    load_yaml_config,
    settings,
    yaml_config,
)

__all__ = [
    # Scheduling settings
    "scheduling_settings",
    "SchedulingSettings",
    "get_scheduling_settings",
    "get_task_type_hours",
    "get_task_type_difficulty",
    # Application settings
    "Settings",
    "get_settings",
    "load_yaml_config",
    "settings",
    "yaml_config",
]
