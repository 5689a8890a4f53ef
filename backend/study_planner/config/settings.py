"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from study_planner.config import settings

    # Access settings
    model = settings.TEXT_MODEL
    debug = settings.DEBUG
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Study Planner"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # LLM provider keys (only needed for the optional AI workload estimator)
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    GEMINI_API_KEY: str = ""

    # Text model for workload estimation
    # Format: provider/model-name (LiteLLM)
    TEXT_MODEL: str = "gemini/gemini-2.5-flash"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

# Points at an alternative YAML file (e.g. a per-school task-type table)
CONFIG_PATH_ENV = "STUDY_PLANNER_CONFIG"


@lru_cache()
def load_yaml_config(path: Optional[str] = None) -> dict[str, Any]:
    """
    Load YAML configuration.

    Resolution order: the path argument, the STUDY_PLANNER_CONFIG
    environment variable, then config/default.yaml at the repository root.
    A missing file yields an empty dict.
    """
    config_path = Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH).expanduser()

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
