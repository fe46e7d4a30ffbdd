"""Pydantic settings for Deepfield configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_config_dir() -> Path:
    """Get the user configuration directory."""
    return Path.home() / ".deepfield"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def _load_yaml_config() -> dict[str, Any]:
    """Load configuration from YAML file if it exists.

    Returns:
        Dictionary of configuration values, or empty dict if file doesn't exist.
    """
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path) as f:
                return yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError):
            # Silently ignore malformed or unreadable config
            return {}
    return {}


class HashingSettings(BaseModel):
    """Settings for source tree fingerprinting."""

    algorithm: Literal["sha256", "md5"] = "sha256"
    batch_size: int = Field(default=100, ge=1)
    max_workers: int = Field(default=4, ge=1)
    use_git: bool = True
    extra_ignore: list[str] = Field(default_factory=list)


class WorkflowSettings(BaseModel):
    """Settings for workflow state detection."""

    brief_min_length: int = Field(default=500, ge=0)


class Settings(BaseSettings):
    """Main settings model for Deepfield."""

    model_config = SettingsConfigDict(
        env_prefix="DEEPFIELD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    workspace_dir_name: str = "deepfield"
    log_level: str = "WARNING"
    hashing: HashingSettings = Field(default_factory=HashingSettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values passed in from the YAML file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from (in order of priority, highest first):
    1. Environment variables (DEEPFIELD_* prefix)
    2. YAML config file (~/.deepfield/config.yaml)
    3. Default values
    """
    yaml_config = _load_yaml_config()
    return Settings(**yaml_config)
