"""Configuration for Deepfield."""

from deepfield.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
