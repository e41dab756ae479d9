"""
Configuration helpers for docpages.
"""

from .models import BuildConfig, ConfigError, ExampleConfig, default_config, load_config
from .settings import ToolSettings, get_settings

__all__ = [
    "BuildConfig",
    "ConfigError",
    "ExampleConfig",
    "default_config",
    "load_config",
    "ToolSettings",
    "get_settings",
]
