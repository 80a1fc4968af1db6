"""
Configuration for the reach estimate client.
"""

from .settings import (
    AppConfig,
    FacebookConfig,
    Settings,
    ThrottleConfig,
    load_settings,
    settings_from_mapping,
)

__all__ = [
    "AppConfig",
    "FacebookConfig",
    "Settings",
    "ThrottleConfig",
    "load_settings",
    "settings_from_mapping",
]
