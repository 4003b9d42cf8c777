"""
Configuration package for Sound Companion

- **settings**: YAML + environment configuration split into dataclass sections
- **state**: persisted runtime state (time of the last successful sync)
"""

from .settings import (
    Settings,
    SoundsConfig,
    EventsConfig,
    GsiConfig,
    PlaybackConfig,
    LoggingConfig,
    NetworkConfig,
    SecurityConfig,
    get_settings,
    reload_settings,
)
from .state import StateStore

__all__ = [
    'Settings',
    'SoundsConfig',
    'EventsConfig',
    'GsiConfig',
    'PlaybackConfig',
    'LoggingConfig',
    'NetworkConfig',
    'SecurityConfig',
    'get_settings',
    'reload_settings',
    'StateStore',
]
