"""
Configuration management for Sound Companion

This module handles loading, validation, and management of application settings
from YAML files and environment variables.

The configuration is organized into logical sections using dataclasses:
- Sound library settings (directory, remote catalog, sync cadence)
- Event settings (per-rule chances and sound bindings)
- Game state integration listener (host, port, auth token)
- Playback, logging, network and storage settings

Values that differ per machine (catalog URL, sounds directory, auth token)
can be provided through environment variables or a .env file.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

from ..exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class SoundsConfig:
    """
    Local sound library and remote catalog settings

    The sounds directory is relative to the working directory unless an
    absolute path is given, matching where the application is launched from.
    """
    directory: str = "sounds"
    catalog_url: str = "https://sounds.example.com/catalog.json"
    concurrency: int = 4
    sync_period_hours: float = 24.0
    download_timeout: int = 30


@dataclass
class EventsConfig:
    """
    Playback rule settings

    chances overrides the built-in probability of a rule by rule name,
    bindings lists the sound names a rule picks from when it fires.
    """
    chances: Dict[str, float] = field(default_factory=dict)
    bindings: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class GsiConfig:
    """Game state integration listener settings"""
    host: str = "127.0.0.1"
    port: int = 12345
    auth_token: str = ""


@dataclass
class PlaybackConfig:
    """Local playback settings"""
    enabled: bool = True
    volume_db: float = 0.0


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls log levels, file output, rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = "sound-companion.log"
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """Network and HTTP configuration settings"""
    user_agent: str = "Sound-Companion/1.0"
    request_timeout: int = 10


@dataclass
class SecurityConfig:
    """Where configuration and persisted state are stored"""
    config_directory: str = "~/.sound-companion/"


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies environment
    variable overrides. Sections are plain dataclasses so call sites read
    values as attributes (settings.sounds.directory).
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".sound-companion"

        self.sounds = SoundsConfig()
        self.events = EventsConfig()
        self.gsi = GsiConfig()
        self.playback = PlaybackConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()
        self.security = SecurityConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'sounds': self.sounds,
            'events': self.events,
            'gsi': self.gsi,
            'playback': self.playback,
            'logging': self.logging,
            'network': self.network,
            'security': self.security,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in order of precedence; the first
        file found is used. An explicit path that cannot be parsed raises
        ConfigError, the implicit locations only warn.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    if path == self.config_path:
                        raise ConfigError(f"Failed to load config from {path}: {e}",
                                          details={'file_path': str(path)})
                    print(f"Warning: Failed to load config from {path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigError("Configuration root must be a mapping",
                              details={'file_path': str(self.config_path or '')})

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load machine-specific configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'SOUND_COMPANION_CATALOG_URL': lambda v: setattr(self.sounds, 'catalog_url', v),
            'SOUND_COMPANION_SOUNDS_DIR': lambda v: setattr(self.sounds, 'directory', v),
            'SOUND_COMPANION_GSI_TOKEN': lambda v: setattr(self.gsi, 'auth_token', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_sounds_directory(self) -> Path:
        """Get the sounds directory with user home expansion applied"""
        return Path(self.sounds.directory).expanduser()

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return Path(self.security.config_directory).expanduser()

    def get_state_path(self) -> Path:
        """Get the path of the persisted state file (last sync time)"""
        return self.get_config_directory() / "state.json"

    def get_sync_period_seconds(self) -> float:
        """Get the sync period in seconds"""
        return float(self.sounds.sync_period_hours) * 3600

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file

        The GSI auth token is blanked out before writing.

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = {name: asdict(section) for name, section in self._sections().items()}
        config_data['gsi']['auth_token'] = ""

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {target}: {e}", details={'file_path': str(target)})
        return target

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable errors, empty when the configuration is valid
        """
        errors = []

        if not self.sounds.directory:
            errors.append("sounds.directory must not be empty")

        if not isinstance(self.sounds.concurrency, int) or self.sounds.concurrency < 1:
            errors.append(f"Invalid download concurrency: {self.sounds.concurrency}")

        try:
            if float(self.sounds.sync_period_hours) <= 0:
                errors.append(f"Invalid sync period: {self.sounds.sync_period_hours}")
        except (TypeError, ValueError):
            errors.append(f"Invalid sync period: {self.sounds.sync_period_hours}")

        if not self.sounds.catalog_url.startswith(('http://', 'https://')):
            errors.append(f"Invalid catalog URL: {self.sounds.catalog_url}")

        for rule_name, chance in self.events.chances.items():
            if not isinstance(chance, (int, float)) or not 0.0 <= chance <= 1.0:
                errors.append(f"Invalid chance for {rule_name}: {chance}")

        for rule_name, sounds in self.events.bindings.items():
            if not isinstance(sounds, list):
                errors.append(f"Bindings for {rule_name} must be a list of sound names")

        if not isinstance(self.gsi.port, int) or not 0 < self.gsi.port < 65536:
            errors.append(f"Invalid GSI port: {self.gsi.port}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Sounds: {self.sounds.directory}",
            f"Catalog: {self.sounds.catalog_url}",
            f"Concurrency: {self.sounds.concurrency}",
            f"GSI: {self.gsi.host}:{self.gsi.port}",
        ]
        return f"Settings({', '.join(sections)})"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    The instance is created on first use so importing the package never
    touches the filesystem.

    Returns:
        The global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
