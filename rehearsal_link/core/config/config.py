"""Configuration management for rehearsal analysis."""

import copy
import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"


class Config:
    """Configuration manager backed by a YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to custom config file. If None, uses default config.
        """
        self._config: Dict[str, Any] = {}
        self._load_config(config_path)

    def _load_config(self, config_path: Optional[str] = None) -> None:
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                data={"config_path": str(config_path)},
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}",
                data={"config_path": str(config_path)},
                cause=e,
            ) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_path}",
                data={"config_path": str(config_path)},
            )

        # A custom file only overrides what it names
        if Path(config_path) != DEFAULT_CONFIG_PATH:
            with open(DEFAULT_CONFIG_PATH, 'r', encoding='utf-8') as f:
                defaults = yaml.safe_load(f) or {}
            loaded = _deep_merge(defaults, loaded)

        self._config = loaded
        self._expand_paths()

    def _expand_paths(self) -> None:
        """Expand ~ in file paths."""
        logging_section = self._config.get('logging') or {}
        if logging_section.get('log_file'):
            logging_section['log_file'] = os.path.expanduser(logging_section['log_file'])

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'features.window_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value
            value: Value to set
        """
        keys = key_path.split('.')
        config = self._config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def save(self, output_path: str) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)

    @property
    def audio(self) -> Dict[str, Any]:
        """Get audio source settings."""
        return self._config.get('audio', {})

    @property
    def waveform(self) -> Dict[str, Any]:
        """Get waveform downsampling settings."""
        return self._config.get('waveform', {})

    @property
    def features(self) -> Dict[str, Any]:
        """Get feature extraction settings."""
        return self._config.get('features', {})

    @property
    def classification(self) -> Dict[str, Any]:
        """Get classification thresholds."""
        return self._config.get('classification', {})

    @property
    def smoothing(self) -> Dict[str, Any]:
        """Get smoothing settings."""
        return self._config.get('smoothing', {})

    @property
    def editing(self) -> Dict[str, Any]:
        """Get segment editing settings."""
        return self._config.get('editing', {})

    @property
    def export(self) -> Dict[str, Any]:
        """Get export settings."""
        return self._config.get('export', {})

    @property
    def analysis(self) -> Dict[str, Any]:
        """Get background analysis settings."""
        return self._config.get('analysis', {})

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging settings."""
        return self._config.get('logging', {})

    def to_dict(self) -> Dict[str, Any]:
        """Return a copy of the raw configuration tree."""
        return copy.deepcopy(self._config)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


_config_instance: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_path: Path to custom config file (only used on first call)

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(config_path)

    return _config_instance
