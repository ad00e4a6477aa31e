"""
Configuration management for the Contour pitch analysis package.

Loads YAML configuration with ${ENV_VAR} interpolation and exposes the
sections consumed by the decoder, the progressive loader and the
analysis pipeline.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from contour.utils.errors import ConfigurationError

DEFAULT_CONFIG_LOCATIONS = (
    Path("config/config.yaml"),
    Path("config.yaml"),
    Path(__file__).parent.parent.parent / "config" / "config.yaml",
)


class ConfigManager:
    """
    Manages configuration loaded from YAML files.

    Supports ${VAR_NAME} interpolation from the environment, dot-notation
    access ("progressive.segment_duration") and simple type validation.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = config_dict or {}
        self._env_pattern = re.compile(r'\$\{([^}]+)\}')

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Create ConfigManager from a YAML file.

        Raises:
            ConfigurationError: If the file is missing, unparsable or not a mapping
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                config_key=str(file_path)
            )

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration: {e}",
                config_key=str(file_path)
            )

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping, got {type(config_dict).__name__}",
                config_key=str(file_path)
            )

        manager = cls(config_dict)
        manager._config = manager._interpolate(manager._config)
        return manager

    def _interpolate(self, value: Any) -> Any:
        """Recursively replace ${ENV_VAR} patterns in strings."""
        if isinstance(value, dict):
            return {key: self._interpolate(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._interpolate(item) for item in value]
        if isinstance(value, str):
            return self._env_pattern.sub(self._replace_env, value)
        return value

    @staticmethod
    def _replace_env(match: re.Match) -> str:
        # Unknown variables are left as written
        return os.environ.get(match.group(1), match.group(0))

    def get(
        self,
        key: str,
        default: Any = None,
        required: bool = False
    ) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            config.get("progressive.segment_duration", default=10.0)
        """
        value: Any = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                if required:
                    raise ConfigurationError(
                        f"Required configuration key not found: {key}",
                        config_key=key
                    )
                return default

        return value

    def get_section(self, key: str) -> Dict[str, Any]:
        """Return a whole section as a dict (empty when missing or not a mapping)."""
        value = self.get(key, default={})
        if not isinstance(value, dict):
            return {}
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation, creating sections as needed."""
        keys = key.split('.')
        current = self._config

        for k in keys[:-1]:
            current = current.setdefault(k, {})

        current[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Return a deep copy of the configuration."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Dict[str, Any]) -> None:
        """
        Validate configuration against a schema.

        Schema format:
            {
                "progressive.segment_duration": {"type": (int, float), "required": True},
                "logging.level": {"type": str}
            }

        Raises:
            ConfigurationError: If a required key is missing or has the wrong type
        """
        for key, rules in schema.items():
            value = self.get(key)
            expected_type = rules.get("type")

            if value is None:
                if rules.get("required", False):
                    raise ConfigurationError(
                        f"Required configuration missing: {key}",
                        config_key=key
                    )
                continue

            if expected_type and not isinstance(value, expected_type):
                raise ConfigurationError(
                    f"Invalid type for {key}: expected {_type_name(expected_type)}, "
                    f"got {type(value).__name__}",
                    config_key=key
                )


def _type_name(expected_type: Any) -> str:
    if isinstance(expected_type, tuple):
        return " or ".join(t.__name__ for t in expected_type)
    return expected_type.__name__


CONFIG_SCHEMA: Dict[str, Any] = {
    "audio.max_file_size": {"type": int},
    "progressive.threshold_duration": {"type": (int, float)},
    "progressive.segment_duration": {"type": (int, float)},
    "progressive.preload_segments": {"type": int},
    "progressive.max_cached_segments": {"type": int},
    "progressive.cache_decoded_audio": {"type": bool},
    "analysis.frame_size": {"type": int},
    "analysis.hop_size": {"type": int},
    "analysis.median_window": {"type": int},
    "logging.level": {"type": str},
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from file, merged over the defaults.

    Args:
        config_path: Optional path to a config file. If None, the
                     DEFAULT_CONFIG_LOCATIONS are tried in order.

    Returns:
        Dict[str, Any]: Configuration dictionary
    """
    if config_path is None:
        for path in DEFAULT_CONFIG_LOCATIONS:
            if path.exists():
                config_path = str(path)
                break
    elif not Path(config_path).exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            config_key=config_path
        )

    config = get_default_config()
    if config_path:
        manager = ConfigManager.from_file(Path(config_path))
        manager.validate(CONFIG_SCHEMA)
        _merge(config, manager.to_dict())

    return config


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "audio": {
            "target_sample_rate": 22050,
            "max_file_size": 524288000,  # 500 MB
        },
        "progressive": {
            "threshold_duration": 30.0,
            "segment_duration": 10.0,
            "preload_segments": 1,
            "max_cached_segments": 6,
            "cache_decoded_audio": False,
        },
        "analysis": {
            "frame_size": 2048,
            "hop_size": 256,
            "min_pitch": 60.0,
            "max_pitch": 500.0,
            "min_confidence": 0.8,
            "median_window": 5,
        },
        "estimator": {
            "fmin": 50.0,
            "fmax": 600.0,
        },
        "performance": {
            "max_workers": 1,
        },
        "logging": {
            "level": "INFO",
            "format": "text",
        },
    }
