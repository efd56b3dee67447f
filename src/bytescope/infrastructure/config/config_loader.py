"""Configuration loading from YAML files and environment variables."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ...domain.exceptions import ConfigurationError
from .config_models import ByteScopeConfig

# Environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    "BYTESCOPE_ROOT": ("pipeline", "root_directory", str),
    "BYTESCOPE_WORKERS": ("pipeline", "worker_count", int),
    "BYTESCOPE_QUEUE_CAPACITY": ("pipeline", "queue_capacity", int),
    "BYTESCOPE_LOG_LEVEL": ("logging", "level", str),
    "BYTESCOPE_OUTPUT_DIR": ("output", "output_directory", str),
}


class ConfigLoader:
    """
    Loads bytescope configuration.

    Precedence, lowest to highest: built-in defaults, the config file
    (explicit path or first existing default location), environment
    variables, then explicit overrides from the caller (CLI flags).
    """

    DEFAULT_CONFIG_NAME = "bytescope.yaml"

    @classmethod
    def default_paths(cls) -> List[Path]:
        """Config file locations searched when no explicit path is given."""
        return [
            Path.cwd() / cls.DEFAULT_CONFIG_NAME,
            Path.home() / ".config" / "bytescope" / "config.yaml",
        ]

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> ByteScopeConfig:
        """
        Load configuration.

        Args:
            config_path: Optional explicit config file path
            overrides: Optional section -> {key: value} overrides applied last

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If the file is missing, malformed or invalid
        """
        data: Dict[str, Any] = {}

        if config_path is not None:
            path = Path(config_path)
            if not path.is_file():
                raise ConfigurationError(f"Configuration file not found: {path}")
            data = cls._read_yaml(path)
        else:
            for path in cls.default_paths():
                if path.is_file():
                    data = cls._read_yaml(path)
                    break

        data = cls._merge(data, cls._env_overrides())
        if overrides:
            data = cls._merge(data, overrides)

        try:
            return ByteScopeConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def create_default_config(cls, path: Optional[str] = None) -> Path:
        """
        Write the default configuration as YAML.

        Args:
            path: Target file (defaults to ./bytescope.yaml)

        Returns:
            Path of the written file

        Raises:
            ConfigurationError: If the file already exists or cannot be written
        """
        target = Path(path) if path else Path.cwd() / cls.DEFAULT_CONFIG_NAME
        if target.exists():
            raise ConfigurationError(f"Configuration file already exists: {target}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(ByteScopeConfig().to_yaml(), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {target}: {e}") from e
        return target

    @classmethod
    def get_config_info(cls) -> Dict[str, List[str]]:
        """Describe config files and environment overrides currently in effect."""
        return {
            "existing_configs": [str(p) for p in cls.default_paths() if p.is_file()],
            "env_overrides": [
                f"{name}={os.environ[name]}" for name in ENV_OVERRIDES if name in os.environ
            ],
            "default_paths": [str(p) for p in cls.default_paths()],
        }

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        return data

    @staticmethod
    def _env_overrides() -> Dict[str, Dict[str, Any]]:
        result: Dict[str, Dict[str, Any]] = {}
        for name, (section, key, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(name)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e
            result.setdefault(section, {})[key] = value
        return result

    @staticmethod
    def _merge(base: Dict[str, Any], updates: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        merged = dict(base)
        for section, values in updates.items():
            current = merged.get(section)
            if isinstance(current, dict) and isinstance(values, dict):
                merged[section] = {**current, **values}
            else:
                merged[section] = values
        return merged
