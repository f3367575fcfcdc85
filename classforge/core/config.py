"""
Configuration management for code generation.

Handles loading and merging generator settings from JSON files, and
loading the config classes that drive a generation run.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger
from .errors import ConfigurationError

logger = get_logger(__name__)


class ConfigError(ConfigurationError):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class GeneratorConfig:
    """Settings of a generation run."""

    # Output settings
    output_dir: str = "generated"
    overwrite: bool = False
    file_extension: str = ".php"
    header: str = "<?php\n"

    # Pipeline settings
    max_depth: int = 64
    template_dir: Optional[str] = None

    # Extension declarations: {"class": ..., "options": {...}}
    extensions: List[Dict[str, Any]] = field(default_factory=list)

    log_level: str = "WARNING"

    # Unknown keys, kept for extensions that want them
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Defaults, overridden by the file, overridden by ``custom_config``
        """
        base_config: Dict[str, Any] = {}

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        config = _read_json_object(config_path, "Configuration file")
        logger.debug("Loaded configuration from %s", config_path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        extensions = config_args.get("extensions", [])
        if not isinstance(extensions, list) or not all(
            isinstance(item, (dict, str)) for item in extensions
        ):
            raise ConfigError("'extensions' must be a list of declarations")
        config_args["extensions"] = [
            {"class": item} if isinstance(item, str) else item for item in extensions
        ]

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = {
            f.name: getattr(config, f.name) for f in fields(config) if f.name != "custom"
        }
        config_dict.update(config.custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


def _read_json_object(path: Union[str, Path], what: str) -> Dict[str, Any]:
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"{what} not found: {path}")

    if path.suffix.lower() != ".json":
        raise ConfigError(f"{what} must be JSON: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{what} must contain a JSON object: {path}")

    return data


def load_config_classes(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """
    Load config classes from a JSON file.

    The file holds one object whose keys are type names and whose values are
    objects of arbitrary settings. Key order is preserved.
    """
    data = _read_json_object(path, "Config classes file")
    for name, config_class in data.items():
        if not isinstance(config_class, dict):
            raise ConfigError(
                f'Config class "{name}" must be a JSON object, got {type(config_class).__name__}'
            )
    logger.info("Loaded %d config classes from %s", len(data), path)
    return data


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    return get_config_manager().get_config(custom_config, config_file)


EXAMPLE_CONFIG = {
    "output_dir": "src/Model/Base",
    "overwrite": True,
    "extensions": [
        {"class": "skeleton", "options": {"namespace": "Model\\Base"}},
    ],
}
