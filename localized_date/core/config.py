"""
Configuration management for member generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for rendering settings.
"""

import ast
import copy
import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class GeneratorConfig:
    """Rendering configuration for generated members."""

    # Code style settings
    indent_size: int = 4
    use_tabs: bool = False
    line_ending: str = "\n"
    add_comments: bool = True

    # Emitted type annotation for every storage field and accessor
    value_type: str = "Optional[datetime]"

    # Conversion functions reached through ``self`` in generated code
    local_date_function: str = "local_date"
    gmt_date_function: str = "gmt_date"

    # Call names recognized as triggers by the adapters
    trigger_names: List[str] = field(default_factory=lambda: ["LocalizedDate"])

    # Imports the generated members need
    imports: List[str] = field(
        default_factory=lambda: [
            "from datetime import datetime",
            "from typing import Optional",
        ]
    )

    # Host-specific settings; unknown config keys land here and templates
    # see them as ``custom``
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def indent_unit(self) -> str:
        return "\t" if self.use_tabs else " " * self.indent_size


DEFAULT_CONFIG: Dict[str, Any] = asdict(GeneratorConfig())


def import_names(line: str) -> Optional[Set[str]]:
    """
    Get the names bound by a single import statement.

    Returns:
        Bound names, or None if ``line`` is not exactly one import
    """
    try:
        module = ast.parse(line)
    except SyntaxError:
        return None

    if len(module.body) != 1 or not isinstance(module.body[0], (ast.Import, ast.ImportFrom)):
        return None

    return {alias.asname or alias.name.split(".")[0] for alias in module.body[0].names}


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get the complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        # Start with defaults
        base_config = copy.deepcopy(self._defaults)

        # Load from file if provided
        if config_file:
            file_config = self._load_config_file(config_file)
            base_config.update(file_config)
            logger.debug("Loaded configuration from %s", config_file)

        # Apply custom overrides
        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

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

        # Unknown keys land in the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom") or {})
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        for line in config_args.get("imports") or []:
            if import_names(line) is None:
                raise ConfigError(f"Configured import is not an import statement: {line!r}")

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)
        config_dict = asdict(config)

        # Custom settings are written flat, as they are read
        custom = config_dict.pop("custom", {})
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate a configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if config.indent_size < 1 and not config.use_tabs:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        if config.line_ending not in {"\n", "\r\n"}:
            warnings.append(f"Invalid line_ending: {config.line_ending!r}")

        for setting in ("local_date_function", "gmt_date_function"):
            name = getattr(config, setting)
            if not name.isidentifier():
                warnings.append(f"Invalid {setting}: {name}")

        if not config.trigger_names:
            warnings.append("No trigger_names configured")
        for name in config.trigger_names:
            if not name.isidentifier():
                warnings.append(f"Invalid trigger name: {name}")

        for line in config.imports:
            if import_names(line) is None:
                warnings.append(f"Invalid import: {line!r}")

        return warnings


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
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "indent_size": 4,
    "add_comments": False,
    "value_type": "datetime | None",
    "local_date_function": "to_local",
    "gmt_date_function": "to_gmt",
    "imports": ["from datetime import datetime"],
}
