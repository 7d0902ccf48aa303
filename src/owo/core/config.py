"""
Configuration module for owo.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union, get_args, get_origin

import yaml

from owo.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    return section_defaults.get(key, fallback)


def default_concurrency() -> int:
    """Concurrency bound used when none is configured: twice the CPU count."""
    return (os.cpu_count() or 1) * 2


@dataclass
class ScanConfig:
    """Configuration for traversal and the ignore policy."""

    ignore_pattern: Optional[str] = field(
        default_factory=lambda: _get_default("scan", "ignore_pattern", None)
    )
    use_default_ignore: bool = field(
        default_factory=lambda: _get_default("scan", "use_default_ignore", True)
    )
    with_dotfiles: bool = field(
        default_factory=lambda: _get_default("scan", "with_dotfiles", False)
    )
    respect_gitignore: bool = field(
        default_factory=lambda: _get_default("scan", "respect_gitignore", True)
    )
    ignore_filenames: list[str] = field(
        default_factory=lambda: list(_get_default("scan", "ignore_filenames", [".gitignore"]))
    )


@dataclass
class ReadConfig:
    """Configuration for the concurrent file reader."""

    max_concurrency: Optional[int] = field(
        default_factory=lambda: _get_default("read", "max_concurrency", None)
    )
    read_timeout: Optional[float] = field(
        default_factory=lambda: _get_default("read", "read_timeout", None)
    )
    max_file_bytes: int = field(
        default_factory=lambda: _get_default("read", "max_file_bytes", 0)
    )

    def resolved_concurrency(self) -> int:
        """
        Return the effective concurrency bound.

        Raises:
            ConfigurationError: If the configured bound is below 1
        """
        if self.max_concurrency is None:
            return default_concurrency()
        if self.max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be at least 1, got {self.max_concurrency}"
            )
        return self.max_concurrency


@dataclass
class OutputConfig:
    """Configuration for document rendering."""

    binary_placeholder: bool = field(
        default_factory=lambda: _get_default("output", "binary_placeholder", False)
    )
    heading_template: str = field(
        default_factory=lambda: _get_default("output", "heading_template", "## File: `{path}`")
    )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default("logging", "format", "%(message)s")
    )


_SECTIONS: dict[str, type] = {
    "scan": ScanConfig,
    "read": ReadConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


@dataclass
class OwoConfig:
    """Main configuration class for owo."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    read: ReadConfig = field(default_factory=ReadConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "OwoConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            OwoConfig instance with loaded values

        Raises:
            ConfigurationError: If the file is missing, unreadable, malformed
                                or has an unsupported format
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Could not read configuration file {path}: {e}") from e

        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif path.suffix == ".json":
                data = json.loads(content) if content.strip() else {}
            else:
                raise ConfigurationError(f"Unsupported config file format: {path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid configuration file {path}: expected a mapping at the top level"
            )

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "OwoConfig":
        """Create OwoConfig from a dictionary, rejecting unknown keys and mistyped values."""
        config = cls()

        for section, values in data.items():
            section_cls = _SECTIONS.get(section)
            if section_cls is None:
                raise ConfigurationError(f"Unknown configuration section: {section!r}")
            if not isinstance(values, dict):
                raise ConfigurationError(f"Configuration section {section!r} must be a mapping")

            known = {f.name: f for f in fields(section_cls)}
            unknown = set(values) - set(known)
            if unknown:
                raise ConfigurationError(
                    f"Unknown keys in section {section!r}: {', '.join(sorted(unknown))}"
                )
            checked = {
                key: _check_value(f"{section}.{key}", value, known[key].type)
                for key, value in values.items()
            }
            setattr(config, section, section_cls(**checked))

        return config

    def apply_env_overrides(self) -> "OwoConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: OWO_<SECTION>_<KEY>
        Examples:
            - OWO_SCAN_IGNORE_PATTERN
            - OWO_SCAN_WITH_DOTFILES
            - OWO_READ_MAX_CONCURRENCY
            - OWO_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied

        Raises:
            ConfigurationError: If a numeric override cannot be parsed
        """
        env_mappings = {
            # Scan config
            "OWO_SCAN_IGNORE_PATTERN": ("scan", "ignore_pattern", str),
            "OWO_SCAN_USE_DEFAULT_IGNORE": ("scan", "use_default_ignore", _parse_bool),
            "OWO_SCAN_WITH_DOTFILES": ("scan", "with_dotfiles", _parse_bool),
            "OWO_SCAN_RESPECT_GITIGNORE": ("scan", "respect_gitignore", _parse_bool),
            "OWO_SCAN_IGNORE_FILENAMES": ("scan", "ignore_filenames", _parse_list),
            # Read config
            "OWO_READ_MAX_CONCURRENCY": ("read", "max_concurrency", int),
            "OWO_READ_READ_TIMEOUT": ("read", "read_timeout", float),
            "OWO_READ_MAX_FILE_BYTES": ("read", "max_file_bytes", int),
            # Output config
            "OWO_OUTPUT_BINARY_PLACEHOLDER": ("output", "binary_placeholder", _parse_bool),
            "OWO_OUTPUT_HEADING_TEMPLATE": ("output", "heading_template", str),
            # Logging config
            "OWO_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            try:
                converted = converter(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_var}: {value!r}") from e
            setattr(getattr(self, section), key, converted)

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Raises:
            ConfigurationError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ConfigurationError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string into a list of non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _check_value(name: str, value: Any, expected: Any) -> Any:
    """
    Check a value read from a config file against its field annotation.

    Integers are accepted for float fields. Booleans are never accepted as
    numbers.

    Raises:
        ConfigurationError: If the value does not have the annotated type
    """
    if get_origin(expected) is Union:
        if value is None:
            return None
        expected = next(arg for arg in get_args(expected) if arg is not type(None))

    if get_origin(expected) is list:
        (item_type,) = get_args(expected)
        if isinstance(value, list) and all(isinstance(item, item_type) for item in value):
            return list(value)
        raise ConfigurationError(
            f"Invalid value for {name}: expected a list of {item_type.__name__}, got {value!r}"
        )

    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, expected) and not (isinstance(value, bool) and expected is not bool):
        return value
    raise ConfigurationError(
        f"Invalid value for {name}: expected {expected.__name__}, got {value!r}"
    )


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> OwoConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        OwoConfig instance
    """
    if config_path:
        config = OwoConfig.from_file(config_path)
    else:
        config = OwoConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
