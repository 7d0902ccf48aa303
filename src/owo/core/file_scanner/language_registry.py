"""
Language registry for labelling fenced code blocks by file extension.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Default path to the languages configuration file
_DEFAULT_LANGUAGES_CONFIG = Path(__file__).parent.parent / "languages.yaml"

UNKNOWN_LANGUAGE = "unknown"


class LanguageRegistry:
    """
    Extensible registry mapping file extensions and file names to language tags.

    Supports loading from YAML configuration and runtime registration, so new
    languages can be labelled without touching the formatter.

    Example:
        >>> registry = LanguageRegistry()
        >>> registry.register("elixir", [".ex", ".exs"])
        >>> registry.detect(".ex")
        'elixir'
        >>> registry.detect_from_path(Path("Dockerfile"))
        'dockerfile'
    """

    def __init__(self, load_defaults: bool = True):
        """
        Initialize the language registry.

        Args:
            load_defaults: If True, load default language mappings from languages.yaml.
        """
        self._extension_to_language: dict[str, str] = {}
        self._filename_to_language: dict[str, str] = {}
        self._language_to_keys: dict[str, set[str]] = {}

        if load_defaults:
            self._load_from_yaml(_DEFAULT_LANGUAGES_CONFIG)

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "LanguageRegistry":
        """
        Create a LanguageRegistry from a YAML configuration file.

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the config file format is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Languages config not found: {config_path}")
        registry = cls(load_defaults=False)
        registry._load_from_yaml(config_path)
        return registry

    def _load_from_yaml(self, config_path: Path) -> None:
        """
        Load language mappings from a YAML file.

        Expected format:
            language_name:
              - .ext1
              - FileName
        """
        if not config_path.exists():
            logger.warning(f"Languages config not found: {config_path}, using empty registry")
            return

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse languages config: {e}")
            raise ValueError(f"Invalid YAML in languages config: {e}") from e

        if data is None:
            return

        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid languages config format: expected dict, got {type(data)}"
            )

        for language, keys in data.items():
            if not isinstance(keys, list):
                logger.warning(
                    f"Invalid extensions for {language}: expected list, got {type(keys)}"
                )
                continue
            for key in keys:
                self._add_mapping(str(key), str(language))

    def _add_mapping(self, key: str, language: str) -> None:
        """Add one extension (leading dot) or exact file name mapping."""
        if key.startswith("."):
            key = key.lower()
            self._extension_to_language[key] = language
        else:
            self._filename_to_language[key] = language

        self._language_to_keys.setdefault(language, set()).add(key)

    def register(self, language: str, extensions: list[str]) -> "LanguageRegistry":
        """
        Register a language with its file extensions or file names.

        Returns:
            Self for method chaining
        """
        for ext in extensions:
            self._add_mapping(ext, language)
        return self

    def unregister(self, language: str) -> "LanguageRegistry":
        """
        Remove a language and all its mappings from the registry.

        Returns:
            Self for method chaining
        """
        for key in self._language_to_keys.pop(language, set()):
            self._extension_to_language.pop(key, None)
            self._filename_to_language.pop(key, None)
        return self

    def detect(self, extension: str) -> str:
        """
        Detect language from a file extension including the dot.

        Returns:
            Language identifier or 'unknown' if not recognized
        """
        return self._extension_to_language.get(extension.lower(), UNKNOWN_LANGUAGE)

    def detect_from_path(self, file_path: Path | str) -> str:
        """
        Detect language from a file path.

        Exact file names (e.g. ``Makefile``) win over the extension.
        """
        file_path = Path(file_path)
        by_name = self._filename_to_language.get(file_path.name)
        if by_name is not None:
            return by_name
        return self.detect(file_path.suffix)


# Global default registry instance
_default_registry = LanguageRegistry()


def get_default_registry() -> LanguageRegistry:
    """Get the global default language registry."""
    return _default_registry
