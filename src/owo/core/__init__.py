"""
Core Layer - configuration, error taxonomy, ignore rules and path enumeration.
"""

from owo.core.config import (
    LoggingConfig,
    OutputConfig,
    OwoConfig,
    ReadConfig,
    ScanConfig,
    load_config,
)
from owo.core.errors import (
    AggregationError,
    ConfigurationError,
    DirectoryReadError,
    FileReadError,
    OutputWriteError,
    OwoError,
)
from owo.core.file_scanner import (
    DEFAULT_IGNORE_PATTERN,
    FileResult,
    FileTask,
    IgnoreMatcher,
    IgnoreRuleSet,
    LanguageRegistry,
    PathCandidate,
    PathEnumerator,
    Verdict,
    get_default_registry,
)
from owo.core.gitignore_manager import GitignoreLayer, GitignoreLayerCache, GitignorePattern
from owo.core.path_utils import PathValidationResult, validate_scan_root

__all__ = [
    # Config
    "OwoConfig",
    "ScanConfig",
    "ReadConfig",
    "OutputConfig",
    "LoggingConfig",
    "load_config",
    # Errors
    "OwoError",
    "ConfigurationError",
    "DirectoryReadError",
    "FileReadError",
    "AggregationError",
    "OutputWriteError",
    # File scanner
    "PathEnumerator",
    "PathCandidate",
    "FileTask",
    "FileResult",
    "IgnoreMatcher",
    "IgnoreRuleSet",
    "Verdict",
    "DEFAULT_IGNORE_PATTERN",
    "LanguageRegistry",
    "get_default_registry",
    # Gitignore
    "GitignorePattern",
    "GitignoreLayer",
    "GitignoreLayerCache",
    # Paths
    "PathValidationResult",
    "validate_scan_root",
]
