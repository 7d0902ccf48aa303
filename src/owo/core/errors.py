"""
Error taxonomy for owo.

Only ConfigurationError and OutputWriteError abort a run. Directory and file
read failures are recorded per entry and never escape the pipeline.
"""

from pathlib import Path


class OwoError(Exception):
    """Base class for all owo errors."""


class ConfigurationError(OwoError):
    """Raised for an invalid root path, ignore pattern or configuration value."""


class DirectoryReadError(OwoError):
    """A subdirectory could not be listed; its subtree is skipped."""

    def __init__(self, path: Path, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read directory {path}: {cause}")


class FileReadError(OwoError):
    """A file could not be read; rendered as an inline annotation."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read file {path}: {reason}")


class AggregationError(OwoError):
    """Raised when results would break the gap-free, duplicate-free ordering."""


class OutputWriteError(OwoError):
    """Raised when the rendered document cannot be written to its destination."""

    def __init__(self, path: Path, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write output file {path}: {cause}")
