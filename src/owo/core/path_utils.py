"""
Path validation utilities for owo.

Provides scan-root validation and output directory creation used by the
CLI and the bundle service.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class PathValidationResult:
    """Result of path validation.

    Attributes:
        valid: True if the path is valid for the requested operation.
        error_message: Human-readable error message if validation failed.
    """
    valid: bool
    error_message: Optional[str] = None


def validate_scan_root(path: str | Path) -> PathValidationResult:
    """
    Validate that a path can be used as a scan root.

    Performs the following checks:
    1. Path exists
    2. Path is a directory
    3. Path can be listed by the current user

    Args:
        path: Path to validate (string or Path object).

    Returns:
        PathValidationResult with valid=True if all checks pass,
        or valid=False with an appropriate error message.
    """
    try:
        p = Path(path)

        if not p.exists():
            return PathValidationResult(
                valid=False,
                error_message=f"Path '{path}' does not exist"
            )

        if not p.is_dir():
            return PathValidationResult(
                valid=False,
                error_message=f"Path '{path}' is not a directory"
            )

        if not os.access(p, os.R_OK | os.X_OK):
            return PathValidationResult(
                valid=False,
                error_message=f"Path '{path}' is not readable"
            )

        return PathValidationResult(valid=True)

    except (OSError, ValueError) as e:
        return PathValidationResult(
            valid=False,
            error_message=f"Invalid path '{path}': {e}"
        )


def ensure_directory_exists(path: Path) -> bool:
    """
    Ensure a directory exists, creating it if necessary.

    Returns:
        True if the directory exists or was created successfully,
        False if creation failed (e.g., permission error).
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError:
        return False
